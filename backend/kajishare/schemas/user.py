"""Pydantic schemas for Users."""
from __future__ import annotations
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field, field_validator

from kajishare.models.user import AccountType


class UserUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=50)
    picture: Optional[str] = Field(None, max_length=500)

    @field_validator("name")
    @classmethod
    def _reject_null(cls, value):
        if value is None:
            raise ValueError("may not be null")
        return value


class UserOut(BaseModel):
    user_id: str
    name: str
    email: str
    picture: Optional[str] = None
    account_type: AccountType
    created_at: datetime

    model_config = {"from_attributes": True}


class SessionOut(BaseModel):
    message: str
    user: UserOut
