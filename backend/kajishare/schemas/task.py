"""Pydantic schemas for Tasks."""
from __future__ import annotations
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field, field_validator


class TaskCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=50)
    description: Optional[str] = Field(None, max_length=50)
    point: int = Field(1, gt=0)


class TaskUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=50)
    description: Optional[str] = Field(None, max_length=50)
    point: Optional[int] = Field(None, gt=0)

    @field_validator("name", "point")
    @classmethod
    def _reject_null(cls, value):
        if value is None:
            raise ValueError("may not be null")
        return value


class TaskOut(BaseModel):
    task_id: str
    group_id: str
    name: str
    description: Optional[str] = None
    point: int
    created_at: datetime

    model_config = {"from_attributes": True}
