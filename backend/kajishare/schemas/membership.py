"""Pydantic schemas for Memberships."""
from __future__ import annotations
from datetime import datetime
from decimal import Decimal
from typing import Optional
from pydantic import BaseModel, field_validator

from kajishare.models.group import GroupRole


class MembershipCreate(BaseModel):
    user_id: str
    group_id: str
    role: GroupRole = GroupRole.member
    workload_ratio: Optional[Decimal] = None
    active: bool = True


class MembershipUpdate(BaseModel):
    # role changes go through the dedicated role endpoint
    workload_ratio: Optional[Decimal] = None
    active: Optional[bool] = None

    @field_validator("active")
    @classmethod
    def _reject_null(cls, value):
        if value is None:
            raise ValueError("may not be null")
        return value


class RoleChange(BaseModel):
    role: GroupRole


class MembershipOut(BaseModel):
    membership_id: str
    user_id: str
    group_id: str
    user_name: Optional[str] = None
    group_name: Optional[str] = None
    role: GroupRole
    workload_ratio: Optional[float] = None
    active: bool
    assignments_count: int = 0
    completed_assignments_count: int = 0
    created_at: datetime

    model_config = {"from_attributes": True}
