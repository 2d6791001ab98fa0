"""Pydantic schemas for Groups."""
from __future__ import annotations
from datetime import datetime
from decimal import Decimal
from typing import Optional
from pydantic import BaseModel, Field, field_validator

from kajishare.models.group import AssignMode, BalanceType, GroupRole


class GroupCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    assign_mode: AssignMode = AssignMode.equal
    balance_type: BalanceType = BalanceType.point


class GroupUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    assign_mode: Optional[AssignMode] = None
    balance_type: Optional[BalanceType] = None
    active: Optional[bool] = None

    @field_validator("name", "assign_mode", "balance_type", "active")
    @classmethod
    def _reject_null(cls, value):
        if value is None:
            raise ValueError("may not be null")
        return value


class GroupJoin(BaseModel):
    share_key: str


class WorkloadRebalance(BaseModel):
    """New ratios keyed by membership id; null clears a ratio."""

    ratios: dict[str, Optional[Decimal]]


class GroupMemberOut(BaseModel):
    membership_id: str
    user_id: str
    user_name: Optional[str] = None
    role: GroupRole
    workload_ratio: Optional[float] = None
    active: bool

    model_config = {"from_attributes": True}


class GroupOut(BaseModel):
    group_id: str
    name: str
    share_key: str
    assign_mode: AssignMode
    balance_type: BalanceType
    active: bool
    created_by: Optional[str] = None
    created_at: datetime
    memberships: list[GroupMemberOut] = []

    model_config = {"from_attributes": True}
