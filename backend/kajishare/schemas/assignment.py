"""Pydantic schemas for Assignments."""
from __future__ import annotations
from datetime import date, datetime
from typing import Optional
from pydantic import BaseModel

from kajishare.models.assignment import AssignmentStatus


class AssignmentCreate(BaseModel):
    membership_id: str
    due_date: Optional[date] = None
    completed_date: Optional[date] = None
    comment: Optional[str] = None
    status: Optional[AssignmentStatus] = None


class AssignmentUpdate(BaseModel):
    due_date: Optional[date] = None
    completed_date: Optional[date] = None
    comment: Optional[str] = None
    status: Optional[AssignmentStatus] = None


class AssignmentOut(BaseModel):
    assignment_id: str
    task_id: str
    membership_id: str
    assigned_by_membership_id: Optional[str] = None
    due_date: Optional[date] = None
    completed_date: Optional[date] = None
    comment: Optional[str] = None
    status: AssignmentStatus
    created_at: datetime

    model_config = {"from_attributes": True}
