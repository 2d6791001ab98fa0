"""Pydantic schemas for Evaluations."""
from __future__ import annotations
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field, field_validator


class EvaluationCreate(BaseModel):
    # the evaluator is always the authenticated caller
    assignment_id: str
    score: int = Field(..., ge=1, le=5)
    feedback: Optional[str] = Field(None, max_length=100)


class EvaluationUpdate(BaseModel):
    score: Optional[int] = Field(None, ge=1, le=5)
    feedback: Optional[str] = Field(None, max_length=100)

    @field_validator("score")
    @classmethod
    def _reject_null(cls, value):
        if value is None:
            raise ValueError("may not be null")
        return value


class EvaluationOut(BaseModel):
    evaluation_id: str
    assignment_id: str
    evaluator_id: str
    score: int
    feedback: Optional[str] = None
    created_at: datetime

    model_config = {"from_attributes": True}
