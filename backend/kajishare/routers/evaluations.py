"""Evaluation API routes."""
from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from kajishare.database import get_db
from kajishare.dependencies import get_current_identity
from kajishare.schemas.evaluation import EvaluationCreate, EvaluationOut, EvaluationUpdate
from kajishare.services import evaluation_service
from kajishare.services.identity_service import UserIdentity

router = APIRouter()


@router.get("/", response_model=list[EvaluationOut])
def list_evaluations(
    assignment_id: Optional[str] = Query(None),
    identity: UserIdentity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    """Evaluations visible to the caller, optionally for one assignment."""
    return evaluation_service.list_evaluations(db, identity, assignment_id)


@router.post("/", response_model=EvaluationOut, status_code=status.HTTP_201_CREATED)
def create_evaluation(
    payload: EvaluationCreate,
    identity: UserIdentity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    """Score a completed assignment as the calling user."""
    return evaluation_service.create_evaluation(db, identity, payload.model_dump())


@router.get("/{evaluation_id}", response_model=EvaluationOut)
def get_evaluation(
    evaluation_id: str,
    identity: UserIdentity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    return evaluation_service.show_evaluation(db, identity, evaluation_id)


@router.patch("/{evaluation_id}", response_model=EvaluationOut)
def update_evaluation(
    evaluation_id: str,
    payload: EvaluationUpdate,
    identity: UserIdentity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    return evaluation_service.update_evaluation(
        db, identity, evaluation_id, payload.model_dump(exclude_unset=True)
    )


@router.delete("/{evaluation_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_evaluation(
    evaluation_id: str,
    identity: UserIdentity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    evaluation_service.delete_evaluation(db, identity, evaluation_id)
