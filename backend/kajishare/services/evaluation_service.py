"""Evaluation CRUD: peers score completed assignments, once per evaluator."""
import logging
from typing import Any, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from kajishare.errors import DomainError, ErrorKind, not_found
from kajishare.models.assignment import Assignment, AssignmentStatus
from kajishare.models.evaluation import Evaluation
from kajishare.models.task import Task
from kajishare.services.assignment_service import get_assignment
from kajishare.services.identity_service import UserIdentity
from kajishare.services.permission_service import Tier, owning_group_id, require, visible_group_ids

logger = logging.getLogger(__name__)


def get_evaluation(db: Session, evaluation_id: str) -> Evaluation:
    evaluation = db.query(Evaluation).filter(Evaluation.evaluation_id == evaluation_id).first()
    if not evaluation:
        raise not_found("Evaluation", evaluation_id)
    return evaluation


def list_evaluations(
    db: Session,
    identity: UserIdentity,
    assignment_id: Optional[str] = None,
) -> list[Evaluation]:
    """Evaluations in every group where the caller is an active member."""
    query = (
        db.query(Evaluation)
        .join(Assignment, Evaluation.assignment_id == Assignment.assignment_id)
        .join(Task, Assignment.task_id == Task.task_id)
        .filter(Task.group_id.in_(visible_group_ids(db, identity)))
    )
    if assignment_id:
        query = query.filter(Evaluation.assignment_id == assignment_id)
    return query.order_by(Evaluation.created_at).all()


def show_evaluation(db: Session, identity: UserIdentity, evaluation_id: str) -> Evaluation:
    evaluation = get_evaluation(db, evaluation_id)
    require(db, identity, owning_group_id(evaluation), Tier.member)
    return evaluation


def create_evaluation(db: Session, identity: UserIdentity, fields: dict[str, Any]) -> Evaluation:
    assignment = get_assignment(db, fields["assignment_id"])
    require(db, identity, owning_group_id(assignment), Tier.member)

    if assignment.status != AssignmentStatus.completed:
        raise DomainError(
            ErrorKind.assignment_not_completed,
            "Assignment is not completed, cannot evaluate",
            field="assignment_id",
        )

    existing = (
        db.query(Evaluation)
        .filter(
            Evaluation.assignment_id == assignment.assignment_id,
            Evaluation.evaluator_id == identity.user_id,
        )
        .first()
    )
    if existing:
        raise DomainError(ErrorKind.duplicate_evaluation, "You have already evaluated this assignment")

    evaluation = Evaluation(
        assignment_id=assignment.assignment_id,
        evaluator_id=identity.user_id,
        score=fields["score"],
        feedback=fields.get("feedback"),
    )
    db.add(evaluation)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise DomainError(ErrorKind.duplicate_evaluation, "You have already evaluated this assignment") from exc
    db.refresh(evaluation)
    logger.info(
        "Evaluation created: (ID: %s) for assignment %s by user %s",
        evaluation.evaluation_id, assignment.assignment_id, identity.user_id,
    )
    return evaluation


def update_evaluation(db: Session, identity: UserIdentity, evaluation_id: str, updates: dict[str, Any]) -> Evaluation:
    evaluation = get_evaluation(db, evaluation_id)
    require(db, identity, owning_group_id(evaluation), Tier.member)
    for field, value in updates.items():
        setattr(evaluation, field, value)
    db.commit()
    db.refresh(evaluation)
    logger.info("Evaluation updated: (ID: %s) by user %s", evaluation_id, identity.user_id)
    return evaluation


def delete_evaluation(db: Session, identity: UserIdentity, evaluation_id: str) -> None:
    evaluation = get_evaluation(db, evaluation_id)
    require(db, identity, owning_group_id(evaluation), Tier.admin)
    logger.info(
        "Deleting evaluation (ID: %s) for assignment %s by admin user %s",
        evaluation_id, evaluation.assignment_id, identity.user_id,
    )
    db.delete(evaluation)
    db.commit()
