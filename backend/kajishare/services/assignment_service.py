"""Assignment CRUD and the pending → in_progress → completed status rules."""
import logging
from datetime import date
from typing import Any, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from kajishare.errors import DomainError, ErrorKind, not_found
from kajishare.models.assignment import Assignment, AssignmentStatus
from kajishare.models.group import Membership
from kajishare.services.identity_service import UserIdentity
from kajishare.services.permission_service import Tier, owning_group_id, require
from kajishare.services.task_service import get_task

logger = logging.getLogger(__name__)


def resolve_status(
    requested: Optional[AssignmentStatus],
    current: Optional[AssignmentStatus],
    due_date: Optional[date],
    completed_date: Optional[date],
) -> AssignmentStatus:
    """Derive the status an assignment ends up with.

    A completion date always means ``completed`` and may not precede the due
    date.  Without one, ``completed`` is invalid; a previously completed
    assignment falls back to ``pending`` unless ``in_progress`` is requested.
    """
    if completed_date is not None:
        if due_date is not None and completed_date < due_date:
            raise DomainError(
                ErrorKind.validation_failed,
                "Completed date must be on or after the due date",
                field="completed_date",
            )
        return AssignmentStatus.completed

    if requested is AssignmentStatus.completed:
        raise DomainError(
            ErrorKind.validation_failed,
            "Completed date is required when status is completed",
            field="completed_date",
        )
    if requested is not None:
        return requested
    if current is None or current is AssignmentStatus.completed:
        return AssignmentStatus.pending
    return current


def get_assignment(db: Session, assignment_id: str) -> Assignment:
    assignment = db.query(Assignment).filter(Assignment.assignment_id == assignment_id).first()
    if not assignment:
        raise not_found("Assignment", assignment_id)
    return assignment


def list_assignments(db: Session, identity: UserIdentity, task_id: str) -> list[Assignment]:
    task = get_task(db, task_id)
    require(db, identity, owning_group_id(task), Tier.member)
    return (
        db.query(Assignment)
        .filter(Assignment.task_id == task.task_id)
        .order_by(Assignment.created_at)
        .all()
    )


def show_assignment(db: Session, identity: UserIdentity, assignment_id: str) -> Assignment:
    assignment = get_assignment(db, assignment_id)
    require(db, identity, owning_group_id(assignment), Tier.member)
    return assignment


def create_assignment(db: Session, identity: UserIdentity, task_id: str, fields: dict[str, Any]) -> Assignment:
    """Assign a task to a membership of the same group; the caller is stamped as assigner."""
    task = get_task(db, task_id)
    caller = require(db, identity, owning_group_id(task), Tier.member)

    assignee = db.query(Membership).filter(Membership.membership_id == fields["membership_id"]).first()
    if not assignee or assignee.group_id != task.group_id:
        raise DomainError(
            ErrorKind.validation_failed,
            "Membership does not belong to the task's group",
            field="membership_id",
        )

    duplicate = (
        db.query(Assignment)
        .filter(Assignment.task_id == task.task_id, Assignment.membership_id == assignee.membership_id)
        .first()
    )
    if duplicate:
        raise DomainError(
            ErrorKind.validation_failed,
            "This task is already assigned to this member",
            field="membership_id",
        )

    status = resolve_status(fields.get("status"), None, fields.get("due_date"), fields.get("completed_date"))
    assignment = Assignment(
        task_id=task.task_id,
        membership_id=assignee.membership_id,
        assigned_by_membership_id=caller.membership_id,
        due_date=fields.get("due_date"),
        completed_date=fields.get("completed_date"),
        comment=fields.get("comment"),
        status=status,
    )
    db.add(assignment)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise DomainError(
            ErrorKind.validation_failed,
            "This task is already assigned to this member",
            field="membership_id",
        ) from exc
    db.refresh(assignment)
    logger.info(
        "Assignment %s created: task %s → membership %s by %s",
        assignment.assignment_id, task.task_id, assignee.membership_id, identity.user_id,
    )
    return assignment


def update_assignment(
    db: Session,
    identity: UserIdentity,
    assignment_id: str,
    updates: dict[str, Any],
) -> Assignment:
    assignment = get_assignment(db, assignment_id)
    require(db, identity, owning_group_id(assignment), Tier.member)

    due_date = updates["due_date"] if "due_date" in updates else assignment.due_date
    completed_date = updates["completed_date"] if "completed_date" in updates else assignment.completed_date
    assignment.status = resolve_status(updates.get("status"), assignment.status, due_date, completed_date)
    assignment.due_date = due_date
    assignment.completed_date = completed_date
    if "comment" in updates:
        assignment.comment = updates["comment"]

    db.commit()
    db.refresh(assignment)
    logger.info("Assignment %s updated (status %s)", assignment_id, assignment.status.value)
    return assignment


def delete_assignment(db: Session, identity: UserIdentity, assignment_id: str) -> None:
    assignment = get_assignment(db, assignment_id)
    require(db, identity, owning_group_id(assignment), Tier.admin)
    db.delete(assignment)
    db.commit()
    logger.info("Deleted assignment %s by admin %s", assignment_id, identity.user_id)
