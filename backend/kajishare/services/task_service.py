"""Task CRUD: reads need member tier, writes need admin tier."""
import logging
from typing import Any

from sqlalchemy.orm import Session

from kajishare.errors import not_found
from kajishare.models.task import Task
from kajishare.services.group_service import get_group
from kajishare.services.identity_service import UserIdentity
from kajishare.services.permission_service import Tier, owning_group_id, require

logger = logging.getLogger(__name__)


def get_task(db: Session, task_id: str) -> Task:
    task = db.query(Task).filter(Task.task_id == task_id).first()
    if not task:
        raise not_found("Task", task_id)
    return task


def list_tasks(db: Session, identity: UserIdentity, group_id: str) -> list[Task]:
    group = get_group(db, group_id)
    require(db, identity, group.group_id, Tier.member)
    return db.query(Task).filter(Task.group_id == group.group_id).order_by(Task.created_at).all()


def show_task(db: Session, identity: UserIdentity, task_id: str) -> Task:
    task = get_task(db, task_id)
    require(db, identity, owning_group_id(task), Tier.member)
    return task


def create_task(db: Session, identity: UserIdentity, group_id: str, fields: dict[str, Any]) -> Task:
    group = get_group(db, group_id)
    require(db, identity, group.group_id, Tier.admin)
    task = Task(group_id=group.group_id, **fields)
    db.add(task)
    db.commit()
    db.refresh(task)
    logger.info("Created task '%s' (%s) in group %s", task.name, task.task_id, group.group_id)
    return task


def update_task(db: Session, identity: UserIdentity, task_id: str, updates: dict[str, Any]) -> Task:
    task = get_task(db, task_id)
    require(db, identity, owning_group_id(task), Tier.admin)
    for field, value in updates.items():
        setattr(task, field, value)
    db.commit()
    db.refresh(task)
    logger.info("Updated task %s", task_id)
    return task


def delete_task(db: Session, identity: UserIdentity, task_id: str) -> None:
    task = get_task(db, task_id)
    require(db, identity, owning_group_id(task), Tier.admin)
    db.delete(task)
    db.commit()
    logger.info("Deleted task %s by admin %s", task_id, identity.user_id)
