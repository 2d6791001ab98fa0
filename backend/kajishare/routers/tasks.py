"""Task API routes: collection routes nest under a group."""
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from kajishare.database import get_db
from kajishare.dependencies import get_current_identity
from kajishare.schemas.task import TaskCreate, TaskOut, TaskUpdate
from kajishare.services import task_service
from kajishare.services.identity_service import UserIdentity

router = APIRouter()


@router.get("/groups/{group_id}/tasks", response_model=list[TaskOut])
def list_tasks(
    group_id: str,
    identity: UserIdentity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    return task_service.list_tasks(db, identity, group_id)


@router.post("/groups/{group_id}/tasks", response_model=TaskOut, status_code=status.HTTP_201_CREATED)
def create_task(
    group_id: str,
    payload: TaskCreate,
    identity: UserIdentity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    return task_service.create_task(db, identity, group_id, payload.model_dump())


@router.get("/tasks/{task_id}", response_model=TaskOut)
def get_task(
    task_id: str,
    identity: UserIdentity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    return task_service.show_task(db, identity, task_id)


@router.patch("/tasks/{task_id}", response_model=TaskOut)
def update_task(
    task_id: str,
    payload: TaskUpdate,
    identity: UserIdentity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    return task_service.update_task(db, identity, task_id, payload.model_dump(exclude_unset=True))


@router.delete("/tasks/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_task(
    task_id: str,
    identity: UserIdentity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    task_service.delete_task(db, identity, task_id)
