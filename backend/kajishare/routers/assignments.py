"""Assignment API routes: collection routes nest under a task."""
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from kajishare.database import get_db
from kajishare.dependencies import get_current_identity
from kajishare.schemas.assignment import AssignmentCreate, AssignmentOut, AssignmentUpdate
from kajishare.services import assignment_service
from kajishare.services.identity_service import UserIdentity

router = APIRouter()


@router.get("/tasks/{task_id}/assignments", response_model=list[AssignmentOut])
def list_assignments(
    task_id: str,
    identity: UserIdentity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    return assignment_service.list_assignments(db, identity, task_id)


@router.post(
    "/tasks/{task_id}/assignments",
    response_model=AssignmentOut,
    status_code=status.HTTP_201_CREATED,
)
def create_assignment(
    task_id: str,
    payload: AssignmentCreate,
    identity: UserIdentity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    """Assign a task to a member of its group."""
    return assignment_service.create_assignment(db, identity, task_id, payload.model_dump())


@router.get("/assignments/{assignment_id}", response_model=AssignmentOut)
def get_assignment(
    assignment_id: str,
    identity: UserIdentity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    return assignment_service.show_assignment(db, identity, assignment_id)


@router.patch("/assignments/{assignment_id}", response_model=AssignmentOut)
def update_assignment(
    assignment_id: str,
    payload: AssignmentUpdate,
    identity: UserIdentity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    """Update dates, comment or status; setting completed_date completes the assignment."""
    return assignment_service.update_assignment(
        db, identity, assignment_id, payload.model_dump(exclude_unset=True)
    )


@router.delete("/assignments/{assignment_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_assignment(
    assignment_id: str,
    identity: UserIdentity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    assignment_service.delete_assignment(db, identity, assignment_id)
