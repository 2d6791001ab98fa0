"""Group management API routes."""
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from kajishare.database import get_db
from kajishare.dependencies import get_current_identity
from kajishare.schemas.group import GroupCreate, GroupJoin, GroupOut, GroupUpdate, WorkloadRebalance
from kajishare.schemas.membership import MembershipOut
from kajishare.services import group_service
from kajishare.services.identity_service import UserIdentity

router = APIRouter()


@router.post("/", response_model=GroupOut, status_code=status.HTTP_201_CREATED)
def create_group(
    payload: GroupCreate,
    identity: UserIdentity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    """Create a new group. Creator is automatically added as admin."""
    return group_service.create_group(db, identity, payload.model_dump())


@router.get("/", response_model=list[GroupOut])
def list_groups(
    identity: UserIdentity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    """List the groups the caller is an active member of."""
    return group_service.list_groups(db, identity)


@router.post("/join", response_model=MembershipOut, status_code=status.HTTP_201_CREATED)
def join_group(
    payload: GroupJoin,
    identity: UserIdentity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    """Join a group using its share key."""
    return group_service.join_group(db, identity, payload.share_key)


@router.get("/{group_id}", response_model=GroupOut)
def get_group(
    group_id: str,
    identity: UserIdentity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    """Fetch a single group by ID with members."""
    return group_service.show_group(db, identity, group_id)


@router.patch("/{group_id}", response_model=GroupOut)
def update_group(
    group_id: str,
    payload: GroupUpdate,
    identity: UserIdentity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    return group_service.update_group(db, identity, group_id, payload.model_dump(exclude_unset=True))


@router.delete("/{group_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_group(
    group_id: str,
    identity: UserIdentity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    """Delete a group and everything it owns."""
    group_service.delete_group(db, identity, group_id)


@router.put("/{group_id}/workload", response_model=GroupOut)
def rebalance_workload(
    group_id: str,
    payload: WorkloadRebalance,
    identity: UserIdentity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    """Redistribute workload ratios across the group's memberships in one step."""
    return group_service.rebalance_workload(db, identity, group_id, payload.ratios)
