"""Membership API routes."""
from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from kajishare.database import get_db
from kajishare.dependencies import get_current_identity
from kajishare.schemas.membership import MembershipCreate, MembershipOut, MembershipUpdate, RoleChange
from kajishare.services import membership_service
from kajishare.services.identity_service import UserIdentity

router = APIRouter()


@router.get("/", response_model=list[MembershipOut])
def list_memberships(
    group_id: Optional[str] = Query(None),
    identity: UserIdentity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    """Memberships of one group, or of every group the caller belongs to."""
    return membership_service.list_memberships(db, identity, group_id)


@router.post("/", response_model=MembershipOut, status_code=status.HTTP_201_CREATED)
def create_membership(
    payload: MembershipCreate,
    identity: UserIdentity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    return membership_service.create_membership(db, identity, payload.model_dump())


@router.get("/{membership_id}", response_model=MembershipOut)
def get_membership(
    membership_id: str,
    identity: UserIdentity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    return membership_service.show_membership(db, identity, membership_id)


@router.patch("/{membership_id}", response_model=MembershipOut)
def update_membership(
    membership_id: str,
    payload: MembershipUpdate,
    identity: UserIdentity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    """Update workload ratio / active flag. Roles change via the role endpoint."""
    return membership_service.update_membership(
        db, identity, membership_id, payload.model_dump(exclude_unset=True)
    )


@router.patch("/{membership_id}/role", response_model=MembershipOut)
def change_role(
    membership_id: str,
    payload: RoleChange,
    identity: UserIdentity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    return membership_service.change_role(db, identity, membership_id, payload.role)


@router.delete("/{membership_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_membership(
    membership_id: str,
    identity: UserIdentity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    membership_service.delete_membership(db, identity, membership_id)
