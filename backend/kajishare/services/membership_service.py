"""Membership mutations: where permission, workload and last-admin rules meet.

Every mutation runs in one transaction in this order:

1. lock the group row (serializes writers on the same group),
2. evaluate the caller's permission against the now-stable membership set,
3. run the workload checker and/or the role-change guard,
4. write and commit.

A rejection at any step raises before anything is written.
"""
import logging
from typing import Any, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from kajishare.errors import DomainError, ErrorKind, not_found
from kajishare.models.group import GroupRole, Membership
from kajishare.models.user import User
from kajishare.services import membership_store, role_service, workload_service
from kajishare.services.identity_service import UserIdentity
from kajishare.services.permission_service import Tier, require, visible_group_ids

logger = logging.getLogger(__name__)


def get_membership(db: Session, membership_id: str) -> Membership:
    membership = db.query(Membership).filter(Membership.membership_id == membership_id).first()
    if not membership:
        raise not_found("Membership", membership_id)
    return membership


def list_memberships(db: Session, identity: UserIdentity, group_id: Optional[str] = None) -> list[Membership]:
    """Memberships of one group (member tier), or of every group visible to the caller."""
    query = db.query(Membership)
    if group_id:
        require(db, identity, group_id, Tier.member)
        query = query.filter(Membership.group_id == group_id)
    else:
        query = query.filter(Membership.group_id.in_(visible_group_ids(db, identity)))
    return query.order_by(Membership.created_at).all()


def show_membership(db: Session, identity: UserIdentity, membership_id: str) -> Membership:
    membership = get_membership(db, membership_id)
    require(db, identity, membership.group_id, Tier.member)
    return membership


def create_membership(db: Session, identity: UserIdentity, fields: dict[str, Any]) -> Membership:
    """Add a user to a group (admin only)."""
    group_id = fields["group_id"]
    if not membership_store.lock_group(db, group_id):
        raise not_found("Group", group_id)
    require(db, identity, group_id, Tier.admin)

    if not db.query(User).filter(User.user_id == fields["user_id"]).first():
        raise not_found("User", fields["user_id"])
    if membership_store.find_by_user_and_group(db, fields["user_id"], group_id):
        raise DomainError(ErrorKind.duplicate_membership, "User is already a member of this group")

    ratio = fields.get("workload_ratio")
    if fields.get("active", True):
        workload_service.check_workload(db, group_id, ratio).raise_for_error()
    else:
        workload_service.check_ratio_value(ratio).raise_for_error()

    membership = Membership(**fields)
    db.add(membership)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise DomainError(ErrorKind.duplicate_membership, "User is already a member of this group") from exc
    db.refresh(membership)
    logger.info(
        "Membership created: user %s joined group %s as %s by admin %s",
        membership.user_id, group_id, membership.role.value, identity.user_id,
    )
    return membership


def update_membership(
    db: Session,
    identity: UserIdentity,
    membership_id: str,
    updates: dict[str, Any],
) -> Membership:
    """Update workload ratio and/or active flag (admin only)."""
    membership = get_membership(db, membership_id)
    group_id = membership.group_id
    membership_store.lock_group(db, group_id)
    db.refresh(membership)
    require(db, identity, group_id, Tier.admin)

    was_active = membership.active
    old_ratio = membership.workload_ratio
    new_active = updates.get("active", was_active)
    new_ratio = updates["workload_ratio"] if "workload_ratio" in updates else old_ratio

    if was_active and not new_active:
        role_service.can_demote_or_remove(db, membership, "deactivate").raise_for_error()

    contributes_before = was_active and old_ratio is not None
    contributes_after = new_active and new_ratio is not None
    if contributes_after and (not contributes_before or new_ratio != old_ratio):
        workload_service.check_workload(
            db, group_id, new_ratio, excluding_membership_id=membership.membership_id
        ).raise_for_error()
    elif contributes_before and not contributes_after:
        workload_service.check_ratio_value(new_ratio).raise_for_error()
        workload_service.check_workload_release(db, group_id, membership.membership_id).raise_for_error()
    else:
        workload_service.check_ratio_value(new_ratio).raise_for_error()

    membership.active = new_active
    membership.workload_ratio = new_ratio
    db.commit()
    db.refresh(membership)
    logger.info("Membership %s in group %s updated by admin %s", membership_id, group_id, identity.user_id)
    return membership


def change_role(db: Session, identity: UserIdentity, membership_id: str, new_role: GroupRole) -> Membership:
    """Promote or demote a membership (admin only); the last admin cannot be demoted."""
    membership = get_membership(db, membership_id)
    group_id = membership.group_id
    membership_store.lock_group(db, group_id)
    db.refresh(membership)
    require(db, identity, group_id, Tier.admin)

    if membership.role == new_role:
        return membership

    if membership.role == GroupRole.admin and new_role == GroupRole.member:
        role_service.can_demote_or_remove(db, membership, "demote").raise_for_error()

    old_role = membership.role
    membership.role = new_role
    db.commit()
    db.refresh(membership)
    logger.info(
        "Role changed: membership %s in group %s from %s to %s by admin %s",
        membership_id, group_id, old_role.value, new_role.value, identity.user_id,
    )
    return membership


def delete_membership(db: Session, identity: UserIdentity, membership_id: str) -> None:
    """Remove a membership (admin only), its assignments and their evaluations."""
    membership = get_membership(db, membership_id)
    group_id = membership.group_id
    membership_store.lock_group(db, group_id)
    db.refresh(membership)
    require(db, identity, group_id, Tier.admin)

    role_service.can_demote_or_remove(db, membership, "delete").raise_for_error()
    if membership.active and membership.workload_ratio is not None:
        workload_service.check_workload_release(db, group_id, membership.membership_id).raise_for_error()

    logger.info("Deleting membership %s from group %s by admin %s", membership_id, group_id, identity.user_id)
    db.delete(membership)
    db.commit()
