"""Group lifecycle: creation (creator becomes admin), joining, workload rebalance."""
import logging
from decimal import Decimal
from typing import Any, Optional

from sqlalchemy.orm import Session

from kajishare.errors import DomainError, ErrorKind, not_found
from kajishare.models.group import Group, GroupRole, Membership
from kajishare.services import membership_store, workload_service
from kajishare.services.identity_service import UserIdentity
from kajishare.services.permission_service import Tier, require, visible_group_ids

logger = logging.getLogger(__name__)


def get_group(db: Session, group_id: str) -> Group:
    group = db.query(Group).filter(Group.group_id == group_id).first()
    if not group:
        raise not_found("Group", group_id)
    return group


def list_groups(db: Session, identity: UserIdentity) -> list[Group]:
    """Groups where the caller holds an active membership."""
    group_ids = visible_group_ids(db, identity)
    if not group_ids:
        return []
    return db.query(Group).filter(Group.group_id.in_(group_ids)).order_by(Group.created_at).all()


def show_group(db: Session, identity: UserIdentity, group_id: str) -> Group:
    group = get_group(db, group_id)
    require(db, identity, group.group_id, Tier.member)
    return group


def create_group(db: Session, identity: UserIdentity, fields: dict[str, Any]) -> Group:
    """Create a group; the creator is added as its first admin."""
    group = Group(created_by=identity.user_id, **fields)
    db.add(group)
    db.flush()

    db.add(Membership(
        group_id=group.group_id,
        user_id=identity.user_id,
        role=GroupRole.admin,
        active=True,
    ))
    db.commit()
    db.refresh(group)
    logger.info("Created group '%s' (%s) by user %s", group.name, group.group_id, identity.user_id)
    return group


def update_group(db: Session, identity: UserIdentity, group_id: str, updates: dict[str, Any]) -> Group:
    group = get_group(db, group_id)
    require(db, identity, group.group_id, Tier.admin)
    for field, value in updates.items():
        setattr(group, field, value)
    db.commit()
    db.refresh(group)
    logger.info("Updated group %s by admin %s", group_id, identity.user_id)
    return group


def delete_group(db: Session, identity: UserIdentity, group_id: str) -> None:
    """Delete a group together with its memberships, tasks, assignments and evaluations."""
    group = get_group(db, group_id)
    require(db, identity, group.group_id, Tier.admin)
    db.delete(group)
    db.commit()
    logger.info("Deleted group %s by admin %s", group_id, identity.user_id)


def join_group(db: Session, identity: UserIdentity, share_key: str) -> Membership:
    """Join a group by its share key as a plain member without a workload ratio."""
    group = db.query(Group).filter(Group.share_key == share_key).first()
    if not group:
        raise DomainError(ErrorKind.not_found, "No group matches this share key")
    if not group.active:
        raise DomainError(ErrorKind.validation_failed, "Group is not active")

    membership_store.lock_group(db, group.group_id)
    if membership_store.find_by_user_and_group(db, identity.user_id, group.group_id):
        raise DomainError(ErrorKind.duplicate_membership, "User is already a member of this group")

    membership = Membership(group_id=group.group_id, user_id=identity.user_id, role=GroupRole.member)
    db.add(membership)
    db.commit()
    db.refresh(membership)
    logger.info("User %s joined group %s via share key", identity.user_id, group.group_id)
    return membership


def rebalance_workload(
    db: Session,
    identity: UserIdentity,
    group_id: str,
    ratios: dict[str, Optional[Decimal]],
) -> Group:
    """Set several workload ratios at once; the resulting group total is checked once."""
    group = get_group(db, group_id)
    membership_store.lock_group(db, group.group_id)
    require(db, identity, group.group_id, Tier.admin)

    memberships = {
        m.membership_id: m
        for m in db.query(Membership).filter(Membership.group_id == group.group_id).all()
    }
    for membership_id, ratio in ratios.items():
        membership = memberships.get(membership_id)
        if membership is None:
            raise DomainError(
                ErrorKind.validation_failed,
                f"Membership {membership_id} does not belong to this group",
                field="ratios",
            )
        workload_service.check_ratio_value(ratio).raise_for_error()
        membership.workload_ratio = ratio

    db.flush()
    workload_service.check_group_total(db, group.group_id).raise_for_error()
    db.commit()
    db.refresh(group)
    logger.info("Rebalanced workload of group %s by admin %s", group_id, identity.user_id)
    return group
