"""Membership store: lookups and per-group aggregates the rule engine reads.

All aggregates count only active memberships.  Writers that check an
aggregate and then mutate must call ``lock_group`` first so that the
read-check-write sequence is serialized per group.
"""
from decimal import Decimal
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Query, Session

from kajishare.models.group import Group, GroupRole, Membership

ZERO = Decimal("0")


def find_by_user_and_group(db: Session, user_id: str, group_id: str) -> Optional[Membership]:
    return (
        db.query(Membership)
        .filter(Membership.user_id == user_id, Membership.group_id == group_id)
        .first()
    )


def group_lock_query(db: Session, group_id: str) -> Query:
    return db.query(Group).filter(Group.group_id == group_id).with_for_update()


def lock_group(db: Session, group_id: str) -> Optional[Group]:
    """Take a row lock on the group for the rest of the transaction.

    SELECT ... FOR UPDATE on PostgreSQL; a no-op on SQLite, which serializes
    writers at the database level anyway.  Different groups never contend.
    """
    return group_lock_query(db, group_id).populate_existing().first()


def _active_in_group(query: Query, group_id: str, excluding: Optional[str]) -> Query:
    query = query.filter(Membership.group_id == group_id, Membership.active.is_(True))
    if excluding is not None:
        query = query.filter(Membership.membership_id != excluding)
    return query


def sum_workload_ratio(db: Session, group_id: str, excluding: Optional[str] = None) -> Decimal:
    """Sum of non-null ratios over the group's active memberships."""
    total = _active_in_group(
        db.query(func.sum(Membership.workload_ratio)), group_id, excluding
    ).scalar()
    if total is None:
        return ZERO
    return Decimal(str(total)).quantize(Decimal("0.1"))


def count_ratio_carriers(db: Session, group_id: str, excluding: Optional[str] = None) -> int:
    """Number of active memberships that carry a workload ratio."""
    return _active_in_group(
        db.query(func.count(Membership.membership_id)), group_id, excluding
    ).filter(Membership.workload_ratio.isnot(None)).scalar()


def count_active_admins(db: Session, group_id: str) -> int:
    return (
        db.query(func.count(Membership.membership_id))
        .filter(
            Membership.group_id == group_id,
            Membership.role == GroupRole.admin,
            Membership.active.is_(True),
        )
        .scalar()
    )


def active_group_ids(db: Session, user_id: str) -> list[str]:
    """Ids of the groups where the user holds an active membership."""
    rows = (
        db.query(Membership.group_id)
        .filter(Membership.user_id == user_id, Membership.active.is_(True))
        .all()
    )
    return [row[0] for row in rows]
