"""Workload integrity checks.

A workload ratio is a membership's percentage share of the group's work.
Active memberships that carry a ratio must always total exactly 100; a
group where no active membership carries one is also consistent.  Every
check here reads the store, so callers must hold ``lock_group`` for the
group and persist the change in the same transaction.
"""
import logging
from decimal import Decimal
from typing import Optional

from sqlalchemy.orm import Session

from kajishare.errors import ALLOWED, ErrorKind, Outcome, rejected
from kajishare.services import membership_store

logger = logging.getLogger(__name__)

FIELD = "workload_ratio"
TOTAL = Decimal("100")


def check_ratio_value(ratio: Optional[Decimal]) -> Outcome:
    """Field-level rules: optional, 0 < ratio <= 100, at most one decimal."""
    if ratio is None:
        return ALLOWED
    ratio = Decimal(str(ratio))
    if not (ratio > 0 and ratio <= TOTAL):
        return rejected(
            ErrorKind.workload_range_invalid,
            "Workload ratio must be greater than 0 and less than or equal to 100",
            FIELD,
        )
    scaled = ratio * 10
    if scaled != scaled.to_integral_value():
        return rejected(
            ErrorKind.workload_precision_invalid,
            "Workload ratio allows at most one decimal place",
            FIELD,
        )
    return ALLOWED


def check_workload(
    db: Session,
    group_id: str,
    ratio: Optional[Decimal],
    excluding_membership_id: Optional[str] = None,
) -> Outcome:
    """Check that an active membership taking ``ratio`` keeps the group at 100.

    ``excluding_membership_id`` removes a membership's current ratio from the
    sum, so an update can re-check itself.
    """
    outcome = check_ratio_value(ratio)
    if not outcome.ok or ratio is None:
        return outcome

    others = membership_store.sum_workload_ratio(db, group_id, excluding=excluding_membership_id)
    total = others + Decimal(str(ratio))
    if total != TOTAL:
        logger.info("Workload sum for group %s would be %s, rejecting", group_id, total)
        return rejected(
            ErrorKind.workload_sum_invalid,
            f"Workload ratios in the group must add up to 100 (would be {total})",
            FIELD,
        )
    return ALLOWED


def check_workload_release(db: Session, group_id: str, membership_id: str) -> Outcome:
    """Check that the group stays consistent once this membership stops contributing.

    Applies when an active ratio carrier is deleted, deactivated or has its
    ratio cleared.
    """
    if membership_store.count_ratio_carriers(db, group_id, excluding=membership_id) == 0:
        return ALLOWED

    remaining = membership_store.sum_workload_ratio(db, group_id, excluding=membership_id)
    if remaining != TOTAL:
        return rejected(
            ErrorKind.workload_sum_invalid,
            f"Workload ratios in the group must add up to 100 (would be {remaining}). "
            "Rebalance the group's workload first.",
            FIELD,
        )
    return ALLOWED


def check_group_total(db: Session, group_id: str) -> Outcome:
    """Check the group as currently flushed: carriers sum to 100 or there are none."""
    if membership_store.count_ratio_carriers(db, group_id) == 0:
        return ALLOWED
    total = membership_store.sum_workload_ratio(db, group_id)
    if total != TOTAL:
        return rejected(
            ErrorKind.workload_sum_invalid,
            f"Workload ratios in the group must add up to 100 (got {total})",
            FIELD,
        )
    return ALLOWED
