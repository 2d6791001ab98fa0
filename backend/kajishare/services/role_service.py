"""Role-change guard: every group keeps at least one active admin."""
from sqlalchemy.orm import Session

from kajishare.errors import ALLOWED, ErrorKind, Outcome, rejected
from kajishare.models.group import GroupRole, Membership
from kajishare.services import membership_store


def can_demote_or_remove(db: Session, membership: Membership, action: str = "remove or demote") -> Outcome:
    """May this membership stop counting as an active admin?

    Used before deleting a membership, demoting admin → member, and
    deactivating a membership.  Call with the group locked.
    """
    if membership.role != GroupRole.admin or not membership.active:
        return ALLOWED
    if membership_store.count_active_admins(db, membership.group_id) <= 1:
        return rejected(
            ErrorKind.last_admin_violation,
            f"Cannot {action} the last admin. Please assign admin role to another member first.",
        )
    return ALLOWED
