"""Permission evaluator: one decision function for every resource type.

``evaluate`` answers "may this identity act on this group at this tier?"
from the membership store alone.  Callers resolve the group id themselves:
from the parent id for collection operations, or through ``owning_group_id``
for item operations (Assignment → Task → Group, Evaluation → Assignment →
Task → Group).

Collection endpoints that span groups do not call ``evaluate``; they filter
their query with ``visible_group_ids`` instead.
"""
import enum
import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.orm import Session

from kajishare.errors import DomainError, ErrorKind
from kajishare.models.assignment import Assignment
from kajishare.models.evaluation import Evaluation
from kajishare.models.group import Group, GroupRole, Membership
from kajishare.models.task import Task
from kajishare.services import membership_store
from kajishare.services.identity_service import UserIdentity

logger = logging.getLogger(__name__)


class Tier(str, enum.Enum):
    member = "member"
    admin = "admin"


class DecisionOutcome(str, enum.Enum):
    allow = "allow"
    deny_not_authenticated = "deny_not_authenticated"
    deny_not_member = "deny_not_member"
    deny_inactive_membership = "deny_inactive_membership"
    deny_insufficient_role = "deny_insufficient_role"


_DENIALS = {
    DecisionOutcome.deny_not_authenticated: (ErrorKind.not_authenticated, "Unauthorized"),
    DecisionOutcome.deny_not_member: (ErrorKind.not_a_member, "You are not a member of this group"),
    DecisionOutcome.deny_inactive_membership: (ErrorKind.membership_inactive, "Your membership is not active"),
    DecisionOutcome.deny_insufficient_role: (
        ErrorKind.insufficient_role,
        "You are not allowed to perform this action. Admin permission required.",
    ),
}


@dataclass(frozen=True)
class Decision:
    outcome: DecisionOutcome
    membership: Optional[Membership] = None

    @property
    def allowed(self) -> bool:
        return self.outcome is DecisionOutcome.allow

    def raise_for_denial(self) -> Membership:
        """Return the caller's membership, or raise the matching DomainError."""
        if self.allowed:
            return self.membership
        kind, message = _DENIALS[self.outcome]
        raise DomainError(kind, message)


def evaluate(
    db: Session,
    identity: Optional[UserIdentity],
    group_id: str,
    required_tier: Tier,
) -> Decision:
    """Decide whether ``identity`` holds ``required_tier`` in ``group_id``."""
    if identity is None:
        return Decision(DecisionOutcome.deny_not_authenticated)

    membership = membership_store.find_by_user_and_group(db, identity.user_id, group_id)
    if membership is None:
        return Decision(DecisionOutcome.deny_not_member)
    if not membership.active:
        return Decision(DecisionOutcome.deny_inactive_membership)
    if required_tier is Tier.admin and membership.role != GroupRole.admin:
        return Decision(DecisionOutcome.deny_insufficient_role)
    return Decision(DecisionOutcome.allow, membership)


def require(
    db: Session,
    identity: Optional[UserIdentity],
    group_id: str,
    required_tier: Tier,
) -> Membership:
    """Evaluate and raise on denial; returns the caller's membership."""
    decision = evaluate(db, identity, group_id, required_tier)
    if not decision.allowed:
        logger.info(
            "Denied %s access to group %s for user %s: %s",
            required_tier.value,
            group_id,
            identity.user_id if identity else None,
            decision.outcome.value,
        )
    return decision.raise_for_denial()


def owning_group_id(entity) -> str:
    """Resolve the group an entity belongs to through its ownership chain."""
    if isinstance(entity, Group):
        return entity.group_id
    if isinstance(entity, (Membership, Task)):
        return entity.group_id
    if isinstance(entity, Assignment):
        return entity.task.group_id
    if isinstance(entity, Evaluation):
        return entity.assignment.task.group_id
    raise TypeError(f"Cannot resolve a group for {type(entity).__name__}")


def visible_group_ids(db: Session, identity: UserIdentity) -> list[str]:
    """Groups whose data the caller may see in cross-group listings."""
    return membership_store.active_group_ids(db, identity.user_id)
