"""Domain error taxonomy and its mapping onto HTTP responses.

Rule functions (permission evaluation, workload checks, the role-change
guard) return typed outcomes.  Services turn a negative outcome into a
``DomainError``; the exception handler registered in ``main`` renders it.
Anything that is not a ``DomainError`` (database unreachable, etc.) is left
to propagate as an infrastructure failure.
"""
import enum
import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import Request, status
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class ErrorKind(str, enum.Enum):
    not_authenticated = "not_authenticated"
    not_a_member = "not_a_member"
    membership_inactive = "membership_inactive"
    insufficient_role = "insufficient_role"
    workload_range_invalid = "workload_range_invalid"
    workload_precision_invalid = "workload_precision_invalid"
    workload_sum_invalid = "workload_sum_invalid"
    last_admin_violation = "last_admin_violation"
    duplicate_membership = "duplicate_membership"
    assignment_not_completed = "assignment_not_completed"
    duplicate_evaluation = "duplicate_evaluation"
    not_found = "not_found"
    validation_failed = "validation_failed"


STATUS_BY_KIND = {
    ErrorKind.not_authenticated: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.not_a_member: status.HTTP_403_FORBIDDEN,
    ErrorKind.membership_inactive: status.HTTP_403_FORBIDDEN,
    ErrorKind.insufficient_role: status.HTTP_403_FORBIDDEN,
    ErrorKind.last_admin_violation: status.HTTP_403_FORBIDDEN,
    ErrorKind.not_found: status.HTTP_404_NOT_FOUND,
    ErrorKind.duplicate_membership: status.HTTP_409_CONFLICT,
    ErrorKind.duplicate_evaluation: status.HTTP_409_CONFLICT,
    ErrorKind.workload_range_invalid: status.HTTP_422_UNPROCESSABLE_ENTITY,
    ErrorKind.workload_precision_invalid: status.HTTP_422_UNPROCESSABLE_ENTITY,
    ErrorKind.workload_sum_invalid: status.HTTP_422_UNPROCESSABLE_ENTITY,
    ErrorKind.assignment_not_completed: status.HTTP_422_UNPROCESSABLE_ENTITY,
    ErrorKind.validation_failed: status.HTTP_422_UNPROCESSABLE_ENTITY,
}


class DomainError(Exception):
    """An expected, recoverable rejection of an operation."""

    def __init__(self, kind: ErrorKind, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.field = field


def not_found(resource: str, resource_id) -> DomainError:
    return DomainError(ErrorKind.not_found, f"{resource} with ID {resource_id} not found")


@dataclass(frozen=True)
class Outcome:
    """Result of a validation or guard check: ok, or a kind plus a message."""

    kind: Optional[ErrorKind] = None
    message: str = ""
    field: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.kind is None

    def raise_for_error(self) -> None:
        if self.kind is not None:
            raise DomainError(self.kind, self.message, self.field)


ALLOWED = Outcome()


def rejected(kind: ErrorKind, message: str, field: Optional[str] = None) -> Outcome:
    return Outcome(kind=kind, message=message, field=field)


async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    body = {"error": exc.kind.value, "detail": exc.message}
    if exc.field:
        body["field"] = exc.field
    logger.info("%s %s rejected: %s (%s)", request.method, request.url.path, exc.kind.value, exc.message)
    return JSONResponse(status_code=STATUS_BY_KIND[exc.kind], content=body)
