"""Group and Membership ORM models."""
import enum
import secrets
import uuid
from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    Enum as SAEnum,
    ForeignKey,
    Numeric,
    String,
    UniqueConstraint,
)
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from kajishare.database import Base


class GroupRole(str, enum.Enum):
    admin = "admin"
    member = "member"


class AssignMode(str, enum.Enum):
    equal = "equal"
    ratio = "ratio"
    manual = "manual"


class BalanceType(str, enum.Enum):
    point = "point"
    time = "time"


def _new_share_key() -> str:
    return secrets.token_urlsafe(12)


class Group(Base):
    __tablename__ = "groups"

    group_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(100), nullable=False)
    share_key = Column(String(64), nullable=False, unique=True, default=_new_share_key)
    assign_mode = Column(SAEnum(AssignMode, native_enum=False, length=20), nullable=False, default=AssignMode.equal)
    balance_type = Column(SAEnum(BalanceType, native_enum=False, length=20), nullable=False, default=BalanceType.point)
    active = Column(Boolean, nullable=False, default=True)
    created_by = Column(String(36), ForeignKey("users.user_id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    memberships = relationship("Membership", back_populates="group", cascade="all, delete-orphan")
    tasks = relationship("Task", back_populates="group", cascade="all, delete-orphan")


class Membership(Base):
    __tablename__ = "memberships"
    __table_args__ = (
        UniqueConstraint("user_id", "group_id", name="uq_memberships_user_group"),
        CheckConstraint(
            "workload_ratio IS NULL OR (workload_ratio > 0 AND workload_ratio <= 100)",
            name="ck_memberships_workload_ratio_range",
        ),
    )

    membership_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False, index=True)
    group_id = Column(String(36), ForeignKey("groups.group_id", ondelete="CASCADE"), nullable=False, index=True)
    role = Column(SAEnum(GroupRole, native_enum=False, length=20), nullable=False, default=GroupRole.member)
    workload_ratio = Column(Numeric(4, 1), nullable=True)
    active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    user = relationship("User", back_populates="memberships")
    group = relationship("Group", back_populates="memberships")
    assignments = relationship(
        "Assignment",
        back_populates="membership",
        cascade="all, delete-orphan",
        foreign_keys="Assignment.membership_id",
    )

    @property
    def user_name(self):
        return self.user.name if self.user else None

    @property
    def group_name(self):
        return self.group.name if self.group else None

    @property
    def assignments_count(self) -> int:
        return len(self.assignments)

    @property
    def completed_assignments_count(self) -> int:
        return sum(1 for a in self.assignments if a.completed_date is not None)
