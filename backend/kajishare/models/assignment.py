"""Assignment ORM model."""
import enum
import uuid
from sqlalchemy import Column, Date, DateTime, Enum as SAEnum, ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from kajishare.database import Base


class AssignmentStatus(str, enum.Enum):
    pending = "pending"
    in_progress = "in_progress"
    completed = "completed"


class Assignment(Base):
    __tablename__ = "assignments"
    __table_args__ = (
        UniqueConstraint("task_id", "membership_id", name="uq_assignments_task_membership"),
    )

    assignment_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    task_id = Column(String(36), ForeignKey("tasks.task_id", ondelete="CASCADE"), nullable=False, index=True)
    membership_id = Column(
        String(36), ForeignKey("memberships.membership_id", ondelete="CASCADE"), nullable=False, index=True
    )
    assigned_by_membership_id = Column(
        String(36), ForeignKey("memberships.membership_id", ondelete="SET NULL"), nullable=True
    )
    due_date = Column(Date, nullable=True)
    completed_date = Column(Date, nullable=True)
    comment = Column(Text, nullable=True)
    status = Column(SAEnum(AssignmentStatus, native_enum=False, length=20), nullable=False, default=AssignmentStatus.pending)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    task = relationship("Task", back_populates="assignments")
    membership = relationship("Membership", back_populates="assignments", foreign_keys=[membership_id])
    assigned_by = relationship("Membership", foreign_keys=[assigned_by_membership_id])
    evaluations = relationship("Evaluation", back_populates="assignment", cascade="all, delete-orphan")
