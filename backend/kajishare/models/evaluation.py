"""Evaluation ORM model: one score per (assignment, evaluator)."""
import uuid
from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from kajishare.database import Base


class Evaluation(Base):
    __tablename__ = "evaluations"
    __table_args__ = (
        UniqueConstraint("assignment_id", "evaluator_id", name="uq_evaluations_assignment_evaluator"),
        CheckConstraint("score >= 1 AND score <= 5", name="ck_evaluations_score_range"),
    )

    evaluation_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    assignment_id = Column(
        String(36), ForeignKey("assignments.assignment_id", ondelete="CASCADE"), nullable=False, index=True
    )
    evaluator_id = Column(String(36), ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False)
    score = Column(Integer, nullable=False)
    feedback = Column(String(100), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    assignment = relationship("Assignment", back_populates="evaluations")
    evaluator = relationship("User")
