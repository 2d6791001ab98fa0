"""initial_schema

Revision ID: 0001
Revises:
Create Date: 2026-10-19

Creates all tables for KajiShare: users, groups, memberships, tasks,
assignments, evaluations.
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # --- users ---
    op.create_table(
        "users",
        sa.Column("user_id", sa.String(36), primary_key=True),
        sa.Column("google_sub", sa.String(255), nullable=False, unique=True),
        sa.Column("name", sa.String(50), nullable=False),
        sa.Column("email", sa.String(255), nullable=False, unique=True),
        sa.Column("picture", sa.String(500), nullable=True),
        sa.Column("account_type", sa.String(20), nullable=False, server_default="user"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # --- groups ---
    op.create_table(
        "groups",
        sa.Column("group_id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("share_key", sa.String(64), nullable=False, unique=True),
        sa.Column("assign_mode", sa.String(20), nullable=False, server_default="equal"),
        sa.Column("balance_type", sa.String(20), nullable=False, server_default="point"),
        sa.Column("active", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("created_by", sa.String(36), sa.ForeignKey("users.user_id", ondelete="SET NULL"), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # --- memberships ---
    op.create_table(
        "memberships",
        sa.Column("membership_id", sa.String(36), primary_key=True),
        sa.Column("user_id", sa.String(36), sa.ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False),
        sa.Column("group_id", sa.String(36), sa.ForeignKey("groups.group_id", ondelete="CASCADE"), nullable=False),
        sa.Column("role", sa.String(20), nullable=False, server_default="member"),
        sa.Column("workload_ratio", sa.Numeric(4, 1), nullable=True),
        sa.Column("active", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint("user_id", "group_id", name="uq_memberships_user_group"),
        sa.CheckConstraint(
            "workload_ratio IS NULL OR (workload_ratio > 0 AND workload_ratio <= 100)",
            name="ck_memberships_workload_ratio_range",
        ),
    )
    op.create_index("ix_memberships_user_id", "memberships", ["user_id"])
    op.create_index("ix_memberships_group_id", "memberships", ["group_id"])

    # --- tasks ---
    op.create_table(
        "tasks",
        sa.Column("task_id", sa.String(36), primary_key=True),
        sa.Column("group_id", sa.String(36), sa.ForeignKey("groups.group_id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.String(50), nullable=False),
        sa.Column("description", sa.String(50), nullable=True),
        sa.Column("point", sa.Integer, nullable=False, server_default="1"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.CheckConstraint("point > 0", name="ck_tasks_point_positive"),
    )
    op.create_index("ix_tasks_group_id", "tasks", ["group_id"])

    # --- assignments ---
    op.create_table(
        "assignments",
        sa.Column("assignment_id", sa.String(36), primary_key=True),
        sa.Column("task_id", sa.String(36), sa.ForeignKey("tasks.task_id", ondelete="CASCADE"), nullable=False),
        sa.Column(
            "membership_id", sa.String(36),
            sa.ForeignKey("memberships.membership_id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column(
            "assigned_by_membership_id", sa.String(36),
            sa.ForeignKey("memberships.membership_id", ondelete="SET NULL"), nullable=True,
        ),
        sa.Column("due_date", sa.Date, nullable=True),
        sa.Column("completed_date", sa.Date, nullable=True),
        sa.Column("comment", sa.Text, nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint("task_id", "membership_id", name="uq_assignments_task_membership"),
    )
    op.create_index("ix_assignments_task_id", "assignments", ["task_id"])
    op.create_index("ix_assignments_membership_id", "assignments", ["membership_id"])

    # --- evaluations ---
    op.create_table(
        "evaluations",
        sa.Column("evaluation_id", sa.String(36), primary_key=True),
        sa.Column(
            "assignment_id", sa.String(36),
            sa.ForeignKey("assignments.assignment_id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("evaluator_id", sa.String(36), sa.ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False),
        sa.Column("score", sa.Integer, nullable=False),
        sa.Column("feedback", sa.String(100), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint("assignment_id", "evaluator_id", name="uq_evaluations_assignment_evaluator"),
        sa.CheckConstraint("score >= 1 AND score <= 5", name="ck_evaluations_score_range"),
    )
    op.create_index("ix_evaluations_assignment_id", "evaluations", ["assignment_id"])


def downgrade() -> None:
    op.drop_table("evaluations")
    op.drop_table("assignments")
    op.drop_table("tasks")
    op.drop_table("memberships")
    op.drop_table("groups")
    op.drop_table("users")
