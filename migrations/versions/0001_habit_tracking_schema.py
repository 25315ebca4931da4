"""habit tracking schema

Revision ID: 0001
Revises:
Create Date: 2026-10-17 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamp(name: str = "created_at") -> sa.Column:
    return sa.Column(name, sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False)


def upgrade() -> None:
    # --- ENUM types ---
    habit_cadence_enum = sa.Enum("daily", "weekly", "monthly", name="habit_cadence_enum")
    habit_cadence_enum.create(op.get_bind(), checkfirst=True)

    progress_rule_enum = sa.Enum("ALL", "PERCENTAGE", "POINTS", name="progress_rule_enum")
    progress_rule_enum.create(op.get_bind(), checkfirst=True)

    system_type_enum = sa.Enum("habit", "routine", "workflow", "ritual", name="system_type_enum")
    system_type_enum.create(op.get_bind(), checkfirst=True)

    # --- habits ---
    op.create_table(
        "habits",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("name", sa.String(128), nullable=False),
        sa.Column("emoji", sa.String(16), nullable=False, server_default="✨"),
        sa.Column("color", sa.String(16), nullable=True),
        sa.Column("cadence", sa.Enum(
            "daily", "weekly", "monthly", name="habit_cadence_enum", create_type=False,
        ), nullable=False, server_default="daily"),
        sa.Column("has_sub_tasks", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("progress_rule", sa.Enum(
            "ALL", "PERCENTAGE", "POINTS", name="progress_rule_enum", create_type=False,
        ), nullable=False, server_default="ALL"),
        sa.Column("completion_threshold", sa.Integer(), nullable=False, server_default="100",
                  comment="1-100; used by PERCENTAGE and POINTS"),
        sa.Column("weekly_target", sa.Integer(), nullable=False, server_default="7"),
        sa.Column("monthly_target", sa.Integer(), nullable=False, server_default="30"),
        sa.Column("archived", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("position", sa.Integer(), nullable=False, server_default="0"),
        _timestamp(),
        _timestamp("updated_at"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_habits_id", "habits", ["id"])
    op.create_index("ix_habits_user_id", "habits", ["user_id"])
    op.create_index("ix_habits_archived", "habits", ["archived"])

    # --- sub_tasks ---
    op.create_table(
        "sub_tasks",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("habit_id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("title", sa.String(256), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("weight", sa.Integer(), nullable=False, server_default="1", comment="1-10"),
        sa.Column("is_required", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("position", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("estimated_minutes", sa.Integer(), nullable=True, comment="1-480"),
        _timestamp(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_sub_tasks_id", "sub_tasks", ["id"])
    op.create_index("ix_sub_tasks_habit_id", "sub_tasks", ["habit_id"])
    op.create_index("ix_sub_tasks_user_id", "sub_tasks", ["user_id"])

    # --- sub_task_logs (row exists iff the sub-task is done that day) ---
    op.create_table(
        "sub_task_logs",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("sub_task_id", sa.Integer(), nullable=False),
        sa.Column("habit_id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("day", sa.Date(), nullable=False),
        _timestamp("completed_at"),
        sa.Column("time_spent_minutes", sa.Integer(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("sub_task_id", "user_id", "day", name="uq_sub_task_log_user_day"),
    )
    op.create_index("ix_sub_task_logs_id", "sub_task_logs", ["id"])
    op.create_index("ix_sub_task_logs_sub_task_id", "sub_task_logs", ["sub_task_id"])
    op.create_index("ix_sub_task_logs_habit_id", "sub_task_logs", ["habit_id"])
    op.create_index("ix_sub_task_logs_user_id", "sub_task_logs", ["user_id"])
    op.create_index("ix_sub_task_logs_day", "sub_task_logs", ["day"])

    # --- habit_entries (row exists iff the habit is done that day) ---
    op.create_table(
        "habit_entries",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("habit_id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("day", sa.Date(), nullable=False),
        sa.Column("value", sa.Float(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        _timestamp("completed_at"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("habit_id", "user_id", "day", name="uq_habit_entry_user_day"),
    )
    op.create_index("ix_habit_entries_id", "habit_entries", ["id"])
    op.create_index("ix_habit_entries_habit_id", "habit_entries", ["habit_id"])
    op.create_index("ix_habit_entries_user_id", "habit_entries", ["user_id"])
    op.create_index("ix_habit_entries_day", "habit_entries", ["day"])

    # --- habit_progress (derived cache) ---
    op.create_table(
        "habit_progress",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("habit_id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("day", sa.Date(), nullable=False),
        sa.Column("completion_percentage", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("is_completed", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("total_sub_tasks", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("completed_sub_tasks", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("total_points", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("earned_points", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("progress_rule", sa.String(16), nullable=False),
        _timestamp("updated_at"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("habit_id", "day", name="uq_habit_progress_habit_day"),
    )
    op.create_index("ix_habit_progress_id", "habit_progress", ["id"])
    op.create_index("ix_habit_progress_habit_id", "habit_progress", ["habit_id"])
    op.create_index("ix_habit_progress_user_id", "habit_progress", ["user_id"])
    op.create_index("ix_habit_progress_day", "habit_progress", ["day"])

    # --- weekly_progress (derived cache) ---
    op.create_table(
        "weekly_progress",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("habit_id", sa.Integer(), nullable=False),
        sa.Column("week_start", sa.Date(), nullable=False),
        sa.Column("week_end", sa.Date(), nullable=False),
        sa.Column("completed", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("target", sa.Integer(), nullable=False, server_default="7"),
        sa.Column("percentage", sa.Integer(), nullable=False, server_default="0",
                  comment="raw ratio; may exceed 100"),
        _timestamp("updated_at"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id", "habit_id", "week_start", name="uq_weekly_progress_user_habit_week"),
    )
    op.create_index("ix_weekly_progress_id", "weekly_progress", ["id"])
    op.create_index("ix_weekly_progress_user_id", "weekly_progress", ["user_id"])
    op.create_index("ix_weekly_progress_habit_id", "weekly_progress", ["habit_id"])
    op.create_index("ix_weekly_progress_week_start", "weekly_progress", ["week_start"])

    # --- monthly_overviews (derived cache) ---
    op.create_table(
        "monthly_overviews",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.Column("month", sa.Integer(), nullable=False),
        sa.Column("total_completed", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("total_target", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("total_left", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("percentage", sa.Integer(), nullable=False, server_default="0"),
        _timestamp("updated_at"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id", "year", "month", name="uq_monthly_overview_user_month"),
    )
    op.create_index("ix_monthly_overviews_id", "monthly_overviews", ["id"])
    op.create_index("ix_monthly_overviews_user_id", "monthly_overviews", ["user_id"])

    # --- adaptive_systems ---
    op.create_table(
        "adaptive_systems",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("name", sa.String(128), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("system_type", sa.Enum(
            "habit", "routine", "workflow", "ritual", name="system_type_enum", create_type=False,
        ), nullable=False, server_default="habit"),
        sa.Column("effectiveness_score", sa.Float(), nullable=False, server_default="50"),
        sa.Column("friction_coefficient", sa.Float(), nullable=False, server_default="50"),
        sa.Column("locked", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("auto_adapt", sa.Boolean(), nullable=False, server_default=sa.true()),
        _timestamp(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_adaptive_systems_id", "adaptive_systems", ["id"])
    op.create_index("ix_adaptive_systems_user_id", "adaptive_systems", ["user_id"])

    # --- system_adaptations (append-only) ---
    op.create_table(
        "system_adaptations",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("system_id", sa.Integer(), nullable=False),
        sa.Column("trigger", sa.String(128), nullable=False),
        sa.Column("change", sa.Text(), nullable=False),
        sa.Column("impact", sa.Float(), nullable=False, server_default="0"),
        _timestamp(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_system_adaptations_id", "system_adaptations", ["id"])
    op.create_index("ix_system_adaptations_system_id", "system_adaptations", ["system_id"])

    # --- execution_qualities ---
    op.create_table(
        "execution_qualities",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("system_id", sa.Integer(), nullable=False),
        sa.Column("executed_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("completion_rate", sa.Float(), nullable=False),
        sa.Column("energy_cost", sa.Float(), nullable=False),
        sa.Column("context_fit", sa.Float(), nullable=False),
        sa.Column("sequence_effectiveness", sa.Float(), nullable=False),
        sa.Column("quality", sa.Float(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_execution_qualities_id", "execution_qualities", ["id"])
    op.create_index("ix_execution_qualities_user_id", "execution_qualities", ["user_id"])
    op.create_index("ix_execution_qualities_system_id", "execution_qualities", ["system_id"])
    op.create_index("ix_execution_qualities_executed_at", "execution_qualities", ["executed_at"])

    # --- momentum_vectors ---
    op.create_table(
        "momentum_vectors",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("day", sa.Date(), nullable=False),
        sa.Column("consistency", sa.Float(), nullable=False),
        sa.Column("growth", sa.Float(), nullable=False),
        sa.Column("impact", sa.Float(), nullable=False),
        sa.Column("learning", sa.Float(), nullable=False),
        sa.Column("overall", sa.Float(), nullable=False),
        sa.Column("direction", sa.String(16), nullable=False, server_default="stable"),
        sa.Column("strength", sa.Float(), nullable=False, server_default="50"),
        sa.Column("forecast", sa.Text(), nullable=True),
        _timestamp(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id", "day", name="uq_momentum_vector_user_day"),
    )
    op.create_index("ix_momentum_vectors_id", "momentum_vectors", ["id"])
    op.create_index("ix_momentum_vectors_user_id", "momentum_vectors", ["user_id"])
    op.create_index("ix_momentum_vectors_day", "momentum_vectors", ["day"])

    # --- cognitive_profiles ---
    op.create_table(
        "cognitive_profiles",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("chronotype", sa.String(32), nullable=False, server_default="intermediate"),
        sa.Column("work_style", sa.String(32), nullable=False, server_default="mixed"),
        sa.Column("adaptation", sa.Float(), nullable=False, server_default="50",
                  comment="0-100 adaptability to change"),
        _timestamp("updated_at"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_cognitive_profiles_id", "cognitive_profiles", ["id"])
    op.create_index("ix_cognitive_profiles_user_id", "cognitive_profiles", ["user_id"], unique=True)

    # --- recovery_protocols ---
    op.create_table(
        "recovery_protocols",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("name", sa.String(128), nullable=False),
        sa.Column("trigger", sa.String(256), nullable=False),
        sa.Column("conditions", sa.Text(), nullable=False, server_default="[]"),
        sa.Column("actions", sa.Text(), nullable=False, server_default="[]"),
        sa.Column("effectiveness", sa.Float(), nullable=False, server_default="50"),
        sa.Column("last_used", sa.DateTime(timezone=True), nullable=True),
        _timestamp(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_recovery_protocols_id", "recovery_protocols", ["id"])
    op.create_index("ix_recovery_protocols_user_id", "recovery_protocols", ["user_id"])


def downgrade() -> None:
    for table in (
        "recovery_protocols",
        "cognitive_profiles",
        "momentum_vectors",
        "execution_qualities",
        "system_adaptations",
        "adaptive_systems",
        "monthly_overviews",
        "weekly_progress",
        "habit_progress",
        "habit_entries",
        "sub_task_logs",
        "sub_tasks",
        "habits",
    ):
        op.drop_table(table)

    op.execute("DROP TYPE IF EXISTS system_type_enum")
    op.execute("DROP TYPE IF EXISTS progress_rule_enum")
    op.execute("DROP TYPE IF EXISTS habit_cadence_enum")
