"""add monthly_reflections table and cognitive_profiles.energy_patterns

Revision ID: 0002
Revises: 0001
Create Date: 2026-10-17

monthly_reflections holds one free-text reflection per (user, year, month).
energy_patterns is the JSON list of hourly levels read by the scheduler;
existing profiles start with an empty list.
"""
from alembic import op
import sqlalchemy as sa

revision = "0002"
down_revision = "0001"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "monthly_reflections",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.Column("month", sa.Integer(), nullable=False, comment="1-12"),
        sa.Column("content", sa.Text(), nullable=False, server_default=""),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
    )
    op.create_index("ix_monthly_reflections_id", "monthly_reflections", ["id"])
    op.create_index("ix_monthly_reflections_user_id", "monthly_reflections", ["user_id"])
    op.create_unique_constraint(
        "uq_monthly_reflection_user_month",
        "monthly_reflections",
        ["user_id", "year", "month"],
    )

    op.add_column(
        "cognitive_profiles",
        sa.Column(
            "energy_patterns",
            sa.Text(),
            nullable=False,
            server_default="[]",
            comment="JSON list of hourly energy, focus and creativity levels",
        ),
    )


def downgrade() -> None:
    op.drop_column("cognitive_profiles", "energy_patterns")

    op.drop_constraint("uq_monthly_reflection_user_month", "monthly_reflections", type_="unique")
    op.drop_index("ix_monthly_reflections_user_id", table_name="monthly_reflections")
    op.drop_index("ix_monthly_reflections_id", table_name="monthly_reflections")
    op.drop_table("monthly_reflections")
