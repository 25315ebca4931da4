"""
Habit — a user-owned recurring action tracked per calendar day.

Habits are archived, never deleted, while completion history references
them. `progress_rule` and `completion_threshold` only matter when
`has_sub_tasks` is set; otherwise the day's HabitEntry is the whole truth.
"""
from datetime import datetime
from sqlalchemy import Integer, String, Boolean, DateTime, Enum, func
from sqlalchemy.orm import Mapped, mapped_column
import enum

from habitpulse.db.base import Base


class Cadence(str, enum.Enum):
    daily = "daily"
    weekly = "weekly"
    monthly = "monthly"


class ProgressRuleName(str, enum.Enum):
    ALL = "ALL"
    PERCENTAGE = "PERCENTAGE"
    POINTS = "POINTS"


class Habit(Base):
    __tablename__ = "habits"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(128), nullable=False)
    emoji: Mapped[str] = mapped_column(String(16), nullable=False, default="✨")
    color: Mapped[str | None] = mapped_column(String(16), nullable=True)
    cadence: Mapped[str] = mapped_column(
        Enum(Cadence, name="habit_cadence_enum"), nullable=False, default=Cadence.daily
    )
    has_sub_tasks: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    progress_rule: Mapped[str] = mapped_column(
        Enum(ProgressRuleName, name="progress_rule_enum"),
        nullable=False,
        default=ProgressRuleName.ALL,
    )
    completion_threshold: Mapped[int] = mapped_column(
        Integer, nullable=False, default=100,
        comment="1-100; used by PERCENTAGE and POINTS",
    )
    weekly_target: Mapped[int] = mapped_column(Integer, nullable=False, default=7)
    monthly_target: Mapped[int] = mapped_column(Integer, nullable=False, default=30)
    archived: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, index=True)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )
