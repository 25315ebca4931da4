"""
Derived progress caches. Never the source of truth: every row can be
recomputed from habits, sub-tasks, sub-task logs and habit entries.

habit_progress    one row per (habit, day); written by refresh_habit_progress
weekly_progress   one row per (user, habit, ISO week start)
monthly_overviews one row per (user, year, month), all habits aggregated
"""
from datetime import datetime, date
from sqlalchemy import Integer, String, Boolean, DateTime, Date, func, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from habitpulse.db.base import Base


class HabitProgress(Base):
    __tablename__ = "habit_progress"
    __table_args__ = (
        UniqueConstraint("habit_id", "day", name="uq_habit_progress_habit_day"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    habit_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    day: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    completion_percentage: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_completed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    total_sub_tasks: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    completed_sub_tasks: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_points: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    earned_points: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    progress_rule: Mapped[str] = mapped_column(String(16), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )


class WeeklyProgress(Base):
    __tablename__ = "weekly_progress"
    __table_args__ = (
        UniqueConstraint("user_id", "habit_id", "week_start", name="uq_weekly_progress_user_habit_week"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    habit_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    week_start: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    week_end: Mapped[date] = mapped_column(Date, nullable=False)
    completed: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    target: Mapped[int] = mapped_column(Integer, nullable=False, default=7)
    percentage: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, comment="raw ratio; may exceed 100",
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )


class MonthlyOverview(Base):
    __tablename__ = "monthly_overviews"
    __table_args__ = (
        UniqueConstraint("user_id", "year", "month", name="uq_monthly_overview_user_month"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    month: Mapped[int] = mapped_column(Integer, nullable=False)
    total_completed: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_target: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_left: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    percentage: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )
