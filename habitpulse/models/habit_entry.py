"""
HabitEntry — the completion fact for one habit on one calendar day.

Row exists iff the habit is completed that day; unchecking deletes it.
For habits with sub-tasks the row is written and removed only by the
progress cache refresh, never by a direct toggle.
"""
from datetime import datetime, date
from sqlalchemy import Integer, String, Text, Float, DateTime, Date, func, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from habitpulse.db.base import Base


class HabitEntry(Base):
    __tablename__ = "habit_entries"
    __table_args__ = (
        UniqueConstraint("habit_id", "user_id", "day", name="uq_habit_entry_user_day"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    habit_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    day: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    value: Mapped[float | None] = mapped_column(Float, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    completed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
