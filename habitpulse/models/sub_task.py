from datetime import datetime, date
from sqlalchemy import Integer, String, Text, Boolean, DateTime, Date, func, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from habitpulse.db.base import Base


class SubTask(Base):
    __tablename__ = "sub_tasks"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    habit_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(256), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    weight: Mapped[int] = mapped_column(Integer, nullable=False, default=1, comment="1-10")
    is_required: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    estimated_minutes: Mapped[int | None] = mapped_column(Integer, nullable=True, comment="1-480")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )


class SubTaskLog(Base):
    """A sub-task done on a day. The row exists only while the sub-task is completed."""
    __tablename__ = "sub_task_logs"
    __table_args__ = (
        UniqueConstraint("sub_task_id", "user_id", "day", name="uq_sub_task_log_user_day"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    sub_task_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    habit_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    day: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    completed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    time_spent_minutes: Mapped[int | None] = mapped_column(Integer, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
