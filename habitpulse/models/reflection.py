"""
Free-text monthly reflection, one per (user, year, month).
"""
from datetime import datetime
from sqlalchemy import Integer, String, Text, DateTime, func, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from habitpulse.db.base import Base


class MonthlyReflection(Base):
    __tablename__ = "monthly_reflections"
    __table_args__ = (
        UniqueConstraint("user_id", "year", "month", name="uq_monthly_reflection_user_month"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    month: Mapped[int] = mapped_column(Integer, nullable=False, comment="1-12")
    content: Mapped[str] = mapped_column(Text, nullable=False, default="")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )
