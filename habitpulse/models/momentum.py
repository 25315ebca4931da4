"""
MomentumVector — one stored momentum snapshot per user per day.

Derived entirely from execution history. The latest row before today is
the baseline for trend analysis. forecast: JSON-encoded list stored as Text.
"""
from datetime import datetime, date
from sqlalchemy import Integer, String, Text, Float, DateTime, Date, func, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from habitpulse.db.base import Base


class MomentumVector(Base):
    __tablename__ = "momentum_vectors"
    __table_args__ = (
        UniqueConstraint("user_id", "day", name="uq_momentum_vector_user_day"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    day: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    consistency: Mapped[float] = mapped_column(Float, nullable=False)
    growth: Mapped[float] = mapped_column(Float, nullable=False)
    impact: Mapped[float] = mapped_column(Float, nullable=False)
    learning: Mapped[float] = mapped_column(Float, nullable=False)
    overall: Mapped[float] = mapped_column(Float, nullable=False)
    direction: Mapped[str] = mapped_column(String(16), nullable=False, default="stable")
    strength: Mapped[float] = mapped_column(Float, nullable=False, default=50.0)
    forecast: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
