"""
CognitiveProfile and RecoveryProtocol — per-user inputs to the pattern,
scheduling and resilience engines.

CognitiveProfile.energy_patterns and RecoveryProtocol.conditions / .actions:
JSON-encoded lists stored as Text.
"""
from datetime import datetime
from sqlalchemy import Integer, String, Text, Float, DateTime, func
from sqlalchemy.orm import Mapped, mapped_column

from habitpulse.db.base import Base


class CognitiveProfile(Base):
    __tablename__ = "cognitive_profiles"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, unique=True, index=True)
    chronotype: Mapped[str] = mapped_column(String(32), nullable=False, default="intermediate")
    work_style: Mapped[str] = mapped_column(String(32), nullable=False, default="mixed")
    energy_patterns: Mapped[str] = mapped_column(
        Text, nullable=False, default="[]", comment="JSON list of hourly energy, focus and creativity levels",
    )
    adaptation: Mapped[float] = mapped_column(
        Float, nullable=False, default=50.0, comment="0-100 adaptability to change",
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )


class RecoveryProtocol(Base):
    __tablename__ = "recovery_protocols"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(128), nullable=False)
    trigger: Mapped[str] = mapped_column(String(256), nullable=False)
    conditions: Mapped[str] = mapped_column(Text, nullable=False, default="[]")
    actions: Mapped[str] = mapped_column(Text, nullable=False, default="[]")
    effectiveness: Mapped[float] = mapped_column(Float, nullable=False, default=50.0)
    last_used: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
