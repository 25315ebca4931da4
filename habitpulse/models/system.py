"""
Adaptive systems and their execution history.

system_adaptations is append-only: applying a recommended adaptation adds a
row, nothing rewrites earlier ones. execution_qualities holds one row per
execution event with author-asserted 0-100 scores.
"""
from datetime import datetime
from sqlalchemy import Integer, String, Text, Float, Boolean, DateTime, Enum, func
from sqlalchemy.orm import Mapped, mapped_column
import enum

from habitpulse.db.base import Base


class SystemType(str, enum.Enum):
    habit = "habit"
    routine = "routine"
    workflow = "workflow"
    ritual = "ritual"


class AdaptiveSystem(Base):
    __tablename__ = "adaptive_systems"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(128), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    system_type: Mapped[str] = mapped_column(
        Enum(SystemType, name="system_type_enum"), nullable=False, default=SystemType.habit
    )
    effectiveness_score: Mapped[float] = mapped_column(Float, nullable=False, default=50.0)
    friction_coefficient: Mapped[float] = mapped_column(Float, nullable=False, default=50.0)
    locked: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    auto_adapt: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )


class SystemAdaptation(Base):
    __tablename__ = "system_adaptations"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    system_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    trigger: Mapped[str] = mapped_column(String(128), nullable=False)
    change: Mapped[str] = mapped_column(Text, nullable=False)
    impact: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )


class ExecutionQuality(Base):
    __tablename__ = "execution_qualities"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    system_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    executed_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
    completion_rate: Mapped[float] = mapped_column(Float, nullable=False)
    energy_cost: Mapped[float] = mapped_column(Float, nullable=False)
    context_fit: Mapped[float] = mapped_column(Float, nullable=False)
    sequence_effectiveness: Mapped[float] = mapped_column(Float, nullable=False)
    quality: Mapped[float] = mapped_column(Float, nullable=False)
