"""
Plain in-memory records consumed by the computation engines.

The engines never see ORM objects or a Session: orchestration services
load rows, convert them with `habitpulse.services.loaders`, and pass these
frozen dataclasses in. Tests build them directly.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional


@dataclass(frozen=True)
class HabitRecord:
    id: int
    name: str
    emoji: str = "✨"
    has_sub_tasks: bool = False
    progress_rule: str = "ALL"
    completion_threshold: int = 100
    weekly_target: int = 7
    monthly_target: int = 30
    archived: bool = False


@dataclass(frozen=True)
class SubTaskRecord:
    id: int
    habit_id: int
    title: str
    weight: int = 1
    is_required: bool = True
    position: int = 0
    estimated_minutes: Optional[int] = None


@dataclass(frozen=True)
class SubTaskLogRecord:
    sub_task_id: int
    day: date
    completed: bool = True


@dataclass(frozen=True)
class CompletionRecord:
    """One habit completed on one calendar day."""
    habit_id: int
    day: date


@dataclass(frozen=True)
class AdaptationRecord:
    trigger: str
    change: str
    impact: float
    timestamp: Optional[datetime] = None


@dataclass(frozen=True)
class SystemRecord:
    id: int
    name: str
    system_type: str = "habit"
    effectiveness_score: float = 50
    friction_coefficient: float = 50
    locked: bool = False
    auto_adapt: bool = True
    adaptations: tuple[AdaptationRecord, ...] = ()


@dataclass(frozen=True)
class ExecutionSample:
    system_id: int
    executed_at: datetime
    completion_rate: float
    energy_cost: float
    context_fit: float
    sequence_effectiveness: float
    quality: float


@dataclass(frozen=True)
class EnergyPattern:
    """Self-reported levels for one hour of the day (0-23), each 0-100."""
    hour: int
    energy_level: float
    focus_level: float
    creativity_level: float


@dataclass(frozen=True)
class ProfileRecord:
    adaptation: float = 50
    chronotype: str = "intermediate"  # "morning" | "evening" | "intermediate"
    work_style: str = "mixed"  # "sprinter" | "marathoner" | "mixed"
    energy_patterns: tuple[EnergyPattern, ...] = ()


@dataclass(frozen=True)
class MomentumSnapshot:
    """A previously stored momentum vector, used as the trend baseline."""
    day: date
    consistency: float
    growth: float
    impact: float
    learning: float
    overall: float
    direction: str = "stable"
    strength: float = 50


@dataclass(frozen=True)
class ProtocolCondition:
    metric: str
    operator: str  # "gt" | "lt" | "eq"
    threshold: float


@dataclass(frozen=True)
class ProtocolAction:
    type: str  # "system" | "mindset" | "environment" | "schedule"
    description: str
    priority: int
    automated: bool = False


@dataclass(frozen=True)
class ProtocolRecord:
    name: str
    trigger: str
    effectiveness: float = 50
    conditions: tuple[ProtocolCondition, ...] = ()
    actions: tuple[ProtocolAction, ...] = ()
    id: Optional[int] = None
    last_used: Optional[datetime] = field(default=None, compare=False)
