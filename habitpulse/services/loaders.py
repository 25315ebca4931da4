"""
ORM rows → engine records, plus the per-user queries the orchestration
services share. Every loader returns fully materialised lists; engines
never see a Session.
"""
from __future__ import annotations

import json
from datetime import date
from typing import Optional

from sqlalchemy.orm import Session

from habitpulse.models import (
    AdaptiveSystem,
    CognitiveProfile,
    ExecutionQuality,
    Habit,
    HabitEntry,
    MomentumVector,
    RecoveryProtocol,
    SubTask,
    SubTaskLog,
    SystemAdaptation,
)
from habitpulse.services.records import (
    AdaptationRecord,
    CompletionRecord,
    EnergyPattern,
    ExecutionSample,
    HabitRecord,
    MomentumSnapshot,
    ProfileRecord,
    ProtocolAction,
    ProtocolCondition,
    ProtocolRecord,
    SubTaskLogRecord,
    SubTaskRecord,
    SystemRecord,
)


def _ev(v) -> str:
    return v.value if hasattr(v, "value") else str(v)


# ---------------------------------------------------------------------------
# Row converters
# ---------------------------------------------------------------------------

def habit_record(h: Habit) -> HabitRecord:
    return HabitRecord(
        id=h.id,
        name=h.name,
        emoji=h.emoji,
        has_sub_tasks=h.has_sub_tasks,
        progress_rule=_ev(h.progress_rule),
        completion_threshold=h.completion_threshold,
        weekly_target=h.weekly_target,
        monthly_target=h.monthly_target,
        archived=h.archived,
    )


def sub_task_record(st: SubTask) -> SubTaskRecord:
    return SubTaskRecord(
        id=st.id,
        habit_id=st.habit_id,
        title=st.title,
        weight=st.weight,
        is_required=st.is_required,
        position=st.position,
        estimated_minutes=st.estimated_minutes,
    )


def execution_sample(row: ExecutionQuality) -> ExecutionSample:
    return ExecutionSample(
        system_id=row.system_id,
        executed_at=row.executed_at,
        completion_rate=row.completion_rate,
        energy_cost=row.energy_cost,
        context_fit=row.context_fit,
        sequence_effectiveness=row.sequence_effectiveness,
        quality=row.quality,
    )


def system_record(s: AdaptiveSystem, adaptations: list[SystemAdaptation]) -> SystemRecord:
    return SystemRecord(
        id=s.id,
        name=s.name,
        system_type=_ev(s.system_type),
        effectiveness_score=s.effectiveness_score,
        friction_coefficient=s.friction_coefficient,
        locked=s.locked,
        auto_adapt=s.auto_adapt,
        adaptations=tuple(
            AdaptationRecord(trigger=a.trigger, change=a.change, impact=a.impact, timestamp=a.created_at)
            for a in adaptations
        ),
    )


def protocol_record(p: RecoveryProtocol) -> ProtocolRecord:
    return ProtocolRecord(
        id=p.id,
        name=p.name,
        trigger=p.trigger,
        effectiveness=p.effectiveness,
        conditions=tuple(ProtocolCondition(**c) for c in json.loads(p.conditions or "[]")),
        actions=tuple(ProtocolAction(**a) for a in json.loads(p.actions or "[]")),
        last_used=p.last_used,
    )


def momentum_snapshot(v: MomentumVector) -> MomentumSnapshot:
    return MomentumSnapshot(
        day=v.day,
        consistency=v.consistency,
        growth=v.growth,
        impact=v.impact,
        learning=v.learning,
        overall=v.overall,
        direction=v.direction,
        strength=v.strength,
    )


# ---------------------------------------------------------------------------
# Per-user queries
# ---------------------------------------------------------------------------

def load_habits(db: Session, user_id: str, include_archived: bool = True) -> list[HabitRecord]:
    q = db.query(Habit).filter(Habit.user_id == user_id)
    if not include_archived:
        q = q.filter(Habit.archived.is_(False))
    return [habit_record(h) for h in q.order_by(Habit.position, Habit.id).all()]


def load_completions(
    db: Session,
    user_id: str,
    start: Optional[date] = None,
    end: Optional[date] = None,
) -> list[CompletionRecord]:
    q = db.query(HabitEntry.habit_id, HabitEntry.day).filter(HabitEntry.user_id == user_id)
    if start is not None:
        q = q.filter(HabitEntry.day >= start)
    if end is not None:
        q = q.filter(HabitEntry.day <= end)
    return [CompletionRecord(habit_id=habit_id, day=day) for habit_id, day in q.all()]


def load_sub_tasks(db: Session, habit_id: int) -> list[SubTaskRecord]:
    rows = (
        db.query(SubTask)
        .filter(SubTask.habit_id == habit_id)
        .order_by(SubTask.position, SubTask.id)
        .all()
    )
    return [sub_task_record(st) for st in rows]


def load_sub_task_logs(db: Session, habit_id: int, user_id: str, day: date) -> list[SubTaskLogRecord]:
    rows = (
        db.query(SubTaskLog.sub_task_id)
        .filter(
            SubTaskLog.habit_id == habit_id,
            SubTaskLog.user_id == user_id,
            SubTaskLog.day == day,
        )
        .all()
    )
    return [SubTaskLogRecord(sub_task_id=sub_task_id, day=day) for (sub_task_id,) in rows]


def load_history(db: Session, user_id: str) -> list[ExecutionSample]:
    """All execution samples for the user, oldest first."""
    rows = (
        db.query(ExecutionQuality)
        .filter(ExecutionQuality.user_id == user_id)
        .order_by(ExecutionQuality.executed_at, ExecutionQuality.id)
        .all()
    )
    return [execution_sample(r) for r in rows]


def load_systems(db: Session, user_id: str) -> list[SystemRecord]:
    systems = (
        db.query(AdaptiveSystem)
        .filter(AdaptiveSystem.user_id == user_id)
        .order_by(AdaptiveSystem.id)
        .all()
    )
    if not systems:
        return []

    adaptations = (
        db.query(SystemAdaptation)
        .filter(SystemAdaptation.system_id.in_([s.id for s in systems]))
        .order_by(SystemAdaptation.created_at, SystemAdaptation.id)
        .all()
    )
    by_system: dict[int, list[SystemAdaptation]] = {}
    for a in adaptations:
        by_system.setdefault(a.system_id, []).append(a)

    return [system_record(s, by_system.get(s.id, [])) for s in systems]


def load_profile(db: Session, user_id: str) -> ProfileRecord:
    row = db.query(CognitiveProfile).filter(CognitiveProfile.user_id == user_id).first()
    if row is None:
        return ProfileRecord()
    return ProfileRecord(
        adaptation=row.adaptation,
        chronotype=row.chronotype,
        work_style=row.work_style,
        energy_patterns=tuple(
            sorted(
                (EnergyPattern(**p) for p in json.loads(row.energy_patterns or "[]")),
                key=lambda p: p.hour,
            )
        ),
    )


def load_protocols(db: Session, user_id: str) -> list[ProtocolRecord]:
    rows = (
        db.query(RecoveryProtocol)
        .filter(RecoveryProtocol.user_id == user_id)
        .order_by(RecoveryProtocol.id)
        .all()
    )
    return [protocol_record(p) for p in rows]


def load_previous_momentum(db: Session, user_id: str, before: date) -> Optional[MomentumSnapshot]:
    row = (
        db.query(MomentumVector)
        .filter(MomentumVector.user_id == user_id, MomentumVector.day < before)
        .order_by(MomentumVector.day.desc())
        .first()
    )
    return momentum_snapshot(row) if row else None
