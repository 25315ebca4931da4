"""
Analytics orchestration: load a user's execution history, systems,
profile and protocols, run the engines, and persist what they produce.

Writes
------
  momentum       one momentum_vectors row per (user, day), upserted; the
                 latest row before today is the trend baseline
  adaptations    applying a recommendation appends a system_adaptations row;
                 the system's own scores are left to the user
  recovery       activating a protocol stamps its last_used

Everything else is read-only.
"""
from __future__ import annotations

import json
from datetime import date, datetime, timezone
from typing import Optional

from sqlalchemy.orm import Session

from habitpulse.core.errors import NoAdaptationError
from habitpulse.core.logging import get_logger
from habitpulse.models import MomentumVector, SystemAdaptation
from habitpulse.services import systems as system_store
from habitpulse.services.adaptation import AdaptationResult, recommend_adaptations
from habitpulse.services.execution_quality import QualityReport, track_execution_quality
from habitpulse.services.insights import InsightReport, generate_insights
from habitpulse.services.loaders import (
    load_history,
    load_previous_momentum,
    load_profile,
    load_protocols,
    load_systems,
    protocol_record,
)
from habitpulse.services.momentum import MomentumReport, calculate_momentum, current_momentum
from habitpulse.services.patterns import PatternAnalysis, analyze_patterns
from habitpulse.services.resilience import (
    RecoveryPlan,
    RecoveryProgress,
    ResilienceAssessment,
    activate_recovery,
    assess_resilience,
    generate_recovery_plan,
    monitor_recovery,
)
from habitpulse.services.scheduler import DailySchedule, generate_schedule

log = get_logger(__name__)


def _now() -> datetime:
    return datetime.now(tz=timezone.utc)


# ---------------------------------------------------------------------------
# Momentum
# ---------------------------------------------------------------------------

def get_momentum(db: Session, user_id: str, today: Optional[date] = None) -> MomentumReport:
    today = today or _now().date()
    report = calculate_momentum(
        load_history(db, user_id),
        load_systems(db, user_id),
        load_previous_momentum(db, user_id, today),
        today,
    )

    m = report.current
    forecast = json.dumps([
        {
            "day": str(p.day),
            "predicted_momentum": p.predicted_momentum,
            "confidence": p.confidence,
            "factors": p.factors,
        }
        for p in report.forecast
    ])
    existing = (
        db.query(MomentumVector)
        .filter(MomentumVector.user_id == user_id, MomentumVector.day == today)
        .first()
    )
    values = {
        "consistency": m.consistency,
        "growth": m.growth,
        "impact": m.impact,
        "learning": m.learning,
        "overall": m.overall,
        "direction": m.direction,
        "strength": m.strength,
        "forecast": forecast,
    }
    if existing:
        for key, value in values.items():
            setattr(existing, key, value)
    else:
        db.add(MomentumVector(user_id=user_id, day=today, **values))
    db.commit()

    log.info("momentum_snapshot_upserted", user_id=user_id, day=str(today), overall=m.overall, direction=m.direction)
    return report


# ---------------------------------------------------------------------------
# Read-only analyses
# ---------------------------------------------------------------------------

def get_insights(db: Session, user_id: str) -> InsightReport:
    history = load_history(db, user_id)
    systems = load_systems(db, user_id)
    return generate_insights(
        history,
        systems,
        load_profile(db, user_id),
        current_momentum(history, systems),
    )


def get_patterns(db: Session, user_id: str, now: Optional[datetime] = None) -> PatternAnalysis:
    return analyze_patterns(
        load_history(db, user_id),
        load_systems(db, user_id),
        load_profile(db, user_id),
        now or _now(),
    )


def get_resilience(db: Session, user_id: str) -> ResilienceAssessment:
    return assess_resilience(
        load_systems(db, user_id),
        load_history(db, user_id),
        load_protocols(db, user_id),
    )


def get_recovery_plan(db: Session, user_id: str, today: Optional[date] = None) -> RecoveryPlan:
    protocols = load_protocols(db, user_id)
    assessment = assess_resilience(load_systems(db, user_id), load_history(db, user_id), protocols)
    return generate_recovery_plan(assessment, protocols, today or _now().date())


def get_recovery_progress(db: Session, user_id: str, current: dict[str, float]) -> RecoveryProgress:
    """Score today's recovery plan against the caller's fresh metric readings."""
    return monitor_recovery(get_recovery_plan(db, user_id), current, load_history(db, user_id))


def get_execution_quality(db: Session, user_id: str) -> QualityReport:
    return track_execution_quality(load_history(db, user_id), load_systems(db, user_id))


def get_schedule(db: Session, user_id: str, day: Optional[date] = None) -> DailySchedule:
    return generate_schedule(
        load_profile(db, user_id),
        load_systems(db, user_id),
        load_history(db, user_id),
        day or _now().date(),
    )


def get_adaptation_recommendations(
    db: Session,
    user_id: str,
    now: Optional[datetime] = None,
) -> list[AdaptationResult]:
    return recommend_adaptations(
        load_systems(db, user_id),
        load_history(db, user_id),
        now or _now(),
    )


# ---------------------------------------------------------------------------
# Writes
# ---------------------------------------------------------------------------

def activate_protocol(
    db: Session,
    user_id: str,
    protocol_id: int,
    trigger_condition: str,
    now: Optional[datetime] = None,
) -> RecoveryPlan:
    now = now or _now()
    row = system_store.get_protocol(db, user_id, protocol_id)
    plan = activate_recovery(protocol_record(row), trigger_condition, now)

    row.last_used = plan.protocol.last_used
    db.commit()
    log.info("recovery_activated", protocol_id=protocol_id, user_id=user_id, trigger=trigger_condition)
    return plan


def apply_adaptation(
    db: Session,
    user_id: str,
    system_id: int,
    strategy_id: Optional[str] = None,
    now: Optional[datetime] = None,
) -> AdaptationResult:
    """
    Apply the best current recommendation for one system (or the named
    strategy's). Appends to the adaptation history; earlier rows are kept.
    """
    system_store.get_system(db, user_id, system_id)
    results = [
        r for r in get_adaptation_recommendations(db, user_id, now)
        if r.system_id == system_id and (strategy_id is None or r.strategy_id == strategy_id)
    ]
    if not results:
        raise NoAdaptationError(system_id, strategy_id)

    result = results[0]
    db.add(SystemAdaptation(
        system_id=system_id,
        trigger=result.adaptation.trigger,
        change=result.adaptation.change,
        impact=result.adaptation.impact,
        created_at=result.adaptation.timestamp,
    ))
    db.commit()

    log.info(
        "adaptation_applied",
        system_id=system_id,
        strategy=result.strategy_id,
        action=result.action_type,
        effectiveness=result.effectiveness,
    )
    return result
