"""
Intelligence router — the analytics engines over a user's execution history.

GET  /momentum                          — momentum vector, trends, breakpoints, 3-day forecast
GET  /insights                          — insights, cognitive biases, predictions, leverage & friction
GET  /patterns                          — execution patterns, friction, skip risk, optimal timing
GET  /resilience                        — resilience assessment
GET  /resilience/recovery-plan          — recovery plan for the current assessment
POST /resilience/recovery-plan/monitor  — score recovery progress from fresh readings
GET  /adaptations/recommendations       — ranked adaptation recommendations
GET  /execution-quality                 — execution quality metrics, insights, trends
GET  /schedule                          — energy windows and a time slot per system

Every engine degrades to neutral defaults when history is thin; none of
these endpoints fails for lack of data.
"""
from __future__ import annotations

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from habitpulse.db.base import get_db
from habitpulse.routers.deps import get_user_id
from habitpulse.schemas.intelligence import (
    AdaptationResultOut,
    DailyScheduleResponse,
    InsightReportResponse,
    MomentumResponse,
    PatternAnalysisResponse,
    QualityReportResponse,
    RecoveryPlanResponse,
    RecoveryProgressResponse,
    ResilienceResponse,
)
from habitpulse.schemas.system import MonitorRecoveryRequest
from habitpulse.services import intelligence

router = APIRouter(tags=["intelligence"])


@router.get("/momentum", response_model=MomentumResponse, summary="Momentum analysis")
def momentum(
    user_id: str = Depends(get_user_id),
    db: Session = Depends(get_db),
):
    """
    ### Dimensions
    - **consistency**: stability of completion over the last 14 samples (50 below 7 samples)
    - **growth**: energy-cost improvement plus inverse friction (50 below 14 samples)
    - **impact**: effectiveness, quality and sequencing
    - **learning**: adaptation count, context-fit improvement, adaptation impact

    `overall = 0.40 consistency + 0.25 growth + 0.20 impact + 0.15 learning`.

    Today's vector is stored (upsert); trends compare against the latest
    stored vector before today.
    """
    return MomentumResponse.model_validate(intelligence.get_momentum(db, user_id))


@router.get("/insights", response_model=InsightReportResponse, summary="Insights and predictions")
def insights(
    user_id: str = Depends(get_user_id),
    db: Session = Depends(get_db),
):
    return InsightReportResponse.model_validate(intelligence.get_insights(db, user_id))


@router.get("/patterns", response_model=PatternAnalysisResponse, summary="Execution patterns")
def patterns(
    user_id: str = Depends(get_user_id),
    db: Session = Depends(get_db),
):
    """Skip risks are evaluated for the current hour and weekday (UTC)."""
    return PatternAnalysisResponse.model_validate(intelligence.get_patterns(db, user_id))


@router.get("/resilience", response_model=ResilienceResponse, summary="Resilience assessment")
def resilience(
    user_id: str = Depends(get_user_id),
    db: Session = Depends(get_db),
):
    return ResilienceResponse.model_validate(intelligence.get_resilience(db, user_id))


@router.get(
    "/resilience/recovery-plan",
    response_model=RecoveryPlanResponse,
    summary="Recovery plan",
)
def recovery_plan(
    user_id: str = Depends(get_user_id),
    db: Session = Depends(get_db),
):
    """Uses the most effective stored protocol, or a built-in default when there is none."""
    return RecoveryPlanResponse.model_validate(intelligence.get_recovery_plan(db, user_id))


@router.post(
    "/resilience/recovery-plan/monitor",
    response_model=RecoveryProgressResponse,
    summary="Recovery progress",
)
def monitor(
    payload: MonitorRecoveryRequest,
    user_id: str = Depends(get_user_id),
    db: Session = Depends(get_db),
):
    """
    Status is `behind` below 30% weighted progress, `ahead` above 80%,
    `stalled` when recent quality is flat and low, otherwise `on_track`.
    """
    return RecoveryProgressResponse.model_validate(
        intelligence.get_recovery_progress(db, user_id, payload.current)
    )


@router.get(
    "/adaptations/recommendations",
    response_model=list[AdaptationResultOut],
    summary="Adaptation recommendations",
)
def adaptation_recommendations(
    user_id: str = Depends(get_user_id),
    db: Session = Depends(get_db),
):
    return [
        AdaptationResultOut.model_validate(r)
        for r in intelligence.get_adaptation_recommendations(db, user_id)
    ]


@router.get("/execution-quality", response_model=QualityReportResponse, summary="Execution quality")
def execution_quality(
    user_id: str = Depends(get_user_id),
    db: Session = Depends(get_db),
):
    return QualityReportResponse.model_validate(intelligence.get_execution_quality(db, user_id))


@router.get("/schedule", response_model=DailyScheduleResponse, summary="Energy-aware schedule")
def schedule(
    day: Optional[date] = Query(default=None, description="Defaults to today (UTC).", examples=["2026-03-10"]),
    user_id: str = Depends(get_user_id),
    db: Session = Depends(get_db),
):
    """
    Energy windows come from the profile's hourly `energy_patterns`, or from
    the chronotype's built-in windows when there are none. Each system is
    placed in its best-scoring window with up to two alternatives, a 0-100
    confidence and suggested adjustments; most confident first.

    `session_guidance` follows the profile's work style.
    """
    return DailyScheduleResponse.model_validate(intelligence.get_schedule(db, user_id, day))
