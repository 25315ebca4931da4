"""
Progress router — rollups, stats and dashboards.

GET /progress/weekly   — ISO-week rollup (upserts weekly_progress)
GET /progress/monthly  — calendar-month rollup (upserts monthly_overviews)
GET /progress/global   — today / this week / this month at a glance
GET /stats             — habit count, current streak, month completion, best habit
GET /analytics         — per-day and 7-day-block completion for a month
"""
from __future__ import annotations

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from habitpulse.db.base import get_db
from habitpulse.routers.deps import get_user_id
from habitpulse.schemas.progress import (
    AnalyticsResponse,
    BlockProgressOut,
    DayProgressOut,
    GlobalProgressResponse,
    PeriodRollupResponse,
    StatsResponse,
)
from habitpulse.services import period

router = APIRouter(tags=["progress"])


@router.get("/progress/weekly", response_model=PeriodRollupResponse, summary="Weekly rollup")
def weekly(
    week_of: Optional[date] = Query(
        default=None,
        description="Any day inside the ISO week (Monday start). Defaults to today (UTC).",
        examples=["2026-02-18"],
    ),
    user_id: str = Depends(get_user_id),
    db: Session = Depends(get_db),
):
    """
    Per habit: completions in the week against `weekly_target`.
    Percentages are raw and can exceed 100.
    """
    return PeriodRollupResponse.model_validate(period.weekly_progress(db, user_id, week_of))


@router.get("/progress/monthly", response_model=PeriodRollupResponse, summary="Monthly rollup")
def monthly(
    year: Optional[int] = Query(default=None, ge=1970, le=9999, description="Defaults to the current year (UTC)."),
    month: Optional[int] = Query(default=None, ge=1, le=12, description="Defaults to the current month (UTC)."),
    user_id: str = Depends(get_user_id),
    db: Session = Depends(get_db),
):
    """`left` is `max(0, target - completed)` across all active habits."""
    return PeriodRollupResponse.model_validate(period.monthly_overview(db, user_id, year, month))


@router.get("/progress/global", response_model=GlobalProgressResponse, summary="Global progress")
def global_progress(
    user_id: str = Depends(get_user_id),
    db: Session = Depends(get_db),
):
    return GlobalProgressResponse.model_validate(period.get_global_progress(db, user_id))


@router.get("/stats", response_model=StatsResponse, summary="Headline stats")
def stats(
    year: Optional[int] = Query(default=None, ge=1970, le=9999, description="Defaults to the current year (UTC)."),
    month: Optional[int] = Query(default=None, ge=1, le=12, description="Defaults to the current month (UTC)."),
    user_id: str = Depends(get_user_id),
    db: Session = Depends(get_db),
):
    """
    - **current_streak**: consecutive days on which every active habit was
      completed. Today counts only once fully complete and never breaks it.
    - **completion_percentage**: completions / (active habits × elapsed days of the month).
    - **best_habit**: highest completion rate this month; ties keep habit order.
    """
    return StatsResponse.model_validate(period.get_stats(db, user_id, year, month))


@router.get("/analytics", response_model=AnalyticsResponse, summary="Month analytics")
def analytics(
    year: Optional[int] = Query(default=None, ge=1970, le=9999, description="Defaults to the current year (UTC)."),
    month: Optional[int] = Query(default=None, ge=1, le=12, description="Defaults to the current month (UTC)."),
    user_id: str = Depends(get_user_id),
    db: Session = Depends(get_db),
):
    days, blocks = period.get_analytics(db, user_id, year, month)
    first = days[0].day
    return AnalyticsResponse(
        year=first.year,
        month=first.month,
        days=[DayProgressOut.model_validate(d) for d in days],
        weeks=[BlockProgressOut.model_validate(b) for b in blocks],
    )
