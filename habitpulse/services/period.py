"""
Period rollups, dashboards and the weekly/monthly caches.

Loads fully materialised habit and completion lists for a user, hands
them to `habitpulse.services.streaks`, and upserts weekly_progress /
monthly_overviews rows for the periods it computes. Stats, global
progress and analytics are read-only.
"""
from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Optional

from sqlalchemy.orm import Session

from habitpulse.core.config import settings
from habitpulse.core.logging import get_logger
from habitpulse.models import MonthlyOverview, WeeklyProgress
from habitpulse.services.loaders import load_completions, load_habits
from habitpulse.services.streaks import (
    BlockProgress,
    DayProgress,
    GlobalProgress,
    PeriodRollup,
    StatsSummary,
    block_breakdown,
    daily_breakdown,
    global_progress,
    month_bounds,
    monthly_rollup,
    stats_summary,
    week_bounds,
    weekly_rollup,
)

log = get_logger(__name__)


def _today() -> date:
    return datetime.now(tz=timezone.utc).date()


def _year_month(year: Optional[int], month: Optional[int]) -> tuple[int, int]:
    today = _today()
    return year or today.year, month or today.month


# ---------------------------------------------------------------------------
# Cached rollups
# ---------------------------------------------------------------------------

def weekly_progress(db: Session, user_id: str, week_of: Optional[date] = None) -> PeriodRollup:
    """Rollup for the ISO week containing `week_of`; upserts one row per habit."""
    start, end = week_bounds(week_of or _today())
    rollup = weekly_rollup(
        load_habits(db, user_id),
        load_completions(db, user_id, start, end),
        start,
    )

    for row in rollup.habits:
        existing = (
            db.query(WeeklyProgress)
            .filter(
                WeeklyProgress.user_id == user_id,
                WeeklyProgress.habit_id == row.habit_id,
                WeeklyProgress.week_start == start,
            )
            .first()
        )
        if existing:
            existing.completed = row.completed
            existing.target = row.target
            existing.percentage = row.percentage
        else:
            db.add(WeeklyProgress(
                user_id=user_id,
                habit_id=row.habit_id,
                week_start=start,
                week_end=end,
                completed=row.completed,
                target=row.target,
                percentage=row.percentage,
            ))
    db.commit()

    log.info("weekly_progress_upserted", user_id=user_id, week_start=str(start), habits=len(rollup.habits))
    return rollup


def monthly_overview(
    db: Session,
    user_id: str,
    year: Optional[int] = None,
    month: Optional[int] = None,
) -> PeriodRollup:
    year, month = _year_month(year, month)
    start, end = month_bounds(year, month)
    rollup = monthly_rollup(
        load_habits(db, user_id),
        load_completions(db, user_id, start, end),
        year,
        month,
    )

    existing = (
        db.query(MonthlyOverview)
        .filter(
            MonthlyOverview.user_id == user_id,
            MonthlyOverview.year == year,
            MonthlyOverview.month == month,
        )
        .first()
    )
    if existing:
        existing.total_completed = rollup.completed
        existing.total_target = rollup.target
        existing.total_left = rollup.left
        existing.percentage = rollup.percentage
    else:
        db.add(MonthlyOverview(
            user_id=user_id,
            year=year,
            month=month,
            total_completed=rollup.completed,
            total_target=rollup.target,
            total_left=rollup.left,
            percentage=rollup.percentage,
        ))
    db.commit()

    log.info("monthly_overview_upserted", user_id=user_id, year=year, month=month, percentage=rollup.percentage)
    return rollup


# ---------------------------------------------------------------------------
# Read-only dashboards
# ---------------------------------------------------------------------------

def get_stats(
    db: Session,
    user_id: str,
    year: Optional[int] = None,
    month: Optional[int] = None,
    today: Optional[date] = None,
) -> StatsSummary:
    year, month = _year_month(year, month)
    return stats_summary(
        load_habits(db, user_id),
        load_completions(db, user_id),
        today or _today(),
        year,
        month,
        max_days=settings.STREAK_LOOKBACK_DAYS,
    )


def get_global_progress(db: Session, user_id: str, today: Optional[date] = None) -> GlobalProgress:
    today = today or _today()
    week_start, week_end = week_bounds(today)
    month_start, month_end = month_bounds(today.year, today.month)
    return global_progress(
        load_habits(db, user_id),
        load_completions(db, user_id, min(week_start, month_start), max(week_end, month_end)),
        today,
    )


def get_analytics(
    db: Session,
    user_id: str,
    year: Optional[int] = None,
    month: Optional[int] = None,
) -> tuple[list[DayProgress], list[BlockProgress]]:
    """Per-day completion for a month and its 7-day block breakdown."""
    year, month = _year_month(year, month)
    start, end = month_bounds(year, month)
    days = daily_breakdown(
        load_habits(db, user_id),
        load_completions(db, user_id, start, end),
        start,
        end,
    )
    return days, block_breakdown(days)
