"""
Streak & Period Aggregator — rolls daily completions up over time.

Current streak
--------------
Walk backward from `today`, one calendar day at a time. A day qualifies
when EVERY non-archived habit has a completion on it. The walk stops at
the first non-qualifying day, except `today` itself: a day in progress is
neither counted nor allowed to break the streak.

Rollups
-------
Weekly windows are ISO weeks (Monday start); monthly windows are calendar
months. Per habit: completed / target * 100, rounded half-up. The
aggregate divides summed completions by summed targets. Percentages are
returned raw and may exceed 100; capping is a presentation concern.

Only completions of the habits passed in (non-archived) are counted.

Public API
----------
current_streak(habits, completions, today)            -> int
week_bounds(day)                                      -> (date, date)
month_bounds(year, month)                             -> (date, date)
weekly_rollup(habits, completions, week_of)           -> PeriodRollup
monthly_rollup(habits, completions, year, month)      -> PeriodRollup
best_habit(rollup)                                    -> HabitPeriodProgress | None
top_habits(rollup)                                    -> list[HabitPeriodProgress]
daily_breakdown(habits, completions, start, end)      -> list[DayProgress]
block_breakdown(days)                                 -> list[BlockProgress]
global_progress(habits, completions, today)           -> GlobalProgress
stats_summary(habits, completions, today, year, month) -> StatsSummary
"""
from __future__ import annotations

import calendar
from collections import defaultdict
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Optional

from habitpulse.services.numeric import round_half_up
from habitpulse.services.records import CompletionRecord, HabitRecord


DEFAULT_WEEKLY_TARGET = 7
DEFAULT_MONTHLY_TARGET = 30
DEFAULT_LOOKBACK_DAYS = 3650
_BLOCK_DAYS = 7
_MAX_BLOCKS = 5


# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------

@dataclass
class HabitPeriodProgress:
    habit_id: int
    name: str
    emoji: str
    completed: int
    target: int
    percentage: int
    rate: float  # unrounded completed / target, used for ranking

    @property
    def ratio(self) -> str:
        return f"{self.completed}/{self.target}"


@dataclass
class PeriodRollup:
    start: date
    end: date
    habits: list[HabitPeriodProgress]
    completed: int
    target: int
    percentage: int

    @property
    def left(self) -> int:
        return max(0, self.target - self.completed)


@dataclass
class DayProgress:
    day: date
    completed: int
    total: int
    percentage: int


@dataclass
class BlockProgress:
    block: int  # 1-based
    completed: int
    total: int
    percentage: int


@dataclass
class GlobalProgress:
    total_habits: int
    completed_today: int
    completed_this_week: int
    completed_this_month: int
    weekly_target: int
    monthly_target: int
    weekly_percentage: int
    monthly_percentage: int
    top_habits: list[HabitPeriodProgress]


@dataclass
class StatsSummary:
    total_habits: int
    current_streak: int
    completion_percentage: int
    best_habit: Optional[HabitPeriodProgress]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _active(habits: list[HabitRecord]) -> list[HabitRecord]:
    return [h for h in habits if not h.archived]


def _by_day(completions: list[CompletionRecord]) -> dict[date, set[int]]:
    index: dict[date, set[int]] = defaultdict(set)
    for c in completions:
        index[c.day].add(c.habit_id)
    return index


def _percent(part: int, whole: int) -> int:
    return round_half_up(part * 100 / whole) if whole > 0 else 0


def _count_in_window(
    completions: list[CompletionRecord],
    habit_ids: set[int],
    start: date,
    end: date,
) -> dict[int, int]:
    seen: set[tuple[int, date]] = set()
    counts: dict[int, int] = defaultdict(int)
    for c in completions:
        if c.habit_id in habit_ids and start <= c.day <= end and (c.habit_id, c.day) not in seen:
            seen.add((c.habit_id, c.day))
            counts[c.habit_id] += 1
    return counts


def week_bounds(day: date) -> tuple[date, date]:
    """Monday and Sunday of the ISO week containing `day`."""
    start = day - timedelta(days=day.weekday())
    return start, start + timedelta(days=6)


def month_bounds(year: int, month: int) -> tuple[date, date]:
    last = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last)


# ---------------------------------------------------------------------------
# Streak
# ---------------------------------------------------------------------------

def current_streak(
    habits: list[HabitRecord],
    completions: list[CompletionRecord],
    today: date,
    max_days: int = DEFAULT_LOOKBACK_DAYS,
) -> int:
    active_ids = {h.id for h in _active(habits)}
    if not active_ids:
        return 0

    done_by_day = _by_day(completions)
    streak = 0
    cursor = today
    for _ in range(max_days):
        if active_ids <= done_by_day.get(cursor, set()):
            streak += 1
        elif cursor != today:
            break
        cursor -= timedelta(days=1)
    return streak


# ---------------------------------------------------------------------------
# Period rollups
# ---------------------------------------------------------------------------

def _rollup(
    habits: list[HabitRecord],
    completions: list[CompletionRecord],
    start: date,
    end: date,
    weekly: bool,
) -> PeriodRollup:
    active = _active(habits)
    counts = _count_in_window(completions, {h.id for h in active}, start, end)

    rows: list[HabitPeriodProgress] = []
    for h in active:
        if weekly:
            target = h.weekly_target or DEFAULT_WEEKLY_TARGET
        else:
            target = h.monthly_target or DEFAULT_MONTHLY_TARGET
        done = counts.get(h.id, 0)
        rows.append(HabitPeriodProgress(
            habit_id=h.id,
            name=h.name,
            emoji=h.emoji,
            completed=done,
            target=target,
            percentage=_percent(done, target),
            rate=done / target if target > 0 else 0.0,
        ))

    completed = sum(r.completed for r in rows)
    target = sum(r.target for r in rows)
    return PeriodRollup(
        start=start,
        end=end,
        habits=rows,
        completed=completed,
        target=target,
        percentage=_percent(completed, target),
    )


def weekly_rollup(
    habits: list[HabitRecord],
    completions: list[CompletionRecord],
    week_of: date,
) -> PeriodRollup:
    """Rollup for the ISO week containing `week_of`."""
    start, end = week_bounds(week_of)
    return _rollup(habits, completions, start, end, weekly=True)


def monthly_rollup(
    habits: list[HabitRecord],
    completions: list[CompletionRecord],
    year: int,
    month: int,
) -> PeriodRollup:
    start, end = month_bounds(year, month)
    return _rollup(habits, completions, start, end, weekly=False)


def top_habits(rollup: PeriodRollup) -> list[HabitPeriodProgress]:
    """Habits with at least one completion, best rate first; ties keep list order."""
    return sorted(
        (r for r in rollup.habits if r.completed > 0),
        key=lambda r: r.rate,
        reverse=True,
    )


def best_habit(rollup: PeriodRollup) -> Optional[HabitPeriodProgress]:
    ranked = top_habits(rollup)
    return ranked[0] if ranked else None


# ---------------------------------------------------------------------------
# Breakdowns
# ---------------------------------------------------------------------------

def daily_breakdown(
    habits: list[HabitRecord],
    completions: list[CompletionRecord],
    start: date,
    end: date,
) -> list[DayProgress]:
    active_ids = {h.id for h in _active(habits)}
    done_by_day = _by_day(completions)
    total = len(active_ids)

    days: list[DayProgress] = []
    d = start
    while d <= end:
        done = len(done_by_day.get(d, set()) & active_ids)
        days.append(DayProgress(day=d, completed=done, total=total, percentage=_percent(done, total)))
        d += timedelta(days=1)
    return days


def block_breakdown(days: list[DayProgress]) -> list[BlockProgress]:
    """Consecutive 7-day blocks from the first day (at most five)."""
    blocks: list[BlockProgress] = []
    for i in range(_MAX_BLOCKS):
        chunk = days[i * _BLOCK_DAYS:(i + 1) * _BLOCK_DAYS]
        if not chunk:
            break
        completed = sum(d.completed for d in chunk)
        total = sum(d.total for d in chunk)
        blocks.append(BlockProgress(
            block=i + 1,
            completed=completed,
            total=total,
            percentage=_percent(completed, total),
        ))
    return blocks


# ---------------------------------------------------------------------------
# Dashboards
# ---------------------------------------------------------------------------

def global_progress(
    habits: list[HabitRecord],
    completions: list[CompletionRecord],
    today: date,
) -> GlobalProgress:
    active = _active(habits)
    active_ids = {h.id for h in active}
    week = weekly_rollup(habits, completions, today)
    month = monthly_rollup(habits, completions, today.year, today.month)
    completed_today = sum(_count_in_window(completions, active_ids, today, today).values())

    return GlobalProgress(
        total_habits=len(active),
        completed_today=completed_today,
        completed_this_week=week.completed,
        completed_this_month=month.completed,
        weekly_target=week.target,
        monthly_target=month.target,
        weekly_percentage=week.percentage,
        monthly_percentage=month.percentage,
        top_habits=top_habits(month),
    )


def stats_summary(
    habits: list[HabitRecord],
    completions: list[CompletionRecord],
    today: date,
    year: int,
    month: int,
    max_days: int = DEFAULT_LOOKBACK_DAYS,
) -> StatsSummary:
    """
    Headline numbers for a month. The completion percentage compares
    completions against possible completions: active habits times the days
    of the month that have started (none for a future month).
    """
    active = _active(habits)
    start, end = month_bounds(year, month)
    elapsed_end = min(end, today)
    elapsed_days = (elapsed_end - start).days + 1 if elapsed_end >= start else 0

    counts = _count_in_window(completions, {h.id for h in active}, start, elapsed_end)
    possible = len(active) * elapsed_days

    return StatsSummary(
        total_habits=len(active),
        current_streak=current_streak(habits, completions, today, max_days=max_days),
        completion_percentage=_percent(sum(counts.values()), possible),
        best_habit=best_habit(monthly_rollup(habits, completions, year, month)),
    )
