"""
Tests for the streak & period aggregator.

Anchor dates: 2026-03-11 is a Wednesday; its ISO week runs 03-09..03-15.
"""
from __future__ import annotations

from datetime import date, timedelta

from habitpulse.services.records import CompletionRecord, HabitRecord
from habitpulse.services.streaks import (
    best_habit,
    block_breakdown,
    current_streak,
    daily_breakdown,
    global_progress,
    month_bounds,
    monthly_rollup,
    stats_summary,
    top_habits,
    week_bounds,
    weekly_rollup,
)

TODAY = date(2026, 3, 11)

A = HabitRecord(id=1, name="Read", emoji="📚")
B = HabitRecord(id=2, name="Run", emoji="🏃")


def _done(habit: HabitRecord, *days: date) -> list[CompletionRecord]:
    return [CompletionRecord(habit_id=habit.id, day=d) for d in days]


def _ago(n: int) -> date:
    return TODAY - timedelta(days=n)


# ---------------------------------------------------------------------------
# Calendar windows
# ---------------------------------------------------------------------------

class TestBounds:
    def test_week_is_monday_to_sunday(self):
        assert week_bounds(TODAY) == (date(2026, 3, 9), date(2026, 3, 15))
        assert week_bounds(date(2026, 3, 15)) == (date(2026, 3, 9), date(2026, 3, 15))
        assert week_bounds(date(2026, 3, 16)) == (date(2026, 3, 16), date(2026, 3, 22))

    def test_month_bounds_handle_leap_years(self):
        assert month_bounds(2028, 2) == (date(2028, 2, 1), date(2028, 2, 29))
        assert month_bounds(2026, 2) == (date(2026, 2, 1), date(2026, 2, 28))


# ---------------------------------------------------------------------------
# Current streak
# ---------------------------------------------------------------------------

class TestCurrentStreak:
    def test_three_full_days_then_gap(self):
        completions = _done(A, TODAY, _ago(1), _ago(2)) + _done(B, TODAY, _ago(1), _ago(2))
        assert current_streak([A, B], completions, TODAY) == 3

    def test_empty_today_does_not_break_streak(self):
        completions = _done(A, _ago(1), _ago(2)) + _done(B, _ago(1), _ago(2))
        assert current_streak([A, B], completions, TODAY) == 2

    def test_partial_today_is_skipped(self):
        completions = _done(A, TODAY, _ago(1)) + _done(B, _ago(1))
        assert current_streak([A, B], completions, TODAY) == 1

    def test_partial_yesterday_breaks(self):
        completions = _done(A, _ago(1), _ago(2)) + _done(B, _ago(2))
        assert current_streak([A, B], completions, TODAY) == 0

    def test_archived_habits_are_ignored(self):
        archived = HabitRecord(id=3, name="Old", archived=True)
        completions = _done(A, _ago(1), _ago(2))
        assert current_streak([A, archived], completions, TODAY) == 2

    def test_no_active_habits_is_zero(self):
        assert current_streak([], [], TODAY) == 0
        archived = HabitRecord(id=3, name="Old", archived=True)
        assert current_streak([archived], _done(archived, _ago(1)), TODAY) == 0

    def test_walk_is_bounded(self):
        completions = _done(A, *(_ago(i) for i in range(30)))
        assert current_streak([A], completions, TODAY, max_days=5) == 5


# ---------------------------------------------------------------------------
# Rollups
# ---------------------------------------------------------------------------

class TestWeeklyRollup:
    def test_per_habit_and_aggregate(self):
        b = HabitRecord(id=2, name="Run", weekly_target=3)
        week = [date(2026, 3, 9) + timedelta(days=i) for i in range(7)]
        completions = _done(A, *week[:5]) + _done(b, *week[:4])

        rollup = weekly_rollup([A, b], completions, TODAY)
        by_id = {r.habit_id: r for r in rollup.habits}

        assert by_id[1].completed == 5
        assert by_id[1].percentage == 71
        assert by_id[1].ratio == "5/7"
        # Raw ratio, never capped
        assert by_id[2].percentage == 133
        assert rollup.completed == 9
        assert rollup.target == 10
        assert rollup.percentage == 90
        assert rollup.left == 1

    def test_window_and_duplicates(self):
        completions = _done(A, date(2026, 3, 9), date(2026, 3, 9), date(2026, 3, 8), date(2026, 3, 16))
        rollup = weekly_rollup([A], completions, TODAY)
        assert rollup.habits[0].completed == 1

    def test_zero_target_falls_back_to_default(self):
        h = HabitRecord(id=5, name="Zero", weekly_target=0)
        rollup = weekly_rollup([h], _done(h, date(2026, 3, 10)), TODAY)
        assert rollup.habits[0].target == 7

    def test_archived_habit_excluded(self):
        archived = HabitRecord(id=3, name="Old", archived=True)
        rollup = weekly_rollup([A, archived], _done(archived, TODAY), TODAY)
        assert [r.habit_id for r in rollup.habits] == [1]
        assert rollup.completed == 0


class TestMonthlyRollup:
    def test_left_and_percentage(self):
        days = [date(2026, 3, d) for d in range(1, 16)]
        rollup = monthly_rollup([A, B], _done(A, *days) + _done(B, *days[:9]), 2026, 3)
        assert rollup.start == date(2026, 3, 1)
        assert rollup.end == date(2026, 3, 31)
        assert rollup.completed == 24
        assert rollup.target == 60
        assert rollup.percentage == 40
        assert rollup.left == 36

    def test_top_habits_stable_on_ties(self):
        c = HabitRecord(id=3, name="Idle")
        completions = _done(B, date(2026, 3, 2), date(2026, 3, 3)) + _done(A, date(2026, 3, 4), date(2026, 3, 5))
        rollup = monthly_rollup([A, B, c], completions, 2026, 3)
        assert [r.habit_id for r in top_habits(rollup)] == [1, 2]
        assert best_habit(rollup).habit_id == 1

    def test_best_habit_none_without_completions(self):
        assert best_habit(monthly_rollup([A, B], [], 2026, 3)) is None


# ---------------------------------------------------------------------------
# Breakdowns and dashboards
# ---------------------------------------------------------------------------

class TestBreakdowns:
    def test_daily_and_block_breakdown(self):
        start, end = month_bounds(2026, 3)
        completions = _done(A, date(2026, 3, 1), date(2026, 3, 2)) + _done(B, date(2026, 3, 1))
        days = daily_breakdown([A, B], completions, start, end)

        assert len(days) == 31
        assert days[0].completed == 2 and days[0].percentage == 100
        assert days[1].completed == 1 and days[1].percentage == 50
        assert days[2].percentage == 0

        blocks = block_breakdown(days)
        assert [b.block for b in blocks] == [1, 2, 3, 4, 5]
        assert blocks[0].completed == 3
        assert blocks[0].total == 14
        assert blocks[0].percentage == 21
        assert blocks[4].total == 6  # 29..31

    def test_no_habits_yields_zero_percent(self):
        days = daily_breakdown([], [], TODAY, TODAY)
        assert days[0].total == 0
        assert days[0].percentage == 0


class TestDashboards:
    def test_global_progress(self):
        completions = (
            _done(A, TODAY, date(2026, 3, 9), date(2026, 3, 2))
            + _done(B, date(2026, 3, 10))
        )
        g = global_progress([A, B], completions, TODAY)
        assert g.total_habits == 2
        assert g.completed_today == 1
        assert g.completed_this_week == 3
        assert g.completed_this_month == 4
        assert g.weekly_target == 14
        assert g.monthly_target == 60
        assert g.weekly_percentage == 21
        assert g.monthly_percentage == 7
        assert [h.habit_id for h in g.top_habits] == [1, 2]

    def test_stats_summary_uses_elapsed_days(self):
        days = [date(2026, 3, d) for d in range(1, 12)]
        s = stats_summary([A, B], _done(A, *days), TODAY, 2026, 3)
        assert s.total_habits == 2
        # 11 completions out of 2 habits x 11 elapsed days
        assert s.completion_percentage == 50
        assert s.current_streak == 0
        assert s.best_habit.habit_id == 1

    def test_stats_summary_future_month(self):
        s = stats_summary([A], _done(A, TODAY), TODAY, 2026, 5)
        assert s.completion_percentage == 0
        assert s.best_habit is None

    def test_stats_summary_past_month_counts_every_day(self):
        days = [date(2026, 2, d) for d in range(1, 15)]
        s = stats_summary([A], _done(A, *days), TODAY, 2026, 2)
        assert s.completion_percentage == 50
