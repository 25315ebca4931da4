"""
Completion Store writes and the HabitProgress cache.

Canonical representation: a habit_entries / sub_task_logs row exists iff
the habit / sub-task is completed that day. Unchecking deletes the row;
no `completed = false` rows are ever written.

The habit_progress cache covers sub-task habits only. `refresh_habit_progress`
is the single writer of both the cache row and the derived habit_entries
row, so "habit completed on day D" stays one fact regardless of habit shape.
Plain habits never touch the cache: their entry is the answer.

Writers flush; the public entry points commit once at the end.

Public API
----------
refresh_habit_progress(db, habit, day)                  -> ProgressCalculation  (flushes only)
get_habit_progress(db, habit, day)                      -> ProgressCalculation  (no writes)
read_habit_progress(db, habit, day)                     -> ProgressCalculation  (cache first, no writes)
toggle_entry(db, user_id, habit_id, day, notes)         -> bool   (True = now completed)
toggle_sub_task(db, user_id, sub_task_id, day, ...)     -> tuple[bool, Habit, ProgressCalculation]
list_entries(db, user_id, start, end)                   -> list[HabitEntry]
"""
from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Optional

from sqlalchemy.orm import Session

from habitpulse.core.errors import (
    ArchivedHabitError,
    DerivedCompletionError,
    HabitNotFoundError,
    HabitShapeError,
    SubTaskNotFoundError,
)
from habitpulse.core.logging import get_logger
from habitpulse.models import Habit, HabitEntry, HabitProgress, SubTask, SubTaskLog
from habitpulse.services.loaders import load_sub_task_logs, load_sub_tasks
from habitpulse.services.progress_rules import (
    ProgressCalculation,
    evaluate_plain_habit,
    evaluate_progress,
    parse_rule,
    sub_task_breakdown,
)

log = get_logger(__name__)


def _today() -> date:
    return datetime.now(tz=timezone.utc).date()


def _ev(v) -> str:
    return v.value if hasattr(v, "value") else str(v)


def _entry(db: Session, habit: Habit, day: date) -> Optional[HabitEntry]:
    return (
        db.query(HabitEntry)
        .filter(
            HabitEntry.habit_id == habit.id,
            HabitEntry.user_id == habit.user_id,
            HabitEntry.day == day,
        )
        .first()
    )


def _owned_habit(db: Session, user_id: str, habit_id: int) -> Habit:
    habit = db.query(Habit).filter(Habit.id == habit_id, Habit.user_id == user_id).first()
    if habit is None:
        raise HabitNotFoundError(habit_id)
    return habit


# ---------------------------------------------------------------------------
# Progress evaluation
# ---------------------------------------------------------------------------

def get_habit_progress(db: Session, habit: Habit, day: date) -> ProgressCalculation:
    """Evaluate one habit for one day from the Completion Store. Read-only."""
    if not habit.has_sub_tasks:
        return evaluate_plain_habit(_entry(db, habit, day) is not None)

    rule = parse_rule(_ev(habit.progress_rule), habit.completion_threshold)
    return evaluate_progress(
        rule,
        load_sub_tasks(db, habit.id),
        load_sub_task_logs(db, habit.id, habit.user_id, day),
        day,
    )


def _cached(db: Session, habit: Habit, day: date) -> Optional[HabitProgress]:
    return (
        db.query(HabitProgress)
        .filter(HabitProgress.habit_id == habit.id, HabitProgress.day == day)
        .first()
    )


def read_habit_progress(db: Session, habit: Habit, day: date) -> ProgressCalculation:
    """
    Serve (habit, day) from its habit_progress row while the row still
    agrees with the current sub-tasks and logs; otherwise evaluate without
    writing. Plain habits read their entry.
    """
    if not habit.has_sub_tasks:
        return get_habit_progress(db, habit, day)
    row = _cached(db, habit, day)
    if row is None:
        return get_habit_progress(db, habit, day)

    sub_tasks = load_sub_tasks(db, habit.id)
    logs = load_sub_task_logs(db, habit.id, habit.user_id, day)
    breakdown = sub_task_breakdown(sub_tasks, logs, day)
    done = [b for b in breakdown if b.completed]

    observed = (
        _ev(habit.progress_rule),
        len(breakdown),
        len(done),
        sum(b.weight for b in breakdown),
        sum(b.weight for b in done),
    )
    cached = (row.progress_rule, row.total_sub_tasks, row.completed_sub_tasks, row.total_points, row.earned_points)
    if cached != observed:
        log.warning("habit_progress_cache_stale", habit_id=habit.id, day=str(day))
        rule = parse_rule(_ev(habit.progress_rule), habit.completion_threshold)
        return evaluate_progress(rule, sub_tasks, logs, day)

    return ProgressCalculation(
        completion_percentage=row.completion_percentage,
        is_completed=row.is_completed,
        total_sub_tasks=row.total_sub_tasks,
        completed_sub_tasks=row.completed_sub_tasks,
        total_points=row.total_points,
        earned_points=row.earned_points,
        completed_required=sum(1 for b in done if b.is_required),
        total_required=sum(1 for b in breakdown if b.is_required),
        rule=row.progress_rule,
        breakdown=breakdown,
    )


def refresh_habit_progress(db: Session, habit: Habit, day: date) -> ProgressCalculation:
    """
    Recompute a sub-task habit for one day: upsert its habit_progress row
    and make the derived habit_entries row match `is_completed`. Flushes;
    the caller commits. Pending sub-task / log writes must be flushed first.

    Plain habits keep no cache row. A leftover one is dropped and their
    entries are never touched.
    """
    calc = get_habit_progress(db, habit, day)
    existing = _cached(db, habit, day)

    if not habit.has_sub_tasks:
        if existing is not None:
            db.delete(existing)
            db.flush()
        return calc

    entry = _entry(db, habit, day)
    if calc.is_completed and entry is None:
        db.add(HabitEntry(habit_id=habit.id, user_id=habit.user_id, day=day))
    elif not calc.is_completed and entry is not None:
        db.delete(entry)

    values = {
        "completion_percentage": calc.completion_percentage,
        "is_completed": calc.is_completed,
        "total_sub_tasks": calc.total_sub_tasks,
        "completed_sub_tasks": calc.completed_sub_tasks,
        "total_points": calc.total_points,
        "earned_points": calc.earned_points,
        "progress_rule": calc.rule or _ev(habit.progress_rule),
    }
    if existing:
        for key, value in values.items():
            setattr(existing, key, value)
    else:
        db.add(HabitProgress(habit_id=habit.id, user_id=habit.user_id, day=day, **values))

    db.flush()
    log.info(
        "habit_progress_refreshed",
        habit_id=habit.id,
        day=str(day),
        percentage=calc.completion_percentage,
        completed=calc.is_completed,
    )
    return calc


# ---------------------------------------------------------------------------
# Toggles
# ---------------------------------------------------------------------------

def toggle_entry(
    db: Session,
    user_id: str,
    habit_id: int,
    day: Optional[date] = None,
    notes: Optional[str] = None,
) -> bool:
    """
    Flip a plain habit's completion for `day` (default today).
    Rejected before any write for archived habits and sub-task habits.
    """
    day = day or _today()
    habit = _owned_habit(db, user_id, habit_id)
    if habit.archived:
        raise ArchivedHabitError(habit_id, day)
    if habit.has_sub_tasks:
        raise DerivedCompletionError(habit_id)

    entry = _entry(db, habit, day)
    if entry is not None:
        db.delete(entry)
        completed = False
    else:
        db.add(HabitEntry(habit_id=habit_id, user_id=user_id, day=day, notes=notes))
        completed = True
    db.commit()

    log.info("entry_toggled", habit_id=habit_id, user_id=user_id, day=str(day), completed=completed)
    return completed


def toggle_sub_task(
    db: Session,
    user_id: str,
    sub_task_id: int,
    day: Optional[date] = None,
    time_spent_minutes: Optional[int] = None,
    notes: Optional[str] = None,
) -> tuple[bool, Habit, ProgressCalculation]:
    day = day or _today()
    sub_task = (
        db.query(SubTask)
        .filter(SubTask.id == sub_task_id, SubTask.user_id == user_id)
        .first()
    )
    if sub_task is None:
        raise SubTaskNotFoundError(sub_task_id)
    habit = _owned_habit(db, user_id, sub_task.habit_id)
    if habit.archived:
        raise ArchivedHabitError(habit.id, day)
    if not habit.has_sub_tasks:
        raise HabitShapeError(habit.id, f"Habit {habit.id} does not track sub-tasks.")

    existing = (
        db.query(SubTaskLog)
        .filter(
            SubTaskLog.sub_task_id == sub_task_id,
            SubTaskLog.user_id == user_id,
            SubTaskLog.day == day,
        )
        .first()
    )
    if existing is not None:
        db.delete(existing)
        completed = False
    else:
        db.add(SubTaskLog(
            sub_task_id=sub_task_id,
            habit_id=habit.id,
            user_id=user_id,
            day=day,
            time_spent_minutes=time_spent_minutes,
            notes=notes,
        ))
        completed = True
    db.flush()

    calc = refresh_habit_progress(db, habit, day)
    db.commit()
    log.info(
        "sub_task_toggled",
        sub_task_id=sub_task_id,
        habit_id=habit.id,
        day=str(day),
        completed=completed,
    )
    return completed, habit, calc


def list_entries(db: Session, user_id: str, start: date, end: date) -> list[HabitEntry]:
    return (
        db.query(HabitEntry)
        .filter(
            HabitEntry.user_id == user_id,
            HabitEntry.day >= start,
            HabitEntry.day <= end,
        )
        .order_by(HabitEntry.day, HabitEntry.habit_id)
        .all()
    )
