"""
Habit and sub-task management.

Habits are archived, never hard-deleted, so completion history keeps
resolving. `has_sub_tasks` is fixed once a habit has any completion
history, so plain entries and derived entries never share a habit, and
only sub-task habits own sub-tasks.

Any change that can move a sub-task habit's completion (rule, threshold,
sub-task set, weights, required flags) re-evaluates every cached day for
that habit through `refresh_habit_progress` and commits once.

Public API
----------
get_habit(db, user_id, habit_id)             -> Habit          (raises HabitNotFoundError)
list_habits(db, user_id, include_archived)   -> list[Habit]
create_habit(db, user_id, **fields)          -> Habit
update_habit(db, user_id, habit_id, changes) -> Habit
archive_habit / restore_habit                -> Habit
get_sub_task(db, user_id, sub_task_id)       -> SubTask        (raises SubTaskNotFoundError)
list_sub_tasks(db, user_id, habit_id)        -> list[SubTask]
create_sub_task(db, user_id, habit_id, **fields) -> SubTask
update_sub_task(db, user_id, sub_task_id, changes) -> SubTask
delete_sub_task(db, user_id, sub_task_id)    -> None
"""
from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Any, Iterable

from sqlalchemy.orm import Session

from habitpulse.core.config import settings
from habitpulse.core.errors import (
    ArchivedHabitError,
    HabitNotFoundError,
    HabitShapeError,
    SubTaskNotFoundError,
)
from habitpulse.core.logging import get_logger
from habitpulse.models import Habit, HabitEntry, HabitProgress, SubTask, SubTaskLog
from habitpulse.services.completions import refresh_habit_progress
from habitpulse.services.progress_rules import parse_rule, validate_weight

log = get_logger(__name__)

# Fields whose change can flip a day's completion.
_RULE_FIELDS = {"has_sub_tasks", "progress_rule", "completion_threshold"}
_SUB_TASK_RULE_FIELDS = {"weight", "is_required"}


def _today() -> date:
    return datetime.now(tz=timezone.utc).date()


def _ev(v) -> str:
    return v.value if hasattr(v, "value") else str(v)


def _refresh_cached_days(db: Session, habit: Habit, extra_days: Iterable[date] = ()) -> None:
    """Re-evaluate every cached day plus today, then commit the whole change once."""
    if not habit.has_sub_tasks:
        db.query(HabitProgress).filter(HabitProgress.habit_id == habit.id).delete(synchronize_session=False)
        db.commit()
        return

    days = {
        day for (day,) in
        db.query(HabitProgress.day).filter(HabitProgress.habit_id == habit.id).all()
    }
    days.update(extra_days)
    days.add(_today())
    for day in sorted(days):
        refresh_habit_progress(db, habit, day)
    db.commit()


def _has_history(db: Session, habit: Habit) -> bool:
    entry = db.query(HabitEntry.id).filter(HabitEntry.habit_id == habit.id).first()
    logged = db.query(SubTaskLog.id).filter(SubTaskLog.habit_id == habit.id).first()
    return entry is not None or logged is not None


# ---------------------------------------------------------------------------
# Habits
# ---------------------------------------------------------------------------

def get_habit(db: Session, user_id: str, habit_id: int) -> Habit:
    habit = (
        db.query(Habit)
        .filter(Habit.id == habit_id, Habit.user_id == user_id)
        .first()
    )
    if habit is None:
        raise HabitNotFoundError(habit_id)
    return habit


def list_habits(db: Session, user_id: str, include_archived: bool = False) -> list[Habit]:
    q = db.query(Habit).filter(Habit.user_id == user_id)
    if not include_archived:
        q = q.filter(Habit.archived.is_(False))
    return q.order_by(Habit.position, Habit.id).all()


def create_habit(db: Session, user_id: str, **fields: Any) -> Habit:
    fields.setdefault("weekly_target", settings.DEFAULT_WEEKLY_TARGET)
    fields.setdefault("monthly_target", settings.DEFAULT_MONTHLY_TARGET)
    parse_rule(
        _ev(fields.get("progress_rule", "ALL")),
        fields.get("completion_threshold", 100),
    )
    habit = Habit(user_id=user_id, **fields)
    db.add(habit)
    db.commit()
    db.refresh(habit)
    log.info("habit_created", habit_id=habit.id, user_id=user_id, rule=_ev(habit.progress_rule))
    return habit


def update_habit(db: Session, user_id: str, habit_id: int, changes: dict[str, Any]) -> Habit:
    habit = get_habit(db, user_id, habit_id)
    if habit.archived:
        raise ArchivedHabitError(habit_id)
    if (
        "has_sub_tasks" in changes
        and changes["has_sub_tasks"] != habit.has_sub_tasks
        and _has_history(db, habit)
    ):
        raise HabitShapeError(
            habit_id,
            f"Habit {habit_id} already has completion history; has_sub_tasks cannot change.",
        )

    parse_rule(
        _ev(changes.get("progress_rule", habit.progress_rule)),
        changes.get("completion_threshold", habit.completion_threshold),
    )
    for key, value in changes.items():
        setattr(habit, key, value)
    db.flush()

    if _RULE_FIELDS & changes.keys():
        _refresh_cached_days(db, habit)
        log.info("habit_rule_changed", habit_id=habit_id, fields=sorted(_RULE_FIELDS & changes.keys()))
    else:
        db.commit()
    db.refresh(habit)
    return habit


def archive_habit(db: Session, user_id: str, habit_id: int) -> Habit:
    habit = get_habit(db, user_id, habit_id)
    habit.archived = True
    db.commit()
    db.refresh(habit)
    log.info("habit_archived", habit_id=habit_id, user_id=user_id)
    return habit


def restore_habit(db: Session, user_id: str, habit_id: int) -> Habit:
    habit = get_habit(db, user_id, habit_id)
    habit.archived = False
    db.commit()
    db.refresh(habit)
    log.info("habit_restored", habit_id=habit_id, user_id=user_id)
    return habit


# ---------------------------------------------------------------------------
# Sub-tasks
# ---------------------------------------------------------------------------

def get_sub_task(db: Session, user_id: str, sub_task_id: int) -> SubTask:
    sub_task = (
        db.query(SubTask)
        .filter(SubTask.id == sub_task_id, SubTask.user_id == user_id)
        .first()
    )
    if sub_task is None:
        raise SubTaskNotFoundError(sub_task_id)
    return sub_task


def list_sub_tasks(db: Session, user_id: str, habit_id: int) -> list[SubTask]:
    get_habit(db, user_id, habit_id)
    return (
        db.query(SubTask)
        .filter(SubTask.habit_id == habit_id)
        .order_by(SubTask.position, SubTask.id)
        .all()
    )


def create_sub_task(db: Session, user_id: str, habit_id: int, **fields: Any) -> SubTask:
    habit = get_habit(db, user_id, habit_id)
    if habit.archived:
        raise ArchivedHabitError(habit_id)
    if not habit.has_sub_tasks:
        raise HabitShapeError(habit_id, f"Habit {habit_id} does not track sub-tasks.")
    validate_weight(fields.get("weight", 1))

    sub_task = SubTask(habit_id=habit_id, user_id=user_id, **fields)
    db.add(sub_task)
    db.flush()
    _refresh_cached_days(db, habit)
    db.refresh(sub_task)
    log.info("sub_task_created", sub_task_id=sub_task.id, habit_id=habit_id)
    return sub_task


def update_sub_task(db: Session, user_id: str, sub_task_id: int, changes: dict[str, Any]) -> SubTask:
    sub_task = get_sub_task(db, user_id, sub_task_id)
    habit = get_habit(db, user_id, sub_task.habit_id)
    if habit.archived:
        raise ArchivedHabitError(habit.id)
    if "weight" in changes:
        validate_weight(changes["weight"])

    for key, value in changes.items():
        setattr(sub_task, key, value)
    db.flush()

    if _SUB_TASK_RULE_FIELDS & changes.keys():
        _refresh_cached_days(db, habit)
    else:
        db.commit()
    db.refresh(sub_task)
    return sub_task


def delete_sub_task(db: Session, user_id: str, sub_task_id: int) -> None:
    """Remove the sub-task and its logs, then re-evaluate every affected day."""
    sub_task = get_sub_task(db, user_id, sub_task_id)
    habit = get_habit(db, user_id, sub_task.habit_id)
    if habit.archived:
        raise ArchivedHabitError(habit.id)

    logged_days = {
        day for (day,) in
        db.query(SubTaskLog.day).filter(SubTaskLog.sub_task_id == sub_task_id).all()
    }
    db.query(SubTaskLog).filter(SubTaskLog.sub_task_id == sub_task_id).delete(synchronize_session=False)
    db.delete(sub_task)
    db.flush()

    _refresh_cached_days(db, habit, logged_days)
    log.info("sub_task_deleted", sub_task_id=sub_task_id, habit_id=habit.id, days=len(logged_days))
