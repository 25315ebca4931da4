"""
Habits router — habit and sub-task management plus per-habit progress.

GET    /habits                         — list habits
POST   /habits                         — create a habit
GET    /habits/{id}                    — one habit
PATCH  /habits/{id}                    — partial update (rule changes re-evaluate cached days)
DELETE /habits/{id}                    — archive
POST   /habits/{id}/restore            — un-archive
GET    /habits/{id}/progress           — progress for one day
POST   /habits/{id}/progress/simulate  — what-if evaluation
GET    /habits/{id}/rule-review        — rule warnings and sub-task advice
GET    /habits/{id}/sub-tasks          — list sub-tasks
POST   /habits/{id}/sub-tasks          — add a sub-task
PATCH  /sub-tasks/{id}                 — update a sub-task
DELETE /sub-tasks/{id}                 — delete a sub-task and its logs
POST   /sub-tasks/{id}/toggle          — check / uncheck a sub-task for a day
"""
from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from habitpulse.db.base import get_db
from habitpulse.models import Habit, SubTask
from habitpulse.routers.deps import get_user_id
from habitpulse.schemas.common import ErrorResponse
from habitpulse.schemas.entry import SubTaskToggleRequest, SubTaskToggleResponse
from habitpulse.schemas.habit import (
    HabitCreate,
    HabitResponse,
    HabitUpdate,
    SubTaskCreate,
    SubTaskResponse,
    SubTaskUpdate,
)
from habitpulse.schemas.progress import (
    ProgressResponse,
    ProgressStatusOut,
    RuleReviewResponse,
    RuleValidationOut,
    SimulateRequest,
    SubTaskAdviceOut,
    SubTaskBreakdownOut,
)
from habitpulse.services import habits as habit_service
from habitpulse.services.completions import read_habit_progress, toggle_sub_task
from habitpulse.services.loaders import load_sub_tasks
from habitpulse.services.progress_rules import (
    ProgressCalculation,
    parse_rule,
    progress_status,
    simulate_progress,
    sub_task_recommendations,
    validate_progress_rule,
)

router = APIRouter(tags=["habits"])

_NOT_FOUND = {404: {"model": ErrorResponse, "description": "Habit not found."}}


def _today() -> date:
    return datetime.now(tz=timezone.utc).date()


def _ev(v) -> str:
    return v.value if hasattr(v, "value") else str(v)


# ---------------------------------------------------------------------------
# Serialization helpers
# ---------------------------------------------------------------------------

def _habit_to_response(h: Habit) -> HabitResponse:
    return HabitResponse(
        id=h.id,
        name=h.name,
        emoji=h.emoji,
        color=h.color,
        cadence=_ev(h.cadence),
        has_sub_tasks=h.has_sub_tasks,
        progress_rule=_ev(h.progress_rule),
        completion_threshold=h.completion_threshold,
        weekly_target=h.weekly_target,
        monthly_target=h.monthly_target,
        archived=h.archived,
        position=h.position,
        created_at=h.created_at.isoformat() if h.created_at else "",
    )


def _sub_task_to_response(st: SubTask) -> SubTaskResponse:
    return SubTaskResponse.model_validate(st)


def progress_to_response(habit_id: int, day: date, calc: ProgressCalculation) -> ProgressResponse:
    status = progress_status(calc)
    return ProgressResponse(
        habit_id=habit_id,
        day=day,
        rule=calc.rule,
        completion_percentage=calc.completion_percentage,
        is_completed=calc.is_completed,
        total_sub_tasks=calc.total_sub_tasks,
        completed_sub_tasks=calc.completed_sub_tasks,
        total_points=calc.total_points,
        earned_points=calc.earned_points,
        completed_required=calc.completed_required,
        total_required=calc.total_required,
        status=ProgressStatusOut.model_validate(status),
        breakdown=[SubTaskBreakdownOut.model_validate(b) for b in calc.breakdown],
    )


# ---------------------------------------------------------------------------
# Habits
# ---------------------------------------------------------------------------

@router.get("/habits", response_model=list[HabitResponse], summary="List habits")
def list_habits(
    include_archived: bool = Query(default=False),
    user_id: str = Depends(get_user_id),
    db: Session = Depends(get_db),
):
    """Habits ordered by `position`, then id. Archived habits are hidden unless requested."""
    return [_habit_to_response(h) for h in habit_service.list_habits(db, user_id, include_archived)]


@router.post(
    "/habits",
    response_model=HabitResponse,
    status_code=201,
    summary="Create a habit",
    responses={422: {"model": ErrorResponse, "description": "Invalid rule, threshold or payload."}},
)
def create_habit(
    payload: HabitCreate,
    user_id: str = Depends(get_user_id),
    db: Session = Depends(get_db),
):
    """
    `progress_rule` and `completion_threshold` are only consulted when
    `has_sub_tasks` is true. Weekly / monthly targets default to the
    configured defaults (7 / 30).
    """
    habit = habit_service.create_habit(db, user_id, **payload.model_dump(exclude_none=True))
    return _habit_to_response(habit)


@router.get("/habits/{habit_id}", response_model=HabitResponse, summary="Get a habit", responses=_NOT_FOUND)
def get_habit(
    habit_id: int,
    user_id: str = Depends(get_user_id),
    db: Session = Depends(get_db),
):
    return _habit_to_response(habit_service.get_habit(db, user_id, habit_id))


@router.patch(
    "/habits/{habit_id}",
    response_model=HabitResponse,
    summary="Update a habit",
    responses={
        **_NOT_FOUND,
        409: {"model": ErrorResponse, "description": "Habit is archived, or has_sub_tasks changed on a habit with history."},
        422: {"model": ErrorResponse, "description": "Invalid rule or threshold."},
    },
)
def update_habit(
    habit_id: int,
    payload: HabitUpdate,
    user_id: str = Depends(get_user_id),
    db: Session = Depends(get_db),
):
    """
    Changing `has_sub_tasks`, `progress_rule` or `completion_threshold`
    re-evaluates every cached day of the habit (and today).

    `has_sub_tasks` can only change while the habit has no entries and no
    sub-task logs; otherwise 409 HABIT_SHAPE_CONFLICT.
    """
    habit = habit_service.update_habit(db, user_id, habit_id, payload.model_dump(exclude_unset=True))
    return _habit_to_response(habit)


@router.delete("/habits/{habit_id}", response_model=HabitResponse, summary="Archive a habit", responses=_NOT_FOUND)
def archive_habit(
    habit_id: int,
    user_id: str = Depends(get_user_id),
    db: Session = Depends(get_db),
):
    """Archived habits drop out of streaks and rollups; their history is kept."""
    return _habit_to_response(habit_service.archive_habit(db, user_id, habit_id))


@router.post(
    "/habits/{habit_id}/restore",
    response_model=HabitResponse,
    summary="Restore an archived habit",
    responses=_NOT_FOUND,
)
def restore_habit(
    habit_id: int,
    user_id: str = Depends(get_user_id),
    db: Session = Depends(get_db),
):
    return _habit_to_response(habit_service.restore_habit(db, user_id, habit_id))


# ---------------------------------------------------------------------------
# Per-habit progress
# ---------------------------------------------------------------------------

@router.get(
    "/habits/{habit_id}/progress",
    response_model=ProgressResponse,
    summary="Habit progress for one day",
    responses=_NOT_FOUND,
)
def habit_progress(
    habit_id: int,
    day: Optional[date] = Query(default=None, description="Defaults to today (UTC).", examples=["2026-02-21"]),
    user_id: str = Depends(get_user_id),
    db: Session = Depends(get_db),
):
    """
    Evaluates the habit's progress rule against that day's sub-task logs.

    - **ALL**: every required sub-task done.
    - **PERCENTAGE**: completed / total ≥ threshold.
    - **POINTS**: earned weight / total weight ≥ threshold.

    Habits without sub-tasks report 100 or 0 from the day's entry.

    Sub-task habits are served from the habit_progress cache while the
    cached row matches the current sub-tasks and logs.
    """
    day = day or _today()
    habit = habit_service.get_habit(db, user_id, habit_id)
    return progress_to_response(habit_id, day, read_habit_progress(db, habit, day))


@router.post(
    "/habits/{habit_id}/progress/simulate",
    response_model=ProgressResponse,
    summary="What-if progress evaluation",
    responses=_NOT_FOUND,
)
def simulate_habit_progress(
    habit_id: int,
    payload: SimulateRequest,
    user_id: str = Depends(get_user_id),
    db: Session = Depends(get_db),
):
    """Evaluate the habit's rule as if exactly the given sub-tasks were done. Nothing is written."""
    habit = habit_service.get_habit(db, user_id, habit_id)
    rule = parse_rule(_ev(habit.progress_rule), habit.completion_threshold)
    calc = simulate_progress(rule, load_sub_tasks(db, habit_id), payload.completed_sub_task_ids)
    return progress_to_response(habit_id, _today(), calc)


@router.get(
    "/habits/{habit_id}/rule-review",
    response_model=RuleReviewResponse,
    summary="Progress rule warnings and sub-task advice",
    responses=_NOT_FOUND,
)
def rule_review(
    habit_id: int,
    user_id: str = Depends(get_user_id),
    db: Session = Depends(get_db),
):
    habit = habit_service.get_habit(db, user_id, habit_id)
    rule = parse_rule(_ev(habit.progress_rule), habit.completion_threshold)
    sub_tasks = load_sub_tasks(db, habit_id)
    validation = validate_progress_rule(rule, sub_tasks)
    advice = sub_task_recommendations(rule, sub_tasks)
    return RuleReviewResponse(
        validation=RuleValidationOut.model_validate(validation),
        advice=SubTaskAdviceOut(
            bottlenecks=[st.id for st in advice.bottlenecks],
            recommendations=advice.recommendations,
        ),
    )


# ---------------------------------------------------------------------------
# Sub-tasks
# ---------------------------------------------------------------------------

@router.get(
    "/habits/{habit_id}/sub-tasks",
    response_model=list[SubTaskResponse],
    summary="List sub-tasks",
    responses=_NOT_FOUND,
)
def list_sub_tasks(
    habit_id: int,
    user_id: str = Depends(get_user_id),
    db: Session = Depends(get_db),
):
    return [_sub_task_to_response(st) for st in habit_service.list_sub_tasks(db, user_id, habit_id)]


@router.post(
    "/habits/{habit_id}/sub-tasks",
    response_model=SubTaskResponse,
    status_code=201,
    summary="Add a sub-task",
    responses={
        **_NOT_FOUND,
        409: {"model": ErrorResponse, "description": "Habit is archived or does not track sub-tasks."},
    },
)
def create_sub_task(
    habit_id: int,
    payload: SubTaskCreate,
    user_id: str = Depends(get_user_id),
    db: Session = Depends(get_db),
):
    sub_task = habit_service.create_sub_task(db, user_id, habit_id, **payload.model_dump())
    return _sub_task_to_response(sub_task)


@router.patch(
    "/sub-tasks/{sub_task_id}",
    response_model=SubTaskResponse,
    summary="Update a sub-task",
    responses={404: {"model": ErrorResponse, "description": "Sub-task not found."}},
)
def update_sub_task(
    sub_task_id: int,
    payload: SubTaskUpdate,
    user_id: str = Depends(get_user_id),
    db: Session = Depends(get_db),
):
    sub_task = habit_service.update_sub_task(db, user_id, sub_task_id, payload.model_dump(exclude_unset=True))
    return _sub_task_to_response(sub_task)


@router.delete(
    "/sub-tasks/{sub_task_id}",
    status_code=204,
    summary="Delete a sub-task",
    responses={404: {"model": ErrorResponse, "description": "Sub-task not found."}},
)
def delete_sub_task(
    sub_task_id: int,
    user_id: str = Depends(get_user_id),
    db: Session = Depends(get_db),
):
    """Deletes the sub-task and all its logs, then re-evaluates affected days."""
    habit_service.delete_sub_task(db, user_id, sub_task_id)
    return Response(status_code=204)


@router.post(
    "/sub-tasks/{sub_task_id}/toggle",
    response_model=SubTaskToggleResponse,
    summary="Check or uncheck a sub-task",
    responses={
        404: {"model": ErrorResponse, "description": "Sub-task not found."},
        409: {"model": ErrorResponse, "description": "Habit is archived or does not track sub-tasks."},
    },
)
def toggle_sub_task_endpoint(
    sub_task_id: int,
    payload: SubTaskToggleRequest,
    user_id: str = Depends(get_user_id),
    db: Session = Depends(get_db),
):
    """
    Checking writes a log row; unchecking deletes it. The habit's progress
    for the day is recomputed and returned, and its completion entry is
    added or removed to match.
    """
    day = payload.day or _today()
    completed, habit, calc = toggle_sub_task(
        db,
        user_id,
        sub_task_id,
        day=day,
        time_spent_minutes=payload.time_spent_minutes,
        notes=payload.notes,
    )
    return SubTaskToggleResponse(
        sub_task_id=sub_task_id,
        day=str(day),
        completed=completed,
        progress=progress_to_response(habit.id, day, calc),
    )
