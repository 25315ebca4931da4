"""
Entries router — completion toggles for habits without sub-tasks.

POST /entries/toggle       — check / uncheck a habit for a day
GET  /entries?start=&end=  — completion entries in a date range
"""
from __future__ import annotations

from datetime import date, datetime, timezone

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from habitpulse.db.base import get_db
from habitpulse.models import HabitEntry
from habitpulse.routers.deps import get_user_id
from habitpulse.schemas.common import ErrorResponse
from habitpulse.schemas.entry import EntryResponse, EntryToggleRequest, EntryToggleResponse
from habitpulse.services.completions import list_entries, toggle_entry

router = APIRouter(prefix="/entries", tags=["entries"])


def _entry_to_response(e: HabitEntry) -> EntryResponse:
    return EntryResponse(
        id=e.id,
        habit_id=e.habit_id,
        day=str(e.day),
        notes=e.notes,
        completed_at=e.completed_at.isoformat() if e.completed_at else "",
    )


@router.post(
    "/toggle",
    response_model=EntryToggleResponse,
    summary="Check or uncheck a habit for a day",
    responses={
        404: {"model": ErrorResponse, "description": "Habit not found."},
        409: {
            "model": ErrorResponse,
            "description": "Habit is archived, or its completion is derived from sub-tasks.",
        },
    },
)
def toggle(
    payload: EntryToggleRequest,
    user_id: str = Depends(get_user_id),
    db: Session = Depends(get_db),
):
    """
    Creates the day's entry if absent, deletes it if present. A deleted
    entry means "not completed"; there is no separate false state.

    Habits with sub-tasks are rejected with `DERIVED_COMPLETION`: toggle
    their sub-tasks instead.
    """
    day = payload.day or datetime.now(tz=timezone.utc).date()
    completed = toggle_entry(db, user_id, payload.habit_id, day=day, notes=payload.notes)
    return EntryToggleResponse(habit_id=payload.habit_id, day=str(day), completed=completed)


@router.get("", response_model=list[EntryResponse], summary="List completion entries")
def entries(
    start: date = Query(description="First day, inclusive.", examples=["2026-02-01"]),
    end: date = Query(description="Last day, inclusive.", examples=["2026-02-28"]),
    user_id: str = Depends(get_user_id),
    db: Session = Depends(get_db),
):
    return [_entry_to_response(e) for e in list_entries(db, user_id, start, end)]
