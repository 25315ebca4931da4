"""
Reflections router — one free-text reflection per month.

GET  /reflections?year=&month=  — the month's reflection, empty if none
POST /reflections               — create or replace the month's reflection
"""
from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from habitpulse.db.base import get_db
from habitpulse.routers.deps import get_user_id
from habitpulse.schemas.reflection import ReflectionResponse, ReflectionUpsert
from habitpulse.services import reflections as reflection_service

router = APIRouter(prefix="/reflections", tags=["reflections"])


@router.get("", response_model=ReflectionResponse, summary="Get a monthly reflection")
def get_reflection(
    year: int = Query(ge=1970, le=9999, examples=[2026]),
    month: int = Query(ge=1, le=12, examples=[3]),
    user_id: str = Depends(get_user_id),
    db: Session = Depends(get_db),
):
    """A month without a reflection returns empty `content` and a null `id`."""
    reflection = reflection_service.get_reflection(db, user_id, year, month)
    if reflection is None:
        return ReflectionResponse(year=year, month=month)
    return ReflectionResponse.model_validate(reflection)


@router.post("", response_model=ReflectionResponse, summary="Save a monthly reflection")
def save_reflection(
    payload: ReflectionUpsert,
    user_id: str = Depends(get_user_id),
    db: Session = Depends(get_db),
):
    return ReflectionResponse.model_validate(
        reflection_service.save_reflection(db, user_id, payload.year, payload.month, payload.content)
    )
