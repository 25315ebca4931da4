"""
Monthly reflections: one free-text note per user and calendar month.
"""
from __future__ import annotations

from typing import Optional

from sqlalchemy.orm import Session

from habitpulse.core.logging import get_logger
from habitpulse.models import MonthlyReflection

log = get_logger(__name__)


def get_reflection(db: Session, user_id: str, year: int, month: int) -> Optional[MonthlyReflection]:
    return (
        db.query(MonthlyReflection)
        .filter(
            MonthlyReflection.user_id == user_id,
            MonthlyReflection.year == year,
            MonthlyReflection.month == month,
        )
        .first()
    )


def save_reflection(db: Session, user_id: str, year: int, month: int, content: str) -> MonthlyReflection:
    """Creates the month's reflection or replaces its content."""
    reflection = get_reflection(db, user_id, year, month)
    if reflection is None:
        reflection = MonthlyReflection(user_id=user_id, year=year, month=month, content=content)
        db.add(reflection)
    else:
        reflection.content = content
    db.commit()
    db.refresh(reflection)
    log.info("reflection_saved", user_id=user_id, year=year, month=month, length=len(content))
    return reflection
