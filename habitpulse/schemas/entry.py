"""
Completion toggle schemas.

POST /entries/toggle          → EntryToggleRequest   → EntryToggleResponse
POST /sub-tasks/{id}/toggle   → SubTaskToggleRequest → SubTaskToggleResponse
GET  /entries?start=&end=     → list[EntryResponse]
"""
from datetime import date
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from habitpulse.schemas.progress import ProgressResponse


class EntryToggleRequest(BaseModel):
    habit_id: int = Field(ge=1)
    day: Optional[date] = Field(
        default=None,
        description="Calendar day to toggle. Defaults to today (UTC).",
        examples=["2026-02-20"],
    )
    notes: Optional[str] = Field(default=None, max_length=2000)


class EntryToggleResponse(BaseModel):
    habit_id: int
    day: str
    completed: bool = Field(description="State after the toggle. False means the entry was deleted.")


class EntryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    habit_id: int
    day: str
    notes: Optional[str] = None
    completed_at: str


class SubTaskToggleRequest(BaseModel):
    day: Optional[date] = Field(default=None, description="Defaults to today (UTC).")
    time_spent_minutes: Optional[int] = Field(default=None, ge=0, le=1440)
    notes: Optional[str] = Field(default=None, max_length=2000)


class SubTaskToggleResponse(BaseModel):
    sub_task_id: int
    day: str
    completed: bool
    progress: ProgressResponse = Field(description="Recomputed habit progress for the day.")
