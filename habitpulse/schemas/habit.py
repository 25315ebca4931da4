"""
Habit and sub-task schemas.

POST  /habits                 → HabitCreate     → HabitResponse
PATCH /habits/{id}            → HabitUpdate     → HabitResponse
POST  /habits/{id}/sub-tasks  → SubTaskCreate   → SubTaskResponse
PATCH /sub-tasks/{id}         → SubTaskUpdate   → SubTaskResponse
"""
from __future__ import annotations

from typing import Annotated, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from habitpulse.models.habit import Cadence, ProgressRuleName


Threshold = Annotated[int, Field(ge=1, le=100, description="1-100. Used by PERCENTAGE and POINTS.")]
Weight = Annotated[int, Field(ge=1, le=10, description="1-10. Only meaningful under POINTS.")]


# ---------------------------------------------------------------------------
# Habits
# ---------------------------------------------------------------------------

class HabitCreate(BaseModel):
    model_config = ConfigDict(use_enum_values=True)

    name: Annotated[str, Field(min_length=1, max_length=128, examples=["Morning run"])]
    emoji: str = Field(default="✨", max_length=16)
    color: Optional[str] = Field(default=None, max_length=16, examples=["#4f46e5"])
    cadence: Cadence = Cadence.daily
    has_sub_tasks: bool = False
    progress_rule: ProgressRuleName = ProgressRuleName.ALL
    completion_threshold: Threshold = 100
    weekly_target: Optional[int] = Field(default=None, ge=1, le=7, description="Defaults to DEFAULT_WEEKLY_TARGET.")
    monthly_target: Optional[int] = Field(default=None, ge=1, le=31, description="Defaults to DEFAULT_MONTHLY_TARGET.")
    position: int = Field(default=0, ge=0)

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, v: str) -> str:
        stripped = v.strip() if isinstance(v, str) else v
        if not stripped:
            raise ValueError("name must not be empty after stripping whitespace")
        return stripped


class HabitUpdate(BaseModel):
    """Partial update; omitted fields are left unchanged."""
    model_config = ConfigDict(use_enum_values=True)

    name: Optional[str] = Field(default=None, min_length=1, max_length=128)
    emoji: Optional[str] = Field(default=None, max_length=16)
    color: Optional[str] = Field(default=None, max_length=16)
    cadence: Optional[Cadence] = None
    has_sub_tasks: Optional[bool] = None
    progress_rule: Optional[ProgressRuleName] = None
    completion_threshold: Optional[Threshold] = None
    weekly_target: Optional[int] = Field(default=None, ge=1, le=7)
    monthly_target: Optional[int] = Field(default=None, ge=1, le=31)
    position: Optional[int] = Field(default=None, ge=0)


class HabitResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    emoji: str
    color: Optional[str] = None
    cadence: str
    has_sub_tasks: bool
    progress_rule: str
    completion_threshold: int
    weekly_target: int
    monthly_target: int
    archived: bool
    position: int
    created_at: str


# ---------------------------------------------------------------------------
# Sub-tasks
# ---------------------------------------------------------------------------

class SubTaskCreate(BaseModel):
    title: Annotated[str, Field(min_length=1, max_length=256, examples=["Stretch 5 minutes"])]
    description: Optional[str] = Field(default=None, max_length=2000)
    weight: Weight = 1
    is_required: bool = True
    position: int = Field(default=0, ge=0)
    estimated_minutes: Optional[int] = Field(default=None, ge=1, le=480)


class SubTaskUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=256)
    description: Optional[str] = Field(default=None, max_length=2000)
    weight: Optional[Weight] = None
    is_required: Optional[bool] = None
    position: Optional[int] = Field(default=None, ge=0)
    estimated_minutes: Optional[int] = Field(default=None, ge=1, le=480)


class SubTaskResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    habit_id: int
    title: str
    description: Optional[str] = None
    weight: int
    is_required: bool
    position: int
    estimated_minutes: Optional[int] = None
