"""
Progress, rollup and dashboard schemas.

Most responses are validated straight from the engine dataclasses
(`model_validate(obj, from_attributes=True)`).
"""
from __future__ import annotations

from datetime import date
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class _FromAttrs(BaseModel):
    model_config = ConfigDict(from_attributes=True)


# ---------------------------------------------------------------------------
# Per-habit progress
# ---------------------------------------------------------------------------

class SubTaskBreakdownOut(_FromAttrs):
    sub_task_id: int
    title: str
    weight: int
    is_required: bool
    completed: bool
    contribution: float


class ProgressStatusOut(_FromAttrs):
    status: str = Field(description='"completed", "partial" or "not_started".')
    label: str
    description: str


class ProgressResponse(_FromAttrs):
    habit_id: int
    day: date
    rule: Optional[str] = Field(default=None, description="Null for habits without sub-tasks.")
    completion_percentage: int
    is_completed: bool
    total_sub_tasks: int
    completed_sub_tasks: int
    total_points: int
    earned_points: int
    completed_required: int
    total_required: int
    status: ProgressStatusOut
    breakdown: list[SubTaskBreakdownOut] = []


class RuleValidationOut(_FromAttrs):
    is_valid: bool
    errors: list[str]
    warnings: list[str]


class SubTaskAdviceOut(BaseModel):
    bottlenecks: list[int] = Field(description="Sub-task ids estimated above 30 minutes, longest first.")
    recommendations: list[str]


class RuleReviewResponse(BaseModel):
    validation: RuleValidationOut
    advice: SubTaskAdviceOut


class SimulateRequest(BaseModel):
    completed_sub_task_ids: list[int] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Rollups and dashboards
# ---------------------------------------------------------------------------

class HabitPeriodOut(_FromAttrs):
    habit_id: int
    name: str
    emoji: str
    completed: int
    target: int
    percentage: int = Field(description="Raw ratio; may exceed 100.")
    ratio: str = Field(examples=["5/7"])


class PeriodRollupResponse(_FromAttrs):
    start: date
    end: date
    completed: int
    target: int
    left: int
    percentage: int
    habits: list[HabitPeriodOut]


class GlobalProgressResponse(_FromAttrs):
    total_habits: int
    completed_today: int
    completed_this_week: int
    completed_this_month: int
    weekly_target: int
    monthly_target: int
    weekly_percentage: int
    monthly_percentage: int
    top_habits: list[HabitPeriodOut]


class StatsResponse(_FromAttrs):
    total_habits: int
    current_streak: int = Field(description="Consecutive fully completed days; today never breaks it.")
    completion_percentage: int
    best_habit: Optional[HabitPeriodOut] = None


class DayProgressOut(_FromAttrs):
    day: date
    completed: int
    total: int
    percentage: int


class BlockProgressOut(_FromAttrs):
    block: int
    completed: int
    total: int
    percentage: int


class AnalyticsResponse(BaseModel):
    year: int
    month: int
    days: list[DayProgressOut]
    weeks: list[BlockProgressOut]
