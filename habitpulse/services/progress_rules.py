"""
Progress Rule Evaluator — turns a day's sub-task logs into habit completion.

Rules
-----
  ALL         completion = completed_required / total_required
              complete  iff every required sub-task is done (and there is one)
  PERCENTAGE  completion = completed / total
              complete  iff completion >= threshold
  POINTS      completion = earned weight / total weight
              complete  iff completion >= threshold   (boundary inclusive)

Every ratio is guarded: a zero denominator yields 0, never an error.
Percentages are rounded half-up to an integer.

A habit without sub-tasks never reaches these formulas: its completion is
the presence of that day's habit entry (`evaluate_plain_habit`).

Public API
----------
parse_rule(name, threshold)                      -> ProgressRule
evaluate_progress(rule, sub_tasks, logs, day)    -> ProgressCalculation
sub_task_breakdown(sub_tasks, logs, day)         -> list[SubTaskBreakdown]
evaluate_plain_habit(completed)                  -> ProgressCalculation
progress_status(calc)                            -> ProgressStatus
validate_progress_rule(rule, sub_tasks)          -> RuleValidation
validate_weight(weight)                          -> None  (raises)
sub_task_recommendations(rule, sub_tasks)        -> SubTaskAdvice
simulate_progress(rule, sub_tasks, completed_ids) -> ProgressCalculation
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Optional, Union

from habitpulse.core.errors import ProgressRuleValidationError
from habitpulse.services.numeric import round_half_up
from habitpulse.services.records import SubTaskLogRecord, SubTaskRecord


MIN_THRESHOLD = 1
MAX_THRESHOLD = 100
MIN_WEIGHT = 1
MAX_WEIGHT = 10

_BOTTLENECK_MINUTES = 30
_MANY_REQUIRED = 3
_MANY_SUB_TASKS = 5
_LOW_PERCENTAGE_THRESHOLD = 50


# ---------------------------------------------------------------------------
# Rule variants (closed union; each carries only what its formula needs)
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class AllRequired:
    name: str = field(default="ALL", init=False)


@dataclass(frozen=True)
class PercentageRule:
    threshold: int
    name: str = field(default="PERCENTAGE", init=False)


@dataclass(frozen=True)
class PointsRule:
    threshold: int
    name: str = field(default="POINTS", init=False)


ProgressRule = Union[AllRequired, PercentageRule, PointsRule]


def _check_threshold(threshold: int) -> None:
    if not MIN_THRESHOLD <= threshold <= MAX_THRESHOLD:
        raise ProgressRuleValidationError(
            message=(
                f"Completion threshold must be between {MIN_THRESHOLD} "
                f"and {MAX_THRESHOLD}."
            ),
            field="completion_threshold",
            value=threshold,
        )


def parse_rule(name: str, threshold: int = MAX_THRESHOLD) -> ProgressRule:
    """
    Build a rule variant from its stored (name, threshold) pair.
    The threshold is validated for every rule, even ALL which ignores it.
    """
    _check_threshold(threshold)
    key = (name.value if hasattr(name, "value") else str(name)).upper()
    if key == "ALL":
        return AllRequired()
    if key == "PERCENTAGE":
        return PercentageRule(threshold=threshold)
    if key == "POINTS":
        return PointsRule(threshold=threshold)
    raise ProgressRuleValidationError(
        message=f"Unknown progress rule {name!r}. Use ALL, PERCENTAGE or POINTS.",
        field="progress_rule",
        value=key,
    )


def validate_weight(weight: int) -> None:
    if not MIN_WEIGHT <= weight <= MAX_WEIGHT:
        raise ProgressRuleValidationError(
            message=f"Sub-task weight must be between {MIN_WEIGHT} and {MAX_WEIGHT}.",
            field="weight",
            value=weight,
        )


# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------

@dataclass
class SubTaskBreakdown:
    sub_task_id: int
    title: str
    weight: int
    is_required: bool
    completed: bool
    contribution: float  # equal share of the total, in percent


@dataclass
class ProgressCalculation:
    completion_percentage: int
    is_completed: bool
    total_sub_tasks: int
    completed_sub_tasks: int
    total_points: int
    earned_points: int
    completed_required: int
    total_required: int
    rule: Optional[str]  # None for habits without sub-tasks
    breakdown: list[SubTaskBreakdown] = field(default_factory=list)


@dataclass
class ProgressStatus:
    status: str  # "completed" | "partial" | "not_started"
    label: str
    description: str


@dataclass
class RuleValidation:
    is_valid: bool
    errors: list[str]
    warnings: list[str]


@dataclass
class SubTaskAdvice:
    bottlenecks: list[SubTaskRecord]
    recommendations: list[str]


# ---------------------------------------------------------------------------
# Core evaluation
# ---------------------------------------------------------------------------

def _completed_ids(logs: list[SubTaskLogRecord], day: Optional[date]) -> set[int]:
    return {
        log.sub_task_id
        for log in logs
        if log.completed and (day is None or log.day == day)
    }


def _ratio(part: float, whole: float) -> float:
    return part * 100 / whole if whole > 0 else 0.0


def sub_task_breakdown(
    sub_tasks: list[SubTaskRecord],
    logs: list[SubTaskLogRecord],
    day: Optional[date] = None,
) -> list[SubTaskBreakdown]:
    done = _completed_ids(logs, day)
    share = (1 / len(sub_tasks)) * 100 if sub_tasks else 0.0
    return [
        SubTaskBreakdown(
            sub_task_id=st.id,
            title=st.title,
            weight=st.weight,
            is_required=st.is_required,
            completed=st.id in done,
            contribution=share,
        )
        for st in sub_tasks
    ]


def evaluate_progress(
    rule: ProgressRule,
    sub_tasks: list[SubTaskRecord],
    logs: list[SubTaskLogRecord],
    day: Optional[date] = None,
) -> ProgressCalculation:
    """
    Evaluate one habit for one day. When `day` is given, logs for other days
    are ignored; otherwise every log passed in counts.
    """
    breakdown = sub_task_breakdown(sub_tasks, logs, day)
    total = len(sub_tasks)

    completed = sum(1 for b in breakdown if b.completed)
    total_required = sum(1 for st in sub_tasks if st.is_required)
    completed_required = sum(1 for b in breakdown if b.is_required and b.completed)
    total_points = sum(st.weight for st in sub_tasks)
    earned_points = sum(b.weight for b in breakdown if b.completed)

    match rule:
        case AllRequired():
            percentage = _ratio(completed_required, total_required)
            is_completed = total_required > 0 and completed_required == total_required
        case PercentageRule(threshold=threshold):
            percentage = _ratio(completed, total)
            is_completed = percentage >= threshold
        case PointsRule(threshold=threshold):
            percentage = _ratio(earned_points, total_points)
            is_completed = percentage >= threshold
        case _:
            raise ProgressRuleValidationError(
                message=f"Unsupported progress rule {rule!r}.",
                field="progress_rule",
                value=repr(rule),
            )

    return ProgressCalculation(
        completion_percentage=round_half_up(percentage),
        is_completed=is_completed,
        total_sub_tasks=total,
        completed_sub_tasks=completed,
        total_points=total_points,
        earned_points=earned_points,
        completed_required=completed_required,
        total_required=total_required,
        rule=rule.name,
        breakdown=breakdown,
    )


def evaluate_plain_habit(completed: bool) -> ProgressCalculation:
    """Progress for a habit without sub-tasks: the day's entry is the answer."""
    return ProgressCalculation(
        completion_percentage=100 if completed else 0,
        is_completed=completed,
        total_sub_tasks=0,
        completed_sub_tasks=0,
        total_points=0,
        earned_points=0,
        completed_required=0,
        total_required=0,
        rule=None,
    )


def simulate_progress(
    rule: ProgressRule,
    sub_tasks: list[SubTaskRecord],
    completed_ids: list[int],
) -> ProgressCalculation:
    """What-if evaluation: pretend exactly `completed_ids` are done."""
    logs = [SubTaskLogRecord(sub_task_id=i, day=date.min) for i in completed_ids]
    return evaluate_progress(rule, sub_tasks, logs)


# ---------------------------------------------------------------------------
# Presentation helpers
# ---------------------------------------------------------------------------

def progress_status(calc: ProgressCalculation) -> ProgressStatus:
    if calc.is_completed:
        return ProgressStatus(
            status="completed",
            label="Completed",
            description=f"{calc.completed_sub_tasks}/{calc.total_sub_tasks} sub-tasks done",
        )
    if calc.completion_percentage > 0:
        return ProgressStatus(
            status="partial",
            label="In Progress",
            description=f"{calc.completion_percentage}% complete",
        )
    return ProgressStatus(
        status="not_started",
        label="Not Started",
        description="No sub-tasks completed yet",
    )


def validate_progress_rule(
    rule: ProgressRule,
    sub_tasks: list[SubTaskRecord],
) -> RuleValidation:
    """Soft checks on a rule configuration. Hard errors raise in parse_rule."""
    errors: list[str] = []
    warnings: list[str] = []

    for st in sub_tasks:
        if not MIN_WEIGHT <= st.weight <= MAX_WEIGHT:
            errors.append(f'Sub-task "{st.title}" has weight {st.weight} outside 1-10')

    match rule:
        case AllRequired():
            if not any(st.is_required for st in sub_tasks):
                warnings.append("No required sub-tasks found. ALL rule may not be appropriate")
        case PercentageRule(threshold=threshold):
            if threshold < _LOW_PERCENTAGE_THRESHOLD:
                warnings.append("Low completion threshold may lead to inconsistent habits")
        case PointsRule():
            if all(st.weight == 1 for st in sub_tasks):
                warnings.append("All sub-tasks have equal weight. Consider PERCENTAGE rule instead")

    return RuleValidation(is_valid=not errors, errors=errors, warnings=warnings)


def sub_task_recommendations(
    rule: ProgressRule,
    sub_tasks: list[SubTaskRecord],
) -> SubTaskAdvice:
    bottlenecks = sorted(
        (st for st in sub_tasks if st.estimated_minutes and st.estimated_minutes > _BOTTLENECK_MINUTES),
        key=lambda st: st.estimated_minutes,
        reverse=True,
    )

    recommendations: list[str] = []
    if bottlenecks:
        recommendations.append(
            f'Consider breaking down "{bottlenecks[0].title}" into smaller steps'
        )
    if isinstance(rule, AllRequired) and sum(1 for st in sub_tasks if st.is_required) > _MANY_REQUIRED:
        recommendations.append("Consider switching to PERCENTAGE rule for more flexibility")
    if len(sub_tasks) > _MANY_SUB_TASKS:
        recommendations.append(
            "You have many sub-tasks. Consider focusing on the most important ones first"
        )

    return SubTaskAdvice(bottlenecks=bottlenecks, recommendations=recommendations)
