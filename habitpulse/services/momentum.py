"""
Momentum Engine — composite 0-100 momentum from execution-quality history.

Dimensions (each 0-100, each with its own insufficient-data default)
------------------------------------------------------------------
  consistency  100 - 2*stddev(last 14 completion rates) + bonus for mean > 70
               fewer than 7 samples -> 50
  growth       50 + 0.6*energy improvement + 0.4*(100 - avg system friction)
               energy improvement compares two trailing 7-sample windows
               fewer than 14 samples -> 50
  impact       0.4*avg effectiveness + 0.4*avg quality + 0.2*avg sequence
               no samples or no systems -> 50
  learning     10*adaptations per system + 0.5*avg adaptation impact
               + 0.4*context-fit improvement
               no systems or no adaptation history -> 50

Overall = round(0.4*consistency + 0.25*growth + 0.2*impact + 0.15*learning).

Direction compares the mean quality of the last 7 samples to the 7 before
(+/-5 band). Strength blends balance across the four dimensions with their
mean. The forecast extrapolates the overall trend (weekly change / 7 per
day) three days forward with decaying confidence.

Public API
----------
consistency_score(history)                     -> int
growth_score(history, systems)                 -> int
impact_score(history, systems)                 -> int
learning_score(history, systems)               -> int
overall_momentum(c, g, i, l)                   -> int
momentum_direction(history)                    -> str
momentum_strength(c, g, i, l)                  -> int
current_momentum(history, systems)             -> MomentumMetrics
momentum_trends(current, previous)             -> list[MomentumTrend]
momentum_breakpoints(current)                  -> list[MomentumBreakpoint]
momentum_forecast(current, trends, today)      -> list[ForecastPoint]
calculate_momentum(history, systems, previous, today) -> MomentumReport
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Optional

from habitpulse.core.thresholds import MOMENTUM, NEUTRAL_SCORE, MomentumThresholds
from habitpulse.services.numeric import clamp, mean, round_half_up, stddev, window_means
from habitpulse.services.records import ExecutionSample, MomentumSnapshot, SystemRecord


# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------

@dataclass
class MomentumMetrics:
    consistency: int
    growth: int
    impact: int
    learning: int
    overall: int
    direction: str  # "increasing" | "decreasing" | "stable"
    strength: int


@dataclass
class MomentumTrend:
    metric: str
    current_value: float
    previous_value: float
    change: float
    trend: str  # "up" | "down" | "stable"
    significance: str  # "high" | "medium" | "low"


@dataclass
class MomentumBreakpoint:
    type: str  # "positive" | "negative"
    description: str
    severity: str
    timeframe: str
    factors: list[str]
    recommendations: list[str]


@dataclass
class ForecastPoint:
    day: date
    predicted_momentum: int
    confidence: int
    factors: list[str] = field(default_factory=list)


@dataclass
class MomentumReport:
    current: MomentumMetrics
    trends: list[MomentumTrend]
    breakpoints: list[MomentumBreakpoint]
    forecast: list[ForecastPoint]


# ---------------------------------------------------------------------------
# Dimensions
# ---------------------------------------------------------------------------

def consistency_score(
    history: list[ExecutionSample],
    t: MomentumThresholds = MOMENTUM,
) -> int:
    if len(history) < t.consistency_min_samples:
        return NEUTRAL_SCORE

    rates = [s.completion_rate for s in history[-t.consistency_window:]]
    base = max(0.0, 100 - stddev(rates) * t.stddev_penalty)
    bonus = max(0.0, (mean(rates) - t.completion_bonus_floor) * t.completion_bonus_rate)
    return min(100, round_half_up(base + bonus))


def growth_score(
    history: list[ExecutionSample],
    systems: list[SystemRecord],
    t: MomentumThresholds = MOMENTUM,
) -> int:
    if len(history) < t.growth_min_samples:
        return NEUTRAL_SCORE

    recent, older = window_means([s.energy_cost for s in history], t.growth_window)
    improvement = (older - recent) / older * 100 if older > 0 else 0.0

    # No systems: treat friction as neutral rather than dividing by zero.
    friction = mean(s.friction_coefficient for s in systems) if systems else t.growth_baseline
    complexity = max(0.0, 100 - friction)

    growth = improvement * t.energy_improvement_weight + complexity * t.complexity_weight
    return round_half_up(clamp(t.growth_baseline + growth))


def impact_score(
    history: list[ExecutionSample],
    systems: list[SystemRecord],
    t: MomentumThresholds = MOMENTUM,
) -> int:
    if not history or not systems:
        return NEUTRAL_SCORE

    score = (
        mean(s.effectiveness_score for s in systems) * t.impact_effectiveness_weight
        + mean(s.quality for s in history) * t.impact_quality_weight
        + mean(s.sequence_effectiveness for s in history) * t.impact_sequence_weight
    )
    return round_half_up(score)


def context_fit_improvement(
    history: list[ExecutionSample],
    t: MomentumThresholds = MOMENTUM,
) -> float:
    if len(history) < 2 * t.context_fit_window:
        return 0.0
    recent, older = window_means([s.context_fit for s in history], t.context_fit_window)
    return clamp((recent - older) * t.context_fit_scale)


def learning_score(
    history: list[ExecutionSample],
    systems: list[SystemRecord],
    t: MomentumThresholds = MOMENTUM,
) -> int:
    impacts = [a.impact for s in systems for a in s.adaptations]
    if not systems or not impacts:
        return NEUTRAL_SCORE

    per_system = len(impacts) / len(systems)
    score = (
        per_system * t.learning_adaptation_factor
        + mean(impacts) * t.learning_impact_factor
        + context_fit_improvement(history, t) * t.learning_context_factor
    )
    return round_half_up(clamp(score))


# ---------------------------------------------------------------------------
# Composite
# ---------------------------------------------------------------------------

def overall_momentum(
    consistency: float,
    growth: float,
    impact: float,
    learning: float,
    t: MomentumThresholds = MOMENTUM,
) -> int:
    return round_half_up(
        consistency * t.consistency_weight
        + growth * t.growth_weight
        + impact * t.impact_weight
        + learning * t.learning_weight
    )


def momentum_direction(
    history: list[ExecutionSample],
    t: MomentumThresholds = MOMENTUM,
) -> str:
    if len(history) < t.direction_window:
        return "stable"

    recent, older = window_means([s.quality for s in history], t.direction_window)
    change = recent - older
    if change > t.direction_delta:
        return "increasing"
    if change < -t.direction_delta:
        return "decreasing"
    return "stable"


def momentum_strength(
    consistency: float,
    growth: float,
    impact: float,
    learning: float,
    t: MomentumThresholds = MOMENTUM,
) -> int:
    scores = [consistency, growth, impact, learning]
    balance = max(0.0, 100 - stddev(scores) * 2)
    return round_half_up(balance * t.strength_balance_weight + mean(scores) * t.strength_magnitude_weight)


def current_momentum(
    history: list[ExecutionSample],
    systems: list[SystemRecord],
    t: MomentumThresholds = MOMENTUM,
) -> MomentumMetrics:
    c = consistency_score(history, t)
    g = growth_score(history, systems, t)
    i = impact_score(history, systems, t)
    learn = learning_score(history, systems, t)
    return MomentumMetrics(
        consistency=c,
        growth=g,
        impact=i,
        learning=learn,
        overall=overall_momentum(c, g, i, learn, t),
        direction=momentum_direction(history, t),
        strength=momentum_strength(c, g, i, learn, t),
    )


# ---------------------------------------------------------------------------
# Trends, breakpoints, forecast
# ---------------------------------------------------------------------------

def momentum_trends(
    current: MomentumMetrics,
    previous: Optional[MomentumSnapshot],
    t: MomentumThresholds = MOMENTUM,
) -> list[MomentumTrend]:
    """Compare each dimension with the latest stored snapshot (none -> no trends)."""
    if previous is None:
        return []

    pairs = [
        ("Consistency", current.consistency, previous.consistency),
        ("Growth", current.growth, previous.growth),
        ("Impact", current.impact, previous.impact),
        ("Learning", current.learning, previous.learning),
        ("Overall", current.overall, previous.overall),
    ]

    trends: list[MomentumTrend] = []
    for name, now, before in pairs:
        change = now - before
        if change > t.trend_delta:
            trend = "up"
        elif change < -t.trend_delta:
            trend = "down"
        else:
            trend = "stable"

        if abs(change) > t.significance_high:
            significance = "high"
        elif abs(change) > t.significance_medium:
            significance = "medium"
        else:
            significance = "low"

        trends.append(MomentumTrend(
            metric=name,
            current_value=now,
            previous_value=before,
            change=change,
            trend=trend,
            significance=significance,
        ))
    return trends


def momentum_breakpoints(
    current: MomentumMetrics,
    t: MomentumThresholds = MOMENTUM,
) -> list[MomentumBreakpoint]:
    points: list[MomentumBreakpoint] = []

    if current.consistency < t.consistency_breakdown:
        points.append(MomentumBreakpoint(
            type="negative",
            description="Consistency breakdown detected",
            severity="critical" if current.consistency < t.consistency_breakdown_critical else "high",
            timeframe="This week",
            factors=["Low completion rates", "High variance in execution"],
            recommendations=["Return to basics", "Reduce system complexity", "Focus on core habits"],
        ))

    if current.overall < t.collapse_overall and current.direction == "decreasing":
        points.append(MomentumBreakpoint(
            type="negative",
            description="Momentum collapse imminent",
            severity="critical",
            timeframe="Next 3-5 days",
            factors=["Declining overall momentum", "Negative direction", "Low strength"],
            recommendations=[
                "Activate recovery protocol",
                "Pause non-essential systems",
                "Focus on 1-2 core systems",
            ],
        ))

    if current.overall > t.acceleration_overall and current.direction == "increasing":
        points.append(MomentumBreakpoint(
            type="positive",
            description="Momentum acceleration point",
            severity="high",
            timeframe="This week",
            factors=["High overall momentum", "Positive direction", "Strong consistency"],
            recommendations=[
                "Introduce new challenges",
                "Expand system scope",
                "Leverage peak performance",
            ],
        ))

    if current.learning > t.learning_acceleration:
        points.append(MomentumBreakpoint(
            type="positive",
            description="Learning acceleration detected",
            severity="medium",
            timeframe="Next 2 weeks",
            factors=["High adaptation success", "Rapid skill acquisition"],
            recommendations=[
                "Increase system complexity",
                "Add new systems",
                "Experiment with advanced strategies",
            ],
        ))

    return points


def momentum_forecast(
    current: MomentumMetrics,
    trends: list[MomentumTrend],
    today: date,
    t: MomentumThresholds = MOMENTUM,
) -> list[ForecastPoint]:
    overall = next((tr for tr in trends if tr.metric == "Overall"), None)
    daily_change = overall.change / t.days_per_week if overall else 0.0

    factors: list[str] = []
    if current.direction == "increasing":
        factors.append("Positive momentum direction")
    if current.strength > t.forecast_strength_factor:
        factors.append("Strong momentum strength")
    if current.consistency > t.forecast_consistency_factor:
        factors.append("High consistency")
    if abs(daily_change) > t.forecast_trend_factor:
        factors.append("Strong recent trend")

    points: list[ForecastPoint] = []
    for ahead in range(1, t.forecast_days + 1):
        predicted = clamp(current.overall + daily_change * ahead)
        points.append(ForecastPoint(
            day=today + timedelta(days=ahead),
            predicted_momentum=round_half_up(predicted),
            confidence=max(t.confidence_floor, t.confidence_start - ahead * t.confidence_decay),
            factors=list(factors),
        ))
    return points


def calculate_momentum(
    history: list[ExecutionSample],
    systems: list[SystemRecord],
    previous: Optional[MomentumSnapshot],
    today: date,
    t: MomentumThresholds = MOMENTUM,
) -> MomentumReport:
    """
    Full momentum pass. `history` must be in chronological order; `previous`
    is the most recent stored snapshot before `today`, if any.
    """
    current = current_momentum(history, systems, t)
    trends = momentum_trends(current, previous, t)
    return MomentumReport(
        current=current,
        trends=trends,
        breakpoints=momentum_breakpoints(current, t),
        forecast=momentum_forecast(current, trends, today, t),
    )
