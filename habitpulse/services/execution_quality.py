"""Execution quality tracker: aggregate metrics, insights, trends and top recommendations."""
from __future__ import annotations

from dataclasses import dataclass

from habitpulse.core.thresholds import QUALITY, QualityThresholds
from habitpulse.services.numeric import mean, round_half_up, stddev
from habitpulse.services.records import ExecutionSample, SystemRecord


@dataclass
class ExecutionMetrics:
    consistency: int = 0
    energy_efficiency: int = 0
    context_alignment: int = 0
    sequence_effectiveness: int = 0
    overall_quality: int = 0


@dataclass
class QualityInsight:
    type: str  # "strength" | "weakness" | "opportunity"
    description: str
    evidence: str
    recommendation: str
    impact: float


@dataclass
class TrendAnalysis:
    metric: str
    trend: str  # "improving" | "declining" | "stable"
    change_rate: float
    timeframe: str
    significance: str


@dataclass
class QualityReport:
    metrics: ExecutionMetrics
    insights: list[QualityInsight]
    trends: list[TrendAnalysis]
    recommendations: list[str]


def execution_metrics(history: list[ExecutionSample]) -> ExecutionMetrics:
    if not history:
        return ExecutionMetrics()

    efficiency = mean(
        s.completion_rate if s.energy_cost == 0 else s.completion_rate / s.energy_cost * 100
        for s in history
    )
    return ExecutionMetrics(
        consistency=round_half_up(max(0.0, 100 - stddev([s.completion_rate for s in history]) * 2)),
        energy_efficiency=min(100, round_half_up(efficiency)),
        context_alignment=round_half_up(mean(s.context_fit for s in history)),
        sequence_effectiveness=round_half_up(mean(s.sequence_effectiveness for s in history)),
        overall_quality=round_half_up(mean(s.quality for s in history)),
    )


def quality_insights(
    history: list[ExecutionSample],
    systems: list[SystemRecord],
    metrics: ExecutionMetrics,
    t: QualityThresholds = QUALITY,
) -> list[QualityInsight]:
    insights: list[QualityInsight] = []

    if metrics.consistency < t.consistency_weak:
        insights.append(QualityInsight(
            type="weakness",
            description="Execution consistency is below optimal levels",
            evidence=f"Consistency score: {metrics.consistency}%",
            recommendation="Focus on establishing regular routines and reducing variability",
            impact=t.weak_impact_base - metrics.consistency,
        ))
    elif metrics.consistency > t.consistency_strong:
        insights.append(QualityInsight(
            type="strength",
            description="Excellent execution consistency",
            evidence=f"Consistency score: {metrics.consistency}%",
            recommendation="Maintain current routines and consider increasing complexity",
            impact=metrics.consistency - t.consistency_strong_base,
        ))

    if metrics.energy_efficiency < t.energy_weak:
        insights.append(QualityInsight(
            type="weakness",
            description="High energy cost for execution",
            evidence=f"Energy efficiency: {metrics.energy_efficiency}%",
            recommendation="Optimize timing, reduce friction, or break down complex tasks",
            impact=t.energy_impact_base - metrics.energy_efficiency,
        ))

    if metrics.context_alignment < t.context_weak:
        insights.append(QualityInsight(
            type="opportunity",
            description="Poor alignment between execution and optimal contexts",
            evidence=f"Context alignment: {metrics.context_alignment}%",
            recommendation="Reschedule tasks to match energy patterns and environmental preferences",
            impact=t.context_impact_base - metrics.context_alignment,
        ))

    for system in systems:
        runs = [s for s in history if s.system_id == system.id]
        if not runs:
            continue
        quality = mean(s.quality for s in runs)
        if quality < t.system_quality and system.friction_coefficient > t.system_friction:
            insights.append(QualityInsight(
                type="weakness",
                description=f'System "{system.name}" shows poor quality metrics',
                evidence=f"Average quality: {quality:.1f}%, Friction: {system.friction_coefficient:g}%",
                recommendation="Consider redesigning or replacing this high-friction system",
                impact=t.system_impact_base - quality,
            ))

    return sorted(insights, key=lambda i: i.impact, reverse=True)


def _trend(metric: str, change: float, lower_is_better: bool, t: QualityThresholds) -> TrendAnalysis:
    signed = -change if lower_is_better else change
    if signed > t.trend_delta:
        trend = "improving"
    elif signed < -t.trend_delta:
        trend = "declining"
    else:
        trend = "stable"

    size = abs(change)
    if size > t.trend_high:
        significance = "high"
    elif size > t.trend_delta:
        significance = "medium"
    else:
        significance = "low"

    return TrendAnalysis(
        metric=metric,
        trend=trend,
        change_rate=size,
        timeframe="Last 2 weeks",
        significance=significance,
    )


def _relative_change(recent: float, older: float) -> float:
    return (recent - older) / older * 100 if older > 0 else 0.0


def quality_trends(history: list[ExecutionSample], t: QualityThresholds = QUALITY) -> list[TrendAnalysis]:
    """Completion and energy trends: the last 14 samples against the 14 before them."""
    if len(history) < t.trend_min_samples:
        return []

    ordered = sorted(history, key=lambda s: s.executed_at)
    recent = ordered[-t.trend_window:]
    older = ordered[-2 * t.trend_window:-t.trend_window]
    if not older:
        return []

    completion = _relative_change(
        mean(s.completion_rate for s in recent), mean(s.completion_rate for s in older),
    )
    energy = _relative_change(
        mean(s.energy_cost for s in recent), mean(s.energy_cost for s in older),
    )
    return [
        _trend("Completion Rate", completion, lower_is_better=False, t=t),
        _trend("Energy Cost", energy, lower_is_better=True, t=t),
    ]


def quality_recommendations(
    metrics: ExecutionMetrics,
    insights: list[QualityInsight],
    trends: list[TrendAnalysis],
    t: QualityThresholds = QUALITY,
) -> list[str]:
    recs: list[str] = []
    if metrics.consistency < t.consistency_weak:
        recs.append("Establish fixed execution times to improve consistency")
    if metrics.energy_efficiency < t.energy_weak:
        recs.append("Schedule high-energy tasks during peak performance periods")
    if metrics.context_alignment < t.context_weak:
        recs.append("Optimize your environment for better execution context")

    recs.extend(i.recommendation for i in insights if i.impact > t.recommend_impact)

    if any(tr.trend == "declining" and tr.significance == "high" for tr in trends):
        recs.append("Address declining performance trends before they become habits")

    return recs[:t.recommend_limit]


def track_execution_quality(
    history: list[ExecutionSample],
    systems: list[SystemRecord],
    t: QualityThresholds = QUALITY,
) -> QualityReport:
    metrics = execution_metrics(history)
    insights = quality_insights(history, systems, metrics, t)
    trends = quality_trends(history, t)
    return QualityReport(
        metrics=metrics,
        insights=insights,
        trends=trends,
        recommendations=quality_recommendations(metrics, insights, trends, t),
    )
