"""
Tests for the execution quality tracker.
"""
from __future__ import annotations

from datetime import datetime, timedelta

import pytest

from habitpulse.services.execution_quality import (
    ExecutionMetrics,
    TrendAnalysis,
    execution_metrics,
    quality_insights,
    quality_recommendations,
    quality_trends,
    track_execution_quality,
)
from habitpulse.services.records import ExecutionSample, SystemRecord

START = datetime(2026, 2, 1, 7, 0)


def _samples(n: int, offset: int = 0, system_id: int = 1, **overrides) -> list[ExecutionSample]:
    values = dict(completion_rate=80, energy_cost=50, context_fit=60, sequence_effectiveness=50, quality=70)
    values.update(overrides)
    return [
        ExecutionSample(system_id=system_id, executed_at=START + timedelta(days=offset + i), **values)
        for i in range(n)
    ]


class TestMetrics:
    def test_empty_history(self):
        assert execution_metrics([]) == ExecutionMetrics()

    def test_averages(self):
        metrics = execution_metrics(_samples(5))
        assert metrics == ExecutionMetrics(
            consistency=100,
            energy_efficiency=100,
            context_alignment=60,
            sequence_effectiveness=50,
            overall_quality=70,
        )

    def test_zero_energy_counts_raw_completion(self):
        assert execution_metrics(_samples(3, completion_rate=40, energy_cost=0)).energy_efficiency == 40


class TestInsights:
    def test_sorted_by_impact(self):
        metrics = ExecutionMetrics(consistency=90, energy_efficiency=30, context_alignment=70)
        systems = [
            SystemRecord(id=1, name="Gym", friction_coefficient=80),
            SystemRecord(id=2, name="Walk", friction_coefficient=80),
        ]
        history = _samples(3, quality=20) + _samples(3, offset=3, system_id=2, quality=90)
        insights = quality_insights(history, systems, metrics)

        assert [(i.type, i.impact) for i in insights] == [("weakness", 50), ("weakness", 40), ("strength", 20)]
        assert insights[0].description == 'System "Gym" shows poor quality metrics'
        assert insights[0].evidence == "Average quality: 20.0%, Friction: 80%"

    def test_systems_without_runs_are_skipped(self):
        metrics = ExecutionMetrics(consistency=70, energy_efficiency=70, context_alignment=70)
        assert quality_insights([], [SystemRecord(id=1, name="Gym", friction_coefficient=90)], metrics) == []


class TestTrends:
    def test_needs_an_older_window(self):
        assert quality_trends(_samples(6)) == []
        assert quality_trends(_samples(14)) == []

    def test_completion_up_energy_down(self):
        history = _samples(14, completion_rate=50, energy_cost=50) + _samples(14, offset=14, completion_rate=60, energy_cost=40)
        completion, energy = quality_trends(history)

        assert completion.metric == "Completion Rate"
        assert completion.trend == "improving"
        assert completion.change_rate == pytest.approx(20)
        assert completion.significance == "high"
        assert energy.metric == "Energy Cost"
        assert energy.trend == "improving"
        assert energy.timeframe == "Last 2 weeks"

    def test_flat_and_zero_baseline(self):
        flat = quality_trends(_samples(20))
        assert [t.trend for t in flat] == ["stable", "stable"]
        assert [t.significance for t in flat] == ["low", "low"]

        zero = _samples(14, completion_rate=0) + _samples(14, offset=14, completion_rate=50)
        assert quality_trends(zero)[0].change_rate == 0

    def test_orders_by_execution_time(self):
        late = _samples(14, offset=14, completion_rate=60)
        early = _samples(14, completion_rate=50)
        assert quality_trends(late + early)[0].trend == "improving"


class TestRecommendations:
    def test_declining_trend_and_limit(self):
        metrics = ExecutionMetrics(consistency=50, energy_efficiency=30, context_alignment=40)
        declining = TrendAnalysis("Completion Rate", "declining", 25, "Last 2 weeks", "high")
        recs = quality_recommendations(metrics, [], [declining])
        assert recs == [
            "Establish fixed execution times to improve consistency",
            "Schedule high-energy tasks during peak performance periods",
            "Optimize your environment for better execution context",
            "Address declining performance trends before they become habits",
        ]

    def test_empty_history_report_is_capped_at_five(self):
        report = track_execution_quality([], [])
        assert report.metrics == ExecutionMetrics()
        assert [i.impact for i in report.insights] == [80, 80, 70]
        assert report.trends == []
        assert len(report.recommendations) == 5
