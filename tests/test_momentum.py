"""
Tests for the momentum engine.
"""
from __future__ import annotations

import math
import random
from datetime import date, datetime, timedelta

from habitpulse.services.momentum import (
    MomentumMetrics,
    calculate_momentum,
    consistency_score,
    growth_score,
    impact_score,
    learning_score,
    momentum_breakpoints,
    momentum_direction,
    momentum_forecast,
    momentum_strength,
    momentum_trends,
    overall_momentum,
)
from habitpulse.services.records import (
    AdaptationRecord,
    ExecutionSample,
    MomentumSnapshot,
    SystemRecord,
)

TODAY = date(2026, 3, 11)
START = datetime(2026, 2, 1, 8, 0)


def _samples(n: int, **overrides) -> list[ExecutionSample]:
    values = dict(completion_rate=80, energy_cost=50, context_fit=60, sequence_effectiveness=50, quality=70)
    values.update(overrides)
    return [
        ExecutionSample(system_id=1, executed_at=START + timedelta(days=i), **values)
        for i in range(n)
    ]


def _metrics(**overrides) -> MomentumMetrics:
    values = dict(consistency=50, growth=50, impact=50, learning=50, overall=50, direction="stable", strength=70)
    values.update(overrides)
    return MomentumMetrics(**values)


class TestConsistency:
    def test_short_history_is_neutral(self):
        assert consistency_score(_samples(6)) == 50

    def test_steady_high_completion_caps_at_100(self):
        assert consistency_score(_samples(14, completion_rate=80)) == 100

    def test_variance_is_penalised(self):
        history = [
            ExecutionSample(1, START + timedelta(days=i), 40 if i % 2 else 60, 50, 60, 50, 70)
            for i in range(14)
        ]
        # stddev 10 -> 100 - 20, mean 50 earns no bonus
        assert consistency_score(history) == 80


class TestGrowth:
    def test_short_history_is_neutral(self):
        assert growth_score(_samples(13), []) == 50

    def test_energy_improvement_without_systems(self):
        history = _samples(7, energy_cost=50) + _samples(7, energy_cost=40)
        # 20% improvement * 0.6 + neutral complexity 50 * 0.4
        assert growth_score(history, []) == 82

    def test_friction_reduces_growth(self):
        history = _samples(7, energy_cost=50) + _samples(7, energy_cost=40)
        systems = [SystemRecord(id=1, name="Morning", friction_coefficient=100)]
        assert growth_score(history, systems) == 62


class TestImpact:
    def test_neutral_without_systems_or_history(self):
        assert impact_score(_samples(3), []) == 50
        assert impact_score([], [SystemRecord(id=1, name="Morning")]) == 50

    def test_weighted_blend(self):
        systems = [SystemRecord(id=1, name="Morning", effectiveness_score=60)]
        history = _samples(5, quality=80, sequence_effectiveness=50)
        assert impact_score(history, systems) == 66


class TestLearning:
    def test_neutral_without_adaptations(self):
        assert learning_score(_samples(3), [SystemRecord(id=1, name="Morning")]) == 50
        assert learning_score(_samples(3), []) == 50

    def test_adaptation_rate_and_impact(self):
        system = SystemRecord(
            id=1,
            name="Morning",
            adaptations=(
                AdaptationRecord(trigger="t", change="c", impact=20),
                AdaptationRecord(trigger="t", change="c", impact=40),
            ),
        )
        assert learning_score(_samples(3), [system]) == 35


class TestOverall:
    def test_neutral_blend(self):
        assert overall_momentum(50, 50, 50, 50) == 50

    def test_weighted_sum_rounds_half_up(self):
        rng = random.Random(20260311)
        for _ in range(200):
            c, g, i, l = (rng.randint(0, 100) for _ in range(4))
            expected = math.floor(c * 0.4 + g * 0.25 + i * 0.2 + l * 0.15 + 0.5)
            assert overall_momentum(c, g, i, l) == expected

    def test_strength_of_balanced_scores(self):
        assert momentum_strength(50, 50, 50, 50) == 70


class TestDirection:
    def test_short_history_is_stable(self):
        assert momentum_direction(_samples(6, quality=90)) == "stable"

    def test_rising_quality(self):
        assert momentum_direction(_samples(7, quality=50) + _samples(7, quality=70)) == "increasing"

    def test_falling_quality(self):
        assert momentum_direction(_samples(7, quality=70) + _samples(7, quality=50)) == "decreasing"

    def test_small_change_is_stable(self):
        assert momentum_direction(_samples(7, quality=70) + _samples(7, quality=73)) == "stable"


class TestTrends:
    def test_no_previous_snapshot(self):
        assert momentum_trends(_metrics(), None) == []

    def test_compares_against_snapshot(self):
        previous = MomentumSnapshot(
            day=date(2026, 3, 10), consistency=50, growth=40, impact=53, learning=50, overall=40,
        )
        trends = {t.metric: t for t in momentum_trends(_metrics(overall=60), previous)}

        assert list(trends) == ["Consistency", "Growth", "Impact", "Learning", "Overall"]
        assert trends["Overall"].trend == "up"
        assert trends["Overall"].significance == "high"
        assert trends["Growth"].change == 10
        assert trends["Growth"].significance == "medium"
        assert trends["Impact"].trend == "stable"
        assert trends["Impact"].significance == "low"


class TestBreakpoints:
    def test_consistency_breakdown(self):
        points = momentum_breakpoints(_metrics(consistency=20))
        assert len(points) == 1
        assert points[0].type == "negative"
        assert points[0].severity == "critical"

    def test_collapse_requires_decreasing_direction(self):
        assert momentum_breakpoints(_metrics(overall=20, direction="stable")) == []
        points = momentum_breakpoints(_metrics(overall=20, direction="decreasing"))
        assert [p.description for p in points] == ["Momentum collapse imminent"]

    def test_positive_breakpoints(self):
        points = momentum_breakpoints(_metrics(overall=85, direction="increasing", learning=90))
        assert [p.type for p in points] == ["positive", "positive"]


class TestForecast:
    def test_flat_forecast_without_trends(self):
        points = momentum_forecast(_metrics(overall=50), [], TODAY)
        assert [p.day for p in points] == [date(2026, 3, 12), date(2026, 3, 13), date(2026, 3, 14)]
        assert [p.predicted_momentum for p in points] == [50, 50, 50]
        assert [p.confidence for p in points] == [85, 70, 55]

    def test_extrapolates_weekly_change(self):
        current = _metrics(overall=50)
        previous = MomentumSnapshot(
            day=date(2026, 3, 4), consistency=50, growth=50, impact=50, learning=50, overall=29,
        )
        points = momentum_forecast(current, momentum_trends(current, previous), TODAY)
        assert [p.predicted_momentum for p in points] == [53, 56, 59]
        assert "Strong recent trend" in points[0].factors

    def test_prediction_is_clamped(self):
        current = _metrics(overall=99)
        previous = MomentumSnapshot(
            day=date(2026, 3, 4), consistency=50, growth=50, impact=50, learning=50, overall=50,
        )
        points = momentum_forecast(current, momentum_trends(current, previous), TODAY)
        assert points[-1].predicted_momentum == 100


class TestCalculateMomentum:
    def test_empty_history_is_neutral(self):
        report = calculate_momentum([], [], None, TODAY)
        assert report.current == _metrics()
        assert report.trends == []
        assert report.breakpoints == []
        assert len(report.forecast) == 3
