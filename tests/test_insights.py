"""
Tests for the insight, bias and prediction detectors.
"""
from __future__ import annotations

from datetime import datetime, timedelta

import pytest

from habitpulse.services.insights import (
    detect_cognitive_biases,
    detect_confirmation_bias,
    detect_optimism_bias,
    detect_perfectionism,
    detect_planning_fallacy,
    detect_sunk_cost_fallacy,
    execution_consistency,
    execution_insights,
    energy_efficiency,
    friction_points,
    generate_insights,
    generate_predictions,
    leverage_points,
    predict_breakthrough,
    predict_momentum_shift,
    predict_performance_decline,
    predict_skip_risk,
    predict_system_failure,
)
from habitpulse.services.momentum import MomentumMetrics
from habitpulse.services.records import AdaptationRecord, ExecutionSample, SystemRecord

START = datetime(2026, 3, 1, 7, 0)


def _samples(n: int, system_id: int = 1, **overrides) -> list[ExecutionSample]:
    values = dict(completion_rate=80, energy_cost=50, context_fit=60, sequence_effectiveness=50, quality=70)
    values.update(overrides)
    return [
        ExecutionSample(system_id=system_id, executed_at=START + timedelta(days=i), **values)
        for i in range(n)
    ]


def _momentum(**overrides) -> MomentumMetrics:
    values = dict(consistency=50, growth=50, impact=50, learning=50, overall=50, direction="stable", strength=70)
    values.update(overrides)
    return MomentumMetrics(**values)


class TestHelpers:
    def test_consistency_neutral_on_short_history(self):
        assert execution_consistency(_samples(6)) == 50

    def test_efficiency_zero_energy_uses_raw_completion(self):
        assert energy_efficiency(_samples(3, completion_rate=40, energy_cost=0)) == 40
        assert energy_efficiency(_samples(3, completion_rate=80, energy_cost=50)) == 100
        assert energy_efficiency([]) == 50


class TestExecutionInsights:
    def test_decline_and_redesign_rank_first(self):
        history = _samples(10, energy_cost=100, completion_rate=50)
        systems = [SystemRecord(id=1, name="Journal", effectiveness_score=30, friction_coefficient=80)]
        momentum = _momentum(direction="decreasing", strength=30)

        insights = execution_insights(history, systems, momentum)

        assert [i.priority for i in insights] == ["high", "high", "medium"]
        assert insights[0].title == "Momentum Decline Detected"
        assert insights[1].title == 'System "Journal" Needs Redesign'
        assert insights[2].title == "High Energy Cost Detected"

    def test_healthy_history_has_no_insights(self):
        assert execution_insights(_samples(10), [SystemRecord(id=1, name="Walk")], _momentum()) == []


class TestBiases:
    def test_planning_fallacy_needs_five_samples(self):
        assert detect_planning_fallacy(_samples(4, energy_cost=90)) is None
        bias = detect_planning_fallacy(_samples(5, energy_cost=90))
        assert bias.severity == "high"
        assert detect_planning_fallacy(_samples(5, energy_cost=80)).severity == "medium"
        assert detect_planning_fallacy(_samples(5, energy_cost=75)) is None

    def test_perfectionism(self):
        assert detect_perfectionism(_samples(6, quality=90, completion_rate=50)).type == "perfectionism"
        assert detect_perfectionism(_samples(6, quality=90, completion_rate=70)) is None

    def test_optimism_bias_needs_systems(self):
        assert detect_optimism_bias(_samples(5, quality=40), []) is None
        systems = [SystemRecord(id=1, name="Walk", effectiveness_score=80)]
        assert detect_optimism_bias(_samples(5, quality=40), systems).type == "optimism_bias"
        assert detect_optimism_bias(_samples(5, quality=60), systems) is None

    def test_confirmation_bias_needs_more_than_five_systems(self):
        five = [SystemRecord(id=i, name=f"S{i}", locked=True) for i in range(5)]
        assert detect_confirmation_bias(five) is None
        six = five + [SystemRecord(id=6, name="S6", locked=True)]
        bias = detect_confirmation_bias(six)
        assert bias.evidence[0] == "6 of 6 systems are locked"

    def test_sunk_cost_reports_first_matching_system(self):
        flops = tuple(AdaptationRecord(trigger="t", change="c", impact=-5) for _ in range(6))
        systems = [
            SystemRecord(id=1, name="Healthy", effectiveness_score=80, adaptations=flops),
            SystemRecord(id=2, name="Stuck", effectiveness_score=20, adaptations=flops),
            SystemRecord(id=3, name="Also stuck", effectiveness_score=10, adaptations=flops),
        ]
        bias = detect_sunk_cost_fallacy(systems)
        assert bias.description == 'Continuing to invest in "Stuck" despite poor performance'

    def test_sunk_cost_needs_more_than_five_adaptations(self):
        flops = tuple(AdaptationRecord(trigger="t", change="c", impact=-5) for _ in range(5))
        assert detect_sunk_cost_fallacy([SystemRecord(id=1, name="S", effectiveness_score=20, adaptations=flops)]) is None

    def test_biases_sorted_by_severity(self):
        history = _samples(6, energy_cost=90, quality=90, completion_rate=50)
        biases = detect_cognitive_biases(history, [])
        assert [b.type for b in biases] == ["planning_fallacy", "perfectionism"]
        assert [b.severity for b in biases] == ["high", "medium"]


class TestPredictions:
    def test_skip_risk_levels(self):
        assert predict_skip_risk(_samples(6, completion_rate=0), []) is None
        assert predict_skip_risk(_samples(7, completion_rate=50), []) is None

        critical = predict_skip_risk(_samples(7, completion_rate=10), [])
        assert critical.confidence == 90
        assert critical.outcome.impact == "critical"
        assert critical.factors[1].value == 50
        assert predict_skip_risk(_samples(7, completion_rate=25), []).outcome.impact == "high"
        assert predict_skip_risk(_samples(7, completion_rate=35), []).outcome.impact == "medium"

    def test_momentum_shift(self):
        assert predict_momentum_shift(_momentum(direction="decreasing", strength=39)).confidence == 75
        assert predict_momentum_shift(_momentum(direction="decreasing", strength=40)) is None

    def test_system_failure_counts_systems(self):
        systems = [
            SystemRecord(id=1, name="A", effectiveness_score=20, friction_coefficient=90),
            SystemRecord(id=2, name="B", effectiveness_score=25, friction_coefficient=85),
        ]
        prediction = predict_system_failure(systems)
        assert prediction.outcome.description == "2 system(s) at risk of failure"
        assert prediction.factors[0].value == 20
        assert predict_system_failure([SystemRecord(id=1, name="A")]) is None

    def test_performance_decline(self):
        history = _samples(7, quality=80) + _samples(7, quality=60)
        prediction = predict_performance_decline(history)
        assert prediction.confidence == pytest.approx(80)
        assert prediction.outcome.probability == pytest.approx(70)
        assert prediction.outcome.impact == "medium"

        steep = _samples(7, quality=90) + _samples(7, quality=50)
        prediction = predict_performance_decline(steep)
        assert prediction.confidence == 90
        assert prediction.outcome.probability == 85
        assert prediction.outcome.impact == "high"

        assert predict_performance_decline(_samples(13, quality=10)) is None

    def test_breakthrough(self):
        systems = [SystemRecord(id=1, name="Walk", effectiveness_score=80, friction_coefficient=20)]
        assert predict_breakthrough(systems, _momentum(direction="increasing", consistency=75)).confidence == 75
        assert predict_breakthrough(systems, _momentum(direction="increasing", consistency=70)) is None
        assert predict_breakthrough([], _momentum(direction="increasing", consistency=75)) is None

    def test_predictions_sorted_by_confidence(self):
        systems = [SystemRecord(id=1, name="A", effectiveness_score=20, friction_coefficient=90)]
        predictions = generate_predictions(
            _samples(7, completion_rate=30), systems, _momentum(direction="decreasing", strength=30),
        )
        assert [p.type for p in predictions] == ["system_failure", "momentum_shift", "skip_risk"]


class TestLeverageAndFriction:
    def test_leverage_points_sorted_by_roi(self):
        systems = [
            SystemRecord(id=1, name="Walk", effectiveness_score=80, friction_coefficient=20),
            SystemRecord(id=2, name="Read", effectiveness_score=60, friction_coefficient=50),
        ]
        history = _samples(11, system_id=2, quality=90)
        points = leverage_points(systems, history)

        assert [(p.system_id, p.type) for p in points] == [(1, "high_impact"), (2, "momentum_builder")]
        assert points[0].roi == 40
        assert points[1].roi == pytest.approx(14.4)

    def test_zero_friction_effort_floor(self):
        points = leverage_points([SystemRecord(id=1, name="Free", effectiveness_score=90, friction_coefficient=0)], [])
        assert points[0].roi == 900

    def test_friction_points(self):
        systems = [
            SystemRecord(id=1, name="Deep work", friction_coefficient=75),
            SystemRecord(id=2, name="Gym", friction_coefficient=30),
        ]
        history = _samples(4, system_id=1, energy_cost=80) + _samples(2, system_id=2, energy_cost=90)
        points = friction_points(systems, history)

        assert [(p.system_id, p.type) for p in points] == [(2, "energy"), (1, "energy"), (1, "complexity")]
        assert points[2].description == "High friction system requiring 80% energy on average"
        assert points[2].frequency == 4

    def test_friction_without_runs_uses_default_energy(self):
        points = friction_points([SystemRecord(id=1, name="New", friction_coefficient=90)], [])
        assert len(points) == 1
        assert points[0].description == "High friction system requiring 70% energy on average"


class TestGenerateInsights:
    def test_empty_inputs(self):
        report = generate_insights([], [], None, _momentum())
        # neutral efficiency (50) sits below the 60 line
        assert [i.title for i in report.insights] == ["High Energy Cost Detected"]
        assert report.cognitive_biases == []
        assert report.predictions == []
        assert report.leverage_points == []
        assert report.friction_points == []
