"""
Tests for resilience assessment and recovery planning.
"""
from __future__ import annotations

import dataclasses
from datetime import date, datetime, timedelta

from habitpulse.services.records import (
    AdaptationRecord,
    ExecutionSample,
    ProtocolAction,
    ProtocolRecord,
    SystemRecord,
)
from habitpulse.services.resilience import (
    RecoveryMetric,
    RecoveryPlan,
    ResilienceAssessment,
    activate_recovery,
    assess_resilience,
    burnout_risk,
    default_protocol,
    estimate_duration,
    generate_recovery_plan,
    is_progress_stalled,
    momentum_stability,
    monitor_recovery,
    plan_confidence,
    protective_factors,
    recovery_capacity,
    recovery_triggers,
    risk_factors,
    select_protocol,
    system_robustness,
)

NOW = datetime(2026, 3, 11, 9, 30)
START = datetime(2026, 2, 1, 7, 0)


def _samples(n: int, **overrides) -> list[ExecutionSample]:
    values = dict(completion_rate=80, energy_cost=50, context_fit=60, sequence_effectiveness=50, quality=70)
    values.update(overrides)
    return [
        ExecutionSample(system_id=1, executed_at=START + timedelta(days=i), **values)
        for i in range(n)
    ]


def _assessment(**overrides) -> ResilienceAssessment:
    values = dict(
        overall_resilience=50,
        burnout_risk=30,
        momentum_stability=50,
        system_robustness=50,
        recovery_capacity=50,
        risk_factors=[],
        protective_factors=[],
    )
    values.update(overrides)
    return ResilienceAssessment(**values)


class TestBurnoutRisk:
    def test_short_history_default(self):
        assert burnout_risk(_samples(6, energy_cost=100), []) == 30

    def test_excess_over_baselines(self):
        history = _samples(7, energy_cost=80, completion_rate=50)
        assert burnout_risk(history, []) == 30
        systems = [SystemRecord(id=1, name="Gym", friction_coefficient=90)]
        assert burnout_risk(history, systems) == 60

    def test_capped_at_100(self):
        history = _samples(7, energy_cost=100, completion_rate=0)
        assert burnout_risk(history, [SystemRecord(id=1, name="Gym", friction_coefficient=100)]) == 100


class TestStability:
    def test_short_history_is_neutral(self):
        assert momentum_stability(_samples(13)) == 50

    def test_flat_quality_is_fully_stable(self):
        assert momentum_stability(_samples(14, quality=70)) == 100

    def test_variance_penalty_and_positive_trend(self):
        history = _samples(7, quality=50) + _samples(7, quality=60)
        # variance 25 -> 50, plus the +10 trend
        assert momentum_stability(history) == 60


class TestRobustnessAndCapacity:
    def test_robustness(self):
        assert system_robustness([]) == 0
        assert system_robustness([SystemRecord(id=1, name="Walk")]) == 40

        adapted = SystemRecord(
            id=1,
            name="Walk",
            adaptations=tuple(AdaptationRecord(trigger="t", change="c", impact=5) for _ in range(12)),
        )
        assert system_robustness([adapted]) == 60

    def test_capacity(self):
        assert recovery_capacity([], []) == 0
        protocols = [
            ProtocolRecord(name="Reset", trigger="manual", effectiveness=80),
            ProtocolRecord(name="Rest", trigger="manual", effectiveness=60),
        ]
        history = _samples(2, quality=90) + _samples(2, quality=60)
        assert recovery_capacity(protocols, history) == 60


class TestRiskAndProtectiveFactors:
    def test_no_data_no_risks(self):
        assert risk_factors([], []) == []

    def test_all_risks_critical(self):
        history = [
            ExecutionSample(1, START + timedelta(days=i), 0 if i % 2 else 100, 90, 60, 50, 70)
            for i in range(6)
        ]
        systems = [SystemRecord(id=i, name=f"S{i}", effectiveness_score=20) for i in range(3)]
        risks = risk_factors(systems, history)

        assert [r.type for r in risks] == ["energy_depletion", "consistency_break", "system_failure"]
        assert all(r.severity == "critical" for r in risks)
        assert risks[1].probability == 100
        assert risks[2].probability == 60
        assert risks[2].description == "3 systems at risk of failure"

    def test_protective_factors(self):
        systems = [
            SystemRecord(id=1, name="Walk", effectiveness_score=80, friction_coefficient=20),
            SystemRecord(id=2, name="Gym"),
        ]
        protocols = [ProtocolRecord(name=f"P{i}", trigger="manual") for i in range(5)]
        factors = protective_factors(systems, protocols)

        assert [f.type for f in factors] == ["high_consistency", "recovery_protocols"]
        assert factors[0].strength == 50
        assert factors[1].strength == 100

    def test_assessment_on_empty_inputs(self):
        assessment = assess_resilience([], [], [])
        assert assessment.system_robustness == 0
        assert assessment.momentum_stability == 50
        assert assessment.recovery_capacity == 0
        assert assessment.overall_resilience == 15
        assert assessment.burnout_risk == 30


class TestRecoveryPlan:
    def test_default_protocol_when_none_stored(self):
        assert select_protocol([]).name == "Default Recovery Protocol"
        stored = [
            ProtocolRecord(name="A", trigger="manual", effectiveness=60),
            ProtocolRecord(name="B", trigger="manual", effectiveness=90),
        ]
        assert select_protocol(stored).name == "B"

    def test_triggers(self):
        assert recovery_triggers(_assessment()) == []
        triggers = recovery_triggers(_assessment(burnout_risk=75, momentum_stability=30))
        assert [t.condition for t in triggers] == ["burnout_risk", "momentum_stability"]
        assert not any(t.activated for t in triggers)

    def test_duration(self):
        assert estimate_duration(_assessment(burnout_risk=50, overall_resilience=80)) == 5
        assert estimate_duration(_assessment(burnout_risk=70, overall_resilience=60)) == 8
        assert estimate_duration(_assessment(burnout_risk=90, overall_resilience=40)) == 13

    def test_confidence(self):
        protocol = ProtocolRecord(name="Reset", trigger="manual", effectiveness=80)
        assert plan_confidence(protocol, _assessment(overall_resilience=50, burnout_risk=20)) == 71

    def test_generated_plan(self):
        plan = generate_recovery_plan(_assessment(burnout_risk=75), [], date(2026, 3, 11))
        assert plan.protocol.name == "Default Recovery Protocol"
        assert [a.priority for a in plan.actions] == [1, 2, 3]
        assert all(a.status == "pending" and a.scheduled_for == date(2026, 3, 11) for a in plan.actions)
        assert [p.name for p in plan.timeline.phases] == ["Stabilization", "Rebuilding", "Growth"]
        assert plan.timeline.milestones[-1].target_date == date(2026, 3, 18)
        assert plan.success_metrics[1].current == 75


class TestActivation:
    def test_stamps_a_copy_of_the_protocol(self):
        protocol = ProtocolRecord(
            name="Reset",
            trigger="manual",
            id=4,
            actions=(
                ProtocolAction(type="system", description="Drop to one system", priority=1),
                ProtocolAction(type="schedule", description="Move workouts to mornings", priority=5),
                ProtocolAction(type="mindset", description="Plan next quarter", priority=9),
            ),
        )
        plan = activate_recovery(protocol, "manual", NOW)

        assert plan.protocol.last_used == NOW
        assert protocol.last_used is None
        assert plan.triggers[0].activated is True
        assert plan.triggers[0].condition == "manual"
        assert plan.estimated_duration_days == 6
        assert plan.confidence == 85
        phases = plan.timeline.phases
        assert phases[0].actions == ["Drop to one system"]
        assert phases[1].actions == ["Move workouts to mornings"]
        assert phases[2].actions == ["Plan next quarter"]
        assert plan.timeline.milestones[1].target_date == date(2026, 3, 17)


class TestMonitoring:
    def _plan(self) -> RecoveryPlan:
        return activate_recovery(default_protocol(), "manual", NOW)

    def test_ahead(self):
        plan = self._plan()
        progress = monitor_recovery(
            plan,
            {"Completion Rate": 80, "Energy Cost": 25, "System Effectiveness": 70, "Momentum Strength": 60},
            [],
        )
        assert progress.progress == 90
        assert progress.status == "ahead"
        assert progress.adjustments[0] == "Accelerate timeline"

    def test_behind_without_readings_and_plan_untouched(self):
        plan = self._plan()
        progress = monitor_recovery(plan, {}, [])
        assert progress.progress == 20
        assert progress.status == "behind"

        monitor_recovery(plan, {"Completion Rate": 80}, [])
        assert plan.success_metrics[0].current == 0

    def test_stalled_vs_on_track(self):
        readings = {"Completion Rate": 40, "Energy Cost": 50, "System Effectiveness": 35, "Momentum Strength": 30}
        assert monitor_recovery(self._plan(), readings, []).status == "on_track"
        stalled = monitor_recovery(self._plan(), readings, _samples(5, quality=40))
        assert stalled.status == "stalled"
        assert stalled.progress == 40

    def test_zero_target_counts_nothing(self):
        plan = dataclasses.replace(
            self._plan(),
            success_metrics=[RecoveryMetric("Custom", 0, 10, "%", "increase", 1.0)],
        )
        assert monitor_recovery(plan, {}, []).progress == 0

    def test_stall_detection(self):
        assert is_progress_stalled(_samples(4, quality=10)) is False
        assert is_progress_stalled(_samples(5, quality=40)) is True
        assert is_progress_stalled(_samples(5, quality=60)) is False
