"""
Resilience assessment and recovery planning.

Assessment
----------
  overall resilience   0.4 robustness + 0.3 stability + 0.3 recovery capacity
  burnout risk         excess of recent energy cost, completion shortfall and
                       system friction over a 60 baseline; 30 when < 7 samples
  momentum stability   100 - 2*variance(quality) plus any positive trend;
                       50 when < 14 samples
  system robustness    0.5 effectiveness + 0.3 (100 - friction)
                       + 0.2 min(100, 10 * adaptations per system); 0 without systems
  recovery capacity    0.6 protocol effectiveness + 0.2 min(100, 20 * protocols)
                       + 0.2 share of samples with quality > 70

Recovery plans pick the most effective stored protocol, or a built-in
default when the user has none. Activation and monitoring never mutate
their inputs; they return new values.
"""
from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Optional

from habitpulse.core.thresholds import NEUTRAL_SCORE, RESILIENCE, ResilienceThresholds
from habitpulse.services.numeric import mean, round_half_up, variance, window_means
from habitpulse.services.records import (
    ExecutionSample,
    ProtocolAction,
    ProtocolCondition,
    ProtocolRecord,
    SystemRecord,
)


# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------

@dataclass
class RiskFactor:
    type: str  # "energy_depletion" | "consistency_break" | "system_failure"
    severity: str
    probability: float
    impact: int
    description: str
    indicators: list[str]
    mitigation: list[str]


@dataclass
class ProtectiveFactor:
    type: str  # "high_consistency" | "recovery_protocols"
    strength: float
    description: str
    benefits: list[str]


@dataclass
class ResilienceAssessment:
    overall_resilience: int
    burnout_risk: int
    momentum_stability: int
    system_robustness: int
    recovery_capacity: int
    risk_factors: list[RiskFactor]
    protective_factors: list[ProtectiveFactor]


@dataclass
class RecoveryTrigger:
    type: str  # "automatic" | "manual" | "scheduled"
    condition: str
    threshold: float
    activated: bool
    timestamp: Optional[datetime] = None


@dataclass
class RecoveryAction:
    type: str
    description: str
    priority: int
    automated: bool
    status: str = "pending"  # "pending" | "active" | "completed" | "skipped"
    scheduled_for: Optional[date] = None


@dataclass
class RecoveryPhase:
    name: str
    duration_days: int
    description: str
    objectives: list[str]
    actions: list[str]
    success_criteria: list[str]


@dataclass
class RecoveryMilestone:
    name: str
    target_date: date
    description: str
    achieved: bool = False


@dataclass
class RecoveryCheckpoint:
    day: int
    assessments: list[str]
    adjustments: list[str]
    criteria: list[str]


@dataclass
class RecoveryTimeline:
    phases: list[RecoveryPhase]
    milestones: list[RecoveryMilestone]
    checkpoints: list[RecoveryCheckpoint]


@dataclass
class RecoveryMetric:
    name: str
    target: float
    current: float
    unit: str
    direction: str  # "increase" | "decrease"
    weight: float


@dataclass
class RecoveryPlan:
    protocol: ProtocolRecord
    triggers: list[RecoveryTrigger]
    actions: list[RecoveryAction]
    timeline: RecoveryTimeline
    success_metrics: list[RecoveryMetric]
    estimated_duration_days: int
    confidence: int


@dataclass
class RecoveryProgress:
    progress: int
    status: str  # "on_track" | "behind" | "ahead" | "stalled"
    adjustments: list[str] = field(default_factory=list)
    recommendations: list[str] = field(default_factory=list)
    metrics: list[RecoveryMetric] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Assessment
# ---------------------------------------------------------------------------

def burnout_risk(
    history: list[ExecutionSample],
    systems: list[SystemRecord],
    t: ResilienceThresholds = RESILIENCE,
) -> int:
    if len(history) < t.burnout_min_samples:
        return t.burnout_default

    recent = history[-t.burnout_min_samples:]
    energy = mean(s.energy_cost for s in recent)
    completion = mean(s.completion_rate for s in recent)
    friction = mean(s.friction_coefficient for s in systems) if systems else float(NEUTRAL_SCORE)

    risk = (
        max(0.0, energy - t.burnout_energy_floor)
        + max(0.0, t.burnout_completion_floor - completion)
        + max(0.0, friction - t.burnout_friction_floor)
    )
    return min(100, round_half_up(risk))


def momentum_stability(
    history: list[ExecutionSample],
    t: ResilienceThresholds = RESILIENCE,
) -> int:
    if len(history) < t.stability_min_samples:
        return NEUTRAL_SCORE

    quality = [s.quality for s in history]
    recent, older = window_means(quality, t.stability_window)
    score = max(0.0, 100 - variance(quality) * t.stability_variance_penalty) + max(0.0, recent - older)
    return min(100, round_half_up(score))


def system_robustness(systems: list[SystemRecord], t: ResilienceThresholds = RESILIENCE) -> int:
    if not systems:
        return 0

    adaptations = sum(len(s.adaptations) for s in systems) / len(systems)
    score = (
        mean(s.effectiveness_score for s in systems) * t.robustness_effectiveness_weight
        + (100 - mean(s.friction_coefficient for s in systems)) * t.robustness_friction_weight
        + min(100.0, adaptations * t.robustness_adaptation_factor) * t.robustness_adaptation_weight
    )
    return round_half_up(score)


def recovery_capacity(
    protocols: list[ProtocolRecord],
    history: list[ExecutionSample],
    t: ResilienceThresholds = RESILIENCE,
) -> int:
    effectiveness = sum(p.effectiveness for p in protocols) / max(1, len(protocols))
    good = sum(1 for s in history if s.quality > t.capacity_good_quality)
    success = min(100.0, good / max(1, len(history)) * 100)

    score = (
        effectiveness * t.capacity_effectiveness_weight
        + min(100.0, len(protocols) * t.capacity_protocol_factor) * t.capacity_protocol_weight
        + success * t.capacity_success_weight
    )
    return round_half_up(score)


def _consistency(history: list[ExecutionSample], t: ResilienceThresholds) -> float:
    if len(history) < t.consistency_min_samples:
        return float(NEUTRAL_SCORE)
    return max(0.0, 100 - variance([s.completion_rate for s in history]) * 2)


def risk_factors(
    systems: list[SystemRecord],
    history: list[ExecutionSample],
    t: ResilienceThresholds = RESILIENCE,
) -> list[RiskFactor]:
    risks: list[RiskFactor] = []

    energy = sum(s.energy_cost for s in history) / max(1, len(history))
    if energy > t.risk_energy:
        risks.append(RiskFactor(
            type="energy_depletion",
            severity="critical" if energy > t.risk_energy_critical else "high",
            probability=energy,
            impact=t.risk_energy_impact,
            description="High energy consumption leading to burnout risk",
            indicators=["Energy cost > 70%", "Declining completion rates", "Increased skip frequency"],
            mitigation=["Reduce system complexity", "Optimize timing", "Add recovery periods"],
        ))

    consistency = _consistency(history, t)
    if consistency < t.risk_consistency:
        risks.append(RiskFactor(
            type="consistency_break",
            severity="critical" if consistency < t.risk_consistency_critical else "high",
            probability=100 - consistency,
            impact=t.risk_consistency_impact,
            description="Breaking consistency patterns leading to momentum loss",
            indicators=["Irregular execution patterns", "High variance in completion", "Missed executions"],
            mitigation=["Establish fixed routines", "Reduce system count", "Focus on core systems"],
        ))

    failing = [s for s in systems if s.effectiveness_score < t.risk_system_effectiveness]
    if failing:
        risks.append(RiskFactor(
            type="system_failure",
            severity="critical" if len(failing) > t.risk_system_critical_count else "high",
            probability=len(failing) * t.risk_system_probability_step,
            impact=t.risk_system_impact,
            description=f"{len(failing)} systems at risk of failure",
            indicators=["Low effectiveness scores", "High friction", "Poor adaptation history"],
            mitigation=["System redesign", "Replace failing systems", "Reduce complexity"],
        ))

    return risks


def protective_factors(
    systems: list[SystemRecord],
    protocols: list[ProtocolRecord],
    t: ResilienceThresholds = RESILIENCE,
) -> list[ProtectiveFactor]:
    factors: list[ProtectiveFactor] = []

    steady = [
        s for s in systems
        if s.effectiveness_score > t.protective_effectiveness and s.friction_coefficient < t.protective_friction
    ]
    if steady:
        factors.append(ProtectiveFactor(
            type="high_consistency",
            strength=len(steady) / len(systems) * 100,
            description=f"{len(steady)} systems with high effectiveness and low friction",
            benefits=["Reliable momentum builders", "Low energy cost", "Predictable outcomes"],
        ))

    if protocols:
        factors.append(ProtectiveFactor(
            type="recovery_protocols",
            strength=min(100, len(protocols) * t.protective_protocol_strength),
            description=f"{len(protocols)} recovery protocols available",
            benefits=["Automated recovery triggers", "Structured recovery process", "Proven recovery strategies"],
        ))

    return factors


def assess_resilience(
    systems: list[SystemRecord],
    history: list[ExecutionSample],
    protocols: list[ProtocolRecord],
    t: ResilienceThresholds = RESILIENCE,
) -> ResilienceAssessment:
    robustness = system_robustness(systems, t)
    stability = momentum_stability(history, t)
    capacity = recovery_capacity(protocols, history, t)
    overall = round_half_up(
        robustness * t.resilience_robustness_weight
        + stability * t.resilience_stability_weight
        + capacity * t.resilience_capacity_weight
    )
    return ResilienceAssessment(
        overall_resilience=overall,
        burnout_risk=burnout_risk(history, systems, t),
        momentum_stability=stability,
        system_robustness=robustness,
        recovery_capacity=capacity,
        risk_factors=risk_factors(systems, history, t),
        protective_factors=protective_factors(systems, protocols, t),
    )


# ---------------------------------------------------------------------------
# Recovery plan
# ---------------------------------------------------------------------------

def default_protocol(t: ResilienceThresholds = RESILIENCE) -> ProtocolRecord:
    return ProtocolRecord(
        name="Default Recovery Protocol",
        trigger="High burnout risk or momentum decline",
        effectiveness=t.default_protocol_effectiveness,
        conditions=(
            ProtocolCondition(metric="burnout_risk", operator="gt", threshold=t.trigger_burnout),
            ProtocolCondition(metric="momentum_stability", operator="lt", threshold=t.trigger_stability),
        ),
        actions=(
            ProtocolAction(type="system", description="Reduce system complexity by 50%", priority=1, automated=True),
            ProtocolAction(type="schedule", description="Add recovery periods between executions", priority=2, automated=True),
            ProtocolAction(type="mindset", description="Focus on consistency over intensity", priority=3, automated=False),
        ),
    )


def select_protocol(protocols: list[ProtocolRecord], t: ResilienceThresholds = RESILIENCE) -> ProtocolRecord:
    if not protocols:
        return default_protocol(t)
    return max(protocols, key=lambda p: p.effectiveness)


def recovery_triggers(
    assessment: ResilienceAssessment,
    t: ResilienceThresholds = RESILIENCE,
) -> list[RecoveryTrigger]:
    triggers: list[RecoveryTrigger] = []
    if assessment.burnout_risk > t.trigger_burnout:
        triggers.append(RecoveryTrigger(
            type="automatic", condition="burnout_risk", threshold=t.trigger_burnout, activated=False,
        ))
    if assessment.momentum_stability < t.trigger_stability:
        triggers.append(RecoveryTrigger(
            type="automatic", condition="momentum_stability", threshold=t.trigger_stability, activated=False,
        ))
    return triggers


def _pending_actions(protocol: ProtocolRecord, today: date) -> list[RecoveryAction]:
    return [
        RecoveryAction(
            type=a.type,
            description=a.description,
            priority=a.priority,
            automated=a.automated,
            status="pending",
            scheduled_for=today,
        )
        for a in protocol.actions
    ]


def _plan_timeline(today: date) -> RecoveryTimeline:
    return RecoveryTimeline(
        phases=[
            RecoveryPhase(
                name="Stabilization",
                duration_days=2,
                description="Immediate stabilization and damage control",
                objectives=["Stop decline", "Stabilize energy", "Maintain core systems"],
                actions=["Reduce complexity", "Add recovery time", "Focus on essentials"],
                success_criteria=["No further decline", "Energy stabilized", "Core systems maintained"],
            ),
            RecoveryPhase(
                name="Rebuilding",
                duration_days=3,
                description="Gradual rebuilding of momentum and systems",
                objectives=["Rebuild consistency", "Optimize systems", "Restore confidence"],
                actions=["Gradual complexity increase", "System optimization", "Momentum building"],
                success_criteria=["Consistent execution", "Improved effectiveness", "Positive momentum"],
            ),
            RecoveryPhase(
                name="Growth",
                duration_days=2,
                description="Return to growth and optimization",
                objectives=["Expand systems", "Increase challenges", "Optimize performance"],
                actions=["System expansion", "Challenge increase", "Performance optimization"],
                success_criteria=["System growth", "Challenge mastery", "Peak performance"],
            ),
        ],
        milestones=[
            RecoveryMilestone("Stabilized", today + timedelta(days=2), "Initial stabilization achieved"),
            RecoveryMilestone("Recovered", today + timedelta(days=7), "Full recovery completed"),
        ],
        checkpoints=[
            RecoveryCheckpoint(
                day=2,
                assessments=["Energy levels", "System stability", "Momentum"],
                adjustments=["Complexity", "Timing", "Support"],
                criteria=["Stabilized energy", "No failures", "Momentum stable"],
            ),
            RecoveryCheckpoint(
                day=5,
                assessments=["Consistency", "Effectiveness", "Progress"],
                adjustments=["Challenge level", "System scope", "Goals"],
                criteria=["Consistent execution", "Improving effectiveness", "On track"],
            ),
        ],
    )


def _plan_metrics(assessment: ResilienceAssessment) -> list[RecoveryMetric]:
    return [
        RecoveryMetric("Completion Rate", 80, 0, "%", "increase", 0.3),
        RecoveryMetric("Energy Cost", 50, assessment.burnout_risk, "%", "decrease", 0.2),
        RecoveryMetric("System Effectiveness", 70, assessment.system_robustness, "%", "increase", 0.3),
        RecoveryMetric("Momentum Stability", 60, assessment.momentum_stability, "%", "increase", 0.2),
    ]


def estimate_duration(assessment: ResilienceAssessment, t: ResilienceThresholds = RESILIENCE) -> int:
    if assessment.burnout_risk > t.duration_burnout_severe:
        multiplier = t.duration_severe_multiplier
    elif assessment.burnout_risk > t.duration_burnout_elevated:
        multiplier = t.duration_elevated_multiplier
    else:
        multiplier = 1.0

    if assessment.overall_resilience > t.duration_resilience_high:
        adjust = t.duration_high_adjust
    elif assessment.overall_resilience > t.duration_resilience_mid:
        adjust = 0
    else:
        adjust = t.duration_low_adjust

    return round_half_up(t.duration_base_days * multiplier + adjust)


def plan_confidence(
    protocol: ProtocolRecord,
    assessment: ResilienceAssessment,
    t: ResilienceThresholds = RESILIENCE,
) -> int:
    return round_half_up(
        protocol.effectiveness * t.confidence_protocol_weight
        + assessment.overall_resilience * t.confidence_resilience_weight
        + max(0, 100 - assessment.burnout_risk) * t.confidence_risk_weight
    )


def generate_recovery_plan(
    assessment: ResilienceAssessment,
    protocols: list[ProtocolRecord],
    today: date,
    t: ResilienceThresholds = RESILIENCE,
) -> RecoveryPlan:
    protocol = select_protocol(protocols, t)
    return RecoveryPlan(
        protocol=protocol,
        triggers=recovery_triggers(assessment, t),
        actions=_pending_actions(protocol, today),
        timeline=_plan_timeline(today),
        success_metrics=_plan_metrics(assessment),
        estimated_duration_days=estimate_duration(assessment, t),
        confidence=plan_confidence(protocol, assessment, t),
    )


# ---------------------------------------------------------------------------
# Activation and monitoring
# ---------------------------------------------------------------------------

def _phase_actions(actions: list[RecoveryAction], low: int, high: Optional[int]) -> list[str]:
    return [
        a.description for a in actions
        if a.priority > low and (high is None or a.priority <= high)
    ]


def activate_recovery(
    protocol: ProtocolRecord,
    trigger_condition: str,
    now: datetime,
    t: ResilienceThresholds = RESILIENCE,
) -> RecoveryPlan:
    """
    Start a recovery run for `protocol`. The returned plan carries a copy of
    the protocol stamped with `last_used = now`; callers persist that stamp.
    """
    today = now.date()
    used = dataclasses.replace(protocol, last_used=now)
    actions = _pending_actions(used, today)

    timeline = RecoveryTimeline(
        phases=[
            RecoveryPhase(
                name="Immediate Recovery",
                duration_days=1,
                description="Stabilize current state and prevent further decline",
                objectives=["Stop momentum loss", "Reduce cognitive load", "Activate core systems"],
                actions=_phase_actions(actions, 0, 3),
                success_criteria=["No further system failures", "Stabilized energy levels", "Core systems active"],
            ),
            RecoveryPhase(
                name="Rebuilding Phase",
                duration_days=3,
                description="Gradually rebuild momentum and system effectiveness",
                objectives=["Rebuild consistency", "Optimize systems", "Restore confidence"],
                actions=_phase_actions(actions, 3, 7),
                success_criteria=["Consistent execution", "Improved system effectiveness", "Positive momentum"],
            ),
            RecoveryPhase(
                name="Growth Phase",
                duration_days=2,
                description="Expand beyond recovery to growth and optimization",
                objectives=["Expand system scope", "Increase challenge", "Optimize performance"],
                actions=_phase_actions(actions, 7, None),
                success_criteria=["Momentum growth", "System optimization", "Sustainable performance"],
            ),
        ],
        milestones=[
            RecoveryMilestone(
                "Stabilization Achieved", today + timedelta(days=1),
                "Initial stabilization and momentum preservation",
            ),
            RecoveryMilestone(
                "Recovery Complete", today + timedelta(days=t.activation_duration_days),
                "Full recovery and return to optimal performance",
            ),
        ],
        checkpoints=[
            RecoveryCheckpoint(
                day=1,
                assessments=["Energy levels", "System stability", "Momentum direction"],
                adjustments=["System complexity", "Execution timing", "Recovery intensity"],
                criteria=["No new system failures", "Energy levels stable", "Momentum stabilized"],
            ),
            RecoveryCheckpoint(
                day=3,
                assessments=["Consistency improvement", "System effectiveness", "Recovery progress"],
                adjustments=["System scope", "Challenge level", "Support systems"],
                criteria=["Consistent execution", "System effectiveness improving", "On track for recovery"],
            ),
        ],
    )

    return RecoveryPlan(
        protocol=used,
        triggers=[RecoveryTrigger(
            type="automatic",
            condition=trigger_condition,
            threshold=t.activation_threshold,
            activated=True,
            timestamp=now,
        )],
        actions=actions,
        timeline=timeline,
        success_metrics=[
            RecoveryMetric("Completion Rate", 80, 0, "%", "increase", 0.3),
            RecoveryMetric("Energy Cost", 50, 0, "%", "decrease", 0.2),
            RecoveryMetric("System Effectiveness", 70, 0, "%", "increase", 0.3),
            RecoveryMetric("Momentum Strength", 60, 0, "%", "increase", 0.2),
        ],
        estimated_duration_days=t.activation_duration_days,
        confidence=t.activation_confidence,
    )


def _metric_progress(m: RecoveryMetric) -> float:
    if m.target == 0:
        return 0.0
    if m.direction == "increase":
        raw = m.current / m.target * 100
    else:
        raw = (m.target - m.current) / m.target * 100
    return min(100.0, max(0.0, raw))


def is_progress_stalled(history: list[ExecutionSample], t: ResilienceThresholds = RESILIENCE) -> bool:
    if len(history) < t.stalled_min_samples:
        return False
    recent = [s.quality for s in history[-t.stalled_window:]]
    return all(q < t.stalled_quality for q in recent) and variance(recent) < t.stalled_variance


_ADJUSTMENTS = {
    "behind": ["Increase recovery intensity", "Add support systems", "Reduce system complexity"],
    "stalled": ["Change recovery approach", "Identify blocking factors", "Adjust timeline"],
    "ahead": ["Accelerate timeline", "Add growth objectives", "Increase challenges"],
}

_RECOMMENDATIONS = {
    "behind": ["Focus on core systems only", "Increase recovery frequency", "Seek additional support"],
    "stalled": ["Reassess recovery strategy", "Consider alternative approaches", "Address root causes"],
    "ahead": ["Maintain current momentum", "Prepare for growth phase", "Document successful strategies"],
}


def monitor_recovery(
    plan: RecoveryPlan,
    current: dict[str, float],
    history: list[ExecutionSample],
    t: ResilienceThresholds = RESILIENCE,
) -> RecoveryProgress:
    """Score a running plan against fresh metric readings keyed by metric name."""
    metrics = [
        dataclasses.replace(m, current=current[m.name]) if m.name in current else dataclasses.replace(m)
        for m in plan.success_metrics
    ]
    total = sum(_metric_progress(m) * m.weight for m in metrics)

    if total < t.monitor_behind:
        status = "behind"
    elif total > t.monitor_ahead:
        status = "ahead"
    elif is_progress_stalled(history, t):
        status = "stalled"
    else:
        status = "on_track"

    return RecoveryProgress(
        progress=round_half_up(total),
        status=status,
        adjustments=list(_ADJUSTMENTS.get(status, [])),
        recommendations=list(_RECOMMENDATIONS.get(status, [])),
        metrics=metrics,
    )
