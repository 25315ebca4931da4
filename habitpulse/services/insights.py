"""
Insight, bias and prediction detectors.

Every detector is an independent function over plain inputs (execution
samples, systems, profile, current momentum). A detector that lacks data
returns None or an empty list, never raises. Results are combined only by
concatenation and sorting:

  insights         by priority (critical > high > medium > low)
  biases           by severity (critical > high > medium > low)
  predictions      by confidence, descending
  leverage points  by ROI, descending
  friction points  by severity, descending

All sorts are stable. Thresholds come from `habitpulse.core.thresholds.INSIGHTS`.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from habitpulse.core.thresholds import INSIGHTS, NEUTRAL_SCORE, InsightThresholds
from habitpulse.services.momentum import MomentumMetrics
from habitpulse.services.numeric import mean, stddev, window_means
from habitpulse.services.records import ExecutionSample, ProfileRecord, SystemRecord


SEVERITY_RANK = {"critical": 4, "high": 3, "medium": 2, "low": 1}


# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------

@dataclass
class Insight:
    type: str  # "pattern" | "friction" | "leverage"
    title: str
    description: str
    evidence: str
    recommended_action: str
    priority: str


@dataclass
class CognitiveBias:
    type: str
    description: str
    evidence: list[str]
    severity: str
    impact: str
    recommendation: str


@dataclass
class PredictionFactor:
    factor: str
    weight: float
    value: float
    contribution: float


@dataclass
class PredictionScenario:
    name: str
    probability: float
    description: str
    triggers: list[str]


@dataclass
class PredictionOutcome:
    probability: float
    impact: str
    description: str
    scenarios: list[PredictionScenario]


@dataclass
class Prediction:
    type: str
    confidence: float
    timeframe: str
    factors: list[PredictionFactor]
    outcome: PredictionOutcome
    mitigation: list[str] = field(default_factory=list)


@dataclass
class LeveragePoint:
    system_id: int
    system_name: str
    type: str  # "high_impact" | "momentum_builder"
    potential_impact: float
    effort_required: float
    roi: float
    description: str
    action_steps: list[str]


@dataclass
class FrictionPoint:
    system_id: int
    system_name: str
    type: str  # "complexity" | "energy"
    severity: float
    frequency: int
    description: str
    solutions: list[str]


@dataclass
class InsightReport:
    insights: list[Insight]
    cognitive_biases: list[CognitiveBias]
    predictions: list[Prediction]
    leverage_points: list[LeveragePoint]
    friction_points: list[FrictionPoint]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _for_system(history: list[ExecutionSample], system_id: int) -> list[ExecutionSample]:
    return [s for s in history if s.system_id == system_id]


def execution_consistency(history: list[ExecutionSample], t: InsightThresholds = INSIGHTS) -> float:
    """Whole-history consistency: 100 - 2 * stddev(completion rates)."""
    if len(history) < t.consistency_min_samples:
        return float(NEUTRAL_SCORE)
    return max(0.0, 100 - stddev([s.completion_rate for s in history]) * 2)


def energy_efficiency(history: list[ExecutionSample]) -> float:
    """Completion per unit of energy, capped at 100. Zero-cost samples count their raw completion."""
    if not history:
        return float(NEUTRAL_SCORE)
    scores = [
        s.completion_rate if s.energy_cost == 0 else s.completion_rate / s.energy_cost * 100
        for s in history
    ]
    return min(100.0, mean(scores))


# ---------------------------------------------------------------------------
# Execution insights
# ---------------------------------------------------------------------------

def execution_insights(
    history: list[ExecutionSample],
    systems: list[SystemRecord],
    momentum: MomentumMetrics,
    t: InsightThresholds = INSIGHTS,
) -> list[Insight]:
    insights: list[Insight] = []

    if momentum.direction == "decreasing" and momentum.strength < t.decline_strength:
        insights.append(Insight(
            type="pattern",
            title="Momentum Decline Detected",
            description="Your overall momentum is decreasing with low strength",
            evidence=f"Direction: {momentum.direction}, Strength: {momentum.strength}%",
            recommended_action="Focus on high-consistency, low-friction systems to rebuild momentum",
            priority="high",
        ))

    consistency = execution_consistency(history, t)
    if consistency < t.inconsistent_below:
        insights.append(Insight(
            type="pattern",
            title="Inconsistent Execution Pattern",
            description="Your execution consistency is below optimal levels",
            evidence=f"Consistency score: {consistency:.0f}%",
            recommended_action="Establish fixed execution times and reduce system complexity",
            priority="medium",
        ))

    efficiency = energy_efficiency(history)
    if efficiency < t.energy_efficiency_below:
        insights.append(Insight(
            type="friction",
            title="High Energy Cost Detected",
            description="Your systems are requiring more energy than optimal",
            evidence=f"Energy efficiency: {efficiency:.0f}%",
            recommended_action="Optimize timing, reduce friction, or break down complex systems",
            priority="medium",
        ))

    for system in systems:
        if system.effectiveness_score < t.redesign_effectiveness and system.friction_coefficient > t.redesign_friction:
            insights.append(Insight(
                type="leverage",
                title=f'System "{system.name}" Needs Redesign',
                description="High friction with low effectiveness indicates system misalignment",
                evidence=(
                    f"Effectiveness: {system.effectiveness_score:g}%, "
                    f"Friction: {system.friction_coefficient:g}%"
                ),
                recommended_action="Consider redesigning or replacing this system with a simpler alternative",
                priority="high",
            ))

    return sorted(insights, key=lambda i: SEVERITY_RANK[i.priority], reverse=True)


# ---------------------------------------------------------------------------
# Cognitive biases
# ---------------------------------------------------------------------------

def detect_planning_fallacy(
    history: list[ExecutionSample],
    t: InsightThresholds = INSIGHTS,
) -> Optional[CognitiveBias]:
    recent = history[-t.bias_window:]
    if len(recent) < t.bias_min_samples:
        return None

    energy = mean(s.energy_cost for s in recent)
    if energy <= t.planning_energy:
        return None
    return CognitiveBias(
        type="planning_fallacy",
        description="Consistently underestimating the time and energy required for execution",
        evidence=[
            f"Average energy cost: {energy:.0f}%",
            "Systems may be too complex for current capacity",
        ],
        severity="high" if energy > t.planning_energy_high else "medium",
        impact="Leads to overcommitment and burnout",
        recommendation="Use historical data to set realistic expectations and add buffer time",
    )


def detect_perfectionism(
    history: list[ExecutionSample],
    t: InsightThresholds = INSIGHTS,
) -> Optional[CognitiveBias]:
    recent = history[-t.bias_window:]
    if len(recent) < t.bias_min_samples:
        return None

    quality = mean(s.quality for s in recent)
    completion = mean(s.completion_rate for s in recent)
    if not (quality > t.perfectionism_quality and completion < t.perfectionism_completion):
        return None
    return CognitiveBias(
        type="perfectionism",
        description="Prioritizing perfect execution over consistent completion",
        evidence=[f"High quality: {quality:.0f}%", f"Low completion: {completion:.0f}%"],
        severity="medium",
        impact="Reduces overall progress and momentum",
        recommendation='Focus on "good enough" execution and prioritize consistency over perfection',
    )


def detect_optimism_bias(
    history: list[ExecutionSample],
    systems: list[SystemRecord],
    t: InsightThresholds = INSIGHTS,
) -> Optional[CognitiveBias]:
    if not systems:
        return None

    perceived = mean(s.effectiveness_score for s in systems)
    actual = mean(s.quality for s in history) if history else float(NEUTRAL_SCORE)
    if perceived - actual <= t.optimism_gap:
        return None
    return CognitiveBias(
        type="optimism_bias",
        description="Overestimating system effectiveness compared to actual performance",
        evidence=[f"Perceived effectiveness: {perceived:.0f}%", f"Actual quality: {actual:.0f}%"],
        severity="medium",
        impact="Leads to poor system selection and unrealistic expectations",
        recommendation="Base system evaluations on actual execution data rather than perceived effectiveness",
    )


def detect_confirmation_bias(
    systems: list[SystemRecord],
    t: InsightThresholds = INSIGHTS,
) -> Optional[CognitiveBias]:
    total = len(systems)
    locked = sum(1 for s in systems if s.locked)
    if total <= t.confirmation_min_systems or locked / total <= t.confirmation_locked_ratio:
        return None
    return CognitiveBias(
        type="confirmation_bias",
        description="Resisting change and locking in systems that confirm existing preferences",
        evidence=[f"{locked} of {total} systems are locked", "High resistance to adaptation"],
        severity="medium",
        impact="Prevents system evolution and optimization",
        recommendation="Regularly review locked systems and be open to adaptation based on performance data",
    )


def detect_sunk_cost_fallacy(
    systems: list[SystemRecord],
    t: InsightThresholds = INSIGHTS,
) -> Optional[CognitiveBias]:
    """Reports the first low-effectiveness system whose many adaptations rarely helped."""
    for system in systems:
        adaptations = system.adaptations
        if system.effectiveness_score >= t.sunk_cost_effectiveness or len(adaptations) <= t.sunk_cost_adaptations:
            continue
        positive = sum(1 for a in adaptations if a.impact > 0)
        if positive / len(adaptations) < t.sunk_cost_success_ratio:
            return CognitiveBias(
                type="sunk_cost_fallacy",
                description=f'Continuing to invest in "{system.name}" despite poor performance',
                evidence=[
                    f"Low effectiveness: {system.effectiveness_score:g}%",
                    f"{len(adaptations)} adaptations with low success rate",
                    "Continued investment despite poor returns",
                ],
                severity="high",
                impact="Wastes resources and prevents focus on more effective systems",
                recommendation="Consider replacing this system with a more effective alternative",
            )
    return None


def detect_cognitive_biases(
    history: list[ExecutionSample],
    systems: list[SystemRecord],
    profile: Optional[ProfileRecord] = None,
    t: InsightThresholds = INSIGHTS,
) -> list[CognitiveBias]:
    found = [
        detect_planning_fallacy(history, t),
        detect_perfectionism(history, t),
        detect_optimism_bias(history, systems, t),
        detect_confirmation_bias(systems, t),
        detect_sunk_cost_fallacy(systems, t),
    ]
    return sorted(
        (b for b in found if b is not None),
        key=lambda b: SEVERITY_RANK[b.severity],
        reverse=True,
    )


# ---------------------------------------------------------------------------
# Predictions
# ---------------------------------------------------------------------------

def predict_skip_risk(
    history: list[ExecutionSample],
    systems: list[SystemRecord],
    t: InsightThresholds = INSIGHTS,
) -> Optional[Prediction]:
    if len(history) < t.skip_min_samples:
        return None

    recent, _ = window_means([s.completion_rate for s in history], t.skip_window)
    risk = max(0.0, 100 - recent)
    if risk <= t.skip_report:
        return None

    friction = mean(s.friction_coefficient for s in systems) if systems else float(NEUTRAL_SCORE)
    if risk > t.skip_critical:
        impact = "critical"
    elif risk > t.skip_high:
        impact = "high"
    else:
        impact = "medium"

    return Prediction(
        type="skip_risk",
        confidence=risk,
        timeframe="Next 3-5 days",
        factors=[
            PredictionFactor("Recent completion rate", 0.6, recent, 60),
            PredictionFactor("System friction", 0.3, friction, 30),
            PredictionFactor("Energy patterns", 0.1, 50, 10),
        ],
        outcome=PredictionOutcome(
            probability=risk,
            impact=impact,
            description=f"{risk:.0f}% probability of skipping systems in the next few days",
            scenarios=[
                PredictionScenario(
                    "High skip scenario", risk,
                    "Multiple systems skipped, momentum decline",
                    ["Low energy", "High cognitive load", "Environmental disruptions"],
                ),
                PredictionScenario(
                    "Recovery scenario", 100 - risk,
                    "Successful execution with adaptation",
                    ["Proactive intervention", "System simplification", "Timing adjustment"],
                ),
            ],
        ),
        mitigation=[
            "Reduce system complexity",
            "Reschedule to optimal energy windows",
            "Implement micro-commitment fallbacks",
        ],
    )


def predict_momentum_shift(
    momentum: MomentumMetrics,
    t: InsightThresholds = INSIGHTS,
) -> Optional[Prediction]:
    if not (momentum.direction == "decreasing" and momentum.strength < t.shift_strength):
        return None
    return Prediction(
        type="momentum_shift",
        confidence=t.shift_confidence,
        timeframe="Next 7-10 days",
        factors=[
            PredictionFactor("Current direction", 0.4, 20, 40),
            PredictionFactor("Momentum strength", 0.3, momentum.strength, 30),
            PredictionFactor("Consistency score", 0.3, momentum.consistency, 30),
        ],
        outcome=PredictionOutcome(
            probability=t.shift_probability,
            impact="high",
            description="Significant momentum shift likely without intervention",
            scenarios=[
                PredictionScenario(
                    "Negative momentum spiral", 70,
                    "Continued decline leading to system abandonment",
                    ["Low consistency", "High friction", "Energy mismatch"],
                ),
                PredictionScenario(
                    "Momentum recovery", 30,
                    "Successful intervention and momentum rebuilding",
                    ["System optimization", "Focus on high-consistency systems", "Energy alignment"],
                ),
            ],
        ),
        mitigation=[
            "Focus on 1-2 high-consistency systems",
            "Reduce overall system complexity",
            "Align execution with energy patterns",
        ],
    )


def predict_system_failure(
    systems: list[SystemRecord],
    t: InsightThresholds = INSIGHTS,
) -> Optional[Prediction]:
    at_risk = [
        s for s in systems
        if s.effectiveness_score < t.failure_effectiveness and s.friction_coefficient > t.failure_friction
    ]
    if not at_risk:
        return None

    first = at_risk[0]
    return Prediction(
        type="system_failure",
        confidence=t.failure_confidence,
        timeframe="Next 2 weeks",
        factors=[
            PredictionFactor("System effectiveness", 0.5, first.effectiveness_score, 50),
            PredictionFactor("System friction", 0.3, first.friction_coefficient, 30),
            PredictionFactor("Historical performance", 0.2, 25, 20),
        ],
        outcome=PredictionOutcome(
            probability=t.failure_probability,
            impact="medium",
            description=f"{len(at_risk)} system(s) at risk of failure",
            scenarios=[
                PredictionScenario(
                    "System abandonment", 80,
                    "Systems become too difficult to maintain",
                    ["Consistent low performance", "High energy cost", "User frustration"],
                ),
                PredictionScenario(
                    "System redesign", 20,
                    "Successful system redesign and recovery",
                    ["Proactive intervention", "System simplification", "Alternative approaches"],
                ),
            ],
        ),
        mitigation=[
            "Immediate system redesign",
            "Break down into simpler components",
            "Consider system replacement",
        ],
    )


def predict_performance_decline(
    history: list[ExecutionSample],
    t: InsightThresholds = INSIGHTS,
) -> Optional[Prediction]:
    if len(history) < t.decline_min_samples:
        return None

    recent, older = window_means([s.quality for s in history], t.decline_window)
    decline = older - recent
    if decline <= t.decline_drop:
        return None

    return Prediction(
        type="performance_decline",
        confidence=min(t.decline_confidence_cap, t.decline_confidence_base + decline),
        timeframe="Next 1-2 weeks",
        factors=[
            PredictionFactor("Quality decline rate", 0.6, decline, 60),
            PredictionFactor("Energy efficiency", 0.2, 50, 20),
            PredictionFactor("Context alignment", 0.2, 50, 20),
        ],
        outcome=PredictionOutcome(
            probability=min(t.decline_probability_cap, t.decline_probability_base + decline),
            impact="high" if decline > t.decline_high_impact else "medium",
            description=f"Performance declining by {decline:.0f}% per week",
            scenarios=[
                PredictionScenario(
                    "Continued decline", 70,
                    "Performance continues to decline without intervention",
                    ["Burnout", "System fatigue", "Context mismatch"],
                ),
                PredictionScenario(
                    "Performance recovery", 30,
                    "Successful intervention and performance recovery",
                    ["Rest and recovery", "System optimization", "Context adjustment"],
                ),
            ],
        ),
        mitigation=["Take recovery days", "Review and optimize systems", "Adjust execution context"],
    )


def predict_breakthrough(
    systems: list[SystemRecord],
    momentum: MomentumMetrics,
    t: InsightThresholds = INSIGHTS,
) -> Optional[Prediction]:
    if momentum.direction != "increasing" or momentum.consistency <= t.breakthrough_consistency:
        return None
    candidates = [
        s for s in systems
        if s.effectiveness_score > t.breakthrough_effectiveness and s.friction_coefficient < t.breakthrough_friction
    ]
    if not candidates:
        return None

    return Prediction(
        type="breakthrough_opportunity",
        confidence=t.breakthrough_confidence,
        timeframe="Next 2-3 weeks",
        factors=[
            PredictionFactor("System quality", 0.4, candidates[0].effectiveness_score, 40),
            PredictionFactor("Momentum direction", 0.3, 80, 30),
            PredictionFactor("Consistency level", 0.3, momentum.consistency, 30),
        ],
        outcome=PredictionOutcome(
            probability=t.breakthrough_probability,
            impact="high",
            description="Breakthrough opportunity with current systems and momentum",
            scenarios=[
                PredictionScenario(
                    "Breakthrough achieved", 70,
                    "Significant progress and system optimization",
                    ["Maintained consistency", "Energy alignment", "System synergy"],
                ),
                PredictionScenario(
                    "Opportunity missed", 30,
                    "Breakthrough opportunity not fully realized",
                    ["Loss of consistency", "Energy disruption", "System interference"],
                ),
            ],
        ),
        mitigation=[
            "Maintain current execution patterns",
            "Expand successful systems",
            "Protect momentum from disruptions",
        ],
    )


def generate_predictions(
    history: list[ExecutionSample],
    systems: list[SystemRecord],
    momentum: MomentumMetrics,
    t: InsightThresholds = INSIGHTS,
) -> list[Prediction]:
    found = [
        predict_skip_risk(history, systems, t),
        predict_momentum_shift(momentum, t),
        predict_system_failure(systems, t),
        predict_performance_decline(history, t),
        predict_breakthrough(systems, momentum, t),
    ]
    return sorted((p for p in found if p is not None), key=lambda p: p.confidence, reverse=True)


# ---------------------------------------------------------------------------
# Leverage and friction points
# ---------------------------------------------------------------------------

def leverage_points(
    systems: list[SystemRecord],
    history: list[ExecutionSample],
    t: InsightThresholds = INSIGHTS,
) -> list[LeveragePoint]:
    points: list[LeveragePoint] = []
    for system in systems:
        runs = _for_system(history, system.id)
        quality = mean(s.quality for s in runs) if runs else float(NEUTRAL_SCORE)
        effort = max(1.0, system.friction_coefficient)

        if system.effectiveness_score > t.leverage_effectiveness and system.friction_coefficient < t.leverage_friction:
            points.append(LeveragePoint(
                system_id=system.id,
                system_name=system.name,
                type="high_impact",
                potential_impact=system.effectiveness_score,
                effort_required=system.friction_coefficient,
                roi=system.effectiveness_score / effort * t.leverage_roi_factor,
                description="High effectiveness with low friction makes this an excellent leverage point",
                action_steps=[
                    "Increase frequency or scope",
                    "Use as momentum builder for other systems",
                    "Share success patterns with other systems",
                ],
            ))

        if quality > t.builder_quality and len(runs) > t.builder_min_executions:
            points.append(LeveragePoint(
                system_id=system.id,
                system_name=system.name,
                type="momentum_builder",
                potential_impact=quality,
                effort_required=system.friction_coefficient,
                roi=quality / effort * t.builder_roi_factor,
                description="Consistent high quality execution makes this a reliable momentum builder",
                action_steps=[
                    "Use to start difficult days",
                    "Chain with higher-friction systems",
                    "Expand scope gradually",
                ],
            ))

    return sorted(points, key=lambda p: p.roi, reverse=True)


def friction_points(
    systems: list[SystemRecord],
    history: list[ExecutionSample],
    t: InsightThresholds = INSIGHTS,
) -> list[FrictionPoint]:
    points: list[FrictionPoint] = []
    for system in systems:
        runs = _for_system(history, system.id)
        energy = mean(s.energy_cost for s in runs) if runs else None

        if system.friction_coefficient > t.friction_complexity:
            shown = energy if energy is not None else t.friction_default_energy
            points.append(FrictionPoint(
                system_id=system.id,
                system_name=system.name,
                type="complexity",
                severity=system.friction_coefficient,
                frequency=len(runs),
                description=f"High friction system requiring {shown:.0f}% energy on average",
                solutions=[
                    "Break down into smaller components",
                    "Reduce scope to minimum viable version",
                    "Automate or eliminate parts of the system",
                    "Change timing to match energy patterns",
                ],
            ))

        if energy is not None and energy > t.friction_energy:
            points.append(FrictionPoint(
                system_id=system.id,
                system_name=system.name,
                type="energy",
                severity=energy,
                frequency=len(runs),
                description="High energy cost indicates timing or context mismatch",
                solutions=[
                    "Reschedule to optimal energy windows",
                    "Optimize environment for better execution",
                    "Reduce system complexity",
                    "Consider energy-matching alternatives",
                ],
            ))

    return sorted(points, key=lambda p: p.severity, reverse=True)


def generate_insights(
    history: list[ExecutionSample],
    systems: list[SystemRecord],
    profile: Optional[ProfileRecord],
    momentum: MomentumMetrics,
    t: InsightThresholds = INSIGHTS,
) -> InsightReport:
    return InsightReport(
        insights=execution_insights(history, systems, momentum, t),
        cognitive_biases=detect_cognitive_biases(history, systems, profile, t),
        predictions=generate_predictions(history, systems, momentum, t),
        leverage_points=leverage_points(systems, history, t),
        friction_points=friction_points(systems, history, t),
    )
