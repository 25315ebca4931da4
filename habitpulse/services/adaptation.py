"""
Adaptation engine: detect when an adaptive system needs changing and
propose the strategy with the best simulated effect.

For each unlocked system:
  1. triggers     performance drop, high friction, poor context fit, skip risk
  2. strategies   built-in strategies whose conditions match a trigger type at
                  or above the condition's minimum severity
  3. action       the strategy action with the highest expected impact
  4. simulation   after-metrics derived from the action type; effectiveness is
                  the mean positive improvement across four metrics

Results are sorted by effectiveness. Nothing here mutates a system: applying
a result is the caller's job (see `habitpulse.services.intelligence`).
"""
from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from habitpulse.core.thresholds import ADAPTATION, AdaptationThresholds
from habitpulse.services.insights import SEVERITY_RANK
from habitpulse.services.numeric import mean, round_half_up
from habitpulse.services.records import AdaptationRecord, ExecutionSample, SystemRecord


@dataclass(frozen=True)
class TriggerCondition:
    type: str
    severity: str  # minimum severity that satisfies the condition


@dataclass(frozen=True)
class AdaptationAction:
    type: str  # modify_timing | reduce_difficulty | change_context | break_down | add_support | pause_system
    description: str
    expected_impact: float
    parameters: dict = field(default_factory=dict, compare=False)


@dataclass(frozen=True)
class AdaptationStrategy:
    id: str
    name: str
    description: str
    conditions: tuple[TriggerCondition, ...]
    actions: tuple[AdaptationAction, ...]
    success_rate: float


@dataclass
class AdaptationTrigger:
    type: str
    severity: str
    description: str
    data: dict = field(default_factory=dict)


@dataclass
class SystemMetrics:
    quality: float = 0.0
    completion_rate: float = 0.0
    energy_cost: float = 100.0
    context_fit: float = 0.0


@dataclass
class AdaptationResult:
    system_id: int
    strategy_id: str
    adaptation: AdaptationRecord
    action_type: str
    before: SystemMetrics
    after: SystemMetrics
    effectiveness: int
    recommendation: str


STRATEGIES: tuple[AdaptationStrategy, ...] = (
    AdaptationStrategy(
        id="reduce_friction",
        name="Reduce System Friction",
        description="Break down high-friction systems into smaller components",
        conditions=(
            TriggerCondition("friction_increase", "high"),
            TriggerCondition("performance_drop", "medium"),
        ),
        actions=(
            AdaptationAction("break_down", "Split system into smaller, manageable actions", 30, {"reduction_factor": 0.5}),
            AdaptationAction("reduce_difficulty", "Lower difficulty to build momentum", 25, {"reduction_factor": 0.7}),
        ),
        success_rate=75,
    ),
    AdaptationStrategy(
        id="optimize_timing",
        name="Optimize Execution Timing",
        description="Adjust system timing based on energy patterns",
        conditions=(
            TriggerCondition("context_mismatch", "medium"),
            TriggerCondition("energy_pattern", "medium"),
        ),
        actions=(
            AdaptationAction("modify_timing", "Reschedule to optimal energy window", 35, {"shift_hours": 2}),
            AdaptationAction("change_context", "Modify environmental conditions", 20, {"context_changes": ["location", "time"]}),
        ),
        success_rate=80,
    ),
    AdaptationStrategy(
        id="prevent_skip",
        name="Skip Risk Prevention",
        description="Intervene when skip risk is detected",
        conditions=(
            TriggerCondition("skip_risk", "high"),
            TriggerCondition("skip_risk", "critical"),
        ),
        actions=(
            AdaptationAction("reduce_difficulty", "Implement minimum viable version", 40, {"reduction_factor": 0.3}),
            AdaptationAction("add_support", "Add accountability or reminder system", 25, {"support_type": "reminder"}),
            AdaptationAction("pause_system", "Temporarily pause system for recovery", 20, {"pause_days": 3}),
        ),
        success_rate=85,
    ),
)


def severity_matches(required: str, actual: str) -> bool:
    return SEVERITY_RANK[actual] >= SEVERITY_RANK[required]


def adaptation_triggers(
    system: SystemRecord,
    history: list[ExecutionSample],
    t: AdaptationThresholds = ADAPTATION,
) -> list[AdaptationTrigger]:
    runs = [s for s in history if s.system_id == system.id]
    triggers: list[AdaptationTrigger] = []

    if len(runs) >= t.window:
        recent = runs[-t.window:]
        older = runs[-2 * t.window:-t.window]
        if older:
            recent_avg = mean(s.quality for s in recent)
            older_avg = mean(s.quality for s in older)
            drop = (older_avg - recent_avg) / older_avg * 100 if older_avg > 0 else 0.0
            if drop > t.drop_percent:
                if drop > t.drop_critical:
                    severity = "critical"
                elif drop > t.drop_high:
                    severity = "high"
                else:
                    severity = "medium"
                triggers.append(AdaptationTrigger(
                    type="performance_drop",
                    severity=severity,
                    description=f"Performance dropped by {drop:.1f}%",
                    data={"recent_avg": recent_avg, "older_avg": older_avg, "drop_percentage": drop},
                ))

    if system.friction_coefficient > t.friction:
        triggers.append(AdaptationTrigger(
            type="friction_increase",
            severity="critical" if system.friction_coefficient > t.friction_critical else "high",
            description=f"High friction coefficient: {system.friction_coefficient:g}%",
            data={"friction_coefficient": system.friction_coefficient},
        ))

    if runs:
        fit = mean(s.context_fit for s in runs)
        if fit < t.context_fit:
            triggers.append(AdaptationTrigger(
                type="context_mismatch",
                severity="high" if fit < t.context_fit_high else "medium",
                description=f"Poor context alignment: {fit:.1f}%",
                data={"avg_context_fit": fit},
            ))

        completion = mean(s.completion_rate for s in runs[-t.skip_window:])
        if completion < t.skip_completion:
            triggers.append(AdaptationTrigger(
                type="skip_risk",
                severity="critical" if completion < t.skip_completion_critical else "high",
                description=f"High skip risk: {completion:.1f}% completion rate",
                data={"recent_completion_rate": completion},
            ))

    return triggers


def applicable_strategies(
    triggers: list[AdaptationTrigger],
    strategies: tuple[AdaptationStrategy, ...] = STRATEGIES,
) -> list[AdaptationStrategy]:
    return [
        s for s in strategies
        if any(
            c.type == tr.type and severity_matches(c.severity, tr.severity)
            for tr in triggers
            for c in s.conditions
        )
    ]


def system_metrics(runs: list[ExecutionSample]) -> SystemMetrics:
    if not runs:
        return SystemMetrics()
    return SystemMetrics(
        quality=mean(s.quality for s in runs),
        completion_rate=mean(s.completion_rate for s in runs),
        energy_cost=mean(s.energy_cost for s in runs),
        context_fit=mean(s.context_fit for s in runs),
    )


def best_action(actions: tuple[AdaptationAction, ...]) -> Optional[AdaptationAction]:
    return max(actions, key=lambda a: a.expected_impact, default=None)


def simulate_impact(before: SystemMetrics, action: AdaptationAction) -> SystemMetrics:
    impact = action.expected_impact
    match action.type:
        case "reduce_difficulty":
            return dataclasses.replace(
                before,
                quality=min(100.0, before.quality + impact),
                energy_cost=max(0.0, before.energy_cost - impact * 0.5),
            )
        case "modify_timing":
            return dataclasses.replace(
                before,
                context_fit=min(100.0, before.context_fit + impact),
                quality=min(100.0, before.quality + impact * 0.7),
            )
        case "break_down":
            return dataclasses.replace(
                before,
                completion_rate=min(100.0, before.completion_rate + impact),
                energy_cost=max(0.0, before.energy_cost - impact * 0.3),
            )
        case "add_support":
            return dataclasses.replace(
                before,
                completion_rate=min(100.0, before.completion_rate + impact),
            )
        case _:
            return dataclasses.replace(before)


def adaptation_effectiveness(before: SystemMetrics, after: SystemMetrics) -> int:
    improvements = [
        after.quality - before.quality,
        after.completion_rate - before.completion_rate,
        before.energy_cost - after.energy_cost,
        after.context_fit - before.context_fit,
    ]
    return round_half_up(sum(max(0.0, i) for i in improvements) / len(improvements))


def adaptation_recommendation(
    action: AdaptationAction,
    effectiveness: int,
    t: AdaptationThresholds = ADAPTATION,
) -> str:
    if effectiveness > t.recommend_strong:
        return f"Highly recommended: {action.description} (expected {effectiveness}% improvement)"
    if effectiveness > t.recommend_consider:
        return f"Consider: {action.description} (expected {effectiveness}% improvement)"
    return "Alternative approach may be needed for better results"


def recommend_adaptations(
    systems: list[SystemRecord],
    history: list[ExecutionSample],
    now: datetime,
    t: AdaptationThresholds = ADAPTATION,
) -> list[AdaptationResult]:
    results: list[AdaptationResult] = []
    for system in systems:
        if system.locked:
            continue

        runs = [s for s in history if s.system_id == system.id]
        before = system_metrics(runs)
        for strategy in applicable_strategies(adaptation_triggers(system, history, t)):
            action = best_action(strategy.actions)
            if action is None:
                continue
            after = simulate_impact(before, action)
            effectiveness = adaptation_effectiveness(before, after)
            results.append(AdaptationResult(
                system_id=system.id,
                strategy_id=strategy.id,
                adaptation=AdaptationRecord(
                    trigger=strategy.name,
                    change=action.description,
                    impact=action.expected_impact,
                    timestamp=now,
                ),
                action_type=action.type,
                before=before,
                after=after,
                effectiveness=effectiveness,
                recommendation=adaptation_recommendation(action, effectiveness, t),
            ))

    return sorted(results, key=lambda r: r.effectiveness, reverse=True)
