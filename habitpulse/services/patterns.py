"""
Pattern recognition over execution samples.

Samples are grouped into (hour, weekday) slots; weekdays follow
`datetime.weekday()` (Monday = 0). Each slot becomes an ExecutionPattern
whose energy level is the inverse of the average energy cost.
"""
from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime

from habitpulse.core.thresholds import PATTERNS, PatternThresholds
from habitpulse.services.numeric import mean
from habitpulse.services.records import ExecutionSample, ProfileRecord, SystemRecord


@dataclass
class ExecutionPattern:
    hour: int
    weekday: int
    energy_level: float
    completion_rate: float
    context_fit: float
    samples: int


@dataclass
class PatternFrictionPoint:
    type: str  # "time" | "energy" | "difficulty"
    severity: float
    frequency: int
    description: str
    suggested_fix: str


@dataclass
class SkipRisk:
    system_id: int
    probability: float
    factors: list[str]
    timeframe: str
    mitigation: str


@dataclass
class OptimalTiming:
    system_id: str
    best_hour: int
    confidence: float
    reasoning: str
    alternatives: list[int] = field(default_factory=list)


@dataclass
class PatternAnalysis:
    patterns: list[ExecutionPattern]
    friction_points: list[PatternFrictionPoint]
    skip_risks: list[SkipRisk]
    optimal_timings: list[OptimalTiming]


def extract_patterns(history: list[ExecutionSample]) -> list[ExecutionPattern]:
    slots: dict[tuple[int, int], list[ExecutionSample]] = defaultdict(list)
    for s in history:
        slots[(s.executed_at.hour, s.executed_at.weekday())].append(s)

    return [
        ExecutionPattern(
            hour=hour,
            weekday=weekday,
            energy_level=100 - mean(s.energy_cost for s in samples),
            completion_rate=mean(s.completion_rate for s in samples),
            context_fit=mean(s.context_fit for s in samples),
            samples=len(samples),
        )
        for (hour, weekday), samples in slots.items()
    ]


def pattern_friction_points(
    patterns: list[ExecutionPattern],
    systems: list[SystemRecord],
    t: PatternThresholds = PATTERNS,
) -> list[PatternFrictionPoint]:
    points: list[PatternFrictionPoint] = []

    for p in patterns:
        if p.completion_rate < t.low_completion:
            points.append(PatternFrictionPoint(
                type="time",
                severity=100 - p.completion_rate,
                frequency=sum(1 for q in patterns if q.hour == p.hour),
                description=f"Low completion rate at {p.hour}:00",
                suggested_fix="Reschedule to optimal time or reduce difficulty during this period",
            ))

    low_energy = [p for p in patterns if p.energy_level < t.low_energy]
    for p in low_energy:
        points.append(PatternFrictionPoint(
            type="energy",
            severity=100 - p.energy_level,
            frequency=len(low_energy),
            description="Low energy periods detected",
            suggested_fix="Schedule lighter tasks or implement energy recovery protocols",
        ))

    for system in systems:
        if system.friction_coefficient > t.high_friction:
            points.append(PatternFrictionPoint(
                type="difficulty",
                severity=system.friction_coefficient,
                frequency=1,
                description=f"High friction in system: {system.name}",
                suggested_fix="Break down into smaller components or reduce complexity",
            ))

    return sorted(points, key=lambda p: p.severity, reverse=True)


def _skip_factors(
    similar: list[ExecutionPattern],
    system: SystemRecord,
    profile: ProfileRecord,
    t: PatternThresholds,
) -> list[str]:
    factors: list[str] = []
    if system.friction_coefficient > t.high_friction:
        factors.append("High system friction")
    if any(p.energy_level < t.low_energy for p in similar):
        factors.append("Low energy period")
    if system.effectiveness_score < t.low_effectiveness:
        factors.append("Low system effectiveness")
    if profile.adaptation < t.low_adaptability:
        factors.append("Low adaptability to change")
    return factors


def _skip_mitigation(system: SystemRecord, profile: ProfileRecord, t: PatternThresholds) -> str:
    if system.friction_coefficient > t.high_friction:
        return "Break down into smaller, more manageable actions"
    if profile.adaptation < t.low_adaptability:
        return "Maintain consistent routine and minimize changes"
    return "Reduce scope to minimum viable version"


def predict_skip_risks(
    patterns: list[ExecutionPattern],
    systems: list[SystemRecord],
    profile: ProfileRecord,
    now: datetime,
    t: PatternThresholds = PATTERNS,
) -> list[SkipRisk]:
    """Systems likely to be skipped around `now`, judged by same-weekday slots near this hour."""
    similar = [
        p for p in patterns
        if p.weekday == now.weekday() and abs(p.hour - now.hour) <= t.skip_hour_window
    ]
    if not similar:
        return []

    base = max(0.0, 100 - mean(p.completion_rate for p in similar))
    risks: list[SkipRisk] = []
    for system in systems:
        probability = base + system.friction_coefficient * t.skip_friction_weight
        if probability > t.skip_report:
            risks.append(SkipRisk(
                system_id=system.id,
                probability=min(100.0, probability),
                factors=_skip_factors(similar, system, profile, t),
                timeframe="today",
                mitigation=_skip_mitigation(system, profile, t),
            ))
    return sorted(risks, key=lambda r: r.probability, reverse=True)


def optimal_timings(
    patterns: list[ExecutionPattern],
    t: PatternThresholds = PATTERNS,
) -> list[OptimalTiming]:
    peaks = sorted(
        (p for p in patterns if p.completion_rate > t.peak_completion and p.energy_level > t.peak_energy),
        key=lambda p: p.completion_rate,
        reverse=True,
    )
    alternatives = [p.hour for p in peaks[t.optimal_slots:t.optimal_slots + t.alternative_slots]]
    return [
        OptimalTiming(
            system_id="general",
            best_hour=p.hour,
            confidence=p.completion_rate,
            reasoning=f"Historical completion rate of {p.completion_rate:.1f}% at this time",
            alternatives=list(alternatives),
        )
        for p in peaks[:t.optimal_slots]
    ]


def analyze_patterns(
    history: list[ExecutionSample],
    systems: list[SystemRecord],
    profile: ProfileRecord,
    now: datetime,
    t: PatternThresholds = PATTERNS,
) -> PatternAnalysis:
    patterns = extract_patterns(history)
    return PatternAnalysis(
        patterns=patterns,
        friction_points=pattern_friction_points(patterns, systems, t),
        skip_risks=predict_skip_risks(patterns, systems, profile, now, t),
        optimal_timings=optimal_timings(patterns, t),
    )
