"""
Energy-aware scheduler: place each adaptive system in the part of the day
whose energy profile suits it.

Energy windows
--------------
With hourly energy patterns on the profile, patterns are walked in hour
order and each one joins the open window while its energy, focus and
creativity all stay within `merge_tolerance` of the window's running
levels (each level averaged pairwise as it joins). Without patterns the
chronotype's built-in windows are used.

Placement
---------
  score      energy (doubled for high-friction systems)
             + 1.5 x creativity for "creative" systems
             + 1.5 x focus for habit systems or "focus" systems
  confidence 50 + 0.3 x energy - 0.2 x friction + 0.2 x effectiveness, 0-100

Work style only shapes session guidance; it never moves a system.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from habitpulse.core.thresholds import NEUTRAL_SCORE, SCHEDULER, SchedulerThresholds
from habitpulse.services.numeric import clamp, mean, round_half_up
from habitpulse.services.records import EnergyPattern, ExecutionSample, ProfileRecord, SystemRecord


@dataclass
class EnergyWindow:
    start_hour: int
    end_hour: int  # exclusive
    energy_level: float
    focus_level: float
    creativity_level: float
    recommended_activities: list[str] = field(default_factory=list)


@dataclass
class SchedulingAdjustment:
    type: str  # time_shift | duration_change | sequence_reorder | context_optimization
    description: str
    impact: int
    effort: str  # low | medium | high


@dataclass
class SchedulingRecommendation:
    system_id: int
    system_name: str
    optimal_time: EnergyWindow
    alternative_times: list[EnergyWindow]
    confidence: int
    reasoning: str
    adjustments: list[SchedulingAdjustment]


@dataclass
class DailySchedule:
    day: date
    chronotype: str
    work_style: str
    energy_windows: list[EnergyWindow]
    recommendations: list[SchedulingRecommendation]
    session_guidance: list[str]
    total_energy_efficiency: int
    focus_optimization: int


# (start, end, energy, focus, creativity, activities) per chronotype.
_CHRONOTYPE_WINDOWS: dict[str, tuple[tuple[int, int, float, float, float, tuple[str, ...]], ...]] = {
    "morning": (
        (6, 11, 85, 90, 75, ("Deep work", "Complex tasks", "Creative work")),
        (11, 16, 70, 60, 80, ("Collaborative work", "Meetings", "Administrative tasks")),
        (16, 20, 50, 40, 60, ("Light tasks", "Planning", "Learning")),
    ),
    "evening": (
        (10, 15, 60, 50, 70, ("Administrative tasks", "Communication", "Planning")),
        (15, 20, 75, 70, 85, ("Creative work", "Problem-solving", "Deep work")),
        (20, 23, 85, 80, 90, ("Peak performance tasks", "Creative flow", "Strategic thinking")),
    ),
    "intermediate": (
        (9, 12, 75, 80, 70, ("Focused work", "Important tasks", "Problem-solving")),
        (14, 17, 70, 65, 75, ("Collaborative work", "Meetings", "Creative tasks")),
        (19, 21, 60, 50, 65, ("Light work", "Learning", "Planning")),
    ),
}

_SESSION_GUIDANCE: dict[str, list[str]] = {
    "sprinter": ["Time-boxed sessions", "Clear start/end points"],
    "marathoner": ["Sustainable pace", "Regular breaks"],
}


# ---------------------------------------------------------------------------
# Energy windows
# ---------------------------------------------------------------------------

def default_energy_windows(chronotype: str) -> list[EnergyWindow]:
    """Built-in windows; unknown chronotypes get the intermediate ones."""
    rows = _CHRONOTYPE_WINDOWS.get(chronotype, _CHRONOTYPE_WINDOWS["intermediate"])
    return [
        EnergyWindow(
            start_hour=start,
            end_hour=end,
            energy_level=energy,
            focus_level=focus,
            creativity_level=creativity,
            recommended_activities=list(activities),
        )
        for start, end, energy, focus, creativity, activities in rows
    ]


def recommended_activities(pattern: EnergyPattern, t: SchedulerThresholds = SCHEDULER) -> list[str]:
    if pattern.energy_level > t.deep_work_level and pattern.focus_level > t.deep_work_level:
        return ["Deep work", "Complex tasks", "Strategic planning"]
    if pattern.creativity_level > t.creative_level:
        return ["Creative work", "Brainstorming", "Innovation"]
    if pattern.energy_level > t.productive_energy:
        return ["Productive tasks", "Collaboration", "Learning"]
    return ["Light tasks", "Organization", "Reflection"]


def _joins(window: EnergyWindow, pattern: EnergyPattern, tolerance: float) -> bool:
    return (
        abs(pattern.energy_level - window.energy_level) < tolerance
        and abs(pattern.focus_level - window.focus_level) < tolerance
        and abs(pattern.creativity_level - window.creativity_level) < tolerance
    )


def energy_windows(profile: ProfileRecord, t: SchedulerThresholds = SCHEDULER) -> list[EnergyWindow]:
    if not profile.energy_patterns:
        return default_energy_windows(profile.chronotype)

    windows: list[EnergyWindow] = []
    current: Optional[EnergyWindow] = None
    for p in sorted(profile.energy_patterns, key=lambda p: p.hour):
        if current is not None and _joins(current, p, t.merge_tolerance):
            current.end_hour = p.hour + 1
            current.energy_level = (current.energy_level + p.energy_level) / 2
            current.focus_level = (current.focus_level + p.focus_level) / 2
            current.creativity_level = (current.creativity_level + p.creativity_level) / 2
            continue
        current = EnergyWindow(
            start_hour=p.hour,
            end_hour=p.hour + 1,
            energy_level=p.energy_level,
            focus_level=p.focus_level,
            creativity_level=p.creativity_level,
            recommended_activities=recommended_activities(p, t),
        )
        windows.append(current)
    return windows


# ---------------------------------------------------------------------------
# Placement
# ---------------------------------------------------------------------------

def _window_score(system: SystemRecord, window: EnergyWindow, t: SchedulerThresholds) -> float:
    name = system.name.lower()
    score = window.energy_level
    if system.friction_coefficient > t.high_friction:
        score *= t.friction_energy_weight
    if "creative" in name:
        score += window.creativity_level * t.creativity_weight
    if system.system_type == "habit" or "focus" in name:
        score += window.focus_level * t.focus_weight
    return score


def best_window(
    system: SystemRecord,
    windows: list[EnergyWindow],
    t: SchedulerThresholds = SCHEDULER,
) -> EnergyWindow:
    """Highest-scoring window; the earliest one wins a tie."""
    return max(windows, key=lambda w: _window_score(system, w, t))


def scheduling_confidence(
    system: SystemRecord,
    window: EnergyWindow,
    t: SchedulerThresholds = SCHEDULER,
) -> int:
    raw = (
        t.confidence_base
        + window.energy_level * t.confidence_energy_weight
        - system.friction_coefficient * t.confidence_friction_weight
        + system.effectiveness_score * t.confidence_effectiveness_weight
    )
    return int(clamp(round_half_up(raw)))


def scheduling_adjustments(
    system: SystemRecord,
    window: EnergyWindow,
    profile: ProfileRecord,
    t: SchedulerThresholds = SCHEDULER,
) -> list[SchedulingAdjustment]:
    adjustments: list[SchedulingAdjustment] = []

    if system.friction_coefficient > t.high_friction and window.energy_level < t.low_window_energy:
        adjustments.append(SchedulingAdjustment(
            type="duration_change",
            description="Reduce duration to match energy level",
            impact=30,
            effort="low",
        ))

    if profile.chronotype == "morning" and window.start_hour > t.midday_hour:
        adjustments.append(SchedulingAdjustment(
            type="time_shift",
            description="Consider shifting to morning hours for better alignment",
            impact=40,
            effort="medium",
        ))
    elif profile.chronotype == "evening" and window.start_hour < t.midday_hour:
        adjustments.append(SchedulingAdjustment(
            type="time_shift",
            description="Consider shifting to evening hours for better alignment",
            impact=40,
            effort="medium",
        ))

    if window.focus_level < t.low_window_focus and system.system_type == "habit":
        adjustments.append(SchedulingAdjustment(
            type="context_optimization",
            description="Optimize environment to improve focus",
            impact=25,
            effort="medium",
        ))

    return sorted(adjustments, key=lambda a: a.impact, reverse=True)


def scheduling_reasoning(
    system: SystemRecord,
    window: EnergyWindow,
    profile: ProfileRecord,
    t: SchedulerThresholds = SCHEDULER,
) -> str:
    reasons: list[str] = []
    if window.energy_level > t.high_window_energy:
        reasons.append("High energy window supports task completion")
    if system.friction_coefficient > t.high_friction and window.energy_level > t.friction_energy_floor:
        reasons.append("Sufficient energy to overcome system friction")
    if profile.chronotype == "morning" and window.start_hour < t.midday_hour:
        reasons.append("Aligns with morning chronotype peak performance")
    elif profile.chronotype == "evening" and window.start_hour > t.evening_peak_hour:
        reasons.append("Aligns with evening chronotype peak performance")
    if window.focus_level > t.high_window_focus and system.system_type == "habit":
        reasons.append("High focus period optimal for habit execution")
    return "; ".join(reasons) or "Standard scheduling recommendation"


def recommend_slot(
    system: SystemRecord,
    windows: list[EnergyWindow],
    profile: ProfileRecord,
    t: SchedulerThresholds = SCHEDULER,
) -> SchedulingRecommendation:
    best = best_window(system, windows, t)
    alternatives = sorted(
        (w for w in windows if w is not best and w.energy_level > t.alternative_min_energy),
        key=lambda w: w.energy_level,
        reverse=True,
    )
    return SchedulingRecommendation(
        system_id=system.id,
        system_name=system.name,
        optimal_time=best,
        alternative_times=alternatives[:t.alternative_slots],
        confidence=scheduling_confidence(system, best, t),
        reasoning=scheduling_reasoning(system, best, profile, t),
        adjustments=scheduling_adjustments(system, best, profile, t),
    )


def session_guidance(profile: ProfileRecord) -> list[str]:
    return list(_SESSION_GUIDANCE.get(profile.work_style, []))


# ---------------------------------------------------------------------------
# Daily schedule
# ---------------------------------------------------------------------------

def generate_schedule(
    profile: ProfileRecord,
    systems: list[SystemRecord],
    history: list[ExecutionSample],
    day: date,
    t: SchedulerThresholds = SCHEDULER,
) -> DailySchedule:
    """
    One recommendation per system, most confident first.

    `total_energy_efficiency` averages window energy weighted by confidence.
    `focus_optimization` blends the same for focus with the mean execution
    quality of `history` (neutral without history). Both are 0 without systems.
    """
    windows = energy_windows(profile, t)
    recommendations = sorted(
        (recommend_slot(s, windows, profile, t) for s in systems),
        key=lambda r: r.confidence,
        reverse=True,
    )

    if recommendations:
        efficiency = round_half_up(mean(
            r.optimal_time.energy_level * r.confidence / 100 for r in recommendations
        ))
        baseline = mean(s.quality for s in history) if history else NEUTRAL_SCORE
        alignment = mean(r.optimal_time.focus_level * r.confidence / 100 for r in recommendations)
        focus = round_half_up((alignment + baseline) / 2)
    else:
        efficiency = focus = 0

    return DailySchedule(
        day=day,
        chronotype=profile.chronotype,
        work_style=profile.work_style,
        energy_windows=windows,
        recommendations=recommendations,
        session_guidance=session_guidance(profile),
        total_energy_efficiency=efficiency,
        focus_optimization=focus,
    )
