"""
Threshold tables for the scoring and detection engines.

Every magic number used by the momentum, pattern, scheduling, insight,
resilience, adaptation and execution-quality engines lives here, grouped
per engine as a frozen dataclass. Engines take an optional table argument that
defaults to the module-level instance, so a detector can be tested or
tuned with `dataclasses.replace(INSIGHTS, perfectionism_quality=80)`
without touching its logic.

All scores are on a 0-100 scale unless the field name says otherwise.
"""
from __future__ import annotations

from dataclasses import dataclass

# Returned by aggregate formulas that lack enough samples.
NEUTRAL_SCORE = 50


@dataclass(frozen=True)
class MomentumThresholds:
    # Consistency dimension
    consistency_min_samples: int = 7
    consistency_window: int = 14
    stddev_penalty: float = 2.0
    completion_bonus_floor: float = 70.0
    completion_bonus_rate: float = 0.5

    # Difficulty-growth dimension
    growth_min_samples: int = 14
    growth_window: int = 7
    growth_baseline: float = 50.0
    energy_improvement_weight: float = 0.6
    complexity_weight: float = 0.4

    # Impact dimension
    impact_effectiveness_weight: float = 0.4
    impact_quality_weight: float = 0.4
    impact_sequence_weight: float = 0.2

    # Learning dimension
    learning_adaptation_factor: float = 10.0
    learning_impact_factor: float = 0.5
    learning_context_factor: float = 0.4
    context_fit_window: int = 7
    context_fit_scale: float = 2.0

    # Overall blend
    consistency_weight: float = 0.4
    growth_weight: float = 0.25
    impact_weight: float = 0.2
    learning_weight: float = 0.15

    # Direction
    direction_window: int = 7
    direction_delta: float = 5.0

    # Strength
    strength_balance_weight: float = 0.4
    strength_magnitude_weight: float = 0.6

    # Trends against the previous snapshot
    trend_delta: float = 5.0
    significance_high: float = 15.0
    significance_medium: float = 8.0

    # Breakpoints
    consistency_breakdown: float = 40.0
    consistency_breakdown_critical: float = 25.0
    collapse_overall: float = 30.0
    acceleration_overall: float = 80.0
    learning_acceleration: float = 85.0

    # Forecast
    forecast_days: int = 3
    days_per_week: int = 7
    confidence_start: int = 100
    confidence_decay: int = 15
    confidence_floor: int = 20
    forecast_strength_factor: float = 70.0
    forecast_consistency_factor: float = 70.0
    forecast_trend_factor: float = 2.0


@dataclass(frozen=True)
class PatternThresholds:
    low_completion: float = 50.0
    low_energy: float = 30.0
    high_friction: float = 70.0
    skip_hour_window: int = 2
    skip_friction_weight: float = 0.3
    skip_report: float = 60.0
    peak_completion: float = 80.0
    peak_energy: float = 70.0
    optimal_slots: int = 3
    alternative_slots: int = 2
    low_effectiveness: float = 50.0
    low_adaptability: float = 30.0


@dataclass(frozen=True)
class SchedulerThresholds:
    # Window building
    merge_tolerance: float = 20.0
    deep_work_level: float = 70.0
    creative_level: float = 70.0
    productive_energy: float = 50.0

    # Window scoring
    high_friction: float = 70.0
    friction_energy_weight: float = 2.0
    creativity_weight: float = 1.5
    focus_weight: float = 1.5
    alternative_min_energy: float = 40.0
    alternative_slots: int = 2

    # Adjustments and reasoning
    low_window_energy: float = 60.0
    low_window_focus: float = 50.0
    high_window_energy: float = 70.0
    high_window_focus: float = 70.0
    friction_energy_floor: float = 60.0
    midday_hour: int = 12
    evening_peak_hour: int = 15

    # Confidence
    confidence_base: float = 50.0
    confidence_energy_weight: float = 0.3
    confidence_friction_weight: float = 0.2
    confidence_effectiveness_weight: float = 0.2


@dataclass(frozen=True)
class InsightThresholds:
    # Execution insights
    decline_strength: float = 40.0
    inconsistent_below: float = 50.0
    consistency_min_samples: int = 7
    energy_efficiency_below: float = 60.0
    redesign_effectiveness: float = 40.0
    redesign_friction: float = 70.0

    # Bias detectors
    bias_window: int = 10
    bias_min_samples: int = 5
    planning_energy: float = 75.0
    planning_energy_high: float = 85.0
    perfectionism_quality: float = 85.0
    perfectionism_completion: float = 60.0
    optimism_gap: float = 20.0
    confirmation_min_systems: int = 5
    confirmation_locked_ratio: float = 0.6
    sunk_cost_effectiveness: float = 40.0
    sunk_cost_adaptations: int = 5
    sunk_cost_success_ratio: float = 0.3

    # Predictions
    skip_min_samples: int = 7
    skip_window: int = 7
    skip_report: float = 60.0
    skip_critical: float = 80.0
    skip_high: float = 70.0
    shift_strength: float = 40.0
    shift_confidence: float = 75.0
    shift_probability: float = 70.0
    failure_effectiveness: float = 30.0
    failure_friction: float = 80.0
    failure_confidence: float = 85.0
    failure_probability: float = 80.0
    decline_min_samples: int = 14
    decline_window: int = 7
    decline_drop: float = 15.0
    decline_confidence_base: float = 60.0
    decline_confidence_cap: float = 90.0
    decline_probability_base: float = 50.0
    decline_probability_cap: float = 85.0
    decline_high_impact: float = 25.0
    breakthrough_effectiveness: float = 70.0
    breakthrough_friction: float = 50.0
    breakthrough_consistency: float = 70.0
    breakthrough_confidence: float = 75.0
    breakthrough_probability: float = 70.0

    # Leverage points
    leverage_effectiveness: float = 70.0
    leverage_friction: float = 40.0
    leverage_roi_factor: float = 10.0
    builder_quality: float = 80.0
    builder_min_executions: int = 10
    builder_roi_factor: float = 8.0

    # Friction points
    friction_complexity: float = 70.0
    friction_default_energy: float = 70.0
    friction_energy: float = 70.0


@dataclass(frozen=True)
class ResilienceThresholds:
    burnout_min_samples: int = 7
    burnout_default: int = 30
    burnout_energy_floor: float = 60.0
    burnout_completion_floor: float = 60.0
    burnout_friction_floor: float = 60.0

    stability_min_samples: int = 14
    stability_window: int = 7
    stability_variance_penalty: float = 2.0

    robustness_effectiveness_weight: float = 0.5
    robustness_friction_weight: float = 0.3
    robustness_adaptation_weight: float = 0.2
    robustness_adaptation_factor: float = 10.0

    capacity_effectiveness_weight: float = 0.6
    capacity_protocol_weight: float = 0.2
    capacity_success_weight: float = 0.2
    capacity_protocol_factor: float = 20.0
    capacity_good_quality: float = 70.0

    resilience_robustness_weight: float = 0.4
    resilience_stability_weight: float = 0.3
    resilience_capacity_weight: float = 0.3

    risk_energy: float = 70.0
    risk_energy_critical: float = 85.0
    risk_energy_impact: int = 80
    consistency_min_samples: int = 3
    risk_consistency: float = 40.0
    risk_consistency_critical: float = 25.0
    risk_consistency_impact: int = 70
    risk_system_effectiveness: float = 30.0
    risk_system_critical_count: int = 2
    risk_system_probability_step: int = 20
    risk_system_impact: int = 60

    protective_effectiveness: float = 70.0
    protective_friction: float = 40.0
    protective_protocol_strength: int = 25

    trigger_burnout: float = 70.0
    trigger_stability: float = 40.0

    duration_base_days: int = 7
    duration_burnout_severe: float = 80.0
    duration_burnout_elevated: float = 60.0
    duration_severe_multiplier: float = 1.5
    duration_elevated_multiplier: float = 1.2
    duration_resilience_high: float = 70.0
    duration_resilience_mid: float = 50.0
    duration_high_adjust: int = -2
    duration_low_adjust: int = 2

    confidence_protocol_weight: float = 0.5
    confidence_resilience_weight: float = 0.3
    confidence_risk_weight: float = 0.2

    monitor_behind: float = 30.0
    monitor_ahead: float = 80.0
    stalled_min_samples: int = 5
    stalled_window: int = 3
    stalled_quality: float = 50.0
    stalled_variance: float = 100.0

    default_protocol_effectiveness: int = 75
    activation_threshold: int = 80
    activation_duration_days: int = 6
    activation_confidence: int = 85


@dataclass(frozen=True)
class AdaptationThresholds:
    window: int = 7
    drop_percent: float = 20.0
    drop_high: float = 30.0
    drop_critical: float = 40.0
    friction: float = 70.0
    friction_critical: float = 85.0
    context_fit: float = 50.0
    context_fit_high: float = 30.0
    skip_window: int = 5
    skip_completion: float = 40.0
    skip_completion_critical: float = 20.0
    recommend_strong: float = 70.0
    recommend_consider: float = 40.0


@dataclass(frozen=True)
class QualityThresholds:
    consistency_weak: float = 60.0
    consistency_strong: float = 85.0
    consistency_strong_base: float = 70.0
    weak_impact_base: float = 80.0
    energy_weak: float = 50.0
    energy_impact_base: float = 70.0
    context_weak: float = 60.0
    context_impact_base: float = 80.0
    system_quality: float = 50.0
    system_friction: float = 70.0
    system_impact_base: float = 70.0
    trend_min_samples: int = 7
    trend_window: int = 14
    trend_delta: float = 5.0
    trend_high: float = 10.0
    recommend_impact: float = 60.0
    recommend_limit: int = 5


MOMENTUM = MomentumThresholds()
PATTERNS = PatternThresholds()
SCHEDULER = SchedulerThresholds()
INSIGHTS = InsightThresholds()
RESILIENCE = ResilienceThresholds()
ADAPTATION = AdaptationThresholds()
QUALITY = QualityThresholds()
