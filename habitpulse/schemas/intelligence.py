"""
Response models for the analytics engines.

Every model here is filled straight from an engine dataclass via
`Model.model_validate(result, from_attributes=True)`; field names mirror
the dataclass attributes one-to-one.
"""
from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict

from habitpulse.schemas.system import AdaptationOut, ProtocolResponse


class _Out(BaseModel):
    model_config = ConfigDict(from_attributes=True)


# ---------------------------------------------------------------------------
# Momentum
# ---------------------------------------------------------------------------

class MomentumMetricsOut(_Out):
    consistency: int
    growth: int
    impact: int
    learning: int
    overall: int
    direction: str
    strength: int


class MomentumTrendOut(_Out):
    metric: str
    current_value: float
    previous_value: float
    change: float
    trend: str
    significance: str


class MomentumBreakpointOut(_Out):
    type: str
    description: str
    severity: str
    timeframe: str
    factors: list[str]
    recommendations: list[str]


class ForecastPointOut(_Out):
    day: date
    predicted_momentum: int
    confidence: int
    factors: list[str]


class MomentumResponse(_Out):
    current: MomentumMetricsOut
    trends: list[MomentumTrendOut]
    breakpoints: list[MomentumBreakpointOut]
    forecast: list[ForecastPointOut]


# ---------------------------------------------------------------------------
# Patterns
# ---------------------------------------------------------------------------

class ExecutionPatternOut(_Out):
    hour: int
    weekday: int
    energy_level: float
    completion_rate: float
    context_fit: float
    samples: int


class PatternFrictionPointOut(_Out):
    type: str
    severity: float
    frequency: int
    description: str
    suggested_fix: str


class SkipRiskOut(_Out):
    system_id: int
    probability: float
    factors: list[str]
    timeframe: str
    mitigation: str


class OptimalTimingOut(_Out):
    system_id: str
    best_hour: int
    confidence: float
    reasoning: str
    alternatives: list[int]


class PatternAnalysisResponse(_Out):
    patterns: list[ExecutionPatternOut]
    friction_points: list[PatternFrictionPointOut]
    skip_risks: list[SkipRiskOut]
    optimal_timings: list[OptimalTimingOut]


# ---------------------------------------------------------------------------
# Insights and predictions
# ---------------------------------------------------------------------------

class InsightOut(_Out):
    type: str
    title: str
    description: str
    evidence: str
    recommended_action: str
    priority: str


class CognitiveBiasOut(_Out):
    type: str
    description: str
    evidence: list[str]
    severity: str
    impact: str
    recommendation: str


class PredictionFactorOut(_Out):
    factor: str
    weight: float
    value: float
    contribution: float


class PredictionScenarioOut(_Out):
    name: str
    probability: float
    description: str
    triggers: list[str]


class PredictionOutcomeOut(_Out):
    probability: float
    impact: str
    description: str
    scenarios: list[PredictionScenarioOut]


class PredictionOut(_Out):
    type: str
    confidence: float
    timeframe: str
    factors: list[PredictionFactorOut]
    outcome: PredictionOutcomeOut
    mitigation: list[str]


class LeveragePointOut(_Out):
    system_id: int
    system_name: str
    type: str
    potential_impact: float
    effort_required: float
    roi: float
    description: str
    action_steps: list[str]


class FrictionPointOut(_Out):
    system_id: int
    system_name: str
    type: str
    severity: float
    frequency: int
    description: str
    solutions: list[str]


class InsightReportResponse(_Out):
    insights: list[InsightOut]
    cognitive_biases: list[CognitiveBiasOut]
    predictions: list[PredictionOut]
    leverage_points: list[LeveragePointOut]
    friction_points: list[FrictionPointOut]


# ---------------------------------------------------------------------------
# Resilience and recovery
# ---------------------------------------------------------------------------

class RiskFactorOut(_Out):
    type: str
    severity: str
    probability: float
    impact: int
    description: str
    indicators: list[str]
    mitigation: list[str]


class ProtectiveFactorOut(_Out):
    type: str
    strength: float
    description: str
    benefits: list[str]


class ResilienceResponse(_Out):
    overall_resilience: int
    burnout_risk: int
    momentum_stability: int
    system_robustness: int
    recovery_capacity: int
    risk_factors: list[RiskFactorOut]
    protective_factors: list[ProtectiveFactorOut]


class RecoveryTriggerOut(_Out):
    type: str
    condition: str
    threshold: float
    activated: bool
    timestamp: Optional[datetime] = None


class RecoveryActionOut(_Out):
    type: str
    description: str
    priority: int
    automated: bool
    status: str
    scheduled_for: Optional[date] = None


class RecoveryPhaseOut(_Out):
    name: str
    duration_days: int
    description: str
    objectives: list[str]
    actions: list[str]
    success_criteria: list[str]


class RecoveryMilestoneOut(_Out):
    name: str
    target_date: date
    description: str
    achieved: bool


class RecoveryCheckpointOut(_Out):
    day: int
    assessments: list[str]
    adjustments: list[str]
    criteria: list[str]


class RecoveryTimelineOut(_Out):
    phases: list[RecoveryPhaseOut]
    milestones: list[RecoveryMilestoneOut]
    checkpoints: list[RecoveryCheckpointOut]


class RecoveryMetricOut(_Out):
    name: str
    target: float
    current: float
    unit: str
    direction: str
    weight: float


class RecoveryPlanResponse(_Out):
    protocol: ProtocolResponse
    triggers: list[RecoveryTriggerOut]
    actions: list[RecoveryActionOut]
    timeline: RecoveryTimelineOut
    success_metrics: list[RecoveryMetricOut]
    estimated_duration_days: int
    confidence: int


class RecoveryProgressResponse(_Out):
    progress: int
    status: str
    adjustments: list[str]
    recommendations: list[str]
    metrics: list[RecoveryMetricOut]


# ---------------------------------------------------------------------------
# Adaptation
# ---------------------------------------------------------------------------

class SystemMetricsOut(_Out):
    quality: float
    completion_rate: float
    energy_cost: float
    context_fit: float


class AdaptationResultOut(_Out):
    system_id: int
    strategy_id: str
    adaptation: AdaptationOut
    action_type: str
    before: SystemMetricsOut
    after: SystemMetricsOut
    effectiveness: int
    recommendation: str


# ---------------------------------------------------------------------------
# Execution quality
# ---------------------------------------------------------------------------

class ExecutionMetricsOut(_Out):
    consistency: int
    energy_efficiency: int
    context_alignment: int
    sequence_effectiveness: int
    overall_quality: int


class QualityInsightOut(_Out):
    type: str
    description: str
    evidence: str
    recommendation: str
    impact: float


class TrendAnalysisOut(_Out):
    metric: str
    trend: str
    change_rate: float
    timeframe: str
    significance: str


class QualityReportResponse(_Out):
    metrics: ExecutionMetricsOut
    insights: list[QualityInsightOut]
    trends: list[TrendAnalysisOut]
    recommendations: list[str]


# ---------------------------------------------------------------------------
# Energy-aware schedule
# ---------------------------------------------------------------------------

class EnergyWindowOut(_Out):
    start_hour: int
    end_hour: int
    energy_level: float
    focus_level: float
    creativity_level: float
    recommended_activities: list[str]


class SchedulingAdjustmentOut(_Out):
    type: str
    description: str
    impact: int
    effort: str


class SchedulingRecommendationOut(_Out):
    system_id: int
    system_name: str
    optimal_time: EnergyWindowOut
    alternative_times: list[EnergyWindowOut]
    confidence: int
    reasoning: str
    adjustments: list[SchedulingAdjustmentOut]


class DailyScheduleResponse(_Out):
    day: date
    chronotype: str
    work_style: str
    energy_windows: list[EnergyWindowOut]
    recommendations: list[SchedulingRecommendationOut]
    session_guidance: list[str]
    total_energy_efficiency: int
    focus_optimization: int
