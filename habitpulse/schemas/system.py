"""
Adaptive systems, execution samples, cognitive profile and recovery protocols.
"""
from datetime import datetime
from typing import Annotated, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from habitpulse.models.system import SystemType

Score = Annotated[float, Field(ge=0, le=100)]


# ---------------------------------------------------------------------------
# Systems
# ---------------------------------------------------------------------------

class SystemCreate(BaseModel):
    model_config = ConfigDict(use_enum_values=True)

    name: Annotated[str, Field(min_length=1, max_length=128, examples=["Deep work block"])]
    description: Optional[str] = Field(default=None, max_length=2000)
    system_type: SystemType = SystemType.habit
    effectiveness_score: Score = 50
    friction_coefficient: Score = Field(default=50, description="0-100; higher means harder to start.")
    locked: bool = Field(default=False, description="Locked systems are never adapted.")
    auto_adapt: bool = True


class AdaptationOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    trigger: str
    change: str
    impact: float
    timestamp: Optional[datetime] = None


class SystemResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: Optional[str] = None
    system_type: str
    effectiveness_score: float
    friction_coefficient: float
    locked: bool
    auto_adapt: bool
    adaptations: list[AdaptationOut] = []
    created_at: str


class ExecutionCreate(BaseModel):
    executed_at: Optional[datetime] = Field(default=None, description="Defaults to now (UTC).")
    completion_rate: Score
    energy_cost: Score
    context_fit: Score
    sequence_effectiveness: Score = 50
    quality: Score


class ExecutionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    system_id: int
    executed_at: datetime
    completion_rate: float
    energy_cost: float
    context_fit: float
    sequence_effectiveness: float
    quality: float


class AdaptationApplyRequest(BaseModel):
    strategy_id: Optional[str] = Field(
        default=None,
        description="Apply this strategy's recommendation. Defaults to the most effective one.",
        examples=["reduce_friction"],
    )


# ---------------------------------------------------------------------------
# Cognitive profile
# ---------------------------------------------------------------------------

class EnergyPatternIn(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    hour: int = Field(ge=0, le=23)
    energy_level: Score
    focus_level: Score
    creativity_level: Score


class ProfileUpdate(BaseModel):
    chronotype: Literal["morning", "evening", "intermediate"] = "intermediate"
    work_style: Literal["sprinter", "marathoner", "mixed"] = "mixed"
    adaptation: Score = Field(default=50, description="Self-rated adaptability; above 70 suggests reschedules.")
    energy_patterns: list[EnergyPatternIn] = Field(
        default=[],
        description="Hourly self-ratings. Empty means the chronotype's built-in energy windows are used.",
    )


class ProfileResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    chronotype: str
    work_style: str
    adaptation: float
    energy_patterns: list[EnergyPatternIn]


# ---------------------------------------------------------------------------
# Recovery protocols
# ---------------------------------------------------------------------------

class ProtocolConditionIn(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    metric: str = Field(examples=["burnout_risk"])
    operator: Literal["gt", "lt", "eq"]
    threshold: float


class ProtocolActionIn(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    type: Literal["system", "mindset", "environment", "schedule"]
    description: str = Field(min_length=1, max_length=500)
    priority: int = Field(ge=1, le=10)
    automated: bool = False


class ProtocolCreate(BaseModel):
    name: Annotated[str, Field(min_length=1, max_length=128)]
    trigger: str = Field(min_length=1, max_length=256, examples=["Burnout risk above 70"])
    effectiveness: Score = 50
    conditions: list[ProtocolConditionIn] = []
    actions: list[ProtocolActionIn] = []


class ProtocolResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: Optional[int] = Field(default=None, description="Null for the built-in default protocol.")
    name: str
    trigger: str
    effectiveness: float
    conditions: list[ProtocolConditionIn]
    actions: list[ProtocolActionIn]
    last_used: Optional[datetime] = None


class ActivateRecoveryRequest(BaseModel):
    trigger_condition: str = Field(
        default="manual",
        max_length=256,
        description="Free-text reason recorded on the activation trigger.",
    )


class MonitorRecoveryRequest(BaseModel):
    current: dict[str, float] = Field(
        default_factory=dict,
        description="Fresh readings keyed by success-metric name, e.g. {\"Completion Rate\": 72}.",
    )
