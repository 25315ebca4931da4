"""
Systems router — adaptive systems, their executions, the cognitive
profile and recovery protocols.

GET  /systems                              — list systems with adaptation history
POST /systems                              — create a system
POST /systems/{id}/executions              — record one execution sample
POST /systems/{id}/adaptations             — apply the best (or a named) recommended adaptation
PUT  /profile                              — create or replace the cognitive profile
GET  /recovery-protocols                   — list protocols
POST /recovery-protocols                   — create a protocol
POST /recovery-protocols/{id}/activate     — start a recovery run
"""
from __future__ import annotations

import json

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from habitpulse.db.base import get_db
from habitpulse.models import AdaptiveSystem, CognitiveProfile, RecoveryProtocol
from habitpulse.routers.deps import get_user_id
from habitpulse.schemas.common import ErrorResponse
from habitpulse.schemas.intelligence import AdaptationResultOut, RecoveryPlanResponse
from habitpulse.schemas.system import (
    ActivateRecoveryRequest,
    AdaptationApplyRequest,
    AdaptationOut,
    ExecutionCreate,
    ExecutionResponse,
    ProfileResponse,
    ProfileUpdate,
    ProtocolCreate,
    ProtocolResponse,
    SystemCreate,
    SystemResponse,
)
from habitpulse.services import intelligence
from habitpulse.services import systems as system_service

router = APIRouter(tags=["systems"])

_SYSTEM_NOT_FOUND = {404: {"model": ErrorResponse, "description": "Adaptive system not found."}}


def _ev(v) -> str:
    return v.value if hasattr(v, "value") else str(v)


# ---------------------------------------------------------------------------
# Serialization helpers
# ---------------------------------------------------------------------------

def _system_to_response(db: Session, s: AdaptiveSystem) -> SystemResponse:
    return SystemResponse(
        id=s.id,
        name=s.name,
        description=s.description,
        system_type=_ev(s.system_type),
        effectiveness_score=s.effectiveness_score,
        friction_coefficient=s.friction_coefficient,
        locked=s.locked,
        auto_adapt=s.auto_adapt,
        adaptations=[
            AdaptationOut(trigger=a.trigger, change=a.change, impact=a.impact, timestamp=a.created_at)
            for a in system_service.system_adaptations(db, s.id)
        ],
        created_at=s.created_at.isoformat() if s.created_at else "",
    )


def _profile_to_response(p: CognitiveProfile) -> ProfileResponse:
    return ProfileResponse(
        chronotype=p.chronotype,
        work_style=p.work_style,
        adaptation=p.adaptation,
        energy_patterns=json.loads(p.energy_patterns or "[]"),
    )


def _protocol_to_response(p: RecoveryProtocol) -> ProtocolResponse:
    return ProtocolResponse(
        id=p.id,
        name=p.name,
        trigger=p.trigger,
        effectiveness=p.effectiveness,
        conditions=json.loads(p.conditions or "[]"),
        actions=json.loads(p.actions or "[]"),
        last_used=p.last_used,
    )


# ---------------------------------------------------------------------------
# Systems
# ---------------------------------------------------------------------------

@router.get("/systems", response_model=list[SystemResponse], summary="List adaptive systems")
def list_systems(
    user_id: str = Depends(get_user_id),
    db: Session = Depends(get_db),
):
    return [_system_to_response(db, s) for s in system_service.list_systems(db, user_id)]


@router.post("/systems", response_model=SystemResponse, status_code=201, summary="Create an adaptive system")
def create_system(
    payload: SystemCreate,
    user_id: str = Depends(get_user_id),
    db: Session = Depends(get_db),
):
    system = system_service.create_system(db, user_id, **payload.model_dump())
    return _system_to_response(db, system)


@router.post(
    "/systems/{system_id}/executions",
    response_model=ExecutionResponse,
    status_code=201,
    summary="Record an execution",
    responses=_SYSTEM_NOT_FOUND,
)
def record_execution(
    system_id: int,
    payload: ExecutionCreate,
    user_id: str = Depends(get_user_id),
    db: Session = Depends(get_db),
):
    """
    One execution of a system with author-asserted 0-100 scores. These
    samples feed momentum, patterns, insights, resilience, adaptation and
    execution quality.
    """
    row = system_service.record_execution(db, user_id, system_id, **payload.model_dump())
    return ExecutionResponse.model_validate(row)


@router.post(
    "/systems/{system_id}/adaptations",
    response_model=AdaptationResultOut,
    status_code=201,
    summary="Apply a recommended adaptation",
    responses={
        **_SYSTEM_NOT_FOUND,
        409: {"model": ErrorResponse, "description": "No strategy applies to this system."},
    },
)
def apply_adaptation(
    system_id: int,
    payload: AdaptationApplyRequest,
    user_id: str = Depends(get_user_id),
    db: Session = Depends(get_db),
):
    """Appends the adaptation to the system's history. Locked systems never adapt."""
    result = intelligence.apply_adaptation(db, user_id, system_id, payload.strategy_id)
    return AdaptationResultOut.model_validate(result)


# ---------------------------------------------------------------------------
# Profile
# ---------------------------------------------------------------------------

@router.put("/profile", response_model=ProfileResponse, summary="Set the cognitive profile")
def put_profile(
    payload: ProfileUpdate,
    user_id: str = Depends(get_user_id),
    db: Session = Depends(get_db),
):
    """Replaces the whole profile; omitted `energy_patterns` clears them."""
    return _profile_to_response(system_service.upsert_profile(db, user_id, **payload.model_dump()))


# ---------------------------------------------------------------------------
# Recovery protocols
# ---------------------------------------------------------------------------

@router.get("/recovery-protocols", response_model=list[ProtocolResponse], summary="List recovery protocols")
def list_protocols(
    user_id: str = Depends(get_user_id),
    db: Session = Depends(get_db),
):
    return [_protocol_to_response(p) for p in system_service.list_protocols(db, user_id)]


@router.post(
    "/recovery-protocols",
    response_model=ProtocolResponse,
    status_code=201,
    summary="Create a recovery protocol",
)
def create_protocol(
    payload: ProtocolCreate,
    user_id: str = Depends(get_user_id),
    db: Session = Depends(get_db),
):
    protocol = system_service.create_protocol(db, user_id, **payload.model_dump())
    return _protocol_to_response(protocol)


@router.post(
    "/recovery-protocols/{protocol_id}/activate",
    response_model=RecoveryPlanResponse,
    summary="Activate a recovery protocol",
    responses={404: {"model": ErrorResponse, "description": "Recovery protocol not found."}},
)
def activate_protocol(
    protocol_id: int,
    payload: ActivateRecoveryRequest,
    user_id: str = Depends(get_user_id),
    db: Session = Depends(get_db),
):
    """Returns a three-phase recovery plan and stamps the protocol's `last_used`."""
    plan = intelligence.activate_protocol(db, user_id, protocol_id, payload.trigger_condition)
    return RecoveryPlanResponse.model_validate(plan)
