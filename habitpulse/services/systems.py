"""
Adaptive systems, execution samples, cognitive profile and recovery protocols.

Plain persistence for the inputs of the analytics engines. Profile
energy patterns and protocol conditions and actions are stored as JSON text.
"""
from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy.orm import Session

from habitpulse.core.errors import ProtocolNotFoundError, SystemNotFoundError
from habitpulse.core.logging import get_logger
from habitpulse.models import (
    AdaptiveSystem,
    CognitiveProfile,
    ExecutionQuality,
    RecoveryProtocol,
    SystemAdaptation,
)

log = get_logger(__name__)


def _now() -> datetime:
    return datetime.now(tz=timezone.utc)


# ---------------------------------------------------------------------------
# Systems
# ---------------------------------------------------------------------------

def get_system(db: Session, user_id: str, system_id: int) -> AdaptiveSystem:
    system = (
        db.query(AdaptiveSystem)
        .filter(AdaptiveSystem.id == system_id, AdaptiveSystem.user_id == user_id)
        .first()
    )
    if system is None:
        raise SystemNotFoundError(system_id)
    return system


def list_systems(db: Session, user_id: str) -> list[AdaptiveSystem]:
    return (
        db.query(AdaptiveSystem)
        .filter(AdaptiveSystem.user_id == user_id)
        .order_by(AdaptiveSystem.id)
        .all()
    )


def system_adaptations(db: Session, system_id: int) -> list[SystemAdaptation]:
    return (
        db.query(SystemAdaptation)
        .filter(SystemAdaptation.system_id == system_id)
        .order_by(SystemAdaptation.created_at, SystemAdaptation.id)
        .all()
    )


def create_system(db: Session, user_id: str, **fields: Any) -> AdaptiveSystem:
    system = AdaptiveSystem(user_id=user_id, **fields)
    db.add(system)
    db.commit()
    db.refresh(system)
    log.info("system_created", system_id=system.id, user_id=user_id)
    return system


def record_execution(
    db: Session,
    user_id: str,
    system_id: int,
    executed_at: Optional[datetime] = None,
    **scores: float,
) -> ExecutionQuality:
    get_system(db, user_id, system_id)
    row = ExecutionQuality(
        user_id=user_id,
        system_id=system_id,
        executed_at=executed_at or _now(),
        **scores,
    )
    db.add(row)
    db.commit()
    db.refresh(row)
    log.info("execution_recorded", system_id=system_id, quality=row.quality)
    return row


# ---------------------------------------------------------------------------
# Profile
# ---------------------------------------------------------------------------

def upsert_profile(
    db: Session,
    user_id: str,
    chronotype: str,
    work_style: str,
    adaptation: float,
    energy_patterns: Optional[list[dict]] = None,
) -> CognitiveProfile:
    patterns = json.dumps(sorted(energy_patterns or [], key=lambda p: p["hour"]))
    existing = db.query(CognitiveProfile).filter(CognitiveProfile.user_id == user_id).first()
    if existing:
        existing.chronotype = chronotype
        existing.work_style = work_style
        existing.adaptation = adaptation
        existing.energy_patterns = patterns
        profile = existing
    else:
        profile = CognitiveProfile(
            user_id=user_id,
            chronotype=chronotype,
            work_style=work_style,
            adaptation=adaptation,
            energy_patterns=patterns,
        )
        db.add(profile)
    db.commit()
    db.refresh(profile)
    return profile


# ---------------------------------------------------------------------------
# Recovery protocols
# ---------------------------------------------------------------------------

def get_protocol(db: Session, user_id: str, protocol_id: int) -> RecoveryProtocol:
    protocol = (
        db.query(RecoveryProtocol)
        .filter(RecoveryProtocol.id == protocol_id, RecoveryProtocol.user_id == user_id)
        .first()
    )
    if protocol is None:
        raise ProtocolNotFoundError(protocol_id)
    return protocol


def list_protocols(db: Session, user_id: str) -> list[RecoveryProtocol]:
    return (
        db.query(RecoveryProtocol)
        .filter(RecoveryProtocol.user_id == user_id)
        .order_by(RecoveryProtocol.id)
        .all()
    )


def create_protocol(
    db: Session,
    user_id: str,
    name: str,
    trigger: str,
    effectiveness: float,
    conditions: list[dict],
    actions: list[dict],
) -> RecoveryProtocol:
    protocol = RecoveryProtocol(
        user_id=user_id,
        name=name,
        trigger=trigger,
        effectiveness=effectiveness,
        conditions=json.dumps(conditions),
        actions=json.dumps(actions),
    )
    db.add(protocol)
    db.commit()
    db.refresh(protocol)
    log.info("recovery_protocol_created", protocol_id=protocol.id, user_id=user_id)
    return protocol
