"""
Custom exception hierarchy for HabitPulse.

Rule: every HTTP error has a machine-readable `code` string so clients
can branch on it without parsing English messages.

"Insufficient data" is deliberately absent: every scoring formula has a
neutral default and returns normally.
"""
from __future__ import annotations

from datetime import date
from typing import Any

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette import status

from habitpulse.core.logging import get_logger

log = get_logger(__name__)


# ---------------------------------------------------------------------------
# Exception classes
# ---------------------------------------------------------------------------

class HabitPulseException(Exception):
    """Base class for all application-level errors."""
    http_status: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    code: str = "INTERNAL_ERROR"

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict:
        payload: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.details:
            payload["details"] = self.details
        return payload


# --- not found -------------------------------------------------------------

class HabitNotFoundError(HabitPulseException):
    http_status = status.HTTP_404_NOT_FOUND
    code = "HABIT_NOT_FOUND"

    def __init__(self, habit_id: int):
        super().__init__(
            message=f"Habit {habit_id} not found.",
            details={"habit_id": habit_id},
        )


class SubTaskNotFoundError(HabitPulseException):
    http_status = status.HTTP_404_NOT_FOUND
    code = "SUB_TASK_NOT_FOUND"

    def __init__(self, sub_task_id: int):
        super().__init__(
            message=f"Sub-task {sub_task_id} not found.",
            details={"sub_task_id": sub_task_id},
        )


class SystemNotFoundError(HabitPulseException):
    http_status = status.HTTP_404_NOT_FOUND
    code = "SYSTEM_NOT_FOUND"

    def __init__(self, system_id: int):
        super().__init__(
            message=f"Adaptive system {system_id} not found.",
            details={"system_id": system_id},
        )


class ProtocolNotFoundError(HabitPulseException):
    http_status = status.HTTP_404_NOT_FOUND
    code = "PROTOCOL_NOT_FOUND"

    def __init__(self, protocol_id: int):
        super().__init__(
            message=f"Recovery protocol {protocol_id} not found.",
            details={"protocol_id": protocol_id},
        )


# --- validation ------------------------------------------------------------

class ProgressRuleValidationError(HabitPulseException):
    """Malformed progress rule, completion threshold or sub-task weight."""
    http_status = status.HTTP_422_UNPROCESSABLE_ENTITY
    code = "INVALID_PROGRESS_RULE"

    def __init__(self, message: str, field: str, value: Any):
        super().__init__(
            message=message,
            details={"field": field, "value": value},
        )


class DerivedCompletionError(HabitPulseException):
    http_status = status.HTTP_409_CONFLICT
    code = "DERIVED_COMPLETION"

    def __init__(self, habit_id: int):
        super().__init__(
            message=(
                f"Habit {habit_id} is completed through its sub-tasks; "
                "toggle the sub-tasks instead."
            ),
            details={"habit_id": habit_id},
        )


class ArchivedHabitError(HabitPulseException):
    http_status = status.HTTP_409_CONFLICT
    code = "HABIT_ARCHIVED"

    def __init__(self, habit_id: int, day: date | None = None):
        details: dict[str, Any] = {"habit_id": habit_id}
        if day is not None:
            details["day"] = str(day)
        super().__init__(
            message=f"Habit {habit_id} is archived and cannot be changed.",
            details=details,
        )


class HabitShapeError(HabitPulseException):
    """The change contradicts whether the habit is tracked through sub-tasks."""
    http_status = status.HTTP_409_CONFLICT
    code = "HABIT_SHAPE_CONFLICT"

    def __init__(self, habit_id: int, message: str):
        super().__init__(
            message=message,
            details={"habit_id": habit_id},
        )


class NoAdaptationError(HabitPulseException):
    """No strategy applies to the system right now, or the requested one does not."""
    http_status = status.HTTP_409_CONFLICT
    code = "NO_ADAPTATION"

    def __init__(self, system_id: int, strategy_id: str | None = None):
        details: dict[str, Any] = {"system_id": system_id}
        if strategy_id is not None:
            details["strategy_id"] = strategy_id
        super().__init__(
            message=f"No applicable adaptation for system {system_id}.",
            details=details,
        )


# ---------------------------------------------------------------------------
# FastAPI exception handlers
# ---------------------------------------------------------------------------

async def habitpulse_exception_handler(
    request: Request, exc: HabitPulseException
) -> JSONResponse:
    return JSONResponse(
        status_code=exc.http_status,
        content=exc.to_dict(),
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Return structured 422 with machine-readable field errors."""
    field_errors = []
    for error in exc.errors():
        field_errors.append({
            "field": ".".join(str(loc) for loc in error["loc"] if loc != "body"),
            "message": error["msg"],
            "type": error["type"],
        })
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "code": "VALIDATION_ERROR",
            "message": "Request validation failed.",
            "details": {"errors": field_errors},
        },
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    log.error(
        "unhandled_exception",
        path=request.url.path,
        method=request.method,
        exc_info=exc,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "code": "INTERNAL_ERROR",
            "message": "An unexpected error occurred.",
        },
    )
