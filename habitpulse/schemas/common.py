"""
Envelope and health models shared by every router.
"""
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class FieldError(BaseModel):
    """One entry of `details.errors` on a 422 VALIDATION_ERROR."""
    field: str = Field(examples=["completion_threshold"])
    message: str
    type: str = Field(examples=["less_than_equal"])


class ErrorResponse(BaseModel):
    """`{code, message, details}` body of every 4xx/5xx response."""
    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "code": "HABIT_NOT_FOUND",
                "message": "Habit 12 not found.",
                "details": {"habit_id": 12},
            }
        },
    )

    code: str
    message: str
    details: Optional[dict[str, Any]] = Field(
        default=None,
        description="Omitted when empty. For VALIDATION_ERROR: {\"errors\": [FieldError, ...]}.",
    )


class HealthResponse(BaseModel):
    status: str = Field(examples=["ok"])
    db: str = Field(examples=["ok"])
    env: str = Field(examples=["development"])
