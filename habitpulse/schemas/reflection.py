"""
Monthly reflection schemas.

GET  /reflections?year=&month=  → ReflectionResponse
POST /reflections               → ReflectionUpsert → ReflectionResponse
"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ReflectionUpsert(BaseModel):
    year: int = Field(ge=1970, le=9999, examples=[2026])
    month: int = Field(ge=1, le=12, examples=[3])
    content: str = Field(default="", max_length=20000)


class ReflectionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: Optional[int] = Field(default=None, description="Null when nothing has been written for the month.")
    year: int
    month: int
    content: str = ""
    updated_at: Optional[datetime] = None
