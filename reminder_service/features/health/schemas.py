"""Pydantic schemas for health checks."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

HealthStatus = Literal["healthy", "degraded", "unhealthy"]


class LivenessResponse(BaseModel):
    status: Literal["alive"] = "alive"
    timestamp: datetime


class HealthResponse(BaseModel):
    """Overall status plus one entry per dependency."""

    status: HealthStatus
    service: str
    version: str
    timestamp: datetime
    checks: dict[str, bool] = Field(default_factory=dict)
