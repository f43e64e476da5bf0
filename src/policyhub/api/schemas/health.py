"""Health check payloads."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class HealthStatus(str, Enum):
    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"


class HealthResponse(BaseModel):
    """Liveness answer."""

    status: HealthStatus
    version: str = Field(..., description="PolicyHub package version")
    timestamp: datetime


class ComponentHealth(BaseModel):
    """Outcome of probing one backing service."""

    status: HealthStatus
    message: str | None = None
    latency_ms: float | None = Field(default=None, description="Round-trip time")


class HealthDetailResponse(HealthResponse):
    database: ComponentHealth
