"""API request/response schemas."""

from .errors import APIError, DriveErrorResponse, ErrorCode
from .health import ComponentHealth, HealthDetailResponse, HealthResponse, HealthStatus

__all__ = [
    "APIError",
    "ComponentHealth",
    "DriveErrorResponse",
    "ErrorCode",
    "HealthDetailResponse",
    "HealthResponse",
    "HealthStatus",
]
