"""Liveness and database health checks. Neither needs a session."""

import time
from datetime import UTC, datetime

from fastapi import APIRouter
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from policyhub import __version__
from policyhub.api.dependencies import DbSession
from policyhub.api.schemas.health import (
    ComponentHealth,
    HealthDetailResponse,
    HealthResponse,
    HealthStatus,
)

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse, summary="Liveness check")
async def health_check() -> HealthResponse:
    return HealthResponse(
        status=HealthStatus.HEALTHY, version=__version__, timestamp=datetime.now(UTC)
    )


@router.get("/health/db", response_model=HealthDetailResponse, summary="Database check")
async def health_db(db: DbSession) -> HealthDetailResponse:
    """Run ``SELECT 1`` and report the round-trip time.

    An unreachable database still answers 200, with ``unhealthy`` status.
    """
    database = await _check_database(db)
    return HealthDetailResponse(
        status=database.status,
        version=__version__,
        timestamp=datetime.now(UTC),
        database=database,
    )


async def _check_database(db: AsyncSession) -> ComponentHealth:
    started = time.perf_counter()
    try:
        await db.execute(text("SELECT 1"))
    except SQLAlchemyError as exc:
        status, message = HealthStatus.UNHEALTHY, f"Database unreachable: {str(exc)[:100]}"
    else:
        status, message = HealthStatus.HEALTHY, "ok"
    elapsed_ms = (time.perf_counter() - started) * 1000
    return ComponentHealth(status=status, message=message, latency_ms=round(elapsed_ms, 2))
