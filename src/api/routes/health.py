"""
Health check endpoints.
"""

import time

import aiosqlite
from fastapi import APIRouter

from src.application.dto.responses import ComponentHealthResponse, HealthResponse
from src.config import get_settings
from src.core.exceptions import StorageError
from src.infrastructure.storage.sqlite import get_pool
from src.infrastructure.storage.sqlite.migrations.migrator import get_current_version

router = APIRouter(prefix="/api/health", tags=["health"])

_started = time.monotonic()


def _uptime() -> float:
    return time.monotonic() - _started


@router.get("", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Liveness: the process is up."""
    return HealthResponse(
        status="healthy",
        version=get_settings().app_version,
        uptime_seconds=_uptime(),
    )


@router.get("/db", response_model=HealthResponse)
async def db_health() -> HealthResponse:
    """
    Readiness: the stock database answers queries.

    Reports round-trip latency, the applied schema version and how many
    pooled connections are currently borrowed.
    """
    try:
        pool = await get_pool()
        started = time.perf_counter()
        available = await pool.ping()
        latency_ms = (time.perf_counter() - started) * 1000
        async with pool.acquire() as conn:
            schema_version = await get_current_version(conn)
        stats = pool.stats()
        database = ComponentHealthResponse(
            name="sqlite",
            available=available,
            latency_ms=round(latency_ms, 2),
            schema_version=schema_version,
            pool_size=stats.size,
            pool_in_use=stats.in_use,
        )
    except (StorageError, aiosqlite.Error, OSError) as e:
        database = ComponentHealthResponse(name="sqlite", available=False, error=str(e))

    return HealthResponse(
        status="healthy" if database.available else "unhealthy",
        version=get_settings().app_version,
        uptime_seconds=_uptime(),
        database=database,
    )
