"""Liveness and database readiness endpoints."""

import time

from fastapi import APIRouter

from rmc import __version__
from rmc.application.dto.responses import HealthResponse, ProviderHealthResponse
from rmc.core.exceptions import RMCError

router = APIRouter(prefix="/api/health", tags=["health"])

_started = time.monotonic()


def _uptime() -> float:
    return round(time.monotonic() - _started, 3)


@router.get("", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Process is up. Does not touch the database."""
    return HealthResponse(status="healthy", version=__version__, uptime_seconds=_uptime())


@router.get("/db", response_model=HealthResponse)
async def db_health() -> HealthResponse:
    """Round-trip to SQLite, reporting the applied schema version."""
    from rmc.infrastructure.storage.sqlite import get_connection

    probe_start = time.perf_counter()
    try:
        async with get_connection() as conn:
            cursor = await conn.execute(
                "SELECT MAX(CAST(version AS INTEGER)) FROM schema_migrations"
            )
            (schema_version,) = await cursor.fetchone()
    except RMCError as e:
        database = ProviderHealthResponse(name="sqlite", available=False, error=e.message)
    else:
        database = ProviderHealthResponse(
            name=f"sqlite (schema v{schema_version:03d})" if schema_version else "sqlite",
            available=True,
            latency_ms=round((time.perf_counter() - probe_start) * 1000, 2),
        )

    return HealthResponse(
        status="healthy" if database.available else "unhealthy",
        version=__version__,
        uptime_seconds=_uptime(),
        database=database,
    )
