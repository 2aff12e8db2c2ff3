"""Health check endpoint - no authentication required."""

from __future__ import annotations

import logging
import time
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from mediatracker import __version__
from mediatracker.api.deps import get_db
from mediatracker.api.schemas.responses import ApiResponse

logger = logging.getLogger(__name__)

SLOW_DATABASE_MS = 5000


class HealthStatus(BaseModel):
    """Application health status."""

    status: str  # "healthy", "degraded", "unhealthy"
    version: str
    database: str  # "connected", "disconnected"
    database_latency_ms: Optional[int] = None
    timestamp: datetime


class HealthResponse(ApiResponse[HealthStatus]):
    """Response for health check endpoint."""

    pass


router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health_check(session: AsyncSession = Depends(get_db)) -> HealthResponse:
    """Report database connectivity and the running version."""
    db_status = "disconnected"
    db_latency_ms: Optional[int] = None
    try:
        start = time.monotonic()
        await session.execute(text("SELECT 1"))
        db_latency_ms = int((time.monotonic() - start) * 1000)
        db_status = "connected"
    except (SQLAlchemyError, OSError) as e:
        logger.warning("Health check could not reach the database: %s", e)

    if db_status == "disconnected":
        status = "unhealthy"
    elif db_latency_ms is not None and db_latency_ms > SLOW_DATABASE_MS:
        status = "degraded"
    else:
        status = "healthy"

    return HealthResponse(
        data=HealthStatus(
            status=status,
            version=__version__,
            database=db_status,
            database_latency_ms=db_latency_ms,
            timestamp=datetime.now(timezone.utc),
        )
    )
