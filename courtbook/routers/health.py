"""
Liveness and database health.
"""

import logging
from datetime import UTC, datetime

import aiosqlite
from fastapi import APIRouter, Request

from courtbook import db
from courtbook.models import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["health"])


@router.get(
    "/health",
    response_model=HealthResponse,
    operation_id="getHealth",
    summary="Service and database health",
)
async def get_health(request: Request) -> HealthResponse:
    try:
        await db.ping()
        database = "ok"
    except aiosqlite.Error:
        logger.exception("Health check: database unreachable")
        database = "unavailable"

    return HealthResponse(
        status="ok" if database == "ok" else "degraded",
        version=request.app.version,
        database=database,
        timestamp=datetime.now(UTC),
    )
