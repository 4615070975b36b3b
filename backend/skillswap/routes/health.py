"""
SkillSwap Backend: Health Check Route
=====================================

What:  Health check endpoint for monitoring and load balancer probes.
       Served at both /health and /api/health.
How:   Runs SELECT 1 against the database and reports uptime.
       Answers 503 when the database is unreachable so load balancers stop
       routing traffic to this instance.
"""

import logging
import time

from fastapi import APIRouter, Response
from sqlalchemy import text

from skillswap import __version__
from skillswap import database
from skillswap.schemas.common import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get("/api/health", response_model=HealthResponse, include_in_schema=False)
@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
)
async def health_check(response: Response) -> HealthResponse:
    db_status = "connected"
    overall = "healthy"

    try:
        async with database.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        db_status = "disconnected"
        overall = "unhealthy"
        response.status_code = 503
        logger.warning("Health check: database unreachable: %s", str(e))

    return HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
