"""
Storefront Backend: Health Check Route
=========================================

What:  Health endpoint for Docker health checks and load balancers.

Status levels:
    - healthy:   database reachable (HTTP 200)
    - unhealthy: database unreachable (HTTP 503)

Email never affects the status: console mode is a supported configuration,
so it is only reported.
"""

import logging
import time

from fastapi import APIRouter, Response
from sqlalchemy import text

from storefront import __version__
from storefront.database import engine
from storefront.schemas.common import HealthResponse
from storefront.services.email_service import email_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
)
async def health_check(response: Response) -> HealthResponse:
    db_status = "connected"
    overall = "healthy"

    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        db_status = "disconnected"
        overall = "unhealthy"
        logger.warning("Health check: database unreachable: %s", str(e))

    if overall == "unhealthy":
        response.status_code = 503

    return HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        email=email_service.mode(),
        uptime_seconds=round(time.time() - _start_time, 2),
    )
