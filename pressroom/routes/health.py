"""
Pressroom Backend: Health Check Route
=====================================

What:  Liveness/readiness check for Docker and load balancers.
How:   Runs `SELECT 1` on the app's engine and reports the storage backend.

Status levels:
    healthy    database reachable                      → HTTP 200
    unhealthy  database unreachable (stop routing)     → HTTP 503
"""

import logging
import time

from fastapi import APIRouter, Request, Response
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from pressroom import __version__
from pressroom.schemas.common import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    responses={503: {"description": "Database unreachable", "model": HealthResponse}},
    summary="Service health check",
)
async def health_check(request: Request, response: Response) -> HealthResponse:
    db_status = "connected"
    overall = "healthy"

    try:
        async with request.app.state.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError) as e:
        db_status = "disconnected"
        overall = "unhealthy"
        response.status_code = 503
        logger.warning("Health check: database unreachable: %s", str(e))

    return HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        storage_backend=request.app.state.settings.storage_backend,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
