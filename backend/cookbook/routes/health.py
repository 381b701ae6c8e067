"""
Family Cookbook Backend — Health Check Route
==============================================

What:  GET /health for container health checks and uptime monitors.
How:   Runs SELECT 1 against the database. The service is "healthy" when
       that succeeds and "unhealthy" (HTTP 503) when it does not; nothing
       else the API needs can be down independently of the process itself.
"""

import logging
import time

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from cookbook import __version__
from cookbook.schemas.common import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    responses={503: {"description": "Database unreachable", "model": HealthResponse}},
    summary="Service health check",
)
async def health_check(request: Request):
    db_status = "connected"
    try:
        await request.app.state.database.ping()
    except Exception as e:
        db_status = "disconnected"
        logger.warning("Health check: database unreachable: %s", e)

    payload = HealthResponse(
        status="healthy" if db_status == "connected" else "unhealthy",
        version=__version__,
        database=db_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
    if db_status != "connected":
        return JSONResponse(status_code=503, content=payload.model_dump())
    return payload
