"""
Pokédex API: Health Check Route
================================

What:  Health check endpoint for monitoring and load balancer probes.
How:   Checks the database (SELECT 1) and the object store (HEAD bucket)
       and returns an aggregate status.
Who:   Called by container health checks and load balancers.

Status levels:
    - healthy:   database and storage reachable (HTTP 200)
    - degraded:  database reachable, storage not (HTTP 200); reads still work
    - unhealthy: database unreachable (HTTP 503)
"""

import logging
import time
from typing import Optional

from fastapi import APIRouter, Depends, Response
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from pokedex import __version__
from pokedex.config import settings
from pokedex.database import engine
from pokedex.routes.dependencies import current_object_storage
from pokedex.schemas.common import HealthResponse
from pokedex.services.storage_base import ObjectStorage

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
    description=(
        "Returns the health status of the API and its dependencies. "
        "Responds 503 when the database is unreachable."
    ),
)
async def health_check(
    response: Response,
    storage: Optional[ObjectStorage] = Depends(current_object_storage),
) -> HealthResponse:
    db_status = "connected"
    storage_status = "available"
    overall = "healthy"

    # ── Check Database ────────────────────────────────────────────────────
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError) as e:
        db_status = "disconnected"
        overall = "unhealthy"
        logger.warning("Health check: database unreachable: %s", str(e))

    # ── Check Object Storage ──────────────────────────────────────────────
    if not settings.s3_bucket:
        storage_status = "not_configured"
    elif storage is None or not await storage.health_check():
        storage_status = "unavailable"
    if storage_status != "available" and overall == "healthy":
        overall = "degraded"

    if overall == "unhealthy":
        response.status_code = 503

    return HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        storage=storage_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
