"""
Murmur Backend — Health Check Route
=====================================

What:  GET /health for container health checks and load balancer probes.
How:   Runs a `SELECT 1` against the database and asks the media store for a
       reachability probe.

Status levels:
    healthy:   database and media host fine (200)
    degraded:  media host unavailable, reads still work (200)
    unhealthy: database unreachable (503)
"""

import logging
import time

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import text

from murmur import __version__
from murmur.database import engine
from murmur.dependencies import get_media_store
from murmur.schemas.common import HealthResponse
from murmur.services.media_base import MediaStore

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    responses={503: {"description": "Database unreachable", "model": HealthResponse}},
    summary="Service health check",
)
async def health_check(media: MediaStore = Depends(get_media_store)):
    db_status = "connected"
    media_status = "available"
    overall = "healthy"

    # ── Check Database ────────────────────────────────────────────────────
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        db_status = "disconnected"
        overall = "unhealthy"
        logger.warning("Health check: database unreachable: %s", str(e))

    # ── Check Media Host ──────────────────────────────────────────────────
    try:
        available = await media.health_check()
    except Exception as e:
        logger.warning("Health check: media host probe failed: %s", str(e))
        available = False
    if not available:
        media_status = "unavailable"
        overall = "degraded" if overall != "unhealthy" else overall

    body = HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        media=media_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
    if overall == "unhealthy":
        return JSONResponse(status_code=503, content=body.model_dump())
    return body
