"""Health Routes — liveness, and readiness against the souls schema.

Invariants:
    - GET /health/ answers 200 while the process runs, without touching storage
    - GET /health/ready answers 503 when the database is unreachable or the
      souls/soul_edges tables are missing (migrations not applied)
"""

import logging

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy import func, select

from souls.core.errors import StorageError
from souls.models.soul import Soul as SoulModel
from souls.models.soul_edge import SoulEdge

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/health", tags=["health"])


@router.get("/", status_code=status.HTTP_200_OK)
async def health_check():
    return {"status": "healthy", "service": "souls-api", "version": "1.0.0"}


@router.get("/ready")
async def readiness_check(request: Request):
    """Ready once storage answers and both souls tables can be queried."""
    manager = getattr(request.app.state, "db_manager", None)
    if manager is None or not await manager.health_check():
        return _not_ready("database_unavailable")

    try:
        async with manager.session() as db:
            souls = await db.scalar(select(func.count()).select_from(SoulModel))
            edges = await db.scalar(select(func.count()).select_from(SoulEdge))
    except StorageError as e:
        logger.error(f"Souls schema not readable: {e.message}")
        return _not_ready("schema_missing")

    return {
        "status": "ready",
        "checks": {"database": "healthy", "schema": "migrated"},
        "souls": souls,
        "relationships": edges,
    }


def _not_ready(reason: str) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"status": "not_ready", "reason": reason},
    )
