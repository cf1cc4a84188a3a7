"""Health & Readiness Probes — liveness and readiness endpoints for container orchestration.

Invariants:
    - GET /health/ always returns 200 if process is up (liveness)
    - GET /health/ready returns 503 if the document store database is unreachable

Design Decisions:
    - Separate liveness/readiness: liveness restarts, readiness removes from the
      load balancer (ADR: production readiness)
"""

import logging

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from tripintake import __version__
from tripintake.api.dependencies import get_context
from tripintake.services.context import AppContext

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/health", tags=["health"])


@router.get("/", status_code=status.HTTP_200_OK)
async def health_check():
    """Basic liveness probe. Returns 200 if the process is up."""
    return {
        "status": "healthy",
        "service": "tripintake-api",
        "version": __version__,
    }


@router.get("/ready")
async def readiness_check(ctx: AppContext = Depends(get_context)):
    """Readiness probe — includes database connectivity."""
    db_ok = await ctx.db.health_check() if ctx.db else False
    if not db_ok:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "status": "not_ready",
                "reason": "database_unavailable",
            },
        )
    return {"status": "ready", "checks": {"database": "healthy"}}
