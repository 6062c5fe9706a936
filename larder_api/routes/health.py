"""
Health check endpoints.

Used for monitoring and load balancer health checks.
"""
import logging
import platform

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy import text

from larder import __version__
from larder.domain.clock import utcnow


logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/health")
async def health_check():
    """
    Health check endpoint.

    Returns system health status.
    """
    return {
        "status": "healthy",
        "timestamp": utcnow().isoformat(),
        "service": "larder-settlement",
        "version": __version__,
        "python_version": platform.python_version(),
    }


@router.get("/health/ready")
async def readiness_check(request: Request):
    """
    Readiness check endpoint.

    Ready once the database answers a trivial query.
    """
    database = getattr(request.app.state, "database", None)
    checks = {"api": "ok", "database": "unavailable"}

    if database is not None:
        try:
            async with database.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            checks["database"] = "ok"
        except Exception as e:
            logger.error(f"Database readiness check failed: {e}", exc_info=True)
            checks["database"] = "error"

    ready = checks["database"] == "ok"
    return JSONResponse(
        status_code=status.HTTP_200_OK if ready else status.HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "status": "ready" if ready else "not_ready",
            "timestamp": utcnow().isoformat(),
            "checks": checks,
        },
    )
