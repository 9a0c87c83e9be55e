# =============================================================================
# app/routers/health.py - Health Check Endpoints
# =============================================================================
# Provides health check endpoints for monitoring and load balancers.
# =============================================================================

from datetime import datetime, timezone

from fastapi import APIRouter
from sqlalchemy import text

from app.dependencies import DbDep
from app.envelope import EnvelopeRoute

router = APIRouter(route_class=EnvelopeRoute)

SERVICE_NAME = "trackFlow-server"


@router.get("/health")
async def health_check() -> dict:
    """
    Health check endpoint.

    Returns basic health status for load balancers and monitoring.
    """
    return {
        "status": "OK",
        "service": SERVICE_NAME,
    }


@router.get("/health/ready")
def readiness_check(db: DbDep) -> dict:
    """
    Readiness check endpoint.

    Runs a trivial query against the database. A failing database surfaces
    as a DATABASE_ERROR envelope.
    """
    db.execute(text("SELECT 1"))

    return {
        "status": "ready",
        "database": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
