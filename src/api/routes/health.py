"""
Health check endpoint.
"""

import time

import structlog
from fastapi import APIRouter, Depends

from src.api.dependencies import get_database
from src.api.models import ComponentHealth, HealthResponse
from src.notifications.config import NotifyConfig
from src.rating.config import RatingConfig
from src.storage.database import Database

router = APIRouter()
logger = structlog.get_logger(__name__)

VERSION = "0.1.0"


async def _check_database(db: Database) -> ComponentHealth:
    """Check database connectivity and measure latency."""
    start = time.perf_counter()
    try:
        healthy = await db.health_check()
        latency_ms = (time.perf_counter() - start) * 1000
        return ComponentHealth(
            status="healthy" if healthy else "unhealthy",
            latency_ms=round(latency_ms, 2),
        )
    except Exception as e:
        latency_ms = (time.perf_counter() - start) * 1000
        logger.warning("health_database_check_failed", error=str(e))
        return ComponentHealth(
            status="unhealthy",
            latency_ms=round(latency_ms, 2),
            details={"error": str(e)},
        )


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
    description="Check the health of the service and its dependencies.",
)
async def health_check(
    db: Database = Depends(get_database),
) -> HealthResponse:
    """
    Status logic:
    - unhealthy: database is down
    - degraded: database is up but neither the evaluator nor Slack is configured
    - healthy: otherwise
    """
    db_health = await _check_database(db)
    evaluator_configured = RatingConfig().evaluator_configured
    slack_configured = NotifyConfig().slack_enabled

    if db_health.status == "unhealthy":
        status = "unhealthy"
    elif not evaluator_configured and not slack_configured:
        status = "degraded"
    else:
        status = "healthy"

    return HealthResponse(
        status=status,
        components={"database": db_health},
        evaluator_configured=evaluator_configured,
        slack_configured=slack_configured,
        version=VERSION,
    )
