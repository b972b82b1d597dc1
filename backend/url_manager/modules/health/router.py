"""Health check endpoints."""

from fastapi import APIRouter, status
from pydantic import BaseModel

from url_manager.config import settings
from url_manager.core.database import check_db_connection
from url_manager.core.redis import check_redis_connection

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str


class ReadinessResponse(BaseModel):
    """Readiness check response with dependency status."""

    status: str
    checks: dict[str, bool]


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Basic health check",
    description="Returns OK if the service is running. Use for load balancer health checks.",
)
async def health() -> HealthResponse:
    return HealthResponse(
        status="ok",
        version=settings.app_version,
    )


@router.get(
    "/health/ready",
    response_model=ReadinessResponse,
    summary="Readiness probe",
    description="Checks the database and, when visit tracking is on, Redis.",
    responses={
        status.HTTP_503_SERVICE_UNAVAILABLE: {
            "description": "Service not ready - the database is down",
        }
    },
)
async def readiness() -> ReadinessResponse:
    """Readiness probe.

    Redis only feeds the visit queue, so losing it degrades the service
    without taking resolution down.
    """
    db_ok = await check_db_connection()
    checks = {"database": db_ok}
    if settings.track_visits:
        checks["redis"] = await check_redis_connection()

    if not db_ok:
        status_str = "down"
    elif all(checks.values()):
        status_str = "ok"
    else:
        status_str = "degraded"

    return ReadinessResponse(status=status_str, checks=checks)
