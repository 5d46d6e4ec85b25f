"""
Health check router for liveness and readiness probes.
"""
import logging

from fastapi import APIRouter, status

from samplehub.database.connections import ping_mongo, ping_redis

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])


@router.get(
    "/health",
    status_code=status.HTTP_200_OK,
    summary="Basic health check",
)
async def health_check():
    """
    Basic health check endpoint.
    Returns 200 if the API is running.
    """
    return {"status": "healthy"}


@router.get(
    "/health/ready",
    status_code=status.HTTP_200_OK,
    summary="Readiness check with dependencies",
)
async def readiness_check():
    """
    Readiness check that pings MongoDB and Redis.
    Always answers 200; `status` is "degraded" when a datastore is down.
    """
    checks = {"api": "healthy"}

    for name, ping in (("mongodb", ping_mongo), ("redis", ping_redis)):
        try:
            await ping()
            checks[name] = "healthy"
        except Exception as e:
            logger.warning("%s readiness ping failed: %s", name, e)
            checks[name] = f"unhealthy: {e}"

    all_healthy = all(v == "healthy" for v in checks.values())

    return {
        "status": "healthy" if all_healthy else "degraded",
        "checks": checks,
    }
