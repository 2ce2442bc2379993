"""Health check endpoints for monitoring application status."""

import time

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from shortener.core.config import settings
from shortener.db.base import DatabaseHealthCheck
from shortener.db.session import get_db

router = APIRouter(tags=["health"])


@router.get(
    "/health",
    status_code=status.HTTP_200_OK,
    summary="Get system health status",
    response_description="Health status of all system components"
)
async def health_check(db: AsyncSession = Depends(get_db)):
    """Check health of all system components."""
    database = await DatabaseHealthCheck.check_connection(db)
    healthy = database["status"] == "healthy"

    health_status = {
        "status": "healthy" if healthy else "unhealthy",
        "version": settings.APP_VERSION,
        "environment": settings.ENVIRONMENT.value,
        "timestamp": time.time(),
        "components": {"database": database},
    }
    return JSONResponse(
        status_code=status.HTTP_200_OK if healthy else status.HTTP_503_SERVICE_UNAVAILABLE,
        content=health_status,
    )


@router.get(
    "/health/ready",
    status_code=status.HTTP_200_OK,
    summary="Readiness probe",
    response_description="Application readiness status"
)
async def readiness_probe(db: AsyncSession = Depends(get_db)):
    """Check if application is ready to handle requests."""
    database = await DatabaseHealthCheck.check_connection(db)
    components_status = {"api": True, "database": database["status"] == "healthy"}
    is_ready = all(components_status.values())

    return JSONResponse(
        status_code=status.HTTP_200_OK if is_ready else status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"ready": is_ready, "components": components_status},
    )


@router.get(
    "/health/live",
    status_code=status.HTTP_200_OK,
    summary="Liveness probe",
    response_description="Application liveness status"
)
async def liveness_probe():
    """Simple check that application is running."""
    return {"alive": True}
