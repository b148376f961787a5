"""Health check endpoints."""

from datetime import datetime

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from api.v1.dependencies import get_notification_hub
from api.v1.schemas.common import ApiResponse
from core.config import settings
from domain.services.notification_hub import NotificationHub
from infrastructure.database.session import get_async_session

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str
    timestamp: str
    environment: str
    database: str | None = None
    hub_connections: int | None = None


@router.get("/health", response_model=ApiResponse[HealthResponse], summary="Basic health check")
async def health_check() -> ApiResponse[HealthResponse]:
    """
    Basic health check for load balancers.

    Returns service status without checking dependencies. Fast and lightweight.
    """
    return ApiResponse(
        data=HealthResponse(
            status="healthy",
            version="1.0.0",
            timestamp=datetime.utcnow().isoformat(),
            environment=settings.app_env,
        )
    )


@router.get(
    "/health/detailed",
    response_model=ApiResponse[HealthResponse],
    summary="Detailed health check",
)
async def detailed_health_check(
    db: AsyncSession = Depends(get_async_session),
    hub: NotificationHub = Depends(get_notification_hub),
) -> ApiResponse[HealthResponse]:
    """
    Detailed health check including database connectivity and the number
    of observers connected to the notification hub.
    """
    db_status = "unknown"

    try:
        await db.execute(text("SELECT 1"))
        db_status = "healthy"
    except Exception as e:
        db_status = f"unhealthy: {str(e)}"

    overall_status = "healthy" if db_status == "healthy" else "degraded"

    return ApiResponse(
        success=overall_status == "healthy",
        message=overall_status,
        data=HealthResponse(
            status=overall_status,
            version="1.0.0",
            timestamp=datetime.utcnow().isoformat(),
            environment=settings.app_env,
            database=db_status,
            hub_connections=hub.connection_count,
        ),
    )
