"""Health check API endpoints."""

from fastapi import APIRouter, Request
from pydantic import BaseModel, Field

from docinsight.core.config import settings
from docinsight.core.database import database_status

router = APIRouter()


class HealthCheckResponse(BaseModel):
    status: str = Field(..., description="Health check status")
    version: str = Field(..., description="Running application version")
    service: str = Field(..., description="Service name")
    active_processing_tasks: int = Field(0, description="Documents currently being processed")


@router.get(
    "",
    response_model=HealthCheckResponse,
    summary="Health check endpoint",
    description="Check if the service is running and healthy",
    operation_id="get_service_health_status",
)
async def health_check(request: Request) -> HealthCheckResponse:
    """Health check endpoint."""
    db_health = await database_status()
    dispatcher = getattr(request.app.state, "dispatcher", None)

    return HealthCheckResponse(
        status="healthy" if db_health["status"] == "healthy" else "degraded",
        version=settings.app_version,
        service=settings.app_name,
        active_processing_tasks=dispatcher.active_count if dispatcher else 0,
    )
