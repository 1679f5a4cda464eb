from typing import Annotated

from fastapi import APIRouter, Depends, Request

from docinsight.api.v1.endpoints.documents import get_stats_service
from docinsight.schemas.common import ApiResponse
from docinsight.services.stats_service import StatsService
from docinsight.utils.responses import create_api_response

router = APIRouter()


@router.get(
    "",
    response_model=ApiResponse,
    summary="Aggregate strategy statistics",
    operation_id="get_aggregate_stats",
)
async def get_stats(
    request: Request,
    stats_service: Annotated[StatsService, Depends(get_stats_service)] = None,
) -> ApiResponse:
    """Scores and costs per strategy across completed documents."""
    stats = await stats_service.get_aggregate_stats()
    return create_api_response(
        data=stats,
        message="Statistics retrieved successfully",
        request=request
    )
