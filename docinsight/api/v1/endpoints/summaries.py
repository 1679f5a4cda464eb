from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from docinsight.core.database import get_async_session as get_session
from docinsight.core.exceptions import AppError
from docinsight.schemas.common import ApiResponse
from docinsight.schemas.documents import FeedbackRequest
from docinsight.services.feedback_service import FeedbackService
from docinsight.utils.responses import create_api_response, http_exception_from_error

router = APIRouter()


async def get_feedback_service(
    db_session: Annotated[AsyncSession, Depends(get_session)]
) -> FeedbackService:
    return FeedbackService(db_session)


@router.post(
    "/{summary_id}/feedback",
    response_model=ApiResponse,
    summary="Rate a summary",
    operation_id="submit_summary_feedback",
)
async def submit_feedback(
    request: Request,
    summary_id: UUID,
    payload: FeedbackRequest,
    feedback_service: Annotated[FeedbackService, Depends(get_feedback_service)] = None,
) -> ApiResponse:
    """Create or replace the feedback for a summary."""
    try:
        feedback = await feedback_service.submit_feedback(
            summary_id, rating=payload.rating, comment=payload.comment
        )
    except AppError as e:
        raise http_exception_from_error(e, request)

    return create_api_response(
        data=feedback,
        message="Feedback saved",
        request=request
    )
