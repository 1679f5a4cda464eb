"""Feedback collection for summaries."""

from typing import Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from docinsight.core.exceptions import SummaryNotFoundError, ValidationError
from docinsight.repositories.feedback_repository import FeedbackRepository
from docinsight.repositories.summary_repository import SummaryRepository
from docinsight.schemas.documents import FeedbackRecord
from docinsight.schemas.enums import FeedbackRating
from docinsight.utils.logging import get_logger

LOGGER = get_logger(__name__)

MAX_COMMENT_LENGTH = 500


class FeedbackService:
    def __init__(self, session: AsyncSession):
        self.summary_repo = SummaryRepository(session)
        self.feedback_repo = FeedbackRepository(session)

    async def submit_feedback(
        self,
        summary_id: UUID,
        rating: str,
        comment: Optional[str] = None,
    ) -> FeedbackRecord:
        """Record a rating for a summary, replacing any earlier one.

        Raises:
            ValidationError: If the rating or comment is invalid
            SummaryNotFoundError: If the summary does not exist
        """
        if rating not in {r.value for r in FeedbackRating}:
            raise ValidationError("Invalid rating. Must be thumbs_up or thumbs_down.")
        if comment and len(comment) > MAX_COMMENT_LENGTH:
            raise ValidationError(f"Comment must be {MAX_COMMENT_LENGTH} characters or fewer.")

        summary = await self.summary_repo.get_by_id(summary_id)
        if summary is None:
            raise SummaryNotFoundError(f"Summary {summary_id} not found")

        normalized_comment = comment.strip() if comment else None
        feedback = await self.feedback_repo.upsert(
            summary_id=summary_id,
            rating=rating,
            comment=normalized_comment or None,
        )
        LOGGER.info(f"Feedback {rating} saved for summary {summary_id}")
        return FeedbackRecord.model_validate(feedback)
