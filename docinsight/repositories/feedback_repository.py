"""Repository for Feedback records."""

from datetime import datetime, timezone
from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from docinsight.database.models import Feedback
from docinsight.repositories.base_repository import BaseRepository


class FeedbackRepository(BaseRepository[Feedback]):
    """Data access for end-user feedback, one row per summary."""

    def __init__(self, session: AsyncSession):
        super().__init__(session, Feedback)

    async def upsert(self, summary_id: UUID, rating: str, comment: Optional[str]) -> Feedback:
        """Create or replace the feedback for a summary.

        Args:
            summary_id: Summary the feedback belongs to
            rating: thumbs_up or thumbs_down
            comment: Optional normalized comment

        Returns:
            The stored feedback row
        """
        try:
            stmt = insert(Feedback).values(
                summary_id=summary_id,
                rating=rating,
                comment=comment,
            )
            stmt = stmt.on_conflict_do_update(
                index_elements=[Feedback.summary_id],
                set_={
                    "rating": stmt.excluded.rating,
                    "comment": stmt.excluded.comment,
                    "updated_at": datetime.now(timezone.utc),
                },
            ).returning(Feedback.id)

            result = await self.session.execute(stmt)
            feedback_id = result.scalar_one()
            await self.session.commit()

            refreshed = await self.session.execute(
                select(Feedback)
                .where(Feedback.id == feedback_id)
                .execution_options(populate_existing=True)
            )
            return refreshed.scalar_one()
        except SQLAlchemyError as e:
            await self.session.rollback()
            self.logger.error(
                f"Error upserting feedback for summary {summary_id}: {str(e)}",
                exc_info=True
            )
            raise
