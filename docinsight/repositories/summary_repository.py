"""Repository for Summary records."""

from typing import List, Optional, Sequence
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from docinsight.database.models import Summary
from docinsight.repositories.base_repository import BaseRepository
from docinsight.schemas.ai import SummaryOutput
from docinsight.schemas.enums import ProcessingStrategy, SummaryStatus


class SummaryRepository(BaseRepository[Summary]):
    """Data access for per-strategy summaries."""

    def __init__(self, session: AsyncSession):
        super().__init__(session, Summary)

    async def create_processing(
        self,
        document_id: UUID,
        strategy: ProcessingStrategy,
        model_id: str,
        model_name: str,
    ) -> Summary:
        """Insert a summary in the processing state with the provider identity."""
        return await self.create(
            document_id=document_id,
            strategy=strategy.value,
            model_id=model_id,
            model_name=model_name,
            status=SummaryStatus.PROCESSING.value,
            tags=[],
        )

    async def mark_completed(self, summary_id: UUID, output: SummaryOutput) -> Optional[Summary]:
        """Fill in a summary's results and set it to completed.

        Args:
            summary_id: Summary to update
            output: Validated provider output

        Returns:
            The updated summary, or None if it no longer exists
        """
        usage = output.token_usage
        return await self.update(
            summary_id,
            summary_short=output.short_summary,
            summary_detailed=output.detailed_summary,
            document_type=output.document_type.value,
            tags=[tag.model_dump(mode="json") for tag in output.tags],
            processing_time_ms=output.processing_time_ms,
            input_tokens=usage.input_tokens,
            output_tokens=usage.output_tokens,
            total_tokens=usage.total_tokens,
            estimated_cost_usd=usage.estimated_cost_usd,
            status=SummaryStatus.COMPLETED.value,
            error_message=None,
        )

    async def mark_failed(self, summary_id: UUID, error_message: str) -> Optional[Summary]:
        return await self.update(
            summary_id,
            status=SummaryStatus.FAILED.value,
            error_message=error_message,
        )

    async def list_by_document(self, document_id: UUID) -> List[Summary]:
        return await self.get_all(
            limit=None,
            filters={"document_id": document_id},
            order_by=[Summary.created_at],
        )

    async def list_completed_for_documents(self, document_ids: Sequence[UUID]) -> List[Summary]:
        """Completed summaries belonging to any of the given documents."""
        if not document_ids:
            return []
        return await self.get_all(
            limit=None,
            filters={
                "document_id": list(document_ids),
                "status": SummaryStatus.COMPLETED.value,
            },
        )
