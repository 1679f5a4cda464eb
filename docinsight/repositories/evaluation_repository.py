"""Repository for Evaluation records."""

from typing import List, Sequence
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from docinsight.database.models import Evaluation
from docinsight.repositories.base_repository import BaseRepository
from docinsight.schemas.ai import EvaluationOutput


class EvaluationRepository(BaseRepository[Evaluation]):
    """Data access for self-evaluation scores."""

    def __init__(self, session: AsyncSession):
        super().__init__(session, Evaluation)

    async def create_from_output(self, summary_id: UUID, output: EvaluationOutput) -> Evaluation:
        """Insert the evaluation of a completed summary."""
        usage = output.token_usage
        return await self.create(
            summary_id=summary_id,
            completeness_score=output.completeness.score,
            completeness_rationale=output.completeness.rationale,
            confidence_score=output.confidence.score,
            confidence_rationale=output.confidence.rationale,
            specificity_score=output.specificity.score,
            specificity_rationale=output.specificity.rationale,
            overall_score=output.overall.score,
            overall_rationale=output.overall.rationale,
            input_tokens=usage.input_tokens,
            output_tokens=usage.output_tokens,
            total_tokens=usage.total_tokens,
            estimated_cost_usd=usage.estimated_cost_usd,
        )

    async def list_by_summary_ids(self, summary_ids: Sequence[UUID]) -> List[Evaluation]:
        if not summary_ids:
            return []
        return await self.get_all(limit=None, filters={"summary_id": list(summary_ids)})
