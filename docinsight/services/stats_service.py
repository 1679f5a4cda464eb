"""Strategy comparison and aggregate statistics over processed documents."""

from typing import Dict, Iterable, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from docinsight.core.exceptions import DocumentNotFoundError
from docinsight.database.models import Evaluation, Summary
from docinsight.repositories.document_repository import DocumentRepository
from docinsight.repositories.evaluation_repository import EvaluationRepository
from docinsight.repositories.summary_repository import SummaryRepository
from docinsight.schemas.documents import (
    AggregateStats,
    ComparisonMetric,
    ComparisonResponse,
    StrategyComparison,
    StrategyStats,
    Winner,
)
from docinsight.schemas.enums import DocumentStatus, ProcessingStrategy, SummaryStatus


def pick_winner(text_value: Optional[float], multimodal_value: Optional[float], higher_is_better: bool) -> Winner:
    if text_value is None or multimodal_value is None or text_value == multimodal_value:
        return "tie"
    if higher_is_better:
        return "text" if text_value > multimodal_value else "multimodal"
    return "text" if text_value < multimodal_value else "multimodal"


def _as_float(value) -> Optional[float]:
    return float(value) if value is not None else None


def total_cost(summary: Summary, evaluation: Optional[Evaluation]) -> float:
    """Summary cost plus the cost of its evaluation, missing costs as zero."""
    cost = float(summary.estimated_cost_usd or 0)
    if evaluation is not None:
        cost += float(evaluation.estimated_cost_usd or 0)
    return cost


def _metric(label: str, text_value, multimodal_value, higher_is_better: bool) -> ComparisonMetric:
    text_value = _as_float(text_value)
    multimodal_value = _as_float(multimodal_value)
    return ComparisonMetric(
        label=label,
        text_value=text_value,
        multimodal_value=multimodal_value,
        winner=pick_winner(text_value, multimodal_value, higher_is_better),
    )


def compare_strategies(text_summary: Summary, multimodal_summary: Summary) -> StrategyComparison:
    """Compare two completed summaries of the same document.

    Higher overall score wins; lower cost, time and cost per score point win.
    A metric missing on either side is a tie.
    """
    text_eval = text_summary.evaluation
    multi_eval = multimodal_summary.evaluation

    text_score = text_eval.overall_score if text_eval else None
    multi_score = multi_eval.overall_score if multi_eval else None

    text_cost = total_cost(text_summary, text_eval)
    multi_cost = total_cost(multimodal_summary, multi_eval)

    text_cpp = text_cost / text_score if text_score else None
    multi_cpp = multi_cost / multi_score if multi_score else None

    return StrategyComparison(
        text_summary_id=text_summary.id,
        multimodal_summary_id=multimodal_summary.id,
        overall_score=_metric("Overall Score", text_score, multi_score, higher_is_better=True),
        cost=_metric("Cost", text_cost, multi_cost, higher_is_better=False),
        processing_time=_metric(
            "Time",
            text_summary.processing_time_ms,
            multimodal_summary.processing_time_ms,
            higher_is_better=False,
        ),
        cost_per_point=_metric("Cost per Point", text_cpp, multi_cpp, higher_is_better=False),
    )


def compute_strategy_stats(
    summaries: Iterable[Summary],
    evaluations: Dict[UUID, Evaluation],
) -> StrategyStats:
    summaries = list(summaries)
    if not summaries:
        return StrategyStats(avg_score=None, avg_cost=0.0, count=0)

    score_sum = 0
    score_count = 0
    cost_sum = 0.0
    for summary in summaries:
        evaluation = evaluations.get(summary.id)
        cost_sum += total_cost(summary, evaluation)
        if evaluation is not None and evaluation.overall_score is not None:
            score_sum += evaluation.overall_score
            score_count += 1

    return StrategyStats(
        avg_score=score_sum / score_count if score_count else None,
        avg_cost=cost_sum / len(summaries),
        count=len(summaries),
    )


class StatsService:
    def __init__(self, session: AsyncSession):
        self.doc_repo = DocumentRepository(session)
        self.summary_repo = SummaryRepository(session)
        self.evaluation_repo = EvaluationRepository(session)

    async def get_comparison(self, document_id: UUID) -> ComparisonResponse:
        """Compare the strategies of one document.

        Raises:
            DocumentNotFoundError: If the document does not exist
        """
        document = await self.doc_repo.get_with_results(document_id)
        if document is None:
            raise DocumentNotFoundError(f"Document with ID {document_id} not found")

        completed = {
            s.strategy: s for s in document.summaries if s.status == SummaryStatus.COMPLETED.value
        }
        text_summary = completed.get(ProcessingStrategy.TEXT_EXTRACTION.value)
        multimodal_summary = completed.get(ProcessingStrategy.MULTIMODAL.value)

        comparison = None
        if text_summary is not None and multimodal_summary is not None:
            comparison = compare_strategies(text_summary, multimodal_summary)

        return ComparisonResponse(
            document_id=document_id,
            available_strategies=sorted(completed),
            comparison=comparison,
        )

    async def get_aggregate_stats(self) -> AggregateStats:
        """Statistics over completed documents and their completed summaries."""
        document_ids = await self.doc_repo.list_ids_by_status(DocumentStatus.COMPLETED)
        summaries = await self.summary_repo.list_completed_for_documents(document_ids)
        evaluations = {
            e.summary_id: e
            for e in await self.evaluation_repo.list_by_summary_ids([s.id for s in summaries])
        }

        text_summaries = [s for s in summaries if s.strategy == ProcessingStrategy.TEXT_EXTRACTION.value]
        multimodal_summaries = [s for s in summaries if s.strategy == ProcessingStrategy.MULTIMODAL.value]

        return AggregateStats(
            documents_processed=len(document_ids),
            text_extraction=compute_strategy_stats(text_summaries, evaluations),
            multimodal=compute_strategy_stats(multimodal_summaries, evaluations),
            total_cost=sum(total_cost(s, evaluations.get(s.id)) for s in summaries),
        )
