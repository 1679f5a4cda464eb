import uuid
from decimal import Decimal
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from docinsight.core.exceptions import DocumentNotFoundError
from docinsight.schemas.enums import DocumentStatus
from docinsight.services.stats_service import (
    StatsService,
    compare_strategies,
    compute_strategy_stats,
    pick_winner,
)


def make_summary(strategy="text_extraction", cost="0.0010", time_ms=1000, score=None,
                 eval_cost="0.0002", status="completed"):
    summary_id = uuid.uuid4()
    evaluation = None
    if score is not None:
        evaluation = SimpleNamespace(
            summary_id=summary_id,
            overall_score=score,
            estimated_cost_usd=Decimal(eval_cost),
        )
    return SimpleNamespace(
        id=summary_id,
        strategy=strategy,
        status=status,
        estimated_cost_usd=Decimal(cost) if cost is not None else None,
        processing_time_ms=time_ms,
        evaluation=evaluation,
    )


@pytest.mark.parametrize(
    "text_value,multimodal_value,higher_is_better,expected",
    [
        (8, 6, True, "text"),
        (6, 8, True, "multimodal"),
        (7, 7, True, "tie"),
        (0.01, 0.02, False, "text"),
        (0.03, 0.02, False, "multimodal"),
        (None, 5, True, "tie"),
        (5, None, False, "tie"),
    ],
)
def test_pick_winner(text_value, multimodal_value, higher_is_better, expected):
    assert pick_winner(text_value, multimodal_value, higher_is_better) == expected


def test_compare_strategies_includes_evaluation_cost():
    text = make_summary("text_extraction", cost="0.0010", time_ms=1200, score=8, eval_cost="0.0002")
    multi = make_summary("multimodal", cost="0.0050", time_ms=3400, score=9, eval_cost="0.0010")

    comparison = compare_strategies(text, multi)

    assert comparison.text_summary_id == text.id
    assert comparison.multimodal_summary_id == multi.id

    assert comparison.overall_score.winner == "multimodal"
    assert comparison.cost.text_value == pytest.approx(0.0012)
    assert comparison.cost.multimodal_value == pytest.approx(0.0060)
    assert comparison.cost.winner == "text"
    assert comparison.processing_time.text_value == 1200
    assert comparison.processing_time.winner == "text"
    assert comparison.cost_per_point.text_value == pytest.approx(0.0012 / 8)
    assert comparison.cost_per_point.multimodal_value == pytest.approx(0.0060 / 9)
    assert comparison.cost_per_point.winner == "text"


def test_compare_strategies_without_evaluation():
    text = make_summary("text_extraction", score=None)
    multi = make_summary("multimodal", score=7)

    comparison = compare_strategies(text, multi)

    assert comparison.overall_score.text_value is None
    assert comparison.overall_score.winner == "tie"
    assert comparison.cost_per_point.text_value is None
    assert comparison.cost_per_point.winner == "tie"


def test_compute_strategy_stats():
    scored = make_summary(cost="0.0010", score=8, eval_cost="0.0002")
    also_scored = make_summary(cost="0.0020", score=6, eval_cost="0.0002")
    unscored = make_summary(cost="0.0030")
    evaluations = {s.id: s.evaluation for s in (scored, also_scored)}

    stats = compute_strategy_stats([scored, also_scored, unscored], evaluations)

    assert stats.count == 3
    assert stats.avg_score == pytest.approx(7.0)
    assert stats.avg_cost == pytest.approx((0.0012 + 0.0022 + 0.0030) / 3)


def test_compute_strategy_stats_empty():
    stats = compute_strategy_stats([], {})

    assert stats.count == 0
    assert stats.avg_score is None
    assert stats.avg_cost == 0.0


def stats_service():
    service = StatsService(MagicMock())
    service.doc_repo = AsyncMock()
    service.summary_repo = AsyncMock()
    service.evaluation_repo = AsyncMock()
    return service


@pytest.mark.asyncio
async def test_get_comparison_missing_document():
    service = stats_service()
    service.doc_repo.get_with_results.return_value = None

    with pytest.raises(DocumentNotFoundError):
        await service.get_comparison(uuid.uuid4())


@pytest.mark.asyncio
async def test_get_comparison_needs_both_completed_strategies():
    service = stats_service()
    document_id = uuid.uuid4()
    service.doc_repo.get_with_results.return_value = SimpleNamespace(
        id=document_id,
        summaries=[
            make_summary("text_extraction", score=8),
            make_summary("multimodal", status="failed"),
        ],
    )

    response = await service.get_comparison(document_id)

    assert response.document_id == document_id
    assert response.available_strategies == ["text_extraction"]
    assert response.comparison is None


@pytest.mark.asyncio
async def test_get_comparison_with_both_strategies():
    service = stats_service()
    document_id = uuid.uuid4()
    service.doc_repo.get_with_results.return_value = SimpleNamespace(
        id=document_id,
        summaries=[make_summary("multimodal", score=6), make_summary("text_extraction", score=8)],
    )

    response = await service.get_comparison(document_id)

    assert response.available_strategies == ["multimodal", "text_extraction"]
    assert response.comparison.overall_score.winner == "text"


@pytest.mark.asyncio
async def test_get_aggregate_stats():
    service = stats_service()
    text = make_summary("text_extraction", cost="0.0010", score=8, eval_cost="0.0002")
    multi = make_summary("multimodal", cost="0.0050", score=9, eval_cost="0.0010")
    service.doc_repo.list_ids_by_status.return_value = [uuid.uuid4()]
    service.summary_repo.list_completed_for_documents.return_value = [text, multi]
    service.evaluation_repo.list_by_summary_ids.return_value = [text.evaluation, multi.evaluation]

    stats = await service.get_aggregate_stats()

    service.doc_repo.list_ids_by_status.assert_awaited_once_with(DocumentStatus.COMPLETED)
    assert stats.documents_processed == 1
    assert stats.text_extraction.count == 1
    assert stats.text_extraction.avg_score == 8
    assert stats.multimodal.avg_score == 9
    assert stats.total_cost == pytest.approx(0.0072)


@pytest.mark.asyncio
async def test_get_aggregate_stats_with_nothing_processed():
    service = stats_service()
    service.doc_repo.list_ids_by_status.return_value = []
    service.summary_repo.list_completed_for_documents.return_value = []
    service.evaluation_repo.list_by_summary_ids.return_value = []

    stats = await service.get_aggregate_stats()

    assert stats.documents_processed == 0
    assert stats.text_extraction.avg_score is None
    assert stats.multimodal.count == 0
    assert stats.total_cost == 0
