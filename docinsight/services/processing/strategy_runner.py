"""Runs one summarization strategy against one document."""

import asyncio
from dataclasses import dataclass
from typing import Awaitable, Optional, TypeVar
from uuid import UUID

from docinsight.core.exceptions import ProviderTimeoutError
from docinsight.repositories.evaluation_repository import EvaluationRepository
from docinsight.repositories.summary_repository import SummaryRepository
from docinsight.schemas.enums import ContentType, ProcessingStrategy
from docinsight.services.providers.base import BaseModelProvider, SummaryContent
from docinsight.utils.logging import get_logger

LOGGER = get_logger(__name__)

DEFAULT_TIMEOUT_SECONDS = 60.0

T = TypeVar("T")


async def run_with_timeout(call: Awaitable[T], timeout_seconds: float) -> T:
    """Await a provider call, cancelling it when it overruns.

    Raises:
        ProviderTimeoutError: If the call does not finish in time
    """
    try:
        return await asyncio.wait_for(call, timeout=timeout_seconds)
    except asyncio.TimeoutError as e:
        raise ProviderTimeoutError(
            f"Timed out after {round(timeout_seconds * 1000)}ms", original_error=e
        ) from e


@dataclass
class StrategyPlan:
    """Everything needed to run one strategy.

    Attributes:
        strategy: Which strategy the summary row is recorded under
        provider: Model provider to call
        content: Text, or base64 PNG pages, to summarize
        content_type: Form of ``content``
        evaluation_content: Text the summary is scored against
    """
    strategy: ProcessingStrategy
    provider: BaseModelProvider
    content: SummaryContent
    content_type: ContentType
    evaluation_content: str


class StrategyRunner:
    """Drives a summary through processing to a terminal status.

    A summary row is inserted before the provider is called so readers can
    see which model is running. Summary failures are recorded on that row;
    evaluation failures are logged and never change the summary.
    """

    def __init__(
        self,
        summaries: SummaryRepository,
        evaluations: EvaluationRepository,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    ):
        self.summaries = summaries
        self.evaluations = evaluations
        self.timeout_seconds = timeout_seconds

    async def run(
        self,
        document_id: UUID,
        plan: StrategyPlan,
        project_context: Optional[str] = None,
    ) -> bool:
        """Run the strategy.

        Args:
            document_id: Document being processed
            plan: Strategy to run
            project_context: Optional project description passed to the model

        Returns:
            True when a completed summary exists, even if evaluation failed
        """
        provider = plan.provider
        log_extra = {"document_id": str(document_id), "strategy": plan.strategy.value}

        try:
            summary = await self.summaries.create_processing(
                document_id=document_id,
                strategy=plan.strategy,
                model_id=provider.model_id,
                model_name=provider.model_name,
            )
        except Exception:
            LOGGER.error("Could not create summary record", exc_info=True, extra=log_extra)
            return False

        LOGGER.info(f"Running {plan.strategy.value} strategy with {provider.model_name}", extra=log_extra)

        try:
            output = await run_with_timeout(
                provider.generate_summary(plan.content, plan.content_type, project_context),
                self.timeout_seconds,
            )
            await self.summaries.mark_completed(summary.id, output)
        except Exception as e:
            message = str(e) or e.__class__.__name__
            LOGGER.error(
                f"Summary generation failed: {message}",
                extra={**log_extra, "summary_id": str(summary.id)}
            )
            await self._mark_failed(summary.id, message)
            return False

        await self._evaluate(summary.id, plan, output.short_summary + "\n\n" + output.detailed_summary)
        return True

    async def _evaluate(self, summary_id: UUID, plan: StrategyPlan, summary_text: str) -> None:
        try:
            evaluation = await run_with_timeout(
                plan.provider.evaluate_summary(plan.evaluation_content, summary_text),
                self.timeout_seconds,
            )
            await self.evaluations.create_from_output(summary_id, evaluation)
        except Exception as e:
            # The summary stays completed without an evaluation
            LOGGER.warning(
                f"Evaluation failed for summary {summary_id}: {e}",
                exc_info=True,
                extra={"strategy": plan.strategy.value}
            )

    async def _mark_failed(self, summary_id: UUID, message: str) -> None:
        try:
            await self.summaries.mark_failed(summary_id, message)
        except Exception:
            LOGGER.error(f"Could not mark summary {summary_id} as failed", exc_info=True)
