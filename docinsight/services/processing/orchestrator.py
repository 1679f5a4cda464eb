"""Per-document processing pipeline.

A document moves through extraction, strategy selection and strategy
execution, and ends ``completed`` when at least one strategy produced a
summary, ``failed`` otherwise. Every stage writes its outcome to the document
row as it goes so polling readers can follow progress.
"""

import asyncio
from contextlib import AbstractAsyncContextManager
from typing import Callable, List, Literal, Optional
from uuid import UUID

from docinsight.database.models import Document
from docinsight.repositories.scope import Repositories
from docinsight.schemas.enums import (
    ContentType,
    DocumentStatus,
    ExtractionErrorType,
    ProcessingStrategy,
)
from docinsight.services.extraction.image_renderer import (
    DEFAULT_MAX_PAGES,
    ImageRenderer,
    ImageRenderResult,
)
from docinsight.services.extraction.text_extractor import TextExtractionResult, TextExtractor
from docinsight.services.processing.strategy_runner import (
    DEFAULT_TIMEOUT_SECONDS,
    StrategyPlan,
    StrategyRunner,
)
from docinsight.services.providers.base import BaseModelProvider
from docinsight.utils.logging import get_logger

LOGGER = get_logger(__name__)

ALL_STRATEGIES_FAILED = "All summarization strategies failed; see individual summaries for details"
NO_CONTENT_EXTRACTED = "No text or page images could be extracted from the document"

StrategyExecution = Literal["sequential", "concurrent"]
ScopeFactory = Callable[[], AbstractAsyncContextManager]


def image_only_evaluation_content(page_count: int) -> str:
    """Stand-in document text for scoring a summary of an image-only PDF."""
    return (
        f"[Document supplied as {page_count} page image(s); "
        "no extractable text was available.]"
    )


class DocumentOrchestrator:
    """Drives one document from stored PDF to summarized results."""

    def __init__(
        self,
        repositories: Repositories,
        text_extractor: TextExtractor,
        image_renderer: ImageRenderer,
        text_provider: BaseModelProvider,
        multimodal_provider: BaseModelProvider,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        max_image_pages: int = DEFAULT_MAX_PAGES,
        strategy_execution: StrategyExecution = "sequential",
        scope_factory: Optional[ScopeFactory] = None,
    ):
        """Initialize the orchestrator.

        Args:
            repositories: Repositories bound to this run's session
            text_extractor: Text extraction step
            image_renderer: Page rendering step
            text_provider: Provider for the text_extraction strategy
            multimodal_provider: Provider for the multimodal strategy; must
                accept page images
            timeout_seconds: Budget for each provider call
            max_image_pages: Cap on rendered pages
            strategy_execution: Run strategies one after another, or together
            scope_factory: Opens a fresh repository scope per strategy when
                running concurrently; required for ``concurrent``
        """
        if strategy_execution == "concurrent" and scope_factory is None:
            raise ValueError("Concurrent strategy execution needs a scope_factory")
        if not getattr(multimodal_provider, "supports_vision", False):
            raise ValueError(
                f"Provider {multimodal_provider.model_id} cannot accept page images"
            )

        self.repositories = repositories
        self.text_extractor = text_extractor
        self.image_renderer = image_renderer
        self.text_provider = text_provider
        self.multimodal_provider = multimodal_provider
        self.timeout_seconds = timeout_seconds
        self.max_image_pages = max_image_pages
        self.strategy_execution = strategy_execution
        self.scope_factory = scope_factory

    async def process(self, document_id: UUID) -> None:
        """Process a document end to end.

        A missing document is logged and ignored. Unexpected errors mark the
        document failed before being re-raised to the caller.
        """
        documents = self.repositories.documents

        document = await documents.get_by_id(document_id)
        if document is None:
            LOGGER.error(f"Document {document_id} not found, nothing to process")
            return

        try:
            await self._run_pipeline(document)
        except Exception as e:
            LOGGER.error(
                f"Processing aborted for document {document_id}",
                exc_info=True,
                extra={"document_id": str(document_id)}
            )
            try:
                await documents.update(
                    document_id,
                    status=DocumentStatus.FAILED.value,
                    error_message=f"Processing failed unexpectedly: {e}",
                )
            except Exception:
                LOGGER.error(f"Could not mark document {document_id} as failed", exc_info=True)
            raise

    async def _run_pipeline(self, document: Document) -> None:
        documents = self.repositories.documents
        document_id = document.id
        log_extra = {"document_id": str(document_id)}

        extraction = await self.text_extractor.extract(document.file_path)
        error_type = extraction.error_type.value if extraction.error_type else None
        await documents.update_extraction(
            document_id,
            extracted_text=extraction.text,
            page_count=extraction.page_count,
            extraction_success=extraction.success,
            error_message=extraction.error,
            error_type=error_type,
        )
        LOGGER.info(
            f"Text extraction finished (success={extraction.success}, error_type={error_type})",
            extra=log_extra
        )

        if extraction.error_type == ExtractionErrorType.CORRUPTED:
            await documents.update_status(
                document_id, DocumentStatus.FAILED, error_message=extraction.error
            )
            return

        rendering = await self.image_renderer.render(document.file_path, self.max_image_pages)
        if not rendering.success:
            LOGGER.warning(f"Image rendering failed: {rendering.error}", extra=log_extra)

        has_text = bool(extraction.text)
        has_images = len(rendering.images) > 0

        if not has_text and not has_images:
            await documents.update_status(
                document_id,
                DocumentStatus.FAILED,
                error_message=self._combined_error(extraction, rendering),
            )
            return

        if not extraction.page_count and rendering.page_count:
            await documents.update(document_id, page_count=rendering.page_count)

        plans = self._plan_strategies(extraction, rendering)
        if not plans:
            await documents.update_status(
                document_id, DocumentStatus.FAILED, error_message=NO_CONTENT_EXTRACTED
            )
            return

        outcomes = await self._execute(document, plans)

        if any(outcomes):
            await documents.update_status(document_id, DocumentStatus.COMPLETED)
            LOGGER.info(
                f"Document completed ({sum(outcomes)}/{len(outcomes)} strategies succeeded)",
                extra=log_extra
            )
        else:
            await documents.update_status(
                document_id, DocumentStatus.FAILED, error_message=ALL_STRATEGIES_FAILED
            )
            LOGGER.warning("All strategies failed", extra=log_extra)

    def _plan_strategies(
        self,
        extraction: TextExtractionResult,
        rendering: ImageRenderResult,
    ) -> List[StrategyPlan]:
        """Select eligible strategies, text first."""
        plans: List[StrategyPlan] = []
        # Partial text from an encrypted PDF is neither summarized nor used for scoring.
        if extraction.error_type == ExtractionErrorType.PASSWORD_PROTECTED:
            text = ""
        else:
            text = extraction.text

        if text:
            plans.append(StrategyPlan(
                strategy=ProcessingStrategy.TEXT_EXTRACTION,
                provider=self.text_provider,
                content=text,
                content_type=ContentType.TEXT,
                evaluation_content=text,
            ))

        if rendering.images:
            plans.append(StrategyPlan(
                strategy=ProcessingStrategy.MULTIMODAL,
                provider=self.multimodal_provider,
                content=rendering.images,
                content_type=ContentType.IMAGE,
                evaluation_content=text or image_only_evaluation_content(len(rendering.images)),
            ))

        return plans

    async def _execute(self, document: Document, plans: List[StrategyPlan]) -> List[bool]:
        if self.strategy_execution == "concurrent" and len(plans) > 1:
            return list(await asyncio.gather(
                *(self._run_in_own_scope(document, plan) for plan in plans)
            ))

        runner = StrategyRunner(
            self.repositories.summaries,
            self.repositories.evaluations,
            timeout_seconds=self.timeout_seconds,
        )
        outcomes = []
        for plan in plans:
            outcomes.append(await runner.run(document.id, plan, document.project_context))
        return outcomes

    async def _run_in_own_scope(self, document: Document, plan: StrategyPlan) -> bool:
        async with self.scope_factory() as repositories:
            runner = StrategyRunner(
                repositories.summaries,
                repositories.evaluations,
                timeout_seconds=self.timeout_seconds,
            )
            return await runner.run(document.id, plan, document.project_context)

    @staticmethod
    def _combined_error(extraction: TextExtractionResult, rendering: ImageRenderResult) -> str:
        errors = [error for error in (extraction.error, rendering.error) if error]
        if not errors:
            return NO_CONTENT_EXTRACTED
        return "; ".join(errors)
