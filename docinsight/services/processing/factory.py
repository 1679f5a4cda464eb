"""Wires the processing pipeline from settings and initialized clients."""

from typing import Tuple
from uuid import UUID

from docinsight.core.clients import ServiceClients, get_clients
from docinsight.core.config import Settings
from docinsight.repositories.scope import Repositories, repository_scope
from docinsight.services.extraction.image_renderer import ImageRenderer
from docinsight.services.extraction.text_extractor import TextExtractor
from docinsight.services.processing.dispatcher import DocumentProcessor
from docinsight.services.processing.orchestrator import DocumentOrchestrator
from docinsight.services.providers.openai_multimodal import (
    VISION_MODEL_ID,
    VISION_MODEL_NAME,
    OpenAIMultimodalProvider,
)
from docinsight.services.providers.openai_text import (
    TEXT_MODEL_ID,
    TEXT_MODEL_NAME,
    OpenAITextProvider,
)


def build_providers(
    clients: ServiceClients, settings: Settings
) -> Tuple[OpenAITextProvider, OpenAIMultimodalProvider]:
    text_model = settings.openai.text_model
    vision_model = settings.openai.vision_model
    return (
        OpenAITextProvider(
            clients.chat,
            model_id=text_model,
            model_name=TEXT_MODEL_NAME if text_model == TEXT_MODEL_ID else text_model,
        ),
        OpenAIMultimodalProvider(
            clients.chat,
            model_id=vision_model,
            model_name=VISION_MODEL_NAME if vision_model == VISION_MODEL_ID else vision_model,
        ),
    )


def build_orchestrator(
    repositories: Repositories, clients: ServiceClients, settings: Settings
) -> DocumentOrchestrator:
    processing = settings.processing
    text_provider, multimodal_provider = build_providers(clients, settings)
    return DocumentOrchestrator(
        repositories=repositories,
        text_extractor=TextExtractor(clients.storage, min_text_length=processing.min_text_length),
        image_renderer=ImageRenderer(clients.storage, zoom=processing.image_zoom),
        text_provider=text_provider,
        multimodal_provider=multimodal_provider,
        timeout_seconds=processing.strategy_timeout_seconds,
        max_image_pages=processing.max_image_pages,
        strategy_execution=processing.strategy_execution,
        scope_factory=repository_scope,
    )


def make_document_processor(settings: Settings) -> DocumentProcessor:
    """Build the callable the dispatcher runs for each document.

    Each run opens its own database session.
    """

    async def process_document(document_id: UUID) -> None:
        clients = get_clients()
        async with repository_scope() as repositories:
            orchestrator = build_orchestrator(repositories, clients, settings)
            await orchestrator.process(document_id)

    return process_document
