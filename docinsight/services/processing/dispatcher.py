"""Background submission of document processing runs."""

import asyncio
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Awaitable, Callable, Deque, Dict, List
from uuid import UUID

from docinsight.utils.logging import get_logger

LOGGER = get_logger(__name__)

DocumentProcessor = Callable[[UUID], Awaitable[None]]


@dataclass
class DeadLetter:
    document_id: UUID
    error: str
    failed_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class ProcessingDispatcher:
    """Runs document processing as fire-and-forget asyncio tasks.

    At most one task exists per document id; a duplicate submission while a
    run is in flight is rejected. Runs that raise are logged and recorded in
    a bounded dead-letter queue.
    """

    def __init__(self, processor: DocumentProcessor, dead_letter_limit: int = 100):
        self.processor = processor
        self._tasks: Dict[UUID, asyncio.Task] = {}
        self.dead_letters: Deque[DeadLetter] = deque(maxlen=dead_letter_limit)

    def submit(self, document_id: UUID) -> bool:
        """Schedule processing for a document without waiting for it.

        Must be called from a running event loop.

        Returns:
            False if the document is already being processed
        """
        if document_id in self._tasks:
            LOGGER.warning(f"Document {document_id} is already being processed, ignoring submission")
            return False

        task = asyncio.create_task(self._run(document_id), name=f"process-{document_id}")
        self._tasks[document_id] = task
        LOGGER.info(f"Submitted document {document_id} for processing")
        return True

    def is_active(self, document_id: UUID) -> bool:
        return document_id in self._tasks

    @property
    def active_count(self) -> int:
        return len(self._tasks)

    async def _run(self, document_id: UUID) -> None:
        try:
            await self.processor(document_id)
        except Exception as e:
            LOGGER.error(
                f"Background processing failed for {document_id}: {e}",
                exc_info=True
            )
            self.dead_letters.append(DeadLetter(document_id=document_id, error=str(e)))
        finally:
            self._tasks.pop(document_id, None)

    async def drain(self, timeout: float = 30.0) -> int:
        """Wait for in-flight runs, cancelling any still running at the timeout.

        Returns:
            Number of runs that had to be cancelled
        """
        tasks: List[asyncio.Task] = list(self._tasks.values())
        if not tasks:
            return 0

        LOGGER.info(f"Waiting up to {timeout}s for {len(tasks)} processing task(s)")
        _, pending = await asyncio.wait(tasks, timeout=timeout)

        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
            LOGGER.warning(f"Cancelled {len(pending)} unfinished processing task(s)")

        return len(pending)
