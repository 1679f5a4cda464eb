"""Session-scoped bundle of the repositories used by the processing pipeline."""

from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator

from sqlalchemy.ext.asyncio import AsyncSession

from docinsight.core.database import async_session_maker
from docinsight.repositories.document_repository import DocumentRepository
from docinsight.repositories.evaluation_repository import EvaluationRepository
from docinsight.repositories.summary_repository import SummaryRepository


@dataclass
class Repositories:
    documents: DocumentRepository
    summaries: SummaryRepository
    evaluations: EvaluationRepository

    @classmethod
    def from_session(cls, session: AsyncSession) -> "Repositories":
        return cls(
            documents=DocumentRepository(session),
            summaries=SummaryRepository(session),
            evaluations=EvaluationRepository(session),
        )


@asynccontextmanager
async def repository_scope() -> AsyncIterator[Repositories]:
    """Open one database session and yield repositories bound to it."""
    async with async_session_maker() as session:
        try:
            yield Repositories.from_session(session)
        finally:
            await session.close()
