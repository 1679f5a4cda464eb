"""Repository for Document records."""

from typing import List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from docinsight.database.models import Document, Summary
from docinsight.repositories.base_repository import BaseRepository
from docinsight.schemas.enums import DocumentStatus


class DocumentRepository(BaseRepository[Document]):
    """Data access for uploaded documents."""

    def __init__(self, session: AsyncSession):
        super().__init__(session, Document)

    async def create_document(
        self,
        document_id: UUID,
        filename: str,
        file_path: str,
        file_size: int,
        source: str,
        project_context: Optional[str] = None,
        mime_type: str = "application/pdf",
    ) -> Document:
        """Insert a new document in the uploading state."""
        return await self.create(
            id=document_id,
            filename=filename,
            file_path=file_path,
            file_size=file_size,
            mime_type=mime_type,
            status=DocumentStatus.UPLOADING.value,
            extraction_success=False,
            project_context=project_context,
            source=source,
        )

    async def update_status(
        self,
        document_id: UUID,
        status: DocumentStatus,
        error_message: Optional[str] = None,
    ) -> Optional[Document]:
        """Move a document to a new lifecycle status.

        The error message is only written when one is given, so extraction
        diagnostics recorded earlier survive a successful completion.
        """
        fields = {"status": status.value}
        if error_message is not None:
            fields["error_message"] = error_message
        return await self.update(document_id, **fields)

    async def update_extraction(
        self,
        document_id: UUID,
        extracted_text: Optional[str],
        page_count: Optional[int],
        extraction_success: bool,
        error_message: Optional[str],
        error_type: Optional[str],
    ) -> Optional[Document]:
        """Persist the text extraction outcome, including failures."""
        return await self.update(
            document_id,
            extracted_text=extracted_text or None,
            page_count=page_count or None,
            extraction_success=extraction_success,
            error_message=error_message,
            error_type=error_type,
        )

    async def get_with_results(self, document_id: UUID) -> Optional[Document]:
        """Load a document with its summaries, evaluations and feedback."""
        try:
            query = (
                select(Document)
                .where(Document.id == document_id)
                .options(
                    selectinload(Document.summaries).selectinload(Summary.evaluation),
                    selectinload(Document.summaries).selectinload(Summary.feedback),
                )
            )
            result = await self.session.execute(query)
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            self.logger.error(
                f"Error loading document {document_id} with results: {str(e)}",
                exc_info=True
            )
            raise

    async def list_documents(
        self,
        source: Optional[str] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> List[Document]:
        """List documents newest first, with their results eagerly loaded."""
        try:
            query = select(Document).options(
                selectinload(Document.summaries).selectinload(Summary.evaluation),
                selectinload(Document.summaries).selectinload(Summary.feedback),
            )
            if source:
                query = query.where(Document.source == source)
            query = query.order_by(Document.created_at.desc()).offset(offset).limit(limit)

            result = await self.session.execute(query)
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            self.logger.error(f"Error listing documents: {str(e)}", exc_info=True)
            raise

    async def list_ids_by_status(self, status: DocumentStatus) -> List[UUID]:
        try:
            result = await self.session.execute(
                select(Document.id).where(Document.status == status.value)
            )
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            self.logger.error(
                f"Error listing document ids with status {status.value}: {str(e)}",
                exc_info=True
            )
            raise
