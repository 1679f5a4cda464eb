"""Document service for uploads and polling reads."""

import uuid
from typing import Any, Optional
from uuid import UUID

from fastapi import UploadFile
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from docinsight.core.config import settings
from docinsight.core.exceptions import AppError, DatabaseError, StorageError, ValidationError
from docinsight.repositories.document_repository import DocumentRepository
from docinsight.schemas.documents import DocumentDetail, DocumentListResponse, DocumentRecord, UploadResponse
from docinsight.schemas.enums import DocumentSource, DocumentStatus
from docinsight.services.base_service import BaseService
from docinsight.services.processing.dispatcher import ProcessingDispatcher
from docinsight.services.storage_service import StorageService
from docinsight.utils.logging import get_logger

LOGGER = get_logger(__name__)

PDF_MIME_TYPE = "application/pdf"


class DocumentService(BaseService):
    """Service for document management operations.

    Handles uploads, hands new documents to the processing dispatcher and
    serves the polling reads.
    """

    def __init__(
        self,
        session: AsyncSession,
        storage: StorageService,
        dispatcher: ProcessingDispatcher,
        max_upload_bytes: int = settings.processing.max_upload_bytes,
    ):
        """Initialize document service.

        Args:
            session: Database session
            storage: Blob storage client
            dispatcher: Background processing dispatcher
            max_upload_bytes: Largest accepted upload
        """
        self.session = session
        self.doc_repo = DocumentRepository(session)
        self.storage = storage
        self.dispatcher = dispatcher
        self.max_upload_bytes = max_upload_bytes

    async def run(self, action: str, **kwargs) -> Any:
        if action == "upload_document":
            return await self._upload_document_logic(
                kwargs["file"],
                kwargs["source"],
                kwargs.get("project_context"),
            )
        else:
            raise AppError(f"Unknown action: {action}")

    def validate(self, action: str, **kwargs) -> None:
        if action != "upload_document":
            return

        file: Optional[UploadFile] = kwargs.get("file")
        if file is None or not file.filename:
            raise ValidationError("No file provided")
        if file.content_type != PDF_MIME_TYPE:
            raise ValidationError("Only PDF files are accepted")

        source = kwargs.get("source")
        if source not in {s.value for s in DocumentSource}:
            raise ValidationError(f"Invalid source: {source}. Must be thread or knowledge_base")

    async def upload_document(
        self,
        file: UploadFile,
        source: str = DocumentSource.THREAD.value,
        project_context: Optional[str] = None,
    ) -> UploadResponse:
        """Store a PDF, record it and schedule processing.

        Args:
            file: Uploaded PDF
            source: Where the upload came from (thread or knowledge_base)
            project_context: Optional free-text project description

        Returns:
            UploadResponse with the new document id, in processing status

        Raises:
            ValidationError: If the file is not an acceptable PDF
            StorageError: If the blob could not be stored
            DatabaseError: If the document row could not be written
        """
        return await self.execute(
            "upload_document",
            file=file,
            source=source,
            project_context=project_context,
        )

    def _too_large(self) -> ValidationError:
        limit_mb = self.max_upload_bytes // (1024 * 1024)
        return ValidationError(f"File must be {limit_mb}MB or smaller")

    async def _upload_document_logic(
        self,
        file: UploadFile,
        source: str,
        project_context: Optional[str],
    ) -> UploadResponse:
        if file.size is not None and file.size > self.max_upload_bytes:
            raise self._too_large()

        # Size can be unknown for streamed bodies; never buffer past the limit.
        content = await file.read(self.max_upload_bytes + 1)
        if len(content) > self.max_upload_bytes:
            raise self._too_large()

        document_id = uuid.uuid4()
        file_path = f"documents/{document_id}/{file.filename}"

        await self.storage.upload_file(file_path, content, content_type=PDF_MIME_TYPE)
        LOGGER.info(f"File uploaded to storage: filename={file.filename}, path={file_path}")

        try:
            await self.doc_repo.create_document(
                document_id=document_id,
                filename=file.filename,
                file_path=file_path,
                file_size=len(content),
                source=source,
                project_context=project_context or None,
            )
        except SQLAlchemyError as e:
            await self._remove_orphaned_blob(file_path)
            raise DatabaseError(f"Database insert failed: {e}", original_error=e) from e

        try:
            await self.doc_repo.update_status(document_id, DocumentStatus.PROCESSING)
        except SQLAlchemyError as e:
            raise DatabaseError(f"Failed to update document status: {e}", original_error=e) from e

        self.dispatcher.submit(document_id)

        return UploadResponse(
            id=document_id,
            filename=file.filename,
            status=DocumentStatus.PROCESSING.value,
        )

    async def _remove_orphaned_blob(self, file_path: str) -> None:
        try:
            await self.storage.remove_files([file_path])
        except StorageError:
            LOGGER.error(f"Could not remove orphaned upload {file_path}", exc_info=True)

    async def get_document(self, document_id: UUID) -> Optional[DocumentDetail]:
        """Load a document with all of its results, or None."""
        document = await self.doc_repo.get_with_results(document_id)
        if document is None:
            return None
        return DocumentDetail.model_validate(document)

    async def list_documents(
        self,
        source: Optional[str] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> DocumentListResponse:
        """List documents newest first."""
        if source is not None and source not in {s.value for s in DocumentSource}:
            raise ValidationError(f"Invalid source: {source}")

        documents = await self.doc_repo.list_documents(source=source, limit=limit, offset=offset)
        total = await self.doc_repo.count(filters={"source": source} if source else None)

        return DocumentListResponse(
            total=total,
            limit=limit,
            offset=offset,
            documents=[DocumentRecord.model_validate(doc) for doc in documents],
        )
