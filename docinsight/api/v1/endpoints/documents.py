from typing import Annotated, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, Request, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from docinsight.core.clients import get_clients
from docinsight.core.database import get_async_session as get_session
from docinsight.core.exceptions import AppError
from docinsight.schemas.common import ApiResponse
from docinsight.services.document_service import DocumentService
from docinsight.services.stats_service import StatsService
from docinsight.utils.logging import get_logger
from docinsight.utils.responses import create_api_response, create_error_detail, http_exception_from_error

LOGGER = get_logger(__name__)

router = APIRouter()


async def get_document_service(
    request: Request,
    db_session: Annotated[AsyncSession, Depends(get_session)],
) -> DocumentService:
    return DocumentService(
        db_session,
        storage=get_clients().storage,
        dispatcher=request.app.state.dispatcher,
    )


async def get_stats_service(
    db_session: Annotated[AsyncSession, Depends(get_session)]
) -> StatsService:
    return StatsService(db_session)


@router.post(
    "/upload",
    response_model=ApiResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Upload a PDF for processing",
    operation_id="upload_document",
)
async def upload_document(
    request: Request,
    file: UploadFile = File(..., description="PDF document, at most 20MB"),
    source: str = Form("thread"),
    project_context: Optional[str] = Form(None),
    document_service: Annotated[DocumentService, Depends(get_document_service)] = None,
) -> ApiResponse:
    """Store the PDF and start background processing."""
    try:
        result = await document_service.upload_document(
            file, source=source, project_context=project_context
        )
    except AppError as e:
        LOGGER.warning(f"Upload rejected: {e}")
        raise http_exception_from_error(e, request)

    return create_api_response(
        data=result,
        message="Document uploaded, processing started",
        request=request
    )


@router.get(
    "",
    response_model=ApiResponse,
    summary="List documents",
    operation_id="list_documents",
)
async def list_documents(
    request: Request,
    source: Optional[str] = Query(None),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    document_service: Annotated[DocumentService, Depends(get_document_service)] = None,
) -> ApiResponse:
    """List documents newest first with their summaries."""
    try:
        documents_data = await document_service.list_documents(
            source=source, limit=limit, offset=offset
        )
    except AppError as e:
        raise http_exception_from_error(e, request)

    return create_api_response(
        data=documents_data,
        message="Documents retrieved successfully",
        request=request
    )


@router.get(
    "/{document_id}",
    response_model=ApiResponse,
    summary="Get document with processing results",
    operation_id="get_document",
)
async def get_document(
    request: Request,
    document_id: UUID,
    document_service: Annotated[DocumentService, Depends(get_document_service)] = None,
) -> ApiResponse:
    """Polling read: the document, its summaries, evaluations and feedback."""
    document = await document_service.get_document(document_id)
    if not document:
        error_detail = create_error_detail(
            title="Document Not Found",
            status=status.HTTP_404_NOT_FOUND,
            detail=f"Document with ID {document_id} not found",
            request=request
        )
        raise HTTPException(status_code=404, detail=error_detail.model_dump(mode="json"))

    return create_api_response(
        data=document,
        message="Document details retrieved successfully",
        request=request
    )


@router.get(
    "/{document_id}/comparison",
    response_model=ApiResponse,
    summary="Compare summarization strategies",
    operation_id="get_document_comparison",
)
async def get_document_comparison(
    request: Request,
    document_id: UUID,
    stats_service: Annotated[StatsService, Depends(get_stats_service)] = None,
) -> ApiResponse:
    try:
        comparison = await stats_service.get_comparison(document_id)
    except AppError as e:
        raise http_exception_from_error(e, request)

    return create_api_response(
        data=comparison,
        message="Strategy comparison retrieved successfully",
        request=request
    )
