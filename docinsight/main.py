"""FastAPI application entry point."""

from contextlib import asynccontextmanager
from typing import AsyncGenerator
from uuid import uuid4

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from docinsight.api.v1.endpoints import health
from docinsight.api.v1.router import api_router
from docinsight.core.clients import init_clients
from docinsight.core.config import settings
from docinsight.core.database import close_database, init_database
from docinsight.core.exceptions import ConfigurationError
from docinsight.services.processing.dispatcher import ProcessingDispatcher
from docinsight.services.processing.factory import make_document_processor
from docinsight.utils.logging import get_logger

LOGGER = get_logger(__name__, level=settings.log_level)


class RootResponse(BaseModel):
    """Root endpoint response payload."""

    message: str = Field(..., description="Service status message")
    version: str = Field(..., description="Running application version")
    docs: str = Field(..., description="Path to the interactive API docs")
    health: str = Field(..., description="Path to the health check endpoint")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    LOGGER.info(
        "Starting application",
        extra={
            "app_name": settings.app_name,
            "version": settings.app_version,
            "environment": settings.environment,
        },
    )

    try:
        await init_database(create_tables=True)
    except Exception as e:
        LOGGER.error(f"Database initialization failed: {e}", exc_info=True)

    try:
        init_clients(settings)
    except ConfigurationError as e:
        LOGGER.error(f"External clients not configured: {e}")

    dispatcher = ProcessingDispatcher(make_document_processor(settings))
    app.state.dispatcher = dispatcher

    yield

    LOGGER.info("Shutting down application")

    cancelled = await dispatcher.drain(timeout=settings.processing.shutdown_drain_seconds)
    if cancelled:
        LOGGER.warning(f"{cancelled} document(s) were left unfinished at shutdown")

    try:
        await close_database()
    except Exception as e:
        LOGGER.error(
            "Error closing database",
            exc_info=True,
            extra={"error": str(e)}
        )


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="PDF summarization service comparing text and multimodal LLM strategies",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
)


@app.middleware("http")
async def add_correlation_id(request: Request, call_next):
    correlation_id = request.headers.get("X-Correlation-ID", str(uuid4()))
    request.state.correlation_id = correlation_id
    response = await call_next(request)
    response.headers["X-Correlation-ID"] = correlation_id
    return response


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
    expose_headers=["X-Correlation-ID"],
)

app.include_router(api_router, prefix=settings.api_v1_prefix)
app.include_router(health.router, prefix="/health", tags=["Health"])


@app.get(
    "/",
    response_model=RootResponse,
    tags=["Root"],
    summary="Root endpoint",
    description="Get basic information about the API",
    operation_id="get_public_root_metadata",
)
async def root() -> RootResponse:
    return RootResponse(
        message="Server is running",
        version=settings.app_version,
        docs="/docs",
        health="/health",
    )


def run() -> None:
    """Console entry point."""
    import uvicorn

    uvicorn.run(
        "docinsight.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
