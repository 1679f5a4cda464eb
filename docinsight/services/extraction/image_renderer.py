"""Rasterizes the first pages of stored PDFs for vision models."""

import asyncio
import base64
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import fitz  # PyMuPDF

from docinsight.core.exceptions import StorageError
from docinsight.services.storage_service import StorageService
from docinsight.utils.logging import get_logger

LOGGER = get_logger(__name__)

DEFAULT_MAX_PAGES = 5


@dataclass
class ImageRenderResult:
    images: List[str] = field(default_factory=list)
    page_count: int = 0
    success: bool = False
    error: Optional[str] = None


class PasswordProtectedError(Exception):
    pass


def render_pdf_pages(data: bytes, max_pages: int, zoom: float = 1.0) -> Tuple[List[str], int]:
    """Render up to ``max_pages`` pages as base64 PNG strings.

    Pages that fail to render are logged and left out; the order of the
    remaining pages is preserved.

    Returns:
        Tuple of (images, total page count of the document)
    """
    with fitz.open(stream=data, filetype="pdf") as doc:
        if doc.needs_pass:
            raise PasswordProtectedError("Document is encrypted and requires a password")

        total_pages = doc.page_count
        matrix = fitz.Matrix(zoom, zoom)
        images: List[str] = []

        for index in range(min(total_pages, max_pages)):
            try:
                pix = doc.load_page(index).get_pixmap(matrix=matrix)
                images.append(base64.b64encode(pix.tobytes("png")).decode("ascii"))
            except Exception as e:
                LOGGER.warning(f"Failed to render page {index + 1}: {e}")

        return images, total_pages


class ImageRenderer:
    """Downloads a PDF and renders its leading pages. Never raises."""

    def __init__(self, storage: StorageService, zoom: float = 1.0):
        self.storage = storage
        self.zoom = zoom

    async def render(self, file_path: str, max_pages: int = DEFAULT_MAX_PAGES) -> ImageRenderResult:
        try:
            try:
                data = await self.storage.download_file(file_path)
            except StorageError as e:
                return ImageRenderResult(error=f"Failed to download file from storage: {e}")

            try:
                images, total_pages = await asyncio.to_thread(
                    render_pdf_pages, data, max_pages, self.zoom
                )
            except Exception as e:
                message = str(e)
                if isinstance(e, PasswordProtectedError) or "password" in message.lower():
                    return ImageRenderResult(
                        error="PDF is password-protected and cannot be rendered to images"
                    )
                LOGGER.warning(f"Failed to open PDF {file_path} for image conversion: {message}")
                return ImageRenderResult(
                    error=f"Failed to open PDF for image conversion: {message}"
                )

            if not images:
                return ImageRenderResult(
                    page_count=total_pages,
                    error="No pages could be rendered to images",
                )

            return ImageRenderResult(images=images, page_count=total_pages, success=True)

        except Exception as e:
            LOGGER.error(f"Unexpected error rendering {file_path} to images", exc_info=True)
            return ImageRenderResult(error=f"Unexpected error during image conversion: {e}")
