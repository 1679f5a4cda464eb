"""Plain-text extraction from stored PDFs."""

import asyncio
from dataclasses import dataclass
from typing import Optional, Tuple

import fitz  # PyMuPDF

from docinsight.core.exceptions import StorageError
from docinsight.schemas.enums import ExtractionErrorType
from docinsight.services.storage_service import StorageService
from docinsight.utils.logging import get_logger

LOGGER = get_logger(__name__)

MIN_TEXT_LENGTH = 50


@dataclass
class TextExtractionResult:
    text: str = ""
    page_count: int = 0
    success: bool = False
    error: Optional[str] = None
    error_type: Optional[ExtractionErrorType] = None


def read_pdf_text(data: bytes) -> Tuple[str, int]:
    """Extract the text of every page.

    Args:
        data: Raw PDF bytes

    Returns:
        Tuple of (stripped text, page count)

    Raises:
        RuntimeError: If the document needs a password
        Exception: Whatever PyMuPDF raises for unreadable input
    """
    with fitz.open(stream=data, filetype="pdf") as doc:
        if doc.needs_pass:
            raise RuntimeError("Document is encrypted and requires a password")
        text = "\n".join(page.get_text() for page in doc)
        return text.strip(), doc.page_count


class TextExtractor:
    """Downloads a PDF and classifies the outcome of reading its text.

    ``extract`` never raises; every failure is returned as a result with an
    ``error_type``.
    """

    def __init__(self, storage: StorageService, min_text_length: int = MIN_TEXT_LENGTH):
        self.storage = storage
        self.min_text_length = min_text_length

    async def extract(self, file_path: str) -> TextExtractionResult:
        try:
            try:
                data = await self.storage.download_file(file_path)
            except StorageError as e:
                LOGGER.warning(
                    "Storage fetch failed during text extraction",
                    extra={"file_path": file_path, "error": str(e)}
                )
                return TextExtractionResult(
                    error=f"Failed to download file from storage: {e}",
                    error_type=ExtractionErrorType.STORAGE_ERROR,
                )

            try:
                text, page_count = await asyncio.to_thread(read_pdf_text, data)
            except Exception as e:
                message = str(e)
                if "password" in message.lower():
                    LOGGER.info(f"Password-protected PDF: {file_path}")
                    return TextExtractionResult(
                        error="PDF is password-protected and cannot be parsed",
                        error_type=ExtractionErrorType.PASSWORD_PROTECTED,
                    )
                LOGGER.warning(f"Failed to parse PDF {file_path}: {message}")
                return TextExtractionResult(
                    error=f"Failed to parse PDF: {message}",
                    error_type=ExtractionErrorType.CORRUPTED,
                )

            if len(text) < self.min_text_length:
                if not text:
                    error = "No text could be extracted (likely a scanned PDF)"
                else:
                    error = f"Only {len(text)} characters extracted (likely a scanned PDF)"
                return TextExtractionResult(
                    text=text,
                    page_count=page_count,
                    error=error,
                    error_type=ExtractionErrorType.NO_TEXT,
                )

            return TextExtractionResult(text=text, page_count=page_count, success=True)

        except Exception as e:
            LOGGER.error(
                f"Unexpected error during text extraction of {file_path}",
                exc_info=True
            )
            return TextExtractionResult(
                error=f"Unexpected error during text extraction: {e}",
                error_type=ExtractionErrorType.UNKNOWN,
            )
