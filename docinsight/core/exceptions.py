"""Custom exception hierarchy."""

from typing import List, Optional


class AppError(Exception):
    """Base exception for application errors."""
    def __init__(self, message: str, original_error: Exception = None):
        super().__init__(message)
        self.original_error = original_error


class APIClientError(AppError):
    """Raised when an external API call fails."""

    def __init__(
        self,
        message: str,
        original_error: Exception = None,
        status_code: Optional[int] = None,
    ):
        super().__init__(message, original_error=original_error)
        self.status_code = status_code


class RateLimitError(APIClientError):
    """Raised when the provider keeps answering 429 after all retries."""
    pass


class APITimeoutError(APIClientError):
    """Raised when an external API call times out at the transport level."""
    pass


class ProviderTimeoutError(AppError):
    """Raised when a provider call exceeds the per-call processing budget."""
    pass


class SchemaValidationError(AppError):
    """Raised when a model response does not match the expected JSON schema."""

    def __init__(
        self,
        message: str,
        fields: Optional[List[str]] = None,
        original_error: Exception = None,
    ):
        super().__init__(message, original_error=original_error)
        self.fields = fields or []


class UnknownModelError(AppError):
    """Raised when no pricing is registered for a model identifier."""
    pass


class StorageError(AppError):
    """Raised when a storage operation fails."""
    pass


class StorageNotFoundError(StorageError):
    """Raised when a storage object does not exist."""
    pass


class DatabaseError(AppError):
    """Raised when a database operation fails."""
    pass


class ValidationError(AppError):
    """Raised when input validation fails."""
    pass


class ConfigurationError(AppError):
    """Raised when configuration is invalid or missing."""
    pass


class DocumentNotFoundError(AppError):
    """Raised when a document is not found."""
    pass


class SummaryNotFoundError(AppError):
    """Raised when a summary is not found."""
    pass
