"""Enumerations shared by the database models, schemas and pipeline."""

from enum import Enum


class DocumentStatus(str, Enum):
    """Lifecycle status of an uploaded document."""
    UPLOADING = "uploading"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class DocumentSource(str, Enum):
    """Where in the UI a document was uploaded from."""
    THREAD = "thread"
    KNOWLEDGE_BASE = "knowledge_base"


class ExtractionErrorType(str, Enum):
    """Classification of a failed text extraction."""
    PASSWORD_PROTECTED = "password_protected"
    CORRUPTED = "corrupted"
    NO_TEXT = "no_text"
    STORAGE_ERROR = "storage_error"
    UNKNOWN = "unknown"


class ProcessingStrategy(str, Enum):
    """A (content form, provider) pairing applied to a document."""
    TEXT_EXTRACTION = "text_extraction"
    MULTIMODAL = "multimodal"


class SummaryStatus(str, Enum):
    """Lifecycle status of one strategy attempt."""
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class ContentType(str, Enum):
    """Form of the content handed to a model provider."""
    TEXT = "text"
    IMAGE = "image"


class TagCategory(str, Enum):
    TOPIC = "topic"
    DOCUMENT_TYPE = "document_type"
    ENTITY = "entity"
    METHODOLOGY = "methodology"
    DOMAIN = "domain"


class DocumentType(str, Enum):
    """Document classification produced by the summarization model."""
    REPORT = "report"
    RESEARCH_PAPER = "research_paper"
    INVOICE = "invoice"
    CONTRACT = "contract"
    LETTER = "letter"
    MANUAL = "manual"
    PRESENTATION = "presentation"
    SPREADSHEET_EXPORT = "spreadsheet_export"
    FORM = "form"
    OTHER = "other"


class FeedbackRating(str, Enum):
    THUMBS_UP = "thumbs_up"
    THUMBS_DOWN = "thumbs_down"
