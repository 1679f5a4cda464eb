"""API schemas for documents, summaries, feedback, comparison and stats."""

from datetime import datetime
from typing import Any, Dict, List, Literal, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class EvaluationRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    summary_id: UUID
    completeness_score: Optional[int] = None
    completeness_rationale: Optional[str] = None
    confidence_score: Optional[int] = None
    confidence_rationale: Optional[str] = None
    specificity_score: Optional[int] = None
    specificity_rationale: Optional[str] = None
    overall_score: Optional[int] = None
    overall_rationale: Optional[str] = None
    input_tokens: Optional[int] = None
    output_tokens: Optional[int] = None
    total_tokens: Optional[int] = None
    estimated_cost_usd: Optional[float] = None
    created_at: Optional[datetime] = None


class FeedbackRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    summary_id: UUID
    rating: str
    comment: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class SummaryRecord(BaseModel):
    """One strategy attempt with its evaluation and feedback, when present."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    document_id: UUID
    strategy: str
    model_id: str
    model_name: str
    summary_short: Optional[str] = None
    summary_detailed: Optional[str] = None
    document_type: Optional[str] = None
    tags: List[Dict[str, Any]] = Field(default_factory=list)
    processing_time_ms: Optional[int] = None
    input_tokens: Optional[int] = None
    output_tokens: Optional[int] = None
    total_tokens: Optional[int] = None
    estimated_cost_usd: Optional[float] = None
    status: str
    error_message: Optional[str] = None
    created_at: Optional[datetime] = None
    evaluation: Optional[EvaluationRecord] = None
    feedback: Optional[FeedbackRecord] = None


class DocumentRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    filename: str
    file_path: str
    file_size: int
    mime_type: str
    page_count: Optional[int] = None
    extraction_success: bool
    status: str
    error_message: Optional[str] = None
    error_type: Optional[str] = None
    project_context: Optional[str] = None
    source: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    summaries: List[SummaryRecord] = Field(default_factory=list)


class DocumentDetail(DocumentRecord):
    """Polling view of a document, including its extracted text."""

    extracted_text: Optional[str] = None


class DocumentListResponse(BaseModel):
    total: int = Field(..., description="Documents matching the filter")
    limit: int
    offset: int
    documents: List[DocumentRecord]


class UploadResponse(BaseModel):
    id: UUID
    filename: str
    status: str


class FeedbackRequest(BaseModel):
    rating: str = Field(..., description="thumbs_up or thumbs_down")
    comment: Optional[str] = Field(None, description="Optional comment, at most 500 characters")


Winner = Literal["text", "multimodal", "tie"]


class ComparisonMetric(BaseModel):
    label: str
    text_value: Optional[float] = None
    multimodal_value: Optional[float] = None
    winner: Winner


class StrategyComparison(BaseModel):
    """Side-by-side metrics for the two completed strategies of a document."""

    text_summary_id: UUID
    multimodal_summary_id: UUID
    overall_score: ComparisonMetric
    cost: ComparisonMetric
    processing_time: ComparisonMetric
    cost_per_point: ComparisonMetric


class ComparisonResponse(BaseModel):
    document_id: UUID
    available_strategies: List[str] = Field(
        default_factory=list, description="Strategies with a completed summary"
    )
    comparison: Optional[StrategyComparison] = None


class StrategyStats(BaseModel):
    avg_score: Optional[float] = Field(None, description="Mean overall score, null without evaluations")
    avg_cost: float = Field(0.0, description="Mean summary plus evaluation cost per summary")
    count: int = 0


class AggregateStats(BaseModel):
    documents_processed: int
    text_extraction: StrategyStats
    multimodal: StrategyStats
    total_cost: float
