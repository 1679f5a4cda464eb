"""Schemas for model provider requests and responses.

``SummaryResponse`` and ``EvaluationResponse`` validate the raw JSON a model
returns. ``SummaryOutput`` and ``EvaluationOutput`` are what providers hand
back to the pipeline once token usage and cost are attached.
"""

from decimal import Decimal
from typing import List

from pydantic import BaseModel, ConfigDict, Field, field_validator

from docinsight.schemas.enums import DocumentType, TagCategory


class Tag(BaseModel):
    label: str
    category: TagCategory
    confidence: float = Field(..., ge=0.0, le=1.0)


class SummaryResponse(BaseModel):
    """JSON object a model must return for a summary request."""

    model_config = ConfigDict(populate_by_name=True)

    short_summary: str = Field(..., alias="shortSummary")
    detailed_summary: str = Field(..., alias="detailedSummary")
    tags: List[Tag]
    document_type: DocumentType = Field(..., alias="documentType")


class ScoredDimension(BaseModel):
    score: int = Field(..., ge=1, le=10)
    rationale: str

    @field_validator("score", mode="before")
    @classmethod
    def require_json_number(cls, v):
        """Accept integral numbers such as ``8.0``; reject strings and booleans."""
        if isinstance(v, (str, bool)):
            raise ValueError("score must be a number")
        return v


class EvaluationResponse(BaseModel):
    """JSON object a model must return for an evaluation request."""

    completeness: ScoredDimension
    confidence: ScoredDimension
    specificity: ScoredDimension
    overall: ScoredDimension


class TokenUsage(BaseModel):
    input_tokens: int
    output_tokens: int
    total_tokens: int
    estimated_cost_usd: Decimal


class SummaryOutput(BaseModel):
    short_summary: str
    detailed_summary: str
    document_type: DocumentType
    tags: List[Tag] = Field(default_factory=list)
    token_usage: TokenUsage
    processing_time_ms: int


class EvaluationOutput(BaseModel):
    completeness: ScoredDimension
    confidence: ScoredDimension
    specificity: ScoredDimension
    overall: ScoredDimension
    token_usage: TokenUsage
