"""Model provider abstraction shared by the summarization strategies."""

import time
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence, Type, TypeVar, Union

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from docinsight.core.exceptions import SchemaValidationError
from docinsight.core.llm_client import ChatCompletionResult, OpenAIChatClient
from docinsight.prompts.system_prompts import EVALUATION_PROMPT, EVALUATION_USER_TEMPLATE
from docinsight.schemas.ai import (
    EvaluationOutput,
    EvaluationResponse,
    SummaryOutput,
    SummaryResponse,
    TokenUsage,
)
from docinsight.schemas.enums import ContentType
from docinsight.utils.costs import calculate_cost
from docinsight.utils.json_parser import parse_json_safely
from docinsight.utils.logging import get_logger

LOGGER = get_logger(__name__)

JSON_OBJECT_FORMAT = {"type": "json_object"}

SchemaT = TypeVar("SchemaT", bound=BaseModel)

SummaryContent = Union[str, Sequence[str]]


class BaseModelProvider(ABC):
    """A model that can summarize a document and score a summary.

    Subclasses decide how summary messages are built for their content form.
    Evaluation is always a text-only call.
    """

    supports_vision: bool = False

    def __init__(self, client: OpenAIChatClient, model_id: str, model_name: str):
        self.client = client
        self.model_id = model_id
        self.model_name = model_name
        self.logger = LOGGER

    @abstractmethod
    def build_summary_messages(
        self,
        content: SummaryContent,
        content_type: ContentType,
        project_context: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """Build the chat messages for a summary request."""

    async def generate_summary(
        self,
        content: SummaryContent,
        content_type: ContentType,
        project_context: Optional[str] = None,
    ) -> SummaryOutput:
        """Summarize a document and classify it.

        Args:
            content: Extracted text, or base64 PNG pages for image content
            content_type: Form of ``content``
            project_context: Optional project description to steer relevance

        Returns:
            SummaryOutput with usage, cost and timing of the call

        Raises:
            SchemaValidationError: If the response is empty, not JSON or
                does not match the summary schema
            APIClientError: If the provider call fails
        """
        messages = self.build_summary_messages(content, content_type, project_context)

        start = time.perf_counter()
        completion = await self.client.create_chat_completion(
            model=self.model_id,
            messages=messages,
            response_format=JSON_OBJECT_FORMAT,
        )
        processing_time_ms = round((time.perf_counter() - start) * 1000)

        parsed = self._parse_response(completion, SummaryResponse)

        return SummaryOutput(
            short_summary=parsed.short_summary,
            detailed_summary=parsed.detailed_summary,
            document_type=parsed.document_type,
            tags=parsed.tags,
            token_usage=self._token_usage(completion),
            processing_time_ms=processing_time_ms,
        )

    async def evaluate_summary(self, original_content: str, summary_text: str) -> EvaluationOutput:
        """Score a summary against the document it was generated from."""
        messages = [
            {"role": "system", "content": EVALUATION_PROMPT},
            {
                "role": "user",
                "content": EVALUATION_USER_TEMPLATE.format(
                    original_content=original_content, summary=summary_text
                ),
            },
        ]

        completion = await self.client.create_chat_completion(
            model=self.model_id,
            messages=messages,
            response_format=JSON_OBJECT_FORMAT,
        )
        parsed = self._parse_response(completion, EvaluationResponse)

        return EvaluationOutput(
            completeness=parsed.completeness,
            confidence=parsed.confidence,
            specificity=parsed.specificity,
            overall=parsed.overall,
            token_usage=self._token_usage(completion),
        )

    def _parse_response(self, completion: ChatCompletionResult, schema: Type[SchemaT]) -> SchemaT:
        if not completion.content:
            raise SchemaValidationError(f"{self.model_name} returned empty response")

        data = parse_json_safely(completion.content)
        if not isinstance(data, dict):
            raise SchemaValidationError(f"{self.model_name} response is not a JSON object")

        try:
            return schema.model_validate(data)
        except PydanticValidationError as e:
            fields = _error_fields(e)
            self.logger.warning(
                f"{self.model_name} response failed {schema.__name__} validation",
                extra={"fields": fields}
            )
            raise SchemaValidationError(
                f"Response does not match {schema.__name__} schema: invalid fields {', '.join(fields)}",
                fields=fields,
                original_error=e,
            ) from e

    def _token_usage(self, completion: ChatCompletionResult) -> TokenUsage:
        input_tokens = completion.prompt_tokens
        output_tokens = completion.completion_tokens
        return TokenUsage(
            input_tokens=input_tokens,
            output_tokens=output_tokens,
            total_tokens=input_tokens + output_tokens,
            estimated_cost_usd=calculate_cost(self.model_id, input_tokens, output_tokens),
        )


def _error_fields(error: PydanticValidationError) -> List[str]:
    fields: List[str] = []
    for item in error.errors():
        name = ".".join(str(part) for part in item["loc"]) or "<root>"
        if name not in fields:
            fields.append(name)
    return fields
