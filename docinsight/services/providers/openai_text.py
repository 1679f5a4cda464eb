from typing import Any, Dict, List, Optional

from docinsight.core.llm_client import OpenAIChatClient
from docinsight.prompts.system_prompts import TEXT_SUMMARY_PROMPT, build_summary_prompt
from docinsight.schemas.enums import ContentType
from docinsight.services.providers.base import BaseModelProvider, SummaryContent

TEXT_MODEL_ID = "gpt-4.1-mini"
TEXT_MODEL_NAME = "GPT-4.1 Mini"


class OpenAITextProvider(BaseModelProvider):
    """Summarizes extracted document text."""

    supports_vision = False

    def __init__(
        self,
        client: OpenAIChatClient,
        model_id: str = TEXT_MODEL_ID,
        model_name: str = TEXT_MODEL_NAME,
    ):
        super().__init__(client, model_id, model_name)

    def build_summary_messages(
        self,
        content: SummaryContent,
        content_type: ContentType,
        project_context: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        if content_type != ContentType.TEXT or not isinstance(content, str):
            raise ValueError(f"{self.model_name} only accepts text content")

        return [
            {"role": "system", "content": build_summary_prompt(TEXT_SUMMARY_PROMPT, project_context)},
            {"role": "user", "content": content},
        ]
