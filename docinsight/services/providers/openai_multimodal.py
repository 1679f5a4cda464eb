from typing import Any, Dict, List, Optional

from docinsight.core.llm_client import OpenAIChatClient
from docinsight.prompts.system_prompts import IMAGE_SUMMARY_PROMPT, build_summary_prompt
from docinsight.schemas.enums import ContentType
from docinsight.services.providers.base import BaseModelProvider, SummaryContent

VISION_MODEL_ID = "gpt-4o"
VISION_MODEL_NAME = "GPT-4o"


class OpenAIMultimodalProvider(BaseModelProvider):
    """Summarizes rendered page images with a vision-capable model.

    The prompt and every page go in a single user message; pages are sent
    with low-detail encoding to bound image token usage.
    """

    supports_vision = True

    def __init__(
        self,
        client: OpenAIChatClient,
        model_id: str = VISION_MODEL_ID,
        model_name: str = VISION_MODEL_NAME,
    ):
        super().__init__(client, model_id, model_name)

    def build_summary_messages(
        self,
        content: SummaryContent,
        content_type: ContentType,
        project_context: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        prompt = build_summary_prompt(IMAGE_SUMMARY_PROMPT, project_context)

        if content_type == ContentType.TEXT:
            if not isinstance(content, str):
                raise ValueError("Text content must be a string")
            return [
                {"role": "system", "content": prompt},
                {"role": "user", "content": content},
            ]

        images = [content] if isinstance(content, str) else list(content)
        if not images:
            raise ValueError("At least one page image is required")

        blocks: List[Dict[str, Any]] = [{"type": "text", "text": prompt}]
        for image in images:
            blocks.append({
                "type": "image_url",
                "image_url": {"url": f"data:image/png;base64,{image}", "detail": "low"},
            })

        return [{"role": "user", "content": blocks}]
