import json
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest

from docinsight.core.exceptions import SchemaValidationError, UnknownModelError
from docinsight.core.llm_client import ChatCompletionResult
from docinsight.prompts.system_prompts import EVALUATION_PROMPT, IMAGE_SUMMARY_PROMPT, TEXT_SUMMARY_PROMPT
from docinsight.schemas.enums import ContentType, DocumentType, TagCategory
from docinsight.services.providers.openai_multimodal import OpenAIMultimodalProvider
from docinsight.services.providers.openai_text import OpenAITextProvider

VALID_SUMMARY = {
    "shortSummary": "Quarterly results for the retail division.",
    "detailedSummary": "Revenue grew twelve percent and margins improved.",
    "tags": [
        {"label": "finance", "category": "domain", "confidence": 0.92},
        {"label": "Acme Corp", "category": "entity", "confidence": 0.8},
    ],
    "documentType": "report",
}

VALID_EVALUATION = {
    "completeness": {"score": 8, "rationale": "Covers revenue and margin."},
    "confidence": {"score": 9, "rationale": "Every figure is in the source."},
    "specificity": {"score": 7, "rationale": "Names the key numbers."},
    "overall": {"score": 8, "rationale": "Solid summary."},
}


def chat_returning(content, prompt_tokens=1000, completion_tokens=500):
    chat = MagicMock()
    chat.create_chat_completion = AsyncMock(
        return_value=ChatCompletionResult(
            content=content,
            prompt_tokens=prompt_tokens,
            completion_tokens=completion_tokens,
        )
    )
    return chat


def sent_messages(chat):
    return chat.create_chat_completion.await_args.kwargs["messages"]


@pytest.mark.asyncio
async def test_text_provider_returns_summary_with_cost():
    chat = chat_returning(json.dumps(VALID_SUMMARY))
    provider = OpenAITextProvider(chat)

    output = await provider.generate_summary("document text", ContentType.TEXT)

    assert output.short_summary == VALID_SUMMARY["shortSummary"]
    assert output.document_type == DocumentType.REPORT
    assert output.tags[1].category == TagCategory.ENTITY
    assert output.token_usage.input_tokens == 1000
    assert output.token_usage.output_tokens == 500
    assert output.token_usage.total_tokens == 1500
    assert output.token_usage.estimated_cost_usd == Decimal("0.0012")
    assert output.processing_time_ms >= 0

    kwargs = chat.create_chat_completion.await_args.kwargs
    assert kwargs["model"] == "gpt-4.1-mini"
    assert kwargs["response_format"] == {"type": "json_object"}


@pytest.mark.asyncio
async def test_text_provider_message_shape():
    chat = chat_returning(json.dumps(VALID_SUMMARY))

    await OpenAITextProvider(chat).generate_summary("the body", ContentType.TEXT)

    messages = sent_messages(chat)
    assert messages == [
        {"role": "system", "content": TEXT_SUMMARY_PROMPT},
        {"role": "user", "content": "the body"},
    ]


@pytest.mark.asyncio
async def test_project_context_is_appended_to_system_prompt():
    chat = chat_returning(json.dumps(VALID_SUMMARY))

    await OpenAITextProvider(chat).generate_summary(
        "the body", ContentType.TEXT, project_context="Warehouse expansion planning"
    )

    system_prompt = sent_messages(chat)[0]["content"]
    assert system_prompt.startswith(TEXT_SUMMARY_PROMPT)
    assert "Warehouse expansion planning" in system_prompt


def test_text_provider_rejects_images():
    provider = OpenAITextProvider(chat_returning("{}"))

    with pytest.raises(ValueError):
        provider.build_summary_messages(["aGVsbG8="], ContentType.IMAGE)


@pytest.mark.asyncio
async def test_multimodal_provider_sends_images_in_one_user_message():
    chat = chat_returning(json.dumps(VALID_SUMMARY))
    provider = OpenAIMultimodalProvider(chat)

    await provider.generate_summary(["cGFnZTE=", "cGFnZTI="], ContentType.IMAGE)

    messages = sent_messages(chat)
    assert len(messages) == 1
    assert messages[0]["role"] == "user"

    blocks = messages[0]["content"]
    assert blocks[0] == {"type": "text", "text": IMAGE_SUMMARY_PROMPT}
    assert blocks[1] == {
        "type": "image_url",
        "image_url": {"url": "data:image/png;base64,cGFnZTE=", "detail": "low"},
    }
    assert blocks[2]["image_url"]["url"].endswith("cGFnZTI=")
    assert chat.create_chat_completion.await_args.kwargs["model"] == "gpt-4o"


@pytest.mark.asyncio
async def test_multimodal_provider_accepts_text():
    chat = chat_returning(json.dumps(VALID_SUMMARY))

    await OpenAIMultimodalProvider(chat).generate_summary("plain text", ContentType.TEXT)

    messages = sent_messages(chat)
    assert messages[0]["role"] == "system"
    assert messages[1] == {"role": "user", "content": "plain text"}


@pytest.mark.asyncio
async def test_multimodal_cost_uses_vision_pricing():
    chat = chat_returning(json.dumps(VALID_SUMMARY), prompt_tokens=2000, completion_tokens=500)

    output = await OpenAIMultimodalProvider(chat).generate_summary(["aW1n"], ContentType.IMAGE)

    assert output.token_usage.estimated_cost_usd == Decimal("0.01")


@pytest.mark.asyncio
async def test_code_fenced_json_is_accepted():
    fenced = "```json\n" + json.dumps(VALID_SUMMARY) + "\n```"
    chat = chat_returning(fenced)

    output = await OpenAITextProvider(chat).generate_summary("text", ContentType.TEXT)

    assert output.detailed_summary == VALID_SUMMARY["detailedSummary"]


@pytest.mark.asyncio
@pytest.mark.parametrize("content", [None, ""])
async def test_empty_response_is_schema_error(content):
    provider = OpenAITextProvider(chat_returning(content))

    with pytest.raises(SchemaValidationError, match="empty response"):
        await provider.generate_summary("text", ContentType.TEXT)


@pytest.mark.asyncio
@pytest.mark.parametrize("content", ["not json at all", "[1, 2, 3]"])
async def test_non_object_response_is_schema_error(content):
    provider = OpenAITextProvider(chat_returning(content))

    with pytest.raises(SchemaValidationError, match="not a JSON object"):
        await provider.generate_summary("text", ContentType.TEXT)


@pytest.mark.asyncio
async def test_schema_error_names_invalid_fields():
    bad = dict(VALID_SUMMARY)
    del bad["shortSummary"]
    bad["documentType"] = "poem"
    provider = OpenAITextProvider(chat_returning(json.dumps(bad)))

    with pytest.raises(SchemaValidationError) as exc_info:
        await provider.generate_summary("text", ContentType.TEXT)

    assert "shortSummary" in exc_info.value.fields
    assert "documentType" in exc_info.value.fields


@pytest.mark.asyncio
async def test_tag_confidence_out_of_range_is_rejected():
    bad = dict(VALID_SUMMARY)
    bad["tags"] = [{"label": "x", "category": "topic", "confidence": 1.5}]
    provider = OpenAITextProvider(chat_returning(json.dumps(bad)))

    with pytest.raises(SchemaValidationError) as exc_info:
        await provider.generate_summary("text", ContentType.TEXT)

    assert exc_info.value.fields == ["tags.0.confidence"]


@pytest.mark.asyncio
async def test_unknown_model_fails_on_cost():
    chat = chat_returning(json.dumps(VALID_SUMMARY))
    provider = OpenAITextProvider(chat, model_id="mystery-model", model_name="Mystery")

    with pytest.raises(UnknownModelError):
        await provider.generate_summary("text", ContentType.TEXT)


@pytest.mark.asyncio
async def test_evaluation_is_text_only_for_multimodal_provider():
    chat = chat_returning(json.dumps(VALID_EVALUATION), prompt_tokens=600, completion_tokens=100)
    provider = OpenAIMultimodalProvider(chat)

    output = await provider.evaluate_summary("original text", "the summary")

    assert output.overall.score == 8
    assert output.specificity.score == 7
    assert output.token_usage.total_tokens == 700

    messages = sent_messages(chat)
    assert messages[0] == {"role": "system", "content": EVALUATION_PROMPT}
    assert isinstance(messages[1]["content"], str)
    assert "ORIGINAL DOCUMENT:\noriginal text" in messages[1]["content"]
    assert "AI-GENERATED SUMMARY:\nthe summary" in messages[1]["content"]


@pytest.mark.asyncio
@pytest.mark.parametrize("score", [0, 11, 7.5, "8", "eight", True, None])
async def test_evaluation_scores_must_be_integers_in_range(score):
    bad = json.loads(json.dumps(VALID_EVALUATION))
    bad["overall"]["score"] = score
    provider = OpenAITextProvider(chat_returning(json.dumps(bad)))

    with pytest.raises(SchemaValidationError) as exc_info:
        await provider.evaluate_summary("original", "summary")

    assert exc_info.value.fields == ["overall.score"]


@pytest.mark.asyncio
async def test_integral_float_scores_are_accepted():
    body = json.loads(json.dumps(VALID_EVALUATION))
    for dimension in body.values():
        dimension["score"] = float(dimension["score"])
    provider = OpenAITextProvider(chat_returning(json.dumps(body)))

    output = await provider.evaluate_summary("original", "summary")

    assert output.overall.score == 8
    assert isinstance(output.overall.score, int)
    assert output.specificity.score == 7
