import asyncio
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import httpx
from httpx import HTTPStatusError, TimeoutException

from docinsight.core.exceptions import APIClientError, APITimeoutError, RateLimitError
from docinsight.utils.logging import get_logger

LOGGER = get_logger(__name__)

RATE_LIMIT_STATUS = 429


class BaseLLMClient:
    """Base client for LLM API interactions.

    Handles the HTTP request, the rate-limit retry loop and error logging.
    Only HTTP 429 is retried; every other failure propagates on the first
    attempt.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str,
        timeout: int = 120,
        max_retries: int = 3,
        retry_base_delay_ms: int = 1000,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize the LLM client.

        Args:
            api_key: API key for authentication
            base_url: Base URL for the API
            timeout: Transport timeout in seconds
            max_retries: Total attempts when rate limited
            retry_base_delay_ms: First backoff delay, doubled per attempt
            transport: Optional httpx transport override
        """
        self.api_key = api_key
        self.base_url = base_url
        self.timeout = timeout
        self.max_retries = max_retries
        self.retry_base_delay_ms = retry_base_delay_ms
        self.transport = transport
        self.logger = LOGGER

    async def call_api(
        self,
        endpoint: str = "",
        payload: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Dict[str, Any]:
        """POST a JSON payload, retrying while the provider is rate limiting.

        Args:
            endpoint: API endpoint (appended to base_url)
            payload: JSON payload
            headers: Additional headers

        Returns:
            Parsed JSON response

        Raises:
            RateLimitError: If every attempt was answered with 429
            APITimeoutError: If the transport timed out
            APIClientError: For any other HTTP or transport failure
        """
        url = f"{self.base_url}{endpoint}" if endpoint else self.base_url

        default_headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

        if headers:
            default_headers.update(headers)

        self.logger.debug(
            f"Calling LLM API: {url}",
            extra={"timeout": self.timeout}
        )

        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            for attempt in range(self.max_retries):
                try:
                    response = await client.post(url, headers=default_headers, json=payload)
                    response.raise_for_status()
                    return response.json()

                except HTTPStatusError as e:
                    await self._handle_http_error(e, attempt, url)

                except TimeoutException as e:
                    self.logger.warning("API Timeout", extra={"url": url})
                    raise APITimeoutError(f"API Timeout calling {url}", original_error=e) from e

                except httpx.HTTPError as e:
                    self.logger.warning(
                        "API transport error",
                        extra={"url": url, "error": str(e)}
                    )
                    raise APIClientError(f"API Error: {str(e)}", original_error=e) from e

        raise RateLimitError(
            f"Rate limited by {url} after {self.max_retries} attempts",
            status_code=RATE_LIMIT_STATUS,
        )

    async def _handle_http_error(self, error: HTTPStatusError, attempt: int, url: str):
        """Raise for non-retryable statuses, back off on 429."""
        status_code = error.response.status_code
        error_body = error.response.text

        self.logger.warning(
            f"API HTTP error (Attempt {attempt + 1}/{self.max_retries})",
            extra={
                "url": url,
                "status_code": status_code,
                "error_body": error_body[:500]
            }
        )

        if status_code != RATE_LIMIT_STATUS:
            raise APIClientError(
                f"API Client Error {status_code}: {error_body}",
                original_error=error,
                status_code=status_code,
            ) from error

        if attempt < self.max_retries - 1:
            await self._wait_before_retry(attempt)
        else:
            raise RateLimitError(
                f"Rate limited by {url} after {self.max_retries} attempts",
                original_error=error,
                status_code=status_code,
            ) from error

    async def _wait_before_retry(self, attempt: int):
        """Exponential backoff wait."""
        wait_time = self.retry_base_delay_ms * (2 ** attempt) / 1000
        self.logger.info(f"Rate limited, retrying in {wait_time:.1f}s")
        await asyncio.sleep(wait_time)


@dataclass
class ChatCompletionResult:
    content: Optional[str]
    prompt_tokens: int
    completion_tokens: int


class OpenAIChatClient:
    """Client for an OpenAI-compatible chat completions endpoint."""

    def __init__(
        self,
        api_key: str,
        api_url: str,
        timeout: int = 120,
        max_retries: int = 3,
        retry_base_delay_ms: int = 1000,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.client = BaseLLMClient(
            api_key=api_key,
            base_url=api_url,
            timeout=timeout,
            max_retries=max_retries,
            retry_base_delay_ms=retry_base_delay_ms,
            transport=transport,
        )

    async def create_chat_completion(
        self,
        model: str,
        messages: List[Dict[str, Any]],
        response_format: Optional[Dict[str, Any]] = None,
    ) -> ChatCompletionResult:
        """Request one chat completion.

        Args:
            model: Model identifier
            messages: Chat messages in OpenAI format
            response_format: Optional response format constraint

        Returns:
            ChatCompletionResult with the message content and token usage
        """
        payload: Dict[str, Any] = {
            "model": model,
            "messages": messages,
        }
        if response_format:
            payload["response_format"] = response_format

        response = await self.client.call_api(payload=payload)

        choices = response.get("choices") or []
        content = None
        if choices:
            content = (choices[0].get("message") or {}).get("content")

        usage = response.get("usage") or {}
        return ChatCompletionResult(
            content=content,
            prompt_tokens=usage.get("prompt_tokens") or 0,
            completion_tokens=usage.get("completion_tokens") or 0,
        )
