"""
HTTP client for streamed OpenAI Responses API requests.

``stream_chat`` resolves credentials, assembles the prompt, sends the request
and checks the status before handing back a ``DeltaStream``. Configuration and
request failures therefore raise from the awaited call itself; only failures
while reading the body reach the consumer of the stream.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

import httpx
import structlog

from ester.logging_utils import LLMErrorHandler, log_operation
from ester.prompt import ChatMessage, build_input

from .exceptions import APIStatusError, ProviderError, RateLimitError
from .models import ProviderConfig, ResponsesRequest
from .streaming.parser import StreamingParser
from .streaming.stream import DeltaStream

logger = structlog.get_logger(__name__)

RESPONSES_PATH = "/responses"
MISSING_API_KEY_MESSAGE = "Missing OpenAI API key. Please add it in your Profile page."
HTTP_TOO_MANY_REQUESTS = 429


def resolve_api_key(override: str | None, config: ProviderConfig) -> str:
    """Pick the caller's key when given, else the process-wide default."""
    api_key = override or config.api_key
    if not api_key:
        raise ProviderError(
            MISSING_API_KEY_MESSAGE,
            provider=config.provider.value,
            model=config.model,
        )
    return api_key


def _parse_retry_after(value: str | None) -> float | None:
    if value is None:
        return None
    try:
        return float(value)
    except ValueError:
        return None


class ResponsesClient:
    """HTTP client for the Responses API with streamed text output."""

    def __init__(
        self,
        config: ProviderConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config
        self.client: httpx.AsyncClient = httpx.AsyncClient(
            base_url=config.base_url,
            headers={"Content-Type": "application/json"},
            timeout=httpx.Timeout(
                connect=config.connect_timeout,
                read=config.read_timeout,
                write=config.write_timeout,
                pool=config.pool_timeout,
            ),
            transport=transport,
        )

    @property
    def provider(self) -> str:
        return self.config.provider.value

    def build_request(
        self,
        messages: Iterable[ChatMessage | dict[str, Any]],
        *,
        health_data: Any = None,
        max_tokens: int | None = None,
        temperature: float | None = None,
        system_prompt_prefix: str = "",
        metadata: dict[str, Any] | None = None,
    ) -> ResponsesRequest:
        """Assemble the request model from conversation data and defaults."""
        prompt = build_input(
            messages,
            system_prompt=self.config.system_prompt,
            health_data=health_data,
            system_prompt_prefix=system_prompt_prefix,
        )
        return ResponsesRequest(
            model=self.config.model,
            input=prompt,
            instructions=self.config.instructions,
            temperature=(
                self.config.temperature if temperature is None else temperature
            ),
            max_output_tokens=(
                self.config.max_tokens if max_tokens is None else max_tokens
            ),
            metadata={"commit": self.config.commit_id, **(metadata or {})},
        )

    @log_operation("responses.stream_chat")
    async def stream_chat(
        self,
        messages: Iterable[ChatMessage | dict[str, Any]],
        *,
        health_data: Any = None,
        max_tokens: int | None = None,
        temperature: float | None = None,
        api_key: str | None = None,
        system_prompt_prefix: str = "",
        metadata: dict[str, Any] | None = None,
    ) -> DeltaStream:
        """
        Start a streamed response and return its text deltas.

        Raises:
            ProviderError: No API key was supplied or configured.
            APIStatusError: The API answered with a non-success status.
            LLMError: The request could not be sent.
        """
        key = resolve_api_key(api_key, self.config)
        request = self.build_request(
            messages,
            health_data=health_data,
            max_tokens=max_tokens,
            temperature=temperature,
            system_prompt_prefix=system_prompt_prefix,
            metadata=metadata,
        )

        http_request = self.client.build_request(
            "POST",
            RESPONSES_PATH,
            json=request.to_payload(),
            headers={"Authorization": f"Bearer {key}"},
        )

        try:
            response = await self.client.send(http_request, stream=True)
        except httpx.HTTPError as e:
            raise LLMErrorHandler.create_llm_error(
                e, "responses.stream_chat", self.provider, self.config.model
            ) from e

        if not response.is_success:
            await self._raise_for_status(response)

        return DeltaStream(
            response,
            StreamingParser(log_events=self.config.log_events),
            provider=self.provider,
            model=self.config.model,
        )

    async def _raise_for_status(self, response: httpx.Response) -> None:
        """Read the error body, release the response and raise."""
        try:
            await response.aread()
            error_text = response.text
        except httpx.HTTPError as e:
            raise LLMErrorHandler.create_llm_error(
                e, "responses.read_error_body", self.provider, self.config.model
            ) from e
        finally:
            await response.aclose()

        logger.error(
            "OpenAI API error",
            status_code=response.status_code,
            response_text=error_text,
        )

        try:
            response_data = response.json()
        except ValueError:
            response_data = None
        if not isinstance(response_data, dict):
            response_data = None

        message = f"OpenAI API error: {error_text}"
        if response.status_code == HTTP_TOO_MANY_REQUESTS:
            raise RateLimitError(
                message,
                retry_after=_parse_retry_after(response.headers.get("retry-after")),
                response_text=error_text,
                provider=self.provider,
                model=self.config.model,
                status_code=response.status_code,
                response_data=response_data,
            )
        raise APIStatusError(
            message,
            response_text=error_text,
            provider=self.provider,
            model=self.config.model,
            status_code=response.status_code,
            response_data=response_data,
        )

    async def chat_once(
        self,
        messages: Iterable[ChatMessage | dict[str, Any]],
        **kwargs: Any,
    ) -> str:
        """Stream a reply and return it as one string."""
        async with await self.stream_chat(messages, **kwargs) as stream:
            return await stream.text()

    async def close(self) -> None:
        """Close the HTTP client."""
        await self.client.aclose()

    async def __aenter__(self) -> ResponsesClient:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
