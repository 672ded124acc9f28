"""
Error handling for Responses API operations.

Errors raised while starting a request (missing credentials, non-success
status) surface when the request is awaited. Only transport failures while
reading the body surface through the delta stream itself. Malformed stream
payloads are never raised.
"""

from __future__ import annotations


class LLMError(Exception):
    """Base LLM error with rich context."""

    def __init__(
        self,
        message: str,
        provider: str,
        model: str,
        status_code: int | None = None,
        response_data: dict | None = None,
    ):
        super().__init__(message)
        self.provider = provider
        self.model = model
        self.status_code = status_code
        self.response_data = response_data or {}


class ProviderError(LLMError):
    """Provider configuration or setup errors, e.g. a missing API key."""
    pass


class APIStatusError(LLMError):
    """The API answered with a non-success HTTP status."""

    def __init__(
        self,
        message: str,
        response_text: str = "",
        **kwargs,
    ):
        super().__init__(message, **kwargs)
        self.response_text = response_text


class RateLimitError(APIStatusError):
    """Rate limit error with retry information."""

    def __init__(
        self,
        message: str,
        retry_after: float | None = None,
        **kwargs,
    ):
        super().__init__(message, **kwargs)
        self.retry_after = retry_after


class StreamingError(LLMError):
    """The response body failed while it was being read."""

    def __init__(
        self,
        message: str,
        provider: str = "unknown",
        model: str = "unknown",
        **kwargs,
    ):
        super().__init__(message, provider, model, **kwargs)
