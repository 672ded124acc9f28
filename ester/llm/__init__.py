"""
Responses API integration with dataclass-based architecture.

This package provides:
- A streaming HTTP client for the OpenAI Responses API
- Incremental SSE decoding into assistant text deltas
- Typed errors for configuration, request and streaming failures
"""

from __future__ import annotations

from .client import ResponsesClient, resolve_api_key
from .exceptions import (
    APIStatusError,
    LLMError,
    ProviderError,
    RateLimitError,
    StreamingError,
)
from .models import ProviderConfig, ProviderType, ResponsesRequest
from .streaming import DeltaStream, StreamingParser

__all__ = [
    # Errors
    "APIStatusError",
    # Streaming
    "DeltaStream",
    "LLMError",
    # Models
    "ProviderConfig",
    "ProviderError",
    "ProviderType",
    "RateLimitError",
    # Client
    "ResponsesClient",
    "ResponsesRequest",
    "StreamingError",
    "StreamingParser",
    "resolve_api_key",
]
