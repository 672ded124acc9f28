"""Ester: streaming chat client for a pregnancy and postpartum assistant."""

from ester.llm import (
    APIStatusError,
    DeltaStream,
    LLMError,
    ProviderError,
    ResponsesClient,
    StreamingError,
    StreamingParser,
)
from ester.prompt import ChatMessage, build_input

__version__ = "0.1.0"

__all__ = [
    "APIStatusError",
    "ChatMessage",
    "DeltaStream",
    "LLMError",
    "ProviderError",
    "ResponsesClient",
    "StreamingError",
    "StreamingParser",
    "build_input",
]
