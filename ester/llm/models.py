"""
Core request dataclasses for the Responses API.

This module provides:
- Provider connection configuration
- The streamed request model and its wire payload
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ProviderType(Enum):
    """Supported LLM providers."""
    OPENAI = "openai"


@dataclass(frozen=True)
class ProviderConfig:
    """Provider configuration."""
    base_url: str
    model: str
    api_key: str
    provider: ProviderType = ProviderType.OPENAI

    # Connection settings
    connect_timeout: float = 10.0
    read_timeout: float = 60.0
    write_timeout: float = 10.0
    pool_timeout: float = 10.0

    # Request defaults
    temperature: float = 0.7
    max_tokens: int = 512
    instructions: str = ""
    system_prompt: str = ""
    commit_id: str = "local-development"
    log_events: bool = False


@dataclass
class ResponsesRequest:
    """A single streamed Responses API request."""
    model: str
    input: str
    instructions: str = ""
    temperature: float = 0.7
    max_output_tokens: int = 512
    stream: bool = True
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_payload(self) -> dict[str, Any]:
        """Serialize to the JSON body sent to ``/responses``."""
        return {
            "model": self.model,
            "input": self.input,
            "instructions": self.instructions,
            "temperature": self.temperature,
            "max_output_tokens": self.max_output_tokens,
            "stream": self.stream,
            "metadata": dict(self.metadata),
        }
