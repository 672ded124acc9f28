"""
Prompt assembly for the assistant.

The Responses API takes a single ``input`` string. It is composed of an
optional caller prefix, the system prompt, the user's latest health data
(when available) and the conversation transcript, one line per message.
"""

from __future__ import annotations

import json
from collections.abc import Iterable
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

HEALTH_DATA_LABEL = "User's latest Whoop health data: "


class ChatMessage(BaseModel):
    """
    A single conversation turn.

    ``is_ai`` marks assistant turns; the camel-case ``isAI`` key used by
    browser clients is accepted as well.
    """
    model_config = ConfigDict(populate_by_name=True)

    content: str
    is_ai: bool = Field(default=False, alias="isAI")

    @property
    def speaker(self) -> str:
        return "Assistant" if self.is_ai else "User"


def format_health_data(health_data: Any) -> str:
    """Compact JSON rendering of the health data context."""
    return json.dumps(health_data, separators=(",", ":"), ensure_ascii=False)


def has_health_data(health_data: Any) -> bool:
    """
    Whether health data should be rendered into the prompt.

    Follows JavaScript truthiness: objects and arrays count even when empty,
    while None, False, zero, NaN and the empty string do not.
    """
    if isinstance(health_data, dict | list | tuple):
        return True
    # NaN is the only value not equal to itself
    return bool(health_data) and health_data == health_data


def build_input(
    messages: Iterable[ChatMessage | dict[str, Any]],
    *,
    system_prompt: str,
    health_data: Any = None,
    system_prompt_prefix: str = "",
) -> str:
    """Compose the single ``input`` string sent to the model."""
    parts: list[str] = []
    if system_prompt_prefix:
        parts.append(system_prompt_prefix + "\n")
    parts.append(system_prompt + "\n")

    if has_health_data(health_data):
        parts.append(f"{HEALTH_DATA_LABEL}{format_health_data(health_data)}\n")

    for message in messages:
        if not isinstance(message, ChatMessage):
            message = ChatMessage.model_validate(message)
        parts.append(f"{message.speaker}: {message.content}\n")

    return "".join(parts)
