"""
Streaming-specific dataclasses for the Responses API event stream.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

# Discriminant value and text field of events that carry assistant text
OUTPUT_TEXT_DELTA = "response.output_text.delta"
DELTA_FIELD = "delta"

# SSE wire markers
DATA_PREFIX = "data: "
DONE_SENTINEL = "[DONE]"


class SSEEventType(Enum):
    """Server-Sent Event record kinds produced by the parser."""
    CHUNK = "chunk"
    COMPLETION = "completion"
    ERROR = "error"


@dataclass(frozen=True)
class RawSSEChunk:
    """One ``data:`` record extracted from the HTTP response body."""
    event_type: SSEEventType
    data: Any
    raw_data: str
    error: str | None = None


@dataclass
class StreamState:
    """Mutable counters for a single decoded stream."""
    byte_chunks: int = 0
    lines: int = 0
    events: int = 0
    deltas: int = 0
    malformed: int = 0
    ignored: int = 0
    completed: bool = False


@dataclass(frozen=True)
class StreamingStats:
    """Snapshot of stream counters for monitoring."""
    byte_chunks: int
    lines: int
    events: int
    deltas: int
    malformed: int
    ignored: int
    completed: bool

    @classmethod
    def from_state(cls, state: StreamState) -> StreamingStats:
        return cls(
            byte_chunks=state.byte_chunks,
            lines=state.lines,
            events=state.events,
            deltas=state.deltas,
            malformed=state.malformed,
            ignored=state.ignored,
            completed=state.completed,
        )
