"""
Streaming functionality for the Responses API client.

This package contains:
- Incremental SSE parsing from raw byte chunks
- Delta extraction for output text events
- A scoped, cancellable delta stream over an httpx response
"""

from .models import RawSSEChunk, SSEEventType, StreamingStats
from .parser import StreamingParser
from .stream import DeltaStream

__all__ = [
    "DeltaStream",
    "RawSSEChunk",
    "SSEEventType",
    "StreamingParser",
    "StreamingStats",
]
