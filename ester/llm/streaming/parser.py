"""
Incremental SSE parser for the Responses API event stream.

Turns the raw byte chunks of a streamed HTTP body into ``data:`` records and
then into the assistant's text deltas. Chunk boundaries are arbitrary: split
multi-byte characters and split lines are carried over to the next chunk.
"""

from __future__ import annotations

import codecs
import json
from collections.abc import AsyncGenerator, AsyncIterable

import structlog

from .models import (
    DATA_PREFIX,
    DELTA_FIELD,
    DONE_SENTINEL,
    OUTPUT_TEXT_DELTA,
    RawSSEChunk,
    SSEEventType,
    StreamingStats,
    StreamState,
)

logger = structlog.get_logger(__name__)


def _reject_constant(name: str) -> None:
    # NaN and Infinity are not JSON
    raise ValueError(f"Invalid JSON constant: {name}")


class StreamingParser:
    """Stateful decoder for exactly one streamed response."""

    def __init__(self, encoding: str = "utf-8-sig", log_events: bool = False):
        self.log_events = log_events
        # utf-8-sig drops a leading BOM the same way browser decoders do
        self._decoder = codecs.getincrementaldecoder(encoding)(errors="replace")
        self._buffer = ""
        self._state = StreamState()

    @property
    def completed(self) -> bool:
        """True once the ``[DONE]`` sentinel has been seen."""
        return self._state.completed

    @property
    def pending(self) -> str:
        """Text received after the last line terminator."""
        return self._buffer

    def feed(self, chunk: bytes) -> list[RawSSEChunk]:
        """
        Decode one byte chunk and return the complete records it finished.

        Lines without the ``data: `` prefix are dropped. Processing stops at
        the sentinel: it is returned as the last record and every later call
        returns an empty list.
        """
        if self._state.completed or not chunk:
            return []

        self._state.byte_chunks += 1
        text = self._decoder.decode(chunk)
        if "\n" not in text:
            self._buffer += text
            return []

        *lines, self._buffer = (self._buffer + text).split("\n")

        records: list[RawSSEChunk] = []
        for line in lines:
            self._state.lines += 1
            record = self._parse_line(line)
            if record is None:
                self._state.ignored += 1
                continue

            records.append(record)
            if record.event_type is SSEEventType.COMPLETION:
                self._state.completed = True
                break

        return records

    def _parse_line(self, line: str) -> RawSSEChunk | None:
        """Parse a single SSE line into a record, or None if it is not data."""
        if not line.startswith(DATA_PREFIX):
            return None

        payload = line[len(DATA_PREFIX):].strip()

        if payload == DONE_SENTINEL:
            return RawSSEChunk(
                event_type=SSEEventType.COMPLETION,
                data=None,
                raw_data=payload,
            )

        try:
            data = json.loads(payload, parse_constant=_reject_constant)
        except (ValueError, RecursionError) as e:
            self._state.malformed += 1
            return RawSSEChunk(
                event_type=SSEEventType.ERROR,
                data=None,
                raw_data=payload,
                error=f"JSON decode error: {e}",
            )

        self._state.events += 1
        return RawSSEChunk(
            event_type=SSEEventType.CHUNK,
            data=data,
            raw_data=payload,
        )

    @staticmethod
    def extract_delta(record: RawSSEChunk) -> str | None:
        """Return the text of an output-text-delta event, else None."""
        if record.event_type is not SSEEventType.CHUNK:
            return None
        if not isinstance(record.data, dict):
            return None
        if record.data.get("type") != OUTPUT_TEXT_DELTA:
            return None

        delta = record.data.get(DELTA_FIELD)
        if isinstance(delta, str) and delta:
            return delta
        return None

    async def parse_sse_stream(
        self, byte_stream: AsyncIterable[bytes]
    ) -> AsyncGenerator[RawSSEChunk]:
        """
        Parse records from an async byte stream until the sentinel or EOF.

        No chunk is requested after the sentinel. Errors raised by the byte
        stream propagate unchanged. The byte stream is closed on every exit
        path, including the consumer abandoning this generator.
        """
        try:
            async for chunk in byte_stream:
                for record in self.feed(chunk):
                    yield record
                if self._state.completed:
                    return
        finally:
            aclose = getattr(byte_stream, "aclose", None)
            if aclose is not None:
                await aclose()

    async def iter_deltas(
        self, byte_stream: AsyncIterable[bytes]
    ) -> AsyncGenerator[str]:
        """Yield assistant text deltas, one per delta event, in arrival order."""
        records = self.parse_sse_stream(byte_stream)
        try:
            async for record in records:
                if self.log_events:
                    logger.debug(
                        "Stream record",
                        event_type=record.event_type.value,
                        data=record.data,
                        error=record.error,
                    )

                delta = self.extract_delta(record)
                if delta is None:
                    continue

                self._state.deltas += 1
                yield delta
        finally:
            await records.aclose()

    def get_stats(self) -> StreamingStats:
        """Get streaming statistics for monitoring."""
        return StreamingStats.from_state(self._state)
