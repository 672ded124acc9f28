#!/usr/bin/env python3
"""
Tests for DeltaStream: resource release and transport error surfacing.
"""

import httpx
import pytest

from ester.llm.exceptions import StreamingError
from ester.llm.streaming.parser import StreamingParser
from ester.llm.streaming.stream import DeltaStream

HEL = b'data: {"type":"response.output_text.delta","delta":"Hel"}\n'
LO = b'data: {"type":"response.output_text.delta","delta":"lo"}\n'
DONE = b"data: [DONE]\n"


def make_response(chunks, error=None, pulls=None):
    async def body():
        for chunk in chunks:
            if pulls is not None:
                pulls.append(chunk)
            yield chunk
        if error is not None:
            raise error

    return httpx.Response(
        200, content=body(), headers={"content-type": "text/event-stream"}
    )


class TestDeltaStreamIteration:
    """Test normal consumption of a delta stream."""

    @pytest.mark.asyncio
    async def test_yields_deltas_and_closes_response(self):
        """Test deltas arrive in order and the response is released."""
        response = make_response([HEL, LO + DONE])
        stream = DeltaStream(response)

        deltas = [delta async for delta in stream]

        assert deltas == ["Hel", "lo"]
        assert response.is_closed
        assert stream.stats.completed
        assert stream.stats.deltas == 2

    @pytest.mark.asyncio
    async def test_text_concatenates_deltas(self):
        """Test text() joins the remaining deltas."""
        stream = DeltaStream(make_response([HEL + LO, DONE]))
        assert await stream.text() == "Hello"

    @pytest.mark.asyncio
    async def test_stream_is_single_pass(self):
        """Test a consumed stream yields nothing on a second pass."""
        stream = DeltaStream(make_response([HEL, LO, DONE]))

        assert [delta async for delta in stream] == ["Hel", "lo"]
        assert [delta async for delta in stream] == []

    @pytest.mark.asyncio
    async def test_no_chunk_is_read_after_sentinel(self):
        """Test the body is not pulled past the sentinel."""
        pulls = []
        stream = DeltaStream(make_response([HEL + DONE, LO], pulls=pulls))

        assert await stream.text() == "Hel"
        assert pulls == [HEL + DONE]

    @pytest.mark.asyncio
    async def test_custom_parser_is_used(self):
        """Test the stream reports statistics of the parser it was given."""
        parser = StreamingParser(log_events=True)
        stream = DeltaStream(make_response([b": ping\n", HEL, DONE]), parser)

        assert await stream.text() == "Hel"
        assert parser.get_stats().ignored == 1
        assert stream.stats == parser.get_stats()


class TestDeltaStreamRelease:
    """Test the response is released on early exit and on errors."""

    @pytest.mark.asyncio
    async def test_aclose_after_first_delta(self):
        """Test abandoning the stream early releases the response."""
        response = make_response([HEL, LO, DONE])
        stream = DeltaStream(response)

        assert await stream.__anext__() == "Hel"
        await stream.aclose()

        assert stream.closed
        assert response.is_closed
        with pytest.raises(StopAsyncIteration):
            await stream.__anext__()

    @pytest.mark.asyncio
    async def test_aclose_is_idempotent(self):
        """Test closing twice, or before iterating, is safe."""
        response = make_response([HEL, DONE])
        stream = DeltaStream(response)

        await stream.aclose()
        await stream.aclose()

        assert response.is_closed
        assert [delta async for delta in stream] == []

    @pytest.mark.asyncio
    async def test_async_with_break(self):
        """Test leaving an ``async with`` block early releases the response."""
        response = make_response([HEL, LO, DONE])

        async with DeltaStream(response) as stream:
            async for delta in stream:
                assert delta == "Hel"
                break

        assert response.is_closed

    @pytest.mark.asyncio
    async def test_read_error_surfaces_after_prior_deltas(self):
        """Test a dropped connection raises StreamingError at consumption."""
        response = make_response(
            [HEL, LO], error=httpx.ReadError("connection dropped")
        )
        stream = DeltaStream(response, provider="openai", model="gpt-4o")
        received = []

        with pytest.raises(StreamingError, match="connection dropped") as exc_info:
            async for delta in stream:
                received.append(delta)

        assert received == ["Hel", "lo"]
        assert isinstance(exc_info.value.__cause__, httpx.ReadError)
        assert exc_info.value.provider == "openai"
        assert exc_info.value.model == "gpt-4o"
        assert response.is_closed

    @pytest.mark.asyncio
    async def test_end_without_sentinel(self):
        """Test body EOF without a sentinel ends cleanly."""
        response = make_response([HEL, LO])
        stream = DeltaStream(response)

        assert await stream.text() == "Hello"
        assert not stream.stats.completed
        assert response.is_closed
