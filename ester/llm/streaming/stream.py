"""
Scoped delta stream over an open httpx response.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator

import httpx
import structlog

from ..exceptions import StreamingError
from .models import StreamingStats
from .parser import StreamingParser

logger = structlog.get_logger(__name__)


class DeltaStream:
    """
    Single-pass async iterator of assistant text deltas.

    Owns the HTTP response it reads from. The response is released when the
    sentinel arrives, when the body ends, when reading fails, or when the
    consumer stops early via ``aclose()`` / ``async with``.
    """

    def __init__(
        self,
        response: httpx.Response,
        parser: StreamingParser | None = None,
        *,
        provider: str = "openai",
        model: str = "unknown",
    ):
        self._response = response
        self._parser = parser or StreamingParser()
        self._provider = provider
        self._model = model
        self._closed = False
        self._deltas = self._iterate()

    @property
    def response(self) -> httpx.Response:
        return self._response

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def stats(self) -> StreamingStats:
        return self._parser.get_stats()

    async def _iterate(self) -> AsyncGenerator[str]:
        deltas = self._parser.iter_deltas(self._response.aiter_bytes())
        try:
            async for delta in deltas:
                yield delta
        except (httpx.TransportError, httpx.DecodingError) as e:
            logger.error(
                "Stream read failed",
                provider=self._provider,
                model=self._model,
                error_type=type(e).__name__,
                error_message=str(e),
                deltas=self._parser.get_stats().deltas,
            )
            raise StreamingError(
                f"Stream read failed: {e}",
                provider=self._provider,
                model=self._model,
            ) from e
        else:
            logger.debug(
                "Stream finished",
                provider=self._provider,
                model=self._model,
                completed=self._parser.completed,
                deltas=self._parser.get_stats().deltas,
            )
        finally:
            await deltas.aclose()
            await self._response.aclose()

    def __aiter__(self) -> DeltaStream:
        return self

    async def __anext__(self) -> str:
        return await self._deltas.__anext__()

    async def text(self) -> str:
        """Concatenate every remaining delta into one string."""
        return "".join([delta async for delta in self])

    async def aclose(self) -> None:
        """Stop the stream and release the response. Safe to call twice."""
        if self._closed:
            return
        self._closed = True
        await self._deltas.aclose()
        await self._response.aclose()

    async def __aenter__(self) -> DeltaStream:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()
