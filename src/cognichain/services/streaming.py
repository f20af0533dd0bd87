"""Streaming response aggregation."""

import asyncio
import inspect
import logging
from typing import AsyncIterable, AsyncIterator, Awaitable, Callable, List, Optional, Union

logger = logging.getLogger(__name__)

ChunkCallback = Callable[[str], Union[None, Awaitable[None]]]


async def _notify(callback: Optional[ChunkCallback], chunk: str) -> None:
    if callback is None:
        return
    outcome = callback(chunk)
    if inspect.isawaitable(outcome):
        await outcome


class StreamingResponse:
    """Accumulates streamed chunks and relays each one to a callback."""

    def __init__(
        self,
        on_chunk: Optional[ChunkCallback] = None,
        on_complete: Optional[Callable[[str], None]] = None,
    ):
        self._chunks: List[str] = []
        self._on_chunk = on_chunk
        self._on_complete = on_complete
        self.is_complete = False

    @property
    def chunks(self) -> List[str]:
        return list(self._chunks)

    @property
    def complete_response(self) -> str:
        return "".join(self._chunks)

    async def add_chunk(self, chunk: str) -> None:
        if self.is_complete:
            raise RuntimeError("Cannot add a chunk to a completed stream")
        self._chunks.append(chunk)
        await _notify(self._on_chunk, chunk)

    def complete(self) -> str:
        self.is_complete = True
        text = self.complete_response
        if self._on_complete is not None:
            self._on_complete(text)
        return text


class StreamingHandler:
    """Drains an async chunk source into a single response string."""

    async def process_stream(
        self,
        stream_source: AsyncIterable[str],
        on_chunk: Optional[ChunkCallback] = None,
    ) -> str:
        response = StreamingResponse(on_chunk=on_chunk)
        async for chunk in stream_source:
            await response.add_chunk(chunk)
        text = response.complete()
        logger.debug(f"Stream complete: {len(response.chunks)} chunks, {len(text)} chars")
        return text


async def simulate_stream(
    content: str, chunk_size: int = 10, delay_ms: int = 50
) -> AsyncIterator[str]:
    """Yield ``content`` in fixed-size pieces, pausing between them."""
    if chunk_size <= 0:
        raise ValueError("chunk_size must be positive")

    for i in range(0, len(content), chunk_size):
        yield content[i : i + chunk_size]
        if delay_ms > 0 and i + chunk_size < len(content):
            await asyncio.sleep(delay_ms / 1000)
