"""
Streaming byte counter.
"""

from collections.abc import AsyncIterable


async def size_of(stream: AsyncIterable[bytes]) -> int:
    """
    Drain ``stream`` and return the total number of bytes it produced.

    Chunks are counted and discarded, so the body is never held in memory.
    The stream is always consumed to completion.
    """
    size = 0
    async for chunk in stream:
        size += len(chunk)
    return size
