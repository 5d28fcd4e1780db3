"""Byte-stream helpers for blob payloads.

``as_chunk_stream`` is the only place that branches on the shape a blob
payload arrives in; everything downstream sees an async iterator of bytes.
"""

from __future__ import annotations

from collections.abc import AsyncIterable, AsyncIterator, Iterable
from typing import Union

BlobSource = Union[bytes, bytearray, memoryview, AsyncIterable[bytes], Iterable[bytes]]


async def as_chunk_stream(source: BlobSource) -> AsyncIterator[bytes]:
    """Yield the payload as non-empty ``bytes`` chunks."""
    if isinstance(source, (bytes, bytearray, memoryview)):
        if len(source):
            yield bytes(source)
    elif isinstance(source, AsyncIterable):
        async for chunk in source:
            if chunk:
                yield bytes(chunk)
    elif isinstance(source, Iterable) and not isinstance(source, str):
        for chunk in source:
            if chunk:
                yield bytes(chunk)
    else:
        raise TypeError(f"Unsupported blob payload type: {type(source).__name__}")


async def _replay(buffered: list[bytes], rest: AsyncIterator[bytes]) -> AsyncIterator[bytes]:
    try:
        for chunk in buffered:
            yield chunk
        async for chunk in rest:
            yield chunk
    finally:
        aclose = getattr(rest, "aclose", None)
        if aclose is not None:
            await aclose()


async def peek_prefix(
    chunks: AsyncIterator[bytes], size: int
) -> tuple[bytes, AsyncIterator[bytes]]:
    """Read just enough chunks to see ``size`` bytes.

    Returns the prefix and a stream yielding the whole payload, buffered
    chunks first. The remainder of ``chunks`` is not consumed here.
    """
    buffered: list[bytes] = []
    seen = 0
    while seen < size:
        try:
            chunk = await chunks.__anext__()
        except StopAsyncIteration:
            break
        buffered.append(chunk)
        seen += len(chunk)
    head = b"".join(buffered)[:size]
    return head, _replay(buffered, chunks)
