"""Incremental readers over the chunk iterator of a ranged get() result."""

from __future__ import annotations

from collections.abc import AsyncIterable, AsyncIterator, Iterable, Iterator
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Buffer


class _RangeStream:
    """
    An open byte stream positioned at an absolute offset of a remote object.

    Wraps the chunk iterator of a [GetResult][obspec.GetResult]. Chunks are
    pulled one at a time; only the unconsumed tail of the current chunk is held.
    """

    def __init__(self, chunks: Iterable[Buffer], start: int) -> None:
        self._chunks: Iterator[Buffer] | None = iter(chunks)
        self._pending = memoryview(b"")
        self._position = start

    @classmethod
    def empty(cls, start: int) -> _RangeStream:
        """A stream with nothing left to read, used at end of object."""
        return cls((), start)

    @property
    def position(self) -> int:
        """Absolute offset of the next byte this stream will yield."""
        return self._position

    @property
    def closed(self) -> bool:
        return self._chunks is None

    def _next_chunk(self) -> bool:
        # Skips empty chunks. Returns False once the iterator is exhausted.
        assert self._chunks is not None
        for chunk in self._chunks:
            view = memoryview(chunk).cast("B")
            if len(view):
                self._pending = view
                return True
        return False

    def readinto(self, buffer: memoryview) -> int:
        """
        Copy at most one chunk's worth of data into `buffer`.

        Returns the number of bytes copied; 0 means the stream is exhausted
        (or `buffer` is empty).
        """
        if self._chunks is None:
            raise ValueError("read from closed stream")
        if not len(buffer):
            return 0
        if not len(self._pending) and not self._next_chunk():
            return 0
        n = min(len(buffer), len(self._pending))
        buffer[:n] = self._pending[:n]
        self._pending = self._pending[n:]
        self._position += n
        return n

    def close(self) -> None:
        """Release the underlying iterator. Idempotent."""
        chunks, self._chunks = self._chunks, None
        self._pending = memoryview(b"")
        close = getattr(chunks, "close", None)
        if close is not None:
            close()


class _AsyncRangeStream:
    """Async twin of `_RangeStream` over a [GetResultAsync][obspec.GetResultAsync]."""

    def __init__(self, chunks: AsyncIterable[Buffer] | None, start: int) -> None:
        self._chunks: AsyncIterator[Buffer] | None = (
            aiter(chunks) if chunks is not None else None
        )
        self._exhausted = chunks is None
        self._closed = False
        self._pending = memoryview(b"")
        self._position = start

    @classmethod
    def empty(cls, start: int) -> _AsyncRangeStream:
        return cls(None, start)

    @property
    def position(self) -> int:
        return self._position

    @property
    def closed(self) -> bool:
        return self._closed

    async def _next_chunk(self) -> bool:
        if self._exhausted:
            return False
        assert self._chunks is not None
        async for chunk in self._chunks:
            view = memoryview(chunk).cast("B")
            if len(view):
                self._pending = view
                return True
        self._exhausted = True
        return False

    async def readinto(self, buffer: memoryview) -> int:
        if self._closed:
            raise ValueError("read from closed stream")
        if not len(buffer):
            return 0
        if not len(self._pending) and not await self._next_chunk():
            return 0
        n = min(len(buffer), len(self._pending))
        buffer[:n] = self._pending[:n]
        self._pending = self._pending[n:]
        self._position += n
        return n

    async def aclose(self) -> None:
        if self._closed:
            return
        self._closed = True
        chunks, self._chunks = self._chunks, None
        self._pending = memoryview(b"")
        aclose = getattr(chunks, "aclose", None)
        if aclose is not None:
            await aclose()


__all__: list[str] = []
