"""Shared mock classes for tests."""

from __future__ import annotations

import asyncio
from typing import Callable

DATA = bytes(range(100))
PATH = "data/object.bin"


class ChunkIterator:
    """Iterator over fixed-size chunks that records whether it was closed."""

    def __init__(
        self,
        data: bytes,
        chunk_size: int,
        *,
        fail_after: int | None = None,
        on_chunk: Callable[[int], None] | None = None,
    ):
        self._chunks = [
            data[i : i + chunk_size] for i in range(0, len(data), chunk_size)
        ]
        self._index = 0
        self._fail_after = fail_after
        self._on_chunk = on_chunk
        self.close_count = 0

    @property
    def closed(self) -> bool:
        return self.close_count > 0

    def __iter__(self):
        return self

    def __next__(self) -> bytes:
        if self.closed:
            raise StopIteration
        if self._fail_after is not None and self._index >= self._fail_after:
            raise OSError("connection reset")
        if self._index >= len(self._chunks):
            raise StopIteration
        chunk = self._chunks[self._index]
        self._index += 1
        if self._on_chunk is not None:
            self._on_chunk(self._index)
        return chunk

    def close(self) -> None:
        self.close_count += 1


class AsyncChunkIterator:
    """Async twin of ChunkIterator."""

    def __init__(self, inner: ChunkIterator):
        self._inner = inner

    @property
    def close_count(self) -> int:
        return self._inner.close_count

    @property
    def closed(self) -> bool:
        return self._inner.closed

    def __aiter__(self):
        return self

    async def __anext__(self) -> bytes:
        try:
            return next(self._inner)
        except StopIteration:
            raise StopAsyncIteration from None

    async def aclose(self) -> None:
        self._inner.close()


class MockGetResult:
    """Mock GetResult for a ranged get, iterating in chunks."""

    def __init__(self, data: bytes, start: int, iterator: ChunkIterator):
        self._data = data
        self._start = start
        self._iterator = iterator

    @property
    def attributes(self):
        return {}

    def buffer(self):
        return self._data[self._start :]

    @property
    def meta(self):
        return {
            "path": "",
            "last_modified": None,
            "size": len(self._data),
            "e_tag": None,
            "version": None,
        }

    @property
    def range(self):
        return (self._start, len(self._data))

    def __iter__(self):
        return self._iterator

    def __aiter__(self):
        return AsyncChunkIterator(self._iterator)


class RangeStore:
    """
    An in-memory store honouring range options, with call counters and
    failure injection for testing the seekable readers.
    """

    def __init__(
        self,
        data: dict[str, bytes] | None = None,
        *,
        chunk_size: int = 16,
    ):
        self._data = data if data is not None else {}
        self.chunk_size = chunk_size
        self.head_calls = 0
        self.get_calls: list[int] = []
        self.get_range_calls: list[tuple[int, int]] = []
        self.streams: list[ChunkIterator] = []
        self.meta_override: dict | None = None
        self.fail_head = False
        self.fail_get = False
        self.fail_get_range = False
        self.fail_after_chunks: int | None = None
        self.on_chunk: Callable[[int], None] | None = None
        self.hang = False

    def put(self, path: str, data: bytes) -> None:
        self._data[path] = data

    def head(self, path: str) -> dict:
        self.head_calls += 1
        if self.fail_head:
            raise FileNotFoundError(path)
        if self.meta_override is not None:
            return self.meta_override
        return {
            "path": path,
            "last_modified": None,
            "size": len(self._data[path]),
            "e_tag": None,
            "version": None,
        }

    async def head_async(self, path: str) -> dict:
        if self.hang:
            await asyncio.Event().wait()
        return self.head(path)

    def get(self, path: str, *, options=None) -> MockGetResult:
        data = self._data[path]
        range_opt = (options or {}).get("range", {"offset": 0})
        start = range_opt["offset"]
        self.get_calls.append(start)
        if self.fail_get:
            raise PermissionError(f"access denied: {path}")
        if start >= len(data):
            raise ValueError(f"range not satisfiable: {start}-")
        iterator = ChunkIterator(
            data[start:],
            self.chunk_size,
            fail_after=self.fail_after_chunks,
            on_chunk=self.on_chunk,
        )
        self.streams.append(iterator)
        return MockGetResult(data, start, iterator)

    async def get_async(self, path: str, *, options=None) -> MockGetResult:
        if self.hang:
            await asyncio.Event().wait()
        return self.get(path, options=options)

    def get_range(
        self,
        path: str,
        *,
        start: int,
        end: int | None = None,
        length: int | None = None,
    ) -> bytes:
        if end is None:
            end = start + length
        self.get_range_calls.append((start, end))
        if self.fail_get_range:
            raise TimeoutError("request timed out")
        return self._data[path][start:end]

    async def get_range_async(
        self,
        path: str,
        *,
        start: int,
        end: int | None = None,
        length: int | None = None,
    ) -> bytes:
        if self.hang:
            await asyncio.Event().wait()
        return self.get_range(path, start=start, end=end, length=length)
