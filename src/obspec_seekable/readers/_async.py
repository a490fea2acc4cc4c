"""Async seekable reader over obspec's async protocols."""

from __future__ import annotations

import logging
import os
from typing import TYPE_CHECKING

from obspec_seekable.exceptions import (
    MetadataError,
    RemoteFetchError,
    StreamNotOpenError,
)
from obspec_seekable.readers._base import (
    _SeekableReaderBase,
    parse_size,
    validate_size,
    writable_view,
)
from obspec_seekable.readers._stream import _AsyncRangeStream
from obspec_seekable.urls import join_name

if TYPE_CHECKING:
    from collections.abc import Buffer

    from obspec_seekable.cancel import CancelToken
    from obspec_seekable.protocols import AsyncSeekableStore

logger = logging.getLogger(__name__)


class AsyncSeekableStoreReader(_SeekableReaderBase):
    """
    Async counterpart of [SeekableStoreReader][obspec_seekable.readers.SeekableStoreReader].

    Construction performs network I/O, so instances are created with
    [`open()`][obspec_seekable.readers.AsyncSeekableStoreReader.open]. Cancelling
    the awaiting task aborts the in-flight store call with
    `asyncio.CancelledError`; use `asyncio.timeout()` for deadlines.

    Examples
    --------

    ```python
    async with await AsyncSeekableStoreReader.open(store, "data/file.nc") as f:
        header = await f.read(8)
        await f.seek(1024)
        block = await f.read(4096)
    ```
    """

    def __init__(
        self,
        store: AsyncSeekableStore,
        path: str,
        size: int,
        *,
        cancel: CancelToken | None = None,
        base_url: str | None = None,
    ) -> None:
        # Use open(); this leaves the reader without a stream.
        super().__init__(path, cancel=cancel, base_url=base_url)
        self._store = store
        self._size = validate_size(size, self._name, path)
        self._stream: _AsyncRangeStream | None = None

    @classmethod
    async def open(
        cls,
        store: AsyncSeekableStore,
        path: str,
        *,
        cancel: CancelToken | None = None,
        base_url: str | None = None,
        size: int | None = None,
    ) -> AsyncSeekableStoreReader:
        """
        Resolve the object size and open a stream at offset 0.

        Parameters are the same as for
        [SeekableStoreReader][obspec_seekable.readers.SeekableStoreReader].
        """
        if size is None:
            size = await cls._resolve_size(store, path, cancel, base_url)
        reader = cls(store, path, size, cancel=cancel, base_url=base_url)
        await reader.seek(0)
        return reader

    @staticmethod
    async def _resolve_size(
        store: AsyncSeekableStore,
        path: str,
        cancel: CancelToken | None,
        base_url: str | None,
    ) -> int:
        name = join_name(base_url, path)
        if cancel is not None:
            cancel.raise_if_cancelled(f"head of {name}")
        try:
            meta = await store.head_async(path)
        except Exception as err:
            raise MetadataError(
                f"Failed to get metadata for {name}: {err}", path=path
            ) from err
        size = parse_size(meta, name, path)
        logger.debug("Resolved size of %s: %d bytes", name, size)
        return size

    async def _open_stream(self, offset: int) -> None:
        if offset < self._size:
            self._check_cancelled(f"open at offset {offset}")
        await self._release_stream()
        if offset == self._size:
            self._stream = _AsyncRangeStream.empty(offset)
            return
        try:
            result = await self._store.get_async(
                self._path, options={"range": {"offset": offset}}
            )
        except Exception as err:
            raise RemoteFetchError(
                f"Failed to open {self._name} at offset {offset}: {err}",
                path=self._path,
                start=offset,
            ) from err
        logger.debug("Opened stream on %s at offset %d", self._name, offset)
        self._stream = _AsyncRangeStream(result, offset)

    async def _release_stream(self) -> None:
        stream, self._stream = self._stream, None
        if stream is not None and not stream.closed:
            logger.debug(
                "Closing stream on %s at offset %d", self._name, stream.position
            )
            await stream.aclose()

    def _require_stream(self) -> _AsyncRangeStream:
        if self._stream is None:
            raise StreamNotOpenError(
                f"No open stream on {self._name}; call seek() to open one",
                path=self._path,
            )
        return self._stream

    async def _pull(self, stream: _AsyncRangeStream, view: memoryview) -> int:
        self._check_cancelled("read")
        try:
            n = await stream.readinto(view)
        except Exception as err:
            await self._release_stream()
            raise RemoteFetchError(
                f"Failed to read {self._name} at offset {self._position}: {err}",
                path=self._path,
                start=self._position,
            ) from err
        self._position += n
        return n

    async def readinto(self, buffer: Buffer, /) -> int:
        """Read into `buffer` from the open stream; may fill it only partly."""
        stream = self._require_stream()
        with writable_view(buffer) as view:
            want = self._remaining(len(view))
            if want == 0:
                return 0
            return await self._pull(stream, view[:want])

    async def read(self, size: int | None = -1, /) -> bytes:
        """Read up to `size` bytes; negative or None reads to the end."""
        stream = self._require_stream()
        want = self._remaining(size)
        buffer = bytearray(want)
        with memoryview(buffer) as view:
            filled = 0
            while filled < want:
                n = await self._pull(stream, view[filled:])
                if n == 0:
                    break
                filled += n
        return bytes(buffer) if filled == want else bytes(buffer[:filled])

    async def readall(self) -> bytes:
        return await self.read(-1)

    async def seek(self, offset: int, whence: int = os.SEEK_SET, /) -> int:
        """Move the cursor; same semantics as the sync reader's `seek()`."""
        target = self._seek_target(offset, whence)
        if self._stream is not None and target == self._position:
            return target
        await self._open_stream(target)
        self._position = target
        return target

    async def readinto_at(self, buffer: Buffer, offset: int, /) -> int:
        with writable_view(buffer) as view:
            data = await self._fetch_range(offset, len(view))
            n = len(data)
            view[:n] = data
        return n

    async def read_at(self, size: int, offset: int, /) -> bytes:
        """Return up to `size` bytes at absolute `offset` without moving the cursor."""
        return bytes(await self._fetch_range(offset, size))

    async def _fetch_range(self, offset: int, length: int) -> memoryview:
        length = self._clamp_range(offset, length)
        if length == 0:
            return memoryview(b"")
        self._check_cancelled(f"read_at offset {offset}")
        end = offset + length
        try:
            data = await self._store.get_range_async(
                self._path, start=offset, length=length
            )
        except Exception as err:
            raise RemoteFetchError(
                f"Failed to read {self._name} bytes {offset}-{end - 1}: {err}",
                path=self._path,
                start=offset,
                end=end,
            ) from err
        logger.debug("Fetched %s bytes %d-%d", self._name, offset, end - 1)
        return memoryview(data).cast("B")[:length]

    @property
    def closed(self) -> bool:
        """True when no stream is open (after close() or a failed seek)."""
        return self._stream is None

    async def close(self) -> None:
        """Release the open stream and reset the cursor to 0. Idempotent."""
        await self._release_stream()
        self._position = 0

    async def __aenter__(self) -> AsyncSeekableStoreReader:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()


__all__ = ["AsyncSeekableStoreReader"]
