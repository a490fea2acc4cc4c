"""Seekable reader that keeps one ranged stream open across sequential reads."""

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
from obspec_seekable.readers._stream import _RangeStream
from obspec_seekable.urls import split_url

if TYPE_CHECKING:
    from collections.abc import Buffer

    from obspec_seekable.cancel import CancelToken
    from obspec_seekable.protocols import SeekableStore

logger = logging.getLogger(__name__)


class SeekableStoreReader(_SeekableReaderBase):
    """
    A file-like reader that streams an object through open-ended range requests.

    The reader resolves the object size once with [`head()`][obspec.Head] and
    then keeps a single [`get()`][obspec.Get] stream open, positioned at the
    cursor. Sequential reads pull from that stream without new requests. A
    seek only reopens the stream when it lands somewhere other than the
    cursor. [`read_at()`][obspec_seekable.readers.SeekableStoreReader.read_at]
    issues an independent [`get_range()`][obspec.GetRange] and leaves the
    cursor alone.

    When to Use
    -----------
    Use SeekableStoreReader when:

    - **Long sequential scans**: one request serves the whole scan.
    - **Occasional jumps**: each discontinuous seek costs one request.
    - **Bounded memory**: nothing beyond the transport's current chunk is held.

    Consider alternatives when:

    - You re-read the same regions often: this reader does not cache.
    - You need many small random reads: use `read_at()` or a block-caching reader.

    The reader is not thread-safe; use one reader per thread.

    Examples
    --------

    ```python
    from obstore.store import S3Store
    from obspec_seekable.readers import SeekableStoreReader

    store = S3Store("my-bucket", region="us-east-1")
    with SeekableStoreReader(store, "data/file.nc", base_url="s3://my-bucket") as f:
        header = f.read(8)
        f.seek(1024)
        block = f.read(4096)
        footer = f.read_at(16, f.size - 16)
    ```
    """

    def __init__(
        self,
        store: SeekableStore,
        path: str,
        *,
        cancel: CancelToken | None = None,
        base_url: str | None = None,
        size: int | None = None,
    ) -> None:
        """
        Open a reader on `path`, positioned at offset 0.

        Parameters
        ----------
        store
            Any object implementing [Head][obspec.Head], [Get][obspec.Get]
            and [GetRange][obspec.GetRange]. Borrowed; never closed by the reader.
        path
            The path to the object within the store.
        cancel
            Optional [CancelToken][obspec_seekable.CancelToken] checked before
            every remote call and between chunks.
        base_url
            Prefix for [name][obspec_seekable.readers.SeekableStoreReader.name],
            e.g. `s3://my-bucket`.
        size
            Object size in bytes. Pass this to skip the HEAD request if you
            already know it.

        Raises
        ------
        MetadataError
            If the size cannot be resolved.
        RemoteFetchError
            If the initial stream cannot be opened.
        CancellationError
            If `cancel` is already cancelled.
        """
        super().__init__(path, cancel=cancel, base_url=base_url)
        self._store = store
        self._stream: _RangeStream | None = None
        if size is None:
            self._size = self._resolve_size()
        else:
            self._size = validate_size(size, self._name, path)
        self._open_stream(0)

    @classmethod
    def from_url(
        cls, url: str, *, cancel: CancelToken | None = None, **store_kwargs
    ) -> SeekableStoreReader:
        """
        Open a reader from an object URL such as `s3://bucket/key`.

        The store is built with [obstore.store.from_url][]; `store_kwargs`
        (region, credentials, client options) are passed through to it.
        """
        from obstore.store import from_url

        store_url, path = split_url(url)
        store = from_url(store_url, **store_kwargs)
        return cls(store, path, cancel=cancel, base_url=store_url)

    def _resolve_size(self) -> int:
        self._check_cancelled("head")
        try:
            meta = self._store.head(self._path)
        except Exception as err:
            raise MetadataError(
                f"Failed to get metadata for {self._name}: {err}", path=self._path
            ) from err
        size = parse_size(meta, self._name, self._path)
        logger.debug("Resolved size of %s: %d bytes", self._name, size)
        return size

    def _open_stream(self, offset: int) -> None:
        """Replace the current stream with one starting at `offset`."""
        if offset < self._size:
            self._check_cancelled(f"open at offset {offset}")
        self._release_stream()
        if offset == self._size:
            # A range starting at the object length is unsatisfiable.
            self._stream = _RangeStream.empty(offset)
            return
        try:
            result = self._store.get(
                self._path, options={"range": {"offset": offset}}
            )
        except Exception as err:
            raise RemoteFetchError(
                f"Failed to open {self._name} at offset {offset}: {err}",
                path=self._path,
                start=offset,
            ) from err
        logger.debug("Opened stream on %s at offset %d", self._name, offset)
        self._stream = _RangeStream(result, offset)

    def _release_stream(self) -> None:
        stream, self._stream = self._stream, None
        if stream is not None and not stream.closed:
            logger.debug(
                "Closing stream on %s at offset %d", self._name, stream.position
            )
            stream.close()

    def _require_stream(self) -> _RangeStream:
        if self._stream is None:
            raise StreamNotOpenError(
                f"No open stream on {self._name}; call seek() to open one",
                path=self._path,
            )
        return self._stream

    def _pull(self, stream: _RangeStream, view: memoryview) -> int:
        self._check_cancelled("read")
        try:
            n = stream.readinto(view)
        except Exception as err:
            self._release_stream()
            raise RemoteFetchError(
                f"Failed to read {self._name} at offset {self._position}: {err}",
                path=self._path,
                start=self._position,
            ) from err
        self._position += n
        return n

    def readinto(self, buffer: Buffer, /) -> int:
        """
        Read into `buffer` from the open stream and advance the cursor.

        A single call may fill only part of `buffer`. Returns the number of
        bytes read; 0 means end of object. Never reads past `size`, even if
        the object has grown since it was opened.
        """
        stream = self._require_stream()
        with writable_view(buffer) as view:
            want = self._remaining(len(view))
            if want == 0:
                return 0
            return self._pull(stream, view[:want])

    def read(self, size: int | None = -1, /) -> bytes:
        """
        Read up to `size` bytes from the file.

        Parameters
        ----------
        size
            Number of bytes to read. If negative or None, read from current position to end.

        Returns
        -------
        bytes
            The data read from the file. Shorter than `size` only at end of object.
        """
        stream = self._require_stream()
        want = self._remaining(size)
        buffer = bytearray(want)
        with memoryview(buffer) as view:
            filled = 0
            while filled < want:
                n = self._pull(stream, view[filled:])
                if n == 0:
                    break
                filled += n
        return bytes(buffer) if filled == want else bytes(buffer[:filled])

    def readall(self) -> bytes:
        """Read from the cursor to the end of the object."""
        return self.read(-1)

    def seek(self, offset: int, whence: int = os.SEEK_SET, /) -> int:
        """
        Move the file position.

        Parameters
        ----------
        offset
            Position offset.
        whence
            Reference point: 0=start (SEEK_SET), 1=current (SEEK_CUR), 2=end
            (SEEK_END). With SEEK_END the offset is subtracted from the size,
            so `seek(4, 2)` moves to 4 bytes before the end.

        Returns
        -------
        int
            The new absolute position.

        Raises
        ------
        InvalidSeekError
            If `whence` is unknown or the target is outside `[0, size]`.
        RemoteFetchError
            If the new stream cannot be opened. The cursor is unchanged and no
            stream is open afterwards.
        """
        target = self._seek_target(offset, whence)
        if self._stream is not None and target == self._position:
            return target
        self._open_stream(target)
        self._position = target
        return target

    def readinto_at(self, buffer: Buffer, offset: int, /) -> int:
        """
        Read into `buffer` from absolute `offset` without moving the cursor.

        Issues one [`get_range()`][obspec.GetRange] request. Returns fewer
        bytes than `len(buffer)` when the range runs past the end of the object.
        """
        with writable_view(buffer) as view:
            data = self._fetch_range(offset, len(view))
            n = len(data)
            view[:n] = data
        return n

    def read_at(self, size: int, offset: int, /) -> bytes:
        """Return up to `size` bytes at absolute `offset` without moving the cursor."""
        return bytes(self._fetch_range(offset, size))

    def _fetch_range(self, offset: int, length: int) -> memoryview:
        length = self._clamp_range(offset, length)
        if length == 0:
            return memoryview(b"")
        self._check_cancelled(f"read_at offset {offset}")
        end = offset + length
        try:
            data = self._store.get_range(self._path, start=offset, length=length)
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

    def close(self) -> None:
        """
        Release the open stream and reset the cursor to 0.

        Idempotent. The reader can be reused: a later `seek()` opens a new stream.
        """
        self._release_stream()
        self._position = 0

    def __enter__(self) -> SeekableStoreReader:
        """Enter the context manager."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Exit the context manager and close the reader."""
        self.close()


__all__ = ["SeekableStoreReader"]
