"""State and validation shared by the sync and async seekable readers."""

from __future__ import annotations

import os
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from obspec_seekable.cancel import CancelToken
from obspec_seekable.exceptions import InvalidSeekError, MetadataError
from obspec_seekable.urls import join_name

if TYPE_CHECKING:
    from collections.abc import Buffer


def parse_size(meta: Mapping[str, Any], name: str, path: str) -> int:
    """Extract a non-negative object size from a HEAD result."""
    try:
        raw = meta["size"]
    except (KeyError, TypeError) as err:
        raise MetadataError(f"Metadata for {name} has no size", path=path) from err
    return validate_size(raw, name, path)


def validate_size(raw: Any, name: str, path: str) -> int:
    try:
        size = int(raw)
    except (TypeError, ValueError) as err:
        raise MetadataError(
            f"Invalid size {raw!r} in metadata for {name}", path=path
        ) from err
    if size < 0:
        raise MetadataError(f"Negative size {size} for {name}", path=path)
    return size


def writable_view(buffer: Buffer) -> memoryview:
    """Byte view of `buffer`; raises TypeError if it cannot be written to."""
    view = memoryview(buffer).cast("B")
    if view.readonly:
        view.release()
        raise TypeError("readinto() argument must be a writable bytes-like object")
    return view


class _SeekableReaderBase:
    """Cursor bookkeeping common to both readers. Performs no I/O."""

    _size: int
    _position: int

    def __init__(
        self,
        path: str,
        *,
        cancel: CancelToken | None = None,
        base_url: str | None = None,
    ) -> None:
        if not path:
            raise ValueError("path must be a non-empty string")
        self._path = path
        self._cancel = cancel
        self._name = join_name(base_url, path)
        self._position = 0

    @property
    def name(self) -> str:
        """Identifier of the object, e.g. `s3://bucket/key`. For diagnostics only."""
        return self._name

    @property
    def path(self) -> str:
        """The object's path within the store."""
        return self._path

    @property
    def size(self) -> int:
        """Total object size in bytes, resolved once at construction."""
        return self._size

    def tell(self) -> int:
        """
        Return the current file position.

        Returns
        -------
        int
            Current position in bytes from start of file.
        """
        return self._position

    def readable(self) -> bool:
        return True

    def seekable(self) -> bool:
        return True

    def writable(self) -> bool:
        return False

    def _check_cancelled(self, what: str) -> None:
        if self._cancel is not None:
            self._cancel.raise_if_cancelled(f"{what} of {self._name}")

    def _seek_target(self, offset: int, whence: int) -> int:
        """Compute and validate the absolute position for a seek."""
        if whence == os.SEEK_SET:
            target = offset
        elif whence == os.SEEK_CUR:
            target = self._position + offset
        elif whence == os.SEEK_END:
            # Subtractive: seek(n, SEEK_END) lands n bytes before the end.
            target = self._size - offset
        else:
            raise InvalidSeekError(
                f"Invalid whence value: {whence}", path=self._path, offset=offset
            )

        if not 0 <= target <= self._size:
            raise InvalidSeekError(
                f"Invalid seek position {target} for {self._name} (size {self._size})",
                path=self._path,
                offset=target,
            )
        return target

    def _remaining(self, size: int | None) -> int:
        """Bytes a `read(size)` may return from the current position."""
        remaining = self._size - self._position
        if size is None or size < 0:
            return remaining
        return min(size, remaining)

    def _clamp_range(self, offset: int, length: int) -> int:
        """Length of `[offset, offset + length)` that lies inside the object."""
        if offset < 0:
            raise InvalidSeekError(
                f"Negative offset {offset} for {self._name}",
                path=self._path,
                offset=offset,
            )
        if length < 0:
            raise ValueError(f"length must be non-negative, got {length}")
        return max(0, min(length, self._size - offset))

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(name={self._name!r}, size={self._size}, "
            f"position={self._position})"
        )


__all__: list[str] = []
