"""Exceptions raised by the seekable readers."""

from __future__ import annotations


class SeekableReaderError(Exception):
    """Base class for all errors raised by obspec-seekable readers."""

    def __init__(self, message: str, *, path: str | None = None) -> None:
        super().__init__(message)
        self.path = path


class MetadataError(SeekableReaderError):
    """The object size could not be resolved.

    Raised at construction when the HEAD request fails (missing object,
    permissions, network) or when the returned size is absent or invalid.
    """


class InvalidSeekError(SeekableReaderError, ValueError):
    """A seek target fell outside ``[0, size]`` or ``whence`` was unknown."""

    def __init__(
        self, message: str, *, path: str | None = None, offset: int | None = None
    ) -> None:
        super().__init__(message, path=path)
        self.offset = offset


class RemoteFetchError(SeekableReaderError, OSError):
    """Opening or reading a ranged byte stream failed.

    ``end`` is ``None`` for open-ended ranges.
    """

    def __init__(
        self,
        message: str,
        *,
        path: str | None = None,
        start: int | None = None,
        end: int | None = None,
    ) -> None:
        super().__init__(message, path=path)
        self.start = start
        self.end = end


class CancellationError(SeekableReaderError):
    """The operation's cancel token was cancelled or its deadline passed."""


class StreamNotOpenError(SeekableReaderError, ValueError):
    """A sequential read was attempted while no stream is open.

    This happens after [close()][obspec_seekable.readers.SeekableStoreReader.close]
    or after a failed seek. Call ``seek()`` to open a new stream.
    """


__all__ = [
    "CancellationError",
    "InvalidSeekError",
    "MetadataError",
    "RemoteFetchError",
    "SeekableReaderError",
    "StreamNotOpenError",
]
