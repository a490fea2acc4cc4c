"""Protocol definitions for stores and file-like readers."""

from obspec_seekable.protocols._protocols import (
    AsyncSeekableStore,
    ReadableFile,
    SeekableStore,
)

__all__ = ["AsyncSeekableStore", "ReadableFile", "SeekableStore"]
