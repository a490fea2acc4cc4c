"""File-like readers for object stores.

This module provides seekable readers that wrap object stores with a file-like
interface (read, seek, tell, read_at), enabling use with libraries that expect
file handles.
"""

from obspec_seekable.readers._async import AsyncSeekableStoreReader
from obspec_seekable.readers._seekable import SeekableStoreReader

__all__ = [
    "AsyncSeekableStoreReader",
    "SeekableStoreReader",
]
