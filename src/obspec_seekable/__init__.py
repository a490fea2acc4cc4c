from ._version import __version__
from .cancel import CancelToken
from .exceptions import (
    CancellationError,
    InvalidSeekError,
    MetadataError,
    RemoteFetchError,
    SeekableReaderError,
    StreamNotOpenError,
)
from .readers import AsyncSeekableStoreReader, SeekableStoreReader
from .urls import split_url

__all__ = [
    "__version__",
    "AsyncSeekableStoreReader",
    "CancelToken",
    "CancellationError",
    "InvalidSeekError",
    "MetadataError",
    "RemoteFetchError",
    "SeekableReaderError",
    "SeekableStoreReader",
    "StreamNotOpenError",
    "split_url",
]
