"""Store wrappers that add functionality to underlying stores.

This module provides a transparent wrapper that records the requests a reader
makes against any store.
"""

from obspec_seekable.wrappers._tracing import (
    RequestRecord,
    RequestTrace,
    TracingStore,
)

__all__ = [
    "TracingStore",
    "RequestTrace",
    "RequestRecord",
]
