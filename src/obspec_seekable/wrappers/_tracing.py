"""Request tracing utilities for obspec-seekable.

This module provides a wrapper to trace the HEAD, streaming GET and range
requests made against a store, useful for debugging, profiling, and checking
how many round trips a reader makes.
"""

from __future__ import annotations

import time
from collections.abc import Generator
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable, Literal, TypedDict

if TYPE_CHECKING:
    from collections.abc import Buffer

    from obspec import GetOptions, GetResult, GetResultAsync, ObjectMeta

Method = Literal["get", "get_range", "head"]


class _TraceInfo(TypedDict, total=False):
    """Info collected during a traced operation."""

    start: int
    length: int
    range_style: Literal["end", "length", "offset"] | None


@dataclass
class RequestRecord:
    """Record of a single request.

    Note
    ----
    For ``get``, ``duration`` only covers opening the stream; the body is
    transferred later as the caller iterates over the result.
    """

    path: str
    start: int
    length: int
    end: int  # start + length
    timestamp: float
    duration: float | None = None
    method: Method = "get_range"
    range_style: Literal["end", "length", "offset"] | None = None


@dataclass
class RequestTrace:
    """Collection of request records with analysis methods."""

    requests: list[RequestRecord] = field(default_factory=list)

    def add(
        self,
        path: str,
        start: int,
        length: int,
        timestamp: float,
        duration: float | None = None,
        method: Method = "get_range",
        range_style: Literal["end", "length", "offset"] | None = None,
    ) -> None:
        """Add a request record."""
        self.requests.append(
            RequestRecord(
                path=path,
                start=start,
                length=length,
                end=start + length,
                timestamp=timestamp,
                duration=duration,
                method=method,
                range_style=range_style,
            )
        )

    def clear(self) -> None:
        """Clear all recorded requests."""
        self.requests.clear()

    def by_method(self, method: Method) -> list[RequestRecord]:
        """Records made with the given store method."""
        return [r for r in self.requests if r.method == method]

    @property
    def total_bytes(self) -> int:
        """Total bytes requested."""
        return sum(r.length for r in self.requests)

    @property
    def total_requests(self) -> int:
        """Total number of requests."""
        return len(self.requests)

    def summary(self) -> dict[str, Any]:
        """Get summary statistics."""
        if not self.requests:
            return {
                "total_requests": 0,
                "total_bytes": 0,
                "unique_files": 0,
            }

        paths = set(r.path for r in self.requests)
        counts = {m: len(self.by_method(m)) for m in ("head", "get", "get_range")}

        return {
            "total_requests": len(self.requests),
            "total_bytes": self.total_bytes,
            "unique_files": len(paths),
            "requests_by_method": counts,
        }


def _range_from_options(options: GetOptions | None) -> _TraceInfo:
    """Describe the byte range a get() call asked for."""
    range_opt = (options or {}).get("range")
    if isinstance(range_opt, (tuple, list)):
        start, end = range_opt[0], range_opt[1]
        return {"start": start, "length": end - start, "range_style": "end"}
    if isinstance(range_opt, dict) and "offset" in range_opt:
        return {"start": range_opt["offset"], "range_style": "offset"}
    return {"start": 0}


def _returned_length(result: Any, start: int) -> int:
    byte_range = getattr(result, "range", None)
    if byte_range is not None:
        return byte_range[1] - byte_range[0]
    meta = getattr(result, "meta", None) or {}
    return max(0, meta.get("size", 0) - start)


class TracingStore:
    """
    A wrapper that traces all requests made to an underlying store.

    This wrapper records every head/get/get_range call for later analysis.
    Any other attribute is forwarded to the wrapped store.

    Examples
    --------
    ```python
    import obstore as obs
    from obspec_seekable.readers import SeekableStoreReader
    from obspec_seekable.wrappers import RequestTrace, TracingStore

    store = obs.store.from_url("s3://bucket", region="us-east-1")

    trace = RequestTrace()
    traced_store = TracingStore(store, trace)

    with SeekableStoreReader(traced_store, "file.bin") as f:
        f.read()

    print(trace.summary())
    ```
    """

    def __init__(
        self,
        store: Any,
        trace: RequestTrace,
        *,
        on_request: Callable[[RequestRecord], None] | None = None,
    ) -> None:
        """
        Create a tracing wrapper around a store.

        Parameters
        ----------
        store
            The underlying store. Only the methods that are called need to exist.
        trace
            RequestTrace instance to record requests to.
        on_request
            Optional callback called for each request (e.g., for logging).
        """
        self._store = store
        self._trace = trace
        self._on_request = on_request

    def __getattr__(self, name: str) -> Any:
        """Forward unknown attributes to the underlying store."""
        return getattr(self._store, name)

    @contextmanager
    def _record(self, path: str, method: Method) -> Generator[_TraceInfo, None, None]:
        """Context manager to record a request with automatic timing.

        Yields a dict that the caller populates with start, length, and range_style.
        Records are saved even if the operation raises an exception.
        """
        info: _TraceInfo = {}
        start_time = time.time()
        try:
            yield info
        finally:
            duration = time.time() - start_time
            self._trace.add(
                path=path,
                start=info.get("start", 0),
                length=info.get("length", 0),
                timestamp=start_time,
                duration=duration,
                method=method,
                range_style=info.get("range_style"),
            )
            if self._on_request:
                self._on_request(self._trace.requests[-1])

    def get(self, path: str, *, options: GetOptions | None = None) -> GetResult:
        """Open a (possibly ranged) stream (delegates to underlying store)."""
        with self._record(path, "get") as info:
            info.update(_range_from_options(options))
            result = self._store.get(path, options=options)
            if "length" not in info:
                info["length"] = _returned_length(result, info["start"])
            return result

    async def get_async(
        self, path: str, *, options: GetOptions | None = None
    ) -> GetResultAsync:
        """Open a (possibly ranged) stream async (delegates to underlying store)."""
        with self._record(path, "get") as info:
            info.update(_range_from_options(options))
            result = await self._store.get_async(path, options=options)
            if "length" not in info:
                info["length"] = _returned_length(result, info["start"])
            return result

    def get_range(
        self,
        path: str,
        *,
        start: int,
        end: int | None = None,
        length: int | None = None,
    ) -> Buffer:
        """Get a byte range (delegates to underlying store)."""
        with self._record(path, "get_range") as info:
            info["start"] = start
            if length is not None:
                info["length"] = length
                info["range_style"] = "length"
                return self._store.get_range(path, start=start, length=length)
            elif end is not None:
                info["length"] = end - start
                info["range_style"] = "end"
                return self._store.get_range(path, start=start, end=end)
            else:
                raise ValueError("Either 'end' or 'length' must be provided")

    async def get_range_async(
        self,
        path: str,
        *,
        start: int,
        end: int | None = None,
        length: int | None = None,
    ) -> Buffer:
        """Get a byte range async (delegates to underlying store)."""
        with self._record(path, "get_range") as info:
            info["start"] = start
            if length is not None:
                info["length"] = length
                info["range_style"] = "length"
                return await self._store.get_range_async(
                    path, start=start, length=length
                )
            elif end is not None:
                info["length"] = end - start
                info["range_style"] = "end"
                return await self._store.get_range_async(path, start=start, end=end)
            else:
                raise ValueError("Either 'end' or 'length' must be provided")

    def head(self, path: str) -> ObjectMeta:
        """Get file metadata (delegates to underlying store)."""
        with self._record(path, "head") as info:
            info["start"] = 0
            info["length"] = 0  # HEAD requests don't transfer data
            return self._store.head(path)

    async def head_async(self, path: str) -> ObjectMeta:
        """Get file metadata async (delegates to underlying store)."""
        with self._record(path, "head") as info:
            info["start"] = 0
            info["length"] = 0  # HEAD requests don't transfer data
            return await self._store.head_async(path)


__all__ = [
    "RequestRecord",
    "RequestTrace",
    "TracingStore",
]
