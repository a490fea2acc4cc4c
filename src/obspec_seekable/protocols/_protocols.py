"""Core protocol definitions for object store interfaces."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from obspec import Get, GetAsync, GetRange, GetRangeAsync, Head, HeadAsync


@runtime_checkable
class SeekableStore(Get, GetRange, Head, Protocol):
    """
    Store interface required by
    [SeekableStoreReader][obspec_seekable.readers.SeekableStoreReader].

    The protocol includes:

    - [Head][obspec.Head]: resolve the object size once at construction
    - [Get][obspec.Get]: open an open-ended ranged stream (`options={"range": {"offset": n}}`)
    - [GetRange][obspec.GetRange]: independent fetches for `read_at()`

    Any obstore store (S3Store, GCSStore, AzureStore, HTTPStore, MemoryStore)
    implements it.
    """

    pass


@runtime_checkable
class AsyncSeekableStore(GetAsync, GetRangeAsync, HeadAsync, Protocol):
    """
    Store interface required by
    [AsyncSeekableStoreReader][obspec_seekable.readers.AsyncSeekableStoreReader].

    The async twin of [SeekableStore][obspec_seekable.protocols.SeekableStore].
    """

    pass


@runtime_checkable
class ReadableFile(Protocol):
    """
    Protocol for read-only file-like objects.

    This protocol defines the minimal interface needed to read from a file-like
    object, compatible with libraries that expect file handles (e.g., h5py, zarr).
    [SeekableStoreReader][obspec_seekable.readers.SeekableStoreReader] implements it.

    !!! Warning
        It's recommended to define your own protocols. This protocol may change without warning.

    Examples
    --------

    ```python
    from obspec_seekable.protocols import ReadableFile
    from obspec_seekable.readers import SeekableStoreReader

    reader = SeekableStoreReader(store, "file.nc")
    assert isinstance(reader, ReadableFile)  # True
    ```
    """

    def read(self, size: int = -1, /) -> bytes:
        """
        Read up to `size` bytes from the file.

        Parameters
        ----------
        size
            Number of bytes to read. If -1, read until EOF.

        Returns
        -------
        bytes
            The data read from the file.
        """
        ...

    def seek(self, offset: int, whence: int = 0, /) -> int:
        """
        Move to a new file position.

        Parameters
        ----------
        offset
            Position offset.
        whence
            Reference point: 0=start (SEEK_SET), 1=current (SEEK_CUR), 2=end (SEEK_END).

        Returns
        -------
        int
            The new absolute position.
        """
        ...

    def tell(self) -> int:
        """
        Return the current file position.

        Returns
        -------
        int
            Current position in bytes from start of file.
        """
        ...


__all__ = ["AsyncSeekableStore", "ReadableFile", "SeekableStore"]
