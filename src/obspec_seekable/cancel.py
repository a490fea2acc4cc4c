"""Cancellation tokens for blocking reader operations."""

from __future__ import annotations

import threading
import time

from obspec_seekable.exceptions import CancellationError


class CancelToken:
    """
    A thread-safe cancellation signal with an optional deadline.

    Readers check the token before every remote call and between chunk pulls,
    so a token cancelled from another thread stops an in-progress read at the
    next chunk boundary. One token may be shared by several readers.

    Examples
    --------

    ```python
    from obspec_seekable import CancelToken
    from obspec_seekable.readers import SeekableStoreReader

    token = CancelToken(timeout=30)
    reader = SeekableStoreReader(store, "data/file.bin", cancel=token)

    # From another thread:
    token.cancel()
    ```
    """

    def __init__(self, *, timeout: float | None = None) -> None:
        """
        Create a cancellation token.

        Parameters
        ----------
        timeout
            Seconds from now after which the token counts as cancelled.
            ``None`` means no deadline.
        """
        self._event = threading.Event()
        self._deadline = None if timeout is None else time.monotonic() + timeout

    def cancel(self) -> None:
        """Cancel the token. Safe to call more than once and from any thread."""
        self._event.set()

    @property
    def deadline_exceeded(self) -> bool:
        return self._deadline is not None and time.monotonic() >= self._deadline

    @property
    def cancelled(self) -> bool:
        """True once `cancel()` was called or the deadline has passed."""
        return self._event.is_set() or self.deadline_exceeded

    def raise_if_cancelled(self, what: str = "operation") -> None:
        """Raise [CancellationError][obspec_seekable.exceptions.CancellationError] if cancelled."""
        if self._event.is_set():
            raise CancellationError(f"{what} cancelled")
        if self.deadline_exceeded:
            raise CancellationError(f"{what} cancelled: deadline exceeded")

    def __repr__(self) -> str:
        return f"CancelToken(cancelled={self.cancelled})"


__all__ = ["CancelToken"]
