"""Tests for CancelToken."""

import threading
import time

import pytest

from obspec_seekable import CancelToken
from obspec_seekable.exceptions import CancellationError


def test_fresh_token_is_not_cancelled():
    token = CancelToken()
    assert not token.cancelled
    token.raise_if_cancelled()


def test_cancel():
    token = CancelToken()
    token.cancel()
    token.cancel()

    assert token.cancelled
    with pytest.raises(CancellationError, match="read cancelled"):
        token.raise_if_cancelled("read")


def test_deadline():
    token = CancelToken(timeout=0.01)
    time.sleep(0.02)

    assert token.cancelled
    assert token.deadline_exceeded
    with pytest.raises(CancellationError, match="deadline exceeded"):
        token.raise_if_cancelled()


def test_far_deadline_not_exceeded():
    token = CancelToken(timeout=3600)
    assert not token.cancelled


def test_cancel_from_other_thread():
    token = CancelToken()
    thread = threading.Thread(target=token.cancel)
    thread.start()
    thread.join()
    assert token.cancelled
    assert "cancelled=True" in repr(token)
