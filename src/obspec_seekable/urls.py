"""Helpers for object URLs of the form ``scheme://bucket/key``."""

from __future__ import annotations

from collections import namedtuple
from urllib.parse import urlparse

ObjectUrl = namedtuple("ObjectUrl", ["store_url", "path"])
"""
A URL split into the part that identifies the store and the object key.

Attributes
----------
store_url
    The URL scheme and bucket/authority (e.g., 's3://bucket').
path
    The object key within the store (e.g., 'data/file.nc').
"""


def split_url(url: str) -> ObjectUrl:
    """
    Split an object URL into its store URL and object key.

    Parameters
    ----------
    url
        Url such as `s3://bucket/data/file.nc` or `https://example.com/file.nc`.

    Returns
    -------
        NamedTuple containing the store URL and the object path.

    Raises
    ------
    ValueError
        If the URL has no scheme, no bucket/authority, or no object key.
    """
    parsed = urlparse(url)
    if not parsed.scheme:
        raise ValueError(
            f"Urls are expected to contain a scheme (e.g., `s3://` or `gs://`), received {url}"
        )
    if not parsed.netloc:
        raise ValueError(f"Url {url} does not name a bucket")
    path = parsed.path.lstrip("/")
    if not path:
        raise ValueError(f"Url {url} does not name an object")
    return ObjectUrl(f"{parsed.scheme}://{parsed.netloc}", path)


def join_name(base_url: str | None, path: str) -> str:
    """Build a display name for `path`, prefixed by `base_url` when given."""
    if not base_url:
        return path
    return f"{base_url.rstrip('/')}/{path.lstrip('/')}"


__all__ = ["ObjectUrl", "join_name", "split_url"]
