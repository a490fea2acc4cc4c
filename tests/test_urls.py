"""Tests for object URL helpers."""

import pytest

from obspec_seekable.urls import join_name, split_url


@pytest.mark.parametrize(
    "url, store_url, path",
    [
        ("s3://bucket/key.bin", "s3://bucket", "key.bin"),
        ("gs://bucket/a/b/c.nc", "gs://bucket", "a/b/c.nc"),
        ("https://example.com/data/file.nc", "https://example.com", "data/file.nc"),
        ("az://container//double/slash", "az://container", "double/slash"),
    ],
)
def test_split_url(url, store_url, path):
    assert split_url(url) == (store_url, path)
    assert split_url(url).store_url == store_url


@pytest.mark.parametrize(
    "url, match",
    [
        ("bucket/key", "scheme"),
        ("s3:///key", "bucket"),
        ("s3://bucket", "object"),
        ("s3://bucket/", "object"),
    ],
)
def test_split_url_rejects(url, match):
    with pytest.raises(ValueError, match=match):
        split_url(url)


def test_join_name():
    assert join_name(None, "a/b") == "a/b"
    assert join_name("", "a/b") == "a/b"
    assert join_name("s3://bucket", "a/b") == "s3://bucket/a/b"
    assert join_name("s3://bucket/", "/a/b") == "s3://bucket/a/b"
