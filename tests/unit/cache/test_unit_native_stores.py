# tests/unit/cache/test_unit_native_stores.py - v1
"""Tests for cache/xattr_store.py and cache/ads_store.py.

Each test class runs only where the platform mechanism is available.
"""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from cee3.cache.ads_store import AlternateStreamCacheStore
from cee3.cache.xattr_store import XattrCacheStore

ETAG = '"0cc175b9c0f1b6a831c399e269772661"'


def _xattr_usable(directory: Path) -> bool:
    if not XattrCacheStore.supported():
        return False
    marker = directory / ".xattr-check"
    marker.write_bytes(b"")
    try:
        os.setxattr(marker, "user.cee3.check", b"1")
    except OSError:
        return False
    finally:
        marker.unlink()
    return True


@pytest.fixture
def xattr_file(sample_file: Path) -> Path:
    if not _xattr_usable(sample_file.parent):
        pytest.skip("user extended attributes not available here")
    return sample_file


class TestXattrCacheStore:
    def test_round_trip(self, xattr_file: Path):
        store = XattrCacheStore()
        assert store.write(xattr_file, ETAG, "bucket", "key") is True
        record = store.read(xattr_file)
        assert record is not None
        assert (record.etag, record.bucket, record.key) == (ETAG, "bucket", "key")
        assert record.cached_at is not None

    def test_attribute_names_are_namespaced(self, xattr_file: Path):
        store = XattrCacheStore(prefix="cee3.s3")
        store.write(xattr_file, ETAG, "bucket", "key")
        names = set(os.listxattr(xattr_file))
        assert {"user.cee3.s3.etag", "user.cee3.s3.bucket",
                "user.cee3.s3.key", "user.cee3.s3.uploaded"} <= names

    def test_no_sidecar_created(self, xattr_file: Path):
        XattrCacheStore().write(xattr_file, ETAG, "bucket", "key")
        assert not (xattr_file.parent / ".cee3cache").exists()

    def test_read_without_cache(self, xattr_file: Path):
        assert XattrCacheStore().read(xattr_file) is None

    def test_clear(self, xattr_file: Path):
        store = XattrCacheStore()
        store.write(xattr_file, ETAG, "bucket", "key")
        assert store.clear(xattr_file) is True
        assert store.read(xattr_file) is None
        assert store.clear(xattr_file) is True


@pytest.mark.skipif(not AlternateStreamCacheStore.supported(), reason="NTFS streams need Windows")
class TestAlternateStreamCacheStore:
    def test_round_trip(self, sample_file: Path):
        store = AlternateStreamCacheStore()
        assert store.write(sample_file, ETAG, "bucket", "key") is True
        record = store.read(sample_file)
        assert record is not None
        assert (record.etag, record.bucket, record.key) == (ETAG, "bucket", "key")

    def test_clear(self, sample_file: Path):
        store = AlternateStreamCacheStore()
        store.write(sample_file, ETAG, "bucket", "key")
        assert store.clear(sample_file) is True
        assert store.read(sample_file) is None
        assert store.clear(sample_file) is True


class TestStreamNaming:
    def test_stream_path(self, tmp_path: Path):
        store = AlternateStreamCacheStore(prefix="cee3.s3")
        assert store.stream_path(tmp_path / "f.txt", "etag").endswith("f.txt:cee3.s3.etag")

    def test_attribute_name(self):
        assert XattrCacheStore(prefix="x").attribute_name("key") == "user.x.key"
