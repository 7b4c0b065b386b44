# tests/conftest.py - v1
"""Shared test fixtures for unit and integration tests.

Provides an in-memory object store that records every call, sample files
and a sidecar-backed smart uploader. No network access.
"""

from __future__ import annotations

import hashlib
from pathlib import Path

import pytest

from cee3.cache.sidecar_store import SidecarCacheStore
from cee3.logging.context import clear_context
from cee3.storage.base_object_store import BaseObjectStore, RemoteUnavailableError
from cee3.storage.models import ObjectInfo
from cee3.upload.orchestrator import SmartUploader


def md5_hex(data: bytes) -> str:
    return hashlib.md5(data).hexdigest()  # noqa: S324


class FakeObjectStore(BaseObjectStore):
    """In-memory object store with call recording and injectable failures."""

    def __init__(self) -> None:
        self.objects: dict[tuple[str, str], ObjectInfo] = {}
        self.calls: list[tuple[str, str, str]] = []
        self.fail_put_keys: set[str] = set()
        self.fail_head_keys: set[str] = set()

    def seed(self, bucket: str, key: str, etag: str) -> None:
        self.objects[(bucket, key)] = ObjectInfo(bucket=bucket, key=key, etag=etag)

    def calls_of(self, operation: str) -> list[tuple[str, str, str]]:
        return [c for c in self.calls if c[0] == operation]

    def object_exists(self, bucket: str, key: str) -> bool:
        self.calls.append(("exists", bucket, key))
        if key in self.fail_head_keys:
            raise RemoteUnavailableError("HeadObject", bucket, key, "connection reset")
        return (bucket, key) in self.objects

    def head_object(self, bucket: str, key: str) -> ObjectInfo:
        self.calls.append(("head", bucket, key))
        if key in self.fail_head_keys:
            raise RemoteUnavailableError("HeadObject", bucket, key, "connection reset")
        if (bucket, key) not in self.objects:
            raise FileNotFoundError(f"Object not found: s3://{bucket}/{key}")
        return self.objects[(bucket, key)]

    def put_object(self, bucket, key, local_path, metadata=None) -> ObjectInfo:
        self.calls.append(("put", bucket, key))
        if key in self.fail_put_keys:
            raise RemoteUnavailableError("PutObject", bucket, key, "503 Slow Down")
        data = Path(local_path).read_bytes()
        info = ObjectInfo(
            bucket=bucket,
            key=key,
            etag=f'"{md5_hex(data)}"',
            size=len(data),
            metadata=dict(metadata or {}),
        )
        self.objects[(bucket, key)] = info
        return info


@pytest.fixture(autouse=True)
def _reset_log_context():
    clear_context()
    yield
    clear_context()


@pytest.fixture
def fake_store() -> FakeObjectStore:
    return FakeObjectStore()


@pytest.fixture
def sidecar_cache() -> SidecarCacheStore:
    return SidecarCacheStore()


@pytest.fixture
def sample_file(tmp_path: Path) -> Path:
    """Small file with known content."""
    path = tmp_path / "report.csv"
    path.write_bytes(b"id,value\n1,42\n2,43\n")
    return path


@pytest.fixture
def uploader(fake_store: FakeObjectStore, sidecar_cache: SidecarCacheStore) -> SmartUploader:
    return SmartUploader(fake_store, sidecar_cache, chunk_size=8)
