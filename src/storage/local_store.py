# src/storage/local_store.py - v1
"""Directory-backed object store (OBJECT_STORE_BACKEND=local).

Objects live at ``<root>/<bucket>/<key>``; user metadata is kept apart under
``<root>/.metadata/<bucket>/<key>.json``. ETags are the quoted MD5 of the
stored bytes, matching what S3 reports for single-part uploads.
"""

from __future__ import annotations

import json
import logging
import shutil
from datetime import datetime, timezone
from pathlib import Path, PurePosixPath

from cee3.cache.fingerprint import compute_digest
from cee3.storage.base_object_store import BaseObjectStore, RemoteUnavailableError
from cee3.storage.models import ObjectInfo

logger = logging.getLogger(__name__)

_METADATA_DIR = ".metadata"


class LocalObjectStore(BaseObjectStore):
    """Object store on the local filesystem, for offline runs and tests."""

    def __init__(self, root: str | Path) -> None:
        self._root = Path(root).expanduser()

    @property
    def root(self) -> Path:
        return self._root

    def object_path(self, bucket: str, key: str) -> Path:
        """Resolve the on-disk location of an object."""
        return self._root / _safe_bucket(bucket) / _safe_key(key)

    def _metadata_path(self, bucket: str, key: str) -> Path:
        return self._root / _METADATA_DIR / _safe_bucket(bucket) / f"{_safe_key(key)}.json"

    def object_exists(self, bucket: str, key: str) -> bool:
        return self.object_path(bucket, key).is_file()

    def head_object(self, bucket: str, key: str) -> ObjectInfo:
        path = self.object_path(bucket, key)
        if not path.is_file():
            raise FileNotFoundError(f"Object not found: s3://{bucket}/{key}")

        try:
            stat = path.stat()
            etag = f'"{compute_digest(path)}"'
            metadata = self._load_metadata(bucket, key)
        except OSError as e:
            raise RemoteUnavailableError("HeadObject", bucket, key, e) from e

        return ObjectInfo(
            bucket=bucket,
            key=key,
            etag=etag,
            size=stat.st_size,
            last_modified=datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc),
            metadata=metadata,
        )

    def put_object(
        self,
        bucket: str,
        key: str,
        local_path: str | Path,
        metadata: dict[str, str] | None = None,
    ) -> ObjectInfo:
        source = Path(local_path)
        target = self.object_path(bucket, key)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(source, target)
            meta_path = self._metadata_path(bucket, key)
            meta_path.parent.mkdir(parents=True, exist_ok=True)
            meta_path.write_text(json.dumps(dict(metadata or {})), encoding="utf-8")
            etag = f'"{compute_digest(target)}"'
        except OSError as e:
            raise RemoteUnavailableError("PutObject", bucket, key, e) from e

        logger.debug("Local put: %s -> %s", source, target)
        return ObjectInfo(
            bucket=bucket,
            key=key,
            etag=etag,
            size=target.stat().st_size,
            metadata=dict(metadata or {}),
        )

    def _load_metadata(self, bucket: str, key: str) -> dict[str, str]:
        path = self._metadata_path(bucket, key)
        if not path.is_file():
            return {}
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError:
            logger.warning("Ignoring corrupt metadata file %s", path)
            return {}
        return {str(k): str(v) for k, v in data.items()}


def _safe_bucket(bucket: str) -> str:
    if not bucket or "/" in bucket or "\\" in bucket or bucket in (".", "..", _METADATA_DIR):
        raise ValueError(f"Invalid bucket name: {bucket!r}")
    return bucket


def _safe_key(key: str) -> Path:
    """Map an object key onto a relative path, refusing traversal."""
    parts = PurePosixPath(key.replace("\\", "/")).parts
    if not parts or any(part in ("..", "/") for part in parts):
        raise ValueError(f"Invalid object key: {key!r}")
    return Path(*parts)
