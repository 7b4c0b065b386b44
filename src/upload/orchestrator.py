# src/upload/orchestrator.py - v1
"""Smart uploader: upload a file only when its content is not already there.

Decision flow per file:
  1. force → upload, no checks
  2. location-consistent cached ETag (simple) → hash file; match → skip
  3. object missing remotely → upload
  4. remote ETag composite (multipart) → upload, cannot verify
  5. hash file; match remote ETag → skip, else upload
A skip always rests on a freshly computed digest, never on the cache alone.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable

from cee3.cache.base_cache_store import BaseMetadataCache
from cee3.cache.fingerprint import (
    DEFAULT_CHUNK_SIZE,
    compute_digest,
    identifiers_equal,
    is_composite,
    matches,
)
from cee3.cache.models import CacheRecord
from cee3.storage.base_object_store import BaseObjectStore, RemoteUnavailableError
from cee3.upload.models import UploadResult, UploadStatus

logger = logging.getLogger(__name__)

# (local_path, bytes_hashed_so_far, total_bytes)
HashProgress = Callable[[Path, int, int], None]

REASON_FORCED = "forced upload"
REASON_NEW = "object does not exist remotely"
REASON_COMPOSITE = "cannot verify: composite (multipart) ETag"
REASON_CHANGED = "content differs from remote object"
REASON_CACHE_MATCH = "content matches cached ETag"
REASON_REMOTE_MATCH = "content matches remote ETag"


class SmartUploader:
    """Upload-or-skip decisions for single files against one object store."""

    def __init__(
        self,
        store: BaseObjectStore,
        cache: BaseMetadataCache | None = None,
        *,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        progress: HashProgress | None = None,
    ) -> None:
        self._store = store
        self._cache = cache
        self._chunk_size = chunk_size
        self._progress = progress

    def upload(
        self,
        local_path: str | Path,
        bucket: str,
        key: str,
        *,
        force: bool = False,
        metadata: dict[str, str] | None = None,
    ) -> UploadResult:
        """Upload ``local_path`` to ``s3://bucket/key`` unless it is a duplicate.

        Remote and local I/O failures are returned as ``failed`` results.

        Raises:
            FileNotFoundError: If the local file does not exist.
            ValueError: If bucket or key is empty.
        """
        if not bucket:
            raise ValueError("Destination bucket is required")
        if not key:
            raise ValueError("Destination key is required")
        path = Path(local_path)
        if not path.is_file():
            raise FileNotFoundError(f"File not found: {path}")

        if force:
            logger.info("Force upload %s -> s3://%s/%s", path.name, bucket, key)
            return self._put(path, bucket, key, REASON_FORCED, metadata)

        try:
            return self._decide(path, bucket, key, metadata)
        except (RemoteUnavailableError, OSError) as e:
            logger.error("Smart upload of %s failed: %s", path, e)
            return self._result(path, bucket, key, "failed", str(e))

    def _decide(
        self,
        path: Path,
        bucket: str,
        key: str,
        metadata: dict[str, str] | None,
    ) -> UploadResult:
        digest: str | None = None
        record = self._cache.lookup(path, bucket, key) if self._cache else None

        if record is not None and not is_composite(record.etag):
            digest = self._digest(path)
            if matches(digest, record.etag):
                logger.info("Skip %s: %s", path.name, REASON_CACHE_MATCH)
                return self._result(
                    path, bucket, key, "skipped_duplicate", REASON_CACHE_MATCH,
                    etag=record.etag, local_digest=digest, cache_hit=True,
                )
            logger.debug("Cached ETag for %s is stale, checking remote", path.name)

        if not self._store.object_exists(bucket, key):
            return self._put(path, bucket, key, REASON_NEW, metadata, digest)

        try:
            remote_etag = self._store.get_content_identifier(bucket, key)
        except FileNotFoundError:
            return self._put(path, bucket, key, REASON_NEW, metadata, digest)

        if is_composite(remote_etag):
            logger.info("Upload %s: %s %s", path.name, REASON_COMPOSITE, remote_etag)
            return self._put(path, bucket, key, REASON_COMPOSITE, metadata, digest)

        if digest is None:
            digest = self._digest(path)

        if not matches(digest, remote_etag):
            return self._put(path, bucket, key, REASON_CHANGED, metadata, digest)

        logger.info("Skip %s: %s", path.name, REASON_REMOTE_MATCH)
        cached = False
        if _needs_refresh(record, remote_etag):
            cached = self._remember(path, remote_etag, bucket, key)
        return self._result(
            path, bucket, key, "skipped_duplicate", REASON_REMOTE_MATCH,
            etag=remote_etag, local_digest=digest, cached=cached,
        )

    def _put(
        self,
        path: Path,
        bucket: str,
        key: str,
        reason: str,
        metadata: dict[str, str] | None,
        digest: str | None = None,
    ) -> UploadResult:
        try:
            info = self._store.put_object(bucket, key, path, metadata)
        except (RemoteUnavailableError, OSError) as e:
            logger.error("Upload of %s to s3://%s/%s failed: %s", path.name, bucket, key, e)
            return self._result(path, bucket, key, "failed", str(e), local_digest=digest)

        etag = info.etag
        if not etag and self._cache is not None:
            # Store reported no identifier; fall back to the local digest
            if digest is None:
                try:
                    digest = self._digest(path)
                except OSError as e:
                    logger.warning("Could not hash %s after upload: %s", path.name, e)
            etag = digest
        cached = self._remember(path, etag, bucket, key) if etag else False
        logger.info("Uploaded %s -> s3://%s/%s (%s)", path.name, bucket, key, reason)
        return self._result(
            path, bucket, key, "uploaded", reason,
            etag=etag, local_digest=digest, cached=cached, version_id=info.version_id,
        )

    def _digest(self, path: Path) -> str:
        if self._progress is None:
            return compute_digest(path, chunk_size=self._chunk_size)

        hook = self._progress
        total = path.stat().st_size
        return compute_digest(
            path,
            progress=lambda read: hook(path, read, total),
            chunk_size=self._chunk_size,
        )

    def _remember(self, path: Path, etag: str, bucket: str, key: str) -> bool:
        if self._cache is None:
            return False
        stored = self._cache.write(path, etag, bucket, key)
        if not stored:
            logger.warning("Caching skipped for %s", path.name)
        return stored

    @staticmethod
    def _result(
        path: Path,
        bucket: str,
        key: str,
        status: UploadStatus,
        reason: str,
        **fields: object,
    ) -> UploadResult:
        return UploadResult(
            local_path=str(path),
            bucket=bucket,
            key=key,
            status=status,
            reason=reason,
            **fields,  # type: ignore[arg-type]
        )


def _needs_refresh(record: CacheRecord | None, remote_etag: str) -> bool:
    return record is None or not identifiers_equal(record.etag, remote_etag)
