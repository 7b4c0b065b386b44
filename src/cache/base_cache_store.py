# src/cache/base_cache_store.py - v1
"""Abstract per-file metadata cache.

Backends only move four text fields (etag, bucket, key, uploaded) in and out
of their storage. Every public operation here converts storage failures into
a ``False`` / ``None`` result and a warning, so the cache can never fail an
upload.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from pathlib import Path

from cee3.cache.fingerprint import identifiers_equal, strip_quotes
from cee3.cache.models import CacheCheck, CacheRecord

logger = logging.getLogger(__name__)

FIELD_NAMES: tuple[str, ...] = ("etag", "bucket", "key", "uploaded")

_STORAGE_ERRORS = (OSError, UnicodeError, ValueError)


class BaseMetadataCache(ABC):
    """Unified interface for per-file cache storage backends."""

    name: str = "base"

    @classmethod
    def supported(cls) -> bool:
        """Whether this backend can work on the current platform."""
        return True

    # --- Backend hooks (may raise) ---

    @abstractmethod
    def _store_fields(self, path: Path, fields: dict[str, str]) -> None:
        """Persist all fields for a file."""

    @abstractmethod
    def _load_fields(self, path: Path) -> dict[str, str] | None:
        """Return stored fields, or None if nothing is stored."""

    @abstractmethod
    def _remove_fields(self, path: Path) -> None:
        """Delete all stored fields. Must succeed if nothing is stored."""

    # --- Public contract (never raises) ---

    def write(self, path: str | Path, etag: str, bucket: str, key: str) -> bool:
        """Cache the remote identifier and location of a local file.

        Returns:
            True if stored, False if the file is missing or storage failed.
        """
        file_path = Path(path)
        if not file_path.is_file():
            return False

        fields = {
            "etag": etag,
            "bucket": bucket,
            "key": key,
            "uploaded": datetime.now(timezone.utc).isoformat(),
        }
        try:
            self._store_fields(file_path, fields)
        except _STORAGE_ERRORS as e:
            logger.warning("Could not cache ETag for %s: %s", file_path, e)
            return False

        logger.debug("Cached %s -> s3://%s/%s (%s)", file_path.name, bucket, key, etag)
        return True

    def read(self, path: str | Path) -> CacheRecord | None:
        """Read the cache record of a file, or None if absent or unreadable."""
        file_path = Path(path)
        if not file_path.is_file():
            return None

        try:
            fields = self._load_fields(file_path)
        except _STORAGE_ERRORS as e:
            logger.warning("Could not read cache for %s: %s", file_path, e)
            return None

        if not fields or not fields.get("etag"):
            return None

        return CacheRecord(
            etag=fields["etag"],
            bucket=fields.get("bucket") or None,
            key=fields.get("key") or None,
            cached_at=_parse_timestamp(fields.get("uploaded")),
        )

    def clear(self, path: str | Path) -> bool:
        """Remove cached data for a file. Clearing an empty cache succeeds."""
        file_path = Path(path)
        try:
            self._remove_fields(file_path)
        except _STORAGE_ERRORS as e:
            logger.warning("Could not clear cache for %s: %s", file_path, e)
            return False
        return True

    def lookup(self, path: str | Path, bucket: str, key: str) -> CacheRecord | None:
        """Return the record only if it was written for this bucket and key."""
        record = self.read(path)
        if record is None:
            return None
        if not record.is_for(bucket, key):
            logger.debug(
                "Cache for %s points at s3://%s/%s, not s3://%s/%s",
                path, record.bucket, record.key, bucket, key,
            )
            return None
        return record

    def check_against_remote(self, path: str | Path, remote_etag: str) -> CacheCheck:
        """Compare the cached identifier with one the caller already holds."""
        record = self.read(path)
        if record is None:
            return CacheCheck()

        return CacheCheck(
            has_cache=True,
            matches=identifiers_equal(record.etag, remote_etag),
            cached_etag=strip_quotes(record.etag),
        )

    def describe(self, path: str | Path) -> str:
        """Human-readable summary of the cached record for a file."""
        file_path = Path(path)
        record = self.read(file_path)
        if record is None:
            return f"No cached S3 info for: {file_path.name}"

        uploaded = (
            record.cached_at.astimezone().strftime("%Y-%m-%d %H:%M:%S")
            if record.cached_at else "unknown"
        )
        return "\n".join([
            f"Cached S3 info for: {file_path.name}",
            f"  ETag:     {record.etag}",
            f"  Bucket:   {record.bucket}",
            f"  Key:      {record.key}",
            f"  Uploaded: {uploaded}",
            f"  Backend:  {self.name}",
        ])


def _parse_timestamp(value: str | None) -> datetime | None:
    """Parse an ISO-8601 timestamp, returning None when malformed."""
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed
