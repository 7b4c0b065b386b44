# src/cache/models.py - v1
"""Cache domain models: CacheRecord, CacheCheck."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel


class CacheRecord(BaseModel):
    """Last known remote location and identifier of a local file.

    Advisory only: the record goes stale if either the file or the remote
    object changes behind its back.
    """

    etag: str
    bucket: str | None = None
    key: str | None = None
    cached_at: datetime | None = None

    def is_for(self, bucket: str, key: str) -> bool:
        """True if the record was written for this exact bucket and key."""
        return self.bucket == bucket and self.key == key


class CacheCheck(BaseModel):
    """Result of comparing a cached identifier with a remote one."""

    has_cache: bool = False
    matches: bool = False
    cached_etag: str | None = None
