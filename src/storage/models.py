# src/storage/models.py - v1
"""Storage domain models: ObjectInfo."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class ObjectInfo(BaseModel):
    """Remote object metadata as reported by the object store.

    ``version_id`` and ``is_latest`` are filled only when the service reports
    them (versioned buckets); None means "unknown", not "unversioned".
    """

    bucket: str
    key: str
    etag: str
    size: int | None = None
    last_modified: datetime | None = None
    content_type: str | None = None
    version_id: str | None = None
    is_latest: bool | None = None
    metadata: dict[str, str] = Field(default_factory=dict)

    @property
    def uri(self) -> str:
        return f"s3://{self.bucket}/{self.key}"
