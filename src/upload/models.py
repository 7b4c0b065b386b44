# src/upload/models.py - v1
"""Upload domain models: UploadResult."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel

UploadStatus = Literal["uploaded", "skipped_duplicate", "failed"]


class UploadResult(BaseModel):
    """Terminal outcome of one smart upload.

    ``reason`` is always human-readable; for ``failed`` it carries the error.
    """

    local_path: str
    bucket: str
    key: str
    status: UploadStatus
    reason: str
    etag: str | None = None
    local_digest: str | None = None
    cache_hit: bool = False
    cached: bool = False
    version_id: str | None = None

    @property
    def uploaded(self) -> bool:
        return self.status == "uploaded"

    @property
    def skipped(self) -> bool:
        return self.status == "skipped_duplicate"

    @property
    def failed(self) -> bool:
        return self.status == "failed"
