# src/cache/ads_store.py - v1
"""NTFS alternate data stream cache store (Windows).

Each field lives in its own named stream, ``<file>:<prefix>.<field>``, so the
record travels with the file on NTFS volumes.
"""

from __future__ import annotations

import os
from pathlib import Path

from cee3.cache.base_cache_store import FIELD_NAMES, BaseMetadataCache

DEFAULT_ATTRIBUTE_PREFIX = "cee3.s3"


class AlternateStreamCacheStore(BaseMetadataCache):
    """Stores cache records in named data streams attached to the file."""

    name = "ads"

    def __init__(self, prefix: str = DEFAULT_ATTRIBUTE_PREFIX) -> None:
        self._prefix = prefix

    @classmethod
    def supported(cls) -> bool:
        return os.name == "nt"

    def stream_path(self, path: Path, field: str) -> str:
        return f"{path}:{self._prefix}.{field}"

    def _store_fields(self, path: Path, fields: dict[str, str]) -> None:
        for name in FIELD_NAMES:
            with open(self.stream_path(path, name), "w", encoding="utf-8") as f:
                f.write(fields[name])

    def _load_fields(self, path: Path) -> dict[str, str] | None:
        fields: dict[str, str] = {}
        for name in FIELD_NAMES:
            try:
                with open(self.stream_path(path, name), encoding="utf-8") as f:
                    fields[name] = f.read().strip()
            except FileNotFoundError:
                if name == "etag":
                    return None
        return fields

    def _remove_fields(self, path: Path) -> None:
        for name in FIELD_NAMES:
            try:
                os.remove(self.stream_path(path, name))
            except FileNotFoundError:
                continue
