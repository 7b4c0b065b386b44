# src/cache/sidecar_store.py - v1
"""Sidecar-file cache store for file systems without named streams.

Layout: ``<dir>/<cache_dir_name>/<basename>.cache`` holding four lines:
etag, bucket, key, upload timestamp (ISO-8601).
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from cee3.cache.base_cache_store import FIELD_NAMES, BaseMetadataCache

logger = logging.getLogger(__name__)

DEFAULT_CACHE_DIR_NAME = ".cee3cache"
CACHE_SUFFIX = ".cache"

_FILE_ATTRIBUTE_HIDDEN = 0x02


class SidecarCacheStore(BaseMetadataCache):
    """Stores cache records in a hidden directory next to each file."""

    name = "sidecar"

    def __init__(self, cache_dir_name: str = DEFAULT_CACHE_DIR_NAME) -> None:
        self._dir_name = cache_dir_name

    @property
    def cache_dir_name(self) -> str:
        return self._dir_name

    def cache_dir(self, path: Path) -> Path:
        """Hidden cache directory for files living next to ``path``."""
        return path.parent / self._dir_name

    def sidecar_path(self, path: Path) -> Path:
        """Location of the sidecar file for ``path``."""
        return self.cache_dir(path) / f"{path.name}{CACHE_SUFFIX}"

    def _store_fields(self, path: Path, fields: dict[str, str]) -> None:
        for name in FIELD_NAMES:
            value = fields[name]
            if value and value.splitlines() != [value]:
                raise ValueError(f"{name} contains a line break: {value!r}")
        cache_dir = self.cache_dir(path)
        cache_dir.mkdir(parents=True, exist_ok=True)
        content = "\n".join(fields[name] for name in FIELD_NAMES)
        self.sidecar_path(path).write_text(content, encoding="utf-8")
        _hide(cache_dir)

    def _load_fields(self, path: Path) -> dict[str, str] | None:
        sidecar = self.sidecar_path(path)
        if not sidecar.is_file():
            return None
        lines = sidecar.read_text(encoding="utf-8").splitlines()
        if len(lines) < len(FIELD_NAMES):
            logger.debug("Malformed sidecar %s (%d lines)", sidecar, len(lines))
            return None
        return dict(zip(FIELD_NAMES, lines))

    def _remove_fields(self, path: Path) -> None:
        self.sidecar_path(path).unlink(missing_ok=True)
        cache_dir = self.cache_dir(path)
        if cache_dir.is_dir() and not any(cache_dir.iterdir()):
            cache_dir.rmdir()


def _hide(directory: Path) -> None:
    """Best-effort hidden attribute; dot-prefixed names already hide on POSIX."""
    if os.name != "nt":
        return
    try:
        import ctypes

        ctypes.windll.kernel32.SetFileAttributesW(  # type: ignore[attr-defined]
            str(directory), _FILE_ATTRIBUTE_HIDDEN,
        )
    except (AttributeError, OSError) as e:
        logger.debug("Could not hide %s: %s", directory, e)
