# src/cache/xattr_store.py - v1
"""Linux extended-attribute cache store.

Fields are kept as ``user.<prefix>.<field>`` attributes on the file itself.
Not every file system accepts user attributes (tmpfs on older kernels, some
network mounts); those failures surface as OSError and are handled by the
base class like any other storage failure.
"""

from __future__ import annotations

import errno
import os
from pathlib import Path

from cee3.cache.base_cache_store import FIELD_NAMES, BaseMetadataCache

DEFAULT_ATTRIBUTE_PREFIX = "cee3.s3"

_MISSING_ATTR_ERRNOS = {
    getattr(errno, name) for name in ("ENODATA", "ENOATTR") if hasattr(errno, name)
}


class XattrCacheStore(BaseMetadataCache):
    """Stores cache records in the file's extended attributes."""

    name = "xattr"

    def __init__(self, prefix: str = DEFAULT_ATTRIBUTE_PREFIX) -> None:
        self._prefix = prefix

    @classmethod
    def supported(cls) -> bool:
        return hasattr(os, "setxattr")

    def attribute_name(self, field: str) -> str:
        return f"user.{self._prefix}.{field}"

    def _store_fields(self, path: Path, fields: dict[str, str]) -> None:
        for name in FIELD_NAMES:
            os.setxattr(path, self.attribute_name(name), fields[name].encode("utf-8"))

    def _load_fields(self, path: Path) -> dict[str, str] | None:
        fields: dict[str, str] = {}
        for name in FIELD_NAMES:
            try:
                raw = os.getxattr(path, self.attribute_name(name))
            except OSError as e:
                if e.errno not in _MISSING_ATTR_ERRNOS:
                    raise
                if name == "etag":
                    return None
                continue
            fields[name] = raw.decode("utf-8").strip()
        return fields

    def _remove_fields(self, path: Path) -> None:
        if not path.exists():
            return
        for name in FIELD_NAMES:
            try:
                os.removexattr(path, self.attribute_name(name))
            except OSError as e:
                if e.errno not in _MISSING_ATTR_ERRNOS:
                    raise
