# src/cache/cache_factory.py - v1
"""Factory for the per-file metadata cache.

The backend is chosen once: the configured one, or for ``auto`` the native
stream store where the platform has one and the sidecar store otherwise.
"""

from __future__ import annotations

import logging

from cee3.cache.ads_store import AlternateStreamCacheStore
from cee3.cache.base_cache_store import BaseMetadataCache
from cee3.cache.sidecar_store import SidecarCacheStore
from cee3.cache.xattr_store import XattrCacheStore
from cee3.config.settings import Settings

logger = logging.getLogger(__name__)


def create_cache_store(settings: Settings | None = None) -> BaseMetadataCache | None:
    """Instantiate the configured cache backend.

    Args:
        settings: Application settings. Defaults to auto-detection.

    Returns:
        A BaseMetadataCache, or None when caching is disabled.

    Raises:
        ValueError: If an explicitly requested backend is unavailable here.
    """
    if settings is not None and not settings.cache_enabled:
        logger.debug("Metadata cache disabled")
        return None

    backend = "auto" if settings is None else settings.cache_backend
    prefix = "cee3.s3" if settings is None else settings.cache_attribute_prefix
    dir_name = ".cee3cache" if settings is None else settings.cache_dir_name

    if backend == "auto":
        backend = "ads" if AlternateStreamCacheStore.supported() else "sidecar"

    store: BaseMetadataCache
    if backend == "sidecar":
        store = SidecarCacheStore(cache_dir_name=dir_name)
    elif backend == "ads":
        if not AlternateStreamCacheStore.supported():
            raise ValueError("CACHE_BACKEND=ads requires Windows (NTFS)")
        store = AlternateStreamCacheStore(prefix=prefix)
    elif backend == "xattr":
        if not XattrCacheStore.supported():
            raise ValueError("CACHE_BACKEND=xattr requires Linux extended attributes")
        store = XattrCacheStore(prefix=prefix)
    else:
        raise ValueError(f"Unsupported cache backend: {backend!r}")

    logger.debug("Using %s metadata cache", store.name)
    return store
