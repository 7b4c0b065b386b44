# src/storage/store_factory.py - v1
"""Factory: instantiate the remote object store from configuration."""

from __future__ import annotations

from cee3.config.settings import Settings
from cee3.storage.base_object_store import BaseObjectStore


def create_object_store(settings: Settings) -> BaseObjectStore:
    """Create the object store selected by OBJECT_STORE_BACKEND.

    Raises:
        ValueError: If the backend is not supported or misconfigured.
    """
    if settings.object_store_backend == "local":
        from cee3.storage.local_store import LocalObjectStore
        if settings.local_store_root is None:
            raise ValueError(
                "LOCAL_STORE_ROOT must be set when OBJECT_STORE_BACKEND=local"
            )
        return LocalObjectStore(root=settings.local_store_root)

    if settings.object_store_backend == "s3":
        from cee3.storage.s3_store import S3ObjectStore
        return S3ObjectStore(
            region=settings.s3_region or None,
            endpoint_url=settings.s3_endpoint_url or None,
            profile=settings.aws_profile or None,
            access_key_id=settings.s3_access_key_id or None,
            secret_access_key=settings.s3_secret_access_key or None,
            anonymous=settings.s3_anonymous,
            force_path_style=settings.s3_force_path_style,
            max_attempts=settings.s3_max_attempts,
        )

    raise ValueError(f"Unsupported object store backend: {settings.object_store_backend!r}")
