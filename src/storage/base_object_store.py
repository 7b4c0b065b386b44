# src/storage/base_object_store.py - v1
"""Abstract remote object store consumed by the smart uploader.

Only the calls needed for the upload-or-skip decision are part of this
interface: existence, identifier/metadata lookup and upload.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path

from cee3.storage.models import ObjectInfo


class RemoteUnavailableError(Exception):
    """Network or service failure while talking to the object store."""

    def __init__(self, operation: str, bucket: str, key: str, cause: object) -> None:
        self.operation = operation
        self.bucket = bucket
        self.key = key
        self.cause = cause
        super().__init__(f"{operation} failed for s3://{bucket}/{key}: {cause}")


class BaseObjectStore(ABC):
    """Unified interface for remote object storage backends."""

    @abstractmethod
    def object_exists(self, bucket: str, key: str) -> bool:
        """Check whether an object exists.

        Raises:
            RemoteUnavailableError: If existence cannot be determined.
        """

    @abstractmethod
    def head_object(self, bucket: str, key: str) -> ObjectInfo:
        """Fetch object metadata without its content.

        Raises:
            FileNotFoundError: If the object does not exist.
            RemoteUnavailableError: For service or network errors.
        """

    @abstractmethod
    def put_object(
        self,
        bucket: str,
        key: str,
        local_path: str | Path,
        metadata: dict[str, str] | None = None,
    ) -> ObjectInfo:
        """Upload a local file and return the stored object's metadata.

        Raises:
            RemoteUnavailableError: For service or network errors.
        """

    def get_content_identifier(self, bucket: str, key: str) -> str:
        """Return the object's ETag (quoted or unquoted, simple or composite)."""
        return self.head_object(bucket, key).etag
