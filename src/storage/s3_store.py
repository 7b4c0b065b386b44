# src/storage/s3_store.py - v1
"""S3-compatible object store (OBJECT_STORE_BACKEND=s3).

Supports AWS S3, MinIO, and other S3-compatible storage through boto3.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import boto3
from botocore import UNSIGNED
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from cee3.storage.base_object_store import BaseObjectStore, RemoteUnavailableError
from cee3.storage.models import ObjectInfo

logger = logging.getLogger(__name__)

_NOT_FOUND_CODES = {"404", "NoSuchKey", "NotFound"}


class S3ObjectStore(BaseObjectStore):
    """Object store backed by a boto3 S3 client."""

    def __init__(
        self,
        client: Any = None,
        *,
        region: str | None = None,
        endpoint_url: str | None = None,
        profile: str | None = None,
        access_key_id: str | None = None,
        secret_access_key: str | None = None,
        anonymous: bool = False,
        force_path_style: bool = False,
        max_attempts: int = 5,
    ) -> None:
        """Initialize the store.

        Args:
            client: Pre-built boto3 S3 client. Built from the other
                arguments when omitted.
            region: AWS region (uses the boto3 default chain if not set).
            endpoint_url: Custom endpoint for MinIO/compatible storage.
            profile: Named profile from the shared AWS config files.
            access_key_id: Static access key (with ``secret_access_key``).
            secret_access_key: Static secret key.
            anonymous: Send unsigned requests (public buckets).
            force_path_style: Use path-style addressing (MinIO).
            max_attempts: Total attempts per call in botocore's standard
                retry mode.
        """
        if client is None:
            client = _build_client(
                region=region,
                endpoint_url=endpoint_url,
                profile=profile,
                access_key_id=access_key_id,
                secret_access_key=secret_access_key,
                anonymous=anonymous,
                force_path_style=force_path_style,
                max_attempts=max_attempts,
            )
        self._s3 = client

    def object_exists(self, bucket: str, key: str) -> bool:
        """Check if an S3 object exists (HEAD; 404 means absent)."""
        try:
            self._s3.head_object(Bucket=bucket, Key=key)
            return True
        except ClientError as e:
            if _is_not_found(e):
                return False
            raise RemoteUnavailableError("HeadObject", bucket, key, e) from e
        except BotoCoreError as e:
            raise RemoteUnavailableError("HeadObject", bucket, key, e) from e

    def head_object(self, bucket: str, key: str) -> ObjectInfo:
        """Read object metadata via HEAD."""
        try:
            response = self._s3.head_object(Bucket=bucket, Key=key)
        except ClientError as e:
            if _is_not_found(e):
                raise FileNotFoundError(f"Object not found: s3://{bucket}/{key}") from e
            raise RemoteUnavailableError("HeadObject", bucket, key, e) from e
        except BotoCoreError as e:
            raise RemoteUnavailableError("HeadObject", bucket, key, e) from e

        return ObjectInfo(
            bucket=bucket,
            key=key,
            etag=response.get("ETag", ""),
            size=response.get("ContentLength"),
            last_modified=response.get("LastModified"),
            content_type=response.get("ContentType"),
            version_id=_version_or_none(response.get("VersionId")),
            metadata=dict(response.get("Metadata") or {}),
        )

    def put_object(
        self,
        bucket: str,
        key: str,
        local_path: str | Path,
        metadata: dict[str, str] | None = None,
    ) -> ObjectInfo:
        """Upload a file in a single PUT so the ETag stays a plain MD5."""
        path = Path(local_path)
        size = path.stat().st_size

        try:
            with path.open("rb") as body:
                response = self._s3.put_object(
                    Bucket=bucket,
                    Key=key,
                    Body=body,
                    Metadata=dict(metadata or {}),
                )
        except ClientError as e:
            raise RemoteUnavailableError("PutObject", bucket, key, e) from e
        except BotoCoreError as e:
            raise RemoteUnavailableError("PutObject", bucket, key, e) from e

        logger.debug("S3 put: s3://%s/%s (%d bytes)", bucket, key, size)
        return ObjectInfo(
            bucket=bucket,
            key=key,
            etag=response.get("ETag", ""),
            size=size,
            version_id=_version_or_none(response.get("VersionId")),
            is_latest=True if response.get("VersionId") else None,
            metadata=dict(metadata or {}),
        )


def _build_client(
    *,
    region: str | None,
    endpoint_url: str | None,
    profile: str | None,
    access_key_id: str | None,
    secret_access_key: str | None,
    anonymous: bool,
    force_path_style: bool,
    max_attempts: int,
) -> Any:
    """Build a boto3 S3 client from connection options."""
    config_kwargs: dict[str, Any] = {
        "retries": {"max_attempts": max_attempts, "mode": "standard"},
    }
    if force_path_style:
        config_kwargs["s3"] = {"addressing_style": "path"}
    if anonymous:
        config_kwargs["signature_version"] = UNSIGNED

    session = boto3.session.Session(
        profile_name=profile or None,
        region_name=region or None,
    )

    kwargs: dict[str, Any] = {"config": Config(**config_kwargs)}
    if endpoint_url:
        kwargs["endpoint_url"] = endpoint_url
    if access_key_id and secret_access_key:
        kwargs["aws_access_key_id"] = access_key_id
        kwargs["aws_secret_access_key"] = secret_access_key

    return session.client("s3", **kwargs)


def _is_not_found(error: ClientError) -> bool:
    """True if a ClientError reports a missing object."""
    code = str(error.response.get("Error", {}).get("Code", ""))
    status = error.response.get("ResponseMetadata", {}).get("HTTPStatusCode")
    return code in _NOT_FOUND_CODES or status == 404


def _version_or_none(version_id: str | None) -> str | None:
    """S3 reports ``"null"`` as the version of objects in unversioned buckets."""
    if not version_id or version_id == "null":
        return None
    return version_id
