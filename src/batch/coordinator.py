# src/batch/coordinator.py - v1
"""Batch upload coordinator.

Runs the smart uploader over an ordered list of files sharing a bucket and
key prefix. Files are processed strictly in order; a failure is recorded and
the batch moves on.
"""

from __future__ import annotations

import logging
import time
import uuid
from pathlib import Path
from typing import Callable, Iterable

from cee3.batch.models import BatchOutcome
from cee3.batch.scanner import discover_files
from cee3.logging.context import clear_context, set_batch_context, set_file_context
from cee3.upload.models import UploadResult
from cee3.upload.orchestrator import SmartUploader

logger = logging.getLogger(__name__)

# (1-based index, total files, result)
FileHook = Callable[[int, int, UploadResult], None]


def build_object_key(prefix: str, name: str) -> str:
    """Join a key prefix and a file name with exactly one slash."""
    name = name.replace("\\", "/").lstrip("/")
    prefix = (prefix or "").replace("\\", "/").strip("/")
    return f"{prefix}/{name}" if prefix else name


class BatchUploadCoordinator:
    """Apply a SmartUploader to many files and aggregate the outcomes."""

    def __init__(
        self,
        uploader: SmartUploader,
        on_file: FileHook | None = None,
    ) -> None:
        self._uploader = uploader
        self._on_file = on_file

    def run(
        self,
        paths: Iterable[str | Path],
        bucket: str,
        key_prefix: str = "",
        *,
        force: bool = False,
        metadata: dict[str, str] | None = None,
        base_dir: Path | None = None,
    ) -> BatchOutcome:
        """Smart-upload each file in order.

        Args:
            paths: Local files, processed in the given order.
            bucket: Destination bucket.
            key_prefix: Prepended to each file name to form the object key.
            force: Skip duplicate detection for every file.
            metadata: User metadata attached to every uploaded object.
            base_dir: When given, keys use the path relative to it instead
                of the bare file name.

        Raises:
            ValueError: If ``bucket`` is empty.
        """
        if not bucket:
            raise ValueError("Destination bucket is required")

        files = [Path(p) for p in paths]
        batch_id = uuid.uuid4().hex[:12]
        set_batch_context(batch_id)
        t0 = time.perf_counter()
        results: list[UploadResult] = []

        logger.info(
            "Batch %s: %d files -> s3://%s/%s", batch_id, len(files), bucket, key_prefix,
        )
        try:
            for index, path in enumerate(files, start=1):
                key = build_object_key(key_prefix, self._key_name(path, base_dir))
                set_file_context(str(path), bucket, key)
                result = self._process(path, bucket, key, force, metadata)
                results.append(result)
                if self._on_file is not None:
                    self._on_file(index, len(files), result)
        finally:
            clear_context()

        outcome = BatchOutcome.from_results(
            batch_id=batch_id,
            bucket=bucket,
            key_prefix=key_prefix,
            results=results,
            duration_seconds=round(time.perf_counter() - t0, 2),
        )
        logger.info(
            "Batch %s complete: %d uploaded, %d skipped, %d failed (of %d)",
            batch_id, outcome.uploaded, outcome.skipped, outcome.failed, outcome.total,
        )
        return outcome

    def run_directory(
        self,
        directory: Path,
        bucket: str,
        key_prefix: str = "",
        *,
        pattern: str = "*",
        recursive: bool = False,
        force: bool = False,
        metadata: dict[str, str] | None = None,
        cache_dir_name: str = ".cee3cache",
    ) -> BatchOutcome:
        """Discover files in a directory and smart-upload them.

        Recursive scans keep the relative path in the key so files with the
        same name in different subdirectories do not collide.
        """
        files = discover_files(directory, pattern, recursive, cache_dir_name)
        return self.run(
            files,
            bucket,
            key_prefix,
            force=force,
            metadata=metadata,
            base_dir=directory if recursive else None,
        )

    def _process(
        self,
        path: Path,
        bucket: str,
        key: str,
        force: bool,
        metadata: dict[str, str] | None,
    ) -> UploadResult:
        try:
            return self._uploader.upload(
                path, bucket, key, force=force, metadata=metadata,
            )
        except Exception as e:
            logger.exception("Failed to process %s", path)
            return UploadResult(
                local_path=str(path),
                bucket=bucket,
                key=key,
                status="failed",
                reason=str(e) or type(e).__name__,
            )

    @staticmethod
    def _key_name(path: Path, base_dir: Path | None) -> str:
        if base_dir is None:
            return path.name
        try:
            return path.relative_to(base_dir).as_posix()
        except ValueError:
            return path.name
