# src/cache/fingerprint.py - v1
"""Whole-file content fingerprinting and remote identifier matching.

The local digest is an MD5 rendered as 32 lowercase hex characters, which is
bit-for-bit the ETag S3 returns for single-part uploads. Multipart uploads
produce composite ETags (``<md5-of-part-md5s>-<part-count>``) that cannot be
verified against a whole-file hash, so they never match.
"""

from __future__ import annotations

import hashlib
from pathlib import Path
from typing import Callable

DEFAULT_CHUNK_SIZE = 81920

ProgressCallback = Callable[[int], None]


def compute_digest(
    path: str | Path,
    progress: ProgressCallback | None = None,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> str:
    """Compute the MD5 digest of a file by streaming it in chunks.

    Args:
        path: Local file to hash.
        progress: Called after every chunk with the cumulative bytes read.
        chunk_size: Read size in bytes.

    Returns:
        32-character lowercase hex digest.

    Raises:
        FileNotFoundError: If the file does not exist.
    """
    file_path = Path(path)
    if not file_path.is_file():
        raise FileNotFoundError(f"File not found: {file_path}")
    if chunk_size <= 0:
        raise ValueError("chunk_size must be > 0")

    md5 = hashlib.md5()  # noqa: S324
    total_read = 0
    with file_path.open("rb") as stream:
        while True:
            chunk = stream.read(chunk_size)
            if not chunk:
                break
            md5.update(chunk)
            total_read += len(chunk)
            if progress is not None:
                progress(total_read)

    return md5.hexdigest()


def strip_quotes(identifier: str) -> str:
    """Remove surrounding double quotes from an ETag-style identifier."""
    return identifier.strip().strip('"')


def is_composite(identifier: str) -> bool:
    """True if the identifier was produced by a multipart upload."""
    return "-" in strip_quotes(identifier)


def matches(local_digest: str, remote_identifier: str) -> bool:
    """Compare a local whole-file digest with a remote content identifier.

    Composite identifiers are never reported as matching.
    """
    if is_composite(remote_identifier):
        return False
    return identifiers_equal(local_digest, remote_identifier)


def identifiers_equal(a: str, b: str) -> bool:
    """Quote-insensitive, case-insensitive identifier equality."""
    return strip_quotes(a).lower() == strip_quotes(b).lower()
