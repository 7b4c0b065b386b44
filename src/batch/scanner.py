# src/batch/scanner.py - v1
"""Batch scanner: discover local files to upload."""

from __future__ import annotations

import logging
from pathlib import Path

logger = logging.getLogger(__name__)


def discover_files(
    directory: Path,
    pattern: str = "*",
    recursive: bool = False,
    cache_dir_name: str = ".cee3cache",
) -> list[Path]:
    """List regular files in a directory matching a glob pattern.

    Args:
        directory: Directory to scan.
        pattern: Glob pattern applied to file names (e.g. "*.csv").
        recursive: If True, scan subdirectories recursively.
        cache_dir_name: Sidecar cache directory to leave out.

    Returns:
        Sorted list of matching files.

    Raises:
        ValueError: If ``directory`` is not a directory.
    """
    if not directory.is_dir():
        msg = f"Not a directory: {directory}"
        raise ValueError(msg)

    pattern_fn = directory.rglob if recursive else directory.glob
    files = [
        path for path in sorted(pattern_fn(pattern or "*"))
        if path.is_file()
        and cache_dir_name not in path.relative_to(directory).parts[:-1]
    ]

    logger.info(
        "Scanned %s: %d files matching %r (recursive=%s)",
        directory, len(files), pattern, recursive,
    )
    return files
