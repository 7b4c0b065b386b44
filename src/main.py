# src/main.py - v1
"""CLI entry point: upload, batch, cache, hash commands.

Usage:
    cee3 upload <file> <bucket> <key> [--force] [--meta k=v ...]
    cee3 batch <directory> <bucket> [--prefix P] [--pattern GLOB] [--recursive] [--force]
    cee3 cache <file> [--clear]
    cee3 hash <file>
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from cee3.version import __version__

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    from pydantic import ValidationError

    from cee3.config.settings import ConfigurationError, load_settings

    try:
        settings = load_settings()
    except (ConfigurationError, ValidationError) as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return 1

    _setup_logging(settings, args)

    try:
        return args.func(args, settings)
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    except Exception as exc:
        logger.error("Fatal error: %s", exc, exc_info=args.verbose)
        return 1


def _build_parser() -> argparse.ArgumentParser:
    """Build CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="cee3",
        description=f"cee3 v{__version__}: duplicate-aware uploads to S3",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Enable debug logging",
    )
    parser.add_argument(
        "--log-format", choices=["json", "text"], default=None,
        help="Log output format (default: LOG_FORMAT setting)",
    )

    subparsers = parser.add_subparsers(dest="command")

    # --- upload ---
    p_upload = subparsers.add_parser(
        "upload", help="Upload a file unless the same content is already there",
    )
    p_upload.add_argument("file", type=Path, help="Local file")
    p_upload.add_argument("bucket", help="Destination bucket")
    p_upload.add_argument("key", help="Destination object key")
    p_upload.add_argument(
        "-f", "--force", action="store_true",
        help="Upload without duplicate detection",
    )
    p_upload.add_argument(
        "--meta", action="append", default=[], metavar="KEY=VALUE",
        help="User metadata for the object (repeatable)",
    )
    p_upload.set_defaults(func=_cmd_upload)

    # --- batch ---
    p_batch = subparsers.add_parser(
        "batch", help="Smart-upload every matching file in a directory",
    )
    p_batch.add_argument("directory", type=Path, help="Directory to scan")
    p_batch.add_argument("bucket", help="Destination bucket")
    p_batch.add_argument(
        "-p", "--prefix", default="",
        help="Key prefix for uploaded objects",
    )
    p_batch.add_argument(
        "--pattern", default=None,
        help="Glob pattern for file names (default: BATCH_PATTERN setting)",
    )
    p_batch.add_argument(
        "-r", "--recursive", action="store_true", default=None,
        help="Scan subdirectories",
    )
    p_batch.add_argument(
        "-f", "--force", action="store_true",
        help="Upload without duplicate detection",
    )
    p_batch.add_argument(
        "--meta", action="append", default=[], metavar="KEY=VALUE",
        help="User metadata for every object (repeatable)",
    )
    p_batch.set_defaults(func=_cmd_batch)

    # --- cache ---
    p_cache = subparsers.add_parser(
        "cache", help="Show (or clear) the cached S3 info of a file",
    )
    p_cache.add_argument("file", type=Path, help="Local file")
    p_cache.add_argument(
        "--clear", action="store_true",
        help="Remove the cached info",
    )
    p_cache.set_defaults(func=_cmd_cache)

    # --- hash ---
    p_hash = subparsers.add_parser(
        "hash", help="Print the MD5 digest that S3 would report as ETag",
    )
    p_hash.add_argument("file", type=Path, help="Local file")
    p_hash.set_defaults(func=_cmd_hash)

    return parser


def _cmd_upload(args: argparse.Namespace, settings) -> int:
    """Execute a single smart upload."""
    file_path: Path = args.file
    if not file_path.is_file():
        logger.error("File not found: %s", file_path)
        return 1

    uploader = _build_uploader(settings)
    result = uploader.upload(
        file_path, args.bucket, args.key,
        force=args.force, metadata=_parse_metadata(args.meta),
    )

    print(f"\n{_STATUS_LABELS[result.status]}: {file_path.name} -> s3://{result.bucket}/{result.key}")
    print(f"  Reason: {result.reason}")
    if result.etag:
        print(f"  ETag:   {result.etag}")
    if result.version_id:
        print(f"  Version: {result.version_id}")
    return 1 if result.failed else 0


def _cmd_batch(args: argparse.Namespace, settings) -> int:
    """Execute a batch smart upload over a directory."""
    from cee3.batch.coordinator import BatchUploadCoordinator

    directory: Path = args.directory
    if not directory.is_dir():
        logger.error("Not a directory: %s", directory)
        return 1

    coordinator = BatchUploadCoordinator(
        _build_uploader(settings), on_file=_print_file_result,
    )
    outcome = coordinator.run_directory(
        directory,
        args.bucket,
        args.prefix,
        pattern=args.pattern or settings.batch_pattern,
        recursive=settings.batch_recursive if args.recursive is None else args.recursive,
        force=args.force,
        metadata=_parse_metadata(args.meta),
        cache_dir_name=settings.cache_dir_name,
    )

    print("\nBatch complete:")
    print(f"  Total:     {outcome.total}")
    print(f"  Uploaded:  {outcome.uploaded}")
    print(f"  Skipped:   {outcome.skipped}")
    print(f"  Failed:    {outcome.failed}")
    print(f"  Duration:  {outcome.duration_seconds:.1f}s")
    return 1 if outcome.failed else 0


def _cmd_cache(args: argparse.Namespace, settings) -> int:
    """Display or clear the cached S3 info of a file."""
    from cee3.cache.cache_factory import create_cache_store

    cache = create_cache_store(settings)
    if cache is None:
        print("Metadata cache is disabled (CACHE_ENABLED=false)")
        return 1

    print(cache.describe(args.file))
    if args.clear:
        if not cache.clear(args.file):
            print("Could not clear cache")
            return 1
        print("Cache cleared")
    return 0


def _cmd_hash(args: argparse.Namespace, settings) -> int:
    """Print the content digest of a file."""
    from cee3.cache.fingerprint import compute_digest

    file_path: Path = args.file
    if not file_path.is_file():
        logger.error("File not found: %s", file_path)
        return 1

    total = file_path.stat().st_size
    digest = compute_digest(
        file_path,
        progress=lambda read: _print_hash_progress(file_path, read, total),
        chunk_size=settings.hash_chunk_size,
    )
    print(digest)
    return 0


def _build_uploader(settings):
    """Wire object store, cache and progress output into a SmartUploader."""
    from cee3.cache.cache_factory import create_cache_store
    from cee3.storage.store_factory import create_object_store
    from cee3.upload.orchestrator import SmartUploader

    return SmartUploader(
        create_object_store(settings),
        create_cache_store(settings),
        chunk_size=settings.hash_chunk_size,
        progress=_print_hash_progress,
    )


def _parse_metadata(pairs: list[str]) -> dict[str, str] | None:
    """Parse repeated KEY=VALUE options."""
    if not pairs:
        return None
    metadata: dict[str, str] = {}
    for pair in pairs:
        name, sep, value = pair.partition("=")
        if not sep or not name.strip():
            raise ValueError(f"Invalid metadata {pair!r}, expected KEY=VALUE")
        metadata[name.strip()] = value
    return metadata


_STATUS_LABELS = {
    "uploaded": "Uploaded",
    "skipped_duplicate": "Skipped (duplicate)",
    "failed": "Failed",
}


def _print_file_result(index: int, total: int, result) -> None:
    """Per-file line for batch runs."""
    name = Path(result.local_path).name
    print(f"[{index}/{total}] {_STATUS_LABELS[result.status]}: {name} ({result.reason})")


def _print_hash_progress(path: Path, read: int, total: int) -> None:
    """Single-line hashing progress on stderr."""
    if total <= 0:
        return
    pct = read / total * 100
    mb_read = read / (1024 * 1024)
    mb_total = total / (1024 * 1024)
    sys.stderr.write(f"\r  Calculating hash: {pct:5.1f}% ({mb_read:.1f}/{mb_total:.1f} MB)")
    if read >= total:
        sys.stderr.write("\n")
    sys.stderr.flush()


def _setup_logging(settings, args: argparse.Namespace) -> None:
    """Configure logging for CLI usage."""
    from cee3.logging.logger import setup_logging

    setup_logging(
        level="DEBUG" if args.verbose else settings.log_level,
        log_format=args.log_format or settings.log_format,
        log_file=settings.log_file,
        rotation=settings.log_rotation,
        retention=settings.log_retention,
    )


if __name__ == "__main__":
    sys.exit(main())
