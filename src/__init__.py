# src/__init__.py - v1
"""cee3: duplicate-aware uploads to S3-compatible object storage."""

from cee3.version import __version__

__all__ = ["__version__"]
