# src/logging/context.py - v1
"""Contextual logging support: attach batch id and upload target to records."""

from __future__ import annotations

import contextvars
from dataclasses import dataclass
from typing import Any

# Context variables for structured logging, set per batch and per file.
_batch_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "batch_id", default=None
)
_local_path: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "local_path", default=None
)
_bucket: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "bucket", default=None
)
_key: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "key", default=None
)


@dataclass
class LogContext:
    """Immutable snapshot of current logging context."""

    batch_id: str | None = None
    local_path: str | None = None
    bucket: str | None = None
    key: str | None = None

    def as_dict(self) -> dict[str, Any]:
        """Return non-None fields as dict for JSON log injection."""
        return {k: v for k, v in self.__dict__.items() if v is not None}


def get_context() -> LogContext:
    """Snapshot current context variables."""
    return LogContext(
        batch_id=_batch_id.get(),
        local_path=_local_path.get(),
        bucket=_bucket.get(),
        key=_key.get(),
    )


def set_batch_context(batch_id: str) -> None:
    """Set batch-level context (called once per batch)."""
    _batch_id.set(batch_id)


def set_file_context(local_path: str, bucket: str, key: str) -> None:
    """Set the file being processed (called per file)."""
    _local_path.set(local_path)
    _bucket.set(bucket)
    _key.set(key)


def clear_context() -> None:
    """Reset all context variables."""
    _batch_id.set(None)
    _local_path.set(None)
    _bucket.set(None)
    _key.set(None)
