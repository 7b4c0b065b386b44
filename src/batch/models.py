# src/batch/models.py - v1
"""Batch upload models: BatchOutcome."""

from __future__ import annotations

from pydantic import BaseModel, Field, model_validator

from cee3.upload.models import UploadResult


class BatchOutcome(BaseModel):
    """Summary of a batch smart upload.

    Invariant: uploaded + skipped + failed == total.
    """

    batch_id: str
    bucket: str
    key_prefix: str = ""
    uploaded: int = 0
    skipped: int = 0
    failed: int = 0
    total: int = 0
    results: list[UploadResult] = Field(default_factory=list)
    duration_seconds: float = 0.0

    @model_validator(mode="after")
    def validate_counts(self) -> BatchOutcome:
        if self.uploaded + self.skipped + self.failed != self.total:
            raise ValueError(
                f"uploaded ({self.uploaded}) + skipped ({self.skipped}) + "
                f"failed ({self.failed}) != total ({self.total})"
            )
        return self

    @classmethod
    def from_results(
        cls,
        batch_id: str,
        bucket: str,
        results: list[UploadResult],
        key_prefix: str = "",
        duration_seconds: float = 0.0,
    ) -> BatchOutcome:
        """Tally a list of per-file results."""
        return cls(
            batch_id=batch_id,
            bucket=bucket,
            key_prefix=key_prefix,
            uploaded=sum(1 for r in results if r.uploaded),
            skipped=sum(1 for r in results if r.skipped),
            failed=sum(1 for r in results if r.failed),
            total=len(results),
            results=list(results),
            duration_seconds=duration_seconds,
        )
