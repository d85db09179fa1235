"""Data models and dataclasses for the video shrinker."""

from dataclasses import dataclass, replace
from enum import Enum
from pathlib import Path
from typing import Any, Optional


class Outcome(Enum):
    """Decision reached for one input file."""
    KEPT = "kept"
    DISCARDED_LARGER = "discarded-larger"
    DISCARDED_EQUAL = "discarded-equal"
    SKIPPED_EXISTS = "skipped-already-exists"
    FAILED = "failed"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class VideoFile:
    """A candidate input found during directory enumeration."""
    path: Path
    extension: str   # lower-cased, with leading dot
    size_bytes: int  # size at discovery time


@dataclass(frozen=True)
class OutcomeRecord:
    """Result of evaluating one completed (or abandoned) job."""
    source_path: Path
    output_path: Path
    original_size: int
    produced_size: int
    decision: Outcome
    message: Optional[str] = None

    @property
    def saved_bytes(self) -> int:
        """Bytes saved by this file; only kept outputs save anything."""
        if self.decision is Outcome.KEPT:
            return self.original_size - self.produced_size
        return 0

    @property
    def reduction_percent(self) -> float:
        """Size reduction of a kept output; 0.0 for every other decision."""
        if self.decision is not Outcome.KEPT or self.original_size == 0:
            return 0.0
        return (self.original_size - self.produced_size) / self.original_size * 100


@dataclass
class TranscodeJob:
    """
    In-flight unit of work for one VideoFile.

    ``outcome`` is set when the job ended without an output worth
    evaluating (skipped, failed or cancelled).
    """
    source: VideoFile
    output_path: Path
    original_size: int = 0
    process: Optional[Any] = None  # subprocess.Popen while FFmpeg runs
    last_total_size: Optional[int] = None
    last_out_time: Optional[float] = None  # seconds
    outcome: Optional[OutcomeRecord] = None


@dataclass(frozen=True)
class RunTotals:
    """
    Running sums across a batch.

    Discarded and failed files count their original size on both sides of the
    ledger, so only kept files move ``saved_bytes``.
    """
    original_bytes: int = 0
    kept_bytes: int = 0
    files_seen: int = 0
    kept: int = 0
    discarded_larger: int = 0
    discarded_equal: int = 0
    skipped: int = 0
    failed: int = 0
    cancelled: int = 0

    @property
    def saved_bytes(self) -> int:
        return self.original_bytes - self.kept_bytes

    @property
    def saved_percent(self) -> float:
        if self.original_bytes == 0:
            return 0.0
        return self.saved_bytes / self.original_bytes * 100

    def add(self, record: OutcomeRecord) -> "RunTotals":
        """
        Fold one OutcomeRecord into the totals.

        Args:
            record: Outcome of a single job

        Returns:
            A new RunTotals; the receiver is left untouched
        """
        decision = record.decision
        totals = replace(self, files_seen=self.files_seen + 1)

        if decision is Outcome.KEPT:
            return replace(
                totals,
                original_bytes=totals.original_bytes + record.original_size,
                kept_bytes=totals.kept_bytes + record.produced_size,
                kept=totals.kept + 1,
            )

        if decision is Outcome.SKIPPED_EXISTS:
            return replace(totals, skipped=totals.skipped + 1)
        if decision is Outcome.CANCELLED:
            return replace(totals, cancelled=totals.cancelled + 1)

        # Discards and failures: zero net effect on savings
        totals = replace(
            totals,
            original_bytes=totals.original_bytes + record.original_size,
            kept_bytes=totals.kept_bytes + record.original_size,
        )
        if decision is Outcome.DISCARDED_LARGER:
            return replace(totals, discarded_larger=totals.discarded_larger + 1)
        if decision is Outcome.DISCARDED_EQUAL:
            return replace(totals, discarded_equal=totals.discarded_equal + 1)
        return replace(totals, failed=totals.failed + 1)


@dataclass
class StatsSummary:
    """Summary statistics for a finished batch."""
    total_original_mb: float
    total_kept_mb: float
    saved_bytes: int
    saved_mb: float
    saved_percent: float
    files_seen: int
    kept: int
    discarded: int
    skipped: int
    failed: int
    cancelled: int
    elapsed_seconds: float
