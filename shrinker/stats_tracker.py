"""Savings summary built from the batch's RunTotals."""

import logging

from shrinker.data_models import RunTotals, StatsSummary


BYTES_PER_MB = 1024 * 1024


def format_size(size_bytes: int) -> str:
    """
    Convert bytes to a human-readable size string.

    Args:
        size_bytes: Size in bytes

    Returns:
        Formatted size (e.g., "512 B", "1.50 KB", "3.20 MB", "1.05 GB")
    """
    if size_bytes < 1024:
        return f"{size_bytes} B"
    elif size_bytes < 1024 * 1024:
        return f"{size_bytes / 1024:.2f} KB"
    elif size_bytes < 1024 * 1024 * 1024:
        return f"{size_bytes / 1024 / 1024:.2f} MB"
    else:
        return f"{size_bytes / 1024 / 1024 / 1024:.2f} GB"


def format_time(seconds: float) -> str:
    """
    Format seconds into human-readable time string.

    Args:
        seconds: Time in seconds

    Returns:
        Formatted time string (e.g., "1h 23m 45s" or "5m 30s" or "45s")
    """
    if seconds < 60:
        return f"{seconds:.0f}s"
    elif seconds < 3600:
        minutes = int(seconds // 60)
        secs = int(seconds % 60)
        return f"{minutes}m {secs}s"
    else:
        hours = int(seconds // 3600)
        minutes = int((seconds % 3600) // 60)
        secs = int(seconds % 60)
        return f"{hours}h {minutes}m {secs}s"


def build_summary(totals: RunTotals, elapsed_seconds: float = 0.0) -> StatsSummary:
    """
    Turn accumulated totals into report figures.

    Args:
        totals: Totals after the last job
        elapsed_seconds: Wall-clock runtime of the batch

    Returns:
        StatsSummary with sizes in megabytes
    """
    return StatsSummary(
        total_original_mb=totals.original_bytes / BYTES_PER_MB,
        total_kept_mb=totals.kept_bytes / BYTES_PER_MB,
        saved_bytes=totals.saved_bytes,
        saved_mb=totals.saved_bytes / BYTES_PER_MB,
        saved_percent=totals.saved_percent,
        files_seen=totals.files_seen,
        kept=totals.kept,
        discarded=totals.discarded_larger + totals.discarded_equal,
        skipped=totals.skipped,
        failed=totals.failed,
        cancelled=totals.cancelled,
        elapsed_seconds=elapsed_seconds,
    )


def print_summary(summary: StatsSummary, logger: logging.Logger) -> None:
    """Write the final savings report to the status sink."""
    plain = {"plain": True}
    logger.info("-" * 36, extra=plain)
    logger.info(
        f"Total Space Saved: {summary.saved_mb:.2f} MB ({summary.saved_percent:.2f}%)",
        extra=plain
    )
    logger.info(
        f"Original: {summary.total_original_mb:.2f} MB, After: {summary.total_kept_mb:.2f} MB",
        extra=plain
    )
    logger.info("-" * 36, extra=plain)
    logger.info(
        f"Files: {summary.files_seen} processed, {summary.kept} compressed, "
        f"{summary.discarded} discarded, {summary.skipped} skipped, {summary.failed} failed"
        + (f", {summary.cancelled} cancelled" if summary.cancelled else ""),
        extra=plain
    )
    if summary.elapsed_seconds > 0:
        logger.info(f"Total Runtime: {format_time(summary.elapsed_seconds)}", extra=plain)
