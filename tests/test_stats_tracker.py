from __future__ import annotations

import logging
from pathlib import Path

import pytest

from shrinker.data_models import Outcome, OutcomeRecord, RunTotals
from shrinker.stats_tracker import build_summary, format_size, format_time, print_summary

MB = 1024 * 1024


@pytest.mark.parametrize(
    "size, expected",
    [
        (0, "0 B"),
        (1023, "1023 B"),
        (1536, "1.50 KB"),
        (5 * MB, "5.00 MB"),
        (3 * 1024 * MB, "3.00 GB"),
    ],
)
def test_format_size(size: int, expected: str) -> None:
    assert format_size(size) == expected


def test_format_time() -> None:
    assert format_time(45) == "45s"
    assert format_time(330) == "5m 30s"
    assert format_time(5025) == "1h 23m 45s"


def test_build_summary_from_totals() -> None:
    totals = RunTotals().add(
        OutcomeRecord(Path("a.mp4"), Path("Completed/a.mp4"), 100 * MB, 60 * MB, Outcome.KEPT)
    ).add(
        OutcomeRecord(Path("b.mp4"), Path("Completed/b.mp4"), 100 * MB, 120 * MB, Outcome.DISCARDED_LARGER)
    )

    summary = build_summary(totals, elapsed_seconds=12.0)

    assert summary.saved_mb == pytest.approx(40.0)
    assert summary.saved_percent == pytest.approx(20.0)
    assert summary.total_original_mb == pytest.approx(200.0)
    assert (summary.kept, summary.discarded) == (1, 1)


def test_print_summary_emits_savings_line(caplog: pytest.LogCaptureFixture) -> None:
    logger = logging.getLogger("test.summary")
    with caplog.at_level(logging.INFO, logger="test.summary"):
        print_summary(build_summary(RunTotals()), logger)

    messages = [r.getMessage() for r in caplog.records]
    assert "Total Space Saved: 0.00 MB (0.00%)" in messages
    assert "Original: 0.00 MB, After: 0.00 MB" in messages
    assert all(getattr(r, "plain", False) for r in caplog.records)


def test_print_summary_reports_sizes_before_and_after(caplog: pytest.LogCaptureFixture) -> None:
    totals = RunTotals().add(
        OutcomeRecord(Path("a.mp4"), Path("Completed/a.mp4"), 100 * MB, 60 * MB, Outcome.KEPT)
    )
    logger = logging.getLogger("test.summary")
    with caplog.at_level(logging.INFO, logger="test.summary"):
        print_summary(build_summary(totals), logger)

    messages = [r.getMessage() for r in caplog.records]
    assert "Original: 100.00 MB, After: 60.00 MB" in messages
