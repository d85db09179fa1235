"""Sequential batch loop: discover, transcode, evaluate, report."""

import logging
import time
from dataclasses import dataclass
from functools import reduce
from typing import Iterable, Iterator, List, Optional, Tuple

from shrinker.console_logging import STATUS_LOGGER
from shrinker.data_models import Outcome, OutcomeRecord, RunTotals, StatsSummary, VideoFile
from shrinker.file_processor import FileProcessor
from shrinker.outcome_evaluator import OutcomeEvaluator
from shrinker.stats_tracker import build_summary, format_size, print_summary
from shrinker.stop_flag import StopFlag
from shrinker.transcode_invoker import TranscodeInvoker


def accumulate(records: Iterable[OutcomeRecord], start: Optional[RunTotals] = None) -> RunTotals:
    """Fold a sequence of OutcomeRecords into RunTotals."""
    return reduce(lambda totals, record: totals.add(record), records, start or RunTotals())


@dataclass
class BatchResult:
    """What a finished (or stopped) batch produced."""
    totals: RunTotals
    summary: StatsSummary
    video_count: int
    dir_count: int
    stopped: bool


class BatchDriver:
    """Runs the transcode-and-verify pipeline over every video in a tree, one at a time."""

    def __init__(
        self,
        file_processor: FileProcessor,
        invoker: TranscodeInvoker,
        evaluator: OutcomeEvaluator,
        stop_flag: Optional[StopFlag] = None,
        logger: Optional[logging.Logger] = None
    ):
        self.file_processor = file_processor
        self.invoker = invoker
        self.evaluator = evaluator
        self.stop_flag = stop_flag or invoker.stop_flag
        self.logger = logger or logging.getLogger(STATUS_LOGGER)

    def discover(self) -> Tuple[List[VideoFile], int]:
        """
        Enumerate the scan root once and log what was found.

        Returns:
            Tuple of (eligible video files, visited subdirectory count)
        """
        videos, dir_count = self.file_processor.find_video_files()
        total_bytes = sum(video.size_bytes for video in videos)
        self.logger.info(
            f"Found {len(videos)} video files to process in {dir_count} subdirectories "
            f"({format_size(total_bytes)})."
        )
        return videos, dir_count

    def process_video(self, video: VideoFile, index: int, total: int) -> OutcomeRecord:
        """
        Run the full pipeline for one file.

        Args:
            video: File to process
            index: Position in the batch (1-indexed)
            total: Number of files in the batch

        Returns:
            OutcomeRecord for the file; never raises for per-file problems
        """
        try:
            job = self.invoker.transcode(video, index, total)
            if job.outcome is not None:
                return job.outcome
            return self.evaluator.evaluate(video.path, job.original_size, job.output_path)
        except Exception as e:
            message = f"Unexpected error processing {video.path}: {e}"
            self.logger.error(message, exc_info=True)
            return OutcomeRecord(
                source_path=video.path,
                output_path=self.file_processor.output_path_for(video.path),
                original_size=video.size_bytes,
                produced_size=0,
                decision=Outcome.FAILED,
                message=message
            )

    def iter_outcomes(self, videos: List[VideoFile]) -> Iterator[OutcomeRecord]:
        """
        Process files strictly in order, yielding each outcome.

        Stops before the next file once a stop is requested, and right after
        a cancelled job.
        """
        total = len(videos)
        for index, video in enumerate(videos, 1):
            if self.stop_flag.is_stop_requested():
                self.logger.warning(f"Stop requested, {total - index + 1} files left unprocessed.")
                return
            record = self.process_video(video, index, total)
            yield record
            if record.decision is Outcome.CANCELLED:
                remaining = total - index
                if remaining:
                    self.logger.warning(f"Stop requested, {remaining} files left unprocessed.")
                return

    def run(self) -> BatchResult:
        """
        Discover, process and report.

        The summary is always printed, using whatever totals were
        accumulated before a stop.

        Returns:
            BatchResult with the final totals
        """
        started = time.monotonic()
        videos, dir_count = self.discover()

        totals = accumulate(self.iter_outcomes(videos))

        summary = build_summary(totals, time.monotonic() - started)
        print_summary(summary, self.logger)

        return BatchResult(
            totals=totals,
            summary=summary,
            video_count=len(videos),
            dir_count=dir_count,
            stopped=self.stop_flag.is_stop_requested()
        )
