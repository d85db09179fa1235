"""Keeps or discards a transcoded file based on its size."""

import logging
from dataclasses import replace
from pathlib import Path
from typing import Optional

from shrinker.console_logging import STATUS_LOGGER, SUCCESS
from shrinker.data_models import Outcome, OutcomeRecord
from shrinker.file_processor import FileProcessor
from shrinker.stats_tracker import BYTES_PER_MB


def percent_of(part: float, whole: float) -> float:
    """Return ``part / whole * 100``, or 0.0 when ``whole`` is zero."""
    if whole == 0:
        return 0.0
    return part / whole * 100


class OutcomeEvaluator:
    """Compares original and produced sizes and acts on the result."""

    def __init__(self, file_processor: FileProcessor, logger: Optional[logging.Logger] = None):
        self.file_processor = file_processor
        self.logger = logger or logging.getLogger(STATUS_LOGGER)

    def evaluate(self, source_path: Path, original_size: int, produced_path: Path) -> OutcomeRecord:
        """
        Decide whether to keep a transcoded file.

        A smaller output is kept. An output that is larger or the same size is
        deleted and the original counts on both sides of the ledger.

        Args:
            source_path: Path of the input video
            original_size: Size of the input in bytes, measured before transcoding
            produced_path: Path of the transcoded file

        Returns:
            OutcomeRecord describing the decision
        """
        try:
            produced_size = self.file_processor.get_file_size(produced_path)
        except OSError as e:
            message = f"Error getting compressed file size: {e}"
            self.logger.warning(message)
            return OutcomeRecord(
                source_path=source_path,
                output_path=produced_path,
                original_size=original_size,
                produced_size=0,
                decision=Outcome.FAILED,
                message=message
            )

        delta = produced_size - original_size

        if delta < 0:
            record = OutcomeRecord(
                source_path=source_path,
                output_path=produced_path,
                original_size=original_size,
                produced_size=produced_size,
                decision=Outcome.KEPT
            )
            message = (
                f"'{source_path}' to '{produced_path}' - "
                f"Original size: {original_size / BYTES_PER_MB:.2f} MB, "
                f"Compressed size: {produced_size / BYTES_PER_MB:.2f} MB "
                f"({record.reduction_percent:.2f}% reduction)"
            )
            self.logger.log(SUCCESS, message)
            return replace(record, message=message)

        self.file_processor.remove_file(produced_path)

        if delta > 0:
            decision = Outcome.DISCARDED_LARGER
            message = (
                f"{produced_path} is larger than original {source_path} by "
                f"{delta / BYTES_PER_MB:.2f} MB ({percent_of(delta, original_size):.2f}% increase). "
                f"Deleting compressed file."
            )
        else:
            decision = Outcome.DISCARDED_EQUAL
            message = (
                f"{produced_path} is the same size as the original {source_path}. "
                f"Deleting compressed file."
            )
        self.logger.warning(message)

        return OutcomeRecord(
            source_path=source_path,
            output_path=produced_path,
            original_size=original_size,
            produced_size=produced_size,
            decision=decision,
            message=message
        )
