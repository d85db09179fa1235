#!/usr/bin/env python3
"""
Video Shrinker
Transcodes every video under the current directory and keeps the smaller copies.
"""

import sys
from pathlib import Path

from rich.console import Console
from rich.markup import escape

from shrinker.batch_driver import BatchDriver
from shrinker.config_manager import ConfigManager, ConfigurationError
from shrinker.console_logging import setup_logging
from shrinker.file_processor import FileProcessor
from shrinker.outcome_evaluator import OutcomeEvaluator
from shrinker.stop_flag import StopFlag
from shrinker.transcode_invoker import TranscodeInvoker


EXIT_INTERRUPTED = 130


def main():
    """Main entry point for the video shrinker."""
    error_console = Console(stderr=True, highlight=False)

    # Setup errors are fatal: nothing is processed
    try:
        config = ConfigManager()
    except ConfigurationError as e:
        error_console.print(f"[bold red]ERROR:[/bold red] {escape(str(e))}")
        return 1

    try:
        sinks = setup_logging(config.log_file)
    except OSError as e:
        error_console.print(f"[bold red]ERROR:[/bold red] Error opening log file: {escape(str(e))}")
        return 1

    logger = sinks.status
    try:
        stop_flag = StopFlag.get_instance()
        stop_flag.register_signal_handlers()

        file_processor = FileProcessor(
            Path("."),
            config.video_extensions,
            config.marker_directory,
            logger=logger
        )
        invoker = TranscodeInvoker(
            file_processor,
            video_codec=config.video_codec,
            audio_codec=config.audio_codec,
            ffmpeg_path=config.ffmpeg_path,
            ffprobe_path=config.ffprobe_path,
            max_line_length=config.max_line_length,
            stop_flag=stop_flag,
            show_progress=config.show_progress,
            status_logger=logger,
            ffmpeg_logger=sinks.ffmpeg
        )
        evaluator = OutcomeEvaluator(file_processor, logger=logger)
        driver = BatchDriver(file_processor, invoker, evaluator, stop_flag=stop_flag, logger=logger)

        result = driver.run()
        return EXIT_INTERRUPTED if result.stopped else 0

    except KeyboardInterrupt:
        logger.warning("Interrupted again, aborting.")
        return EXIT_INTERRUPTED
    finally:
        sinks.close()


if __name__ == "__main__":
    sys.exit(main())
