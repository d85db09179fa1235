"""Runs FFmpeg on one input file and streams its diagnostics to the log."""

import logging
import subprocess
import time
from pathlib import Path
from typing import Callable, Iterator, List, Optional, TextIO

from shrinker.console_logging import FFMPEG_LOGGER, STATUS_LOGGER
from shrinker.data_models import Outcome, OutcomeRecord, TranscodeJob, VideoFile
from shrinker.file_processor import FileProcessor
from shrinker.progress_bar import ProgressBar
from shrinker.stop_flag import StopFlag


DEFAULT_MAX_LINE_LENGTH = 256 * 1024


class TranscodeError(Exception):
    """Base class for failures of a single transcode."""
    pass


class MarkerDirectoryError(TranscodeError):
    """The output directory beside the source could not be created."""
    pass


class DiagnosticPipeError(TranscodeError):
    """FFmpeg's stderr pipe was not available."""
    pass


class DiagnosticStreamError(TranscodeError):
    """Reading FFmpeg's stderr failed part way through."""
    pass


class ProcessStartError(TranscodeError):
    """FFmpeg could not be launched."""
    pass


class ProcessExitError(TranscodeError):
    """FFmpeg exited non-zero or was killed."""

    def __init__(self, returncode: int):
        self.returncode = returncode
        if returncode < 0:
            detail = f"killed by signal {-returncode}"
        else:
            detail = f"exit status {returncode}"
        super().__init__(f"Error waiting for FFmpeg to finish: {detail}")


class TranscodeCancelled(TranscodeError):
    """The job was stopped by an interrupt."""
    pass


def parse_progress_line(line: str):
    """
    Split an FFmpeg ``-progress`` line into key and value.

    Args:
        line: One diagnostic line

    Returns:
        Tuple of (key, value), or (None, None) for other output
    """
    key, sep, value = line.partition("=")
    key = key.strip()
    if not sep or not key or " " in key:
        return None, None
    return key, value.strip()


class TranscodeInvoker:
    """Launches FFmpeg for one source file and waits for it to finish."""

    def __init__(
        self,
        file_processor: FileProcessor,
        video_codec: str,
        audio_codec: str = "copy",
        ffmpeg_path: str = "ffmpeg",
        ffprobe_path: str = "ffprobe",
        max_line_length: int = DEFAULT_MAX_LINE_LENGTH,
        stop_flag: Optional[StopFlag] = None,
        show_progress: bool = True,
        status_logger: Optional[logging.Logger] = None,
        ffmpeg_logger: Optional[logging.Logger] = None,
        popen: Optional[Callable[..., subprocess.Popen]] = None,
        progress_stream: Optional[TextIO] = None
    ):
        """
        Initialize TranscodeInvoker.

        Args:
            file_processor: Computes output paths and touches the file system
            video_codec: FFmpeg video encoder name
            audio_codec: FFmpeg audio encoder name ("copy" passes audio through)
            ffmpeg_path: FFmpeg executable
            ffprobe_path: FFprobe executable, used for the progress bar
            max_line_length: Longest diagnostic line read in one piece
            stop_flag: Cancellation token (default: a private, never-set flag)
            show_progress: Render the console progress line
            status_logger: Console and report sink
            ffmpeg_logger: Report-only sink for raw FFmpeg output
            popen: Process factory (default: subprocess.Popen)
            progress_stream: Where the progress line is drawn (default: stdout)
        """
        self.file_processor = file_processor
        self.video_codec = video_codec
        self.audio_codec = audio_codec
        self.ffmpeg_path = ffmpeg_path
        self.ffprobe_path = ffprobe_path
        self.max_line_length = max_line_length
        self.stop_flag = stop_flag or StopFlag()
        self.show_progress = show_progress
        self.status_logger = status_logger or logging.getLogger(STATUS_LOGGER)
        self.ffmpeg_logger = ffmpeg_logger or logging.getLogger(FFMPEG_LOGGER)
        self.popen = popen
        self.progress_stream = progress_stream

    def build_command(self, source: Path, output: Path) -> List[str]:
        """
        Build the FFmpeg command line for one transcode.

        Args:
            source: Input video
            output: Destination of the transcoded copy

        Returns:
            Argument list for Popen
        """
        return [
            self.ffmpeg_path,
            "-hide_banner",
            "-nostdin",
            "-i", str(source),
            "-c:v", self.video_codec,
            "-c:a", self.audio_codec,
            # key=value progress blocks on stderr alongside the usual diagnostics
            "-progress", "pipe:2",
            str(output)
        ]

    def get_video_duration(self, video_path: Path) -> Optional[float]:
        """
        Get the duration of a video file in seconds using FFprobe.

        Args:
            video_path: Path to the video file

        Returns:
            Duration in seconds, or None if unable to determine
        """
        command = [
            self.ffprobe_path,
            "-v", "error",
            "-show_entries", "format=duration",
            "-of", "default=noprint_wrappers=1:nokey=1",
            str(video_path)
        ]
        try:
            result = subprocess.run(
                command,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                timeout=30
            )
        except (OSError, subprocess.SubprocessError) as e:
            self.ffmpeg_logger.info(f"ffprobe unavailable for {video_path.name}: {e}")
            return None

        output = result.stdout.strip()
        if result.returncode != 0 or not output:
            self.ffmpeg_logger.info(f"ffprobe could not read duration of {video_path.name}: {result.stderr.strip()}")
            return None
        try:
            return float(output)
        except ValueError:
            return None

    def iter_diagnostic_lines(self, stream: TextIO) -> Iterator[str]:
        """
        Yield FFmpeg's stderr line by line.

        Each read is capped at ``max_line_length`` characters; a longer line
        comes back in several pieces rather than failing.

        Args:
            stream: FFmpeg's stderr, opened in text mode

        Raises:
            DiagnosticStreamError: If a read fails
        """
        while True:
            try:
                chunk = stream.readline(self.max_line_length)
            except (OSError, ValueError) as e:
                raise DiagnosticStreamError(f"Error reading FFmpeg output: {e}") from e
            if not chunk:
                return
            yield chunk.rstrip("\r\n")

    def _record_progress(self, job: TranscodeJob, line: str, progress: ProgressBar) -> None:
        """Fold one `-progress` key=value line into the job and redraw."""
        key, value = parse_progress_line(line)
        if key is None:
            return
        # Values are "N/A" until FFmpeg has written something
        if key == "total_size" and value.isdigit():
            job.last_total_size = int(value)
        elif key == "out_time_us" and value.lstrip("-").isdigit():
            job.last_out_time = max(int(value), 0) / 1_000_000
        elif key == "progress":
            progress.update(job.last_out_time, job.last_total_size)

    def run(self, job: TranscodeJob, progress: ProgressBar) -> None:
        """
        Launch FFmpeg for a job, forward its diagnostics and wait for it.

        The stderr stream is drained to end-of-stream before the process is
        waited on. A read failure is logged and the wait still happens.

        Args:
            job: Job whose output path is already computed
            progress: Console progress line for this job

        Raises:
            ProcessStartError: If FFmpeg cannot be launched
            DiagnosticPipeError: If FFmpeg's stderr pipe is missing
            ProcessExitError: If FFmpeg exits non-zero or is killed
            TranscodeCancelled: If a stop was requested while FFmpeg ran
        """
        command = self.build_command(job.source.path, job.output_path)
        self.ffmpeg_logger.info(f"Running: {' '.join(command)}")

        try:
            process = (self.popen or subprocess.Popen)(
                command,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.PIPE,
                text=True,
                encoding="utf-8",
                errors="replace"
            )
        except (OSError, ValueError) as e:
            raise ProcessStartError(f"Error starting FFmpeg: {e}") from e

        job.process = process
        self.stop_flag.set_active_process(process)
        try:
            stream = process.stderr
            if stream is None:
                process.kill()
                process.wait()
                raise DiagnosticPipeError("Error creating output pipe: FFmpeg stderr is not available")

            try:
                for line in self.iter_diagnostic_lines(stream):
                    self.ffmpeg_logger.info(line)
                    self._record_progress(job, line, progress)
            except DiagnosticStreamError as e:
                progress.end_line()
                self.status_logger.warning(str(e))
            finally:
                # A closed pipe keeps FFmpeg from blocking on a full buffer
                stream.close()

            returncode = process.wait()
        finally:
            self.stop_flag.set_active_process(None)

        if self.stop_flag.is_stop_requested():
            raise TranscodeCancelled(f"Transcode of {job.source.path} interrupted")
        if returncode != 0:
            raise ProcessExitError(returncode)

    def _finish(self, job: TranscodeJob, original_size: int, produced_size: int,
                decision: Outcome, message: str) -> TranscodeJob:
        """Attach a terminal OutcomeRecord to the job and return it."""
        job.outcome = OutcomeRecord(
            source_path=job.source.path,
            output_path=job.output_path,
            original_size=original_size,
            produced_size=produced_size,
            decision=decision,
            message=message
        )
        return job

    def transcode(self, video: VideoFile, index: int = 1, total: int = 1) -> TranscodeJob:
        """
        Produce the transcoded copy of one video.

        When the returned job has ``outcome`` set, there is nothing to
        evaluate: the output already existed, FFmpeg failed, or the run was
        interrupted. Otherwise ``output_path`` holds a finished file and
        ``original_size`` the input size measured before launch.

        Args:
            video: File to transcode
            index: Position of the file in the batch (1-indexed)
            total: Number of files in the batch

        Returns:
            The finished TranscodeJob
        """
        source = video.path
        self.status_logger.info(f"Starting work on {source}")

        job = TranscodeJob(source=video, output_path=self.file_processor.output_path_for(source))

        try:
            self.file_processor.ensure_marker_directory(source)
        except OSError as e:
            error = MarkerDirectoryError(f"Error creating {self.file_processor.marker} directory: {e}")
            self.status_logger.warning(str(error))
            return self._finish(job, video.size_bytes, 0, Outcome.FAILED, str(error))

        if job.output_path.exists():
            message = f"{source.name} already exists in {self.file_processor.marker} directory. Skipping."
            self.status_logger.warning(message)
            return self._finish(job, 0, 0, Outcome.SKIPPED_EXISTS, message)

        try:
            job.original_size = self.file_processor.get_file_size(source)
        except OSError as e:
            message = f"Error getting original file size: {e}"
            self.status_logger.warning(message)
            return self._finish(job, 0, 0, Outcome.FAILED, message)

        duration = self.get_video_duration(source) if self.show_progress else None
        progress = ProgressBar(
            source.name, total, index,
            duration=duration,
            enabled=self.show_progress,
            stream=self.progress_stream
        )
        progress.start()
        started = time.monotonic()

        try:
            self.run(job, progress)
        except TranscodeCancelled as e:
            progress.finish(success=False)
            self.file_processor.remove_file(job.output_path)
            self.status_logger.warning(f"{e}. Partial output removed.")
            return self._finish(job, job.original_size, 0, Outcome.CANCELLED, str(e))
        except TranscodeError as e:
            progress.finish(success=False)
            self.status_logger.warning(str(e))
            # Partial output would make the next run skip this file
            if isinstance(e, (ProcessExitError, DiagnosticPipeError)):
                self.file_processor.remove_file(job.output_path)
            return self._finish(job, job.original_size, 0, Outcome.FAILED, str(e))

        progress.finish(success=True, elapsed_time=time.monotonic() - started)
        return job
