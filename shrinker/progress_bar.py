"""Progress bar for a single FFmpeg transcode."""

import sys
from typing import Optional, TextIO

from shrinker.stats_tracker import format_size, format_time


class ProgressBar:
    """In-place console progress line fed by FFmpeg progress markers."""

    BAR_WIDTH = 40

    def __init__(
        self,
        video_name: str,
        total_videos: int,
        current_video: int,
        duration: Optional[float] = None,
        enabled: bool = True,
        stream: Optional[TextIO] = None
    ):
        """
        Initialize progress bar for a video.

        Args:
            video_name: Name of the video being processed
            total_videos: Total number of videos to process
            current_video: Current video number (1-indexed)
            duration: Input duration in seconds, if known
            enabled: Render nothing when False
            stream: Output stream (default: stdout)
        """
        self.video_name = video_name
        self.total_videos = total_videos
        self.current_video = current_video
        self.duration = duration
        self.enabled = enabled
        self.stream = stream or sys.stdout
        self._rendered = False

    def start(self):
        """Start processing a video."""
        if not self.enabled:
            return
        print(f"\n{'='*60}", file=self.stream)
        print(f"Video {self.current_video}/{self.total_videos}: {self.video_name}", file=self.stream)
        print(f"{'='*60}", file=self.stream)

    def update(self, out_time: Optional[float], total_size: Optional[int]):
        """
        Redraw the progress line.

        Args:
            out_time: Encoded media time in seconds
            total_size: Bytes written to the output so far
        """
        if not self.enabled:
            return

        size_text = format_size(total_size) if total_size is not None else "?"
        time_text = format_time(out_time) if out_time is not None else "?"

        if self.duration and out_time is not None:
            progress = min(max(out_time / self.duration, 0.0), 1.0)
            filled = int(self.BAR_WIDTH * progress)
            bar = '#' * filled + '-' * (self.BAR_WIDTH - filled)
            line = f"[{bar}] {int(progress * 100):3d}% - {size_text} @ {time_text}"
        else:
            line = f"Encoding... {size_text} @ {time_text}"

        print(f"\r{line:<72}", end='', flush=True, file=self.stream)
        self._rendered = True

    def end_line(self):
        """Terminate an open progress line so the next message starts clean."""
        if self._rendered:
            print(file=self.stream)
            self._rendered = False

    def finish(self, success: bool = True, elapsed_time: Optional[float] = None):
        """
        Finish processing the video.

        Args:
            success: Whether FFmpeg produced an output
            elapsed_time: Optional elapsed time in seconds
        """
        if not self.enabled:
            return
        self.end_line()

        time_str = ""
        if elapsed_time is not None:
            time_str = f" ({format_time(elapsed_time)})"

        if success:
            print(f"[OK] Finished: {self.video_name}{time_str}", file=self.stream)
        else:
            print(f"[FAILED] {self.video_name}", file=self.stream)
