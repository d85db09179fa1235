"""Stop flag for shutting down a batch on Ctrl+C or SIGTERM."""

import logging
import signal
from typing import Any, Optional

from shrinker.console_logging import STATUS_LOGGER


class StopFlag:
    """
    Cancellation token shared by the batch loop and the active job.

    The first interrupt requests a stop and terminates the FFmpeg process
    registered as active, so the current job ends promptly. A second
    interrupt raises KeyboardInterrupt.
    """

    _instance: Optional['StopFlag'] = None

    def __init__(self, logger: Optional[logging.Logger] = None):
        """Initialize the stop flag."""
        self._stop_requested = False
        self._signal_handlers_registered = False
        self._active_process: Optional[Any] = None
        self.logger = logger or logging.getLogger(STATUS_LOGGER)

    @classmethod
    def get_instance(cls) -> 'StopFlag':
        """Get singleton instance of StopFlag."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    def request_stop(self):
        """Request a stop and terminate the active subprocess, if any."""
        self._stop_requested = True
        self.logger.warning("Interrupt detected. Stopping current transcode and exiting...")
        self._terminate_active()

    def is_stop_requested(self) -> bool:
        """Check if stop has been requested."""
        return self._stop_requested

    def set_active_process(self, process: Optional[Any]):
        """
        Register the subprocess to terminate when a stop is requested.

        Args:
            process: Running Popen object, or None once it has exited
        """
        self._active_process = process
        if process is not None and self._stop_requested:
            self._terminate_active()

    def _terminate_active(self):
        process = self._active_process
        if process is None or process.poll() is not None:
            return
        try:
            process.terminate()
        except OSError as e:
            self.logger.warning(f"Could not terminate FFmpeg: {e}")

    def register_signal_handlers(self):
        """Register signal handlers for Ctrl+C and termination signals."""
        if self._signal_handlers_registered:
            return

        def signal_handler(signum, frame):
            """First signal stops gracefully, a second one aborts."""
            if self._stop_requested:
                raise KeyboardInterrupt
            self.request_stop()

        signal.signal(signal.SIGINT, signal_handler)  # Ctrl+C
        # SIGTERM is missing on some platforms
        if hasattr(signal, "SIGTERM"):
            signal.signal(signal.SIGTERM, signal_handler)
        self._signal_handlers_registered = True
