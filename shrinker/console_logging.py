"""Status and FFmpeg log sinks sharing one append-only report file."""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.text import Text


STATUS_LOGGER = "shrinker.status"
FFMPEG_LOGGER = "shrinker.ffmpeg"

SUCCESS = 25
logging.addLevelName(SUCCESS, "SUCCESS")

LOG_FORMAT = '[%(asctime)s] [%(levelname)s] %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

# Console label and style per level
LEVEL_LABELS = {
    logging.DEBUG: ("DEBUG:", "dim"),
    logging.INFO: ("INFO:", "green"),
    SUCCESS: ("Compressed:", "blue"),
    logging.WARNING: ("WARNING:", "yellow"),
    logging.ERROR: ("ERROR:", "bold red"),
    logging.CRITICAL: ("CRITICAL:", "bold red"),
}


class RichStatusHandler(logging.Handler):
    """Writes status records to the console with a colored level label."""

    def __init__(self, console: Optional[Console] = None, level: int = logging.INFO):
        super().__init__(level)
        self.console = console or Console(highlight=False)
        self.setFormatter(logging.Formatter('%(message)s'))

    def emit(self, record: logging.LogRecord) -> None:
        try:
            line = Text()
            # extra={"plain": True} prints the message without a level label
            if not getattr(record, "plain", False):
                label, style = LEVEL_LABELS.get(record.levelno, (f"{record.levelname}:", ""))
                line.append(label, style=style)
                line.append(" ")
            line.append(self.format(record))
            self.console.print(line)
        except Exception:
            self.handleError(record)


@dataclass
class LogSinks:
    """The two named loggers and the file handler they share."""
    status: logging.Logger
    ffmpeg: logging.Logger
    file_handler: logging.FileHandler

    def close(self) -> None:
        """Detach handlers and close the report file."""
        for logger in (self.status, self.ffmpeg):
            for handler in list(logger.handlers):
                logger.removeHandler(handler)
                if handler is not self.file_handler:
                    handler.close()
            logger.propagate = True
        self.file_handler.close()


def setup_logging(log_file: Path, console: Optional[Console] = None) -> LogSinks:
    """
    Open the report file and wire up the status and FFmpeg loggers.

    The status logger writes to the console and the report file; the FFmpeg
    logger writes raw diagnostic lines to the report file only. Both share a
    single FileHandler, so writes land in call order under its lock.

    Args:
        log_file: Path of the append-only report file
        console: Console for status output (default: a new rich Console)

    Returns:
        LogSinks holding both loggers

    Raises:
        OSError: If the report file cannot be opened
    """
    file_handler = logging.FileHandler(log_file, mode='a', encoding='utf-8')
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))

    status = logging.getLogger(STATUS_LOGGER)
    ffmpeg = logging.getLogger(FFMPEG_LOGGER)

    for logger in (status, ffmpeg):
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()
        logger.setLevel(logging.INFO)
        logger.propagate = False
        logger.addHandler(file_handler)

    status.addHandler(RichStatusHandler(console))

    return LogSinks(status=status, ffmpeg=ffmpeg, file_handler=file_handler)
