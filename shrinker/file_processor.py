"""File system operations for the transcode workflow."""

import logging
import os
from pathlib import Path
from typing import Container, List, Optional, Tuple

from shrinker.console_logging import STATUS_LOGGER
from shrinker.data_models import VideoFile
from shrinker.file_classifier import is_already_processed, is_eligible_input


class FileProcessor:
    """Manages file system operations for the transcode workflow."""

    def __init__(
        self,
        root: Path,
        extensions: Container[str],
        marker: str,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize FileProcessor for one scan root.

        Args:
            root: Directory tree to scan
            extensions: Allowed video extensions, lower-cased with a leading dot
            marker: Name of the directory that holds transcoded outputs
            logger: Status logger (default: the shared status sink)
        """
        self.root = Path(root)
        self.extensions = extensions
        self.marker = marker
        self.logger = logger or logging.getLogger(STATUS_LOGGER)

    def _is_marker(self, name: str) -> bool:
        """True if a directory name is the marker directory, ignoring case."""
        return name.lower() == self.marker.lower()

    def find_video_files(self) -> Tuple[List[VideoFile], int]:
        """
        Walk the scan root once, collecting eligible video files.

        Marker directories are pruned, so outputs are never picked up as new
        inputs and are not counted as subdirectories.

        Returns:
            Tuple of (video files in walk order, number of visited subdirectories)
        """
        videos: List[VideoFile] = []
        dir_count = 0

        def on_error(error: OSError) -> None:
            self.logger.warning(f"Error scanning {error.filename}: {error.strerror or error}")

        for dirpath, dirnames, filenames in os.walk(self.root, onerror=on_error):
            dirnames[:] = sorted(d for d in dirnames if not self._is_marker(d))
            current = Path(dirpath)
            if current != self.root:
                dir_count += 1

            for filename in sorted(filenames):
                path = current / filename
                relative = path.relative_to(self.root)
                if is_already_processed(relative, self.marker):
                    continue
                if not is_eligible_input(path, self.extensions):
                    continue

                try:
                    stat = path.stat()
                except OSError as e:
                    self.logger.warning(f"Error getting size of {path}: {e}")
                    continue

                videos.append(VideoFile(
                    path=path,
                    extension=path.suffix.lower(),
                    size_bytes=stat.st_size
                ))

        return videos, dir_count

    def output_path_for(self, source: Path) -> Path:
        """
        Compute where the transcoded copy of a source file goes.

        Args:
            source: Path of the input video

        Returns:
            ``<source parent>/<marker>/<source name>``
        """
        return source.parent / self.marker / source.name

    def ensure_marker_directory(self, source: Path) -> Path:
        """
        Create the marker directory beside a source file if it is missing.

        Args:
            source: Path of the input video

        Returns:
            Path to the marker directory

        Raises:
            OSError: If the directory cannot be created
        """
        marker_dir = source.parent / self.marker
        marker_dir.mkdir(exist_ok=True)
        return marker_dir

    def get_file_size(self, path: Path) -> int:
        """
        Return the size of a file in bytes.

        Raises:
            OSError: If the file cannot be stat'ed
        """
        return path.stat().st_size

    def remove_file(self, path: Path) -> bool:
        """
        Delete a file, logging instead of raising on failure.

        Args:
            path: File to delete

        Returns:
            True if the file is gone afterwards
        """
        try:
            path.unlink()
            return True
        except FileNotFoundError:
            return True
        except OSError as e:
            self.logger.warning(f"Could not delete {path}: {e}")
            return False
