"""Decides which paths are transcode inputs and which are already processed."""

from pathlib import PurePath
from typing import Container, Union


PathLike = Union[str, PurePath]


def is_eligible_input(path: PathLike, extensions: Container[str]) -> bool:
    """
    Check whether a path has one of the allowed video extensions.

    Args:
        path: File path to check
        extensions: Allowed extensions, lower-cased with a leading dot

    Returns:
        True if the extension matches, ignoring case
    """
    return PurePath(path).suffix.lower() in extensions


def is_already_processed(path: PathLike, marker: str) -> bool:
    """
    Check whether a path lies inside a marker directory.

    Only directory segments are compared, so a file merely named after the
    marker (``IncompletedStuff.mp4``, ``completed.mp4``) does not count.

    Args:
        path: File path, ideally relative to the scan root
        marker: Marker directory name, compared case-insensitively

    Returns:
        True if any parent segment equals the marker
    """
    marker = marker.lower()
    return any(part.lower() == marker for part in PurePath(path).parent.parts)
