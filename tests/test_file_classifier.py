from __future__ import annotations

from pathlib import Path

import pytest

from shrinker.file_classifier import is_already_processed, is_eligible_input

EXTENSIONS = frozenset({".mp4", ".mov"})


@pytest.mark.parametrize(
    "name, expected",
    [
        ("clip.mp4", True),
        ("clip.MOV", True),
        ("Holiday.Mp4", True),
        ("clip.mkv", False),
        ("notes.txt", False),
        ("mp4", False),
        ("archive.mp4.part", False),
    ],
)
def test_is_eligible_input_matches_extension_case_insensitively(name: str, expected: bool) -> None:
    assert is_eligible_input(Path("videos") / name, EXTENSIONS) is expected


def test_is_already_processed_requires_a_directory_segment() -> None:
    assert is_already_processed(Path("trip/Completed/clip.mp4"), "Completed")
    assert is_already_processed(Path("trip/completed/day1/clip.mp4"), "Completed")
    assert is_already_processed("COMPLETED/clip.mov", "Completed")


def test_is_already_processed_ignores_file_names_containing_the_marker() -> None:
    assert not is_already_processed(Path("IncompletedStuff.mp4"), "Completed")
    assert not is_already_processed(Path("trip/completed.mp4"), "Completed")
    assert not is_already_processed(Path("trip/CompletedTrips/clip.mp4"), "Completed")
    assert not is_already_processed(Path("clip.mp4"), "Completed")
