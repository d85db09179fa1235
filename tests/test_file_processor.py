from __future__ import annotations

from pathlib import Path

import pytest

from conftest import write_sized
from shrinker.file_processor import FileProcessor


def test_find_video_files_collects_eligible_files_and_counts_subdirectories(
    tmp_path: Path, processor: FileProcessor
) -> None:
    write_sized(tmp_path / "root.mp4", 10)
    write_sized(tmp_path / "trip" / "day1.MOV", 20)
    write_sized(tmp_path / "trip" / "notes.txt", 5)
    write_sized(tmp_path / "trip" / "raw" / "day2.mp4", 30)
    (tmp_path / "empty").mkdir()

    videos, dir_count = processor.find_video_files()

    assert [v.path.relative_to(tmp_path).as_posix() for v in videos] == [
        "root.mp4",
        "trip/day1.MOV",
        "trip/raw/day2.mp4",
    ]
    assert [v.size_bytes for v in videos] == [10, 20, 30]
    assert videos[1].extension == ".mov"
    # empty, trip, trip/raw; the root itself is not counted
    assert dir_count == 3


def test_find_video_files_prunes_marker_directories(tmp_path: Path, processor: FileProcessor) -> None:
    write_sized(tmp_path / "clip.mp4", 10)
    write_sized(tmp_path / "Completed" / "clip.mp4", 5)
    write_sized(tmp_path / "trip" / "completed" / "nested" / "other.mp4", 5)
    write_sized(tmp_path / "trip" / "IncompletedStuff.mp4", 7)

    videos, dir_count = processor.find_video_files()

    names = sorted(v.path.relative_to(tmp_path).as_posix() for v in videos)
    assert names == ["clip.mp4", "trip/IncompletedStuff.mp4"]
    assert dir_count == 1


def test_find_video_files_on_empty_tree(tmp_path: Path, processor: FileProcessor) -> None:
    assert processor.find_video_files() == ([], 0)


def test_find_video_files_with_relative_root(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    write_sized(tmp_path / "a" / "clip.mp4", 10)
    monkeypatch.chdir(tmp_path)

    videos, dir_count = FileProcessor(Path("."), {".mp4"}, "Completed").find_video_files()

    assert [v.path for v in videos] == [Path("a/clip.mp4")]
    assert dir_count == 1


def test_output_path_keeps_file_name_under_marker(processor: FileProcessor) -> None:
    source = Path("trip/day1/clip.mov")
    assert processor.output_path_for(source) == Path("trip/day1/Completed/clip.mov")


def test_ensure_marker_directory_is_idempotent(tmp_path: Path, processor: FileProcessor) -> None:
    source = write_sized(tmp_path / "clip.mp4", 1)
    first = processor.ensure_marker_directory(source)
    second = processor.ensure_marker_directory(source)
    assert first == second == tmp_path / "Completed"
    assert first.is_dir()


def test_ensure_marker_directory_raises_when_blocked(tmp_path: Path, processor: FileProcessor) -> None:
    source = write_sized(tmp_path / "clip.mp4", 1)
    write_sized(tmp_path / "Completed", 1)  # a file where the directory should go
    with pytest.raises(OSError):
        processor.ensure_marker_directory(source)


def test_remove_file_tolerates_missing_files(tmp_path: Path, processor: FileProcessor) -> None:
    target = write_sized(tmp_path / "gone.mp4", 1)
    assert processor.remove_file(target)
    assert not target.exists()
    assert processor.remove_file(target)
