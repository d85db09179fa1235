from __future__ import annotations

import io
from pathlib import Path
from typing import Callable

import pytest

from shrinker.data_models import VideoFile
from shrinker.file_processor import FileProcessor
from shrinker.stop_flag import StopFlag

MB = 1024 * 1024


class FailingStream(io.StringIO):
    """stderr stand-in whose reads start failing after a number of lines."""

    def __init__(self, text: str, fail_after: int) -> None:
        super().__init__(text)
        self._reads_left = fail_after

    def readline(self, size: int = -1) -> str:  # type: ignore[override]
        if self._reads_left <= 0:
            raise OSError("pipe broke")
        self._reads_left -= 1
        return super().readline(size)


class FakeProcess:
    """Popen stand-in: writes the output file at launch, exits on wait()."""

    def __init__(self, stderr: io.StringIO | None, returncode: int) -> None:
        self.stderr = stderr
        self._final_returncode = returncode
        self.returncode: int | None = None
        self.terminated = False
        self.killed = False
        self.waited = False

    def poll(self) -> int | None:
        return self.returncode

    def wait(self) -> int:
        self.waited = True
        if self.returncode is None:
            self.returncode = self._final_returncode
        return self.returncode

    def terminate(self) -> None:
        self.terminated = True
        self.returncode = -15

    def kill(self) -> None:
        self.killed = True
        self.returncode = -9


class FakeFFmpeg:
    """Callable used in place of subprocess.Popen."""

    def __init__(
        self,
        produced_size: int | None = None,
        returncode: int = 0,
        lines: list[str] | None = None,
        fail_after: int | None = None,
        no_stderr: bool = False,
        start_error: Exception | None = None,
        on_launch: Callable[[FakeProcess], None] | None = None,
    ) -> None:
        self.produced_size = produced_size
        self.returncode = returncode
        self.lines = lines if lines is not None else ["frame=1", "progress=end"]
        self.fail_after = fail_after
        self.no_stderr = no_stderr
        self.start_error = start_error
        self.on_launch = on_launch
        self.commands: list[list[str]] = []
        self.kwargs: list[dict] = []
        self.processes: list[FakeProcess] = []

    def __call__(self, command: list[str], **kwargs) -> FakeProcess:
        self.commands.append(command)
        self.kwargs.append(kwargs)
        if self.start_error is not None:
            raise self.start_error
        if self.produced_size is not None:
            write_sized(Path(command[-1]), self.produced_size)
        text = "".join(line + "\n" for line in self.lines)
        if self.no_stderr:
            stderr = None
        elif self.fail_after is not None:
            stderr = FailingStream(text, self.fail_after)
        else:
            stderr = io.StringIO(text)
        process = FakeProcess(stderr, self.returncode)
        self.processes.append(process)
        if self.on_launch is not None:
            self.on_launch(process)
        return process


def write_sized(path: Path, size: int) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "wb") as handle:
        handle.truncate(size)
    return path


def make_video(path: Path, size: int) -> VideoFile:
    write_sized(path, size)
    return VideoFile(path=path, extension=path.suffix.lower(), size_bytes=size)


@pytest.fixture(autouse=True)
def _reset_stop_flag_singleton() -> None:
    StopFlag._instance = None
    yield
    StopFlag._instance = None


@pytest.fixture
def processor(tmp_path: Path) -> FileProcessor:
    return FileProcessor(tmp_path, frozenset({".mp4", ".mov"}), "Completed")
