from __future__ import annotations

import signal

import pytest

from shrinker.stop_flag import StopFlag


class _Process:
    def __init__(self, running: bool = True) -> None:
        self.running = running
        self.terminated = False

    def poll(self):
        return None if self.running else 0

    def terminate(self) -> None:
        self.terminated = True
        self.running = False


def test_request_stop_terminates_active_process() -> None:
    flag = StopFlag()
    process = _Process()
    flag.set_active_process(process)

    flag.request_stop()

    assert flag.is_stop_requested()
    assert process.terminated


def test_process_registered_after_stop_is_terminated_immediately() -> None:
    flag = StopFlag()
    flag.request_stop()
    process = _Process()

    flag.set_active_process(process)

    assert process.terminated


def test_finished_process_is_left_alone() -> None:
    flag = StopFlag()
    process = _Process(running=False)
    flag.set_active_process(process)

    flag.request_stop()

    assert not process.terminated


def test_get_instance_is_a_singleton() -> None:
    assert StopFlag.get_instance() is StopFlag.get_instance()


def test_signal_handler_stops_then_aborts(monkeypatch: pytest.MonkeyPatch) -> None:
    installed = {}
    monkeypatch.setattr(signal, "signal", lambda signum, handler: installed.__setitem__(signum, handler))
    flag = StopFlag()
    flag.register_signal_handlers()
    handler = installed[signal.SIGINT]

    handler(signal.SIGINT, None)
    assert flag.is_stop_requested()

    with pytest.raises(KeyboardInterrupt):
        handler(signal.SIGINT, None)
