from __future__ import annotations

import threading

from conftest import drain_until_closed

from wellbook.jobs import JobState, start_job
from wellbook.models import Error, Progress, ProgressCallback, Saved, is_terminal


def test_job_streams_progress_then_one_terminal_message() -> None:
    def task(report: ProgressCallback) -> Saved:
        for step in range(5):
            report(step / 5, 0.0, f"step {step}")
        return Saved(path="out.xlsx")

    messages = drain_until_closed(start_job(task, name="steps"))

    assert [m.text for m in messages[:-1] if isinstance(m, Progress)] == [
        f"step {i}" for i in range(5)
    ]
    assert messages[-1] == Saved(path="out.xlsx")
    assert sum(is_terminal(m) for m in messages) == 1


def test_job_exception_becomes_error_message() -> None:
    def task(report: ProgressCallback) -> Saved:
        report(0.0, 0.0, "about to fail")
        raise ValueError("Empty sheet: 2021")

    messages = drain_until_closed(start_job(task))

    assert messages == [Progress(0.0, 0.0, "about to fail"), Error(text="Empty sheet: 2021")]


def test_job_exception_without_text_uses_type_name() -> None:
    def task(report: ProgressCallback) -> Saved:
        raise KeyError

    messages = drain_until_closed(start_job(task))

    assert messages == [Error(text="KeyError")]


def test_job_without_terminal_result_fails() -> None:
    def task(report: ProgressCallback) -> Saved:
        return None  # type: ignore[return-value]

    (message,) = drain_until_closed(start_job(task, name="broken"))

    assert isinstance(message, Error)
    assert "broken" in message.text


def test_drain_does_not_block_while_job_runs() -> None:
    release = threading.Event()
    started = threading.Event()

    def task(report: ProgressCallback) -> Saved:
        report(0.1, 0.2, "waiting")
        started.set()
        release.wait(timeout=10)
        return Saved(path="late.xlsx")

    channel = start_job(task)
    assert started.wait(timeout=10)

    first = channel.drain()
    assert first == [Progress(0.1, 0.2, "waiting")]
    assert channel.drain() == []
    assert not channel.closed

    release.set()
    rest = drain_until_closed(channel)
    assert rest == [Saved(path="late.xlsx")]


def test_closed_channel_drains_nothing() -> None:
    channel = start_job(lambda report: Saved(path="x.xlsx"))
    drain_until_closed(channel)

    assert channel.closed
    assert channel.drain() == []


def test_channel_state_follows_drained_terminal_message() -> None:
    release = threading.Event()

    def task(report: ProgressCallback) -> Saved:
        release.wait(timeout=10)
        return Saved(path="out.xlsx")

    channel = start_job(task)
    assert channel.state is JobState.RUNNING

    release.set()
    drain_until_closed(channel)
    assert channel.state is JobState.SUCCEEDED


def test_channel_state_is_failed_after_error() -> None:
    def task(report: ProgressCallback) -> Saved:
        raise OSError("disk full")

    channel = start_job(task)
    drain_until_closed(channel)

    assert channel.state is JobState.FAILED
