"""Background jobs and the one-way message channel to their observer.

A job runs on its own daemon thread. It reports ``Progress`` through a
callback that only enqueues, and finishes with exactly one terminal message
(``Loaded``, ``Saved`` or ``Error``). The observer keeps nothing but the
``MessageChannel`` and drains it without blocking, typically once per UI tick.
"""

from __future__ import annotations

import logging
import queue
import threading
from collections.abc import Callable
from enum import Enum

from wellbook.models import Error, Message, Progress, ProgressCallback, TerminalMessage, is_terminal

log = logging.getLogger(__name__)

JobTask = Callable[[ProgressCallback], TerminalMessage]


class JobState(str, Enum):
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class MessageChannel:
    """Read end of a job's message queue."""

    def __init__(self, messages: queue.Queue[Message], name: str) -> None:
        self._messages = messages
        self.name = name
        self._state = JobState.RUNNING

    @property
    def state(self) -> JobState:
        """RUNNING until the terminal message is drained, then its outcome."""
        return self._state

    @property
    def closed(self) -> bool:
        """True once the terminal message has been drained."""
        return self._state is not JobState.RUNNING

    def drain(self) -> list[Message]:
        """Return every message buffered so far, never blocking."""
        drained: list[Message] = []
        while not self.closed:
            try:
                message = self._messages.get_nowait()
            except queue.Empty:
                break
            drained.append(message)
            if is_terminal(message):
                failed = isinstance(message, Error)
                self._state = JobState.FAILED if failed else JobState.SUCCEEDED
        return drained


class _Job:
    def __init__(self, task: JobTask, messages: queue.Queue[Message], name: str) -> None:
        self._task = task
        self._messages = messages
        self.name = name

    def _report(self, global_fraction: float, local_fraction: float, text: str) -> None:
        self._messages.put(Progress(global_fraction, local_fraction, text))

    def run(self) -> None:
        log.debug("job %s started", self.name)
        try:
            outcome: TerminalMessage = self._task(self._report)
        except Exception as exc:
            log.debug("job %s failed", self.name, exc_info=True)
            outcome = Error(str(exc) or type(exc).__name__)
        if not is_terminal(outcome):
            outcome = Error(f"job {self.name} ended without a result")
        log.debug("job %s finished with %s", self.name, type(outcome).__name__)
        self._messages.put(outcome)


def start_job(task: JobTask, *, name: str = "job") -> MessageChannel:
    """Run *task* on a fresh daemon thread and return the channel to observe it."""
    messages: queue.Queue[Message] = queue.Queue()
    job = _Job(task, messages, name)
    threading.Thread(target=job.run, name=f"wellbook-{name}", daemon=True).start()
    return MessageChannel(messages, name)
