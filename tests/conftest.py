from __future__ import annotations

import time
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Any

import pytest
from openpyxl import Workbook

from wellbook.jobs import MessageChannel
from wellbook.models import Message

SheetSpec = tuple[str, Sequence[Sequence[Any]]]


@pytest.fixture
def make_workbook(tmp_path: Path) -> Callable[..., Path]:
    """Write ``[(title, rows), ...]`` to an xlsx file and return its path."""

    def _make(sheets: Sequence[SheetSpec], name: str = "yearly.xlsx") -> Path:
        wb = Workbook()
        default = wb.active
        if default is not None:
            wb.remove(default)
        for title, rows in sheets:
            ws = wb.create_sheet(title=title)
            for row in rows:
                ws.append(list(row))
        path = tmp_path / name
        wb.save(path)
        return path

    return _make


def drain_until_closed(channel: MessageChannel, timeout: float = 10.0) -> list[Message]:
    """Collect every message of a job, failing the test if it never finishes."""
    deadline = time.monotonic() + timeout
    messages: list[Message] = []
    while not channel.closed:
        if time.monotonic() > deadline:
            raise AssertionError(f"job {channel.name} did not finish in {timeout}s")
        messages.extend(channel.drain())
        time.sleep(0.01)
    return messages
