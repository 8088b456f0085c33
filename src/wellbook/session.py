"""Observer-side application state.

``WellSession`` is the single writer of everything a front-end displays. It
starts jobs, then folds their messages into its own fields in ``poll()``;
workers never touch it.
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

from wellbook import PROGRESS_BATCH_ROWS
from wellbook.export import export_wells
from wellbook.ingest import load_wells
from wellbook.jobs import JobTask, MessageChannel, start_job
from wellbook.models import Error, Loaded, Message, Progress, Saved, WellRecord

STATUS_IDLE = "No file selected"
STATUS_STARTING = "Starting..."


class WellSession:
    def __init__(self, *, progress_every: int = PROGRESS_BATCH_ROWS) -> None:
        self.progress_every = progress_every

        self.records: list[WellRecord] = []
        self.available_years: list[int] = []
        self.unique_wells: list[str] = []

        self.source_path: Path | None = None
        self.selected_start_year: int | None = None
        self.selected_wells: set[str] = set()

        self.status_message = STATUS_IDLE
        self.is_loading = False
        self.global_progress = 0.0
        self.local_progress = 0.0

        self._channel: MessageChannel | None = None

    # ── Selection ───────────────────────────────────────────────

    def select_all_wells(self) -> None:
        self.selected_wells = set(self.unique_wells)

    def clear_wells(self) -> None:
        self.selected_wells.clear()

    def toggle_well(self, name: str) -> None:
        if name in self.selected_wells:
            self.selected_wells.discard(name)
        elif name in self.unique_wells:
            self.selected_wells.add(name)

    @property
    def ready_to_export(self) -> bool:
        return bool(self.records) and self.selected_start_year is not None and bool(
            self.selected_wells
        )

    # ── Jobs ────────────────────────────────────────────────────

    def _start(self, task: JobTask, name: str) -> None:
        self.is_loading = True
        self.global_progress = 0.0
        self.local_progress = 0.0
        self.status_message = STATUS_STARTING
        # A still-running previous job keeps going; nobody reads its queue.
        self._channel = start_job(task, name=name)

    def load(self, path: Path) -> None:
        """Start reading the workbook at *path* in the background."""
        path = Path(path)
        self.source_path = path
        every = self.progress_every
        self._start(lambda report: load_wells(path, report, progress_every=every), "load")

    def export(self, path: Path) -> bool:
        """Start writing the current selection to *path*; False if not started."""
        if not self.records:
            return False
        if self.selected_start_year is None:
            self.status_message = "Select a start year!"
            return False
        if not self.selected_wells:
            self.status_message = "Select at least one well!"
            return False

        path = Path(path)
        records = list(self.records)
        wells = set(self.selected_wells)
        start_year = self.selected_start_year
        every = self.progress_every
        self._start(
            lambda report: export_wells(
                path, records, start_year, wells, report, progress_every=every
            ),
            "export",
        )
        return True

    def poll(self) -> list[Message]:
        """Apply every pending message from the current job, without blocking."""
        if self._channel is None:
            return []
        messages = self._channel.drain()
        for message in messages:
            self._apply(message)
        if self._channel.closed:
            self._channel = None
        return messages

    def _apply(self, message: Message) -> None:
        if isinstance(message, Progress):
            self.global_progress = message.global_fraction
            self.local_progress = message.local_fraction
            self.status_message = message.text
            return

        if isinstance(message, Loaded):
            self._apply_loaded(message.records, message.years, message.wells)
            self.status_message = f"Done. Loaded {len(self.records)} records"
        elif isinstance(message, Saved):
            self.status_message = f"Saved: {message.path}"
        elif isinstance(message, Error):
            self.status_message = f"ERROR: {message.text}"
        self.is_loading = False

    def _apply_loaded(
        self, records: list[WellRecord], years: list[int], wells: Iterable[str]
    ) -> None:
        self.records = records
        self.available_years = years
        self.unique_wells = list(wells)
        self.selected_start_year = years[0] if years else None
        self.selected_wells &= set(self.unique_wells)
