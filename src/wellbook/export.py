"""Export engine — writes one worksheet per well."""

from __future__ import annotations

import logging
from collections.abc import Collection, Iterable
from pathlib import Path

from openpyxl import Workbook
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet

from wellbook import (
    EXPORT_COLUMNS,
    FORBIDDEN_SHEET_CHARS,
    MAX_SHEET_NAME_LENGTH,
    PROGRESS_BATCH_ROWS,
    TIMESTAMP_FORMAT,
)
from wellbook.models import ProgressCallback, Saved, WellRecord
from wellbook.transform import group_by_well, select_records, sort_records, wells_present

log = logging.getLogger(__name__)

# ── Style constants ──────────────────────────────────────────────

HEADER_FONT = Font(name="Calibri", bold=True, size=11, color="FFFFFF")
HEADER_FILL = PatternFill(start_color="2F5496", end_color="2F5496", fill_type="solid")
HEADER_ALIGN = Alignment(horizontal="center", vertical="center", wrap_text=True)

_AUTO_WIDTH_SAMPLE_ROWS = 300
_MIN_COLUMN_WIDTH = 12
_MAX_COLUMN_WIDTH = 30
_RESERVED_SHEET_NAMES = {"history"}
_EMPTY_WORKBOOK_SHEET = "Sheet1"

_SANITIZE_TABLE = str.maketrans({ch: "_" for ch in FORBIDDEN_SHEET_CHARS})


class SheetNameError(ValueError):
    """A well's worksheet name was rejected."""


def sanitize_sheet_name(well_name: str) -> str:
    """Replace characters worksheets may not contain and cap the length."""
    return well_name.translate(_SANITIZE_TABLE)[:MAX_SHEET_NAME_LENGTH]


# ── Helpers ──────────────────────────────────────────────────────


def _style_header(ws: Worksheet, ncols: int) -> None:
    for c in range(1, ncols + 1):
        cell = ws.cell(row=1, column=c)
        cell.font = HEADER_FONT
        cell.fill = HEADER_FILL
        cell.alignment = HEADER_ALIGN


def _auto_width(ws: Worksheet) -> None:
    max_row = min(ws.max_row, _AUTO_WIDTH_SAMPLE_ROWS + 1)
    for c_idx in range(1, ws.max_column + 1):
        width = _MIN_COLUMN_WIDTH
        for row in ws.iter_rows(min_row=1, max_row=max_row, min_col=c_idx, max_col=c_idx):
            width = max(width, len(str(row[0].value or "")) + 2)
        ws.column_dimensions[get_column_letter(c_idx)].width = min(width, _MAX_COLUMN_WIDTH)


def _create_sheet(wb: Workbook, well_name: str, taken: dict[str, str]) -> Worksheet:
    """Create the worksheet for *well_name* or raise ``SheetNameError``.

    Worksheet names are compared case-insensitively; a clash is an error,
    never silently renamed.
    """
    title = sanitize_sheet_name(well_name)
    if not title:
        raise SheetNameError("Worksheet name for an empty well name would be empty")
    key = title.lower()
    if key in taken:
        raise SheetNameError(
            f"Worksheet name {title!r} for well {well_name!r} is already used "
            f"by well {taken[key]!r}"
        )
    if key in _RESERVED_SHEET_NAMES:
        raise SheetNameError(f"Worksheet name {title!r} is reserved (well {well_name!r})")
    if title.startswith("'") or title.endswith("'"):
        raise SheetNameError(
            f"Worksheet name {title!r} cannot start or end with an apostrophe "
            f"(well {well_name!r})"
        )
    try:
        ws = wb.create_sheet(title=title)
    except ValueError as exc:
        raise SheetNameError(
            f"Cannot create worksheet {title!r} for well {well_name!r}: {exc}"
        ) from exc
    taken[key] = well_name
    log.debug("created worksheet %r for well %r", title, well_name)
    return ws


def _write_record(ws: Worksheet, row: int, record: WellRecord) -> None:
    name_cell = ws.cell(row=row, column=1, value=record.well_name)
    # Well names are data, not formulas.
    if name_cell.data_type == "f":
        name_cell.data_type = "s"
    if record.timestamp is not None:
        ws.cell(row=row, column=2, value=record.timestamp.strftime(TIMESTAMP_FORMAT))
    for column, value in (
        (3, record.liquid_rate),
        (4, record.oil_rate),
        (5, record.temperature),
    ):
        if value is not None:
            ws.cell(row=row, column=column, value=value)


def _write_well(
    ws: Worksheet,
    rows: list[WellRecord],
    *,
    well_fraction: float,
    text: str,
    report: ProgressCallback,
    progress_every: int,
) -> None:
    for c_idx, header in enumerate(EXPORT_COLUMNS, 1):
        ws.cell(row=1, column=c_idx, value=header)
    _style_header(ws, len(EXPORT_COLUMNS))
    ws.freeze_panes = "A2"

    total = len(rows)
    for done, record in enumerate(rows, 1):
        _write_record(ws, done + 1, record)
        if done % progress_every == 0 or done == total:
            report(well_fraction, done / total, text)
    _auto_width(ws)


def _save_atomic(wb: Workbook, path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_name(f"{path.stem}.tmp{path.suffix}")
    try:
        wb.save(tmp_path)
        tmp_path.replace(path)
    except OSError:
        tmp_path.unlink(missing_ok=True)
        raise


# ── Public API ───────────────────────────────────────────────────


def export_wells(
    path: Path,
    records: Iterable[WellRecord],
    start_year: int,
    selected_wells: Collection[str],
    report: ProgressCallback,
    *,
    progress_every: int = PROGRESS_BATCH_ROWS,
) -> Saved:
    """Write the selected wells' records from *start_year* onward to *path*.

    Each well gets its own worksheet, in alphabetical order, with rows sorted
    by timestamp.

    Raises
    ------
    SheetNameError
        If a worksheet cannot be created under the well's sanitized name.
    OSError
        If the workbook cannot be written.
    """
    if progress_every < 1:
        raise ValueError("progress_every must be >= 1")

    path = Path(path)
    report(0.0, 0.0, "filtering records")
    selected = select_records(records, start_year, selected_wells)
    report(0.0, 0.0, "sorting records")
    ordered = sort_records(selected)
    wells = wells_present(ordered)

    wb = Workbook()
    active_sheet = wb.active
    if active_sheet is not None:
        wb.remove(active_sheet)

    taken: dict[str, str] = {}
    total_wells = len(wells)
    for idx, (well_name, rows) in enumerate(group_by_well(ordered)):
        well_fraction = idx / total_wells
        text = f"writing well {well_name}"
        report(well_fraction, 0.0, text)
        ws = _create_sheet(wb, well_name, taken)
        _write_well(
            ws,
            rows,
            well_fraction=well_fraction,
            text=text,
            report=report,
            progress_every=progress_every,
        )

    # An xlsx container needs at least one worksheet.
    if not wb.worksheets:
        wb.create_sheet(title=_EMPTY_WORKBOOK_SHEET)

    report(1.0, 1.0, "saving to disk")
    _save_atomic(wb, path)
    log.debug("saved %d worksheets to %s", total_wells, path)
    return Saved(path=str(path))
