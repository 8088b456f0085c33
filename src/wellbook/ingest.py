"""Ingestion engine — year sheets in, typed well records out."""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence
from itertools import dropwhile
from pathlib import Path
from typing import Any

from wellbook import PROGRESS_BATCH_ROWS
from wellbook.cells import CellKind, CellValue, as_number, as_timestamp, as_well_name, cell_at
from wellbook.columns import SheetColumns
from wellbook.io import open_workbook
from wellbook.models import Loaded, ProgressCallback, WellRecord

log = logging.getLogger(__name__)

_YEAR_TITLE_RE = re.compile(r"[+-]?[0-9]+")


class EmptySheetError(ValueError):
    """A year sheet has no non-blank rows, not even a header."""


def parse_sheet_year(title: str) -> int | None:
    """Return the year encoded in a sheet title, or ``None`` for other tabs."""
    if not _YEAR_TITLE_RE.fullmatch(title):
        return None
    return int(title)


def _is_blank_row(row: Sequence[Any]) -> bool:
    return all(CellValue.from_cell(cell).kind is CellKind.EMPTY for cell in row)


def extract_record(
    row: Sequence[Any], columns: SheetColumns, year: int
) -> WellRecord | None:
    """Build one record from a data row; ``None`` drops the row."""
    well_name = as_well_name(cell_at(row, columns.name))
    if well_name is None:
        return None
    return WellRecord(
        well_name=well_name,
        timestamp=as_timestamp(cell_at(row, columns.date)),
        liquid_rate=as_number(cell_at(row, columns.liquid_rate)),
        oil_rate=as_number(cell_at(row, columns.oil_rate)),
        temperature=as_number(cell_at(row, columns.temperature)),
        sheet_year=year,
    )


def _read_sheet(
    rows: list[tuple[Any, ...]],
    columns: SheetColumns,
    year: int,
    *,
    sheet_fraction: float,
    text: str,
    report: ProgressCallback,
    progress_every: int,
) -> list[WellRecord]:
    records: list[WellRecord] = []
    data_rows = rows[1:]
    total = len(data_rows)
    for done, row in enumerate(data_rows, 1):
        record = extract_record(row, columns, year)
        if record is not None:
            records.append(record)
        if done % progress_every == 0 or done == total:
            report(sheet_fraction, done / total, text)
    log.debug(
        "sheet %d: kept %d of %d rows (%d dropped)",
        year, len(records), total, total - len(records),
    )
    return records


def load_wells(
    path: Path,
    report: ProgressCallback,
    *,
    progress_every: int = PROGRESS_BATCH_ROWS,
) -> Loaded:
    """Read every year sheet of the workbook at *path*.

    Sheets whose title is not an integer, and year sheets lacking the name or
    date column, are skipped. An empty year sheet aborts the whole load.

    Returns ``Loaded(records, years, wells)`` with ascending, unique years and
    well names.

    Raises
    ------
    FileNotFoundError, ValueError, OSError
        If the workbook cannot be opened.
    EmptySheetError
        If a year sheet has no non-blank rows.
    """
    if progress_every < 1:
        raise ValueError("progress_every must be >= 1")

    path = Path(path)
    report(0.0, 0.0, f"opening workbook {path.name}")
    wb = open_workbook(path)

    records: list[WellRecord] = []
    years: set[int] = set()
    wells: set[str] = set()
    try:
        sheets = wb.worksheets
        total_sheets = len(sheets)
        for idx, ws in enumerate(sheets):
            sheet_fraction = idx / total_sheets
            text = f"reading sheet {ws.title}"
            report(sheet_fraction, 0.0, text)

            year = parse_sheet_year(ws.title)
            if year is None:
                log.debug("skipping sheet %r: title is not a year", ws.title)
                continue

            # The header is the first row with any content.
            rows = list(dropwhile(_is_blank_row, ws.iter_rows()))
            if not rows:
                raise EmptySheetError(f"Empty sheet: {ws.title}")

            columns = SheetColumns.from_header(rows[0])
            if columns is None:
                log.debug("skipping sheet %r: required columns missing", ws.title)
                continue

            years.add(year)
            sheet_records = _read_sheet(
                rows,
                columns,
                year,
                sheet_fraction=sheet_fraction,
                text=text,
                report=report,
                progress_every=progress_every,
            )
            wells.update(r.well_name for r in sheet_records)
            records.extend(sheet_records)
    finally:
        wb.close()

    report(1.0, 1.0, "finishing")
    return Loaded(records=records, years=sorted(years), wells=sorted(wells))
