"""Filter / sort / group well records — pure functions, no side effects."""

from __future__ import annotations

from collections.abc import Collection, Iterable
from datetime import datetime
from itertools import groupby

import pandas as pd

from wellbook.models import WellRecord


def select_records(
    records: Iterable[WellRecord], start_year: int, selected_wells: Collection[str]
) -> list[WellRecord]:
    """Keep records from *start_year* onward for the selected wells, in input order."""
    wanted = set(selected_wells)
    return [r for r in records if r.sheet_year >= start_year and r.well_name in wanted]


def _sort_key(record: WellRecord) -> tuple[str, bool, datetime]:
    # Missing timestamps sort before any real one.
    ts = record.timestamp
    return (record.well_name, ts is not None, ts if ts is not None else datetime.min)


def sort_records(records: Iterable[WellRecord]) -> list[WellRecord]:
    """Stable sort by ``(well_name, timestamp)``."""
    return sorted(records, key=_sort_key)


def wells_present(records: Iterable[WellRecord]) -> list[str]:
    return sorted({r.well_name for r in records})


def group_by_well(
    sorted_records: Iterable[WellRecord],
) -> list[tuple[str, list[WellRecord]]]:
    """Group records already sorted by well into ``(well, rows)`` pairs."""
    return [(well, list(rows)) for well, rows in groupby(sorted_records, key=lambda r: r.well_name)]


def prepare_export(
    records: Iterable[WellRecord], start_year: int, selected_wells: Collection[str]
) -> tuple[list[WellRecord], list[str]]:
    """Return ``(sorted_records, wells)`` ready for the export engine."""
    ordered = sort_records(select_records(records, start_year, selected_wells))
    return ordered, wells_present(ordered)


# ── Summary helpers ─────────────────────────────────────────────


def records_frame(records: Iterable[WellRecord]) -> pd.DataFrame:
    rows = [
        {
            "well_name": r.well_name,
            "sheet_year": r.sheet_year,
            "timestamp": r.timestamp,
            "liquid_rate": r.liquid_rate,
            "oil_rate": r.oil_rate,
            "temperature": r.temperature,
        }
        for r in records
    ]
    columns = ["well_name", "sheet_year", "timestamp", "liquid_rate", "oil_rate", "temperature"]
    df = pd.DataFrame(rows, columns=columns)
    df["timestamp"] = pd.to_datetime(df["timestamp"], errors="coerce")
    return df


def summarize_records(records: Iterable[WellRecord]) -> pd.DataFrame:
    """Rows, first and last timestamp per ``(well_name, sheet_year)``."""
    df = records_frame(records)
    if df.empty:
        return pd.DataFrame(columns=["well_name", "sheet_year", "rows", "first", "last"])
    return (
        df.groupby(["well_name", "sheet_year"], as_index=False)
        .agg(rows=("liquid_rate", "size"), first=("timestamp", "min"), last=("timestamp", "max"))
        .sort_values(["well_name", "sheet_year"])
        .reset_index(drop=True)
    )
