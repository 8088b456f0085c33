#!/usr/bin/env python3
"""Build a deterministic yearly well workbook for demos and manual testing."""

from __future__ import annotations

import argparse
import random
from datetime import datetime, timedelta
from pathlib import Path

from openpyxl import Workbook

from wellbook import (
    DATE_COLUMN,
    LIQUID_RATE_COLUMN,
    NAME_COLUMN,
    OIL_RATE_COLUMN,
    TEMPERATURE_COLUMN,
)

SAMPLE_YEARS = (2020, 2021, 2022)
SAMPLE_WELLS = ("A7", "B12", "C/3", 1045)
READINGS_PER_WELL = 24


def _repo_root() -> Path:
    return Path(__file__).resolve().parents[1]


def build_sample_workbook(output: Path, *, seed: int = 7) -> Path:
    rng = random.Random(seed)
    wb = Workbook()
    notes = wb.active
    assert notes is not None
    notes.title = "Notes"
    notes.append(["Sample data generated by build_sample_workbook.py"])

    for year in SAMPLE_YEARS:
        ws = wb.create_sheet(title=str(year))
        headers = [NAME_COLUMN, DATE_COLUMN, LIQUID_RATE_COLUMN, TEMPERATURE_COLUMN]
        # 2021 has no oil-rate column, like older field exports.
        if year != 2021:
            headers.insert(3, OIL_RATE_COLUMN)
        ws.append(headers)
        start = datetime(year, 1, 1, 6, 0, 0)
        for well in SAMPLE_WELLS:
            for step in range(READINGS_PER_WELL):
                liquid = round(rng.uniform(40.0, 160.0), 2)
                row = {
                    NAME_COLUMN: well,
                    DATE_COLUMN: start + timedelta(days=15 * step),
                    LIQUID_RATE_COLUMN: liquid,
                    OIL_RATE_COLUMN: round(liquid * rng.uniform(0.2, 0.6), 2),
                    TEMPERATURE_COLUMN: round(rng.uniform(55.0, 90.0), 1),
                }
                ws.append([row[h] for h in headers])

    output.parent.mkdir(parents=True, exist_ok=True)
    wb.save(output)
    return output


def main() -> None:
    parser = argparse.ArgumentParser(description="Build a sample yearly well workbook")
    parser.add_argument(
        "--output",
        type=Path,
        default=_repo_root() / "demo" / "input" / "wells_by_year.xlsx",
        help="Output workbook path.",
    )
    parser.add_argument("--seed", type=int, default=7, help="Random seed.")
    args = parser.parse_args()

    out = build_sample_workbook(args.output, seed=args.seed)
    print(f"Sample workbook -> {out}")


if __name__ == "__main__":
    main()
