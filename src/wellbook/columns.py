"""Header-row column resolution for year sheets."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from wellbook import (
    DATE_COLUMN,
    LIQUID_RATE_COLUMN,
    NAME_COLUMN,
    OIL_RATE_COLUMN,
    TEMPERATURE_COLUMN,
)
from wellbook.cells import CellKind, CellValue


def resolve_columns(header: Iterable[Any]) -> dict[str, int]:
    """Map exact header text to its zero-based column index.

    Non-text header cells are ignored. A repeated header keeps the last index.
    """
    mapping: dict[str, int] = {}
    for idx, cell in enumerate(header):
        value = CellValue.from_cell(cell)
        if value.kind is CellKind.TEXT:
            mapping[value.value] = idx
    return mapping


@dataclass(frozen=True)
class SheetColumns:
    name: int
    date: int
    liquid_rate: int | None = None
    oil_rate: int | None = None
    temperature: int | None = None

    @classmethod
    def from_header(cls, header: Iterable[Any]) -> SheetColumns | None:
        """Return the resolved columns, or ``None`` if a required one is missing."""
        mapping = resolve_columns(header)
        name_idx = mapping.get(NAME_COLUMN)
        date_idx = mapping.get(DATE_COLUMN)
        if name_idx is None or date_idx is None:
            return None
        return cls(
            name=name_idx,
            date=date_idx,
            liquid_rate=mapping.get(LIQUID_RATE_COLUMN),
            oil_rate=mapping.get(OIL_RATE_COLUMN),
            temperature=mapping.get(TEMPERATURE_COLUMN),
        )
