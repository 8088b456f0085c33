"""Closed classification of openpyxl cell values and per-field coercions."""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any

import pandas as pd
from openpyxl.utils.datetime import from_excel


class CellKind(str, Enum):
    TEXT = "text"
    INTEGER = "integer"
    FLOAT = "float"
    DATETIME = "datetime"
    EMPTY = "empty"
    OTHER = "other"


@dataclass(frozen=True)
class CellValue:
    kind: CellKind
    value: Any = None

    @classmethod
    def classify(cls, value: Any, data_type: str = "n") -> CellValue:
        """Classify a raw cell value. ``data_type`` is openpyxl's cell type code."""
        if value is None:
            return cls(CellKind.EMPTY)
        if data_type == "e":
            return cls(CellKind.OTHER, value)
        if isinstance(value, str):
            return cls(CellKind.TEXT, value)
        # bool is an int subclass; Excel booleans are not numbers here.
        if isinstance(value, bool):
            return cls(CellKind.OTHER, value)
        if isinstance(value, int):
            return cls(CellKind.INTEGER, value)
        if isinstance(value, float):
            return cls(CellKind.FLOAT, value)
        if isinstance(value, datetime):
            return cls(CellKind.DATETIME, value)
        if isinstance(value, date):
            return cls(CellKind.DATETIME, datetime(value.year, value.month, value.day))
        return cls(CellKind.OTHER, value)

    @classmethod
    def from_cell(cls, cell: Any) -> CellValue:
        return cls.classify(getattr(cell, "value", None), getattr(cell, "data_type", "n"))


def cell_at(row: tuple[Any, ...], index: int | None) -> CellValue:
    """Return the classified cell at *index*, or EMPTY when the row is too short."""
    if index is None or index >= len(row):
        return CellValue(CellKind.EMPTY)
    return CellValue.from_cell(row[index])


# ── Coercions ────────────────────────────────────────────────────


def _format_float(value: float) -> str:
    if math.isfinite(value) and value.is_integer():
        return str(int(value))
    return str(value)


def as_well_name(cell: CellValue) -> str | None:
    if cell.kind is CellKind.TEXT:
        return cell.value
    if cell.kind is CellKind.INTEGER:
        return str(cell.value)
    if cell.kind is CellKind.FLOAT:
        return _format_float(cell.value)
    return None


def as_number(cell: CellValue) -> float | None:
    if cell.kind in (CellKind.INTEGER, CellKind.FLOAT):
        return float(cell.value)
    return None


def _naive(value: datetime) -> datetime:
    if value.tzinfo is not None:
        return value.replace(tzinfo=None)
    return value


def _parse_datetime_text(text: str) -> datetime | None:
    if not text.strip():
        return None
    try:
        parsed = pd.to_datetime(text, errors="coerce", format="mixed")
    except (ValueError, TypeError, OverflowError):
        return None
    if parsed is None or pd.isna(parsed):
        return None
    return _naive(parsed.to_pydatetime())


def as_timestamp(cell: CellValue) -> datetime | None:
    """Best-effort datetime coercion; never raises."""
    if cell.kind is CellKind.DATETIME:
        return _naive(cell.value)
    if cell.kind in (CellKind.INTEGER, CellKind.FLOAT):
        try:
            converted = from_excel(cell.value)
        except (ValueError, OverflowError, TypeError):
            return None
        # from_excel returns a time for serials below one day.
        return converted if isinstance(converted, datetime) else None
    if cell.kind is CellKind.TEXT:
        return _parse_datetime_text(cell.value)
    return None
