"""Data models shared by the engines, the job channel and the session."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from numbers import Integral, Real
from typing import Any, Union


def _to_non_negative_int(value: Any, field_name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, Integral):
        raise TypeError(f"{field_name} must be an integer")
    result = int(value)
    if result < 0:
        raise ValueError(f"{field_name} must be >= 0")
    return result


def _to_fraction(value: Any, field_name: str) -> float:
    if isinstance(value, bool) or not isinstance(value, Real):
        raise TypeError(f"{field_name} must be a number")
    result = float(value)
    if not 0.0 <= result <= 1.0:
        raise ValueError(f"{field_name} must be within [0, 1]")
    return result


def _to_string_list(values: Sequence[Any] | None, field_name: str) -> list[str]:
    if values is None:
        return []
    if isinstance(values, str):
        raise TypeError(f"{field_name} must be a sequence of strings")
    normalized: list[str] = []
    for item in values:
        if not isinstance(item, str):
            raise TypeError(f"{field_name} items must be strings")
        normalized.append(item)
    return normalized


@dataclass(frozen=True)
class WellRecord:
    """One measurement row tied to a well and the year sheet it came from."""

    well_name: str
    timestamp: datetime | None
    liquid_rate: float | None
    oil_rate: float | None
    temperature: float | None
    sheet_year: int


# ── Job messages ─────────────────────────────────────────────────


@dataclass(frozen=True)
class Progress:
    """Two-level progress: outer units (sheets/wells) and rows inside one."""

    global_fraction: float
    local_fraction: float
    text: str

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "global_fraction", _to_fraction(self.global_fraction, "global_fraction")
        )
        object.__setattr__(
            self, "local_fraction", _to_fraction(self.local_fraction, "local_fraction")
        )


@dataclass(frozen=True)
class Loaded:
    records: list[WellRecord]
    years: list[int]
    wells: list[str]


@dataclass(frozen=True)
class Saved:
    path: str


@dataclass(frozen=True)
class Error:
    text: str


ProgressCallback = Callable[[float, float, str], None]

Message = Union[Progress, Loaded, Saved, Error]
TerminalMessage = Union[Loaded, Saved, Error]
TERMINAL_TYPES = (Loaded, Saved, Error)


def is_terminal(message: Message) -> bool:
    return isinstance(message, TERMINAL_TYPES)


# ── Run manifest ─────────────────────────────────────────────────


@dataclass
class RunManifest:
    """Audit-trail manifest for a single export run."""

    tool: str = "wellbook"
    version: str = ""
    input_path: str = ""
    output_path: str = ""
    created_at_utc: str = ""
    start_year: int = 0
    wells: list[str] = field(default_factory=list)
    records_in: int = 0
    records_out: int = 0
    sha256: str = ""

    def __post_init__(self) -> None:
        self.records_in = _to_non_negative_int(self.records_in, "records_in")
        self.records_out = _to_non_negative_int(self.records_out, "records_out")
        self.wells = _to_string_list(self.wells, "wells")
        if self.records_out > self.records_in:
            raise ValueError("records_out must be <= records_in")

    def to_dict(self) -> dict[str, Any]:
        return {
            "tool": self.tool,
            "version": self.version,
            "input_path": self.input_path,
            "output_path": self.output_path,
            "created_at_utc": self.created_at_utc,
            "start_year": self.start_year,
            "wells": list(self.wells),
            "records_in": self.records_in,
            "records_out": self.records_out,
            "sha256": self.sha256,
        }
