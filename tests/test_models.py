from __future__ import annotations

import dataclasses
from datetime import datetime

import pytest

from wellbook.models import (
    Error,
    Loaded,
    Progress,
    RunManifest,
    Saved,
    WellRecord,
    is_terminal,
)


def test_progress_accepts_bounds_and_normalizes_to_float() -> None:
    msg = Progress(0, 1, "reading sheet 2020")

    assert msg.global_fraction == 0.0
    assert msg.local_fraction == 1.0
    assert isinstance(msg.global_fraction, float)


def test_progress_rejects_fractions_outside_unit_interval() -> None:
    with pytest.raises(ValueError, match="global_fraction"):
        Progress(1.5, 0.0, "x")

    with pytest.raises(ValueError, match="local_fraction"):
        Progress(0.0, -0.1, "x")


def test_progress_rejects_non_numeric_fractions() -> None:
    with pytest.raises(TypeError, match="global_fraction"):
        Progress(True, 0.0, "x")  # type: ignore[arg-type]

    with pytest.raises(TypeError, match="local_fraction"):
        Progress(0.0, "0.5", "x")  # type: ignore[arg-type]


def test_only_loaded_saved_and_error_are_terminal() -> None:
    assert not is_terminal(Progress(0.5, 0.5, "x"))
    assert is_terminal(Loaded(records=[], years=[], wells=[]))
    assert is_terminal(Saved(path="out.xlsx"))
    assert is_terminal(Error(text="boom"))


def test_well_record_is_immutable() -> None:
    record = WellRecord("A7", datetime(2020, 1, 1), 1.0, None, None, 2020)

    with pytest.raises(dataclasses.FrozenInstanceError):
        record.well_name = "B1"  # type: ignore[misc]


def test_run_manifest_to_dict_returns_list_copies() -> None:
    manifest = RunManifest(wells=["A7"], records_in=3, records_out=2)

    payload = manifest.to_dict()
    payload["wells"].append("B1")

    assert manifest.wells == ["A7"]
    assert payload["tool"] == "wellbook"


def test_run_manifest_rejects_bad_counts() -> None:
    with pytest.raises(TypeError, match="records_in"):
        RunManifest(records_in=True)  # type: ignore[arg-type]

    with pytest.raises(ValueError, match="records_out"):
        RunManifest(records_out=-1)

    with pytest.raises(ValueError, match="records_out"):
        RunManifest(records_in=1, records_out=2)


def test_run_manifest_rejects_non_string_wells() -> None:
    with pytest.raises(TypeError, match="wells"):
        RunManifest(wells="A7")  # type: ignore[arg-type]

    with pytest.raises(TypeError, match="wells"):
        RunManifest(wells=["A7", 7])  # type: ignore[list-item]
