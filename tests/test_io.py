from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path

import pytest

from wellbook.io import open_workbook, write_json
from wellbook.utils import sha256_file, utcnow_iso


def test_open_workbook_missing_file_raises(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError, match="Input file not found"):
        open_workbook(tmp_path / "missing.xlsx")


def test_open_workbook_rejects_unsupported_suffix(tmp_path: Path) -> None:
    csv_path = tmp_path / "wells.csv"
    csv_path.write_text("a,b\n1,2\n", encoding="utf-8")

    with pytest.raises(ValueError, match="Unsupported file type"):
        open_workbook(csv_path)


def test_open_workbook_wraps_container_errors(tmp_path: Path) -> None:
    bad = tmp_path / "bad.xlsx"
    bad.write_bytes(b"PK-but-not-really")

    with pytest.raises(ValueError, match="Could not open workbook"):
        open_workbook(bad)


def test_open_workbook_is_read_only(make_workbook) -> None:  # type: ignore[no-untyped-def]
    path = make_workbook([("2020", [["x"]])])

    wb = open_workbook(path)
    try:
        assert wb.read_only
        assert wb.sheetnames == ["2020"]
    finally:
        wb.close()


def test_write_json_is_deterministic_and_atomic(tmp_path: Path) -> None:
    out = tmp_path / "nested" / "manifest.json"

    write_json(out, {"b": 1, "a": {"z", "y"}, "when": datetime(2021, 1, 2, 3, 4, 5)})

    text = out.read_text(encoding="utf-8")
    assert text.endswith("\n")
    assert json.loads(text) == {"a": ["y", "z"], "b": 1, "when": "2021-01-02T03:04:05"}
    assert text.index('"a"') < text.index('"b"')
    assert not (tmp_path / "nested" / "manifest.json.tmp").exists()


def test_write_json_rejects_unknown_objects(tmp_path: Path) -> None:
    with pytest.raises(TypeError, match="not JSON serializable"):
        write_json(tmp_path / "x.json", {"obj": object()})


def test_sha256_file_matches_known_digest(tmp_path: Path) -> None:
    path = tmp_path / "data.bin"
    path.write_bytes(b"abc")

    assert sha256_file(path) == (
        "ba7816bf8f01cfea414140de5dae2223b00361a396177a9cb410ff61f20015ad"
    )


def test_utcnow_iso_is_second_precision_utc() -> None:
    stamp = utcnow_iso()

    assert stamp.endswith("+00:00")
    assert "." not in stamp
