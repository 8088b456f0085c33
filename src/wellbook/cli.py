"""CLI entry point for wellbook."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from pathlib import Path

import pandas as pd
import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.progress import BarColumn, Progress, TaskProgressColumn, TextColumn
from rich.table import Table as RichTable

from wellbook import PROGRESS_BATCH_ROWS, __version__
from wellbook.io import write_json
from wellbook.models import Error, Loaded, Message, RunManifest, Saved, is_terminal
from wellbook.session import WellSession
from wellbook.transform import prepare_export, summarize_records
from wellbook.utils import sha256_file, utcnow_iso

app = typer.Typer(
    name="wellbook",
    help="wellbook — Split yearly well-measurement workbooks into per-well reports.",
    add_completion=False,
    no_args_is_help=True,
)
console = Console()

POLL_INTERVAL_SECONDS = 0.05


def _noop(*_args: object, **_kwargs: object) -> None:
    return None


def _printer(quiet: bool) -> Callable[..., None]:
    return _noop if quiet else console.print


def _err(msg: str) -> None:
    console.print(f"[red]x[/red] {msg}")


# ── Helpers ──────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"wellbook v{__version__}")
        raise typer.Exit()


def _configure_logging(verbose: bool) -> None:
    if not verbose:
        return
    logging.basicConfig(
        level=logging.DEBUG,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def _wait_for_job(
    session: WellSession, *, outer_label: str, inner_label: str, quiet: bool
) -> Message:
    """Poll *session* once per tick until its job delivers a terminal message."""
    terminal: Message | None = None
    with Progress(
        TextColumn("{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        console=console,
        transient=True,
        disable=quiet,
    ) as bars:
        outer = bars.add_task(outer_label, total=1.0)
        inner = bars.add_task(inner_label, total=1.0)
        while terminal is None:
            for message in session.poll():
                if is_terminal(message):
                    terminal = message
            bars.update(
                outer,
                completed=session.global_progress,
                description=f"{outer_label}: {session.status_message}",
            )
            bars.update(inner, completed=session.local_progress)
            if terminal is None:
                time.sleep(POLL_INTERVAL_SECONDS)
    return terminal


def _load(session: WellSession, input_file: Path, *, quiet: bool) -> Loaded:
    session.load(input_file)
    outcome = _wait_for_job(session, outer_label="Workbook", inner_label="Sheet", quiet=quiet)
    if isinstance(outcome, Error):
        _err(f"Could not load {input_file.name}: {outcome.text}")
        raise typer.Exit(code=2)
    assert isinstance(outcome, Loaded)
    return outcome


def _summary_table(session: WellSession) -> RichTable:
    summary = summarize_records(session.records)
    tbl = RichTable(title="Rows per well and year", show_lines=False)
    for column in ("Well", "Year", "Rows", "First", "Last"):
        tbl.add_column(column, style="bold" if column == "Well" else None)
    for row in summary.itertuples(index=False):
        first = "" if pd.isna(row.first) else str(row.first)
        last = "" if pd.isna(row.last) else str(row.last)
        tbl.add_row(escape(row.well_name), str(row.sheet_year), str(row.rows), first, last)
    return tbl


def _write_manifest(
    manifest_path: Path,
    input_file: Path,
    output_file: Path,
    session: WellSession,
) -> Path:
    start_year = session.selected_start_year or 0
    wells = sorted(session.selected_wells)
    exported, _ = prepare_export(session.records, start_year, wells)
    sha256 = ""
    try:
        sha256 = sha256_file(input_file)
    except OSError:
        pass
    manifest = RunManifest(
        version=__version__,
        input_path=str(input_file.resolve()),
        output_path=str(output_file.resolve()),
        created_at_utc=utcnow_iso(),
        start_year=start_year,
        wells=wells,
        records_in=len(session.records),
        records_out=len(exported),
        sha256=sha256,
    )
    return write_json(manifest_path, manifest.to_dict())


# ── Callbacks ────────────────────────────────────────────────────


@app.callback()
def main(
    version: bool | None = typer.Option(
        None, "--version", "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """wellbook CLI."""


# ── inspect command ──────────────────────────────────────────────


@app.command()
def inspect(
    input_file: Path = typer.Option(
        ..., "--input", "-i",
        help="Path to the yearly XLSX workbook.",
        exists=True, readable=True,
    ),
    progress_every: int = typer.Option(
        PROGRESS_BATCH_ROWS, "--progress-every",
        help="Report row progress every N rows.",
        min=1,
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q",
        help="Suppress progress bars and the per-well table.",
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v",
        help="Log skipped sheets and per-sheet row counts.",
    ),
) -> None:
    """Load a workbook and list its years and wells."""
    _configure_logging(verbose)
    echo = _printer(quiet)
    session = WellSession(progress_every=progress_every)
    loaded = _load(session, input_file, quiet=quiet)

    console.print(session.status_message)
    years = ", ".join(str(y) for y in loaded.years) or "none"
    console.print(f"  Years: {years}")
    console.print(f"  Wells: {len(loaded.wells)}")
    if loaded.records:
        echo(_summary_table(session))


# ── export command ───────────────────────────────────────────────


@app.command()
def export(
    input_file: Path = typer.Option(
        ..., "--input", "-i",
        help="Path to the yearly XLSX workbook.",
        exists=True, readable=True,
    ),
    output_file: Path = typer.Option(
        ..., "--output", "-o",
        help="Path of the per-well XLSX workbook to write.",
    ),
    start_year: int | None = typer.Option(
        None, "--start-year", "-y",
        help="First year to include (default: earliest year in the workbook).",
    ),
    wells: list[str] | None = typer.Option(
        None, "--well", "-w",
        help="Well to export; repeat for several wells.",
    ),
    all_wells: bool = typer.Option(
        False, "--all-wells",
        help="Export every well found in the workbook.",
    ),
    manifest: Path | None = typer.Option(
        None, "--manifest",
        help="Also write a JSON run manifest to this path.",
    ),
    progress_every: int = typer.Option(
        PROGRESS_BATCH_ROWS, "--progress-every",
        help="Report row progress every N rows.",
        min=1,
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q",
        help="Suppress informational output and progress bars.",
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v",
        help="Log skipped sheets, row counts and worksheet creation.",
    ),
) -> None:
    """Export selected wells from a start year into one worksheet per well."""
    _configure_logging(verbose)
    echo = _printer(quiet)

    if not quiet:
        console.print(Panel(
            f"[bold]wellbook[/bold] v{__version__}\n"
            f"Input:  {input_file}\nOutput: {output_file}",
            title="Export", border_style="blue",
        ))

    # ── Load ─────────────────────────────────────────────────────
    session = WellSession(progress_every=progress_every)
    _load(session, input_file, quiet=quiet)
    echo(f"  {session.status_message}")

    if not session.records:
        _err("No records found in any year sheet.")
        raise typer.Exit(code=2)

    # ── Select ───────────────────────────────────────────────────
    if start_year is not None:
        session.selected_start_year = start_year
    if all_wells:
        session.select_all_wells()
    for name in wells or []:
        if name in session.unique_wells:
            session.selected_wells.add(name)
        elif not quiet:
            console.print(f"  [yellow]![/yellow] Unknown well {escape(repr(name))} ignored")

    if not session.selected_wells:
        _err("Select at least one well (--well NAME or --all-wells).")
        raise typer.Exit(code=2)

    echo(
        f"  Start year: {session.selected_start_year}, "
        f"wells selected: {len(session.selected_wells)}"
    )

    # ── Export ───────────────────────────────────────────────────
    if not session.export(output_file):
        _err(session.status_message)
        raise typer.Exit(code=2)
    outcome = _wait_for_job(session, outer_label="Wells", inner_label="Rows", quiet=quiet)
    if isinstance(outcome, Error):
        _err(f"Export failed: {outcome.text}")
        raise typer.Exit(code=2)
    assert isinstance(outcome, Saved)

    if manifest is not None:
        manifest_path = _write_manifest(manifest, input_file, output_file, session)
        echo(f"  Manifest -> {manifest_path}")

    if not quiet:
        console.print(Panel(
            f"[green]Done[/green] — {session.status_message}",
            title="Export Complete", border_style="green",
        ))
