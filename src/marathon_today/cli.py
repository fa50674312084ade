"""CLI entry point for marathon-today."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime
from pathlib import Path

import typer
from dotenv import load_dotenv
from openpyxl.utils import get_column_letter
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table as RichTable

from marathon_today import MANDATORY_COLUMNS, RECOGNIZED_COLUMNS, __version__
from marathon_today.config import (
    DEFAULT_CREDENTIALS_PATH,
    DEFAULT_READ_RANGE,
    DEFAULT_TOKEN_PATH,
    OutputFormat,
    RunConfig,
    SheetSettings,
)
from marathon_today.errors import ConfigurationError, ParseError, SheetError
from marathon_today.io import load_grid
from marathon_today.models import Grid
from marathon_today.pipeline import extract_fields, find_today_row, resolve_columns
from marathon_today.render import NO_DATA_NOTICE, display_name, not_found_notice, render
from marathon_today.sheets import fetch_grid
from marathon_today.utils import local_today, today_encodings

app = typer.Typer(
    name="mtoday",
    help="marathon-today — Print today's row from a training-plan spreadsheet.",
    add_completion=False,
    no_args_is_help=True,
)
console = Console()
err_console = Console(stderr=True, soft_wrap=True)

_SOURCE_ERRORS = (FileNotFoundError, ValueError, OSError, TypeError, SheetError)


def _noop(*_args: object, **_kwargs: object) -> None:
    return None


def _tracer(debug: bool) -> Callable[..., None]:
    """Return a printer for the stderr debug trace, or a no-op."""
    if not debug:
        return _noop

    def _trace(msg: str) -> None:
        err_console.print(f"[dim]{escape(msg)}[/dim]")

    return _trace


def _err(msg: str) -> None:
    err_console.print(f"[red]x[/red] {escape(msg)}")


# ── Helpers ──────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"marathon-today v{__version__}")
        raise typer.Exit()


def _load_source(
    *,
    input_file: Path | None,
    spreadsheet_id: str | None,
    read_range: str,
    credentials: Path,
    token: Path,
    delimiter: str | None,
    trace: Callable[..., None],
) -> Grid:
    """Load the grid from a local export or from Google Sheets."""
    if input_file is not None:
        trace(f"Reading grid from {input_file}")
        return load_grid(input_file, delimiter=delimiter)
    if not spreadsheet_id:
        raise ValueError(
            "No grid source: pass --input FILE or --spreadsheet-id "
            "(or set MARATHON_SPREADSHEET_ID)"
        )
    settings = SheetSettings(
        spreadsheet_id=spreadsheet_id,
        read_range=read_range,
        credentials_path=credentials,
        token_path=token,
    )
    return fetch_grid(settings, notify=trace)


def _trace_grid(grid: Grid, trace: Callable[..., None]) -> None:
    trace(f"Grid: {len(grid.rows)} data rows x {grid.width} columns")
    trace(f"Header: {[display_name(h) for h in grid.header]}")


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
    """marathon-today CLI."""
    load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)


# ── show command ─────────────────────────────────────────────────


@app.command()
def show(
    input_file: Path | None = typer.Option(
        None, "--input", "-i",
        help="Read a local CSV/XLSX export instead of Google Sheets.",
        exists=True, readable=True, dir_okay=False,
    ),
    spreadsheet_id: str | None = typer.Option(
        None, "--spreadsheet-id", "-s",
        envvar="MARATHON_SPREADSHEET_ID",
        help="Google Sheets spreadsheet id.",
    ),
    read_range: str = typer.Option(
        DEFAULT_READ_RANGE, "--range", "-r",
        envvar="MARATHON_SHEET_RANGE",
        help="Sheet name or A1 range to read.",
    ),
    credentials: Path = typer.Option(
        DEFAULT_CREDENTIALS_PATH, "--credentials",
        envvar="MARATHON_CREDENTIALS",
        help="OAuth client secrets file.",
    ),
    token: Path = typer.Option(
        DEFAULT_TOKEN_PATH, "--token",
        envvar="MARATHON_TOKEN",
        help="Cached OAuth token file (created on first run).",
    ),
    output_format: OutputFormat = typer.Option(
        OutputFormat.text, "--format", "-f",
        help="Output format: text, json, or summary.",
    ),
    legacy_json: bool = typer.Option(
        False, "--legacy-json",
        help="With --format json, reproduce the legacy unescaped layout.",
    ),
    as_of: datetime | None = typer.Option(
        None, "--date",
        formats=["%Y-%m-%d"],
        help="Use this date instead of today (YYYY-MM-DD).",
    ),
    delimiter: str | None = typer.Option(
        None, "--delimiter", "-d",
        help="CSV delimiter for --input (sniffed when omitted).",
    ),
    debug: bool = typer.Option(
        False, "--debug",
        help="Print debugging messages to stderr.",
    ),
) -> None:
    """Print today's row of the training plan."""
    config = RunConfig(output_format=output_format, debug=debug, legacy_json=legacy_json)
    trace = _tracer(config.debug)
    trace("Debug logging enabled")
    today = as_of.date() if as_of else local_today()

    # ── Load ─────────────────────────────────────────────────────
    try:
        grid = _load_source(
            input_file=input_file,
            spreadsheet_id=spreadsheet_id,
            read_range=read_range,
            credentials=credentials,
            token=token,
            delimiter=delimiter,
            trace=trace,
        )
    except _SOURCE_ERRORS as exc:
        _err(str(exc))
        raise typer.Exit(code=2)

    if grid.is_empty:
        typer.echo(NO_DATA_NOTICE)
        return
    _trace_grid(grid, trace)

    try:
        # ── Resolve + match ──────────────────────────────────────
        columns = resolve_columns(grid.header)
        trace(f"Columns: {columns.positions}")
        trace(f"Today: {' or '.join(today_encodings(today))}")
        row = find_today_row(grid, columns, today, trace=trace if config.debug else None)

        # ── Extract ──────────────────────────────────────────────
        fields = None
        if row is not None:
            trace(f"Matched row {row.row_number}: {list(row.cells)}")
            fields = extract_fields(row, columns)
            trace(f"Fields: {fields.to_dict()}")

        # ── Render ───────────────────────────────────────────────
        payload = render(grid.header, row, fields, config, today)
    except ConfigurationError as exc:
        _err(str(exc))
        err_console.print("  Expected header cells: Date, Distance Planned")
        raise typer.Exit(code=2)
    except ParseError as exc:
        _err(str(exc))
        raise typer.Exit(code=2)
    except typer.Exit:
        raise
    except Exception as exc:
        _err(f"Unexpected internal error: {exc}")
        raise typer.Exit(code=1)

    if row is None and config.output_format is OutputFormat.json:
        err_console.print(escape(not_found_notice(today)))
    typer.echo(payload, nl=False)


# ── check command ────────────────────────────────────────────────


@app.command()
def check(
    input_file: Path | None = typer.Option(
        None, "--input", "-i",
        help="Read a local CSV/XLSX export instead of Google Sheets.",
        exists=True, readable=True, dir_okay=False,
    ),
    spreadsheet_id: str | None = typer.Option(
        None, "--spreadsheet-id", "-s",
        envvar="MARATHON_SPREADSHEET_ID",
        help="Google Sheets spreadsheet id.",
    ),
    read_range: str = typer.Option(
        DEFAULT_READ_RANGE, "--range", "-r",
        envvar="MARATHON_SHEET_RANGE",
        help="Sheet name or A1 range to read.",
    ),
    credentials: Path = typer.Option(
        DEFAULT_CREDENTIALS_PATH, "--credentials",
        envvar="MARATHON_CREDENTIALS",
        help="OAuth client secrets file.",
    ),
    token: Path = typer.Option(
        DEFAULT_TOKEN_PATH, "--token",
        envvar="MARATHON_TOKEN",
        help="Cached OAuth token file (created on first run).",
    ),
    delimiter: str | None = typer.Option(
        None, "--delimiter", "-d",
        help="CSV delimiter for --input (sniffed when omitted).",
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q",
        help="Only set the exit code; print nothing on success.",
    ),
) -> None:
    """Check which plan columns the header row provides.

    Exit 0 = Date and Distance Planned found, exit 2 = missing or unreadable.
    """
    try:
        grid = _load_source(
            input_file=input_file,
            spreadsheet_id=spreadsheet_id,
            read_range=read_range,
            credentials=credentials,
            token=token,
            delimiter=delimiter,
            trace=_noop,
        )
    except _SOURCE_ERRORS as exc:
        _err(str(exc))
        raise typer.Exit(code=2)

    columns = resolve_columns(grid.header)
    missing = columns.missing(MANDATORY_COLUMNS)

    if not quiet:
        console.print(Panel(
            f"[bold]marathon-today[/bold] v{__version__}  [dim]check mode[/dim]\n"
            f"Source: {escape(str(input_file or spreadsheet_id))}\n"
            f"Rows: {len(grid.rows)}",
            title="Check", border_style="cyan",
        ))
        tbl = RichTable(title="Plan Columns", show_lines=True)
        tbl.add_column("Field", style="bold")
        tbl.add_column("Header")
        tbl.add_column("Column")
        tbl.add_column("Status")
        for name, wanted in RECOGNIZED_COLUMNS.items():
            position = columns.position(name)
            if position is not None:
                tbl.add_row(
                    name,
                    escape(display_name(grid.header[position])),
                    get_column_letter(position + 1),
                    "[green]found[/green]",
                )
            elif name in MANDATORY_COLUMNS:
                tbl.add_row(name, wanted, "-", "[red]MISSING[/red]")
            else:
                tbl.add_row(name, wanted, "-", "[yellow]absent (optional)[/yellow]")
        console.print(tbl)

    if missing:
        _err(str(ConfigurationError(missing)))
        raise typer.Exit(code=2)
