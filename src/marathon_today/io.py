"""Local grid source — load an exported sheet (CSV/XLSX) as a ``Grid``."""

from __future__ import annotations

import csv
from datetime import date
from pathlib import Path
from typing import Callable, cast

import pandas as pd

from marathon_today.models import Grid

_SNIFF_DELIMITERS = ",;\t|"

# ── Loading ──────────────────────────────────────────────────────


def _scan_csv(path: Path, encoding: str, delimiter: str | None) -> tuple[str, int]:
    """Return the delimiter to use and the widest row's field count."""
    with open(path, newline="", encoding=encoding, errors="strict") as fh:
        if delimiter is None:
            first = fh.readline()
            try:
                delimiter = csv.Sniffer().sniff(first, delimiters=_SNIFF_DELIMITERS).delimiter
            except csv.Error:
                delimiter = ","
            fh.seek(0)
        width = max((len(row) for row in csv.reader(fh, delimiter=delimiter)), default=0)
    return delimiter, width


def _read_raw(path: Path, delimiter: str | None) -> pd.DataFrame:
    suffix = path.suffix.lower()
    if suffix in (".csv", ".tsv"):
        last_exc: Exception | None = None
        if not delimiter and suffix == ".tsv":
            delimiter = "\t"
        for encoding in ("utf-8-sig", "utf-8", "latin-1"):
            try:
                sep, width = _scan_csv(path, encoding, delimiter or None)
                if width == 0:
                    return pd.DataFrame()
                # Explicit names keep rows wider than the header row.
                return pd.read_csv(
                    path,
                    header=None,
                    names=list(range(width)),
                    dtype="string",
                    sep=sep,
                    engine="c",
                    encoding=encoding,
                    encoding_errors="strict",
                    keep_default_na=False,
                    skip_blank_lines=False,
                )
            except (UnicodeDecodeError, csv.Error, pd.errors.ParserError) as exc:
                last_exc = exc
        raise ValueError(f"Could not read CSV {path} (decode or parse failed)") from last_exc

    if suffix in (".xlsx", ".xlsm", ".xltx", ".xltm"):
        read_excel = cast(Callable[..., pd.DataFrame], getattr(pd, "read_excel"))
        return read_excel(path, engine="openpyxl", header=None, dtype=object)

    raise ValueError(f"Unsupported file type: {suffix!r}. Use .csv, .tsv, or .xlsx")


def _cell_text(value: object) -> str:
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return ""
    # Date-typed cells (XLSX exports) show as MM/DD, the form the sheet displays.
    if isinstance(value, date):
        return f"{value.month:02d}/{value.day:02d}"
    return str(value)


def _trim_row(values: list[object]) -> list[str]:
    cells = [_cell_text(v) for v in values]
    while cells and cells[-1] == "":
        cells.pop()
    return cells


def frame_to_grid(df: pd.DataFrame) -> Grid:
    """Turn a header-less frame into a ragged ``Grid``.

    Trailing empty cells are dropped from every row, the same shape the
    Sheets values API returns.
    """
    rows = [_trim_row(list(record)) for record in df.itertuples(index=False, name=None)]
    while rows and not rows[-1]:
        rows.pop()
    return Grid.from_values(rows)


def load_grid(path: Path, delimiter: str | None = None) -> Grid:
    """Load a CSV or Excel export of the plan sheet.

    Raises
    ------
    FileNotFoundError
        If *path* does not exist.
    ValueError
        If the extension is not supported, or CSV decoding/parsing fails.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Input file not found: {path}")
    if path.is_dir():
        raise ValueError(f"Input path is a directory, not a file: {path}")
    try:
        df = _read_raw(path, delimiter)
    except pd.errors.EmptyDataError:
        return Grid()
    return frame_to_grid(df)
