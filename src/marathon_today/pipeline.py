"""Column resolution, date matching and field extraction — pure functions."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from datetime import date

from marathon_today import MANDATORY_COLUMNS, RECOGNIZED_COLUMNS
from marathon_today.errors import ConfigurationError, ParseError
from marathon_today.models import ColumnIndex, ExtractedFields, Grid, MatchedRow
from marathon_today.utils import today_encodings

# ── Column resolver ──────────────────────────────────────────────


def resolve_columns(header: Sequence[str]) -> ColumnIndex:
    """Bind each recognized field to the leftmost header cell naming it.

    Comparison is case-insensitive and exact on the raw cell text.
    """
    positions: dict[str, int] = {}
    for idx, cell in enumerate(header):
        lowered = cell.lower()
        for name, wanted in RECOGNIZED_COLUMNS.items():
            if lowered == wanted and name not in positions:
                positions[name] = idx
    return ColumnIndex(positions=positions)


def require_columns(columns: ColumnIndex) -> None:
    """Raise ``ConfigurationError`` unless every mandatory column resolved."""
    missing = columns.missing(MANDATORY_COLUMNS)
    if missing:
        raise ConfigurationError(missing)


# ── Date matcher ─────────────────────────────────────────────────


def find_today_row(
    grid: Grid,
    columns: ColumnIndex,
    today: date,
    *,
    trace: Callable[[str], None] | None = None,
) -> MatchedRow | None:
    """Return the first data row whose Date cell equals *today*, else ``None``.

    Raises
    ------
    ConfigurationError
        If Date or DistancePlanned did not resolve; raised before any row
        is looked at.
    """
    require_columns(columns)
    date_col = columns.positions["Date"]
    distance_col = columns.positions["DistancePlanned"]
    needed = max(date_col, distance_col) + 1
    accepted = today_encodings(today)

    for row_number, row in enumerate(grid.rows, start=1):
        if len(row) < needed:
            if trace:
                trace(f"row {row_number}: {len(row)} cells, too short to match")
            continue
        cell = row[date_col]
        if trace:
            trace(f"row {row_number}: date {cell!r}")
        if cell in accepted:
            return MatchedRow(row_number=row_number, cells=row)
    return None


# ── Row extractor ────────────────────────────────────────────────


def parse_distance(text: str) -> float:
    """Parse a plain decimal number; padding and digit underscores are rejected."""
    if text != text.strip() or "_" in text:
        raise ParseError(text)
    try:
        return float(text)
    except ValueError as exc:
        raise ParseError(text) from exc


def extract_fields(row: MatchedRow, columns: ColumnIndex) -> ExtractedFields:
    """Pull the planned distance and both notes out of *row*."""
    distance_text = row.cell(columns.position("DistancePlanned"))
    if distance_text is None:
        raise ParseError("")
    plan_notes = row.cell(columns.position("PlanNotes"))
    my_notes = row.cell(columns.position("MyNotes"))
    return ExtractedFields(
        planned_distance=parse_distance(distance_text),
        plan_notes=plan_notes or "",
        my_notes=my_notes or "",
        plan_notes_found=plan_notes is not None,
        my_notes_found=my_notes is not None,
    )
