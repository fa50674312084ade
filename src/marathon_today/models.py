"""Data models shared by the pipeline, renderer and grid sources."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import Any


def _to_string_row(values: Sequence[Any], row_number: int) -> tuple[str, ...]:
    if isinstance(values, str):
        raise TypeError(f"row {row_number} must be a sequence of strings, not a string")
    cells: list[str] = []
    for col, item in enumerate(values):
        if not isinstance(item, str):
            raise TypeError(
                f"row {row_number}, column {col}: cell must be a string "
                f"(got {type(item).__name__})"
            )
        cells.append(item)
    return tuple(cells)


@dataclass(frozen=True)
class Grid:
    """Header row plus data rows, every cell as text.

    Rows may be shorter than the header; that is legal.
    """

    header: tuple[str, ...] = ()
    rows: tuple[tuple[str, ...], ...] = ()

    @classmethod
    def from_values(cls, values: Iterable[Sequence[Any]] | None) -> Grid:
        """Validate raw values (row 0 = header) into a ``Grid``.

        Raises
        ------
        TypeError
            If a row is not a sequence or a cell is not a ``str``.
        """
        if values is None:
            return cls()
        rows = [_to_string_row(row, n) for n, row in enumerate(values)]
        if not rows:
            return cls()
        return cls(header=rows[0], rows=tuple(rows[1:]))

    @property
    def is_empty(self) -> bool:
        return not self.header and not self.rows

    @property
    def width(self) -> int:
        return max([len(self.header), *(len(r) for r in self.rows)])


@dataclass(frozen=True)
class ColumnIndex:
    """Logical field name -> physical column position; absent key = not found."""

    positions: dict[str, int] = field(default_factory=dict)

    def position(self, name: str) -> int | None:
        return self.positions.get(name)

    def found(self, name: str) -> bool:
        return name in self.positions

    def missing(self, names: Iterable[str]) -> list[str]:
        return [n for n in names if n not in self.positions]


@dataclass(frozen=True)
class MatchedRow:
    row_number: int
    cells: tuple[str, ...]

    def cell(self, position: int | None) -> str | None:
        """Return the cell at *position*, or ``None`` when the row is too short."""
        if position is None or position >= len(self.cells):
            return None
        return self.cells[position]


@dataclass(frozen=True)
class ExtractedFields:
    planned_distance: float
    plan_notes: str = ""
    my_notes: str = ""
    plan_notes_found: bool = False
    my_notes_found: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "planned_distance": self.planned_distance,
            "plan_notes": self.plan_notes,
            "my_notes": self.my_notes,
            "plan_notes_found": self.plan_notes_found,
            "my_notes_found": self.my_notes_found,
        }
