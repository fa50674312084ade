"""Error kinds raised by the row-resolution pipeline and grid sources."""

from __future__ import annotations

from collections.abc import Sequence

from marathon_today import RECOGNIZED_COLUMNS


class ConfigurationError(ValueError):
    """Mandatory columns are absent from the header row."""

    def __init__(self, missing: Sequence[str]) -> None:
        self.missing = list(missing)
        names = ", ".join(repr(RECOGNIZED_COLUMNS.get(m, m).title()) for m in self.missing)
        super().__init__(f"Did not find required column(s) in header row: {names}")


class ParseError(ValueError):
    """The matched row's planned distance is not a number."""

    def __init__(self, text: str) -> None:
        self.text = text
        super().__init__(f"Error parsing planned distance ({text!r})")


class SheetError(Exception):
    """Credential or transport failure talking to Google Sheets."""
