"""Shared helpers: clock, date encodings, number display."""

from __future__ import annotations

import math
from datetime import date


def local_today() -> date:
    """Return the host's local calendar date."""
    return date.today()


def today_encodings(today: date) -> tuple[str, str]:
    """Return the zero-padded ``MM/DD`` and bare ``M/D`` forms of *today*."""
    return f"{today.month:02d}/{today.day:02d}", f"{today.month}/{today.day}"


def format_distance(value: float) -> str:
    """Shortest display for a distance: ``5.0`` -> ``5``, ``5.5`` -> ``5.5``."""
    if math.isfinite(value) and value.is_integer():
        return str(int(value))
    return repr(value)
