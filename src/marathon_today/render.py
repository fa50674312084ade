"""Renderers for the matched row: text, JSON or a summary."""

from __future__ import annotations

import json
from collections.abc import Iterator, Sequence
from datetime import date

from marathon_today.config import OutputFormat, RunConfig
from marathon_today.models import ExtractedFields, MatchedRow
from marathon_today.utils import format_distance, today_encodings

NO_DATA_NOTICE = "No data found."


def display_name(header_cell: str) -> str:
    return header_cell.replace("\n", " ")


def not_found_notice(today: date) -> str:
    return f"No plan found for today ({today_encodings(today)[0]})."


def _in_range_fields(
    header: Sequence[str], row: MatchedRow
) -> Iterator[tuple[int, str, str]]:
    """Yield ``(index, name, value)`` for header fields the row reaches."""
    for idx, name in enumerate(header):
        if idx < len(row.cells):
            yield idx, display_name(name), row.cells[idx]


# ── Text ─────────────────────────────────────────────────────────


def render_text(header: Sequence[str], row: MatchedRow | None, today: date) -> str:
    if row is None:
        return not_found_notice(today) + "\n"
    return "".join(f"{name}: {value}\n" for _, name, value in _in_range_fields(header, row))


# ── JSON ─────────────────────────────────────────────────────────


def _quote(text: str) -> str:
    return json.dumps(text, ensure_ascii=False)


def render_json(header: Sequence[str], row: MatchedRow | None) -> str:
    """Valid JSON object; keys and values escaped, header order kept.

    Duplicate header names are emitted as duplicate keys.
    """
    if row is None:
        return "{}\n"
    pairs = [f"  {_quote(name)}: {_quote(value)}" for _, name, value in _in_range_fields(header, row)]
    if not pairs:
        return "{}\n"
    return "{\n" + ",\n".join(pairs) + "\n}\n"


def render_legacy_json(header: Sequence[str], row: MatchedRow | None) -> str:
    """Legacy layout: no escaping, comma decided by header position.

    The comma for a field is written at the start of the following line and
    is skipped only for the field at the last header index, so a row shorter
    than the header leaves a dangling comma. The old tool decided by the
    row's length instead; the two agree when row and header are equally wide.
    """
    parts = ["{\n"]
    if row is not None:
        last = len(header) - 1
        for idx, name, value in _in_range_fields(header, row):
            parts.append(f'"{name}": "{value}"\n')
            if idx < last:
                parts.append(",")
    parts.append("}\n")
    return "".join(parts)


# ── Summary ──────────────────────────────────────────────────────


def render_summary(fields: ExtractedFields | None, today: date) -> str:
    label = today_encodings(today)[0]
    if fields is None:
        return f"Did not find planned distance for today ({label})!\n"
    lines = [f"Planned Distance today ({label}): {format_distance(fields.planned_distance)} mi"]
    if fields.plan_notes_found:
        lines.extend(["Plan Notes:", fields.plan_notes])
    if fields.my_notes_found:
        lines.extend(["My Notes:", fields.my_notes])
    return "\n".join(lines) + "\n"


# ── Dispatch ─────────────────────────────────────────────────────


def render(
    header: Sequence[str],
    row: MatchedRow | None,
    fields: ExtractedFields | None,
    config: RunConfig,
    today: date,
) -> str:
    """Render the payload for *config*'s output format."""
    if config.output_format is OutputFormat.summary:
        return render_summary(fields, today)
    if config.output_format is OutputFormat.json:
        if config.legacy_json:
            return render_legacy_json(header, row)
        return render_json(header, row)
    return render_text(header, row, today)
