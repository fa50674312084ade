"""marathon-today — Print today's row from a training-plan spreadsheet."""

__version__ = "0.2.0"

RECOGNIZED_COLUMNS: dict[str, str] = {
    "Date": "date",
    "DistancePlanned": "distance planned",
    "PlanNotes": "plan notes",
    "MyNotes": "my notes",
}
"""Logical field name -> lower-cased header text it binds to."""

MANDATORY_COLUMNS: list[str] = ["Date", "DistancePlanned"]
