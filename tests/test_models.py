from __future__ import annotations

import pytest

from marathon_today.config import RunConfig, SheetSettings
from marathon_today.errors import ConfigurationError, ParseError
from marathon_today.models import ColumnIndex, ExtractedFields, Grid, MatchedRow


def test_grid_from_values_splits_header_and_keeps_ragged_rows() -> None:
    grid = Grid.from_values([["Date", "Distance Planned", "My Notes"], ["01/15", "5"], []])

    assert grid.header == ("Date", "Distance Planned", "My Notes")
    assert grid.rows == (("01/15", "5"), ())
    assert grid.width == 3
    assert not grid.is_empty


def test_grid_from_values_empty_and_none() -> None:
    assert Grid.from_values([]).is_empty
    assert Grid.from_values(None).is_empty


def test_grid_rejects_non_string_cells_at_ingestion() -> None:
    with pytest.raises(TypeError, match="row 1, column 1"):
        Grid.from_values([["Date", "Distance Planned"], ["01/15", 5.5]])


def test_grid_rejects_string_rows() -> None:
    with pytest.raises(TypeError, match="row 0"):
        Grid.from_values(["Date"])  # type: ignore[list-item]


def test_column_index_presence_flags() -> None:
    columns = ColumnIndex(positions={"Date": 0, "PlanNotes": 3})

    assert columns.found("Date")
    assert not columns.found("MyNotes")
    assert columns.position("PlanNotes") == 3
    assert columns.position("MyNotes") is None
    assert columns.missing(["Date", "DistancePlanned"]) == ["DistancePlanned"]


def test_matched_row_cell_is_none_past_end() -> None:
    row = MatchedRow(row_number=4, cells=("01/15", "5"))

    assert row.cell(1) == "5"
    assert row.cell(2) is None
    assert row.cell(None) is None


def test_extracted_fields_to_dict() -> None:
    fields = ExtractedFields(planned_distance=5.5, plan_notes="Easy", plan_notes_found=True)

    assert fields.to_dict() == {
        "planned_distance": 5.5,
        "plan_notes": "Easy",
        "my_notes": "",
        "plan_notes_found": True,
        "my_notes_found": False,
    }


def test_error_messages_name_the_problem() -> None:
    assert "'Distance Planned'" in str(ConfigurationError(["DistancePlanned"]))
    err = ParseError("abc")
    assert err.text == "abc"
    assert "'abc'" in str(err)


def test_run_config_is_immutable() -> None:
    config = RunConfig()

    with pytest.raises(AttributeError):
        config.debug = True  # type: ignore[misc]


def test_sheet_settings_rejects_blank_values() -> None:
    with pytest.raises(ValueError, match="spreadsheet_id"):
        SheetSettings(spreadsheet_id="  ")

    with pytest.raises(ValueError, match="read_range"):
        SheetSettings(spreadsheet_id="abc", read_range="")
