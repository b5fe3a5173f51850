"""Tests for the text-to-view census pipeline."""

from __future__ import annotations

from services.census.app.models import NURSING_CENSUS, ROUNDING, SortColumn, SortKey
from services.census.app.pipelines.census_pipeline import (
    MARK_PREFIX,
    CensusPipeline,
    MarkingMode,
    describe_columns,
)

CENSUS_TEXT = """\
# Example input (dummy data)
DOE, JANE A NURS N TR N03 D 72 years Female 123456789  0.8 Days Smith MD, John Alpha Note Here
SMITH, ROBERT B NURS S TR S15 W 65 years Male 987654321  1.6 Days Adams DO, Mary Beta Program Note
BROWN, LINDA C 230 D 79 years Female 555444333 12.9 Days Shah MD, Shilpan H Raval MD
not a census line
"""


def test_build_uses_profile_default_sort_and_low_los_priority() -> None:
    view = CensusPipeline(ROUNDING).build(CENSUS_TEXT)

    assert [row.record.raw_name for row in view.rows] == [
        "DOE, JANE A",
        "BROWN, LINDA C",
        "SMITH, ROBERT B",
    ]
    assert [row.index for row in view.rows] == [1, 2, 3]
    assert view.sort_keys == (SortKey(SortColumn.ROOM), SortKey(SortColumn.BED))
    assert view.rejected == 1


def test_build_without_priority_sorts_everything_together() -> None:
    view = CensusPipeline(ROUNDING).build(CENSUS_TEXT, prioritize_low_los=False)

    assert [row.record.room for row in view.rows] == ["230", "N03", "S15"]


def test_build_honours_caller_sort_keys() -> None:
    keys = [SortKey(SortColumn.LOS, ascending=False)]

    view = CensusPipeline(ROUNDING).build(CENSUS_TEXT, keys, prioritize_low_los=False)

    assert [row.record.length_of_stay for row in view.rows] == [12.9, 1.6, 0.8]
    assert view.sort_keys == tuple(keys)


def test_stars_marking_prefixes_marked_names() -> None:
    view = CensusPipeline(ROUNDING).build(CENSUS_TEXT, marking=MarkingMode.STARS)
    names = {row.record.room: row.display_name for row in view.rows}

    assert names["S15"] == f"{MARK_PREFIX}SMITH, ROBERT B"
    assert names["N03"] == "DOE, JANE A"
    assert not any(row.highlighted for row in view.rows)


def test_highlight_marking_flags_rows_without_renaming() -> None:
    view = CensusPipeline(ROUNDING).build(CENSUS_TEXT, marking=MarkingMode.HIGHLIGHT)

    highlighted = [row.record.room for row in view.rows if row.highlighted]
    assert highlighted == ["S15"]
    assert all(row.display_name == row.record.raw_name for row in view.rows)


def test_no_marking_still_exposes_marked_flag() -> None:
    view = CensusPipeline(ROUNDING).build(CENSUS_TEXT, marking=MarkingMode.NONE)

    assert [row.record.marked for row in view.rows] == [False, False, True]
    assert not any(row.highlighted for row in view.rows)


def test_columns_describe_sort_positions() -> None:
    keys = (SortKey(SortColumn.LOS, ascending=False), SortKey(SortColumn.ROOM))

    states = {state.column: state for state in describe_columns(ROUNDING, keys)}

    assert list(states) == list(ROUNDING.columns)
    assert states[SortColumn.LOS].position == 0
    assert states[SortColumn.LOS].ascending is False
    assert states[SortColumn.ROOM].position == 1
    assert states[SortColumn.NAME].position is None
    assert states[SortColumn.NAME].ascending is None
    assert states[SortColumn.PHYSICIANS].title == "Physicians + Notes"


def test_nursing_profile_drops_numeric_rooms() -> None:
    view = CensusPipeline(NURSING_CENSUS).build(CENSUS_TEXT)

    assert [row.record.room for row in view.rows] == ["N03", "S15"]
    assert view.rejected == 2
    assert [row.record.unit for row in view.rows] == ["NURS", "NURS"]


def test_empty_text_builds_empty_view() -> None:
    view = CensusPipeline().build("")

    assert view.rows == ()
    assert view.records == []
    assert view.rejected == 0
