"""Tests for column visibility, widths and grouping."""

from collections.abc import Callable

import pytest

from spreadsheet_pdf.models import SheetKind
from spreadsheet_pdf.services.column_planner import (
    column_width_points,
    group_columns,
    is_calendar_layout,
    non_empty_columns,
    normalize_widths,
    plan_columns,
)
from spreadsheet_pdf.workbook import Sheet

SheetFactory = Callable[..., Sheet]

AVAILABLE_WIDTH = 523.0


class TestNonEmptyColumns:
    """Tests for column visibility."""

    def test_blank_columns_are_hidden(self, make_sheet: SheetFactory) -> None:
        sheet = make_sheet("S", [["Name", "  ", "Age"], ["Ana", " ", 30]])
        assert non_empty_columns(sheet) == {0, 2}

    def test_any_row_makes_a_column_visible(self, make_sheet: SheetFactory) -> None:
        sheet = make_sheet("S", [["A"], [None, None, None, "late"]])
        assert non_empty_columns(sheet) == {0, 3}

    def test_empty_sheet(self, make_sheet: SheetFactory) -> None:
        assert non_empty_columns(make_sheet("S", [])) == set()


class TestWidths:
    """Tests for width conversion and normalization."""

    def test_character_units_to_points(self) -> None:
        assert column_width_points(256) == pytest.approx(7.0)
        assert column_width_points(2048) == pytest.approx(56.0)

    def test_normalize_keeps_ratios(self) -> None:
        widths = normalize_widths([10.0, 30.0], 400.0)
        assert widths == pytest.approx((100.0, 300.0))
        assert sum(widths) == pytest.approx(400.0)

    def test_zero_total_gives_equal_widths(self) -> None:
        assert normalize_widths([0.0, 0.0, 0.0], 300.0) == pytest.approx(
            (100.0, 100.0, 100.0)
        )

    def test_no_columns(self) -> None:
        assert normalize_widths([], 300.0) == ()


class TestGroupColumns:
    """Tests for splitting columns into sub-tables."""

    def test_groups_of_five(self) -> None:
        groups = group_columns(list(range(12)), 5)
        assert groups == ((0, 1, 2, 3, 4), (5, 6, 7, 8, 9), (10, 11))

    def test_fewer_columns_than_size(self) -> None:
        assert group_columns([2, 7], 5) == ((2, 7),)

    def test_invalid_size(self) -> None:
        with pytest.raises(ValueError, match="positive"):
            group_columns([0, 1], 0)


class TestPlanColumns:
    """Tests for plan_columns."""

    def test_twelve_columns_split_five_five_two(
        self, make_sheet: SheetFactory
    ) -> None:
        header = [f"H{i}" for i in range(12)]
        sheet = make_sheet("Wide", [header, list(range(12))])

        plan = plan_columns(sheet, AVAILABLE_WIDTH)

        assert plan is not None
        assert plan.kind is SheetKind.TABULAR
        assert [len(g.columns) for g in plan.groups] == [5, 5, 2]
        for group in plan.groups:
            assert sum(group.widths) == pytest.approx(AVAILABLE_WIDTH)
        assert plan.groups[2].widths == pytest.approx(
            (AVAILABLE_WIDTH / 2, AVAILABLE_WIDTH / 2)
        )

    def test_widths_follow_declared_column_widths(
        self, make_sheet: SheetFactory
    ) -> None:
        sheet = make_sheet(
            "S", [["a", "b"]], column_widths={0: 256 * 10, 1: 256 * 30}
        )

        plan = plan_columns(sheet, 400.0)

        assert plan is not None
        assert plan.groups[0].widths == pytest.approx((100.0, 300.0))

    def test_hidden_columns_are_left_out(self, make_sheet: SheetFactory) -> None:
        sheet = make_sheet("S", [["a", "", "c"], [1, None, 3]])

        plan = plan_columns(sheet, AVAILABLE_WIDTH)

        assert plan is not None
        assert plan.columns == (0, 2)

    def test_custom_group_size(self, make_sheet: SheetFactory) -> None:
        sheet = make_sheet("S", [list("abcdefg")])

        plan = plan_columns(sheet, AVAILABLE_WIDTH, max_columns_per_table=3)

        assert plan is not None
        assert [g.columns for g in plan.groups] == [(0, 1, 2), (3, 4, 5), (6,)]

    def test_sheet_without_text_has_no_plan(self, make_sheet: SheetFactory) -> None:
        assert plan_columns(make_sheet("S", [[" ", ""]]), AVAILABLE_WIDTH) is None

    def test_calendar_uses_seven_columns(self, april_calendar: Sheet) -> None:
        plan = plan_columns(april_calendar, AVAILABLE_WIDTH)

        assert plan is not None
        assert plan.kind is SheetKind.CALENDAR
        assert plan.columns == tuple(range(7))
        assert len(plan.groups) == 1
        assert sum(plan.groups[0].widths) == pytest.approx(AVAILABLE_WIDTH)


class TestIsCalendarLayout:
    """Tests for the calendar layout test."""

    def test_header_with_seven_cells(self, april_calendar: Sheet) -> None:
        assert is_calendar_layout(april_calendar) is True

    def test_header_needs_seven_physical_cells(
        self, make_sheet: SheetFactory
    ) -> None:
        sheet = make_sheet("Jan", [["Mon", "Tue", "Wed", "Thu", "Fri"]])
        assert is_calendar_layout(sheet) is False

    def test_tabular_sheet(self, tabular_sheet: Sheet) -> None:
        assert is_calendar_layout(tabular_sheet) is False
