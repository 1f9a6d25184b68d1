"""Column visibility, width normalization and grouping.

A column is visible when at least one of its cells has display text. Widths
come from the sheet in 1/256 character units and are rescaled so that every
table spans the full content width of the page.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from spreadsheet_pdf.models import SheetKind
from spreadsheet_pdf.services.cell_values import extract_text, is_blank_text
from spreadsheet_pdf.services.sheet_classifier import (
    CALENDAR_COLUMNS,
    is_calendar_header,
)
from spreadsheet_pdf.workbook import Sheet

WIDTH_UNITS_PER_CHARACTER = 256
POINTS_PER_CHARACTER = 7.0


@dataclass(frozen=True)
class ColumnGroup:
    """Columns rendered together as one table, with widths in points."""

    columns: tuple[int, ...]
    widths: tuple[float, ...]


@dataclass(frozen=True)
class ColumnPlan:
    """How a sheet's columns map onto one or more tables."""

    kind: SheetKind
    columns: tuple[int, ...]
    groups: tuple[ColumnGroup, ...]


def non_empty_columns(sheet: Sheet) -> set[int]:
    """Return the indices of columns holding at least one non-blank cell."""
    return {
        column
        for row in sheet.rows
        for column, cell in row.cells.items()
        if not is_blank_text(extract_text(cell))
    }


def column_width_points(units: int) -> float:
    """Convert a width in 1/256 character units to points."""
    return units / WIDTH_UNITS_PER_CHARACTER * POINTS_PER_CHARACTER


def normalize_widths(widths: Sequence[float], available: float) -> tuple[float, ...]:
    """Rescale widths so they sum to ``available``, keeping their ratios.

    A zero total falls back to equal widths.
    """
    if not widths:
        return ()
    total = sum(widths)
    if total > 0:
        scale = available / total
        return tuple(width * scale for width in widths)
    return tuple(available / len(widths) for _ in widths)


def group_columns(columns: Sequence[int], size: int) -> tuple[tuple[int, ...], ...]:
    """Split sorted columns into consecutive groups of at most ``size``."""
    if size < 1:
        raise ValueError(f"group size must be positive, got {size}")
    return tuple(
        tuple(columns[start : start + size]) for start in range(0, len(columns), size)
    )


def is_calendar_layout(sheet: Sheet) -> bool:
    """Calendar header plus at least seven physical cells in some row."""
    return (
        is_calendar_header(sheet.row(0))
        and sheet.max_physical_cells >= CALENDAR_COLUMNS
    )


def _group(sheet: Sheet, columns: Sequence[int], available: float) -> ColumnGroup:
    widths = [column_width_points(sheet.column_width(c)) for c in columns]
    return ColumnGroup(
        columns=tuple(columns), widths=normalize_widths(widths, available)
    )


def plan_columns(
    sheet: Sheet, available_width: float, max_columns_per_table: int = 5
) -> ColumnPlan | None:
    """Plan the tables for a sheet.

    Args:
        sheet: Sheet to lay out.
        available_width: Page width minus both margins, in points.
        max_columns_per_table: Largest group for tabular sheets.

    Returns:
        The plan, or None when the sheet has no visible column.
    """
    if is_calendar_layout(sheet):
        columns: tuple[int, ...] = tuple(range(CALENDAR_COLUMNS))
        return ColumnPlan(
            kind=SheetKind.CALENDAR,
            columns=columns,
            groups=(_group(sheet, columns, available_width),),
        )

    columns = tuple(sorted(non_empty_columns(sheet)))
    if not columns:
        return None
    groups = tuple(
        _group(sheet, group, available_width)
        for group in group_columns(columns, max_columns_per_table)
    )
    return ColumnPlan(kind=SheetKind.TABULAR, columns=columns, groups=groups)
