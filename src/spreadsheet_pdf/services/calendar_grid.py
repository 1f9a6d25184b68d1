"""Rebuild a month grid from the date cells of a calendar sheet.

Calendar sheets hold one cell per day: a spreadsheet serial date, optionally
followed by a line break and an event label. Cells are read row-major from
the row under the weekday header and placed on a fixed 6x7 grid:

1. The first entry that falls on day 1 fixes the weekday column of the
   month's first day (its list position modulo 7).
2. Entries are then consumed in order, expecting day 1, 2, 3, ... Only the
   entry carrying the expected day is placed; anything out of order,
   repeated or not a date is skipped.
"""

from __future__ import annotations

import math
import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from functools import reduce

from openpyxl.utils.datetime import to_excel

from spreadsheet_pdf.services.cell_values import (
    extract_text,
    is_blank_text,
    parse_date_marker,
)
from spreadsheet_pdf.services.sheet_classifier import CALENDAR_COLUMNS
from spreadsheet_pdf.workbook import Sheet

GRID_ROWS = 6
SERIAL_LOWER_BOUND = 40000
SERIAL_UPPER_BOUND = 50000
DEFAULT_EPOCH_SERIAL = 44926

DAY_HEADERS = (
    "Sunday",
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
)

MONTH_NAMES = {
    "jan": "January",
    "feb": "February",
    "mar": "March",
    "apr": "April",
    "may": "May",
    "jun": "June",
    "jul": "July",
    "aug": "August",
    "sep": "September",
    "oct": "October",
    "nov": "November",
    "dec": "December",
}
MONTH_PATTERN = re.compile(r"^(" + "|".join(MONTH_NAMES) + ")", re.IGNORECASE)

NOTES_MONTHS = frozenset({"april", "july", "december"})
NOTES_LABEL = "Notes:"

# Next expected day and the (row, column, text) placements so far.
_PlacementState = tuple[int, tuple[tuple[int, int, str], ...]]


@dataclass(frozen=True)
class CalendarEntry:
    """A calendar cell split into its serial date and its label."""

    serial: float | None
    label: str = ""


@dataclass(frozen=True)
class CalendarGrid:
    """A 6x7 month grid; None marks a cell with no day."""

    cells: tuple[tuple[str | None, ...], ...]
    first_day_index: int | None = None

    @classmethod
    def empty(cls) -> CalendarGrid:
        return cls(cells=tuple((None,) * CALENDAR_COLUMNS for _ in range(GRID_ROWS)))

    def cell(self, row: int, column: int) -> str | None:
        return self.cells[row][column]

    def populated(self) -> dict[tuple[int, int], str]:
        """Map of (row, column) to content for every filled cell."""
        return {
            (r, c): text
            for r, row in enumerate(self.cells)
            for c, text in enumerate(row)
            if text is not None
        }


def _parse_serial(token: str) -> float | None:
    marker = parse_date_marker(token)
    if marker is not None:
        return float(to_excel(marker))
    try:
        return float(token)
    except ValueError:
        return None


def parse_entry(text: str) -> CalendarEntry:
    """Split an entry on its first line break into serial and label."""
    head, _, tail = text.partition("\n")
    return CalendarEntry(serial=_parse_serial(head.strip()), label=tail.strip())


def day_offset(
    serial: float | None, epoch_serial: float = DEFAULT_EPOCH_SERIAL
) -> int | None:
    """Day of the month for a serial, or None outside the accepted window."""
    if serial is None or not SERIAL_LOWER_BOUND < serial < SERIAL_UPPER_BOUND:
        return None
    # Rounds half up.
    return math.floor(serial - epoch_serial + 0.5)


def find_first_day_index(offsets: Sequence[int | None]) -> int | None:
    """Weekday column of day 1: the list position of the first day-1 entry mod 7."""
    for position, offset in enumerate(offsets):
        if offset == 1:
            return position % CALENDAR_COLUMNS
    return None


def _cell_content(day: int, label: str) -> str:
    return f"{day} {label}" if label else str(day)


def build_calendar_grid(
    entries: Sequence[str], epoch_serial: float = DEFAULT_EPOCH_SERIAL
) -> CalendarGrid:
    """Place calendar entries on a 6x7 grid.

    Args:
        entries: Non-blank cell texts in row-major order.
        epoch_serial: Serial of the day before day 1.

    Returns:
        The grid; entirely empty when no entry falls on day 1.
    """
    parsed = [parse_entry(text) for text in entries]
    offsets = [day_offset(entry.serial, epoch_serial) for entry in parsed]
    first_day_index = find_first_day_index(offsets)
    if first_day_index is None:
        return CalendarGrid.empty()

    def place(
        state: _PlacementState, item: tuple[int | None, CalendarEntry]
    ) -> _PlacementState:
        expected, placed = state
        offset, entry = item
        if offset is None or offset != expected:
            return state
        row, column = divmod(first_day_index + offset - 1, CALENDAR_COLUMNS)
        if 0 <= row < GRID_ROWS:
            placed = (*placed, (row, column, _cell_content(offset, entry.label)))
        return expected + 1, placed

    initial: _PlacementState = (1, ())
    _, placements = reduce(place, zip(offsets, parsed, strict=True), initial)

    lookup = {(row, column): text for row, column, text in placements}
    cells = tuple(
        tuple(lookup.get((row, column)) for column in range(CALENDAR_COLUMNS))
        for row in range(GRID_ROWS)
    )
    return CalendarGrid(cells=cells, first_day_index=first_day_index)


def collect_calendar_entries(
    sheet: Sheet, columns: Iterable[int] = range(CALENDAR_COLUMNS)
) -> list[str]:
    """Non-blank display texts from row 1 onward, row-major, calendar columns only."""
    selected = tuple(columns)
    entries: list[str] = []
    for row in sheet.rows:
        if row.index < 1:
            continue
        for column in selected:
            text = extract_text(row.cell(column))
            if not is_blank_text(text):
                entries.append(text)
    return entries


def resolve_month_name(sheet_name: str) -> str | None:
    """Full month name when the sheet name starts with a month or abbreviation."""
    match = MONTH_PATTERN.match(sheet_name.strip())
    if match is None:
        return None
    return MONTH_NAMES[match.group(1).lower()]


def calendar_heading(sheet_name: str, reference_year: int) -> str:
    """``"APRIL 2023"`` for month sheets, the raw sheet name otherwise."""
    month = resolve_month_name(sheet_name)
    if month is None:
        return sheet_name
    return f"{month.upper()} {reference_year}"


def needs_notes(sheet_name: str) -> bool:
    """April, July and December calendars end with a notes line."""
    month = resolve_month_name(sheet_name) or sheet_name
    return month.strip().lower() in NOTES_MONTHS
