"""Decide whether a sheet is a monthly calendar or an ordinary table."""

from __future__ import annotations

import re

from spreadsheet_pdf.models import SheetKind
from spreadsheet_pdf.services.cell_values import extract_text
from spreadsheet_pdf.workbook import Sheet, SheetRow, Workbook

CALENDAR_COLUMNS = 7
MIN_DISTINCT_WEEKDAYS = 5

DAY_NAME_PATTERN = re.compile(
    r"^(Sun|Mon|Tue|Wed|Thu|Fri|Sat|"
    r"Sunday|Monday|Tuesday|Wednesday|Thursday|Friday|Saturday)$",
    re.IGNORECASE,
)


def weekday_key(text: str) -> str | None:
    """Normalize a weekday name to its lower-case three letter form.

    ``"Mon"`` and ``"monday"`` both give ``"mon"``; anything else gives None.
    """
    if not DAY_NAME_PATTERN.match(text):
        return None
    return text[:3].lower()


def is_calendar_header(row: SheetRow | None) -> bool:
    """True if the first seven cells name at least five distinct weekdays."""
    if row is None:
        return False
    weekdays = {
        weekday_key(extract_text(row.cell(column)))
        for column in range(CALENDAR_COLUMNS)
    }
    weekdays.discard(None)
    return len(weekdays) >= MIN_DISTINCT_WEEKDAYS


def classify_sheet(sheet: Sheet) -> SheetKind:
    if is_calendar_header(sheet.row(0)):
        return SheetKind.CALENDAR
    return SheetKind.TABULAR


def is_calendar_document(workbook: Workbook) -> bool:
    """A workbook is a calendar document when its first sheet is a calendar."""
    if not workbook.sheets:
        return False
    return classify_sheet(workbook.sheets[0]) is SheetKind.CALENDAR
