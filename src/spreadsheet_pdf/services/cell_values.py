"""Canonical display text for workbook cells.

Every cell shown in the PDF goes through :func:`extract_text`. The rules:

- text is trimmed;
- dates become a ``$M/D/YYYY$`` marker so the calendar can recognize them;
- numbers print as integers when they are within 1e-4 of one;
- booleans print as ``true``/``false``;
- formulas print their source text, never a cached result;
- errors, blanks and anything unrecognized print as the empty string.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from datetime import date

from spreadsheet_pdf.utils.logging import get_logger
from spreadsheet_pdf.workbook import (
    BooleanValue,
    CellValue,
    DateValue,
    FormulaValue,
    NumberValue,
    SheetCell,
    TextValue,
)

logger = get_logger(__name__)

INTEGER_TOLERANCE = 1e-4

# Whitespace plus the invisible characters spreadsheets tend to carry around.
INVISIBLE_CHARS_PATTERN = re.compile(r"[\s\u00a0\u200b\ufeff]+")

DATE_MARKER_PATTERN = re.compile(r"^\$(\d{1,2})/(\d{1,2})/(\d{4})\$$")


@dataclass(frozen=True)
class ExtractedText:
    """Outcome of reading one cell.

    ``ok`` is False when the value could not be read; ``text`` is then empty
    and ``error`` says why.
    """

    text: str = ""
    ok: bool = True
    error: str | None = None


def format_date_marker(moment: date) -> str:
    """Render a date as ``$M/D/YYYY$`` without zero padding."""
    return f"${moment.month}/{moment.day}/{moment.year}$"


def parse_date_marker(text: str) -> date | None:
    """Parse a ``$M/D/YYYY$`` marker back into a date, or None."""
    match = DATE_MARKER_PATTERN.match(text.strip())
    if match is None:
        return None
    month, day, year = (int(part) for part in match.groups())
    try:
        return date(year, month, day)
    except ValueError:
        return None


def format_number(number: float) -> str:
    """Render a number, collapsing near-integers to their integer form."""
    if not math.isfinite(number):
        return repr(number)
    nearest = round(number)
    if abs(number - nearest) < INTEGER_TOLERANCE:
        return str(int(nearest))
    return repr(float(number))


def _display_text(value: CellValue) -> str:
    match value:
        case TextValue(text=text):
            return text.strip()
        case DateValue(moment=moment):
            return format_date_marker(moment)
        case NumberValue(number=number):
            return format_number(number)
        case BooleanValue(flag=flag):
            return "true" if flag else "false"
        case FormulaValue(formula=formula):
            return formula or ""
        case _:  # errors, blanks
            return ""


def try_extract_text(cell: SheetCell | None) -> ExtractedText:
    """Read the display text of a cell, reporting failures instead of raising."""
    if cell is None:
        return ExtractedText()
    try:
        return ExtractedText(text=_display_text(cell.value))
    except (AttributeError, TypeError, ValueError, OverflowError) as e:
        return ExtractedText(ok=False, error=str(e))


def extract_text(cell: SheetCell | None) -> str:
    """Return the display text of a cell; unreadable cells yield ""."""
    result = try_extract_text(cell)
    if not result.ok:
        logger.debug("Unreadable cell value", error=result.error)
    return result.text


def is_blank_text(text: str | None) -> bool:
    """True if ``text`` is None or only whitespace and invisible characters."""
    if not text:
        return True
    return not INVISIBLE_CHARS_PATTERN.sub("", text)
