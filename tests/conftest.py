from __future__ import annotations

from collections.abc import Callable, Sequence
from datetime import datetime
from io import BytesIO
from typing import Any

import pytest
from openpyxl import Workbook as OpenpyxlWorkbook
from PIL import Image

from spreadsheet_pdf.workbook import (
    BooleanValue,
    CellValue,
    DateValue,
    NumberValue,
    Sheet,
    SheetCell,
    SheetRow,
    TextValue,
    Workbook,
)

SheetFactory = Callable[..., Sheet]

WEEKDAY_HEADER = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]
FULL_WEEKDAY_HEADER = [
    "Sunday",
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
]


def to_cell_value(value: Any) -> CellValue:
    """Wrap a plain Python value in the matching CellValue variant."""
    if isinstance(value, bool):
        return BooleanValue(value)
    if isinstance(value, datetime):
        return DateValue(value)
    if isinstance(value, (int, float)):
        return NumberValue(float(value))
    return TextValue(str(value))


def _as_cell(value: Any) -> SheetCell:
    if isinstance(value, SheetCell):
        return value
    return SheetCell(to_cell_value(value))


def build_sheet(
    name: str,
    rows: Sequence[Sequence[Any] | None],
    **kwargs: Any,
) -> Sheet:
    """Build a sheet from row-major values.

    None values (and None rows) are left out, giving sparse rows. SheetCell
    instances are used as-is so tests can attach styles.
    """
    sheet_rows = []
    for index, values in enumerate(rows):
        if values is None:
            continue
        cells = {
            column: _as_cell(value)
            for column, value in enumerate(values)
            if value is not None
        }
        if cells:
            sheet_rows.append(SheetRow(index=index, cells=cells))
    return Sheet(name=name, rows=tuple(sheet_rows), **kwargs)


@pytest.fixture
def make_sheet() -> SheetFactory:
    """Factory building Sheet models from nested lists."""
    return build_sheet


@pytest.fixture
def tabular_sheet() -> Sheet:
    return build_sheet("People", [["Name", "Age"], ["Ana", 30]])


@pytest.fixture
def april_calendar() -> Sheet:
    """April calendar whose day 1 sits at list position 3 (a Wednesday)."""
    return build_sheet(
        "April",
        [
            WEEKDAY_HEADER,
            ["note", "memo", "x", 44927],
        ],
    )


@pytest.fixture
def tabular_workbook(tabular_sheet: Sheet) -> Workbook:
    return Workbook(sheets=(tabular_sheet,))


def png_bytes(width: int = 40, height: int = 20, color: str = "red") -> bytes:
    buffer = BytesIO()
    Image.new("RGB", (width, height), color).save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def sample_png() -> bytes:
    """A small valid PNG image."""
    return png_bytes()


def workbook_bytes(wb: OpenpyxlWorkbook) -> bytes:
    buffer = BytesIO()
    wb.save(buffer)
    return buffer.getvalue()


@pytest.fixture
def people_xlsx() -> bytes:
    """XLSX bytes for a two-column table with one data row."""
    wb = OpenpyxlWorkbook()
    ws = wb.active
    ws.title = "People"
    ws.append(["Name", "Age"])
    ws.append(["Ana", 30])
    return workbook_bytes(wb)


@pytest.fixture
def calendar_xlsx() -> bytes:
    """XLSX bytes for a two-month calendar workbook."""
    wb = OpenpyxlWorkbook()
    ws = wb.active
    ws.title = "January"
    ws.append(FULL_WEEKDAY_HEADER)
    ws.append([44927, 44928, "44929\nDentist", 44930, 44931, 44932, 44933])
    july = wb.create_sheet("July")
    july.append(WEEKDAY_HEADER)
    july.append([None, None, None, None, None, None, 45108])
    return workbook_bytes(wb)
