"""Dataclasses representing a parsed spreadsheet workbook.

The model is immutable and independent of openpyxl: the reader fills it in
once and every later stage only reads from it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from functools import cached_property

DEFAULT_COLUMN_WIDTH_UNITS = 8 * 256
"""Width of a column without explicit width, in 1/256 of a character."""


class HorizontalAlignment(str, Enum):
    """Horizontal alignment declared on a source cell."""

    GENERAL = "general"
    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"

    @classmethod
    def from_source(cls, value: str | None) -> HorizontalAlignment:
        """Map an openpyxl alignment name, folding unknown values to GENERAL."""
        if value in ("center", "centerContinuous"):
            return cls.CENTER
        if value == "right":
            return cls.RIGHT
        if value == "left":
            return cls.LEFT
        return cls.GENERAL


@dataclass(frozen=True)
class TextValue:
    """Literal string content."""

    text: str


@dataclass(frozen=True)
class NumberValue:
    """Numeric content that is not formatted as a date."""

    number: float


@dataclass(frozen=True)
class BooleanValue:
    """TRUE/FALSE content."""

    flag: bool


@dataclass(frozen=True)
class FormulaValue:
    """A formula cell. Only the source text is kept, never a cached result."""

    formula: str | None


@dataclass(frozen=True)
class DateValue:
    """Numeric content formatted as a date."""

    moment: datetime


@dataclass(frozen=True)
class ErrorValue:
    """An error literal such as #DIV/0!."""

    code: str


@dataclass(frozen=True)
class BlankValue:
    """A cell that exists but has no content."""


CellValue = (
    TextValue
    | NumberValue
    | BooleanValue
    | FormulaValue
    | DateValue
    | ErrorValue
    | BlankValue
)


@dataclass(frozen=True)
class CellStyle:
    """Visual attributes of a source cell that survive into the PDF.

    Attributes:
        bold: Whether the cell font is bold.
        fill_rgb: Explicit solid fill colour, or None when the fill is
            absent or not an explicit RGB colour.
        alignment: Declared horizontal alignment.
    """

    bold: bool = False
    fill_rgb: tuple[int, int, int] | None = None
    alignment: HorizontalAlignment = HorizontalAlignment.GENERAL


DEFAULT_STYLE = CellStyle()


@dataclass(frozen=True)
class SheetCell:
    """A single physically present cell."""

    value: CellValue = BlankValue()
    style: CellStyle = DEFAULT_STYLE


@dataclass(frozen=True)
class SheetRow:
    """A physically present row, keyed by zero-based column index."""

    index: int
    cells: dict[int, SheetCell] = field(default_factory=dict)

    def cell(self, column: int) -> SheetCell | None:
        """Return the cell at ``column``, or None when it is absent."""
        return self.cells.get(column)

    @property
    def last_column(self) -> int:
        """One past the highest populated column index, 0 for an empty row."""
        return max(self.cells) + 1 if self.cells else 0

    @property
    def physical_cell_count(self) -> int:
        """Number of physically present cells in the row."""
        return len(self.cells)


@dataclass(frozen=True)
class Picture:
    """An embedded picture. ``data`` is None when its bytes could not be read."""

    data: bytes | None
    name: str = ""


@dataclass(frozen=True)
class Sheet:
    """A single worksheet.

    Rows are sparse and ordered by index. Column widths are expressed in
    1/256 of a character, the unit the file format uses.
    """

    name: str
    rows: tuple[SheetRow, ...] = ()
    landscape: bool = False
    column_widths: dict[int, int] = field(default_factory=dict)
    default_column_width: int = DEFAULT_COLUMN_WIDTH_UNITS
    pictures: tuple[Picture, ...] = ()

    @cached_property
    def _rows_by_index(self) -> dict[int, SheetRow]:
        return {row.index: row for row in self.rows}

    def row(self, index: int) -> SheetRow | None:
        """Return the row at ``index``, or None when it is absent."""
        return self._rows_by_index.get(index)

    @property
    def last_row_index(self) -> int:
        """Highest present row index, -1 for a sheet without rows."""
        return max((row.index for row in self.rows), default=-1)

    @property
    def max_physical_cells(self) -> int:
        """Largest physical cell count over all rows."""
        return max((row.physical_cell_count for row in self.rows), default=0)

    def column_width(self, column: int) -> int:
        """Return the width of ``column`` in 1/256 character units."""
        return self.column_widths.get(column, self.default_column_width)


@dataclass(frozen=True)
class Workbook:
    """A parsed workbook: its worksheets in workbook order."""

    sheets: tuple[Sheet, ...] = ()
    source_name: str | None = None
