"""XLSX parser producing the immutable workbook model."""

from __future__ import annotations

import zipfile
from datetime import date, datetime, time, timedelta
from io import BytesIO
from numbers import Real
from pathlib import Path
from typing import Any

import magic
from openpyxl import load_workbook
from openpyxl.cell import Cell
from openpyxl.styles.fills import PatternFill
from openpyxl.utils import column_index_from_string
from openpyxl.utils.exceptions import InvalidFileException
from openpyxl.worksheet.worksheet import Worksheet

from spreadsheet_pdf.utils.exceptions import (
    EmptyUploadError,
    InputError,
    UnsupportedFormatError,
)
from spreadsheet_pdf.utils.logging import get_logger
from spreadsheet_pdf.workbook import (
    DEFAULT_COLUMN_WIDTH_UNITS,
    DEFAULT_STYLE,
    BlankValue,
    BooleanValue,
    CellStyle,
    CellValue,
    DateValue,
    ErrorValue,
    FormulaValue,
    HorizontalAlignment,
    NumberValue,
    Picture,
    Sheet,
    SheetCell,
    SheetRow,
    TextValue,
    Workbook,
)

logger = get_logger(__name__)

WIDTH_UNITS_PER_CHARACTER = 256

# MIME types libmagic reports for XLSX uploads. Workbooks whose first zip
# entry is not [Content_Types].xml are only recognized as plain zips.
XLSX_MIME_TYPES = frozenset(
    {
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        "application/zip",
        "application/x-zip-compressed",
    }
)

# The spreadsheet day that time-only values hang off.
TIME_ONLY_BASE_DATE = date(1899, 12, 31)


def read_cell_value(cell: Any) -> CellValue:
    """Map an openpyxl cell onto the CellValue union.

    Formulas keep their source text without the leading ``=``; the workbook
    is loaded without cached results so no formula is ever evaluated.
    """
    value = cell.value
    if value is None:
        return BlankValue()
    if cell.data_type == "f":
        text = getattr(value, "text", None) or str(value)
        return FormulaValue(formula=text.removeprefix("="))
    if cell.data_type == "e":
        return ErrorValue(code=str(value))
    if isinstance(value, bool):
        return BooleanValue(flag=value)
    if isinstance(value, datetime):
        return DateValue(moment=value)
    if isinstance(value, date):
        return DateValue(moment=datetime.combine(value, time()))
    if isinstance(value, time):
        return DateValue(moment=datetime.combine(TIME_ONLY_BASE_DATE, value))
    if isinstance(value, timedelta):
        return NumberValue(number=value.total_seconds() / 86400)
    if isinstance(value, Real):
        return NumberValue(number=float(value))
    return TextValue(text=str(value))


def _explicit_rgb(fill: Any) -> tuple[int, int, int] | None:
    """Solid fill colour as an RGB triple; theme and indexed colours give None."""
    if not isinstance(fill, PatternFill) or fill.patternType in (None, "none"):
        return None
    color = fill.fgColor
    if color is None or color.type != "rgb" or not isinstance(color.rgb, str):
        return None
    hex_rgb = color.rgb[-6:]
    try:
        return (int(hex_rgb[0:2], 16), int(hex_rgb[2:4], 16), int(hex_rgb[4:6], 16))
    except ValueError:
        return None


def read_cell_style(cell: Any) -> CellStyle:
    """Extract bold, explicit fill and horizontal alignment from a cell."""
    if not cell.has_style:
        return DEFAULT_STYLE
    return CellStyle(
        bold=bool(cell.font is not None and cell.font.b),
        fill_rgb=_explicit_rgb(cell.fill),
        alignment=HorizontalAlignment.from_source(
            cell.alignment.horizontal if cell.alignment is not None else None
        ),
    )


class WorkbookReader:
    """Read XLSX workbooks into the immutable model using openpyxl.

    Uploads are checked with libmagic before openpyxl opens them, so a CSV or
    PDF sent by mistake is reported as an unsupported format rather than a
    broken workbook.
    """

    def __init__(self) -> None:
        self._magic = magic.Magic(mime=True)

    def detect_mime_type(self, content: bytes) -> str | None:
        """Detect the MIME type of ``content`` from its magic bytes.

        Returns:
            The MIME type, or None if libmagic cannot classify the content.
        """
        if not content:
            return None
        try:
            return self._magic.from_buffer(content)
        except Exception as e:
            logger.warning(
                "Magic detection failed",
                error=str(e),
                error_type=type(e).__name__,
            )
            return None

    def read_bytes(self, content: bytes, filename: str | None = None) -> Workbook:
        """Parse an uploaded workbook.

        Args:
            content: Raw XLSX bytes.
            filename: Original file name, used in error details.

        Returns:
            The parsed workbook.

        Raises:
            EmptyUploadError: If ``content`` is empty.
            UnsupportedFormatError: If libmagic identifies ``content`` as
                something other than an XLSX or zip container.
            InputError: If openpyxl cannot read the workbook.
        """
        if not content:
            raise EmptyUploadError(filename=filename)
        mime_type = self.detect_mime_type(content)
        if mime_type is not None and mime_type not in XLSX_MIME_TYPES:
            raise UnsupportedFormatError(
                f"Uploaded file is not an XLSX workbook (detected {mime_type})",
                filename=filename,
                details={"mime_type": mime_type},
            )

        try:
            openpyxl_wb = load_workbook(BytesIO(content), data_only=False)
        except (InvalidFileException, zipfile.BadZipFile, KeyError, ValueError) as e:
            raise InputError(
                f"Unable to read workbook: {e}", filename=filename
            ) from e

        try:
            sheets = tuple(self._read_sheet(ws) for ws in openpyxl_wb.worksheets)
        finally:
            openpyxl_wb.close()

        logger.debug("Workbook read", filename=filename, sheets=len(sheets))
        return Workbook(sheets=sheets, source_name=filename)

    def read_path(self, file_path: Path) -> Workbook:
        """Parse a workbook from disk."""
        if not file_path.exists():
            raise InputError(
                f"Excel file not found: {file_path}", filename=str(file_path)
            )
        return self.read_bytes(file_path.read_bytes(), filename=file_path.name)

    # ------------------------------------------------------------------ #
    # Internal helpers
    # ------------------------------------------------------------------ #

    def _read_sheet(self, ws: Worksheet) -> Sheet:
        return Sheet(
            name=ws.title,
            rows=self._read_rows(ws),
            landscape=ws.page_setup.orientation == "landscape",
            column_widths=self._read_column_widths(ws),
            default_column_width=self._default_column_width(ws),
            pictures=self._read_pictures(ws),
        )

    def _read_rows(self, ws: Worksheet) -> tuple[SheetRow, ...]:
        rows: list[SheetRow] = []
        for row_cells in ws.iter_rows():
            cells = {
                cell.column - 1: SheetCell(
                    value=read_cell_value(cell), style=read_cell_style(cell)
                )
                for cell in row_cells
                if self._is_physical(cell)
            }
            if cells:
                rows.append(SheetRow(index=row_cells[0].row - 1, cells=cells))
        return tuple(rows)

    @staticmethod
    def _is_physical(cell: Cell) -> bool:
        # iter_rows fills the used range with placeholders; keep the cells the
        # file actually defines.
        return cell.value is not None or cell.has_style

    @staticmethod
    def _read_column_widths(ws: Worksheet) -> dict[int, int]:
        widths: dict[int, int] = {}
        for key, dimension in ws.column_dimensions.items():
            if not dimension.width:
                continue
            first = dimension.min or column_index_from_string(key)
            last = dimension.max or first
            units = int(dimension.width * WIDTH_UNITS_PER_CHARACTER)
            for column in range(first, last + 1):
                widths[column - 1] = units
        return widths

    @staticmethod
    def _default_column_width(ws: Worksheet) -> int:
        sheet_format = ws.sheet_format
        width = sheet_format.defaultColWidth or sheet_format.baseColWidth
        if not width:
            return DEFAULT_COLUMN_WIDTH_UNITS
        return int(width * WIDTH_UNITS_PER_CHARACTER)

    @staticmethod
    def _read_pictures(ws: Worksheet) -> tuple[Picture, ...]:
        pictures: list[Picture] = []
        # openpyxl keeps loaded pictures in the private _images list only.
        for image in getattr(ws, "_images", []):
            name = getattr(image, "path", "") or ""
            try:
                data = image._data()
            except (OSError, ValueError) as e:
                logger.warning(
                    "Unreadable embedded picture", picture=name, error=str(e)
                )
                data = None
            pictures.append(Picture(data=data, name=name))
        return tuple(pictures)
