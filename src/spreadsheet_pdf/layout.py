"""Surface-independent description of the PDF document.

The assembler produces a :class:`DocumentLayout` and the renderer draws it.
Keeping this step as plain data lets the layout rules be tested without
parsing PDF output.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from reportlab.lib.pagesizes import A4, LEGAL, LETTER, landscape, portrait

from spreadsheet_pdf.models import ImageFormat

RGB = tuple[int, int, int]

HEADER_BACKGROUND: RGB = (230, 230, 230)
EVEN_ROW_BACKGROUND: RGB = (245, 245, 245)
ODD_ROW_BACKGROUND: RGB = (255, 255, 255)

PAGE_SIZES: dict[str, tuple[float, float]] = {
    "A4": A4,
    "LETTER": LETTER,
    "LEGAL": LEGAL,
}


class Orientation(str, Enum):
    """Page orientation."""

    PORTRAIT = "portrait"
    LANDSCAPE = "landscape"


class TextAlign(str, Enum):
    """Horizontal alignment of text inside its box."""

    LEFT = "LEFT"
    CENTER = "CENTER"
    RIGHT = "RIGHT"


def page_dimensions(page_size: str, orientation: Orientation) -> tuple[float, float]:
    """Return (width, height) in points for a named page size.

    Raises:
        KeyError: If the page size is not one of PAGE_SIZES.
    """
    base = PAGE_SIZES[page_size.upper()]
    if orientation is Orientation.LANDSCAPE:
        return landscape(base)
    return portrait(base)


def zebra_background(data_row_index: int) -> RGB:
    """Background for the n-th data row, counting from zero."""
    return EVEN_ROW_BACKGROUND if data_row_index % 2 == 0 else ODD_ROW_BACKGROUND


@dataclass(frozen=True)
class TextBlock:
    """A standalone paragraph: the title page year, a heading or a note."""

    text: str
    bold: bool = False
    font_size: float = 10.0
    alignment: TextAlign = TextAlign.LEFT
    space_before: float = 0.0
    space_after: float = 0.0


@dataclass(frozen=True)
class RenderedCell:
    """One table cell after styling."""

    text: str = ""
    bold: bool = False
    background: RGB | None = None
    alignment: TextAlign = TextAlign.CENTER
    bordered: bool = True
    font_size: float = 10.0


@dataclass(frozen=True)
class RenderedTable:
    """A table with fixed column widths in points.

    ``header_rows`` leading rows are repeated when the table overflows a page.
    """

    rows: tuple[tuple[RenderedCell, ...], ...]
    column_widths: tuple[float, ...]
    header_rows: int = 1
    space_after: float = 20.0

    @property
    def column_count(self) -> int:
        return len(self.column_widths)

    def texts(self) -> list[list[str]]:
        """Cell texts row by row."""
        return [[cell.text for cell in row] for row in self.rows]


@dataclass(frozen=True)
class ImageBlock:
    """An embedded picture, scaled to the content width when drawn."""

    data: bytes
    image_format: ImageFormat
    sheet_name: str = ""


@dataclass(frozen=True)
class PageBreak:
    """Start a new page in the given orientation."""

    orientation: Orientation


Block = TextBlock | RenderedTable | ImageBlock | PageBreak


@dataclass
class DocumentLayout:
    """Ordered blocks making up the whole document.

    Attributes:
        page_size: Named base page size.
        margin: Margin on all four sides, in points.
        first_orientation: Orientation of the first page.
        blocks: Content in document order.
        skipped_sheets: Names of sheets with no visible column.
        images_skipped: Pictures dropped as unreadable or unrecognized.
    """

    page_size: str = "A4"
    margin: float = 36.0
    first_orientation: Orientation = Orientation.PORTRAIT
    blocks: list[Block] = field(default_factory=list)
    skipped_sheets: list[str] = field(default_factory=list)
    images_skipped: int = 0

    @property
    def tables(self) -> list[RenderedTable]:
        return [b for b in self.blocks if isinstance(b, RenderedTable)]

    @property
    def images(self) -> list[ImageBlock]:
        return [b for b in self.blocks if isinstance(b, ImageBlock)]

    @property
    def text_blocks(self) -> list[TextBlock]:
        return [b for b in self.blocks if isinstance(b, TextBlock)]

    @property
    def page_count_hint(self) -> int:
        """Number of pages before any overflow: one plus each page break."""
        return 1 + sum(isinstance(b, PageBreak) for b in self.blocks)
