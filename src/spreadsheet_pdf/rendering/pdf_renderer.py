"""Draw a DocumentLayout as a PDF using reportlab platypus.

Each orientation gets its own page template with a single full-page frame
inside the margins. Page breaks switch templates so a landscape sheet starts
on a landscape page. Pagination of long tables is left to platypus; header
rows repeat on every page. A body row taller than the frame is split into
continuation rows first, since platypus cannot move it to any page.
"""

from __future__ import annotations

from collections.abc import Sequence
from io import BytesIO
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER, TA_LEFT, TA_RIGHT
from reportlab.lib.styles import ParagraphStyle
from reportlab.lib.utils import ImageReader
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFError, TTFont
from reportlab.platypus import (
    BaseDocTemplate,
    Flowable,
    Frame,
    Image,
    NextPageTemplate,
    PageTemplate,
    Paragraph,
    Spacer,
    Table,
    TableStyle,
)
from reportlab.platypus import PageBreak as PdfPageBreak
from reportlab.platypus.doctemplate import LayoutError

from spreadsheet_pdf.config import LayoutOptions
from spreadsheet_pdf.layout import (
    RGB,
    DocumentLayout,
    ImageBlock,
    Orientation,
    PageBreak,
    RenderedCell,
    RenderedTable,
    TextAlign,
    TextBlock,
    page_dimensions,
)
from spreadsheet_pdf.utils.exceptions import FontInitializationError, RenderError
from spreadsheet_pdf.utils.logging import get_logger

logger = get_logger(__name__)

CELL_PADDING = 5
BORDER_WIDTH = 1
LEADING_RATIO = 1.2
# Headroom so a split row never lands exactly on the frame boundary.
ROW_SPLIT_SLACK = 2.0

_ALIGNMENTS = {
    TextAlign.LEFT: TA_LEFT,
    TextAlign.CENTER: TA_CENTER,
    TextAlign.RIGHT: TA_RIGHT,
}


def to_color(rgb: RGB) -> colors.Color:
    red, green, blue = rgb
    return colors.Color(red / 255, green / 255, blue / 255)


def to_markup(text: str) -> str:
    """Escape text for a Paragraph, keeping line breaks."""
    return escape(text).replace("\n", "<br/>")


class PdfRenderer:
    """Render layouts to PDF bytes.

    Fonts are registered once per renderer; a font that cannot be loaded
    raises FontInitializationError before any page is drawn. Everything else
    is built per call, so one renderer can serve concurrent requests.
    """

    def __init__(self, options: LayoutOptions | None = None) -> None:
        self._options = options or LayoutOptions()
        self._fonts_ready = False

    def register_fonts(self) -> None:
        """Make the configured regular and bold fonts available to reportlab.

        Raises:
            FontInitializationError: If a TTF file cannot be loaded or a
                standard font name is unknown.
        """
        if self._fonts_ready:
            return
        opts = self._options
        self._ensure_font(opts.font_name, opts.font_path)
        self._ensure_font(opts.bold_font_name, opts.bold_font_path)
        self._fonts_ready = True

    @staticmethod
    def _ensure_font(name: str, path: str | None) -> None:
        if path:
            try:
                pdfmetrics.registerFont(TTFont(name, path))
            except (TTFError, OSError) as e:
                raise FontInitializationError(name, str(e)) from e
            logger.debug("Registered TrueType font", font=name, path=path)
            return
        try:
            pdfmetrics.getFont(name)
        except (KeyError, OSError, ValueError) as e:
            raise FontInitializationError(name, f"unknown font ({e})") from e

    def render(self, layout: DocumentLayout, title: str | None = None) -> bytes:
        """Render a layout to PDF bytes.

        Args:
            layout: Blocks to draw.
            title: Optional document title stored in the PDF metadata.

        Returns:
            The PDF document.

        Raises:
            FontInitializationError: If the fonts cannot be loaded.
            RenderError: If platypus cannot lay out the document.
        """
        self.register_fonts()

        buffer = BytesIO()
        doc = BaseDocTemplate(
            buffer,
            pagesize=page_dimensions(layout.page_size, layout.first_orientation),
            leftMargin=layout.margin,
            rightMargin=layout.margin,
            topMargin=layout.margin,
            bottomMargin=layout.margin,
            title=title or "",
        )
        doc.addPageTemplates(self._page_templates(layout))

        story = StoryBuilder(self._options, layout).build()
        try:
            doc.build(story)
        except LayoutError as e:
            raise RenderError(f"PDF layout failed: {e}") from e

        pdf = buffer.getvalue()
        logger.debug("PDF rendered", size=len(pdf), flowables=len(story))
        return pdf

    def _page_templates(self, layout: DocumentLayout) -> list[PageTemplate]:
        # The first template in the list is used for the first page.
        orientations = [layout.first_orientation] + [
            o for o in Orientation if o is not layout.first_orientation
        ]
        templates = []
        for orientation in orientations:
            width, height = page_dimensions(layout.page_size, orientation)
            frame = Frame(
                layout.margin,
                layout.margin,
                width - 2 * layout.margin,
                height - 2 * layout.margin,
                leftPadding=0,
                rightPadding=0,
                topPadding=0,
                bottomPadding=0,
                id=f"{orientation.value}-content",
            )
            templates.append(
                PageTemplate(
                    id=orientation.value, frames=[frame], pagesize=(width, height)
                )
            )
        return templates


class StoryBuilder:
    """Turn the blocks of one layout into platypus flowables.

    Paragraph styles are cached on the builder, which lives for a single
    render call.
    """

    def __init__(self, options: LayoutOptions, layout: DocumentLayout) -> None:
        self._options = options
        self._layout = layout
        self._styles: dict[tuple[bool, TextAlign, float], ParagraphStyle] = {}

    def build(self) -> list[Flowable]:
        story: list[Flowable] = []
        orientation = self._layout.first_orientation
        for block in self._layout.blocks:
            if isinstance(block, PageBreak):
                orientation = block.orientation
                story.extend([NextPageTemplate(orientation.value), PdfPageBreak()])
                continue
            width, height = self.frame_size(orientation)
            if isinstance(block, TextBlock):
                story.extend(self._text(block))
            elif isinstance(block, RenderedTable):
                story.extend(self._table(block, height))
            elif isinstance(block, ImageBlock):
                story.extend(self._image(block, width, height))
        if not story:
            story.append(Spacer(1, 0))
        return story

    def frame_size(self, orientation: Orientation) -> tuple[float, float]:
        width, height = page_dimensions(self._layout.page_size, orientation)
        return width - 2 * self._layout.margin, height - 2 * self._layout.margin

    def _style(
        self, bold: bool, alignment: TextAlign, font_size: float
    ) -> ParagraphStyle:
        key = (bold, alignment, font_size)
        if key not in self._styles:
            opts = self._options
            weight = "bold" if bold else "regular"
            self._styles[key] = ParagraphStyle(
                name=f"spdf-{weight}-{alignment.value}-{font_size}",
                fontName=opts.bold_font_name if bold else opts.font_name,
                fontSize=font_size,
                leading=font_size * LEADING_RATIO,
                alignment=_ALIGNMENTS[alignment],
            )
        return self._styles[key]

    def _text(self, block: TextBlock) -> list[Flowable]:
        flowables: list[Flowable] = []
        # Frames drop spaceBefore at the top of a page, so use a spacer.
        if block.space_before > 0:
            flowables.append(Spacer(1, block.space_before))
        flowables.append(
            Paragraph(
                to_markup(block.text),
                self._style(block.bold, block.alignment, block.font_size),
            )
        )
        if block.space_after > 0:
            flowables.append(Spacer(1, block.space_after))
        return flowables

    def _cell(self, cell: RenderedCell) -> Paragraph:
        return Paragraph(
            to_markup(cell.text),
            self._style(cell.bold, cell.alignment, cell.font_size),
        )

    # ------------------------------------------------------------------ #
    # Tables
    # ------------------------------------------------------------------ #

    def _table(self, block: RenderedTable, frame_height: float) -> list[Flowable]:
        widths = list(block.column_widths)
        header = [
            [self._cell(cell) for cell in row]
            for row in block.rows[: block.header_rows]
        ]
        # Tallest paragraph a body row may hold below the repeated header.
        limit = (
            frame_height
            - sum(row_height(row, widths, frame_height) for row in header)
            - 2 * CELL_PADDING
            - ROW_SPLIT_SLACK
        )

        data: list[list[Paragraph]] = list(header)
        sources: list[tuple[RenderedCell, ...]] = list(block.rows[: block.header_rows])
        for index, row in enumerate(block.rows[block.header_rows :]):
            pieces = split_tall_row([self._cell(cell) for cell in row], widths, limit)
            if len(pieces) > 1:
                logger.debug("Split tall table row", row=index, parts=len(pieces))
            data.extend(pieces)
            sources.extend([row] * len(pieces))

        commands: list[tuple] = [
            ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
            ("LEFTPADDING", (0, 0), (-1, -1), CELL_PADDING),
            ("RIGHTPADDING", (0, 0), (-1, -1), CELL_PADDING),
            ("TOPPADDING", (0, 0), (-1, -1), CELL_PADDING),
            ("BOTTOMPADDING", (0, 0), (-1, -1), CELL_PADDING),
        ]
        for row_index, row in enumerate(sources):
            for column_index, cell in enumerate(row):
                position = (column_index, row_index)
                if cell.background is not None:
                    commands.append(
                        ("BACKGROUND", position, position, to_color(cell.background))
                    )
                if cell.bordered:
                    commands.append(
                        ("BOX", position, position, BORDER_WIDTH, colors.black)
                    )

        table = Table(
            data,
            colWidths=widths,
            repeatRows=block.header_rows,
            style=TableStyle(commands),
        )
        return [table, Spacer(1, block.space_after)]

    # ------------------------------------------------------------------ #
    # Images
    # ------------------------------------------------------------------ #

    def _image(
        self, block: ImageBlock, max_width: float, max_height: float
    ) -> list[Flowable]:
        try:
            image_width, image_height = ImageReader(BytesIO(block.data)).getSize()
        except Exception as e:
            logger.warning(
                "Skipping image the PDF surface cannot decode",
                sheet=block.sheet_name,
                format=block.image_format.value,
                error=str(e),
            )
            return []
        if image_width <= 0 or image_height <= 0:
            return []

        scale = min(max_width / image_width, max_height / image_height)
        return [
            Image(
                BytesIO(block.data),
                width=image_width * scale,
                height=image_height * scale,
            )
        ]


def row_height(
    paragraphs: Sequence[Paragraph], widths: Sequence[float], avail_height: float
) -> float:
    """Height of a table row holding ``paragraphs``, padding included."""
    heights = [
        paragraph.wrap(width - 2 * CELL_PADDING, avail_height)[1]
        for paragraph, width in zip(paragraphs, widths)
    ]
    return max(heights, default=0.0) + 2 * CELL_PADDING


def split_tall_row(
    paragraphs: Sequence[Paragraph], widths: Sequence[float], limit: float
) -> list[list[Paragraph]]:
    """Break a row into consecutive rows whose paragraphs fit ``limit``.

    Cells taller than ``limit`` are split line-wise with Paragraph.split and
    continue in the next row; cells that already fit leave an empty cell
    behind. A paragraph that cannot be split further is kept whole.

    Args:
        paragraphs: One paragraph per column.
        widths: Column widths in points, padding included.
        limit: Largest paragraph height per row, in points.

    Returns:
        The rows to emit; a single row when nothing needed splitting.
    """
    pieces: list[list[Paragraph]] = []
    pending = list(paragraphs)
    while True:
        current: list[Paragraph] = []
        rest: list[Paragraph | None] = []
        for paragraph, width in zip(pending, widths):
            inner = width - 2 * CELL_PADDING
            _, height = paragraph.wrap(inner, limit)
            parts = paragraph.split(inner, limit) if height > limit else []
            if len(parts) == 2:
                current.append(parts[0])
                rest.append(parts[1])
            else:
                current.append(paragraph)
                rest.append(None)
        pieces.append(current)
        if all(part is None for part in rest):
            return pieces
        pending = [
            part if part is not None else Paragraph("", done.style)
            for part, done in zip(rest, current)
        ]
