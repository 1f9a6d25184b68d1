"""Per-sheet orchestration from workbook model to document layout.

For every sheet the assembler:

1. starts a new page in the sheet's print orientation (except for the very
   first sheet of a non-calendar workbook);
2. plans the visible columns;
3. emits a calendar grid or one table per column group;
4. appends the sheet's pictures.

Calendar workbooks (sheet 0 is a calendar) open with a title page showing
the reference year.
"""

from __future__ import annotations

from spreadsheet_pdf.config import LayoutOptions
from spreadsheet_pdf.layout import (
    HEADER_BACKGROUND,
    DocumentLayout,
    ImageBlock,
    Orientation,
    PageBreak,
    RenderedCell,
    RenderedTable,
    TextAlign,
    TextBlock,
    page_dimensions,
    zebra_background,
)
from spreadsheet_pdf.models import SheetKind
from spreadsheet_pdf.services.calendar_grid import (
    DAY_HEADERS,
    NOTES_LABEL,
    build_calendar_grid,
    calendar_heading,
    collect_calendar_entries,
    needs_notes,
)
from spreadsheet_pdf.services.cell_values import extract_text, is_blank_text
from spreadsheet_pdf.services.column_planner import (
    ColumnGroup,
    ColumnPlan,
    plan_columns,
)
from spreadsheet_pdf.services.image_extractor import extract_images
from spreadsheet_pdf.services.sheet_classifier import is_calendar_document
from spreadsheet_pdf.services.style_mapper import apply_cell_style
from spreadsheet_pdf.utils.logging import LogContext, get_logger
from spreadsheet_pdf.workbook import Sheet, SheetCell, Workbook

logger = get_logger(__name__)

TITLE_FONT_SIZE = 24.0
HEADING_FONT_SIZE = 16.0
HEADING_SPACE_AFTER = 10.0
TABLE_SPACE_AFTER = 20.0
CALENDAR_TABLE_SPACE_AFTER = 10.0
NOTES_SPACE_BEFORE = 5.0


def sheet_orientation(sheet: Sheet) -> Orientation:
    return Orientation.LANDSCAPE if sheet.landscape else Orientation.PORTRAIT


class DocumentAssembler:
    """Turn a workbook into an ordered list of layout blocks."""

    def __init__(self, options: LayoutOptions | None = None) -> None:
        self._options = options or LayoutOptions()

    @property
    def options(self) -> LayoutOptions:
        return self._options

    def assemble(self, workbook: Workbook) -> DocumentLayout:
        """Build the document layout for a whole workbook.

        Args:
            workbook: Parsed workbook.

        Returns:
            DocumentLayout ready for rendering.
        """
        opts = self._options
        layout = DocumentLayout(page_size=opts.page_size, margin=opts.margin)
        calendar_document = is_calendar_document(workbook)

        if calendar_document:
            self._add_title_page(layout)
        elif workbook.sheets:
            layout.first_orientation = sheet_orientation(workbook.sheets[0])

        for index, sheet in enumerate(workbook.sheets):
            orientation = sheet_orientation(sheet)
            if index > 0 or calendar_document:
                layout.blocks.append(PageBreak(orientation))
            with LogContext(sheet=sheet.name):
                logger.debug("Sheet orientation", orientation=orientation.value)
                self._add_sheet(layout, sheet, orientation)

        return layout

    # ------------------------------------------------------------------ #
    # Internal helpers
    # ------------------------------------------------------------------ #

    def _available_width(self, orientation: Orientation) -> float:
        width, _ = page_dimensions(self._options.page_size, orientation)
        return width - 2 * self._options.margin

    def _add_title_page(self, layout: DocumentLayout) -> None:
        _, height = page_dimensions(self._options.page_size, Orientation.PORTRAIT)
        layout.first_orientation = Orientation.PORTRAIT
        layout.blocks.append(
            TextBlock(
                text=str(self._options.reference_year),
                bold=True,
                font_size=TITLE_FONT_SIZE,
                alignment=TextAlign.CENTER,
                space_before=height / 2 - TITLE_FONT_SIZE,
            )
        )

    def _add_sheet(
        self, layout: DocumentLayout, sheet: Sheet, orientation: Orientation
    ) -> None:
        plan = plan_columns(
            sheet,
            self._available_width(orientation),
            self._options.max_columns_per_table,
        )
        if plan is None:
            logger.debug("Skipping sheet without visible columns")
            layout.skipped_sheets.append(sheet.name)
            return

        if plan.kind is SheetKind.CALENDAR:
            self._add_calendar(layout, sheet, plan)
        else:
            self._add_tabular(layout, sheet, plan)
        self._add_images(layout, sheet)

    def _add_calendar(
        self, layout: DocumentLayout, sheet: Sheet, plan: ColumnPlan
    ) -> None:
        opts = self._options
        layout.blocks.append(
            TextBlock(
                text=calendar_heading(sheet.name, opts.reference_year),
                bold=True,
                font_size=HEADING_FONT_SIZE,
                alignment=TextAlign.CENTER,
                space_after=HEADING_SPACE_AFTER,
            )
        )

        grid = build_calendar_grid(
            collect_calendar_entries(sheet, plan.columns), opts.epoch_serial
        )
        header = tuple(
            RenderedCell(
                text=day,
                bold=True,
                background=HEADER_BACKGROUND,
                font_size=opts.body_font_size,
            )
            for day in DAY_HEADERS
        )
        body = tuple(
            tuple(
                RenderedCell(
                    text=text or "",
                    background=zebra_background(row_index),
                    bordered=text is not None,
                    font_size=opts.body_font_size,
                )
                for text in row
            )
            for row_index, row in enumerate(grid.cells)
        )
        layout.blocks.append(
            RenderedTable(
                rows=(header, *body),
                column_widths=plan.groups[0].widths,
                header_rows=1,
                space_after=CALENDAR_TABLE_SPACE_AFTER,
            )
        )
        logger.debug(
            "Added calendar table",
            days=len(grid.populated()),
            first_day_index=grid.first_day_index,
        )

        if needs_notes(sheet.name):
            layout.blocks.append(
                TextBlock(
                    text=NOTES_LABEL,
                    font_size=opts.body_font_size,
                    alignment=TextAlign.RIGHT,
                    space_before=NOTES_SPACE_BEFORE,
                )
            )

    def _add_tabular(
        self, layout: DocumentLayout, sheet: Sheet, plan: ColumnPlan
    ) -> None:
        for group_index, group in enumerate(plan.groups):
            table = self._group_table(sheet, group, group_index)
            if table is None:
                continue
            layout.blocks.append(table)
            logger.debug(
                "Added table",
                group=group_index,
                columns=table.column_count,
                rows=len(table.rows),
            )

    def _group_table(
        self, sheet: Sheet, group: ColumnGroup, group_index: int
    ) -> RenderedTable | None:
        rows: list[tuple[RenderedCell, ...]] = []
        header = sheet.row(0)
        if header is not None:
            rows.append(
                tuple(self._header_cell(header.cell(c)) for c in group.columns)
            )

        data_index = 0
        for row in sheet.rows:
            if row.index < 1:
                continue
            cells = [row.cell(c) for c in group.columns]
            texts = [extract_text(cell) for cell in cells]
            if all(is_blank_text(text) for text in texts):
                logger.debug("Skipping empty row", row=row.index, group=group_index)
                continue
            rows.append(
                tuple(
                    self._data_cell(cell, text, data_index)
                    for cell, text in zip(cells, texts, strict=True)
                )
            )
            data_index += 1

        if not rows:
            return None
        return RenderedTable(
            rows=tuple(rows),
            column_widths=group.widths,
            header_rows=1 if header is not None else 0,
            space_after=TABLE_SPACE_AFTER,
        )

    def _header_cell(self, cell: SheetCell | None) -> RenderedCell:
        base = RenderedCell(
            text=extract_text(cell),
            bold=True,
            background=HEADER_BACKGROUND,
            font_size=self._options.body_font_size,
        )
        return apply_cell_style(cell.style if cell else None, base)

    def _data_cell(
        self, cell: SheetCell | None, text: str, data_index: int
    ) -> RenderedCell:
        base = RenderedCell(
            text=text,
            background=zebra_background(data_index),
            font_size=self._options.body_font_size,
        )
        return apply_cell_style(cell.style if cell else None, base)

    def _add_images(self, layout: DocumentLayout, sheet: Sheet) -> None:
        images = extract_images(sheet)
        layout.images_skipped += len(sheet.pictures) - len(images)
        for image in images:
            layout.blocks.append(
                ImageBlock(
                    data=image.data,
                    image_format=image.image_format,
                    sheet_name=sheet.name,
                )
            )
            logger.info(
                "Added image",
                format=image.image_format.value,
                size=len(image.data),
            )
