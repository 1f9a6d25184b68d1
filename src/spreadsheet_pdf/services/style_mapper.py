"""Carry source cell styling over to rendered table cells."""

from __future__ import annotations

from dataclasses import replace

from spreadsheet_pdf.layout import RenderedCell, TextAlign
from spreadsheet_pdf.workbook import CellStyle, HorizontalAlignment

_ALIGNMENTS = {
    HorizontalAlignment.CENTER: TextAlign.CENTER,
    HorizontalAlignment.RIGHT: TextAlign.RIGHT,
}


def map_alignment(alignment: HorizontalAlignment) -> TextAlign:
    """Center and right carry over; everything else becomes left."""
    return _ALIGNMENTS.get(alignment, TextAlign.LEFT)


def apply_cell_style(style: CellStyle | None, target: RenderedCell) -> RenderedCell:
    """Return ``target`` with bold, explicit fill and alignment from ``style``.

    Bold is only ever added. An absent or non-RGB fill keeps the existing
    background. A missing style leaves the cell untouched.
    """
    if style is None:
        return target
    return replace(
        target,
        bold=target.bold or style.bold,
        background=style.fill_rgb if style.fill_rgb is not None else target.background,
        alignment=map_alignment(style.alignment),
    )
