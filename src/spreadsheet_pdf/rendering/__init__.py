"""PDF rendering for spreadsheet-pdf."""

from spreadsheet_pdf.rendering.pdf_renderer import PdfRenderer

__all__ = ["PdfRenderer"]
