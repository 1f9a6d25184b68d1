"""Services for spreadsheet-pdf."""

from spreadsheet_pdf.services.converter import (
    ConversionResult,
    WorkbookConverter,
    output_filename,
)
from spreadsheet_pdf.services.document_assembler import DocumentAssembler
from spreadsheet_pdf.services.workbook_reader import WorkbookReader

__all__ = [
    "ConversionResult",
    "DocumentAssembler",
    "WorkbookConverter",
    "WorkbookReader",
    "output_filename",
]
