"""End-to-end workbook to PDF conversion."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from spreadsheet_pdf.config import LayoutOptions
from spreadsheet_pdf.rendering.pdf_renderer import PdfRenderer
from spreadsheet_pdf.services.document_assembler import DocumentAssembler
from spreadsheet_pdf.services.workbook_reader import WorkbookReader
from spreadsheet_pdf.utils.exceptions import ConversionError, InputError
from spreadsheet_pdf.utils.logging import get_logger, timed_operation

logger = get_logger(__name__)

DEFAULT_OUTPUT_FILENAME = "output.pdf"
PDF_MEDIA_TYPE = "application/pdf"

_XLSX_SUFFIX = re.compile(r"\.xlsx$")


def output_filename(original: str | None) -> str:
    """Derive the PDF name from the uploaded workbook's name.

    A trailing ``.xlsx`` (case-sensitive) becomes ``.pdf``; any other name
    gets ``.pdf`` appended. A missing name gives ``output.pdf``.
    """
    if not original:
        return DEFAULT_OUTPUT_FILENAME
    swapped, count = _XLSX_SUFFIX.subn(".pdf", original)
    if count:
        return swapped
    return f"{original}.pdf"


@dataclass
class ConversionResult:
    """A finished conversion."""

    pdf: bytes
    filename: str
    sheet_count: int
    metrics: dict[str, Any] = field(default_factory=dict)
    media_type: str = PDF_MEDIA_TYPE

    @property
    def size(self) -> int:
        return len(self.pdf)


class WorkbookConverter:
    """Read, lay out and render a workbook.

    One instance can serve many conversions; no state is kept between calls
    apart from the renderer's registered fonts.
    """

    def __init__(
        self,
        options: LayoutOptions | None = None,
        reader: WorkbookReader | None = None,
        assembler: DocumentAssembler | None = None,
        renderer: PdfRenderer | None = None,
    ) -> None:
        self._options = options or LayoutOptions()
        self._reader = reader or WorkbookReader()
        self._assembler = assembler or DocumentAssembler(self._options)
        self._renderer = renderer or PdfRenderer(self._options)

    def convert(
        self, content: bytes, filename: str | None = None
    ) -> ConversionResult:
        """Convert XLSX bytes to PDF bytes.

        Args:
            content: Uploaded workbook.
            filename: Original file name, used for the output name.

        Returns:
            ConversionResult with the PDF and its download name.

        Raises:
            InputError: If the upload is empty or unreadable.
            FontInitializationError: If the PDF fonts cannot be loaded.
            RenderError: If the PDF cannot be laid out.
            ConversionError: If reading or writing the streams fails.
        """
        with timed_operation(logger, "convert_workbook") as metrics:
            try:
                workbook = self._reader.read_bytes(content, filename)
                layout = self._assembler.assemble(workbook)
                pdf = self._renderer.render(layout, title=filename)
            except OSError as e:
                raise ConversionError(
                    f"Error processing Excel to PDF conversion: {e}",
                    stage="io",
                ) from e

            metrics.sheets_processed = len(workbook.sheets)
            metrics.sheets_skipped = len(layout.skipped_sheets)
            metrics.tables_rendered = len(layout.tables)
            metrics.images_embedded = len(layout.images)
            metrics.images_skipped = layout.images_skipped

        result = ConversionResult(
            pdf=pdf,
            filename=output_filename(filename),
            sheet_count=len(workbook.sheets),
            metrics=metrics.to_dict(),
        )
        logger.info(
            "Converted workbook",
            filename=result.filename,
            sheets=result.sheet_count,
            size=result.size,
        )
        return result

    def convert_path(
        self, input_path: Path, output_path: Path | None = None
    ) -> Path:
        """Convert a workbook on disk, writing the PDF next to it by default."""
        if not input_path.exists():
            raise InputError(
                f"Excel file not found: {input_path}", filename=str(input_path)
            )
        result = self.convert(input_path.read_bytes(), filename=input_path.name)
        target = output_path or input_path.with_name(result.filename)
        try:
            target.write_bytes(result.pdf)
        except OSError as e:
            raise ConversionError(
                f"Unable to write PDF to {target}: {e}", stage="io"
            ) from e
        return target
