"""Spreadsheet PDF - XLSX workbook to PDF conversion service."""

from spreadsheet_pdf.api import app, create_app

__all__ = ["app", "create_app"]
__version__ = "0.1.0"


def main() -> None:
    """Run the FastAPI server using uvicorn."""
    import uvicorn

    from spreadsheet_pdf.config import settings

    uvicorn.run(
        "spreadsheet_pdf.api:app",
        host=settings.server_host,
        port=settings.server_port,
        reload=settings.debug,
    )
