"""Utilities package for spreadsheet-pdf.

This package provides:
- Centralized exception classes (exceptions.py)
- Structured logging utilities (logging.py)
"""

from spreadsheet_pdf.utils.exceptions import (
    ConversionError,
    ConverterError,
    EmptyUploadError,
    ErrorCode,
    FileTooLargeError,
    FontInitializationError,
    HTTPStatusMixin,
    InputError,
    RenderError,
    UnsupportedFormatError,
)
from spreadsheet_pdf.utils.logging import (
    LogContext,
    StructuredLogger,
    get_logger,
    get_request_id,
    set_request_id,
)

__all__ = [
    # Exceptions
    "ConversionError",
    "ConverterError",
    "EmptyUploadError",
    "ErrorCode",
    "FileTooLargeError",
    "FontInitializationError",
    "HTTPStatusMixin",
    "InputError",
    "RenderError",
    "UnsupportedFormatError",
    # Logging
    "LogContext",
    "StructuredLogger",
    "get_logger",
    "get_request_id",
    "set_request_id",
]
