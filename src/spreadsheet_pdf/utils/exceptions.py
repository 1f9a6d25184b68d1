"""Centralized exception classes for spreadsheet-pdf.

This module provides a hierarchy of custom exceptions with error codes,
HTTP status code mapping, and structured error details for consistent
error handling throughout the application.

Exception Hierarchy:
    ConverterError (base)
    ├── InputError
    │   ├── EmptyUploadError
    │   ├── FileTooLargeError
    │   └── UnsupportedFormatError
    └── ConversionError
        ├── FontInitializationError
        └── RenderError

Per-cell and per-image failures are not exceptions at this level: they are
recovered where they happen and degrade to empty text or a skipped image.

Error Codes:
    All errors have a unique error code (e.g., "E1001") that can be used
    for programmatic error handling and documentation.
"""

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Enumeration of all error codes used in the application.

    Error codes are grouped by category:
    - E1xxx: Input file errors
    - E4xxx: Conversion/rendering errors
    - E9xxx: Internal/unexpected errors
    """

    # Input errors (E1xxx)
    EMPTY_UPLOAD = "E1001"
    FILE_TOO_LARGE = "E1002"
    UNSUPPORTED_FORMAT = "E1003"
    FILE_READ_ERROR = "E1004"

    # Conversion errors (E4xxx)
    FONT_INITIALIZATION_FAILED = "E4001"
    CONVERSION_FAILED = "E4002"
    RENDER_FAILED = "E4003"

    # Internal errors (E9xxx)
    INTERNAL_ERROR = "E9001"
    CONFIGURATION_ERROR = "E9002"


class HTTPStatusMixin:
    """Mixin that provides HTTP status code for exceptions.

    Subclasses should set the `http_status` class attribute.
    """

    http_status: int = 500

    def get_http_status(self) -> int:
        """Get the HTTP status code for this exception.

        Returns:
            HTTP status code appropriate for this error.
        """
        return self.http_status


class ConverterError(Exception, HTTPStatusMixin):
    """Base exception for all spreadsheet-pdf errors.

    Attributes:
        message: Human-readable error message.
        error_code: Unique error code from ErrorCode enum.
        details: Optional dictionary with additional error details.
        http_status: HTTP status code for API responses (default 500).
    """

    http_status: int = 500

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            error_code: Error code from ErrorCode enum.
            details: Optional additional details about the error.
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert the exception to a dictionary for API responses.

        Returns:
            Dictionary with error information.
        """
        result: dict[str, Any] = {
            "error_code": self.error_code.value,
            "message": self.message,
        }
        if self.details:
            result["details"] = self.details
        return result

    def __str__(self) -> str:
        """Return string representation with error code."""
        return f"[{self.error_code.value}] {self.message}"


# =============================================================================
# Input Errors (E1xxx)
# =============================================================================


class InputError(ConverterError):
    """The uploaded workbook is missing, empty or cannot be read."""

    http_status: int = 400

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.FILE_READ_ERROR,
        filename: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with filename information.

        Args:
            message: Error message.
            error_code: Error code.
            filename: Name of the uploaded file, when known.
            details: Additional details.
        """
        details = details or {}
        if filename:
            details["filename"] = filename
        super().__init__(message, error_code, details)
        self.filename = filename


class EmptyUploadError(InputError):
    """Raised when the uploaded file has no content."""

    def __init__(
        self,
        filename: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with filename.

        Args:
            filename: Name of the empty upload.
            details: Additional details.
        """
        super().__init__(
            message="Uploaded file is empty",
            error_code=ErrorCode.EMPTY_UPLOAD,
            filename=filename,
            details=details,
        )


class FileTooLargeError(InputError):
    """Raised when a file exceeds the maximum allowed size."""

    http_status: int = 413

    def __init__(
        self,
        file_size: int,
        max_size: int,
        filename: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with size information.

        Args:
            file_size: Actual file size in bytes.
            max_size: Maximum allowed size in bytes.
            filename: Optional filename.
            details: Additional details.
        """
        details = details or {}
        details["file_size_bytes"] = file_size
        details["max_size_bytes"] = max_size
        message = (
            f"File size ({file_size} bytes) exceeds maximum "
            f"allowed size ({max_size} bytes)"
        )
        super().__init__(
            message=message,
            error_code=ErrorCode.FILE_TOO_LARGE,
            filename=filename,
            details=details,
        )
        self.file_size = file_size
        self.max_size = max_size


class UnsupportedFormatError(InputError):
    """Raised when the upload is not an XLSX workbook."""

    def __init__(
        self,
        message: str,
        filename: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with format information.

        Args:
            message: Error message.
            filename: Optional filename.
            details: Additional details.
        """
        super().__init__(
            message=message,
            error_code=ErrorCode.UNSUPPORTED_FORMAT,
            filename=filename,
            details=details,
        )


# =============================================================================
# Conversion Errors (E4xxx)
# =============================================================================


class ConversionError(ConverterError):
    """Base class for failures while producing the PDF."""

    http_status: int = 500

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.CONVERSION_FAILED,
        stage: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with the conversion stage.

        Args:
            message: Error message.
            error_code: Error code.
            stage: The conversion stage where the error occurred.
            details: Additional details.
        """
        details = details or {}
        if stage:
            details["conversion_stage"] = stage
        super().__init__(message, error_code, details)
        self.stage = stage


class FontInitializationError(ConversionError):
    """Raised when the PDF surface cannot load its base fonts."""

    def __init__(
        self,
        font_name: str,
        reason: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with the failing font.

        Args:
            font_name: Name of the font that could not be loaded.
            reason: Underlying error message.
            details: Additional details.
        """
        details = details or {}
        details["font_name"] = font_name
        super().__init__(
            message=f"Failed to create PDF font '{font_name}': {reason}",
            error_code=ErrorCode.FONT_INITIALIZATION_FAILED,
            stage="font_initialization",
            details=details,
        )
        self.font_name = font_name


class RenderError(ConversionError):
    """Raised when the PDF layout engine fails to build the document."""

    def __init__(
        self,
        message: str,
        sheet_name: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with sheet information.

        Args:
            message: Error message.
            sheet_name: Sheet being rendered, when known.
            details: Additional details.
        """
        details = details or {}
        if sheet_name:
            details["sheet_name"] = sheet_name
        super().__init__(
            message=message,
            error_code=ErrorCode.RENDER_FAILED,
            stage="render",
            details=details,
        )
