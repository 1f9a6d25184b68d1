"""Structured logging utilities for spreadsheet-pdf.

This module provides:
- Request ID tracking using contextvars for correlation across a conversion
- Structured logging with consistent format and metadata
- Conversion metrics logging helpers

Usage:
    from spreadsheet_pdf.utils.logging import get_logger, LogContext

    logger = get_logger(__name__)

    with LogContext(request_id="abc-123", sheet="January"):
        logger.info("Rendering sheet", columns=7)
"""

import logging
from collections.abc import Generator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

# Context variables for request tracking
_request_id_var: ContextVar[str | None] = ContextVar("request_id", default=None)
_extra_context_var: ContextVar[dict[str, Any] | None] = ContextVar(
    "extra_context", default=None
)


def get_request_id() -> str | None:
    """Get the current request ID from context.

    Returns:
        The current request ID or None if not set.
    """
    return _request_id_var.get()


def set_request_id(request_id: str | None) -> None:
    """Set the request ID in context.

    Args:
        request_id: The request ID to set, or None to clear.
    """
    _request_id_var.set(request_id)


def get_extra_context() -> dict[str, Any]:
    """Get additional context from context vars."""
    ctx = _extra_context_var.get()
    return ctx if ctx is not None else {}


def set_extra_context(context: dict[str, Any]) -> None:
    """Set additional context in context vars."""
    _extra_context_var.set(context)


def clear_context() -> None:
    """Clear all context variables."""
    _request_id_var.set(None)
    _extra_context_var.set(None)


@dataclass
class ConversionMetrics:
    """Counters collected while converting one workbook.

    Attributes:
        operation: Name of the operation being measured.
        start_time: When the operation started.
        end_time: When the operation ended.
        duration_seconds: Duration in seconds.
        sheets_processed: Sheets visited, including skipped ones.
        sheets_skipped: Sheets with no visible column.
        tables_rendered: Tables added to the document.
        images_embedded: Images added to the document.
        images_skipped: Images dropped as unreadable or unrecognized.
    """

    operation: str
    start_time: datetime = field(default_factory=lambda: datetime.now(UTC))
    end_time: datetime | None = None
    duration_seconds: float = 0.0
    sheets_processed: int = 0
    sheets_skipped: int = 0
    tables_rendered: int = 0
    images_embedded: int = 0
    images_skipped: int = 0

    def finish(self) -> None:
        """Mark the operation as complete and calculate duration."""
        self.end_time = datetime.now(UTC)
        self.duration_seconds = (self.end_time - self.start_time).total_seconds()

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging, omitting zero counters."""
        result: dict[str, Any] = {
            "operation": self.operation,
            "duration_seconds": f"{self.duration_seconds:.3f}",
        }
        counters = {
            "sheets_processed": self.sheets_processed,
            "sheets_skipped": self.sheets_skipped,
            "tables_rendered": self.tables_rendered,
            "images_embedded": self.images_embedded,
            "images_skipped": self.images_skipped,
        }
        result.update({k: v for k, v in counters.items() if v > 0})
        return result


class StructuredLogFormatter(logging.Formatter):
    """Log formatter that prefixes messages with the current context.

    Adds request_id and any LogContext values, e.g.
    ``[request_id=abc sheet=January] Added calendar table``.
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format the log record with context information."""
        prefix_parts = []
        request_id = get_request_id()
        if request_id:
            prefix_parts.append(f"request_id={request_id}")
        for key, value in get_extra_context().items():
            prefix_parts.append(f"{key}={value}")

        prefix = f"[{' '.join(prefix_parts)}] " if prefix_parts else ""

        original_msg = record.msg
        record.msg = f"{prefix}{original_msg}"
        try:
            return super().format(record)
        finally:
            record.msg = original_msg


class StructuredLogger:
    """Logger wrapper that renders keyword arguments as key=value pairs."""

    def __init__(self, name: str) -> None:
        """Initialize the structured logger.

        Args:
            name: Logger name (typically __name__ of the module).
        """
        self._logger = logging.getLogger(name)
        self._name = name

    @property
    def logger(self) -> logging.Logger:
        """Access the underlying Python logger."""
        return self._logger

    def _build_message(self, message: str, **kwargs: Any) -> str:
        if not kwargs:
            return message

        parts = [f"{k}={v}" for k, v in kwargs.items()]
        return f"{message} | {', '.join(parts)}"

    def debug(self, message: str, **kwargs: Any) -> None:
        """Log a debug message."""
        self._logger.debug(self._build_message(message, **kwargs))

    def info(self, message: str, **kwargs: Any) -> None:
        """Log an info message."""
        self._logger.info(self._build_message(message, **kwargs))

    def warning(self, message: str, **kwargs: Any) -> None:
        """Log a warning message."""
        self._logger.warning(self._build_message(message, **kwargs))

    def error(self, message: str, exc_info: bool = False, **kwargs: Any) -> None:
        """Log an error message.

        Args:
            message: Log message.
            exc_info: Whether to include exception info.
            **kwargs: Additional structured data.
        """
        self._logger.error(self._build_message(message, **kwargs), exc_info=exc_info)

    def exception(self, message: str, **kwargs: Any) -> None:
        """Log an exception with traceback."""
        self._logger.exception(self._build_message(message, **kwargs))

    def log_metrics(self, metrics: ConversionMetrics) -> None:
        """Log conversion metrics.

        Args:
            metrics: Metrics to log.
        """
        self.info(f"Performance: {metrics.operation}", **metrics.to_dict())


class LogContext:
    """Context manager for adding temporary context to logs.

    Usage:
        with LogContext(sheet="March"):
            logger.debug("Skipping empty row", row=4)
    """

    def __init__(self, **kwargs: Any) -> None:
        """Initialize with context values.

        Args:
            **kwargs: Key-value pairs to add to log context. A request_id
                key sets the request ID instead.
        """
        self._new_context = dict(kwargs)
        self._old_context: dict[str, Any] = {}
        self._old_request_id: str | None = None

    def __enter__(self) -> "LogContext":
        """Enter the context, saving old values and setting new ones."""
        self._old_context = get_extra_context().copy()
        self._old_request_id = get_request_id()

        new_context = dict(self._new_context)
        request_id = new_context.pop("request_id", None)
        if request_id is not None:
            set_request_id(request_id)

        merged = self._old_context.copy()
        merged.update(new_context)
        set_extra_context(merged)
        return self

    def __exit__(self, *args: Any) -> None:
        """Exit the context, restoring old values."""
        set_extra_context(self._old_context)
        set_request_id(self._old_request_id)


@contextmanager
def timed_operation(
    logger: StructuredLogger,
    operation: str,
) -> Generator[ConversionMetrics, None, None]:
    """Context manager for timing operations.

    Usage:
        with timed_operation(logger, "convert_workbook") as metrics:
            metrics.sheets_processed += 1

    Args:
        logger: Logger to use for output.
        operation: Name of the operation.

    Yields:
        ConversionMetrics instance for tracking.
    """
    metrics = ConversionMetrics(operation=operation)
    try:
        yield metrics
    finally:
        metrics.finish()
        logger.log_metrics(metrics)


def configure_logging(
    level: int | str = logging.INFO,
    format_string: str | None = None,
    use_structured_formatter: bool = True,
) -> None:
    """Configure logging for the application.

    Args:
        level: Log level (int or string like "INFO").
        format_string: Custom format string (uses default if None).
        use_structured_formatter: Whether to use the structured formatter.
    """
    if isinstance(level, str):
        level = getattr(logging, level.upper())

    if format_string is None:
        format_string = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setLevel(level)

    formatter: logging.Formatter
    if use_structured_formatter:
        formatter = StructuredLogFormatter(format_string)
    else:
        formatter = logging.Formatter(format_string)

    handler.setFormatter(formatter)
    root_logger.addHandler(handler)


def get_logger(name: str) -> StructuredLogger:
    """Get a structured logger for a module.

    Args:
        name: Logger name (typically __name__).

    Returns:
        StructuredLogger instance.

    Example:
        logger = get_logger(__name__)
        logger.info("Converted workbook", sheets=3, size=10240)
    """
    return StructuredLogger(name)
