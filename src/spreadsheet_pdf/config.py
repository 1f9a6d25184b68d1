"""Configuration management for spreadsheet-pdf.

This module provides centralized configuration using pydantic-settings.
All configuration options can be set via environment variables with the
SPDF_ prefix, or via a .env file in the project root.

Environment Variables:
    SPDF_MAX_FILE_SIZE_MB: Maximum upload size in MB (default: 20)
    SPDF_PAGE_SIZE: Base page size, A4, LETTER or LEGAL (default: A4)
    SPDF_PAGE_MARGIN: Margin on all four sides in points (default: 36)
    SPDF_MAX_COLUMNS_PER_TABLE: Columns per tabular sub-table (default: 5)
    SPDF_BODY_FONT_SIZE: Font size for table text in points (default: 10)
    SPDF_FONT_NAME: Regular font name (default: Helvetica)
    SPDF_BOLD_FONT_NAME: Bold font name (default: Helvetica-Bold)
    SPDF_FONT_PATH: Optional TTF file registered as SPDF_FONT_NAME
    SPDF_BOLD_FONT_PATH: Optional TTF file registered as SPDF_BOLD_FONT_NAME
    SPDF_REFERENCE_YEAR: Year printed on calendar documents (default: 2023)
    SPDF_EPOCH_SERIAL: Serial number of the day before day 1 (default: 44926)
    SPDF_LOG_LEVEL: Logging level (default: INFO)
    SPDF_DEBUG: Enable debug mode (default: false)
    SPDF_CORS_ORIGINS: Comma-separated CORS origins (default: *)
    SPDF_SERVER_HOST: Server bind host (default: 0.0.0.0)
    SPDF_SERVER_PORT: Server bind port (default: 8000)
"""

import logging
from dataclasses import dataclass
from typing import Any

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

SUPPORTED_PAGE_SIZES = ("A4", "LETTER", "LEGAL")


@dataclass(frozen=True)
class LayoutOptions:
    """Layout parameters handed to the conversion core.

    The core never reads settings directly, so tests and the CLI can build
    these explicitly.
    """

    page_size: str = "A4"
    margin: float = 36.0
    max_columns_per_table: int = 5
    body_font_size: float = 10.0
    font_name: str = "Helvetica"
    bold_font_name: str = "Helvetica-Bold"
    font_path: str | None = None
    bold_font_path: str | None = None
    reference_year: int = 2023
    epoch_serial: float = 44926


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    All settings can be configured via environment variables prefixed with
    SPDF_ or via a .env file.

    Example .env file:
        SPDF_PAGE_SIZE=LETTER
        SPDF_LOG_LEVEL=DEBUG
        SPDF_MAX_COLUMNS_PER_TABLE=6
    """

    model_config = SettingsConfigDict(
        env_prefix="SPDF_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # =========================================================================
    # Upload Settings
    # =========================================================================

    max_file_size_mb: int = 20
    """Maximum workbook upload size in megabytes."""

    # =========================================================================
    # Page Layout Settings
    # =========================================================================

    page_size: str = "A4"
    """Base page size in portrait orientation (A4, LETTER or LEGAL)."""

    page_margin: float = 36.0
    """Margin applied to all four page sides, in points."""

    max_columns_per_table: int = 5
    """Maximum number of columns in one tabular sub-table."""

    body_font_size: float = 10.0
    """Font size used for table cells and notes, in points."""

    # =========================================================================
    # Font Settings
    # =========================================================================

    font_name: str = "Helvetica"
    """Regular font. A standard PDF font unless font_path is set."""

    bold_font_name: str = "Helvetica-Bold"
    """Bold font. A standard PDF font unless bold_font_path is set."""

    font_path: str | None = None
    """Optional TrueType file registered under font_name."""

    bold_font_path: str | None = None
    """Optional TrueType file registered under bold_font_name."""

    # =========================================================================
    # Calendar Settings
    # =========================================================================

    reference_year: int = 2023
    """Year printed on the title page and month headings of calendars."""

    epoch_serial: float = 44926
    """Spreadsheet serial number of the day before day 1 of the calendar."""

    # =========================================================================
    # Logging Settings
    # =========================================================================

    log_level: str = "INFO"
    """Logging level: DEBUG, INFO, WARNING, ERROR, or CRITICAL."""

    debug: bool = False
    """Enable debug mode with additional error details in responses."""

    # =========================================================================
    # Server Settings
    # =========================================================================

    cors_origins: str = "*"
    """Comma-separated list of allowed CORS origins, or * for all."""

    server_host: str = "0.0.0.0"
    """Host address for the server to bind to."""

    server_port: int = 8000
    """Port for the server to listen on."""

    # =========================================================================
    # Validators
    # =========================================================================

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is a valid Python logging level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper_v = v.upper()
        if upper_v not in valid_levels:
            raise ValueError(
                f"Invalid log level: {v}. Must be one of: {', '.join(valid_levels)}"
            )
        return upper_v

    @field_validator("page_size")
    @classmethod
    def validate_page_size(cls, v: str) -> str:
        """Validate the page size is one reportlab knows by name."""
        upper_v = v.strip().upper()
        if upper_v not in SUPPORTED_PAGE_SIZES:
            raise ValueError(
                f"Invalid page size: {v}. "
                f"Must be one of: {', '.join(SUPPORTED_PAGE_SIZES)}"
            )
        return upper_v

    @field_validator("page_margin")
    @classmethod
    def validate_page_margin(cls, v: float) -> float:
        """Validate margin leaves room for content."""
        if not 0.0 <= v < 200.0:
            raise ValueError(f"page_margin must be between 0 and 200, got {v}")
        return v

    @field_validator("max_columns_per_table")
    @classmethod
    def validate_max_columns(cls, v: int) -> int:
        """Validate sub-table width is reasonable."""
        if not 1 <= v <= 20:
            raise ValueError(
                f"max_columns_per_table must be between 1 and 20, got {v}"
            )
        return v

    @field_validator("body_font_size")
    @classmethod
    def validate_font_size(cls, v: float) -> float:
        """Validate font size is positive."""
        if v <= 0:
            raise ValueError(f"body_font_size must be positive, got {v}")
        return v

    @field_validator("font_name", "bold_font_name")
    @classmethod
    def validate_font_name(cls, v: str) -> str:
        """Validate font names are non-empty."""
        if not v.strip():
            raise ValueError("font names must be non-empty strings")
        return v.strip()

    @field_validator("reference_year")
    @classmethod
    def validate_reference_year(cls, v: int) -> int:
        """Validate the reference year is a four digit year."""
        if not 1900 <= v <= 9999:
            raise ValueError(f"reference_year must be between 1900 and 9999, got {v}")
        return v

    @field_validator("epoch_serial")
    @classmethod
    def validate_epoch_serial(cls, v: float) -> float:
        """Validate the epoch lies inside the accepted serial window."""
        if not 40000 < v < 50000:
            raise ValueError(
                f"epoch_serial must be strictly between 40000 and 50000, got {v}"
            )
        return v

    @field_validator("max_file_size_mb")
    @classmethod
    def validate_file_size(cls, v: int) -> int:
        """Validate file size is positive and reasonable."""
        if not 1 <= v <= 500:
            raise ValueError(f"max_file_size_mb must be between 1 and 500, got {v}")
        return v

    @field_validator("server_port")
    @classmethod
    def validate_port(cls, v: int) -> int:
        """Validate port is in valid range."""
        if not 1 <= v <= 65535:
            raise ValueError(f"server_port must be between 1 and 65535, got {v}")
        return v

    # =========================================================================
    # Computed Properties
    # =========================================================================

    @property
    def max_file_size_bytes(self) -> int:
        """Get max file size in bytes."""
        return self.max_file_size_mb * 1024 * 1024

    @property
    def cors_origins_list(self) -> list[str]:
        """Get CORS origins as a list."""
        if self.cors_origins == "*":
            return ["*"]
        return [origin.strip() for origin in self.cors_origins.split(",")]

    @property
    def log_level_int(self) -> int:
        """Get log level as integer for logging module."""
        level: int = getattr(logging, self.log_level)
        return level

    def layout_options(self) -> LayoutOptions:
        """Build the layout parameters for the conversion core."""
        return LayoutOptions(
            page_size=self.page_size,
            margin=self.page_margin,
            max_columns_per_table=self.max_columns_per_table,
            body_font_size=self.body_font_size,
            font_name=self.font_name,
            bold_font_name=self.bold_font_name,
            font_path=self.font_path,
            bold_font_path=self.bold_font_path,
            reference_year=self.reference_year,
            epoch_serial=self.epoch_serial,
        )

    def to_safe_dict(self) -> dict[str, Any]:
        """Convert settings to a dictionary suitable for logging.

        Returns:
            Dictionary representation of all settings.
        """
        return {
            "max_file_size_mb": self.max_file_size_mb,
            "page_size": self.page_size,
            "page_margin": self.page_margin,
            "max_columns_per_table": self.max_columns_per_table,
            "body_font_size": self.body_font_size,
            "font_name": self.font_name,
            "bold_font_name": self.bold_font_name,
            "font_path": self.font_path,
            "bold_font_path": self.bold_font_path,
            "reference_year": self.reference_year,
            "epoch_serial": self.epoch_serial,
            "log_level": self.log_level,
            "debug": self.debug,
            "cors_origins": self.cors_origins,
            "server_host": self.server_host,
            "server_port": self.server_port,
        }


def validate_settings_on_startup(s: Settings) -> None:
    """Validate settings on application startup.

    Args:
        s: Settings instance to validate.
    """
    logger = logging.getLogger(__name__)

    # Warn about permissive CORS in non-debug mode
    if s.cors_origins == "*" and not s.debug:
        logger.warning(
            "CORS is configured to allow all origins (*). "
            "Consider restricting this in production."
        )

    if (s.font_path is None) != (s.bold_font_path is None):
        logger.warning(
            "Only one of SPDF_FONT_PATH and SPDF_BOLD_FONT_PATH is set; "
            "the other font must be a standard PDF font."
        )

    logger.info(
        f"Configuration loaded: log_level={s.log_level}, debug={s.debug}, "
        f"page_size={s.page_size}, margin={s.page_margin}, "
        f"max_file_size_mb={s.max_file_size_mb}"
    )


# Create the global settings instance
settings = Settings()
