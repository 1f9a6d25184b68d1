"""Tests for configuration management module."""

import logging
import os
from unittest.mock import patch

import pytest

from spreadsheet_pdf.config import LayoutOptions, Settings, validate_settings_on_startup


class TestSettings:
    """Tests for the Settings class."""

    def test_default_values(self) -> None:
        """Test default configuration values."""
        with patch.dict(os.environ, {}, clear=True):
            settings = Settings(_env_file=None)

        # Upload defaults
        assert settings.max_file_size_mb == 20

        # Layout defaults
        assert settings.page_size == "A4"
        assert settings.page_margin == 36.0
        assert settings.max_columns_per_table == 5
        assert settings.body_font_size == 10.0

        # Font defaults
        assert settings.font_name == "Helvetica"
        assert settings.bold_font_name == "Helvetica-Bold"
        assert settings.font_path is None
        assert settings.bold_font_path is None

        # Calendar defaults
        assert settings.reference_year == 2023
        assert settings.epoch_serial == 44926

        # Logging defaults
        assert settings.log_level == "INFO"
        assert settings.debug is False

        # Server defaults
        assert settings.cors_origins == "*"
        assert settings.server_host == "0.0.0.0"
        assert settings.server_port == 8000

    def test_environment_variable_prefix(self) -> None:
        """Test settings are read from SPDF_ prefixed variables."""
        env_vars = {
            "SPDF_PAGE_SIZE": "letter",
            "SPDF_MAX_COLUMNS_PER_TABLE": "7",
            "SPDF_REFERENCE_YEAR": "2024",
        }
        with patch.dict(os.environ, env_vars, clear=True):
            settings = Settings(_env_file=None)

        assert settings.page_size == "LETTER"
        assert settings.max_columns_per_table == 7
        assert settings.reference_year == 2024

    def test_max_file_size_bytes_property(self) -> None:
        """Test max_file_size_bytes conversion."""
        with patch.dict(os.environ, {"SPDF_MAX_FILE_SIZE_MB": "5"}, clear=True):
            settings = Settings(_env_file=None)
        assert settings.max_file_size_bytes == 5 * 1024 * 1024

    def test_cors_origins_list_multiple(self) -> None:
        """Test comma-separated CORS origins are split and trimmed."""
        env_vars = {"SPDF_CORS_ORIGINS": "https://a.example, https://b.example"}
        with patch.dict(os.environ, env_vars, clear=True):
            settings = Settings(_env_file=None)
        assert settings.cors_origins_list == ["https://a.example", "https://b.example"]

    def test_cors_origins_list_wildcard(self) -> None:
        """Test the wildcard stays a single entry."""
        with patch.dict(os.environ, {}, clear=True):
            settings = Settings(_env_file=None)
        assert settings.cors_origins_list == ["*"]

    def test_log_level_int_property(self) -> None:
        """Test log_level_int maps names to logging constants."""
        with patch.dict(os.environ, {"SPDF_LOG_LEVEL": "WARNING"}, clear=True):
            settings = Settings(_env_file=None)
        assert settings.log_level_int == logging.WARNING

    def test_layout_options(self) -> None:
        """Test layout_options carries every layout setting."""
        env_vars = {
            "SPDF_PAGE_SIZE": "LEGAL",
            "SPDF_PAGE_MARGIN": "50",
            "SPDF_BODY_FONT_SIZE": "9",
            "SPDF_EPOCH_SERIAL": "45016",
        }
        with patch.dict(os.environ, env_vars, clear=True):
            options = Settings(_env_file=None).layout_options()

        assert options == LayoutOptions(
            page_size="LEGAL",
            margin=50.0,
            body_font_size=9.0,
            epoch_serial=45016,
        )

    def test_to_safe_dict(self) -> None:
        """Test to_safe_dict includes the layout settings."""
        with patch.dict(os.environ, {}, clear=True):
            result = Settings(_env_file=None).to_safe_dict()
        assert result["page_size"] == "A4"
        assert result["reference_year"] == 2023
        assert result["server_port"] == 8000


class TestSettingsValidation:
    """Tests for settings validation."""

    def test_lowercase_log_level_normalized(self) -> None:
        """Test lowercase log levels are normalized to uppercase."""
        with patch.dict(os.environ, {"SPDF_LOG_LEVEL": "debug"}, clear=True):
            settings = Settings(_env_file=None)
        assert settings.log_level == "DEBUG"

    def test_invalid_log_level_raises_error(self) -> None:
        """Test invalid log level raises validation error."""
        with (
            patch.dict(os.environ, {"SPDF_LOG_LEVEL": "INVALID"}, clear=True),
            pytest.raises(ValueError, match="Invalid log level"),
        ):
            Settings(_env_file=None)

    def test_invalid_page_size(self) -> None:
        """Test unknown page sizes are rejected."""
        with (
            patch.dict(os.environ, {"SPDF_PAGE_SIZE": "A3"}, clear=True),
            pytest.raises(ValueError, match="Invalid page size"),
        ):
            Settings(_env_file=None)

    @pytest.mark.parametrize(
        ("name", "value"),
        [
            ("SPDF_MAX_COLUMNS_PER_TABLE", "0"),
            ("SPDF_MAX_COLUMNS_PER_TABLE", "21"),
            ("SPDF_PAGE_MARGIN", "-1"),
            ("SPDF_BODY_FONT_SIZE", "0"),
            ("SPDF_FONT_NAME", "  "),
            ("SPDF_REFERENCE_YEAR", "23"),
            ("SPDF_EPOCH_SERIAL", "40000"),
            ("SPDF_EPOCH_SERIAL", "50000"),
            ("SPDF_MAX_FILE_SIZE_MB", "0"),
            ("SPDF_MAX_FILE_SIZE_MB", "501"),
            ("SPDF_SERVER_PORT", "0"),
            ("SPDF_SERVER_PORT", "65536"),
        ],
    )
    def test_out_of_range_values(self, name: str, value: str) -> None:
        """Test out of range values raise validation errors."""
        with (
            patch.dict(os.environ, {name: value}, clear=True),
            pytest.raises(ValueError),
        ):
            Settings(_env_file=None)


class TestValidateSettingsOnStartup:
    """Tests for the validate_settings_on_startup function."""

    def test_warns_about_permissive_cors_in_production(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        """Test warning for permissive CORS when not in debug mode."""
        env_vars = {"SPDF_CORS_ORIGINS": "*", "SPDF_DEBUG": "false"}
        with patch.dict(os.environ, env_vars, clear=True):
            settings = Settings(_env_file=None)

        with caplog.at_level(logging.WARNING):
            validate_settings_on_startup(settings)

        assert "CORS is configured to allow all origins" in caplog.text

    def test_no_cors_warning_in_debug_mode(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        """Test no CORS warning when in debug mode."""
        env_vars = {"SPDF_CORS_ORIGINS": "*", "SPDF_DEBUG": "true"}
        with patch.dict(os.environ, env_vars, clear=True):
            settings = Settings(_env_file=None)

        with caplog.at_level(logging.WARNING):
            validate_settings_on_startup(settings)

        assert "CORS is configured to allow all origins" not in caplog.text

    def test_warns_when_only_one_font_path_set(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        """Test warning when only the regular font file is configured."""
        env_vars = {"SPDF_FONT_PATH": "/fonts/regular.ttf"}
        with patch.dict(os.environ, env_vars, clear=True):
            settings = Settings(_env_file=None)

        with caplog.at_level(logging.WARNING):
            validate_settings_on_startup(settings)

        assert "Only one of SPDF_FONT_PATH" in caplog.text

    def test_logs_configuration_summary(self, caplog: pytest.LogCaptureFixture) -> None:
        """Test configuration summary is logged on startup."""
        with patch.dict(os.environ, {}, clear=True):
            settings = Settings(_env_file=None)

        with caplog.at_level(logging.INFO):
            validate_settings_on_startup(settings)

        assert "Configuration loaded" in caplog.text
        assert "page_size=A4" in caplog.text
