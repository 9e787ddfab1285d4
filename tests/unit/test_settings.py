"""
Unit tests for settings module.
"""

import pytest
from pathlib import Path
from pydantic import ValidationError

from logjournal.settings import (
    AppSettings,
    ApiSettings,
    AutoSaveSettings,
    ExportSettings,
    LoggingSettings,
    StorageSettings,
    load_settings
)


class TestStorageSettings:
    """Test store persistence configuration."""

    def test_default_values(self):
        """Test default storage settings."""
        settings = StorageSettings()
        assert settings.data_dir == Path("data")
        assert settings.namespace == "log-storage"

    def test_empty_namespace_rejected(self):
        """Test the namespace must not be empty."""
        with pytest.raises(ValidationError):
            StorageSettings(namespace="")


class TestExportSettings:
    """Test export configuration."""

    def test_default_values(self):
        """Test default export settings."""
        settings = ExportSettings()
        assert settings.output_dir == Path("exports")
        assert settings.font_path is None
        assert settings.cid_font == "HYSMyeongJo-Medium"
        assert settings.summary_max_chars == 100

    def test_blank_font_path_means_none(self):
        """Test an empty font path disables the TrueType font."""
        settings = ExportSettings(font_path="  ")
        assert settings.font_path is None

    def test_summary_length_validation(self):
        """Test the summary length must be positive."""
        with pytest.raises(ValidationError):
            ExportSettings(summary_max_chars=0)


class TestAutoSaveSettings:
    """Test draft auto-save configuration."""

    def test_default_delay(self):
        """Test the default quiet period."""
        assert AutoSaveSettings().delay_seconds == 5.0

    def test_delay_validation(self):
        """Test the delay must be positive."""
        with pytest.raises(ValidationError):
            AutoSaveSettings(delay_seconds=0)


class TestApiSettings:
    """Test HTTP endpoint configuration."""

    def test_port_validation(self):
        """Test port range validation."""
        with pytest.raises(ValidationError):
            ApiSettings(port=0)

        with pytest.raises(ValidationError):
            ApiSettings(port=70000)

        assert ApiSettings(port=8080).port == 8080


class TestLoggingSettings:
    """Test logging configuration."""

    def test_default_values(self):
        """Test default logging settings."""
        settings = LoggingSettings()
        assert settings.level == "INFO"
        assert settings.file == Path("logs/app.log")

    def test_log_level_validation(self):
        """Test log level validation."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

        for level in valid_levels:
            settings = LoggingSettings(level=level)
            assert settings.level == level

        # Test case insensitive
        settings = LoggingSettings(level="debug")
        assert settings.level == "DEBUG"

        # Test invalid level
        with pytest.raises(ValidationError):
            LoggingSettings(level="INVALID")

    def test_empty_file_disables_file_sink(self):
        """Test an empty log file value turns the file sink off."""
        assert LoggingSettings(file="").file is None


class TestAppSettings:
    """Test main application settings."""

    def test_default_initialization(self):
        """Test default app settings initialization."""
        settings = AppSettings()
        assert settings.name == "LogJournal"
        assert settings.version == "0.1.0"
        assert settings.debug is False

    def test_nested_settings(self):
        """Test nested settings configuration."""
        settings = AppSettings()
        assert isinstance(settings.storage, StorageSettings)
        assert isinstance(settings.export, ExportSettings)
        assert isinstance(settings.autosave, AutoSaveSettings)
        assert isinstance(settings.api, ApiSettings)
        assert isinstance(settings.logging, LoggingSettings)


class TestLoadSettings:
    """Test settings loading functionality."""

    def test_load_from_yaml(self, sample_yaml_config):
        """Test loading settings from YAML file."""
        settings = AppSettings.from_yaml(sample_yaml_config)
        assert settings.name == "TestLogJournal"
        assert settings.storage.namespace == "yaml-storage"
        assert settings.storage.data_dir == Path("test-data")
        assert settings.export.cid_font == "HYGothic-Medium"
        assert settings.autosave.delay_seconds == 2.5
        assert settings.api.port == 9000
        assert settings.logging.level == "WARNING"

    def test_load_nonexistent_yaml(self, temp_dir):
        """Test loading from non-existent YAML file."""
        nonexistent_file = temp_dir / "nonexistent.yaml"
        with pytest.raises(FileNotFoundError):
            AppSettings.from_yaml(nonexistent_file)

    def test_load_from_env_file(self, sample_env_file, restore_environ):
        """Test environment file values reach the nested settings."""
        settings = load_settings(env_file=sample_env_file)
        assert settings.storage.namespace == "env-storage"
        assert settings.export.summary_max_chars == 50
        assert settings.logging.level == "DEBUG"

    def test_load_settings_function(self, sample_yaml_config, sample_env_file, restore_environ):
        """Test load_settings function with multiple sources."""
        settings = load_settings(yaml_path=sample_yaml_config, env_file=sample_env_file)
        assert settings.name == "TestLogJournal"  # From YAML
        assert settings.debug is True  # From YAML
        assert settings.api.port == 9000  # From YAML
