"""
Global application settings and configuration management.

This module provides centralized configuration management using Pydantic Settings
with support for environment variables, YAML configuration files, and validation.
"""

from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
import yaml
from dotenv import load_dotenv


class StorageSettings(BaseSettings):
    """Persisted store configuration."""

    data_dir: Path = Field(
        default=Path("data"),
        description="Directory holding the persisted store blobs"
    )
    namespace: str = Field(
        default="log-storage",
        min_length=1,
        description="Key under which the store snapshot is persisted"
    )

    model_config = SettingsConfigDict(env_prefix="STORAGE_")


class ExportSettings(BaseSettings):
    """Document export configuration."""

    output_dir: Path = Field(
        default=Path("exports"),
        description="Directory exported documents are written to"
    )
    font_path: Optional[Path] = Field(
        default=None,
        description="TrueType font used for PDF output (e.g. NotoSansKR-Regular.ttf)"
    )
    cid_font: str = Field(
        default="HYSMyeongJo-Medium",
        description="Built-in CID font used for PDF output when no font file is set"
    )
    summary_max_chars: int = Field(
        default=100,
        gt=0,
        description="Content length shown in the PDF summary table before truncation"
    )

    model_config = SettingsConfigDict(env_prefix="EXPORT_")

    @field_validator("font_path", mode="before")
    @classmethod
    def parse_font_path(cls, v):
        """Treat an empty environment value as no font file."""
        if isinstance(v, str) and not v.strip():
            return None
        return v


class AutoSaveSettings(BaseSettings):
    """Draft auto-save configuration."""

    delay_seconds: float = Field(
        default=5.0,
        gt=0.0,
        description="Quiet period after the last edit before the draft is saved"
    )

    model_config = SettingsConfigDict(env_prefix="AUTOSAVE_")


class ApiSettings(BaseSettings):
    """HTTP export endpoint configuration."""

    host: str = Field(default="127.0.0.1", description="Bind address")
    port: int = Field(default=8000, ge=1, le=65535, description="Bind port")

    model_config = SettingsConfigDict(env_prefix="API_")


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    level: str = Field(
        default="INFO",
        description="Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )
    file: Optional[Path] = Field(
        default=Path("logs/app.log"),
        description="Log file path"
    )

    model_config = SettingsConfigDict(env_prefix="LOG_")

    @field_validator("level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v = v.upper()
        if v not in valid_levels:
            raise ValueError(f"Log level must be one of {valid_levels}")
        return v

    @field_validator("file", mode="before")
    @classmethod
    def parse_log_file(cls, v):
        """An empty value disables the file sink."""
        if isinstance(v, str) and not v.strip():
            return None
        return v


class AppSettings(BaseSettings):
    """Main application settings."""

    name: str = Field(default="LogJournal", description="Application name")
    version: str = Field(default="0.1.0", description="Application version")
    debug: bool = Field(default=False, description="Debug mode")

    # Sub-configurations
    storage: StorageSettings = Field(default_factory=StorageSettings)
    export: ExportSettings = Field(default_factory=ExportSettings)
    autosave: AutoSaveSettings = Field(default_factory=AutoSaveSettings)
    api: ApiSettings = Field(default_factory=ApiSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore"
    )

    @classmethod
    def from_yaml(cls, yaml_path: Path) -> "AppSettings":
        """Load settings from YAML file."""
        if not yaml_path.exists():
            raise FileNotFoundError(f"Settings file not found: {yaml_path}")

        with open(yaml_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

        sections = {
            "storage": StorageSettings,
            "export": ExportSettings,
            "autosave": AutoSaveSettings,
            "api": ApiSettings,
            "logging": LoggingSettings,
        }

        settings_data = {}
        for key, value in data.items():
            if key in sections and isinstance(value, dict):
                settings_data[key] = sections[key](**value)
            elif key == "app" and isinstance(value, dict):
                # Top-level application fields may be grouped under "app"
                settings_data.update(value)
            else:
                settings_data[key] = value

        return cls(**settings_data)


def load_settings(
    yaml_path: Optional[Path] = None,
    env_file: Optional[Path] = None
) -> AppSettings:
    """
    Load application settings from multiple sources.

    Priority order:
    1. Environment variables
    2. YAML configuration file
    3. Default values

    Args:
        yaml_path: Path to YAML configuration file
        env_file: Path to environment file (.env)

    Returns:
        Configured AppSettings instance
    """
    if env_file and env_file.exists():
        load_dotenv(env_file)
    else:
        load_dotenv()

    settings = AppSettings()

    if yaml_path and yaml_path.exists():
        yaml_settings = AppSettings.from_yaml(yaml_path)
        # Values explicitly provided by the environment win over YAML
        settings = AppSettings(
            **{
                **yaml_settings.model_dump(),
                **settings.model_dump(exclude_unset=True)
            }
        )

    return settings


# Global settings instance
_settings: Optional[AppSettings] = None


def get_settings() -> AppSettings:
    """Get global settings instance (singleton pattern)."""
    global _settings
    if _settings is None:
        yaml_path = Path("configs/settings.yaml")
        env_path = Path(".env")
        _settings = load_settings(
            yaml_path=yaml_path if yaml_path.exists() else None,
            env_file=env_path if env_path.exists() else None
        )
    return _settings


def reload_settings(
    yaml_path: Optional[Path] = None,
    env_file: Optional[Path] = None
) -> AppSettings:
    """Reload settings from files (useful for testing or runtime config changes)."""
    global _settings
    _settings = load_settings(yaml_path=yaml_path, env_file=env_file)
    return _settings
