"""
Configuration and parameter loading using Pydantic.

This module provides centralized configuration management for the entire application.
All parameters are loaded from YAML and validated using Pydantic models.
"""

from pathlib import Path
from typing import Any

import pytz
import yaml
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from bp_importer.utils.exceptions import ConfigurationError


class ParserConfig(BaseModel):
    """CSV parsing configuration."""

    encoding: str = "utf-8-sig"
    timezone: str | None = Field(
        None, description="IANA time zone for row timestamps; None uses the process local zone"
    )
    datetime_format: str = "%Y-%m-%d %H:%M"
    irregular_pulse_marker: str = "detected"
    default_source: str = "Unknown"

    @field_validator("timezone")
    @classmethod
    def _check_timezone(cls, value: str | None) -> str | None:
        if value is not None and value not in pytz.all_timezones_set:
            raise ValueError(f"Unknown timezone: {value}")
        return value


class DuplicatesConfig(BaseModel):
    """Duplicate reconciliation configuration."""

    window_padding_seconds: int = Field(60, ge=0)


class HistoryConfig(BaseModel):
    """Import history log configuration."""

    storage_dir: str = "data/state"
    storage_key: str = "ImportHistory"
    max_records: int = Field(50, ge=1)
    date_format: str = "%Y-%m-%d"


class HealthStoreConfig(BaseModel):
    """Local health store configuration."""

    path: str = "data/health_store.json"


class OutputFilesConfig(BaseModel):
    """Output file names configuration."""

    history_csv: str = "import_history.csv"
    snapshot_csv: str = "snapshot_{index}.csv"


class OutputConfig(BaseModel):
    """Output configuration."""

    dir: str = "output"
    files: OutputFilesConfig = Field(default_factory=OutputFilesConfig)


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    file: str | None = None
    console: bool = True


class AppConfig(BaseSettings):
    """Main application configuration."""

    parser: ParserConfig = Field(default_factory=ParserConfig)
    duplicates: DuplicatesConfig = Field(default_factory=DuplicatesConfig)
    history: HistoryConfig = Field(default_factory=HistoryConfig)
    health_store: HealthStoreConfig = Field(default_factory=HealthStoreConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = SettingsConfigDict(env_prefix="BPI_", case_sensitive=False)


class ParameterLoader:
    """
    Centralized parameter loader for the application.

    Loads and validates configuration from YAML files using Pydantic models.
    Provides type-safe access to all configuration parameters.
    """

    def __init__(self, config_path: str = "config/config.yaml") -> None:
        """
        Initialize parameter loader.

        Args:
            config_path: Path to the YAML configuration file.

        Raises:
            ConfigurationError: If configuration file cannot be loaded or is invalid.
        """
        self.config_path = Path(config_path)
        self.config: AppConfig
        self._load_config()

    def _load_config(self) -> None:
        """
        Load configuration from YAML file.

        Raises:
            ConfigurationError: If configuration file cannot be loaded or is invalid.
        """
        if not self.config_path.exists():
            raise ConfigurationError(f"Configuration file not found: {self.config_path}")

        try:
            with open(self.config_path, encoding="utf-8") as f:
                config_dict = yaml.safe_load(f) or {}

            self.config = AppConfig(**config_dict)

        except yaml.YAMLError as e:
            raise ConfigurationError(f"Failed to parse YAML configuration: {e}") from e
        except Exception as e:
            raise ConfigurationError(f"Failed to load configuration: {e}") from e

    def get_parser_config(self) -> ParserConfig:
        """Get CSV parsing configuration."""
        return self.config.parser

    def get_duplicates_config(self) -> DuplicatesConfig:
        """Get duplicate reconciliation configuration."""
        return self.config.duplicates

    def get_history_config(self) -> HistoryConfig:
        """Get import history configuration."""
        return self.config.history

    def get_health_store_config(self) -> HealthStoreConfig:
        """Get local health store configuration."""
        return self.config.health_store

    def get_output_config(self) -> OutputConfig:
        """Get output configuration."""
        return self.config.output

    def get_logging_config(self) -> LoggingConfig:
        """Get logging configuration."""
        return self.config.logging

    def get_raw_config(self) -> dict[str, Any]:
        """
        Get raw configuration dictionary.

        Returns:
            Dictionary representation of the configuration.
        """
        return self.config.model_dump()
