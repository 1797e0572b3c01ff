"""
Configuration loader for YAML-based bootstrap configuration.

This module loads config/monitor.yaml and validates it with the Pydantic
models in mm_monitor.config.models. Runtime thresholds are not here; they
are read from the database each run (see mm_monitor.config.settings).

Configuration file expected:
    - config/monitor.yaml: pair, venues, depth bands, retention, logging

Environment variables override:
    - DATABASE_URL: PostgreSQL connection URL
    - LOG_LEVEL: Application log level
    - Per-venue credential variables named under each venue's
      ``credentials_env`` mapping (e.g., MEXC_ACCESS_KEY, KUCOIN_PASSPHRASE)

Example:
    >>> from mm_monitor.config.loader import load_config
    >>> config = load_config("config")
    >>> sorted(config.venues)
    ['kucoin', 'mexc']
"""

import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml
from pydantic import ValidationError

from mm_monitor.config.models import (
    AppConfig,
    LoggingConfig,
    LogLevel,
    MonitoringConfig,
    NotificationConfig,
    PairConfig,
    PostgresConnectionConfig,
    RetentionConfig,
    VenueConfig,
    VenueCredentials,
)

CONFIG_FILENAME = "monitor.yaml"


class ConfigLoadError(Exception):
    """
    Raised when configuration loading fails.

    Attributes:
        message: Error message describing what went wrong.
        file_path: Path to the file that caused the error, if applicable.
        cause: Original exception that caused the error, if any.
    """

    def __init__(
        self,
        message: str,
        file_path: Optional[Path] = None,
        cause: Optional[Exception] = None,
    ):
        """
        Initialize ConfigLoadError.

        Args:
            message: Error message.
            file_path: Path to the problematic file.
            cause: Original exception.
        """
        self.message = message
        self.file_path = file_path
        self.cause = cause
        super().__init__(message)


class ConfigLoader:
    """
    Loads and validates bootstrap configuration.

    Expects the following directory structure:
        config/
        └── monitor.yaml   - pair, venues, bands, retention, logging

    Example:
        >>> loader = ConfigLoader("config")
        >>> config = loader.load()
        >>> config.get_venue("kucoin").symbol
        'ERG-USDT'
    """

    def __init__(
        self,
        config_dir: Path | str = "config",
        environ: Optional[Mapping[str, str]] = None,
    ):
        """
        Initialize config loader.

        Args:
            config_dir: Path to configuration directory (default: 'config').
            environ: Environment mapping (default: os.environ).

        Raises:
            ConfigLoadError: If config directory does not exist.
        """
        self.config_dir = Path(config_dir)
        self.environ: Mapping[str, str] = environ if environ is not None else os.environ
        if not self.config_dir.exists():
            raise ConfigLoadError(
                f"Configuration directory not found: {self.config_dir}",
                file_path=self.config_dir,
            )
        if not self.config_dir.is_dir():
            raise ConfigLoadError(
                f"Configuration path is not a directory: {self.config_dir}",
                file_path=self.config_dir,
            )

    @property
    def file_path(self) -> Path:
        """Path of the bootstrap YAML file."""
        return self.config_dir / CONFIG_FILENAME

    def _load_yaml(self) -> Dict[str, Any]:
        """
        Load the bootstrap YAML file.

        Returns:
            Dict containing parsed YAML content.

        Raises:
            ConfigLoadError: If file not found, empty, or invalid YAML.
        """
        file_path = self.file_path
        if not file_path.exists():
            raise ConfigLoadError(
                f"Configuration file not found: {file_path}",
                file_path=file_path,
            )

        try:
            with open(file_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigLoadError(
                f"Invalid YAML syntax in {file_path}: {e}",
                file_path=file_path,
                cause=e,
            ) from e
        except OSError as e:
            raise ConfigLoadError(
                f"Error reading {file_path}: {e}",
                file_path=file_path,
                cause=e,
            ) from e

        if data is None:
            raise ConfigLoadError(
                f"Configuration file is empty: {file_path}",
                file_path=file_path,
            )
        if not isinstance(data, dict):
            raise ConfigLoadError(
                f"Configuration root must be a mapping: {file_path}",
                file_path=file_path,
            )
        return data

    def _load_credentials(self, env_names: Dict[str, str]) -> Optional[VenueCredentials]:
        """
        Resolve venue credentials from environment variables.

        Credentials are only returned when the key and secret (and the
        passphrase, if the venue names one) are all set. Partial credentials
        disable authenticated calls rather than failing the load.

        Args:
            env_names: Mapping of credential field -> environment variable name.

        Returns:
            Optional[VenueCredentials]: Credentials, or None if incomplete.
        """
        resolved: Dict[str, str] = {}
        for field_name, env_name in env_names.items():
            value = self.environ.get(env_name, "").strip()
            if not value:
                return None
            resolved[field_name] = value

        if "api_key" not in resolved or "api_secret" not in resolved:
            return None
        return VenueCredentials(**resolved)

    def _load_venues(self, data: Dict[str, Any]) -> Dict[str, VenueConfig]:
        """
        Parse the venues section.

        Returns:
            Dict of VenueConfig keyed by venue name.

        Raises:
            ConfigLoadError: If validation fails or no venues configured.
        """
        venues: Dict[str, VenueConfig] = {}

        try:
            for venue_name, venue_data in (data.get("venues") or {}).items():
                venue_data = dict(venue_data or {})
                env_names = venue_data.pop("credentials_env", None) or {}
                venues[venue_name] = VenueConfig(
                    name=venue_name,
                    credentials=self._load_credentials(env_names),
                    **venue_data,
                )
        except (ValidationError, TypeError) as e:
            raise ConfigLoadError(
                f"Invalid venue configuration: {e}",
                file_path=self.file_path,
                cause=e,
            ) from e

        if not venues:
            raise ConfigLoadError(
                f"No venues configured in {CONFIG_FILENAME}",
                file_path=self.file_path,
            )

        return venues

    def _load_postgres_connection(self, data: Dict[str, Any]) -> PostgresConnectionConfig:
        """
        Build PostgreSQL connection configuration.

        Environment variables:
            - DATABASE_URL: PostgreSQL connection URL (overrides the YAML url)

        Returns:
            PostgresConnectionConfig object.
        """
        postgres_data = dict(data.get("postgres") or {})
        db_url = self.environ.get("DATABASE_URL")
        if db_url:
            postgres_data["url"] = db_url
        return PostgresConnectionConfig(**postgres_data)

    def _load_logging(self, data: Dict[str, Any]) -> LoggingConfig:
        """
        Build logging configuration.

        Environment variables:
            - LOG_LEVEL: Log level (overrides the YAML level when valid)

        Returns:
            LoggingConfig object.
        """
        logging_data = dict(data.get("logging") or {})
        level_str = self.environ.get("LOG_LEVEL", "").upper()
        if level_str:
            try:
                logging_data["level"] = LogLevel(level_str)
            except ValueError:
                pass
        return LoggingConfig(**logging_data)

    def load(self) -> AppConfig:
        """
        Load and validate the configuration.

        Returns:
            AppConfig: Validated application configuration.

        Raises:
            ConfigLoadError: If any configuration is invalid or missing.
        """
        data = self._load_yaml()

        try:
            return AppConfig(
                pair=PairConfig(**(data.get("pair") or {})),
                venues=self._load_venues(data),
                monitoring=MonitoringConfig(**(data.get("monitoring") or {})),
                retention=RetentionConfig(**(data.get("retention") or {})),
                notification=NotificationConfig(**(data.get("notification") or {})),
                logging=self._load_logging(data),
                postgres=self._load_postgres_connection(data),
            )
        except ConfigLoadError:
            raise
        except (ValidationError, TypeError) as e:
            raise ConfigLoadError(
                f"Configuration validation failed: {e}",
                file_path=self.file_path,
                cause=e,
            ) from e


def load_config(
    config_dir: Path | str = "config",
    environ: Optional[Mapping[str, str]] = None,
) -> AppConfig:
    """
    Convenience function to load application configuration.

    Args:
        config_dir: Path to configuration directory (default: 'config').
        environ: Environment mapping (default: os.environ).

    Returns:
        AppConfig: Validated application configuration.

    Raises:
        ConfigLoadError: If configuration loading fails.
    """
    loader = ConfigLoader(config_dir, environ=environ)
    return loader.load()
