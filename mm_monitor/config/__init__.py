"""
Configuration management for the liquidity monitor.

Two layers:
    - Bootstrap configuration (config/monitor.yaml + environment), loaded
      once per process and validated with Pydantic models.
    - Runtime monitor settings (database config table), read fresh at the
      start of every run and parsed into an immutable MonitorSettings.

Environment variables:
    - DATABASE_URL: PostgreSQL connection URL
    - LOG_LEVEL: Application log level
    - MEXC_ACCESS_KEY / MEXC_SECRET_KEY: MEXC account access
    - KUCOIN_KEY / KUCOIN_SECRET / KUCOIN_PASSPHRASE: KuCoin account access

Example:
    >>> from mm_monitor.config import load_config, MonitorSettings
    >>> config = load_config()
    >>> settings = MonitorSettings.from_mapping({"alert_cooldown_minutes": "15"})

Modules:
    loader: Bootstrap file loading
    models: Pydantic models for bootstrap configuration
    settings: Runtime settings parsed from the config table
"""

from mm_monitor.config.loader import ConfigLoadError, ConfigLoader, load_config
from mm_monitor.config.models import (
    AppConfig,
    LogFormat,
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
from mm_monitor.config.settings import DEFAULT_SETTINGS, MonitorSettings, SettingsError

__all__ = [
    # Loader
    "ConfigLoadError",
    "ConfigLoader",
    "load_config",
    # Bootstrap models
    "AppConfig",
    "LogFormat",
    "LoggingConfig",
    "LogLevel",
    "MonitoringConfig",
    "NotificationConfig",
    "PairConfig",
    "PostgresConnectionConfig",
    "RetentionConfig",
    "VenueConfig",
    "VenueCredentials",
    # Runtime settings
    "DEFAULT_SETTINGS",
    "MonitorSettings",
    "SettingsError",
]
