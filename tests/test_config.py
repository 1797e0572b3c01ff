"""
Configuration tests.

Covers the bootstrap YAML loader (with environment overrides) and parsing of
the runtime config table into MonitorSettings.
"""

from decimal import Decimal
from pathlib import Path

import pytest

from mm_monitor.config.loader import ConfigLoadError, load_config
from mm_monitor.config.models import LogLevel, MonitoringConfig
from mm_monitor.config.settings import DEFAULT_SETTINGS, MonitorSettings, SettingsError

MONITOR_YAML = """
pair:
  base: ERG
  quote: USDT

venues:
  mexc:
    rest_base_url: https://api.mexc.com
    symbol: ERGUSDT
    credentials_env:
      api_key: MEXC_ACCESS_KEY
      api_secret: MEXC_SECRET_KEY
  kucoin:
    rest_base_url: https://api.kucoin.com
    symbol: ERG-USDT
    book_depth: 50
    credentials_env:
      api_key: KUCOIN_KEY
      api_secret: KUCOIN_SECRET
      passphrase: KUCOIN_PASSPHRASE

monitoring:
  depth_bands: ["2", "5", "10"]
  alert_band: "2"
  inventory_band: "5"

logging:
  format: text
  level: INFO
"""


@pytest.fixture
def config_dir(tmp_path: Path) -> Path:
    (tmp_path / "monitor.yaml").write_text(MONITOR_YAML)
    return tmp_path


# =============================================================================
# Bootstrap loader
# =============================================================================


def test_load_config_without_credentials(config_dir):
    config = load_config(config_dir, environ={})

    assert config.pair.display == "ERG/USDT"
    assert list(config.venues) == ["mexc", "kucoin"]
    assert config.get_venue("kucoin").book_depth == 50
    assert config.get_venue("mexc").has_credentials is False
    assert config.monitoring.depth_bands == [Decimal("2"), Decimal("5"), Decimal("10")]
    assert config.retention.trades_days == 7


def test_credentials_and_overrides_come_from_environment(config_dir):
    environ = {
        "MEXC_ACCESS_KEY": "mx-key",
        "MEXC_SECRET_KEY": "mx-secret",
        "KUCOIN_KEY": "kc-key",
        "KUCOIN_SECRET": "kc-secret",
        "DATABASE_URL": "postgresql://monitor:pw@db:5432/monitor",
        "LOG_LEVEL": "debug",
    }
    config = load_config(config_dir, environ=environ)

    mexc = config.get_venue("mexc")
    assert mexc.credentials.api_key.get_secret_value() == "mx-key"
    # KuCoin is missing its passphrase, so no credentials at all
    assert config.get_venue("kucoin").credentials is None
    assert config.postgres.url == "postgresql://monitor:pw@db:5432/monitor"
    assert config.logging.level == LogLevel.DEBUG


def test_blank_credential_disables_account_calls(config_dir):
    config = load_config(config_dir, environ={"MEXC_ACCESS_KEY": "key", "MEXC_SECRET_KEY": "  "})

    assert config.get_venue("mexc").credentials is None


def test_missing_directory_is_a_load_error(tmp_path):
    with pytest.raises(ConfigLoadError):
        load_config(tmp_path / "absent", environ={})


def test_invalid_yaml_is_a_load_error(tmp_path):
    (tmp_path / "monitor.yaml").write_text("venues: [unclosed\n")

    with pytest.raises(ConfigLoadError):
        load_config(tmp_path, environ={})


def test_no_venues_is_a_load_error(tmp_path):
    (tmp_path / "monitor.yaml").write_text("pair:\n  base: ERG\n")

    with pytest.raises(ConfigLoadError, match="No venues"):
        load_config(tmp_path, environ={})


def test_alert_band_must_be_measured():
    with pytest.raises(ValueError):
        MonitoringConfig(depth_bands=[Decimal("5"), Decimal("10")], alert_band=Decimal("2"))


def test_depth_bands_must_ascend():
    with pytest.raises(ValueError):
        MonitoringConfig(depth_bands=[Decimal("5"), Decimal("2")])


# =============================================================================
# Runtime settings
# =============================================================================


def test_empty_table_uses_defaults():
    settings = MonitorSettings.from_mapping({})

    assert settings.spread_warning_threshold == Decimal("1.5")
    assert settings.spread_critical_threshold == Decimal("3.0")
    assert settings.depth_warning_threshold == Decimal("5000")
    assert settings.depth_critical_threshold == Decimal("2000")
    assert settings.liquidity_pull_threshold == Decimal("15.0")
    assert settings.alert_cooldown_minutes == 30
    assert settings.monitoring_enabled is True
    assert settings.notifications_enabled is False


def test_defaults_match_seed_rows():
    seeded = MonitorSettings.from_mapping({key: value for key, (value, _) in DEFAULT_SETTINGS.items()})

    assert seeded == MonitorSettings.from_mapping({})


def test_table_values_override_defaults():
    settings = MonitorSettings.from_mapping(
        {
            "spread_warning_threshold": "2.0",
            "alert_cooldown_minutes": "15",
            "discord_webhook": "https://discord.com/api/webhooks/1/abc",
            "kucoin_enabled": "0",
        }
    )

    assert settings.spread_warning_threshold == Decimal("2.0")
    assert settings.alert_cooldown_minutes == 15
    assert settings.notifications_enabled is True
    assert settings.is_venue_enabled("kucoin") is False
    assert settings.is_venue_enabled("mexc") is True


def test_blank_values_are_treated_as_missing():
    settings = MonitorSettings.from_mapping({"spread_warning_threshold": "  ", "mexc_enabled": None})

    assert settings.spread_warning_threshold == Decimal("1.5")
    assert settings.is_venue_enabled("mexc") is True


def test_non_discord_webhook_disables_delivery():
    settings = MonitorSettings.from_mapping({"discord_webhook": "https://hooks.slack.com/x"})

    assert settings.notifications_enabled is False


def test_unparsable_number_is_rejected():
    with pytest.raises(SettingsError) as excinfo:
        MonitorSettings.from_mapping({"depth_warning_threshold": "five thousand"})

    assert excinfo.value.key == "depth_warning_threshold"


def test_fractional_cooldown_is_rejected():
    with pytest.raises(SettingsError):
        MonitorSettings.from_mapping({"alert_cooldown_minutes": "7.5"})


def test_unparsable_flag_is_rejected():
    with pytest.raises(SettingsError):
        MonitorSettings.from_mapping({"monitoring_enabled": "maybe"})


def test_inverted_tiers_are_accepted():
    settings = MonitorSettings.from_mapping(
        {"depth_warning_threshold": "1000", "depth_critical_threshold": "2000"}
    )

    assert settings.depth_warning_threshold == Decimal("1000")
    assert settings.depth_critical_threshold == Decimal("2000")
