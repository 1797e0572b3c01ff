"""
Runtime monitor settings parsed from the database config table.

The config table is a flat key -> text mapping edited by the operator. It is
read once at the start of each run and parsed into an immutable
MonitorSettings value that is passed explicitly through the run. Missing keys
take the documented defaults; a value that is present but cannot be parsed
raises SettingsError, which aborts the run.

Example:
    >>> settings = MonitorSettings.from_mapping({"spread_warning_threshold": "2.0"})
    >>> settings.spread_warning_threshold
    Decimal('2.0')
    >>> settings.alert_cooldown_minutes
    30
"""

from decimal import Decimal, InvalidOperation
from typing import Dict, Mapping, Optional, Tuple

import structlog
from pydantic import BaseModel, Field, ValidationError, model_validator

logger = structlog.get_logger(__name__)


class SettingsError(Exception):
    """
    Raised when a config table value cannot be parsed.

    Attributes:
        message: Error message describing what went wrong.
        key: Offending config key, if applicable.
        cause: Original exception that caused the error, if any.
    """

    def __init__(
        self,
        message: str,
        key: Optional[str] = None,
        cause: Optional[Exception] = None,
    ):
        self.message = message
        self.key = key
        self.cause = cause
        super().__init__(message)


# key -> (default text, description); also used to seed the config table
DEFAULT_SETTINGS: Dict[str, Tuple[str, str]] = {
    "discord_webhook": ("", "Discord webhook URL for alerts"),
    "spread_warning_threshold": ("1.5", "Spread % to trigger warning"),
    "spread_critical_threshold": ("3.0", "Spread % to trigger critical alert"),
    "depth_warning_threshold": ("5000", "Min USD depth at 2% before warning"),
    "depth_critical_threshold": ("2000", "Min USD depth at 2% before critical"),
    "price_change_warning": ("5.0", "Price change % in 24h for warning"),
    "price_change_critical": ("10.0", "Price change % in 24h for critical"),
    "volume_spike_threshold": ("3.0", "Volume multiplier vs avg to flag spike"),
    "liquidity_pull_threshold": ("15.0", "Price drop % to recommend pulling liquidity"),
    "alert_cooldown_minutes": ("30", "Minutes between repeat alerts"),
    "monitoring_enabled": ("1", "Master switch for monitoring"),
    "kucoin_enabled": ("1", "Enable KuCoin monitoring"),
    "mexc_enabled": ("1", "Enable MEXC monitoring"),
}

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}
_VENUE_FLAG_SUFFIX = "_enabled"


def _parse_decimal(key: str, raw: str) -> Decimal:
    try:
        value = Decimal(raw)
    except InvalidOperation as e:
        raise SettingsError(f"Config '{key}' is not a number: {raw!r}", key=key, cause=e) from e
    if not value.is_finite():
        raise SettingsError(f"Config '{key}' is not finite: {raw!r}", key=key)
    return value


def _parse_int(key: str, raw: str) -> int:
    value = _parse_decimal(key, raw)
    if value != value.to_integral_value():
        raise SettingsError(f"Config '{key}' must be a whole number: {raw!r}", key=key)
    return int(value)


def _parse_bool(key: str, raw: str) -> bool:
    lowered = raw.lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise SettingsError(f"Config '{key}' is not a boolean: {raw!r}", key=key)


class MonitorSettings(BaseModel):
    """
    Typed, immutable view of the config table for one run.

    Attributes:
        discord_webhook: Webhook URL; empty disables delivery.
        alert_cooldown_minutes: Cooldown window per alert type.
        spread_warning_threshold: Spread percent for SPREAD_WARNING.
        spread_critical_threshold: Spread percent for SPREAD_CRITICAL.
        depth_warning_threshold: Alert-band USD depth below which DEPTH_WARNING fires.
        depth_critical_threshold: Alert-band USD depth below which DEPTH_CRITICAL fires.
        price_change_warning: Kept for operators; no rule reads it.
        price_change_critical: |24h change| percent for PRICE_CHANGE_HIGH.
        liquidity_pull_threshold: |24h change| percent for VOLATILITY_EXTREME.
        volume_spike_threshold: 1h volume multiple of the 24h hourly mean for VOLUME_SPIKE.
        monitoring_enabled: Master switch.
        venue_flags: Per-venue enable flags from '<venue>_enabled' keys.
    """

    model_config = {"frozen": True, "extra": "forbid"}

    discord_webhook: str = ""
    alert_cooldown_minutes: int = Field(default=30, ge=0)
    spread_warning_threshold: Decimal = Field(default=Decimal("1.5"), ge=Decimal("0"))
    spread_critical_threshold: Decimal = Field(default=Decimal("3.0"), ge=Decimal("0"))
    depth_warning_threshold: Decimal = Field(default=Decimal("5000"), ge=Decimal("0"))
    depth_critical_threshold: Decimal = Field(default=Decimal("2000"), ge=Decimal("0"))
    price_change_warning: Decimal = Field(default=Decimal("5.0"), ge=Decimal("0"))
    price_change_critical: Decimal = Field(default=Decimal("10.0"), ge=Decimal("0"))
    liquidity_pull_threshold: Decimal = Field(default=Decimal("15.0"), ge=Decimal("0"))
    volume_spike_threshold: Decimal = Field(default=Decimal("3.0"), ge=Decimal("0"))
    monitoring_enabled: bool = True
    venue_flags: Dict[str, bool] = Field(
        default_factory=lambda: {"mexc": True, "kucoin": True},
    )

    @model_validator(mode="after")
    def check_tiers(self) -> "MonitorSettings":
        """Log inverted tiers; critical is checked first, so they still evaluate."""
        if self.spread_warning_threshold > self.spread_critical_threshold:
            logger.warning(
                "settings_tiers_inverted",
                metric="spread",
                warning=str(self.spread_warning_threshold),
                critical=str(self.spread_critical_threshold),
            )
        if self.depth_warning_threshold < self.depth_critical_threshold:
            logger.warning(
                "settings_tiers_inverted",
                metric="depth",
                warning=str(self.depth_warning_threshold),
                critical=str(self.depth_critical_threshold),
            )
        return self

    @property
    def notifications_enabled(self) -> bool:
        """Delivery is only attempted for Discord webhook URLs."""
        return self.discord_webhook.startswith("https://discord")

    def is_venue_enabled(self, venue: str) -> bool:
        """
        Check the per-venue enable flag.

        Args:
            venue: Venue name (e.g., "mexc").

        Returns:
            bool: Flag value; venues without a flag are enabled.
        """
        return self.venue_flags.get(venue, True)

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Optional[str]]) -> "MonitorSettings":
        """
        Parse a config table mapping.

        Blank values are treated as missing. Unknown keys are ignored except
        '<venue>_enabled' flags.

        Args:
            raw: Config key -> text value.

        Returns:
            MonitorSettings: Parsed settings.

        Raises:
            SettingsError: If a value cannot be parsed or violates constraints.
        """
        values = {
            key: value.strip()
            for key, value in raw.items()
            if value is not None and value.strip() != ""
        }

        def text(key: str) -> str:
            return values.get(key, DEFAULT_SETTINGS[key][0])

        venue_flags: Dict[str, bool] = {"mexc": True, "kucoin": True}
        for key, value in values.items():
            if key.endswith(_VENUE_FLAG_SUFFIX) and key != "monitoring_enabled":
                venue_flags[key[: -len(_VENUE_FLAG_SUFFIX)]] = _parse_bool(key, value)

        decimal_keys = (
            "spread_warning_threshold",
            "spread_critical_threshold",
            "depth_warning_threshold",
            "depth_critical_threshold",
            "price_change_warning",
            "price_change_critical",
            "liquidity_pull_threshold",
            "volume_spike_threshold",
        )

        try:
            return cls(
                discord_webhook=values.get("discord_webhook", ""),
                alert_cooldown_minutes=_parse_int(
                    "alert_cooldown_minutes", text("alert_cooldown_minutes")
                ),
                monitoring_enabled=_parse_bool(
                    "monitoring_enabled", text("monitoring_enabled")
                ),
                venue_flags=venue_flags,
                **{key: _parse_decimal(key, text(key)) for key in decimal_keys},
            )
        except ValidationError as e:
            raise SettingsError(f"Invalid monitor settings: {e}", cause=e) from e
