"""
Computed liquidity metric models.

All financial values use Decimal for precision.

Models:
    DepthMeasurement: Cumulative bid/ask depth within a percentage band
    MetricsSnapshot: Trailing-window aggregates recomputed every run
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field, computed_field


class DepthMeasurement(BaseModel):
    """
    Cumulative order book depth within a percentage band of mid price.

    Amounts are in base currency (ERG); values are in quote currency (USDT).

    Attributes:
        venue: Venue identifier.
        band_percent: Band width from mid price, in percent (e.g., 2).
        bid_amount: Cumulative bid amount within the band.
        bid_value: Cumulative bid value within the band.
        ask_amount: Cumulative ask amount within the band.
        ask_value: Cumulative ask value within the band.
        timestamp: Capture time (UTC).

    Example:
        >>> depth = DepthMeasurement(
        ...     venue="mexc",
        ...     band_percent=Decimal("2"),
        ...     bid_amount=Decimal("30"),
        ...     bid_value=Decimal("3000"),
        ...     ask_amount=Decimal("15"),
        ...     ask_value=Decimal("1500"),
        ...     timestamp=datetime.now(timezone.utc),
        ... )
        >>> depth.total_value
        Decimal('4500')
        >>> depth.level
        '2%'
    """

    model_config = {"frozen": True, "extra": "forbid"}

    venue: str = Field(..., min_length=1, max_length=20)
    band_percent: Decimal = Field(
        ...,
        description="Band width from mid price in percent",
        gt=Decimal("0"),
    )
    bid_amount: Decimal = Field(default=Decimal("0"), ge=Decimal("0"))
    bid_value: Decimal = Field(default=Decimal("0"), ge=Decimal("0"))
    ask_amount: Decimal = Field(default=Decimal("0"), ge=Decimal("0"))
    ask_value: Decimal = Field(default=Decimal("0"), ge=Decimal("0"))
    timestamp: datetime

    @computed_field  # type: ignore[misc]
    @property
    def total_value(self) -> Decimal:
        """Combined bid and ask value within the band."""
        return self.bid_value + self.ask_value

    @property
    def level(self) -> str:
        """Display label used as the depth_level column (e.g., '2%')."""
        return f"{self.band_percent.normalize():f}%"


class MetricsSnapshot(BaseModel):
    """
    Trailing-window market metrics for one venue.

    Derived entirely from stored MarketSnapshot and TradeRecord history and
    recomputed from scratch on every run.

    Attributes:
        venue: Venue identifier.
        timestamp: Computation time (UTC).
        avg_spread_1h: Mean spread percent over the last hour.
        avg_spread_24h: Mean spread percent over the last 24 hours.
        total_volume_1h: Traded quote value over the last hour.
        total_volume_24h: Traded quote value over the last 24 hours.
        trade_count_1h: Number of trades over the last hour.
        trade_count_24h: Number of trades over the last 24 hours.
        price_range_24h: (max high - min low) / mean price * 100.
        volatility_1h: Population std dev of price / mean price * 100.
    """

    model_config = {"frozen": True, "extra": "forbid"}

    venue: str = Field(..., min_length=1, max_length=20)
    timestamp: datetime

    avg_spread_1h: Decimal = Field(default=Decimal("0"), ge=Decimal("0"))
    avg_spread_24h: Decimal = Field(default=Decimal("0"), ge=Decimal("0"))
    total_volume_1h: Decimal = Field(default=Decimal("0"), ge=Decimal("0"))
    total_volume_24h: Decimal = Field(default=Decimal("0"), ge=Decimal("0"))
    trade_count_1h: int = Field(default=0, ge=0)
    trade_count_24h: int = Field(default=0, ge=0)
    price_range_24h: Decimal = Field(default=Decimal("0"), ge=Decimal("0"))
    volatility_1h: Decimal = Field(default=Decimal("0"), ge=Decimal("0"))

    @property
    def hourly_volume_mean_24h(self) -> Decimal:
        """Average traded quote value per hour over the last 24 hours."""
        return self.total_volume_24h / Decimal("24")
