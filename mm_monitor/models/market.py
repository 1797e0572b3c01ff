"""
Market data models: 24h ticker, per-run market snapshot and trades.

Models:
    TickerSnapshot: Normalized 24h ticker statistics from a venue
    MarketSnapshot: Ticker joined with top-of-book, appended once per run
    TradeSide: Aggressor side of a trade
    TradeRecord: Single executed trade, deduplicated by trade_id
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, Field


class TradeSide(str, Enum):
    """
    Trade side (aggressor side).

    Attributes:
        BUY: Taker bought (lifted the ask).
        SELL: Taker sold (hit the bid).
    """

    BUY = "buy"
    SELL = "sell"


class TickerSnapshot(BaseModel):
    """
    24-hour ticker statistics as reported by a venue.

    Attributes:
        venue: Venue identifier.
        pair: Trading pair.
        timestamp: Capture time (UTC).
        last_price: Last traded price.
        volume_24h: 24h volume in base currency.
        volume_24h_quote: 24h volume in quote currency.
        high_24h: 24h high.
        low_24h: 24h low.
        price_change_24h: Absolute 24h change.
        price_change_percent_24h: 24h change in percent.
    """

    model_config = {"frozen": True, "extra": "forbid"}

    venue: str = Field(..., min_length=1, max_length=20)
    pair: str = Field(..., min_length=1, max_length=20)
    timestamp: datetime = Field(..., description="Capture timestamp (UTC)")
    last_price: Decimal = Field(..., description="Last traded price", ge=Decimal("0"))
    volume_24h: Decimal = Field(..., description="24h volume (base)", ge=Decimal("0"))
    volume_24h_quote: Decimal = Field(..., description="24h volume (quote)", ge=Decimal("0"))
    high_24h: Decimal = Field(..., description="24h high", ge=Decimal("0"))
    low_24h: Decimal = Field(..., description="24h low", ge=Decimal("0"))
    price_change_24h: Decimal = Field(..., description="24h absolute price change")
    price_change_percent_24h: Decimal = Field(..., description="24h price change percent")


class MarketSnapshot(BaseModel):
    """
    Market state for one venue at one run.

    Combines the venue's 24h ticker with the top of the order book. Snapshots
    are immutable once recorded; one row is appended per run per venue.

    Attributes:
        venue: Venue identifier.
        pair: Trading pair.
        timestamp: Capture time (UTC).
        last_price: Last traded price.
        bid_price: Best bid from the order book.
        ask_price: Best ask from the order book.
        spread: Absolute spread (ask - bid).
        spread_percent: Spread as percent of mid price.
        volume_24h: 24h volume in base currency.
        volume_24h_quote: 24h volume in quote currency.
        high_24h: 24h high.
        low_24h: 24h low.
        price_change_24h: Absolute 24h change.
        price_change_percent_24h: 24h change in percent.

    Example:
        >>> snapshot.spread_percent
        Decimal('1.980198019801980198019801980')
    """

    model_config = {"frozen": True, "extra": "forbid"}

    venue: str = Field(..., min_length=1, max_length=20)
    pair: str = Field(..., min_length=1, max_length=20)
    timestamp: datetime = Field(..., description="Capture timestamp (UTC)")

    last_price: Decimal = Field(..., ge=Decimal("0"))
    bid_price: Decimal = Field(..., ge=Decimal("0"))
    ask_price: Decimal = Field(..., ge=Decimal("0"))
    spread: Decimal = Field(..., ge=Decimal("0"))
    spread_percent: Decimal = Field(..., ge=Decimal("0"))

    volume_24h: Decimal = Field(..., ge=Decimal("0"))
    volume_24h_quote: Decimal = Field(..., ge=Decimal("0"))
    high_24h: Decimal = Field(..., ge=Decimal("0"))
    low_24h: Decimal = Field(..., ge=Decimal("0"))
    price_change_24h: Decimal = Field(...)
    price_change_percent_24h: Decimal = Field(...)

    @property
    def mid_price(self) -> Decimal:
        """Average of best bid and best ask."""
        return (self.bid_price + self.ask_price) / Decimal("2")


class TradeRecord(BaseModel):
    """
    Single executed trade.

    A repeated trade_id for the same venue is a no-op on insert, never an
    error.

    Attributes:
        venue: Venue identifier.
        trade_id: Venue trade identifier (or a content hash when absent).
        price: Execution price.
        amount: Amount in base currency.
        side: Aggressor side.
        trade_time: Execution time (UTC).

    Example:
        >>> trade = TradeRecord(
        ...     venue="mexc",
        ...     trade_id="123",
        ...     price=Decimal("1.20"),
        ...     amount=Decimal("50"),
        ...     side=TradeSide.BUY,
        ...     trade_time=datetime.now(timezone.utc),
        ... )
        >>> trade.quote_value
        Decimal('60.00')
    """

    model_config = {"frozen": True, "extra": "forbid"}

    venue: str = Field(..., min_length=1, max_length=20)
    trade_id: str = Field(..., min_length=1, max_length=100)
    price: Decimal = Field(..., ge=Decimal("0"))
    amount: Decimal = Field(..., ge=Decimal("0"))
    side: TradeSide
    trade_time: datetime

    @property
    def quote_value(self) -> Decimal:
        """Trade value in quote currency (price * amount)."""
        return self.price * self.amount
