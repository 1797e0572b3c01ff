"""
Operator account models used by the user liquidity tracker.

These are only populated for venues with API credentials configured.

Models:
    AssetBalance: Free/locked balance of one asset
    UserPosition: Base and quote balances plus total value in quote
    OpenOrder: One resting order owned by the operator
    UserDepthShare: Operator depth within a band vs. market depth
    UserLiquidity: Tracker output bundle for one venue
"""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field, computed_field

from mm_monitor.models.market import TradeSide


class AssetBalance(BaseModel):
    """Free and locked balance of a single asset."""

    model_config = {"frozen": True, "extra": "forbid"}

    asset: str = Field(..., min_length=1, max_length=20)
    free: Decimal = Field(default=Decimal("0"), ge=Decimal("0"))
    locked: Decimal = Field(default=Decimal("0"), ge=Decimal("0"))

    @computed_field  # type: ignore[misc]
    @property
    def total(self) -> Decimal:
        """Free plus locked."""
        return self.free + self.locked


class UserPosition(BaseModel):
    """
    Operator balances for the pair's two assets on one venue.

    Attributes:
        venue: Venue identifier.
        base: Base asset balance (ERG).
        quote: Quote asset balance (USDT).
        total_value: base.total * mid price + quote.total, in quote currency.
        timestamp: Snapshot time (UTC).
    """

    model_config = {"frozen": True, "extra": "forbid"}

    venue: str = Field(..., min_length=1, max_length=20)
    base: AssetBalance
    quote: AssetBalance
    total_value: Decimal = Field(default=Decimal("0"), ge=Decimal("0"))
    timestamp: datetime


class OpenOrder(BaseModel):
    """
    A resting order owned by the operator.

    Attributes:
        venue: Venue identifier.
        order_id: Venue order identifier.
        side: buy (bid) or sell (ask).
        price: Limit price.
        amount: Original order amount in base currency.
        filled_amount: Amount already executed.
        order_type: Venue order type (e.g., "limit").
        created_at: Order creation time (UTC), when reported.
    """

    model_config = {"frozen": True, "extra": "forbid"}

    venue: str = Field(..., min_length=1, max_length=20)
    order_id: str = Field(..., min_length=1, max_length=100)
    side: TradeSide
    price: Decimal = Field(..., ge=Decimal("0"))
    amount: Decimal = Field(..., ge=Decimal("0"))
    filled_amount: Decimal = Field(default=Decimal("0"), ge=Decimal("0"))
    order_type: Optional[str] = Field(default=None, max_length=20)
    created_at: Optional[datetime] = None

    @property
    def remaining_amount(self) -> Decimal:
        """Unfilled amount still resting on the book."""
        return max(self.amount - self.filled_amount, Decimal("0"))


class UserDepthShare(BaseModel):
    """
    Operator depth within a percentage band and its share of market depth.

    Share percentages are 0 when the corresponding market depth is 0.
    """

    model_config = {"frozen": True, "extra": "forbid"}

    venue: str = Field(..., min_length=1, max_length=20)
    band_percent: Decimal = Field(..., gt=Decimal("0"))
    bid_amount: Decimal = Field(default=Decimal("0"), ge=Decimal("0"))
    bid_value: Decimal = Field(default=Decimal("0"), ge=Decimal("0"))
    ask_amount: Decimal = Field(default=Decimal("0"), ge=Decimal("0"))
    ask_value: Decimal = Field(default=Decimal("0"), ge=Decimal("0"))
    market_bid_value: Decimal = Field(default=Decimal("0"), ge=Decimal("0"))
    market_ask_value: Decimal = Field(default=Decimal("0"), ge=Decimal("0"))
    bid_share_percent: Decimal = Field(default=Decimal("0"), ge=Decimal("0"))
    ask_share_percent: Decimal = Field(default=Decimal("0"), ge=Decimal("0"))
    timestamp: datetime

    @property
    def total_value(self) -> Decimal:
        """Operator bid plus ask value within the band."""
        return self.bid_value + self.ask_value

    @property
    def total_share_percent(self) -> Decimal:
        """Operator share of combined market depth within the band."""
        market_total = self.market_bid_value + self.market_ask_value
        if market_total <= 0:
            return Decimal("0")
        return self.total_value / market_total * Decimal("100")

    @property
    def level(self) -> str:
        """Display label used as the depth_level column (e.g., '5%')."""
        return f"{self.band_percent.normalize():f}%"


class UserLiquidity(BaseModel):
    """
    Everything the user liquidity tracker produced for one venue and run.

    Passed to the evaluator for the inventory skew and liquidity share rules.
    """

    model_config = {"frozen": True, "extra": "forbid"}

    venue: str = Field(..., min_length=1, max_length=20)
    position: Optional[UserPosition] = None
    open_orders: List[OpenOrder] = Field(default_factory=list)
    depth_shares: List[UserDepthShare] = Field(default_factory=list)

    def share_for_band(self, band_percent: Decimal) -> Optional[UserDepthShare]:
        """Depth share for a band, or None if not computed."""
        for share in self.depth_shares:
            if share.band_percent == band_percent:
                return share
        return None
