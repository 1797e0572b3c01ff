"""
Order book data models for the liquidity monitor.

This module defines the order book structures consumed by the depth
calculator. All financial values use Decimal for precision to avoid
floating-point errors.

Books are ordered by the venue: bids best (highest) first, asks best
(lowest) first. The ordering is validated here and a malformed book is
rejected; nothing downstream re-sorts.

Models:
    PriceLevel: Single price level in an order book (price, amount)
    OrderBook: Normalized order book snapshot from either venue
"""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field, computed_field, model_validator


class PriceLevel(BaseModel):
    """
    Single price level in an order book.

    Attributes:
        price: Price at this level in quote currency (USDT).
        amount: Amount available at this level in base currency (ERG).

    Example:
        >>> level = PriceLevel(price=Decimal("1.25"), amount=Decimal("400"))
        >>> level.notional
        Decimal('500.00')
    """

    model_config = {"frozen": True, "extra": "ignore"}

    price: Decimal = Field(
        ...,
        description="Price at this level in quote currency",
        ge=Decimal("0"),
    )
    amount: Decimal = Field(
        ...,
        description="Amount available at this level in base currency",
        ge=Decimal("0"),
    )

    @computed_field  # type: ignore[misc]
    @property
    def notional(self) -> Decimal:
        """
        Calculate the quote value (USDT) at this level.

        Returns:
            Decimal: The product of price and amount.
        """
        return self.price * self.amount


class OrderBook(BaseModel):
    """
    Normalized order book snapshot.

    Each venue adapter converts its raw depth payload into this schema.

    Attributes:
        venue: Venue identifier (e.g., "mexc", "kucoin").
        pair: Display pair (e.g., "ERG/USDT").
        timestamp: When the book was captured (UTC).
        bids: Bid levels, sorted best (highest price) to worst.
        asks: Ask levels, sorted best (lowest price) to worst.

    Example:
        >>> book = OrderBook(
        ...     venue="mexc",
        ...     pair="ERG/USDT",
        ...     timestamp=datetime.now(timezone.utc),
        ...     bids=[PriceLevel(price=Decimal("1.00"), amount=Decimal("100"))],
        ...     asks=[PriceLevel(price=Decimal("1.02"), amount=Decimal("80"))],
        ... )
        >>> book.mid_price
        Decimal('1.01')
    """

    model_config = {"frozen": True, "extra": "ignore"}

    venue: str = Field(
        ...,
        description="Venue identifier",
        min_length=1,
        max_length=20,
        examples=["mexc", "kucoin"],
    )
    pair: str = Field(
        ...,
        description="Trading pair",
        min_length=1,
        max_length=20,
        examples=["ERG/USDT"],
    )
    timestamp: datetime = Field(
        ...,
        description="Capture timestamp (UTC)",
    )
    bids: List[PriceLevel] = Field(
        default_factory=list,
        description="Bid levels, sorted best (highest) to worst",
    )
    asks: List[PriceLevel] = Field(
        default_factory=list,
        description="Ask levels, sorted best (lowest) to worst",
    )

    @model_validator(mode="after")
    def validate_order_book(self) -> "OrderBook":
        """
        Validate order book invariants.

        Ensures:
            - Bids are sorted in descending order (best first)
            - Asks are sorted in ascending order (best first)
            - No crossed book (best bid <= best ask; a locked book is allowed)
        """
        for current, following in zip(self.bids, self.bids[1:]):
            if current.price < following.price:
                raise ValueError(
                    f"Bids must be sorted descending: {current.price} < {following.price}"
                )

        for current, following in zip(self.asks, self.asks[1:]):
            if current.price > following.price:
                raise ValueError(
                    f"Asks must be sorted ascending: {current.price} > {following.price}"
                )

        if self.bids and self.asks and self.bids[0].price > self.asks[0].price:
            raise ValueError(
                f"Crossed order book: best bid ({self.bids[0].price}) > best ask ({self.asks[0].price})"
            )

        return self

    @computed_field  # type: ignore[misc]
    @property
    def best_bid(self) -> Optional[Decimal]:
        """Best (highest) bid price, or None if no bids."""
        return self.bids[0].price if self.bids else None

    @computed_field  # type: ignore[misc]
    @property
    def best_ask(self) -> Optional[Decimal]:
        """Best (lowest) ask price, or None if no asks."""
        return self.asks[0].price if self.asks else None

    @computed_field  # type: ignore[misc]
    @property
    def mid_price(self) -> Optional[Decimal]:
        """
        Calculate the mid price.

        Mid price is the average of best bid and best ask.

        Returns:
            Optional[Decimal]: Mid price, or None if either side is empty.
        """
        if self.best_bid is not None and self.best_ask is not None:
            return (self.best_bid + self.best_ask) / Decimal("2")
        return None

    @computed_field  # type: ignore[misc]
    @property
    def spread(self) -> Optional[Decimal]:
        """Absolute spread (best_ask - best_bid), or None if either side is empty."""
        if self.best_bid is not None and self.best_ask is not None:
            return self.best_ask - self.best_bid
        return None

    @computed_field  # type: ignore[misc]
    @property
    def spread_percent(self) -> Optional[Decimal]:
        """
        Calculate the spread as a percentage of mid price.

        Formula: (best_ask - best_bid) / mid_price * 100

        Returns:
            Optional[Decimal]: Spread percent, or None if it cannot be calculated.
        """
        if self.spread is not None and self.mid_price is not None and self.mid_price > 0:
            return (self.spread / self.mid_price) * Decimal("100")
        return None

    @property
    def is_valid(self) -> bool:
        """
        Check if the book has valid data for metric calculation.

        Returns:
            bool: True if both sides have at least one level.
        """
        return bool(self.bids and self.asks)
