"""
Spread Calculator and market snapshot builder.

This module computes mid price and spread with full Decimal precision and
joins them with the venue's 24h ticker into a MarketSnapshot.

Key Formulas:
    mid_price = (best_bid + best_ask) / 2
    spread_absolute = best_ask - best_bid
    spread_percent = (spread_absolute / mid_price) * 100

Classes:
    SpreadCalculator: Builds MarketSnapshot from ticker + order book
"""

from decimal import Decimal
from typing import Tuple

from mm_monitor.models.market import MarketSnapshot, TickerSnapshot
from mm_monitor.models.orderbook import OrderBook


class SpreadCalculator:
    """
    Calculator for top-of-book spread metrics.

    Edge Cases Handled:
        - Empty order book side: Raises ValueError
        - Zero mid price: Raises ValueError
        - Crossed or unsorted book: Rejected by OrderBook validation

    Example:
        >>> calc = SpreadCalculator()
        >>> mid, spread, spread_pct = calc.calculate(Decimal("100"), Decimal("102"))
        >>> round(spread_pct, 4)
        Decimal('1.9802')
    """

    @staticmethod
    def calculate(best_bid: Decimal, best_ask: Decimal) -> Tuple[Decimal, Decimal, Decimal]:
        """
        Calculate mid price, absolute spread and spread percent.

        Args:
            best_bid: Best bid price.
            best_ask: Best ask price.

        Returns:
            Tuple[Decimal, Decimal, Decimal]: (mid_price, spread, spread_percent).

        Raises:
            ValueError: If the mid price is not positive.
        """
        mid_price = (best_bid + best_ask) / Decimal("2")
        if mid_price <= Decimal("0"):
            raise ValueError(f"Invalid mid price: {mid_price}")

        spread = best_ask - best_bid
        spread_percent = (spread / mid_price) * Decimal("100")
        return mid_price, spread, spread_percent

    def build_snapshot(self, ticker: TickerSnapshot, book: OrderBook) -> MarketSnapshot:
        """
        Combine a ticker and an order book into a MarketSnapshot.

        Args:
            ticker: 24h ticker for the venue.
            book: Order book captured in the same run.

        Returns:
            MarketSnapshot: Snapshot stamped with the book's capture time.

        Raises:
            ValueError: If the book is empty on either side or venues differ.
        """
        if not book.is_valid:
            raise ValueError(
                f"Invalid order book: venue={book.venue}, "
                f"bids={len(book.bids)}, asks={len(book.asks)}"
            )
        if ticker.venue != book.venue:
            raise ValueError(f"Venue mismatch: ticker={ticker.venue}, book={book.venue}")

        best_bid = book.bids[0].price
        best_ask = book.asks[0].price
        _, spread, spread_percent = self.calculate(best_bid, best_ask)

        return MarketSnapshot(
            venue=book.venue,
            pair=book.pair,
            timestamp=book.timestamp,
            last_price=ticker.last_price,
            bid_price=best_bid,
            ask_price=best_ask,
            spread=spread,
            spread_percent=spread_percent,
            volume_24h=ticker.volume_24h,
            volume_24h_quote=ticker.volume_24h_quote,
            high_24h=ticker.high_24h,
            low_24h=ticker.low_24h,
            price_change_24h=ticker.price_change_24h,
            price_change_percent_24h=ticker.price_change_percent_24h,
        )

    def __repr__(self) -> str:
        """String representation of the calculator."""
        return "SpreadCalculator()"
