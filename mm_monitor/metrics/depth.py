"""
Depth Calculator for cumulative order book depth within percentage bands.

Key Formulas:
    bid_threshold = mid_price * (1 - band/100)
    ask_threshold = mid_price * (1 + band/100)
    depth = sum(amount), sum(amount * price) over levels inside the threshold

The walk starts at the best level and stops at the first level beyond the
threshold. Books are ordered, so nothing past that level can be inside the
band; the cost is proportional to the levels inside the band.

Classes:
    DepthCalculator: Computes DepthMeasurement per configured band
"""

from decimal import Decimal
from typing import Iterable, List, Sequence, Tuple

from mm_monitor.models.metrics import DepthMeasurement
from mm_monitor.models.orderbook import OrderBook, PriceLevel

DEFAULT_BANDS: Tuple[Decimal, ...] = (Decimal("2"), Decimal("5"), Decimal("10"))


def walk_band(
    levels: Iterable[PriceLevel],
    threshold: Decimal,
    side: str,
) -> Tuple[Decimal, Decimal]:
    """
    Accumulate amount and value from the best level outward.

    Args:
        levels: Levels of one side, best first.
        threshold: Band boundary price (inclusive).
        side: Either "bid" or "ask".

    Returns:
        Tuple[Decimal, Decimal]: (total_amount, total_value).

    Raises:
        ValueError: If side is invalid.
    """
    if side not in ("bid", "ask"):
        raise ValueError(f"side must be 'bid' or 'ask', got '{side}'")

    total_amount = Decimal("0")
    total_value = Decimal("0")

    for level in levels:
        if side == "bid" and level.price < threshold:
            break
        if side == "ask" and level.price > threshold:
            break
        total_amount += level.amount
        total_value += level.notional

    return total_amount, total_value


def band_thresholds(mid_price: Decimal, band_percent: Decimal) -> Tuple[Decimal, Decimal]:
    """
    Bid and ask boundary prices for a band.

    Returns:
        Tuple[Decimal, Decimal]: (bid_threshold, ask_threshold).
    """
    fraction = band_percent / Decimal("100")
    return mid_price * (Decimal("1") - fraction), mid_price * (Decimal("1") + fraction)


class DepthCalculator:
    """
    Calculator for cumulative depth at percentage bands from mid price.

    Edge Cases Handled:
        - Empty order book: Raises ValueError
        - Zero mid price: Raises ValueError
        - Best level already outside a band: zero depth for that side

    Example:
        >>> calc = DepthCalculator(bands=[Decimal("2"), Decimal("5")])
        >>> depths = calc.calculate(book)
        >>> depths[0].total_value
        Decimal('4500.0')

    Attributes:
        bands: Ascending band percentages to calculate (default: 2, 5, 10).
    """

    def __init__(self, bands: Sequence[Decimal] | None = None) -> None:
        """
        Initialize the depth calculator.

        Args:
            bands: Percentage bands (default: 2, 5, 10).

        Raises:
            ValueError: If a band is not positive.
        """
        self.bands: List[Decimal] = list(bands) if bands is not None else list(DEFAULT_BANDS)
        if any(band <= 0 for band in self.bands):
            raise ValueError(f"bands must be positive, got {self.bands}")

    def calculate(self, book: OrderBook) -> List[DepthMeasurement]:
        """
        Calculate depth measurements for every configured band.

        Args:
            book: Validated order book.

        Returns:
            List[DepthMeasurement]: One measurement per band, in band order.

        Raises:
            ValueError: If the order book is empty or mid price is invalid.
        """
        if not book.is_valid:
            raise ValueError(
                f"Invalid order book: venue={book.venue}, "
                f"bids={len(book.bids)}, asks={len(book.asks)}"
            )

        mid_price = book.mid_price
        if mid_price is None or mid_price <= Decimal("0"):
            raise ValueError(f"Invalid mid price: {mid_price}")

        measurements: List[DepthMeasurement] = []
        for band in self.bands:
            bid_threshold, ask_threshold = band_thresholds(mid_price, band)
            bid_amount, bid_value = walk_band(book.bids, bid_threshold, "bid")
            ask_amount, ask_value = walk_band(book.asks, ask_threshold, "ask")
            measurements.append(
                DepthMeasurement(
                    venue=book.venue,
                    band_percent=band,
                    bid_amount=bid_amount,
                    bid_value=bid_value,
                    ask_amount=ask_amount,
                    ask_value=ask_value,
                    timestamp=book.timestamp,
                )
            )

        return measurements

    def __repr__(self) -> str:
        """String representation of the calculator."""
        return f"DepthCalculator(bands={[str(b) for b in self.bands]})"
