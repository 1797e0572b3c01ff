"""
Parsing helpers shared by the venue normalizers.

Every helper raises ValueError on malformed input so that the adapter's
availability guard treats the venue as unavailable for this run.
"""

import hashlib
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, List, Sequence

from mm_monitor.models.orderbook import PriceLevel


def to_decimal(value: Any, field: str) -> Decimal:
    """
    Convert a venue value (usually a string) to Decimal.

    Args:
        value: Raw value.
        field: Field name for the error message.

    Returns:
        Decimal: Parsed value.

    Raises:
        ValueError: If the value is missing, non-numeric or not finite.
    """
    if value is None or isinstance(value, bool):
        raise ValueError(f"Missing numeric field '{field}'")
    try:
        result = Decimal(str(value))
    except InvalidOperation as e:
        raise ValueError(f"Non-numeric field '{field}': {value!r}") from e
    if not result.is_finite():
        raise ValueError(f"Non-finite field '{field}': {value!r}")
    return result


def parse_levels(raw_levels: Sequence[Sequence[Any]], side: str) -> List[PriceLevel]:
    """
    Parse [[price, amount], ...] pairs in venue order.

    Zero-amount levels are dropped. Order is preserved; the OrderBook model
    validates it.

    Raises:
        ValueError: If a level is malformed or the side is empty.
    """
    levels: List[PriceLevel] = []
    for raw in raw_levels:
        if len(raw) < 2:
            raise ValueError(f"Malformed {side} level: {raw!r}")
        price = to_decimal(raw[0], f"{side}.price")
        amount = to_decimal(raw[1], f"{side}.amount")
        if amount > 0:
            levels.append(PriceLevel(price=price, amount=amount))
    if not levels:
        raise ValueError(f"Empty order book side: {side}")
    return levels


def ms_to_datetime(value: Any, field: str = "time") -> datetime:
    """Convert epoch milliseconds to an aware UTC datetime."""
    millis = to_decimal(value, field)
    return datetime.fromtimestamp(float(millis) / 1000, tz=timezone.utc)


def fallback_trade_id(time_ms: Any, price: Any, amount: Any) -> str:
    """
    Content-derived trade identifier for trades the venue reports without one.

    Returns:
        str: SHA-256 hex digest of time, price and amount concatenated.
    """
    return hashlib.sha256(f"{time_ms}{price}{amount}".encode()).hexdigest()
