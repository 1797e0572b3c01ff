"""
KuCoin data normalizer.

Converts the `data` part of KuCoin spot v1 responses to the shared models.

KuCoin Stats Format:
    {
        "symbol": "ERG-USDT",
        "last": "1.2345",
        "vol": "80000.1",          # base
        "volValue": "99000.5",     # quote
        "high": "1.30",
        "low": "1.18",
        "changePrice": "0.05",
        "changeRate": "0.0422"     # fraction, 0.0422 = 4.22%
    }

KuCoin Order Book Format:
    {"sequence": "1234", "time": 1700000000000,
     "bids": [["1.2340", "812.5"], ...], "asks": [["1.2350", "640.0"], ...]}

KuCoin Trade History Format:
    [{"sequence": "1545896668571", "price": "1.2345", "size": "10.0",
      "side": "buy", "time": 1700000000000000000}]    # time in nanoseconds
    side is the taker side.

KuCoin Accounts / Orders Format:
    [{"currency": "ERG", "type": "trade", "balance": "12", "available": "10",
      "holds": "2"}]
    {"items": [{"id": "5c35", "side": "buy", "price": "1.2", "size": "100",
                "dealSize": "10", "type": "limit", "createdAt": 1700000000000}]}
"""

from collections import OrderedDict
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List

import structlog

from mm_monitor.adapters.normalize import (
    fallback_trade_id,
    ms_to_datetime,
    parse_levels,
    to_decimal,
)
from mm_monitor.models.market import TickerSnapshot, TradeRecord, TradeSide
from mm_monitor.models.orderbook import OrderBook
from mm_monitor.models.user import AssetBalance, OpenOrder

logger = structlog.get_logger(__name__)

NANOS_PER_MILLI = 1_000_000


def _parse_side(value: Any) -> TradeSide:
    side = str(value or "").lower()
    if side not in ("buy", "sell"):
        raise ValueError(f"Unknown KuCoin side: {value!r}")
    return TradeSide(side)


class KucoinNormalizer:
    """Normalizes KuCoin data to unified models."""

    @staticmethod
    def normalize_ticker(
        raw: Dict[str, Any],
        venue: str,
        pair: str,
        timestamp: datetime,
    ) -> TickerSnapshot:
        """
        Normalize a market stats payload.

        changeRate is a fraction and is converted to percent. Missing change
        fields are reported as zero change.

        Raises:
            ValueError: If a required field is missing or non-numeric.
        """
        if not isinstance(raw, dict):
            raise ValueError(f"Unexpected KuCoin stats payload: {type(raw).__name__}")

        change_rate = raw.get("changeRate")
        change_percent = (
            to_decimal(change_rate, "changeRate") * Decimal("100")
            if change_rate
            else Decimal("0")
        )
        change_price = raw.get("changePrice")

        return TickerSnapshot(
            venue=venue,
            pair=pair,
            timestamp=timestamp,
            last_price=to_decimal(raw.get("last"), "last"),
            volume_24h=to_decimal(raw.get("vol"), "vol"),
            volume_24h_quote=to_decimal(raw.get("volValue"), "volValue"),
            high_24h=to_decimal(raw.get("high"), "high"),
            low_24h=to_decimal(raw.get("low"), "low"),
            price_change_24h=(
                to_decimal(change_price, "changePrice") if change_price else Decimal("0")
            ),
            price_change_percent_24h=change_percent,
        )

    @staticmethod
    def normalize_orderbook(
        raw: Dict[str, Any],
        venue: str,
        pair: str,
        timestamp: datetime,
    ) -> OrderBook:
        """
        Normalize an order book payload.

        Raises:
            ValueError: If a side is missing/empty or the book is malformed.
        """
        if not isinstance(raw, dict) or "bids" not in raw or "asks" not in raw:
            raise ValueError("Invalid KuCoin order book response: missing bids/asks")

        return OrderBook(
            venue=venue,
            pair=pair,
            timestamp=timestamp,
            bids=parse_levels(raw["bids"], "bid"),
            asks=parse_levels(raw["asks"], "ask"),
        )

    @staticmethod
    def normalize_trades(raw: List[Dict[str, Any]], venue: str) -> List[TradeRecord]:
        """
        Normalize a trade history payload.

        The sequence number is the trade id; time is converted from
        nanoseconds to milliseconds.

        Raises:
            ValueError: If the payload or a trade is malformed.
        """
        if not isinstance(raw, list):
            raise ValueError(f"Unexpected KuCoin trades payload: {type(raw).__name__}")

        trades: List[TradeRecord] = []
        for item in raw:
            time_ms = int(to_decimal(item.get("time"), "time")) // NANOS_PER_MILLI
            sequence = item.get("sequence")
            trades.append(
                TradeRecord(
                    venue=venue,
                    trade_id=str(sequence) if sequence else fallback_trade_id(
                        time_ms, item.get("price"), item.get("size")
                    ),
                    price=to_decimal(item.get("price"), "price"),
                    amount=to_decimal(item.get("size"), "size"),
                    side=_parse_side(item.get("side")),
                    trade_time=ms_to_datetime(time_ms),
                )
            )
        return trades

    @staticmethod
    def normalize_balances(raw: List[Dict[str, Any]]) -> List[AssetBalance]:
        """
        Normalize account balances, summing multiple accounts per currency.

        Raises:
            ValueError: If the payload is malformed.
        """
        if not isinstance(raw, list):
            raise ValueError(f"Unexpected KuCoin accounts payload: {type(raw).__name__}")

        totals: "OrderedDict[str, List[Decimal]]" = OrderedDict()
        for item in raw:
            asset = str(item["currency"]).upper()
            free, locked = totals.setdefault(asset, [Decimal("0"), Decimal("0")])
            totals[asset] = [
                free + to_decimal(item.get("available"), "available"),
                locked + to_decimal(item.get("holds"), "holds"),
            ]

        return [
            AssetBalance(asset=asset, free=free, locked=locked)
            for asset, (free, locked) in totals.items()
        ]

    @staticmethod
    def normalize_open_orders(raw: Dict[str, Any], venue: str) -> List[OpenOrder]:
        """
        Normalize an active orders page.

        Raises:
            ValueError: If the payload or an order is malformed.
        """
        if not isinstance(raw, dict) or not isinstance(raw.get("items"), list):
            raise ValueError("Invalid KuCoin orders response: missing items")

        return [
            OpenOrder(
                venue=venue,
                order_id=str(item["id"]),
                side=_parse_side(item.get("side")),
                price=to_decimal(item.get("price"), "price"),
                amount=to_decimal(item.get("size"), "size"),
                filled_amount=to_decimal(item.get("dealSize", "0"), "dealSize"),
                order_type=str(item["type"]).lower() if item.get("type") else None,
                created_at=ms_to_datetime(item["createdAt"]) if item.get("createdAt") else None,
            )
            for item in raw["items"]
        ]
