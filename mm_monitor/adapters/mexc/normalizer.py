"""
MEXC data normalizer.

Converts MEXC spot v3 JSON payloads to the shared Pydantic models.

MEXC 24hr Ticker Format:
    {
        "symbol": "ERGUSDT",
        "lastPrice": "1.2345",
        "volume": "120000.5",        # base
        "quoteVolume": "148000.1",   # quote
        "highPrice": "1.30",
        "lowPrice": "1.18",
        "priceChange": "0.05",
        "priceChangePercent": "4.22"
    }

MEXC Depth Format:
    {
        "lastUpdateId": 1234567,
        "bids": [["1.2340", "812.5"], ...],
        "asks": [["1.2350", "640.0"], ...]
    }

MEXC Trade Format:
    {"id": null, "price": "1.2345", "qty": "10.0", "time": 1700000000000,
     "isBuyerMaker": true}
    isBuyerMaker=true means the taker sold.

MEXC Account / Open Orders Format:
    {"balances": [{"asset": "ERG", "free": "10", "locked": "2"}]}
    [{"orderId": "C02__1", "price": "1.2", "origQty": "100",
      "executedQty": "10", "type": "LIMIT", "side": "BUY", "time": 1700000000000}]
"""

from datetime import datetime
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


class MexcNormalizer:
    """
    Normalizes MEXC data to unified models.

    Example:
        >>> book = MexcNormalizer.normalize_orderbook(raw, "mexc", "ERG/USDT", now)
        >>> book.spread_percent
    """

    @staticmethod
    def normalize_ticker(
        raw: Dict[str, Any],
        venue: str,
        pair: str,
        timestamp: datetime,
    ) -> TickerSnapshot:
        """
        Normalize a 24hr ticker payload.

        Raises:
            ValueError: If a required field is missing or non-numeric.
        """
        if not isinstance(raw, dict):
            raise ValueError(f"Unexpected MEXC ticker payload: {type(raw).__name__}")

        return TickerSnapshot(
            venue=venue,
            pair=pair,
            timestamp=timestamp,
            last_price=to_decimal(raw.get("lastPrice"), "lastPrice"),
            volume_24h=to_decimal(raw.get("volume"), "volume"),
            volume_24h_quote=to_decimal(raw.get("quoteVolume"), "quoteVolume"),
            high_24h=to_decimal(raw.get("highPrice"), "highPrice"),
            low_24h=to_decimal(raw.get("lowPrice"), "lowPrice"),
            price_change_24h=to_decimal(raw.get("priceChange"), "priceChange"),
            price_change_percent_24h=to_decimal(
                raw.get("priceChangePercent"), "priceChangePercent"
            ),
        )

    @staticmethod
    def normalize_orderbook(
        raw: Dict[str, Any],
        venue: str,
        pair: str,
        timestamp: datetime,
    ) -> OrderBook:
        """
        Normalize a depth payload.

        Raises:
            ValueError: If a side is missing/empty, a level is malformed, or
                the book is unsorted or crossed.
        """
        if not isinstance(raw, dict) or "bids" not in raw or "asks" not in raw:
            raise ValueError("Invalid MEXC depth response: missing bids/asks")

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
        Normalize a recent-trades payload.

        Trades without an id get a content-derived id.

        Raises:
            ValueError: If the payload or a trade is malformed.
        """
        if not isinstance(raw, list):
            raise ValueError(f"Unexpected MEXC trades payload: {type(raw).__name__}")

        trades: List[TradeRecord] = []
        for item in raw:
            price = to_decimal(item.get("price"), "price")
            amount = to_decimal(item.get("qty"), "qty")
            time_ms = item.get("time")
            trade_id = item.get("id")
            trades.append(
                TradeRecord(
                    venue=venue,
                    trade_id=str(trade_id) if trade_id else fallback_trade_id(
                        time_ms, item.get("price"), item.get("qty")
                    ),
                    price=price,
                    amount=amount,
                    side=TradeSide.SELL if item.get("isBuyerMaker") else TradeSide.BUY,
                    trade_time=ms_to_datetime(time_ms),
                )
            )
        return trades

    @staticmethod
    def normalize_balances(raw: Dict[str, Any]) -> List[AssetBalance]:
        """
        Normalize an account payload into per-asset balances.

        Raises:
            ValueError: If the payload is malformed.
        """
        if not isinstance(raw, dict) or not isinstance(raw.get("balances"), list):
            raise ValueError("Invalid MEXC account response: missing balances")

        return [
            AssetBalance(
                asset=str(item["asset"]).upper(),
                free=to_decimal(item.get("free"), "free"),
                locked=to_decimal(item.get("locked"), "locked"),
            )
            for item in raw["balances"]
        ]

    @staticmethod
    def normalize_open_orders(raw: List[Dict[str, Any]], venue: str) -> List[OpenOrder]:
        """
        Normalize an open-orders payload.

        Raises:
            ValueError: If the payload or an order is malformed.
        """
        if not isinstance(raw, list):
            raise ValueError(f"Unexpected MEXC open orders payload: {type(raw).__name__}")

        orders: List[OpenOrder] = []
        for item in raw:
            side = str(item.get("side", "")).lower()
            if side not in ("buy", "sell"):
                raise ValueError(f"Unknown MEXC order side: {item.get('side')!r}")
            orders.append(
                OpenOrder(
                    venue=venue,
                    order_id=str(item["orderId"]),
                    side=TradeSide(side),
                    price=to_decimal(item.get("price"), "price"),
                    amount=to_decimal(item.get("origQty"), "origQty"),
                    filled_amount=to_decimal(item.get("executedQty", "0"), "executedQty"),
                    order_type=str(item["type"]).lower() if item.get("type") else None,
                    created_at=ms_to_datetime(item["time"]) if item.get("time") else None,
                )
            )
        return orders
