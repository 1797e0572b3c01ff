"""
Builders for test data.

All builders take strings for Decimal values so test cases read like the
venue payloads they stand in for.
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple

from mm_monitor.config.models import (
    AppConfig,
    PairConfig,
    VenueConfig,
    VenueCredentials,
)
from mm_monitor.config.settings import MonitorSettings
from mm_monitor.interfaces.exchange_adapter import ExchangeAdapter
from mm_monitor.metrics.spread import SpreadCalculator
from mm_monitor.models.market import (
    MarketSnapshot,
    TickerSnapshot,
    TradeRecord,
    TradeSide,
)
from mm_monitor.models.metrics import DepthMeasurement
from mm_monitor.models.orderbook import OrderBook, PriceLevel
from mm_monitor.models.user import AssetBalance, OpenOrder

NOW = datetime(2026, 1, 15, 12, 0, tzinfo=timezone.utc)

DEFAULT_BIDS = (("1.00", "1000"), ("0.99", "2000"), ("0.97", "3000"), ("0.90", "5000"))
DEFAULT_ASKS = (("1.02", "1000"), ("1.03", "2000"), ("1.05", "3000"), ("1.15", "5000"))


def _levels(raw: Iterable[Tuple[str, str]]) -> List[PriceLevel]:
    return [PriceLevel(price=Decimal(p), amount=Decimal(a)) for p, a in raw]


def make_book(
    venue: str = "mexc",
    bids: Sequence[Tuple[str, str]] = DEFAULT_BIDS,
    asks: Sequence[Tuple[str, str]] = DEFAULT_ASKS,
    timestamp: datetime = NOW,
) -> OrderBook:
    return OrderBook(
        venue=venue,
        pair="ERG/USDT",
        timestamp=timestamp,
        bids=_levels(bids),
        asks=_levels(asks),
    )


def make_ticker(
    venue: str = "mexc",
    last: str = "1.01",
    change_percent: str = "0",
    high: str = "1.05",
    low: str = "0.97",
    timestamp: datetime = NOW,
) -> TickerSnapshot:
    return TickerSnapshot(
        venue=venue,
        pair="ERG/USDT",
        timestamp=timestamp,
        last_price=Decimal(last),
        volume_24h=Decimal("50000"),
        volume_24h_quote=Decimal("50500"),
        high_24h=Decimal(high),
        low_24h=Decimal(low),
        price_change_24h=Decimal(last) * Decimal(change_percent) / Decimal("100"),
        price_change_percent_24h=Decimal(change_percent),
    )


def make_snapshot(
    venue: str = "mexc",
    bid: str = "1.00",
    ask: str = "1.01",
    last: Optional[str] = None,
    change_percent: str = "0",
    high: str = "1.05",
    low: str = "0.97",
    timestamp: datetime = NOW,
) -> MarketSnapshot:
    _, spread, spread_percent = SpreadCalculator.calculate(Decimal(bid), Decimal(ask))
    last_price = Decimal(last) if last is not None else Decimal(bid)
    return MarketSnapshot(
        venue=venue,
        pair="ERG/USDT",
        timestamp=timestamp,
        last_price=last_price,
        bid_price=Decimal(bid),
        ask_price=Decimal(ask),
        spread=spread,
        spread_percent=spread_percent,
        volume_24h=Decimal("50000"),
        volume_24h_quote=Decimal("50500"),
        high_24h=Decimal(high),
        low_24h=Decimal(low),
        price_change_24h=last_price * Decimal(change_percent) / Decimal("100"),
        price_change_percent_24h=Decimal(change_percent),
    )


def make_depth(
    venue: str = "mexc",
    band: str = "2",
    bid_value: str = "5000",
    ask_value: str = "5000",
    timestamp: datetime = NOW,
) -> DepthMeasurement:
    return DepthMeasurement(
        venue=venue,
        band_percent=Decimal(band),
        bid_amount=Decimal(bid_value),
        bid_value=Decimal(bid_value),
        ask_amount=Decimal(ask_value),
        ask_value=Decimal(ask_value),
        timestamp=timestamp,
    )


def make_trade(
    trade_id: str,
    venue: str = "mexc",
    price: str = "1.00",
    amount: str = "100",
    trade_time: datetime = NOW,
    side: TradeSide = TradeSide.BUY,
) -> TradeRecord:
    return TradeRecord(
        venue=venue,
        trade_id=trade_id,
        price=Decimal(price),
        amount=Decimal(amount),
        side=side,
        trade_time=trade_time,
    )


def make_order(
    order_id: str,
    side: TradeSide,
    price: str,
    amount: str,
    filled: str = "0",
    venue: str = "mexc",
) -> OpenOrder:
    return OpenOrder(
        venue=venue,
        order_id=order_id,
        side=side,
        price=Decimal(price),
        amount=Decimal(amount),
        filled_amount=Decimal(filled),
        order_type="limit",
    )


def make_settings(**overrides: object) -> MonitorSettings:
    """Parse settings the way the config table would supply them."""
    return MonitorSettings.from_mapping({key: str(value) for key, value in overrides.items()})


def make_app_config(credentials: bool = False) -> AppConfig:
    creds = (
        VenueCredentials(api_key="key", api_secret="secret", passphrase="phrase")
        if credentials
        else None
    )
    return AppConfig(
        pair=PairConfig(),
        venues={
            "mexc": VenueConfig(
                name="mexc",
                rest_base_url="https://api.mexc.com",
                symbol="ERGUSDT",
                credentials=creds,
            ),
            "kucoin": VenueConfig(
                name="kucoin",
                rest_base_url="https://api.kucoin.com",
                symbol="ERG-USDT",
                credentials=creds,
            ),
        },
    )


def minutes_ago(minutes: int, now: datetime = NOW) -> datetime:
    return now - timedelta(minutes=minutes)


class FakeAdapter(ExchangeAdapter):
    """
    Adapter returning canned data.

    Operations named in `failing` raise ConnectionError from their request
    hook, which the availability guard turns into None.
    """

    def __init__(
        self,
        venue: str = "mexc",
        ticker: Optional[TickerSnapshot] = None,
        book: Optional[OrderBook] = None,
        trades: Optional[List[TradeRecord]] = None,
        balances: Optional[List[AssetBalance]] = None,
        orders: Optional[List[OpenOrder]] = None,
        credentials: bool = False,
        failing: Optional[Set[str]] = None,
    ) -> None:
        self._venue = venue
        self.ticker = ticker if ticker is not None else make_ticker(venue)
        self.book = book if book is not None else make_book(venue)
        self.trades = trades if trades is not None else []
        self.balances = balances if balances is not None else []
        self.orders = orders if orders is not None else []
        self._credentials = credentials
        self.failing = failing or set()
        self.calls: Dict[str, int] = {}
        self.closed = False

    @property
    def venue_name(self) -> str:
        return self._venue

    @property
    def has_credentials(self) -> bool:
        return self._credentials

    def _check(self, operation: str) -> None:
        self.calls[operation] = self.calls.get(operation, 0) + 1
        if operation in self.failing:
            raise ConnectionError(f"{self._venue} {operation} unavailable")

    async def _request_ticker(self) -> TickerSnapshot:
        self._check("ticker")
        return self.ticker

    async def _request_order_book(self, depth: int) -> OrderBook:
        self._check("book")
        return self.book

    async def _request_recent_trades(self, limit: int) -> List[TradeRecord]:
        self._check("trades")
        return self.trades[:limit]

    async def _request_balances(self) -> List[AssetBalance]:
        self._check("balances")
        return self.balances

    async def _request_open_orders(self) -> List[OpenOrder]:
        self._check("orders")
        return self.orders

    async def close(self) -> None:
        self.closed = True
