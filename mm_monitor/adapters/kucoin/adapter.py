"""
KuCoin venue adapter.

Implements the ExchangeAdapter contract over KucoinRestClient and
KucoinNormalizer. The order book endpoint always returns the top 100
levels; the requested depth trims it. The trade history endpoint returns
the most recent 100 trades; the requested limit trims it.
"""

from datetime import datetime, timezone
from typing import List, Optional

import structlog

from mm_monitor.adapters.kucoin.normalizer import KucoinNormalizer
from mm_monitor.adapters.kucoin.rest import KucoinRestClient
from mm_monitor.config.models import PairConfig, VenueConfig
from mm_monitor.interfaces.exchange_adapter import ExchangeAdapter
from mm_monitor.models.market import TickerSnapshot, TradeRecord
from mm_monitor.models.orderbook import OrderBook
from mm_monitor.models.user import AssetBalance, OpenOrder

logger = structlog.get_logger(__name__)


class KucoinAdapter(ExchangeAdapter):
    """
    KuCoin spot adapter.

    Account endpoints additionally require a passphrase; without one the
    adapter reports no credentials.
    """

    def __init__(
        self,
        config: VenueConfig,
        pair: PairConfig,
        rest_client: Optional[KucoinRestClient] = None,
    ) -> None:
        self.config = config
        self.pair = pair
        self.rest_client = rest_client or KucoinRestClient(
            base_url=config.rest_base_url,
            credentials=config.credentials,
            rate_limit_per_second=config.rate_limit_per_second,
            timeout_seconds=config.timeout_seconds,
        )

        logger.info(
            "kucoin_adapter_initialized",
            symbol=config.symbol,
            authenticated=self.has_credentials,
        )

    @property
    def venue_name(self) -> str:
        """Return 'kucoin'."""
        return self.config.name

    @property
    def has_credentials(self) -> bool:
        """True when key, secret and passphrase are configured."""
        credentials = self.config.credentials
        return credentials is not None and credentials.passphrase is not None

    async def _request_ticker(self) -> TickerSnapshot:
        raw = await self.rest_client.get_stats(self.config.symbol)
        return KucoinNormalizer.normalize_ticker(
            raw, self.venue_name, self.pair.display, datetime.now(timezone.utc)
        )

    async def _request_order_book(self, depth: int) -> OrderBook:
        raw = await self.rest_client.get_orderbook(self.config.symbol)
        if isinstance(raw, dict):
            raw = {**raw, "bids": raw.get("bids", [])[:depth], "asks": raw.get("asks", [])[:depth]}
        book = KucoinNormalizer.normalize_orderbook(
            raw, self.venue_name, self.pair.display, datetime.now(timezone.utc)
        )
        logger.debug(
            "kucoin_orderbook_fetched",
            bids_count=len(book.bids),
            asks_count=len(book.asks),
        )
        return book

    async def _request_recent_trades(self, limit: int) -> List[TradeRecord]:
        raw = await self.rest_client.get_trade_histories(self.config.symbol)
        return KucoinNormalizer.normalize_trades(raw, self.venue_name)[-limit:]

    async def _request_balances(self) -> List[AssetBalance]:
        raw = await self.rest_client.get_accounts()
        return KucoinNormalizer.normalize_balances(raw)

    async def _request_open_orders(self) -> List[OpenOrder]:
        raw = await self.rest_client.get_active_orders(self.config.symbol)
        return KucoinNormalizer.normalize_open_orders(raw, self.venue_name)

    async def close(self) -> None:
        """Close the REST session."""
        await self.rest_client.close()

    def __repr__(self) -> str:
        """Return string representation."""
        return f"KucoinAdapter(symbol={self.config.symbol}, authenticated={self.has_credentials})"
