"""
MEXC venue adapter.

Implements the ExchangeAdapter contract over MexcRestClient and
MexcNormalizer for the configured spot pair.

Example:
    >>> adapter = MexcAdapter(config.get_venue("mexc"), config.pair)
    >>> async with adapter:
    ...     book = await adapter.fetch_order_book(100)
"""

from datetime import datetime, timezone
from typing import List, Optional

import structlog

from mm_monitor.adapters.mexc.normalizer import MexcNormalizer
from mm_monitor.adapters.mexc.rest import MexcRestClient
from mm_monitor.config.models import PairConfig, VenueConfig
from mm_monitor.interfaces.exchange_adapter import ExchangeAdapter
from mm_monitor.models.market import TickerSnapshot, TradeRecord
from mm_monitor.models.orderbook import OrderBook
from mm_monitor.models.user import AssetBalance, OpenOrder

logger = structlog.get_logger(__name__)


class MexcAdapter(ExchangeAdapter):
    """
    MEXC spot adapter.

    Attributes:
        config: Venue configuration.
        pair: Monitored pair.
        rest_client: Underlying REST client.
    """

    def __init__(
        self,
        config: VenueConfig,
        pair: PairConfig,
        rest_client: Optional[MexcRestClient] = None,
    ) -> None:
        """
        Initialize the MEXC adapter.

        Args:
            config: Venue configuration (base URL, symbol, credentials).
            pair: Monitored pair.
            rest_client: Pre-built client (default: built from config).
        """
        self.config = config
        self.pair = pair
        self.rest_client = rest_client or MexcRestClient(
            base_url=config.rest_base_url,
            credentials=config.credentials,
            rate_limit_per_second=config.rate_limit_per_second,
            timeout_seconds=config.timeout_seconds,
        )

        logger.info(
            "mexc_adapter_initialized",
            symbol=config.symbol,
            authenticated=config.has_credentials,
        )

    @property
    def venue_name(self) -> str:
        """Return 'mexc'."""
        return self.config.name

    @property
    def has_credentials(self) -> bool:
        """True when API credentials are configured."""
        return self.config.has_credentials

    async def _request_ticker(self) -> TickerSnapshot:
        raw = await self.rest_client.get_ticker_24hr(self.config.symbol)
        return MexcNormalizer.normalize_ticker(
            raw, self.venue_name, self.pair.display, datetime.now(timezone.utc)
        )

    async def _request_order_book(self, depth: int) -> OrderBook:
        raw = await self.rest_client.get_depth(self.config.symbol, limit=depth)
        book = MexcNormalizer.normalize_orderbook(
            raw, self.venue_name, self.pair.display, datetime.now(timezone.utc)
        )
        logger.debug(
            "mexc_orderbook_fetched",
            bids_count=len(book.bids),
            asks_count=len(book.asks),
        )
        return book

    async def _request_recent_trades(self, limit: int) -> List[TradeRecord]:
        raw = await self.rest_client.get_trades(self.config.symbol, limit=limit)
        return MexcNormalizer.normalize_trades(raw, self.venue_name)

    async def _request_balances(self) -> List[AssetBalance]:
        raw = await self.rest_client.get_account()
        return MexcNormalizer.normalize_balances(raw)

    async def _request_open_orders(self) -> List[OpenOrder]:
        raw = await self.rest_client.get_open_orders(self.config.symbol)
        return MexcNormalizer.normalize_open_orders(raw, self.venue_name)

    async def close(self) -> None:
        """Close the REST session."""
        await self.rest_client.close()

    def __repr__(self) -> str:
        """Return string representation."""
        return f"MexcAdapter(symbol={self.config.symbol}, authenticated={self.has_credentials})"
