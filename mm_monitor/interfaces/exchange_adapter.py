"""
Abstract base class for venue adapters.

This module defines the ExchangeAdapter interface that the MEXC and KuCoin
implementations follow. Adapters fetch raw REST payloads and normalize them
into the shared models (TickerSnapshot, OrderBook, TradeRecord, ...).

Availability contract:
    The public fetch_* methods never raise for venue-side problems. Any
    transport error, rate limit, timeout or malformed payload is logged and
    reported as None ("unavailable") so the caller can skip the venue (or
    just the feature) for this run. Subclasses implement the _request_*
    hooks, which are free to raise.

Example:
    >>> adapter = MexcAdapter(venue_config, pair_config)
    >>> ticker = await adapter.fetch_ticker()
    >>> if ticker is None:
    ...     print("venue unavailable this run")
    >>> await adapter.close()
"""

import asyncio
from abc import ABC, abstractmethod
from typing import Awaitable, Callable, List, Optional, Tuple, TypeVar

import structlog
from pydantic import ValidationError

from mm_monitor.models.market import TickerSnapshot, TradeRecord
from mm_monitor.models.orderbook import OrderBook
from mm_monitor.models.user import AssetBalance, OpenOrder

logger = structlog.get_logger(__name__)

T = TypeVar("T")

# Transport failures and malformed payloads; both make the venue unavailable.
UNAVAILABLE_ERRORS: Tuple[type, ...] = (
    ConnectionError,
    ValueError,
    KeyError,
    TypeError,
    ValidationError,
    asyncio.TimeoutError,
)


class ExchangeAdapter(ABC):
    """
    Abstract base class for venue adapters.

    Attributes:
        venue_name: Lowercase venue identifier (e.g., "mexc", "kucoin").
        has_credentials: True when account endpoints may be called.

    Note:
        All financial values in returned models use Decimal for precision.
    """

    @property
    @abstractmethod
    def venue_name(self) -> str:
        """
        Return the lowercase venue identifier.

        Used as the venue column in stored rows and in log context.
        """

    @property
    @abstractmethod
    def has_credentials(self) -> bool:
        """True when API credentials are configured for this venue."""

    # -------------------------------------------------------------------------
    # Venue-specific hooks (may raise)
    # -------------------------------------------------------------------------

    @abstractmethod
    async def _request_ticker(self) -> TickerSnapshot:
        """Fetch and normalize 24h ticker statistics."""

    @abstractmethod
    async def _request_order_book(self, depth: int) -> OrderBook:
        """Fetch and normalize an order book snapshot with up to `depth` levels."""

    @abstractmethod
    async def _request_recent_trades(self, limit: int) -> List[TradeRecord]:
        """Fetch and normalize up to `limit` recent public trades."""

    @abstractmethod
    async def _request_balances(self) -> List[AssetBalance]:
        """Fetch account balances (authenticated)."""

    @abstractmethod
    async def _request_open_orders(self) -> List[OpenOrder]:
        """Fetch the operator's open orders for the pair (authenticated)."""

    @abstractmethod
    async def close(self) -> None:
        """Release HTTP resources. Safe to call multiple times."""

    # -------------------------------------------------------------------------
    # Public availability-contract API
    # -------------------------------------------------------------------------

    async def _guarded(
        self,
        operation: str,
        request: Callable[[], Awaitable[T]],
    ) -> Optional[T]:
        """
        Run a request hook, mapping venue-side failures to None.

        Args:
            operation: Operation name for logging.
            request: Zero-argument coroutine factory.

        Returns:
            Optional[T]: Hook result, or None if the venue was unavailable.
        """
        try:
            return await request()
        except UNAVAILABLE_ERRORS as e:
            logger.warning(
                "venue_fetch_unavailable",
                venue=self.venue_name,
                operation=operation,
                error_type=type(e).__name__,
                error=str(e),
            )
            return None

    async def fetch_ticker(self) -> Optional[TickerSnapshot]:
        """
        Fetch 24h ticker statistics.

        Returns:
            Optional[TickerSnapshot]: Ticker, or None if unavailable.
        """
        return await self._guarded("fetch_ticker", self._request_ticker)

    async def fetch_order_book(self, depth: int = 100) -> Optional[OrderBook]:
        """
        Fetch an order book snapshot.

        Args:
            depth: Number of levels per side to request.

        Returns:
            Optional[OrderBook]: Validated book, or None if unavailable or
                malformed (empty side, unsorted, crossed).
        """
        return await self._guarded(
            "fetch_order_book", lambda: self._request_order_book(depth)
        )

    async def fetch_recent_trades(self, limit: int = 100) -> Optional[List[TradeRecord]]:
        """
        Fetch recent public trades.

        Args:
            limit: Maximum number of trades.

        Returns:
            Optional[List[TradeRecord]]: Trades, or None if unavailable.
        """
        return await self._guarded(
            "fetch_recent_trades", lambda: self._request_recent_trades(limit)
        )

    async def fetch_balances(self) -> Optional[List[AssetBalance]]:
        """
        Fetch account balances.

        Returns:
            Optional[List[AssetBalance]]: Balances, or None when credentials
                are missing or the call failed.
        """
        if not self.has_credentials:
            return None
        return await self._guarded("fetch_balances", self._request_balances)

    async def fetch_open_orders(self) -> Optional[List[OpenOrder]]:
        """
        Fetch the operator's open orders for the pair.

        Returns:
            Optional[List[OpenOrder]]: Orders, or None when credentials are
                missing or the call failed.
        """
        if not self.has_credentials:
            return None
        return await self._guarded("fetch_open_orders", self._request_open_orders)

    async def __aenter__(self) -> "ExchangeAdapter":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()
