"""
MEXC spot REST API client.

Endpoints:
    Public:
        GET /api/v3/ticker/24hr?symbol=ERGUSDT
        GET /api/v3/depth?symbol=ERGUSDT&limit=100
        GET /api/v3/trades?symbol=ERGUSDT&limit=100
    Signed (HMAC-SHA256 over the query string, X-MEXC-APIKEY header):
        GET /api/v3/account
        GET /api/v3/openOrders?symbol=ERGUSDT

Responses are returned as parsed JSON; normalization lives in
mm_monitor.adapters.mexc.normalizer.
"""

import hashlib
import hmac
import time
from typing import Any, Callable, Dict, List, Optional
from urllib.parse import urlencode

import structlog

from mm_monitor.adapters.rest import RestClient
from mm_monitor.config.models import VenueCredentials

logger = structlog.get_logger(__name__)

RECV_WINDOW_MS = 5000


class MexcRestClient(RestClient):
    """
    Async REST client for MEXC spot.

    Example:
        >>> client = MexcRestClient("https://api.mexc.com")
        >>> raw = await client.get_depth("ERGUSDT", limit=100)
        >>> raw["bids"][0]
        ['1.2340', '812.5']
    """

    def __init__(
        self,
        base_url: str,
        credentials: Optional[VenueCredentials] = None,
        rate_limit_per_second: int = 10,
        timeout_seconds: int = 30,
        clock: Callable[[], float] = time.time,
    ):
        super().__init__(base_url, rate_limit_per_second, timeout_seconds)
        self.credentials = credentials
        self._clock = clock

    def sign(self, query: str) -> str:
        """
        Compute the MEXC request signature.

        Args:
            query: URL-encoded query string (without signature).

        Returns:
            str: Lowercase hex HMAC-SHA256 of the query keyed by the secret.

        Raises:
            ValueError: If no credentials are configured.
        """
        if self.credentials is None:
            raise ValueError("MEXC credentials are not configured")
        secret = self.credentials.api_secret.get_secret_value().encode()
        return hmac.new(secret, query.encode(), hashlib.sha256).hexdigest()

    async def _signed_get(self, endpoint: str, params: Optional[Dict[str, Any]] = None) -> Any:
        if self.credentials is None:
            raise ValueError("MEXC credentials are not configured")

        signed_params = dict(params or {})
        signed_params["recvWindow"] = RECV_WINDOW_MS
        signed_params["timestamp"] = int(self._clock() * 1000)
        query = urlencode(signed_params)
        signature = self.sign(query)

        return await self._request(
            "GET",
            f"{endpoint}?{query}&signature={signature}",
            headers={
                "X-MEXC-APIKEY": self.credentials.api_key.get_secret_value(),
                "Content-Type": "application/json",
            },
        )

    async def get_ticker_24hr(self, symbol: str) -> Dict[str, Any]:
        """Fetch 24h ticker statistics."""
        return await self._request("GET", "/api/v3/ticker/24hr", {"symbol": symbol})

    async def get_depth(self, symbol: str, limit: int = 100) -> Dict[str, Any]:
        """Fetch an order book snapshot."""
        return await self._request(
            "GET", "/api/v3/depth", {"symbol": symbol, "limit": limit}
        )

    async def get_trades(self, symbol: str, limit: int = 100) -> List[Dict[str, Any]]:
        """Fetch recent public trades."""
        return await self._request(
            "GET", "/api/v3/trades", {"symbol": symbol, "limit": limit}
        )

    async def get_account(self) -> Dict[str, Any]:
        """Fetch account balances (signed)."""
        return await self._signed_get("/api/v3/account")

    async def get_open_orders(self, symbol: str) -> List[Dict[str, Any]]:
        """Fetch open orders for a symbol (signed)."""
        return await self._signed_get("/api/v3/openOrders", {"symbol": symbol})
