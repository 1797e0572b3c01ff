"""
KuCoin spot REST API client.

Endpoints:
    Public:
        GET /api/v1/market/stats?symbol=ERG-USDT
        GET /api/v1/market/orderbook/level2_100?symbol=ERG-USDT
        GET /api/v1/market/histories?symbol=ERG-USDT
    Signed (KC-API-* headers, key version 2):
        GET /api/v1/accounts?type=trade
        GET /api/v1/orders?status=active&symbol=ERG-USDT

Response Envelope:
    {"code": "200000", "data": {...}}
    Any other code is treated as a malformed response.
"""

import base64
import hashlib
import hmac
import time
from typing import Any, Callable, Dict, Optional
from urllib.parse import urlencode

import structlog

from mm_monitor.adapters.rest import RestClient
from mm_monitor.config.models import VenueCredentials

logger = structlog.get_logger(__name__)

SUCCESS_CODE = "200000"


def _b64_hmac(secret: str, message: str) -> str:
    digest = hmac.new(secret.encode(), message.encode(), hashlib.sha256).digest()
    return base64.b64encode(digest).decode()


class KucoinRestClient(RestClient):
    """
    Async REST client for KuCoin spot.

    Example:
        >>> client = KucoinRestClient("https://api.kucoin.com")
        >>> stats = await client.get_stats("ERG-USDT")
        >>> stats["last"]
        '1.2345'
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

    @staticmethod
    def unwrap(payload: Any) -> Any:
        """
        Extract `data` from a KuCoin response envelope.

        Raises:
            ValueError: If the envelope is malformed or reports an error code.
        """
        if not isinstance(payload, dict) or "code" not in payload:
            raise ValueError("Invalid KuCoin response: missing envelope")
        if str(payload["code"]) != SUCCESS_CODE:
            raise ValueError(
                f"KuCoin error {payload['code']}: {payload.get('msg', 'unknown')}"
            )
        if payload.get("data") is None:
            raise ValueError("Invalid KuCoin response: missing data")
        return payload["data"]

    def signed_headers(self, method: str, path_with_query: str, body: str = "") -> Dict[str, str]:
        """
        Build KuCoin authentication headers.

        Args:
            method: HTTP method in upper case.
            path_with_query: Request path including the query string.
            body: Raw request body (empty for GET).

        Returns:
            Dict[str, str]: KC-API-* headers.

        Raises:
            ValueError: If credentials (including passphrase) are missing.
        """
        if self.credentials is None or self.credentials.passphrase is None:
            raise ValueError("KuCoin credentials are not configured")

        secret = self.credentials.api_secret.get_secret_value()
        timestamp = str(int(self._clock() * 1000))
        return {
            "KC-API-KEY": self.credentials.api_key.get_secret_value(),
            "KC-API-SIGN": _b64_hmac(secret, f"{timestamp}{method}{path_with_query}{body}"),
            "KC-API-TIMESTAMP": timestamp,
            "KC-API-PASSPHRASE": _b64_hmac(
                secret, self.credentials.passphrase.get_secret_value()
            ),
            "KC-API-KEY-VERSION": "2",
            "Content-Type": "application/json",
        }

    async def _public_get(self, endpoint: str, params: Dict[str, Any]) -> Any:
        return self.unwrap(await self._request("GET", endpoint, params))

    async def _signed_get(self, endpoint: str, params: Dict[str, Any]) -> Any:
        path = f"{endpoint}?{urlencode(params)}"
        headers = self.signed_headers("GET", path)
        return self.unwrap(await self._request("GET", path, headers=headers))

    async def get_stats(self, symbol: str) -> Dict[str, Any]:
        """Fetch 24h statistics."""
        return await self._public_get("/api/v1/market/stats", {"symbol": symbol})

    async def get_orderbook(self, symbol: str) -> Dict[str, Any]:
        """Fetch the top-100 order book snapshot."""
        return await self._public_get(
            "/api/v1/market/orderbook/level2_100", {"symbol": symbol}
        )

    async def get_trade_histories(self, symbol: str) -> Any:
        """Fetch recent public trades (most recent 100)."""
        return await self._public_get("/api/v1/market/histories", {"symbol": symbol})

    async def get_accounts(self) -> Any:
        """Fetch trading account balances (signed)."""
        return await self._signed_get("/api/v1/accounts", {"type": "trade"})

    async def get_active_orders(self, symbol: str) -> Any:
        """Fetch active orders for a symbol (signed)."""
        return await self._signed_get(
            "/api/v1/orders", {"status": "active", "symbol": symbol}
        )
