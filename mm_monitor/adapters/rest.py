"""
Shared async REST client for venue APIs.

Wraps an aiohttp ClientSession with a per-request timeout, simple time-based
rate limiting and uniform error mapping. Venue clients subclass it to add
endpoint paths and request signing.

Error mapping:
    - HTTP 429            -> RateLimitError (a ConnectionError)
    - HTTP >= 400         -> ConnectionError
    - aiohttp.ClientError -> ConnectionError
    - timeout             -> ConnectionError
    - non-JSON body       -> ValueError
"""

import asyncio
import json
from typing import Any, Dict, Optional

import aiohttp
import structlog

logger = structlog.get_logger(__name__)

USER_AGENT = "ErgoMMBot/1.0"


class RateLimitError(ConnectionError):
    """Raised when rate limit is exceeded."""

    pass


class RestClient:
    """
    Async REST API client base.

    Attributes:
        base_url: REST API base URL.
        rate_limit_per_second: Maximum requests per second.
        timeout_seconds: Total timeout per request.

    Example:
        >>> client = RestClient("https://api.mexc.com", timeout_seconds=30)
        >>> data = await client._request("GET", "/api/v3/ping")
        >>> await client.close()
    """

    def __init__(
        self,
        base_url: str,
        rate_limit_per_second: int = 10,
        timeout_seconds: int = 30,
    ):
        """
        Initialize REST client.

        Args:
            base_url: REST API base URL.
            rate_limit_per_second: Maximum requests per second.
            timeout_seconds: Request timeout in seconds.
        """
        self.base_url = base_url.rstrip("/")
        self.rate_limit_per_second = rate_limit_per_second
        self.timeout_seconds = timeout_seconds

        self._session: Optional[aiohttp.ClientSession] = None
        self._last_request_time: float = 0.0
        self._request_interval = 1.0 / rate_limit_per_second

    async def _ensure_session(self) -> aiohttp.ClientSession:
        """Ensure aiohttp session is created."""
        if self._session is None or self._session.closed:
            timeout = aiohttp.ClientTimeout(total=self.timeout_seconds)
            self._session = aiohttp.ClientSession(
                timeout=timeout,
                headers={"User-Agent": USER_AGENT},
            )
        return self._session

    async def close(self) -> None:
        """Close the HTTP session."""
        if self._session and not self._session.closed:
            await self._session.close()
            logger.debug("rest_client_session_closed", base_url=self.base_url)

    async def _rate_limit(self) -> None:
        """Ensure a minimum interval between requests."""
        loop = asyncio.get_running_loop()
        time_since_last = loop.time() - self._last_request_time

        if time_since_last < self._request_interval:
            await asyncio.sleep(self._request_interval - time_since_last)

        self._last_request_time = loop.time()

    async def _request(
        self,
        method: str,
        endpoint: str,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Any:
        """
        Make HTTP request with rate limiting and error handling.

        Args:
            method: HTTP method (GET, POST).
            endpoint: API endpoint path, optionally with a pre-encoded query.
            params: Query parameters.
            headers: Extra request headers (e.g., signatures).

        Returns:
            Any: Parsed JSON response.

        Raises:
            RateLimitError: If rate limited by the venue.
            ConnectionError: If the request fails or times out.
            ValueError: If the body is not valid JSON.
        """
        await self._rate_limit()

        session = await self._ensure_session()
        url = f"{self.base_url}{endpoint}"

        try:
            async with session.request(method, url, params=params, headers=headers) as response:
                if response.status == 429:
                    retry_after = response.headers.get("Retry-After", "60")
                    logger.warning(
                        "rest_rate_limited",
                        url=url,
                        retry_after=retry_after,
                    )
                    raise RateLimitError(f"Rate limited, retry after {retry_after}s")

                body = await response.text()

                if response.status >= 400:
                    logger.error(
                        "rest_request_failed",
                        url=url,
                        status=response.status,
                        error=body[:500],
                    )
                    raise ConnectionError(
                        f"REST request failed with status {response.status}: {body[:500]}"
                    )

        except aiohttp.ClientError as e:
            logger.error("rest_client_error", url=url, error=str(e))
            raise ConnectionError(f"REST request failed: {e}") from e
        except asyncio.TimeoutError as e:
            logger.error("rest_timeout", url=url, timeout=self.timeout_seconds)
            raise ConnectionError(
                f"REST request timeout after {self.timeout_seconds}s"
            ) from e

        try:
            return json.loads(body)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON from {url}: {e}") from e

    def __repr__(self) -> str:
        """Return string representation."""
        return (
            f"{type(self).__name__}(base_url={self.base_url}, "
            f"rate_limit={self.rate_limit_per_second}/s)"
        )
