"""
Discord webhook channel.

Posts one embed per alert. Delivery is best-effort: failures are logged and
reported as False, never raised and never retried.

Embed layout:
    title:  "<PAIR> MM Alert: <ALERT_TYPE>"
    color:  severity color (info blue, warning yellow, critical red)
    fields: the alert's detail fields, in order
    footer: "<PAIR> MM Monitor - <VENUE>"
"""

import asyncio
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import aiohttp
import structlog

from mm_monitor.models.alerts import AlertCandidate, AlertSeverity

logger = structlog.get_logger(__name__)

SEVERITY_COLORS: Dict[AlertSeverity, int] = {
    AlertSeverity.INFO: 3447003,
    AlertSeverity.WARNING: 16776960,
    AlertSeverity.CRITICAL: 15158332,
}

DISCORD_URL_PREFIX = "https://discord"


class DiscordChannel:
    """
    Sends alert embeds to a Discord webhook.

    Attributes:
        webhook_url: Discord webhook URL.
        pair: Pair label used in title and footer (e.g., "ERG/USDT").
        username: Bot display name.
        timeout_seconds: Total request timeout.

    Example:
        >>> channel = DiscordChannel("https://discord.com/api/webhooks/...", "ERG/USDT")
        >>> delivered = await channel.send(candidate)
    """

    def __init__(
        self,
        webhook_url: str,
        pair: str,
        username: str = "ERGO MM Bot",
        timeout_seconds: int = 30,
        session: Optional[aiohttp.ClientSession] = None,
    ) -> None:
        self.webhook_url = webhook_url
        self.pair = pair
        self.username = username
        self.timeout_seconds = timeout_seconds
        self._session = session

    @staticmethod
    def accepts(webhook_url: str) -> bool:
        """Only Discord webhook URLs are delivered to."""
        return bool(webhook_url) and webhook_url.startswith(DISCORD_URL_PREFIX)

    def build_payload(
        self, candidate: AlertCandidate, now: Optional[datetime] = None
    ) -> Dict[str, Any]:
        """
        Build the webhook JSON body for an alert.

        Args:
            candidate: Alert to render.
            now: Embed timestamp (defaults to current UTC time).

        Returns:
            Dict[str, Any]: Webhook payload.
        """
        timestamp = now or datetime.now(timezone.utc)
        venue_label = candidate.venue.upper() if candidate.venue else "ALL"
        return {
            "username": self.username,
            "embeds": [
                {
                    "title": f"{self.pair} MM Alert: {candidate.alert_type.value}",
                    "description": candidate.message,
                    "color": SEVERITY_COLORS[candidate.severity],
                    "fields": [
                        {
                            "name": field.name,
                            "value": field.value,
                            "inline": field.inline,
                        }
                        for field in candidate.fields
                    ],
                    "footer": {"text": f"{self.pair} MM Monitor - {venue_label}"},
                    "timestamp": timestamp.isoformat(),
                }
            ],
        }

    async def send(self, candidate: AlertCandidate) -> bool:
        """
        Deliver an alert.

        Args:
            candidate: Alert to deliver.

        Returns:
            bool: True on a 2xx response, False otherwise.
        """
        if not self.accepts(self.webhook_url):
            return False

        payload = self.build_payload(candidate)
        timeout = aiohttp.ClientTimeout(total=self.timeout_seconds)

        try:
            if self._session is not None:
                return await self._post(self._session, payload, timeout, candidate)
            async with aiohttp.ClientSession() as session:
                return await self._post(session, payload, timeout, candidate)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.warning(
                "discord_delivery_failed",
                alert_type=candidate.alert_type.value,
                venue=candidate.venue,
                error=str(e) or type(e).__name__,
            )
            return False

    async def _post(
        self,
        session: aiohttp.ClientSession,
        payload: Dict[str, Any],
        timeout: aiohttp.ClientTimeout,
        candidate: AlertCandidate,
    ) -> bool:
        async with session.post(self.webhook_url, json=payload, timeout=timeout) as response:
            if 200 <= response.status < 300:
                logger.debug(
                    "discord_alert_sent",
                    alert_type=candidate.alert_type.value,
                    venue=candidate.venue,
                )
                return True

            body = await response.text()
            logger.warning(
                "discord_delivery_rejected",
                alert_type=candidate.alert_type.value,
                status=response.status,
                body=body[:200],
            )
            return False

    def __repr__(self) -> str:
        """String representation without the webhook secret."""
        return f"DiscordChannel(pair={self.pair}, username={self.username})"


def create_discord_channel(
    webhook_url: str,
    pair: str,
    username: str = "ERGO MM Bot",
    timeout_seconds: int = 30,
) -> Optional[DiscordChannel]:
    """
    Build a channel, or None when the URL is not a Discord webhook.
    """
    if not DiscordChannel.accepts(webhook_url):
        return None
    return DiscordChannel(webhook_url, pair, username, timeout_seconds)
