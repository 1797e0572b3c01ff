"""Discord channel tests: embed payload format and delivery outcomes."""

import asyncio

import aiohttp
import pytest

from factories import NOW
from mm_monitor.detection.channels import SEVERITY_COLORS, DiscordChannel, create_discord_channel
from mm_monitor.models.alerts import AlertCandidate, AlertField, AlertSeverity, AlertType

WEBHOOK = "https://discord.com/api/webhooks/123/token"


class FakeResponse:
    def __init__(self, status: int, body: str = "") -> None:
        self.status = status
        self._body = body

    async def text(self) -> str:
        return self._body

    async def __aenter__(self) -> "FakeResponse":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        return None


class FakeSession:
    """Stands in for aiohttp.ClientSession.post."""

    def __init__(self, status: int = 204, error: Exception = None) -> None:
        self.status = status
        self.error = error
        self.posted = []

    def post(self, url, json=None, timeout=None):
        self.posted.append((url, json))
        if self.error is not None:
            raise self.error
        return FakeResponse(self.status, body="rejected")


@pytest.fixture
def candidate():
    return AlertCandidate(
        alert_type=AlertType.SPREAD_CRITICAL,
        severity=AlertSeverity.CRITICAL,
        venue="mexc",
        message="CRITICAL: MEXC spread at 4.00% (threshold: 3.00%)",
        fields=[
            AlertField(name="Current Spread", value="4.0000%"),
            AlertField(name="Bid", value="$0.9800"),
        ],
    )


def test_payload_format(candidate):
    channel = DiscordChannel(WEBHOOK, "ERG/USDT")

    payload = channel.build_payload(candidate, now=NOW)

    assert payload["username"] == "ERGO MM Bot"
    (embed,) = payload["embeds"]
    assert embed["title"] == "ERG/USDT MM Alert: SPREAD_CRITICAL"
    assert embed["description"] == candidate.message
    assert embed["color"] == 15158332
    assert embed["fields"] == [
        {"name": "Current Spread", "value": "4.0000%", "inline": True},
        {"name": "Bid", "value": "$0.9800", "inline": True},
    ]
    assert embed["footer"] == {"text": "ERG/USDT MM Monitor - MEXC"}
    assert embed["timestamp"] == "2026-01-15T12:00:00+00:00"


def test_all_venue_alerts_are_labelled_all(candidate):
    channel = DiscordChannel(WEBHOOK, "ERG/USDT", username="Desk Bot")
    payload = channel.build_payload(candidate.model_copy(update={"venue": None}), now=NOW)

    assert payload["username"] == "Desk Bot"
    assert payload["embeds"][0]["footer"]["text"] == "ERG/USDT MM Monitor - ALL"


def test_severity_colors():
    assert SEVERITY_COLORS[AlertSeverity.INFO] == 3447003
    assert SEVERITY_COLORS[AlertSeverity.WARNING] == 16776960
    assert SEVERITY_COLORS[AlertSeverity.CRITICAL] == 15158332


def test_send_success(candidate):
    session = FakeSession(status=204)
    channel = DiscordChannel(WEBHOOK, "ERG/USDT", session=session)

    assert asyncio.run(channel.send(candidate)) is True
    assert session.posted[0][0] == WEBHOOK


def test_send_rejected_status_is_not_delivered(candidate):
    channel = DiscordChannel(WEBHOOK, "ERG/USDT", session=FakeSession(status=400))

    assert asyncio.run(channel.send(candidate)) is False


def test_send_transport_error_is_not_delivered(candidate):
    session = FakeSession(error=aiohttp.ClientConnectionError("connection reset"))
    channel = DiscordChannel(WEBHOOK, "ERG/USDT", session=session)

    assert asyncio.run(channel.send(candidate)) is False


def test_send_timeout_is_not_delivered(candidate):
    channel = DiscordChannel(WEBHOOK, "ERG/USDT", session=FakeSession(error=asyncio.TimeoutError()))

    assert asyncio.run(channel.send(candidate)) is False


def test_only_discord_urls_get_a_channel():
    assert create_discord_channel("", "ERG/USDT") is None
    assert create_discord_channel("https://hooks.slack.com/x", "ERG/USDT") is None
    assert isinstance(create_discord_channel(WEBHOOK, "ERG/USDT"), DiscordChannel)
