"""
AlertDispatcher tests.

Covers the cooldown window (keyed on alert type), delivery outcomes and the
alert log.
"""

import asyncio

import pytest

from factories import NOW, minutes_ago
from mm_monitor.detection import AlertDispatcher
from mm_monitor.models.alerts import (
    AlertCandidate,
    AlertLogEntry,
    AlertSeverity,
    AlertType,
)


class RecordingChannel:
    """Channel that records candidates and reports a fixed outcome."""

    def __init__(self, delivered: bool = True) -> None:
        self.delivered = delivered
        self.sent = []

    async def send(self, candidate: AlertCandidate) -> bool:
        self.sent.append(candidate)
        return self.delivered


def _make_candidate(
    alert_type: AlertType = AlertType.SPREAD_CRITICAL,
    venue: str = "mexc",
) -> AlertCandidate:
    return AlertCandidate(
        alert_type=alert_type,
        severity=AlertSeverity.CRITICAL,
        venue=venue,
        message=f"CRITICAL: {venue.upper()} {alert_type.value}",
    )


def _log_previous(store, alert_type: AlertType, minutes: int, venue: str = "mexc") -> None:
    store.alerts.append(
        AlertLogEntry.from_candidate(
            _make_candidate(alert_type, venue),
            delivered=True,
            created_at=minutes_ago(minutes),
        )
    )


@pytest.fixture
def channel():
    return RecordingChannel()


def test_recent_same_type_alert_suppresses(store, channel):
    _log_previous(store, AlertType.SPREAD_CRITICAL, minutes=5)
    dispatcher = AlertDispatcher(store, channel, cooldown_minutes=30)

    summary = asyncio.run(dispatcher.dispatch_all([_make_candidate()], NOW))

    assert summary.received == 1
    assert summary.suppressed == 1
    assert summary.logged == 0
    assert channel.sent == []
    assert len(store.alerts) == 1


def test_alert_after_cooldown_is_sent(store, channel):
    _log_previous(store, AlertType.SPREAD_CRITICAL, minutes=31)
    dispatcher = AlertDispatcher(store, channel, cooldown_minutes=30)

    summary = asyncio.run(dispatcher.dispatch_all([_make_candidate()], NOW))

    assert summary.logged == 1
    assert summary.delivered == 1
    assert len(channel.sent) == 1
    assert store.alerts[-1].created_at == NOW
    assert store.alerts[-1].delivered is True


def test_cooldown_boundary_is_exclusive(store, channel):
    _log_previous(store, AlertType.SPREAD_CRITICAL, minutes=30)
    dispatcher = AlertDispatcher(store, channel, cooldown_minutes=30)

    entry = asyncio.run(dispatcher.dispatch(_make_candidate(), NOW))

    assert entry is not None


def test_other_alert_types_do_not_suppress(store, channel):
    _log_previous(store, AlertType.DEPTH_WARNING, minutes=1)
    dispatcher = AlertDispatcher(store, channel, cooldown_minutes=30)

    entry = asyncio.run(dispatcher.dispatch(_make_candidate(AlertType.SPREAD_CRITICAL), NOW))

    assert entry is not None
    assert entry.alert_type == AlertType.SPREAD_CRITICAL


def test_same_type_on_other_venue_suppresses(store, channel):
    _log_previous(store, AlertType.SPREAD_CRITICAL, minutes=5, venue="kucoin")
    dispatcher = AlertDispatcher(store, channel, cooldown_minutes=30)

    assert asyncio.run(dispatcher.dispatch(_make_candidate(venue="mexc"), NOW)) is None


def test_second_venue_in_same_run_is_suppressed(store, channel):
    dispatcher = AlertDispatcher(store, channel, cooldown_minutes=30)
    candidates = [_make_candidate(venue="mexc"), _make_candidate(venue="kucoin")]

    summary = asyncio.run(dispatcher.dispatch_all(candidates, NOW))

    assert summary.logged == 1
    assert summary.suppressed == 1
    assert [a.venue for a in store.alerts] == ["mexc"]


def test_zero_cooldown_never_suppresses(store, channel):
    _log_previous(store, AlertType.SPREAD_CRITICAL, minutes=0)
    dispatcher = AlertDispatcher(store, channel, cooldown_minutes=0)
    candidates = [_make_candidate(venue="mexc"), _make_candidate(venue="kucoin")]

    summary = asyncio.run(dispatcher.dispatch_all(candidates, NOW))

    assert summary.suppressed == 0
    assert summary.logged == 2


def test_failed_delivery_is_still_logged(store):
    channel = RecordingChannel(delivered=False)
    dispatcher = AlertDispatcher(store, channel, cooldown_minutes=30)

    summary = asyncio.run(dispatcher.dispatch_all([_make_candidate()], NOW))

    assert summary.logged == 1
    assert summary.delivered == 0
    assert store.alerts[0].delivered is False


def test_failed_delivery_still_starts_cooldown(store):
    dispatcher = AlertDispatcher(store, RecordingChannel(delivered=False), cooldown_minutes=30)
    asyncio.run(dispatcher.dispatch(_make_candidate(), minutes_ago(10)))

    assert asyncio.run(dispatcher.dispatch(_make_candidate(), NOW)) is None


def test_without_channel_alerts_are_logged_undelivered(store):
    dispatcher = AlertDispatcher(store, channel=None, cooldown_minutes=30)

    entry = asyncio.run(dispatcher.dispatch(_make_candidate(), NOW))

    assert entry.delivered is False
    assert store.alerts == [entry]
