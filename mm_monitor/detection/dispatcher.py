"""
Cooldown check and notification dispatch for alert candidates.

This module provides the AlertDispatcher class which decides, per candidate,
whether it is suppressed by the cooldown, then delivers it to the
notification channel and records it in the alert log.

Key Features:
    - Cooldown keyed on alert type only (any venue counts)
    - Best-effort delivery; failures only flip the delivered flag
    - Every surviving candidate is logged, delivered or not

Example:
    >>> dispatcher = AlertDispatcher(store, channel, cooldown_minutes=30)
    >>> summary = await dispatcher.dispatch_all(candidates, now)
    >>> summary.suppressed
    1
"""

from datetime import datetime, timedelta
from typing import Optional, Protocol, Sequence

import structlog
from pydantic import BaseModel

from mm_monitor.models.alerts import AlertCandidate, AlertLogEntry
from mm_monitor.storage.base import MonitorStore

logger = structlog.get_logger(__name__)


class AlertChannel(Protocol):
    """
    Protocol for alert notification channels.

    `send` must not raise; it reports delivery success as a bool.
    """

    async def send(self, candidate: AlertCandidate) -> bool:
        """Deliver an alert to the channel."""
        ...


class DispatchSummary(BaseModel):
    """Counts for one dispatch pass."""

    model_config = {"frozen": True, "extra": "forbid"}

    received: int = 0
    suppressed: int = 0
    logged: int = 0
    delivered: int = 0


class AlertDispatcher:
    """
    Applies the cooldown, then notifies and logs surviving candidates.

    Candidates are processed sequentially so an alert logged for one venue
    suppresses the same type for the next venue within the same run.

    Attributes:
        store: Store holding the alert log.
        channel: Notification channel, or None when delivery is disabled.
        cooldown: Lookback window for same-type alerts.
    """

    def __init__(
        self,
        store: MonitorStore,
        channel: Optional[AlertChannel] = None,
        cooldown_minutes: int = 30,
    ) -> None:
        self.store = store
        self.channel = channel
        self.cooldown = timedelta(minutes=cooldown_minutes)

    async def is_suppressed(self, candidate: AlertCandidate, now: datetime) -> bool:
        """
        Check whether a same-type alert was logged within the cooldown window.

        Args:
            candidate: Alert to check.
            now: Reference time (UTC).

        Returns:
            bool: True when the candidate must be dropped.
        """
        if self.cooldown <= timedelta(0):
            return False
        recent = await self.store.count_alerts_since(
            candidate.alert_type, now - self.cooldown
        )
        return recent > 0

    async def dispatch(self, candidate: AlertCandidate, now: datetime) -> Optional[AlertLogEntry]:
        """
        Process one candidate.

        Args:
            candidate: Alert to process.
            now: Run time (UTC), used for the cooldown and the log entry.

        Returns:
            Optional[AlertLogEntry]: The logged entry, or None if suppressed.
        """
        if await self.is_suppressed(candidate, now):
            logger.info(
                "alert_suppressed",
                reason="cooldown",
                alert_type=candidate.alert_type.value,
                venue=candidate.venue,
                cooldown_minutes=int(self.cooldown.total_seconds() // 60),
            )
            return None

        delivered = False
        if self.channel is not None:
            delivered = await self.channel.send(candidate)

        entry = AlertLogEntry.from_candidate(candidate, delivered=delivered, created_at=now)
        await self.store.insert_alert_log(entry)

        logger.info(
            "alert_dispatched",
            alert_type=candidate.alert_type.value,
            severity=candidate.severity.value,
            venue=candidate.venue,
            delivered=delivered,
        )
        return entry

    async def dispatch_all(
        self, candidates: Sequence[AlertCandidate], now: datetime
    ) -> DispatchSummary:
        """
        Process candidates in order.

        Returns:
            DispatchSummary: Received, suppressed, logged and delivered counts.
        """
        suppressed = logged = delivered = 0
        for candidate in candidates:
            entry = await self.dispatch(candidate, now)
            if entry is None:
                suppressed += 1
                continue
            logged += 1
            if entry.delivered:
                delivered += 1

        return DispatchSummary(
            received=len(candidates),
            suppressed=suppressed,
            logged=logged,
            delivered=delivered,
        )
