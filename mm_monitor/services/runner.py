"""
Monitor runner: one batch run or one maintenance pass.

A run reads the config table once, processes every enabled venue as an
independent asyncio task, then dispatches the collected candidates
sequentially. A venue failure is logged and never affects the other venue;
store connectivity errors and unparsable settings abort the run.

Example:
    >>> runner = MonitorRunner(app_config, store)
    >>> summary = await runner.run_once()
    >>> summary.venues_processed
    ['mexc', 'kucoin']
"""

import asyncio
import time
from datetime import datetime, timezone
from typing import Callable, Dict, List

import structlog
from pydantic import BaseModel, Field

from mm_monitor.adapters import create_adapter
from mm_monitor.config.models import AppConfig, PairConfig, VenueConfig
from mm_monitor.config.settings import MonitorSettings
from mm_monitor.detection.channels.discord import create_discord_channel
from mm_monitor.detection.dispatcher import AlertDispatcher
from mm_monitor.detection.evaluator import create_evaluator
from mm_monitor.detection.recommendations import RecommendationManager
from mm_monitor.interfaces.exchange_adapter import ExchangeAdapter
from mm_monitor.models.alerts import AlertCandidate
from mm_monitor.services.pipeline import process_venue
from mm_monitor.storage.base import MonitorStore
from mm_monitor.storage.postgres_client import PostgresConnectionException

logger = structlog.get_logger(__name__)

AdapterFactory = Callable[[VenueConfig, PairConfig], ExchangeAdapter]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class RunSummary(BaseModel):
    """Outcome of one monitoring run."""

    model_config = {"frozen": True, "extra": "forbid"}

    enabled: bool = True
    venues_processed: List[str] = Field(default_factory=list)
    venues_failed: List[str] = Field(default_factory=list)
    alerts: int = 0
    suppressed: int = 0
    delivered: int = 0
    elapsed_ms: float = 0.0


class MonitorRunner:
    """
    Orchestrates a single monitoring run against a connected store.

    Attributes:
        config: Application configuration.
        store: Connected monitor store.
        adapter_factory: Builds a venue adapter (overridable in tests).
        clock: Returns the current UTC time.
    """

    def __init__(
        self,
        config: AppConfig,
        store: MonitorStore,
        adapter_factory: AdapterFactory = create_adapter,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.config = config
        self.store = store
        self.adapter_factory = adapter_factory
        self.clock = clock

    async def load_settings(self) -> MonitorSettings:
        """
        Read and parse the config table.

        Raises:
            SettingsError: If a value cannot be parsed.
        """
        raw = await self.store.load_config_values()
        return MonitorSettings.from_mapping(raw)

    async def _run_venue(
        self,
        venue_config: VenueConfig,
        settings: MonitorSettings,
        now: datetime,
    ) -> List[AlertCandidate]:
        adapter = self.adapter_factory(venue_config, self.config.pair)
        async with adapter:
            return await process_venue(
                venue_config,
                settings,
                adapter,
                self.store,
                self.config,
                now,
                evaluator=create_evaluator(self.config.monitoring),
            )

    async def run_once(self) -> RunSummary:
        """
        Execute one batch run.

        Returns:
            RunSummary: Venue, alert and timing counts.

        Raises:
            SettingsError: If the config table cannot be parsed.
            PostgresClientError: If the store is unreachable or fails.
        """
        start_time = time.monotonic()
        now = self.clock()
        settings = await self.load_settings()

        if not settings.monitoring_enabled:
            logger.info("monitoring_disabled")
            return RunSummary(enabled=False)

        venues = [
            venue_config
            for name, venue_config in self.config.venues.items()
            if settings.is_venue_enabled(name)
        ]
        logger.info("monitor_run_started", venues=[v.name for v in venues])

        results = await asyncio.gather(
            *(self._run_venue(v, settings, now) for v in venues),
            return_exceptions=True,
        )

        candidates: List[AlertCandidate] = []
        processed: List[str] = []
        failed: List[str] = []
        for venue_config, result in zip(venues, results):
            if isinstance(result, PostgresConnectionException):
                raise result
            if isinstance(result, BaseException):
                failed.append(venue_config.name)
                logger.error(
                    "venue_failed",
                    venue=venue_config.name,
                    error_type=type(result).__name__,
                    error=str(result),
                )
                continue
            processed.append(venue_config.name)
            candidates.extend(result)

        channel = None
        if settings.notifications_enabled:
            channel = create_discord_channel(
                settings.discord_webhook,
                self.config.pair.display,
                username=self.config.notification.username,
                timeout_seconds=self.config.notification.timeout_seconds,
            )
        dispatcher = AlertDispatcher(
            self.store,
            channel=channel,
            cooldown_minutes=settings.alert_cooldown_minutes,
        )
        dispatch = await dispatcher.dispatch_all(candidates, now)

        elapsed_ms = round((time.monotonic() - start_time) * 1000, 2)
        summary = RunSummary(
            venues_processed=processed,
            venues_failed=failed,
            alerts=dispatch.logged,
            suppressed=dispatch.suppressed,
            delivered=dispatch.delivered,
            elapsed_ms=elapsed_ms,
        )

        active = await self.store.fetch_active_recommendations(now)
        logger.info(
            "monitor_run_completed",
            venues_processed=processed,
            venues_failed=failed,
            candidates=dispatch.received,
            alerts=dispatch.logged,
            suppressed=dispatch.suppressed,
            delivered=dispatch.delivered,
            active_recommendations=len(active),
            elapsed_ms=elapsed_ms,
        )
        return summary

    async def cleanup(self) -> Dict[str, int]:
        """
        Prune rows past retention and expire stale recommendations.

        Returns:
            Dict[str, int]: Deleted rows per table plus "recommendations_expired".
        """
        now = self.clock()
        deleted = await self.store.cleanup_old_data(self.config.retention, now)
        expired = await RecommendationManager(self.store).expire_stale(now)
        result = dict(deleted)
        result["recommendations_expired"] = expired
        logger.info("cleanup_completed", **result)
        return result

