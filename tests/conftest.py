"""Shared fixtures: an in-memory MonitorStore and default configuration."""

from datetime import datetime, timedelta
from typing import Dict, List, Optional, Sequence, Tuple

import pytest

from factories import make_app_config
from mm_monitor.config.models import AppConfig, RetentionConfig
from mm_monitor.models.alerts import AlertLogEntry, AlertType
from mm_monitor.models.market import MarketSnapshot, TradeRecord
from mm_monitor.models.metrics import DepthMeasurement, MetricsSnapshot
from mm_monitor.models.recommendations import (
    Recommendation,
    RecommendationCategory,
    RecommendationRequest,
)
from mm_monitor.models.user import OpenOrder, UserDepthShare, UserPosition


class InMemoryStore:
    """MonitorStore backed by lists, mirroring the Postgres semantics."""

    def __init__(self, config_values: Optional[Dict[str, Optional[str]]] = None) -> None:
        self.config_values: Dict[str, Optional[str]] = dict(config_values or {})
        self.snapshots: List[MarketSnapshot] = []
        self.depths: List[DepthMeasurement] = []
        self.trades: Dict[Tuple[str, str], TradeRecord] = {}
        self.trade_recorded_at: Dict[Tuple[str, str], datetime] = {}
        self.metrics: List[MetricsSnapshot] = []
        self.positions: List[UserPosition] = []
        self.open_orders: Dict[str, List[OpenOrder]] = {}
        self.depth_shares: List[UserDepthShare] = []
        self.alerts: List[AlertLogEntry] = []
        self.recommendations: List[Recommendation] = []
        self._next_id = 1

    async def load_config_values(self) -> Dict[str, Optional[str]]:
        return dict(self.config_values)

    async def insert_market_snapshot(self, snapshot: MarketSnapshot) -> None:
        self.snapshots.append(snapshot)

    async def insert_depth_measurements(self, depths: Sequence[DepthMeasurement]) -> int:
        self.depths.extend(depths)
        return len(depths)

    async def insert_trades(self, trades: Sequence[TradeRecord]) -> int:
        inserted = 0
        for trade in trades:
            key = (trade.venue, trade.trade_id)
            if key in self.trades:
                continue
            self.trades[key] = trade
            self.trade_recorded_at[key] = trade.trade_time
            inserted += 1
        return inserted

    async def fetch_snapshots(self, venue: str, since: datetime) -> List[MarketSnapshot]:
        return [s for s in self.snapshots if s.venue == venue and s.timestamp > since]

    async def fetch_trades(self, venue: str, since: datetime) -> List[TradeRecord]:
        return [t for t in self.trades.values() if t.venue == venue and t.trade_time > since]

    async def insert_metrics(self, metrics: MetricsSnapshot) -> None:
        self.metrics.append(metrics)

    async def insert_user_position(self, position: UserPosition) -> None:
        self.positions.append(position)

    async def replace_open_orders(self, venue: str, orders: Sequence[OpenOrder]) -> int:
        self.open_orders[venue] = list(orders)
        return len(orders)

    async def insert_user_depth_shares(self, shares: Sequence[UserDepthShare]) -> int:
        self.depth_shares.extend(shares)
        return len(shares)

    async def count_alerts_since(self, alert_type: AlertType, since: datetime) -> int:
        return sum(
            1 for a in self.alerts if a.alert_type == alert_type and a.created_at > since
        )

    async def insert_alert_log(self, entry: AlertLogEntry) -> None:
        self.alerts.append(entry)

    async def deactivate_recommendations(
        self, venue: Optional[str], category: RecommendationCategory
    ) -> int:
        count = 0
        for index, rec in enumerate(self.recommendations):
            if rec.is_active and rec.venue == venue and rec.category == category:
                self.recommendations[index] = rec.model_copy(update={"is_active": False})
                count += 1
        return count

    async def insert_recommendation(
        self,
        request: RecommendationRequest,
        created_at: datetime,
        expires_at: Optional[datetime],
    ) -> Recommendation:
        rec = Recommendation(
            id=self._next_id,
            venue=request.venue,
            category=request.category,
            action=request.action,
            reason=request.reason,
            priority=request.priority,
            created_at=created_at,
            expires_at=expires_at,
        )
        self._next_id += 1
        self.recommendations.append(rec)
        return rec

    async def fetch_active_recommendations(self, now: datetime) -> List[Recommendation]:
        active = [r for r in self.recommendations if r.is_active and not r.is_expired(now)]
        return sorted(active, key=lambda r: (-r.priority, -r.created_at.timestamp()))

    async def expire_recommendations(self, now: datetime) -> int:
        count = 0
        for index, rec in enumerate(self.recommendations):
            if rec.is_active and rec.is_expired(now):
                self.recommendations[index] = rec.model_copy(update={"is_active": False})
                count += 1
        return count

    async def cleanup_old_data(
        self, retention: RetentionConfig, now: datetime
    ) -> Dict[str, int]:
        def cutoff(days: int) -> datetime:
            return now - timedelta(days=days)

        before = len(self.snapshots)
        self.snapshots = [
            s for s in self.snapshots if s.timestamp >= cutoff(retention.market_snapshots_days)
        ]
        snapshots_deleted = before - len(self.snapshots)

        old_trades = [
            key
            for key, recorded_at in self.trade_recorded_at.items()
            if recorded_at < cutoff(retention.trades_days)
        ]
        for key in old_trades:
            del self.trades[key]
            del self.trade_recorded_at[key]

        before = len(self.alerts)
        self.alerts = [a for a in self.alerts if a.created_at >= cutoff(retention.alerts_days)]
        alerts_deleted = before - len(self.alerts)

        return {
            "market_snapshots": snapshots_deleted,
            "trades": len(old_trades),
            "alerts_log": alerts_deleted,
        }

    def active_recommendations(self) -> List[Recommendation]:
        return [r for r in self.recommendations if r.is_active]


@pytest.fixture
def store() -> InMemoryStore:
    """Empty in-memory store."""
    return InMemoryStore()


@pytest.fixture
def app_config() -> AppConfig:
    """Two venues without credentials, default bands."""
    return make_app_config()
