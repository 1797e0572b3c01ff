"""
Storage contract for the liquidity monitor.

The monitor only talks to its store through this protocol. PostgresClient is
the production implementation; tests use an in-memory implementation.

Every method is a single atomic operation. Implementations raise their own
connection errors (fatal for the run) and operation errors.
"""

from datetime import datetime
from typing import Dict, List, Optional, Protocol, Sequence

from mm_monitor.config.models import RetentionConfig
from mm_monitor.models.alerts import AlertLogEntry, AlertType
from mm_monitor.models.market import MarketSnapshot, TradeRecord
from mm_monitor.models.metrics import DepthMeasurement, MetricsSnapshot
from mm_monitor.models.recommendations import (
    Recommendation,
    RecommendationCategory,
    RecommendationRequest,
)
from mm_monitor.models.user import OpenOrder, UserDepthShare, UserPosition


class MonitorStore(Protocol):
    """Persistence operations used by a monitoring run."""

    async def load_config_values(self) -> Dict[str, Optional[str]]:
        """Read the whole config table as key -> text value."""
        ...

    async def insert_market_snapshot(self, snapshot: MarketSnapshot) -> None:
        ...

    async def insert_depth_measurements(
        self, depths: Sequence[DepthMeasurement]
    ) -> int:
        ...

    async def insert_trades(self, trades: Sequence[TradeRecord]) -> int:
        """Insert trades, ignoring (venue, trade_id) repeats. Returns rows added."""
        ...

    async def fetch_snapshots(
        self, venue: str, since: datetime
    ) -> List[MarketSnapshot]:
        """Snapshots for a venue with timestamp strictly after `since`."""
        ...

    async def fetch_trades(self, venue: str, since: datetime) -> List[TradeRecord]:
        """Trades for a venue with trade_time strictly after `since`."""
        ...

    async def insert_metrics(self, metrics: MetricsSnapshot) -> None:
        ...

    async def insert_user_position(self, position: UserPosition) -> None:
        ...

    async def replace_open_orders(
        self, venue: str, orders: Sequence[OpenOrder]
    ) -> int:
        """Clear the venue's stored open orders, then insert the given ones."""
        ...

    async def insert_user_depth_shares(
        self, shares: Sequence[UserDepthShare]
    ) -> int:
        ...

    async def count_alerts_since(self, alert_type: AlertType, since: datetime) -> int:
        """Number of logged alerts of a type created strictly after `since`."""
        ...

    async def insert_alert_log(self, entry: AlertLogEntry) -> None:
        ...

    async def deactivate_recommendations(
        self, venue: Optional[str], category: RecommendationCategory
    ) -> int:
        """Deactivate active rows for (venue, category); a None venue matches None."""
        ...

    async def insert_recommendation(
        self,
        request: RecommendationRequest,
        created_at: datetime,
        expires_at: Optional[datetime],
    ) -> Recommendation:
        ...

    async def fetch_active_recommendations(
        self, now: datetime
    ) -> List[Recommendation]:
        """Active, unexpired recommendations, highest priority first."""
        ...

    async def expire_recommendations(self, now: datetime) -> int:
        """Deactivate active rows whose expiry has passed."""
        ...

    async def cleanup_old_data(
        self, retention: RetentionConfig, now: datetime
    ) -> Dict[str, int]:
        """Delete rows older than their retention window; counts per table."""
        ...
