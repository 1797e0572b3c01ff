"""
Shared Pydantic data models for the liquidity monitor.

All models use Decimal for financial precision.

Modules:
    orderbook: Order book snapshots and price levels
    market: Ticker, market snapshot and trade records
    metrics: Depth measurements and rolling metrics
    user: Operator balances, open orders and depth share
    alerts: Alert candidates and alert log entries
    recommendations: Recommendation lifecycle models

Example:
    >>> from mm_monitor.models import OrderBook, PriceLevel, DepthMeasurement
    >>> from mm_monitor.models import AlertCandidate, AlertSeverity
"""

from mm_monitor.models.alerts import (
    AlertCandidate,
    AlertField,
    AlertLogEntry,
    AlertSeverity,
    AlertType,
)
from mm_monitor.models.market import (
    MarketSnapshot,
    TickerSnapshot,
    TradeRecord,
    TradeSide,
)
from mm_monitor.models.metrics import (
    DepthMeasurement,
    MetricsSnapshot,
)
from mm_monitor.models.orderbook import (
    OrderBook,
    PriceLevel,
)
from mm_monitor.models.recommendations import (
    Recommendation,
    RecommendationAction,
    RecommendationCategory,
    RecommendationRequest,
)
from mm_monitor.models.user import (
    AssetBalance,
    OpenOrder,
    UserDepthShare,
    UserLiquidity,
    UserPosition,
)

__all__ = [
    # Order book
    "OrderBook",
    "PriceLevel",
    # Market
    "MarketSnapshot",
    "TickerSnapshot",
    "TradeRecord",
    "TradeSide",
    # Metrics
    "DepthMeasurement",
    "MetricsSnapshot",
    # User
    "AssetBalance",
    "OpenOrder",
    "UserDepthShare",
    "UserLiquidity",
    "UserPosition",
    # Alerts
    "AlertCandidate",
    "AlertField",
    "AlertLogEntry",
    "AlertSeverity",
    "AlertType",
    # Recommendations
    "Recommendation",
    "RecommendationAction",
    "RecommendationCategory",
    "RecommendationRequest",
]
