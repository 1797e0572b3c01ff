"""
Rolling Metrics Calculator.

Recomputes trailing-window aggregates from stored history on every run. No
state is carried between runs: the caller loads the last 24 hours of market
snapshots and trades from the store and this module aggregates them.

Key Formulas:
    avg_spread_W     = mean(snapshot.spread_percent) over window W
    total_volume_W   = sum(trade.price * trade.amount) over window W
    trade_count_W    = count(trades) over window W
    price_range_24h  = (max(high_24h) - min(low_24h)) / mean(last_price) * 100
    volatility_1h    = pstdev(last_price) / mean(last_price) * 100

Windows are half-open: a record belongs to W when its time is strictly after
now - W. Empty windows produce zero.

Classes:
    RollingMetricsCalculator: Builds MetricsSnapshot from history
"""

import statistics
from datetime import datetime, timedelta
from decimal import Decimal
from typing import List, Sequence

from mm_monitor.models.market import MarketSnapshot, TradeRecord
from mm_monitor.models.metrics import MetricsSnapshot

ONE_HOUR = timedelta(hours=1)
ONE_DAY = timedelta(hours=24)


def _mean(values: Sequence[Decimal]) -> Decimal:
    if not values:
        return Decimal("0")
    return sum(values, Decimal("0")) / Decimal(len(values))


class RollingMetricsCalculator:
    """
    Calculator for trailing 1h/24h market metrics.

    Example:
        >>> calc = RollingMetricsCalculator()
        >>> metrics = calc.calculate("mexc", snapshots, trades, now)
        >>> metrics.trade_count_1h
        42
    """

    history_window: timedelta = ONE_DAY

    def calculate(
        self,
        venue: str,
        snapshots: Sequence[MarketSnapshot],
        trades: Sequence[TradeRecord],
        now: datetime,
    ) -> MetricsSnapshot:
        """
        Aggregate history into a MetricsSnapshot.

        Args:
            venue: Venue identifier.
            snapshots: Market snapshots for the venue (any range; filtered here).
            trades: Trades for the venue (any range; filtered here).
            now: Reference time (UTC).

        Returns:
            MetricsSnapshot: Aggregates stamped with `now`.
        """
        snapshots_1h = [s for s in snapshots if s.timestamp > now - ONE_HOUR]
        snapshots_24h = [s for s in snapshots if s.timestamp > now - ONE_DAY]
        trades_1h = [t for t in trades if t.trade_time > now - ONE_HOUR]
        trades_24h = [t for t in trades if t.trade_time > now - ONE_DAY]

        return MetricsSnapshot(
            venue=venue,
            timestamp=now,
            avg_spread_1h=_mean([s.spread_percent for s in snapshots_1h]),
            avg_spread_24h=_mean([s.spread_percent for s in snapshots_24h]),
            total_volume_1h=sum((t.quote_value for t in trades_1h), Decimal("0")),
            total_volume_24h=sum((t.quote_value for t in trades_24h), Decimal("0")),
            trade_count_1h=len(trades_1h),
            trade_count_24h=len(trades_24h),
            price_range_24h=self._price_range(snapshots_24h),
            volatility_1h=self._volatility(snapshots_1h),
        )

    @staticmethod
    def _price_range(snapshots: List[MarketSnapshot]) -> Decimal:
        """(max high - min low) / mean price * 100, or 0."""
        if not snapshots:
            return Decimal("0")
        mean_price = _mean([s.last_price for s in snapshots])
        if mean_price <= 0:
            return Decimal("0")
        high = max(s.high_24h for s in snapshots)
        low = min(s.low_24h for s in snapshots)
        return max((high - low) / mean_price * Decimal("100"), Decimal("0"))

    @staticmethod
    def _volatility(snapshots: List[MarketSnapshot]) -> Decimal:
        """Coefficient of variation of price in percent, or 0."""
        prices = [s.last_price for s in snapshots]
        if not prices:
            return Decimal("0")
        mean_price = _mean(prices)
        if mean_price <= 0:
            return Decimal("0")
        return statistics.pstdev(prices) / mean_price * Decimal("100")

    def __repr__(self) -> str:
        """String representation of the calculator."""
        return "RollingMetricsCalculator(windows=[1h, 24h])"
