"""
Per-venue processing for one monitoring run.

process_venue is the unit the runner schedules once per enabled venue:

    1. Fetch ticker, order book and trades concurrently
    2. Build and store the market snapshot and depth measurements
    3. Store new trades, recompute and store rolling metrics
    4. Track operator liquidity when credentials are configured
    5. Evaluate alert rules and upsert recommendations

It returns the venue's alert candidates; the runner dispatches them after
all venues finish.
"""

import asyncio
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

import structlog

from mm_monitor.config.models import AppConfig, VenueConfig
from mm_monitor.config.settings import MonitorSettings
from mm_monitor.detection.evaluator import AlertEvaluator, create_evaluator
from mm_monitor.detection.recommendations import RecommendationManager
from mm_monitor.interfaces.exchange_adapter import ExchangeAdapter
from mm_monitor.metrics.depth import DepthCalculator
from mm_monitor.metrics.liquidity import UserLiquidityTracker
from mm_monitor.metrics.rolling import RollingMetricsCalculator
from mm_monitor.metrics.spread import SpreadCalculator
from mm_monitor.models.alerts import AlertCandidate
from mm_monitor.models.metrics import DepthMeasurement
from mm_monitor.models.user import UserLiquidity
from mm_monitor.storage.base import MonitorStore

logger = structlog.get_logger(__name__)


async def _track_user_liquidity(
    venue: str,
    adapter: ExchangeAdapter,
    store: MonitorStore,
    tracker: UserLiquidityTracker,
    mid_price: Decimal,
    depths: List[DepthMeasurement],
    now: datetime,
) -> UserLiquidity:
    balances, orders = await asyncio.gather(
        adapter.fetch_balances(),
        adapter.fetch_open_orders(),
    )
    liquidity = tracker.track(venue, balances, orders, mid_price, depths, now)

    if liquidity.position is not None:
        await store.insert_user_position(liquidity.position)
    if orders is not None:
        await store.replace_open_orders(venue, liquidity.open_orders)
        await store.insert_user_depth_shares(liquidity.depth_shares)

    logger.info(
        "user_liquidity_tracked",
        venue=venue,
        position_value=(
            str(liquidity.position.total_value) if liquidity.position else None
        ),
        open_orders=len(liquidity.open_orders),
    )
    return liquidity


async def process_venue(
    venue_config: VenueConfig,
    settings: MonitorSettings,
    adapter: ExchangeAdapter,
    store: MonitorStore,
    app_config: AppConfig,
    now: datetime,
    evaluator: Optional[AlertEvaluator] = None,
) -> List[AlertCandidate]:
    """
    Run the full pipeline for one venue.

    Args:
        venue_config: Venue bootstrap configuration.
        settings: Thresholds for this run.
        adapter: Venue adapter.
        store: Monitor store.
        app_config: Application configuration (pair, bands).
        now: Run time (UTC).
        evaluator: Alert evaluator; built from app_config if None.

    Returns:
        List[AlertCandidate]: Candidates for the dispatcher; empty when the
            venue was skipped.

    Raises:
        PostgresClientError: Store failures propagate to the runner.
    """
    venue = venue_config.name
    evaluator = evaluator or create_evaluator(app_config.monitoring)

    ticker, book, trades = await asyncio.gather(
        adapter.fetch_ticker(),
        adapter.fetch_order_book(venue_config.book_depth),
        adapter.fetch_recent_trades(venue_config.trade_limit),
    )

    if ticker is None or book is None:
        logger.warning(
            "venue_skipped",
            venue=venue,
            ticker_available=ticker is not None,
            book_available=book is not None,
        )
        return []

    snapshot = SpreadCalculator().build_snapshot(ticker, book)
    await store.insert_market_snapshot(snapshot)

    depths = DepthCalculator(app_config.monitoring.depth_bands).calculate(book)
    await store.insert_depth_measurements(depths)

    if trades:
        inserted = await store.insert_trades(trades)
        logger.debug("venue_trades_stored", venue=venue, received=len(trades), inserted=inserted)

    calculator = RollingMetricsCalculator()
    since = now - calculator.history_window
    history, trade_history = await asyncio.gather(
        store.fetch_snapshots(venue, since),
        store.fetch_trades(venue, since),
    )
    metrics = calculator.calculate(venue, history, trade_history, now)
    await store.insert_metrics(metrics)

    liquidity: Optional[UserLiquidity] = None
    if adapter.has_credentials:
        liquidity = await _track_user_liquidity(
            venue,
            adapter,
            store,
            UserLiquidityTracker(app_config.pair),
            snapshot.mid_price,
            depths,
            now,
        )

    result = evaluator.evaluate(settings, snapshot, depths, liquidity, metrics)
    await RecommendationManager(store).upsert_all(result.recommendations, now)

    logger.info(
        "venue_processed",
        venue=venue,
        spread_percent=f"{snapshot.spread_percent:.4f}",
        alert_band_depth=next(
            (str(d.total_value) for d in depths if d.band_percent == evaluator.alert_band),
            None,
        ),
        alerts=len(result.alerts),
        recommendations=len(result.recommendations),
    )
    return result.alerts
