"""
Async PostgreSQL client for the liquidity monitor store.

This module provides the PostgresClient class, the production implementation
of the MonitorStore protocol. It owns the connection pool, applies the
schema, and reads and writes every table the monitor uses.

Key Tables:
    - config: Operator-editable key/value thresholds
    - market_snapshots: One row per venue per run
    - orderbook_depth: Cumulative depth per band per run
    - trades: Executed trades, unique per (exchange, trade_id)
    - market_metrics: Rolling 1h/24h aggregates
    - user_balances, user_open_orders, user_orderbook_depth: Operator liquidity
    - alerts_log: Alerts that passed the cooldown (audit + cooldown source)
    - recommendations: Recommendation lifecycle

Note:
    All financial values are stored as NUMERIC and read back as Decimal.

Example:
    >>> from mm_monitor.config.models import PostgresConnectionConfig
    >>> from mm_monitor.storage.postgres_client import PostgresClient
    >>>
    >>> client = PostgresClient(PostgresConnectionConfig(url="postgresql://..."))
    >>> await client.connect()
    >>> try:
    ...     values = await client.load_config_values()
    ... finally:
    ...     await client.disconnect()
"""

from __future__ import annotations

import asyncio
import json
import time
from contextlib import asynccontextmanager
from datetime import datetime, timedelta
from importlib import resources
from typing import Any, AsyncIterator, Dict, List, Optional, Sequence

import asyncpg
import structlog
from asyncpg import Connection, Pool, Record
from asyncpg.exceptions import (
    ConnectionDoesNotExistError,
    InterfaceError,
    PostgresError,
    TooManyConnectionsError,
)

from mm_monitor.config.models import PostgresConnectionConfig, RetentionConfig
from mm_monitor.config.settings import DEFAULT_SETTINGS
from mm_monitor.models.alerts import AlertLogEntry, AlertType
from mm_monitor.models.market import MarketSnapshot, TradeRecord, TradeSide
from mm_monitor.models.metrics import DepthMeasurement, MetricsSnapshot
from mm_monitor.models.recommendations import (
    Recommendation,
    RecommendationAction,
    RecommendationCategory,
    RecommendationRequest,
)
from mm_monitor.models.user import OpenOrder, UserDepthShare, UserPosition

logger = structlog.get_logger(__name__)


class PostgresClientError(Exception):
    """Base exception for PostgreSQL client errors."""

    pass


class PostgresConnectionException(PostgresClientError):
    """Raised when PostgreSQL connection fails."""

    pass


class PostgresOperationError(PostgresClientError):
    """Raised when a PostgreSQL operation fails."""

    pass


def _row_to_snapshot(row: Record) -> MarketSnapshot:
    return MarketSnapshot(
        venue=row["exchange"],
        pair=row["symbol"],
        timestamp=row["timestamp"],
        last_price=row["price"],
        bid_price=row["bid_price"],
        ask_price=row["ask_price"],
        spread=row["spread"],
        spread_percent=row["spread_percent"],
        volume_24h=row["volume_24h"],
        volume_24h_quote=row["volume_24h_usd"],
        high_24h=row["high_24h"],
        low_24h=row["low_24h"],
        price_change_24h=row["price_change_24h"],
        price_change_percent_24h=row["price_change_percent_24h"],
    )


def _row_to_recommendation(row: Record) -> Recommendation:
    return Recommendation(
        id=row["id"],
        venue=row["exchange"],
        category=RecommendationCategory(row["recommendation_type"]),
        action=RecommendationAction(row["action"]),
        reason=row["reason"],
        priority=row["priority"],
        is_active=row["is_active"],
        created_at=row["created_at"],
        expires_at=row["expires_at"],
    )


class PostgresClient:
    """
    Async PostgreSQL client implementing the MonitorStore protocol.

    Attributes:
        config: PostgreSQL connection configuration.
        symbol: Pair symbol written to rows that carry one (e.g., "ERG/USDT").
        _pool: Connection pool for efficient connection reuse.
        _connected: Whether the client is connected.

    Example:
        >>> client = PostgresClient(PostgresConnectionConfig(url="postgresql://..."))
        >>> await client.connect()
        >>> try:
        ...     await client.insert_market_snapshot(snapshot)
        ... finally:
        ...     await client.disconnect()
    """

    # Maximum retries for transient errors
    MAX_RETRIES = 3

    # Retry delay in seconds
    RETRY_DELAY = 0.5

    def __init__(
        self,
        config: PostgresConnectionConfig,
        symbol: str = "ERG/USDT",
    ) -> None:
        """
        Initialize the PostgreSQL client.

        Args:
            config: PostgreSQL connection configuration containing URL and pool settings.
            symbol: Pair symbol stored alongside market rows.
        """
        self.config = config
        self.symbol = symbol
        self._pool: Optional[Pool] = None
        self._connected: bool = False

        logger.info(
            "postgres_client_initialized",
            url=self._sanitize_url(config.url),
            pool_size=config.pool_size,
        )

    def _sanitize_url(self, url: str) -> str:
        """Sanitize URL for logging (remove password)."""
        if "@" in url:
            parts = url.split("@")
            if ":" in parts[0]:
                user_part = parts[0].rsplit(":", 1)[0]
                return f"{user_part}:***@{parts[1]}"
        return url

    @property
    def is_connected(self) -> bool:
        """True when the pool is open."""
        return self._connected and self._pool is not None

    async def connect(self) -> None:
        """
        Establish connection pool to PostgreSQL.

        Raises:
            PostgresConnectionException: If connection fails.
        """
        if self._connected:
            logger.warning("postgres_already_connected")
            return

        try:
            self._pool = await asyncpg.create_pool(
                dsn=self.config.url,
                min_size=1,
                max_size=self.config.pool_size + self.config.max_overflow,
                command_timeout=self.config.command_timeout,
                init=self._init_connection,
            )

            async with self._pool.acquire() as conn:
                await conn.fetchval("SELECT 1")

            self._connected = True
            logger.info("postgres_connected", url=self._sanitize_url(self.config.url))

        except (PostgresError, OSError, asyncio.TimeoutError) as e:
            self._connected = False
            logger.error(
                "postgres_connection_failed",
                url=self._sanitize_url(self.config.url),
                error=str(e),
            )
            raise PostgresConnectionException(
                f"Failed to connect to PostgreSQL: {e}"
            ) from e

    async def _init_connection(self, conn: Connection) -> None:
        """Set timezone to UTC for consistent timestamps."""
        await conn.execute("SET timezone = 'UTC'")

    async def disconnect(self) -> None:
        """
        Close the connection pool. Safe to call multiple times.
        """
        if self._pool is not None:
            try:
                await self._pool.close()
            except (PostgresError, OSError) as e:
                logger.warning("postgres_close_error", error=str(e))
            finally:
                self._pool = None

        self._connected = False
        logger.info("postgres_disconnected")

    async def __aenter__(self) -> "PostgresClient":
        await self.connect()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.disconnect()

    @asynccontextmanager
    async def _acquire_connection(self) -> AsyncIterator[Connection]:
        """
        Acquire a connection from the pool with error handling.

        Yields:
            Connection: asyncpg connection from the pool.

        Raises:
            PostgresConnectionException: If not connected or pool exhausted.
        """
        if not self._connected or self._pool is None:
            raise PostgresConnectionException("PostgreSQL client is not connected")

        try:
            async with self._pool.acquire() as conn:
                yield conn
        except TooManyConnectionsError as e:
            logger.error("postgres_pool_exhausted", error=str(e))
            raise PostgresConnectionException(f"Connection pool exhausted: {e}") from e
        except (ConnectionDoesNotExistError, InterfaceError) as e:
            logger.error("postgres_connection_lost", error=str(e))
            self._connected = False
            raise PostgresConnectionException(f"Connection lost: {e}") from e

    async def _execute_with_retry(
        self,
        operation: str,
        func: Any,
        *args: Any,
        **kwargs: Any,
    ) -> Any:
        """
        Execute a database operation with retry logic for transient errors.

        Args:
            operation: Name of the operation for logging.
            func: Async function to execute.
            *args: Positional arguments for the function.
            **kwargs: Keyword arguments for the function.

        Returns:
            Any: Result of the function call.

        Raises:
            PostgresOperationError: If all retries fail.
        """
        last_error: Optional[Exception] = None

        for attempt in range(self.MAX_RETRIES):
            try:
                return await func(*args, **kwargs)
            except (PostgresError, ConnectionDoesNotExistError, InterfaceError) as e:
                last_error = e
                if attempt < self.MAX_RETRIES - 1:
                    logger.warning(
                        "postgres_operation_retry",
                        operation=operation,
                        attempt=attempt + 1,
                        max_retries=self.MAX_RETRIES,
                        error=str(e),
                    )
                    await asyncio.sleep(self.RETRY_DELAY * (attempt + 1))
                else:
                    logger.error(
                        "postgres_operation_failed",
                        operation=operation,
                        error=str(e),
                    )

        raise PostgresOperationError(
            f"Operation '{operation}' failed after {self.MAX_RETRIES} attempts: {last_error}"
        )

    # =========================================================================
    # SCHEMA & CONFIG
    # =========================================================================

    async def ensure_schema(self) -> None:
        """
        Apply the bundled schema.sql. Every statement is idempotent.

        Raises:
            PostgresOperationError: If the schema cannot be applied.
        """
        ddl = resources.files("mm_monitor.storage").joinpath("schema.sql").read_text()

        async def _apply() -> None:
            async with self._acquire_connection() as conn:
                await conn.execute(ddl)

        await self._execute_with_retry("ensure_schema", _apply)
        logger.info("schema_applied")

    async def seed_config(self) -> int:
        """
        Insert default config rows, leaving existing keys untouched.

        Returns:
            int: Number of keys seeded.
        """
        rows = [
            (key, default, description)
            for key, (default, description) in DEFAULT_SETTINGS.items()
        ]

        async def _seed() -> None:
            async with self._acquire_connection() as conn:
                await conn.executemany(
                    """
                    INSERT INTO config (config_key, config_value, description)
                    VALUES ($1, $2, $3)
                    ON CONFLICT (config_key) DO NOTHING
                    """,
                    rows,
                )

        await self._execute_with_retry("seed_config", _seed)
        logger.info("config_seeded", keys=len(rows))
        return len(rows)

    async def load_config_values(self) -> Dict[str, Optional[str]]:
        """
        Read the config table.

        Returns:
            Dict[str, Optional[str]]: config_key -> config_value.
        """

        async def _query() -> List[Record]:
            async with self._acquire_connection() as conn:
                return await conn.fetch("SELECT config_key, config_value FROM config")

        rows = await self._execute_with_retry("load_config_values", _query)
        return {row["config_key"]: row["config_value"] for row in rows}

    # =========================================================================
    # MARKET DATA
    # =========================================================================

    async def insert_market_snapshot(self, snapshot: MarketSnapshot) -> None:
        """Append one market snapshot row."""
        start_time = time.monotonic()

        async def _insert() -> None:
            async with self._acquire_connection() as conn:
                await conn.execute(
                    """
                    INSERT INTO market_snapshots (
                        exchange, symbol, price, bid_price, ask_price,
                        spread, spread_percent, volume_24h, volume_24h_usd,
                        high_24h, low_24h, price_change_24h,
                        price_change_percent_24h, timestamp
                    ) VALUES (
                        $1, $2, $3, $4, $5, $6, $7, $8, $9, $10, $11, $12, $13, $14
                    )
                    """,
                    snapshot.venue,
                    snapshot.pair,
                    snapshot.last_price,
                    snapshot.bid_price,
                    snapshot.ask_price,
                    snapshot.spread,
                    snapshot.spread_percent,
                    snapshot.volume_24h,
                    snapshot.volume_24h_quote,
                    snapshot.high_24h,
                    snapshot.low_24h,
                    snapshot.price_change_24h,
                    snapshot.price_change_percent_24h,
                    snapshot.timestamp,
                )

        await self._execute_with_retry("insert_market_snapshot", _insert)

        elapsed_ms = (time.monotonic() - start_time) * 1000
        logger.debug(
            "market_snapshot_inserted",
            venue=snapshot.venue,
            elapsed_ms=round(elapsed_ms, 2),
        )

    async def insert_depth_measurements(
        self, depths: Sequence[DepthMeasurement]
    ) -> int:
        """Append one orderbook_depth row per band."""
        if not depths:
            return 0

        records = [
            (
                d.venue,
                self.symbol,
                d.level,
                d.band_percent,
                d.bid_amount,
                d.bid_value,
                d.ask_amount,
                d.ask_value,
                d.timestamp,
            )
            for d in depths
        ]

        async def _insert() -> None:
            async with self._acquire_connection() as conn:
                await conn.executemany(
                    """
                    INSERT INTO orderbook_depth (
                        exchange, symbol, depth_level, band_percent,
                        bid_depth_erg, bid_depth_usd, ask_depth_erg, ask_depth_usd,
                        timestamp
                    ) VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9)
                    """,
                    records,
                )

        await self._execute_with_retry("insert_depth_measurements", _insert)
        return len(records)

    async def insert_trades(self, trades: Sequence[TradeRecord]) -> int:
        """
        Insert trades, skipping (exchange, trade_id) pairs already stored.

        Returns:
            int: Number of new rows.
        """
        if not trades:
            return 0

        start_time = time.monotonic()

        async def _insert() -> int:
            inserted = 0
            async with self._acquire_connection() as conn:
                async with conn.transaction():
                    for trade in trades:
                        status = await conn.execute(
                            """
                            INSERT INTO trades (
                                exchange, symbol, trade_id, price, amount,
                                amount_usd, side, trade_time
                            ) VALUES ($1, $2, $3, $4, $5, $6, $7, $8)
                            ON CONFLICT (exchange, trade_id) DO NOTHING
                            """,
                            trade.venue,
                            self.symbol,
                            trade.trade_id,
                            trade.price,
                            trade.amount,
                            trade.quote_value,
                            trade.side.value,
                            trade.trade_time,
                        )
                        # Status tag is "INSERT 0 <rows>"
                        inserted += int(status.split()[-1])
            return inserted

        inserted = await self._execute_with_retry("insert_trades", _insert)

        elapsed_ms = (time.monotonic() - start_time) * 1000
        logger.debug(
            "trades_inserted",
            received=len(trades),
            inserted=inserted,
            elapsed_ms=round(elapsed_ms, 2),
        )
        return inserted

    async def fetch_snapshots(self, venue: str, since: datetime) -> List[MarketSnapshot]:
        """Snapshots for a venue after `since`, oldest first."""

        async def _query() -> List[Record]:
            async with self._acquire_connection() as conn:
                return await conn.fetch(
                    """
                    SELECT *
                    FROM market_snapshots
                    WHERE exchange = $1 AND timestamp > $2
                    ORDER BY timestamp ASC
                    """,
                    venue,
                    since,
                )

        rows = await self._execute_with_retry("fetch_snapshots", _query)
        return [_row_to_snapshot(row) for row in rows]

    async def fetch_trades(self, venue: str, since: datetime) -> List[TradeRecord]:
        """Trades for a venue with trade_time after `since`, oldest first."""

        async def _query() -> List[Record]:
            async with self._acquire_connection() as conn:
                return await conn.fetch(
                    """
                    SELECT exchange, trade_id, price, amount, side, trade_time
                    FROM trades
                    WHERE exchange = $1 AND trade_time > $2
                    ORDER BY trade_time ASC
                    """,
                    venue,
                    since,
                )

        rows = await self._execute_with_retry("fetch_trades", _query)
        return [
            TradeRecord(
                venue=row["exchange"],
                trade_id=row["trade_id"],
                price=row["price"],
                amount=row["amount"],
                side=TradeSide(row["side"]),
                trade_time=row["trade_time"],
            )
            for row in rows
        ]

    async def insert_metrics(self, metrics: MetricsSnapshot) -> None:
        """Append one market_metrics row."""

        async def _insert() -> None:
            async with self._acquire_connection() as conn:
                await conn.execute(
                    """
                    INSERT INTO market_metrics (
                        exchange, symbol, avg_spread_1h, avg_spread_24h,
                        total_volume_1h, total_volume_24h,
                        trade_count_1h, trade_count_24h,
                        price_range_24h, volatility_1h, calculated_at
                    ) VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10, $11)
                    """,
                    metrics.venue,
                    self.symbol,
                    metrics.avg_spread_1h,
                    metrics.avg_spread_24h,
                    metrics.total_volume_1h,
                    metrics.total_volume_24h,
                    metrics.trade_count_1h,
                    metrics.trade_count_24h,
                    metrics.price_range_24h,
                    metrics.volatility_1h,
                    metrics.timestamp,
                )

        await self._execute_with_retry("insert_metrics", _insert)

    # =========================================================================
    # USER LIQUIDITY
    # =========================================================================

    async def insert_user_position(self, position: UserPosition) -> None:
        """Append one user_balances row."""

        async def _insert() -> None:
            async with self._acquire_connection() as conn:
                await conn.execute(
                    """
                    INSERT INTO user_balances (
                        exchange, erg_free, erg_locked, erg_total,
                        usdt_free, usdt_locked, usdt_total,
                        total_value_usd, timestamp
                    ) VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9)
                    """,
                    position.venue,
                    position.base.free,
                    position.base.locked,
                    position.base.total,
                    position.quote.free,
                    position.quote.locked,
                    position.quote.total,
                    position.total_value,
                    position.timestamp,
                )

        await self._execute_with_retry("insert_user_position", _insert)

    async def replace_open_orders(self, venue: str, orders: Sequence[OpenOrder]) -> int:
        """
        Replace the stored open orders for a venue in one transaction.

        Returns:
            int: Number of orders stored.
        """
        records = [
            (
                o.venue,
                o.order_id,
                o.side.value,
                o.price,
                o.amount,
                o.filled_amount,
                o.order_type,
                o.created_at,
            )
            for o in orders
        ]

        async def _replace() -> None:
            async with self._acquire_connection() as conn:
                async with conn.transaction():
                    await conn.execute(
                        "DELETE FROM user_open_orders WHERE exchange = $1", venue
                    )
                    if records:
                        await conn.executemany(
                            """
                            INSERT INTO user_open_orders (
                                exchange, order_id, side, price, amount,
                                amount_filled, order_type, created_at
                            ) VALUES ($1, $2, $3, $4, $5, $6, $7, $8)
                            """,
                            records,
                        )

        await self._execute_with_retry("replace_open_orders", _replace)
        return len(records)

    async def insert_user_depth_shares(self, shares: Sequence[UserDepthShare]) -> int:
        """Append one user_orderbook_depth row per band."""
        if not shares:
            return 0

        records = [
            (
                s.venue,
                s.level,
                s.bid_amount,
                s.bid_value,
                s.ask_amount,
                s.ask_value,
                s.market_bid_value,
                s.market_ask_value,
                s.bid_share_percent,
                s.ask_share_percent,
                s.timestamp,
            )
            for s in shares
        ]

        async def _insert() -> None:
            async with self._acquire_connection() as conn:
                await conn.executemany(
                    """
                    INSERT INTO user_orderbook_depth (
                        exchange, depth_level, bid_depth_erg, bid_depth_usd,
                        ask_depth_erg, ask_depth_usd, market_bid_usd, market_ask_usd,
                        bid_share_pct, ask_share_pct, timestamp
                    ) VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10, $11)
                    """,
                    records,
                )

        await self._execute_with_retry("insert_user_depth_shares", _insert)
        return len(records)

    # =========================================================================
    # ALERTS
    # =========================================================================

    async def count_alerts_since(self, alert_type: AlertType, since: datetime) -> int:
        """Count logged alerts of a type created strictly after `since`."""

        async def _query() -> int:
            async with self._acquire_connection() as conn:
                return await conn.fetchval(
                    """
                    SELECT COUNT(*)
                    FROM alerts_log
                    WHERE alert_type = $1 AND created_at > $2
                    """,
                    alert_type.value,
                    since,
                )

        return await self._execute_with_retry("count_alerts_since", _query)

    async def insert_alert_log(self, entry: AlertLogEntry) -> None:
        """Append one alerts_log row."""
        start_time = time.monotonic()
        details = json.dumps([field.model_dump() for field in entry.fields])

        async def _insert() -> None:
            async with self._acquire_connection() as conn:
                await conn.execute(
                    """
                    INSERT INTO alerts_log (
                        alert_type, severity, exchange, message,
                        details, discord_sent, created_at
                    ) VALUES ($1, $2, $3, $4, $5::jsonb, $6, $7)
                    """,
                    entry.alert_type.value,
                    entry.severity.value,
                    entry.venue,
                    entry.message,
                    details,
                    entry.delivered,
                    entry.created_at,
                )

        await self._execute_with_retry("insert_alert_log", _insert)

        elapsed_ms = (time.monotonic() - start_time) * 1000
        logger.info(
            "alert_logged",
            alert_type=entry.alert_type.value,
            venue=entry.venue,
            delivered=entry.delivered,
            elapsed_ms=round(elapsed_ms, 2),
        )

    # =========================================================================
    # RECOMMENDATIONS
    # =========================================================================

    async def deactivate_recommendations(
        self, venue: Optional[str], category: RecommendationCategory
    ) -> int:
        """Deactivate active rows for (venue, category); NULL venue matches NULL."""

        async def _update() -> str:
            async with self._acquire_connection() as conn:
                return await conn.execute(
                    """
                    UPDATE recommendations
                    SET is_active = FALSE
                    WHERE exchange IS NOT DISTINCT FROM $1
                      AND recommendation_type = $2
                      AND is_active
                    """,
                    venue,
                    category.value,
                )

        status = await self._execute_with_retry("deactivate_recommendations", _update)
        return int(status.split()[-1])

    async def insert_recommendation(
        self,
        request: RecommendationRequest,
        created_at: datetime,
        expires_at: Optional[datetime],
    ) -> Recommendation:
        """Insert an active recommendation row and return it."""

        async def _insert() -> Record:
            async with self._acquire_connection() as conn:
                return await conn.fetchrow(
                    """
                    INSERT INTO recommendations (
                        exchange, recommendation_type, action, reason,
                        priority, is_active, created_at, expires_at
                    ) VALUES ($1, $2, $3, $4, $5, TRUE, $6, $7)
                    RETURNING *
                    """,
                    request.venue,
                    request.category.value,
                    request.action.value,
                    request.reason,
                    request.priority,
                    created_at,
                    expires_at,
                )

        row = await self._execute_with_retry("insert_recommendation", _insert)
        return _row_to_recommendation(row)

    async def fetch_active_recommendations(self, now: datetime) -> List[Recommendation]:
        """Active, unexpired recommendations ordered by priority then recency."""

        async def _query() -> List[Record]:
            async with self._acquire_connection() as conn:
                return await conn.fetch(
                    """
                    SELECT *
                    FROM recommendations
                    WHERE is_active
                      AND (expires_at IS NULL OR expires_at > $1)
                    ORDER BY priority DESC, created_at DESC
                    """,
                    now,
                )

        rows = await self._execute_with_retry("fetch_active_recommendations", _query)
        return [_row_to_recommendation(row) for row in rows]

    async def expire_recommendations(self, now: datetime) -> int:
        """Deactivate active rows whose expiry is at or before `now`."""

        async def _update() -> str:
            async with self._acquire_connection() as conn:
                return await conn.execute(
                    """
                    UPDATE recommendations
                    SET is_active = FALSE
                    WHERE is_active
                      AND expires_at IS NOT NULL
                      AND expires_at <= $1
                    """,
                    now,
                )

        status = await self._execute_with_retry("expire_recommendations", _update)
        return int(status.split()[-1])

    # =========================================================================
    # MAINTENANCE
    # =========================================================================

    async def cleanup_old_data(
        self, retention: RetentionConfig, now: datetime
    ) -> Dict[str, int]:
        """
        Delete rows older than their retention window.

        Args:
            retention: Retention windows in days.
            now: Reference time (UTC).

        Returns:
            Dict[str, int]: Deleted row count per table.
        """
        # table -> (time column, retention days)
        targets = {
            "market_snapshots": ("timestamp", retention.market_snapshots_days),
            "orderbook_depth": ("timestamp", retention.depth_days),
            "user_orderbook_depth": ("timestamp", retention.depth_days),
            "trades": ("recorded_at", retention.trades_days),
            "alerts_log": ("created_at", retention.alerts_days),
            "market_metrics": ("calculated_at", retention.metrics_days),
            "user_balances": ("timestamp", retention.balances_days),
        }
        start_time = time.monotonic()
        deleted: Dict[str, int] = {}

        for table, (column, days) in targets.items():
            cutoff = now - timedelta(days=days)

            async def _delete(
                table: str = table, column: str = column, cutoff: datetime = cutoff
            ) -> str:
                async with self._acquire_connection() as conn:
                    return await conn.execute(
                        f"DELETE FROM {table} WHERE {column} < $1", cutoff
                    )

            status = await self._execute_with_retry(f"cleanup_{table}", _delete)
            deleted[table] = int(status.split()[-1])

        elapsed_ms = (time.monotonic() - start_time) * 1000
        logger.info(
            "old_data_cleaned",
            deleted=deleted,
            elapsed_ms=round(elapsed_ms, 2),
        )
        return deleted
