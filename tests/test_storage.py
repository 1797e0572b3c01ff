"""
PostgresClient tests against a scripted connection pool.

No database is needed: the pool hands out a fake connection that answers
statements the way PostgreSQL would for the cases under test.
"""

import asyncio
from contextlib import asynccontextmanager
from typing import Any, List, Set, Tuple

import pytest
from asyncpg.exceptions import PostgresError

from factories import NOW, make_trade
from mm_monitor.config.models import PostgresConnectionConfig
from mm_monitor.models.alerts import AlertType
from mm_monitor.storage import (
    PostgresClient,
    PostgresConnectionException,
    PostgresOperationError,
)


class FakeConnection:
    """Answers trade inserts with ON CONFLICT DO NOTHING semantics."""

    def __init__(self) -> None:
        self.trade_keys: Set[Tuple[str, str]] = set()
        self.statements: List[Tuple[str, Tuple[Any, ...]]] = []
        self.failures_left = 0

    async def execute(self, query: str, *args: Any) -> str:
        self.statements.append((query, args))
        if "INSERT INTO trades" in query:
            key = (args[0], args[2])
            if key in self.trade_keys:
                return "INSERT 0 0"
            self.trade_keys.add(key)
            return "INSERT 0 1"
        return "OK"

    async def fetchval(self, query: str, *args: Any) -> Any:
        self.statements.append((query, args))
        if self.failures_left:
            self.failures_left -= 1
            raise PostgresError("could not serialize access")
        return 2

    @asynccontextmanager
    async def transaction(self):
        yield


class FakePool:
    def __init__(self, conn: FakeConnection) -> None:
        self.conn = conn

    @asynccontextmanager
    async def acquire(self):
        yield self.conn


@pytest.fixture
def conn():
    return FakeConnection()


@pytest.fixture
def client(conn):
    client = PostgresClient(
        PostgresConnectionConfig(url="postgresql://monitor:secret@db:5432/monitor")
    )
    client._pool = FakePool(conn)
    client._connected = True
    client.RETRY_DELAY = 0
    return client


def test_repeated_trade_ids_are_ignored(client, conn):
    trades = [make_trade("1"), make_trade("2")]

    first = asyncio.run(client.insert_trades(trades))
    second = asyncio.run(client.insert_trades(trades + [make_trade("3")]))

    assert first == 2
    assert second == 1
    assert conn.trade_keys == {("mexc", "1"), ("mexc", "2"), ("mexc", "3")}


def test_same_trade_id_on_other_venue_is_new(client):
    asyncio.run(client.insert_trades([make_trade("1", venue="mexc")]))

    assert asyncio.run(client.insert_trades([make_trade("1", venue="kucoin")])) == 1


def test_empty_trade_batch_skips_database(client, conn):
    assert asyncio.run(client.insert_trades([])) == 0
    assert conn.statements == []


def test_trade_rows_carry_symbol_and_quote_value(client, conn):
    asyncio.run(client.insert_trades([make_trade("9", price="1.50", amount="10")]))

    _, args = conn.statements[0]
    assert args[1] == "ERG/USDT"
    assert str(args[5]) == "15.00"


def test_transient_errors_are_retried(client, conn):
    conn.failures_left = 2

    count = asyncio.run(client.count_alerts_since(AlertType.DEPTH_WARNING, NOW))

    assert count == 2
    assert conn.statements[-1][1] == ("DEPTH_WARNING", NOW)


def test_persistent_errors_raise_after_retries(client, conn):
    conn.failures_left = 5

    with pytest.raises(PostgresOperationError, match="after 3 attempts"):
        asyncio.run(client.count_alerts_since(AlertType.DEPTH_WARNING, NOW))


def test_disconnected_client_fails_fast(client):
    client._connected = False

    with pytest.raises(PostgresConnectionException):
        asyncio.run(client.count_alerts_since(AlertType.DEPTH_WARNING, NOW))


def test_url_password_is_masked_in_logs(client):
    assert client._sanitize_url(client.config.url) == "postgresql://monitor:***@db:5432/monitor"
    assert client._sanitize_url("postgresql://db/monitor") == "postgresql://db/monitor"
