"""
Storage layer for the liquidity monitor.

Components:
    base: MonitorStore protocol used by the pipeline
    postgres_client: asyncpg implementation of MonitorStore
    schema.sql: DDL applied by `mm-monitor init-db`
"""

from mm_monitor.storage.base import MonitorStore
from mm_monitor.storage.postgres_client import (
    PostgresClient,
    PostgresClientError,
    PostgresConnectionException,
    PostgresOperationError,
)

__all__ = [
    "MonitorStore",
    "PostgresClient",
    "PostgresClientError",
    "PostgresConnectionException",
    "PostgresOperationError",
]
