"""
Process entry points for the liquidity monitor.

Components:
    pipeline: process_venue, the per-venue unit of a run
    runner: MonitorRunner, one batch run or one cleanup pass
    cli: argparse entry point (`mm-monitor run|cleanup|init-db`)

setup_logging lives here so every entry point configures structlog the
same way.
"""

import logging
import os
from typing import Optional

import structlog


def setup_logging(level: Optional[str] = None, format: str = "json") -> None:
    """
    Configure structlog and the standard logging sink.

    Safe to call more than once; loggers are not cached so a later call
    (after the config file is read) takes effect everywhere.

    Args:
        level: Log level name; defaults to LOG_LEVEL or INFO.
        format: "json" for JSON lines, "text" for console rendering.
    """
    log_level = (level or os.getenv("LOG_LEVEL", "INFO")).upper()

    renderer = (
        structlog.processors.JSONRenderer()
        if format == "json"
        else structlog.dev.ConsoleRenderer(colors=False)
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )

    logging.basicConfig(
        format="%(message)s",
        level=getattr(logging, log_level, logging.INFO),
        force=True,
    )

    # aiohttp and asyncpg are chatty at DEBUG
    logging.getLogger("aiohttp").setLevel(logging.WARNING)
    logging.getLogger("asyncpg").setLevel(logging.WARNING)


__all__ = ["setup_logging"]
