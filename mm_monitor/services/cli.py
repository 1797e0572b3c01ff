"""
Command line entry point.

Usage:
    mm-monitor [--config-dir DIR] run        # one batch run (default)
    mm-monitor [--config-dir DIR] cleanup    # retention prune + expiry sweep
    mm-monitor [--config-dir DIR] init-db    # apply schema, seed config rows

Schedule `run` every 1-5 minutes (cron or a systemd timer) and `cleanup`
daily.

Environment Variables:
    CONFIG_PATH: Path to config directory (default: config)
    DATABASE_URL: PostgreSQL connection URL
    LOG_LEVEL: Logging level (default: INFO)

Exit codes:
    0: Success, including runs where venues or deliveries failed
    1: Configuration unreadable or unparsable, or store unreachable
"""

import argparse
import asyncio
import os
import sys
from typing import List, Optional

import structlog

from mm_monitor import __version__
from mm_monitor.config.loader import ConfigLoadError, load_config
from mm_monitor.config.models import AppConfig
from mm_monitor.config.settings import SettingsError
from mm_monitor.services import setup_logging
from mm_monitor.services.runner import MonitorRunner
from mm_monitor.storage.postgres_client import PostgresClient, PostgresClientError

logger = structlog.get_logger(__name__)

COMMANDS = ("run", "cleanup", "init-db")


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="mm-monitor",
        description="ERG/USDT market-maker liquidity monitor for MEXC and KuCoin.",
    )
    parser.add_argument(
        "--config-dir",
        default=os.getenv("CONFIG_PATH", "config"),
        help="Directory containing monitor.yaml (default: $CONFIG_PATH or ./config)",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "command",
        nargs="?",
        choices=COMMANDS,
        default="run",
        help="Command to execute (default: run)",
    )
    return parser


async def _execute(command: str, config: AppConfig) -> None:
    async with PostgresClient(config.postgres, symbol=config.pair.display) as store:
        if command == "init-db":
            await store.ensure_schema()
            await store.seed_config()
            return

        runner = MonitorRunner(config, store)
        if command == "cleanup":
            await runner.cleanup()
        else:
            await runner.run_once()


def main(argv: Optional[List[str]] = None) -> int:
    """
    Run a command and return the process exit code.

    Args:
        argv: Arguments (default: sys.argv[1:]).

    Returns:
        int: 0 on success, 1 on fatal configuration or store errors.
    """
    args = build_parser().parse_args(argv)

    setup_logging()

    try:
        config = load_config(args.config_dir)
    except ConfigLoadError as e:
        logger.error("config_load_failed", error=e.message, file_path=str(e.file_path))
        return 1

    setup_logging(config.logging.level.value, config.logging.format.value)
    logger.info("mm_monitor_starting", version=__version__, command=args.command)

    try:
        asyncio.run(_execute(args.command, config))
    except SettingsError as e:
        logger.error("settings_invalid", key=e.key, error=e.message)
        return 1
    except PostgresClientError as e:
        logger.error("store_unavailable", error=str(e))
        return 1

    return 0


def cli() -> None:
    """Console script entry point."""
    sys.exit(main())


if __name__ == "__main__":
    cli()
