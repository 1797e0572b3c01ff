"""
Venue adapters for the liquidity monitor.

All adapters implement the ExchangeAdapter interface over REST polling.

Supported Venues:
    - MEXC (spot)
    - KuCoin (spot)
"""

from typing import Dict, Type

from mm_monitor.adapters.kucoin import KucoinAdapter
from mm_monitor.adapters.mexc import MexcAdapter
from mm_monitor.config.models import PairConfig, VenueConfig
from mm_monitor.interfaces.exchange_adapter import ExchangeAdapter

ADAPTERS: Dict[str, Type[ExchangeAdapter]] = {
    "mexc": MexcAdapter,
    "kucoin": KucoinAdapter,
}


def create_adapter(config: VenueConfig, pair: PairConfig) -> ExchangeAdapter:
    """
    Build the adapter for a configured venue.

    Args:
        config: Venue configuration.
        pair: Monitored pair.

    Returns:
        ExchangeAdapter: Adapter instance.

    Raises:
        ValueError: If the venue has no adapter.
    """
    adapter_cls = ADAPTERS.get(config.name)
    if adapter_cls is None:
        raise ValueError(f"No adapter for venue '{config.name}'")
    return adapter_cls(config, pair)  # type: ignore[call-arg]


__all__ = [
    "ADAPTERS",
    "KucoinAdapter",
    "MexcAdapter",
    "create_adapter",
]
