"""
MEXC venue adapter module.

Components:
    MexcAdapter: Adapter implementing the ExchangeAdapter interface
    MexcRestClient: REST API client with request signing
    MexcNormalizer: Payload normalization utilities

Example:
    >>> from mm_monitor.adapters.mexc import MexcAdapter
    >>> adapter = MexcAdapter(venue_config, pair_config)
    >>> ticker = await adapter.fetch_ticker()
"""

from mm_monitor.adapters.mexc.adapter import MexcAdapter
from mm_monitor.adapters.mexc.normalizer import MexcNormalizer
from mm_monitor.adapters.mexc.rest import MexcRestClient

__all__ = [
    "MexcAdapter",
    "MexcRestClient",
    "MexcNormalizer",
]
