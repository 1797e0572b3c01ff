"""
Abstract interfaces for the liquidity monitor.

This module exports the venue adapter contract.

Example:
    >>> from mm_monitor.interfaces import ExchangeAdapter
    >>> class MyVenueAdapter(ExchangeAdapter):
    ...     # Implement abstract methods
    ...     pass
"""

from mm_monitor.interfaces.exchange_adapter import ExchangeAdapter

__all__ = [
    "ExchangeAdapter",
]
