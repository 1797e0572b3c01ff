"""
KuCoin venue adapter module.

Components:
    KucoinAdapter: Adapter implementing the ExchangeAdapter interface
    KucoinRestClient: REST API client with envelope handling and signing
    KucoinNormalizer: Payload normalization utilities
"""

from mm_monitor.adapters.kucoin.adapter import KucoinAdapter
from mm_monitor.adapters.kucoin.normalizer import KucoinNormalizer
from mm_monitor.adapters.kucoin.rest import KucoinRestClient

__all__ = [
    "KucoinAdapter",
    "KucoinRestClient",
    "KucoinNormalizer",
]
