"""
ERG/USDT Market-Maker Liquidity Monitor.

A batch monitoring engine that polls MEXC and KuCoin for a single trading
pair, derives liquidity and volatility metrics, and raises deduplicated
alerts with remediation recommendations.

This package provides:
- Data models for order books, market snapshots, depth, trades and alerts
- Venue adapters normalizing exchange REST payloads
- Depth, rolling and user-liquidity calculators
- Alert evaluation, cooldown dispatching and recommendation lifecycle
- Configuration management and a PostgreSQL store
"""

__version__ = "0.1.0"
