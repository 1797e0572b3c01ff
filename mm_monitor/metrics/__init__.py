"""
Metric calculators for the liquidity monitor.

Components:
    spread: SpreadCalculator for top-of-book spread and MarketSnapshot
    depth: DepthCalculator for cumulative depth within percentage bands
    rolling: RollingMetricsCalculator for trailing 1h/24h aggregates
    liquidity: UserLiquidityTracker for operator position and depth share
"""

from mm_monitor.metrics.depth import DepthCalculator, band_thresholds, walk_band
from mm_monitor.metrics.liquidity import UserLiquidityTracker
from mm_monitor.metrics.rolling import RollingMetricsCalculator
from mm_monitor.metrics.spread import SpreadCalculator

__all__: list[str] = [
    "SpreadCalculator",
    "DepthCalculator",
    "RollingMetricsCalculator",
    "UserLiquidityTracker",
    "band_thresholds",
    "walk_band",
]
