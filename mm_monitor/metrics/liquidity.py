"""
User Liquidity Tracker.

Derives the operator's position and their share of market depth from
authenticated balances and open orders. Only used for venues with
credentials configured.

Key Formulas:
    total_value     = base.total * mid_price + quote.total
    user_bid_depth  = sum(remaining * price) for buy orders with price >= bid_threshold
    user_ask_depth  = sum(remaining * price) for sell orders with price <= ask_threshold
    share_percent   = user_depth / market_depth * 100  (0 when market depth is 0)

Classes:
    UserLiquidityTracker: Builds UserPosition and UserDepthShare values
"""

from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Optional, Sequence

import structlog

from mm_monitor.config.models import PairConfig
from mm_monitor.metrics.depth import band_thresholds
from mm_monitor.models.market import TradeSide
from mm_monitor.models.metrics import DepthMeasurement
from mm_monitor.models.user import (
    AssetBalance,
    OpenOrder,
    UserDepthShare,
    UserLiquidity,
    UserPosition,
)

logger = structlog.get_logger(__name__)


def _share(user_value: Decimal, market_value: Decimal) -> Decimal:
    if market_value <= 0:
        return Decimal("0")
    return user_value / market_value * Decimal("100")


class UserLiquidityTracker:
    """
    Computes operator position and depth share for one venue.

    Edge Cases Handled:
        - Asset missing from balances: counted as zero
        - Market depth of zero in a band: share is 0
        - Partially filled orders: only the remaining amount counts

    Example:
        >>> tracker = UserLiquidityTracker(pair)
        >>> position = tracker.build_position("mexc", balances, Decimal("1.50"), now)
        >>> shares = tracker.compute_depth_shares("mexc", orders, Decimal("1.50"), depths, now)
        >>> shares[0].bid_share_percent
        Decimal('12.5')
    """

    def __init__(self, pair: PairConfig) -> None:
        self.pair = pair

    def build_position(
        self,
        venue: str,
        balances: Sequence[AssetBalance],
        mid_price: Decimal,
        now: datetime,
    ) -> UserPosition:
        """
        Value the pair's base and quote balances in quote currency.

        Args:
            venue: Venue identifier.
            balances: All balances reported by the venue.
            mid_price: Current mid price.
            now: Snapshot time (UTC).

        Returns:
            UserPosition: Position for the pair's two assets.
        """
        by_asset: Dict[str, AssetBalance] = {b.asset.upper(): b for b in balances}
        base = by_asset.get(self.pair.base.upper(), AssetBalance(asset=self.pair.base))
        quote = by_asset.get(self.pair.quote.upper(), AssetBalance(asset=self.pair.quote))

        return UserPosition(
            venue=venue,
            base=base,
            quote=quote,
            total_value=base.total * mid_price + quote.total,
            timestamp=now,
        )

    def compute_depth_shares(
        self,
        venue: str,
        orders: Sequence[OpenOrder],
        mid_price: Decimal,
        market_depths: Sequence[DepthMeasurement],
        now: datetime,
    ) -> List[UserDepthShare]:
        """
        Compute the operator's depth and share for every measured band.

        Args:
            venue: Venue identifier.
            orders: Operator's open orders on the venue.
            mid_price: Current mid price used for band thresholds.
            market_depths: Market depth measurements from the same run.
            now: Snapshot time (UTC).

        Returns:
            List[UserDepthShare]: One entry per market depth band, in band order.
        """
        shares: List[UserDepthShare] = []

        for depth in market_depths:
            bid_threshold, ask_threshold = band_thresholds(mid_price, depth.band_percent)
            bid_amount = bid_value = Decimal("0")
            ask_amount = ask_value = Decimal("0")

            for order in orders:
                remaining = order.remaining_amount
                if remaining <= 0:
                    continue
                if order.side == TradeSide.BUY and order.price >= bid_threshold:
                    bid_amount += remaining
                    bid_value += remaining * order.price
                elif order.side == TradeSide.SELL and order.price <= ask_threshold:
                    ask_amount += remaining
                    ask_value += remaining * order.price

            shares.append(
                UserDepthShare(
                    venue=venue,
                    band_percent=depth.band_percent,
                    bid_amount=bid_amount,
                    bid_value=bid_value,
                    ask_amount=ask_amount,
                    ask_value=ask_value,
                    market_bid_value=depth.bid_value,
                    market_ask_value=depth.ask_value,
                    bid_share_percent=_share(bid_value, depth.bid_value),
                    ask_share_percent=_share(ask_value, depth.ask_value),
                    timestamp=now,
                )
            )

        logger.debug(
            "user_depth_share_computed",
            venue=venue,
            orders=len(orders),
            bands=[s.level for s in shares],
        )
        return shares

    def track(
        self,
        venue: str,
        balances: Optional[Sequence[AssetBalance]],
        orders: Optional[Sequence[OpenOrder]],
        mid_price: Decimal,
        market_depths: Sequence[DepthMeasurement],
        now: datetime,
    ) -> UserLiquidity:
        """
        Bundle position and depth shares for the evaluator.

        Either input may be None when its fetch was unavailable; the
        corresponding part of the result is then left empty.
        """
        position = (
            self.build_position(venue, balances, mid_price, now)
            if balances is not None
            else None
        )
        open_orders = list(orders) if orders is not None else []
        shares = (
            self.compute_depth_shares(venue, open_orders, mid_price, market_depths, now)
            if orders is not None
            else []
        )
        return UserLiquidity(
            venue=venue,
            position=position,
            open_orders=open_orders,
            depth_shares=shares,
        )

    def __repr__(self) -> str:
        """String representation of the tracker."""
        return f"UserLiquidityTracker(pair={self.pair.display})"
