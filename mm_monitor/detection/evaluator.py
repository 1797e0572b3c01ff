"""
Alert evaluator with tiered threshold rules.

This module provides the AlertEvaluator class which turns one venue's
snapshot, depth and optional user liquidity into alert candidates and
recommendation requests. It has no side effects; persistence and delivery
happen in the recommendation manager and the dispatcher.

Key Features:
    - Tiered rules: each metric fires at most one tier and critical wins
    - Independent metrics: spread, depth, volatility, inventory, share, volume
    - Recommendations attached to the tiers that warrant operator action

Note:
    Uses Decimal for all financial comparisons - NEVER float.

Example:
    >>> evaluator = AlertEvaluator()
    >>> result = evaluator.evaluate(settings, snapshot, depths)
    >>> [a.alert_type for a in result.alerts]
    [<AlertType.SPREAD_CRITICAL: 'SPREAD_CRITICAL'>]
"""

from decimal import Decimal
from typing import List, Optional, Sequence

import structlog
from pydantic import BaseModel, Field

from mm_monitor.config.models import MonitoringConfig
from mm_monitor.config.settings import MonitorSettings
from mm_monitor.models.alerts import (
    AlertCandidate,
    AlertField,
    AlertSeverity,
    AlertType,
)
from mm_monitor.models.market import MarketSnapshot
from mm_monitor.models.metrics import DepthMeasurement, MetricsSnapshot
from mm_monitor.models.recommendations import (
    RecommendationAction,
    RecommendationCategory,
    RecommendationRequest,
)
from mm_monitor.models.user import UserLiquidity

logger = structlog.get_logger(__name__)

# One side holding more than this share of own depth value is a skew
INVENTORY_SKEW_PERCENT = Decimal("70")
# Combined share of market depth below this is reported
MIN_LIQUIDITY_SHARE_PERCENT = Decimal("5")


class EvaluationResult(BaseModel):
    """
    Output of one evaluation.

    Attributes:
        alerts: Alert candidates in rule order.
        recommendations: Recommendation upsert requests in rule order.
    """

    model_config = {"frozen": True, "extra": "forbid"}

    alerts: List[AlertCandidate] = Field(default_factory=list)
    recommendations: List[RecommendationRequest] = Field(default_factory=list)


def _money(value: Decimal, places: int = 2) -> str:
    return f"${value:.{places}f}"


class AlertEvaluator:
    """
    Evaluates alert rules for a single venue.

    Stateless apart from the band selection; safe to share between venues.

    Attributes:
        alert_band: Depth band (percent) checked by the depth rules.
        inventory_band: Band (percent) checked by the inventory and share rules.

    Example:
        >>> evaluator = AlertEvaluator(alert_band=Decimal("2"))
        >>> result = evaluator.evaluate(settings, snapshot, depths, liquidity, metrics)
        >>> len(result.recommendations)
        1
    """

    def __init__(
        self,
        alert_band: Decimal = Decimal("2"),
        inventory_band: Decimal = Decimal("5"),
    ) -> None:
        self.alert_band = alert_band
        self.inventory_band = inventory_band

    def evaluate(
        self,
        settings: MonitorSettings,
        snapshot: MarketSnapshot,
        depths: Sequence[DepthMeasurement],
        liquidity: Optional[UserLiquidity] = None,
        metrics: Optional[MetricsSnapshot] = None,
    ) -> EvaluationResult:
        """
        Run every rule against one venue's data.

        Args:
            settings: Thresholds for this run.
            snapshot: Market snapshot for the venue.
            depths: Depth measurements from the same run.
            liquidity: Operator liquidity, when credentials are configured.
            metrics: Rolling metrics, when computed.

        Returns:
            EvaluationResult: Alert candidates and recommendation requests.
        """
        alerts: List[AlertCandidate] = []
        recommendations: List[RecommendationRequest] = []

        for rule_alerts, rule_recs in (
            self._check_spread(settings, snapshot),
            self._check_depth(settings, snapshot.venue, depths),
            self._check_volatility(settings, snapshot),
            self._check_inventory(snapshot.venue, liquidity),
            self._check_volume(settings, snapshot.venue, metrics),
        ):
            alerts.extend(rule_alerts)
            recommendations.extend(rule_recs)

        logger.debug(
            "venue_evaluated",
            venue=snapshot.venue,
            alerts=[a.alert_type.value for a in alerts],
            recommendations=[r.action.value for r in recommendations],
        )
        return EvaluationResult(alerts=alerts, recommendations=recommendations)

    def _check_spread(self, settings: MonitorSettings, snapshot: MarketSnapshot):
        label = snapshot.venue.upper()
        spread_percent = snapshot.spread_percent

        # A zero spread carries no signal
        if spread_percent <= 0:
            return [], []

        if spread_percent >= settings.spread_critical_threshold:
            alert = AlertCandidate(
                alert_type=AlertType.SPREAD_CRITICAL,
                severity=AlertSeverity.CRITICAL,
                venue=snapshot.venue,
                message=(
                    f"CRITICAL: {label} spread at {spread_percent:.2f}% "
                    f"(threshold: {settings.spread_critical_threshold:.2f}%)"
                ),
                fields=[
                    AlertField(name="Current Spread", value=f"{spread_percent:.4f}%"),
                    AlertField(name="Bid", value=_money(snapshot.bid_price, 4)),
                    AlertField(name="Ask", value=_money(snapshot.ask_price, 4)),
                ],
            )
            rec = RecommendationRequest(
                venue=snapshot.venue,
                category=RecommendationCategory.SPREAD,
                action=RecommendationAction.TIGHTEN_SPREAD,
                reason="Spread is critically wide. Consider adjusting market maker parameters.",
                priority=9,
                expires_in_hours=2,
            )
            return [alert], [rec]

        if spread_percent >= settings.spread_warning_threshold:
            alert = AlertCandidate(
                alert_type=AlertType.SPREAD_WARNING,
                severity=AlertSeverity.WARNING,
                venue=snapshot.venue,
                message=(
                    f"WARNING: {label} spread at {spread_percent:.2f}% "
                    f"(threshold: {settings.spread_warning_threshold:.2f}%)"
                ),
                fields=[
                    AlertField(name="Current Spread", value=f"{spread_percent:.4f}%"),
                ],
            )
            return [alert], []

        return [], []

    def _check_depth(
        self,
        settings: MonitorSettings,
        venue: str,
        depths: Sequence[DepthMeasurement],
    ):
        depth = next((d for d in depths if d.band_percent == self.alert_band), None)
        if depth is None:
            logger.debug("alert_band_missing", venue=venue, band=str(self.alert_band))
            return [], []

        label = venue.upper()
        total = depth.total_value

        if total < settings.depth_critical_threshold:
            alert = AlertCandidate(
                alert_type=AlertType.DEPTH_CRITICAL,
                severity=AlertSeverity.CRITICAL,
                venue=venue,
                message=(
                    f"CRITICAL: {label} depth at {depth.level} only {_money(total)} "
                    f"(threshold: ${settings.depth_critical_threshold})"
                ),
                fields=[
                    AlertField(name="Bid Depth", value=_money(depth.bid_value)),
                    AlertField(name="Ask Depth", value=_money(depth.ask_value)),
                ],
            )
            rec = RecommendationRequest(
                venue=venue,
                category=RecommendationCategory.DEPTH,
                action=RecommendationAction.ADD_LIQUIDITY,
                reason=(
                    "Orderbook depth is critically low. "
                    "Add more liquidity to protect against slippage."
                ),
                priority=10,
                expires_in_hours=1,
            )
            return [alert], [rec]

        if total < settings.depth_warning_threshold:
            alert = AlertCandidate(
                alert_type=AlertType.DEPTH_WARNING,
                severity=AlertSeverity.WARNING,
                venue=venue,
                message=(
                    f"WARNING: {label} depth at {depth.level} is {_money(total)} "
                    f"(threshold: ${settings.depth_warning_threshold})"
                ),
                fields=[AlertField(name="Total Depth", value=_money(total))],
            )
            return [alert], []

        return [], []

    def _check_volatility(self, settings: MonitorSettings, snapshot: MarketSnapshot):
        label = snapshot.venue.upper()
        change = snapshot.price_change_percent_24h
        magnitude = abs(change)

        if magnitude >= settings.liquidity_pull_threshold:
            direction = "up" if change > 0 else "down"
            alert = AlertCandidate(
                alert_type=AlertType.VOLATILITY_EXTREME,
                severity=AlertSeverity.CRITICAL,
                venue=snapshot.venue,
                message=(
                    f"EXTREME VOLATILITY: {label} price moved {change:.2f}% in 24h "
                    f"- Consider pulling liquidity!"
                ),
                fields=[
                    AlertField(name="Price Change", value=f"{magnitude:.2f}% {direction}"),
                    AlertField(name="Current Price", value=_money(snapshot.last_price, 4)),
                    AlertField(name="24h High", value=_money(snapshot.high_24h, 4)),
                    AlertField(name="24h Low", value=_money(snapshot.low_24h, 4)),
                ],
            )
            rec = RecommendationRequest(
                venue=snapshot.venue,
                category=RecommendationCategory.VOLATILITY,
                action=RecommendationAction.PULL_LIQUIDITY,
                reason=(
                    f"Extreme price movement ({change:.2f}%). "
                    f"Pull liquidity to protect against losses."
                ),
                priority=10,
                expires_in_hours=4,
            )
            return [alert], [rec]

        if magnitude >= settings.price_change_critical:
            alert = AlertCandidate(
                alert_type=AlertType.PRICE_CHANGE_HIGH,
                severity=AlertSeverity.WARNING,
                venue=snapshot.venue,
                message=f"HIGH VOLATILITY: {label} price changed {change:.2f}% in 24h",
                fields=[AlertField(name="Price Change", value=f"{change:.2f}%")],
            )
            rec = RecommendationRequest(
                venue=snapshot.venue,
                category=RecommendationCategory.VOLATILITY,
                action=RecommendationAction.REDUCE_EXPOSURE,
                reason="High volatility detected. Consider reducing position sizes.",
                priority=7,
                expires_in_hours=6,
            )
            return [alert], [rec]

        return [], []

    def _check_inventory(self, venue: str, liquidity: Optional[UserLiquidity]):
        """Inventory skew and liquidity share rules at the inventory band."""
        if liquidity is None or not liquidity.open_orders:
            return [], []
        share = liquidity.share_for_band(self.inventory_band)
        if share is None:
            return [], []

        label = venue.upper()
        alerts: List[AlertCandidate] = []
        recommendations: List[RecommendationRequest] = []

        own_total = share.total_value
        if own_total > 0:
            bid_percent = share.bid_value / own_total * Decimal("100")
            ask_percent = share.ask_value / own_total * Decimal("100")
            heavy_side: Optional[str] = None
            if bid_percent > INVENTORY_SKEW_PERCENT:
                heavy_side, heavy_percent = "bid", bid_percent
                action = RecommendationAction.REBALANCE_ASK
                reason = (
                    "Own liquidity is concentrated on the bid side. "
                    "Add asks or trim bids to rebalance inventory."
                )
            elif ask_percent > INVENTORY_SKEW_PERCENT:
                heavy_side, heavy_percent = "ask", ask_percent
                action = RecommendationAction.REBALANCE_BID
                reason = (
                    "Own liquidity is concentrated on the ask side. "
                    "Add bids or trim asks to rebalance inventory."
                )

            if heavy_side is not None:
                alerts.append(
                    AlertCandidate(
                        alert_type=AlertType.INVENTORY_SKEW,
                        severity=AlertSeverity.WARNING,
                        venue=venue,
                        message=(
                            f"WARNING: {label} inventory skewed to {heavy_side}s at "
                            f"{share.level} ({heavy_percent:.2f}% of own depth)"
                        ),
                        fields=[
                            AlertField(name="Own Bid Depth", value=_money(share.bid_value)),
                            AlertField(name="Own Ask Depth", value=_money(share.ask_value)),
                        ],
                    )
                )
                recommendations.append(
                    RecommendationRequest(
                        venue=venue,
                        category=RecommendationCategory.INVENTORY,
                        action=action,
                        reason=reason,
                        priority=6,
                        expires_in_hours=4,
                    )
                )

        market_total = share.market_bid_value + share.market_ask_value
        total_share = share.total_share_percent
        if market_total > 0 and total_share < MIN_LIQUIDITY_SHARE_PERCENT:
            alerts.append(
                AlertCandidate(
                    alert_type=AlertType.LIQUIDITY_SHARE_LOW,
                    severity=AlertSeverity.INFO,
                    venue=venue,
                    message=(
                        f"INFO: {label} liquidity share at {share.level} is "
                        f"{total_share:.2f}% (minimum: {MIN_LIQUIDITY_SHARE_PERCENT:.2f}%)"
                    ),
                    fields=[
                        AlertField(name="Bid Share", value=f"{share.bid_share_percent:.2f}%"),
                        AlertField(name="Ask Share", value=f"{share.ask_share_percent:.2f}%"),
                        AlertField(name="Own Depth", value=_money(share.total_value)),
                    ],
                )
            )

        return alerts, recommendations

    def _check_volume(
        self,
        settings: MonitorSettings,
        venue: str,
        metrics: Optional[MetricsSnapshot],
    ):
        if metrics is None or metrics.total_volume_24h <= 0:
            return [], []

        hourly_mean = metrics.hourly_volume_mean_24h
        if metrics.total_volume_1h < settings.volume_spike_threshold * hourly_mean:
            return [], []

        multiple = metrics.total_volume_1h / hourly_mean
        alert = AlertCandidate(
            alert_type=AlertType.VOLUME_SPIKE,
            severity=AlertSeverity.INFO,
            venue=venue,
            message=(
                f"INFO: {venue.upper()} 1h volume {_money(metrics.total_volume_1h)} "
                f"is {multiple:.1f}x the 24h hourly average"
            ),
            fields=[
                AlertField(name="1h Volume", value=_money(metrics.total_volume_1h)),
                AlertField(name="24h Hourly Avg", value=_money(hourly_mean)),
                AlertField(name="1h Trades", value=str(metrics.trade_count_1h)),
            ],
        )
        return [alert], []

    def __repr__(self) -> str:
        """String representation of the evaluator."""
        return (
            f"AlertEvaluator(alert_band={self.alert_band}, "
            f"inventory_band={self.inventory_band})"
        )


def create_evaluator(monitoring: Optional[MonitoringConfig] = None) -> AlertEvaluator:
    """
    Build an evaluator for the configured bands.

    Args:
        monitoring: Monitoring section of the app config; defaults apply if None.

    Returns:
        AlertEvaluator: Configured evaluator.
    """
    if monitoring is None:
        return AlertEvaluator()
    return AlertEvaluator(
        alert_band=monitoring.alert_band,
        inventory_band=monitoring.inventory_band,
    )


def evaluate(
    settings: MonitorSettings,
    snapshot: MarketSnapshot,
    depths: Sequence[DepthMeasurement],
    liquidity: Optional[UserLiquidity] = None,
    metrics: Optional[MetricsSnapshot] = None,
) -> EvaluationResult:
    """Evaluate with the default bands (2% alerts, 5% inventory)."""
    return AlertEvaluator().evaluate(settings, snapshot, depths, liquidity, metrics)
