"""
Metric calculator tests.

Covers spread math, band depth accumulation, rolling windows and the user
liquidity tracker.
"""

from datetime import timedelta
from decimal import Decimal

import pytest

from factories import NOW, make_book, make_depth, make_order, make_snapshot, make_ticker, make_trade
from mm_monitor.config.models import PairConfig
from mm_monitor.metrics import (
    DepthCalculator,
    RollingMetricsCalculator,
    SpreadCalculator,
    UserLiquidityTracker,
    walk_band,
)
from mm_monitor.models.market import TradeSide
from mm_monitor.models.orderbook import OrderBook, PriceLevel
from mm_monitor.models.user import AssetBalance

FOUR_PLACES = Decimal("0.0001")


# =============================================================================
# Spread
# =============================================================================


def test_spread_percent_uses_mid_price():
    mid, spread, spread_percent = SpreadCalculator.calculate(Decimal("100"), Decimal("102"))
    assert mid == Decimal("101")
    assert spread == Decimal("2")
    assert spread_percent.quantize(FOUR_PLACES) == Decimal("1.9802")


def test_spread_rejects_non_positive_mid():
    with pytest.raises(ValueError):
        SpreadCalculator.calculate(Decimal("0"), Decimal("0"))


def test_build_snapshot_joins_ticker_and_top_of_book():
    snapshot = SpreadCalculator().build_snapshot(make_ticker(), make_book())

    assert snapshot.bid_price == Decimal("1.00")
    assert snapshot.ask_price == Decimal("1.02")
    assert snapshot.mid_price == Decimal("1.01")
    assert snapshot.last_price == Decimal("1.01")
    assert snapshot.timestamp == NOW


def test_build_snapshot_rejects_venue_mismatch():
    with pytest.raises(ValueError, match="Venue mismatch"):
        SpreadCalculator().build_snapshot(make_ticker("kucoin"), make_book("mexc"))


def test_order_book_rejects_unsorted_bids():
    with pytest.raises(ValueError):
        make_book(bids=(("0.99", "10"), ("1.00", "10")))


def test_order_book_rejects_crossed_book():
    with pytest.raises(ValueError):
        make_book(bids=(("1.03", "10"),), asks=(("1.02", "10"),))


def test_order_book_accepts_locked_book():
    book = make_book(bids=(("1.02", "10"),), asks=(("1.02", "10"),))

    assert book.best_bid == book.best_ask


# =============================================================================
# Depth
# =============================================================================


def test_depth_per_band():
    # mid 1.01: 2% keeps bids >= 0.9898 and asks <= 1.0302
    depths = DepthCalculator().calculate(make_book())

    two, five, ten = depths
    assert two.band_percent == Decimal("2")
    assert two.bid_amount == Decimal("3000")
    assert two.bid_value == Decimal("2980")
    assert two.ask_amount == Decimal("3000")
    assert two.ask_value == Decimal("3080")
    assert five.bid_value == Decimal("5890")
    assert five.ask_value == Decimal("6230")
    # 0.90 and 1.15 sit outside even the 10% band
    assert ten.bid_value == five.bid_value
    assert ten.ask_value == five.ask_value


def test_depth_is_monotonic_in_band_width():
    depths = DepthCalculator([Decimal("1"), Decimal("2"), Decimal("5"), Decimal("10")]).calculate(
        make_book()
    )
    for narrower, wider in zip(depths, depths[1:]):
        assert narrower.bid_value <= wider.bid_value
        assert narrower.ask_value <= wider.ask_value
        assert narrower.total_value <= wider.total_value


def test_depth_threshold_is_inclusive():
    book = make_book(
        bids=(("99", "1"), ("98", "2"), ("97.99", "4")),
        asks=(("101", "1"), ("102", "2"), ("102.01", "4")),
    )
    (two,) = DepthCalculator([Decimal("2")]).calculate(book)

    assert two.bid_amount == Decimal("3")
    assert two.ask_amount == Decimal("3")


def test_walk_band_stops_at_first_level_outside():
    levels = [
        PriceLevel(price=Decimal("1.00"), amount=Decimal("1")),
        PriceLevel(price=Decimal("0.90"), amount=Decimal("1")),
        PriceLevel(price=Decimal("0.95"), amount=Decimal("100")),
    ]
    amount, value = walk_band(levels, Decimal("0.95"), "bid")

    assert amount == Decimal("1")
    assert value == Decimal("1.00")


def test_walk_band_rejects_unknown_side():
    with pytest.raises(ValueError):
        walk_band([], Decimal("1"), "mid")


def test_depth_rejects_one_sided_book():
    book = OrderBook(
        venue="mexc",
        pair="ERG/USDT",
        timestamp=NOW,
        bids=[PriceLevel(price=Decimal("1.00"), amount=Decimal("10"))],
        asks=[],
    )
    with pytest.raises(ValueError, match="Invalid order book"):
        DepthCalculator().calculate(book)


def test_depth_level_label():
    assert make_depth(band="2").level == "2%"
    assert make_depth(band="0.5").level == "0.5%"


# =============================================================================
# Rolling metrics
# =============================================================================


def test_rolling_windows_are_strictly_after_cutoff():
    trades = [
        make_trade("a", price="1.00", amount="100", trade_time=NOW - timedelta(minutes=10)),
        make_trade("b", price="1.00", amount="50", trade_time=NOW - timedelta(hours=1)),
        make_trade("c", price="2.00", amount="100", trade_time=NOW - timedelta(hours=2)),
        make_trade("d", price="1.00", amount="999", trade_time=NOW - timedelta(hours=24)),
    ]
    metrics = RollingMetricsCalculator().calculate("mexc", [], trades, NOW)

    assert metrics.trade_count_1h == 1
    assert metrics.total_volume_1h == Decimal("100")
    assert metrics.trade_count_24h == 3
    assert metrics.total_volume_24h == Decimal("350")


def test_rolling_spread_and_range():
    recent = make_snapshot(bid="1.00", ask="1.01", timestamp=NOW - timedelta(minutes=5))
    older = make_snapshot(bid="1.00", ask="1.03", timestamp=NOW - timedelta(minutes=30))
    stale = make_snapshot(bid="1.00", ask="1.05", timestamp=NOW - timedelta(hours=3))

    metrics = RollingMetricsCalculator().calculate("mexc", [recent, older, stale], [], NOW)

    assert metrics.avg_spread_1h == (recent.spread_percent + older.spread_percent) / 2
    assert metrics.avg_spread_24h == (
        recent.spread_percent + older.spread_percent + stale.spread_percent
    ) / 3
    # (1.05 - 0.97) / 1.00 * 100
    assert metrics.price_range_24h == Decimal("8")
    assert metrics.volatility_1h == Decimal("0")


def test_rolling_volatility_of_moving_price():
    snapshots = [
        make_snapshot(bid="0.99", ask="1.00", last="0.90", timestamp=NOW - timedelta(minutes=20)),
        make_snapshot(bid="0.99", ask="1.00", last="1.10", timestamp=NOW - timedelta(minutes=10)),
    ]
    metrics = RollingMetricsCalculator().calculate("mexc", snapshots, [], NOW)

    # pstdev 0.10 over mean 1.00
    assert metrics.volatility_1h == Decimal("10")


def test_rolling_empty_history_is_zero():
    metrics = RollingMetricsCalculator().calculate("kucoin", [], [], NOW)

    assert metrics.venue == "kucoin"
    assert metrics.timestamp == NOW
    assert metrics.avg_spread_24h == 0
    assert metrics.total_volume_24h == 0
    assert metrics.trade_count_24h == 0
    assert metrics.price_range_24h == 0
    assert metrics.hourly_volume_mean_24h == 0


# =============================================================================
# User liquidity
# =============================================================================


@pytest.fixture
def tracker():
    return UserLiquidityTracker(PairConfig())


def test_position_values_base_at_mid(tracker):
    balances = [
        AssetBalance(asset="erg", free=Decimal("1000"), locked=Decimal("200")),
        AssetBalance(asset="USDT", free=Decimal("500")),
        AssetBalance(asset="BTC", free=Decimal("1")),
    ]
    position = tracker.build_position("mexc", balances, Decimal("1.01"), NOW)

    assert position.base.total == Decimal("1200")
    assert position.quote.total == Decimal("500")
    assert position.total_value == Decimal("1712")


def test_position_with_missing_quote_asset(tracker):
    position = tracker.build_position(
        "mexc", [AssetBalance(asset="ERG", free=Decimal("10"))], Decimal("2"), NOW
    )

    assert position.quote.asset == "USDT"
    assert position.quote.total == 0
    assert position.total_value == Decimal("20")


def test_depth_shares_count_remaining_amount_inside_band(tracker):
    book = make_book()
    depths = DepthCalculator().calculate(book)
    orders = [
        make_order("1", TradeSide.BUY, "1.00", "500", filled="100"),
        make_order("2", TradeSide.BUY, "0.95", "1000"),
        make_order("3", TradeSide.SELL, "1.02", "300"),
        make_order("4", TradeSide.SELL, "1.03", "50", filled="50"),
    ]

    two, five, ten = tracker.compute_depth_shares("mexc", orders, book.mid_price, depths, NOW)

    assert two.bid_value == Decimal("400")
    assert two.ask_value == Decimal("306")
    assert two.ask_amount == Decimal("300")
    assert two.market_bid_value == Decimal("2980")
    assert two.bid_share_percent == Decimal("400") / Decimal("2980") * 100
    assert five.bid_value == Decimal("400")
    # 0.95 >= 0.909 (10% bid threshold)
    assert ten.bid_value == Decimal("1350")


def test_depth_share_is_zero_without_market_depth(tracker):
    depths = [make_depth(band="5", bid_value="0", ask_value="0")]
    orders = [make_order("1", TradeSide.BUY, "1.00", "10")]

    (share,) = tracker.compute_depth_shares("mexc", orders, Decimal("1.01"), depths, NOW)

    assert share.bid_value == Decimal("10")
    assert share.bid_share_percent == 0
    assert share.total_share_percent == 0


def test_track_without_orders_keeps_position(tracker):
    balances = [AssetBalance(asset="ERG", free=Decimal("10"))]
    liquidity = tracker.track("mexc", balances, None, Decimal("1"), [make_depth()], NOW)

    assert liquidity.position is not None
    assert liquidity.open_orders == []
    assert liquidity.depth_shares == []


def test_track_without_balances(tracker):
    orders = [make_order("1", TradeSide.SELL, "1.00", "10")]
    liquidity = tracker.track("mexc", None, orders, Decimal("1"), [make_depth(band="5")], NOW)

    assert liquidity.position is None
    assert liquidity.share_for_band(Decimal("5")).ask_value == Decimal("10")
    assert liquidity.share_for_band(Decimal("2")) is None
