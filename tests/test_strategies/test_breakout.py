"""Tests for the support/resistance breakout strategy.

Tests verify:
- Level grouping within 1%
- Momentum and level-test counting
- Volume-confirmed break above resistance -> BUY
- Moves under 2% and short histories produce no signal
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

from harmonizer.models import Bar, SignalCategory, SignalType
from harmonizer.strategies.breakout import (
    BreakoutStrategy,
    compute_momentum,
    count_level_tests,
    group_levels,
    support_resistance,
)

_START = datetime(2024, 1, 1, tzinfo=timezone.utc)


def _make_bar(i: int, close: str, high: str, low: str, volume: str = "1000") -> Bar:
    """Create a test Bar."""
    return Bar(
        symbol="BTC/USDT",
        timestamp=_START + timedelta(hours=i),
        open=Decimal(close),
        high=Decimal(high),
        low=Decimal(low),
        close=Decimal(close),
        volume=Decimal(volume),
    )


def _consolidation(last_close: str = "103", last_volume: str = "3000") -> list[Bar]:
    """Flat base, a single 100 peak, then a final bar breaking out."""
    bars = [_make_bar(i, "96.5", "97", "96") for i in range(10)]
    peaks = ["97", "97.5", "98", "98.5", "100", "98.5", "98", "97.5", "97"]
    for offset, high in enumerate(peaks):
        h = Decimal(high)
        bars.append(_make_bar(10 + offset, str(h - Decimal("0.5")), high, str(h - 1)))
    close = Decimal(last_close)
    bars.append(
        _make_bar(19, last_close, str(close + 1), str(close - 1), volume=last_volume)
    )
    return bars


class TestGroupLevels:
    """Tests for group_levels."""

    def test_groups_nearby_levels(self) -> None:
        """100 and 100.5 merge; 110 stays separate."""
        grouped = group_levels([Decimal("110"), Decimal("100"), Decimal("100.5")])
        assert grouped == [Decimal("100.25"), Decimal("110")]

    def test_empty(self) -> None:
        """No levels -> empty list."""
        assert group_levels([]) == []


class TestHelpers:
    """Tests for support_resistance, compute_momentum and count_level_tests."""

    def test_support_resistance(self) -> None:
        """The 100 peak is the only resistance in the last 10 bars."""
        support, resistance = support_resistance(_consolidation(), lookback=10)
        assert resistance == [Decimal("100")]
        assert support == []

    def test_momentum(self) -> None:
        """Close 103 vs 96.5 fourteen bars earlier -> +6.74%."""
        assert compute_momentum(_consolidation()) == Decimal("6.74")

    def test_momentum_short_history(self) -> None:
        """Needs period + 1 bars."""
        assert compute_momentum(_consolidation()[:10]) is None

    def test_level_tests(self) -> None:
        """Only the bar that touched 100 and closed below counts."""
        assert count_level_tests(_consolidation(), Decimal("100"), "UP") == 1


class TestBreakoutStrategy:
    """Tests for BreakoutStrategy.generate_signal."""

    def test_upward_breakout(self) -> None:
        """3% above resistance with 3x volume -> BUY."""
        signal = BreakoutStrategy().generate_signal(_consolidation(), lookback_period=10)

        assert signal is not None
        assert signal.type == SignalType.BUY
        assert signal.category == SignalCategory.STRUCTURE
        assert signal.indicator_tags == ["BREAKOUT_UP"]
        assert signal.metadata["direction"] == "UP"
        assert signal.metadata["level_tests"] == 1
        assert signal.metadata["volume_confirmed"] is True
        assert signal.metadata["breakout_level"] == Decimal("100")
        # 50 - 5 (one test) - 20 (volume) - 15 (momentum)
        assert signal.metadata["false_breakout_probability"] == Decimal("10")
        assert signal.strength == Decimal("100")
        assert "Upward breakout" in signal.reasoning

    def test_move_under_two_percent(self) -> None:
        """Close 101 is only 1% above resistance -> None."""
        bars = _consolidation(last_close="101")
        assert BreakoutStrategy().generate_signal(bars, lookback_period=10) is None

    def test_insufficient_data(self) -> None:
        """Needs lookback + 5 bars."""
        bars = _consolidation()[-12:]
        assert BreakoutStrategy().generate_signal(bars, lookback_period=10) is None
