"""Support/resistance breakout strategy.

Support and resistance come from local extremes over the consolidation
window, grouped when within 1% of each other. A close at least 2% beyond the
nearest level is a breakout; likely false breakouts (few level tests, no
volume, momentum against the move) are filtered out.
"""

from collections.abc import Sequence
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Literal

from harmonizer.config import StrategySettings
from harmonizer.models import Bar, SignalCategory, SignalType, TradingSignal
from harmonizer.strategies.base import SignalProducer
from harmonizer.strategies.indicators import find_local_extremes, round_score, volume_above

MIN_BREAKOUT_PCT = Decimal("0.02")
MOMENTUM_PERIOD = 14
#: Signals with a false breakout probability above this are dropped.
MAX_FALSE_BREAKOUT_PROBABILITY = Decimal("70")

_ZERO = Decimal("0")
_HUNDRED = Decimal("100")
_TEST_TOLERANCE = Decimal("0.005")


@dataclass
class Breakout:
    """A detected breakout through a support or resistance level."""

    direction: Literal["UP", "DOWN"]
    level: Decimal
    percentage: Decimal
    volume_confirmed: bool
    level_tests: int
    false_probability: Decimal
    strength: Decimal


def group_levels(levels: Sequence[Decimal], threshold: Decimal = Decimal("0.01")) -> list[Decimal]:
    """Merge ascending levels within ``threshold`` of the running group average."""
    if not levels:
        return []

    grouped: list[Decimal] = []
    group = [sorted(levels)[0]]
    for level in sorted(levels)[1:]:
        avg = sum(group, _ZERO) / len(group)
        if abs(level - avg) / avg <= threshold:
            group.append(level)
        else:
            grouped.append(avg)
            group = [level]
    grouped.append(sum(group, _ZERO) / len(group))
    return grouped


def support_resistance(
    bars: Sequence[Bar], lookback: int = 20
) -> tuple[list[Decimal], list[Decimal]]:
    """Grouped (support, resistance) levels over the last ``lookback`` bars."""
    if len(bars) < lookback:
        return [], []
    recent = bars[-lookback:]
    highs = [b.high for b in recent]
    lows = [b.low for b in recent]
    resistance = group_levels([v for _, v in find_local_extremes(highs, "high")])
    support = group_levels([v for _, v in find_local_extremes(lows, "low")])
    return support, resistance


def compute_momentum(bars: Sequence[Bar], period: int = MOMENTUM_PERIOD) -> Decimal | None:
    """Percent change of close over ``period`` bars, 2 decimal places."""
    if len(bars) < period + 1:
        return None
    past = bars[-1 - period].close
    if past == 0:
        return None
    momentum = (bars[-1].close - past) / past * _HUNDRED
    return momentum.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def count_level_tests(bars: Sequence[Bar], level: Decimal, direction: str) -> int:
    """Bars in the last 50 that touched ``level`` and closed back on the near side."""
    tolerance = level * _TEST_TOLERANCE
    tests = 0
    for bar in bars[-50:]:
        if direction == "UP" and bar.high >= level - tolerance and bar.close < level:
            tests += 1
        elif direction == "DOWN" and bar.low <= level + tolerance and bar.close > level:
            tests += 1
    return tests


class BreakoutStrategy(SignalProducer):
    """Range breakout producer (structure category)."""

    name = "breakout"

    def __init__(self, settings: StrategySettings | None = None) -> None:
        settings = settings or StrategySettings()
        self._lookback = settings.breakout_lookback_period

    def detect_breakout(
        self, market_data: Sequence[Bar], lookback: int | None = None
    ) -> Breakout | None:
        lookback = lookback or self._lookback
        if len(market_data) < lookback + 5:
            return None

        support, resistance = support_resistance(market_data, lookback)
        price = market_data[-1].close

        below = [r for r in resistance if r < price]
        above = [s for s in support if s > price]

        if below and (price - max(below)) / max(below) >= MIN_BREAKOUT_PCT:
            level = max(below)
            return self._build(market_data, "UP", level, (price - level) / level)
        if above and (min(above) - price) / min(above) >= MIN_BREAKOUT_PCT:
            level = min(above)
            return self._build(market_data, "DOWN", level, (level - price) / level)
        return None

    def _build(
        self,
        market_data: Sequence[Bar],
        direction: Literal["UP", "DOWN"],
        level: Decimal,
        percentage: Decimal,
    ) -> Breakout:
        volume_confirmed = volume_above(market_data, Decimal("1.5"))
        tests = count_level_tests(market_data, level, direction)

        probability = Decimal("50") - min(Decimal(tests * 5), Decimal("30"))
        if volume_confirmed:
            probability -= Decimal("20")
        momentum = compute_momentum(market_data)
        if momentum is not None and (
            (direction == "UP" and momentum > 5) or (direction == "DOWN" and momentum < -5)
        ):
            probability -= Decimal("15")
        probability = round_score(min(max(probability, _ZERO), _HUNDRED))

        strength = Decimal("50") + min(percentage * Decimal("1000"), Decimal("30"))
        strength += Decimal("25") if volume_confirmed else Decimal("-15")
        strength += (_HUNDRED - probability) * Decimal("0.2")

        return Breakout(
            direction=direction,
            level=level,
            percentage=percentage,
            volume_confirmed=volume_confirmed,
            level_tests=tests,
            false_probability=probability,
            strength=round_score(min(max(strength, _ZERO), _HUNDRED)),
        )

    def generate_signal(
        self,
        market_data: Sequence[Bar],
        lookback_period: int | None = None,
        **_: Any,
    ) -> TradingSignal | None:
        breakout = self.detect_breakout(market_data, lookback_period)
        if breakout is None or breakout.false_probability > MAX_FALSE_BREAKOUT_PROBABILITY:
            return None

        signal_type = SignalType.BUY if breakout.direction == "UP" else SignalType.SELL
        momentum = compute_momentum(market_data)

        strength = breakout.strength
        aligned = momentum is not None and (
            (breakout.direction == "UP" and momentum > 0)
            or (breakout.direction == "DOWN" and momentum < 0)
        )
        if aligned:
            strength = min(strength + Decimal("10"), _HUNDRED)
        elif momentum is not None and (
            (breakout.direction == "UP" and momentum < -10)
            or (breakout.direction == "DOWN" and momentum > 10)
        ):
            strength = max(strength - Decimal("15"), _ZERO)

        confidence = Decimal("50") + breakout.strength * Decimal("0.3")
        confidence += Decimal("20") if breakout.volume_confirmed else Decimal("-10")
        confidence += (_HUNDRED - breakout.false_probability) * Decimal("0.2")
        if momentum is not None:
            confidence += min(abs(momentum), Decimal("15")) if aligned else Decimal("-10")
        confidence += min(Decimal(breakout.level_tests * 2), Decimal("10"))

        latest = market_data[-1]
        return TradingSignal(
            symbol=latest.symbol,
            type=signal_type,
            strength=strength,
            confidence=round_score(min(max(confidence, _ZERO), _HUNDRED)),
            indicator_tags=[f"BREAKOUT_{breakout.direction}"],
            category=SignalCategory.STRUCTURE,
            timestamp=latest.timestamp,
            reasoning=self._reasoning(breakout, momentum),
            risk_reward=self._risk_reward(latest.close, breakout),
            metadata={
                "breakout_level": breakout.level,
                "breakout_percentage": breakout.percentage,
                "direction": breakout.direction,
                "volume_confirmed": breakout.volume_confirmed,
                "false_breakout_probability": breakout.false_probability,
                "momentum": momentum,
                "level_tests": breakout.level_tests,
            },
            source=self.name,
        )

    @staticmethod
    def _risk_reward(price: Decimal, breakout: Breakout) -> Decimal:
        # Project twice the breakout distance, stop 1% back through the level
        if breakout.direction == "UP":
            reward = (price - breakout.level) * 2
            risk = price - breakout.level * Decimal("0.99")
        else:
            reward = (breakout.level - price) * 2
            risk = breakout.level * Decimal("1.01") - price
        if risk <= 0:
            return Decimal("1.0")
        return (reward / risk).quantize(Decimal("0.01"))

    @staticmethod
    def _reasoning(breakout: Breakout, momentum: Decimal | None) -> str:
        if breakout.direction == "UP":
            head = f"Upward breakout detected above resistance level at {breakout.level:.4f}"
        else:
            head = f"Downward breakout detected below support level at {breakout.level:.4f}"
        volume = (
            " with strong volume confirmation" if breakout.volume_confirmed else " with weak volume"
        )
        momentum_text = ""
        if momentum is not None:
            sign = "positive" if momentum > 0 else "negative"
            momentum_text = f" and {sign} momentum ({momentum:.1f}%)"
        return (
            f"{head}{volume}{momentum_text}. "
            f"Breakout magnitude: {breakout.percentage * 100:.2f}%. "
            f"False breakout probability: {breakout.false_probability}%."
        )
