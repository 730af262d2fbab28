"""Fibonacci retracement strategy.

Finds the dominant swing high and swing low, projects retracement levels
between them and reacts when the latest close sits on one of those levels:
a bounce off support or a rejection at resistance is a full-strength signal,
a sustained break through a level is a slightly weaker one.
"""

from collections.abc import Sequence
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Literal

from harmonizer.config import StrategySettings
from harmonizer.models import Bar, SignalCategory, SignalType, TradingSignal
from harmonizer.strategies.base import SignalProducer
from harmonizer.strategies.indicators import (
    average_volume,
    price_change,
    round_score,
)

FIBONACCI_RATIOS: dict[str, Decimal] = {
    "23.6": Decimal("0.236"),
    "38.2": Decimal("0.382"),
    "50.0": Decimal("0.500"),
    "61.8": Decimal("0.618"),
    "78.6": Decimal("0.786"),
}

#: Close must be within 0.2% of a level to count as "on" it.
LEVEL_PROXIMITY = Decimal("0.002")
#: Swings smaller than 5% are noise.
MIN_SWING_SIZE = Decimal("0.05")

_HUNDRED = Decimal("100")


@dataclass
class FibonacciLevels:
    """Retracement levels between a swing high and low.

    ``role`` is "support" when the swing low came first (uptrend, price
    retraces down onto the levels) and "resistance" otherwise.
    """

    high: Decimal
    low: Decimal
    levels: dict[str, Decimal]
    role: Literal["support", "resistance"]


@dataclass
class PriceAction:
    """How the last closes moved relative to a level."""

    bouncing: bool
    rejecting: bool
    breaking_up: bool
    breaking_down: bool
    volume: Literal["high", "normal", "low"]


def compute_levels(high: Decimal, low: Decimal) -> dict[str, Decimal]:
    """Retracement prices measured down from ``high``."""
    span = high - low
    return {name: high - span * ratio for name, ratio in FIBONACCI_RATIOS.items()}


def find_swing_points(
    bars: Sequence[Bar], lookback: int = 20
) -> tuple[tuple[int, Decimal] | None, tuple[int, Decimal] | None]:
    """Highest strict swing high and lowest strict swing low.

    A swing high must exceed every high within ``lookback`` bars on both
    sides (lows mirrored). Needs ``2 * lookback`` bars.
    """
    if len(bars) < lookback * 2:
        return None, None

    swing_high: tuple[int, Decimal] | None = None
    swing_low: tuple[int, Decimal] | None = None

    for i in range(lookback, len(bars) - lookback):
        neighbours = [bars[j] for j in range(i - lookback, i + lookback + 1) if j != i]
        current = bars[i]
        if all(b.high < current.high for b in neighbours):
            if swing_high is None or current.high > swing_high[1]:
                swing_high = (i, current.high)
        if all(b.low > current.low for b in neighbours):
            if swing_low is None or current.low < swing_low[1]:
                swing_low = (i, current.low)

    return swing_high, swing_low


class FibonacciStrategy(SignalProducer):
    """Fibonacci retracement producer (structure category)."""

    name = "fibonacci"

    def __init__(self, settings: StrategySettings | None = None) -> None:
        settings = settings or StrategySettings()
        self._lookback = settings.fib_lookback_period

    def dynamic_levels(
        self, market_data: Sequence[Bar], lookback: int | None = None
    ) -> FibonacciLevels | None:
        """Levels from the current market structure, None without a significant swing."""
        swing_high, swing_low = find_swing_points(market_data, lookback or self._lookback)
        if swing_high is None or swing_low is None:
            return None

        high_idx, high = swing_high
        low_idx, low = swing_low
        if low <= 0 or (high - low) / low < MIN_SWING_SIZE:
            return None

        role: Literal["support", "resistance"] = (
            "support" if low_idx < high_idx else "resistance"
        )
        return FibonacciLevels(high=high, low=low, levels=compute_levels(high, low), role=role)

    def generate_signal(
        self,
        market_data: Sequence[Bar],
        lookback_period: int | None = None,
        **_: Any,
    ) -> TradingSignal | None:
        fib = self.dynamic_levels(market_data, lookback_period)
        if fib is None:
            return None

        latest = market_data[-1]
        price = latest.close

        nearest: tuple[str, Decimal, Decimal] | None = None
        for level_name, level_price in fib.levels.items():
            distance = abs(price - level_price) / price
            if distance <= LEVEL_PROXIMITY and (nearest is None or distance < nearest[2]):
                nearest = (level_name, level_price, distance)
        if nearest is None:
            return None
        level_name, level_price, distance = nearest

        action = self._price_action(market_data, level_price)
        strength = self._strength(level_name, distance, action)

        if fib.role == "support" and action.bouncing:
            signal_type = SignalType.BUY
            reasoning = f"Price bouncing off Fibonacci {level_name}% support level at {level_price:.4f}"
        elif fib.role == "resistance" and action.rejecting:
            signal_type = SignalType.SELL
            reasoning = f"Price rejected at Fibonacci {level_name}% resistance level at {level_price:.4f}"
        elif fib.role == "support" and action.breaking_down:
            signal_type = SignalType.SELL
            strength *= Decimal("0.8")
            reasoning = f"Fibonacci {level_name}% support level breaking down at {level_price:.4f}"
        elif fib.role == "resistance" and action.breaking_up:
            signal_type = SignalType.BUY
            strength *= Decimal("0.8")
            reasoning = f"Fibonacci {level_name}% resistance level breaking up at {level_price:.4f}"
        else:
            return None

        return TradingSignal(
            symbol=latest.symbol,
            type=signal_type,
            strength=round_score(strength),
            confidence=self._confidence(market_data, level_name, fib.role, action),
            indicator_tags=[f"FIB_{level_name}"],
            category=SignalCategory.STRUCTURE,
            timestamp=latest.timestamp,
            reasoning=reasoning,
            risk_reward=self._risk_reward(price, signal_type, fib, level_price),
            metadata={
                "fibonacci_level": level_name,
                "level_price": level_price,
                "level_type": fib.role,
                "distance": distance,
                "swing_high": fib.high,
                "swing_low": fib.low,
                "all_levels": dict(fib.levels),
            },
            source=self.name,
        )

    @staticmethod
    def _price_action(market_data: Sequence[Bar], level: Decimal) -> PriceAction:
        if len(market_data) < 5:
            return PriceAction(False, False, False, False, "normal")

        two_ago, previous, current = (b.close for b in market_data[-3:])

        volume: Literal["high", "normal", "low"] = "normal"
        avg = average_volume(market_data, 20)
        if avg is not None:
            if market_data[-1].volume > avg * Decimal("1.5"):
                volume = "high"
            elif market_data[-1].volume < avg * Decimal("0.7"):
                volume = "low"

        return PriceAction(
            bouncing=previous < level < current,
            rejecting=previous > level > current,
            breaking_up=two_ago < level and previous < level and current > level,
            breaking_down=two_ago > level and previous > level and current < level,
            volume=volume,
        )

    @staticmethod
    def _strength(level_name: str, distance: Decimal, action: PriceAction) -> Decimal:
        strength = Decimal("50")

        if level_name in ("61.8", "50.0"):
            strength += Decimal("20")
        elif level_name == "38.2":
            strength += Decimal("15")
        else:
            strength += Decimal("10")

        if action.bouncing or action.rejecting:
            strength += Decimal("15")
        if action.breaking_up or action.breaking_down:
            strength += Decimal("10")

        if action.volume == "high":
            strength += Decimal("15")
        elif action.volume == "low":
            strength -= Decimal("10")

        # Closer to the level = stronger
        strength += (Decimal("1") - distance / LEVEL_PROXIMITY) * Decimal("10")
        return min(max(strength, Decimal("0")), _HUNDRED)

    @staticmethod
    def _confidence(
        market_data: Sequence[Bar],
        level_name: str,
        role: str,
        action: PriceAction,
    ) -> Decimal:
        confidence = Decimal("50")
        confidence += {"61.8": Decimal("20"), "50.0": Decimal("15"), "38.2": Decimal("10")}.get(
            level_name, Decimal("0")
        )
        if action.bouncing or action.rejecting:
            confidence += Decimal("15")
        if action.volume == "high":
            confidence += Decimal("15")

        if len(market_data) >= 10:
            change = price_change(market_data, 10)
            if change > Decimal("0.02"):
                confidence += Decimal("10") if role == "support" else Decimal("-5")
            elif change < Decimal("-0.02"):
                confidence += Decimal("10") if role == "resistance" else Decimal("-5")

        return round_score(min(confidence, _HUNDRED))

    @staticmethod
    def _risk_reward(
        price: Decimal, signal_type: SignalType, fib: FibonacciLevels, level: Decimal
    ) -> Decimal:
        ordered = sorted(fib.levels.values())
        above = next((p for p in ordered if p > level), fib.high)
        below = next((p for p in reversed(ordered) if p < level), fib.low)

        if signal_type == SignalType.BUY:
            reward, risk = above - price, price - below
        else:
            reward, risk = price - below, above - price

        if risk <= 0:
            return Decimal("1.0")
        return (reward / risk).quantize(Decimal("0.01"))
