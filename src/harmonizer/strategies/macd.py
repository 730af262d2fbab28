"""MACD signal-line crossover momentum strategy."""

from collections.abc import Sequence
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from harmonizer.config import StrategySettings
from harmonizer.models import Bar, SignalCategory, SignalType, TradingSignal
from harmonizer.strategies.base import SignalProducer
from harmonizer.strategies.indicators import (
    closes,
    compute_ema,
    range_risk_reward,
    round_score,
    volume_above,
)

_MACD_QUANTIZE = Decimal("0.0001")
_HUNDRED = Decimal("100")


@dataclass
class MACDPoint:
    """MACD line, signal line and histogram for one bar."""

    macd: Decimal
    signal: Decimal
    histogram: Decimal


def compute_macd_series(
    prices: Sequence[Decimal],
    fast_period: int = 12,
    slow_period: int = 26,
    signal_period: int = 9,
) -> list[MACDPoint]:
    """MACD points for every bar from the first full slow window onward.

    Empty when there are fewer than ``slow_period + signal_period`` prices.
    Values are rounded to 4 decimal places.
    """
    if len(prices) < slow_period + signal_period:
        return []

    fast = compute_ema(prices, fast_period)
    slow = compute_ema(prices, slow_period)
    macd_line = [f - s for f, s in zip(fast[slow_period - 1 :], slow[slow_period - 1 :])]
    signal_line = compute_ema(macd_line, signal_period)

    points = []
    for m, s in zip(macd_line, signal_line):
        points.append(
            MACDPoint(
                macd=m.quantize(_MACD_QUANTIZE, rounding=ROUND_HALF_UP),
                signal=s.quantize(_MACD_QUANTIZE, rounding=ROUND_HALF_UP),
                histogram=(m - s).quantize(_MACD_QUANTIZE, rounding=ROUND_HALF_UP),
            )
        )
    return points


def crossover_strength(point: MACDPoint, bullish: bool) -> Decimal:
    """Histogram magnitude scaled onto 0-80, +20 when on the confirming side of zero."""
    strength = min(abs(point.histogram) * Decimal("1000"), Decimal("80"))
    if (bullish and point.macd > 0) or (not bullish and point.macd < 0):
        strength += Decimal("20")
    return round_score(min(strength, _HUNDRED))


class MACDStrategy(SignalProducer):
    """MACD crossover producer (momentum category)."""

    name = "macd"

    def __init__(self, settings: StrategySettings | None = None) -> None:
        settings = settings or StrategySettings()
        self._fast_period = settings.macd_fast_period
        self._slow_period = settings.macd_slow_period
        self._signal_period = settings.macd_signal_period

    def generate_signal(
        self,
        market_data: Sequence[Bar],
        fast_period: int | None = None,
        slow_period: int | None = None,
        signal_period: int | None = None,
        **_: Any,
    ) -> TradingSignal | None:
        fast_period = fast_period or self._fast_period
        slow_period = slow_period or self._slow_period
        signal_period = signal_period or self._signal_period

        if len(market_data) < slow_period + signal_period + 1:
            return None

        points = compute_macd_series(
            closes(market_data), fast_period, slow_period, signal_period
        )
        if len(points) < 2:
            return None
        previous, current = points[-2], points[-1]

        if previous.macd <= previous.signal and current.macd > current.signal:
            signal_type = SignalType.BUY
            base_strength = crossover_strength(current, bullish=True)
            on_zero_side = current.macd > 0
            reasoning = (
                f"MACD bullish crossover: MACD ({current.macd}) crossed above "
                f"Signal ({current.signal})"
            )
            if on_zero_side:
                reasoning += " above zero line"
        elif previous.macd >= previous.signal and current.macd < current.signal:
            signal_type = SignalType.SELL
            base_strength = crossover_strength(current, bullish=False)
            on_zero_side = current.macd < 0
            reasoning = (
                f"MACD bearish crossover: MACD ({current.macd}) crossed below "
                f"Signal ({current.signal})"
            )
            if on_zero_side:
                reasoning += " below zero line"
        else:
            return None

        strength = base_strength
        if on_zero_side:
            strength = min(strength + Decimal("15"), _HUNDRED)

        histogram_rising = len(points) >= 3 and (
            points[-1].histogram > points[-2].histogram > points[-3].histogram
        )

        confidence = Decimal("50") + base_strength * Decimal("0.3")
        if on_zero_side:
            confidence += Decimal("15")
        if histogram_rising:
            confidence += Decimal("10")
        if volume_above(market_data, Decimal("1.2")):
            confidence += Decimal("10")

        latest = market_data[-1]
        return TradingSignal(
            symbol=latest.symbol,
            type=signal_type,
            strength=round_score(strength),
            confidence=round_score(min(confidence, _HUNDRED)),
            indicator_tags=[f"MACD_{fast_period}_{slow_period}_{signal_period}"],
            category=SignalCategory.MOMENTUM,
            timestamp=latest.timestamp,
            reasoning=reasoning,
            risk_reward=range_risk_reward(market_data, signal_type),
            metadata={
                "macd": current.macd,
                "signal": current.signal,
                "histogram": current.histogram,
                "above_zero": current.macd > 0,
                "histogram_increasing": histogram_rising,
            },
            source=self.name,
        )
