"""EMA crossover trend strategy.

Emits BUY on a golden cross (fast EMA crosses above slow EMA on the latest
bar) and SELL on a death cross. Strength scales with the separation between
the two EMAs; confidence gets a bonus when volume confirms the cross.
"""

from collections.abc import Sequence
from decimal import Decimal
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

#: Latest volume must reach this multiple of the 20-bar average.
VOLUME_CONFIRMATION_RATIO = Decimal("1.5")


def crossover_strength(fast: Decimal, slow: Decimal) -> Decimal:
    """Map EMA separation (percent of their midpoint) onto 0-100.

    Typical separations of 0.1%-5% scale by 20, capped at 100.
    """
    midpoint = (fast + slow) / Decimal("2")
    if midpoint == 0:
        return Decimal("0")
    separation_pct = abs(fast - slow) / midpoint * Decimal("100")
    return round_score(min(separation_pct * Decimal("20"), Decimal("100")))


class MovingAverageStrategy(SignalProducer):
    """Fast/slow EMA crossover producer (trend category)."""

    name = "moving_average"

    def __init__(self, settings: StrategySettings | None = None) -> None:
        settings = settings or StrategySettings()
        self._fast_period = settings.ma_fast_period
        self._slow_period = settings.ma_slow_period

    def generate_signal(
        self,
        market_data: Sequence[Bar],
        fast_period: int | None = None,
        slow_period: int | None = None,
        **_: Any,
    ) -> TradingSignal | None:
        fast_period = fast_period or self._fast_period
        slow_period = slow_period or self._slow_period

        # One extra bar so the previous EMA pair is also fully warmed up
        if len(market_data) < max(fast_period, slow_period) + 1:
            return None

        prices = closes(market_data)
        fast = compute_ema(prices, fast_period)
        slow = compute_ema(prices, slow_period)

        prev_fast, prev_slow = fast[-2], slow[-2]
        cur_fast, cur_slow = fast[-1], slow[-1]

        if prev_fast <= prev_slow and cur_fast > cur_slow:
            signal_type = SignalType.BUY
            cross = "Golden Cross"
            verb = "above"
            outlook = "bullish"
        elif prev_fast >= prev_slow and cur_fast < cur_slow:
            signal_type = SignalType.SELL
            cross = "Death Cross"
            verb = "below"
            outlook = "bearish"
        else:
            return None

        strength = crossover_strength(cur_fast, cur_slow)
        volume_confirmed = volume_above(market_data, VOLUME_CONFIRMATION_RATIO)
        confidence = strength
        if volume_confirmed:
            confidence = min(confidence + Decimal("20"), Decimal("100"))

        volume_text = (
            " with strong volume confirmation" if volume_confirmed else " with weak volume"
        )
        latest = market_data[-1]
        return TradingSignal(
            symbol=latest.symbol,
            type=signal_type,
            strength=strength,
            confidence=confidence,
            indicator_tags=[f"EMA_{fast_period}", f"EMA_{slow_period}"],
            category=SignalCategory.TREND,
            timestamp=latest.timestamp,
            reasoning=(
                f"{cross} detected: {fast_period}-period EMA crossed {verb} "
                f"{slow_period}-period EMA{volume_text}. Signal strength: "
                f"{strength}/100. This indicates potential {outlook} momentum."
            ),
            risk_reward=range_risk_reward(market_data, signal_type),
            metadata={
                "fast_ema": cur_fast,
                "slow_ema": cur_slow,
                "volume_confirmed": volume_confirmed,
                "crossover": cross.upper().replace(" ", "_"),
            },
            source=self.name,
        )
