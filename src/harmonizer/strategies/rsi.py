"""RSI overbought/oversold momentum strategy.

Emits BUY when RSI is at or below the oversold level and SELL when at or
above the overbought level. Neutral RSI produces no opinion.
"""

from collections.abc import Sequence
from decimal import Decimal
from typing import Any

from harmonizer.config import StrategySettings
from harmonizer.models import Bar, SignalCategory, SignalType, TradingSignal
from harmonizer.strategies.base import SignalProducer
from harmonizer.strategies.indicators import (
    closes,
    compute_rsi,
    price_change,
    range_risk_reward,
    round_score,
    volume_above,
)

EXTREME_OVERBOUGHT = Decimal("80")
EXTREME_OVERSOLD = Decimal("20")

_HUNDRED = Decimal("100")
_TREND_MOVE = Decimal("0.02")


class RSIStrategy(SignalProducer):
    """Wilder RSI producer (momentum category)."""

    name = "rsi"

    def __init__(self, settings: StrategySettings | None = None) -> None:
        settings = settings or StrategySettings()
        self._period = settings.rsi_period
        self._overbought = settings.rsi_overbought
        self._oversold = settings.rsi_oversold

    def generate_signal(
        self,
        market_data: Sequence[Bar],
        period: int | None = None,
        **_: Any,
    ) -> TradingSignal | None:
        period = period or self._period
        rsi = compute_rsi(closes(market_data), period)
        if rsi is None:
            return None

        if rsi <= self._oversold:
            signal_type = SignalType.BUY
            strength = self._oversold_strength(rsi)
            reasoning = f"RSI oversold at {rsi} (below {self._oversold})"
            extreme = rsi <= EXTREME_OVERSOLD
        elif rsi >= self._overbought:
            signal_type = SignalType.SELL
            strength = self._overbought_strength(rsi)
            reasoning = f"RSI overbought at {rsi} (above {self._overbought})"
            extreme = rsi >= EXTREME_OVERBOUGHT
        else:
            return None

        adjustment = Decimal("1.2") if extreme else Decimal("1")
        latest = market_data[-1]
        return TradingSignal(
            symbol=latest.symbol,
            type=signal_type,
            strength=strength,
            confidence=self._confidence(market_data, signal_type, extreme),
            indicator_tags=[f"RSI_{period}"],
            category=SignalCategory.MOMENTUM,
            timestamp=latest.timestamp,
            reasoning=reasoning,
            risk_reward=range_risk_reward(market_data, signal_type, adjustment),
            metadata={
                "rsi": rsi,
                "overbought": signal_type == SignalType.SELL,
                "oversold": signal_type == SignalType.BUY,
                "extreme_level": extreme,
            },
            source=self.name,
        )

    def _oversold_strength(self, rsi: Decimal) -> Decimal:
        """Deeper below the oversold level = stronger, +20 when extreme."""
        strength = (self._oversold - rsi) / self._oversold * _HUNDRED
        if rsi <= EXTREME_OVERSOLD:
            strength += Decimal("20")
        return round_score(min(strength, _HUNDRED))

    def _overbought_strength(self, rsi: Decimal) -> Decimal:
        """Further above the overbought level = stronger, +20 when extreme."""
        strength = (rsi - self._overbought) / (_HUNDRED - self._overbought) * _HUNDRED
        if rsi >= EXTREME_OVERBOUGHT:
            strength += Decimal("20")
        return round_score(min(strength, _HUNDRED))

    def _confidence(
        self, market_data: Sequence[Bar], signal_type: SignalType, extreme: bool
    ) -> Decimal:
        confidence = Decimal("50")
        confidence += Decimal("25") if extreme else Decimal("15")

        if volume_above(market_data, Decimal("1.2")):
            confidence += Decimal("10")

        # Oversold after a drop (or overbought after a rally) is the textbook setup
        if len(market_data) >= 10:
            change = price_change(market_data, 10)
            if change < -_TREND_MOVE:
                confidence += Decimal("10") if signal_type == SignalType.BUY else Decimal("-5")
            elif change > _TREND_MOVE:
                confidence += Decimal("10") if signal_type == SignalType.SELL else Decimal("-5")

        return round_score(min(confidence, _HUNDRED))
