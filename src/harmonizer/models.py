"""Shared data models for market bars and strategy signals.

CRITICAL: All prices, volumes and scores use Decimal. Never use float for signal computations.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any

from harmonizer.exceptions import InvalidSignalError

_ZERO = Decimal("0")
_HUNDRED = Decimal("100")


class SignalType(str, Enum):
    """Directional opinion of a signal."""

    BUY = "BUY"
    SELL = "SELL"
    HOLD = "HOLD"


class SignalCategory(str, Enum):
    """Indicator family a signal belongs to, set by its producer."""

    MOMENTUM = "MOMENTUM"  # RSI, MACD
    TREND = "TREND"  # Moving average crossovers
    STRUCTURE = "STRUCTURE"  # Fibonacci levels, breakouts


def to_decimal(value: Decimal | int | float | str) -> Decimal:
    """Coerce a numeric value to Decimal without binary float artifacts."""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def clamp_score(value: Decimal) -> Decimal:
    """Clamp a score to the 0-100 range."""
    return min(max(value, _ZERO), _HUNDRED)


@dataclass
class Bar:
    """A single OHLCV bar. Market data is a list of bars ordered oldest first."""

    symbol: str
    timestamp: datetime
    open: Decimal
    high: Decimal
    low: Decimal
    close: Decimal
    volume: Decimal


@dataclass
class TradingSignal:
    """One producer's directional opinion on the latest bar.

    ``strength`` and ``confidence`` are clamped to [0, 100] on construction.
    ``source`` is the producer name; the engine stamps it when collecting
    signals so weights never depend on tag text.
    """

    symbol: str
    type: SignalType
    strength: Decimal
    confidence: Decimal
    indicator_tags: list[str]
    category: SignalCategory
    timestamp: datetime
    reasoning: str = ""
    risk_reward: Decimal = Decimal("1.0")
    metadata: dict[str, Any] = field(default_factory=dict)
    source: str = ""

    def __post_init__(self) -> None:
        if not self.indicator_tags:
            raise InvalidSignalError(f"signal for {self.symbol} has no indicator tags")
        self.type = SignalType(self.type)
        self.category = SignalCategory(self.category)
        self.strength = clamp_score(to_decimal(self.strength))
        self.confidence = clamp_score(to_decimal(self.confidence))
        self.risk_reward = to_decimal(self.risk_reward)
        if self.risk_reward <= _ZERO:
            self.risk_reward = Decimal("1.0")

    @property
    def tag_label(self) -> str:
        """Comma-joined indicator tags, e.g. ``EMA_20,EMA_50``."""
        return ",".join(self.indicator_tags)
