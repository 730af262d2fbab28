"""Built-in technical-analysis signal producers.

Each producer turns an ordered bar history into at most one TradingSignal.
The harmonization engine consumes them only through SignalProducer.
"""

from harmonizer.config import StrategySettings
from harmonizer.strategies.base import SignalProducer
from harmonizer.strategies.breakout import BreakoutStrategy
from harmonizer.strategies.fibonacci import FibonacciStrategy
from harmonizer.strategies.macd import MACDStrategy
from harmonizer.strategies.moving_average import MovingAverageStrategy
from harmonizer.strategies.rsi import RSIStrategy


def default_producers(settings: StrategySettings | None = None) -> dict[str, SignalProducer]:
    """The five built-in producers keyed by name, in evaluation order."""
    producers: list[SignalProducer] = [
        MovingAverageStrategy(settings),
        RSIStrategy(settings),
        MACDStrategy(settings),
        FibonacciStrategy(settings),
        BreakoutStrategy(settings),
    ]
    return {p.name: p for p in producers}


__all__ = [
    "BreakoutStrategy",
    "FibonacciStrategy",
    "MACDStrategy",
    "MovingAverageStrategy",
    "RSIStrategy",
    "SignalProducer",
    "default_producers",
]
