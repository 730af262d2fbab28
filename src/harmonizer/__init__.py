"""Signal harmonizer: fuses technical-analysis strategy opinions into one trading decision."""

from harmonizer.models import Bar, SignalCategory, SignalType, TradingSignal
from harmonizer.signals import (
    HarmonizationEngine,
    HarmonizedSignal,
    StrategyConfig,
    ValidationResult,
)

__all__ = [
    "Bar",
    "HarmonizationEngine",
    "HarmonizedSignal",
    "SignalCategory",
    "SignalType",
    "StrategyConfig",
    "TradingSignal",
    "ValidationResult",
]
