"""Harmonization data models.

CRITICAL: All score and weight values use Decimal. Never use float for signal computations.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from types import MappingProxyType
from typing import Any

from harmonizer.exceptions import InvalidConfigError, ProducerError
from harmonizer.models import SignalCategory, SignalType, TradingSignal, to_decimal


@dataclass
class StrategyConfig:
    """Caller override for one producer.

    ``weight=None`` keeps the producer's default weight. ``parameters`` are
    passed to the producer's ``generate_signal`` as keyword arguments.
    """

    name: str
    enabled: bool = True
    weight: Decimal | None = None
    parameters: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.weight is not None:
            self.weight = to_decimal(self.weight)
            if self.weight < 0:
                raise InvalidConfigError(
                    f"weight for {self.name} must be >= 0, got {self.weight}"
                )


@dataclass(frozen=True)
class IndicatorSnapshot:
    """Normalized view of one contributing signal inside a HarmonizedSignal."""

    name: str  # Comma-joined indicator tags
    source: str  # Producer name
    type: SignalType
    category: SignalCategory
    value: Decimal  # Signal strength
    confidence: Decimal
    timestamp: datetime
    parameters: Mapping[str, Any] = field(default_factory=dict, hash=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "parameters", MappingProxyType(dict(self.parameters)))

    @classmethod
    def from_signal(cls, signal: TradingSignal) -> "IndicatorSnapshot":
        return cls(
            name=signal.tag_label,
            source=signal.source,
            type=signal.type,
            category=signal.category,
            value=signal.strength,
            confidence=signal.confidence,
            timestamp=signal.timestamp,
            parameters=dict(signal.metadata),
        )


@dataclass(frozen=True)
class DirectionScores:
    """Weighted composite score per direction (0-100 each)."""

    buy: Decimal
    sell: Decimal
    hold: Decimal


@dataclass(frozen=True)
class HarmonizedSignal:
    """The engine's single fused decision for the latest bar.

    Created fresh by every harmonize call and never mutated afterwards;
    ``weights`` and each snapshot's ``parameters`` are read-only mappings.
    """

    symbol: str
    timestamp: datetime
    overall_signal: SignalType
    strength: Decimal  # 0-100
    confidence: Decimal  # 0-100
    indicators: tuple[IndicatorSnapshot, ...]
    weights: Mapping[str, Decimal] = field(hash=False)  # Normalized weights actually used
    conflicts: tuple[str, ...]
    reasoning: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "weights", MappingProxyType(dict(self.weights)))


@dataclass
class ValidationResult:
    """Outcome of a harmony quality check."""

    is_valid: bool
    issues: list[str] = field(default_factory=list)
    recommendations: list[str] = field(default_factory=list)


@dataclass
class ProducerOutcome:
    """Result of one producer invocation: a signal, no opinion, or an error."""

    producer: str
    signal: TradingSignal | None = None
    error: ProducerError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None
