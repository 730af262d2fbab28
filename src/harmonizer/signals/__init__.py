"""Signal harmonization: fusing strategy opinions into one decision.

Provides the data models, the weight resolver, the score aggregator and
decision rule, conflict detection, confidence calibration, reasoning text,
the harmony validator, and the HarmonizationEngine that runs them as one
pipeline.
"""

from harmonizer.signals.composite import aggregate, compute_composite_score, decide
from harmonizer.signals.confidence import calibrate
from harmonizer.signals.conflicts import detect_conflicts
from harmonizer.signals.engine import HarmonizationEngine
from harmonizer.signals.models import (
    DirectionScores,
    HarmonizedSignal,
    IndicatorSnapshot,
    ProducerOutcome,
    StrategyConfig,
    ValidationResult,
)
from harmonizer.signals.reasoning import explain
from harmonizer.signals.validator import validate
from harmonizer.signals.weights import default_weights, resolve_weights

__all__ = [
    "DirectionScores",
    "HarmonizationEngine",
    "HarmonizedSignal",
    "IndicatorSnapshot",
    "ProducerOutcome",
    "StrategyConfig",
    "ValidationResult",
    "aggregate",
    "calibrate",
    "compute_composite_score",
    "decide",
    "default_weights",
    "detect_conflicts",
    "explain",
    "resolve_weights",
    "validate",
]
