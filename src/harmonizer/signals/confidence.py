"""Confidence calibration for the harmonized decision."""

from collections.abc import Sequence
from decimal import Decimal

from harmonizer.models import SignalType, TradingSignal, clamp_score

_ZERO = Decimal("0")


def calibrate(
    signals: Sequence[TradingSignal],
    overall_signal: SignalType,
    strength: Decimal,
    consensus_factor: Decimal = Decimal("40"),
    agreeing_confidence_factor: Decimal = Decimal("0.4"),
    strength_factor: Decimal = Decimal("0.2"),
) -> Decimal:
    """Confidence in the overall decision, 0-100.

    Formula:
        consensus_ratio * 40 + avg_agreeing_confidence * 0.4 + strength * 0.2

    where consensus_ratio is the share of all signals agreeing with
    ``overall_signal`` and avg_agreeing_confidence is 0 when none agree.
    """
    if not signals:
        return _ZERO

    agreeing = [s for s in signals if s.type == overall_signal]
    consensus_ratio = Decimal(len(agreeing)) / Decimal(len(signals))
    avg_confidence = (
        sum((s.confidence for s in agreeing), _ZERO) / Decimal(len(agreeing))
        if agreeing
        else _ZERO
    )

    confidence = (
        consensus_ratio * consensus_factor
        + avg_confidence * agreeing_confidence_factor
        + strength * strength_factor
    )
    return clamp_score(confidence).quantize(Decimal("0.000001"))
