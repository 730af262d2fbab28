"""Weighted score aggregation and the overall decision rule.

Each signal is reduced to a composite score mixing its strength and
confidence. Signals are grouped by direction and each group gets the
producer-weighted average of its composite scores. The decision rule then
requires a clear winner and a minimum BUY/SELL margin before acting;
anything else resolves to HOLD.

CRITICAL: All computations use Decimal. Never use float for signal scores.
"""

from collections.abc import Mapping, Sequence
from decimal import Decimal

from harmonizer.models import SignalType, TradingSignal
from harmonizer.signals.models import DirectionScores

_ZERO = Decimal("0")
_SCORE_QUANTIZE = Decimal("0.000001")


def compute_composite_score(
    strength: Decimal,
    confidence: Decimal,
    strength_weight: Decimal = Decimal("0.7"),
    confidence_weight: Decimal = Decimal("0.3"),
) -> Decimal:
    """Combine a signal's strength and confidence into one 0-100 score.

    Formula: strength * strength_weight + confidence * confidence_weight

    Returns:
        Composite score quantized to 6 decimal places.
    """
    score = strength * strength_weight + confidence * confidence_weight
    return score.quantize(_SCORE_QUANTIZE)


def weighted_group_score(
    signals: Sequence[TradingSignal],
    weights: Mapping[str, Decimal],
    strength_weight: Decimal = Decimal("0.7"),
    confidence_weight: Decimal = Decimal("0.3"),
) -> Decimal:
    """Producer-weighted average composite score of one direction group.

    Signals from producers missing in ``weights`` count with weight 0.
    An empty group, or one whose weights are all zero, scores 0.
    """
    total_score = _ZERO
    total_weight = _ZERO
    for signal in signals:
        weight = weights.get(signal.source, _ZERO)
        composite = compute_composite_score(
            signal.strength, signal.confidence, strength_weight, confidence_weight
        )
        total_score += composite * weight
        total_weight += weight

    if total_weight <= _ZERO:
        return _ZERO
    return (total_score / total_weight).quantize(_SCORE_QUANTIZE)


def aggregate(
    signals: Sequence[TradingSignal],
    weights: Mapping[str, Decimal],
    strength_weight: Decimal = Decimal("0.7"),
    confidence_weight: Decimal = Decimal("0.3"),
) -> DirectionScores:
    """Partition signals by type and score each direction."""

    def group(signal_type: SignalType) -> Decimal:
        members = [s for s in signals if s.type == signal_type]
        return weighted_group_score(members, weights, strength_weight, confidence_weight)

    return DirectionScores(
        buy=group(SignalType.BUY),
        sell=group(SignalType.SELL),
        hold=group(SignalType.HOLD),
    )


def decide(
    scores: DirectionScores, min_margin: Decimal = Decimal("20")
) -> tuple[SignalType, Decimal]:
    """Pick the overall direction and its strength.

    BUY (or SELL) wins only when it is strictly the greatest of the three
    scores AND leads the opposite side by at least ``min_margin``. Every
    other case, including exact ties, is HOLD at the highest score.
    """
    margin = abs(scores.buy - scores.sell)

    if scores.buy > scores.sell and scores.buy > scores.hold and margin >= min_margin:
        return SignalType.BUY, scores.buy
    if scores.sell > scores.buy and scores.sell > scores.hold and margin >= min_margin:
        return SignalType.SELL, scores.sell
    return SignalType.HOLD, max(scores.buy, scores.sell, scores.hold)
