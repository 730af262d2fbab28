"""Cross-strategy conflict detection.

Conflicts are informational: they never change the decision, but they lower
validation quality and are surfaced in the reasoning text.
"""

from collections.abc import Sequence
from decimal import Decimal

from harmonizer.models import SignalCategory, SignalType, TradingSignal


def detect_conflicts(
    signals: Sequence[TradingSignal],
    strong_threshold: Decimal = Decimal("70"),
) -> list[str]:
    """Describe disagreement patterns between signals.

    Rules, in order, each adding at most one description:
    1. Strong opposition: at least one BUY and one SELL with strength
       strictly above ``strong_threshold``.
    2. Momentum vs trend: momentum and trend signals each agree internally
       on a single direction, and those directions differ.

    Args:
        signals: Signals from one harmonization pass.
        strong_threshold: Strength a signal must exceed to count as strong.

    Returns:
        Conflict descriptions in rule order. Empty for fewer than two signals.
    """
    conflicts: list[str] = []
    if len(signals) < 2:
        return conflicts

    strong_buys = [
        s for s in signals if s.type == SignalType.BUY and s.strength > strong_threshold
    ]
    strong_sells = [
        s for s in signals if s.type == SignalType.SELL and s.strength > strong_threshold
    ]
    if strong_buys and strong_sells:
        buy_tags = " vs ".join(s.tag_label for s in strong_buys)
        sell_tags = " vs ".join(s.tag_label for s in strong_sells)
        conflicts.append(f"Strong conflicting signals: {buy_tags} vs {sell_tags}")

    momentum_types = _distinct_types(signals, SignalCategory.MOMENTUM)
    trend_types = _distinct_types(signals, SignalCategory.TREND)
    if len(momentum_types) == 1 and len(trend_types) == 1 and momentum_types != trend_types:
        conflicts.append(
            f"Momentum vs Trend conflict: Momentum indicates {momentum_types[0].value}, "
            f"Trend indicates {trend_types[0].value}"
        )

    return conflicts


def _distinct_types(
    signals: Sequence[TradingSignal], category: SignalCategory
) -> list[SignalType]:
    """Directions seen in ``category``, in first-seen order."""
    seen: list[SignalType] = []
    for s in signals:
        if s.category == category and s.type not in seen:
            seen.append(s.type)
    return seen
