"""Human-readable explanation of a harmonized decision."""

from collections.abc import Sequence
from decimal import ROUND_HALF_UP, Decimal

from harmonizer.models import SignalType, TradingSignal


def _percent(value: Decimal) -> Decimal:
    return value.quantize(Decimal("1"), rounding=ROUND_HALF_UP)


def explain(
    signals: Sequence[TradingSignal],
    overall_signal: SignalType,
    conflicts: Sequence[str],
) -> str:
    """Build the reasoning text.

    Always mentions the indicator count and agreement ratio; names the two
    strongest agreeing signals (input order breaks ties) and repeats any
    conflict descriptions verbatim.
    """
    agreeing = [s for s in signals if s.type == overall_signal]
    parts = [
        f"Harmonized {overall_signal.value} signal based on {len(signals)} indicators.",
        f"{len(agreeing)}/{len(signals)} indicators agree.",
    ]

    strongest = sorted(agreeing, key=lambda s: s.strength, reverse=True)[:2]
    if strongest:
        listed = ", ".join(f"{s.tag_label} ({_percent(s.strength)}%)" for s in strongest)
        parts.append(f"Strongest signals: {listed}.")

    if conflicts:
        parts.append(f"Signal conflicts detected: {'; '.join(conflicts)}.")

    return " ".join(parts)
