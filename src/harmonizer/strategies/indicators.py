"""Shared indicator math for the built-in signal producers.

EMA, SMA and Wilder RSI over close prices, plus the volume, range and
risk-reward helpers every producer uses. Uses Decimal arithmetic with
quantize to prevent precision explosion.

CRITICAL: All computations use Decimal. Never use float.
"""

from collections.abc import Sequence
from decimal import ROUND_HALF_UP, Decimal
from typing import Literal

from harmonizer.models import Bar, SignalType

#: Precision limit for EMA intermediate results (12 decimal places).
_EMA_QUANTIZE = Decimal("0.000000000001")

_ZERO = Decimal("0")
_ONE = Decimal("1")
_HUNDRED = Decimal("100")


def round_score(value: Decimal) -> Decimal:
    """Round a 0-100 score to a whole number (half up)."""
    return value.quantize(_ONE, rounding=ROUND_HALF_UP)


def closes(bars: Sequence[Bar]) -> list[Decimal]:
    """Close prices of ``bars`` in order."""
    return [b.close for b in bars]


def compute_ema(values: Sequence[Decimal], period: int) -> list[Decimal]:
    """Compute the Exponential Moving Average series of ``values``.

    Uses the standard recursive formula:
        alpha = 2 / (period + 1)
        EMA_t = alpha * value_t + (1 - alpha) * EMA_{t-1}

    First EMA value = first input value. The series is prefix-stable: the
    EMA of ``values[:k]`` equals ``compute_ema(values, period)[k - 1]``.

    Args:
        values: Ordered values (oldest first).
        period: Number of periods for EMA smoothing.

    Returns:
        List of EMA values, same length as input. Empty list if input is empty.
    """
    if not values:
        return []

    alpha = Decimal("2") / (Decimal(period) + _ONE)
    one_minus_alpha = _ONE - alpha

    ema = [values[0].quantize(_EMA_QUANTIZE)]
    for v in values[1:]:
        ema.append((alpha * v + one_minus_alpha * ema[-1]).quantize(_EMA_QUANTIZE))
    return ema


def compute_sma(values: Sequence[Decimal], period: int) -> Decimal | None:
    """Simple average of the last ``period`` values, None if too few."""
    if period <= 0 or len(values) < period:
        return None
    return sum(values[-period:], _ZERO) / Decimal(period)


def compute_rsi(values: Sequence[Decimal], period: int = 14) -> Decimal | None:
    """Relative Strength Index using Wilder's smoothing.

    Needs at least ``period + 1`` values. Returns 100 when there are no
    losses in the window, otherwise ``100 - 100 / (1 + avg_gain / avg_loss)``
    rounded to 2 decimal places.
    """
    if len(values) < period + 1:
        return None

    changes = [values[i] - values[i - 1] for i in range(1, len(values))]
    gains = [c if c > 0 else _ZERO for c in changes]
    losses = [-c if c < 0 else _ZERO for c in changes]

    p = Decimal(period)
    avg_gain = sum(gains[:period], _ZERO) / p
    avg_loss = sum(losses[:period], _ZERO) / p
    for i in range(period, len(changes)):
        avg_gain = (avg_gain * (p - _ONE) + gains[i]) / p
        avg_loss = (avg_loss * (p - _ONE) + losses[i]) / p

    if avg_loss == _ZERO:
        return _HUNDRED

    rs = avg_gain / avg_loss
    rsi = _HUNDRED - _HUNDRED / (_ONE + rs)
    return rsi.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def average_volume(bars: Sequence[Bar], window: int = 20) -> Decimal | None:
    """Average volume over the last ``window`` bars, None if too few."""
    if len(bars) < window:
        return None
    return sum((b.volume for b in bars[-window:]), _ZERO) / Decimal(window)


def volume_above(bars: Sequence[Bar], ratio: Decimal, window: int = 20) -> bool:
    """True when the latest volume is at least ``ratio`` times the window average."""
    avg = average_volume(bars, window)
    if avg is None:
        return False
    return bars[-1].volume >= avg * ratio


def price_change(bars: Sequence[Bar], window: int) -> Decimal:
    """Fractional close-to-close change over the last ``window`` bars."""
    recent = closes(bars[-window:])
    if len(recent) < 2 or recent[0] == _ZERO:
        return _ZERO
    return (recent[-1] - recent[0]) / recent[0]


def recent_range(bars: Sequence[Bar], window: int = 20) -> tuple[Decimal, Decimal]:
    """Highest high and lowest low over the last ``window`` bars."""
    recent = bars[-window:]
    return max(b.high for b in recent), min(b.low for b in recent)


def range_risk_reward(
    bars: Sequence[Bar],
    signal_type: SignalType,
    adjustment: Decimal = _ONE,
    window: int = 20,
) -> Decimal:
    """Risk-reward ratio targeting the recent range extreme.

    BUY targets the recent high with a stop at the recent low; SELL the
    reverse. ``adjustment`` scales the reward. Falls back to 1.0 when the
    risk is not positive.
    """
    price = bars[-1].close
    high, low = recent_range(bars, window)

    if signal_type == SignalType.BUY:
        reward = (high - price) * adjustment
        risk = price - low
    else:
        reward = (price - low) * adjustment
        risk = high - price

    if risk <= _ZERO:
        return Decimal("1.0")
    return (reward / risk).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def find_local_extremes(
    values: Sequence[Decimal],
    kind: Literal["high", "low"],
    lookback: int = 3,
) -> list[tuple[int, Decimal]]:
    """Indices and values that are strict extremes within ``lookback`` on both sides."""
    extremes: list[tuple[int, Decimal]] = []
    for i in range(lookback, len(values) - lookback):
        window = [values[j] for j in range(i - lookback, i + lookback + 1) if j != i]
        if kind == "high" and all(v < values[i] for v in window):
            extremes.append((i, values[i]))
        elif kind == "low" and all(v > values[i] for v in window):
            extremes.append((i, values[i]))
    return extremes
