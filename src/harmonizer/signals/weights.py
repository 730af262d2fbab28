"""Producer weight resolution.

Merges caller overrides onto the default producer weights, drops disabled
producers and normalizes the remainder to sum to 1.0.
"""

from collections.abc import Mapping
from decimal import Decimal

from harmonizer.config import HarmonySettings
from harmonizer.signals.models import StrategyConfig

_ZERO = Decimal("0")


def default_weights(settings: HarmonySettings | None = None) -> dict[str, Decimal]:
    """Default weight per built-in producer, read from settings."""
    settings = settings or HarmonySettings()
    return {
        "moving_average": settings.weight_moving_average,
        "rsi": settings.weight_rsi,
        "macd": settings.weight_macd,
        "fibonacci": settings.weight_fibonacci,
        "breakout": settings.weight_breakout,
    }


def resolve_weights(
    configs: Mapping[str, StrategyConfig] | None = None,
    defaults: Mapping[str, Decimal] | None = None,
) -> dict[str, Decimal]:
    """Resolve normalized weights for every enabled producer.

    Formula: weight_i / sum(weights) over enabled producers.

    Args:
        configs: Optional per-producer overrides. A config with
            ``enabled=False`` removes the producer; a config with a weight
            replaces the default. Names not in ``defaults`` are ignored.
        defaults: Producer name -> default weight. The keys define the
            producer universe. Defaults to the built-in producer weights.

    Returns:
        Map covering exactly the enabled producers, summing to 1.0. When
        every weight is zero, every producer maps to 0 instead.
    """
    configs = configs or {}
    if defaults is None:
        defaults = default_weights()

    raw: dict[str, Decimal] = {}
    for name, default in defaults.items():
        config = configs.get(name)
        if config is not None and not config.enabled:
            continue
        if config is not None and config.weight is not None:
            raw[name] = config.weight
        else:
            raw[name] = default

    total = sum(raw.values(), _ZERO)
    if total <= _ZERO:
        return {name: _ZERO for name in raw}
    return {name: weight / total for name, weight in raw.items()}
