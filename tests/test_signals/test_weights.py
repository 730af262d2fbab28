"""Tests for producer weight resolution.

Tests verify:
- Defaults sum to 1.0 and cover all five producers
- Overrides replace defaults, unspecified producers keep theirs
- Disabled producers are removed from the map
- Arbitrary totals normalize to 1.0
- All-zero weights do not divide by zero
"""

from decimal import Decimal

import pytest

from harmonizer.config import HarmonySettings
from harmonizer.exceptions import InvalidConfigError
from harmonizer.signals.models import StrategyConfig
from harmonizer.signals.weights import default_weights, resolve_weights


class TestDefaultWeights:
    """Tests for default_weights."""

    def test_defaults_sum_to_one(self) -> None:
        """Default producer weights sum to exactly 1.0."""
        weights = default_weights()
        assert sum(weights.values()) == Decimal("1.00")
        assert set(weights) == {"moving_average", "rsi", "macd", "fibonacci", "breakout"}

    def test_defaults_read_from_settings(self) -> None:
        """Settings override the default weight values."""
        settings = HarmonySettings(weight_macd=Decimal("0.5"))
        assert default_weights(settings)["macd"] == Decimal("0.5")


class TestResolveWeights:
    """Tests for resolve_weights."""

    def test_no_configs_returns_defaults(self) -> None:
        """Without overrides the already-normalized defaults come back unchanged."""
        weights = resolve_weights()
        assert weights["macd"] == Decimal("0.25")
        assert weights["fibonacci"] == Decimal("0.15")

    def test_override_renormalizes(self) -> None:
        """Overriding one weight renormalizes all enabled producers."""
        configs = {"rsi": StrategyConfig(name="rsi", weight=Decimal("1.20"))}
        weights = resolve_weights(configs)
        # Raw total = 0.20 + 1.20 + 0.25 + 0.15 + 0.20 = 2.00
        assert weights["rsi"] == Decimal("0.6")
        assert weights["moving_average"] == Decimal("0.1")

    def test_disabled_producer_removed(self) -> None:
        """A disabled producer is excluded and the rest sum to 1.0."""
        configs = {"macd": StrategyConfig(name="macd", enabled=False)}
        weights = resolve_weights(configs)
        assert "macd" not in weights
        assert abs(sum(weights.values()) - Decimal("1")) <= Decimal("1e-6")

    @pytest.mark.parametrize(
        "raw",
        [
            {"moving_average": 3, "rsi": 2, "macd": 5, "fibonacci": 1, "breakout": 4},
            {"moving_average": "0.01", "rsi": "0.02", "macd": "0.03", "fibonacci": "0.04", "breakout": "0.05"},
            {"moving_average": 7, "rsi": 7, "macd": 7, "fibonacci": 7, "breakout": 7},
        ],
    )
    def test_arbitrary_total_normalizes(self, raw: dict) -> None:
        """Positive weights with any total normalize to 1.0 within 1e-6."""
        configs = {name: StrategyConfig(name=name, weight=w) for name, w in raw.items()}
        weights = resolve_weights(configs)
        assert abs(sum(weights.values()) - Decimal("1")) <= Decimal("1e-6")

    def test_all_zero_weights_no_division(self) -> None:
        """Degenerate all-zero configuration maps every producer to 0."""
        configs = {
            name: StrategyConfig(name=name, weight=Decimal("0"))
            for name in default_weights()
        }
        weights = resolve_weights(configs)
        assert len(weights) == 5
        assert all(w == Decimal("0") for w in weights.values())

    def test_unknown_config_ignored(self) -> None:
        """Configs for producers outside the defaults are ignored."""
        configs = {"ichimoku": StrategyConfig(name="ichimoku", weight=Decimal("5"))}
        weights = resolve_weights(configs)
        assert "ichimoku" not in weights

    def test_custom_defaults_define_universe(self) -> None:
        """Only producers present in ``defaults`` appear in the result."""
        weights = resolve_weights(None, {"rsi": Decimal("1"), "macd": Decimal("3")})
        assert weights == {"rsi": Decimal("0.25"), "macd": Decimal("0.75")}


class TestStrategyConfig:
    """Tests for StrategyConfig validation."""

    def test_negative_weight_rejected(self) -> None:
        """Negative weights raise InvalidConfigError."""
        with pytest.raises(InvalidConfigError):
            StrategyConfig(name="rsi", weight=Decimal("-0.1"))

    def test_numeric_weight_coerced(self) -> None:
        """Int weights are converted to Decimal."""
        assert StrategyConfig(name="rsi", weight=2).weight == Decimal("2")
