"""Tests for the harmony validator.

Tests verify:
- Each floor adds one issue and one recommendation
- HOLD is exempt from the strength floor only
- A clean signal is valid
"""

from dataclasses import replace
from datetime import datetime, timezone
from decimal import Decimal

from harmonizer.config import HarmonySettings
from harmonizer.models import SignalCategory, SignalType
from harmonizer.signals.models import HarmonizedSignal, IndicatorSnapshot
from harmonizer.signals.validator import validate

_TS = datetime(2024, 1, 1, tzinfo=timezone.utc)


def _make_indicator(name: str) -> IndicatorSnapshot:
    """Create a test IndicatorSnapshot."""
    return IndicatorSnapshot(
        name=name,
        source=name.lower(),
        type=SignalType.BUY,
        category=SignalCategory.MOMENTUM,
        value=Decimal("80"),
        confidence=Decimal("80"),
        timestamp=_TS,
    )


def _make_harmonized(
    overall: SignalType = SignalType.BUY,
    strength: str = "80",
    confidence: str = "80",
    conflicts: tuple[str, ...] = (),
    names: tuple[str, ...] = ("RSI_14", "MACD_12_26_9", "EMA_20,EMA_50"),
) -> HarmonizedSignal:
    """Create a test HarmonizedSignal that passes every check by default."""
    return HarmonizedSignal(
        symbol="BTC/USDT",
        timestamp=_TS,
        overall_signal=overall,
        strength=Decimal(strength),
        confidence=Decimal(confidence),
        indicators=tuple(_make_indicator(n) for n in names),
        weights={"rsi": Decimal("1")},
        conflicts=conflicts,
        reasoning="test",
    )


class TestValidate:
    """Tests for validate."""

    def test_clean_signal_valid(self) -> None:
        """Strong, confident, diverse, conflict-free -> valid."""
        result = validate(_make_harmonized())
        assert result.is_valid is True
        assert result.issues == []
        assert result.recommendations == []

    def test_low_confidence(self) -> None:
        """Confidence 45 -> invalid with a confidence issue."""
        result = validate(_make_harmonized(confidence="45"))
        assert result.is_valid is False
        assert any("confidence" in issue for issue in result.issues)
        assert result.issues == ["Low confidence signal (45.0%)"]
        assert len(result.recommendations) == 1

    def test_conflicts(self) -> None:
        """Conflicts are reported with their count."""
        result = validate(_make_harmonized(conflicts=("a", "b")))
        assert result.issues == ["Signal conflicts detected: 2 conflicts detected"]

    def test_weak_directional_strength(self) -> None:
        """BUY with strength 35 is flagged as weak."""
        result = validate(_make_harmonized(strength="35"))
        assert result.issues == ["Weak signal strength (35.0%)"]

    def test_weak_hold_exempt(self) -> None:
        """HOLD with strength 35 raises no weak strength issue."""
        result = validate(_make_harmonized(overall=SignalType.HOLD, strength="35"))
        assert not any("Weak signal strength" in issue for issue in result.issues)
        assert result.is_valid is True

    def test_hold_still_checks_confidence_and_diversity(self) -> None:
        """The HOLD exemption does not extend to other checks."""
        signal = _make_harmonized(
            overall=SignalType.HOLD, strength="35", confidence="45", names=("RSI_14",)
        )
        result = validate(signal)
        assert result.issues == ["Low confidence signal (45.0%)", "Limited indicator diversity"]

    def test_limited_diversity_counts_distinct_names(self) -> None:
        """Duplicate indicator names count once."""
        result = validate(_make_harmonized(names=("RSI_14", "RSI_14", "MACD_12_26_9")))
        assert result.issues == ["Limited indicator diversity"]

    def test_all_issues_paired_with_recommendations(self) -> None:
        """Every failed check adds exactly one recommendation."""
        signal = _make_harmonized(
            strength="10", confidence="10", conflicts=("x",), names=("RSI_14",)
        )
        result = validate(signal)
        assert len(result.issues) == 4
        assert len(result.recommendations) == 4

    def test_floors_from_settings(self) -> None:
        """Custom floors change what passes."""
        settings = HarmonySettings(min_confidence=Decimal("90"), min_indicator_diversity=1)
        signal = replace(_make_harmonized(), indicators=(_make_indicator("RSI_14"),))
        result = validate(signal, settings)
        assert result.issues == ["Low confidence signal (80.0%)"]
