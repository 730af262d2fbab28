"""Tests for the shared signal models, settings and exceptions."""

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from harmonizer.config import AppSettings, HarmonySettings
from harmonizer.exceptions import InvalidSignalError, ProducerError
from harmonizer.models import SignalCategory, SignalType, TradingSignal, clamp_score
from harmonizer.signals.models import IndicatorSnapshot, ProducerOutcome

_TS = datetime(2024, 1, 1, tzinfo=timezone.utc)


def _make_signal(**overrides) -> TradingSignal:
    """Create a test TradingSignal with overridable fields."""
    fields = dict(
        symbol="BTC/USDT",
        type=SignalType.BUY,
        strength=Decimal("70"),
        confidence=Decimal("60"),
        indicator_tags=["RSI_14"],
        category=SignalCategory.MOMENTUM,
        timestamp=_TS,
    )
    fields.update(overrides)
    return TradingSignal(**fields)


class TestTradingSignal:
    """Tests for TradingSignal construction invariants."""

    def test_scores_clamped(self) -> None:
        """Out-of-range strength and confidence are clamped to [0, 100]."""
        signal = _make_signal(strength=Decimal("150"), confidence=Decimal("-5"))
        assert signal.strength == Decimal("100")
        assert signal.confidence == Decimal("0")

    def test_float_inputs_coerced(self) -> None:
        """Floats become Decimal without binary artifacts."""
        signal = _make_signal(strength=72.5, confidence=60)
        assert signal.strength == Decimal("72.5")
        assert isinstance(signal.confidence, Decimal)

    def test_empty_tags_rejected(self) -> None:
        """A signal must name at least one indicator."""
        with pytest.raises(InvalidSignalError):
            _make_signal(indicator_tags=[])

    def test_string_enums_coerced(self) -> None:
        """Plain strings are accepted for type and category."""
        signal = _make_signal(type="SELL", category="TREND")
        assert signal.type is SignalType.SELL
        assert signal.category is SignalCategory.TREND

    def test_non_positive_risk_reward_defaults(self) -> None:
        """risk_reward <= 0 falls back to 1.0."""
        assert _make_signal(risk_reward=Decimal("-2")).risk_reward == Decimal("1.0")
        assert _make_signal(risk_reward=Decimal("2.5")).risk_reward == Decimal("2.5")

    def test_tag_label(self) -> None:
        """Tags are comma-joined."""
        assert _make_signal(indicator_tags=["EMA_20", "EMA_50"]).tag_label == "EMA_20,EMA_50"

    def test_clamp_score(self) -> None:
        """clamp_score bounds both ends."""
        assert clamp_score(Decimal("101")) == Decimal("100")
        assert clamp_score(Decimal("-1")) == Decimal("0")
        assert clamp_score(Decimal("42")) == Decimal("42")


class TestSignalModels:
    """Tests for the harmonization data models."""

    def test_snapshot_from_signal(self) -> None:
        """Snapshot copies tags, source and scores."""
        signal = _make_signal(
            indicator_tags=["EMA_3", "EMA_5"],
            category=SignalCategory.TREND,
            source="moving_average",
            metadata={"fast_ema": Decimal("1")},
        )
        snapshot = IndicatorSnapshot.from_signal(signal)
        assert snapshot.name == "EMA_3,EMA_5"
        assert snapshot.source == "moving_average"
        assert snapshot.value == Decimal("70")
        assert snapshot.category == SignalCategory.TREND
        assert snapshot.parameters == {"fast_ema": Decimal("1")}

    def test_producer_outcome(self) -> None:
        """An outcome with an error is not ok."""
        error = ProducerError("rsi", "timed out after 2.0s")
        assert ProducerOutcome(producer="rsi", error=error).ok is False
        assert ProducerOutcome(producer="rsi").ok is True
        assert str(error) == "rsi: timed out after 2.0s"
        assert error.producer == "rsi"


class TestSettings:
    """Tests for pydantic-settings configuration."""

    def test_default_weights_sum_to_one(self, harmony_settings: HarmonySettings) -> None:
        """Built-in default weights are already normalized."""
        total = (
            harmony_settings.weight_moving_average
            + harmony_settings.weight_rsi
            + harmony_settings.weight_macd
            + harmony_settings.weight_fibonacci
            + harmony_settings.weight_breakout
        )
        assert total == Decimal("1")

    def test_env_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """HARMONY_ prefixed variables override defaults."""
        monkeypatch.setenv("HARMONY_MIN_SCORE_MARGIN", "15")
        monkeypatch.setenv("HARMONY_PRODUCER_TIMEOUT_SECONDS", "0.5")
        settings = HarmonySettings()
        assert settings.min_score_margin == Decimal("15")
        assert settings.producer_timeout_seconds == 0.5

    def test_app_settings_fixture(self, app_settings: AppSettings) -> None:
        """Composed settings expose the sub-settings."""
        assert app_settings.log_level == "DEBUG"
        assert app_settings.harmony.producer_timeout_seconds == 1.0
        assert app_settings.strategies.rsi_period == 14
