"""Configuration system using pydantic-settings with environment variable loading."""

from decimal import Decimal

from pydantic_settings import BaseSettings, SettingsConfigDict


class HarmonySettings(BaseSettings):
    """Harmonization engine policy constants.

    Controls default producer weights, composite score mixing, the decision
    margin, conflict thresholds, confidence calibration and validation floors.
    All fields configurable via HARMONY_ environment variable prefix.
    """

    model_config = SettingsConfigDict(env_prefix="HARMONY_")

    # Default producer weights (sum to 1.0)
    weight_moving_average: Decimal = Decimal("0.20")
    weight_rsi: Decimal = Decimal("0.20")
    weight_macd: Decimal = Decimal("0.25")
    weight_fibonacci: Decimal = Decimal("0.15")
    weight_breakout: Decimal = Decimal("0.20")

    # Composite score = strength * strength_weight + confidence * confidence_weight
    strength_weight: Decimal = Decimal("0.7")
    confidence_weight: Decimal = Decimal("0.3")

    # Decision rule
    min_score_margin: Decimal = Decimal("20")  # Min |buy - sell| to act

    # Conflict detection
    strong_signal_threshold: Decimal = Decimal("70")  # Strict ">" on both sides

    # Confidence calibration
    consensus_factor: Decimal = Decimal("40")
    agreeing_confidence_factor: Decimal = Decimal("0.4")
    strength_factor: Decimal = Decimal("0.2")

    # Validation floors
    min_confidence: Decimal = Decimal("60")
    min_strength: Decimal = Decimal("50")
    min_indicator_diversity: int = 3

    # Producer fan-out
    producer_timeout_seconds: float = 2.0


class StrategySettings(BaseSettings):
    """Default parameters for the built-in signal producers.

    All fields configurable via STRATEGY_ environment variable prefix.
    """

    model_config = SettingsConfigDict(env_prefix="STRATEGY_")

    # Moving average crossover
    ma_fast_period: int = 20
    ma_slow_period: int = 50

    # RSI
    rsi_period: int = 14
    rsi_overbought: Decimal = Decimal("70")
    rsi_oversold: Decimal = Decimal("30")

    # MACD
    macd_fast_period: int = 12
    macd_slow_period: int = 26
    macd_signal_period: int = 9

    # Fibonacci retracement
    fib_lookback_period: int = 20

    # Breakout
    breakout_lookback_period: int = 20


class AppSettings(BaseSettings):
    """Root application settings, composing all sub-settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
    )

    log_level: str = "INFO"
    harmony: HarmonySettings = HarmonySettings()
    strategies: StrategySettings = StrategySettings()
