"""Quality checks for a harmonized signal.

Pure function, called separately from harmonize. Each failed check adds
one issue and one matching recommendation.
"""

from harmonizer.config import HarmonySettings
from harmonizer.models import SignalType
from harmonizer.signals.models import HarmonizedSignal, ValidationResult


def validate(
    signal: HarmonizedSignal, settings: HarmonySettings | None = None
) -> ValidationResult:
    """Check confidence, conflicts, strength and indicator diversity.

    HOLD decisions are exempt from the strength floor only; a weak HOLD is
    the expected outcome of a split ensemble.
    """
    settings = settings or HarmonySettings()
    issues: list[str] = []
    recommendations: list[str] = []

    if signal.confidence < settings.min_confidence:
        issues.append(f"Low confidence signal ({signal.confidence:.1f}%)")
        recommendations.append(
            "Consider waiting for higher confidence signals or reducing position size"
        )

    if signal.conflicts:
        issues.append(f"Signal conflicts detected: {len(signal.conflicts)} conflicts detected")
        recommendations.append("Review conflicting indicators and consider market context")

    if signal.strength < settings.min_strength and signal.overall_signal != SignalType.HOLD:
        issues.append(f"Weak signal strength ({signal.strength:.1f}%)")
        recommendations.append(
            "Consider reducing position size or waiting for stronger signals"
        )

    distinct = {indicator.name for indicator in signal.indicators}
    if len(distinct) < settings.min_indicator_diversity:
        issues.append("Limited indicator diversity")
        recommendations.append("Ensure multiple different types of indicators are active")

    return ValidationResult(
        is_valid=not issues,
        issues=issues,
        recommendations=recommendations,
    )
