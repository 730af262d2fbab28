"""Harmonization engine fusing all producer opinions into one decision.

The HarmonizationEngine is the top-level coordinator that:
1. Fans out to every enabled producer concurrently (own worker thread + timeout each)
2. Drops failed or timed-out producers, logging why
3. Resolves normalized producer weights
4. Aggregates per-direction scores and applies the decision rule
5. Detects conflicts, calibrates confidence and explains the result
6. Logs the breakdown at INFO level and returns an immutable HarmonizedSignal

Graceful degradation: one bad producer never aborts harmonization. When no
usable signal remains the engine returns None, which is a normal outcome.

CRITICAL: All computations use Decimal. Never use float for signal scores.
"""

from __future__ import annotations

import asyncio
import contextvars
import dataclasses
from collections.abc import Mapping, Sequence
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from decimal import Decimal
from functools import partial

import structlog

from harmonizer.config import AppSettings, HarmonySettings
from harmonizer.exceptions import ProducerError
from harmonizer.logging import get_logger, setup_logging
from harmonizer.models import Bar, TradingSignal
from harmonizer.signals.composite import aggregate, decide
from harmonizer.signals.confidence import calibrate
from harmonizer.signals.conflicts import detect_conflicts
from harmonizer.signals.models import (
    HarmonizedSignal,
    IndicatorSnapshot,
    ProducerOutcome,
    StrategyConfig,
    ValidationResult,
)
from harmonizer.signals.reasoning import explain
from harmonizer.signals.validator import validate
from harmonizer.signals.weights import default_weights, resolve_weights
from harmonizer.strategies import SignalProducer, default_producers

logger = get_logger(__name__)


class HarmonizationEngine:
    """Fuses independent strategy signals into one calibrated decision.

    Holds no mutable state between calls; the only long-lived references are
    the (stateless) producers.

    Args:
        settings: Policy constants (weights, margins, thresholds, timeout).
        producers: Producer name -> producer. Defaults to the five built-in
            strategies. Names should match the weight keys in settings;
            unknown names get a default weight of 0.
    """

    def __init__(
        self,
        settings: HarmonySettings | None = None,
        producers: Mapping[str, SignalProducer] | None = None,
    ) -> None:
        self._settings = settings or HarmonySettings()
        self._producers: dict[str, SignalProducer] = dict(
            producers if producers is not None else default_producers()
        )

    @classmethod
    def from_settings(cls, app: AppSettings | None = None) -> HarmonizationEngine:
        """Build an engine from root application settings.

        Configures logging at ``app.log_level`` and creates the built-in
        producers from ``app.strategies``.
        """
        app = app or AppSettings()
        setup_logging(app.log_level)
        return cls(settings=app.harmony, producers=default_producers(app.strategies))

    @property
    def producer_names(self) -> list[str]:
        return list(self._producers)

    def resolve_weights(
        self, configs: Mapping[str, StrategyConfig] | None = None
    ) -> dict[str, Decimal]:
        """Normalized weights for the enabled producers of this engine."""
        known = default_weights(self._settings)
        defaults = {name: known.get(name, Decimal("0")) for name in self._producers}
        return resolve_weights(configs, defaults)

    async def collect_signals(
        self,
        market_data: Sequence[Bar],
        configs: Mapping[str, StrategyConfig] | None = None,
    ) -> list[TradingSignal]:
        """Run every enabled producer concurrently and keep the usable signals.

        Output order follows producer order. Each kept signal is stamped
        with the name of the producer that emitted it.
        """
        configs = configs or {}
        enabled = [
            (name, producer, configs[name].parameters if name in configs else {})
            for name, producer in self._producers.items()
            if name not in configs or configs[name].enabled
        ]
        if not enabled:
            return []

        # Per-call pool so a hung producer holds only its own thread
        executor = ThreadPoolExecutor(
            max_workers=len(enabled), thread_name_prefix="harmonizer-producer"
        )
        try:
            outcomes: list[ProducerOutcome] = await asyncio.gather(
                *(
                    self._run_producer(executor, name, producer, market_data, parameters)
                    for name, producer, parameters in enabled
                )
            )
        finally:
            executor.shutdown(wait=False, cancel_futures=True)

        signals: list[TradingSignal] = []
        for outcome in outcomes:
            if outcome.ok and outcome.signal is not None:
                signals.append(dataclasses.replace(outcome.signal, source=outcome.producer))
        return signals

    async def _run_producer(
        self,
        executor: ThreadPoolExecutor,
        name: str,
        producer: SignalProducer,
        market_data: Sequence[Bar],
        parameters: Mapping[str, object],
    ) -> ProducerOutcome:
        """Invoke one producer in a worker thread, capturing any failure."""
        timeout = self._settings.producer_timeout_seconds
        loop = asyncio.get_running_loop()
        call = partial(
            contextvars.copy_context().run, producer.generate_signal, market_data, **parameters
        )
        try:
            signal = await asyncio.wait_for(loop.run_in_executor(executor, call), timeout=timeout)
        except asyncio.TimeoutError:
            logger.warning("producer_timeout", producer=name, timeout=timeout)
            return ProducerOutcome(
                producer=name, error=ProducerError(name, f"timed out after {timeout}s")
            )
        except Exception as exc:
            logger.warning("producer_failed", producer=name, error=str(exc))
            return ProducerOutcome(producer=name, error=ProducerError(name, str(exc)))
        return ProducerOutcome(producer=name, signal=signal)

    async def harmonize(
        self,
        market_data: Sequence[Bar],
        configs: Mapping[str, StrategyConfig] | None = None,
    ) -> HarmonizedSignal | None:
        """Fuse all producer opinions on the latest bar into one decision.

        Args:
            market_data: Bars ordered oldest first.
            configs: Optional per-producer overrides (enabled, weight, parameters).

        Returns:
            HarmonizedSignal, or None when no producer yields a usable signal.
        """
        if not market_data:
            logger.debug("no_market_data")
            return None

        latest = market_data[-1]
        with structlog.contextvars.bound_contextvars(symbol=latest.symbol):
            signals = await self.collect_signals(market_data, configs)
        if not signals:
            logger.info("no_signals", symbol=latest.symbol)
            return None

        weights = self.resolve_weights(configs)
        return self.harmonize_signals(signals, weights, latest.symbol, latest.timestamp)

    def harmonize_signals(
        self,
        signals: Sequence[TradingSignal],
        weights: Mapping[str, Decimal],
        symbol: str,
        timestamp: datetime,
    ) -> HarmonizedSignal | None:
        """Synchronous pipeline from collected signals to a HarmonizedSignal.

        Signals are matched to ``weights`` by their ``source`` producer name.
        """
        if not signals:
            return None

        s = self._settings
        scores = aggregate(signals, weights, s.strength_weight, s.confidence_weight)
        overall, strength = decide(scores, s.min_score_margin)
        conflicts = detect_conflicts(signals, s.strong_signal_threshold)
        confidence = calibrate(
            signals,
            overall,
            strength,
            s.consensus_factor,
            s.agreeing_confidence_factor,
            s.strength_factor,
        )
        reasoning = explain(signals, overall, conflicts)

        result = HarmonizedSignal(
            symbol=symbol,
            timestamp=timestamp,
            overall_signal=overall,
            strength=strength,
            confidence=confidence,
            indicators=tuple(IndicatorSnapshot.from_signal(sig) for sig in signals),
            weights=dict(weights),
            conflicts=tuple(conflicts),
            reasoning=reasoning,
        )

        logger.info(
            "harmonized_signal",
            symbol=symbol,
            overall_signal=overall.value,
            strength=strength,
            confidence=confidence,
            buy_score=scores.buy,
            sell_score=scores.sell,
            hold_score=scores.hold,
            weights=dict(weights),
            signal_count=len(signals),
            conflicts=len(conflicts),
        )
        return result

    def validate(self, signal: HarmonizedSignal) -> ValidationResult:
        """Quality check of a harmonized signal against this engine's floors."""
        return validate(signal, self._settings)
