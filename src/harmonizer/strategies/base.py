"""Abstract signal producer interface.

Defines the contract every technical strategy implements. The harmonization
engine depends only on this interface, so producers can be swapped or faked
without touching the engine.
"""

from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import Any

from harmonizer.models import Bar, TradingSignal


class SignalProducer(ABC):
    """Abstract base class for stateless technical-analysis strategies.

    Producers must not keep state between calls; the engine may invoke the
    same instance from several worker threads.
    """

    #: Registry name, also the key used for weights and configs.
    name: str = ""

    @abstractmethod
    def generate_signal(
        self, market_data: Sequence[Bar], **parameters: Any
    ) -> TradingSignal | None:
        """Produce at most one opinion on the latest bar.

        Args:
            market_data: Bars ordered oldest first.
            **parameters: Strategy-specific overrides (periods, thresholds).

        Returns:
            A TradingSignal, or None when data is insufficient or there is
            no actionable setup. Returning None is not an error.
        """
        ...
