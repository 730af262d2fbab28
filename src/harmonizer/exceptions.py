"""Custom exceptions for the signal harmonizer.

Kept in one module so models, producers and the engine can share them
without circular imports.
"""


class HarmonizerError(Exception):
    """Base exception for all harmonizer errors."""


class InvalidSignalError(HarmonizerError):
    """Raised when a trading signal violates its invariants (e.g. no indicator tags)."""


class InvalidConfigError(HarmonizerError):
    """Raised when a strategy configuration is malformed (e.g. negative weight)."""


class ProducerError(HarmonizerError):
    """Raised when a signal producer fails or times out.

    The engine never lets this escape ``harmonize``; it is recorded on the
    producer outcome and logged.
    """

    def __init__(self, producer: str, reason: str) -> None:
        super().__init__(f"{producer}: {reason}")
        self.producer = producer
        self.reason = reason
