"""Shared test fixtures for the signal harmonizer."""

import logging

import pytest
import structlog

from harmonizer.config import AppSettings, HarmonySettings, StrategySettings


@pytest.fixture
def harmony_settings() -> HarmonySettings:
    """Default harmonization policy settings."""
    return HarmonySettings()


@pytest.fixture
def app_settings() -> AppSettings:
    """Return AppSettings with test defaults."""
    return AppSettings(
        log_level="DEBUG",
        harmony=HarmonySettings(producer_timeout_seconds=1.0),
        strategies=StrategySettings(),
    )


@pytest.fixture
def restore_logging():
    """Drop the structlog handler and restore defaults after the test."""
    root = logging.getLogger()
    level = root.level
    yield
    for handler in list(root.handlers):
        if isinstance(handler.formatter, structlog.stdlib.ProcessorFormatter):
            root.removeHandler(handler)
    root.setLevel(level)
    structlog.reset_defaults()
