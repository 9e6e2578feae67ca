"""Pytest fixtures for resource-reconciler tests."""

import logging

import pytest

from reconciler.config import LOCK_TIMEOUT_ENV_VAR, SUBSCRIPTION_ENV_VAR


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Keep the developer's environment out of option resolution."""
    monkeypatch.delenv(SUBSCRIPTION_ENV_VAR, raising=False)
    monkeypatch.delenv(LOCK_TIMEOUT_ENV_VAR, raising=False)


@pytest.fixture
def debug_logs(caplog):
    """Capture reconciler log records at DEBUG level."""
    caplog.set_level(logging.DEBUG, logger="reconciler")
    return caplog
