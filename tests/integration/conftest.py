"""Shared fixtures for integration tests."""

from __future__ import annotations

from datetime import timedelta

import pytest


@pytest.fixture
def short_policy():
    """Two retries one second apart; sleeps are recorded, not taken."""
    from remotefile.core.models import RetryPolicy

    return RetryPolicy(max_attempts=2, delay=timedelta(seconds=1))


@pytest.fixture
def cli_manager(manager, monkeypatch: pytest.MonkeyPatch):
    """Route CLI commands to the manager wired to the fake network."""
    import importlib

    # remotefile.cli re-exports the main() entry point under the module name
    cli_main = importlib.import_module("remotefile.cli.main")
    monkeypatch.setattr(cli_main, "_create_manager", lambda: manager)
    return manager
