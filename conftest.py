"""
Root pytest configuration.
"""

from __future__ import annotations

import os
from collections.abc import Generator

import pytest


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers for test categorization."""
    config.addinivalue_line(
        "markers",
        "critical: Tests that must never fail - core functionality",
    )
    config.addinivalue_line(
        "markers",
        "integration: Tests exercising the full transport over HTTP mocks",
    )
    config.addinivalue_line(
        "markers",
        "property: Property-based tests (may be slow)",
    )
    config.addinivalue_line(
        "markers",
        "slow: Tests that take >1 second",
    )


@pytest.fixture(autouse=True)
def reset_diagnostics_cache() -> Generator[None, None, None]:
    """Reset the diagnostics module cache and rate limits before each test.

    The diagnostics module caches ``internal_logging_enabled`` on first use;
    resetting keeps tests from inheriting state from earlier tests.
    """
    import logship.core.diagnostics as diag

    diag._internal_logging_enabled = None
    diag._reset_rate_limits()
    yield
    diag._internal_logging_enabled = None
    diag._reset_rate_limits()


@pytest.fixture(autouse=True)
def _isolate_logship_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep developer LOGSHIP_* variables out of settings-driven tests."""
    for key in list(os.environ):
        if key.startswith("LOGSHIP_"):
            monkeypatch.delenv(key, raising=False)
