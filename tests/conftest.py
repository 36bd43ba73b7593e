"""
Shared pytest fixtures.

The CLI configures structlog globally (stderr sink bound to the current
capture stream); reset it after every test so later tests log normally.
"""

import pytest
import structlog


@pytest.fixture(autouse=True)
def reset_structlog():
    yield
    structlog.reset_defaults()


@pytest.fixture
def clean_metar_env(monkeypatch):
    """Remove METAR_* overrides so settings come from the file under test."""
    for name in ("METAR_RUNWAY_HEADING", "METAR_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch
