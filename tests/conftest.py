# tests/conftest.py
from __future__ import annotations

import pytest

from tests.utils import AS_OF, FakeGateway, make_config, make_note, make_portfolio


@pytest.fixture(autouse=True)
def _clean_folio_env(monkeypatch):
    # Keep a developer's shell from leaking into config tests
    for name in ("FOLIO_INVESTOR_ID", "FOLIO_API_KEY", "FOLIO_DRY_RUN", "FOLIO_REPORT"):
        monkeypatch.delenv(name, raising=False)
    yield


@pytest.fixture
def as_of():
    return AS_OF


@pytest.fixture
def sample_note():
    """The worked example: 1000 principal, 10 accrued, 15% APR, 36 months, issued 14 months ago."""
    return make_note()


@pytest.fixture
def portfolio():
    return make_portfolio()


@pytest.fixture
def config_factory():
    """Factory for AppConfig with per-section overrides."""

    def _factory(**sections):
        return make_config(**sections)

    return _factory


@pytest.fixture
def gateway_factory(portfolio):
    """Factory for FakeGateway seeded with the default portfolio."""

    def _factory(notes=None, **kwargs):
        return FakeGateway(portfolio if notes is None else notes, **kwargs)

    return _factory


# -------- Pytest markers --------
def pytest_configure(config):
    config.addinivalue_line("markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')")
    config.addinivalue_line("markers", "integration: marks integration tests")
