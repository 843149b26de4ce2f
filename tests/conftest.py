"""Shared fixtures for the niftyscope test suite."""

from __future__ import annotations

import pytest

from niftyscope.config import AppConfig
from niftyscope.providers.mock_provider import MockMarketDataProvider

_ENV_KEYS = [
    "NIFTYSCOPE_PROVIDER",
    "NIFTYSCOPE_CACHE_TTL",
    "NIFTYSCOPE_MAX_WORKERS",
    "NIFTYSCOPE_HISTORY_DAYS",
    "NIFTYSCOPE_SYMBOLS",
]


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    # run away from any developer .env; setenv first so teardown also undoes
    # values that a .env load put into os.environ
    monkeypatch.chdir(tmp_path)
    for key in _ENV_KEYS:
        monkeypatch.setenv(key, "")
        monkeypatch.delenv(key)


@pytest.fixture
def app_config() -> AppConfig:
    cfg = AppConfig()
    cfg.symbols = ["RELIANCE.NSE", "TCS.NSE", "INFY.NSE", "ITC.NSE", "SBIN.NSE"]
    cfg.fetch.max_workers = 2
    return cfg


@pytest.fixture
def mock_provider() -> MockMarketDataProvider:
    return MockMarketDataProvider()
