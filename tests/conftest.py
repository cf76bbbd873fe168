from __future__ import annotations

import pytest

from price_feed.candles import reset_candle_service
from price_feed.config import get_settings

_ENV_KEYS = (
    "TWELVEDATA_API_KEY",
    "TWELVEDATA_KEY",
    "FINNHUB_API_KEY",
    "FINNHUB_KEY",
    "POLYGON_API_KEY",
    "POLYGON_KEY",
    "CANDLES_TOTAL_BUDGET_MS",
    "CANDLES_CACHE_TTL",
    "DEFAULT_INSTRUMENT",
)


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch: pytest.MonkeyPatch):
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    get_settings.cache_clear()
    reset_candle_service()
    yield
    get_settings.cache_clear()
    reset_candle_service()
