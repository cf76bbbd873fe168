from price_feed.config import get_settings


def test_vendor_keys_accept_short_env_names(monkeypatch):
    get_settings.cache_clear()
    monkeypatch.setenv("TWELVEDATA_KEY", "td-short")
    monkeypatch.setenv("FINNHUB_KEY", "fh-short")
    monkeypatch.setenv("POLYGON_API_KEY", "pg-long")

    settings = get_settings()

    assert settings.twelvedata_api_key == "td-short"
    assert settings.finnhub_api_key == "fh-short"
    assert settings.polygon_api_key == "pg-long"
    get_settings.cache_clear()


def test_blank_keys_are_treated_as_missing(monkeypatch):
    get_settings.cache_clear()
    monkeypatch.setenv("TWELVEDATA_API_KEY", "   ")

    assert get_settings().twelvedata_api_key is None
    get_settings.cache_clear()


def test_budget_and_cache_overrides(monkeypatch):
    get_settings.cache_clear()
    monkeypatch.setenv("CANDLES_TOTAL_BUDGET_MS", "0")
    monkeypatch.setenv("CANDLES_CACHE_TTL", "12.5")

    settings = get_settings()

    assert settings.total_budget_ms == 0
    assert settings.cache_ttl_seconds == 12.5
    assert settings.vendor_timeout_ms == 8000
    assert settings.default_instrument == "EURUSD"
    get_settings.cache_clear()
