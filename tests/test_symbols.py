from types import SimpleNamespace

import pytest

from price_feed.symbols import compact_symbol, is_forex, normalize_symbol, resolve_instrument, vendor_aliases


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("EURUSD", "EUR/USD"),
        ("  gbpjpy ", "GBP/JPY"),
        ("xauusd", "XAU/USD"),
        ("EUR/USD", "EUR/USD"),
        ("NAS100", "NAS100"),
        ("NDX", "NDX"),
        ("BTCUSDT", "BTCUSDT"),
        ("", ""),
        (None, ""),
    ],
)
def test_normalize_symbol(raw, expected):
    assert normalize_symbol(raw) == expected


@pytest.mark.parametrize("raw", ["eurusd", "USDJPY", "EUR/USD", "NAS100", "spx", "btcusdt"])
def test_normalize_symbol_is_idempotent(raw):
    once = normalize_symbol(raw)
    assert normalize_symbol(once) == once


def test_normalize_symbol_accepts_code_carriers():
    assert normalize_symbol({"code": "audcad"}) == "AUD/CAD"
    assert normalize_symbol(SimpleNamespace(code="usdchf", label="USD/CHF")) == "USD/CHF"
    assert normalize_symbol({"label": "EUR/USD"}) == ""
    assert normalize_symbol(SimpleNamespace(code=None)) == ""


def test_resolve_instrument_defaults_when_empty():
    assert resolve_instrument("") == "EUR/USD"
    assert resolve_instrument(None, "gbpusd") == "GBP/USD"
    assert resolve_instrument("ndx") == "NDX"


@pytest.mark.parametrize(
    "symbol, expected",
    [
        ("EUR/USD", True),
        ("XAU/USD", True),
        ("EURUSD", False),
        ("EU/USD", False),
        ("EURO/USD", False),
        ("NAS100", False),
        ("BTC/USDT", False),
        ("", False),
    ],
)
def test_is_forex(symbol, expected):
    assert is_forex(symbol) is expected


def test_compact_symbol():
    assert compact_symbol("EUR/USD") == "EURUSD"
    assert compact_symbol("NDX") == "NDX"


def test_vendor_aliases_start_with_canonical_then_compact():
    aliases = vendor_aliases("EUR/USD")
    assert aliases == ["EUR/USD", "EURUSD"]


def test_vendor_aliases_index_synonyms():
    assert vendor_aliases("NAS100") == ["NAS100", "NDX", "QQQ"]


def test_vendor_aliases_metal_and_crypto():
    gold = vendor_aliases("xauusd")
    assert gold[:2] == ["XAU/USD", "XAUUSD"]
    assert "GOLD" in gold

    btc = vendor_aliases("BTC/USD")
    assert btc[:2] == ["BTC/USD", "BTCUSD"]
    assert "BTC/USDT" in btc
    assert len(btc) == len(set(btc))


def test_vendor_aliases_unknown_vendor_gets_base_spellings_only():
    assert vendor_aliases("NAS100", "finnhub") == ["NAS100"]
