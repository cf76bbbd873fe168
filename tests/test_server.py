from __future__ import annotations

from typing import List

import pytest
from fastapi.testclient import TestClient

import price_feed.server as server_module
from price_feed.bars import Bar
from price_feed.cache import CandleCache
from price_feed.candles import CandleService
from price_feed.config import Settings
from price_feed.server import app
from price_feed.vendors import VendorAdapter


def _bars(width: int, n: int) -> List[Bar]:
    anchor = 1_714_752_000
    return [Bar(anchor - i * width, 1.07, 1.08, 1.06, 1.075, volume=10.0) for i in range(n)]


@pytest.fixture
def stub_service(monkeypatch: pytest.MonkeyPatch) -> CandleService:
    table = {("EUR/USD", "4h"): _bars(14400, 50), ("EUR/USD", "1h"): _bars(3600, 50)}

    async def fake_fetch(symbol: str, timeframe: str, count: int, timeout_ms: float) -> List[Bar]:
        return table.get((symbol, timeframe), [])[:count]

    settings = Settings(_env_file=None)
    service = CandleService(
        CandleCache(30.0),
        vendors=[VendorAdapter("twelvedata", fake_fetch, uses_aliases=True)],
        settings=settings,
    )
    monkeypatch.setattr(server_module, "get_candle_service", lambda: service)
    return service


def test_request_id_header_echo() -> None:
    with TestClient(app) as client:
        auto = client.get("/healthz")
        assert auto.status_code == 200
        assert auto.json() == {"status": "ok"}
        generated = auto.headers.get("X-Request-ID")
        assert generated

        echoed = client.get("/healthz", headers={"X-Request-ID": "req-42"})
        assert echoed.headers.get("X-Request-ID") == "req-42"


def test_candles_requires_symbol(stub_service: CandleService) -> None:
    with TestClient(app) as client:
        resp = client.get("/api/candles")
    assert resp.status_code == 400
    assert resp.json()["detail"] == "symbol required"


def test_candles_returns_compact_items(stub_service: CandleService) -> None:
    with TestClient(app) as client:
        resp = client.get("/api/candles", params={"symbol": "eurusd", "tf": "1h", "limit": 5})
    assert resp.status_code == 200
    body = resp.json()
    assert body["symbol"] == "EUR/USD"
    assert body["timeframe"] == "1h"
    assert len(body["items"]) == 5
    first = body["items"][0]
    assert set(first) == {"t", "o", "h", "l", "c", "v"}
    assert first["t"] > body["items"][1]["t"]


def test_candles_empty_result_is_not_an_error(stub_service: CandleService) -> None:
    with TestClient(app) as client:
        resp = client.get("/api/candles", params={"symbol": "NAS100", "tf": "15m"})
    assert resp.status_code == 200
    assert resp.json()["items"] == []


def test_candles_debug_reports_counts(stub_service: CandleService) -> None:
    with TestClient(app) as client:
        resp = client.get("/api/candles/debug", params={"code": "EURUSD", "limit": 8})
    assert resp.status_code == 200
    body = resp.json()
    assert body["instrument"] == "EUR/USD"
    assert body["counts"]["4h"] == 8
    assert body["counts"]["1h"] == 8
    # 15m is derived from 1h when no vendor carries it
    assert body["counts"]["15m"] == 8
    assert body["ok"] is True
    assert body["missing"] == []
    assert set(body["samples"]) == {"4h", "1h", "15m"}
    assert "total_ms" in body["timings"]
