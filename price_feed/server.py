"""HTTP surface for the price feed."""

from __future__ import annotations

import logging
import time
import uuid
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

from fastapi import FastAPI, HTTPException, Query
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from .bars import normalize_timeframe
from .candles import get_candle_service, get_timeframe_bundle
from .config import get_settings
from .logging_setup import REQUEST_ID_CONTEXT, setup_logging
from .symbols import resolve_instrument
from .vendors import close_http_client

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Bind an incoming (or generated) request ID to the logging context."""

    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = (request.headers.get(REQUEST_ID_HEADER) or "").strip() or uuid.uuid4().hex
        token = REQUEST_ID_CONTEXT.set(request_id)
        try:
            response = await call_next(request)
        finally:
            REQUEST_ID_CONTEXT.reset(token)
        response.headers[REQUEST_ID_HEADER] = request_id
        return response


@asynccontextmanager
async def _lifespan(_: FastAPI):
    setup_logging(get_settings().log_level)
    logger.info("price_feed_started")
    try:
        yield
    finally:
        await close_http_client()


app = FastAPI(
    title="Price Feed",
    description="Multi-vendor OHLC candles with synthetic timeframe fallback.",
    version="0.1.0",
    lifespan=_lifespan,
)
app.add_middleware(RequestIdMiddleware)


@app.get("/healthz", summary="Readiness probe")
async def healthz() -> Dict[str, str]:
    return {"status": "ok"}


@app.get("/api/candles")
async def candles(
    symbol: Optional[str] = None,
    tf: str = "15m",
    limit: int = Query(200, ge=1, le=5000),
) -> Dict[str, Any]:
    """Return newest-first candles; an empty ``items`` list means no data."""

    if not symbol or not symbol.strip():
        raise HTTPException(status_code=400, detail="symbol required")
    service = get_candle_service()
    bars = await service.get_candles(symbol, tf, limit)
    return {
        "symbol": resolve_instrument(symbol, service.settings.default_instrument),
        "timeframe": normalize_timeframe(tf),
        "items": [bar.to_dict() for bar in bars],
    }


@app.get("/api/candles/debug")
async def candles_debug(
    instrument: Optional[str] = None,
    symbol: Optional[str] = None,
    code: Optional[str] = None,
    limit: int = Query(200, ge=1, le=5000),
) -> Dict[str, Any]:
    """Fetch 4h/1h/15m together and report which timeframes came back empty."""

    raw = instrument or symbol or code or get_settings().default_instrument
    started = time.perf_counter()
    bundle = await get_timeframe_bundle(raw, count=limit, service=get_candle_service())
    elapsed_ms = round((time.perf_counter() - started) * 1000.0, 1)
    payload: Dict[str, Any] = {
        "ok": bundle.complete,
        "instrument": bundle.symbol,
        "counts": bundle.counts(),
        "missing": bundle.missing,
        "samples": {tf: bars[0].to_dict() for tf, bars in bundle.frames.items() if bars},
        "timings": {"total_ms": elapsed_ms},
    }
    if bundle.missing:
        payload["reason"] = f"Missing candles for {', '.join(bundle.missing)}"
    return payload


__all__ = ["RequestIdMiddleware", "app"]
