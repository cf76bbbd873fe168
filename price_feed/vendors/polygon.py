"""Polygon currency aggregates adapter (currency pairs only)."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Tuple

import pandas as pd

from ..bars import Bar, normalize_timeframe
from ..config import get_settings
from ..symbols import compact_symbol, is_forex
from ._http import format_log_context, frame_to_bars, get_http_client, get_json, lookback_seconds

logger = logging.getLogger(__name__)

VENDOR = "polygon"

_RANGES: Dict[str, Tuple[int, str]] = {"15m": (15, "minute"), "1h": (1, "hour"), "4h": (4, "hour")}
_MAX_LIMIT = 50000


def polygon_range(timeframe: str) -> Tuple[int, str]:
    return _RANGES[normalize_timeframe(timeframe)]


def polygon_symbol(symbol: str) -> str:
    """``EUR/USD`` -> ``C:EURUSD``."""

    return "C:" + compact_symbol(symbol)


async def fetch_polygon(symbol: str, timeframe: str, count: int, timeout_ms: float) -> List[Bar]:
    settings = get_settings()
    api_key = settings.polygon_api_key
    if not api_key:
        logger.debug("polygon_disabled reason=missing_api_key")
        return []
    if count <= 0 or not is_forex(symbol):
        return []

    tf = normalize_timeframe(timeframe)
    multiplier, timespan = polygon_range(tf)
    now = pd.Timestamp.now(tz="UTC")
    start = now - pd.Timedelta(seconds=lookback_seconds(tf, count))
    frm = start.date().isoformat()
    to = (now + pd.Timedelta(days=1)).date().isoformat()
    ticker = polygon_symbol(symbol)
    url = f"{settings.polygon_base_url}/v2/aggs/ticker/{ticker}/range/{multiplier}/{timespan}/{frm}/{to}"
    # Ascending keeps the newest bars at the tail when ``limit`` truncates.
    params = {"adjusted": "true", "sort": "asc", "limit": _MAX_LIMIT, "apiKey": api_key}
    context: Dict[str, Any] = {"symbol": ticker, "timeframe": tf, "start": frm, "end": to, "count": count}
    client = await get_http_client()
    payload = await get_json(client, url, params, timeout_ms=timeout_ms, vendor=VENDOR, context=context)
    if payload is None:
        return []
    results = payload.get("results") if isinstance(payload, dict) else None
    if not isinstance(results, list) or not results:
        logger.info("polygon_empty %s", format_log_context(context), extra=context)
        return []

    frame = pd.DataFrame.from_records([item for item in results if isinstance(item, dict)])
    column_map = {"t": "timestamp", "o": "open", "h": "high", "l": "low", "c": "close"}
    if "v" in frame.columns:
        column_map["v"] = "volume"
    available = [col for col in column_map if col in frame.columns]
    frame = frame[available].rename(columns={key: column_map[key] for key in available})
    return frame_to_bars(frame, time_unit="ms", count=count)


__all__ = ["VENDOR", "fetch_polygon", "polygon_range", "polygon_symbol"]
