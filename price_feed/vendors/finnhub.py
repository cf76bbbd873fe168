"""Finnhub ``forex/candle`` adapter (currency pairs only).

Finnhub answers with parallel ``t/o/h/l/c/v`` arrays in ascending time order;
the frame normalizer flips them to newest-first.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Dict, List

import pandas as pd

from ..bars import Bar, normalize_timeframe
from ..config import get_settings
from ..symbols import is_forex
from ._http import format_log_context, frame_to_bars, get_http_client, get_json, lookback_seconds

logger = logging.getLogger(__name__)

VENDOR = "finnhub"

_RESOLUTIONS = {"15m": "15", "1h": "60", "4h": "240"}
_COLUMNS = {"t": "timestamp", "o": "open", "h": "high", "l": "low", "c": "close", "v": "volume"}


def finnhub_symbol(symbol: str) -> str:
    """``EUR/USD`` -> ``OANDA:EUR_USD``."""

    return "OANDA:" + symbol.replace("/", "_")


async def fetch_finnhub(symbol: str, timeframe: str, count: int, timeout_ms: float) -> List[Bar]:
    settings = get_settings()
    api_key = settings.finnhub_api_key
    if not api_key:
        logger.debug("finnhub_disabled reason=missing_api_key")
        return []
    if count <= 0 or not is_forex(symbol):
        return []

    tf = normalize_timeframe(timeframe)
    now = int(time.time())
    vendor_symbol = finnhub_symbol(symbol)
    params = {
        "symbol": vendor_symbol,
        "resolution": _RESOLUTIONS[tf],
        "from": now - lookback_seconds(tf, count),
        "to": now,
        "token": api_key,
    }
    context: Dict[str, Any] = {"symbol": vendor_symbol, "resolution": params["resolution"], "count": count}
    client = await get_http_client()
    payload = await get_json(
        client,
        f"{settings.finnhub_base_url}/forex/candle",
        params,
        timeout_ms=timeout_ms,
        vendor=VENDOR,
        context=context,
    )
    if payload is None:
        return []
    if not isinstance(payload, dict) or payload.get("s") != "ok":
        failure = dict(context, status=str(payload.get("s")) if isinstance(payload, dict) else "invalid")
        logger.info("finnhub_empty %s", format_log_context(failure), extra=failure)
        return []

    arrays = {key: payload.get(key) for key in _COLUMNS if isinstance(payload.get(key), list)}
    required = ("t", "o", "h", "l", "c")
    if any(key not in arrays for key in required):
        logger.info("finnhub_bad_payload %s", format_log_context(context), extra=context)
        return []
    length = len(arrays["t"])
    if any(len(arrays[key]) != length for key in required):
        failure = dict(context, bars=length)
        logger.info("finnhub_bad_payload %s reason=ragged", format_log_context(failure), extra=failure)
        return []
    # A ragged optional volume array cannot be aligned, so it is dropped.
    if "v" in arrays and len(arrays["v"]) != length:
        del arrays["v"]
    frame = pd.DataFrame({_COLUMNS[key]: values for key, values in arrays.items()})
    return frame_to_bars(frame, time_unit="s", count=count)


__all__ = ["VENDOR", "fetch_finnhub", "finnhub_symbol"]
