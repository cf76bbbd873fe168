"""Twelve Data ``time_series`` adapter.

Broadest coverage of the three vendors (FX, metals, indices, crypto), so the
orchestrator iterates symbol aliases against it.  Values come back
newest-first with naive ``datetime`` strings in the requested timezone.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List

import pandas as pd

from ..bars import Bar, normalize_timeframe
from ..config import get_settings
from ._http import format_log_context, frame_to_bars, get_http_client, get_json

logger = logging.getLogger(__name__)

VENDOR = "twelvedata"

_INTERVALS = {"15m": "15min", "1h": "1h", "4h": "4h"}
_MAX_OUTPUTSIZE = 5000


def twelvedata_interval(timeframe: str) -> str:
    return _INTERVALS[normalize_timeframe(timeframe)]


async def fetch_twelvedata(symbol: str, timeframe: str, count: int, timeout_ms: float) -> List[Bar]:
    """Fetch up to ``count`` bars for ``symbol`` from Twelve Data."""

    settings = get_settings()
    api_key = settings.twelvedata_api_key
    if not api_key:
        logger.debug("twelvedata_disabled reason=missing_api_key")
        return []
    if count <= 0:
        return []

    interval = twelvedata_interval(timeframe)
    params = {
        "symbol": symbol,
        "interval": interval,
        "outputsize": min(count, _MAX_OUTPUTSIZE),
        "timezone": "UTC",
        "format": "JSON",
        "apikey": api_key,
    }
    context: Dict[str, Any] = {"symbol": symbol, "interval": interval, "count": count}
    client = await get_http_client()
    payload = await get_json(
        client,
        f"{settings.twelvedata_base_url}/time_series",
        params,
        timeout_ms=timeout_ms,
        vendor=VENDOR,
        context=context,
    )
    if payload is None:
        return []
    if not isinstance(payload, dict) or str(payload.get("status", "ok")).lower() == "error":
        failure = dict(context)
        if isinstance(payload, dict):
            failure.update({"code": payload.get("code"), "error": str(payload.get("message") or "")})
        logger.info("twelvedata_bad_payload %s", format_log_context(failure), extra=failure)
        return []

    values = payload.get("values") or payload.get("data")
    if not isinstance(values, list) or not values:
        logger.info("twelvedata_empty %s", format_log_context(context), extra=context)
        return []

    records = [item for item in values if isinstance(item, dict)]
    frame = pd.DataFrame.from_records(records)
    if "datetime" not in frame.columns:
        logger.info("twelvedata_bad_payload %s", format_log_context(context), extra=context)
        return []
    frame = frame.rename(columns={"datetime": "timestamp"})
    return frame_to_bars(frame, count=count)


__all__ = ["VENDOR", "fetch_twelvedata", "twelvedata_interval"]
