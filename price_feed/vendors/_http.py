"""HTTP plumbing shared by the vendor adapters.

Owns the process-wide ``httpx.AsyncClient``, the timeout race every vendor
call goes through, and the frame normalizer that turns a vendor payload into
newest-first bars.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List, Mapping, Optional

import httpx
import numpy as np
import pandas as pd

from ..bars import TIMEFRAME_SECONDS, Bar, normalize_timeframe

_CLIENT_LOCK = asyncio.Lock()
_HTTP_CLIENT: httpx.AsyncClient | None = None
# Upper bound only; the effective per-call budget is enforced by ``get_json``.
_CLIENT_TIMEOUT = httpx.Timeout(30.0, connect=10.0)
_OHLC = ("open", "high", "low", "close")
logger = logging.getLogger(__name__)


def format_log_context(details: Dict[str, Any]) -> str:
    parts: list[str] = []
    for key, value in details.items():
        if value is None:
            continue
        if isinstance(value, str):
            token = value.strip()
            if not token:
                continue
            safe = token.replace("\n", " ")[:200]
            parts.append(f"{key}={safe}")
            continue
        parts.append(f"{key}={value}")
    return " ".join(parts)


def lookback_seconds(timeframe: str, count: int) -> int:
    # x3 pads for weekends and holidays with no FX prints.
    width = TIMEFRAME_SECONDS[normalize_timeframe(timeframe)]
    return max(count * width * 3, 2 * 86400)


async def get_http_client() -> httpx.AsyncClient:
    global _HTTP_CLIENT
    if _HTTP_CLIENT is None or _HTTP_CLIENT.is_closed:
        async with _CLIENT_LOCK:
            if _HTTP_CLIENT is None or _HTTP_CLIENT.is_closed:
                _HTTP_CLIENT = httpx.AsyncClient(timeout=_CLIENT_TIMEOUT)
    return _HTTP_CLIENT


async def close_http_client() -> None:
    global _HTTP_CLIENT
    if _HTTP_CLIENT is not None and not _HTTP_CLIENT.is_closed:
        await _HTTP_CLIENT.aclose()
    _HTTP_CLIENT = None


async def get_json(
    client: httpx.AsyncClient,
    url: str,
    params: Mapping[str, Any],
    *,
    timeout_ms: float,
    vendor: str,
    context: Dict[str, Any],
) -> Optional[Any]:
    """GET ``url`` racing it against ``timeout_ms``; ``None`` on any failure."""

    if timeout_ms <= 0:
        logger.info("%s_timeout %s", vendor, format_log_context(context), extra=context)
        return None
    logger.debug("%s_request %s", vendor, format_log_context(context), extra=context)
    try:
        resp = await asyncio.wait_for(client.get(url, params=dict(params)), timeout=timeout_ms / 1000.0)
        resp.raise_for_status()
    except asyncio.TimeoutError:
        failure = dict(context, timeout_ms=timeout_ms)
        logger.warning("%s_timeout %s", vendor, format_log_context(failure), extra=failure)
        return None
    except httpx.HTTPStatusError as exc:
        failure = dict(context)
        failure.update(
            {
                "status_code": exc.response.status_code,
                "body": (exc.response.text or "")[:400],
            }
        )
        logger.warning("%s_http_error %s", vendor, format_log_context(failure), extra=failure)
        return None
    except httpx.HTTPError as exc:
        failure = dict(context, error=str(exc) or exc.__class__.__name__)
        logger.warning("%s_request_error %s", vendor, format_log_context(failure), extra=failure)
        return None
    try:
        return resp.json()
    except ValueError as exc:
        failure = dict(context, error=str(exc))
        logger.warning("%s_bad_payload %s", vendor, format_log_context(failure), extra=failure)
        return None


def frame_to_bars(frame: pd.DataFrame, *, time_unit: str | None = None, count: int | None = None) -> List[Bar]:
    """Convert a vendor frame into newest-first bars.

    ``frame`` needs a ``timestamp`` column plus ``open/high/low/close`` and an
    optional ``volume``.  ``time_unit`` is ``"s"``/``"ms"`` for epoch numbers
    and ``None`` for datetime strings (read as UTC).  Rows with an unparsable
    timestamp or any non-finite price are dropped.
    """

    if frame is None or frame.empty or "timestamp" not in frame.columns:
        return []
    if any(column not in frame.columns for column in _OHLC):
        return []

    work = pd.DataFrame(index=frame.index)
    for column in _OHLC:
        work[column] = pd.to_numeric(frame[column], errors="coerce")
    if "volume" in frame.columns:
        work["volume"] = pd.to_numeric(frame["volume"], errors="coerce")

    if time_unit is None:
        stamps = pd.to_datetime(frame["timestamp"], utc=True, errors="coerce")
    else:
        stamps = pd.to_datetime(pd.to_numeric(frame["timestamp"], errors="coerce"), unit=time_unit, utc=True, errors="coerce")
    work["time"] = stamps

    finite = np.isfinite(work[list(_OHLC)].to_numpy(dtype=float)).all(axis=1)
    work = work.loc[finite & work["time"].notna().to_numpy()].copy()
    if work.empty:
        return []

    work["time"] = work["time"].map(lambda ts: int(ts.timestamp()))
    work = work.drop_duplicates(subset="time", keep="last").sort_values("time", ascending=False)
    if count is not None:
        work = work.head(max(count, 0))

    has_volume = "volume" in work.columns
    bars: List[Bar] = []
    for row in work.itertuples(index=False):
        volume = None
        if has_volume:
            raw_volume = float(row.volume)
            volume = raw_volume if np.isfinite(raw_volume) else None
        bars.append(
            Bar(
                time=int(row.time),
                open=float(row.open),
                high=float(row.high),
                low=float(row.low),
                close=float(row.close),
                volume=volume,
            )
        )
    return bars


__all__ = ["close_http_client", "format_log_context", "frame_to_bars", "get_http_client", "get_json", "lookback_seconds"]
