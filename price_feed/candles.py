"""Candle acquisition entry point.

``get_candles`` resolves an instrument/timeframe to newest-first bars by
walking the vendor registry, then falling back to a synthetic series derived
from an adjacent timeframe.  It never raises: every failure surfaces as an
empty list so plan generation can degrade instead of aborting.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence

import pandas as pd

from .bars import Bar, FetchResult, bars_to_frame, normalize_timeframe
from .cache import CandleCache, cache_key
from .config import Settings, get_settings
from .symbols import is_forex, resolve_instrument, vendor_aliases
from .synthetic import apply_derivation, derivation_plan
from .vendors import VENDORS, VendorAdapter
from .vendors._http import format_log_context

logger = logging.getLogger(__name__)

# Derivation may recurse into the orchestrator once; the source fetch itself
# never derives, so the fallback graph stays acyclic.
MAX_DERIVE_DEPTH = 1


class _Budget:
    """Wall-clock allowance shared by every step of one top-level request."""

    def __init__(self, total_ms: float, clock: Callable[[], float]) -> None:
        self._clock = clock
        self._deadline = clock() + total_ms / 1000.0 if total_ms > 0 else None

    def remaining_ms(self) -> float:
        if self._deadline is None:
            return float("inf")
        return max(0.0, (self._deadline - self._clock()) * 1000.0)

    @property
    def exhausted(self) -> bool:
        return self.remaining_ms() <= 0


class CandleService:
    """Fallback orchestrator over the vendor registry and the candle cache."""

    def __init__(
        self,
        cache: CandleCache | None = None,
        *,
        vendors: Sequence[VendorAdapter] | None = None,
        settings: Settings | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._settings = settings or get_settings()
        self._clock = clock
        self.cache = cache if cache is not None else CandleCache(self._settings.cache_ttl_seconds, clock=clock)
        self.cache.init()
        self._vendors = tuple(vendors) if vendors is not None else VENDORS

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def vendors(self) -> tuple[VendorAdapter, ...]:
        return self._vendors

    async def get_candles(self, instrument: Any, timeframe: Any, count: Any) -> List[Bar]:
        try:
            symbol = resolve_instrument(instrument, self._settings.default_instrument)
            tf = normalize_timeframe(timeframe)
            limit = min(int(count or 0), self._settings.max_bars)
        except Exception:
            logger.exception("candles_bad_request instrument=%r timeframe=%r count=%r", instrument, timeframe, count)
            return []

        context = {"symbol": symbol, "timeframe": tf, "count": limit}
        if limit <= 0:
            logger.debug("candles_empty %s reason=count", format_log_context(context), extra=context)
            return []

        budget = _Budget(self._settings.total_budget_ms, self._clock)
        try:
            result = await self._resolve(symbol, tf, limit, budget=budget, depth=0)
        except Exception:
            logger.exception("candles_unexpected_error %s", format_log_context(context), extra=context)
            return []

        outcome = dict(context, source=result.source, reason=result.reason, bars=len(result.bars))
        if result.ok:
            logger.info("candles_resolved %s", format_log_context(outcome), extra=outcome)
        else:
            logger.warning("candles_empty %s", format_log_context(outcome), extra=outcome)
        return list(result.bars)

    async def _resolve(self, symbol: str, tf: str, count: int, *, budget: _Budget, depth: int) -> FetchResult:
        key = cache_key(symbol, tf)
        cached = self.cache.get(key, count)
        if cached:
            return FetchResult.of(cached[:count], "cache")

        result = await self._from_vendors(symbol, tf, count, budget)
        if not result.ok and result.reason != "budget" and depth < MAX_DERIVE_DEPTH:
            result = await self._derive(symbol, tf, count, budget=budget, depth=depth)

        # Source fetches for a derivation are sized for the transform, not for
        # a caller, so only top-level results are stored.
        if result.ok and depth == 0:
            self.cache.set(key, result.bars, requested=count)
        return result

    async def _from_vendors(self, symbol: str, tf: str, count: int, budget: _Budget) -> FetchResult:
        forex = is_forex(symbol)
        for vendor in self._vendors:
            if vendor.fx_only and not forex:
                continue
            spellings = vendor_aliases(symbol, vendor.name) if vendor.uses_aliases else [symbol]
            for spelling in spellings:
                if budget.exhausted:
                    context = {"symbol": symbol, "timeframe": tf, "vendor": vendor.name}
                    logger.warning("candles_budget_exhausted %s", format_log_context(context), extra=context)
                    return FetchResult.empty("budget")
                bars = await self._call_vendor(vendor, spelling, tf, count, budget)
                if bars:
                    return FetchResult.of(bars, vendor.name)
        return FetchResult.empty("exhausted")

    async def _call_vendor(
        self, vendor: VendorAdapter, spelling: str, tf: str, count: int, budget: _Budget
    ) -> List[Bar]:
        timeout_ms = min(float(self._settings.vendor_timeout_ms), budget.remaining_ms())
        try:
            bars = await vendor.fetch(spelling, tf, count, timeout_ms)
        except Exception as exc:
            context = {"vendor": vendor.name, "symbol": spelling, "timeframe": tf, "error": repr(exc)}
            logger.warning("candles_vendor_error %s", format_log_context(context), extra=context)
            return []
        return list(bars or [])[:count]

    async def _derive(self, symbol: str, tf: str, count: int, *, budget: _Budget, depth: int) -> FetchResult:
        for plan in derivation_plan(tf):
            if budget.exhausted:
                return FetchResult.empty("budget")
            source = await self._resolve(
                symbol,
                plan.source,
                plan.source_count(count),
                budget=budget,
                depth=depth + 1,
            )
            if not source.ok:
                continue
            derived = apply_derivation(plan, source.bars, count)
            if derived:
                context = {
                    "symbol": symbol,
                    "timeframe": tf,
                    "source": plan.label,
                    "source_bars": len(source.bars),
                    "bars": len(derived),
                }
                logger.info("candles_synthetic %s", format_log_context(context), extra=context)
                return FetchResult.of(derived, plan.label)
        return FetchResult.empty("budget" if budget.exhausted else "exhausted")


@lru_cache()
def get_candle_service() -> CandleService:
    """Return the process-wide service built from the current settings."""

    return CandleService()


def reset_candle_service() -> None:
    get_candle_service.cache_clear()


async def get_candles(instrument: Any, timeframe: Any = "15m", count: Any = 200) -> List[Bar]:
    """Return up to ``count`` newest-first bars; empty when nothing is available."""

    try:
        service = get_candle_service()
    except Exception:
        logger.exception("candles_service_unavailable")
        return []
    return await service.get_candles(instrument, timeframe, count)


@dataclass(slots=True)
class TimeframeBundle:
    """Series for several timeframes of one instrument, fetched together."""

    symbol: str
    frames: Dict[str, List[Bar]] = field(default_factory=dict)
    missing: List[str] = field(default_factory=list)

    @property
    def complete(self) -> bool:
        return not self.missing

    def counts(self) -> Dict[str, int]:
        return {tf: len(bars) for tf, bars in self.frames.items()}

    def frame(self, timeframe: str) -> pd.DataFrame:
        return bars_to_frame(self.frames.get(normalize_timeframe(timeframe), []))


async def get_timeframe_bundle(
    instrument: Any,
    timeframes: Iterable[str] = ("4h", "1h", "15m"),
    count: int = 200,
    *,
    service: Optional[CandleService] = None,
) -> TimeframeBundle:
    """Fetch several timeframes concurrently; any subset may come back empty."""

    svc = service or get_candle_service()
    symbol = resolve_instrument(instrument, svc.settings.default_instrument)
    ordered: List[str] = []
    for token in timeframes:
        tf = normalize_timeframe(token)
        if tf not in ordered:
            ordered.append(tf)
    results = await asyncio.gather(*(svc.get_candles(symbol, tf, count) for tf in ordered))
    bundle = TimeframeBundle(symbol=symbol)
    for tf, bars in zip(ordered, results):
        bundle.frames[tf] = bars
        if not bars:
            bundle.missing.append(tf)
    return bundle


__all__ = [
    "CandleService",
    "MAX_DERIVE_DEPTH",
    "TimeframeBundle",
    "get_candle_service",
    "get_candles",
    "get_timeframe_bundle",
    "reset_candle_service",
]
