"""Short-lived in-process cache for resolved candle series."""

from __future__ import annotations

import threading
import time
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from .bars import Bar

CacheKey = Tuple[str, str]


def cache_key(symbol: str, timeframe: str) -> CacheKey:
    return (symbol.upper(), timeframe.lower())


class CandleCache:
    """Keyed series store with expiry checked on read.

    There is no background eviction: a stale entry is dropped the next time it
    is looked up.  Entries are written whole and never mutated in place.

    Each entry remembers how many bars were asked for when it was stored.  A
    full-length entry cannot answer a larger request, so such a lookup misses;
    a short entry already holds everything the source had and still hits.
    """

    def __init__(self, ttl_seconds: float = 30.0, *, clock: Callable[[], float] = time.monotonic) -> None:
        self._ttl = max(0.0, float(ttl_seconds))
        self._clock = clock
        self._lock = threading.Lock()
        self._entries: Dict[CacheKey, Tuple[Tuple[Bar, ...], int, float]] = {}

    @property
    def ttl(self) -> float:
        return self._ttl

    def init(self) -> "CandleCache":
        with self._lock:
            self._entries = {}
        return self

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def get(self, key: CacheKey, count: Optional[int] = None) -> Optional[List[Bar]]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            bars, requested, expires_at = entry
            if self._clock() >= expires_at:
                del self._entries[key]
                return None
            if count is not None and count > requested and len(bars) >= requested:
                return None
        return list(bars)

    def set(self, key: CacheKey, bars: Iterable[Bar], requested: Optional[int] = None) -> None:
        frozen = tuple(bars)
        if not frozen or self._ttl <= 0:
            return
        wanted = len(frozen) if requested is None else max(int(requested), len(frozen))
        with self._lock:
            self._entries[key] = (frozen, wanted, self._clock() + self._ttl)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


__all__ = ["CacheKey", "CandleCache", "cache_key"]
