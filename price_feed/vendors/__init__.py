"""Vendor adapter registry.

Every adapter shares one contract::

    async fetch(symbol, timeframe, count, timeout_ms) -> list[Bar]

and never raises.  ``VENDORS`` is ordered by priority: the broad-coverage
vendor whose aliases are iterated first, then the FX-only vendors.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Awaitable, Callable, List, Tuple

from ..bars import Bar
from ._http import close_http_client
from .finnhub import fetch_finnhub
from .polygon import fetch_polygon
from .twelvedata import fetch_twelvedata

FetchFn = Callable[[str, str, int, float], Awaitable[List[Bar]]]


@dataclass(frozen=True, slots=True)
class VendorAdapter:
    name: str
    fetch: FetchFn
    fx_only: bool = False
    uses_aliases: bool = False


VENDORS: Tuple[VendorAdapter, ...] = (
    VendorAdapter("twelvedata", fetch_twelvedata, uses_aliases=True),
    VendorAdapter("finnhub", fetch_finnhub, fx_only=True),
    VendorAdapter("polygon", fetch_polygon, fx_only=True),
)


__all__ = ["FetchFn", "VENDORS", "VendorAdapter", "close_http_client"]
