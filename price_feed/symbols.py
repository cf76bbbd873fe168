"""Instrument normalization and per-vendor symbol aliases."""

from __future__ import annotations

import re
from typing import Any, Dict, List, Mapping

_SIX_LETTERS = re.compile(r"^[A-Z]{6}$")
_FX_PAIR = re.compile(r"^[A-Z]{3}/[A-Z]{3}$")

# Synonyms tried after the canonical and compact spellings.  Keyed by vendor,
# then by canonical symbol.
_VENDOR_ALIASES: Dict[str, Dict[str, List[str]]] = {
    "twelvedata": {
        "NAS100": ["NDX", "QQQ"],
        "US100": ["NDX", "QQQ"],
        "NDX": ["QQQ"],
        "US30": ["DJI", "DIA"],
        "SPX500": ["SPX", "SPY"],
        "US500": ["SPX", "SPY"],
        "GER40": ["DAX", "GDAXI"],
        "DE40": ["DAX", "GDAXI"],
        "UK100": ["FTSE", "UKX"],
        "JPN225": ["N225", "NI225"],
        "XAU/USD": ["GOLD", "GC1!"],
        "XAG/USD": ["SILVER", "SI1!"],
        "GOLD": ["XAU/USD"],
        "SILVER": ["XAG/USD"],
        "BTC/USD": ["BTC/USDT", "BTCUSDT"],
        "ETH/USD": ["ETH/USDT", "ETHUSDT"],
        "BTCUSDT": ["BTC/USD", "BTC/USDT"],
        "ETHUSDT": ["ETH/USD", "ETH/USDT"],
    },
}


def _raw_code(raw: Any) -> str:
    if raw is None:
        return ""
    if isinstance(raw, str):
        return raw
    if isinstance(raw, Mapping):
        value = raw.get("code")
    else:
        value = getattr(raw, "code", None)
    return value if isinstance(value, str) else ""


def normalize_symbol(raw: Any) -> str:
    """Canonicalize an instrument code (``eurusd`` -> ``EUR/USD``).

    Accepts a bare string, a mapping with a ``code`` key or any object with a
    ``code`` attribute.  Six-letter codes are treated as currency pairs;
    anything already carrying a separator or of another length passes through.
    """

    token = _raw_code(raw).strip().upper()
    if "/" in token:
        return token
    if _SIX_LETTERS.match(token):
        return f"{token[:3]}/{token[3:]}"
    return token


def resolve_instrument(raw: Any, default: str = "EURUSD") -> str:
    symbol = normalize_symbol(raw)
    return symbol or normalize_symbol(default)


def is_forex(symbol: str) -> bool:
    return bool(_FX_PAIR.match(symbol or ""))


def compact_symbol(symbol: str) -> str:
    return (symbol or "").replace("/", "")


def vendor_aliases(symbol: str, vendor: str = "twelvedata") -> List[str]:
    """Return the ordered spellings of ``symbol`` to try against ``vendor``."""

    canonical = normalize_symbol(symbol)
    candidates = [canonical, compact_symbol(canonical)]
    table = _VENDOR_ALIASES.get(vendor, {})
    candidates.extend(table.get(canonical, []))
    candidates.extend(table.get(compact_symbol(canonical), []))

    ordered: List[str] = []
    for candidate in candidates:
        if candidate and candidate not in ordered:
            ordered.append(candidate)
    return ordered


__all__ = ["compact_symbol", "is_forex", "normalize_symbol", "resolve_instrument", "vendor_aliases"]
