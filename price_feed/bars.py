"""Bar and timeframe primitives shared by every layer of the price feed.

Bar times are integer epoch seconds marking the bar's open instant.  A series
is a plain ``list[Bar]`` ordered newest-first.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, Literal, Optional, Tuple

import pandas as pd

Timeframe = Literal["15m", "1h", "4h"]

FINE: Timeframe = "15m"
MEDIUM: Timeframe = "1h"
COARSE: Timeframe = "4h"

TIMEFRAMES: Tuple[Timeframe, ...] = (FINE, MEDIUM, COARSE)

TIMEFRAME_SECONDS: Dict[str, int] = {
    FINE: 15 * 60,
    MEDIUM: 60 * 60,
    COARSE: 4 * 60 * 60,
}

_TIMEFRAME_ALIASES: Dict[str, Timeframe] = {
    "15m": FINE,
    "15min": FINE,
    "m15": FINE,
    "15": FINE,
    "fine": FINE,
    "1h": MEDIUM,
    "60m": MEDIUM,
    "60min": MEDIUM,
    "h1": MEDIUM,
    "60": MEDIUM,
    "medium": MEDIUM,
    "4h": COARSE,
    "240m": COARSE,
    "240min": COARSE,
    "h4": COARSE,
    "240": COARSE,
    "coarse": COARSE,
}


def normalize_timeframe(value: object) -> Timeframe:
    """Map a caller-supplied timeframe token onto ``15m``/``1h``/``4h``.

    Unknown tokens fall through to the coarse bucket.
    """

    token = str(value or "").strip().lower()
    return _TIMEFRAME_ALIASES.get(token, COARSE)


@dataclass(frozen=True, slots=True)
class Bar:
    time: int
    open: float
    high: float
    low: float
    close: float
    volume: Optional[float] = None

    def to_dict(self) -> Dict[str, float | int]:
        payload: Dict[str, float | int] = {
            "t": self.time,
            "o": self.open,
            "h": self.high,
            "l": self.low,
            "c": self.close,
        }
        if self.volume is not None:
            payload["v"] = self.volume
        return payload


@dataclass(frozen=True, slots=True)
class FetchResult:
    """Outcome of one resolution step, kept internal for logging.

    ``reason`` explains an empty result (``exhausted`` or ``budget``);
    ``source`` names whoever produced the bars.
    """

    bars: Tuple[Bar, ...] = ()
    source: Optional[str] = None
    reason: Optional[str] = None

    @property
    def ok(self) -> bool:
        return bool(self.bars)

    @classmethod
    def empty(cls, reason: str) -> "FetchResult":
        return cls((), None, reason)

    @classmethod
    def of(cls, bars: Iterable[Bar], source: str) -> "FetchResult":
        return cls(tuple(bars), source, None)


def bars_to_frame(bars: Iterable[Bar]) -> pd.DataFrame:
    """Return an ascending OHLCV frame indexed by UTC timestamp."""

    rows = list(bars)
    columns = ["open", "high", "low", "close", "volume"]
    if not rows:
        empty = pd.DataFrame(columns=columns, dtype=float)
        empty.index = pd.DatetimeIndex([], tz="UTC", name="timestamp")
        return empty
    frame = pd.DataFrame(
        {
            "timestamp": [bar.time for bar in rows],
            "open": [bar.open for bar in rows],
            "high": [bar.high for bar in rows],
            "low": [bar.low for bar in rows],
            "close": [bar.close for bar in rows],
            "volume": [bar.volume if bar.volume is not None else 0.0 for bar in rows],
        }
    )
    frame["timestamp"] = pd.to_datetime(frame["timestamp"], unit="s", utc=True)
    return frame.set_index("timestamp").sort_index()


__all__ = [
    "Bar",
    "COARSE",
    "FINE",
    "FetchResult",
    "MEDIUM",
    "TIMEFRAMES",
    "TIMEFRAME_SECONDS",
    "Timeframe",
    "bars_to_frame",
    "normalize_timeframe",
]
