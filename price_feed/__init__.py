"""Multi-vendor OHLC candle acquisition with synthetic timeframe fallback."""

from .bars import Bar, Timeframe, bars_to_frame
from .cache import CandleCache
from .candles import CandleService, TimeframeBundle, get_candles, get_timeframe_bundle
from .symbols import is_forex, normalize_symbol

__all__ = [
    "Bar",
    "CandleCache",
    "CandleService",
    "Timeframe",
    "TimeframeBundle",
    "bars_to_frame",
    "get_candles",
    "get_timeframe_bundle",
    "is_forex",
    "normalize_symbol",
]
