"""Synthetic series derived from an adjacent timeframe.

Used only when no vendor returned bars for the requested timeframe.

``explode`` is a crude placeholder: every finer bar it emits repeats its parent
coarse bar's OHLC, so there is no real intrabar structure (no genuine swing
highs/lows, ranges or closes inside the parent window).  Consumers computing
anything sensitive to intrabar movement should treat a synthetic fine series
as low-confidence.  ``aggregate`` is a faithful resample, limited only by
gaps in the finer data.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, List, Literal, Optional, Sequence

from .bars import COARSE, FINE, MEDIUM, TIMEFRAME_SECONDS, Bar, Timeframe

DeriveOp = Literal["explode", "aggregate"]


@dataclass(frozen=True, slots=True)
class Derivation:
    source: Timeframe
    op: DeriveOp
    ratio: int

    def source_count(self, count: int) -> int:
        if self.op == "explode":
            return max(1, math.ceil(count / self.ratio))
        return count * self.ratio

    @property
    def label(self) -> str:
        return f"synthetic:{self.op}:{self.source}"


# Nearest coarser timeframe first, then nearest finer.
_PLANS: Dict[str, List[Derivation]] = {
    FINE: [Derivation(MEDIUM, "explode", 4)],
    MEDIUM: [Derivation(COARSE, "explode", 4), Derivation(FINE, "aggregate", 4)],
    COARSE: [Derivation(MEDIUM, "aggregate", 4)],
}


def derivation_plan(timeframe: str) -> List[Derivation]:
    return list(_PLANS.get(timeframe, []))


def explode(coarse: Sequence[Bar], ratio: int, coarse_seconds: int, count: Optional[int] = None) -> List[Bar]:
    """Split each coarse bar into ``ratio`` finer bars with identical OHLC.

    Children are stamped newest-first from the parent's own time downward,
    ``coarse_seconds // ratio`` apart.  Volume, when present, is split evenly.
    """

    if ratio <= 0 or coarse_seconds <= 0:
        return []
    step = coarse_seconds // ratio
    out: List[Bar] = []
    for parent in coarse:
        volume = parent.volume / ratio if parent.volume is not None else None
        for k in range(ratio):
            out.append(
                Bar(
                    time=parent.time - k * step,
                    open=parent.open,
                    high=parent.high,
                    low=parent.low,
                    close=parent.close,
                    volume=volume,
                )
            )
            if count is not None and len(out) >= count:
                return out
    return out


def aggregate(fine: Sequence[Bar], ratio: int) -> List[Bar]:
    """Roll newest-first ``fine`` bars up into groups of ``ratio``.

    Grouping starts at the newest bar; an incomplete oldest group is dropped.
    Each output bar is stamped with its newest member's time.
    """

    if ratio <= 0:
        return []
    out: List[Bar] = []
    for start in range(0, len(fine) - ratio + 1, ratio):
        group = fine[start : start + ratio]
        newest, oldest = group[0], group[-1]
        volumes = [bar.volume for bar in group]
        volume = sum(volumes) if all(v is not None for v in volumes) else None  # type: ignore[arg-type]
        out.append(
            Bar(
                time=newest.time,
                open=oldest.open,
                high=max(bar.high for bar in group),
                low=min(bar.low for bar in group),
                close=newest.close,
                volume=volume,
            )
        )
    return out


def apply_derivation(plan: Derivation, source_bars: Sequence[Bar], count: int) -> List[Bar]:
    if plan.op == "explode":
        return explode(source_bars, plan.ratio, TIMEFRAME_SECONDS[plan.source], count=count)
    return aggregate(source_bars, plan.ratio)[:count]


__all__ = ["Derivation", "DeriveOp", "aggregate", "apply_derivation", "derivation_plan", "explode"]
