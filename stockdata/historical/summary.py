from __future__ import annotations
from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional, Sequence
import math
import statistics as st

from stockdata.historical.window import DataIntegrityError


def _checked(v: object) -> float:
    if isinstance(v, bool) or not isinstance(v, (int, float)) or not math.isfinite(v):
        raise DataIntegrityError(f"non-numeric value in series: {v!r}")
    return float(v)


def round2(x: float) -> float:
    # multiply by 100, round half up, divide by 100
    return math.floor(float(x) * 100 + 0.5) / 100


@dataclass(frozen=True)
class StatisticsSummary:
    mean: float
    median: float
    std_dev: float
    min: float
    max: float
    plus_one_dev: float
    minus_one_dev: float
    plus_two_dev: float
    minus_two_dev: float
    percentile: float
    count: int

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def latest_percentile(values: Sequence[float]) -> float:
    """Percentage of values less than or equal to the last value in input order.

    This ranks the most recent observation against the whole window; it is not
    a quantile function.
    """
    last = values[-1]
    return sum(1 for v in values if v <= last) / len(values) * 100


def summarize(values: Sequence[float]) -> Optional[StatisticsSummary]:
    """Summary statistics over `values`, or None when there are none.

    std_dev is the population standard deviation. Every float field is rounded
    to two decimals here, bands included (they are derived from the unrounded
    mean and std_dev). Strings, booleans, NaN and infinities raise
    DataIntegrityError.
    """
    vals = [_checked(v) for v in values]
    if not vals:
        return None

    percentile = latest_percentile(vals)
    mean = st.fmean(vals)
    median = st.median(vals)
    std_dev = st.pstdev(vals, mu=mean)

    return StatisticsSummary(
        mean=round2(mean),
        median=round2(median),
        std_dev=round2(std_dev),
        min=round2(min(vals)),
        max=round2(max(vals)),
        plus_one_dev=round2(mean + std_dev),
        minus_one_dev=round2(mean - std_dev),
        plus_two_dev=round2(mean + 2 * std_dev),
        minus_two_dev=round2(mean - 2 * std_dev),
        percentile=round2(percentile),
        count=len(vals),
    )
