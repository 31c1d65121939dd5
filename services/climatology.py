"""
Statistical primitives for climatological profiles.

Provides the building blocks every variable analyzer composes:
  - day-of-year arithmetic on UTC-normalised dates
  - percentile estimation by linear interpolation between order statistics
  - Mann-Kendall monotonic trend test with tie correction, paired with
    the Theil-Sen slope estimator
  - equal-width histogram binning for graph-ready distributions

None of these raise on missing input: None / NaN values are dropped and
empty samples produce well-defined neutral results.

Sources:
  - Mann (1945), Kendall (1975): non-parametric trend test
  - Sen (1968): estimates of the regression coefficient based on Kendall's tau
  - Hyndman & Fan (1996), definition 7: linear percentile interpolation
"""
from __future__ import annotations

import logging
import math
from datetime import date, datetime, timezone
from typing import Callable, Iterable, Sequence

import numpy as np
from scipy import stats

import config
from models.statistics import (
    TREND_DECREASING,
    TREND_INCREASING,
    TREND_INSUFFICIENT,
    TREND_NONE,
    DistributionBin,
    PercentileSet,
    TrendVerdict,
)

logger = logging.getLogger("climo_profile.climatology")


# ── Dates ─────────────────────────────────────────────────────────────────────


def day_of_year(value: date | datetime) -> int:
    """Day of year 1..366.  Aware datetimes are converted to UTC first."""
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        value = value.date()
    return value.timetuple().tm_yday


def days_in_year(year: int) -> int:
    return 366 if date(year, 12, 31).timetuple().tm_yday == 366 else 365


# ── Sample cleaning ───────────────────────────────────────────────────────────


def clean(values: Iterable[float | None]) -> np.ndarray:
    """Drop None / NaN and return a float64 array."""
    kept = [v for v in values if v is not None and not math.isnan(v)]
    return np.array(kept, dtype=np.float64)


# ── Percentiles ───────────────────────────────────────────────────────────────


def calculate_percentiles(
    values: Iterable[float | None],
    ranks: Sequence[int] = config.PERCENTILE_RANKS,
) -> PercentileSet:
    """
    Percentiles by linear interpolation between order statistics.

    For rank r over n sorted values the fractional index is (r/100)(n-1);
    the result interpolates between the floor and ceiling order statistics.
    This matches numpy's default "linear" method.

    An empty sample returns zeros with count=0 instead of failing.
    """
    data = clean(values)
    if data.size == 0:
        return PercentileSet({r: 0.0 for r in ranks}, count=0)
    result = np.percentile(data, list(ranks))
    return PercentileSet(
        {r: float(v) for r, v in zip(ranks, np.atleast_1d(result))},
        count=int(data.size),
    )


def median_or_none(values: Iterable[float | None]) -> float | None:
    """Median of the non-missing values, or None if there are none."""
    pct = calculate_percentiles(values, [50])
    return None if pct.is_empty else pct.p50


def percentile_or_none(values: Iterable[float | None], rank: int) -> float | None:
    pct = calculate_percentiles(values, [rank])
    return None if pct.is_empty else pct[rank]


def probability(count: int, total: int) -> float:
    """count/total as a percentage, 0 for an empty total."""
    return (count / total) * 100.0 if total > 0 else 0.0


# ── Trend test ────────────────────────────────────────────────────────────────


def _theil_sen_slope(data: np.ndarray) -> float:
    """Median of all pairwise slopes (v_j - v_i) / (j - i) for j > i."""
    idx = np.arange(data.size)
    i, j = np.triu_indices(data.size, k=1)
    slopes = (data[j] - data[i]) / (idx[j] - idx[i])
    return float(np.median(slopes))


def mann_kendall(values: Sequence[float | None], unit: str = "units") -> TrendVerdict:
    """
    Mann-Kendall monotonic trend test on a time-ordered series.

    S   = Σ sign(v_j - v_i) over all j > i
    Var = [n(n-1)(2n+5) - Σ t(t-1)(2t+5)] / 18   (t = size of each tie group)
    z   = (S - sign(S)) / sqrt(Var)               (continuity correction)
    p   = two-tailed normal probability of |z|

    Series with fewer than MIN_TREND_POINTS non-missing values return an
    "insufficient data" verdict without running the test.
    """
    data = clean(values)
    n = int(data.size)
    if n < config.MIN_TREND_POINTS:
        return TrendVerdict(
            direction=TREND_INSUFFICIENT,
            p_value=None,
            slope=None,
            significant=False,
            interpretation="Not enough data for trend analysis.",
        )

    i, j = np.triu_indices(n, k=1)
    s = int(np.sign(data[j] - data[i]).sum())

    _, tie_counts = np.unique(data, return_counts=True)
    tie_term = float(np.sum(tie_counts * (tie_counts - 1) * (2 * tie_counts + 5)))
    var_s = (n * (n - 1) * (2 * n + 5) - tie_term) / 18.0

    if s > 0 and var_s > 0:
        z = (s - 1) / math.sqrt(var_s)
    elif s < 0 and var_s > 0:
        z = (s + 1) / math.sqrt(var_s)
    else:
        z = 0.0

    p_value = float(2.0 * stats.norm.sf(abs(z)))
    slope = _theil_sen_slope(data)
    significant = p_value < config.TREND_SIGNIFICANCE

    if significant:
        direction = TREND_INCREASING if s > 0 else TREND_DECREASING
        interpretation = (
            f"{direction.capitalize()} trend of {slope:.3f} {unit}/year."
        )
    else:
        direction = TREND_NONE
        interpretation = "No significant trend detected."

    logger.debug("Mann-Kendall n=%d S=%d z=%.3f p=%.4f slope=%.4f", n, s, z, p_value, slope)
    return TrendVerdict(
        direction=direction,
        p_value=p_value,
        slope=slope,
        significant=significant,
        interpretation=interpretation,
    )


# ── Distributions ─────────────────────────────────────────────────────────────


def equal_width_bins(
    values: Iterable[float | None],
    bin_count: int = config.DISTRIBUTION_BIN_COUNT,
    lower: float | None = None,
    upper: float | None = None,
    label: Callable[[float, float], str] | None = None,
) -> list[DistributionBin]:
    """
    Histogram with *bin_count* equal-width bins.

    Edges span the observed min/max unless *lower*/*upper* are given.  The
    last bin is closed so the maximum value is counted.
    """
    data = clean(values)
    if data.size == 0:
        return []
    lo = float(data.min()) if lower is None else lower
    hi = float(data.max()) if upper is None else upper
    counts, edges = np.histogram(data, bins=bin_count, range=(lo, hi))
    label = label or (lambda a, b: f"{a:.1f}-{b:.1f}")
    return [
        DistributionBin(
            name=label(float(edges[k]), float(edges[k + 1])),
            count=int(counts[k]),
            lower=float(edges[k]),
            upper=float(edges[k + 1]),
        )
        for k in range(len(counts))
    ]
