"""
Statistical value types shared by the analyzers.
"""
from __future__ import annotations

from dataclasses import dataclass, field

TREND_INCREASING = "increasing"
TREND_DECREASING = "decreasing"
TREND_NONE = "no trend"
TREND_INSUFFICIENT = "insufficient data"


def _rank(r: int) -> property:
    return property(lambda self: self[r], doc=f"Value at the {r}th percentile.")


@dataclass(frozen=True)
class PercentileSet:
    """Values at fixed percentile ranks for one quantity over one sample.

    ``count`` is the number of non-missing values the set was built from.
    An empty sample yields zeros with ``count == 0``; treat that as "no data".
    """

    values: dict[int, float] = field(default_factory=dict)
    count: int = 0

    def __getitem__(self, rank: int) -> float:
        return self.values[rank]

    @property
    def is_empty(self) -> bool:
        return self.count == 0

    p2 = _rank(2)
    p10 = _rank(10)
    p25 = _rank(25)
    p50 = _rank(50)
    p75 = _rank(75)
    p90 = _rank(90)
    p95 = _rank(95)
    p98 = _rank(98)

    def to_dict(self) -> dict[str, float]:
        return {f"p{r}": v for r, v in sorted(self.values.items())}


@dataclass(frozen=True)
class TrendVerdict:
    """Mann-Kendall direction with a Theil-Sen slope per year."""

    direction: str  # one of the TREND_* constants
    p_value: float | None
    slope: float | None
    significant: bool
    interpretation: str

    @property
    def has_data(self) -> bool:
        return self.direction != TREND_INSUFFICIENT


@dataclass(frozen=True)
class DistributionBin:
    name: str
    count: int
    lower: float
    upper: float


@dataclass(frozen=True)
class ThresholdProbability:
    """Share of days (%) beyond a threshold."""

    name: str
    threshold: float
    probability: float


@dataclass(frozen=True)
class ConditionalEffect:
    bin: str
    value: float
    days: int


@dataclass(frozen=True)
class ComparisonBin:
    """Counts of an index and its base quantity falling in the same bin."""

    name: str
    index_count: int
    actual_count: int
    lower: float
    upper: float
