"""
Observation types: raw POWER series, request location, merged daily records
and the seasonal window sample every analyzer reads.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from types import MappingProxyType
from typing import Iterator, Mapping

# parameter code → { "YYYYMMDD" (or ISO) date → value, None when missing }
RawObservationSet = dict[str, dict[str, "float | None"]]


@dataclass(frozen=True)
class Location:
    """Point location of the analysis. Longitude is carried for callers only."""

    lat: float
    lon: float
    name: str | None = None


@dataclass(frozen=True)
class DailyRecord:
    """All parameter values observed on one calendar date."""

    date: date
    values: Mapping[str, float | None] = field(default_factory=dict)
    # Year of the target-date anniversary this day belongs to.  Differs from
    # date.year only for days pulled across the year boundary.
    season_year: int | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "values", MappingProxyType(dict(self.values)))
        if self.season_year is None:
            object.__setattr__(self, "season_year", self.date.year)

    @property
    def year(self) -> int:
        return self.date.year

    def get(self, code: str) -> float | None:
        return self.values.get(code)

    def has(self, code: str) -> bool:
        return self.values.get(code) is not None


@dataclass(frozen=True)
class WindowedSample:
    """Historical days whose day-of-year falls inside the seasonal window."""

    target_date: date
    window_days: int
    target_doy: int
    records: tuple[DailyRecord, ...] = ()

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self) -> Iterator[DailyRecord]:
        return iter(self.records)

    def values(self, code: str) -> list[float | None]:
        """Values of one parameter in record order (None where missing)."""
        return [r.get(code) for r in self.records]

    def has_any(self, *codes: str) -> bool:
        """True if at least one record carries at least one of *codes*."""
        return any(r.has(c) for r in self.records for c in codes)

    @property
    def years(self) -> list[int]:
        return sorted({r.season_year for r in self.records})

    def by_year(self) -> dict[int, list[DailyRecord]]:
        """Group records by season year, ascending."""
        groups: dict[int, list[DailyRecord]] = {}
        for record in self.records:
            groups.setdefault(record.season_year, []).append(record)
        return dict(sorted(groups.items()))
