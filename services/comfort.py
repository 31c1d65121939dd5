"""
Comfort analyzer — how the days actually feel.

Heat index is evaluated on (max temperature, humidity) and wind chill on
(min temperature, mean wind).  A day's apparent temperature is its heat
index when that exceeds the mean temperature, else its wind chill when that
is below the mean, else the mean itself.  Outside its validity range an index
is the unmodified base temperature, so a warm afternoon still counts.

Heat-index and wind-chill summaries, comparison histograms and effect bins
use only the days where the index applies (HI > max, WC < min).

Effect bins with fewer than MIN_EFFECT_BIN_DAYS days are dropped.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass

import numpy as np

import config
from models.analysis import ComfortAnalysis, ComfortSplit, ComfortYear, IndexSummary
from models.observation import DailyRecord, WindowedSample
from models.statistics import ComparisonBin, ConditionalEffect
from services.climatology import (
    calculate_percentiles,
    clean,
    mann_kendall,
    median_or_none,
    percentile_or_none,
    probability,
)
from services.indices import apparent_temperature, heat_index, wind_chill

logger = logging.getLogger("climo_profile.comfort")

WIND_BIN_NAMES = ("Calm", "Light", "Moderate", "Strong")


@dataclass(frozen=True)
class _ComfortDay:
    record: DailyRecord
    heat_index: float | None
    wind_chill: float | None
    apparent: float | None

    @property
    def feels_hotter(self) -> bool:
        t_max = self.record.get("T2M_MAX")
        return self.heat_index is not None and t_max is not None and self.heat_index > t_max

    @property
    def feels_colder(self) -> bool:
        t_min = self.record.get("T2M_MIN")
        return self.wind_chill is not None and t_min is not None and self.wind_chill < t_min


def _evaluate(record: DailyRecord) -> _ComfortDay:
    hi = heat_index(record.get("T2M_MAX"), record.get("RH2M"))
    wc = wind_chill(record.get("T2M_MIN"), record.get("WS10M"))
    # outside its range an index echoes its base temperature and still competes
    return _ComfortDay(record, hi, wc, apparent_temperature(record.get("T2M"), hi, wc))


def _comparison_bins(pairs: list[tuple[float, float]]) -> list[ComparisonBin]:
    """Histogram of index values and base values over shared edges."""
    if not pairs:
        return []
    index_values = np.array([p[0] for p in pairs], dtype=np.float64)
    base_values = np.array([p[1] for p in pairs], dtype=np.float64)
    lo = float(min(index_values.min(), base_values.min()))
    hi = float(max(index_values.max(), base_values.max()))
    bin_count = min(int(math.floor(math.sqrt(len(pairs)))), config.MAX_COMPARISON_BINS) or 10

    index_counts, edges = np.histogram(index_values, bins=bin_count, range=(lo, hi))
    base_counts, _ = np.histogram(base_values, bins=edges)
    return [
        ComparisonBin(
            name=f"{edges[k]:.1f}°C",
            index_count=int(index_counts[k]),
            actual_count=int(base_counts[k]),
            lower=float(edges[k]),
            upper=float(edges[k + 1]),
        )
        for k in range(bin_count)
    ]


def _humidity_effect_on_heat(days: list[_ComfortDay]) -> list[ConditionalEffect]:
    effects = []
    for low, high in config.HUMIDITY_BINS:
        in_bin = [
            d for d in days
            if d.record.get("RH2M") is not None and low <= d.record.get("RH2M") < high
        ]
        if len(in_bin) < config.MIN_EFFECT_BIN_DAYS:
            continue
        delta = median_or_none(d.heat_index for d in in_bin) - median_or_none(
            d.record.get("T2M_MAX") for d in in_bin
        )
        effects.append(ConditionalEffect(f"{low}-{high}%", delta, len(in_bin)))
    return effects


def _wind_effect_on_cold(days: list[_ComfortDay]) -> list[ConditionalEffect]:
    quartiles = calculate_percentiles((d.record.get("WS10M") for d in days), [25, 50, 75])
    edges = [0.0, quartiles.p25, quartiles.p50, quartiles.p75, 100.0]
    effects = []
    for k, name in enumerate(WIND_BIN_NAMES):
        in_bin = [
            d for d in days
            if d.record.get("WS10M") is not None and edges[k] <= d.record.get("WS10M") < edges[k + 1]
        ]
        if len(in_bin) < config.MIN_EFFECT_BIN_DAYS:
            continue
        delta = median_or_none(d.record.get("T2M_MIN") for d in in_bin) - median_or_none(
            d.wind_chill for d in in_bin
        )
        effects.append(ConditionalEffect(name, delta, len(in_bin)))
    return effects


def analyze_comfort(sample: WindowedSample) -> ComfortAnalysis | None:
    if not sample.has_any("T2M", "T2M_MAX", "T2M_MIN"):
        logger.warning("No temperature observations in window, comfort skipped")
        return None

    days = [_evaluate(r) for r in sample]
    heat_days = [d for d in days if d.feels_hotter]
    chill_days = [d for d in days if d.feels_colder]

    apparent = clean(d.apparent for d in days)
    comfortable = int(((apparent >= config.COMFORT_LOWER_C) & (apparent <= config.COMFORT_UPPER_C)).sum())
    hot = int((apparent > config.COMFORT_UPPER_C).sum())
    cold = int((apparent < config.COMFORT_LOWER_C).sum())

    by_date = {d.record.date: d for d in days}
    yearly = [
        ComfortYear(
            year=year,
            heat_index_max=percentile_or_none((by_date[r.date].heat_index for r in records), 98),
            wind_chill_min=percentile_or_none((by_date[r.date].wind_chill for r in records), 2),
        )
        for year, records in sample.by_year().items()
    ]

    analysis = ComfortAnalysis(
        median_apparent_temp=median_or_none(apparent),
        heat_index=IndexSummary(
            applicable_days=len(heat_days),
            median=median_or_none(d.heat_index for d in heat_days),
            extreme=percentile_or_none((d.heat_index for d in heat_days), 98),
        ),
        wind_chill=IndexSummary(
            applicable_days=len(chill_days),
            median=median_or_none(d.wind_chill for d in chill_days),
            extreme=percentile_or_none((d.wind_chill for d in chill_days), 2),
        ),
        comfort=ComfortSplit(
            comfortable=probability(comfortable, apparent.size),
            hot=probability(hot, apparent.size),
            cold=probability(cold, apparent.size),
        ),
        yearly=yearly,
        heat_index_trend=mann_kendall([y.heat_index_max for y in yearly], unit="°C"),
        wind_chill_trend=mann_kendall([y.wind_chill_min for y in yearly], unit="°C"),
        heat_index_distribution=_comparison_bins(
            [(d.heat_index, d.record.get("T2M_MAX")) for d in heat_days]
        ),
        wind_chill_distribution=_comparison_bins(
            [(d.wind_chill, d.record.get("T2M_MIN")) for d in chill_days]
        ),
        humidity_effect_on_heat=_humidity_effect_on_heat(heat_days),
        wind_effect_on_cold=_wind_effect_on_cold(chill_days),
    )
    logger.debug(
        "Comfort: %d heat-index days, %d wind-chill days, %.0f%% comfortable",
        len(heat_days),
        len(chill_days),
        analysis.comfort.comfortable,
    )
    return analysis
