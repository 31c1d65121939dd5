from __future__ import annotations

import logging

import config
from models.analysis import HumidityAnalysis, HumidityYear
from models.observation import WindowedSample
from models.statistics import ThresholdProbability
from services.climatology import (
    calculate_percentiles,
    clean,
    equal_width_bins,
    mann_kendall,
    median_or_none,
    probability,
)

logger = logging.getLogger("climo_profile.humidity")

# Thresholds come from the sample's own upper percentiles, not fixed values.
EXCEEDANCE_LEVELS = {"moderate": 75, "high": 90, "very_high": 95, "extreme": 98}


def _self_exceedance(values: list[float | None]) -> list[ThresholdProbability]:
    data = clean(values)
    pct = calculate_percentiles(data, list(EXCEEDANCE_LEVELS.values()))
    return [
        ThresholdProbability(
            name=name,
            threshold=pct[rank],
            probability=probability(int((data >= pct[rank]).sum()), data.size),
        )
        for name, rank in EXCEEDANCE_LEVELS.items()
    ]


def analyze_humidity(sample: WindowedSample) -> HumidityAnalysis | None:
    if not sample.has_any("RH2M", "QV2M"):
        logger.warning("No humidity observations in window, skipping")
        return None

    relative = sample.values("RH2M")
    specific = sample.values("QV2M")

    yearly = [
        HumidityYear(
            year=year,
            relative_median=median_or_none(r.get("RH2M") for r in records),
            specific_median=median_or_none(r.get("QV2M") for r in records),
        )
        for year, records in sample.by_year().items()
    ]

    return HumidityAnalysis(
        relative_percentiles=calculate_percentiles(relative),
        specific_percentiles=calculate_percentiles(specific),
        relative_exceedance=_self_exceedance(relative),
        specific_exceedance=_self_exceedance(specific),
        distribution=equal_width_bins(
            relative,
            bin_count=config.DISTRIBUTION_BIN_COUNT,
            label=lambda a, b: f"{a:.0f}-{b:.0f}%",
        ),
        yearly=yearly,
        relative_trend=mann_kendall([y.relative_median for y in yearly], unit="%"),
        specific_trend=mann_kendall([y.specific_median for y in yearly], unit="g/kg"),
    )
