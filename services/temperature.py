from __future__ import annotations

import logging

import config
from models.analysis import TemperatureAnalysis, TemperatureYear
from models.observation import WindowedSample
from models.statistics import ThresholdProbability
from services.climatology import (
    calculate_percentiles,
    clean,
    mann_kendall,
    median_or_none,
    probability,
)

logger = logging.getLogger("climo_profile.temperature")


def _exceedance(
    values: list[float | None], thresholds: dict[str, float], above: bool
) -> list[ThresholdProbability]:
    # share of all window days; a day missing the value counts as not exceeding
    data = clean(values)
    result = []
    for name, threshold in thresholds.items():
        hits = int((data >= threshold).sum()) if above else int((data <= threshold).sum())
        result.append(ThresholdProbability(name, threshold, probability(hits, len(values))))
    return result


def analyze_temperature(sample: WindowedSample) -> TemperatureAnalysis | None:
    """Percentiles, fixed-threshold extremes and yearly trends of daily temperature."""
    if not sample.has_any("T2M", "T2M_MAX", "T2M_MIN"):
        logger.warning("No temperature observations in window, skipping")
        return None

    max_values = sample.values("T2M_MAX")
    min_values = sample.values("T2M_MIN")

    yearly = [
        TemperatureYear(
            year=year,
            max_median=median_or_none(r.get("T2M_MAX") for r in records),
            min_median=median_or_none(r.get("T2M_MIN") for r in records),
        )
        for year, records in sample.by_year().items()
    ]

    analysis = TemperatureAnalysis(
        max_percentiles=calculate_percentiles(max_values),
        min_percentiles=calculate_percentiles(min_values),
        avg_percentiles=calculate_percentiles(sample.values("T2M")),
        heat_probabilities=_exceedance(max_values, config.HEAT_THRESHOLDS_C, above=True),
        cold_probabilities=_exceedance(min_values, config.COLD_THRESHOLDS_C, above=False),
        yearly=yearly,
        max_trend=mann_kendall([y.max_median for y in yearly], unit="°C"),
        min_trend=mann_kendall([y.min_median for y in yearly], unit="°C"),
    )
    logger.debug(
        "Temperature: max p50=%.1f°C, trend %s",
        analysis.max_percentiles.p50,
        analysis.max_trend.direction,
    )
    return analysis
