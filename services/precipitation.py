"""
Precipitation analyzer.

A rain day has at least WET_DAY_THRESHOLD_MM of liquid precipitation
(total minus snow); a snow day has at least SNOW_DAY_THRESHOLD_MM of snow.
Missing precipitation values count as zero.
"""
from __future__ import annotations

import logging

import config
from models.analysis import HumidityRainEffect, PrecipitationAnalysis, PrecipitationYear
from models.observation import DailyRecord, WindowedSample
from models.statistics import ConditionalEffect, DistributionBin
from services.climatology import (
    calculate_percentiles,
    equal_width_bins,
    mann_kendall,
    median_or_none,
    probability,
)

logger = logging.getLogger("climo_profile.precipitation")

RAIN_TEMPERATURE_BINS = ("Cool", "Moderate", "Warm", "Hot")
SNOW_TEMPERATURE_BINS = ("Very Cold", "Cold", "Cool", "Mild")


def liquid_precipitation(record: DailyRecord) -> float:
    return (record.get("PRECTOTCORR") or 0.0) - (record.get("PRECSNO") or 0.0)


def snowfall(record: DailyRecord) -> float:
    return record.get("PRECSNO") or 0.0


def is_rain_day(record: DailyRecord) -> bool:
    return liquid_precipitation(record) >= config.WET_DAY_THRESHOLD_MM


def is_snow_day(record: DailyRecord) -> bool:
    return snowfall(record) >= config.SNOW_DAY_THRESHOLD_MM


def _intensity_distribution(amounts: list[float]) -> list[DistributionBin]:
    if len(amounts) < config.MIN_INTENSITY_DAYS:
        return []
    return equal_width_bins(
        amounts,
        bin_count=config.INTENSITY_BIN_COUNT,
        lower=0.0,
        label=lambda a, b: f"{a:.1f}-{b:.1f}mm",
    )


def _humidity_effect(sample: WindowedSample) -> list[HumidityRainEffect]:
    effects = []
    for low, high in config.HUMIDITY_BINS:
        in_bin = [
            r for r in sample
            if r.get("RH2M") is not None and low <= r.get("RH2M") < high
        ]
        effects.append(
            HumidityRainEffect(
                bin=f"{low}-{high}%",
                rain_probability=probability(sum(map(is_rain_day, in_bin)), len(in_bin)),
                snow_probability=probability(sum(map(is_snow_day, in_bin)), len(in_bin)),
            )
        )
    return effects


def _temperature_effect(
    days: list[DailyRecord],
    amount,
    names: tuple[str, ...],
) -> list[ConditionalEffect]:
    """Median amount per temperature-quartile bin of the qualifying days."""
    quartiles = calculate_percentiles((d.get("T2M") for d in days), [25, 50, 75])
    edges = [-50.0, quartiles.p25, quartiles.p50, quartiles.p75, 100.0]
    effects = []
    for k, name in enumerate(names):
        low, high = edges[k], edges[k + 1]
        in_bin = [
            d for d in days
            if d.get("T2M") is not None and low <= d.get("T2M") < high
        ]
        if len(in_bin) <= config.MIN_TEMPERATURE_EFFECT_DAYS:
            continue
        effects.append(
            ConditionalEffect(
                bin=name,
                value=median_or_none(amount(d) for d in in_bin),
                days=len(in_bin),
            )
        )
    return effects


def analyze_precipitation(sample: WindowedSample) -> PrecipitationAnalysis | None:
    if not sample.has_any("PRECTOTCORR", "PRECSNO"):
        logger.warning("No precipitation observations in window, skipping")
        return None

    rain_days = [r for r in sample if is_rain_day(r)]
    snow_days = [r for r in sample if is_snow_day(r)]
    rain_amounts = [liquid_precipitation(r) for r in rain_days]
    snow_amounts = [snowfall(r) for r in snow_days]

    yearly = [
        PrecipitationYear(
            year=year,
            total_rain=sum(max(0.0, liquid_precipitation(r)) for r in records),
            rain_days=sum(map(is_rain_day, records)),
            total_snow=sum(snowfall(r) for r in records),
            snow_days=sum(map(is_snow_day, records)),
        )
        for year, records in sample.by_year().items()
    ]

    analysis = PrecipitationAnalysis(
        rain_probability=probability(len(rain_days), len(sample)),
        snow_probability=probability(len(snow_days), len(sample)),
        median_rain=median_or_none(rain_amounts),
        median_snow=median_or_none(snow_amounts),
        has_snow=bool(snow_days),
        yearly=yearly,
        rain_trend=mann_kendall([y.total_rain for y in yearly], unit="mm"),
        snow_trend=mann_kendall([y.total_snow for y in yearly], unit="mm"),
        rain_intensity=_intensity_distribution(rain_amounts),
        snow_intensity=_intensity_distribution(snow_amounts),
        humidity_effect=_humidity_effect(sample),
        temperature_effect_rain=_temperature_effect(
            rain_days, liquid_precipitation, RAIN_TEMPERATURE_BINS
        ),
        temperature_effect_snow=_temperature_effect(
            snow_days, snowfall, SNOW_TEMPERATURE_BINS
        ),
    )
    logger.debug(
        "Precipitation: rain %.1f%%, snow %.1f%% of %d days",
        analysis.rain_probability,
        analysis.snow_probability,
        len(sample),
    )
    return analysis
