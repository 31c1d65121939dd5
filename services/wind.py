from __future__ import annotations

import logging
import math

import config
from models.analysis import BeaufortResult, WindAnalysis, WindYear
from models.observation import DailyRecord, WindowedSample
from services.climatology import (
    calculate_percentiles,
    clean,
    equal_width_bins,
    mann_kendall,
    median_or_none,
    probability,
)

logger = logging.getLogger("climo_profile.wind")

# (category, beaufort number, lower bound km/h, name, observed effect)
BEAUFORT_SCALE = [
    ("calm", 0, 0.0, "Calm", "Smoke rises vertically"),
    ("light_air", 1, 1.0, "Light Air", "Smoke drift"),
    ("light_breeze", 2, 6.0, "Light Breeze", "Wind felt on face"),
    ("gentle_breeze", 3, 12.0, "Gentle Breeze", "Leaves in motion"),
    ("moderate_breeze", 4, 20.0, "Moderate Breeze", "Small branches move"),
    ("fresh_breeze", 5, 29.0, "Fresh Breeze", "Small trees sway"),
    ("strong_breeze", 6, 39.0, "Strong Breeze", "Umbrellas difficult"),
    ("near_gale", 7, 50.0, "Near Gale", "Walking difficult"),
    ("gale", 8, 62.0, "Gale", "Twigs break"),
]


def _kmh(value: float | None) -> float | None:
    return None if value is None else value * 3.6


def daily_max_kmh(record: DailyRecord) -> float | None:
    """Daily max wind (km/h), falling back to the daily mean when max is missing."""
    if record.get("WS10M_MAX") is not None:
        return _kmh(record.get("WS10M_MAX"))
    return _kmh(record.get("WS10M"))


def beaufort_number(speed_kmh: float) -> int:
    """Beaufort band (0-8) whose lower bound is the largest not above *speed_kmh*."""
    number = 0
    for _, bf, low, _, _ in BEAUFORT_SCALE:
        if speed_kmh >= low:
            number = bf
    return number


def analyze_wind(sample: WindowedSample) -> WindAnalysis | None:
    if not sample.has_any("WS10M", "WS10M_MAX"):
        logger.warning("No wind observations in window, skipping")
        return None

    max_kmh = clean(daily_max_kmh(r) for r in sample)
    avg_kmh = [_kmh(r.get("WS10M")) for r in sample]

    beaufort = []
    for k, (category, bf, low, name, effect) in enumerate(BEAUFORT_SCALE):
        high = BEAUFORT_SCALE[k + 1][2] if k + 1 < len(BEAUFORT_SCALE) else math.inf
        count = int(((max_kmh >= low) & (max_kmh < high)).sum())
        beaufort.append(
            BeaufortResult(
                category=category,
                beaufort=bf,
                name=name,
                probability=probability(count, max_kmh.size),
                effect=effect,
            )
        )

    yearly = [
        WindYear(
            year=year,
            max_median=median_or_none(_kmh(r.get("WS10M_MAX")) for r in records),
            avg_median=median_or_none(_kmh(r.get("WS10M")) for r in records),
        )
        for year, records in sample.by_year().items()
    ]

    analysis = WindAnalysis(
        avg_percentiles=calculate_percentiles(avg_kmh),
        max_percentiles=calculate_percentiles(max_kmh),
        beaufort_distribution=beaufort,
        most_common_condition=max(beaufort, key=lambda b: b.probability),
        speed_distribution=equal_width_bins(
            max_kmh,
            bin_count=config.DISTRIBUTION_BIN_COUNT,
            label=lambda a, b: f"{a:.0f}-{b:.0f}km/h",
        ),
        yearly=yearly,
        avg_trend=mann_kendall([y.avg_median for y in yearly], unit="km/h"),
        max_trend=mann_kendall([y.max_median for y in yearly], unit="km/h"),
    )
    logger.debug("Wind: most common condition %s", analysis.most_common_condition.name)
    return analysis
