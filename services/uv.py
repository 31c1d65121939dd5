"""
UV analyzer — clear-sky UV from solar geometry and ozone, all-sky via cloud.

For each day:
  1. solar zenith at noon from latitude and day-of-year
  2. clear-sky UV (Allaart) from total ozone and aerosol optical depth
  3. all-sky UV = clear-sky x EPA cloud transmission for that day's cloud

Elevation is fixed at config.UV_ELEVATION_M.
"""
from __future__ import annotations

import logging
import math
from dataclasses import replace

import config
from models.analysis import UvAnalysis, UvCategory, UvYear
from models.observation import DailyRecord, WindowedSample
from services.climatology import clean, day_of_year, mann_kendall, median_or_none, probability
from services.indices import clear_sky_uv, cloud_transmission, solar_noon_zenith

logger = logging.getLogger("climo_profile.uv")

WHO_UV_SCALE = [
    UvCategory("Low", 0, 3, "#4CAF50", "No special protection needed."),
    UvCategory("Moderate", 3, 6, "#FDD835", "Seek shade during midday hours."),
    UvCategory("High", 6, 8, "#FF9800", "Wear protective clothing, hat, and sunscreen."),
    UvCategory("Very High", 8, 11, "#F44336", "Reduce sun exposure between 10am-4pm."),
    UvCategory("Extreme", 11, math.inf, "#9C27B0", "Avoid outdoor activities during midday."),
]


def who_category(uv_index: float) -> UvCategory:
    for category in WHO_UV_SCALE:
        if category.lower <= uv_index < category.upper:
            return category
    return WHO_UV_SCALE[-1]


def daily_clear_sky(record: DailyRecord, lat: float) -> float | None:
    zenith = solar_noon_zenith(lat, day_of_year(record.date))
    return clear_sky_uv(record.get("TO3"), zenith, config.UV_ELEVATION_M, record.get("AOD_55"))


def analyze_uv(sample: WindowedSample, lat: float) -> UvAnalysis | None:
    if not sample.has_any("TO3"):
        logger.warning("No ozone observations in window, UV cannot be derived")
        return None

    clear: list[float | None] = []
    all_sky: list[float | None] = []
    for record in sample:
        value = daily_clear_sky(record, lat)
        clear.append(value)
        all_sky.append(None if value is None else value * cloud_transmission(record.get("CLOUD_AMT")))

    valid_clear = clean(clear)
    distribution = [
        replace(
            cat,
            probability=probability(
                int(((valid_clear >= cat.lower) & (valid_clear < cat.upper)).sum()),
                valid_clear.size,
            ),
        )
        for cat in WHO_UV_SCALE
    ]

    median_all = median_or_none(all_sky)
    median_clear = median_or_none(clear)
    reduction = (
        (1.0 - median_all / median_clear) * 100.0
        if median_clear and median_all is not None
        else 0.0
    )

    clear_by_date = {r.date: value for r, value in zip(sample, clear)}
    yearly = [
        UvYear(
            year=year,
            clear_sky_median=median_or_none(clear_by_date[r.date] for r in records),
            cloud_median=median_or_none(r.get("CLOUD_AMT") for r in records),
        )
        for year, records in sample.by_year().items()
    ]

    analysis = UvAnalysis(
        median_all_sky=median_all,
        median_clear_sky=median_clear,
        median_cloud=median_or_none(sample.values("CLOUD_AMT")),
        median_observed=median_or_none(sample.values("ALLSKY_SFC_UV_INDEX")),
        cloud_reduction=reduction,
        all_sky_category=None if median_all is None else who_category(median_all),
        clear_sky_category=None if median_clear is None else who_category(median_clear),
        distribution=distribution,
        yearly=yearly,
        trend=mann_kendall([y.clear_sky_median for y in yearly], unit="UV index"),
    )
    logger.debug(
        "UV at lat %.2f: clear-sky median %s, all-sky median %s",
        lat,
        median_clear,
        median_all,
    )
    return analysis
