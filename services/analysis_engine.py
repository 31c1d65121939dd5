"""
Analysis Engine — builds the climatological profile for one target date.

Pipeline:
  1. Select every historical day within ±window_days of the target
     day-of-year (wrapping across the year boundary)
  2. Refuse to continue below MIN_SAMPLE_DAYS merged records
  3. Run the six variable analyzers on the same immutable sample
  4. Build the graph series: one point per day offset, each value the
     median across all years sharing that exact day-of-year
  5. Output an AnalysisResult

The analyzers share nothing but the read-only sample, so the async variant
simply runs them in worker threads side by side.
"""
from __future__ import annotations

import asyncio
import logging
from datetime import date, timedelta
from typing import Any, Callable

import config
from models.analysis import AnalysisResult, GraphPoint
from models.observation import DailyRecord, Location, RawObservationSet, WindowedSample
from services.climatology import day_of_year, median_or_none, probability
from services.comfort import analyze_comfort
from services.humidity import analyze_humidity
from services.indices import clear_sky_uv, heat_index, solar_noon_zenith, wind_chill
from services.precipitation import analyze_precipitation, is_rain_day
from services.temperature import analyze_temperature
from services.uv import analyze_uv
from services.window import ensure_sufficient, parse_date, select_window
from services.wind import analyze_wind

logger = logging.getLogger("climo_profile.analysis_engine")

# A VariableAnalyzer takes the sample plus request context and returns its
# analysis, or None when the sample carries none of its inputs.
VariableAnalyzer = Callable[[WindowedSample, Location], Any]

ANALYZERS: dict[str, VariableAnalyzer] = {
    "temperature": lambda sample, location: analyze_temperature(sample),
    "precipitation": lambda sample, location: analyze_precipitation(sample),
    "wind": lambda sample, location: analyze_wind(sample),
    "humidity": lambda sample, location: analyze_humidity(sample),
    "uv": lambda sample, location: analyze_uv(sample, location.lat),
    "comfort": lambda sample, location: analyze_comfort(sample),
}


# ── Graph series ──────────────────────────────────────────────────────────────


def _graph_point(records: list[DailyRecord], when: date, offset: int, lat: float) -> GraphPoint:
    label = f"{when:%b} {when.day}"
    if not records:
        return GraphPoint(date_label=label, day_offset=offset)

    def med(code: str) -> float | None:
        return median_or_none(r.get(code) for r in records)

    mean_temp = med("T2M")
    max_temp = med("T2M_MAX")
    wind_max = median_or_none(
        r.get("WS10M_MAX") * 3.6 if r.get("WS10M_MAX") is not None else None for r in records
    )

    zenith = solar_noon_zenith(lat, day_of_year(when))
    uv = clear_sky_uv(med("TO3"), zenith, config.UV_ELEVATION_M, med("AOD_55"))

    # unlike the per-day rule, a wind chill below the mean wins over the heat index
    apparent = mean_temp
    hi = heat_index(max_temp, med("RH2M"))
    if mean_temp is not None and hi is not None and hi > mean_temp:
        apparent = hi
    wc = wind_chill(med("T2M_MIN"), med("WS10M"))
    if mean_temp is not None and wc is not None and wc < mean_temp:
        apparent = wc

    return GraphPoint(
        date_label=label,
        day_offset=offset,
        temperature=max_temp,
        precipitation=probability(sum(map(is_rain_day, records)), len(records)),
        wind=wind_max,
        humidity=med("RH2M"),
        uv=uv,
        apparent_temp=apparent,
    )


def build_graph_series(sample: WindowedSample, lat: float) -> list[GraphPoint]:
    """
    One point per offset from -window_days to +window_days.

    Each point aggregates every historical record whose day-of-year equals
    that of (target + offset), i.e. across years, not within a year.
    """
    by_doy: dict[int, list[DailyRecord]] = {}
    for record in sample:
        by_doy.setdefault(day_of_year(record.date), []).append(record)

    points = []
    for offset in range(-sample.window_days, sample.window_days + 1):
        when = sample.target_date + timedelta(days=offset)
        points.append(_graph_point(by_doy.get(day_of_year(when), []), when, offset, lat))
    return points


# ── Orchestrator ──────────────────────────────────────────────────────────────


def _prepare(
    raw: RawObservationSet, target_date: str | date, window_days: int
) -> WindowedSample:
    sample = select_window(raw, parse_date(target_date), window_days)
    ensure_sufficient(sample)
    return sample


def analyze_all(
    raw: RawObservationSet,
    target_date: str | date,
    window_days: int,
    location: Location,
) -> AnalysisResult:
    """
    Full climatological profile for *target_date* at *location*.

    Raises InsufficientDataError when the window holds fewer than
    MIN_SAMPLE_DAYS records.
    """
    sample = _prepare(raw, target_date, window_days)
    analyses = {name: analyzer(sample, location) for name, analyzer in ANALYZERS.items()}
    graph = build_graph_series(sample, location.lat)
    return _assemble(sample, analyses, graph)


async def analyze_all_async(
    raw: RawObservationSet,
    target_date: str | date,
    window_days: int,
    location: Location,
) -> AnalysisResult:
    """Same result as analyze_all, with analyzers running concurrently."""
    sample = _prepare(raw, target_date, window_days)
    names = list(ANALYZERS)
    results = await asyncio.gather(
        *(asyncio.to_thread(ANALYZERS[name], sample, location) for name in names),
        asyncio.to_thread(build_graph_series, sample, location.lat),
    )
    return _assemble(sample, dict(zip(names, results[:-1])), results[-1])


def _assemble(
    sample: WindowedSample, analyses: dict[str, Any], graph: list[GraphPoint]
) -> AnalysisResult:
    missing = [name for name, analysis in analyses.items() if analysis is None]
    if missing:
        logger.info("Analyses without input data: %s", ", ".join(missing))
    logger.info(
        "Analysis complete for %s ±%d — %d records, %d graph points",
        sample.target_date.isoformat(),
        sample.window_days,
        len(sample),
        len(graph),
    )
    return AnalysisResult(
        target_date=sample.target_date,
        window_days=sample.window_days,
        sample_size=len(sample),
        graph=graph,
        **analyses,
    )
