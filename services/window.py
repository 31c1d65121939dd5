"""
Window selector — gathers seasonally comparable days across all years.

A raw day is admitted when its day-of-year lies within ±window_days of the
target day-of-year.  The comparison wraps across the year boundary: for a
target on 5 January with a 10-day window, 27 December (doy 361) of the
previous year is 9 days away and is admitted.  Wrapped distances use the
length of the year actually crossed, so leap years are handled exactly.

All parameters observed on the same calendar date are merged into one
DailyRecord.
"""
from __future__ import annotations

import logging
from datetime import date, datetime

import config
from models.observation import DailyRecord, RawObservationSet, WindowedSample
from services.climatology import day_of_year, days_in_year

logger = logging.getLogger("climo_profile.window")


class InsufficientDataError(Exception):
    """Raised when the seasonal window holds too few days to analyse."""

    def __init__(self, record_count: int, minimum: int = config.MIN_SAMPLE_DAYS) -> None:
        self.record_count = record_count
        self.minimum = minimum
        super().__init__(
            "Insufficient historical data for the selected date window "
            f"({record_count} days, need {minimum}). "
            "Please try a different date or a wider day window."
        )


def parse_date(value: str | date | datetime) -> date:
    """Accept a date, a datetime, "YYYY-MM-DD" or "YYYYMMDD"."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = value.strip()
    for fmt in ("%Y-%m-%d", "%Y%m%d"):
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    raise ValueError(f"Unrecognised date: {value!r}")


def window_distance(day: date, target_doy: int) -> tuple[int, int]:
    """
    Circular day-of-year distance from *day* to the target.

    Returns (distance, season_year) where season_year is the year of the
    target anniversary the day is closest to.
    """
    doy = day_of_year(day)
    best = (abs(doy - target_doy), day.year)
    if doy > target_doy:
        # late in its year, closer to next year's anniversary
        forward = days_in_year(day.year) - doy + target_doy
        if forward < best[0]:
            best = (forward, day.year + 1)
    elif doy < target_doy:
        # early in its year, closer to last year's anniversary
        backward = doy + days_in_year(day.year - 1) - target_doy
        if backward < best[0]:
            best = (backward, day.year - 1)
    return best


def select_window(
    raw: RawObservationSet,
    target_date: str | date,
    window_days: int,
) -> WindowedSample:
    """Build the WindowedSample of every historical day inside the window."""
    if window_days < 0:
        raise ValueError(f"window_days must be >= 0, got {window_days}")

    target = parse_date(target_date)
    target_doy = day_of_year(target)

    merged: dict[date, dict[str, float | None]] = {}
    season: dict[date, int] = {}
    # cache parsed keys; every parameter repeats the same date strings
    admitted: dict[str, tuple[date, int] | None] = {}

    for code, series in raw.items():
        for key, value in series.items():
            if key not in admitted:
                try:
                    day = parse_date(key)
                except ValueError:
                    logger.debug("Skipping unparseable date key %r for %s", key, code)
                    admitted[key] = None
                    continue
                distance, season_year = window_distance(day, target_doy)
                admitted[key] = (day, season_year) if distance <= window_days else None

            hit = admitted[key]
            if hit is None:
                continue
            day, season_year = hit
            merged.setdefault(day, {})[code] = value
            season[day] = season_year

    records = tuple(
        DailyRecord(date=day, values=merged[day], season_year=season[day])
        for day in sorted(merged)
    )
    sample = WindowedSample(
        target_date=target,
        window_days=window_days,
        target_doy=target_doy,
        records=records,
    )
    logger.info(
        "Window %s ±%d days (doy %d): %d daily records across %d years",
        target.isoformat(),
        window_days,
        target_doy,
        len(sample),
        len(sample.years),
    )
    return sample


def ensure_sufficient(sample: WindowedSample, minimum: int = config.MIN_SAMPLE_DAYS) -> None:
    """Raise InsufficientDataError when the sample is below *minimum* records."""
    if len(sample) < minimum:
        logger.warning(
            "Insufficient sample for %s ±%d: %d < %d records",
            sample.target_date.isoformat(),
            sample.window_days,
            len(sample),
            minimum,
        )
        raise InsufficientDataError(len(sample), minimum)
