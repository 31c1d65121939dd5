#!/usr/bin/env python3
"""
CLIMO PROFILE v1.0 — Climatological profile for a calendar date.

Reads a NASA POWER daily point document, selects every historical day around
the target day-of-year, and reports typical ranges, extreme probabilities,
multi-year trends and comfort/UV indices.
"""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

import config
from models.analysis import AnalysisResult
from models.observation import Location
from services.analysis_engine import analyze_all
from services.export import graph_to_csv, to_json
from services.logger import log_analysis
from services.window import InsufficientDataError
from utils.power_loader import PowerDataError, load_power_file

# ── Logging setup ─────────────────────────────────────────────────────────────
logging.basicConfig(
    level=getattr(logging, config.LOG_LEVEL, logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("climo_profile")


def _fmt(value: float | None, unit: str = "", digits: int = 1) -> str:
    return "n/a" if value is None else f"{value:.{digits}f}{unit}"


def print_summary(result: AnalysisResult, location: Location) -> None:
    where = location.name or f"{location.lat:.3f}, {location.lon:.3f}"
    print(f"\n{'=' * 60}")
    print(f"  {where} — {result.target_date:%d %b} ±{result.window_days} days")
    print(f"  {result.sample_size} historical days")
    print(f"{'=' * 60}")

    if result.temperature:
        t = result.temperature
        print(
            f"  Max temp   p10/p50/p90: {t.max_percentiles.p10:.1f} / "
            f"{t.max_percentiles.p50:.1f} / {t.max_percentiles.p90:.1f} °C"
        )
        for p in t.heat_probabilities:
            print(f"    ≥{p.threshold:.0f}°C ({p.name}): {p.probability:.1f}%")
        print(f"    Trend: {t.max_trend.interpretation}")
    if result.precipitation:
        p = result.precipitation
        print(f"  Rain day: {p.rain_probability:.1f}%  (median {_fmt(p.median_rain, ' mm')})")
        if p.has_snow:
            print(f"  Snow day: {p.snow_probability:.1f}%  (median {_fmt(p.median_snow, ' mm')})")
    if result.wind:
        w = result.wind
        print(
            f"  Wind: median max {w.max_percentiles.p50:.0f} km/h, "
            f"usually {w.most_common_condition.name}"
        )
    if result.humidity:
        print(f"  Humidity: median {result.humidity.relative_percentiles.p50:.0f}%")
    if result.uv:
        u = result.uv
        category = u.all_sky_category.name if u.all_sky_category else "n/a"
        print(f"  UV: all-sky {_fmt(u.median_all_sky)} ({category}), clear-sky {_fmt(u.median_clear_sky)}")
    if result.comfort:
        c = result.comfort
        print(
            f"  Feels like {_fmt(c.median_apparent_temp, ' °C')} — comfortable "
            f"{c.comfort.comfortable:.0f}%, hot {c.comfort.hot:.0f}%, cold {c.comfort.cold:.0f}%"
        )
    print()


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Climatological profile for a calendar date")
    parser.add_argument("data", help="NASA POWER daily point JSON file")
    parser.add_argument("--date", required=True, help="Target date YYYY-MM-DD")
    parser.add_argument("--window", type=int, default=config.DEFAULT_WINDOW_DAYS,
                        help=f"Half-width in days (usual: {', '.join(map(str, config.WINDOW_CHOICES))})")
    parser.add_argument("--lat", type=float, required=True)
    parser.add_argument("--lon", type=float, required=True)
    parser.add_argument("--name", default=None, help="Display name of the location")
    parser.add_argument("--json", dest="json_out", default=None, help="Write the full analysis as JSON")
    parser.add_argument("--csv", dest="csv_out", default=None, help="Write the graph series as CSV")
    args = parser.parse_args(argv)

    location = Location(lat=args.lat, lon=args.lon, name=args.name)

    try:
        raw = load_power_file(args.data)
        result = analyze_all(raw, args.date, args.window, location)
    except PowerDataError as exc:
        logger.error("Bad input file: %s", exc)
        return 1
    except InsufficientDataError as exc:
        print(str(exc), file=sys.stderr)
        return 2
    except ValueError as exc:
        logger.error("Invalid request: %s", exc)
        return 1

    print_summary(result, location)

    if args.json_out:
        Path(args.json_out).write_text(to_json(result))
        logger.info("JSON written to %s", args.json_out)
    if args.csv_out:
        Path(args.csv_out).write_text(graph_to_csv(result.graph))
        logger.info("CSV written to %s", args.csv_out)
    if config.AUDIT_LOG_ENABLED:
        log_analysis(location, result)
    return 0


if __name__ == "__main__":
    sys.exit(main())
