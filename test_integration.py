#!/usr/bin/env python3
"""
CLIMO PROFILE — Integration tests.
Runs the whole pipeline (loader → window → analyzers → graph → export/log/CLI)
on a deterministic synthetic 40-year NASA POWER document.

Runs standalone (``python test_integration.py``) or under pytest.
"""
import asyncio
import functools
import json
import math
import random
import sys
import tempfile
import traceback
from datetime import date, timedelta
from pathlib import Path

import config
from models.observation import Location
from models.statistics import TREND_INCREASING
from services.analysis_engine import analyze_all, analyze_all_async
from services.export import graph_to_csv, to_json
from services.logger import log_analysis
from services.window import InsufficientDataError
from utils.power_loader import parse_power_payload

passed = 0
failed = 0

BOULDER = Location(lat=40.0, lon=-105.25, name="Boulder, CO")
FIRST_YEAR, LAST_YEAR = 1981, 2020
WARMING_PER_YEAR = 0.05


def check(name, fn):
    global passed, failed
    try:
        fn()
        print(f"  PASS: {name}")
        passed += 1
    except Exception:
        print(f"  FAIL: {name}")
        traceback.print_exc()
        failed += 1


@functools.lru_cache(maxsize=1)
def synthetic_payload():
    """
    Full POWER response for a mid-latitude site, 1981-2020.

    Max temperature follows a seasonal sine plus WARMING_PER_YEAR °C/year and
    Gaussian noise.  Precipitation falls on ~30% of days and turns to snow
    when the mean temperature is below freezing.  Every 97th humidity value
    carries the feed's -999 sentinel.
    """
    rng = random.Random(1234)
    parameter = {code: {} for code in config.PARAMETERS}
    day = date(FIRST_YEAR, 1, 1)
    while day <= date(LAST_YEAR, 12, 31):
        doy = day.timetuple().tm_yday
        season = math.sin(2 * math.pi * (doy - 105) / 365.0)
        t_max = 15 + 12 * season + WARMING_PER_YEAR * (day.year - FIRST_YEAR) + rng.gauss(0, 1.5)
        t_min = t_max - 9 + rng.gauss(0, 1.0)
        t_mean = (t_max + t_min) / 2
        ws = rng.uniform(1.0, 7.0)
        total = rng.expovariate(1 / 6.0) if rng.random() < 0.3 else 0.0
        values = {
            "T2M": t_mean,
            "T2M_MAX": t_max,
            "T2M_MIN": t_min,
            "RH2M": rng.uniform(40.0, 90.0),
            "QV2M": rng.uniform(3.0, 12.0),
            "PRECTOTCORR": total,
            "PRECSNO": total if t_mean < 0 else 0.0,
            "WS10M": ws,
            "WS10M_MAX": ws * rng.uniform(1.5, 2.2),
            "ALLSKY_SFC_UV_INDEX": max(0.0, 4 + 4 * season + rng.gauss(0, 0.5)),
            "CLOUD_AMT": rng.uniform(0.0, 100.0),
            "TO3": rng.gauss(300.0, 15.0),
            "AOD_55": rng.uniform(0.1, 0.3),
        }
        key = day.strftime("%Y%m%d")
        for code, value in values.items():
            parameter[code][key] = round(value, 3)
        day += timedelta(days=1)

    for k, key in enumerate(sorted(parameter["RH2M"])):
        if k % 97 == 0:
            parameter["RH2M"][key] = -999.0

    return {"type": "Feature", "properties": {"parameter": parameter}}


def summer_result():
    return analyze_all(parse_power_payload(synthetic_payload()), "2021-07-15", 15, BOULDER)


def winter_result():
    return analyze_all(parse_power_payload(synthetic_payload()), "2021-01-05", 10, BOULDER)


# ═══════════════════════════════════════════════════════════════════════════════
# 1. Full pipeline
# ═══════════════════════════════════════════════════════════════════════════════


def test_summer_sample_size():
    result = summer_result()
    # 31 days per year, every year, regardless of leap years
    assert result.sample_size == 31 * (LAST_YEAR - FIRST_YEAR + 1), result.sample_size
    assert result.window_days == 15 and result.target_date == date(2021, 7, 15)


def test_warming_trend_detected():
    temp = summer_result().temperature
    assert temp.max_trend.direction == TREND_INCREASING, temp.max_trend
    assert temp.max_trend.significant and temp.max_trend.p_value < 0.01
    assert 0.02 < temp.max_trend.slope < 0.08, temp.max_trend.slope
    assert len(temp.yearly) == LAST_YEAR - FIRST_YEAR + 1


def test_summer_variables():
    result = summer_result()
    t = result.temperature
    assert t.min_percentiles.p50 < t.avg_percentiles.p50 < t.max_percentiles.p50

    p = result.precipitation
    assert 15.0 < p.rain_probability < 35.0, p.rain_probability
    assert not p.has_snow and p.snow_probability == 0.0
    assert p.rain_trend.has_data

    w = result.wind
    assert abs(sum(b.probability for b in w.beaufort_distribution) - 100.0) < 1e-6
    assert w.max_percentiles.p50 > w.avg_percentiles.p50

    h = result.humidity
    assert 40.0 <= h.relative_percentiles.p10 < h.relative_percentiles.p90 <= 90.0
    assert h.relative_percentiles.count < result.sample_size  # sentinels dropped

    u = result.uv
    assert u.median_clear_sky > u.median_all_sky > 0.0
    assert 0.0 < u.cloud_reduction < 69.0
    assert u.median_observed is not None

    c = result.comfort
    assert c.heat_index.applicable_days > 0
    split = c.comfort.comfortable + c.comfort.hot + c.comfort.cold
    assert abs(split - 100.0) < 1e-6


def test_winter_wraps_year_boundary():
    result = winter_result()
    # Jan 1-15 of every year plus Dec 26/27-31 of every year
    assert result.sample_size == 21 * (LAST_YEAR - FIRST_YEAR + 1), result.sample_size
    years = [y.year for y in result.temperature.yearly]
    # December 2020 days belong to the 2021 season
    assert years[0] == FIRST_YEAR and years[-1] == LAST_YEAR + 1
    assert result.precipitation.has_snow
    assert result.comfort.wind_chill.applicable_days > 0


def test_graph_series():
    result = summer_result()
    graph = result.graph
    assert len(graph) == 2 * 15 + 1
    assert [p.day_offset for p in graph] == list(range(-15, 16))
    assert graph[15].date_label == "Jul 15"
    assert graph[0].date_label == "Jun 30" and graph[-1].date_label == "Jul 30"
    assert all(p.temperature is not None and p.uv is not None for p in graph)
    assert all(0.0 <= p.precipitation <= 100.0 for p in graph)


def test_winter_graph_crosses_new_year():
    graph = winter_result().graph
    assert len(graph) == 21
    assert graph[0].date_label == "Dec 26" and graph[-1].date_label == "Jan 15"
    assert all(p.temperature is not None for p in graph)


# ═══════════════════════════════════════════════════════════════════════════════
# 2. Minimum sample
# ═══════════════════════════════════════════════════════════════════════════════


def _one_day_per_year(years):
    return {"T2M": {f"{y}0210": 1.0 for y in years}}


def test_29_records_rejected():
    raw = _one_day_per_year(range(1991, 2020))
    try:
        analyze_all(raw, "2021-02-10", 0, BOULDER)
        raise AssertionError("29 records accepted")
    except InsufficientDataError as exc:
        assert exc.record_count == 29
        assert "wider day window" in str(exc)


def test_30_records_accepted():
    result = analyze_all(_one_day_per_year(range(1991, 2021)), "2021-02-10", 0, BOULDER)
    assert result.sample_size == 30
    assert len(result.graph) == 1
    assert result.temperature is not None and result.comfort is not None
    assert result.precipitation is None and result.wind is None
    assert result.humidity is None and result.uv is None


# ═══════════════════════════════════════════════════════════════════════════════
# 3. Async variant, export, audit log
# ═══════════════════════════════════════════════════════════════════════════════


def test_async_matches_sync():
    raw = parse_power_payload(synthetic_payload())
    sync = analyze_all(raw, "2021-07-15", 15, BOULDER)
    concurrent = asyncio.run(analyze_all_async(raw, "2021-07-15", 15, BOULDER))
    assert concurrent.to_dict() == sync.to_dict()


def test_json_and_csv_export():
    result = summer_result()
    doc = json.loads(to_json(result))
    assert doc["sample_size"] == result.sample_size
    assert doc["target_date"] == "2021-07-15"
    assert set(doc["temperature"]["max_percentiles"]) == {f"p{r}" for r in config.PERCENTILE_RANKS}
    assert doc["temperature"]["max_trend"]["direction"] == TREND_INCREASING

    lines = graph_to_csv(result.graph).strip().split("\n")
    assert len(lines) == 32
    assert lines[16].startswith("Jul 15,0,")


def test_audit_log():
    result = summer_result()
    with tempfile.TemporaryDirectory() as tmp:
        path = log_analysis(BOULDER, result, base_dir=Path(tmp))
        assert path is not None and path.parent.name == "analyses"
        log_analysis(BOULDER, result, base_dir=Path(tmp))
        lines = path.read_text().strip().split("\n")
        assert len(lines) == 2
        record = json.loads(lines[0])
        assert record["name"] == "Boulder, CO"
        assert record["sample_size"] == result.sample_size
        assert record["max_temp_trend"] == TREND_INCREASING
        assert record["missing"] == []


# ═══════════════════════════════════════════════════════════════════════════════
# 4. CLI
# ═══════════════════════════════════════════════════════════════════════════════

from main import main


def _run_cli(args):
    saved = config.AUDIT_LOG_ENABLED
    config.AUDIT_LOG_ENABLED = False
    try:
        return main(args)
    finally:
        config.AUDIT_LOG_ENABLED = saved


def test_cli_writes_exports():
    with tempfile.TemporaryDirectory() as tmp:
        data = Path(tmp) / "power.json"
        data.write_text(json.dumps(synthetic_payload()))
        json_out, csv_out = Path(tmp) / "profile.json", Path(tmp) / "graph.csv"
        code = _run_cli([
            str(data), "--date", "2021-07-15", "--window", "15",
            "--lat", "40.0", "--lon", "-105.25", "--name", "Boulder, CO",
            "--json", str(json_out), "--csv", str(csv_out),
        ])
        assert code == 0
        assert json.loads(json_out.read_text())["window_days"] == 15
        assert len(csv_out.read_text().strip().split("\n")) == 32


def test_cli_insufficient_data_exit_code():
    with tempfile.TemporaryDirectory() as tmp:
        data = Path(tmp) / "short.json"
        data.write_text(json.dumps(_one_day_per_year(range(2000, 2010))))
        code = _run_cli([str(data), "--date", "2021-02-10", "--window", "0", "--lat", "0", "--lon", "0"])
        assert code == 2


def test_cli_bad_input():
    with tempfile.TemporaryDirectory() as tmp:
        missing = Path(tmp) / "nope.json"
        assert _run_cli([str(missing), "--date", "2021-02-10", "--lat", "0", "--lon", "0"]) == 1
        data = Path(tmp) / "ok.json"
        data.write_text(json.dumps(_one_day_per_year(range(1980, 2020))))
        assert _run_cli([str(data), "--date", "2021-02-31", "--lat", "0", "--lon", "0"]) == 1


SECTIONS = [
    ("FULL PIPELINE", [
        test_summer_sample_size, test_warming_trend_detected, test_summer_variables,
        test_winter_wraps_year_boundary, test_graph_series, test_winter_graph_crosses_new_year,
    ]),
    ("MINIMUM SAMPLE", [test_29_records_rejected, test_30_records_accepted]),
    ("ASYNC, EXPORT & AUDIT LOG", [test_async_matches_sync, test_json_and_csv_export, test_audit_log]),
    ("CLI", [test_cli_writes_exports, test_cli_insufficient_data_exit_code, test_cli_bad_input]),
]


if __name__ == "__main__":
    for n, (title, tests) in enumerate(SECTIONS, start=1):
        print(f"\n=== {n}. {title} ===")
        for fn in tests:
            check(fn.__name__[5:].replace("_", " "), fn)

    print(f"\n{'=' * 60}")
    print(f"  RESULTS: {passed} passed, {failed} failed out of {passed + failed} tests")
    print(f"{'=' * 60}")
    sys.exit(1 if failed else 0)
