from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import config
from models.analysis import AnalysisResult
from models.observation import Location

logger = logging.getLogger("climo_profile.logger")


def _ensure_dir(subdir: str, base_dir: Path | None = None) -> Path:
    path = Path(base_dir or config.LOG_DIR) / subdir
    path.mkdir(parents=True, exist_ok=True)
    return path


def _today_str() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%d")


def _append_jsonl(subdir: str, record: dict[str, Any], base_dir: Path | None = None) -> Path | None:
    """Append a single JSON record to today's JSONL file in the given subdirectory."""
    try:
        dir_path = _ensure_dir(subdir, base_dir)
        filepath = dir_path / f"{_today_str()}.jsonl"
        with open(filepath, "a") as f:
            f.write(json.dumps(record, default=str) + "\n")
        return filepath
    except OSError as exc:
        logger.error("Failed to write log to %s: %s", subdir, exc)
        return None


def log_analysis(
    location: Location,
    result: AnalysisResult,
    timestamp: datetime | None = None,
    base_dir: Path | None = None,
) -> Path | None:
    """Log a summary of a completed analysis to <LOG_DIR>/analyses/."""
    ts = timestamp or datetime.now(timezone.utc)
    temp, precip, uv, comfort = result.temperature, result.precipitation, result.uv, result.comfort
    record = {
        "timestamp": ts.isoformat(),
        "lat": location.lat,
        "lon": location.lon,
        "name": location.name,
        "target_date": result.target_date.isoformat(),
        "window_days": result.window_days,
        "sample_size": result.sample_size,
        "max_temp_p50": round(temp.max_percentiles.p50, 2) if temp else None,
        "max_temp_trend": temp.max_trend.direction if temp else None,
        "rain_probability": round(precip.rain_probability, 1) if precip else None,
        "uv_all_sky_median": round(uv.median_all_sky, 2) if uv and uv.median_all_sky is not None else None,
        "comfortable_pct": round(comfort.comfort.comfortable, 1) if comfort else None,
        "missing": [
            name
            for name in ("temperature", "precipitation", "wind", "humidity", "uv", "comfort")
            if getattr(result, name) is None
        ],
    }
    return _append_jsonl("analyses", record, base_dir)
