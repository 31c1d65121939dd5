"""
NASA POWER daily point documents → RawObservationSet.

Accepts either the full GeoJSON response
    {"properties": {"parameter": {"T2M": {"19910101": 3.2, ...}, ...}}}
or just the inner parameter mapping.  The feed's missing-value sentinel
(-999) and NaN are replaced by None here, so the analysis core never sees
the raw constant.
"""
from __future__ import annotations

import json
import logging
import math
from pathlib import Path
from typing import Any

import config
from models.observation import RawObservationSet

logger = logging.getLogger("climo_profile.power_loader")


class PowerDataError(Exception):
    """Raised when a POWER document cannot be interpreted."""
    pass


def _normalize_value(value: Any) -> float | None:
    if value is None:
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(number) or number == config.MISSING_SENTINEL:
        return None
    return number


def parse_power_payload(payload: dict[str, Any]) -> RawObservationSet:
    """Normalise a POWER payload (full response or parameter map)."""
    if not isinstance(payload, dict):
        raise PowerDataError("POWER payload must be a JSON object")

    parameters = payload
    if "properties" in payload:
        parameters = (payload.get("properties") or {}).get("parameter")
    if not isinstance(parameters, dict) or not parameters:
        raise PowerDataError("Invalid data structure: no parameter block found")

    raw: RawObservationSet = {}
    unknown = []
    missing = 0
    for code, series in parameters.items():
        if not isinstance(series, dict):
            raise PowerDataError(f"Parameter {code!r} is not a date → value mapping")
        if code not in config.PARAMETERS:
            unknown.append(code)
        normalized = {str(day): _normalize_value(v) for day, v in series.items()}
        missing += sum(v is None for v in normalized.values())
        raw[code] = normalized

    if unknown:
        logger.warning("Unknown POWER parameters kept as-is: %s", ", ".join(sorted(unknown)))
    logger.info(
        "Loaded %d parameters, %d values (%d missing)",
        len(raw),
        sum(len(s) for s in raw.values()),
        missing,
    )
    return raw


def load_power_file(path: str | Path) -> RawObservationSet:
    """Read a POWER JSON document from disk."""
    filepath = Path(path)
    try:
        with open(filepath, "r") as f:
            payload = json.load(f)
    except (OSError, json.JSONDecodeError) as exc:
        raise PowerDataError(f"Could not read {filepath}: {exc}") from exc
    return parse_power_payload(payload)
