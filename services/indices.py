"""
Physically-derived weather indices.

Each function documents its validity range.  Outside that range the
"not applicable" value is the unmodified base quantity (the temperature
for heat index / wind chill), so aggregation can carry on untouched.
Missing inputs return None; nothing here raises on bad numbers.

Sources:
  - Rothfusz (1990), NWS SR 90-23: heat index regression + adjustments
  - Environment Canada / NWS (2001): wind chill temperature index
  - Allaart et al. (2004): clear-sky UV index from ozone and solar zenith
  - US EPA: cloud transmission factors for UV
"""
from __future__ import annotations

import math


def _missing(*values: float | None) -> bool:
    return any(v is None or math.isnan(v) for v in values)


# ── Feels-like temperatures ───────────────────────────────────────────────────


def heat_index(temp_c: float | None, rh: float | None) -> float | None:
    """
    NOAA heat index (°C) from air temperature (°C) and relative humidity (%).

    Applies only for T >= 80°F and RH >= 40%; otherwise returns temp_c.
    Rothfusz regression in °F with the two NWS adjustments:
      RH < 13%, 80-112°F  →  subtract ((13-RH)/4) * sqrt((17-|T-95|)/17)
      RH > 85%, 80-87°F   →  add ((RH-85)/10) * ((87-T)/5)
    """
    if _missing(temp_c, rh):
        return None

    t = temp_c * 9.0 / 5.0 + 32.0
    if t < 80.0 or rh < 40.0:
        return temp_c

    hi = (
        -42.379
        + 2.04901523 * t
        + 10.14333127 * rh
        - 0.22475541 * t * rh
        - 6.83783e-3 * t**2
        - 5.481717e-2 * rh**2
        + 1.22874e-3 * t**2 * rh
        + 8.5282e-4 * t * rh**2
        - 1.99e-6 * t**2 * rh**2
    )

    if rh < 13.0 and 80.0 <= t <= 112.0:
        hi -= ((13.0 - rh) / 4.0) * math.sqrt((17.0 - abs(t - 95.0)) / 17.0)
    elif rh > 85.0 and 80.0 <= t <= 87.0:
        hi += ((rh - 85.0) / 10.0) * ((87.0 - t) / 5.0)

    return (hi - 32.0) * 5.0 / 9.0


def wind_chill(temp_c: float | None, wind_ms: float | None) -> float | None:
    """
    Wind chill (°C) from air temperature (°C) and wind speed (m/s).

    WCT = 13.12 + 0.6215*T - 11.37*V^0.16 + 0.3965*T*V^0.16, V in km/h.
    Applies only for T <= 10°C and V >= 4.8 km/h; otherwise returns temp_c.
    """
    if _missing(temp_c, wind_ms):
        return None

    v = wind_ms * 3.6
    if temp_c > 10.0 or v < 4.8:
        return temp_c

    v16 = v**0.16
    return 13.12 + 0.6215 * temp_c - 11.37 * v16 + 0.3965 * temp_c * v16


def apparent_temperature(
    mean_c: float | None,
    heat_index_c: float | None,
    wind_chill_c: float | None,
) -> float | None:
    """Heat index if it exceeds the mean, else wind chill if below it, else the mean."""
    if mean_c is None:
        return None
    if heat_index_c is not None and heat_index_c > mean_c:
        return heat_index_c
    if wind_chill_c is not None and wind_chill_c < mean_c:
        return wind_chill_c
    return mean_c


# ── UV ────────────────────────────────────────────────────────────────────────


def cloud_transmission(cloud_percent: float | None) -> float:
    """EPA UV transmission factor for a cloud fraction (%).  Missing → 1.0."""
    if _missing(cloud_percent):
        return 1.0
    if cloud_percent < 10:
        return 1.00
    if cloud_percent < 40:
        return 0.89
    if cloud_percent < 70:
        return 0.73
    return 0.31


def solar_noon_zenith(lat: float, day_of_year: int) -> float:
    """
    Solar zenith angle (degrees) at solar noon.

    Declination δ = 23.45° · sin(360/365 · (doy - 81)); SZA = |lat - δ|.
    """
    declination = 23.45 * math.sin(math.radians((360.0 / 365.0) * (day_of_year - 81)))
    return abs(lat - declination)


def clear_sky_uv(
    ozone_du: float | None,
    zenith_deg: float | None,
    elevation_m: float = 0.0,
    aod: float | None = None,
) -> float | None:
    """
    Clear-sky UV index (Allaart et al. 2004).

    UVI = 12.5 · cos(SZA)^2.42 · (Ω/300)^-1.23
      x (1 + 0.06 per km of elevation)
      x max(1 - 0.5·AOD, 0.5)   (≈5% per 0.1 AOD, at most 50% reduction)

    Sun at or below the horizon at noon (SZA >= 90°) → 0.
    Result clamped to [0, 16].  Missing ozone or zenith → None.
    """
    if _missing(ozone_du, zenith_deg):
        return None
    if zenith_deg >= 90.0:
        return 0.0
    mu0 = math.cos(math.radians(zenith_deg))
    if mu0 <= 0.0 or ozone_du <= 0.0:
        return 0.0

    uvi = 12.5 * mu0**2.42 * (ozone_du / 300.0) ** -1.23
    uvi *= 1.0 + 0.06 * (elevation_m / 1000.0)

    if not _missing(aod) and aod > 0:
        uvi *= max(1.0 - aod * 0.5, 0.5)

    return min(max(uvi, 0.0), 16.0)
