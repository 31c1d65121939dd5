import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

# ── Input parameters ──────────────────────────────────────────────────────────
# NASA POWER daily point codes understood by the engine.
PARAMETERS = [
    "T2M",  # daily mean temperature (°C)
    "T2M_MAX",  # daily max temperature (°C)
    "T2M_MIN",  # daily min temperature (°C)
    "RH2M",  # relative humidity (%)
    "QV2M",  # specific humidity (g/kg)
    "PRECTOTCORR",  # total precipitation (mm/day)
    "PRECSNO",  # snow precipitation (mm/day water equivalent)
    "WS10M",  # mean wind speed at 10 m (m/s)
    "WS10M_MAX",  # max wind speed at 10 m (m/s)
    "ALLSKY_SFC_UV_INDEX",  # observed all-sky UV index
    "CLOUD_AMT",  # cloud fraction (%)
    "TO3",  # total column ozone (Dobson units)
    "AOD_55",  # aerosol optical depth at 550 nm
]
MISSING_SENTINEL = -999.0  # upstream "no data" marker

# ── Sampling policy ───────────────────────────────────────────────────────────
MIN_SAMPLE_DAYS = 30  # refuse to analyse a window with fewer merged days
MIN_TREND_POINTS = 10  # yearly points needed before running Mann-Kendall
TREND_SIGNIFICANCE = 0.05
PERCENTILE_RANKS = (10, 25, 50, 75, 90, 95, 98)
WINDOW_CHOICES = (7, 15, 30, 45)
DEFAULT_WINDOW_DAYS = int(os.getenv("CLIMO_WINDOW_DAYS", "15"))

# ── Temperature ───────────────────────────────────────────────────────────────
HEAT_THRESHOLDS_C = {"warm": 35.0, "hot": 37.0, "very_hot": 39.0}  # max temp >=
COLD_THRESHOLDS_C = {"cool": 15.0, "cold": 12.0, "very_cold": 10.0}  # min temp <=

# ── Precipitation ─────────────────────────────────────────────────────────────
WET_DAY_THRESHOLD_MM = 1.0  # liquid precipitation (total - snow)
SNOW_DAY_THRESHOLD_MM = 0.5
HUMIDITY_BINS = [(0, 40), (40, 60), (60, 80), (80, 101)]  # RH %, upper bound exclusive
INTENSITY_BIN_COUNT = 10
MIN_INTENSITY_DAYS = 10  # skip intensity histogram below this many wet days
MIN_TEMPERATURE_EFFECT_DAYS = 5  # a temperature bin must hold MORE than this

# ── Distributions ─────────────────────────────────────────────────────────────
DISTRIBUTION_BIN_COUNT = 10
MAX_COMPARISON_BINS = 20

# ── Comfort ───────────────────────────────────────────────────────────────────
COMFORT_LOWER_C = 18.0  # ASHRAE 55 / WHO comfort band, inclusive
COMFORT_UPPER_C = 26.0
MIN_EFFECT_BIN_DAYS = 5

# ── UV ────────────────────────────────────────────────────────────────────────
# Site elevation is not part of the request.
UV_ELEVATION_M = 0.0

# ── Logging ───────────────────────────────────────────────────────────────────
LOG_LEVEL = os.getenv("CLIMO_LOG_LEVEL", "INFO").upper()
LOG_DIR = Path(os.getenv("CLIMO_LOG_DIR", Path(__file__).resolve().parent / "data" / "logs"))
AUDIT_LOG_ENABLED = os.getenv("CLIMO_AUDIT_LOG", "1").lower() not in ("0", "false", "no")
