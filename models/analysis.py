"""
Analysis result types — one dataclass per variable plus the combined result.

Every analysis is produced once by its analyzer and never mutated afterwards.
``AnalysisResult.to_dict`` gives the JSON-ready shape handed to renderers
and summarisers.
"""
from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from datetime import date
from typing import Any

from models.statistics import (
    ComparisonBin,
    ConditionalEffect,
    DistributionBin,
    PercentileSet,
    ThresholdProbability,
    TrendVerdict,
)


# ── Temperature ───────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class TemperatureYear:
    year: int
    max_median: float | None
    min_median: float | None


@dataclass(frozen=True)
class TemperatureAnalysis:
    max_percentiles: PercentileSet
    min_percentiles: PercentileSet
    avg_percentiles: PercentileSet
    heat_probabilities: list[ThresholdProbability]
    cold_probabilities: list[ThresholdProbability]
    yearly: list[TemperatureYear]
    max_trend: TrendVerdict
    min_trend: TrendVerdict


# ── Precipitation ─────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class PrecipitationYear:
    year: int
    total_rain: float
    rain_days: int
    total_snow: float
    snow_days: int


@dataclass(frozen=True)
class HumidityRainEffect:
    bin: str
    rain_probability: float
    snow_probability: float


@dataclass(frozen=True)
class PrecipitationAnalysis:
    rain_probability: float
    snow_probability: float
    median_rain: float | None
    median_snow: float | None
    has_snow: bool
    yearly: list[PrecipitationYear]
    rain_trend: TrendVerdict
    snow_trend: TrendVerdict
    rain_intensity: list[DistributionBin]
    snow_intensity: list[DistributionBin]
    humidity_effect: list[HumidityRainEffect]
    temperature_effect_rain: list[ConditionalEffect]
    temperature_effect_snow: list[ConditionalEffect]


# ── Wind ──────────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class BeaufortResult:
    category: str
    beaufort: int
    name: str
    probability: float
    effect: str


@dataclass(frozen=True)
class WindYear:
    year: int
    max_median: float | None
    avg_median: float | None


@dataclass(frozen=True)
class WindAnalysis:
    avg_percentiles: PercentileSet  # km/h
    max_percentiles: PercentileSet  # km/h
    beaufort_distribution: list[BeaufortResult]
    most_common_condition: BeaufortResult
    speed_distribution: list[DistributionBin]
    yearly: list[WindYear]
    avg_trend: TrendVerdict
    max_trend: TrendVerdict


# ── Humidity ──────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class HumidityYear:
    year: int
    relative_median: float | None
    specific_median: float | None


@dataclass(frozen=True)
class HumidityAnalysis:
    relative_percentiles: PercentileSet
    specific_percentiles: PercentileSet
    relative_exceedance: list[ThresholdProbability]
    specific_exceedance: list[ThresholdProbability]
    distribution: list[DistributionBin]
    yearly: list[HumidityYear]
    relative_trend: TrendVerdict
    specific_trend: TrendVerdict


# ── UV ────────────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class UvCategory:
    name: str
    lower: float
    upper: float
    color: str
    advice: str
    probability: float = 0.0


@dataclass(frozen=True)
class UvYear:
    year: int
    clear_sky_median: float | None
    cloud_median: float | None


@dataclass(frozen=True)
class UvAnalysis:
    median_all_sky: float | None
    median_clear_sky: float | None
    median_cloud: float | None
    median_observed: float | None  # ALLSKY_SFC_UV_INDEX, when supplied
    cloud_reduction: float  # % of clear-sky UV removed by typical cloud
    all_sky_category: UvCategory | None
    clear_sky_category: UvCategory | None
    distribution: list[UvCategory]
    yearly: list[UvYear]
    trend: TrendVerdict


# ── Comfort ───────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class IndexSummary:
    """Days on which a feels-like index actually modified the temperature."""

    applicable_days: int
    median: float | None
    extreme: float | None  # p98 for heat index, p2 for wind chill


@dataclass(frozen=True)
class ComfortSplit:
    comfortable: float
    hot: float
    cold: float


@dataclass(frozen=True)
class ComfortYear:
    year: int
    heat_index_max: float | None
    wind_chill_min: float | None


@dataclass(frozen=True)
class ComfortAnalysis:
    median_apparent_temp: float | None
    heat_index: IndexSummary
    wind_chill: IndexSummary
    comfort: ComfortSplit
    yearly: list[ComfortYear]
    heat_index_trend: TrendVerdict
    wind_chill_trend: TrendVerdict
    heat_index_distribution: list[ComparisonBin]
    wind_chill_distribution: list[ComparisonBin]
    humidity_effect_on_heat: list[ConditionalEffect]
    wind_effect_on_cold: list[ConditionalEffect]


# ── Combined result ───────────────────────────────────────────────────────────


@dataclass(frozen=True)
class GraphPoint:
    """Across-year median of each displayed quantity for one day offset."""

    date_label: str  # e.g. "Jul 15"
    day_offset: int
    temperature: float | None = None
    precipitation: float | None = None  # rain-day probability (%)
    wind: float | None = None  # km/h
    humidity: float | None = None
    uv: float | None = None
    apparent_temp: float | None = None


@dataclass(frozen=True)
class AnalysisResult:
    target_date: date
    window_days: int
    sample_size: int
    temperature: TemperatureAnalysis | None
    precipitation: PrecipitationAnalysis | None
    wind: WindAnalysis | None
    humidity: HumidityAnalysis | None
    uv: UvAnalysis | None
    comfort: ComfortAnalysis | None
    graph: list[GraphPoint] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return _serialize(self)


def _serialize(obj: Any) -> Any:
    if isinstance(obj, PercentileSet):
        return obj.to_dict()
    if dataclasses.is_dataclass(obj):
        return {f.name: _serialize(getattr(obj, f.name)) for f in dataclasses.fields(obj)}
    if isinstance(obj, (list, tuple)):
        return [_serialize(v) for v in obj]
    if isinstance(obj, dict):
        return {str(k): _serialize(v) for k, v in obj.items()}
    if isinstance(obj, date):
        return obj.isoformat()
    return obj
