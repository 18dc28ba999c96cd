"""
Walk-safety scoring for a single forecast hour.

score_hour() starts from a baseline and applies, in a fixed order:
  darkness, feels-like temperature, humid heat, UV, wind/gusts, precipitation,
  the thunderstorm ceiling, the pavement estimate, breed-weighted penalties and
  breed-specific overrides.
The clamped raw score is then shaped so that only the best hours reach 9-10,
and a pace/duration suggestion is derived from the shaped score.

Every threshold and weight lives in ScoringConfig (immutable) so alternate
profiles can be scored side by side. Scoring never raises: a None input simply
leaves its factor inactive, nothing is imputed.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional, Tuple

from .breed_profiles import BreedProfile

_LOGGER = logging.getLogger(__name__)

PACE_QUICK = "quick"
PACE_STROLL = "stroll"
PACE_BRISK = "brisk"

# (threshold, penalty) pairs, highest threshold first; first match wins
Steps = Tuple[Tuple[float, float], ...]


@dataclass(frozen=True)
class BreedPenaltyConfig:
    """Raw penalty curves; each is multiplied by the matching breed sensitivity."""

    heat_steps: Steps = ((95.0, 1.0), (88.0, 0.6))
    heat_humid_rh: float = 75.0
    heat_humid_feels_f: float = 82.0
    heat_humid_extra: float = 0.6
    # feels-like at or below threshold
    cold_steps: Steps = ((15.0, 1.0), (25.0, 0.6))
    cold_wind_mph: float = 18.0
    cold_wind_feels_f: float = 35.0
    cold_wind_extra: float = 0.4
    humidity_min_feels_f: float = 75.0
    humidity_steps: Steps = ((85.0, 0.6), (70.0, 0.3))
    uv_steps: Steps = ((8.0, 0.5), (6.0, 0.25))
    wind_gust_mph: float = 30.0
    wind_gust_penalty: float = 0.6
    wind_sustained_mph: float = 20.0
    wind_sustained_penalty: float = 0.3
    rain_steps: Steps = ((70.0, 0.6), (40.0, 0.3))
    pavement_min_f: float = 120.0
    pavement_penalty: float = 0.8


@dataclass(frozen=True)
class SuggestionConfig:
    quick_max_score: float = 3.0
    quick_max_minutes: int = 15
    stroll_max_score: float = 5.0
    stroll_max_minutes: int = 20
    full_walk_min_score: float = 8.0
    hot_pavement_f: float = 130.0
    hot_uv: float = 8.0
    hot_feels_f: float = 90.0
    hot_max_minutes: int = 20
    cold_feels_f: float = 25.0
    gust_mph: float = 32.0
    rough_max_minutes: int = 20
    wet_precip_pct: float = 70.0
    wet_max_minutes: int = 10
    min_minutes: int = 10


@dataclass(frozen=True)
class DayConfig:
    """Day-level planning policy: window threshold, window shape and lookahead."""

    min_threshold: float = 6.5
    threshold_margin: float = 0.4
    trim_margin: float = 0.2
    max_window_hours: int = 4
    max_windows: int = 4
    length_bonus: float = 0.12
    # runs end where consecutive forecast hours are further apart than this
    hour_step: timedelta = timedelta(hours=1)
    best_next_lookahead: timedelta = timedelta(hours=24)
    next_hours: timedelta = timedelta(hours=12)
    # (first hour, last hour, preference) inclusive; anything else gets late_night_preference
    time_preferences: Tuple[Tuple[int, int, float], ...] = (
        (6, 10, 1.0),
        (17, 20, 0.9),
        (11, 16, 0.7),
        (21, 23, 0.5),
    )
    late_night_preference: float = 0.3


@dataclass(frozen=True)
class ScoringConfig:
    """Immutable scoring constants. Use dataclasses.replace() to derive variants."""

    baseline: float = 6.0
    max_score: float = 10.0

    dark_margin: timedelta = timedelta(minutes=20)
    dark_penalty: float = 1.0

    extreme_hot_f: float = 100.0
    extreme_cold_f: float = 5.0
    extreme_temp_penalty: float = 2.2
    harsh_hot_f: float = 92.0
    harsh_cold_f: float = 15.0
    harsh_temp_penalty: float = 1.4
    comfort_min_f: float = 50.0
    comfort_max_f: float = 78.0
    comfort_bonus: float = 0.8

    humid_heat_feels_f: float = 78.0
    humid_heat_rh: float = 80.0
    humid_heat_penalty: float = 1.2
    muggy_rh: float = 65.0
    muggy_penalty: float = 0.8

    uv_high: float = 8.0
    uv_high_penalty: float = 0.9
    uv_moderate: float = 6.0
    uv_moderate_penalty: float = 0.4

    gust_limit_mph: float = 32.0
    gust_penalty: float = 1.0
    wind_limit_mph: float = 20.0
    wind_penalty: float = 0.6

    rain_heavy_pct: float = 70.0
    rain_heavy_penalty: float = 1.2
    rain_likely_pct: float = 40.0
    rain_likely_penalty: float = 0.7

    storm_code: int = 95
    storm_ceiling: float = 3.0

    pavement_uv_offset: float = 2.0
    pavement_sun_factor: float = 3.5
    pavement_base_offset_f: float = 8.0
    pavement_extreme_f: float = 135.0
    pavement_extreme_penalty: float = 2.0
    pavement_hot_f: float = 125.0
    pavement_hot_penalty: float = 1.2

    breed: BreedPenaltyConfig = field(default_factory=BreedPenaltyConfig)

    cold_breed_feels_f: float = 35.0
    cold_breed_bonus: float = 0.8
    brachy_feels_f: float = 75.0
    brachy_rh: float = 60.0
    brachy_penalty: float = 0.4
    toy_cold_feels_f: float = 30.0
    toy_cold_penalty: float = 0.3

    # (raw breakpoint, shaped base, slope) highest first; below the last: raw * low_slope
    shaping: Tuple[Tuple[float, float, float], ...] = (
        (9.5, 9.6, 0.3),
        (8.0, 8.0, 0.7),
        (6.0, 6.0, 0.85),
    )
    shaping_low_slope: float = 0.9

    suggestion: SuggestionConfig = field(default_factory=SuggestionConfig)
    day: DayConfig = field(default_factory=DayConfig)


DEFAULT_SCORING_CONFIG = ScoringConfig()


@dataclass(frozen=True)
class SunTimes:
    sunrise: Optional[datetime] = None
    sunset: Optional[datetime] = None


@dataclass(frozen=True)
class HourSample:
    """One forecast hour in canonical units (°F, mph, percent)."""

    timestamp: datetime
    temp_f: float
    apparent_f: Optional[float] = None
    relative_humidity_pct: Optional[float] = None
    uv_index: float = 0.0
    wind_mph: float = 0.0
    gust_mph: Optional[float] = None
    precipitation_pct: float = 0.0
    weather_code: int = 0
    cloud_cover_pct: float = 0.0

    @property
    def feels_f(self) -> float:
        return self.apparent_f if self.apparent_f is not None else self.temp_f


@dataclass(frozen=True)
class WalkSuggestion:
    pace: str
    duration_minutes: int
    pavement_f: int

    def as_dict(self) -> Dict[str, Any]:
        return {"pace": self.pace, "duration_minutes": self.duration_minutes, "pavement_f": self.pavement_f}


@dataclass(frozen=True)
class ScoredHour:
    timestamp: datetime
    raw_score: float
    shaped_score: int
    reasons: Tuple[str, ...]
    suggestion: WalkSuggestion
    index: int = 0

    def as_dict(self) -> Dict[str, Any]:
        return {
            "timestamp": self.timestamp.isoformat(),
            "time_label": time_label(self.timestamp),
            "index": self.index,
            "raw_score": round(self.raw_score, 2),
            "shaped_score": self.shaped_score,
            "reasons": list(self.reasons),
            "suggestion": self.suggestion.as_dict(),
        }


def time_label(ts: datetime) -> str:
    """12-hour clock label such as '7:00 AM'."""
    hour12 = ts.hour % 12 or 12
    return f"{hour12}:{ts.minute:02d} {'AM' if ts.hour < 12 else 'PM'}"


def round_half_up(x: float) -> int:
    """Round halves up (2.5 -> 3), unlike the builtin round()."""
    return int(math.floor(x + 0.5))


def _step_at_least(value: Optional[float], steps: Steps) -> float:
    if value is None:
        return 0.0
    for threshold, penalty in steps:
        if value >= threshold:
            return penalty
    return 0.0


def _step_at_most(value: Optional[float], steps: Steps) -> float:
    if value is None:
        return 0.0
    for threshold, penalty in steps:
        if value <= threshold:
            return penalty
    return 0.0


# ---- Raw breed penalty curves (multiplied by sensitivity in score_hour) ----

def heat_penalty(feels: float, rh: Optional[float], cfg: BreedPenaltyConfig) -> float:
    p = _step_at_least(feels, cfg.heat_steps)
    if rh is not None and rh >= cfg.heat_humid_rh and feels >= cfg.heat_humid_feels_f:
        p += cfg.heat_humid_extra
    return p


def cold_penalty(feels: float, wind: float, cfg: BreedPenaltyConfig) -> float:
    p = _step_at_most(feels, cfg.cold_steps)
    if wind >= cfg.cold_wind_mph and feels <= cfg.cold_wind_feels_f:
        p += cfg.cold_wind_extra
    return p


def humidity_penalty(rh: Optional[float], feels: float, cfg: BreedPenaltyConfig) -> float:
    if rh is None or feels < cfg.humidity_min_feels_f:
        return 0.0
    return _step_at_least(rh, cfg.humidity_steps)


def uv_penalty(uv: float, cfg: BreedPenaltyConfig) -> float:
    return _step_at_least(uv, cfg.uv_steps)


def wind_penalty(wind: float, gust: Optional[float], cfg: BreedPenaltyConfig) -> float:
    if gust is not None and gust >= cfg.wind_gust_mph:
        return cfg.wind_gust_penalty
    if wind >= cfg.wind_sustained_mph:
        return cfg.wind_sustained_penalty
    return 0.0


def rain_penalty(precip: float, cfg: BreedPenaltyConfig) -> float:
    return _step_at_least(precip, cfg.rain_steps)


def pavement_penalty(pavement_f: float, cfg: BreedPenaltyConfig) -> float:
    return cfg.pavement_penalty if pavement_f >= cfg.pavement_min_f else 0.0


# ---- Shaping ----

def shape_score(raw: float, config: ScoringConfig = DEFAULT_SCORING_CONFIG) -> float:
    """Compress the raw 0-10 score so only the best hours reach 9-10 (piecewise linear)."""
    for breakpoint, base, slope in config.shaping:
        if raw >= breakpoint:
            return base + (raw - breakpoint) * slope
    return raw * config.shaping_low_slope


def estimate_pavement_f(temp_f: float, uv: float, cloud_pct: float, config: ScoringConfig = DEFAULT_SCORING_CONFIG) -> int:
    sun = max(0.0, uv - config.pavement_uv_offset) * (1.0 - cloud_pct / 100.0)
    return round_half_up(temp_f + sun * config.pavement_sun_factor + config.pavement_base_offset_f)


def is_dark(ts: datetime, sun: Optional[SunTimes], config: ScoringConfig = DEFAULT_SCORING_CONFIG) -> bool:
    """True when ts falls before sunrise+margin or after sunset-margin. Unknown sun times -> False."""
    if sun is None:
        return False
    if sun.sunrise is not None and ts < sun.sunrise + config.dark_margin:
        return True
    if sun.sunset is not None and ts > sun.sunset - config.dark_margin:
        return True
    return False


def suggest_walk(
    shaped: float,
    profile: BreedProfile,
    *,
    feels: float,
    uv: float,
    gust: Optional[float],
    precip: float,
    code: int,
    pavement_f: int,
    config: ScoringConfig = DEFAULT_SCORING_CONFIG,
) -> WalkSuggestion:
    sc = config.suggestion
    default_pace = PACE_BRISK if profile.is_high_energy else PACE_STROLL
    pace = default_pace
    duration = float(profile.endurance_minutes)

    if shaped <= sc.quick_max_score:
        pace = PACE_QUICK
        duration = min(duration, sc.quick_max_minutes)
    elif shaped <= sc.stroll_max_score:
        pace = PACE_STROLL
        duration = min(duration, sc.stroll_max_minutes)
    elif shaped >= sc.full_walk_min_score:
        pace = default_pace
        duration = float(profile.endurance_minutes)

    # extreme conditions only ever shorten the walk
    if pavement_f >= sc.hot_pavement_f or uv >= sc.hot_uv or feels >= sc.hot_feels_f:
        if shaped > sc.quick_max_score:
            pace = PACE_STROLL
        duration = min(duration, sc.hot_max_minutes)
    if feels <= sc.cold_feels_f or (gust is not None and gust >= sc.gust_mph):
        duration = min(duration, sc.rough_max_minutes)
    if precip >= sc.wet_precip_pct or code >= config.storm_code:
        duration = min(duration, sc.wet_max_minutes)

    return WalkSuggestion(
        pace=pace,
        duration_minutes=max(sc.min_minutes, round_half_up(duration)),
        pavement_f=pavement_f,
    )


def score_hour(
    sample: HourSample,
    sun: Optional[SunTimes],
    profile: BreedProfile,
    config: ScoringConfig = DEFAULT_SCORING_CONFIG,
    index: int = 0,
) -> ScoredHour:
    """Score one forecast hour for walking suitability for the given breed profile."""
    temp_f = sample.temp_f
    feels = sample.feels_f
    rh = sample.relative_humidity_pct
    uv = sample.uv_index or 0.0
    wind = sample.wind_mph or 0.0
    gust = sample.gust_mph
    precip = sample.precipitation_pct or 0.0
    code = int(sample.weather_code or 0)
    cloud = sample.cloud_cover_pct or 0.0

    score = config.baseline
    ceiling = config.max_score
    reasons: List[str] = []

    if is_dark(sample.timestamp, sun, config):
        score -= config.dark_penalty
        reasons.append("Low light")

    if feels > config.extreme_hot_f or feels < config.extreme_cold_f:
        score -= config.extreme_temp_penalty
        reasons.append("Extreme temperature")
    elif feels > config.harsh_hot_f or feels < config.harsh_cold_f:
        score -= config.harsh_temp_penalty
        reasons.append("Hot air" if feels > config.harsh_hot_f else "Cold air")
    elif config.comfort_min_f <= feels <= config.comfort_max_f:
        score += config.comfort_bonus
        reasons.append("Comfortable air")

    if rh is not None and feels >= config.humid_heat_feels_f:
        if rh >= config.humid_heat_rh:
            score -= config.humid_heat_penalty
            reasons.append("Humid heat")
        elif rh >= config.muggy_rh:
            score -= config.muggy_penalty
            reasons.append("Muggy")

    if uv >= config.uv_high:
        score -= config.uv_high_penalty
        reasons.append("High UV")
    elif uv >= config.uv_moderate:
        score -= config.uv_moderate_penalty
        reasons.append("Moderate UV")

    if gust is not None and gust >= config.gust_limit_mph:
        score -= config.gust_penalty
        reasons.append(f"Gusty {round_half_up(gust)} mph")
    elif wind >= config.wind_limit_mph:
        score -= config.wind_penalty
        reasons.append("Windy")

    if precip >= config.rain_heavy_pct:
        score -= config.rain_heavy_penalty
        reasons.append("Heavy rain risk")
    elif precip >= config.rain_likely_pct:
        score -= config.rain_likely_penalty
        reasons.append("Rain likely")

    if code >= config.storm_code:
        ceiling = min(ceiling, config.storm_ceiling)
        score = min(score, config.storm_ceiling)
        reasons.append("Thunderstorms")

    pavement_f = estimate_pavement_f(temp_f, uv, cloud, config)
    if pavement_f >= config.pavement_extreme_f:
        score -= config.pavement_extreme_penalty
        reasons.append(f"Pavement {pavement_f}°F")
    elif pavement_f >= config.pavement_hot_f:
        score -= config.pavement_hot_penalty
        reasons.append(f"Pavement {pavement_f}°F")

    bp = config.breed
    weighted = (
        (profile.heat, heat_penalty(feels, rh, bp), "Heat-sensitive breed"),
        (profile.cold, cold_penalty(feels, wind, bp), "Cold-sensitive breed"),
        (profile.humidity, humidity_penalty(rh, feels, bp), "Humidity-sensitive breed"),
        (profile.uv, uv_penalty(uv, bp), "UV-sensitive breed"),
        (profile.wind, wind_penalty(wind, gust, bp), "Wind-sensitive breed"),
        (profile.rain, rain_penalty(precip, bp), "Rain-sensitive breed"),
        (profile.pavement, pavement_penalty(pavement_f, bp), "Hot pavement for paws"),
    )
    for sensitivity, raw_penalty, reason in weighted:
        score -= sensitivity * raw_penalty
        if raw_penalty > 0:
            reasons.append(reason)

    flags = profile.flags
    if flags.double_coat and feels <= config.cold_breed_feels_f:
        score += config.cold_breed_bonus
        reasons.append("Cold weather breed")
    if flags.brachycephalic and feels >= config.brachy_feels_f and rh is not None and rh >= config.brachy_rh:
        score -= config.brachy_penalty
        reasons.append("Brachy heat penalty")
    if flags.toy_sized and feels <= config.toy_cold_feels_f:
        score -= config.toy_cold_penalty
        reasons.append("Small dog cold penalty")

    raw = max(0.0, min(ceiling, score))
    shaped = shape_score(raw, config)

    suggestion = suggest_walk(
        shaped,
        profile,
        feels=feels,
        uv=uv,
        gust=gust,
        precip=precip,
        code=code,
        pavement_f=pavement_f,
        config=config,
    )

    return ScoredHour(
        timestamp=sample.timestamp,
        raw_score=raw,
        shaped_score=round_half_up(max(0.0, min(config.max_score, shaped))),
        reasons=tuple(reasons),
        suggestion=suggestion,
        index=index,
    )
