# DataFormatter: Open-Meteo payload -> canonical hourly samples (°F, mph, percent) + sun times
from __future__ import annotations

import logging
from datetime import date, datetime, timedelta, timezone, tzinfo
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from homeassistant.util import dt as dt_util

from . import unit_helpers
from .walk_scoring import HourSample, SunTimes

_LOGGER = logging.getLogger(__name__)


def _ensure_list_length_equal(key: str, timestamps: Sequence[Any], arr: Sequence[Any]) -> None:
    if len(timestamps) != len(arr):
        raise ValueError(f"Array length mismatch for '{key}': timestamps length={len(timestamps)}, {key} length={len(arr)}")


def _to_float(v: Any) -> Optional[float]:
    try:
        if v is None:
            return None
        return float(v)
    except (TypeError, ValueError):
        return None


class FormattedForecast:
    """Canonical samples plus the sun times that apply to each of them (index aligned)."""

    def __init__(self, samples: List[HourSample], sun_times: List[SunTimes]) -> None:
        self.samples = samples
        self.sun_times = sun_times

    def __len__(self) -> int:
        return len(self.samples)


class DataFormatter:
    """
    Normalize an Open-Meteo forecast payload.

    - 'hourly.time' drives the series; every other hourly array present must match its length.
    - 'temperature_2m' is required whenever 'time' is non-empty.
    - Optional arrays that are absent stay absent: humidity/apparent/gust become None,
      UV/wind/precipitation/weather code/cloud cover become 0 (their penalties stay off).
    - Units follow 'hourly_units' when present, else Open-Meteo defaults (°C, km/h).
    - Naive timestamps are localised with 'utc_offset_seconds' (UTC when absent).

    Raises ValueError on malformed payloads (length mismatch, non-list arrays,
    unparsable timestamps). Missing 'hourly' or an empty 'time' array yields no samples.
    """

    # canonical field -> accepted Open-Meteo hourly keys (current name first, legacy alias after)
    HOURLY_KEY_MAP: Dict[str, Tuple[str, ...]] = {
        "temperature": ("temperature_2m",),
        "apparent": ("apparent_temperature",),
        "humidity": ("relative_humidity_2m", "relativehumidity_2m"),
        "uv": ("uv_index",),
        "precipitation": ("precipitation_probability",),
        "weather_code": ("weathercode", "weather_code"),
        "wind": ("wind_speed_10m", "windspeed_10m"),
        "gust": ("wind_gusts_10m", "windgusts_10m"),
        "cloud": ("cloudcover", "cloud_cover"),
    }

    # -----------------------
    # Timestamps
    # -----------------------
    @staticmethod
    def payload_timezone(raw_payload: Mapping[str, Any]) -> tzinfo:
        offset = _to_float(raw_payload.get("utc_offset_seconds"))
        if offset is None:
            return dt_util.UTC
        return timezone(timedelta(seconds=int(offset)))

    @staticmethod
    def parse_timestamp(value: Any, tz: tzinfo) -> datetime:
        if isinstance(value, datetime):
            parsed: Optional[datetime] = value
        else:
            parsed = dt_util.parse_datetime(str(value)) if value is not None else None
        if parsed is None:
            raise ValueError(f"Unparsable timestamp {value!r}")
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=tz)
        return parsed

    # -----------------------
    # Hourly arrays
    # -----------------------
    def _pick_array(self, hourly: Mapping[str, Any], field: str, timestamps: Sequence[Any]) -> Tuple[Optional[str], Optional[List[Any]]]:
        for key in self.HOURLY_KEY_MAP[field]:
            if key not in hourly or hourly[key] is None:
                continue
            arr = hourly[key]
            if not isinstance(arr, (list, tuple)):
                raise ValueError(f"Hourly key '{key}' must be a list/tuple")
            _ensure_list_length_equal(key, timestamps, arr)
            return key, list(arr)
        return None, None

    def normalize_hourly(self, raw_payload: Mapping[str, Any]) -> List[HourSample]:
        """Convert the hourly block into HourSample objects in payload order."""
        if not isinstance(raw_payload, Mapping):
            raise ValueError("raw_payload must be a mapping")

        hourly = raw_payload.get("hourly")
        if not isinstance(hourly, Mapping):
            _LOGGER.debug("Payload has no 'hourly' block; nothing to score")
            return []

        timestamps = hourly.get("time") or []
        if not isinstance(timestamps, (list, tuple)):
            raise ValueError("'hourly.time' must be a list")
        if not timestamps:
            return []

        units = raw_payload.get("hourly_units") or {}
        if not isinstance(units, Mapping):
            units = {}
        tz = self.payload_timezone(raw_payload)

        arrays: Dict[str, Optional[List[Any]]] = {}
        unit_hints: Dict[str, Optional[str]] = {}
        for field in self.HOURLY_KEY_MAP:
            key, arr = self._pick_array(hourly, field, timestamps)
            arrays[field] = arr
            unit_hints[field] = units.get(key) if key else None

        if arrays["temperature"] is None:
            raise ValueError("Missing required hourly array 'temperature_2m'")

        def at(field: str, i: int) -> Optional[float]:
            arr = arrays[field]
            return _to_float(arr[i]) if arr is not None else None

        samples: List[HourSample] = []
        for i, ts_raw in enumerate(timestamps):
            ts = self.parse_timestamp(ts_raw, tz)
            temp_f = unit_helpers.temp_to_f(at("temperature", i), unit_hints["temperature"])
            if temp_f is None:
                _LOGGER.debug("Skipping hour %s (%s): no temperature", i, ts_raw)
                continue
            code = at("weather_code", i)
            samples.append(
                HourSample(
                    timestamp=ts,
                    temp_f=temp_f,
                    apparent_f=unit_helpers.temp_to_f(at("apparent", i), unit_hints["apparent"] or unit_hints["temperature"]),
                    relative_humidity_pct=at("humidity", i),
                    uv_index=at("uv", i) or 0.0,
                    wind_mph=unit_helpers.wind_to_mph(at("wind", i), unit_hints["wind"]) or 0.0,
                    gust_mph=unit_helpers.wind_to_mph(at("gust", i), unit_hints["gust"] or unit_hints["wind"]),
                    precipitation_pct=at("precipitation", i) or 0.0,
                    weather_code=int(code) if code is not None else 0,
                    cloud_cover_pct=at("cloud", i) or 0.0,
                )
            )
        return samples

    # -----------------------
    # Daily sunrise / sunset
    # -----------------------
    def daily_sun_times(self, raw_payload: Mapping[str, Any]) -> List[SunTimes]:
        daily = raw_payload.get("daily")
        if not isinstance(daily, Mapping):
            return []
        tz = self.payload_timezone(raw_payload)
        rises = daily.get("sunrise") or []
        sets = daily.get("sunset") or []
        out: List[SunTimes] = []
        for i in range(max(len(rises), len(sets))):
            rise = self.parse_timestamp(rises[i], tz) if i < len(rises) and rises[i] else None
            sset = self.parse_timestamp(sets[i], tz) if i < len(sets) and sets[i] else None
            out.append(SunTimes(sunrise=rise, sunset=sset))
        return out

    @staticmethod
    def sun_times_for(ts: datetime, by_date: Mapping[date, SunTimes], fallback: Optional[SunTimes]) -> Optional[SunTimes]:
        """Sun times of ts's own calendar date when known, else the first day's."""
        return by_date.get(ts.date(), fallback)

    def format(self, raw_payload: Mapping[str, Any]) -> FormattedForecast:
        samples = self.normalize_hourly(raw_payload)
        days = self.daily_sun_times(raw_payload) if samples else []
        by_date: Dict[date, SunTimes] = {}
        for st in days:
            anchor = st.sunrise or st.sunset
            if anchor is not None:
                by_date.setdefault(anchor.date(), st)
        fallback = days[0] if days else None
        sun = [self.sun_times_for(s.timestamp, by_date, fallback) or SunTimes() for s in samples]
        _LOGGER.debug("Formatted %d hourly samples with %d daily sun entries", len(samples), len(days))
        return FormattedForecast(samples, sun)
