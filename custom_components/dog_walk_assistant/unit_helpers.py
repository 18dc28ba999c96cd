"""Unit conversion helper utilities shared across the integration.

All functions attempt to coerce to float and return None on failure.
Canonical units used by the scoring engine:
- temperature: Fahrenheit (°F)
- wind: miles per hour (mph)
- humidity, cloud cover, precipitation probability: percent (0..100)
- breed height: inches, breed weight: pounds
"""
import logging
import re
from typing import Any, Optional

_LOGGER = logging.getLogger(__name__)

_NUMBER_RE = re.compile(r"\d+(?:\.\d+)?")


def _to_float(v: Any) -> Optional[float]:
    try:
        if v is None:
            return None
        return float(v)
    except (TypeError, ValueError):
        return None


# ---- Temperature ----

def c_to_f(v: Any) -> Optional[float]:
    """Convert Celsius to Fahrenheit."""
    f = _to_float(v)
    if f is None:
        return None
    return (f * 9.0 / 5.0) + 32.0


# ---- Wind ----

def kmh_to_mph(v: Any) -> Optional[float]:
    """Convert km/h to mph (via m/s, matching the m/s factor below)."""
    f = _to_float(v)
    if f is None:
        return None
    return (f / 3.6) * 2.23694


def m_s_to_mph(v: Any) -> Optional[float]:
    """Convert m/s to mph."""
    f = _to_float(v)
    if f is None:
        return None
    return f * 2.23694


def knots_to_mph(v: Any) -> Optional[float]:
    f = _to_float(v)
    if f is None:
        return None
    return f * 1.150779


def temp_to_f(v: Any, unit_hint: Optional[str] = None) -> Optional[float]:
    """Convert a temperature with an Open-Meteo unit hint ("°C" / "°F") to Fahrenheit.

    No hint means Open-Meteo's default (Celsius).
    """
    if unit_hint and "f" in str(unit_hint).strip().lower():
        return _to_float(v)
    return c_to_f(v)


def wind_to_mph(v: Any, unit_hint: Optional[str] = None) -> Optional[float]:
    """Convert a wind speed with an Open-Meteo unit hint to mph.

    No hint means Open-Meteo's default (km/h). Unknown hints are treated as km/h.
    """
    if v is None:
        return None
    u = str(unit_hint).strip().lower() if unit_hint else "km/h"
    if u in ("mph", "mi/h", "miles/h"):
        return _to_float(v)
    if u in ("m/s", "mps", "m s-1", "ms"):
        return m_s_to_mph(v)
    if u in ("kn", "kt", "knots"):
        return knots_to_mph(v)
    if u not in ("km/h", "kph", "kmh"):
        _LOGGER.debug("Unknown wind unit hint %r; assuming km/h", unit_hint)
    return kmh_to_mph(v)


# ---- Breed measurements ----

def parse_range_average(value: Any) -> Optional[float]:
    """Average the numbers found in a breed measurement.

    TheDogAPI gives ranges like "55 - 65"; plain numbers pass through.
    Returns None when nothing numeric can be found.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if not value:
        return None
    nums = [float(n) for n in _NUMBER_RE.findall(str(value))]
    if not nums:
        return None
    return sum(nums) / len(nums)
