"""
WeatherFetcher for the Open-Meteo forecast endpoint.

- Requests the hourly variables the walk scorer reads plus daily sunrise/sunset.
- timezone=auto so hourly timestamps are local wall-clock time; the payload's
  utc_offset_seconds is used downstream to localise them.
- Returns the raw Open-Meteo payload; raises RuntimeError on HTTP, network or
  payload shape failures.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import aiohttp

from homeassistant.helpers.aiohttp_client import async_get_clientsession

from .const import FORECAST_DAYS, OM_BASE, OM_PARAMS_DAILY, OM_PARAMS_HOURLY, OM_TIMEOUT

_LOGGER = logging.getLogger(__name__)


class WeatherFetcher:
    """Fetch raw hourly forecasts for one location."""

    def __init__(
        self,
        hass,
        latitude: float,
        longitude: float,
        session: Optional[aiohttp.ClientSession] = None,
        base_url: str = OM_BASE,
    ) -> None:
        try:
            lat = float(latitude)
            lon = float(longitude)
        except (TypeError, ValueError) as exc:
            raise ValueError(f"Invalid coordinates {latitude!r},{longitude!r}") from exc
        if not (-90 <= lat <= 90 and -180 <= lon <= 180):
            raise ValueError(f"Coordinates out of range: {lat},{lon}")

        self.hass = hass
        self.latitude = round(lat, 6)
        self.longitude = round(lon, 6)
        self.base_url = base_url
        self._session = session

    @property
    def cache_key(self) -> str:
        return f"{round(self.latitude, 4)}_{round(self.longitude, 4)}_om"

    def build_params(self, days: int = FORECAST_DAYS) -> Dict[str, Any]:
        return {
            "latitude": self.latitude,
            "longitude": self.longitude,
            "hourly": ",".join(OM_PARAMS_HOURLY),
            "daily": ",".join(OM_PARAMS_DAILY),
            "timezone": "auto",
            "forecast_days": int(days),
        }

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None:
            self._session = async_get_clientsession(self.hass)
        return self._session

    async def fetch(self, days: int = FORECAST_DAYS) -> Dict[str, Any]:
        """GET the forecast; raise RuntimeError on HTTP/network errors or a non-object payload."""
        session = self._get_session()
        params = self.build_params(days)
        _LOGGER.debug("Fetching Open-Meteo forecast for %s,%s (days=%s)", self.latitude, self.longitude, days)
        try:
            async with session.get(self.base_url, params=params, timeout=OM_TIMEOUT) as resp:
                resp.raise_for_status()
                data = await resp.json()
        except Exception as exc:
            _LOGGER.exception("Open-Meteo forecast fetch failed for %s,%s", self.latitude, self.longitude)
            raise RuntimeError("Open-Meteo forecast fetch failed") from exc

        if not isinstance(data, dict):
            _LOGGER.error("Open-Meteo returned unexpected payload type %s", type(data).__name__)
            raise RuntimeError("Open-Meteo returned unexpected forecast payload shape")
        if data.get("error"):
            _LOGGER.error("Open-Meteo returned an error: %s", data.get("reason"))
            raise RuntimeError(f"Open-Meteo error: {data.get('reason', 'unknown')}")

        hourly = data.get("hourly")
        count = len(hourly.get("time") or []) if isinstance(hourly, dict) else 0
        _LOGGER.debug("Open-Meteo returned %d hourly entries for %s,%s", count, self.latitude, self.longitude)
        return data
