# Coordinator: fetch (shared short-lived cache) -> score for the configured breed; errors propagate

from datetime import timedelta
import async_timeout
import logging
import time
from typing import Any, Dict, Optional

from homeassistant.helpers.update_coordinator import DataUpdateCoordinator
from homeassistant.util import dt as dt_util

from .const import DOMAIN, FETCH_CACHE_TTL, FORECAST_DAYS
from .day_scoring import score_day
from .walk_scoring import DEFAULT_SCORING_CONFIG, ScoringConfig

_LOGGER = logging.getLogger(__name__)


class DWACoordinator(DataUpdateCoordinator):
    def __init__(
        self,
        hass,
        entry_id: str,
        fetcher,
        formatter,
        breed: Optional[Dict[str, Any]],
        update_interval: int,
        scoring_config: ScoringConfig = DEFAULT_SCORING_CONFIG,
        config_entry=None,
    ):
        """
        - fetcher exposes `async fetch(days)` and a `cache_key` string.
        - breed is the TheDogAPI-shaped record chosen in the config flow (None -> neutral profile).
        """
        super().__init__(
            hass,
            _LOGGER,
            config_entry=config_entry,
            name=DOMAIN,
            update_interval=timedelta(seconds=update_interval),
        )
        self.entry_id = entry_id
        self.fetcher = fetcher
        self.formatter = formatter
        self.breed = breed
        self.scoring_config = scoring_config

    async def _async_fetch_raw(self) -> Dict[str, Any]:
        cache_dict = self.hass.data.setdefault(DOMAIN, {}).setdefault("fetch_cache", {})
        cache_key = (self.fetcher.cache_key, int(FORECAST_DAYS))
        cached = cache_dict.get(cache_key)
        if cached and (time.time() - float(cached.get("fetched_at", 0))) < FETCH_CACHE_TTL:
            _LOGGER.debug("Using cached forecast for %s", cache_key)
            return cached["data"]
        raw = await self.fetcher.fetch(days=FORECAST_DAYS)
        cache_dict[cache_key] = {"fetched_at": time.time(), "data": raw}
        return raw

    async def _async_update_data(self):
        """Fetch the forecast and score it against a single captured 'now'."""
        async with async_timeout.timeout(60):
            raw = await self._async_fetch_raw()

        now = dt_util.now()
        day = score_day(raw, self.breed, now, config=self.scoring_config, formatter=self.formatter)

        data = day.as_dict()
        data["computed_at"] = now.isoformat()
        data["breed_id"] = (self.breed or {}).get("id")
        data["hours_scored"] = len(day.hours)
        _LOGGER.debug(
            "Refresh for entry %s: %d hours, current=%s",
            self.entry_id,
            len(day.hours),
            day.current.shaped_score if day.current else None,
        )
        return data
