from datetime import timedelta

import pytest

from homeassistant.util import dt as dt_util

from custom_components.dog_walk_assistant.const import DOMAIN
from custom_components.dog_walk_assistant.coordinator import DWACoordinator
from custom_components.dog_walk_assistant.data_formatter import DataFormatter

HUSKY = {
    "id": "siberian_husky",
    "name": "Siberian Husky",
    "breed_group": "Working",
    "temperament": "Outgoing, Friendly, Alert, Gentle, Intelligent",
    "height": {"imperial": "20 - 23.5"},
    "weight": {"imperial": "35 - 60"},
}


def sample_payload(hours=24):
    start = dt_util.utcnow().replace(minute=0, second=0, microsecond=0) - timedelta(hours=1)
    return {
        "utc_offset_seconds": 0,
        "hourly": {
            "time": [(start + timedelta(hours=i)).strftime("%Y-%m-%dT%H:%M") for i in range(hours)],
            "temperature_2m": [12.0] * hours,
            "relative_humidity_2m": [60] * hours,
            "wind_speed_10m": [10.0] * hours,
        },
    }


# Simple mock fetcher that counts calls and returns a copy of a fixed payload
class MockFetcher:
    def __init__(self, payload=None, error=None):
        self.payload = payload
        self.error = error
        self.calls = 0
        self.cache_key = "52.52_13.41_om"

    async def fetch(self, days=2):
        self.calls += 1
        if self.error:
            raise self.error
        return dict(self.payload)


def make_coordinator(hass, fetcher, breed=HUSKY):
    return DWACoordinator(
        hass,
        "test_entry",
        fetcher=fetcher,
        formatter=DataFormatter(),
        breed=breed,
        update_interval=1800,
    )


async def test_update_scores_forecast(hass):
    coord = make_coordinator(hass, MockFetcher(sample_payload()))
    data = await coord._async_update_data()

    assert data["hours_scored"] == 24
    assert data["breed_id"] == "siberian_husky"
    assert data["profile"]["name"] == "Siberian Husky"
    # the first hour is already in the past
    assert 1 <= data["current_index"] <= 2
    assert data["current"]["shaped_score"] == 7
    assert "Comfortable air" in data["current"]["reasons"]
    assert len(data["next_12"]) == 12
    assert data["best_next"] is not None
    assert data["computed_at"]


async def test_fetch_cache_shared_between_refreshes(hass):
    fetcher = MockFetcher(sample_payload())
    coord = make_coordinator(hass, fetcher)
    await coord._async_update_data()
    await coord._async_update_data()
    assert fetcher.calls == 1
    assert hass.data[DOMAIN]["fetch_cache"]


async def test_fetch_error_propagates(hass):
    coord = make_coordinator(hass, MockFetcher(error=RuntimeError("Open-Meteo forecast fetch failed")))
    with pytest.raises(RuntimeError):
        await coord._async_update_data()


async def test_unknown_breed_uses_neutral_profile(hass):
    coord = make_coordinator(hass, MockFetcher(sample_payload()), breed=None)
    data = await coord._async_update_data()
    assert data["profile"]["name"] == "Unknown"
    assert data["breed_id"] is None


async def test_refresh_marks_failure(hass):
    coord = make_coordinator(hass, MockFetcher(error=RuntimeError("boom")))
    await coord.async_refresh()
    assert coord.last_update_success is False
