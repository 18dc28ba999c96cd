"""
Dog Walk Assistant - integration entry points.

Entry data carries the location (latitude/longitude), a display name and the
selected breed id. Setup fails (returns False) when the location is missing
or the breed id is not in the packaged breed directory.
"""
import logging

from homeassistant.const import CONF_LATITUDE, CONF_LONGITUDE
from homeassistant.helpers import aiohttp_client

from .const import DOMAIN, DEFAULT_UPDATE_INTERVAL, CONF_BREED_ID, CONF_UPDATE_INTERVAL

_LOGGER = logging.getLogger(__name__)

PLATFORMS = ["sensor"]


async def async_setup_entry(hass, entry):
    """Set up integration from a config entry."""

    _LOGGER.debug("Starting async_setup_entry for entry %s", entry.entry_id)
    session = aiohttp_client.async_get_clientsession(hass)
    hass.data.setdefault(DOMAIN, {}).setdefault("fetch_cache", {})

    lat = entry.data.get(CONF_LATITUDE)
    lon = entry.data.get(CONF_LONGITUDE)
    _LOGGER.debug("Config entry %s coordinates lat=%s lon=%s", entry.entry_id, lat, lon)
    if lat is None or lon is None:
        _LOGGER.error("Config entry missing latitude/longitude; aborting setup for entry %s", entry.entry_id)
        return False

    from .coordinator import DWACoordinator
    from .weather_fetcher import WeatherFetcher
    from .data_formatter import DataFormatter
    from .breed_loader import BreedLoader

    try:
        loader = BreedLoader(hass)
        await loader.async_load_breeds()
    except RuntimeError as exc:
        _LOGGER.exception("breeds.json failed validation: %s", exc)
        return False

    breed = None
    breed_id = entry.data.get(CONF_BREED_ID)
    if breed_id:
        breed = loader.get_breed(breed_id)
        if breed is None:
            _LOGGER.error("Selected breed '%s' not found in packaged breeds.json", breed_id)
            return False

    try:
        fetcher = WeatherFetcher(hass, lat, lon, session=session)
    except ValueError as exc:
        _LOGGER.error("Invalid location for entry %s: %s", entry.entry_id, exc)
        return False

    update_interval = entry.options.get(
        CONF_UPDATE_INTERVAL, entry.data.get(CONF_UPDATE_INTERVAL, DEFAULT_UPDATE_INTERVAL)
    )
    coord = DWACoordinator(
        hass,
        entry.entry_id,
        fetcher=fetcher,
        formatter=DataFormatter(),
        breed=breed,
        update_interval=int(update_interval),
        config_entry=entry,
    )
    _LOGGER.debug("DWACoordinator created for entry %s (breed=%s)", entry.entry_id, breed_id)

    await coord.async_request_refresh()

    hass.data[DOMAIN][entry.entry_id] = coord
    entry.async_on_unload(entry.add_update_listener(_async_update_listener))

    await hass.config_entries.async_forward_entry_setups(entry, PLATFORMS)
    _LOGGER.debug("async_setup_entry completed for entry %s", entry.entry_id)
    return True


async def _async_update_listener(hass, entry):
    """Reload the entry when its options change."""
    await hass.config_entries.async_reload(entry.entry_id)


async def async_unload_entry(hass, entry):
    """Unload a config entry."""
    _LOGGER.debug("Starting async_unload_entry for entry %s", entry.entry_id)
    unload_ok = await hass.config_entries.async_unload_platforms(entry, PLATFORMS)
    if unload_ok:
        removed = hass.data.get(DOMAIN, {}).pop(entry.entry_id, None)
        _LOGGER.debug("Removed coordinator from hass.data for entry %s: %s", entry.entry_id, removed is not None)
    return unload_ok
