"""Config flow for Dog Walk Assistant"""

from __future__ import annotations

import logging
from typing import Any

import voluptuous as vol
from homeassistant import config_entries
from homeassistant.core import callback
from homeassistant.data_entry_flow import FlowResult
from homeassistant.helpers import selector
import homeassistant.helpers.config_validation as cv

from .const import (
    DOMAIN,
    CONF_NAME,
    CONF_LATITUDE,
    CONF_LONGITUDE,
    CONF_BREED_ID,
    CONF_UPDATE_INTERVAL,
    DEFAULT_NAME,
    DEFAULT_UPDATE_INTERVAL,
    MIN_UPDATE_INTERVAL,
)
from .breed_loader import BreedLoader

_LOGGER = logging.getLogger(__name__)


class DogWalkConfigFlow(config_entries.ConfigFlow, domain=DOMAIN):
    """Handle a config flow for Dog Walk Assistant."""

    VERSION = 1

    def __init__(self) -> None:
        self.walk_config: dict[str, Any] = {}
        self.breed_loader: BreedLoader | None = None

    async def async_step_user(self, user_input: dict[str, Any] | None = None) -> FlowResult:
        """Start the flow at the location step."""
        return await self.async_step_location(user_input)

    # ----
    # Location
    # ----
    async def async_step_location(self, user_input: dict[str, Any] | None = None) -> FlowResult:
        """Configure the walk location (name and coordinates)."""
        errors: dict[str, str] = {}
        if user_input is not None:
            try:
                lat = float(user_input[CONF_LATITUDE])
                lon = float(user_input[CONF_LONGITUDE])
                if not (-90 <= lat <= 90 and -180 <= lon <= 180):
                    errors["base"] = "invalid_coordinates"
            except (ValueError, KeyError, TypeError):
                errors["base"] = "invalid_coordinates"

            if not errors:
                submitted_title = str(user_input.get(CONF_NAME, "")).strip()
                if submitted_title:
                    for e in self.hass.config_entries.async_entries(DOMAIN):
                        if e.title == submitted_title:
                            _LOGGER.debug("Attempt to create entry with duplicate title '%s' rejected", submitted_title)
                            errors["base"] = "title_exists"
                            break

            if not errors:
                self.walk_config.update(user_input)
                return await self.async_step_breed()

        default_name = user_input.get(CONF_NAME, DEFAULT_NAME) if user_input else DEFAULT_NAME
        default_lat = user_input.get(CONF_LATITUDE, self.hass.config.latitude) if user_input else self.hass.config.latitude
        default_lon = user_input.get(CONF_LONGITUDE, self.hass.config.longitude) if user_input else self.hass.config.longitude

        return self.async_show_form(
            step_id="location",
            data_schema=vol.Schema(
                {
                    vol.Required(CONF_NAME, default=default_name): str,
                    vol.Required(CONF_LATITUDE, default=default_lat): cv.latitude,
                    vol.Required(CONF_LONGITUDE, default=default_lon): cv.longitude,
                }
            ),
            errors=errors,
        )

    # ----
    # Breed
    # ----
    async def async_step_breed(self, user_input: dict[str, Any] | None = None) -> FlowResult:
        """Pick the dog's breed from the packaged directory."""
        if self.breed_loader is None:
            self.breed_loader = BreedLoader(self.hass)
            try:
                await self.breed_loader.async_load_breeds()
            except RuntimeError:
                self.breed_loader = None
                return self.async_abort(reason="breeds_unavailable")

        errors: dict[str, str] = {}
        if user_input is not None:
            choice = str(user_input.get(CONF_BREED_ID) or "").strip()
            # dropdown values are ids; a typed value is looked up by breed name
            breed = self.breed_loader.get_breed(choice) if choice else None
            if breed is None and choice:
                breed = self.breed_loader.find_breed(choice)
            if breed is None:
                _LOGGER.error("Selected breed %s not found", choice)
                errors["base"] = "unknown_breed"
            else:
                self.walk_config[CONF_BREED_ID] = breed["id"]
                final_config = dict(self.walk_config)
                final_config.setdefault(CONF_UPDATE_INTERVAL, DEFAULT_UPDATE_INTERVAL)
                _LOGGER.debug("Creating entry '%s' for breed %s", final_config[CONF_NAME], breed.get("name"))
                return self.async_create_entry(title=final_config[CONF_NAME], data=final_config)

        options = [
            {"value": b["id"], "label": b.get("name", b["id"])}
            for b in self.breed_loader.get_all_breeds()
        ]
        return self.async_show_form(
            step_id="breed",
            data_schema=vol.Schema(
                {vol.Required(CONF_BREED_ID): selector.SelectSelector(
                    selector.SelectSelectorConfig(options=options, mode="dropdown", custom_value=True)
                )}
            ),
            errors=errors,
        )

    # Options flow (simple)
    @staticmethod
    @callback
    def async_get_options_flow(config_entry: config_entries.ConfigEntry) -> config_entries.OptionsFlow:
        return OptionsFlowHandler(config_entry)


class OptionsFlowHandler(config_entries.OptionsFlow):
    """Let the user change the refresh interval."""

    def __init__(self, config_entry: config_entries.ConfigEntry) -> None:
        self._config_entry = config_entry

    async def async_step_init(self, user_input: dict[str, Any] | None = None) -> FlowResult:
        if user_input is not None:
            return self.async_create_entry(title="", data=user_input)

        current = self._config_entry.options.get(
            CONF_UPDATE_INTERVAL,
            self._config_entry.data.get(CONF_UPDATE_INTERVAL, DEFAULT_UPDATE_INTERVAL),
        )
        return self.async_show_form(
            step_id="init",
            data_schema=vol.Schema(
                {
                    vol.Required(CONF_UPDATE_INTERVAL, default=current): vol.All(
                        vol.Coerce(int), vol.Range(min=MIN_UPDATE_INTERVAL)
                    ),
                }
            ),
        )
