"""
Dog Walk Assistant sensors.

coordinator.data is the dict produced by DayScore.as_dict() plus refresh
metadata:
 - "profile": breed profile summary (name, energy_band, sensitivities, flags)
 - "current": scored current hour (shaped_score, raw_score, reasons, suggestion) or None
 - "best_next": best upcoming hour with time_preference / adjusted_score, or None
 - "windows": ranked walk windows (best first)
 - "next_12": scored hours from the current one onwards
 - "threshold", "current_index", "computed_at", "breed_id", "hours_scored"

Three sensors read it: the walk score right now, the best next hour and the
best walk window.
"""
from typing import Optional, Dict, Any
import logging

from homeassistant.helpers.update_coordinator import CoordinatorEntity
from homeassistant.const import ATTR_ATTRIBUTION
from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant

from .const import DOMAIN, CONF_NAME, DEFAULT_NAME, SENSOR_WALK_SCORE, SENSOR_BEST_NEXT_HOUR, SENSOR_BEST_WINDOW

_LOGGER = logging.getLogger(__name__)

ATTRIBUTION = "Data provided by Open-Meteo"


class DWASensor(CoordinatorEntity):
    """Base CoordinatorEntity; subclasses pick their state from coordinator.data."""

    kind = ""
    icon_name = "mdi:dog-side"

    def __init__(self, coordinator, name: str):
        super().__init__(coordinator)
        prefix = DOMAIN
        self._attr_name = f"{name} {self.kind.replace('_', ' ').title()}"
        self._attr_unique_id = f"{prefix}_{getattr(coordinator, 'entry_id', 'noentry')}_{self.kind}"
        self._attr_icon = self.icon_name

    @property
    def available(self) -> bool:
        return bool(self.coordinator.last_update_success and self.coordinator.data)

    def _base_attributes(self) -> Dict[str, Any]:
        data = self.coordinator.data or {}
        profile = data.get("profile") or {}
        return {
            ATTR_ATTRIBUTION: ATTRIBUTION,
            "breed": profile.get("name"),
            "energy_band": profile.get("energy_band"),
            "computed_at": data.get("computed_at"),
        }


class WalkScoreSensor(DWASensor):
    """Shaped 0-10 walk score for the current hour."""

    kind = SENSOR_WALK_SCORE

    def _current(self) -> Optional[Dict[str, Any]]:
        data = self.coordinator.data or {}
        return data.get("current")

    @property
    def state(self) -> Optional[int]:
        current = self._current()
        if not current:
            return None
        return current.get("shaped_score")

    @property
    def extra_state_attributes(self) -> Dict[str, Any]:
        attrs = self._base_attributes()
        current = self._current() or {}
        data = self.coordinator.data or {}
        attrs.update(
            {
                "time": current.get("time_label"),
                "raw_score": current.get("raw_score"),
                "reasons": current.get("reasons", []),
                "suggestion": current.get("suggestion"),
                "threshold": data.get("threshold"),
                "profile": data.get("profile"),
                "next_12": [
                    {
                        "time": h.get("time_label"),
                        "score": h.get("shaped_score"),
                        "reasons": h.get("reasons", []),
                    }
                    for h in data.get("next_12", [])
                ],
            }
        )
        return attrs


class BestNextHourSensor(DWASensor):
    """Best hour within the next 24 (state is its time label)."""

    kind = SENSOR_BEST_NEXT_HOUR
    icon_name = "mdi:clock-star-four-points-outline"

    def _best(self) -> Optional[Dict[str, Any]]:
        data = self.coordinator.data or {}
        return data.get("best_next")

    @property
    def state(self) -> Optional[str]:
        best = self._best()
        if not best:
            return None
        return best.get("time_label")

    @property
    def extra_state_attributes(self) -> Dict[str, Any]:
        attrs = self._base_attributes()
        best = self._best() or {}
        attrs.update(
            {
                "timestamp": best.get("timestamp"),
                "score": best.get("shaped_score"),
                "time_preference": best.get("time_preference"),
                "adjusted_score": best.get("adjusted_score"),
                "reasons": best.get("reasons", []),
                "suggestion": best.get("suggestion"),
            }
        )
        return attrs


class BestWindowSensor(DWASensor):
    """Top-ranked walk window (state is 'start - end')."""

    kind = SENSOR_BEST_WINDOW
    icon_name = "mdi:calendar-clock"

    def _windows(self):
        data = self.coordinator.data or {}
        return data.get("windows") or []

    @property
    def state(self) -> Optional[str]:
        windows = self._windows()
        if not windows:
            return None
        top = windows[0]
        return f"{top.get('start_label')} - {top.get('end_label')}"

    @property
    def extra_state_attributes(self) -> Dict[str, Any]:
        attrs = self._base_attributes()
        windows = self._windows()
        top = windows[0] if windows else {}
        attrs.update(
            {
                "label": top.get("label"),
                "avg_score": top.get("avg_score"),
                "best": top.get("best"),
                "length": top.get("length"),
                "windows": windows,
            }
        )
        return attrs


async def async_setup_entry(hass: HomeAssistant, entry: ConfigEntry, async_add_entities):
    """Create the three sensors for a config entry."""
    coordinator = hass.data[DOMAIN].get(entry.entry_id) if hass.data.get(DOMAIN) else None
    if coordinator is None:
        raise RuntimeError("Coordinator not found in hass.data for this config entry")

    name = entry.data.get(CONF_NAME) or entry.title or DEFAULT_NAME
    entities = [
        WalkScoreSensor(coordinator, name),
        BestNextHourSensor(coordinator, name),
        BestWindowSensor(coordinator, name),
    ]
    _LOGGER.debug("Adding %d sensors for entry %s", len(entities), entry.entry_id)
    async_add_entities(entities)
