"""Breed directory loader for Dog Walk Assistant (packaged breeds.json, TheDogAPI record shape)."""

from __future__ import annotations

import json
import logging
import os
from typing import Any, Dict, List, Optional

from homeassistant.core import HomeAssistant

from .const import BREEDS_FILE

_LOGGER = logging.getLogger(__name__)


class BreedLoader:
    """Load and look up breed records from the packaged JSON file.

    On any load/validation error this loader raises RuntimeError.
    """

    def __init__(self, hass: HomeAssistant, path: Optional[str] = None) -> None:
        self.hass = hass
        self._path = path or os.path.join(os.path.dirname(__file__), BREEDS_FILE)
        self._data: Optional[Dict[str, Any]] = None

    async def async_load_breeds(self) -> None:
        """Read and validate the breed file in the executor."""

        def _read_file() -> Dict[str, Any]:
            with open(self._path, "r", encoding="utf-8") as fp:
                return json.load(fp)

        try:
            data = await self.hass.async_add_executor_job(_read_file)
        except FileNotFoundError as exc:
            _LOGGER.exception("Breed file not found at %s", self._path)
            raise RuntimeError(f"{BREEDS_FILE} missing") from exc
        except (OSError, ValueError) as exc:
            _LOGGER.exception("Failed to read %s: %s", self._path, exc)
            raise RuntimeError(f"Failed to read {BREEDS_FILE}") from exc

        if not isinstance(data, dict):
            _LOGGER.error("%s root element is not a JSON object", BREEDS_FILE)
            raise RuntimeError(f"Invalid {BREEDS_FILE}: root not an object")

        breeds = data.get("breeds")
        if not isinstance(breeds, dict):
            _LOGGER.error("%s missing 'breeds' object", BREEDS_FILE)
            raise RuntimeError(f"Invalid {BREEDS_FILE}: 'breeds' must be an object")

        for bid, record in breeds.items():
            if not isinstance(record, dict) or not record.get("name"):
                _LOGGER.error("Breed %r in %s has no name", bid, BREEDS_FILE)
                raise RuntimeError(f"Invalid {BREEDS_FILE}: breed {bid!r} must be an object with a name")

        _LOGGER.info("Loaded %s version %s with %d breeds", BREEDS_FILE, data.get("version", "unknown"), len(breeds))
        self._data = data

    def _ensure_loaded(self) -> None:
        if self._data is None:
            _LOGGER.error("BreedLoader used before breeds were loaded")
            raise RuntimeError("Breeds not loaded")

    @staticmethod
    def _with_id(breed_id: str, record: Dict[str, Any]) -> Dict[str, Any]:
        out = dict(record)
        out["id"] = breed_id
        return out

    def get_breed(self, breed_id: str) -> Optional[Dict[str, Any]]:
        """Return a copy of the breed record with the given id, or None."""
        self._ensure_loaded()
        record = self._data["breeds"].get(breed_id)
        if record is None:
            return None
        return self._with_id(breed_id, record)

    def find_breed(self, query: str) -> Optional[Dict[str, Any]]:
        """Return the first breed whose name contains query (case-insensitive), or None.

        An exact name match wins over a partial one.
        """
        self._ensure_loaded()
        q = (query or "").strip().lower()
        if not q:
            return None
        partial: Optional[Dict[str, Any]] = None
        for bid, record in self._data["breeds"].items():
            name = str(record.get("name", "")).lower()
            if name == q:
                return self._with_id(bid, record)
            if partial is None and q in name:
                partial = self._with_id(bid, record)
        return partial

    def get_all_breeds(self) -> List[Dict[str, Any]]:
        """Return all breed records (copies) sorted by name."""
        self._ensure_loaded()
        breeds = [self._with_id(bid, record) for bid, record in self._data["breeds"].items()]
        breeds.sort(key=lambda b: b.get("name", ""))
        return breeds
