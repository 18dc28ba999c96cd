"""Breed profile builder for Dog Walk Assistant.

Turns a raw breed record (TheDogAPI shape) into a BreedProfile: an energy band,
a base walk duration and a set of weather sensitivities in [0, 1]. Trait
matching is data driven: a TraitClassifier maps each trait tag to the name
patterns that select it, so rules can be swapped out in tests.

Building a profile never raises; missing or unparsable fields fall back to the
neutral defaults (no traits, low energy).
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple

from . import unit_helpers

_LOGGER = logging.getLogger(__name__)

ENERGY_LOW = "low"
ENERGY_MEDIUM = "medium"
ENERGY_HIGH = "high"

ENDURANCE_MINUTES = {
    ENERGY_HIGH: 45,
    ENERGY_MEDIUM: 35,
    ENERGY_LOW: 25,
}

TRAIT_BRACHYCEPHALIC = "brachycephalic"
TRAIT_DOUBLE_COAT = "double_coat"
TRAIT_SIGHTHOUND = "sighthound"
TRAIT_TOY_SIZED = "toy_sized"

DEFAULT_NAME_TRAITS: Mapping[str, Tuple[str, ...]] = MappingProxyType({
    TRAIT_BRACHYCEPHALIC: (
        "bulldog", "french bulldog", "english bulldog", "american bulldog", "pug",
        "boxer", "pekingese", "shih tzu", "boston terrier", "mastiff",
        "cavalier king charles spaniel",
    ),
    TRAIT_DOUBLE_COAT: (
        "siberian husky", "alaskan malamute", "samoyed", "akita", "shiba inu",
        "bernese mountain dog", "newfoundland", "shepherd", "sheepdog", "spitz",
        "husky", "malamute", "bernese",
    ),
    TRAIT_SIGHTHOUND: (
        "greyhound", "whippet", "saluki", "borzoi", "italian greyhound", "azawakh", "sloughi",
    ),
})

# energy band -> (breed group patterns, temperament patterns); checked high before medium
DEFAULT_ENERGY_RULES: Tuple[Tuple[str, Tuple[str, ...], Tuple[str, ...]], ...] = (
    (ENERGY_HIGH, ("herding", "working", "sporting"), ("active", "energetic", "playful", "athletic")),
    (ENERGY_MEDIUM, ("hound", "terrier", "non-sporting", "pinscher", "schnauzer"), ()),
)

TOY_MAX_HEIGHT_IN = 12.0
TOY_MAX_WEIGHT_LB = 12.0
HEAVY_MIN_WEIGHT_LB = 80.0
LOW_MAX_HEIGHT_IN = 14.0

BASE_SENSITIVITIES: Mapping[str, float] = MappingProxyType({
    "heat": 0.35,
    "cold": 0.35,
    "humidity": 0.30,
    "uv": 0.25,
    "wind": 0.25,
    "rain": 0.25,
    "pavement": 0.35,
})

# additive sensitivity adjustments per trait flag
TRAIT_ADJUSTMENTS: Mapping[str, Mapping[str, float]] = MappingProxyType({
    TRAIT_BRACHYCEPHALIC: {"heat": 0.35, "humidity": 0.25},
    TRAIT_DOUBLE_COAT: {"heat": 0.25, "cold": -0.15},
    TRAIT_SIGHTHOUND: {"cold": 0.25, "wind": 0.15},
    TRAIT_TOY_SIZED: {"cold": 0.20, "pavement": 0.25, "wind": 0.10},
})


def _clamp01(x: float) -> float:
    return max(0.0, min(1.0, float(x)))


@dataclass(frozen=True)
class TraitClassifier:
    """Substring classifier: trait tag -> name patterns, energy band -> group/temperament patterns."""

    name_traits: Mapping[str, Tuple[str, ...]] = field(default_factory=lambda: DEFAULT_NAME_TRAITS)
    energy_rules: Tuple[Tuple[str, Tuple[str, ...], Tuple[str, ...]], ...] = DEFAULT_ENERGY_RULES
    default_energy: str = ENERGY_LOW

    def name_flags(self, name: str) -> Dict[str, bool]:
        """Return {trait: matched} for every trait tag, matching lower-cased substrings of name."""
        lowered = (name or "").lower()
        return {
            trait: any(p in lowered for p in patterns)
            for trait, patterns in self.name_traits.items()
        }

    def energy_band(self, group: str, temperament: str) -> str:
        group_l = (group or "").lower()
        temperament_l = (temperament or "").lower()
        for band, group_patterns, temperament_patterns in self.energy_rules:
            if any(p in group_l for p in group_patterns):
                return band
            if any(p in temperament_l for p in temperament_patterns):
                return band
        return self.default_energy


DEFAULT_CLASSIFIER = TraitClassifier()


@dataclass(frozen=True)
class BreedFlags:
    brachycephalic: bool = False
    double_coat: bool = False
    sighthound: bool = False
    toy_sized: bool = False

    def active(self) -> Tuple[str, ...]:
        return tuple(k for k, v in self.as_dict().items() if v)

    def as_dict(self) -> Dict[str, bool]:
        return {
            TRAIT_BRACHYCEPHALIC: self.brachycephalic,
            TRAIT_DOUBLE_COAT: self.double_coat,
            TRAIT_SIGHTHOUND: self.sighthound,
            TRAIT_TOY_SIZED: self.toy_sized,
        }


@dataclass(frozen=True)
class BreedProfile:
    """Per-breed sensitivity bundle used to weight weather penalties."""

    name: str = "Unknown"
    energy_band: str = ENERGY_LOW
    endurance_minutes: int = ENDURANCE_MINUTES[ENERGY_LOW]
    heat: float = BASE_SENSITIVITIES["heat"]
    cold: float = BASE_SENSITIVITIES["cold"]
    humidity: float = BASE_SENSITIVITIES["humidity"]
    uv: float = BASE_SENSITIVITIES["uv"]
    wind: float = BASE_SENSITIVITIES["wind"]
    rain: float = BASE_SENSITIVITIES["rain"]
    pavement: float = BASE_SENSITIVITIES["pavement"]
    flags: BreedFlags = field(default_factory=BreedFlags)
    height_in: Optional[float] = None
    weight_lb: Optional[float] = None

    @property
    def is_high_energy(self) -> bool:
        return self.energy_band == ENERGY_HIGH

    def sensitivities(self) -> Dict[str, float]:
        return {k: getattr(self, k) for k in BASE_SENSITIVITIES}

    def as_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "energy_band": self.energy_band,
            "endurance_minutes": self.endurance_minutes,
            "sensitivities": {k: round(v, 3) for k, v in self.sensitivities().items()},
            "flags": self.flags.as_dict(),
            "height_in": self.height_in,
            "weight_lb": self.weight_lb,
        }


def _nested_imperial(record: Mapping[str, Any], key: str) -> Any:
    block = record.get(key)
    if isinstance(block, Mapping):
        return block.get("imperial")
    return block


def build_breed_profile(record: Optional[Mapping[str, Any]], classifier: TraitClassifier = DEFAULT_CLASSIFIER) -> BreedProfile:
    """Build a BreedProfile from a raw breed record.

    record keys used: name, breed_group, temperament, height.imperial, weight.imperial.
    """
    if not isinstance(record, Mapping):
        record = {}

    raw_name = record.get("name") or ""
    name = str(raw_name)
    group = str(record.get("breed_group") or "")
    temperament = str(record.get("temperament") or "")

    height_in = unit_helpers.parse_range_average(_nested_imperial(record, "height"))
    weight_lb = unit_helpers.parse_range_average(_nested_imperial(record, "weight"))

    matched = classifier.name_flags(name)
    toy_sized = bool(
        (height_in is not None and height_in <= TOY_MAX_HEIGHT_IN)
        or (weight_lb is not None and weight_lb <= TOY_MAX_WEIGHT_LB)
    )
    flags = BreedFlags(
        brachycephalic=matched.get(TRAIT_BRACHYCEPHALIC, False),
        double_coat=matched.get(TRAIT_DOUBLE_COAT, False),
        sighthound=matched.get(TRAIT_SIGHTHOUND, False),
        toy_sized=toy_sized,
    )

    energy = classifier.energy_band(group, temperament)

    sens = dict(BASE_SENSITIVITIES)
    for trait, is_set in flags.as_dict().items():
        if not is_set:
            continue
        for key, delta in TRAIT_ADJUSTMENTS.get(trait, {}).items():
            sens[key] += delta
    if weight_lb is not None and weight_lb >= HEAVY_MIN_WEIGHT_LB:
        sens["heat"] += 0.10
    if height_in is not None and height_in <= LOW_MAX_HEIGHT_IN:
        sens["pavement"] += 0.10

    profile = BreedProfile(
        name=name or "Unknown",
        energy_band=energy,
        endurance_minutes=ENDURANCE_MINUTES.get(energy, ENDURANCE_MINUTES[ENERGY_LOW]),
        flags=flags,
        height_in=height_in,
        weight_lb=weight_lb,
        **{k: _clamp01(v) for k, v in sens.items()},
    )
    _LOGGER.debug(
        "Built breed profile for %s: energy=%s traits=%s",
        profile.name,
        profile.energy_band,
        flags.active(),
    )
    return profile
