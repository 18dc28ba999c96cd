import dataclasses

import pytest

from custom_components.dog_walk_assistant.breed_profiles import (
    DEFAULT_NAME_TRAITS,
    BreedProfile,
    ENERGY_HIGH,
    ENERGY_LOW,
    ENERGY_MEDIUM,
    TRAIT_SIGHTHOUND,
    TraitClassifier,
    build_breed_profile,
)
from custom_components.dog_walk_assistant.unit_helpers import parse_range_average


def breed(name, group="", temperament="", height=None, weight=None):
    rec = {"name": name, "breed_group": group, "temperament": temperament}
    if height is not None:
        rec["height"] = {"imperial": height}
    if weight is not None:
        rec["weight"] = {"imperial": weight}
    return rec


PUG = breed("Pug", "Toy", "Docile, Clever, Charming, Stubborn, Sociable, Playful, Quiet, Attentive", "10 - 14", "14 - 18")
HUSKY = breed("Siberian Husky", "Working", "Outgoing, Friendly, Alert, Gentle, Intelligent", "20 - 23.5", "35 - 60")
GREYHOUND = breed("Greyhound", "Hound", "Affectionate, Athletic, Gentle, Intelligent, Quiet, Even Tempered", "27 - 30", "60 - 70")


def test_pug_is_brachycephalic_toy():
    p = build_breed_profile(PUG)
    assert p.flags.brachycephalic
    assert p.flags.toy_sized
    assert not p.flags.double_coat
    assert p.height_in == pytest.approx(12.0)
    # base 0.35 + brachy 0.35
    assert p.heat == pytest.approx(0.70)
    # base 0.35 + toy 0.25 + low height 0.10
    assert p.pavement == pytest.approx(0.70)
    assert p.humidity == pytest.approx(0.55)


def test_husky_double_coat_reduces_cold_sensitivity():
    p = build_breed_profile(HUSKY)
    assert p.flags.double_coat
    assert p.energy_band == ENERGY_HIGH
    assert p.endurance_minutes == 45
    assert p.cold == pytest.approx(0.20)
    assert p.heat == pytest.approx(0.60)


def test_greyhound_sighthound_and_athletic_temperament():
    p = build_breed_profile(GREYHOUND)
    assert p.flags.sighthound
    assert p.energy_band == ENERGY_HIGH
    assert p.cold == pytest.approx(0.60)
    assert p.wind == pytest.approx(0.40)


def test_energy_bands():
    assert build_breed_profile(breed("Beagle", "Hound", "Amiable, Gentle")).energy_band == ENERGY_MEDIUM
    assert build_breed_profile(breed("Chihuahua", "Toy", "Devoted, Alert")).energy_band == ENERGY_LOW
    assert build_breed_profile(breed("Chihuahua", "Toy", "Devoted, Alert")).endurance_minutes == 25
    # substring match: "non-sporting" contains "sporting"
    assert build_breed_profile(breed("English Bulldog", "Non-Sporting", "Docile")).energy_band == ENERGY_HIGH


def test_heavy_breed_gets_extra_heat_sensitivity():
    p = build_breed_profile(breed("Great Dane", "Working", "Friendly", "28 - 32", "110 - 175"))
    assert p.heat == pytest.approx(0.45)
    assert not p.flags.toy_sized


def test_missing_record_falls_back_to_neutral_profile():
    for rec in (None, {}, {"name": None, "height": "tall"}):
        p = build_breed_profile(rec)
        assert p.name == "Unknown"
        assert p.energy_band == ENERGY_LOW
        assert p.flags.active() == ()
        assert p.sensitivities() == BreedProfile().sensitivities()


def test_sensitivities_stay_in_unit_range():
    # every trait at once
    p = build_breed_profile(breed("Pug Husky Greyhound", "Toy", "", "8", "5"))
    for value in p.sensitivities().values():
        assert 0.0 <= value <= 1.0


def test_custom_classifier_rules():
    classifier = TraitClassifier(name_traits={TRAIT_SIGHTHOUND: ("lurcher",)})
    p = build_breed_profile(breed("Lurcher"), classifier)
    assert p.flags.sighthound
    assert not build_breed_profile(breed("Greyhound"), classifier).flags.sighthound


def test_as_dict_shape():
    d = build_breed_profile(PUG).as_dict()
    assert d["name"] == "Pug"
    assert set(d["sensitivities"]) == {"heat", "cold", "humidity", "uv", "wind", "rain", "pavement"}
    assert d["flags"]["brachycephalic"] is True


@pytest.mark.parametrize(
    "value,expected",
    [
        ("10 - 14", 12.0),
        ("under 28", 28.0),
        ("21.5 - 24", 22.75),
        (7, 7.0),
        (None, None),
        ("n/a", None),
        (True, None),
    ],
)
def test_parse_range_average(value, expected):
    assert parse_range_average(value) == expected


def test_default_name_traits_come_from_factory():
    field = next(f for f in dataclasses.fields(TraitClassifier) if f.name == "name_traits")
    assert field.default is dataclasses.MISSING
    assert TraitClassifier().name_traits is DEFAULT_NAME_TRAITS
    assert build_breed_profile(PUG, TraitClassifier()).flags.brachycephalic
