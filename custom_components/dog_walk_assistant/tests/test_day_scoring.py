from dataclasses import replace
from datetime import datetime, timedelta, timezone

import pytest

from custom_components.dog_walk_assistant.day_scoring import (
    BestNextHour,
    adaptive_threshold,
    build_windows,
    find_best_next_hour,
    find_current_index,
    score_day,
    time_preference,
    window_label,
)
from custom_components.dog_walk_assistant.walk_scoring import (
    DEFAULT_SCORING_CONFIG,
    DayConfig,
    ScoredHour,
    WalkSuggestion,
)

GOLDEN = {
    "name": "Golden Retriever",
    "breed_group": "Sporting",
    "temperament": "Intelligent, Kind, Reliable, Friendly, Trustworthy, Confident",
    "height": {"imperial": "21.5 - 24"},
    "weight": {"imperial": "55 - 75"},
}

START = datetime(2025, 6, 1, 0, 0, tzinfo=timezone.utc)


def make_payload(temps_f, humidity=50):
    """Open-Meteo style payload in °F / mph starting 2025-06-01T00:00 UTC."""
    times = [(START + timedelta(hours=i)).strftime("%Y-%m-%dT%H:%M") for i in range(len(temps_f))]
    n = len(times)
    return {
        "utc_offset_seconds": 0,
        "hourly_units": {"temperature_2m": "°F", "wind_speed_10m": "mph", "wind_gusts_10m": "mph"},
        "hourly": {
            "time": times,
            "temperature_2m": list(temps_f),
            "relative_humidity_2m": [humidity] * n,
            "uv_index": [0] * n,
            "precipitation_probability": [0] * n,
            "weathercode": [1] * n,
            "wind_speed_10m": [3] * n,
            "wind_gusts_10m": [8] * n,
            "cloudcover": [0] * n,
        },
    }


# six comfortable hours (shaped 7) then eighteen hot ones (shaped 4)
MIXED_DAY = make_payload([65.0] * 6 + [95.0] * 18)


def make_hours(scores, start=START):
    return [
        ScoredHour(
            timestamp=start + timedelta(hours=i),
            raw_score=float(s),
            shaped_score=s,
            reasons=(),
            suggestion=WalkSuggestion(pace="stroll", duration_minutes=20, pavement_f=70),
            index=i,
        )
        for i, s in enumerate(scores)
    ]


def test_mixed_day_windows_and_best_next():
    day = score_day(MIXED_DAY, GOLDEN, START)
    assert [h.shaped_score for h in day.hours] == [7] * 6 + [4] * 18
    assert day.threshold == pytest.approx(6.5)
    assert day.current_index == 0
    assert day.current.shaped_score == 7

    assert [(w.start_index, w.end_index) for w in day.windows] == [(0, 3), (4, 5)]
    top = day.windows[0]
    assert top.length == 4
    assert top.avg_score == 7.0
    assert top.label == "Good"
    assert top.goodness == pytest.approx(7.0 * 1.36)

    # 06:00-10:00 all tie at 4 x 1.0; the earliest wins
    assert day.best_next.hour.timestamp == START + timedelta(hours=6)
    assert day.best_next.time_preference == 1.0
    assert day.best_next.adjusted_score == pytest.approx(4.0)
    assert len(day.next_12) == 12


def test_every_window_is_at_most_four_hours():
    day = score_day(make_payload([65.0] * 10 + [95.0] * 14), GOLDEN, START)
    assert day.windows
    assert all(w.length <= 4 for w in day.windows)
    assert len(day.windows) <= 4


def test_mediocre_day_has_no_windows():
    day = score_day(make_payload([95.0] * 24), GOLDEN, START)
    assert day.threshold == pytest.approx(6.5)
    assert day.windows == ()
    assert day.best_next is not None


def test_uniform_day_has_no_windows_above_median():
    day = score_day(make_payload([65.0] * 24), GOLDEN, START)
    assert day.threshold == pytest.approx(7.4)
    assert day.windows == ()


def test_current_index_follows_now():
    day = score_day(MIXED_DAY, GOLDEN, START + timedelta(hours=5, minutes=30))
    assert day.current_index == 6
    assert day.current.shaped_score == 4
    assert day.next_12[0].index == 6
    assert len(day.next_12) == 12


def test_stale_forecast_uses_first_hour():
    day = score_day(MIXED_DAY, GOLDEN, START + timedelta(days=3))
    assert day.current_index == 0
    assert day.current is day.hours[0]


def test_scoring_is_idempotent():
    now = START + timedelta(hours=2)
    assert score_day(MIXED_DAY, GOLDEN, now).as_dict() == score_day(MIXED_DAY, GOLDEN, now).as_dict()


def test_empty_forecast_gives_empty_day():
    day = score_day({"hourly": {"time": []}}, GOLDEN, START)
    assert day.current is None
    assert day.best_next is None
    assert day.windows == ()
    assert day.as_dict()["current"] is None
    assert day.profile.name == "Golden Retriever"


def test_trim_weak_edges():
    hours = make_hours([0, 6, 7, 7, 6, 0])
    windows = build_windows(hours, 6.0)
    assert [(w.start_index, w.end_index) for w in windows] == [(2, 3)]


def test_long_run_is_split_and_ranked():
    hours = make_hours([7] * 9)
    windows = build_windows(hours, 6.5)
    assert [(w.start_index, w.length) for w in windows] == [(0, 4), (4, 4), (8, 1)]


def test_at_most_four_windows_in_chronological_order_on_ties():
    hours = make_hours([8, 0, 8, 0, 8, 0, 8, 0, 8])
    windows = build_windows(hours, 6.5)
    assert [w.start_index for w in windows] == [0, 2, 4, 6]
    assert all(w.label == "Great" for w in windows)


def test_perfect_day_still_has_windows():
    scores = [10] * 6
    threshold = adaptive_threshold(scores)
    assert threshold == 10
    assert len(build_windows(make_hours(scores), threshold)) == 2


def test_adaptive_threshold_floor():
    assert adaptive_threshold([3, 4, 5]) == pytest.approx(6.5)
    assert adaptive_threshold([8, 8, 9]) == pytest.approx(8.4)
    assert adaptive_threshold([]) == pytest.approx(6.5)


def test_window_labels():
    assert window_label(8.0) == "Great"
    assert window_label(7.0) == "Good"
    assert window_label(6.9) == "Okay"


@pytest.mark.parametrize(
    "hour,pref",
    [(6, 1.0), (10, 1.0), (11, 0.7), (16, 0.7), (17, 0.9), (20, 0.9), (21, 0.5), (23, 0.5), (0, 0.3), (5, 0.3)],
)
def test_time_preference(hour, pref):
    assert time_preference(hour) == pref


def test_best_next_prefers_morning_over_late_night():
    # 7 at 03:00 -> 2.1, 5 at 07:00 -> 5.0
    hours = make_hours([0, 0, 0, 7, 0, 0, 0, 5])
    best = find_best_next_hour(hours, 0)
    assert isinstance(best, BestNextHour)
    assert best.hour.index == 7


def test_best_next_only_looks_24_hours_ahead():
    # equal scores everywhere: the first morning hour beats the late-night ones
    hours = make_hours([1] * 30 + [10])
    best = find_best_next_hour(hours, 0)
    assert best.hour.index == 6
    assert best.time_preference == 1.0
    assert best.adjusted_score == pytest.approx(1.0)


def test_find_current_index():
    hours = make_hours([5, 5, 5])
    assert find_current_index(hours, START - timedelta(hours=1)) == 0
    assert find_current_index(hours, START + timedelta(minutes=1)) == 1
    assert find_current_index(hours, START + timedelta(hours=5)) == 0


def test_naive_now_is_treated_as_utc():
    day = score_day(MIXED_DAY, GOLDEN, datetime(2025, 6, 1, 5, 30))
    assert day.current_index == 6


# 03:00 has no temperature and is dropped; every other hour is present
GAPPY_DAY = make_payload([65.0] * 3 + [None] + [65.0] + [95.0] * 19)


def test_missing_hour_splits_window():
    day = score_day(GAPPY_DAY, GOLDEN, START)
    assert len(day.hours) == 23
    assert [h.shaped_score for h in day.hours[:5]] == [7, 7, 7, 7, 4]

    assert [(w.start_index, w.end_index) for w in day.windows] == [(0, 2), (3, 3)]
    first, second = day.windows
    assert first.length == 3
    assert first.end - first.start == timedelta(hours=2)
    assert second.start == START + timedelta(hours=4)
    assert second.length == 1


def test_lookahead_is_measured_in_clock_hours():
    day = score_day(GAPPY_DAY, GOLDEN, START)
    assert len(day.next_12) == 11
    assert all(h.timestamp < START + timedelta(hours=12) for h in day.next_12)


def test_best_next_skips_hours_past_the_lookahead():
    hours = make_hours([1] * 3 + [0] * 20)
    # drop 10:00 so an hour of the next day sits among the first 24 list entries
    hours = hours[:10] + hours[11:] + make_hours([10], start=START + timedelta(hours=24))
    best = find_best_next_hour(hours, 0)
    assert best.hour.timestamp < START + timedelta(hours=24)
    assert best.hour.shaped_score == 1


def test_day_policy_is_configurable():
    strict = replace(DEFAULT_SCORING_CONFIG, day=DayConfig(min_threshold=7.5, max_window_hours=2))
    day = score_day(MIXED_DAY, GOLDEN, START, config=strict)
    assert day.threshold == pytest.approx(7.5)
    assert day.windows == ()

    loose = replace(DEFAULT_SCORING_CONFIG, day=DayConfig(max_window_hours=2, max_windows=2))
    day = score_day(MIXED_DAY, GOLDEN, START, config=loose)
    assert [(w.start_index, w.end_index) for w in day.windows] == [(0, 1), (2, 3)]


def test_time_preference_table_is_configurable():
    day = DayConfig(time_preferences=((0, 23, 0.8),))
    assert time_preference(3, day) == 0.8
    assert time_preference(3) == 0.3
