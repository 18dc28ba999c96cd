"""
Day-level walk planning: score every forecast hour, find walk windows and the best next hour.

score_day() is a pure function of (weather payload, breed record, now). The
reference instant is passed in explicitly so one refresh uses a single "now"
for both the current-hour lookup and the best-next lookahead.

Hours whose temperature is missing are dropped by the formatter, so list
neighbours are not always clock neighbours. Windows break at such gaps and the
lookahead spans are measured on timestamps, not list positions.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from statistics import median
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from .breed_profiles import BreedProfile, TraitClassifier, DEFAULT_CLASSIFIER, build_breed_profile
from .data_formatter import DataFormatter
from .walk_scoring import (
    DEFAULT_SCORING_CONFIG,
    DayConfig,
    ScoredHour,
    ScoringConfig,
    score_hour,
    time_label,
)

_LOGGER = logging.getLogger(__name__)

DEFAULT_DAY_CONFIG = DEFAULT_SCORING_CONFIG.day

LABEL_GREAT = "Great"
LABEL_GOOD = "Good"
LABEL_OKAY = "Okay"


@dataclass(frozen=True)
class Window:
    start_index: int
    end_index: int
    length: int
    avg_score: float
    best: int
    label: str
    goodness: float
    start: datetime
    end: datetime

    def as_dict(self) -> Dict[str, Any]:
        return {
            "start_index": self.start_index,
            "end_index": self.end_index,
            "length": self.length,
            "avg_score": self.avg_score,
            "best": self.best,
            "label": self.label,
            "goodness": round(self.goodness, 3),
            "start": self.start.isoformat(),
            "end": self.end.isoformat(),
            "start_label": time_label(self.start),
            "end_label": time_label(self.end),
        }


@dataclass(frozen=True)
class BestNextHour:
    hour: ScoredHour
    time_preference: float
    adjusted_score: float

    def as_dict(self) -> Dict[str, Any]:
        out = self.hour.as_dict()
        out["time_preference"] = self.time_preference
        out["adjusted_score"] = round(self.adjusted_score, 3)
        return out


@dataclass(frozen=True)
class DayScore:
    profile: BreedProfile
    hours: Tuple[ScoredHour, ...] = ()
    current_index: int = 0
    threshold: float = DEFAULT_DAY_CONFIG.min_threshold
    current: Optional[ScoredHour] = None
    best_next: Optional[BestNextHour] = None
    windows: Tuple[Window, ...] = ()
    next_12: Tuple[ScoredHour, ...] = field(default=())

    def as_dict(self) -> Dict[str, Any]:
        return {
            "profile": self.profile.as_dict(),
            "current_index": self.current_index,
            "threshold": round(self.threshold, 2),
            "current": self.current.as_dict() if self.current else None,
            "best_next": self.best_next.as_dict() if self.best_next else None,
            "windows": [w.as_dict() for w in self.windows],
            "next_12": [h.as_dict() for h in self.next_12],
        }


def window_label(avg: float) -> str:
    if avg >= 8:
        return LABEL_GREAT
    if avg >= 7:
        return LABEL_GOOD
    return LABEL_OKAY


def time_preference(hour_of_day: int, day: DayConfig = DEFAULT_DAY_CONFIG) -> float:
    for first, last, pref in day.time_preferences:
        if first <= hour_of_day <= last:
            return pref
    return day.late_night_preference


def adaptive_threshold(
    shaped_scores: Sequence[float],
    max_score: float = DEFAULT_SCORING_CONFIG.max_score,
    day: DayConfig = DEFAULT_DAY_CONFIG,
) -> float:
    """max(6.5, median + 0.4), never above the top of the score scale."""
    if not shaped_scores:
        return day.min_threshold
    return min(max_score, max(day.min_threshold, median(shaped_scores) + day.threshold_margin))


def find_current_index(hours: Sequence[ScoredHour], now: datetime) -> int:
    """First hour at or after now; 0 when the forecast starts later or is entirely in the past."""
    for i, h in enumerate(hours):
        if h.timestamp >= now:
            return i
    return 0


def hours_within(hours: Sequence[ScoredHour], start_index: int, span: timedelta) -> List[ScoredHour]:
    """Hours from start_index whose timestamp is less than span after the start hour."""
    if not 0 <= start_index < len(hours):
        return []
    horizon = hours[start_index].timestamp + span
    out: List[ScoredHour] = []
    for h in hours[start_index:]:
        if h.timestamp >= horizon:
            break
        out.append(h)
    return out


def _make_window(hours: Sequence[ScoredHour], i0: int, i1: int, day: DayConfig) -> Window:
    chunk = hours[i0:i1 + 1]
    avg = round(sum(h.shaped_score for h in chunk) / len(chunk), 1)
    length = i1 - i0 + 1
    return Window(
        start_index=i0,
        end_index=i1,
        length=length,
        avg_score=avg,
        best=max(h.shaped_score for h in chunk),
        label=window_label(avg),
        goodness=avg * (1 + (length - 1) * day.length_bonus),
        start=hours[i0].timestamp,
        end=hours[i1].timestamp,
    )


def build_windows(
    hours: Sequence[ScoredHour],
    threshold: float,
    max_score: float = DEFAULT_SCORING_CONFIG.max_score,
    day: DayConfig = DEFAULT_DAY_CONFIG,
) -> List[Window]:
    """Detect runs at/above threshold, trim weak edges, split into <= 4 hour chunks, rank by goodness.

    A run only continues across consecutive clock hours; a missing hour ends it.
    """
    runs: List[Tuple[int, int]] = []
    start: Optional[int] = None
    for i, h in enumerate(hours):
        if start is not None and h.timestamp - hours[i - 1].timestamp > day.hour_step:
            runs.append((start, i - 1))
            start = None
        if h.shaped_score >= threshold:
            if start is None:
                start = i
        elif start is not None:
            runs.append((start, i - 1))
            start = None
    if start is not None:
        runs.append((start, len(hours) - 1))

    edge = min(max_score, threshold + day.trim_margin)
    windows: List[Window] = []
    for i0, i1 in runs:
        while i0 <= i1 and hours[i0].shaped_score < edge:
            i0 += 1
        while i1 >= i0 and hours[i1].shaped_score < edge:
            i1 -= 1
        for a in range(i0, i1 + 1, day.max_window_hours):
            windows.append(_make_window(hours, a, min(i1, a + day.max_window_hours - 1), day))

    windows.sort(key=lambda w: w.goodness, reverse=True)
    return windows[:day.max_windows]


def find_best_next_hour(
    hours: Sequence[ScoredHour],
    current_index: int,
    day: DayConfig = DEFAULT_DAY_CONFIG,
) -> Optional[BestNextHour]:
    """Best of the next 24 hours by shaped score x time-of-day preference.

    The scan keeps the first hour with a strictly greater adjusted score, so on
    ties the earlier hour wins.
    """
    best: Optional[BestNextHour] = None
    best_score = -1.0
    for h in hours_within(hours, current_index, day.best_next_lookahead):
        pref = time_preference(h.timestamp.hour, day)
        adjusted = h.shaped_score * pref
        if adjusted > best_score:
            best_score = adjusted
            best = BestNextHour(hour=h, time_preference=pref, adjusted_score=adjusted)
    return best


def score_hours(
    weather: Mapping[str, Any],
    profile: BreedProfile,
    config: ScoringConfig = DEFAULT_SCORING_CONFIG,
    formatter: Optional[DataFormatter] = None,
) -> List[ScoredHour]:
    formatted = (formatter or DataFormatter()).format(weather)
    return [
        score_hour(sample, sun, profile, config, index=i)
        for i, (sample, sun) in enumerate(zip(formatted.samples, formatted.sun_times))
    ]


def score_day(
    weather: Mapping[str, Any],
    breed_record: Optional[Mapping[str, Any]],
    now: datetime,
    config: ScoringConfig = DEFAULT_SCORING_CONFIG,
    formatter: Optional[DataFormatter] = None,
    classifier: TraitClassifier = DEFAULT_CLASSIFIER,
) -> DayScore:
    """Score a forecast for a breed relative to the reference instant now (naive values are taken as UTC)."""
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    profile = build_breed_profile(breed_record, classifier)
    hours = score_hours(weather, profile, config, formatter)
    if not hours:
        _LOGGER.debug("No forecast hours to score for %s", profile.name)
        return DayScore(profile=profile)

    threshold = adaptive_threshold([h.shaped_score for h in hours], config.max_score, config.day)
    windows = build_windows(hours, threshold, config.max_score, config.day)
    current_index = find_current_index(hours, now)
    best_next = find_best_next_hour(hours, current_index, config.day)

    _LOGGER.debug(
        "Scored %d hours for %s: threshold=%.2f windows=%d current_index=%d",
        len(hours),
        profile.name,
        threshold,
        len(windows),
        current_index,
    )
    return DayScore(
        profile=profile,
        hours=tuple(hours),
        current_index=current_index,
        threshold=threshold,
        current=hours[current_index],
        best_next=best_next,
        windows=tuple(windows),
        next_12=tuple(hours_within(hours, current_index, config.day.next_hours)),
    )
