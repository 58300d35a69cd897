"""Time-of-day patterns, best day, and reflection themes."""

from __future__ import annotations

import re
from collections import Counter
from dataclasses import dataclass
from datetime import datetime

import flowstat.config as config
from flowstat.sessions import (
    SessionRecord, as_records, completed_with_timestamp, completion_rate, with_timestamp,
)

DAY_NAMES = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")
BUCKET_NAMES = tuple(name for name, _, _ in config.TIME_BUCKETS)

REFLECTION_STOPWORDS = frozenset("""
    a an the and or but in on at to for of with by from as is was are were be
    been being have has had do does did will would could should may might must
    can i you we they it this that what which who when where how why all each
    every both few more most other some such no not only own same so than too
    very just
""".split())

_NON_WORD = re.compile(r"[^\w\s]")


@dataclass(frozen=True)
class PeakWindow:
    label: str
    hours: str


def time_bucket(ts: datetime) -> str:
    """Name of the time-of-day bucket containing ``ts``."""
    for name, start, end in config.TIME_BUCKETS:
        if start <= ts.hour < end:
            return name
    return config.FALLBACK_BUCKET


def best_practice_sentence(sessions) -> str | None:
    """Best (duration, time bucket) cell by completion rate.

    A cell needs at least 3 sessions; the first cell in preset order, then
    bucket order, wins ties.
    """
    records = as_records(sessions)
    if len(completed_with_timestamp(records)) < config.MIN_SESSIONS_FOR_BEST_PRACTICE:
        return None

    cells: dict[tuple[int, str], list[SessionRecord]] = {}
    for r, ts in with_timestamp(records):
        cells.setdefault((r.duration_minutes, time_bucket(ts)), []).append(r)

    best = None
    for duration in config.DURATIONS:
        for bucket in BUCKET_NAMES:
            cell = cells.get((duration, bucket), [])
            if len(cell) < config.MIN_SESSIONS_FOR_BEST_PRACTICE:
                continue
            rate = completion_rate(cell)
            if best is None or rate > best[0]:
                best = (rate, duration, bucket)

    if best is None:
        return None
    rate, duration, bucket = best
    return f"Your {duration} min {bucket.capitalize()} sessions have {rate}% completion."


def best_day_of_week(sessions) -> str | None:
    """Weekday with the most completed sessions; earliest seen wins ties."""
    done = completed_with_timestamp(as_records(sessions))
    if len(done) < config.MIN_SESSIONS_FOR_PATTERNS:
        return None
    by_day: dict[int, int] = {}
    for _, ts in done:
        by_day[ts.weekday()] = by_day.get(ts.weekday(), 0) + 1
    best_day, best_count = None, 0
    for day, count in by_day.items():
        if count > best_count:
            best_day, best_count = day, count
    return DAY_NAMES[best_day]


def best_peak_window(sessions) -> PeakWindow | None:
    """Time bucket with the most completed sessions."""
    done = completed_with_timestamp(as_records(sessions))
    if len(done) < config.MIN_SESSIONS_FOR_PATTERNS:
        return None
    by_bucket = Counter(time_bucket(ts) for _, ts in done)
    best, best_count = BUCKET_NAMES[0], 0
    for name in BUCKET_NAMES:
        if by_bucket[name] > best_count:
            best, best_count = name, by_bucket[name]
    return PeakWindow(label=best.capitalize(), hours=config.BUCKET_HOURS[best])


_UNSET = object()


def success_pattern_sentence(sessions=None, best_day=_UNSET, peak_window=_UNSET) -> str | None:
    """Scheduling advice from the best day and peak window.

    Either insight can be passed in precomputed; otherwise it is derived
    from ``sessions``.
    """
    if best_day is _UNSET:
        best_day = best_day_of_week(sessions)
    if peak_window is _UNSET:
        peak_window = best_peak_window(sessions)

    if best_day and peak_window:
        return (f"Schedule focus on {best_day}s in the {peak_window.label.lower()} "
                f"({peak_window.hours}) for best results.")
    if best_day:
        return f"Your best day is {best_day}. Try scheduling focus then."
    if peak_window:
        return f"Your peak focus window is {peak_window.label} ({peak_window.hours})."
    return None


def reflection_themes(sessions) -> list[str]:
    """Top 5 recurring words across all reflections; first seen wins ties."""
    words: Counter[str] = Counter()
    for r in as_records(sessions):
        text = _NON_WORD.sub(" ", (r.reflection or "").lower())
        for w in text.split():
            if len(w) < config.REFLECTION_MIN_WORD_LENGTH or w in REFLECTION_STOPWORDS:
                continue
            words[w] += 1
    # sorted() is stable and Counter keeps insertion order
    ranked = sorted(words.items(), key=lambda kv: -kv[1])
    return [w for w, _ in ranked[:config.REFLECTION_THEME_COUNT]]


def session_type_label(session) -> str:
    """e.g. "Short Morning", "Long Evening"."""
    record = SessionRecord.from_dict(session)
    ts = record.timestamp
    bucket = time_bucket(ts) if ts is not None else config.FALLBACK_BUCKET
    duration = record.duration_minutes if record.duration_minutes is not None else config.DEFAULT_DURATION
    if duration <= 25:
        size = "Short"
    elif duration <= 45:
        size = "Medium"
    else:
        size = "Long"
    return f"{size} {bucket.capitalize()}"
