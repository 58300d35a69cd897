"""Completion statistics, week-over-week trends, and momentum.

Every function here is a pure transform over a snapshot of the session log:
no I/O, no mutation, and no exceptions for malformed records. Records whose
``completed_at`` is missing or unparseable still count toward raw totals but
are left out of anything keyed by date or week.

Functions that depend on "this week" take an optional ``now`` so callers
(and tests) can pin the evaluation instant.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from datetime import datetime

import flowstat.config as config
from flowstat.patterns import time_bucket
from flowstat.sessions import (
    as_records, completed_with_timestamp, completion_rate, with_timestamp,
)
from flowstat.streaks import best_week_count
from flowstat.weeks import recent_week_keys, week_key

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class DurationStats:
    total: int
    completed: int
    rate: int


@dataclass(frozen=True)
class CompletionStats:
    total: int
    completed: int
    overall_rate: int
    by_duration: dict[int, DurationStats] = field(default_factory=dict)


@dataclass(frozen=True)
class ThisWeekVsAverage:
    this_week: int
    four_week_avg: float
    trend: str  # "up" | "down" | "same"


# ── completion ─────────────────────────────────────────────────────────


def completion_stats(sessions) -> CompletionStats:
    """Overall and per-duration completion, counting every record."""
    records = as_records(sessions)
    total = len(records)
    completed = sum(1 for r in records if r.completed)

    durations = set(config.DURATIONS)
    durations.update(r.duration_minutes for r in records if r.duration_minutes is not None)
    by_duration = {}
    for d in sorted(durations):
        subset = [r for r in records if r.duration_minutes == d]
        done = sum(1 for r in subset if r.completed)
        by_duration[d] = DurationStats(len(subset), done, completion_rate(subset))

    return CompletionStats(
        total=total,
        completed=completed,
        overall_rate=completion_rate(records),
        by_duration=by_duration,
    )


def suggested_duration(sessions) -> int | None:
    """Preset with the best completion rate among presets tried at least twice."""
    stats = completion_stats(sessions)
    best, best_rate = None, 0
    for d in config.DURATIONS:
        by = stats.by_duration[d]
        if by.total < config.MIN_SESSIONS_FOR_SUGGESTION:
            continue
        if by.rate > best_rate:
            best, best_rate = d, by.rate
    return best


def completion_probability(sessions, duration: int, bucket: str | None = None) -> int | None:
    """Historical completion rate for a duration, optionally in one time bucket."""
    subset = [r for r in as_records(sessions) if r.duration_minutes == duration]
    if bucket is not None:
        subset = [r for r in subset if r.timestamp is not None and time_bucket(r.timestamp) == bucket]
    if not subset:
        return None
    return completion_rate(subset)


# ── weekly trends ──────────────────────────────────────────────────────


def completed_in_week(records, key: str) -> int:
    return sum(1 for _, ts in completed_with_timestamp(records) if week_key(ts) == key)


def sessions_in_week(records, key: str) -> list:
    """Timestamped records (any completion state) in one week."""
    return [r for r, ts in with_timestamp(records) if week_key(ts) == key]


def momentum(sessions, now: datetime | None = None) -> str | None:
    """Direction of this week's completed count against last week's.

    Returns "up", "down", "sustaining", or None when neither week has data.
    """
    records = as_records(sessions)
    this_key, last_key = recent_week_keys(2, now)
    this_week = completed_in_week(records, this_key)
    last_week = completed_in_week(records, last_key)
    if last_week == 0:
        return "up" if this_week > 0 else None
    if this_week > last_week:
        return "up"
    if this_week < last_week:
        return "down"
    return "sustaining"


def weekly_completion_counts(sessions, n: int, now: datetime | None = None) -> list[int]:
    """Completed sessions per week for the last ``n`` weeks, current week first."""
    keys = recent_week_keys(n, now)
    if not keys:
        return []
    counts = dict.fromkeys(keys, 0)
    for _, ts in completed_with_timestamp(as_records(sessions)):
        k = week_key(ts)
        if k in counts:
            counts[k] += 1
    return [counts[k] for k in keys]


def this_week_vs_average(sessions, now: datetime | None = None) -> ThisWeekVsAverage:
    counts = weekly_completion_counts(sessions, 4, now)
    this_week, last_week = counts[0], counts[1]
    # one decimal, halves rounded up
    avg = math.floor(sum(counts) * 10 / 4 + 0.5) / 10
    if this_week > last_week:
        trend = "up"
    elif this_week < last_week:
        trend = "down"
    else:
        trend = "same"
    return ThisWeekVsAverage(this_week=this_week, four_week_avg=avg, trend=trend)


def personal_baseline_copy(vs_average: ThisWeekVsAverage | None) -> str | None:
    if vs_average is None:
        return None
    if vs_average.this_week > vs_average.four_week_avg:
        return "You're above your 4-week average."
    if vs_average.this_week < vs_average.four_week_avg:
        return "You're below your 4-week average."
    return "You're at your 4-week average."


def attention_span_trend(sessions, now: datetime | None = None) -> str | None:
    """Average completed length over the last 4 weeks against the 4 before.

    Returns "up", "down", "stable" (under 2 minutes apart), or None with
    fewer than 4 completed sessions.
    """
    done = completed_with_timestamp(as_records(sessions))
    if len(done) < config.MIN_SESSIONS_FOR_ATTENTION_TREND:
        return None
    keys = recent_week_keys(8, now)
    recent_keys, older_keys = set(keys[:4]), set(keys[4:])

    recent, older = [], []
    for r, ts in done:
        if r.duration_minutes is None:
            continue
        k = week_key(ts)
        if k in recent_keys:
            recent.append(r.duration_minutes)
        elif k in older_keys:
            older.append(r.duration_minutes)

    recent_avg = sum(recent) / len(recent) if recent else 0
    older_avg = sum(older) / len(older) if older else 0
    diff = recent_avg - older_avg
    log.debug("attention span: recent %.1f min (%d), older %.1f min (%d)",
              recent_avg, len(recent), older_avg, len(older))
    if abs(diff) < config.ATTENTION_STABLE_MINUTES:
        return "stable"
    return "up" if diff > 0 else "down"


def regression_message(sessions, now: datetime | None = None) -> str | None:
    """Warn when this week's completion rate fell below last week's."""
    records = as_records(sessions)
    this_key, last_key = recent_week_keys(2, now)
    this_week = sessions_in_week(records, this_key)
    last_week = sessions_in_week(records, last_key)
    if not this_week or not last_week:
        return None
    this_rate = completion_rate(this_week)
    last_rate = completion_rate(last_week)
    if this_rate >= last_rate:
        return None
    return f"Your completion rate this week ({this_rate}%) is below last week ({last_rate}%)."


def milestone_message(sessions, now: datetime | None = None) -> str | None:
    """e.g. "3 more sessions to match your best week (8)." """
    records = as_records(sessions)
    best = best_week_count(records)
    if best <= 0:
        return None
    needed = best - completed_in_week(records, recent_week_keys(1, now)[0])
    if needed <= 0:
        return None
    plural = "" if needed == 1 else "s"
    return f"{needed} more session{plural} to match your best week ({best})."


def days_active_this_week(sessions, now: datetime | None = None) -> tuple[int, int]:
    """(days with a completed session in the current week, 7)."""
    this_key = recent_week_keys(1, now)[0]
    days = {ts.weekday() for _, ts in completed_with_timestamp(as_records(sessions))
            if week_key(ts) == this_key}
    return len(days), 7
