"""Daily and weekly streaks over completed sessions."""

from __future__ import annotations

from collections import Counter
from datetime import datetime, timedelta

from flowstat.sessions import as_records, completed_with_timestamp
from flowstat.weeks import (
    local_date_key, local_now, previous_day_key, previous_week_key, week_key,
)


def _count_run(keys: list[str], step) -> int:
    """Length of the run of consecutive keys starting at the newest one."""
    count = 0
    expected = keys[0]
    for key in keys:
        if key != expected:
            break
        count += 1
        expected = step(expected)
    return count


def daily_streak(sessions, now: datetime | None = None) -> int:
    """Consecutive days with a completed session, ending today or yesterday.

    A last active day older than yesterday breaks the streak (returns 0).
    """
    done = completed_with_timestamp(as_records(sessions))
    if not done:
        return 0
    keys = sorted({local_date_key(ts) for _, ts in done}, reverse=True)

    today = local_now(now)
    anchors = {local_date_key(today), local_date_key(today - timedelta(days=1))}
    if keys[0] not in anchors:
        return 0
    return _count_run(keys, previous_day_key)


def weekly_streak(sessions, now: datetime | None = None) -> int:
    """Consecutive weeks with a completed session, ending at the current week."""
    done = completed_with_timestamp(as_records(sessions))
    if not done:
        return 0
    keys = sorted({week_key(ts) for _, ts in done}, reverse=True)
    if keys[0] != week_key(local_now(now)):
        return 0
    return _count_run(keys, previous_week_key)


def best_week_count(sessions) -> int:
    """Most completed sessions in any single week."""
    by_week = Counter(week_key(ts) for _, ts in completed_with_timestamp(as_records(sessions)))
    return max(by_week.values(), default=0)
