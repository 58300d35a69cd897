"""Burnout, workload, recovery, and the composite focus score."""

from __future__ import annotations

import math
from datetime import datetime

import flowstat.config as config
from flowstat.analytics import completed_in_week, completion_stats, momentum, sessions_in_week
from flowstat.sessions import as_records, completed_with_timestamp
from flowstat.weeks import local_date_key, local_now, recent_week_keys


def today_completed_count(sessions, now: datetime | None = None) -> int:
    today = local_date_key(local_now(now))
    return sum(1 for _, ts in completed_with_timestamp(as_records(sessions))
               if local_date_key(ts) == today)


def recovery_recommendation(today_completed: int) -> str | None:
    """Suggested break length after ``today_completed`` sessions today."""
    for threshold, rest in config.RECOVERY_STEPS:
        if today_completed >= threshold:
            return rest
    return None


def workload_warning(sessions, now: datetime | None = None) -> str | None:
    """At most one overcommitment warning; today's check wins over the week's."""
    records = as_records(sessions)
    if today_completed_count(records, now) >= config.WORKLOAD_TODAY_LIMIT:
        return "You've done a lot today. Consider resting."
    this_key = recent_week_keys(1, now)[0]
    if completed_in_week(records, this_key) >= config.WORKLOAD_WEEK_LIMIT:
        return "High volume this week. Balance with rest."
    return None


def burnout_risk(sessions, now: datetime | None = None) -> str | None:
    """Warn on a busy week whose completion rate dropped over 10 points."""
    records = as_records(sessions)
    this_key, last_key = recent_week_keys(2, now)
    this_week = sessions_in_week(records, this_key)
    if len(this_week) < config.BURNOUT_MIN_WEEK_SESSIONS:
        return None
    last_week = sessions_in_week(records, last_key)

    def rate(week):
        if not week:
            return 0.0
        return sum(1 for r in week if r.completed) / len(week) * 100

    if rate(this_week) >= rate(last_week) - config.BURNOUT_RATE_DROP:
        return None
    return "High activity this week with lower completion. Consider more rest."


def composite_focus_score(sessions, daily_streak: int, weekly_streak: int,
                          now: datetime | None = None) -> int:
    """0-100 blend of completion rate, momentum, and streak length."""
    overall_rate = completion_stats(sessions).overall_rate
    trend = config.SCORE_TREND_POINTS.get(momentum(sessions, now), config.SCORE_TREND_DEFAULT)
    streak = max(0, daily_streak or 0) * config.SCORE_DAILY_STREAK_POINTS \
        + max(0, weekly_streak or 0) * config.SCORE_WEEKLY_STREAK_POINTS
    score = overall_rate * config.SCORE_COMPLETION_WEIGHT + trend + min(config.SCORE_STREAK_CAP, streak)
    return min(100, max(0, math.floor(score + 0.5)))
