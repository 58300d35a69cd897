"""Tests for flowstat.streaks: daily/weekly streaks and best week."""

from datetime import datetime, timedelta

from flowstat.streaks import best_week_count, daily_streak, weekly_streak

NOW = datetime(2026, 10, 14, 15, 0)  # Wednesday, week 2026-W42


def _session(when: datetime, minutes: int = 25, completed: bool = True) -> dict:
    return {"duration_minutes": minutes, "completed_at": when.isoformat(), "completed": completed}


def _days_ago(n: int, hour: int = 10) -> datetime:
    return (NOW - timedelta(days=n)).replace(hour=hour)


class TestDailyStreak:
    def test_empty(self):
        assert daily_streak([], NOW) == 0
        assert daily_streak(None, NOW) == 0

    def test_single_session_today(self):
        assert daily_streak([_session(_days_ago(0))], NOW) == 1

    def test_single_session_yesterday(self):
        assert daily_streak([_session(_days_ago(1))], NOW) == 1

    def test_two_days_ago_breaks_streak(self):
        assert daily_streak([_session(_days_ago(2))], NOW) == 0

    def test_consecutive_days(self):
        sessions = [_session(_days_ago(n)) for n in (0, 1, 2, 3)]
        assert daily_streak(sessions, NOW) == 4

    def test_multiple_sessions_same_day_count_once(self):
        sessions = [_session(_days_ago(0, h)) for h in (8, 12, 20)] + [_session(_days_ago(1))]
        assert daily_streak(sessions, NOW) == 2

    def test_gap_stops_count(self):
        sessions = [_session(_days_ago(n)) for n in (0, 1, 3, 4, 5)]
        assert daily_streak(sessions, NOW) == 2

    def test_streak_from_yesterday_backwards(self):
        sessions = [_session(_days_ago(n)) for n in (1, 2, 3)]
        assert daily_streak(sessions, NOW) == 3

    def test_stopped_sessions_ignored(self):
        sessions = [_session(_days_ago(0), completed=False), _session(_days_ago(1))]
        assert daily_streak(sessions, NOW) == 1
        assert daily_streak([_session(_days_ago(0), completed=False)], NOW) == 0

    def test_invalid_timestamps_ignored(self):
        sessions = [
            {"duration_minutes": 25, "completed_at": "not-a-date"},
            {"duration_minutes": 25},
            _session(_days_ago(0)),
        ]
        assert daily_streak(sessions, NOW) == 1

    def test_order_does_not_matter(self):
        sessions = [_session(_days_ago(n)) for n in (2, 0, 1)]
        assert daily_streak(sessions, NOW) == 3

    def test_crosses_month_boundary(self):
        now = datetime(2026, 3, 2, 9, 0)
        sessions = [_session(datetime(2026, 2, 27, 9)), _session(datetime(2026, 2, 28, 9)),
                    _session(datetime(2026, 3, 1, 9)), _session(datetime(2026, 3, 2, 8))]
        assert daily_streak(sessions, now) == 4


class TestWeeklyStreak:
    def test_empty(self):
        assert weekly_streak([], NOW) == 0

    def test_current_week_only(self):
        assert weekly_streak([_session(_days_ago(0))], NOW) == 1

    def test_previous_week_only_is_zero(self):
        assert weekly_streak([_session(_days_ago(7))], NOW) == 0

    def test_consecutive_weeks(self):
        sessions = [_session(_days_ago(7 * n)) for n in (0, 1, 2)]
        assert weekly_streak(sessions, NOW) == 3

    def test_gap_week_stops_count(self):
        sessions = [_session(_days_ago(7 * n)) for n in (0, 1, 3)]
        assert weekly_streak(sessions, NOW) == 2

    def test_monday_and_previous_sunday_are_different_weeks(self):
        monday = datetime(2026, 10, 12, 9)
        sunday = datetime(2026, 10, 11, 21)
        assert weekly_streak([_session(monday), _session(sunday)], NOW) == 2

    def test_across_new_year(self):
        now = datetime(2026, 1, 2, 12)  # Friday, 2026-W01
        sessions = [
            _session(datetime(2026, 1, 1, 9)),    # 2026-W01
            _session(datetime(2025, 12, 30, 9)),  # 2025-W53
            _session(datetime(2025, 12, 24, 9)),  # 2025-W52
        ]
        assert weekly_streak(sessions, now) == 3


class TestBestWeekCount:
    def test_empty(self):
        assert best_week_count([]) == 0

    def test_picks_busiest_week(self):
        sessions = [_session(_days_ago(0, h)) for h in (8, 9)]
        sessions += [_session(_days_ago(7, h)) for h in (8, 9, 10, 11)]
        sessions += [_session(_days_ago(14))]
        assert best_week_count(sessions) == 4

    def test_excludes_stopped_and_invalid(self):
        sessions = [
            _session(_days_ago(0), completed=False),
            {"duration_minutes": 25, "completed_at": "not-a-date"},
            _session(_days_ago(0)),
        ]
        assert best_week_count(sessions) == 1
