"""Tests for flowstat.risk: recovery, workload, burnout, composite score."""

from datetime import datetime, timedelta

import pytest

from flowstat.risk import (
    burnout_risk, composite_focus_score, recovery_recommendation,
    today_completed_count, workload_warning,
)

NOW = datetime(2026, 10, 14, 15, 0)  # Wednesday, week 2026-W42


def _session(days_ago: int = 0, hour: int = 10, completed: bool = True) -> dict:
    when = (NOW - timedelta(days=days_ago)).replace(hour=hour)
    return {"duration_minutes": 25, "completed_at": when.isoformat(), "completed": completed}


class TestRecovery:
    @pytest.mark.parametrize("count,expected", [
        (0, None), (2, None), (3, "5 min"), (4, "15 min"), (5, "15 min"), (6, "30 min"), (11, "30 min"),
    ])
    def test_steps(self, count, expected):
        assert recovery_recommendation(count) == expected


class TestTodayCount:
    def test_counts_completed_today_only(self):
        sessions = [_session(0), _session(0, completed=False), _session(1),
                    {"duration_minutes": 25, "completed_at": "not-a-date"}]
        assert today_completed_count(sessions, NOW) == 1


class TestWorkload:
    def test_none(self):
        assert workload_warning([_session(0)] * 3, NOW) is None

    def test_today_takes_precedence(self):
        sessions = [_session(0, hour=8 + i) for i in range(6)] + [_session(1)] * 20
        assert workload_warning(sessions, NOW) == "You've done a lot today. Consider resting."

    def test_week_volume(self):
        # Monday and Tuesday of the current week
        sessions = [_session(1)] * 10 + [_session(2)] * 10
        assert workload_warning(sessions, NOW) == "High volume this week. Balance with rest."

    def test_last_week_volume_ignored(self):
        assert workload_warning([_session(7)] * 25, NOW) is None


class TestBurnout:
    def test_needs_five_sessions_this_week(self):
        sessions = [_session(0, completed=False)] * 4 + [_session(7)] * 5
        assert burnout_risk(sessions, NOW) is None

    def test_rate_drop_over_ten_points(self):
        sessions = [_session(0)] * 3 + [_session(0, completed=False)] * 2 + [_session(7)] * 4
        # 60% this week vs 100% last week
        assert burnout_risk(sessions, NOW) == (
            "High activity this week with lower completion. Consider more rest."
        )

    def test_drop_of_exactly_ten_points_is_fine(self):
        sessions = (
            [_session(0)] * 8 + [_session(0, completed=False)] * 2
            + [_session(7)] * 5
        )
        # 80% this week vs 100% last week: 20 point drop
        assert burnout_risk(sessions, NOW) is not None
        sessions = (
            [_session(0)] * 9 + [_session(0, completed=False)]
            + [_session(7)] * 5
        )
        # 90% vs 100%: exactly 10 points
        assert burnout_risk(sessions, NOW) is None

    def test_no_last_week_data(self):
        sessions = [_session(0, completed=False)] * 5
        assert burnout_risk(sessions, NOW) is None


class TestCompositeScore:
    def test_worked_example(self):
        # 80% overall, momentum up (4 this week vs 0 last week)
        sessions = [_session(0)] * 4 + [{"duration_minutes": 25, "completed": False}]
        assert composite_focus_score(sessions, 2, 1, NOW) == 72

    def test_streak_component_capped(self):
        sessions = [_session(0)]  # 100%, up
        assert composite_focus_score(sessions, 10, 10, NOW) == 100

    def test_neutral_trend_without_data(self):
        assert composite_focus_score([], 0, 0, NOW) == 10

    def test_down_trend(self):
        sessions = [_session(7)] * 2 + [_session(0)]
        # 100% * 0.5 + 0 + 5
        assert composite_focus_score(sessions, 1, 0, NOW) == 55

    def test_sustaining_and_half_rounds_up(self):
        sessions = [_session(0), _session(7), _session(7, completed=False)]
        # overall 67% -> 33.5 + 10 + 0 = 43.5 -> 44
        assert composite_focus_score(sessions, 0, 0, NOW) == 44

    def test_negative_streaks_clamped(self):
        assert composite_focus_score([], -5, -5, NOW) == 10
