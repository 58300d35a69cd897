"""Tests for flowstat.weeks: date keys and Monday-based week keys."""

from datetime import date, datetime, timedelta, timezone

import pytest

from flowstat.weeks import (
    INVALID, local_date_key, parse_timestamp, previous_day_key,
    previous_week_key, recent_week_keys, week_key, week_start,
)


class TestParseTimestamp:
    def test_naive_iso_is_local(self):
        assert parse_timestamp("2026-10-14T09:30:00") == datetime(2026, 10, 14, 9, 30)

    def test_milliseconds(self):
        assert parse_timestamp("2026-10-14T09:30:00.250") == datetime(2026, 10, 14, 9, 30, 0, 250000)

    def test_utc_z_converted_to_local(self):
        expected = datetime(2026, 10, 14, 9, 30, tzinfo=timezone.utc).astimezone().replace(tzinfo=None)
        assert parse_timestamp("2026-10-14T09:30:00.000Z") == expected

    @pytest.mark.parametrize("value", [None, "", "   ", "not-a-date", "2026-13-01", 1760000000, [], {}])
    def test_invalid_values(self, value):
        assert parse_timestamp(value) is None


class TestLocalDateKey:
    def test_formats_padded(self):
        assert local_date_key("2026-02-03T23:59:59") == "2026-02-03"

    def test_accepts_datetime(self):
        assert local_date_key(datetime(2026, 1, 9, 1, 0)) == "2026-01-09"

    def test_invalid(self):
        assert local_date_key("garbage") == INVALID
        assert local_date_key(None) == INVALID


class TestWeekKey:
    def test_jan_first_is_week_one(self):
        assert week_key("2026-01-01T12:00:00") == "2026-W01"

    def test_monday_starts_new_week(self):
        # 2026-10-11 is a Sunday, 2026-10-12 a Monday
        assert week_key("2026-10-11T22:00:00") == "2026-W41"
        assert week_key("2026-10-12T00:00:00") == "2026-W42"
        assert week_key("2026-10-18T23:59:00") == "2026-W42"

    def test_year_starting_on_sunday(self):
        # 2023-01-01 is a Sunday: offset 6, so Monday Jan 2 is week 2
        assert week_key("2023-01-01T10:00:00") == "2023-W01"
        assert week_key("2023-01-02T10:00:00") == "2023-W02"

    def test_year_starting_on_monday(self):
        # 2024-01-01 is a Monday
        assert week_key("2024-01-07T10:00:00") == "2024-W01"
        assert week_key("2024-01-08T10:00:00") == "2024-W02"

    def test_last_day_of_year(self):
        assert week_key("2025-12-31T10:00:00") == "2025-W53"

    def test_invalid_sentinel(self):
        assert week_key("not-a-date") == INVALID
        assert week_key(None) == INVALID
        assert week_key(42) == INVALID


class TestStepping:
    def test_previous_day_crosses_month(self):
        assert previous_day_key("2026-03-01") == "2026-02-28"

    def test_previous_day_crosses_year(self):
        assert previous_day_key("2026-01-01") == "2025-12-31"

    def test_week_start(self):
        assert week_start("2026-W42") == date(2026, 10, 12)
        assert week_start("2026-W01") == date(2026, 1, 1)

    def test_previous_week_simple(self):
        assert previous_week_key("2026-W42") == "2026-W41"

    def test_previous_week_crosses_year(self):
        assert previous_week_key("2026-W01") == "2025-W53"
        assert previous_week_key("2024-W01") == "2023-W53"

    def test_every_day_chains_back_to_its_predecessor(self):
        """Walking previous_week_key visits every key a day-by-day walk produces."""
        day = date(2027, 2, 1)
        keys_by_day = []
        for _ in range(800):
            k = week_key(datetime.combine(day, datetime.min.time()))
            if not keys_by_day or keys_by_day[-1] != k:
                keys_by_day.append(k)
            day -= timedelta(days=1)

        chained = [keys_by_day[0]]
        while len(chained) < len(keys_by_day):
            chained.append(previous_week_key(chained[-1]))
        assert chained == keys_by_day


class TestRecentWeekKeys:
    def test_newest_first(self):
        now = datetime(2026, 10, 14, 15, 0)
        assert recent_week_keys(3, now) == ["2026-W42", "2026-W41", "2026-W40"]

    def test_zero_or_negative(self):
        assert recent_week_keys(0) == []
        assert recent_week_keys(-2) == []

    def test_aware_now(self):
        now = datetime(2026, 10, 14, 12, 0, tzinfo=timezone.utc)
        local = now.astimezone().replace(tzinfo=None)
        assert recent_week_keys(1, now) == [week_key(local)]
