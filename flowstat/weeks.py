"""Calendar keys: local date keys and Monday-based week keys.

Every date- or week-bucketed computation in flowstat goes through this
module so that all of them agree on where a day or a week begins.

Week keys look like ``2026-W07``. Weeks start on Monday and are numbered
within the calendar year, so the days of a Monday-Sunday week that straddles
New Year get two different keys (``2025-W53`` and ``2026-W01``).
"""

from __future__ import annotations

from datetime import date, datetime, timedelta

INVALID = "invalid"


def parse_timestamp(value) -> datetime | None:
    """Parse an ISO-8601 string into a naive local datetime.

    Returns None for anything that is not a parseable string. Aware values
    (``Z`` or an explicit offset) are converted to the local timezone.
    """
    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        dt = datetime.fromisoformat(text)
    except ValueError:
        return None
    if dt.tzinfo is not None:
        try:
            dt = dt.astimezone().replace(tzinfo=None)
        except (OverflowError, OSError, ValueError):
            return None
    return dt


def local_now(now: datetime | None = None) -> datetime:
    """Resolve the evaluation instant to a naive local datetime."""
    if now is None:
        return datetime.now()
    if now.tzinfo is not None:
        return now.astimezone().replace(tzinfo=None)
    return now


def _date_key(d: date) -> str:
    return f"{d.year:04d}-{d.month:02d}-{d.day:02d}"


def _week_key(d: date) -> str:
    jan1 = date(d.year, 1, 1)
    offset = jan1.weekday()  # Monday=0 .. Sunday=6
    day_index = d.toordinal() - jan1.toordinal()
    week = (day_index + offset) // 7 + 1
    return f"{d.year:04d}-W{week:02d}"


def _as_date(value) -> date | None:
    if isinstance(value, datetime):
        return local_now(value).date()
    if isinstance(value, date):
        return value
    dt = parse_timestamp(value)
    return dt.date() if dt else None


def local_date_key(value) -> str:
    """``YYYY-MM-DD`` in local time for a timestamp, or ``INVALID``."""
    d = _as_date(value)
    return _date_key(d) if d else INVALID


def week_key(value) -> str:
    """``YYYY-Www`` week key for a timestamp, or ``INVALID``."""
    d = _as_date(value)
    return _week_key(d) if d else INVALID


def previous_day_key(key: str) -> str:
    d = date.fromisoformat(key)
    return _date_key(d - timedelta(days=1))


def week_start(key: str) -> date:
    """First calendar day carrying the given week key."""
    year_text, _, week_text = key.partition("-W")
    year, week = int(year_text), int(week_text)
    jan1 = date(year, 1, 1)
    day_index = max(0, (week - 1) * 7 - jan1.weekday())
    return jan1 + timedelta(days=day_index)


def previous_week_key(key: str) -> str:
    """Key of the week immediately before ``key``, across year boundaries."""
    return _week_key(week_start(key) - timedelta(days=1))


def recent_week_keys(n: int, now: datetime | None = None) -> list[str]:
    """The ``n`` most recent week keys, newest (current week) first."""
    if n <= 0:
        return []
    keys = [_week_key(local_now(now).date())]
    while len(keys) < n:
        keys.append(previous_week_key(keys[-1]))
    return keys
