"""Session records and the persisted session log."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import datetime

import flowstat.config as config
from flowstat.db import Database
from flowstat.weeks import parse_timestamp

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionRecord:
    """One focus interval, completed or stopped early."""
    duration_minutes: int | None = None
    completed_at: str | None = None
    completed: bool = True
    reflection: str | None = None

    @classmethod
    def from_dict(cls, obj) -> SessionRecord:
        """Build a record from a stored dict. Never raises.

        Only an explicit ``completed: false`` marks a stopped session.
        """
        if isinstance(obj, SessionRecord):
            return obj
        if not isinstance(obj, Mapping):
            return cls()
        duration = obj.get("duration_minutes")
        if isinstance(duration, bool) or not isinstance(duration, (int, float)):
            duration = None
        elif isinstance(duration, float):
            duration = int(duration) if duration.is_integer() else None
        completed_at = obj.get("completed_at")
        reflection = obj.get("reflection")
        return cls(
            duration_minutes=duration,
            completed_at=completed_at if isinstance(completed_at, str) else None,
            completed=obj.get("completed") is not False,
            reflection=reflection if isinstance(reflection, str) else None,
        )

    def to_dict(self) -> dict:
        d = {
            "duration_minutes": self.duration_minutes,
            "completed_at": self.completed_at,
            "completed": self.completed,
        }
        if self.reflection is not None:
            d["reflection"] = self.reflection
        return d

    @property
    def timestamp(self) -> datetime | None:
        """Local completion time, or None when missing or unparseable."""
        return parse_timestamp(self.completed_at)


def as_records(sessions) -> list[SessionRecord]:
    """Normalize any iterable of records/dicts (or None) into SessionRecords."""
    if sessions is None or isinstance(sessions, (str, bytes, Mapping)):
        return []
    if not isinstance(sessions, Iterable):
        return []
    return [SessionRecord.from_dict(s) for s in sessions]


def completed_with_timestamp(records: list[SessionRecord]) -> list[tuple[SessionRecord, datetime]]:
    """Completed records paired with their parsed local timestamp."""
    out = []
    for r in records:
        if not r.completed:
            continue
        ts = r.timestamp
        if ts is not None:
            out.append((r, ts))
    return out


def completion_rate(records: list[SessionRecord]) -> int:
    """Percent of records completed, halves rounded up; 0 for no records."""
    total = len(records)
    if total == 0:
        return 0
    done = sum(1 for r in records if r.completed)
    return (200 * done + total) // (2 * total)


def with_timestamp(records: list[SessionRecord]) -> list[tuple[SessionRecord, datetime]]:
    """All records (any completion state) that carry a valid timestamp."""
    out = []
    for r in records:
        ts = r.timestamp
        if ts is not None:
            out.append((r, ts))
    return out


class SessionLog:
    """Append-only session log stored as one JSON list, newest first.

    Writes work on the stored list as-is, so entries already in the log
    keep every key and value they were saved with. Only :meth:`get_all`
    normalizes.
    """

    def __init__(self, db: Database, key: str = config.SESSIONS_KEY):
        self._db = db
        self._key = key

    def get_raw(self) -> list:
        """Return the stored list exactly as saved. Corrupt or absent data reads as empty."""
        raw = self._db.get_item(self._key)
        if not raw:
            return []
        try:
            parsed = json.loads(raw)
        except json.JSONDecodeError:
            log.warning("failed to parse stored sessions, treating log as empty")
            return []
        if not isinstance(parsed, list):
            log.warning("stored sessions are not a list, treating log as empty")
            return []
        return parsed

    def get_all(self) -> list[SessionRecord]:
        """Return every stored record, normalized."""
        return as_records(self.get_raw())

    def append(self, record: SessionRecord | Mapping) -> None:
        """Add a record at the front of the log."""
        record = SessionRecord.from_dict(record)
        self._write([record.to_dict(), *self.get_raw()])
        log.debug("session appended (%s min, completed=%s)",
                  record.duration_minutes, record.completed)

    def clear(self) -> None:
        self._db.remove_item(self._key)
        log.info("session log cleared")

    def update_latest_reflection(self, reflection: str) -> bool:
        """Attach a reflection to the most recent completed session.

        Returns False (and changes nothing) when no completed session with a
        timestamp exists. Only the matching entry is rewritten.
        """
        entries = self.get_raw()
        for idx, entry in enumerate(entries):
            record = SessionRecord.from_dict(entry)
            if record.completed and record.completed_at:
                entries[idx] = {**entry, "reflection": reflection.strip()}
                self._write(entries)
                return True
        return False

    def _write(self, entries: list) -> None:
        self._db.set_item(self._key, json.dumps(entries))
