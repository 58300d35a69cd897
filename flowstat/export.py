"""JSON and CSV export of the session log.

The CSV layout is an interchange format shared with other tools, so the
header text, column order and quoting rules must not change:

    duration_minutes,completed_at,completed,reflection

``completed`` is ``true``/``false``. A non-empty reflection is always wrapped
in double quotes with inner quotes doubled, which also protects commas and
newlines. A ``completed_at`` value is quoted the same way, but only when
it holds a comma, quote or line break. Rows are joined with ``\\n`` and
there is no trailing newline.
"""

from __future__ import annotations

import csv
import io
import json
import logging
from collections.abc import Mapping
from datetime import datetime, timezone

from flowstat.app_state import AppState
from flowstat.sessions import SessionRecord, as_records

log = logging.getLogger(__name__)

CSV_HEADER = "duration_minutes,completed_at,completed,reflection"
CSV_COLUMNS = CSV_HEADER.split(",")
_CSV_SPECIAL = (",", '"', "\n", "\r")


def _iso_utc(now: datetime | None = None) -> str:
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.astimezone()
    return now.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _stored_entries(sessions) -> list:
    """Session entries as stored; SessionRecords are converted back to dicts."""
    if sessions is None or isinstance(sessions, (str, bytes, Mapping)):
        return []
    return [s.to_dict() if isinstance(s, SessionRecord) else s for s in sessions]


def build_export_json(sessions, app_state: AppState | dict | None = None,
                      now: datetime | None = None) -> str:
    """Pretty-printed ``{exported_at, sessions, app_state}`` document.

    ``sessions`` is written as given, so passing :meth:`SessionLog.get_raw`
    keeps any extra keys the stored entries carry.
    """
    if isinstance(app_state, AppState):
        app_state = app_state.to_dict()
    payload = {
        "exported_at": _iso_utc(now),
        "sessions": _stored_entries(sessions),
        "app_state": app_state if app_state is not None else AppState().to_dict(),
    }
    return json.dumps(payload, indent=2, ensure_ascii=False)


def _csv_row(record: SessionRecord) -> str:
    duration = "" if record.duration_minutes is None else str(record.duration_minutes)
    completed_at = record.completed_at or ""
    if any(c in completed_at for c in _CSV_SPECIAL):
        completed_at = '"' + completed_at.replace('"', '""') + '"'
    completed = "true" if record.completed else "false"
    ref = (record.reflection or "").replace('"', '""')
    if ref:
        ref = f'"{ref}"'
    return f"{duration},{completed_at},{completed},{ref}"


def build_export_csv(sessions) -> str:
    rows = [_csv_row(r) for r in as_records(sessions)]
    return "\n".join([CSV_HEADER, *rows])


def parse_export_csv(text: str) -> list[SessionRecord]:
    """Decode a CSV produced by :func:`build_export_csv`.

    Raises ValueError when the header does not match.
    """
    reader = csv.reader(io.StringIO(text, newline=""))
    try:
        header = next(reader)
    except StopIteration:
        raise ValueError("empty CSV export") from None
    if header != CSV_COLUMNS:
        raise ValueError(f"unexpected CSV header: {','.join(header)!r}")

    records = []
    for lineno, row in enumerate(reader, start=2):
        if not row:
            continue
        if len(row) != len(CSV_COLUMNS):
            raise ValueError(f"line {lineno}: expected {len(CSV_COLUMNS)} fields, got {len(row)}")
        duration, completed_at, completed, reflection = row
        try:
            minutes = int(duration) if duration else None
        except ValueError:
            log.warning("line %d: non-numeric duration %r", lineno, duration)
            minutes = None
        records.append(SessionRecord(
            duration_minutes=minutes,
            completed_at=completed_at or None,
            completed=completed != "false",
            reflection=reflection or None,
        ))
    return records
