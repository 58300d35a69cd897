"""SQLite key-value store backing the session log and app state.

The rest of flowstat only needs a string-keyed get/set/remove store, so the
schema is a single ``kv`` table. Values are opaque strings (JSON in
practice); interpreting them is the caller's job.

- Thread-safe via a dedicated lock (SQLite check_same_thread=False is not enough)
- WAL journal for concurrent reads during writes
- Every write commits before returning, so a following read sees it
- Context-manager protocol for clean resource handling
"""

import sqlite3
import logging
import threading
from pathlib import Path

from flowstat.config import DB_PATH

log = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS kv (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL
);
"""


class Database:
    """Thread-safe SQLite key-value store.

    Usage:
        db = Database()
        db.open()
        ...
        db.close()

    Or as a context manager:
        with Database() as db:
            ...
    """

    def __init__(self, path: Path | None = None):
        self.path = path or DB_PATH
        self._conn: sqlite3.Connection | None = None
        self._lock = threading.Lock()

    def __enter__(self):
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    # ── lifecycle ───────────────────────────────────────────────────────

    def open(self) -> None:
        """Open the database, apply pragmas, and ensure schema exists."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._conn = sqlite3.connect(
            str(self.path),
            check_same_thread=False,
            timeout=10.0,
        )
        self._conn.execute("PRAGMA journal_mode=WAL")
        self._conn.execute("PRAGMA synchronous=NORMAL")
        self._conn.execute("PRAGMA busy_timeout=5000")
        self._conn.executescript(_SCHEMA)
        self._conn.commit()
        log.info("database opened at %s", self.path)

    def close(self) -> None:
        """Close the database connection safely."""
        with self._lock:
            if self._conn:
                try:
                    self._conn.execute("PRAGMA optimize")
                    self._conn.close()
                except sqlite3.Error:
                    log.exception("error during database close")
                finally:
                    self._conn = None
                    log.info("database closed")

    def _ensure_conn(self) -> sqlite3.Connection:
        """Return the active connection, raising if closed."""
        if self._conn is None:
            raise RuntimeError("database is not open, call .open() first")
        return self._conn

    # ── key-value access ────────────────────────────────────────────────

    def get_item(self, key: str) -> str | None:
        """Return the stored value for ``key``, or None."""
        conn = self._ensure_conn()
        with self._lock:
            cur = conn.execute("SELECT value FROM kv WHERE key = ?", (key,))
            row = cur.fetchone()
        return row[0] if row else None

    def set_item(self, key: str, value: str) -> None:
        """Upsert ``value`` under ``key``."""
        conn = self._ensure_conn()
        with self._lock:
            with conn:
                conn.execute(
                    """INSERT INTO kv (key, value) VALUES (?, ?)
                       ON CONFLICT(key) DO UPDATE SET value = excluded.value""",
                    (key, value),
                )

    def remove_item(self, key: str) -> None:
        """Delete ``key``; missing keys are ignored."""
        conn = self._ensure_conn()
        with self._lock:
            with conn:
                conn.execute("DELETE FROM kv WHERE key = ?", (key,))

    def keys(self) -> list[str]:
        """All stored keys, sorted."""
        conn = self._ensure_conn()
        with self._lock:
            cur = conn.execute("SELECT key FROM kv ORDER BY key")
            return [row[0] for row in cur.fetchall()]
