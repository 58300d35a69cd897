"""App-state snapshot: timer position, counters, reminder settings."""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass, field, fields

import flowstat.config as config
from flowstat.db import Database

log = logging.getLogger(__name__)


@dataclass
class AppState:
    current_index: int = 1
    duration: int = config.DEFAULT_DURATION
    remaining: int = config.DEFAULT_DURATION * 60
    is_running: bool = False
    is_paused: bool = False
    today_sessions: int = 0
    week_sessions: int = 0
    focus_score: int = 0
    show_reflection: bool = False
    streak: int = 0
    reminder_enabled: bool = False
    reminder_hour: int = 18  # 0-23
    has_seen_onboarding: bool = False
    ambient_tracks: list[bool] = field(default_factory=lambda: [False, False, False])

    def to_dict(self) -> dict:
        return asdict(self)


_FIELD_NAMES = frozenset(f.name for f in fields(AppState))


def _from_stored(stored: dict) -> AppState:
    known = {k: v for k, v in stored.items() if k in _FIELD_NAMES}
    state = AppState(**known)
    # Records written before onboarding existed belong to existing users
    if "has_seen_onboarding" not in stored:
        state.has_seen_onboarding = True
    tracks = stored.get("ambient_tracks")
    if not isinstance(tracks, list) or len(tracks) != 3:
        state.ambient_tracks = [False, False, False]
    return state


def load_app_state(db: Database) -> AppState:
    """Load the stored state merged over defaults. Corrupt data loads defaults."""
    raw = db.get_item(config.APP_STATE_KEY)
    if not raw:
        return AppState()
    try:
        stored = json.loads(raw)
    except json.JSONDecodeError:
        log.warning("failed to parse stored app state, using defaults")
        return AppState()
    if not isinstance(stored, dict):
        return AppState()
    return _from_stored(stored)


def save_app_state(db: Database, **changes) -> AppState:
    """Merge ``changes`` into the stored state and persist it."""
    unknown = set(changes) - _FIELD_NAMES
    if unknown:
        raise ValueError(f"unknown app state fields: {sorted(unknown)}")
    state = load_app_state(db)
    for name, value in changes.items():
        setattr(state, name, value)
    db.set_item(config.APP_STATE_KEY, json.dumps(state.to_dict()))
    return state


def reset_app_state(db: Database) -> AppState:
    """Reset to defaults. Sessions are untouched."""
    state = AppState()
    db.set_item(config.APP_STATE_KEY, json.dumps(state.to_dict()))
    return state
