"""Central configuration for flowstat."""

import os
from pathlib import Path

# ── Paths ──────────────────────────────────────────────────────────────
_PROJECT_ROOT = Path(__file__).resolve().parent.parent

# Load .env from project root
_env_path = _PROJECT_ROOT / ".env"
if _env_path.exists():
    for _line in _env_path.read_text().splitlines():
        _line = _line.strip()
        if _line and not _line.startswith("#") and "=" in _line:
            _k, _, _v = _line.partition("=")
            os.environ.setdefault(_k.strip(), _v.strip())


def _default_data_dir() -> Path:
    env = os.environ.get("FLOWSTAT_DATA_DIR")
    if env:
        return Path(env)
    if (_PROJECT_ROOT / "pyproject.toml").exists():
        return _PROJECT_ROOT / "data"
    return Path.home() / ".flowstat"


DATA_DIR = _default_data_dir()
DB_PATH = DATA_DIR / "flowstat.db"
LOG_PATH = DATA_DIR / "flowstat.log"

# ── Storage keys ───────────────────────────────────────────────────────
SESSIONS_KEY = "FOCUS_SESSIONS"
APP_STATE_KEY = "@smart_timer/app_state"

# ── Timer presets (minutes, in selector order) ─────────────────────────
DURATIONS = (15, 25, 45, 60)
DEFAULT_DURATION = 25
REFLECTION_MAX_LENGTH = 160  # UI convention, not enforced by analytics

# ── Time-of-day buckets (start hour inclusive, end hour exclusive) ─────
TIME_BUCKETS = (
    ("morning", 6, 12),
    ("afternoon", 12, 18),
    ("evening", 18, 24),
)
FALLBACK_BUCKET = "evening"  # hours 0-5 have no bucket of their own
BUCKET_HOURS = {
    "morning": "6am-12pm",
    "afternoon": "12pm-6pm",
    "evening": "6pm-12am",
}

# ── Insight thresholds ─────────────────────────────────────────────────
MIN_SESSIONS_FOR_BEST_PRACTICE = 3
MIN_SESSIONS_FOR_PATTERNS = 2
MIN_SESSIONS_FOR_ATTENTION_TREND = 4
MIN_SESSIONS_FOR_SUGGESTION = 2
ATTENTION_STABLE_MINUTES = 2
REFLECTION_THEME_COUNT = 5
REFLECTION_MIN_WORD_LENGTH = 3

# ── Risk heuristics ────────────────────────────────────────────────────
RECOVERY_STEPS = ((6, "30 min"), (4, "15 min"), (3, "5 min"))
WORKLOAD_TODAY_LIMIT = 6
WORKLOAD_WEEK_LIMIT = 20
BURNOUT_MIN_WEEK_SESSIONS = 5
BURNOUT_RATE_DROP = 10  # percentage points

# ── Composite focus score ──────────────────────────────────────────────
SCORE_COMPLETION_WEIGHT = 0.5
SCORE_TREND_POINTS = {"up": 20, "down": 0}
SCORE_TREND_DEFAULT = 10
SCORE_STREAK_CAP = 30
SCORE_DAILY_STREAK_POINTS = 5
SCORE_WEEKLY_STREAK_POINTS = 2
