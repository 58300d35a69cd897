"""flowstat: focus timer session log, streaks, and insights."""

__version__ = "0.1.0"
