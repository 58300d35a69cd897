"""flowstat CLI: log focus sessions, add reflections, and view insights."""

import argparse
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path

import flowstat.config as config
from flowstat import risk, streaks
from flowstat.analytics import completed_in_week
from flowstat.app_state import load_app_state, reset_app_state, save_app_state
from flowstat.db import Database
from flowstat.export import build_export_csv, build_export_json
from flowstat.report import build_report, render_report
from flowstat.sessions import SessionLog, SessionRecord
from flowstat.weeks import parse_timestamp, recent_week_keys

log = logging.getLogger("flowstat")


def _setup_logging(verbose: bool = False) -> None:
    config.DATA_DIR.mkdir(parents=True, exist_ok=True)
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[
            logging.FileHandler(str(config.LOG_PATH)),
            logging.StreamHandler(sys.stderr),
        ],
    )
    # keep routine store messages out of the terminal unless asked for
    if not verbose:
        logging.getLogger("flowstat.db").setLevel(logging.WARNING)


def _utc_now_iso() -> str:
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _positive_minutes(value: str) -> int:
    try:
        minutes = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not a number of minutes: {value!r}") from None
    if minutes <= 0:
        raise argparse.ArgumentTypeError("duration must be positive")
    return minutes


def _timestamp(value: str) -> str:
    if parse_timestamp(value) is None:
        raise argparse.ArgumentTypeError(f"not an ISO-8601 timestamp: {value!r}")
    return value


def _refresh_app_state(db: Database, sessions: list[SessionRecord]) -> None:
    """Recompute the counters the app state mirrors after the log changed."""
    daily = streaks.daily_streak(sessions)
    weekly = streaks.weekly_streak(sessions)
    save_app_state(
        db,
        today_sessions=risk.today_completed_count(sessions),
        week_sessions=completed_in_week(sessions, recent_week_keys(1)[0]),
        streak=daily,
        focus_score=risk.composite_focus_score(sessions, daily, weekly),
    )


# ── Subcommands ──────────────────────────────────────────────────────────


def cmd_log(args: argparse.Namespace, db: Database) -> int:
    if args.minutes not in config.DURATIONS:
        log.warning("%d min is not one of the presets (%s)", args.minutes,
                    "/".join(str(d) for d in config.DURATIONS))
    session_log = SessionLog(db)
    record = SessionRecord(
        duration_minutes=args.minutes,
        completed_at=args.at or _utc_now_iso(),
        completed=not args.stopped,
    )
    session_log.append(record)
    sessions = session_log.get_all()
    _refresh_app_state(db, sessions)

    state = "stopped early" if args.stopped else "completed"
    print(f"Logged {args.minutes} min session ({state}).")
    rest = risk.recovery_recommendation(risk.today_completed_count(sessions))
    if rest and not args.stopped:
        print(f"Take a {rest} break.")
    return 0


def cmd_reflect(args: argparse.Namespace, db: Database) -> int:
    text = " ".join(args.text).strip()
    if not text:
        print("Nothing to save.")
        return 1
    if len(text) > config.REFLECTION_MAX_LENGTH:
        print(f"Reflection is too long ({len(text)} chars, max {config.REFLECTION_MAX_LENGTH}).")
        return 1
    if not SessionLog(db).update_latest_reflection(text):
        print("No completed session to attach a reflection to.")
        return 1
    print("Reflection saved.")
    return 0


def cmd_insights(args: argparse.Namespace, db: Database) -> int:
    sessions = SessionLog(db).get_all()
    print(render_report(build_report(sessions)))
    return 0


def cmd_export(args: argparse.Namespace, db: Database) -> int:
    session_log = SessionLog(db)
    sessions = session_log.get_all()
    if args.format == "json":
        text = build_export_json(session_log.get_raw(), load_app_state(db))
    else:
        text = build_export_csv(sessions)

    if args.output:
        path = Path(args.output).expanduser()
        path.write_text(text, encoding="utf-8")
        log.info("exported %d sessions to %s", len(sessions), path)
        print(f"Exported {len(sessions)} sessions to {path}")
    else:
        print(text)
    return 0


def cmd_clear(args: argparse.Namespace, db: Database) -> int:
    if not args.yes:
        print("This deletes your session history. Re-run with --yes to confirm.")
        return 1
    SessionLog(db).clear()
    if args.all:
        reset_app_state(db)
        print("All data deleted.")
    else:
        save_app_state(db, today_sessions=0, week_sessions=0, streak=0, focus_score=0)
        print("Session history cleared.")
    return 0


def cmd_status(args: argparse.Namespace, db: Database) -> int:
    sessions = SessionLog(db).get_all()
    state = load_app_state(db)
    size_kb = config.DB_PATH.stat().st_size / 1024 if config.DB_PATH.exists() else 0

    print("\n  flowstat status")
    print("  ──────────────────\n")
    print(f"  Data dir     {config.DATA_DIR}")
    print(f"  Database     {size_kb:.1f} KB")
    print(f"  Sessions     {len(sessions):,}")
    print(f"  Today        {state.today_sessions}")
    print(f"  This week    {state.week_sessions}")
    print(f"  Streak       {state.streak}")
    print(f"  Focus score  {state.focus_score}")
    reminder = f"{state.reminder_hour:02d}:00" if state.reminder_enabled else "off"
    print(f"  Reminder     {reminder}")
    print(f"  Stored keys  {', '.join(db.keys()) or 'none'}")
    print()
    return 0


# ── Main ─────────────────────────────────────────────────────────────────


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="flowstat",
        description="focus timer session log and insights",
    )
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="enable debug logging")
    sub = parser.add_subparsers(dest="command")

    p_log = sub.add_parser("log", help="record a focus session")
    p_log.add_argument("minutes", type=_positive_minutes,
                       help="session length in minutes (presets: %s)"
                       % "/".join(str(d) for d in config.DURATIONS))
    p_log.add_argument("--stopped", action="store_true",
                       help="the session was stopped before finishing")
    p_log.add_argument("--at", type=_timestamp,
                       help="completion time as ISO-8601 (default: now)")

    p_reflect = sub.add_parser("reflect", help="attach a note to the latest completed session")
    p_reflect.add_argument("text", nargs="+", help="reflection text")

    sub.add_parser("insights", help="show streaks, trends, and patterns")

    p_export = sub.add_parser("export", help="export sessions as JSON or CSV")
    p_export.add_argument("-f", "--format", choices=("json", "csv"), default="json")
    p_export.add_argument("-o", "--output", help="write to a file instead of stdout")

    p_clear = sub.add_parser("clear", help="delete session history")
    p_clear.add_argument("--all", action="store_true",
                         help="also reset app state and settings")
    p_clear.add_argument("--yes", action="store_true", help="confirm deletion")

    sub.add_parser("status", help="show data location and counters")

    args = parser.parse_args(argv)

    commands = {
        "log": cmd_log,
        "reflect": cmd_reflect,
        "insights": cmd_insights,
        "export": cmd_export,
        "clear": cmd_clear,
        "status": cmd_status,
    }

    if args.command not in commands:
        parser.print_help()
        return 0

    _setup_logging(args.verbose)
    with Database(path=config.DB_PATH) as db:
        return commands[args.command](args, db)


if __name__ == "__main__":
    sys.exit(main())
