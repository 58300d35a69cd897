"""Assemble every insight for one snapshot and render it as text."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from flowstat import analytics, patterns, risk, streaks
from flowstat.sessions import as_records
from flowstat.weeks import local_now


@dataclass
class InsightsReport:
    generated_at: datetime
    daily_streak: int
    weekly_streak: int
    best_week: int
    stats: analytics.CompletionStats
    momentum: str | None
    milestone: str | None
    this_week_vs_avg: analytics.ThisWeekVsAverage
    baseline: str | None
    weekly_counts: list[int]
    days_active: tuple[int, int]
    attention_span: str | None
    regression: str | None
    best_practice: str | None
    best_day: str | None
    peak_window: patterns.PeakWindow | None
    success_pattern: str | None
    themes: list[str] = field(default_factory=list)
    suggested_duration: int | None = None
    today_completed: int = 0
    recovery: str | None = None
    workload: str | None = None
    burnout: str | None = None
    focus_score: int = 0


def build_report(sessions, now: datetime | None = None) -> InsightsReport:
    """Run every analytic over one snapshot, pinned to a single instant."""
    records = as_records(sessions)
    now = local_now(now)
    daily = streaks.daily_streak(records, now)
    weekly = streaks.weekly_streak(records, now)
    vs_avg = analytics.this_week_vs_average(records, now)
    best_day = patterns.best_day_of_week(records)
    peak = patterns.best_peak_window(records)
    today = risk.today_completed_count(records, now)
    return InsightsReport(
        generated_at=now,
        daily_streak=daily,
        weekly_streak=weekly,
        best_week=streaks.best_week_count(records),
        stats=analytics.completion_stats(records),
        momentum=analytics.momentum(records, now),
        milestone=analytics.milestone_message(records, now),
        this_week_vs_avg=vs_avg,
        baseline=analytics.personal_baseline_copy(vs_avg),
        weekly_counts=analytics.weekly_completion_counts(records, 8, now),
        days_active=analytics.days_active_this_week(records, now),
        attention_span=analytics.attention_span_trend(records, now),
        regression=analytics.regression_message(records, now),
        best_practice=patterns.best_practice_sentence(records),
        best_day=best_day,
        peak_window=peak,
        success_pattern=patterns.success_pattern_sentence(records, best_day, peak),
        themes=patterns.reflection_themes(records),
        suggested_duration=analytics.suggested_duration(records),
        today_completed=today,
        recovery=risk.recovery_recommendation(today),
        workload=risk.workload_warning(records, now),
        burnout=risk.burnout_risk(records, now),
        focus_score=risk.composite_focus_score(records, daily, weekly, now),
    )


_MOMENTUM_LABELS = {"up": "Up", "down": "Down", "sustaining": "Sustaining"}


def render_report(report: InsightsReport) -> str:
    """Plain-text rendering; sections without enough data are omitted."""
    lines = []
    out = lines.append

    out(f"\n{'=' * 60}")
    out(f"  Focus Insights: {report.generated_at.strftime('%A, %B %d %Y')}")
    out(f"{'=' * 60}")

    bar_len = report.focus_score // 2
    bar = "█" * bar_len + "░" * (50 - bar_len)
    out(f"\n  Focus score:  [{bar}] {report.focus_score}/100")

    out("\n  STREAKS")
    out(f"  {'─' * 56}")
    out(f"    Daily streak:        {report.daily_streak}")
    out(f"    Weekly streak:       {report.weekly_streak}")
    out(f"    Best week:           {report.best_week}")
    active, total = report.days_active
    out(f"    Days active:         {active}/{total} this week")
    if report.milestone:
        out(f"    {report.milestone}")

    stats = report.stats
    out("\n  COMPLETION")
    out(f"  {'─' * 56}")
    out(f"    Sessions:            {stats.completed}/{stats.total} ({stats.overall_rate}%)")
    for minutes, by in stats.by_duration.items():
        if by.total:
            out(f"    {minutes:>3} min             {by.completed}/{by.total} ({by.rate}%)")
    if report.suggested_duration:
        out(f"    Try {report.suggested_duration} min sessions next.")

    out("\n  TRENDS")
    out(f"  {'─' * 56}")
    if report.momentum:
        out(f"    Momentum:            {_MOMENTUM_LABELS[report.momentum]}")
    vs = report.this_week_vs_avg
    out(f"    This week:           {vs.this_week} (4-week avg {vs.four_week_avg}, {vs.trend})")
    if report.baseline:
        out(f"    {report.baseline}")
    if report.attention_span:
        out(f"    Attention span:      {report.attention_span}")
    if report.regression:
        out(f"    {report.regression}")
    max_count = max(report.weekly_counts, default=0)
    for i, count in enumerate(report.weekly_counts):
        bar = "▓" * int(count / max_count * 30) if max_count else ""
        label = "this week" if i == 0 else f"{i}w ago"
        out(f"    {label:<10s} {bar:<30s} {count:>3}")

    insights = [s for s in (report.best_practice, report.success_pattern) if s]
    if insights or report.themes:
        out("\n  PATTERNS")
        out(f"  {'─' * 56}")
        for sentence in insights:
            out(f"    {sentence}")
        if report.themes:
            out(f"    Reflection themes:   {', '.join(report.themes)}")

    warnings = [w for w in (report.workload, report.burnout) if w]
    if warnings or report.recovery:
        out("\n  WELLBEING")
        out(f"  {'─' * 56}")
        if report.recovery:
            out(f"    Take a {report.recovery} break ({report.today_completed} sessions today).")
        for w in warnings:
            out(f"    {w}")

    out("")
    return "\n".join(lines)
