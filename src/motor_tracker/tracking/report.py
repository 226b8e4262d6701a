"""
Weekly Report
=============

Summarize the last days of spiral sessions and medication doses and render
the summary as Markdown with a Jinja2 template.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any, Protocol, Sequence

from jinja2 import Environment, select_autoescape

from motor_tracker.analysis.medication import as_naive_utc, round_fixed, to_epoch_ms, utcnow
from motor_tracker.analysis.spiral import round_half_up

REPORT_DAYS = 7

# Bounds used when no score is available
BEST_SCORE_DEFAULT = 10.0
WORST_SCORE_DEFAULT = 0.0

SESSION_LABEL = "Session"
MEDICATION_LABEL = "Medication"


class SessionRecord(Protocol):
    timestamp: datetime
    severity_score: float | None


class DoseRecord(Protocol):
    medication_name: str
    dosage: str | None
    time_taken: datetime


@dataclass(frozen=True)
class ReportEntry:
    """One event on the merged report timeline."""

    timestamp: datetime
    label: str
    severity: float | None = None
    medication_name: str | None = None
    dosage: str | None = None

    @property
    def is_medication(self) -> bool:
        return self.label == MEDICATION_LABEL

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "t": to_epoch_ms(self.timestamp),
            "label": self.label,
            "severity": self.severity,
        }
        if self.is_medication:
            data["medicationEvent"] = {"name": self.medication_name, "dosage": self.dosage}
        return data


@dataclass(frozen=True)
class ReportSummary:
    """Aggregates over the report window."""

    start: datetime
    end: datetime
    session_count: int
    medication_count: int
    average_tremor_score: float
    best_score: float
    worst_score: float
    average_dose_interval_minutes: int
    timeline: list[ReportEntry] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "start": to_epoch_ms(self.start),
            "end": to_epoch_ms(self.end),
            "sessionCount": self.session_count,
            "medicationCount": self.medication_count,
            "averageTremorScore": self.average_tremor_score,
            "bestScore": self.best_score,
            "worstScore": self.worst_score,
            "averageDoseIntervalMinutes": self.average_dose_interval_minutes,
            "timeline": [e.to_dict() for e in self.timeline],
        }


def build_report(
    sessions: Sequence[SessionRecord],
    medications: Sequence[DoseRecord],
    now: datetime | None = None,
    days: int = REPORT_DAYS,
) -> ReportSummary:
    """
    Build the report for the window ending at ``now``.

    Only records strictly after ``now - days`` are kept. Sessions and doses
    are merged into one timeline ordered by time; on equal timestamps
    sessions come first.

    Args:
        sessions: Spiral sessions in any order
        medications: Medication doses in any order
        now: End of the window (defaults to current UTC time)
        days: Window length in days

    Returns:
        ReportSummary
    """
    now = as_naive_utc(now) if now is not None else utcnow()
    cutoff = now - timedelta(days=days)

    recent_sessions = [s for s in sessions if as_naive_utc(s.timestamp) > cutoff]
    recent_doses = [m for m in medications if as_naive_utc(m.time_taken) > cutoff]

    if recent_sessions:
        total = sum(s.severity_score or 0.0 for s in recent_sessions)
        average = round_fixed(total / len(recent_sessions), 1)
    else:
        average = 0.0

    best = min(
        [s.severity_score if s.severity_score is not None else BEST_SCORE_DEFAULT for s in recent_sessions]
        + [BEST_SCORE_DEFAULT]
    )
    worst = max(
        [s.severity_score if s.severity_score is not None else WORST_SCORE_DEFAULT for s in recent_sessions]
        + [WORST_SCORE_DEFAULT]
    )

    entries = [
        ReportEntry(timestamp=as_naive_utc(s.timestamp), label=SESSION_LABEL, severity=s.severity_score)
        for s in recent_sessions
    ]
    entries += [
        ReportEntry(
            timestamp=as_naive_utc(m.time_taken),
            label=MEDICATION_LABEL,
            medication_name=m.medication_name,
            dosage=m.dosage,
        )
        for m in recent_doses
    ]
    # sorted() is stable, so sessions stay ahead of doses at the same instant
    timeline = sorted(entries, key=lambda e: e.timestamp)

    return ReportSummary(
        start=cutoff,
        end=now,
        session_count=len(recent_sessions),
        medication_count=len(recent_doses),
        average_tremor_score=average,
        best_score=best,
        worst_score=worst,
        average_dose_interval_minutes=_average_dose_interval(recent_doses),
        timeline=timeline,
    )


def _average_dose_interval(doses: Sequence[DoseRecord]) -> int:
    """Mean gap in whole minutes between consecutive doses (0 below two doses)."""
    times = sorted(as_naive_utc(m.time_taken) for m in doses)
    if len(times) < 2:
        return 0
    gaps = [(b - a).total_seconds() / 60.0 for a, b in zip(times, times[1:])]
    return int(round_half_up(sum(gaps) / len(gaps), 0))


class ReportRenderer:
    """Render report summaries from templates."""

    def __init__(self, template: str | None = None):
        self.template = template or REPORT_TEMPLATE
        # Markdown output: nothing to escape
        self.env = Environment(
            autoescape=select_autoescape(["html", "xml"], default_for_string=False),
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.env.filters["format_number"] = self._format_number
        self.env.filters["format_date"] = self._format_date

    @staticmethod
    def _format_number(value: float, decimals: int = 1) -> str:
        if isinstance(value, (int, float)):
            return f"{value:.{decimals}f}"
        return str(value)

    @staticmethod
    def _format_date(value: datetime, fmt: str = "%Y-%m-%d") -> str:
        if isinstance(value, datetime):
            return value.strftime(fmt)
        return str(value)

    def render(
        self,
        report: ReportSummary,
        output_path: str | Path | None = None,
        generated_at: datetime | None = None,
    ) -> str:
        """
        Render a report summary.

        Args:
            report: ReportSummary data
            output_path: Optional path to save the report
            generated_at: Timestamp shown in the footer

        Returns:
            Rendered Markdown
        """
        content = self.env.from_string(self.template).render(
            report=report,
            generated_at=generated_at or utcnow(),
        )

        if output_path:
            Path(output_path).write_text(content)

        return content


def render_report(report: ReportSummary, output_path: str | Path | None = None) -> str:
    """Convenience function to render a report as Markdown."""
    return ReportRenderer().render(report, output_path)


REPORT_TEMPLATE = """# Motor Symptom Report

**Period:** {{ report.start | format_date("%Y-%m-%d %H:%M") }} to {{ report.end | format_date("%Y-%m-%d %H:%M") }} (UTC)

## Summary

- **Sessions:** {{ report.session_count }}
- **Doses logged:** {{ report.medication_count }}
- **Average tremor score:** {{ report.average_tremor_score | format_number }}
- **Best score:** {{ report.best_score | format_number }}
- **Worst score:** {{ report.worst_score | format_number }}
- **Average dose interval (min):** {{ report.average_dose_interval_minutes }}

## Timeline

{% if report.timeline %}
| Time | Event | Detail |
|------|-------|--------|
{% for entry in report.timeline %}
| {{ entry.timestamp | format_date("%Y-%m-%d %H:%M") }} | {{ entry.label }} | {% if entry.is_medication %}{{ entry.medication_name }}{% if entry.dosage %} {{ entry.dosage }}{% endif %}{% elif entry.severity is not none %}severity {{ entry.severity | format_number }}{% else %}-{% endif %} |
{% endfor %}
{% else %}
No sessions or doses in this period.
{% endif %}

---
*Generated on {{ generated_at | format_date("%Y-%m-%d %H:%M") }}*
"""
