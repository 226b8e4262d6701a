"""Prompt construction for AI-generated symptom summaries."""

from __future__ import annotations

from typing import TYPE_CHECKING, Sequence

if TYPE_CHECKING:
    from datetime import datetime

    from .models import FingerTappingSession, HandwritingSession, MedicationLog

RECENT_ENTRIES = 3

DEFAULT_INSIGHT_PROMPT = (
    "Summarize the patient's motor symptom trends, medication effectiveness, "
    "and any notable patterns. Provide actionable insights in 2-3 sentences."
)

INSIGHT_SYSTEM_PROMPT = (
    "You are a helpful clinical assistant summarizing Parkinson's symptom data. "
    "Be concise and clear."
)


def _fmt_time(value: datetime) -> str:
    return value.strftime("%Y-%m-%d %H:%M")


def build_insight_context(
    sessions: Sequence[HandwritingSession],
    meds: Sequence[MedicationLog],
    taps: Sequence[FingerTappingSession],
) -> str:
    """
    Format recent history for the prompt.

    Each sequence is expected newest first; the three most recent
    entries of each are listed.
    """
    lines = [f"Recent tremor sessions ({len(sessions)}):"]
    for s in sessions[:RECENT_ENTRIES]:
        lines.append(f"- Severity: {s.severity_score or 0:.1f} at {_fmt_time(s.timestamp)}")

    lines.append("")
    lines.append(f"Recent medications ({len(meds)}):")
    for m in meds[:RECENT_ENTRIES]:
        dose = f" {m.dosage}" if m.dosage else ""
        lines.append(f"- {m.medication_name}{dose} at {_fmt_time(m.time_taken)}")

    lines.append("")
    lines.append(f"Recent finger tapping ({len(taps)}):")
    for t in taps[:RECENT_ENTRIES]:
        lines.append(
            f"- {t.hand} hand: {t.taps_per_second:.1f} taps/s, "
            f"regularity {t.regularity_score:.0f}% at {_fmt_time(t.timestamp)}"
        )

    return "\n".join(lines)


def build_insight_prompt(context: str, custom_prompt: str | None = None) -> str:
    """Combine the instruction with the formatted history."""
    return f"{custom_prompt or DEFAULT_INSIGHT_PROMPT}\n\n{context}"
