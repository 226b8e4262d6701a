"""
Medication State Inference
==========================

Infer the current pharmacological phase from the time since the last dose,
derive the tremor trend across sessions and assemble the dashboard snapshot.

All datetimes are handled as naive UTC; aware datetimes are converted.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Any, Sequence

# Dose-response bands (minutes since last dose)
ONSET_MINUTES = 30  # onset is not distinguished from peak effect
WEARING_OFF_MINUTES = 180
OFF_MINUTES = 240

TREND_DELTA = 0.5

# Not derived from data yet
MEDICATION_EFFECTIVENESS_SCORE = 85
BEST_POST_MEDICATION_SCORE = 2.5

TIMELINE_MEDICATION_STATE = "Unknown"

INSIGHT_ON = "Medication is currently effective. Tremor levels are stable."
INSIGHT_NOT_ON = "Medication effect may be wearing off. Consider tracking your next dose."


class MedicationState(str, Enum):
    """Pharmacological phase."""

    ON = "ON"
    WEARING_OFF = "WEARING_OFF"
    OFF = "OFF"


class TremorTrend(str, Enum):
    """Direction of tremor severity across the two latest sessions."""

    IMPROVING = "Improving"
    STABLE = "Stable"
    WORSENING = "Worsening"


@dataclass(frozen=True)
class MedicationStatus:
    """Current phase and whole minutes since the last dose."""

    state: MedicationState
    minutes_since_dose: int


@dataclass(frozen=True)
class SessionScore:
    """Persisted severity of one spiral session."""

    timestamp: datetime
    severity_score: float | None


@dataclass(frozen=True)
class TimelinePoint:
    timestamp: int  # epoch ms
    tremor_score: float
    medication_state: str = TIMELINE_MEDICATION_STATE

    def to_dict(self) -> dict[str, Any]:
        return {
            "timestamp": self.timestamp,
            "tremorScore": self.tremor_score,
            "medicationState": self.medication_state,
        }


@dataclass(frozen=True)
class DashboardSnapshot:
    """Live dashboard state for one user."""

    current_medication_state: MedicationState
    time_since_last_dose_minutes: int
    tremor_trend: TremorTrend
    average_tremor_score: float
    insight: str
    trend_timeline: list[TimelinePoint] = field(default_factory=list)
    best_post_medication_score: float = BEST_POST_MEDICATION_SCORE
    medication_effectiveness_score: int = MEDICATION_EFFECTIVENESS_SCORE

    def to_dict(self) -> dict[str, Any]:
        """Convert to the camelCase wire format."""
        return {
            "currentMedicationState": self.current_medication_state.value,
            "timeSinceLastDoseMinutes": self.time_since_last_dose_minutes,
            "tremorTrend": self.tremor_trend.value,
            "averageTremorScore": self.average_tremor_score,
            "bestPostMedicationScore": self.best_post_medication_score,
            "medicationEffectivenessScore": self.medication_effectiveness_score,
            "insight": self.insight,
            "trendTimeline": [p.to_dict() for p in self.trend_timeline],
        }


def utcnow() -> datetime:
    """Current time as naive UTC."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def as_naive_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def to_epoch_ms(value: datetime) -> int:
    return int(as_naive_utc(value).replace(tzinfo=timezone.utc).timestamp() * 1000)


def round_fixed(value: float, decimals: int = 1) -> float:
    """Round the exact binary value of ``value``, halves up.

    Same result as fixed-point formatting on the client, so an average of
    0.15 (stored just below 0.15) gives 0.1 while an exact 0.25 gives 0.3.
    """
    quantum = Decimal(1).scaleb(-decimals)
    return float(Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP))


class MedicationStateEngine:
    """Classify medication phase and tremor trend."""

    def classify(
        self,
        last_dose_time: datetime | None,
        now: datetime | None = None,
    ) -> MedicationStatus:
        """
        Classify the current phase from the last dose time.

        Args:
            last_dose_time: Time of the most recent dose, or None
            now: Reference time (defaults to current UTC time)

        Returns:
            MedicationStatus
        """
        if last_dose_time is None:
            return MedicationStatus(state=MedicationState.OFF, minutes_since_dose=0)

        now = as_naive_utc(now) if now is not None else utcnow()
        elapsed = (now - as_naive_utc(last_dose_time)).total_seconds() / 60.0
        minutes = math.floor(elapsed)

        # Thresholds are whole minutes, so comparing the floor is equivalent
        if minutes < WEARING_OFF_MINUTES:
            state = MedicationState.ON
        elif minutes < OFF_MINUTES:
            state = MedicationState.WEARING_OFF
        else:
            state = MedicationState.OFF

        return MedicationStatus(state=state, minutes_since_dose=minutes)

    def trend(self, scores: Sequence[float | None]) -> TremorTrend:
        """
        Compare the two most recent severity scores.

        Args:
            scores: Severity scores ordered most recent first

        Returns:
            TremorTrend (Stable when fewer than two scores)
        """
        if len(scores) < 2:
            return TremorTrend.STABLE

        recent = scores[0] or 0.0
        previous = scores[1] or 0.0
        if recent < previous - TREND_DELTA:
            return TremorTrend.IMPROVING
        if recent > previous + TREND_DELTA:
            return TremorTrend.WORSENING
        return TremorTrend.STABLE

    def build_dashboard(
        self,
        sessions: Sequence[SessionScore],
        last_dose_time: datetime | None,
        now: datetime | None = None,
    ) -> DashboardSnapshot:
        """
        Assemble the dashboard snapshot.

        Args:
            sessions: Spiral sessions ordered most recent first
            last_dose_time: Time of the most recent dose, or None
            now: Reference time

        Returns:
            DashboardSnapshot
        """
        status = self.classify(last_dose_time, now)
        scores = [s.severity_score for s in sessions]

        total = sum(score or 0.0 for score in scores)
        average = round_fixed(total / len(scores), 1) if scores else 0.0

        timeline = [
            TimelinePoint(timestamp=to_epoch_ms(s.timestamp), tremor_score=s.severity_score or 0.0)
            for s in reversed(sessions)
        ]

        return DashboardSnapshot(
            current_medication_state=status.state,
            time_since_last_dose_minutes=status.minutes_since_dose,
            tremor_trend=self.trend(scores),
            average_tremor_score=average,
            insight=insight_for(status.state),
            trend_timeline=timeline,
        )


def insight_for(state: MedicationState) -> str:
    """Local one-line insight for the dashboard."""
    return INSIGHT_ON if state is MedicationState.ON else INSIGHT_NOT_ON


def classify_medication_state(
    last_dose_time: datetime | None,
    now: datetime | None = None,
) -> MedicationStatus:
    """Convenience function to classify the medication phase."""
    return MedicationStateEngine().classify(last_dose_time, now)
