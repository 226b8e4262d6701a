"""SQLAlchemy models for tracked sessions, medication logs and user settings."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, Boolean, DateTime, Float, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from motor_tracker.analysis.medication import utcnow
from motor_tracker.core.database import Base


class HandwritingSession(Base):
    """Spiral drawing with its derived tremor metrics."""

    __tablename__ = "handwriting_sessions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    timestamp: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)
    points: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False)
    tremor_amplitude: Mapped[float | None] = mapped_column(Float)
    jitter: Mapped[float | None] = mapped_column(Float)
    estimated_frequency: Mapped[float | None] = mapped_column(Float)
    severity_score: Mapped[float | None] = mapped_column(Float)
    tremor_state: Mapped[str | None] = mapped_column(String(20))  # Stable, Moderate, Severe

    def __repr__(self) -> str:
        return f"<HandwritingSession(id={self.id}, severity={self.severity_score})>"

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "userId": self.user_id,
            "timestamp": self.timestamp.isoformat(),
            "points": self.points,
            "tremorAmplitude": self.tremor_amplitude,
            "jitter": self.jitter,
            "estimatedFrequency": self.estimated_frequency,
            "severityScore": self.severity_score,
            "tremorState": self.tremor_state,
        }


class MedicationLog(Base):
    """A logged medication dose."""

    __tablename__ = "medication_logs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    medication_name: Mapped[str] = mapped_column(String(200), nullable=False)
    dosage: Mapped[str | None] = mapped_column(String(100))
    time_taken: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)

    def __repr__(self) -> str:
        return f"<MedicationLog(id={self.id}, name='{self.medication_name}')>"

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "userId": self.user_id,
            "medicationName": self.medication_name,
            "dosage": self.dosage,
            "timeTaken": self.time_taken.isoformat(),
        }


class FingerTappingSession(Base):
    """Finger-tapping capture with its rhythm metrics."""

    __tablename__ = "finger_tapping_sessions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    timestamp: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)
    hand: Mapped[str] = mapped_column(String(10), nullable=False)  # left, right
    avg_interval: Mapped[float] = mapped_column(Float, nullable=False)
    std_dev: Mapped[float] = mapped_column(Float, nullable=False)
    taps_per_second: Mapped[float] = mapped_column(Float, nullable=False)
    regularity_score: Mapped[float] = mapped_column(Float, nullable=False)
    asymmetry_score: Mapped[float] = mapped_column(Float, nullable=False)
    rhythm_stability: Mapped[float] = mapped_column(Float, nullable=False)
    total_taps: Mapped[int] = mapped_column(Integer, nullable=False)

    def __repr__(self) -> str:
        return f"<FingerTappingSession(id={self.id}, hand='{self.hand}')>"

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "userId": self.user_id,
            "timestamp": self.timestamp.isoformat(),
            "hand": self.hand,
            "avgInterval": self.avg_interval,
            "stdDev": self.std_dev,
            "tapsPerSecond": self.taps_per_second,
            "regularityScore": self.regularity_score,
            "asymmetryScore": self.asymmetry_score,
            "rhythmStability": self.rhythm_stability,
            "totalTaps": self.total_taps,
        }


class UserSettings(Base):
    """Per-user preferences for AI insights."""

    __tablename__ = "user_settings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    ai_enabled: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    custom_prompt: Mapped[str | None] = mapped_column(Text)

    def __repr__(self) -> str:
        return f"<UserSettings(user_id='{self.user_id}', ai_enabled={self.ai_enabled})>"

    def to_dict(self) -> dict[str, Any]:
        return {
            "userId": self.user_id,
            "aiEnabled": self.ai_enabled,
            "customPrompt": self.custom_prompt,
        }
