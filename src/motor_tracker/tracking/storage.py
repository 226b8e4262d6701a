"""Persistence operations for tracked data, scoped by user id."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import TYPE_CHECKING, Any, ContextManager, Sequence

from sqlalchemy import delete, select

from motor_tracker.analysis.medication import as_naive_utc, utcnow
from motor_tracker.core.database import get_session, get_session_factory

from .models import FingerTappingSession, HandwritingSession, MedicationLog, UserSettings

if TYPE_CHECKING:
    from sqlalchemy.orm import Session, sessionmaker

    from motor_tracker.analysis.spiral import SpiralAnalysisResult, SpiralPoint
    from motor_tracker.analysis.tapping import Hand, TapAnalysisResult

logger = logging.getLogger(__name__)


class TrackerStorage:
    """Create/list/delete operations over the tracking tables."""

    def __init__(self, session_factory: sessionmaker[Session] | None = None) -> None:
        """Initialize storage; defaults to the global session factory."""
        if session_factory is None:
            session_factory = get_session_factory()
        self._session_factory = session_factory

    def _session(self) -> ContextManager[Session]:
        return get_session(self._session_factory)

    # ------------------------------------------------------------------
    # Handwriting sessions
    # ------------------------------------------------------------------

    def create_session(
        self,
        user_id: str,
        points: Sequence[SpiralPoint],
        analysis: SpiralAnalysisResult,
        timestamp: datetime | None = None,
    ) -> HandwritingSession:
        """Persist a spiral trace together with its analysis."""
        row = HandwritingSession(
            user_id=user_id,
            timestamp=as_naive_utc(timestamp) if timestamp else utcnow(),
            points=[p.to_dict() for p in points],
            tremor_amplitude=analysis.tremor_amplitude,
            jitter=analysis.jitter,
            estimated_frequency=analysis.estimated_frequency,
            severity_score=analysis.severity_score,
            tremor_state=analysis.tremor_state.value,
        )
        with self._session() as session:
            session.add(row)
            session.flush()
            session.refresh(row)
        logger.info("Stored handwriting session %s (severity %.1f)", row.id, analysis.severity_score)
        return row

    def get_sessions(self, user_id: str) -> list[HandwritingSession]:
        """List a user's spiral sessions, newest first."""
        with self._session() as session:
            stmt = (
                select(HandwritingSession)
                .where(HandwritingSession.user_id == user_id)
                .order_by(HandwritingSession.timestamp.desc(), HandwritingSession.id.desc())
            )
            return list(session.scalars(stmt))

    # ------------------------------------------------------------------
    # Medication logs
    # ------------------------------------------------------------------

    def create_medication_log(
        self,
        user_id: str,
        medication_name: str,
        dosage: str | None = None,
        time_taken: datetime | None = None,
    ) -> MedicationLog:
        """Log a dose; the time defaults to now and may be backdated."""
        row = MedicationLog(
            user_id=user_id,
            medication_name=medication_name,
            dosage=dosage,
            time_taken=as_naive_utc(time_taken) if time_taken else utcnow(),
        )
        with self._session() as session:
            session.add(row)
            session.flush()
            session.refresh(row)
        logger.info("Logged medication %s for %s", row.id, medication_name)
        return row

    def get_medication_logs(self, user_id: str) -> list[MedicationLog]:
        """List a user's doses, most recent first."""
        with self._session() as session:
            stmt = (
                select(MedicationLog)
                .where(MedicationLog.user_id == user_id)
                .order_by(MedicationLog.time_taken.desc(), MedicationLog.id.desc())
            )
            return list(session.scalars(stmt))

    def delete_medication_log(self, log_id: int, user_id: str) -> bool:
        """Delete a dose owned by the user. Returns whether a row was removed."""
        with self._session() as session:
            result = session.execute(
                delete(MedicationLog).where(
                    MedicationLog.id == log_id,
                    MedicationLog.user_id == user_id,
                )
            )
            return result.rowcount > 0

    def get_last_medication(self, user_id: str) -> MedicationLog | None:
        """Most recent dose for the user, if any."""
        with self._session() as session:
            stmt = (
                select(MedicationLog)
                .where(MedicationLog.user_id == user_id)
                .order_by(MedicationLog.time_taken.desc(), MedicationLog.id.desc())
                .limit(1)
            )
            return session.scalars(stmt).first()

    # ------------------------------------------------------------------
    # Finger tapping sessions
    # ------------------------------------------------------------------

    def create_finger_tapping_session(
        self,
        user_id: str,
        hand: Hand,
        analysis: TapAnalysisResult,
        timestamp: datetime | None = None,
    ) -> FingerTappingSession:
        """Persist a tapping result with its hand selector."""
        row = FingerTappingSession(
            user_id=user_id,
            timestamp=as_naive_utc(timestamp) if timestamp else utcnow(),
            hand=hand.value,
            avg_interval=analysis.avg_interval,
            std_dev=analysis.std_dev,
            taps_per_second=analysis.taps_per_second,
            regularity_score=analysis.regularity_score,
            asymmetry_score=analysis.asymmetry_score,
            rhythm_stability=analysis.rhythm_stability,
            total_taps=analysis.total_taps,
        )
        with self._session() as session:
            session.add(row)
            session.flush()
            session.refresh(row)
        logger.info("Stored finger tapping session %s (%s hand)", row.id, row.hand)
        return row

    def get_finger_tapping_sessions(self, user_id: str) -> list[FingerTappingSession]:
        """List a user's tapping sessions, newest first."""
        with self._session() as session:
            stmt = (
                select(FingerTappingSession)
                .where(FingerTappingSession.user_id == user_id)
                .order_by(FingerTappingSession.timestamp.desc(), FingerTappingSession.id.desc())
            )
            return list(session.scalars(stmt))

    # ------------------------------------------------------------------
    # Settings
    # ------------------------------------------------------------------

    def get_settings(self, user_id: str) -> UserSettings | None:
        with self._session() as session:
            stmt = select(UserSettings).where(UserSettings.user_id == user_id).limit(1)
            return session.scalars(stmt).first()

    def set_settings(self, user_id: str, **values: Any) -> UserSettings:
        """Create or update the user's settings."""
        allowed = {"ai_enabled", "custom_prompt"}
        unknown = set(values) - allowed
        if unknown:
            raise ValueError(f"Unknown settings: {', '.join(sorted(unknown))}")

        with self._session() as session:
            stmt = select(UserSettings).where(UserSettings.user_id == user_id).limit(1)
            row = session.scalars(stmt).first()
            if row is None:
                row = UserSettings(user_id=user_id, **values)
                session.add(row)
            else:
                for key, value in values.items():
                    setattr(row, key, value)
            session.flush()
            session.refresh(row)
        return row
