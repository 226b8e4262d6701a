"""
Tracking Service
================

Request-level operations: validate a payload, run the pure analyzer and
persist the input together with its derived metrics. No locking is done;
two concurrent submissions simply produce two rows.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import TYPE_CHECKING, Any

from motor_tracker.analysis.medication import (
    DashboardSnapshot,
    MedicationStateEngine,
    SessionScore,
)
from motor_tracker.analysis.spiral import SpiralAnalyzer
from motor_tracker.analysis.tapping import TapAnalyzer
from motor_tracker.core.errors import InsightUnavailableError, NotFoundError

from .insight import INSIGHT_SYSTEM_PROMPT, build_insight_context, build_insight_prompt
from .report import REPORT_DAYS, ReportSummary, build_report
from .schemas import (
    FingerTappingRequest,
    MedicationLogRequest,
    SettingsRequest,
    SpiralSessionRequest,
    parse_payload,
)
from .storage import TrackerStorage

if TYPE_CHECKING:
    from motor_tracker.core.claude import ClaudeClient

    from .models import FingerTappingSession, HandwritingSession, MedicationLog, UserSettings

logger = logging.getLogger(__name__)


class TrackingService:
    """Compose validation, analysis and persistence for one user at a time."""

    def __init__(
        self,
        storage: TrackerStorage | None = None,
        claude: ClaudeClient | None = None,
    ) -> None:
        self.storage = storage or TrackerStorage()
        self._claude = claude
        self.spiral_analyzer = SpiralAnalyzer()
        self.tap_analyzer = TapAnalyzer()
        self.medication_engine = MedicationStateEngine()

    @property
    def claude(self) -> ClaudeClient:
        if self._claude is None:
            from motor_tracker.core.claude import get_claude_client

            self._claude = get_claude_client()
        return self._claude

    def submit_spiral(self, user_id: str, payload: Any) -> HandwritingSession:
        """Analyze and store a spiral drawing."""
        request = parse_payload(SpiralSessionRequest, payload)
        points = request.to_points()
        analysis = self.spiral_analyzer.analyze(points)
        logger.debug("Spiral for %s: %s", user_id, analysis)
        return self.storage.create_session(user_id, points, analysis)

    def log_medication(self, user_id: str, payload: Any) -> MedicationLog:
        request = parse_payload(MedicationLogRequest, payload)
        return self.storage.create_medication_log(
            user_id,
            medication_name=request.medication_name,
            dosage=request.dosage,
            time_taken=request.time_taken,
        )

    def delete_medication(self, user_id: str, log_id: int) -> None:
        if not self.storage.delete_medication_log(log_id, user_id):
            raise NotFoundError(f"Medication log {log_id} not found")

    def submit_finger_tapping(self, user_id: str, payload: Any) -> FingerTappingSession:
        """Analyze and store a finger-tapping capture."""
        request = parse_payload(FingerTappingRequest, payload)
        analysis = self.tap_analyzer.analyze(request.to_events())
        return self.storage.create_finger_tapping_session(user_id, request.hand, analysis)

    def update_settings(self, user_id: str, payload: Any) -> UserSettings:
        request = parse_payload(SettingsRequest, payload)
        values = request.model_dump(exclude_none=True)
        return self.storage.set_settings(user_id, **values)

    def dashboard(self, user_id: str, now: datetime | None = None) -> DashboardSnapshot:
        """Build the live dashboard from persisted history."""
        sessions = self.storage.get_sessions(user_id)
        last = self.storage.get_last_medication(user_id)
        scores = [SessionScore(timestamp=s.timestamp, severity_score=s.severity_score) for s in sessions]
        return self.medication_engine.build_dashboard(
            scores,
            last.time_taken if last else None,
            now=now,
        )

    def report(self, user_id: str, now: datetime | None = None, days: int = REPORT_DAYS) -> ReportSummary:
        """Summarize the last ``days`` of sessions and doses."""
        return build_report(
            self.storage.get_sessions(user_id),
            self.storage.get_medication_logs(user_id),
            now=now,
            days=days,
        )

    def generate_insight(self, user_id: str, custom_prompt: str | None = None) -> str:
        """Ask the AI collaborator for a short summary of recent history."""
        settings = self.storage.get_settings(user_id)
        if settings is not None and not settings.ai_enabled:
            raise InsightUnavailableError("AI insights are disabled for this user")
        if not self.claude.is_configured:
            raise InsightUnavailableError("AI insight provider is not configured")

        context = build_insight_context(
            self.storage.get_sessions(user_id),
            self.storage.get_medication_logs(user_id),
            self.storage.get_finger_tapping_sessions(user_id),
        )
        prompt = build_insight_prompt(
            context,
            custom_prompt or (settings.custom_prompt if settings else None),
        )
        logger.info("Generating AI insight for %s", user_id)
        text = self.claude.complete(prompt, system=INSIGHT_SYSTEM_PROMPT)
        return text or "No insight generated."
