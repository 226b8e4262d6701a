"""Tests for the tracking service and AI insight prompts."""

from __future__ import annotations

from datetime import datetime, timedelta

import pytest

from motor_tracker.analysis.medication import MedicationState, TremorTrend
from motor_tracker.core.errors import InsightUnavailableError, NotFoundError, ValidationError
from motor_tracker.tracking.insight import (
    DEFAULT_INSIGHT_PROMPT,
    INSIGHT_SYSTEM_PROMPT,
    build_insight_context,
    build_insight_prompt,
)
from motor_tracker.tracking.schemas import MedicationLogRequest, parse_payload

from .conftest import FakeClaude


class TestPayloadValidation:
    """Tests for request payload parsing."""

    def test_missing_field(self, service):
        with pytest.raises(ValidationError) as exc_info:
            service.submit_spiral("alice", {"points": [{"y": 1, "timestamp": 0}]})
        assert exc_info.value.field == "points.0.x"

    def test_non_numeric_coordinate(self, service):
        with pytest.raises(ValidationError):
            service.submit_spiral("alice", {"points": [{"x": "left", "y": 1, "timestamp": 0}]})

    def test_unknown_hand(self, service):
        with pytest.raises(ValidationError) as exc_info:
            service.submit_finger_tapping("alice", {"hand": "middle", "taps": []})
        assert exc_info.value.field == "hand"

    def test_medication_aliases(self):
        request = parse_payload(
            MedicationLogRequest,
            {"medicationName": "Levodopa", "dosage": "100mg", "timeTaken": "2026-03-14T10:00:00Z"},
        )
        assert request.medication_name == "Levodopa"
        assert request.time_taken.hour == 10

    def test_empty_medication_name(self):
        with pytest.raises(ValidationError):
            parse_payload(MedicationLogRequest, {"medicationName": ""})


class TestTrackingService:
    """Tests for TrackingService."""

    def test_submit_spiral(self, service, spiral_points):
        row = service.submit_spiral("alice", {"points": spiral_points})

        assert row.id is not None
        assert row.tremor_state in {"Stable", "Moderate", "Severe"}
        assert len(row.points) == len(spiral_points)
        assert service.storage.get_sessions("alice")[0].id == row.id

    def test_submit_short_spiral(self, service):
        """Degenerate drawings are stored with zeroed metrics."""
        row = service.submit_spiral("alice", {"points": [{"x": 1, "y": 1, "timestamp": 0}]})
        assert row.severity_score == 0.0
        assert row.tremor_state == "Stable"

    def test_submit_finger_tapping(self, service):
        taps = [{"timestamp": i * 300, "interval": 300 if i else None} for i in range(10)]
        row = service.submit_finger_tapping("alice", {"hand": "right", "taps": taps})

        assert row.hand == "right"
        assert row.total_taps == 10
        assert row.regularity_score == pytest.approx(100.0)

    def test_log_medication_converts_to_utc(self, service):
        row = service.log_medication(
            "alice", {"medicationName": "Levodopa", "timeTaken": "2026-03-14T10:00:00+02:00"}
        )
        assert row.time_taken == datetime(2026, 3, 14, 8, 0)

    def test_delete_missing_medication(self, service):
        with pytest.raises(NotFoundError):
            service.delete_medication("alice", 999)

    def test_delete_medication(self, service):
        row = service.log_medication("alice", {"medicationName": "Levodopa"})
        service.delete_medication("alice", row.id)
        assert service.storage.get_medication_logs("alice") == []

    def test_dashboard(self, service, now):
        analysis_points = [
            [{"x": 0, "y": 0, "timestamp": 0}, {"x": 20, "y": 0, "timestamp": 100}, {"x": 20, "y": 0, "timestamp": 200}],
            [{"x": 0, "y": 0, "timestamp": 0}, {"x": 10, "y": 0, "timestamp": 100}, {"x": 10, "y": 0, "timestamp": 200}],
        ]
        for offset, points in zip((2, 1), analysis_points):
            row = service.submit_spiral("alice", {"points": points})
            # Spread sessions out in time
            with service.storage._session() as session:
                stored = session.get(type(row), row.id)
                stored.timestamp = now - timedelta(hours=offset)

        service.log_medication(
            "alice", {"medicationName": "Levodopa", "timeTaken": (now - timedelta(minutes=200)).isoformat()}
        )

        snapshot = service.dashboard("alice", now=now)

        assert snapshot.current_medication_state is MedicationState.WEARING_OFF
        assert snapshot.time_since_last_dose_minutes == 200
        # 5.0 then 2.5
        assert snapshot.tremor_trend is TremorTrend.IMPROVING
        assert snapshot.average_tremor_score == 3.8
        assert [p.tremor_score for p in snapshot.trend_timeline] == [5.0, 2.5]

    def test_dashboard_empty(self, service, now):
        data = service.dashboard("nobody", now=now).to_dict()
        assert data["currentMedicationState"] == "OFF"
        assert data["trendTimeline"] == []

    def test_update_settings(self, service):
        row = service.update_settings("alice", {"aiEnabled": False, "customPrompt": "Short."})
        assert row.ai_enabled is False
        assert row.custom_prompt == "Short."


class TestInsight:
    """Tests for AI insight generation."""

    def test_generate_insight(self, service, fake_claude, spiral_points):
        service.submit_spiral("alice", {"points": spiral_points})
        service.log_medication("alice", {"medicationName": "Levodopa", "dosage": "100mg"})

        text = service.generate_insight("alice")

        assert text == fake_claude.reply
        (call,) = fake_claude.calls
        assert call["system"] == INSIGHT_SYSTEM_PROMPT
        assert call["prompt"].startswith(DEFAULT_INSIGHT_PROMPT)
        assert "Recent tremor sessions (1):" in call["prompt"]
        assert "- Levodopa 100mg at" in call["prompt"]

    def test_custom_prompt_from_settings(self, service, fake_claude):
        service.update_settings("alice", {"customPrompt": "Focus on tapping."})
        service.generate_insight("alice")
        assert fake_claude.calls[0]["prompt"].startswith("Focus on tapping.")

    def test_disabled(self, service):
        service.update_settings("alice", {"aiEnabled": False})
        with pytest.raises(InsightUnavailableError, match="disabled"):
            service.generate_insight("alice")

    def test_not_configured(self, storage):
        from motor_tracker.tracking.service import TrackingService

        service = TrackingService(storage=storage, claude=FakeClaude(configured=False))
        with pytest.raises(InsightUnavailableError, match="not configured"):
            service.generate_insight("alice")

    def test_empty_reply(self, storage):
        from motor_tracker.tracking.service import TrackingService

        service = TrackingService(storage=storage, claude=FakeClaude(reply=""))
        assert service.generate_insight("alice") == "No insight generated."

    def test_context_lists_three_most_recent(self, service, now):
        for hours in range(5):
            service.storage.create_medication_log("alice", f"Dose{hours}", time_taken=now - timedelta(hours=hours))

        context = build_insight_context([], service.storage.get_medication_logs("alice"), [])

        assert "Recent medications (5):" in context
        assert "Dose0" in context and "Dose2" in context
        assert "Dose3" not in context
        assert "Recent tremor sessions (0):" in context

    def test_prompt_default(self):
        assert build_insight_prompt("ctx") == f"{DEFAULT_INSIGHT_PROMPT}\n\nctx"
        assert build_insight_prompt("ctx", "Custom") == "Custom\n\nctx"
