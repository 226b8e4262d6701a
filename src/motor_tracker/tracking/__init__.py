"""Persistence and request-level operations around the analyzers."""

from .models import FingerTappingSession, HandwritingSession, MedicationLog, UserSettings
from .report import ReportSummary, build_report, render_report
from .service import TrackingService
from .storage import TrackerStorage

__all__ = [
    "FingerTappingSession",
    "HandwritingSession",
    "MedicationLog",
    "ReportSummary",
    "TrackerStorage",
    "TrackingService",
    "UserSettings",
    "build_report",
    "render_report",
]
