"""Signal analysis for the spiral and tapping tests and medication state inference.

Analyzers are pure functions over in-memory sequences:
1) spiral drawing -> tremor metrics
2) finger tapping -> rhythm metrics
3) last dose + severity history -> medication phase, trend and dashboard
"""

from .medication import (
    DashboardSnapshot,
    MedicationState,
    MedicationStateEngine,
    MedicationStatus,
    SessionScore,
    TimelinePoint,
    TremorTrend,
    classify_medication_state,
)
from .spiral import (
    LiveSpiralMetrics,
    SpiralAnalysisResult,
    SpiralAnalyzer,
    SpiralPoint,
    SubmissionGate,
    TremorState,
    analyze_spiral,
    classify_tremor_state,
    compute_live_metrics,
)
from .tapping import (
    ASYMMETRY_NOT_MEASURED,
    Hand,
    TapAnalysisResult,
    TapAnalyzer,
    TapEvent,
    analyze_taps,
    build_tap_events,
)

__all__ = [
    "SpiralAnalyzer",
    "SpiralAnalysisResult",
    "SpiralPoint",
    "TremorState",
    "analyze_spiral",
    "classify_tremor_state",
    "LiveSpiralMetrics",
    "SubmissionGate",
    "compute_live_metrics",
    "TapAnalyzer",
    "TapAnalysisResult",
    "TapEvent",
    "Hand",
    "ASYMMETRY_NOT_MEASURED",
    "analyze_taps",
    "build_tap_events",
    "MedicationStateEngine",
    "MedicationState",
    "MedicationStatus",
    "TremorTrend",
    "SessionScore",
    "TimelinePoint",
    "DashboardSnapshot",
    "classify_medication_state",
]
