"""Motor Tracker: Parkinson's motor-symptom tracking.

Turns spiral-drawing and finger-tapping captures into tremor and rhythm
metrics, logs medication doses, and infers the current medication phase
and tremor trend for a patient dashboard.
"""

__version__ = "0.1.0"

from motor_tracker.analysis import (
    MedicationState,
    MedicationStateEngine,
    SpiralAnalyzer,
    TapAnalyzer,
    TremorState,
    TremorTrend,
)
from motor_tracker.core import (
    Settings,
    TrackerError,
    get_settings,
    init_db,
)

__all__ = [
    "MedicationState",
    "MedicationStateEngine",
    "Settings",
    "SpiralAnalyzer",
    "TapAnalyzer",
    "TrackerError",
    "TremorState",
    "TremorTrend",
    "__version__",
    "get_settings",
    "init_db",
]
