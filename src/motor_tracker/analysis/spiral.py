"""
Spiral Drawing Analysis
=======================

Derive tremor metrics from a hand-drawn spiral captured as a pointer trace.
The metrics are heuristic proxies computed from stroke geometry and capture
rate, not a spectral estimate.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, Sequence

import numpy as np

logger = logging.getLogger(__name__)

MAX_FREQUENCY_HZ = 12.0
MAX_SEVERITY = 10.0
AMPLITUDE_SCALE = 20.0  # amplitude at which severity saturates
JITTER_FACTOR = 0.5
FREQUENCY_FACTOR = 0.5

SEVERE_THRESHOLD = 7.0
MODERATE_THRESHOLD = 3.0

# Live capture targets used for the quality score
TARGET_POINTS = 140
TARGET_DURATION_MS = 6000.0
TARGET_PATH_LENGTH = 900.0


class TremorState(str, Enum):
    """Categorical tremor state."""

    STABLE = "Stable"
    MODERATE = "Moderate"
    SEVERE = "Severe"


@dataclass(frozen=True)
class SpiralPoint:
    """A single sample of the drawn trace."""

    x: float
    y: float
    timestamp: int  # ms

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SpiralPoint:
        return cls(x=float(data["x"]), y=float(data["y"]), timestamp=int(data["timestamp"]))

    def to_dict(self) -> dict[str, Any]:
        return {"x": self.x, "y": self.y, "timestamp": self.timestamp}


@dataclass(frozen=True)
class SpiralAnalysisResult:
    """Tremor metrics for one spiral drawing."""

    tremor_amplitude: float
    jitter: float
    estimated_frequency: float  # Hz, capped at 12
    severity_score: float  # 0-10, one decimal
    tremor_state: TremorState

    def to_dict(self) -> dict[str, Any]:
        """Convert to the camelCase wire format."""
        return {
            "tremorAmplitude": self.tremor_amplitude,
            "jitter": self.jitter,
            "estimatedFrequency": self.estimated_frequency,
            "severityScore": self.severity_score,
            "tremorState": self.tremor_state.value,
        }


def round_half_up(value: float, decimals: int = 1) -> float:
    """Round with halves going up, matching client-side rounding."""
    factor = 10**decimals
    return math.floor(value * factor + 0.5) / factor


def classify_tremor_state(severity_score: float) -> TremorState:
    """Map a 0-10 severity score onto a tremor state.

    Thresholds are exclusive: 3.0 is Stable, 7.0 is Moderate.
    """
    if severity_score > SEVERE_THRESHOLD:
        return TremorState.SEVERE
    if severity_score > MODERATE_THRESHOLD:
        return TremorState.MODERATE
    return TremorState.STABLE


def _segment_lengths(points: Sequence[SpiralPoint]) -> np.ndarray:
    coords = np.array([[p.x, p.y] for p in points], dtype=float)
    deltas = np.diff(coords, axis=0)
    return np.sqrt(np.sum(deltas**2, axis=1))


class SpiralAnalyzer:
    """Compute tremor metrics from a spiral trace."""

    def analyze(self, points: Sequence[SpiralPoint]) -> SpiralAnalysisResult:
        """
        Analyze a drawn spiral.

        Args:
            points: Temporally ordered samples of the trace

        Returns:
            SpiralAnalysisResult (zeroed and Stable for degenerate input)
        """
        if len(points) < 2:
            return self._empty_result()

        total_time = points[-1].timestamp - points[0].timestamp
        if total_time <= 0:
            logger.debug("Spiral has no elapsed time across %d points", len(points))
            return self._empty_result()

        segments = _segment_lengths(points)

        # Population std of segment lengths as the amplitude proxy
        tremor_amplitude = float(np.std(segments))
        jitter = tremor_amplitude * JITTER_FACTOR

        # Capture-rate proxy
        rate = len(points) / (total_time / 1000.0)
        estimated_frequency = min(MAX_FREQUENCY_HZ, rate * FREQUENCY_FACTOR)

        normalized_amp = min(MAX_SEVERITY, (tremor_amplitude / AMPLITUDE_SCALE) * MAX_SEVERITY)
        severity_score = round_half_up(normalized_amp, 1)

        return SpiralAnalysisResult(
            tremor_amplitude=tremor_amplitude,
            jitter=jitter,
            estimated_frequency=estimated_frequency,
            severity_score=severity_score,
            tremor_state=classify_tremor_state(severity_score),
        )

    def _empty_result(self) -> SpiralAnalysisResult:
        return SpiralAnalysisResult(
            tremor_amplitude=0.0,
            jitter=0.0,
            estimated_frequency=0.0,
            severity_score=0.0,
            tremor_state=TremorState.STABLE,
        )


def analyze_spiral(points: Sequence[SpiralPoint]) -> SpiralAnalysisResult:
    """Convenience function to analyze a spiral."""
    return SpiralAnalyzer().analyze(points)


# ----------------------------------------------------------------------------
# Live capture feedback
# ----------------------------------------------------------------------------


@dataclass(frozen=True)
class LiveSpiralMetrics:
    """In-progress metrics shown while the spiral is being drawn."""

    path_length: float  # px
    point_count: int
    duration_ms: float
    tremor_estimate: float  # 0-10
    quality_score: int  # 0-100

    def to_dict(self) -> dict[str, Any]:
        return {
            "pathLength": self.path_length,
            "pointCount": self.point_count,
            "durationMs": self.duration_ms,
            "tremorEstimate": self.tremor_estimate,
            "qualityScore": self.quality_score,
        }


def compute_live_metrics(points: Sequence[SpiralPoint]) -> LiveSpiralMetrics:
    """
    Compute live capture metrics for a partial or finished trace.

    The tremor estimate blends segment-length variability with the
    variability of per-segment speed (px/ms). The quality score averages
    point-count, duration and coverage ratios against fixed targets.
    """
    n = len(points)
    if n < 2:
        return LiveSpiralMetrics(
            path_length=0.0,
            point_count=n,
            duration_ms=0.0,
            tremor_estimate=0.0,
            quality_score=_quality_score(n, 0.0, 0.0),
        )

    segments = _segment_lengths(points)
    timestamps = np.array([p.timestamp for p in points], dtype=float)
    dts = np.diff(timestamps)

    path_length = float(np.sum(segments))
    duration_ms = float(timestamps[-1] - timestamps[0])

    moving = dts > 0
    speed_std = float(np.std(segments[moving] / dts[moving])) if np.any(moving) else 0.0
    segment_std = float(np.std(segments))

    raw_estimate = (segment_std / AMPLITUDE_SCALE) * 5.0 + speed_std * 5.0
    tremor_estimate = round_half_up(min(MAX_SEVERITY, raw_estimate), 1)

    return LiveSpiralMetrics(
        path_length=path_length,
        point_count=n,
        duration_ms=duration_ms,
        tremor_estimate=tremor_estimate,
        quality_score=_quality_score(n, duration_ms, path_length),
    )


def _quality_score(point_count: int, duration_ms: float, path_length: float) -> int:
    ratios = [
        min(1.0, point_count / TARGET_POINTS),
        min(1.0, max(0.0, duration_ms) / TARGET_DURATION_MS),
        min(1.0, path_length / TARGET_PATH_LENGTH),
    ]
    return int(round_half_up(100.0 * sum(ratios) / len(ratios), 0))


@dataclass(frozen=True)
class SubmissionGate:
    """Minimum capture requirements before a spiral may be analyzed."""

    min_points: int = 40
    min_duration_ms: float = 3500.0
    min_path_length: float = 500.0
    name: str = field(default="strict", compare=False)

    PRESETS: ClassVar[tuple[str, ...]] = ("strict", "simple")

    @classmethod
    def strict(cls) -> SubmissionGate:
        return cls()

    @classmethod
    def simple(cls) -> SubmissionGate:
        return cls(min_points=10, min_duration_ms=0.0, min_path_length=0.0, name="simple")

    @classmethod
    def named(cls, name: str) -> SubmissionGate:
        """Look up a gate preset by name."""
        if name not in cls.PRESETS:
            raise ValueError(f"Unknown submission gate: {name}. Choose from {list(cls.PRESETS)}")
        return getattr(cls, name)()

    def check(self, metrics: LiveSpiralMetrics) -> list[str]:
        """Return the unmet requirements (empty when the capture may be submitted)."""
        problems = []
        if metrics.point_count < self.min_points:
            problems.append(f"needs at least {self.min_points} points (has {metrics.point_count})")
        if metrics.duration_ms < self.min_duration_ms:
            problems.append(
                f"needs at least {self.min_duration_ms:.0f} ms of drawing "
                f"(has {metrics.duration_ms:.0f} ms)"
            )
        if metrics.path_length < self.min_path_length:
            problems.append(
                f"needs a path of at least {self.min_path_length:.0f} px "
                f"(has {metrics.path_length:.0f} px)"
            )
        return problems

    def allows(self, metrics: LiveSpiralMetrics) -> bool:
        return not self.check(metrics)
