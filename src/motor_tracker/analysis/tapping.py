"""
Finger Tapping Analysis
=======================

Rhythm metrics for a fixed-duration finger-tapping capture. Tap intervals
are summarized by their mean and population standard deviation, which feed
a speed-relative regularity score and a fixed-reference rhythm stability.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Sequence

import numpy as np

logger = logging.getLogger(__name__)

CAPTURE_DURATION_SECONDS = 10
STABILITY_REFERENCE_MS = 200.0

# Asymmetry needs a paired left/right capture, which a single session
# does not have. Reported as this sentinel instead of a made-up value.
ASYMMETRY_NOT_MEASURED = 0.0


class Hand(str, Enum):
    """Hand used for the capture (metadata only)."""

    LEFT = "left"
    RIGHT = "right"


@dataclass(frozen=True)
class TapEvent:
    """A single tap."""

    timestamp: int  # ms
    interval: float | None = None  # ms since previous tap

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TapEvent:
        interval = data.get("interval")
        return cls(
            timestamp=int(data["timestamp"]),
            interval=float(interval) if interval is not None else None,
        )


@dataclass(frozen=True)
class TapAnalysisResult:
    """Rhythm metrics for one tapping capture."""

    avg_interval: float  # ms
    std_dev: float  # ms
    taps_per_second: float
    regularity_score: float  # 0-100
    asymmetry_score: float  # 0-100
    rhythm_stability: float  # 0-100
    total_taps: int

    def to_dict(self) -> dict[str, Any]:
        """Convert to the camelCase wire format."""
        return {
            "avgInterval": self.avg_interval,
            "stdDev": self.std_dev,
            "tapsPerSecond": self.taps_per_second,
            "regularityScore": self.regularity_score,
            "asymmetryScore": self.asymmetry_score,
            "rhythmStability": self.rhythm_stability,
            "totalTaps": self.total_taps,
        }


def build_tap_events(timestamps: Sequence[int]) -> list[TapEvent]:
    """Build tap events from raw tap timestamps, deriving each interval."""
    events: list[TapEvent] = []
    for i, ts in enumerate(timestamps):
        interval = float(ts - timestamps[i - 1]) if i > 0 else None
        events.append(TapEvent(timestamp=int(ts), interval=interval))
    return events


class TapAnalyzer:
    """Compute rhythm metrics from a tap sequence."""

    def analyze(self, taps: Sequence[TapEvent]) -> TapAnalysisResult:
        """
        Analyze a finished tapping capture.

        Args:
            taps: Temporally ordered taps

        Returns:
            TapAnalysisResult (zeroed apart from total_taps for degenerate input)
        """
        if len(taps) < 2:
            return self._empty_result(len(taps))

        intervals = np.array(
            [
                tap.interval if tap.interval is not None else tap.timestamp - prev.timestamp
                for prev, tap in zip(taps, taps[1:])
            ],
            dtype=float,
        )

        avg_interval = float(np.mean(intervals))
        if avg_interval <= 0:
            logger.debug("Tap sequence has no positive mean interval")
            return self._empty_result(len(taps))

        std_dev = float(np.std(intervals))

        duration_sec = (taps[-1].timestamp - taps[0].timestamp) / 1000.0
        taps_per_second = len(taps) / duration_sec if duration_sec > 0 else 0.0

        regularity_score = max(0.0, 100.0 - (std_dev / avg_interval) * 100.0)
        rhythm_stability = max(0.0, 100.0 - (std_dev / STABILITY_REFERENCE_MS) * 100.0)

        return TapAnalysisResult(
            avg_interval=avg_interval,
            std_dev=std_dev,
            taps_per_second=taps_per_second,
            regularity_score=regularity_score,
            asymmetry_score=ASYMMETRY_NOT_MEASURED,
            rhythm_stability=rhythm_stability,
            total_taps=len(taps),
        )

    def _empty_result(self, total_taps: int) -> TapAnalysisResult:
        return TapAnalysisResult(
            avg_interval=0.0,
            std_dev=0.0,
            taps_per_second=0.0,
            regularity_score=0.0,
            asymmetry_score=ASYMMETRY_NOT_MEASURED,
            rhythm_stability=0.0,
            total_taps=total_taps,
        )


def analyze_taps(taps: Sequence[TapEvent]) -> TapAnalysisResult:
    """Convenience function to analyze a tap sequence."""
    return TapAnalyzer().analyze(taps)
