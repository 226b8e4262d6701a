"""Tests for finger tapping analysis."""

from __future__ import annotations

import numpy as np
import pytest

from motor_tracker.analysis.tapping import (
    ASYMMETRY_NOT_MEASURED,
    TapAnalyzer,
    TapEvent,
    build_tap_events,
)


class TestBuildTapEvents:
    """Tests for interval derivation."""

    def test_first_tap_has_no_interval(self):
        events = build_tap_events([1000, 1250, 1600])
        assert events[0].interval is None
        assert [e.interval for e in events[1:]] == [250.0, 350.0]

    def test_empty(self):
        assert build_tap_events([]) == []


class TestTapAnalyzer:
    """Tests for TapAnalyzer."""

    def test_too_few_taps(self):
        """Fewer than two taps report only the count."""
        analyzer = TapAnalyzer()
        assert analyzer.analyze([]).total_taps == 0

        result = analyzer.analyze([TapEvent(timestamp=5000)])
        assert result.total_taps == 1
        assert result.avg_interval == 0.0
        assert result.regularity_score == 0.0
        assert result.rhythm_stability == 0.0
        assert result.taps_per_second == 0.0

    def test_perfectly_regular(self):
        """Constant 300 ms intervals are fully regular and stable."""
        taps = build_tap_events([i * 300 for i in range(10)])
        result = TapAnalyzer().analyze(taps)

        assert result.avg_interval == pytest.approx(300.0)
        assert result.std_dev == pytest.approx(0.0)
        assert result.regularity_score == pytest.approx(100.0)
        assert result.rhythm_stability == pytest.approx(100.0)
        assert result.taps_per_second == pytest.approx(10 / 2.7)
        assert result.total_taps == 10

    def test_single_outlier(self):
        """One long interval lowers regularity by its coefficient of variation."""
        taps = build_tap_events([0, 300, 600, 900, 1500])
        result = TapAnalyzer().analyze(taps)

        intervals = np.array([300.0, 300.0, 300.0, 600.0])
        std = np.std(intervals)
        assert result.avg_interval == pytest.approx(375.0)
        assert result.std_dev == pytest.approx(std)
        assert result.regularity_score == pytest.approx(100 - std / 375.0 * 100)
        assert result.rhythm_stability == pytest.approx(100 - std / 200.0 * 100)
        assert result.regularity_score < 100

    def test_scores_floor_at_zero(self):
        """Very irregular tapping clamps both scores at zero."""
        taps = build_tap_events([0, 10, 20, 30, 1030])
        result = TapAnalyzer().analyze(taps)
        assert result.regularity_score == 0.0
        assert result.rhythm_stability == 0.0

    def test_missing_interval_uses_timestamps(self):
        """A non-first tap without an interval falls back to the timestamp gap."""
        taps = [TapEvent(0), TapEvent(300), TapEvent(600, interval=300.0)]
        result = TapAnalyzer().analyze(taps)
        assert result.avg_interval == pytest.approx(300.0)
        assert result.std_dev == pytest.approx(0.0)

    def test_shared_timestamp(self):
        """Taps with no elapsed time give the zero result."""
        taps = build_tap_events([100, 100, 100])
        result = TapAnalyzer().analyze(taps)
        assert result.total_taps == 3
        assert result.regularity_score == 0.0
        assert result.taps_per_second == 0.0

    def test_asymmetry_is_not_measured(self):
        """Asymmetry is a fixed sentinel, never random."""
        taps = build_tap_events([0, 250, 530, 790, 1100])
        results = [TapAnalyzer().analyze(taps) for _ in range(5)]
        assert all(r.asymmetry_score == ASYMMETRY_NOT_MEASURED for r in results)

    def test_to_dict(self):
        data = TapAnalyzer().analyze(build_tap_events([0, 300, 600])).to_dict()
        assert data["totalTaps"] == 3
        assert set(data) == {
            "avgInterval",
            "stdDev",
            "tapsPerSecond",
            "regularityScore",
            "asymmetryScore",
            "rhythmStability",
            "totalTaps",
        }
