"""Tests for the command-line interface."""

from __future__ import annotations

import json

import pytest
from typer.testing import CliRunner

from motor_tracker.cli import app

runner = CliRunner()


@pytest.fixture
def cli_settings(monkeypatch, test_settings):
    """Point the CLI at a temporary database."""
    from motor_tracker.core import config
    from motor_tracker.core.database import reset_engine

    reset_engine()
    monkeypatch.setattr(config, "_settings", test_settings)
    yield test_settings
    reset_engine()


@pytest.fixture
def spiral_file(temp_dir, spiral_points):
    path = temp_dir / "spiral.json"
    path.write_text(json.dumps(spiral_points))
    return path


class TestAnalyzeCommands:
    """Commands that analyze without touching the database."""

    def test_spiral_analyze(self, cli_settings, spiral_file):
        result = runner.invoke(app, ["spiral", "analyze", str(spiral_file)])
        assert result.exit_code == 0
        assert "severityScore" in result.output

    def test_spiral_check_too_short(self, cli_settings, temp_dir):
        path = temp_dir / "short.json"
        path.write_text(json.dumps({"points": [{"x": i, "y": 0, "timestamp": i * 10} for i in range(5)]}))

        result = runner.invoke(app, ["spiral", "check", str(path)])

        assert result.exit_code == 1
        assert "needs at least 40 points" in result.output

    def test_tap_analyze_timestamps(self, cli_settings, temp_dir):
        path = temp_dir / "taps.json"
        path.write_text(json.dumps([i * 300 for i in range(10)]))

        result = runner.invoke(app, ["tap", "analyze", str(path)])

        assert result.exit_code == 0
        assert "regularityScore" in result.output

    def test_missing_file(self, cli_settings, temp_dir):
        result = runner.invoke(app, ["spiral", "analyze", str(temp_dir / "absent.json")])
        assert result.exit_code == 1
        assert "File not found" in result.output

    def test_invalid_payload(self, cli_settings, temp_dir):
        path = temp_dir / "bad.json"
        path.write_text(json.dumps([{"x": "a", "y": 0, "timestamp": 0}]))

        result = runner.invoke(app, ["spiral", "analyze", str(path)])

        assert result.exit_code == 1
        assert "Invalid input" in result.output


class TestTrackingCommands:
    """Commands that persist data."""

    def test_submit_and_dashboard(self, cli_settings, spiral_file):
        result = runner.invoke(app, ["spiral", "submit", str(spiral_file), "--user", "alice"])
        assert result.exit_code == 0
        assert "Saved session" in result.output

        result = runner.invoke(app, ["med", "log", "Levodopa", "--dosage", "100mg", "--user", "alice"])
        assert result.exit_code == 0

        result = runner.invoke(app, ["dashboard", "--user", "alice", "--json"])
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["currentMedicationState"] == "ON"
        assert len(data["trendTimeline"]) == 1

    def test_med_delete_unknown(self, cli_settings):
        result = runner.invoke(app, ["med", "delete", "42"])
        assert result.exit_code == 1
        assert "not found" in result.output

    def test_tap_submit(self, cli_settings, temp_dir):
        path = temp_dir / "taps.json"
        path.write_text(json.dumps([i * 250 for i in range(12)]))

        result = runner.invoke(app, ["tap", "submit", str(path), "--hand", "left"])

        assert result.exit_code == 0
        assert "taps/s" in result.output

    def test_config_show(self, cli_settings):
        result = runner.invoke(app, ["config", "show"])
        assert result.exit_code == 0
        assert "database" in result.output

    def test_submit_refuses_incomplete_capture(self, cli_settings, temp_dir):
        """A trace below the capture gate is reported and not stored."""
        path = temp_dir / "short.json"
        path.write_text(json.dumps([{"x": 0, "y": 0, "timestamp": 0}, {"x": 5, "y": 5, "timestamp": 100}]))

        result = runner.invoke(app, ["spiral", "submit", str(path), "--user", "alice"])

        assert result.exit_code == 1
        assert "needs at least 40 points (has 2)" in result.output
        assert "Saved session" not in result.output

        result = runner.invoke(app, ["spiral", "list", "--user", "alice"])
        assert "No sessions recorded" in result.output

    def test_submit_with_simple_gate(self, cli_settings, temp_dir):
        from motor_tracker.core.config import CaptureConfig

        cli_settings.capture = CaptureConfig(gate="simple")
        path = temp_dir / "short.json"
        path.write_text(json.dumps([{"x": i * 10, "y": 0, "timestamp": i * 50} for i in range(12)]))

        result = runner.invoke(app, ["spiral", "submit", str(path)])

        assert result.exit_code == 0
        assert "Saved session" in result.output

    def test_report(self, cli_settings, spiral_file, temp_dir):
        runner.invoke(app, ["spiral", "submit", str(spiral_file), "--user", "alice"])
        runner.invoke(app, ["med", "log", "Levodopa", "--dosage", "100mg", "--user", "alice"])

        result = runner.invoke(app, ["report", "--user", "alice", "--json"])
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["sessionCount"] == 1
        assert data["medicationCount"] == 1
        assert [e["label"] for e in data["timeline"]] == ["Session", "Medication"]

        path = temp_dir / "report.md"
        result = runner.invoke(app, ["report", "--user", "alice", "--output", str(path)])
        assert result.exit_code == 0
        assert "| Medication | Levodopa 100mg |" in path.read_text()


class TestConfigErrors:
    """Bad settings files are reported without a traceback."""

    def test_unknown_capture_gate(self, monkeypatch, temp_dir):
        from motor_tracker.core import config

        (temp_dir / "config").mkdir()
        (temp_dir / "config" / "settings.yaml").write_text("capture:\n  gate: lenient\n")
        monkeypatch.chdir(temp_dir)
        monkeypatch.setattr(config, "_settings", None)

        result = runner.invoke(app, ["config", "show"])

        assert result.exit_code == 1
        assert "Unknown capture gate 'lenient'" in result.output
        assert not isinstance(result.exception, ValueError)
