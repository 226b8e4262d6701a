"""Pytest fixtures for motor-tracker tests."""

from __future__ import annotations

import tempfile
from datetime import datetime
from pathlib import Path

import pytest

from motor_tracker.analysis.spiral import SpiralPoint
from motor_tracker.core.config import DatabaseConfig, Settings
from motor_tracker.core.database import init_db, reset_engine
from motor_tracker.tracking.service import TrackingService
from motor_tracker.tracking.storage import TrackerStorage


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def test_settings(temp_dir: Path) -> Settings:
    """Create test settings with a temporary database."""
    return Settings(database=DatabaseConfig(url=f"sqlite:///{temp_dir / 'test.db'}"))


@pytest.fixture
def test_db(temp_dir: Path):
    """Create a test database and return its session factory."""
    from sqlalchemy import create_engine
    from sqlalchemy.orm import sessionmaker

    db_path = temp_dir / "test.db"
    engine = create_engine(f"sqlite:///{db_path}")
    init_db(engine)

    Session = sessionmaker(bind=engine, expire_on_commit=False)

    yield Session

    # Cleanup
    engine.dispose()
    reset_engine()


@pytest.fixture
def storage(test_db) -> TrackerStorage:
    """Storage bound to the test database."""
    return TrackerStorage(test_db)


class FakeClaude:
    """Stand-in for the AI text service."""

    def __init__(self, configured: bool = True, reply: str = "Tremor is improving.") -> None:
        self.configured = configured
        self.reply = reply
        self.calls: list[dict] = []

    @property
    def is_configured(self) -> bool:
        return self.configured

    def complete(self, prompt: str, system: str | None = None, **kwargs) -> str:
        self.calls.append({"prompt": prompt, "system": system})
        return self.reply


@pytest.fixture
def fake_claude() -> FakeClaude:
    return FakeClaude()


@pytest.fixture
def service(storage: TrackerStorage, fake_claude: FakeClaude) -> TrackingService:
    """Tracking service over the test database."""
    return TrackingService(storage=storage, claude=fake_claude)


@pytest.fixture
def now() -> datetime:
    """Fixed reference time (naive UTC)."""
    return datetime(2026, 3, 14, 12, 0, 0)


def make_points(segments: list[tuple[float, float]], step_ms: int = 100) -> list[SpiralPoint]:
    """Build a trace starting at the origin from per-segment (dx, dy) moves."""
    points = [SpiralPoint(x=0.0, y=0.0, timestamp=0)]
    x = y = 0.0
    for i, (dx, dy) in enumerate(segments, start=1):
        x += dx
        y += dy
        points.append(SpiralPoint(x=x, y=y, timestamp=i * step_ms))
    return points


@pytest.fixture
def spiral_points() -> list[dict]:
    """A plausible spiral payload with 60 samples over 6 seconds."""
    import numpy as np

    rng = np.random.default_rng(42)
    theta = np.linspace(0, 6 * np.pi, 60)
    radius = 5 + 8 * theta
    xs = 200 + radius * np.cos(theta) + rng.normal(0, 1.5, 60)
    ys = 200 + radius * np.sin(theta) + rng.normal(0, 1.5, 60)
    return [
        {"x": float(x), "y": float(y), "timestamp": 1_700_000_000_000 + i * 100}
        for i, (x, y) in enumerate(zip(xs, ys))
    ]
