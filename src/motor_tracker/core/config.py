"""Configuration management with dataclasses and YAML loading."""

from __future__ import annotations

import os
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

import yaml

from motor_tracker.analysis.spiral import SubmissionGate

from .errors import ConfigurationError


@dataclass
class DatabaseConfig:
    """Database configuration."""

    url: str = "sqlite:///data/motor_tracker.db"
    echo: bool = False


@dataclass
class ClaudeConfig:
    """Claude API configuration for AI insights."""

    api_key: str = ""
    model: str = "claude-sonnet-4-20250514"
    max_tokens: int = 200
    temperature: float = 0.3

    def __post_init__(self) -> None:
        """Load API key from environment if not set."""
        if not self.api_key:
            self.api_key = os.getenv("ANTHROPIC_API_KEY", "")


@dataclass
class CaptureConfig:
    """Spiral capture requirements checked before submission."""

    gate: str = "strict"  # strict or simple
    min_points: int = 40
    min_duration_ms: float = 3500.0
    min_path_length: float = 500.0

    def __post_init__(self) -> None:
        if self.gate not in SubmissionGate.PRESETS:
            raise ConfigurationError(
                f"Unknown capture gate '{self.gate}'. Choose from: {', '.join(SubmissionGate.PRESETS)}"
            )

    def to_gate(self) -> SubmissionGate:
        """Build the submission gate for this configuration."""
        if self.gate == "simple":
            return SubmissionGate.simple()
        return SubmissionGate(
            min_points=self.min_points,
            min_duration_ms=self.min_duration_ms,
            min_path_length=self.min_path_length,
        )


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = "INFO"

    def __post_init__(self) -> None:
        env_level = os.getenv("MOTOR_TRACKER_LOG_LEVEL")
        if env_level:
            self.level = env_level
        self.level = self.level.upper()


@dataclass
class Settings:
    """Main application settings."""

    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    claude: ClaudeConfig = field(default_factory=ClaudeConfig)
    capture: CaptureConfig = field(default_factory=CaptureConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_yaml(cls, path: str | Path) -> Settings:
        """Load settings from YAML file."""
        path = Path(path)
        if not path.exists():
            return cls()

        with open(path) as f:
            data = yaml.safe_load(f) or {}

        return cls._from_dict(data)

    @classmethod
    def _from_dict(cls, data: dict[str, Any]) -> Settings:
        """Create Settings from dictionary."""
        return cls(
            database=DatabaseConfig(**data.get("database", {})),
            claude=ClaudeConfig(**data.get("claude", {})),
            capture=CaptureConfig(**data.get("capture", {})),
            logging=LoggingConfig(**data.get("logging", {})),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert settings to dictionary."""
        return asdict(self)

    def ensure_directories(self) -> None:
        """Create the parent directory of a file-backed SQLite database."""
        prefix = "sqlite:///"
        url = self.database.url
        if url.startswith(prefix) and url != f"{prefix}:memory:":
            Path(url[len(prefix):]).parent.mkdir(parents=True, exist_ok=True)


# Global settings instance
_settings: Settings | None = None


def get_settings(config_path: str | Path | None = None) -> Settings:
    """Get or create global settings instance."""
    global _settings
    if _settings is None:
        if config_path is None:
            # Default config paths to check
            for candidate in [
                Path("config/settings.yaml"),
                Path.home() / ".config/motor-tracker/settings.yaml",
            ]:
                if candidate.exists():
                    config_path = candidate
                    break

        _settings = Settings.from_yaml(config_path) if config_path else Settings()

    return _settings


def reload_settings(config_path: str | Path | None = None) -> Settings:
    """Force reload settings from file."""
    global _settings
    _settings = None
    return get_settings(config_path)
