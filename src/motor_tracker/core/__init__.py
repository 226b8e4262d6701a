"""Core infrastructure modules."""

from .claude import ClaudeClient, get_claude_client
from .config import Settings, get_settings, reload_settings
from .database import Base, get_session, init_db
from .errors import (
    ConfigurationError,
    InsightUnavailableError,
    NotFoundError,
    TrackerError,
    ValidationError,
)

__all__ = [
    "Base",
    "ClaudeClient",
    "ConfigurationError",
    "InsightUnavailableError",
    "NotFoundError",
    "Settings",
    "TrackerError",
    "ValidationError",
    "get_claude_client",
    "get_session",
    "get_settings",
    "init_db",
    "reload_settings",
]
