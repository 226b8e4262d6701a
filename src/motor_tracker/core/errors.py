"""Exception types raised outside the pure analysis layer."""

from __future__ import annotations


class TrackerError(Exception):
    """Base class for motor-tracker errors."""


class ValidationError(TrackerError):
    """Input payload failed schema validation."""

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.field = field

    def to_dict(self) -> dict[str, str]:
        data = {"message": self.message}
        if self.field:
            data["field"] = self.field
        return data


class NotFoundError(TrackerError):
    """Requested record does not exist for this user."""


class InsightUnavailableError(TrackerError):
    """AI insight is disabled or not configured."""


class ConfigurationError(TrackerError):
    """Settings file holds a value the tracker cannot use."""
