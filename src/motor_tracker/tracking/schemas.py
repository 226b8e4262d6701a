"""Request payload schemas validated before anything reaches an analyzer."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional, TypeVar

import pydantic
from pydantic import BaseModel, ConfigDict, Field

from motor_tracker.analysis.spiral import SpiralPoint
from motor_tracker.analysis.tapping import Hand, TapEvent
from motor_tracker.core.errors import ValidationError


class PointPayload(BaseModel):
    x: float
    y: float
    timestamp: int  # epoch ms


class SpiralSessionRequest(BaseModel):
    points: list[PointPayload]

    def to_points(self) -> list[SpiralPoint]:
        return [SpiralPoint(x=p.x, y=p.y, timestamp=p.timestamp) for p in self.points]


class MedicationLogRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    medication_name: str = Field(alias="medicationName", min_length=1)
    dosage: Optional[str] = None
    time_taken: Optional[datetime] = Field(default=None, alias="timeTaken")  # ISO string


class TapPayload(BaseModel):
    timestamp: int  # epoch ms
    interval: Optional[float] = None  # ms since previous tap


class FingerTappingRequest(BaseModel):
    hand: Hand
    taps: list[TapPayload]

    def to_events(self) -> list[TapEvent]:
        return [TapEvent(timestamp=t.timestamp, interval=t.interval) for t in self.taps]


class SettingsRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    ai_enabled: Optional[bool] = Field(default=None, alias="aiEnabled")
    custom_prompt: Optional[str] = Field(default=None, alias="customPrompt")


ModelT = TypeVar("ModelT", bound=BaseModel)


def parse_payload(model: type[ModelT], data: Any) -> ModelT:
    """Validate a JSON-compatible payload, raising ValidationError on failure."""
    try:
        return model.model_validate(data)
    except pydantic.ValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(part) for part in first.get("loc", ())) or None
        raise ValidationError(f"Invalid input: {first.get('msg', 'validation failed')}", field) from e
