"""Domain models shared across services."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional


class MeasurementField(str, Enum):
    """Quantities a measurement carries and queries can select."""

    temperature = "temperature"
    humidity = "humidity"
    co2 = "co2"

    @property
    def label(self) -> str:
        return _FIELD_LABELS[self][0]

    @property
    def unit(self) -> str:
        return _FIELD_LABELS[self][1]

    @property
    def display_name(self) -> str:
        return f"{self.label} ({self.unit})"

    @classmethod
    def names(cls) -> list[str]:
        return [member.value for member in cls]


_FIELD_LABELS = {
    MeasurementField.temperature: ("Temperature", "°C"),
    MeasurementField.humidity: ("Humidity", "%"),
    MeasurementField.co2: ("CO2", "ppm"),
}


def ensure_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC and normalise aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


@dataclass(slots=True)
class Measurement:
    """A single environmental sensor sample."""

    timestamp: datetime
    temperature: float
    humidity: float
    co2: float

    def __post_init__(self) -> None:
        self.timestamp = ensure_utc(self.timestamp)

    def value_of(self, field: MeasurementField) -> float:
        return getattr(self, field.value)

    def to_document(self) -> Dict[str, Any]:
        return {
            "timestamp": self.timestamp,
            "temperature": self.temperature,
            "humidity": self.humidity,
            "co2": self.co2,
        }

    @classmethod
    def from_document(cls, document: Dict[str, Any]) -> "Measurement":
        timestamp = document["timestamp"]
        if isinstance(timestamp, str):
            timestamp = datetime.fromisoformat(timestamp.replace("Z", "+00:00"))
        return cls(
            timestamp=timestamp,
            temperature=float(document["temperature"]),
            humidity=float(document["humidity"]),
            co2=float(document["co2"]),
        )


@dataclass(frozen=True, slots=True)
class TimeRange:
    """Inclusive timestamp bounds; either side may be open."""

    start: Optional[datetime] = None
    end: Optional[datetime] = None

    @property
    def is_unbounded(self) -> bool:
        return self.start is None and self.end is None

    def contains(self, timestamp: datetime) -> bool:
        if self.start is not None and timestamp < self.start:
            return False
        if self.end is not None and timestamp > self.end:
            return False
        return True

    def to_filter(self) -> Dict[str, Any]:
        """Render the bounds as a MongoDB query document."""
        bounds: Dict[str, Any] = {}
        if self.start is not None:
            bounds["$gte"] = self.start
        if self.end is not None:
            bounds["$lte"] = self.end
        return {"timestamp": bounds} if bounds else {}
