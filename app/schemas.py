"""Pydantic schemas for the HTTP API layer."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Iterable, List

from pydantic import BaseModel, ConfigDict, Field

from services.aggregator import MetricsSummary
from services.seeder import SeedResult


def format_timestamp(value: datetime) -> str:
    """UTC ISO-8601 with millisecond precision and a ``Z`` suffix."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


def serialize_rows(rows: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Render store rows as JSON-ready dicts, keeping key order."""
    return [
        {key: format_timestamp(value) if key == "timestamp" else value for key, value in row.items()}
        for row in rows
    ]


class DatabaseState(str, Enum):
    """Connectivity of the measurement store as seen by a live probe."""

    connected = "connected"
    disconnected = "disconnected"


class MetricsResponse(BaseModel):
    """Aggregate statistics for one field over the filtered range."""

    model_config = ConfigDict(populate_by_name=True)

    avg: float
    min: float
    max: float
    std_dev: float = Field(..., alias="stdDev")
    count: int = Field(..., ge=0)

    @classmethod
    def from_summary(cls, summary: MetricsSummary) -> "MetricsResponse":
        return cls(
            avg=summary.avg,
            min=summary.min,
            max=summary.max,
            std_dev=summary.std_dev,
            count=summary.count,
        )


class SeedResponse(BaseModel):
    """Outcome of an on-demand seed."""

    model_config = ConfigDict(populate_by_name=True)

    message: str
    count: int = Field(..., ge=0)
    time_range: str = Field(..., alias="timeRange")

    @classmethod
    def from_result(cls, result: SeedResult) -> "SeedResponse":
        return cls(message=result.message, count=result.count, time_range=result.time_range)


class SeedErrorResponse(BaseModel):
    error: str
    message: str


class HealthResponse(BaseModel):
    """Service liveness plus database connectivity."""

    status: str = "OK"
    message: str
    timestamp: str
    database: DatabaseState
    version: str
