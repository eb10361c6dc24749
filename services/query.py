"""Validation and dispatch of read queries against the measurement store."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional

from datastore.base import MeasurementStore
from models.records import MeasurementField, TimeRange, ensure_utc
from services.aggregator import MetricsSummary

logger = logging.getLogger(__name__)

DEFAULT_FIELD = MeasurementField.temperature.value

INVALID_FIELD = "INVALID_FIELD"
INVALID_DATE = "INVALID_DATE"


class QueryValidationError(ValueError):
    """Raised when query parameters are rejected before touching the store."""

    def __init__(self, code: str, message: str, parameter: Optional[str] = None) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.parameter = parameter


@dataclass(frozen=True)
class MeasurementQuery:
    field: MeasurementField
    time_range: TimeRange


def parse_field(value: Optional[str]) -> MeasurementField:
    candidate = DEFAULT_FIELD if value is None else value
    try:
        return MeasurementField(candidate)
    except ValueError as exc:
        allowed = ", ".join(MeasurementField.names())
        raise QueryValidationError(
            INVALID_FIELD, f"Invalid field. Allowed: {allowed}", parameter="field"
        ) from exc


def parse_date(value: Optional[str], parameter: str) -> Optional[datetime]:
    """Parse an ISO-8601 date or datetime; naive values are taken as UTC."""
    # Only a missing or empty parameter means "unbounded".
    if value is None or value == "":
        return None
    candidate = value.strip()
    if candidate.endswith("Z"):
        candidate = candidate[:-1] + "+00:00"

    try:
        parsed = datetime.fromisoformat(candidate)
    except ValueError as exc:
        raise QueryValidationError(
            INVALID_DATE, f"Invalid {parameter} format", parameter=parameter
        ) from exc

    return ensure_utc(parsed)


def build_query(
    field: Optional[str] = None,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
) -> MeasurementQuery:
    return MeasurementQuery(
        field=parse_field(field),
        time_range=TimeRange(
            start=parse_date(start_date, "start_date"),
            end=parse_date(end_date, "end_date"),
        ),
    )


class QueryService:
    """Turns raw request parameters into store reads."""

    def __init__(self, store: MeasurementStore) -> None:
        self.store = store

    def list_measurements(
        self,
        field: Optional[str] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        query = build_query(field, start_date, end_date)
        rows = self.store.find(query.field, query.time_range)
        logger.debug(
            "Fetched measurements",
            extra={
                "field": query.field.value,
                "start_date": start_date,
                "end_date": end_date,
                "count": len(rows),
            },
        )
        return rows

    def compute_metrics(
        self,
        field: Optional[str] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
    ) -> MetricsSummary:
        query = build_query(field, start_date, end_date)
        return self.store.aggregate(query.field, query.time_range)
