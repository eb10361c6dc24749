"""Contract shared by every measurement store backend."""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Protocol, Sequence

from models.records import Measurement, MeasurementField, TimeRange
from services.aggregator import MetricsSummary

FIND_LIMIT = 100


class StoreError(RuntimeError):
    """Raised when the underlying database rejects or cannot serve a request."""


class MeasurementStore(Protocol):
    backend: str

    def ensure_indexes(self) -> None:
        ...

    def count(self) -> int:
        ...

    def insert_many(self, records: Sequence[Measurement]) -> int:
        ...

    def find(
        self, field: MeasurementField, time_range: Optional[TimeRange] = None
    ) -> List[Dict[str, Any]]:
        ...

    def aggregate(
        self, field: MeasurementField, time_range: Optional[TimeRange] = None
    ) -> MetricsSummary:
        ...

    def is_connected(self) -> bool:
        ...

    def close(self) -> None:
        ...
