from __future__ import annotations

import json
import logging
from pathlib import Path
from threading import Lock
from typing import Any, Dict, List, Optional, Sequence

from datastore.base import FIND_LIMIT
from models.records import Measurement, MeasurementField, TimeRange
from services.aggregator import Aggregator, MetricsSummary

logger = logging.getLogger(__name__)


class InMemoryMeasurementStore:
    """Process-local measurement collection with optional JSON persistence."""

    backend = "memory"

    def __init__(
        self,
        persistence_path: Optional[Path] = None,
        aggregator: Optional[Aggregator] = None,
    ) -> None:
        self._records: List[Measurement] = []
        self.persistence_path = persistence_path
        self.aggregator = aggregator or Aggregator()
        self._lock = Lock()
        if persistence_path:
            persistence_path.parent.mkdir(parents=True, exist_ok=True)
            self._load_from_disk()

    def ensure_indexes(self) -> None:
        """No-op; range filters scan the list."""

    def count(self) -> int:
        with self._lock:
            return len(self._records)

    def insert_many(self, records: Sequence[Measurement]) -> int:
        if not records:
            return 0
        with self._lock:
            self._records.extend(records)
            self._persist()
        return len(records)

    def find(
        self, field: MeasurementField, time_range: Optional[TimeRange] = None
    ) -> List[Dict[str, Any]]:
        matched = self._matching(time_range)
        # sorted() is stable, so equal timestamps keep insertion order.
        ordered = sorted(matched, key=lambda record: record.timestamp)
        return [
            {"timestamp": record.timestamp, field.value: record.value_of(field)}
            for record in ordered[:FIND_LIMIT]
        ]

    def aggregate(
        self, field: MeasurementField, time_range: Optional[TimeRange] = None
    ) -> MetricsSummary:
        matched = self._matching(time_range)
        return self.aggregator.aggregate(record.value_of(field) for record in matched)

    def is_connected(self) -> bool:
        return True

    def close(self) -> None:
        with self._lock:
            self._persist()

    def _matching(self, time_range: Optional[TimeRange]) -> List[Measurement]:
        with self._lock:
            records = list(self._records)
        if time_range is None or time_range.is_unbounded:
            return records
        return [record for record in records if time_range.contains(record.timestamp)]

    def _persist(self) -> None:
        if not self.persistence_path:
            return
        payload = [
            {**record.to_document(), "timestamp": record.timestamp.isoformat()}
            for record in self._records
        ]
        self.persistence_path.write_text(json.dumps(payload, indent=2))

    def _load_from_disk(self) -> None:
        if not self.persistence_path or not self.persistence_path.exists():
            return

        try:
            raw = self.persistence_path.read_text() or "[]"
            data = json.loads(raw)
        except (OSError, json.JSONDecodeError):
            logger.warning(
                "Ignoring unreadable measurement file %s", self.persistence_path
            )
            data = []

        for payload in data:
            self._records.append(Measurement.from_document(payload))
