"""Unit tests for the in-memory measurement store."""

from __future__ import annotations

import json
import random
from datetime import datetime, timedelta, timezone

from datastore.base import FIND_LIMIT
from datastore.memory import InMemoryMeasurementStore
from models.records import Measurement, MeasurementField, TimeRange

BASE = datetime(2024, 1, 1, tzinfo=timezone.utc)


def _measurement(hours: int, value: float = 1.0) -> Measurement:
    return Measurement(
        timestamp=BASE + timedelta(hours=hours),
        temperature=value,
        humidity=value + 40,
        co2=value + 400,
    )


def test_find_projects_only_timestamp_and_field() -> None:
    store = InMemoryMeasurementStore()
    store.insert_many([_measurement(0, 5.0)])

    rows = store.find(MeasurementField.co2)

    assert rows == [{"timestamp": BASE, "co2": 405.0}]


def test_find_orders_ascending_and_caps_results() -> None:
    store = InMemoryMeasurementStore()
    hours = list(range(150))
    random.Random(7).shuffle(hours)
    store.insert_many([_measurement(hour, float(hour)) for hour in hours])

    rows = store.find(MeasurementField.temperature)

    assert len(rows) == FIND_LIMIT
    timestamps = [row["timestamp"] for row in rows]
    assert timestamps == sorted(timestamps)
    assert rows[0]["timestamp"] == BASE


def test_aggregate_scans_past_the_find_cap() -> None:
    store = InMemoryMeasurementStore()
    store.insert_many([_measurement(hour, float(hour)) for hour in range(150)])

    summary = store.aggregate(MeasurementField.temperature)

    assert summary.count == 150
    assert summary.min == 0.0
    assert summary.max == 149.0
    assert len(store.find(MeasurementField.temperature)) == FIND_LIMIT


def test_range_bounds_are_inclusive_and_independent() -> None:
    store = InMemoryMeasurementStore()
    store.insert_many([_measurement(hour) for hour in range(10)])

    both = TimeRange(start=BASE + timedelta(hours=2), end=BASE + timedelta(hours=5))
    start_only = TimeRange(start=BASE + timedelta(hours=8))
    end_only = TimeRange(end=BASE + timedelta(hours=1))

    assert len(store.find(MeasurementField.humidity, both)) == 4
    assert len(store.find(MeasurementField.humidity, start_only)) == 2
    assert len(store.find(MeasurementField.humidity, end_only)) == 2


def test_aggregate_without_matches_returns_zeros() -> None:
    store = InMemoryMeasurementStore()
    store.insert_many([_measurement(0)])

    summary = store.aggregate(
        MeasurementField.co2, TimeRange(start=BASE + timedelta(days=30))
    )

    assert (summary.avg, summary.min, summary.max, summary.std_dev, summary.count) == (
        0.0,
        0.0,
        0.0,
        0.0,
        0,
    )


def test_insert_many_appends_duplicates() -> None:
    store = InMemoryMeasurementStore()

    assert store.insert_many([_measurement(0), _measurement(0)]) == 2
    assert store.insert_many([]) == 0
    assert store.count() == 2
    assert store.is_connected() is True


def test_persists_to_disk_and_reloads(tmp_path) -> None:
    path = tmp_path / "measurements.json"
    store = InMemoryMeasurementStore(persistence_path=path)
    store.insert_many([_measurement(3, 2.5)])

    payload = json.loads(path.read_text())
    assert payload[0]["timestamp"] == "2024-01-01T03:00:00+00:00"

    reloaded = InMemoryMeasurementStore(persistence_path=path)
    assert reloaded.count() == 1
    assert reloaded.find(MeasurementField.temperature) == [
        {"timestamp": BASE + timedelta(hours=3), "temperature": 2.5}
    ]


def test_unreadable_file_starts_empty(tmp_path) -> None:
    path = tmp_path / "measurements.json"
    path.write_text("{not json")

    store = InMemoryMeasurementStore(persistence_path=path)

    assert store.count() == 0
