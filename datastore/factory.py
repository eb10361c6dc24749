from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from datastore.base import MeasurementStore
from datastore.memory import InMemoryMeasurementStore
from datastore.mongo import MongoMeasurementStore
from settings import get_settings


@lru_cache
def build_default_store() -> MeasurementStore:
    """Factory that wires the configured measurement backend."""
    settings = get_settings()
    if settings.store_backend == "memory":
        path = settings.memory_store_path
        return InMemoryMeasurementStore(persistence_path=Path(path) if path else None)
    return MongoMeasurementStore.from_settings(settings)
