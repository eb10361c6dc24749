"""Synthetic measurement generation for empty or demo deployments."""

from __future__ import annotations

import logging
import math
import random
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, List, Optional

from datastore.base import MeasurementStore
from models.records import Measurement

logger = logging.getLogger(__name__)

BOOTSTRAP_RECORDS = 50
HISTORY_RECORDS = 720
HISTORY_TIME_RANGE = "Last 30 days (720 hours)"

Clock = Callable[[], datetime]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class SeedResult:
    count: int
    time_range: str

    @property
    def message(self) -> str:
        return f"Successfully added {self.count} test measurements"


def generate_bootstrap_records(
    now: datetime, rng: random.Random, total: int = BOOTSTRAP_RECORDS
) -> List[Measurement]:
    """Uniform random readings, one per hour walking back from ``now``."""
    return [
        Measurement(
            timestamp=now - timedelta(hours=index),
            temperature=20 + rng.random() * 5,
            humidity=45 + rng.random() * 10,
            co2=400 + rng.random() * 200,
        )
        for index in range(total)
    ]


def generate_history_records(
    now: datetime, rng: random.Random, total: int = HISTORY_RECORDS
) -> List[Measurement]:
    """Sinusoidal readings with bounded jitter, one per hour walking back from ``now``."""
    return [
        Measurement(
            timestamp=now - timedelta(hours=index),
            temperature=20 + 5 * math.sin(0.1 * index) + rng.uniform(-1, 1),
            humidity=50 + 15 * math.sin(0.05 * index) + rng.uniform(-2.5, 2.5),
            co2=400 + 200 * math.sin(0.02 * index) + rng.uniform(-50, 50),
        )
        for index in range(total)
    ]


class SeedGenerator:
    """Fills the store with synthetic data at boot or on request."""

    def __init__(
        self,
        store: MeasurementStore,
        rng: Optional[random.Random] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        self.store = store
        self.rng = rng or random.Random()
        self.clock = clock or _utcnow

    def bootstrap(self) -> int:
        """Insert dummy data only when the store holds no records at all."""
        existing = self.store.count()
        if existing:
            logger.info("Skipping bootstrap seed; store is not empty", extra={"count": existing})
            return 0

        records = generate_bootstrap_records(self.clock(), self.rng)
        inserted = self.store.insert_many(records)
        logger.info("Generated bootstrap measurements", extra={"inserted": inserted})
        return inserted

    def seed_history(self) -> SeedResult:
        """Append a fresh 30-day hourly series; repeated calls keep appending."""
        records = generate_history_records(self.clock(), self.rng)
        inserted = self.store.insert_many(records)
        logger.info("Seeded measurement history", extra={"inserted": inserted})
        return SeedResult(count=inserted, time_range=HISTORY_TIME_RANGE)
