"""Aggregation logic for measurement values."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable


@dataclass
class MetricsSummary:
    """Computed statistics for one field over a filtered range."""

    avg: float = 0.0
    min: float = 0.0
    max: float = 0.0
    std_dev: float = 0.0
    count: int = 0


class Aggregator:
    """Pure aggregation component that can be unit tested in isolation."""

    def aggregate(self, values: Iterable[float]) -> MetricsSummary:
        summary = MetricsSummary()
        mean = 0.0
        squared_deviation = 0.0

        for value in values:
            summary.count += 1
            if summary.count == 1:
                summary.min = value
                summary.max = value
            elif value < summary.min:
                summary.min = value
            elif value > summary.max:
                summary.max = value

            # Welford's running update.
            delta = value - mean
            mean += delta / summary.count
            squared_deviation += delta * (value - mean)

        if summary.count:
            summary.avg = mean
            summary.std_dev = math.sqrt(squared_deviation / summary.count)
        return summary
