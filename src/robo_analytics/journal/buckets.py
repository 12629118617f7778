"""Bucket accumulators shared by the aggregation engine and the optimizer."""

from __future__ import annotations

import math
from collections import defaultdict
from dataclasses import dataclass
from datetime import date
from typing import Callable, Hashable, Iterable, Sequence, TypeVar

from robo_analytics.core.models import TradeRecord

K = TypeVar("K", bound=Hashable)
T = TypeVar("T")


@dataclass
class BucketAggregate:
    """Accumulator for one bucket (hour, weekday, month, year...)."""

    count: int = 0
    positive_count: int = 0
    negative_count: int = 0
    sum_result: float = 0.0

    def record(self, result: float) -> None:
        self.count += 1
        self.sum_result += result
        if result > 0:
            self.positive_count += 1
        elif result < 0:
            self.negative_count += 1

    @property
    def win_rate(self) -> float:
        """Percentage of records with a positive result."""
        if self.count == 0:
            return 0.0
        return self.positive_count / self.count * 100

    @property
    def average_result(self) -> float:
        if self.count == 0:
            return 0.0
        return self.sum_result / self.count

    def to_dict(self) -> dict[str, float | int]:
        return {
            "count": self.count,
            "positive_count": self.positive_count,
            "negative_count": self.negative_count,
            "win_rate": self.win_rate,
            "sum_result": self.sum_result,
            "average_result": self.average_result,
        }


@dataclass(frozen=True)
class DailyAggregate:
    """Sum of all results on one date.  Its sign decides the day's outcome."""

    date: date
    sum_result: float
    count: int


def bucket_by(
    records: Iterable[TradeRecord],
    key: Callable[[TradeRecord], K],
) -> dict[K, BucketAggregate]:
    """Fold records into buckets, returned in ascending key order."""
    buckets: dict[K, BucketAggregate] = defaultdict(BucketAggregate)
    for rec in records:
        buckets[key(rec)].record(rec.result)
    return {k: buckets[k] for k in sorted(buckets)}


def daily_aggregates(records: Iterable[TradeRecord]) -> list[DailyAggregate]:
    """One aggregate per date with records, in chronological order."""
    sums: dict[date, float] = defaultdict(float)
    counts: dict[date, int] = defaultdict(int)
    for rec in records:
        sums[rec.date] += rec.result
        counts[rec.date] += 1
    return [DailyAggregate(d, sums[d], counts[d]) for d in sorted(sums)]


def downsample(points: Sequence[T], max_points: int) -> list[T]:
    """Keep every ``ceil(n / max_points)``-th point plus the first and last."""
    if len(points) <= max_points:
        return list(points)
    step = math.ceil(len(points) / max_points)
    last = len(points) - 1
    return [p for i, p in enumerate(points) if i == 0 or i == last or i % step == 0]
