"""Time-of-day session analysis.

Two views over the trading session window (09h-17h by default):

* intraday decay: how the average result per hour accumulates through the
  session, and how much of the intraday peak is given back by the close;
* cross-validation heatmap: whether each weekday/hour cell that was
  profitable historically is still profitable in the current month.

Usage::

    decay = intraday_decay(records)
    print(decay.peak_hour, decay.decay)
    heatmap = cross_validation_heatmap(records, today=date.today())
    print(heatmap.score)
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date
from typing import Iterable

from robo_analytics.core.enums import HeatmapSignal
from robo_analytics.core.models import TradeRecord

from .buckets import BucketAggregate

logger = logging.getLogger(__name__)

# 0=Sunday .. 6=Saturday, matching TradeRecord.weekday
DAY_NAMES = ["sunday", "monday", "tuesday", "wednesday", "thursday", "friday", "saturday"]
SESSION_WEEKDAYS = (1, 2, 3, 4, 5)


# ---------------------------------------------------------------------------
# Intraday decay
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class HourPoint:
    hour: int
    average_result: float
    accumulated: float
    operations: int


@dataclass(frozen=True)
class IntradayDecay:
    """Average-per-hour accumulation across the session window."""

    points: tuple[HourPoint, ...]
    best_hour: int
    worst_hour: int
    peak_hour: int
    peak_value: float
    final_value: float
    decay: float  # Peak minus close; <= 0 means no give-back


def intraday_decay(
    records: Iterable[TradeRecord],
    *,
    first_hour: int = 9,
    last_hour: int = 17,
) -> IntradayDecay | None:
    """Accumulate hourly average results between *first_hour* and *last_hour*.

    Returns ``None`` when no record falls inside the window.
    """
    by_hour: dict[int, BucketAggregate] = defaultdict(BucketAggregate)
    for rec in records:
        if first_hour <= rec.hour <= last_hour:
            by_hour[rec.hour].record(rec.result)
    if not by_hour:
        return None

    # Hours before the first traded hour accumulate nothing, so the first
    # traded hour seeds best, worst and peak alike.
    first_traded = min(by_hour)
    seed = by_hour[first_traded].average_result
    best = worst = peak = (first_traded, seed)

    points: list[HourPoint] = []
    accumulated = 0.0
    for hour in range(first_hour, last_hour + 1):
        bucket = by_hour.get(hour)
        if bucket is None:
            points.append(HourPoint(hour, 0.0, accumulated, 0))
            continue
        avg = bucket.average_result
        accumulated += avg
        if avg > best[1]:
            best = (hour, avg)
        if avg < worst[1]:
            worst = (hour, avg)
        if accumulated > peak[1]:
            peak = (hour, accumulated)
        points.append(HourPoint(hour, avg, accumulated, bucket.count))

    return IntradayDecay(
        points=tuple(points),
        best_hour=best[0],
        worst_hour=worst[0],
        peak_hour=peak[0],
        peak_value=peak[1],
        final_value=accumulated,
        decay=peak[1] - accumulated,
    )


# ---------------------------------------------------------------------------
# Cross-validation heatmap
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class HeatmapCell:
    weekday: int
    hour: int
    historical_result: float
    historical_operations: int
    current_result: float
    current_operations: int
    signal: HeatmapSignal

    @property
    def day_name(self) -> str:
        return DAY_NAMES[self.weekday]


@dataclass(frozen=True)
class CrossValidationHeatmap:
    cells: tuple[HeatmapCell, ...]
    counts: dict[HeatmapSignal, int] = field(default_factory=dict)
    score: int = 0  # % of cells with data that are "on"


def _cell_buckets(
    records: Iterable[TradeRecord], first_hour: int, last_hour: int
) -> dict[tuple[int, int], BucketAggregate]:
    cells: dict[tuple[int, int], BucketAggregate] = defaultdict(BucketAggregate)
    for rec in records:
        if rec.weekday not in SESSION_WEEKDAYS:
            continue
        if not first_hour <= rec.hour <= last_hour:
            continue
        cells[(rec.weekday, rec.hour)].record(rec.result)
    return cells


def _signal(hist: BucketAggregate | None, curr: BucketAggregate | None) -> HeatmapSignal:
    if hist is None or curr is None:
        return HeatmapSignal.NO_DATA
    if hist.sum_result > 0 and curr.sum_result > 0:
        return HeatmapSignal.ON
    if hist.sum_result <= 0 and curr.sum_result <= 0:
        return HeatmapSignal.OFF
    return HeatmapSignal.ALERT


def cross_validation_heatmap(
    records: Iterable[TradeRecord],
    *,
    today: date,
    first_hour: int = 9,
    last_hour: int = 17,
) -> CrossValidationHeatmap:
    """Compare each weekday/hour cell of past months against this month."""
    records = list(records)
    current_key = f"{today.year:04d}-{today.month:02d}"
    historical = _cell_buckets(
        (r for r in records if r.month_key != current_key), first_hour, last_hour
    )
    current = _cell_buckets(
        (r for r in records if r.month_key == current_key), first_hour, last_hour
    )

    cells: list[HeatmapCell] = []
    counts = {signal: 0 for signal in HeatmapSignal}
    for hour in range(first_hour, last_hour + 1):
        for weekday in SESSION_WEEKDAYS:
            hist = historical.get((weekday, hour))
            curr = current.get((weekday, hour))
            signal = _signal(hist, curr)
            counts[signal] += 1
            cells.append(
                HeatmapCell(
                    weekday=weekday,
                    hour=hour,
                    historical_result=hist.sum_result if hist else 0.0,
                    historical_operations=hist.count if hist else 0,
                    current_result=curr.sum_result if curr else 0.0,
                    current_operations=curr.count if curr else 0,
                    signal=signal,
                )
            )

    with_data = len(cells) - counts[HeatmapSignal.NO_DATA]
    score = round(counts[HeatmapSignal.ON] / with_data * 100) if with_data else 0
    return CrossValidationHeatmap(cells=tuple(cells), counts=counts, score=score)
