"""Strategy optimization engine.

Finds the hours, weekdays and months in which a strategy has been
profitable over its full history, and turns that into a recommended filter
configuration.  The optimizer sees the allowlist-filtered history only:
the dashboard's temporal filter never narrows what it learns from.

Usage::

    config = optimize_strategy(records, "zeus")
    print(config.best_hours[0].value, config.confidence)
    spec = config.as_filter_spec()
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Sequence

from robo_analytics.core.config import OptimizerConfig
from robo_analytics.core.enums import Confidence
from robo_analytics.core.models import FilterSpec, TradeRecord, normalize_strategy
from robo_analytics.journal.buckets import BucketAggregate

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BestBucket:
    """One profitable hour, weekday or month of a strategy."""

    value: int
    sum_result: float
    win_rate: float
    operation_count: int


@dataclass(frozen=True)
class CandidateBuckets:
    """Unfiltered hour / weekday / month families for one strategy."""

    hours: dict[int, BucketAggregate] = field(default_factory=dict)
    weekdays: dict[int, BucketAggregate] = field(default_factory=dict)  # 0=Sunday
    months: dict[int, BucketAggregate] = field(default_factory=dict)    # 0=January
    total_result: float = 0.0
    total_operations: int = 0


@dataclass(frozen=True)
class OptimizedConfig:
    """Recommended trading windows for one strategy.

    ``estimated_result`` adds up the retained hour, weekday and month
    results, so the same trade is counted up to three times; read it as an
    upside indicator.  ``combined_result`` is the actual result of the
    trades inside the recommended hour AND weekday AND month.
    """

    strategy: str
    best_hours: tuple[BestBucket, ...]
    best_weekdays: tuple[BestBucket, ...]
    best_months: tuple[BestBucket, ...]
    total_result: float
    total_operations: int
    estimated_result: float
    confidence: Confidence
    combined_result: float = 0.0

    @property
    def recommended_hours(self) -> frozenset[int]:
        return frozenset(b.value for b in self.best_hours)

    @property
    def recommended_weekdays(self) -> frozenset[int]:
        return frozenset(b.value for b in self.best_weekdays)

    @property
    def recommended_months(self) -> frozenset[int]:
        return frozenset(b.value for b in self.best_months)

    def as_filter_spec(
        self,
        base: FilterSpec | None = None,
        *,
        hours: Iterable[int] | None = None,
        weekdays: Iterable[int] | None = None,
        months: Iterable[int] | None = None,
    ) -> FilterSpec:
        """Filter selecting this strategy in the recommended windows.

        Each axis defaults to every recommended value; pass a subset to
        apply only part of the recommendation.  The date range of *base*
        is kept.
        """
        base = base or FilterSpec()
        return base.model_copy(
            update={
                "strategies": frozenset({self.strategy}),
                "hours": frozenset(self.recommended_hours if hours is None else hours),
                "weekdays": frozenset(
                    self.recommended_weekdays if weekdays is None else weekdays
                ),
                "months": frozenset(self.recommended_months if months is None else months),
            }
        )

    def to_dict(self) -> dict[str, Any]:
        def _buckets(items: tuple[BestBucket, ...]) -> list[dict[str, Any]]:
            return [
                {
                    "value": b.value,
                    "sum_result": b.sum_result,
                    "win_rate": b.win_rate,
                    "operation_count": b.operation_count,
                }
                for b in items
            ]

        return {
            "strategy": self.strategy,
            "best_hours": _buckets(self.best_hours),
            "best_weekdays": _buckets(self.best_weekdays),
            "best_months": _buckets(self.best_months),
            "total_result": self.total_result,
            "total_operations": self.total_operations,
            "estimated_result": self.estimated_result,
            "combined_result": self.combined_result,
            "confidence": self.confidence.value,
        }


# ---------------------------------------------------------------------------
# Bucket accumulation
# ---------------------------------------------------------------------------

def _strategy_records(records: Iterable[TradeRecord], strategy_id: str) -> list[TradeRecord]:
    key = normalize_strategy(strategy_id)
    if key is None:
        return []
    return [r for r in records if r.strategy_key == key]


def candidate_buckets(records: Iterable[TradeRecord], strategy_id: str) -> CandidateBuckets:
    """Hour, weekday and month buckets of one strategy, before any pruning."""
    hours: dict[int, BucketAggregate] = {}
    weekdays: dict[int, BucketAggregate] = {}
    months: dict[int, BucketAggregate] = {}
    total = 0.0
    count = 0
    for rec in _strategy_records(records, strategy_id):
        total += rec.result
        count += 1
        hours.setdefault(rec.hour, BucketAggregate()).record(rec.result)
        weekdays.setdefault(rec.weekday, BucketAggregate()).record(rec.result)
        months.setdefault(rec.month, BucketAggregate()).record(rec.result)
    return CandidateBuckets(
        hours=hours,
        weekdays=weekdays,
        months=months,
        total_result=total,
        total_operations=count,
    )


def best_buckets(family: dict[int, BucketAggregate]) -> tuple[BestBucket, ...]:
    """Profitable buckets, highest result first (ties: lower value first)."""
    kept = [
        BestBucket(
            value=value,
            sum_result=bucket.sum_result,
            win_rate=bucket.win_rate,
            operation_count=bucket.count,
        )
        for value, bucket in family.items()
        if bucket.sum_result > 0
    ]
    kept.sort(key=lambda b: (-b.sum_result, b.value))
    return tuple(kept)


def confidence_for(total_operations: int, thresholds: OptimizerConfig | None = None) -> Confidence:
    cfg = thresholds or OptimizerConfig()
    if total_operations > cfg.high_confidence_min_records:
        return Confidence.HIGH
    if total_operations > cfg.medium_confidence_min_records:
        return Confidence.MEDIUM
    return Confidence.LOW


def _combined_result(
    records: Sequence[TradeRecord],
    hours: frozenset[int],
    weekdays: frozenset[int],
    months: frozenset[int],
) -> float:
    if not (hours and weekdays and months):
        return 0.0
    return sum(
        r.result
        for r in records
        if r.hour in hours and r.weekday in weekdays and r.month in months
    )


# ---------------------------------------------------------------------------
# Public entry points
# ---------------------------------------------------------------------------

def optimize_strategy(
    records: Iterable[TradeRecord],
    strategy_id: str,
    *,
    thresholds: OptimizerConfig | None = None,
) -> OptimizedConfig:
    """Recommend the profitable hours, weekdays and months of a strategy.

    Args:
        records: Allowlist-filtered history.  Do not pass temporally
            filtered records; the recommendation should see everything.
        strategy_id: Strategy to optimize, matched case-insensitively on
            the trimmed name.
        thresholds: Confidence thresholds; defaults to ``OptimizerConfig()``.

    Returns:
        OptimizedConfig.  A strategy without records yields empty families,
        zero totals and low confidence.
    """
    records = list(records)
    candidates = candidate_buckets(records, strategy_id)
    hours = best_buckets(candidates.hours)
    weekdays = best_buckets(candidates.weekdays)
    months = best_buckets(candidates.months)

    estimated = (
        sum(b.sum_result for b in hours)
        + sum(b.sum_result for b in weekdays)
        + sum(b.sum_result for b in months)
    )
    combined = _combined_result(
        _strategy_records(records, strategy_id),
        frozenset(b.value for b in hours),
        frozenset(b.value for b in weekdays),
        frozenset(b.value for b in months),
    )
    config = OptimizedConfig(
        strategy=strategy_id,
        best_hours=hours,
        best_weekdays=weekdays,
        best_months=months,
        total_result=candidates.total_result,
        total_operations=candidates.total_operations,
        estimated_result=estimated,
        confidence=confidence_for(candidates.total_operations, thresholds),
        combined_result=combined,
    )
    logger.info(
        "Optimized %s: %d ops, %d/%d/%d profitable hours/weekdays/months, confidence=%s",
        strategy_id,
        config.total_operations,
        len(hours),
        len(weekdays),
        len(months),
        config.confidence.value,
    )
    return config


def optimize_strategies(
    records: Iterable[TradeRecord],
    strategies: Iterable[str],
    *,
    thresholds: OptimizerConfig | None = None,
) -> list[OptimizedConfig]:
    """One recommendation per strategy, in the order given."""
    records = list(records)
    return [optimize_strategy(records, s, thresholds=thresholds) for s in strategies]
