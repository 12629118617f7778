"""Aggregation engine: overall scalar statistics and bucketed series.

Win rate, streaks, volatility and consistency are day-level measures: all
trades on a date are summed first and the sign of that sum decides whether
the day counts as positive or negative.  Days summing to exactly zero count
as neither.  Every ratio is guarded and falls back to 0.

Usage::

    stats = compute_stats(records)
    print(stats.win_rate, stats.payoff, stats.positive_streak)
    series = compute_series(records)
    print(series.performance_curve[-1].cumulative)
"""

from __future__ import annotations

import math
import statistics
from dataclasses import asdict, dataclass, field
from datetime import date
from typing import Any, Iterable, Sequence

from robo_analytics.core.models import TradeRecord

from .buckets import BucketAggregate, DailyAggregate, bucket_by, daily_aggregates

TRADING_DAYS_PER_YEAR = 252
RANKED_DAYS = 5


@dataclass(frozen=True)
class ScalarStats:
    """Overall statistics for a record set.  All zero for empty input."""

    total_operations: int = 0
    total_result: float = 0.0
    total_days: int = 0
    positive_days: int = 0
    negative_days: int = 0
    win_rate: float = 0.0
    average_win: float = 0.0
    average_loss: float = 0.0
    payoff: float = 0.0
    best_result: float = 0.0
    worst_result: float = 0.0
    positive_months: int = 0
    negative_months: int = 0
    monthly_consistency: float = 0.0
    average_monthly_result: float = 0.0
    average_daily_result: float = 0.0
    standard_deviation: float = 0.0
    volatility: float = 0.0
    positive_streak: int = 0
    negative_streak: int = 0
    max_drawdown: float = 0.0
    max_drawdown_duration: int = 0
    profit_factor: float = 0.0
    expectancy: float = 0.0
    sharpe_ratio: float = 0.0
    recovery_factor: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class CurvePoint:
    """One point of the cumulative performance curve."""

    date: date
    result: float
    cumulative: float


@dataclass(frozen=True)
class SeriesResult:
    """Chronological curve plus the bucket families for charting."""

    performance_curve: tuple[CurvePoint, ...] = ()
    daily_buckets: tuple[DailyAggregate, ...] = ()
    monthly_buckets: dict[str, BucketAggregate] = field(default_factory=dict)
    yearly_buckets: dict[int, BucketAggregate] = field(default_factory=dict)
    hourly_buckets: dict[int, BucketAggregate] = field(default_factory=dict)
    weekday_buckets: dict[int, BucketAggregate] = field(default_factory=dict)
    month_of_year_buckets: dict[int, BucketAggregate] = field(default_factory=dict)
    best_days: tuple[DailyAggregate, ...] = ()
    worst_days: tuple[DailyAggregate, ...] = ()


# ---------------------------------------------------------------------------
# Building blocks
# ---------------------------------------------------------------------------

def _mean(values: Sequence[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def longest_streaks(values: Iterable[float]) -> tuple[int, int]:
    """Longest runs of positive and of negative values, in order.

    A zero resets both running counters without extending either run.
    """
    best_pos = best_neg = 0
    cur_pos = cur_neg = 0
    for v in values:
        if v > 0:
            cur_pos += 1
            cur_neg = 0
            best_pos = max(best_pos, cur_pos)
        elif v < 0:
            cur_neg += 1
            cur_pos = 0
            best_neg = max(best_neg, cur_neg)
        else:
            cur_pos = cur_neg = 0
    return best_pos, best_neg


def drawdown_profile(values: Iterable[float]) -> tuple[float, int]:
    """Max drawdown and longest under-peak duration of a cumulative path.

    The running peak starts at 0 (the flat starting balance).  Duration is
    the longest number of consecutive steps spent below the peak, including
    a run still open at the end.
    """
    peak = 0.0
    running = 0.0
    max_dd = 0.0
    duration = 0
    max_duration = 0
    for v in values:
        running += v
        if running > peak:
            peak = running
            duration = 0
        elif running < peak:
            duration += 1
            max_dd = max(max_dd, peak - running)
            max_duration = max(max_duration, duration)
    return max_dd, max_duration


def win_loss_profile(results: Sequence[float]) -> tuple[float, float, float]:
    """``(average_win, average_loss, payoff)`` at trade level.

    ``average_loss`` is a positive magnitude; ``payoff`` is 0 when there are
    no losing trades.
    """
    wins = [r for r in results if r > 0]
    losses = [abs(r) for r in results if r < 0]
    average_win = _mean(wins)
    average_loss = _mean(losses)
    payoff = average_win / average_loss if average_loss > 0 else 0.0
    return average_win, average_loss, payoff


def day_win_rate(daily: Sequence[float]) -> tuple[int, int, float]:
    """``(positive_days, negative_days, win_rate)`` from daily sums."""
    positive = sum(1 for v in daily if v > 0)
    negative = sum(1 for v in daily if v < 0)
    signed = positive + negative
    return positive, negative, (positive / signed * 100 if signed else 0.0)


# ---------------------------------------------------------------------------
# Public operations
# ---------------------------------------------------------------------------

def compute_stats(records: Iterable[TradeRecord]) -> ScalarStats:
    """Compute every overall scalar for *records*."""
    records = list(records)
    if not records:
        return ScalarStats()

    results = [r.result for r in records]
    total_result = sum(results)

    days = daily_aggregates(records)
    daily = [d.sum_result for d in days]
    positive_days, negative_days, win_rate = day_win_rate(daily)

    average_win, average_loss, payoff = win_loss_profile(results)

    monthly = [b.sum_result for b in bucket_by(records, lambda r: r.month_key).values()]
    positive_months = sum(1 for m in monthly if m > 0)
    negative_months = sum(1 for m in monthly if m < 0)
    monthly_consistency = positive_months / len(monthly) * 100 if monthly else 0.0

    average_daily = _mean(daily)
    std = statistics.pstdev(daily)
    volatility = std / abs(average_daily) * 100 if average_daily != 0 else 0.0

    positive_streak, negative_streak = longest_streaks(daily)
    max_dd, max_dd_duration = drawdown_profile(daily)

    gross_profit = sum(r for r in results if r > 0)
    gross_loss = sum(abs(r) for r in results if r < 0)
    profit_factor = gross_profit / gross_loss if gross_loss > 0 else 0.0

    hit_rate = sum(1 for r in results if r > 0) / len(results)
    expectancy = hit_rate * average_win - (1 - hit_rate) * average_loss

    sharpe = average_daily / std * math.sqrt(TRADING_DAYS_PER_YEAR) if std > 0 else 0.0
    recovery = total_result / max_dd if max_dd > 0 else 0.0

    return ScalarStats(
        total_operations=len(records),
        total_result=total_result,
        total_days=len(days),
        positive_days=positive_days,
        negative_days=negative_days,
        win_rate=win_rate,
        average_win=average_win,
        average_loss=average_loss,
        payoff=payoff,
        best_result=max(results),
        worst_result=min(results),
        positive_months=positive_months,
        negative_months=negative_months,
        monthly_consistency=monthly_consistency,
        average_monthly_result=_mean(monthly),
        average_daily_result=average_daily,
        standard_deviation=std,
        volatility=volatility,
        positive_streak=positive_streak,
        negative_streak=negative_streak,
        max_drawdown=max_dd,
        max_drawdown_duration=max_dd_duration,
        profit_factor=profit_factor,
        expectancy=expectancy,
        sharpe_ratio=sharpe,
        recovery_factor=recovery,
    )


def compute_series(records: Iterable[TradeRecord]) -> SeriesResult:
    """Compute the performance curve and every bucket family."""
    records = list(records)
    if not records:
        return SeriesResult()

    days = daily_aggregates(records)
    curve: list[CurvePoint] = []
    cumulative = 0.0
    for day in days:
        cumulative += day.sum_result
        curve.append(CurvePoint(day.date, day.sum_result, cumulative))

    ranked = sorted(days, key=lambda d: (-d.sum_result, d.date))
    worst = sorted(days, key=lambda d: (d.sum_result, d.date))

    return SeriesResult(
        performance_curve=tuple(curve),
        daily_buckets=tuple(days),
        monthly_buckets=bucket_by(records, lambda r: r.month_key),
        yearly_buckets=bucket_by(records, lambda r: r.year),
        hourly_buckets=bucket_by(records, lambda r: r.hour),
        weekday_buckets=bucket_by(records, lambda r: r.weekday),
        month_of_year_buckets=bucket_by(records, lambda r: r.month),
        best_days=tuple(ranked[:RANKED_DAYS]),
        worst_days=tuple(worst[:RANKED_DAYS]),
    )
