"""Per-strategy aggregates and strategy breakdown views.

``compute_strategy_aggregates`` is strategy-scoped: unassigned records are
left out.  The breakdown views (monthly table, evolution curves) are
ungrouped and show unassigned records under ``UNASSIGNED_STRATEGY``.
"""

from __future__ import annotations

import logging
import math
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date
from typing import Iterable

from robo_analytics.core.models import TradeRecord

from .buckets import daily_aggregates
from .stats import day_win_rate, win_loss_profile

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StrategyAggregate:
    """Scalar statistics for one strategy's records."""

    strategy: str
    records: tuple[TradeRecord, ...]
    total_operations: int
    total_result: float
    win_rate: float
    payoff: float
    average_win: float
    average_loss: float
    max_drawdown: float
    positive_trades: int
    negative_trades: int


def max_drawdown(results: Iterable[float]) -> float:
    """Largest ``peak - running`` over a running total in the given order.

    The peak starts at 0, so an opening loss counts as drawdown.
    """
    peak = 0.0
    running = 0.0
    worst = 0.0
    for r in results:
        running += r
        if running > peak:
            peak = running
        worst = max(worst, peak - running)
    return worst


def group_by_strategy(records: Iterable[TradeRecord]) -> dict[str, list[TradeRecord]]:
    """Group assigned records by strategy.

    Keys are the first spelling seen for each case-insensitive strategy.
    """
    display: dict[str, str] = {}
    groups: dict[str, list[TradeRecord]] = defaultdict(list)
    for rec in records:
        key = rec.strategy_key
        if key is None:
            continue
        name = display.setdefault(key, rec.strategy or key)
        groups[name].append(rec)
    return dict(groups)


def _aggregate(strategy: str, records: list[TradeRecord]) -> StrategyAggregate:
    results = [r.result for r in records]
    daily = [d.sum_result for d in daily_aggregates(records)]
    _, _, win_rate = day_win_rate(daily)
    average_win, average_loss, payoff = win_loss_profile(results)
    return StrategyAggregate(
        strategy=strategy,
        records=tuple(records),
        total_operations=len(records),
        total_result=sum(results),
        win_rate=win_rate,
        payoff=payoff,
        average_win=average_win,
        average_loss=average_loss,
        max_drawdown=max_drawdown(results),
        positive_trades=sum(1 for r in results if r > 0),
        negative_trades=sum(1 for r in results if r < 0),
    )


def compute_strategy_aggregates(records: Iterable[TradeRecord]) -> list[StrategyAggregate]:
    """Aggregate each strategy, ranked by total result (best first)."""
    aggregates = [_aggregate(name, recs) for name, recs in group_by_strategy(records).items()]
    aggregates.sort(key=lambda a: (-a.total_result, a.strategy))
    return aggregates


# ---------------------------------------------------------------------------
# Monthly strategy table
# ---------------------------------------------------------------------------

@dataclass
class MonthCell:
    """Result, operation count and winning trades for one table cell."""

    result: float = 0.0
    operations: int = 0
    wins: int = 0

    def add(self, result: float) -> None:
        self.result += result
        self.operations += 1
        if result > 0:
            self.wins += 1

    def merge(self, other: MonthCell) -> None:
        self.result += other.result
        self.operations += other.operations
        self.wins += other.wins

    @property
    def win_rate(self) -> float:
        return self.wins / self.operations * 100 if self.operations else 0.0


@dataclass
class MonthlyStrategyRow:
    strategy: str
    cells: dict[str, MonthCell] = field(default_factory=dict)
    total: MonthCell = field(default_factory=MonthCell)


@dataclass
class MonthlyStrategyTable:
    """Strategies x ``YYYY-MM`` matrix with row and column totals."""

    months: list[str] = field(default_factory=list)
    rows: list[MonthlyStrategyRow] = field(default_factory=list)
    totals: dict[str, MonthCell] = field(default_factory=dict)


def monthly_strategy_table(records: Iterable[TradeRecord]) -> MonthlyStrategyTable:
    """Build the strategy-by-month result table."""
    data: dict[str, dict[str, MonthCell]] = defaultdict(lambda: defaultdict(MonthCell))
    months: set[str] = set()
    for rec in records:
        data[rec.strategy_label][rec.month_key].add(rec.result)
        months.add(rec.month_key)

    ordered_months = sorted(months)
    table = MonthlyStrategyTable(
        months=ordered_months,
        totals={m: MonthCell() for m in ordered_months},
    )
    for strategy in sorted(data):
        row = MonthlyStrategyRow(strategy=strategy)
        for month in ordered_months:
            cell = data[strategy].get(month)
            if cell is None:
                continue
            row.cells[month] = cell
            row.total.merge(cell)
            table.totals[month].merge(cell)
        table.rows.append(row)
    return table


# ---------------------------------------------------------------------------
# Strategy evolution
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class EvolutionPoint:
    """Cumulative result of every strategy at the close of one date."""

    date: date
    cumulative: dict[str, float]


def strategy_evolution(
    records: Iterable[TradeRecord],
    *,
    max_points: int = 365,
) -> list[EvolutionPoint]:
    """Per-strategy cumulative curves over the shared date axis.

    Longer histories are down-sampled to every ``ceil(n / max_points)``-th
    point, always keeping the last one.
    """
    by_date: dict[date, dict[str, float]] = defaultdict(lambda: defaultdict(float))
    strategies: list[str] = []
    for rec in records:
        label = rec.strategy_label
        if label not in strategies:
            strategies.append(label)
        by_date[rec.date][label] += rec.result

    running = {s: 0.0 for s in strategies}
    points: list[EvolutionPoint] = []
    for day in sorted(by_date):
        for s in strategies:
            running[s] += by_date[day].get(s, 0.0)
        points.append(EvolutionPoint(day, dict(running)))

    if max_points > 0 and len(points) > max_points:
        step = math.ceil(len(points) / max_points)
        last = len(points) - 1
        points = [p for i, p in enumerate(points) if i % step == 0 or i == last]
    return points
