"""Capital simulation over historical daily results.

Starts from a given capital and applies each day's summed result in date
order, tracking the balance path, the yield on the starting capital, the
deepest fall from the running balance peak, and the first day the balance
reaches zero or below.

Usage::

    sim = simulate_capital(records, initial_capital=5_000)
    print(sim.final_balance, sim.yield_pct, sim.broke_day)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Iterable

from robo_analytics.core.models import TradeRecord

from .buckets import daily_aggregates, downsample

logger = logging.getLogger(__name__)

DEFAULT_MAX_POINTS = 365


@dataclass(frozen=True)
class BalancePoint:
    day: int            # 0 is the starting balance
    date: date | None
    balance: float


@dataclass(frozen=True)
class CapitalSimulation:
    """Outcome of replaying the daily results against a starting capital."""

    initial_capital: float
    final_balance: float
    yield_pct: float
    max_drawdown_pct: float
    broke_day: int | None  # 1-based trading day the balance first hit <= 0
    total_days: int
    path: tuple[BalancePoint, ...]

    @property
    def survived(self) -> bool:
        return self.broke_day is None


def simulate_capital(
    records: Iterable[TradeRecord],
    initial_capital: float,
    *,
    max_points: int = DEFAULT_MAX_POINTS,
) -> CapitalSimulation | None:
    """Replay daily results from *initial_capital*.

    Returns ``None`` when the capital is not positive or there are no
    records.  The balance path is downsampled to at most *max_points*
    points, always keeping the start and the end.
    """
    if initial_capital <= 0:
        return None
    days = daily_aggregates(records)
    if not days:
        return None

    balance = initial_capital
    peak = initial_capital
    max_dd = 0.0
    broke_day: int | None = None
    path = [BalancePoint(0, None, initial_capital)]

    for index, day in enumerate(days, start=1):
        balance += day.sum_result
        peak = max(peak, balance)
        if peak > 0:
            max_dd = max(max_dd, (peak - balance) / peak * 100)
        if broke_day is None and balance <= 0:
            broke_day = index
        path.append(BalancePoint(index, day.date, balance))

    if broke_day is not None:
        logger.info("Capital %.2f exhausted on trading day %d", initial_capital, broke_day)
    return CapitalSimulation(
        initial_capital=initial_capital,
        final_balance=balance,
        yield_pct=(balance - initial_capital) / initial_capital * 100,
        max_drawdown_pct=max_dd,
        broke_day=broke_day,
        total_days=len(days),
        path=tuple(downsample(path, max_points)),
    )
