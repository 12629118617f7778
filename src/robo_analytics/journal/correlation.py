"""Cross-strategy diversification analysis.

Measures how often two strategies' daily outcomes move in opposite
directions.  Pairs that frequently offset each other's losing days are
good candidates to run together.

Usage::

    aggregates = compute_strategy_aggregates(records)
    for pair in compute_correlations(aggregates, records):
        print(pair.strategy_a, pair.strategy_b, pair.diversification_score)
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from datetime import date
from typing import Iterable, Sequence

import numpy as np

from robo_analytics.core.enums import Complementarity
from robo_analytics.core.models import TradeRecord, normalize_strategy

from .strategy_stats import StrategyAggregate

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CorrelationPair:
    """Diversification score for an unordered pair of strategies."""

    strategy_a: str
    strategy_b: str
    diversification_score: float
    shared_days: int
    opposite_days: int
    complementarity: Complementarity

    @property
    def label(self) -> str:
        return self.complementarity.value


def classify(score: float, *, high: float = 60.0, moderate: float = 40.0) -> Complementarity:
    if score > high:
        return Complementarity.HIGH
    if score > moderate:
        return Complementarity.MODERATE
    return Complementarity.LOW


def _daily_by_strategy(records: Iterable[TradeRecord]) -> dict[str, dict[date, float]]:
    """``{strategy_key: {date: daily sum}}`` for assigned records."""
    daily: dict[str, dict[date, float]] = defaultdict(lambda: defaultdict(float))
    for rec in records:
        key = rec.strategy_key
        if key is not None:
            daily[key][rec.date] += rec.result
    return daily


def _opposite(a: float, b: float) -> bool:
    return (a > 0 and b < 0) or (a < 0 and b > 0)


def compute_correlations(
    strategy_aggregates: Sequence[StrategyAggregate],
    records: Iterable[TradeRecord],
    *,
    high: float = 60.0,
    moderate: float = 40.0,
) -> list[CorrelationPair]:
    """Score every pair of strategies that traded on at least one common day.

    Returns pairs ranked by diversification score, best first.
    """
    daily = _daily_by_strategy(records)
    names = [a.strategy for a in strategy_aggregates]

    pairs: list[CorrelationPair] = []
    for i, name_a in enumerate(names):
        for name_b in names[i + 1:]:
            days_a = daily.get(normalize_strategy(name_a) or "", {})
            days_b = daily.get(normalize_strategy(name_b) or "", {})
            shared = days_a.keys() & days_b.keys()
            if not shared:
                continue
            opposite = sum(1 for d in shared if _opposite(days_a[d], days_b[d]))
            score = opposite / len(shared) * 100
            pairs.append(
                CorrelationPair(
                    strategy_a=name_a,
                    strategy_b=name_b,
                    diversification_score=score,
                    shared_days=len(shared),
                    opposite_days=opposite,
                    complementarity=classify(score, high=high, moderate=moderate),
                )
            )

    pairs.sort(key=lambda p: (-p.diversification_score, p.strategy_a, p.strategy_b))
    logger.debug("Scored %d strategy pairs", len(pairs))
    return pairs


def return_correlation(records: Iterable[TradeRecord]) -> dict[tuple[str, str], float]:
    """Pearson correlation of daily results for every strategy pair.

    Series are aligned over every date on which any strategy traded, using
    0 for days a strategy did not trade.  A flat series correlates at 0.
    """
    daily = _daily_by_strategy(records)
    keys = sorted(daily)
    dates = sorted({d for days in daily.values() for d in days})

    matrix: dict[tuple[str, str], float] = {}
    for i, key_a in enumerate(keys):
        xs = np.array([daily[key_a].get(d, 0.0) for d in dates])
        for key_b in keys[i + 1:]:
            ys = np.array([daily[key_b].get(d, 0.0) for d in dates])
            matrix[(key_a, key_b)] = _pearson(xs, ys)
    return matrix


def _pearson(xs: np.ndarray, ys: np.ndarray) -> float:
    if len(xs) < 2:
        return 0.0
    dx = xs - xs.mean()
    dy = ys - ys.mean()
    denom = float(np.sqrt((dx * dx).sum() * (dy * dy).sum()))
    if denom == 0:
        return 0.0
    return float((dx * dy).sum() / denom)
