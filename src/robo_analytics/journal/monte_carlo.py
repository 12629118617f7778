"""Monte Carlo projection of daily results.

Bootstrap-resamples the historical daily results (with replacement) to
project the range of outcomes over a horizon of the same length: the
probability of ending in profit, the median path, and the 5% / 95% tails.

Usage::

    projector = MonteCarloProjector(n_simulations=500, seed=7)
    projection = projector.project(records)
    print(projection.profit_probability, projection.var_95)
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Iterable

import numpy as np

from robo_analytics.core.models import TradeRecord

from .buckets import daily_aggregates, downsample

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BandPoint:
    """Percentile band of cumulative results after *day* resampled days."""

    day: int
    worst: float   # p5
    median: float  # p50
    best: float    # p95


@dataclass(frozen=True)
class MonteCarloProjection:
    n_simulations: int
    n_days: int
    profit_probability: float
    median_result: float
    var_95: float
    best_scenario: float
    bands: tuple[BandPoint, ...]


def _floor_percentile(sorted_values: np.ndarray, q: float) -> float:
    """Value at ``floor(n * q)`` of an ascending array."""
    n = len(sorted_values)
    index = min(int(math.floor(n * q)), n - 1)
    return float(sorted_values[index])


class MonteCarloProjector:
    """Bootstrap projection of daily results.

    Parameters
    ----------
    n_simulations : int
        Number of resampled paths.  Default 500.
    seed : int | None
        Random seed for reproducibility.  None = non-deterministic.
    max_points : int
        Maximum number of band points returned.  Default 365.
    """

    def __init__(
        self,
        *,
        n_simulations: int = 500,
        seed: int | None = None,
        max_points: int = 365,
    ) -> None:
        self._n_sims = max(10, n_simulations)
        self._seed = seed
        self._max_points = max_points

    def project(self, records: Iterable[TradeRecord]) -> MonteCarloProjection | None:
        """Run the simulation.  ``None`` with fewer than two trading days."""
        daily = np.array([d.sum_result for d in daily_aggregates(records)])
        n_days = len(daily)
        if n_days < 2:
            return None

        rng = np.random.default_rng(self._seed)
        paths = np.zeros((self._n_sims, n_days + 1))
        for i in range(self._n_sims):
            paths[i, 1:] = np.cumsum(rng.choice(daily, size=n_days, replace=True))

        finals = np.sort(paths[:, -1])
        by_day = np.sort(paths, axis=0)

        bands = [
            BandPoint(
                day=d,
                worst=_floor_percentile(by_day[:, d], 0.05),
                median=_floor_percentile(by_day[:, d], 0.50),
                best=_floor_percentile(by_day[:, d], 0.95),
            )
            for d in range(n_days + 1)
        ]
        bands = downsample(bands, self._max_points)

        profitable = int((finals > 0).sum())
        logger.info(
            "Monte Carlo: %d paths over %d days, %d profitable",
            self._n_sims, n_days, profitable,
        )
        return MonteCarloProjection(
            n_simulations=self._n_sims,
            n_days=n_days,
            profit_probability=profitable / self._n_sims * 100,
            median_result=_floor_percentile(finals, 0.50),
            var_95=_floor_percentile(finals, 0.05),
            best_scenario=_floor_percentile(finals, 0.95),
            bands=tuple(bands),
        )
