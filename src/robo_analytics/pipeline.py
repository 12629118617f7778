"""Analytics pipeline: configured entry point with memoized results.

Wires the allowlist, clock and thresholds from :class:`Settings` into the
pure journal and optimizer functions, and memoizes each result in a bounded
LRU keyed by the operation, the exact record tuple, the filter spec and
any extra arguments.  The cache never changes a result; ``clear_cache``
drops it.

Usage::

    pipeline = AnalyticsPipeline(load_settings("configs/analytics.toml"))
    view = pipeline.dashboard(records, FilterSpec(date_mode=DateMode.CURRENT_MONTH))
    config = pipeline.optimize_strategy(records, "zeus")
"""

from __future__ import annotations

import logging
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Callable, Hashable, Iterable

from robo_analytics.core.clock import IClock, WallClock
from robo_analytics.core.config import Settings
from robo_analytics.core.models import FilterSpec, TradeRecord
from robo_analytics.journal import (
    capital_simulator,
    correlation,
    filters,
    session_analysis,
    stats,
    strategy_stats,
)
from robo_analytics.journal.allowlist import StrategyAllowlist
from robo_analytics.journal.capital_simulator import CapitalSimulation
from robo_analytics.journal.correlation import CorrelationPair
from robo_analytics.journal.session_analysis import CrossValidationHeatmap, IntradayDecay
from robo_analytics.journal.stats import ScalarStats, SeriesResult
from robo_analytics.journal.strategy_stats import StrategyAggregate
from robo_analytics.optimizer import engine as optimizer_engine
from robo_analytics.optimizer.engine import OptimizedConfig

logger = logging.getLogger(__name__)

_DEFAULT_SPEC = FilterSpec()


@dataclass(frozen=True)
class DashboardView:
    """Everything a dashboard renders for one filter state."""

    spec: FilterSpec
    records: tuple[TradeRecord, ...]
    stats: ScalarStats
    series: SeriesResult
    strategies: tuple[StrategyAggregate, ...]
    correlations: tuple[CorrelationPair, ...]


class AnalyticsPipeline:
    """Configured, memoizing front for every analytics operation.

    Parameters
    ----------
    settings : Settings | None
        Engine settings; defaults to ``Settings()``.
    clock : IClock | None
        Source of "today" for relative date windows.  Default: wall clock.
    allowlist : StrategyAllowlist | None
        Overrides the allowlist built from *settings*.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        clock: IClock | None = None,
        allowlist: StrategyAllowlist | None = None,
    ) -> None:
        self._settings = settings or Settings()
        self._clock = clock or WallClock()
        self._allowlist = allowlist or StrategyAllowlist.from_settings(self._settings)
        self._max_entries = self._settings.cache.max_entries
        self._cache: OrderedDict[Hashable, Any] = OrderedDict()
        self._hits = 0
        self._misses = 0

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def allowlist(self) -> StrategyAllowlist:
        return self._allowlist

    # ------------------------------------------------------------------ #
    # Cache                                                                #
    # ------------------------------------------------------------------ #

    def _memo(self, key: Hashable, compute: Callable[[], Any]) -> Any:
        if self._max_entries == 0:
            return compute()
        if key in self._cache:
            self._cache.move_to_end(key)
            self._hits += 1
            logger.debug("Cache hit for %s", key[0] if isinstance(key, tuple) else key)
            return self._cache[key]
        self._misses += 1
        value = compute()
        self._cache[key] = value
        while len(self._cache) > self._max_entries:
            self._cache.popitem(last=False)
        return value

    def clear_cache(self) -> None:
        self._cache.clear()

    @property
    def cache_info(self) -> dict[str, int]:
        return {
            "hits": self._hits,
            "misses": self._misses,
            "size": len(self._cache),
            "max_entries": self._max_entries,
        }

    # ------------------------------------------------------------------ #
    # Operations                                                           #
    # ------------------------------------------------------------------ #

    def apply_filters(
        self, records: Iterable[TradeRecord], spec: FilterSpec = _DEFAULT_SPEC
    ) -> tuple[TradeRecord, ...]:
        """Allowlist plus temporal filter, relative to the pipeline clock."""
        records = tuple(records)
        today = self._clock.today()
        return self._memo(
            ("apply_filters", records, spec, today),
            lambda: tuple(
                filters.apply_filters(records, spec, allowlist=self._allowlist, today=today)
            ),
        )

    def compute_stats(
        self, records: Iterable[TradeRecord], spec: FilterSpec = _DEFAULT_SPEC
    ) -> ScalarStats:
        filtered = self.apply_filters(records, spec)
        return self._memo(("compute_stats", filtered), lambda: stats.compute_stats(filtered))

    def compute_series(
        self, records: Iterable[TradeRecord], spec: FilterSpec = _DEFAULT_SPEC
    ) -> SeriesResult:
        filtered = self.apply_filters(records, spec)
        return self._memo(("compute_series", filtered), lambda: stats.compute_series(filtered))

    def compute_strategy_aggregates(
        self, records: Iterable[TradeRecord], spec: FilterSpec = _DEFAULT_SPEC
    ) -> tuple[StrategyAggregate, ...]:
        filtered = self.apply_filters(records, spec)
        return self._memo(
            ("compute_strategy_aggregates", filtered),
            lambda: tuple(strategy_stats.compute_strategy_aggregates(filtered)),
        )

    def compute_correlations(
        self, records: Iterable[TradeRecord], spec: FilterSpec = _DEFAULT_SPEC
    ) -> tuple[CorrelationPair, ...]:
        filtered = self.apply_filters(records, spec)
        aggregates = self.compute_strategy_aggregates(filtered, _DEFAULT_SPEC)
        cfg = self._settings.correlation
        return self._memo(
            ("compute_correlations", filtered, cfg.high_threshold, cfg.moderate_threshold),
            lambda: tuple(
                correlation.compute_correlations(
                    aggregates,
                    filtered,
                    high=cfg.high_threshold,
                    moderate=cfg.moderate_threshold,
                )
            ),
        )

    def optimize_strategy(
        self, records: Iterable[TradeRecord], strategy_id: str
    ) -> OptimizedConfig:
        """Optimize over the allowlisted history, ignoring any temporal filter."""
        records = tuple(records)
        allowed = self._memo(
            ("allowlist", records), lambda: tuple(self._allowlist.filter(records))
        )
        return self._memo(
            ("optimize_strategy", allowed, strategy_id),
            lambda: optimizer_engine.optimize_strategy(
                allowed, strategy_id, thresholds=self._settings.optimizer
            ),
        )

    def intraday_decay(
        self, records: Iterable[TradeRecord], spec: FilterSpec = _DEFAULT_SPEC
    ) -> IntradayDecay | None:
        filtered = self.apply_filters(records, spec)
        cfg = self._settings.session
        return self._memo(
            ("intraday_decay", filtered, cfg.first_hour, cfg.last_hour),
            lambda: session_analysis.intraday_decay(
                filtered, first_hour=cfg.first_hour, last_hour=cfg.last_hour
            ),
        )

    def cross_validation_heatmap(
        self, records: Iterable[TradeRecord], spec: FilterSpec = _DEFAULT_SPEC
    ) -> CrossValidationHeatmap:
        """Heatmap with "current month" taken from the pipeline clock."""
        filtered = self.apply_filters(records, spec)
        cfg = self._settings.session
        today = self._clock.today()
        return self._memo(
            ("cross_validation_heatmap", filtered, cfg.first_hour, cfg.last_hour, today),
            lambda: session_analysis.cross_validation_heatmap(
                filtered, today=today, first_hour=cfg.first_hour, last_hour=cfg.last_hour
            ),
        )

    def simulate_capital(
        self,
        records: Iterable[TradeRecord],
        initial_capital: float,
        spec: FilterSpec = _DEFAULT_SPEC,
    ) -> CapitalSimulation | None:
        filtered = self.apply_filters(records, spec)
        return self._memo(
            ("simulate_capital", filtered, initial_capital),
            lambda: capital_simulator.simulate_capital(filtered, initial_capital),
        )

    def dashboard(
        self, records: Iterable[TradeRecord], spec: FilterSpec = _DEFAULT_SPEC
    ) -> DashboardView:
        """Every dashboard view for one filter state."""
        filtered = self.apply_filters(records, spec)
        view = DashboardView(
            spec=spec,
            records=filtered,
            stats=self.compute_stats(filtered, _DEFAULT_SPEC),
            series=self.compute_series(filtered, _DEFAULT_SPEC),
            strategies=self.compute_strategy_aggregates(filtered, _DEFAULT_SPEC),
            correlations=self.compute_correlations(filtered, _DEFAULT_SPEC),
        )
        logger.info(
            "Dashboard: %d records, %d strategies, total=%.2f",
            len(filtered), len(view.strategies), view.stats.total_result,
        )
        return view
