"""Trade Journal Analytics: filtering, aggregation and strategy comparison.

Turns a flat list of trade records into the numbers a performance
dashboard shows.  Everything here is a pure, synchronous fold over an
in-memory record list.

Key components
--------------
**Filtering**

StrategyAllowlist     Static set of recognized production strategies
apply_filters         Allowlist, date window and selector filtering
date_window           Inclusive date bounds for a date mode

**Aggregation**

compute_stats               Overall scalar statistics (day-level win rate)
compute_series              Performance curve and bucket families
compute_strategy_aggregates Per-strategy aggregates ranked by result
monthly_strategy_table      Strategy x month result matrix
strategy_evolution          Per-strategy cumulative curves

**Comparison & projection**

compute_correlations  Cross-strategy diversification scores
return_correlation    Pearson correlation of daily results
intraday_decay        Hourly accumulation through the session
cross_validation_heatmap  Historical vs current-month weekday/hour cells
MonteCarloProjector   Bootstrap projection of daily results
simulate_capital      Balance path of a starting capital over daily results
evaluate_risk_alerts  Drawdown, losing-streak and strategy alerts
"""

from .allowlist import StrategyAllowlist
from .buckets import BucketAggregate, DailyAggregate, bucket_by, daily_aggregates, downsample
from .filters import apply_filters, date_window
from .stats import CurvePoint, ScalarStats, SeriesResult, compute_series, compute_stats
from .strategy_stats import (
    EvolutionPoint,
    MonthCell,
    MonthlyStrategyTable,
    StrategyAggregate,
    compute_strategy_aggregates,
    monthly_strategy_table,
    strategy_evolution,
)
from .correlation import CorrelationPair, compute_correlations, return_correlation
from .session_analysis import (
    CrossValidationHeatmap,
    IntradayDecay,
    cross_validation_heatmap,
    intraday_decay,
)
from .monte_carlo import MonteCarloProjection, MonteCarloProjector
from .capital_simulator import BalancePoint, CapitalSimulation, simulate_capital
from .risk_alerts import RiskAlert, evaluate_risk_alerts

__all__ = [
    "StrategyAllowlist",
    "BucketAggregate",
    "DailyAggregate",
    "bucket_by",
    "daily_aggregates",
    "downsample",
    "apply_filters",
    "date_window",
    "CurvePoint",
    "ScalarStats",
    "SeriesResult",
    "compute_series",
    "compute_stats",
    "EvolutionPoint",
    "MonthCell",
    "MonthlyStrategyTable",
    "StrategyAggregate",
    "compute_strategy_aggregates",
    "monthly_strategy_table",
    "strategy_evolution",
    "CorrelationPair",
    "compute_correlations",
    "return_correlation",
    "CrossValidationHeatmap",
    "IntradayDecay",
    "cross_validation_heatmap",
    "intraday_decay",
    "MonteCarloProjection",
    "MonteCarloProjector",
    "BalancePoint",
    "CapitalSimulation",
    "simulate_capital",
    "RiskAlert",
    "evaluate_risk_alerts",
]
