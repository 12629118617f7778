"""Strategy optimizer.

Recommends the hours, weekdays and months in which each strategy has been
profitable, with a volume-based confidence level.
"""

from .engine import (
    BestBucket,
    CandidateBuckets,
    OptimizedConfig,
    candidate_buckets,
    optimize_strategies,
    optimize_strategy,
)

__all__ = [
    "BestBucket",
    "CandidateBuckets",
    "OptimizedConfig",
    "candidate_buckets",
    "optimize_strategies",
    "optimize_strategy",
]
