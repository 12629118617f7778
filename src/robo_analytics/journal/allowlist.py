"""Strategy allowlist: restrict analytics to recognized strategies.

The record store mixes experimental and production robots; only the
configured production identifiers reach the analytics.  Matching is on the
trimmed, lower-cased strategy name.
"""

from __future__ import annotations

import logging
from typing import Iterable

from robo_analytics.core.config import Settings
from robo_analytics.core.models import TradeRecord, normalize_strategy

logger = logging.getLogger(__name__)


class StrategyAllowlist:
    """Case-insensitive set of recognized strategy names.

    An allowlist with no names is inactive and passes every record,
    including unassigned ones.
    """

    def __init__(self, names: Iterable[str] = ()) -> None:
        self._names = frozenset(
            key for key in (normalize_strategy(n) for n in names) if key
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> StrategyAllowlist:
        return cls(settings.allowlist.strategies)

    @property
    def active(self) -> bool:
        return bool(self._names)

    @property
    def names(self) -> frozenset[str]:
        return self._names

    def allows(self, strategy: str | None) -> bool:
        if not self.active:
            return True
        key = normalize_strategy(strategy)
        return key is not None and key in self._names

    def filter(self, records: Iterable[TradeRecord]) -> list[TradeRecord]:
        """Return the records whose strategy is on the allowlist."""
        if not self.active:
            return list(records)
        kept = [r for r in records if r.strategy_key in self._names]
        logger.debug("Allowlist kept %d records", len(kept))
        return kept

    def __contains__(self, strategy: object) -> bool:
        return isinstance(strategy, str) and self.allows(strategy)

    def __repr__(self) -> str:
        return f"StrategyAllowlist({sorted(self._names)!r})"
