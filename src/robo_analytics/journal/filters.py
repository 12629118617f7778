"""Temporal filter engine.

Narrows a record set by allowlist, date range, strategy, hour of day,
weekday and month.  Axes are combined with AND; values selected within one
axis are combined with OR.  An empty selector skips its predicate.

Usage::

    spec = FilterSpec(date_mode=DateMode.LAST_30_DAYS, hours={10, 11})
    filtered = apply_filters(records, spec, allowlist=allowlist, today=today)
"""

from __future__ import annotations

import calendar
import logging
from datetime import date, timedelta
from typing import Iterable

from robo_analytics.core.clock import IClock, WallClock
from robo_analytics.core.enums import DateMode
from robo_analytics.core.models import FilterSpec, TradeRecord, normalize_strategy

from .allowlist import StrategyAllowlist

logger = logging.getLogger(__name__)


def date_window(
    mode: DateMode,
    today: date,
    custom_start: date | None = None,
    custom_end: date | None = None,
) -> tuple[date | None, date | None]:
    """Inclusive ``(start, end)`` bounds for a date mode; ``None`` is open."""
    if mode == DateMode.ALL:
        return None, None
    if mode == DateMode.TODAY:
        return today, today
    if mode == DateMode.LAST_7_DAYS:
        return today - timedelta(days=7), today
    if mode == DateMode.LAST_30_DAYS:
        return today - timedelta(days=30), today
    if mode == DateMode.CURRENT_MONTH:
        last_day = calendar.monthrange(today.year, today.month)[1]
        return today.replace(day=1), today.replace(day=last_day)
    if mode == DateMode.CURRENT_YEAR:
        return date(today.year, 1, 1), date(today.year, 12, 31)
    if mode == DateMode.CUSTOM:
        return custom_start, custom_end
    raise ValueError(f"Unknown date mode: {mode!r}")


def apply_filters(
    records: Iterable[TradeRecord],
    spec: FilterSpec,
    *,
    allowlist: StrategyAllowlist | None = None,
    today: date | None = None,
    clock: IClock | None = None,
) -> list[TradeRecord]:
    """Apply the allowlist and every active selector of *spec*.

    Args:
        records: Input records; order is preserved.
        spec: Selector values.
        allowlist: Recognized strategies; ``None`` skips the allowlist pass.
        today: Reference date for relative date modes.  Takes precedence
            over *clock*.
        clock: Source of "today" when *today* is not given (default
            :class:`WallClock`).
    """
    result = allowlist.filter(records) if allowlist is not None else list(records)

    if spec.date_mode != DateMode.ALL:
        ref = today or (clock or WallClock()).today()
        start, end = date_window(spec.date_mode, ref, spec.custom_start, spec.custom_end)
        if start is not None:
            result = [r for r in result if r.date >= start]
        if end is not None:
            result = [r for r in result if r.date <= end]

    if spec.strategies:
        wanted = {normalize_strategy(s) for s in spec.strategies} - {None}
        result = [r for r in result if r.strategy_key in wanted]

    if spec.hours:
        result = [r for r in result if r.hour in spec.hours]

    if spec.weekdays:
        result = [r for r in result if r.weekday in spec.weekdays]

    if spec.months:
        result = [r for r in result if r.month in spec.months]

    logger.debug("Filters kept %d records (mode=%s)", len(result), spec.date_mode.value)
    return result
