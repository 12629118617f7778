"""Shared fixtures for the robo-analytics test suite."""

from __future__ import annotations

from datetime import date, time
from typing import Callable

import pytest

from robo_analytics.core.clock import FixedClock
from robo_analytics.core.config import Settings
from robo_analytics.core.models import TradeRecord


# ---------------------------------------------------------------------------
# Clock
# ---------------------------------------------------------------------------

@pytest.fixture
def today() -> date:
    """Reference date for relative windows: Friday 2024-03-15."""
    return date(2024, 3, 15)


@pytest.fixture
def fixed_clock(today) -> FixedClock:
    return FixedClock(today)


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------

@pytest.fixture
def make_record() -> Callable[..., TradeRecord]:
    """Factory: ``make_record("2024-03-15", 100.0, "zeus", hour=10)``."""

    def _make(
        day: str | date,
        result: float,
        strategy: str | None = None,
        *,
        hour: int = 10,
        minute: int = 0,
    ) -> TradeRecord:
        if isinstance(day, str):
            day = date.fromisoformat(day)
        return TradeRecord(date=day, time=time(hour, minute), result=result, strategy=strategy)

    return _make


@pytest.fixture
def settings() -> Settings:
    return Settings()
