"""Clock abstraction for "today"-relative date windows.

WallClock: the local calendar date (CLI, services)
FixedClock: a pinned date (tests, replays)

Filters never call date.today() directly; they ask a clock.
"""

from __future__ import annotations

from datetime import date
from typing import Protocol


class IClock(Protocol):
    """Clock interface used by all date-relative code."""

    def today(self) -> date:
        """Current local calendar date (no timezone conversion)."""
        ...


class WallClock:
    """Real wall-clock date."""

    def today(self) -> date:
        return date.today()


class FixedClock:
    """Clock pinned to a given date.

    The date only changes when explicitly set.
    """

    def __init__(self, current: date | None = None) -> None:
        self._today = current or date(2024, 1, 1)

    def today(self) -> date:
        return self._today

    def set_today(self, current: date) -> None:
        self._today = current
