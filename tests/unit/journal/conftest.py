"""Shared fixtures for journal tests."""

from datetime import date, time

import pytest

from robo_analytics.core.models import TradeRecord
from robo_analytics.journal.allowlist import StrategyAllowlist
from robo_analytics.journal.monte_carlo import MonteCarloProjector


@pytest.fixture
def allowlist():
    return StrategyAllowlist(["zeus", "apollo", "ares"])


@pytest.fixture
def monte_carlo():
    return MonteCarloProjector(n_simulations=500, seed=42)


@pytest.fixture
def mixed_history():
    """Two strategies plus an unassigned trade across Feb and Mar 2024."""
    rows = [
        ("2024-02-05", 9, 120.0, "zeus"),     # Monday
        ("2024-02-05", 14, -40.0, "apollo"),
        ("2024-02-06", 10, -60.0, "zeus"),    # Tuesday
        ("2024-02-06", 11, 80.0, "apollo"),
        ("2024-03-11", 9, 50.0, "Zeus"),      # Monday
        ("2024-03-11", 15, 30.0, None),
        ("2024-03-12", 10, -20.0, "apollo"),  # Tuesday
        ("2024-03-15", 16, 70.0, "ares"),     # Friday
    ]
    return [
        TradeRecord(date.fromisoformat(d), time(h, 0), r, s)
        for d, h, r, s in rows
    ]
