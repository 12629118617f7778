"""Test WallClock and FixedClock."""

from datetime import date

from robo_analytics.core.clock import FixedClock, WallClock


class TestWallClock:
    def test_today_is_local_date(self):
        assert WallClock().today() == date.today()


class TestFixedClock:
    def test_default_date(self):
        assert FixedClock().today() == date(2024, 1, 1)

    def test_pinned_until_set(self, fixed_clock, today):
        assert fixed_clock.today() == today
        assert fixed_clock.today() == today
        fixed_clock.set_today(date(2025, 6, 30))
        assert fixed_clock.today() == date(2025, 6, 30)
