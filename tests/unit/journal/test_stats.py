"""Tests for the aggregation engine: overall scalars and series."""

import math
from datetime import date, timedelta

import pytest

from robo_analytics.core.models import TradeRecord
from robo_analytics.journal.stats import (
    ScalarStats,
    compute_series,
    compute_stats,
    drawdown_profile,
    longest_streaks,
)


def _days(make_record, start: str, results):
    first = date.fromisoformat(start)
    return [make_record(first + timedelta(days=i), r) for i, r in enumerate(results)]


class TestComputeStats:

    def test_same_day_trades_form_one_positive_day(self):
        records = [
            TradeRecord.parse("2024-01-01", "10:00", 100, "zeus"),
            TradeRecord.parse("2024-01-01", "14:00", -30, "zeus"),
        ]
        s = compute_stats(records)
        assert s.positive_days == 1
        assert s.negative_days == 0
        assert s.win_rate == 100.0
        assert s.total_result == 70.0
        assert s.total_operations == 2

    def test_empty_input_is_all_zero(self):
        s = compute_stats([])
        assert s == ScalarStats()
        assert all(v == 0 for v in s.to_dict().values())

    def test_zero_sum_day_resets_streak(self, make_record):
        records = _days(make_record, "2024-01-01", [10, 20, 30, 0, 15, 25])
        s = compute_stats(records)
        assert s.positive_streak == 3
        assert s.negative_streak == 0
        assert s.positive_days == 5

    def test_trade_level_win_loss(self, make_record):
        records = _days(make_record, "2024-01-01", [100, -50, 200, -25])
        s = compute_stats(records)
        assert s.average_win == 150.0
        assert s.average_loss == 37.5
        assert s.payoff == 4.0
        assert s.best_result == 200.0
        assert s.worst_result == -50.0
        assert s.profit_factor == 4.0
        assert s.expectancy == pytest.approx(0.5 * 150 - 0.5 * 37.5)

    def test_payoff_zero_without_losses(self, make_record):
        s = compute_stats(_days(make_record, "2024-01-01", [10, 20]))
        assert s.payoff == 0.0
        assert s.profit_factor == 0.0

    def test_monthly_consistency(self, make_record):
        records = [
            make_record("2024-01-10", 100.0),
            make_record("2024-02-10", -50.0),
            make_record("2024-03-10", 30.0),
            make_record("2024-04-10", 20.0),
        ]
        s = compute_stats(records)
        assert s.positive_months == 3
        assert s.negative_months == 1
        assert s.monthly_consistency == 75.0
        assert s.average_monthly_result == 25.0

    def test_volatility_guarded_when_mean_zero(self, make_record):
        s = compute_stats(_days(make_record, "2024-01-01", [10, -10]))
        assert s.average_daily_result == 0.0
        assert s.standard_deviation == 10.0
        assert s.volatility == 0.0

    def test_dispersion_is_population_stdev_of_daily_sums(self, make_record):
        s = compute_stats(_days(make_record, "2024-01-01", [10, 30]))
        assert s.standard_deviation == 10.0
        assert s.volatility == 50.0
        assert s.sharpe_ratio == pytest.approx(2.0 * math.sqrt(252))

    def test_drawdown_scalars(self, make_record):
        s = compute_stats(_days(make_record, "2024-01-01", [100, -30, -20, 10, 60]))
        assert s.max_drawdown == 50.0
        assert s.max_drawdown_duration == 3
        assert s.recovery_factor == pytest.approx(120 / 50)
        assert s.total_days == 5

    def test_deterministic(self, mixed_history):
        assert compute_stats(mixed_history) == compute_stats(list(mixed_history))


class TestBuildingBlocks:

    def test_longest_streaks(self):
        assert longest_streaks([1, 1, -1, -1, -1, 1]) == (2, 3)
        assert longest_streaks([]) == (0, 0)

    def test_drawdown_peak_starts_at_zero(self):
        # Opening loss counts as drawdown from the flat start
        assert drawdown_profile([-10, 5]) == (10.0, 2)

    def test_drawdown_unfinished_run_counts(self):
        assert drawdown_profile([10, -5, -5]) == (10.0, 2)


class TestComputeSeries:

    def test_curve_is_cumulative_and_chronological(self, make_record):
        records = [
            make_record("2024-01-02", -5.0),
            make_record("2024-01-01", 10.0),
            make_record("2024-01-02", 20.0),
        ]
        series = compute_series(records)
        assert [(p.date.day, p.result, p.cumulative) for p in series.performance_curve] == [
            (1, 10.0, 10.0),
            (2, 15.0, 25.0),
        ]

    def test_rollups_agree(self, mixed_history):
        series = compute_series(mixed_history)
        total = compute_stats(mixed_history).total_result
        assert sum(b.sum_result for b in series.monthly_buckets.values()) == pytest.approx(total)
        assert sum(d.sum_result for d in series.daily_buckets) == pytest.approx(total)
        assert sum(b.sum_result for b in series.yearly_buckets.values()) == pytest.approx(total)

    def test_bucket_families(self, mixed_history):
        series = compute_series(mixed_history)
        assert list(series.monthly_buckets) == ["2024-02", "2024-03"]
        assert list(series.yearly_buckets) == [2024]
        assert set(series.weekday_buckets) == {1, 2, 5}
        assert set(series.month_of_year_buckets) == {1, 2}
        hour_9 = series.hourly_buckets[9]
        assert (hour_9.count, hour_9.positive_count, hour_9.win_rate) == (2, 2, 100.0)

    def test_best_and_worst_days(self, make_record):
        records = _days(make_record, "2024-01-01", [5, 50, -10, 50, -40, 1, 2])
        series = compute_series(records)
        assert [d.sum_result for d in series.best_days] == [50, 50, 5, 2, 1]
        assert series.best_days[0].date < series.best_days[1].date
        assert [d.sum_result for d in series.worst_days][:2] == [-40, -10]

    def test_empty(self):
        series = compute_series([])
        assert series.performance_curve == ()
        assert series.hourly_buckets == {}
