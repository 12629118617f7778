"""Tests for the memoizing analytics pipeline."""

from __future__ import annotations

from datetime import date

import pytest

from robo_analytics.core.clock import FixedClock
from robo_analytics.core.config import Settings
from robo_analytics.core.enums import DateMode, HeatmapSignal
from robo_analytics.core.models import FilterSpec
from robo_analytics.journal.stats import compute_stats
from robo_analytics.journal.strategy_stats import compute_strategy_aggregates
from robo_analytics.pipeline import AnalyticsPipeline


@pytest.fixture
def history(make_record):
    return [
        make_record("2024-02-05", 120.0, "zeus", hour=9),
        make_record("2024-02-05", -40.0, "apollo", hour=14),
        make_record("2024-03-11", 50.0, "zeus", hour=9),
        make_record("2024-03-12", -20.0, "apollo", hour=10),
        make_record("2024-03-12", 500.0, "experimental", hour=10),
        make_record("2024-03-13", 10.0, None, hour=10),
    ]


@pytest.fixture
def pipeline(fixed_clock):
    settings = Settings(allowlist={"strategies": ["zeus", "apollo"]})
    return AnalyticsPipeline(settings, clock=fixed_clock)


class TestOperations:

    def test_allowlist_applied(self, pipeline, history):
        stats = pipeline.compute_stats(history)
        assert stats.total_operations == 4
        assert stats.total_result == 110.0

    def test_matches_pure_functions(self, pipeline, history):
        spec = FilterSpec(date_mode=DateMode.CURRENT_MONTH)
        filtered = pipeline.apply_filters(history, spec)
        assert pipeline.compute_stats(history, spec) == compute_stats(filtered)
        assert list(pipeline.compute_strategy_aggregates(history, spec)) == (
            compute_strategy_aggregates(filtered)
        )

    def test_clock_drives_relative_windows(self, pipeline, history):
        spec = FilterSpec(date_mode=DateMode.CURRENT_MONTH)
        assert {r.date.month for r in pipeline.apply_filters(history, spec)} == {3}

    def test_optimizer_ignores_temporal_filter(self, pipeline, history):
        config = pipeline.optimize_strategy(history, "zeus")
        assert config.total_operations == 2
        assert config.total_result == 170.0

    def test_optimizer_respects_allowlist(self, pipeline, history):
        assert pipeline.optimize_strategy(history, "experimental").total_operations == 0

    def test_correlations(self, pipeline, history):
        [pair] = pipeline.compute_correlations(history)
        assert {pair.strategy_a, pair.strategy_b} == {"zeus", "apollo"}
        assert pair.diversification_score == 100.0

    def test_dashboard(self, pipeline, history):
        view = pipeline.dashboard(history, FilterSpec(hours={9}))
        assert len(view.records) == 2
        assert view.stats.total_result == 170.0
        assert [a.strategy for a in view.strategies] == ["zeus"]
        assert view.series.performance_curve[-1].cumulative == 170.0
        assert view.correlations == ()


class TestCache:

    def test_repeat_calls_hit_cache(self, pipeline, history):
        first = pipeline.compute_stats(history)
        second = pipeline.compute_stats(list(history))
        assert first is second
        assert pipeline.cache_info["hits"] >= 1

    def test_different_spec_misses(self, pipeline, history):
        a = pipeline.compute_stats(history, FilterSpec(hours={9}))
        b = pipeline.compute_stats(history, FilterSpec(hours={10}))
        assert a != b

    def test_clock_change_invalidates_window(self, pipeline, history, fixed_clock):
        spec = FilterSpec(date_mode=DateMode.CURRENT_MONTH)
        march = pipeline.compute_stats(history, spec)
        fixed_clock.set_today(date(2024, 2, 20))
        february = pipeline.compute_stats(history, spec)
        assert march.total_result == 30.0
        assert february.total_result == 80.0

    def test_bounded(self, fixed_clock, history):
        pipeline = AnalyticsPipeline(Settings(cache={"max_entries": 2}), clock=fixed_clock)
        for hour in range(9, 15):
            pipeline.compute_stats(history, FilterSpec(hours={hour}))
        assert pipeline.cache_info["size"] <= 2

    def test_disabled_cache(self, fixed_clock, history):
        pipeline = AnalyticsPipeline(Settings(cache={"max_entries": 0}), clock=fixed_clock)
        assert pipeline.compute_stats(history) == pipeline.compute_stats(history)
        assert pipeline.cache_info["size"] == 0

    def test_clear_cache(self, pipeline, history):
        pipeline.compute_stats(history)
        pipeline.clear_cache()
        assert pipeline.cache_info["size"] == 0


class TestSessionAndCapital:

    @pytest.fixture
    def session_pipeline(self, fixed_clock):
        settings = Settings(
            allowlist={"strategies": ["zeus", "apollo"]},
            session={"first_hour": 9, "last_hour": 10},
        )
        return AnalyticsPipeline(settings, clock=fixed_clock)

    def test_intraday_decay_uses_session_window(self, session_pipeline, history):
        decay = session_pipeline.intraday_decay(history)
        assert [p.hour for p in decay.points] == [9, 10]
        assert [p.accumulated for p in decay.points] == [85.0, 65.0]
        assert decay.peak_hour == 9

    def test_heatmap_current_month_from_clock(self, session_pipeline, history):
        heatmap = session_pipeline.cross_validation_heatmap(history)
        assert len(heatmap.cells) == 10
        cells = {(c.weekday, c.hour): c for c in heatmap.cells}
        assert cells[(1, 9)].signal == HeatmapSignal.ON
        assert cells[(2, 10)].signal == HeatmapSignal.NO_DATA
        assert heatmap.score == 100

    def test_simulate_capital_over_filtered_records(self, pipeline, history):
        sim = pipeline.simulate_capital(history, 1000.0)
        assert sim.final_balance == 1110.0
        assert sim.total_days == 3
        march = pipeline.simulate_capital(
            history, 1000.0, FilterSpec(date_mode=DateMode.CURRENT_MONTH)
        )
        assert march.final_balance == 1030.0
