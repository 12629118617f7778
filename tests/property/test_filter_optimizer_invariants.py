"""Property tests: filter idempotence and optimizer bucket selection.

Re-applying the same filter must not change the result, and every bucket
the optimizer recommends must be a profitable member of the unpruned
candidate family.
"""

from datetime import date, time, timedelta

from hypothesis import given, settings, strategies as st

from robo_analytics.core.enums import DateMode
from robo_analytics.core.models import FilterSpec, TradeRecord
from robo_analytics.journal.allowlist import StrategyAllowlist
from robo_analytics.journal.filters import apply_filters
from robo_analytics.optimizer.engine import candidate_buckets, optimize_strategy

START = date(2023, 1, 1)
TODAY = date(2024, 3, 15)

records_strategy = st.lists(
    st.builds(
        lambda offset, hour, cents, strategy: TradeRecord(
            START + timedelta(days=offset), time(hour, 0), cents / 100, strategy
        ),
        offset=st.integers(min_value=0, max_value=500),
        hour=st.integers(min_value=0, max_value=23),
        cents=st.integers(min_value=-100_000, max_value=100_000),
        strategy=st.sampled_from([None, "zeus", "ZEUS ", "apollo", "hermes"]),
    ),
    max_size=80,
)

specs = st.builds(
    FilterSpec,
    date_mode=st.sampled_from([m for m in DateMode if m != DateMode.CUSTOM]),
    strategies=st.frozensets(st.sampled_from(["zeus", "apollo", "Hermes"]), max_size=2),
    hours=st.frozensets(st.integers(min_value=0, max_value=23), max_size=6),
    weekdays=st.frozensets(st.integers(min_value=0, max_value=6), max_size=3),
    months=st.frozensets(st.integers(min_value=0, max_value=11), max_size=4),
)


@given(records=records_strategy, spec=specs)
@settings(max_examples=100)
def test_filters_idempotent(records, spec):
    allowlist = StrategyAllowlist(["zeus", "apollo"])
    once = apply_filters(records, spec, allowlist=allowlist, today=TODAY)
    twice = apply_filters(once, spec, allowlist=allowlist, today=TODAY)
    assert once == twice


@given(records=records_strategy, spec=specs)
@settings(max_examples=100)
def test_filter_output_is_ordered_subset(records, spec):
    kept = apply_filters(records, spec, today=TODAY)
    it = iter(records)
    assert all(any(k is r for r in it) for k in kept)


@given(records=records_strategy)
@settings(max_examples=100)
def test_recommended_buckets_are_positive_candidates(records):
    config = optimize_strategy(records, "zeus")
    candidates = candidate_buckets(records, "zeus")
    for best, family in (
        (config.best_hours, candidates.hours),
        (config.best_weekdays, candidates.weekdays),
        (config.best_months, candidates.months),
    ):
        assert all(b.sum_result > 0 for b in best)
        assert {b.value for b in best} == {
            value for value, bucket in family.items() if bucket.sum_result > 0
        }
        sums = [b.sum_result for b in best]
        assert sums == sorted(sums, reverse=True)


@given(records=records_strategy)
@settings(max_examples=50)
def test_optimizer_counts_every_matching_record(records):
    config = optimize_strategy(records, "Zeus")
    assert config.total_operations == sum(1 for r in records if r.strategy_key == "zeus")
