"""Tests for the paginated record drain."""

from __future__ import annotations

from datetime import date, time

import pytest

from robo_analytics.core.errors import PageContractError
from robo_analytics.core.models import TradeRecord
from robo_analytics.storage.pagination import RecordPageSource, fetch_all_trade_records


def _records(n: int) -> list[TradeRecord]:
    return [TradeRecord(date(2024, 1, 1), time(10, 0), float(i), "zeus") for i in range(n)]


class ListSource:
    """In-memory page source that records every request."""

    def __init__(self, records: list[TradeRecord]) -> None:
        self.records = records
        self.calls: list[tuple[str, int, int]] = []

    async def fetch_page(self, user_id: str, offset: int, limit: int):
        self.calls.append((user_id, offset, limit))
        return self.records[offset:offset + limit]


class OversizedSource:
    async def fetch_page(self, user_id: str, offset: int, limit: int):
        return _records(limit + 1)


class FailingSource:
    def __init__(self, fail_at_offset: int) -> None:
        self.fail_at_offset = fail_at_offset

    async def fetch_page(self, user_id: str, offset: int, limit: int):
        if offset >= self.fail_at_offset:
            raise ConnectionError("store unavailable")
        return _records(limit)


class TestFetchAllTradeRecords:

    @pytest.mark.asyncio
    async def test_drains_until_short_page(self):
        source = ListSource(_records(25))
        records = await fetch_all_trade_records(source, "u1", page_size=10)
        assert [r.result for r in records] == [float(i) for i in range(25)]
        assert source.calls == [("u1", 0, 10), ("u1", 10, 10), ("u1", 20, 10)]

    @pytest.mark.asyncio
    async def test_exact_multiple_ends_on_empty_page(self):
        source = ListSource(_records(20))
        records = await fetch_all_trade_records(source, "u1", page_size=10)
        assert len(records) == 20
        assert [offset for _, offset, _ in source.calls] == [0, 10, 20]

    @pytest.mark.asyncio
    async def test_empty_store(self):
        source = ListSource([])
        assert await fetch_all_trade_records(source, "u1", page_size=10) == []
        assert len(source.calls) == 1

    @pytest.mark.asyncio
    async def test_default_page_size(self):
        source = ListSource(_records(3))
        await fetch_all_trade_records(source, "u1")
        assert source.calls == [("u1", 0, 1000)]

    @pytest.mark.asyncio
    async def test_oversized_page_violates_contract(self):
        with pytest.raises(PageContractError):
            await fetch_all_trade_records(OversizedSource(), "u1", page_size=5)

    @pytest.mark.asyncio
    async def test_source_error_propagates_unchanged(self):
        with pytest.raises(ConnectionError, match="store unavailable"):
            await fetch_all_trade_records(FailingSource(fail_at_offset=10), "u1", page_size=5)

    @pytest.mark.asyncio
    async def test_rejects_non_positive_page_size(self):
        with pytest.raises(ValueError):
            await fetch_all_trade_records(ListSource([]), "u1", page_size=0)

    def test_protocol_is_runtime_checkable(self):
        assert isinstance(ListSource([]), RecordPageSource)
