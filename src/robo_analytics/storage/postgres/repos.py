"""Repository for reading trade operations.

:class:`TradeOperationRepo` is a :class:`RecordPageSource` over the
``trading_operations`` table.  It accepts an :class:`AsyncSession` obtained
from :func:`robo_analytics.storage.postgres.connection.get_session`.
:func:`load_trade_records` runs the whole read for one user: engine up,
one session, every page drained, engine disposed.
"""

from __future__ import annotations

import logging
from typing import Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from robo_analytics.core.config import StoreConfig
from robo_analytics.core.models import TradeRecord
from robo_analytics.storage.pagination import fetch_all_trade_records

from . import connection
from .models import TradeOperationRecord

logger = logging.getLogger(__name__)


def _record_to_trade(record: TradeOperationRecord) -> TradeRecord:
    """Convert an ORM row to a :class:`TradeRecord`, failing fast on bad data."""
    return TradeRecord.parse(
        record.operation_date,
        record.operation_time,
        record.result,
        record.strategy,
    )


class TradeOperationRepo:
    """Paged, read-only access to a user's trade operations."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def fetch_page(
        self, user_id: str, offset: int, limit: int
    ) -> Sequence[TradeRecord]:
        """One page of *user_id*'s operations, ascending by date and time.

        ``id`` breaks ties so consecutive pages never overlap.

        Raises:
            MalformedRecordError: If a row cannot be converted.
        """
        stmt = (
            select(TradeOperationRecord)
            .where(TradeOperationRecord.user_id == user_id)
            .order_by(
                TradeOperationRecord.operation_date.asc(),
                TradeOperationRecord.operation_time.asc(),
                TradeOperationRecord.id.asc(),
            )
            .offset(offset)
            .limit(limit)
        )
        result = await self._session.execute(stmt)
        rows = result.scalars().all()
        return [_record_to_trade(r) for r in rows]


async def load_trade_records(store: StoreConfig, user_id: str) -> list[TradeRecord]:
    """Drain every operation of *user_id* from the configured database.

    The engine is disposed even when a page fetch fails; the failure
    propagates unchanged.
    """
    logger.debug("Loading operations for user %s from Postgres", user_id)
    await connection.init_engine(store.postgres_url, pool_size=store.pool_size)
    try:
        async with connection.get_session() as session:
            return await fetch_all_trade_records(
                TradeOperationRepo(session), user_id, page_size=store.page_size
            )
    finally:
        await connection.dispose()
