"""Record store contract and paginated drain.

Any store that can return a user's trade records in ascending date order,
one page at a time, satisfies :class:`RecordPageSource`.  The analytics
never aggregate a partial history: :func:`fetch_all_trade_records` drains
every page first and lets any store failure propagate to the caller.
"""

from __future__ import annotations

import logging
from typing import Protocol, Sequence, runtime_checkable

from robo_analytics.core.errors import PageContractError
from robo_analytics.core.models import TradeRecord

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 1000


@runtime_checkable
class RecordPageSource(Protocol):
    """A paged view of one user's trade records, ascending by date."""

    async def fetch_page(
        self, user_id: str, offset: int, limit: int
    ) -> Sequence[TradeRecord]:
        """Return at most *limit* records starting at *offset*."""
        ...


async def fetch_all_trade_records(
    source: RecordPageSource,
    user_id: str,
    *,
    page_size: int = DEFAULT_PAGE_SIZE,
) -> list[TradeRecord]:
    """Fetch every record of *user_id* by walking offsets.

    Requests pages at offsets ``0, page_size, 2 * page_size, ...`` and stops
    at the first page shorter than *page_size* (an empty page included).

    Args:
        source: Store adapter.
        user_id: Owner of the records.
        page_size: Records per request.

    Returns:
        Every record in store order.

    Raises:
        PageContractError: If a page holds more than *page_size* records.
        ValueError: If *page_size* is not positive.
        Exception: Any error raised by *source* propagates unchanged.
    """
    if page_size <= 0:
        raise ValueError(f"page_size must be positive, got {page_size}")

    records: list[TradeRecord] = []
    offset = 0
    pages = 0
    while True:
        page = await source.fetch_page(user_id, offset, page_size)
        pages += 1
        if len(page) > page_size:
            raise PageContractError(
                f"Page at offset {offset} returned {len(page)} records "
                f"(limit {page_size})"
            )
        records.extend(page)
        logger.debug(
            "Fetched page %d for user %s: offset=%d, %d records",
            pages, user_id, offset, len(page),
        )
        if len(page) < page_size:
            break
        offset += page_size

    logger.info("Drained %d records for user %s in %d pages", len(records), user_id, pages)
    return records
