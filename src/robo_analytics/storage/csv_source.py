"""CSV export as a record page source.

Reads a trade export with the header ``operation_date,operation_time,
result,strategy`` (or the short ``date,time,result,strategy``) and serves it
through the :class:`~robo_analytics.storage.pagination.RecordPageSource`
contract.  A CSV holds a single user's history, so *user_id* is ignored.

Usage::

    source = CsvRecordSource("exports/operations.csv")
    records = await fetch_all_trade_records(source, "me")
"""

from __future__ import annotations

import csv
import logging
from pathlib import Path
from typing import Literal, Sequence

from robo_analytics.core.errors import DataError
from robo_analytics.core.models import TradeRecord, parse_records

logger = logging.getLogger(__name__)

_REQUIRED = ({"date", "operation_date"}, {"time", "operation_time"}, {"result"})


class CsvRecordSource:
    """Paged access to the records of a CSV export.

    The file is parsed on the first page request and sorted by date and
    time (stable, so intraday file order is kept for equal timestamps).
    """

    def __init__(
        self,
        path: str | Path,
        *,
        on_error: Literal["raise", "skip"] = "raise",
    ) -> None:
        self._path = Path(path)
        self._on_error = on_error
        self._records: list[TradeRecord] | None = None

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> list[TradeRecord]:
        with open(self._path, newline="", encoding="utf-8") as f:
            reader = csv.DictReader(f)
            header = {name.strip() for name in (reader.fieldnames or [])}
            for options in _REQUIRED:
                if not header & options:
                    raise DataError(
                        f"{self._path}: missing column {' or '.join(sorted(options))}"
                    )
            rows = [{k.strip(): v for k, v in row.items() if k is not None} for row in reader]

        records = parse_records(rows, on_error=self._on_error)
        records.sort(key=lambda r: (r.date, r.time))
        logger.debug("Loaded %d records from %s", len(records), self._path)
        return records

    async def fetch_page(
        self, user_id: str, offset: int, limit: int
    ) -> Sequence[TradeRecord]:
        if self._records is None:
            self._records = self._load()
        return self._records[offset:offset + limit]
