"""Core domain models used across the analytics engine.

TradeRecord is the single source of truth: every aggregate in the engine is
a pure function of a list of these.  FilterSpec is the immutable selector
value passed into every pipeline call.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import date, datetime, time
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable, Literal, Mapping

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .enums import DateMode
from .errors import MalformedRecordError

logger = logging.getLogger(__name__)

# Label used for records without a strategy in ungrouped views
UNASSIGNED_STRATEGY = "unassigned"


def normalize_strategy(name: str | None) -> str | None:
    """Trimmed, lower-cased strategy key; ``None`` for blank names."""
    if name is None:
        return None
    key = name.strip().lower()
    return key or None


# ---------------------------------------------------------------------------
# Field parsing
# ---------------------------------------------------------------------------

def _parse_date(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        raise MalformedRecordError("date", value, "expected YYYY-MM-DD")
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError as exc:
        raise MalformedRecordError("date", value, str(exc)) from exc


def _parse_time(value: Any) -> time:
    if isinstance(value, datetime):
        return value.time()
    if isinstance(value, time):
        return value
    if not isinstance(value, str):
        raise MalformedRecordError("time", value, "expected HH:MM or HH:MM:SS")
    for fmt in ("%H:%M:%S", "%H:%M"):
        try:
            return datetime.strptime(value, fmt).time()
        except ValueError:
            continue
    raise MalformedRecordError("time", value, "expected HH:MM or HH:MM:SS")


def _parse_result(value: Any) -> float:
    if value is None or isinstance(value, bool):
        raise MalformedRecordError("result", value, "expected a number")
    try:
        result = float(Decimal(str(value).strip()))
    except (InvalidOperation, ValueError) as exc:
        raise MalformedRecordError("result", value, "expected a number") from exc
    if not math.isfinite(result):
        raise MalformedRecordError("result", value, "must be finite")
    return result


def _parse_strategy(value: Any) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise MalformedRecordError("strategy", value, "expected a string")
    return value.strip() or None


# ---------------------------------------------------------------------------
# TradeRecord
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class TradeRecord:
    """One logged trade outcome.

    Parameters
    ----------
    date : date
        Wall-clock date key.  Never reconstructed through a timezone-aware
        instant, so DST and UTC offsets cannot move a trade to another day.
    time : time
        Wall-clock time of day; only the hour is used.
    result : float
        Signed monetary result.  Zero is neither a win nor a loss.
    strategy : str | None
        Robot/strategy identifier, ``None`` when unassigned.
    """

    date: date
    time: time
    result: float
    strategy: str | None = None

    @classmethod
    def parse(
        cls,
        date: Any,
        time: Any,
        result: Any,
        strategy: Any = None,
    ) -> TradeRecord:
        """Build a record from raw store values, failing fast on bad input."""
        return cls(
            date=_parse_date(date),
            time=_parse_time(time),
            result=_parse_result(result),
            strategy=_parse_strategy(strategy),
        )

    # ------------------------------------------------------------------ #
    # Calendar keys                                                        #
    # ------------------------------------------------------------------ #

    @property
    def hour(self) -> int:
        return self.time.hour

    @property
    def weekday(self) -> int:
        """Local calendar weekday, 0=Sunday .. 6=Saturday."""
        return (self.date.weekday() + 1) % 7

    @property
    def month(self) -> int:
        """Month index, 0=January .. 11=December."""
        return self.date.month - 1

    @property
    def year(self) -> int:
        return self.date.year

    @property
    def month_key(self) -> str:
        return f"{self.date.year:04d}-{self.date.month:02d}"

    @property
    def strategy_key(self) -> str | None:
        return normalize_strategy(self.strategy)

    @property
    def strategy_label(self) -> str:
        return self.strategy or UNASSIGNED_STRATEGY


_DATE_KEYS = ("date", "operation_date")
_TIME_KEYS = ("time", "operation_time")


def _first_present(row: Mapping[str, Any], keys: tuple[str, ...]) -> Any:
    for key in keys:
        if key in row:
            return row[key]
    return None


def parse_records(
    rows: Iterable[Mapping[str, Any]],
    *,
    on_error: Literal["raise", "skip"] = "raise",
) -> list[TradeRecord]:
    """Parse raw store rows into TradeRecords.

    Accepts both the short (``date``/``time``) and the store's column names
    (``operation_date``/``operation_time``).

    Args:
        rows: Mappings with date, time, result and optional strategy.
        on_error: ``"raise"`` rejects the whole batch on the first malformed
            row; ``"skip"`` drops only the malformed row and logs it.

    Raises:
        MalformedRecordError: On the first bad row when ``on_error="raise"``.
    """
    if on_error not in ("raise", "skip"):
        raise ValueError(f"on_error must be 'raise' or 'skip', got {on_error!r}")

    records: list[TradeRecord] = []
    for index, row in enumerate(rows):
        try:
            records.append(
                TradeRecord.parse(
                    _first_present(row, _DATE_KEYS),
                    _first_present(row, _TIME_KEYS),
                    row.get("result"),
                    row.get("strategy"),
                )
            )
        except MalformedRecordError as exc:
            if on_error == "raise":
                raise
            logger.warning("Skipping malformed record at row %d: %s", index, exc)
    return records


# ---------------------------------------------------------------------------
# FilterSpec
# ---------------------------------------------------------------------------

def _check_range(values: frozenset[int], upper: int, name: str) -> frozenset[int]:
    bad = sorted(v for v in values if v < 0 or v > upper)
    if bad:
        raise ValueError(f"{name} must be within 0..{upper}, got {bad}")
    return values


class FilterSpec(BaseModel):
    """Immutable selector state for the temporal filter.

    Empty selectors (and ``date_mode=all``) pass everything.  Within one
    multi-select axis the values are OR-ed; across axes they are AND-ed.
    """

    model_config = ConfigDict(frozen=True)

    date_mode: DateMode = DateMode.ALL
    custom_start: date | None = None
    custom_end: date | None = None
    strategies: frozenset[str] = Field(default_factory=frozenset)
    hours: frozenset[int] = Field(default_factory=frozenset)
    weekdays: frozenset[int] = Field(default_factory=frozenset)  # 0=Sunday
    months: frozenset[int] = Field(default_factory=frozenset)    # 0=January

    @field_validator("strategies")
    @classmethod
    def _drop_blank_strategies(cls, v: frozenset[str]) -> frozenset[str]:
        # Blank names select nothing; an all-blank selector is no selector
        return frozenset(s for s in v if normalize_strategy(s) is not None)

    @field_validator("hours")
    @classmethod
    def _hours_in_range(cls, v: frozenset[int]) -> frozenset[int]:
        return _check_range(v, 23, "hours")

    @field_validator("weekdays")
    @classmethod
    def _weekdays_in_range(cls, v: frozenset[int]) -> frozenset[int]:
        return _check_range(v, 6, "weekdays")

    @field_validator("months")
    @classmethod
    def _months_in_range(cls, v: frozenset[int]) -> frozenset[int]:
        return _check_range(v, 11, "months")

    @property
    def is_default(self) -> bool:
        return (
            self.date_mode == DateMode.ALL
            and not self.strategies
            and not self.hours
            and not self.weekdays
            and not self.months
        )
