"""Custom exception hierarchy for the analytics engine."""

from __future__ import annotations

from typing import Any


class AnalyticsError(Exception):
    """Base exception for all analytics engine errors."""


# --- Configuration ---
class ConfigError(AnalyticsError):
    """Invalid or missing configuration."""


# --- Data ---
class DataError(AnalyticsError):
    """Input data quality error."""


class MalformedRecordError(DataError):
    """A trade record field could not be parsed.

    Records are rejected rather than coerced: a silently defaulted date or
    hour would shift streak and monthly calculations.
    """

    def __init__(self, field: str, value: Any, reason: str = "") -> None:
        self.field = field
        self.value = value
        self.reason = reason
        message = f"Malformed {field}: {value!r}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


# --- Record store ---
class RecordStoreError(AnalyticsError):
    """Record store adapter error."""


class PageContractError(RecordStoreError):
    """A page source returned a page that violates the paging contract."""
