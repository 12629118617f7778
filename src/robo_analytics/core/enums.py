"""Enumerations used across the analytics engine."""

from enum import Enum


class DateMode(str, Enum):
    """Date-range presets understood by the temporal filter."""

    ALL = "all"
    TODAY = "today"
    LAST_7_DAYS = "last-7-days"
    LAST_30_DAYS = "last-30-days"
    CURRENT_MONTH = "current-month"
    CURRENT_YEAR = "current-year"
    CUSTOM = "custom"


class Confidence(str, Enum):
    """Reliability tier of optimizer output, by sample size."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Complementarity(str, Enum):
    """Qualitative label for a strategy pair's diversification score."""

    HIGH = "high complementarity"
    MODERATE = "moderate"
    LOW = "low"


class HeatmapSignal(str, Enum):
    """Cross-validation verdict for one weekday/hour cell."""

    ON = "on"            # Historical and current month both profitable
    ALERT = "alert"      # Historical and current month disagree
    OFF = "off"          # Both flat or losing
    NO_DATA = "no_data"  # One side has no records


class AlertSeverity(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
