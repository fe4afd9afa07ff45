"""
Shooting Pulse - Temporal Utilities

Temporal processing utilities for incident data:
- Fixed calendar domains (months, weekdays, hours)
- Date and time-of-day parsing with per-row outcomes
- Calendar label extraction

Timestamps are naive New York local civil time; no time zone or DST
conversion is applied anywhere.
"""

from shooting_pulse.shared.temporal.calendar import (
    HOURS,
    MONTH_LABELS,
    WEEKDAY_LABELS,
    hour_bucket,
    month_label,
    weekday_label,
)
from shooting_pulse.shared.temporal.parsers import (
    ParseOutcome,
    parse_date_series,
    parse_time,
    parse_time_series,
)

__all__ = [
    "HOURS",
    "MONTH_LABELS",
    "WEEKDAY_LABELS",
    "hour_bucket",
    "month_label",
    "weekday_label",
    "ParseOutcome",
    "parse_date_series",
    "parse_time",
    "parse_time_series",
]
