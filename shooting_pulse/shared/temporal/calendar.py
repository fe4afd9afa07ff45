"""
Fixed, ordered calendar domains and label extraction.

Every summary is reindexed onto these constants, so a bucket with no incidents
still shows up with a zero count.
"""

from __future__ import annotations

import pandas as pd

MONTH_LABELS = (
    "Jan",
    "Feb",
    "Mar",
    "Apr",
    "May",
    "Jun",
    "Jul",
    "Aug",
    "Sep",
    "Oct",
    "Nov",
    "Dec",
)

# Sunday-first week
WEEKDAY_LABELS = ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat")

HOURS = tuple(range(24))


def month_label(dates: pd.Series) -> pd.Series:
    """Map datetimes to ordered month labels (Jan..Dec)."""
    codes = dates.dt.month - 1
    return pd.Series(
        pd.Categorical.from_codes(codes.astype(int), categories=MONTH_LABELS, ordered=True),
        index=dates.index,
    )


def weekday_label(dates: pd.Series) -> pd.Series:
    """Map datetimes to ordered weekday labels (Sun..Sat)."""
    # pandas counts Monday as 0
    codes = (dates.dt.dayofweek + 1) % 7
    return pd.Series(
        pd.Categorical.from_codes(codes.astype(int), categories=WEEKDAY_LABELS, ordered=True),
        index=dates.index,
    )


def hour_bucket(times: pd.Series) -> pd.Series:
    """Map ``datetime.time`` values to ordered hour buckets (0..23)."""
    hours = [t.hour for t in times]
    return pd.Series(
        pd.Categorical(hours, categories=list(HOURS), ordered=True),
        index=times.index,
    )
