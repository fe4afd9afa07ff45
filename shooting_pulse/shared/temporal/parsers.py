"""
Date and time-of-day parsing.

Parsers return one outcome per row instead of silently coercing failures to
null, so the caller can apply a single policy to every unparsable row.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import time

import pandas as pd

DEFAULT_DATE_FORMAT = "%m/%d/%Y"

_TIME_PATTERN = re.compile(r"^(\d{1,2}):(\d{2})(?::(\d{2}))?$")


@dataclass
class ParseOutcome:
    """Per-row parse outcome: parsed values plus the reason for each failure."""

    values: pd.Series
    errors: pd.Series  # reason text, None where the row parsed

    @property
    def failed(self) -> pd.Series:
        """Boolean mask of rows that did not parse."""
        return self.errors.notna()

    @property
    def failure_count(self) -> int:
        return int(self.failed.sum())


def parse_date_series(raw: pd.Series, fmt: str = DEFAULT_DATE_FORMAT) -> ParseOutcome:
    """
    Parse date text (``MM/DD/YYYY`` by default) into midnight timestamps.

    Args:
        raw: Series of date strings
        fmt: strptime format of the source dates

    Returns:
        ParseOutcome with ``datetime64[ns]`` values (NaT on failure)
    """
    text = raw.astype("string").str.strip()
    parsed = pd.to_datetime(text, format=fmt, errors="coerce").dt.normalize()

    missing = (text.isna() | (text == "")).to_numpy(dtype=bool, na_value=True)
    unparsed = parsed.isna().to_numpy(dtype=bool)

    reasons: list[str | None] = []
    for is_missing, is_unparsed in zip(missing, unparsed):
        if is_missing:
            reasons.append("missing value")
        elif is_unparsed:
            reasons.append(f"expected date format {fmt}")
        else:
            reasons.append(None)

    return ParseOutcome(
        values=parsed,
        errors=pd.Series(reasons, index=raw.index, dtype="object"),
    )


def parse_time(value: str) -> time:
    """
    Parse ``HH:MM`` or ``HH:MM:SS`` (24-hour) into a minute-precision time.

    Seconds are validated and then dropped.

    Raises:
        ValueError: If the text is not a valid 24-hour time of day
    """
    match = _TIME_PATTERN.match(value.strip())
    if not match:
        raise ValueError("expected time format HH:MM[:SS]")

    hour, minute = int(match.group(1)), int(match.group(2))
    second = int(match.group(3)) if match.group(3) is not None else 0
    if not (0 <= hour <= 23 and 0 <= minute <= 59 and 0 <= second <= 59):
        raise ValueError("time out of range")

    return time(hour, minute)


def parse_time_series(raw: pd.Series) -> ParseOutcome:
    """
    Parse a series of time-of-day text into ``datetime.time`` values.

    Returns:
        ParseOutcome with object-dtype ``time`` values (None on failure)
    """
    values: list[time | None] = []
    reasons: list[str | None] = []

    for value in raw:
        if pd.isna(value) or not str(value).strip():
            values.append(None)
            reasons.append("missing value")
            continue
        try:
            values.append(parse_time(str(value)))
            reasons.append(None)
        except ValueError as e:
            values.append(None)
            reasons.append(str(e))

    return ParseOutcome(
        values=pd.Series(values, index=raw.index, dtype="object"),
        errors=pd.Series(reasons, index=raw.index, dtype="object"),
    )
