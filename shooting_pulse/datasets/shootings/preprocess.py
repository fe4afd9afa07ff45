"""
Shooting Pulse - Shooting Incident Preprocessors

Two stages run back to back on the raw incident table.

ShootingCleaner:
    - Column renaming to standardized names
    - Full-row duplicate removal (first occurrence kept, order preserved)
    - Projection to incident_key, occur_date, occur_time

ShootingNormalizer:
    - OCCUR_DATE text (MM/DD/YYYY) to a calendar date
    - OCCUR_TIME text (HH:MM[:SS]) to a minute-precision time of day
    - One ParseError per unparsable row, handled by a single run-wide policy

Usage:
    from shooting_pulse.datasets.shootings.preprocess import ShootingCleaner, ShootingNormalizer

    cleaner = ShootingCleaner()
    result = cleaner.run(raw_df, execution_date="2024-01-15")
    clean_df = cleaner.get_data()

    normalizer = ShootingNormalizer()
    result = normalizer.run(clean_df, execution_date="2024-01-15")
    normalized_df = normalizer.get_data()
"""

from __future__ import annotations

import logging
from typing import Any

import numpy as np
import pandas as pd

from shooting_pulse.datasets.base import BasePreprocessor, PreprocessingResult
from shooting_pulse.shared.config import Settings, get_dataset_config
from shooting_pulse.shared.exceptions import ParseError
from shooting_pulse.shared.temporal import parse_date_series, parse_time_series

logger = logging.getLogger(__name__)

DATASET_CONFIG = get_dataset_config("shootings")

COLUMN_MAPPINGS: dict[str, str] = DATASET_CONFIG.get(
    "columns",
    {
        "INCIDENT_KEY": "incident_key",
        "OCCUR_DATE": "occur_date",
        "OCCUR_TIME": "occur_time",
    },
)

DATE_FORMAT = DATASET_CONFIG.get("formats", {}).get("occur_date", "%m/%d/%Y")

# Columns kept by the cleaner, in output order
PROJECTED_COLUMNS = ["incident_key", "occur_date", "occur_time"]


class ShootingCleaner(BasePreprocessor):
    """
    Deduplicates the raw table and projects it to the three columns of interest.

    Duplicates are judged on the full row before projection. Retained values
    are passed through untouched, and running the cleaner on its own output
    changes nothing.
    """

    stage = "clean"

    def __init__(self, config: Settings | None = None):
        """Initialize shooting cleaner."""
        super().__init__(config)

    def get_dataset_name(self) -> str:
        """Return dataset name."""
        return "shootings"

    def get_required_columns(self) -> list[str]:
        """Return required output columns."""
        return PROJECTED_COLUMNS

    def get_column_mappings(self) -> dict[str, str]:
        """Return column name mappings."""
        return COLUMN_MAPPINGS

    def transform(self, df: pd.DataFrame) -> pd.DataFrame:
        """
        Apply shooting-specific cleaning.

        Args:
            df: Raw DataFrame with renamed columns

        Returns:
            Deduplicated DataFrame with exactly the projected columns

        Raises:
            SchemaError: If any projected column is missing
        """
        df = self.drop_duplicates(df, keep="first")
        df = self.select_columns(df, PROJECTED_COLUMNS)
        return df


class ShootingNormalizer(BasePreprocessor):
    """
    Parses incident dates and times into typed values.

    Parse outcomes are computed for every row first; the configured policy
    (``normalization.on_parse_error``) is then applied once to all failures:

    - ``drop``: exclude unparsable rows and report how many were dropped
    - ``raise``: abort on the first ParseError
    """

    stage = "normalize"

    REQUIRED_COLUMNS = ["incident_key", "occur_date", "occur_time", "occurred_at"]

    def __init__(self, config: Settings | None = None, date_format: str = DATE_FORMAT):
        """Initialize shooting normalizer."""
        super().__init__(config)
        self.date_format = date_format
        self.on_parse_error = self.config.normalization.on_parse_error
        self._parse_errors: list[ParseError] = []

    def get_dataset_name(self) -> str:
        """Return dataset name."""
        return "shootings"

    def get_required_columns(self) -> list[str]:
        """Return required output columns."""
        return self.REQUIRED_COLUMNS

    def get_column_mappings(self) -> dict[str, str]:
        """Return column name mappings."""
        return COLUMN_MAPPINGS

    def get_parse_errors(self) -> list[ParseError]:
        """Get the per-row parse errors from the most recent run."""
        return list(self._parse_errors)

    def transform(self, df: pd.DataFrame) -> pd.DataFrame:
        """
        Parse occur_date and occur_time.

        Args:
            df: Cleaned DataFrame

        Returns:
            DataFrame with typed occur_date, occur_time and occurred_at,
            without the rows that failed to parse

        Raises:
            SchemaError: If occur_date or occur_time is missing
            ParseError: If a row fails to parse and the policy is ``raise``
        """
        self._parse_errors = []
        df = self.select_columns(df, PROJECTED_COLUMNS)

        dates = parse_date_series(df["occur_date"], self.date_format)
        times = parse_time_series(df["occur_time"])

        self._parse_errors = self._collect_errors(df, dates.errors, times.errors)

        if self._parse_errors:
            self._apply_parse_policy(dates.failed, times.failed)

        keep = ~np.logical_or(dates.failed.to_numpy(), times.failed.to_numpy())

        df = df.loc[keep].copy()
        df["occur_date"] = dates.values.to_numpy()[keep]
        df["occur_time"] = times.values.to_numpy()[keep]
        df["occurred_at"] = df["occur_date"] + pd.to_timedelta(
            [t.hour * 60 + t.minute for t in df["occur_time"]], unit="m"
        )
        self.log_transformation("parse_occur_date")
        self.log_transformation("parse_occur_time")

        return df

    def _collect_errors(
        self, df: pd.DataFrame, date_reasons: pd.Series, time_reasons: pd.Series
    ) -> list[ParseError]:
        """Build one ParseError per failed field, in row order."""
        errors = []
        rows = zip(
            df.index,
            df["occur_date"],
            date_reasons,
            df["occur_time"],
            time_reasons,
        )
        for row, date_value, date_reason, time_value, time_reason in rows:
            if isinstance(date_reason, str):
                errors.append(ParseError(row, "occur_date", _text(date_value), date_reason))
            if isinstance(time_reason, str):
                errors.append(ParseError(row, "occur_time", _text(time_value), time_reason))
        return errors

    def _apply_parse_policy(self, date_failed: pd.Series, time_failed: pd.Series) -> None:
        """Apply the run-wide policy to the collected parse errors."""
        if self.on_parse_error == "raise":
            raise self._parse_errors[0]

        bad_dates = int(date_failed.sum())
        bad_times = int((time_failed & ~date_failed).sum())
        if bad_dates:
            self.log_dropped_rows("unparsable_occur_date", bad_dates)
        if bad_times:
            self.log_dropped_rows("unparsable_occur_time", bad_times)

        logger.warning(
            f"Dropped {bad_dates + bad_times} rows with unparsable date or time",
            extra={
                "parse_error_count": len(self._parse_errors),
                "examples": [e.to_dict() for e in self._parse_errors[:5]],
            },
        )


def _text(value: Any) -> str | None:
    return None if pd.isna(value) else str(value)


# =============================================================================
# Convenience Functions
# =============================================================================


def clean_shooting_data(
    df: pd.DataFrame,
    execution_date: str,
    config: Settings | None = None,
) -> dict[str, Any]:
    """
    Convenience function for cleaning raw shooting data.

    Returns result dictionary suitable for logging.
    """
    cleaner = ShootingCleaner(config)
    result: PreprocessingResult = cleaner.run(df, execution_date)
    return result.to_dict()


def normalize_shooting_data(
    df: pd.DataFrame,
    execution_date: str,
    config: Settings | None = None,
) -> dict[str, Any]:
    """
    Convenience function for normalizing cleaned shooting data.

    Returns result dictionary suitable for logging.
    """
    normalizer = ShootingNormalizer(config)
    result = normalizer.run(df, execution_date)
    return result.to_dict()
