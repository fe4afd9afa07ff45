"""
Shooting Pulse - Shooting Incident Feature Builder

Buckets normalized incidents by calendar period and counts them.

Features:
    - year: calendar year of the incident
    - month: Jan..Dec (ordered categorical)
    - day_of_week: Sun..Sat (ordered categorical, Sunday first)
    - hour: 0..23 (ordered categorical)

Summaries:
    Four count tables (year, month, day_of_week, hour). Month, weekday and
    hour tables always cover their full fixed domain in calendar order; the
    year table covers every year from the first to the last observed one.

Usage:
    from shooting_pulse.datasets.shootings.features import ShootingFeatureBuilder

    builder = ShootingFeatureBuilder()
    result = builder.run(normalized_df, execution_date="2024-01-15")
    features_df = builder.get_data()
    summaries = builder.get_summaries()
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import pandas as pd

from shooting_pulse.datasets.base import BaseFeatureBuilder, FeatureDefinition
from shooting_pulse.shared.config import Settings
from shooting_pulse.shared.temporal import (
    HOURS,
    MONTH_LABELS,
    WEEKDAY_LABELS,
    hour_bucket,
    month_label,
    weekday_label,
)

logger = logging.getLogger(__name__)


@dataclass
class TemporalSummaries:
    """Incident counts per year, month, day of week and hour."""

    year: pd.Series
    month: pd.Series
    day_of_week: pd.Series
    hour: pd.Series

    def items(self) -> list[tuple[str, pd.Series]]:
        """Summaries as (name, counts) pairs in report order."""
        return [
            ("year", self.year),
            ("month", self.month),
            ("day_of_week", self.day_of_week),
            ("hour", self.hour),
        ]

    @property
    def total(self) -> int:
        """Number of incidents counted (identical across the four tables)."""
        return int(self.month.sum())

    def to_dict(self) -> dict[str, dict[str, int]]:
        """Convert to plain dictionaries keyed by label."""
        return {
            name: {str(k): int(v) for k, v in counts.items()} for name, counts in self.items()
        }


class ShootingFeatureBuilder(BaseFeatureBuilder):
    """
    Feature builder for NYPD shooting incidents.

    Adds calendar bucket columns to the normalized table and produces the
    four count summaries used by the report.
    """

    def __init__(self, config: Settings | None = None):
        """Initialize shooting feature builder."""
        super().__init__(config)

    def get_dataset_name(self) -> str:
        """Return dataset name."""
        return "shootings"

    def get_feature_definitions(self) -> list[FeatureDefinition]:
        """Return feature definitions."""
        return [
            FeatureDefinition(
                name="year",
                description="Calendar year the incident occurred",
                dtype="int",
                source_columns=["occur_date"],
                min_value=1900,
            ),
            FeatureDefinition(
                name="month",
                description="Calendar month label (Jan..Dec)",
                dtype="category",
                source_columns=["occur_date"],
                categories=MONTH_LABELS,
            ),
            FeatureDefinition(
                name="day_of_week",
                description="Weekday label, Sunday first (Sun..Sat)",
                dtype="category",
                source_columns=["occur_date"],
                categories=WEEKDAY_LABELS,
            ),
            FeatureDefinition(
                name="hour",
                description="Hour of day the incident occurred (0..23)",
                dtype="category",
                source_columns=["occur_time"],
                categories=HOURS,
            ),
        ]

    def build_features(self, df: pd.DataFrame) -> pd.DataFrame:
        """
        Add calendar bucket columns.

        Args:
            df: Normalized shooting DataFrame (typed occur_date/occur_time)

        Returns:
            Copy of ``df`` with year, month, day_of_week and hour
        """
        df = df.copy()
        dates = pd.to_datetime(df["occur_date"])

        df["year"] = dates.dt.year.astype("int64")
        df["month"] = month_label(dates)
        df["day_of_week"] = weekday_label(dates)
        df["hour"] = hour_bucket(df["occur_time"])

        return df

    def summarize(self, features_df: pd.DataFrame) -> TemporalSummaries:
        """
        Count incidents per bucket.

        Args:
            features_df: Output of build_features()

        Returns:
            TemporalSummaries with all four count tables
        """
        summaries = TemporalSummaries(
            year=self.count_by(features_df, "year", domain=self._year_domain(features_df)),
            month=self.count_by(features_df, "month", domain=MONTH_LABELS),
            day_of_week=self.count_by(features_df, "day_of_week", domain=WEEKDAY_LABELS),
            hour=self.count_by(features_df, "hour", domain=HOURS),
        )

        logger.info(
            f"Bucketed {summaries.total} incidents",
            extra={"years": len(summaries.year), "total": summaries.total},
        )

        return summaries

    @staticmethod
    def _year_domain(features_df: pd.DataFrame) -> list[int]:
        """Every year from the first to the last observed one."""
        if features_df.empty:
            return []
        return list(range(int(features_df["year"].min()), int(features_df["year"].max()) + 1))


# =============================================================================
# Convenience Functions
# =============================================================================


def build_shooting_features(
    df: pd.DataFrame,
    execution_date: str,
    config: Settings | None = None,
) -> dict[str, Any]:
    """
    Convenience function for building shooting features.

    Returns result dictionary suitable for logging, with the summaries added.
    """
    builder = ShootingFeatureBuilder(config)
    result = builder.run(df, execution_date)
    output = result.to_dict()
    summaries = builder.get_summaries()
    output["summaries"] = summaries.to_dict() if summaries is not None else None
    return output
