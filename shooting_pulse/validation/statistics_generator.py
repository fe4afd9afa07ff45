"""
Shooting Pulse - Statistics Generator

Generate dataset statistics using pandas. Statistics are used for:
- The column-wise summary printed with the report
- The missing-value audit

Usage:
    generator = StatisticsGenerator(config)

    # Generate statistics for a dataset
    stats = generator.generate_statistics(df, dataset="shootings", layer="normalized")

    # Per-column missing values
    missing = generator.missing_value_counts(df)

    # Persist next to the report
    generator.save_statistics(stats, "reports/statistics.json")
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime, time
from pathlib import Path
from typing import Any

import pandas as pd

from shooting_pulse.shared.config import Settings, get_config

logger = logging.getLogger(__name__)


@dataclass
class FeatureStatistics:
    """Statistics for a single column."""

    name: str
    dtype: str
    count: int
    num_missing: int
    missing_ratio: float

    # Numerical stats (None for non-numeric)
    mean: float | None = None
    std: float | None = None
    min: Any = None
    max: Any = None
    median: float | None = None
    q1: float | None = None
    q3: float | None = None

    # Categorical stats (None for numeric)
    num_unique: int | None = None
    top_values: dict[str, int] | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "name": self.name,
            "dtype": self.dtype,
            "count": self.count,
            "num_missing": self.num_missing,
            "missing_ratio": self.missing_ratio,
            "mean": self.mean,
            "std": self.std,
            "min": _jsonable(self.min),
            "max": _jsonable(self.max),
            "median": self.median,
            "q1": self.q1,
            "q3": self.q3,
            "num_unique": self.num_unique,
            "top_values": self.top_values,
        }


@dataclass
class DataStatistics:
    """Container for dataset statistics."""

    dataset: str
    layer: str
    date: datetime
    num_examples: int
    num_features: int
    feature_statistics: list[FeatureStatistics] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert statistics to dictionary for JSON serialization."""
        return {
            "dataset": self.dataset,
            "layer": self.layer,
            "date": self.date.isoformat(),
            "num_examples": self.num_examples,
            "num_features": self.num_features,
            "feature_statistics": [f.to_dict() for f in self.feature_statistics],
        }

    def get_feature_stats(self, feature_name: str) -> FeatureStatistics | None:
        """Get statistics for a specific feature."""
        for f in self.feature_statistics:
            if f.name == feature_name:
                return f
        return None

    def missing_counts(self) -> dict[str, int]:
        """Per-column missing value counts."""
        return {f.name: f.num_missing for f in self.feature_statistics}

    def to_frame(self) -> pd.DataFrame:
        """
        Column-wise summary table (one row per column) for console output.

        Only count, missing, unique, mean, min and max are included.
        """
        rows = []
        for f in self.feature_statistics:
            rows.append(
                {
                    "column": f.name,
                    "dtype": f.dtype,
                    "count": f.count - f.num_missing,
                    "missing": f.num_missing,
                    "unique": f.num_unique,
                    "mean": f.mean,
                    "min": _jsonable(f.min),
                    "max": _jsonable(f.max),
                }
            )
        return pd.DataFrame(
            rows, columns=["column", "dtype", "count", "missing", "unique", "mean", "min", "max"]
        ).set_index("column")


class StatisticsGenerator:
    """Generate column statistics for a DataFrame using pandas."""

    def __init__(self, config: Settings | None = None):
        """
        Initialize statistics generator.

        Args:
            config: Configuration object (uses default if not provided)
        """
        self.config = config or get_config()

    def generate_statistics(
        self,
        df: pd.DataFrame,
        dataset: str,
        layer: str,
    ) -> DataStatistics:
        """
        Generate statistics for a DataFrame.

        Args:
            df: Source DataFrame
            dataset: Dataset name
            layer: Data layer (raw, clean, normalized, features)

        Returns:
            DataStatistics object with computed statistics
        """
        logger.info(
            f"Generating statistics for {dataset}/{layer}",
            extra={"dataset": dataset, "layer": layer, "rows": len(df)},
        )

        feature_statistics = [self._compute_feature_statistics(df[col], col) for col in df.columns]

        data_stats = DataStatistics(
            dataset=dataset,
            layer=layer,
            date=datetime.now(UTC),
            num_examples=len(df),
            num_features=len(df.columns),
            feature_statistics=feature_statistics,
        )

        logger.info(
            f"Generated statistics for {dataset}/{layer}: "
            f"{data_stats.num_examples} examples, {data_stats.num_features} features"
        )

        return data_stats

    def missing_value_counts(self, df: pd.DataFrame) -> dict[str, int]:
        """Count missing values per column."""
        return {col: int(count) for col, count in df.isna().sum().items()}

    def save_statistics(self, stats: DataStatistics, path: str | Path) -> str:
        """
        Save statistics as JSON.

        Args:
            stats: DataStatistics object to save
            path: Destination file

        Returns:
            Path where statistics were saved
        """
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            json.dump(stats.to_dict(), f, indent=2, default=str)

        logger.info(
            f"Saved statistics for {stats.dataset}/{stats.layer} to {path}",
            extra={"dataset": stats.dataset, "layer": stats.layer, "path": str(path)},
        )
        return str(path)

    def _compute_feature_statistics(self, series: pd.Series, name: str) -> FeatureStatistics:
        """Compute statistics for a single column."""
        count = len(series)
        num_missing = int(series.isna().sum())
        missing_ratio = num_missing / count if count > 0 else 0.0

        stats = FeatureStatistics(
            name=name,
            dtype=str(series.dtype),
            count=count,
            num_missing=num_missing,
            missing_ratio=missing_ratio,
        )

        non_null = series.dropna()

        if len(non_null) == 0:
            return stats

        if pd.api.types.is_bool_dtype(series):
            stats.num_unique = int(non_null.nunique())
        elif pd.api.types.is_numeric_dtype(series):
            stats.mean = float(non_null.mean())
            stats.std = float(non_null.std()) if len(non_null) > 1 else 0.0
            stats.min = float(non_null.min())
            stats.max = float(non_null.max())
            stats.median = float(non_null.median())
            stats.q1 = float(non_null.quantile(0.25))
            stats.q3 = float(non_null.quantile(0.75))
            stats.num_unique = int(non_null.nunique())
        elif pd.api.types.is_datetime64_any_dtype(series):
            stats.min = non_null.min()
            stats.max = non_null.max()
            stats.num_unique = int(non_null.nunique())
        else:
            stats.num_unique = int(non_null.nunique())

            # Ordered categoricals and times of day still have a range
            if isinstance(series.dtype, pd.CategoricalDtype) and series.cat.ordered:
                stats.min = non_null.min()
                stats.max = non_null.max()
            elif all(isinstance(v, time) for v in non_null):
                stats.min = min(non_null)
                stats.max = max(non_null)

            top_values = non_null.astype(str).value_counts().head(10)
            stats.top_values = {str(k): int(v) for k, v in top_values.items()}

        return stats


def _jsonable(value: Any) -> Any:
    """Render timestamps/times as ISO strings, leave everything else alone."""
    if value is None:
        return None
    if hasattr(value, "isoformat"):
        return value.isoformat()
    return value
