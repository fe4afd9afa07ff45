"""
Shooting Pulse - Base Feature Builder

Abstract base class for dataset feature builders. Provides a consistent
interface for feature engineering with:
- Derived feature computation
- Grouped count summaries
- Feature validation against declared definitions

Usage:
    class ShootingFeatureBuilder(BaseFeatureBuilder):
        def build_features(self, df: pd.DataFrame) -> pd.DataFrame:
            ...
        def get_feature_definitions(self) -> list[FeatureDefinition]:
            ...
"""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

import pandas as pd

from shooting_pulse.shared.config import Settings, get_config

logger = logging.getLogger(__name__)


@dataclass
class FeatureDefinition:
    """Definition of a computed feature."""

    name: str
    description: str
    dtype: str
    source_columns: list[str]
    categories: Sequence[Any] | None = None
    nullable: bool = False
    min_value: float | None = None
    max_value: float | None = None


@dataclass
class FeatureBuildResult:
    """Result of a feature building operation."""

    dataset: str
    execution_date: str
    rows_input: int
    rows_output: int
    features_computed: int
    duration_seconds: float = 0.0
    success: bool = True
    error_message: str | None = None
    error: Exception | None = None
    feature_stats: dict[str, dict[str, Any]] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert result to dictionary for logging."""
        return {
            "dataset": self.dataset,
            "execution_date": self.execution_date,
            "rows_input": self.rows_input,
            "rows_output": self.rows_output,
            "features_computed": self.features_computed,
            "duration_seconds": self.duration_seconds,
            "success": self.success,
            "error_message": self.error_message,
            "feature_stats": self.feature_stats,
        }


class BaseFeatureBuilder(ABC):
    """
    Abstract base class for feature building.

    Subclasses must implement:
    - build_features(): Compute features from processed data
    - get_dataset_name(): Return the dataset name
    - get_feature_definitions(): Return list of feature definitions

    Subclasses may override summarize() to produce aggregate tables that are
    stored alongside the enriched frame.
    """

    def __init__(self, config: Settings | None = None):
        """
        Initialize the feature builder.

        Args:
            config: Configuration object (uses default if not provided)
        """
        self.config = config or get_config()
        self._feature_stats: dict[str, dict[str, Any]] = {}

    @abstractmethod
    def build_features(self, df: pd.DataFrame) -> pd.DataFrame:
        """
        Build features from processed data.

        Args:
            df: Processed DataFrame

        Returns:
            DataFrame with computed features
        """
        pass

    @abstractmethod
    def get_dataset_name(self) -> str:
        """Return the dataset name."""
        pass

    @abstractmethod
    def get_feature_definitions(self) -> list[FeatureDefinition]:
        """
        Get list of feature definitions.

        Returns:
            List of FeatureDefinition objects describing each feature
        """
        pass

    def summarize(self, features_df: pd.DataFrame) -> Any:
        """Aggregate the enriched frame. Returns None unless overridden."""
        return None

    def run(self, df: pd.DataFrame, execution_date: str) -> FeatureBuildResult:
        """
        Run the feature building pipeline.

        Args:
            df: Processed DataFrame
            execution_date: Execution date in YYYY-MM-DD format

        Returns:
            FeatureBuildResult with details about the feature building
        """
        start_time = time.time()
        dataset_name = self.get_dataset_name()
        rows_input = len(df)

        logger.info(
            f"Starting feature building for {dataset_name}",
            extra={
                "dataset": dataset_name,
                "execution_date": execution_date,
                "rows_input": rows_input,
            },
        )

        try:
            self._feature_stats = {}

            features_df = self.build_features(df)

            self._compute_feature_stats(features_df)
            self._validate_features(features_df)

            summaries = self.summarize(features_df)

            duration = time.time() - start_time

            result = FeatureBuildResult(
                dataset=dataset_name,
                execution_date=execution_date,
                rows_input=rows_input,
                rows_output=len(features_df),
                features_computed=len(self.get_feature_definitions()),
                duration_seconds=duration,
                success=True,
                feature_stats=self._feature_stats,
            )

            logger.info(
                f"Feature building complete for {dataset_name}: "
                f"{len(features_df)} rows, {result.features_computed} features",
                extra=result.to_dict(),
            )

            self._data = features_df
            self._summaries = summaries

            return result

        except Exception as e:
            duration = time.time() - start_time
            logger.error(
                f"Feature building failed for {dataset_name}: {e}",
                extra={"dataset": dataset_name, "error": str(e)},
                exc_info=True,
            )

            return FeatureBuildResult(
                dataset=dataset_name,
                execution_date=execution_date,
                rows_input=rows_input,
                rows_output=0,
                features_computed=0,
                duration_seconds=duration,
                success=False,
                error_message=str(e),
                error=e,
            )

    def get_data(self) -> pd.DataFrame | None:
        """Get the most recently built features."""
        return getattr(self, "_data", None)

    def get_summaries(self) -> Any:
        """Get the summaries produced by the most recent run."""
        return getattr(self, "_summaries", None)

    def _compute_feature_stats(self, df: pd.DataFrame) -> None:
        """Compute statistics for each declared feature."""
        for defn in self.get_feature_definitions():
            if defn.name not in df.columns:
                continue
            series = df[defn.name]
            stats: dict[str, Any] = {
                "dtype": str(series.dtype),
                "null_count": int(series.isna().sum()),
                "null_ratio": float(series.isna().mean()) if len(series) else 0.0,
            }

            non_null = series.dropna()
            if pd.api.types.is_numeric_dtype(series) and len(non_null) > 0:
                stats.update(
                    {
                        "mean": float(non_null.mean()),
                        "min": float(non_null.min()),
                        "max": float(non_null.max()),
                    }
                )
            else:
                stats["unique_count"] = int(non_null.nunique())

            self._feature_stats[defn.name] = stats

    def _validate_features(self, df: pd.DataFrame) -> None:
        """Validate features against definitions."""
        for defn in self.get_feature_definitions():
            if defn.name not in df.columns:
                logger.warning(f"Feature '{defn.name}' was not produced")
                continue

            series = df[defn.name]

            if not defn.nullable and series.isna().any():
                logger.warning(
                    f"Feature '{defn.name}' has null values but is marked as non-nullable"
                )

            if defn.categories is not None and isinstance(series.dtype, pd.CategoricalDtype):
                if list(series.cat.categories) != list(defn.categories):
                    logger.warning(f"Feature '{defn.name}' has unexpected categories")

            if pd.api.types.is_numeric_dtype(series):
                if defn.min_value is not None and (series < defn.min_value).any():
                    logger.warning(f"Feature '{defn.name}' has values below minimum {defn.min_value}")
                if defn.max_value is not None and (series > defn.max_value).any():
                    logger.warning(f"Feature '{defn.name}' has values above maximum {defn.max_value}")

    # ==========================================================================
    # Common Feature Building Utilities
    # ==========================================================================

    def count_by(
        self,
        df: pd.DataFrame,
        column: str,
        domain: Sequence[Any] | None = None,
        name: str = "count",
    ) -> pd.Series:
        """
        Count rows per distinct value of ``column``.

        With a ``domain``, the result is indexed by exactly those keys in that
        order, zero-filled where no row matched. Without one, keys are sorted
        ascending.
        """
        values = df[column]
        if isinstance(values.dtype, pd.CategoricalDtype):
            values = values.astype(object)

        counts = values.value_counts(sort=False)
        if domain is not None:
            counts = counts.reindex(list(domain), fill_value=0)
        else:
            counts = counts.sort_index()

        counts = counts.astype("int64")
        counts.index.name = column
        counts.name = name
        return counts
