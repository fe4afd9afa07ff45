"""
Shooting Pulse - Base Ingester

Abstract base class for dataset ingesters. Provides a consistent interface
for fetching a tabular resource with:
- An injectable source (for tests and offline runs)
- Error capture into a structured result
- Structured result reporting

Usage:
    class ShootingIngester(BaseIngester):
        def fetch_data(self, source=None) -> pd.DataFrame:
            ...
        def get_primary_key(self) -> str:
            return "INCIDENT_KEY"
"""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

import pandas as pd

from shooting_pulse.shared.config import Settings, get_config

logger = logging.getLogger(__name__)


@dataclass
class IngestionResult:
    """Result of a data ingestion operation."""

    dataset: str
    execution_date: str
    rows_fetched: int
    columns_fetched: int
    source: str | None = None
    duration_seconds: float = 0.0
    success: bool = True
    error_message: str | None = None
    error: Exception | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert result to dictionary for logging."""
        return {
            "dataset": self.dataset,
            "execution_date": self.execution_date,
            "rows_fetched": self.rows_fetched,
            "columns_fetched": self.columns_fetched,
            "source": self.source,
            "duration_seconds": self.duration_seconds,
            "success": self.success,
            "error_message": self.error_message,
            "metadata": self.metadata,
        }


class BaseIngester(ABC):
    """
    Abstract base class for dataset ingestion.

    Subclasses must implement:
    - fetch_data(): Fetch data from the source
    - get_primary_key(): Return the primary key field
    - get_dataset_name(): Return the dataset name
    """

    def __init__(self, config: Settings | None = None):
        """
        Initialize the ingester.

        Args:
            config: Configuration object (uses default if not provided)
        """
        self.config = config or get_config()

    @abstractmethod
    def fetch_data(self, source: Any = None) -> pd.DataFrame:
        """
        Fetch data from the source.

        Args:
            source: Optional injected source. If None, fetch from the
                    configured endpoint.

        Returns:
            DataFrame containing the fetched data
        """
        pass

    @abstractmethod
    def get_primary_key(self) -> str:
        """
        Get the primary key field name.

        Returns:
            Column name that identifies each record
        """
        pass

    @abstractmethod
    def get_dataset_name(self) -> str:
        """
        Get the dataset name.

        Returns:
            Dataset name (e.g., "shootings")
        """
        pass

    def get_api_endpoint(self) -> str | None:
        """
        Get the API endpoint for this dataset (optional).

        Returns:
            API endpoint URL or None if not applicable
        """
        return None

    def describe_source(self, source: Any = None) -> str | None:
        """Human-readable description of where data comes from."""
        if source is None:
            return self.get_api_endpoint()
        if isinstance(source, (bytes, bytearray)):
            return f"<{len(source)} bytes>"
        return str(getattr(source, "name", source))

    def run(self, execution_date: str, source: Any = None) -> IngestionResult:
        """
        Run the ingestion process.

        Args:
            execution_date: Execution date in YYYY-MM-DD format
            source: Optional injected source passed through to fetch_data()

        Returns:
            IngestionResult with details about the ingestion
        """
        start_time = time.time()
        dataset_name = self.get_dataset_name()
        source_desc = self.describe_source(source)

        logger.info(
            f"Starting ingestion for {dataset_name}",
            extra={
                "dataset": dataset_name,
                "execution_date": execution_date,
                "source": source_desc,
            },
        )

        try:
            df = self.fetch_data(source=source)

            duration = time.time() - start_time

            result = IngestionResult(
                dataset=dataset_name,
                execution_date=execution_date,
                rows_fetched=len(df),
                columns_fetched=len(df.columns),
                source=source_desc,
                duration_seconds=duration,
                success=True,
                metadata={
                    "primary_key": self.get_primary_key(),
                    "columns": list(df.columns),
                },
            )

            logger.info(
                f"Ingestion complete for {dataset_name}: {len(df)} rows",
                extra=result.to_dict(),
            )

            # Store the dataframe for downstream access
            self._data = df

            return result

        except Exception as e:
            duration = time.time() - start_time
            logger.error(
                f"Ingestion failed for {dataset_name}: {e}",
                extra={"dataset": dataset_name, "error": str(e)},
                exc_info=True,
            )

            return IngestionResult(
                dataset=dataset_name,
                execution_date=execution_date,
                rows_fetched=0,
                columns_fetched=0,
                source=source_desc,
                duration_seconds=duration,
                success=False,
                error_message=str(e),
                error=e,
            )

    def get_data(self) -> pd.DataFrame | None:
        """Get the most recently fetched data."""
        return getattr(self, "_data", None)
