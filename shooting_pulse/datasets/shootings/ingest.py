"""
Shooting Pulse - Shooting Incident Ingester

Downloads the NYPD Shooting Incident dataset as CSV.

Data Source:
    NYPD Shooting Incident Data (Historic)
    https://data.cityofnewyork.us/Public-Safety/NYPD-Shooting-Incident-Data-Historic-/833y-fsy8

Configuration:
    Dataset settings loaded from configs/datasets/shootings.yaml,
    request settings from the ``source`` section of the environment config.

Usage:
    from shooting_pulse.datasets.shootings.ingest import ShootingIngester

    ingester = ShootingIngester()
    result = ingester.run(execution_date="2024-01-15")
    df = ingester.get_data()

    # Offline / tests
    result = ingester.run(execution_date="2024-01-15", source=csv_bytes)
"""

from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import IO, Any

import pandas as pd
import requests

from shooting_pulse.datasets.base import BaseIngester
from shooting_pulse.shared.config import Settings, get_dataset_config
from shooting_pulse.shared.exceptions import FetchError

logger = logging.getLogger(__name__)

# =============================================================================
# Dataset Configuration (loaded from shootings.yaml)
# =============================================================================
DATASET_CONFIG = get_dataset_config("shootings")

INGESTION_CONFIG = DATASET_CONFIG.get("ingestion", {})
PRIMARY_KEY = INGESTION_CONFIG.get("primary_key", "INCIDENT_KEY")

CsvSource = bytes | str | Path | IO[bytes] | IO[str]


class ShootingIngester(BaseIngester):
    """
    Ingester for NYPD shooting incident data.

    Performs a single HTTP GET with a bounded timeout; there is no retry.
    Every cell is read as text so that downstream stages see the source
    values unchanged.
    """

    def __init__(self, config: Settings | None = None):
        """Initialize shooting ingester."""
        super().__init__(config)
        self.url = self.config.source.url
        self.timeout = self.config.source.timeout_seconds

    def get_dataset_name(self) -> str:
        """Return dataset name."""
        return "shootings"

    def get_primary_key(self) -> str:
        """Return the primary key field (from config)."""
        return PRIMARY_KEY

    def get_api_endpoint(self) -> str:
        """Get the CSV download endpoint."""
        return self.url

    def fetch_data(self, source: CsvSource | None = None) -> pd.DataFrame:
        """
        Fetch shooting incident data.

        Args:
            source: Injected CSV as bytes, a file-like object, or a path.
                    If None, the configured URL is downloaded.

        Returns:
            DataFrame with the source's columns and row order

        Raises:
            FetchError: If the resource is unreachable or not valid CSV
        """
        if source is None:
            source = self._download()

        df = self._read_csv(source)

        logger.info(
            f"Fetched {len(df)} shooting incident records",
            extra={"rows": len(df), "columns": list(df.columns)},
        )

        return df

    def _download(self) -> bytes:
        """Issue the single GET against the configured endpoint."""
        logger.info(f"Downloading from: {self.url}", extra={"timeout": self.timeout})

        headers = {
            "User-Agent": self.config.source.user_agent,
            "Accept": "text/csv,text/plain;q=0.9,*/*;q=0.5",
        }

        try:
            response = requests.get(self.url, headers=headers, timeout=self.timeout)
            response.raise_for_status()
        except requests.exceptions.Timeout as e:
            raise FetchError(f"Timed out after {self.timeout}s fetching {self.url}") from e
        except requests.exceptions.HTTPError as e:
            raise FetchError(f"HTTP error fetching {self.url}: {e}") from e
        except requests.exceptions.RequestException as e:
            raise FetchError(f"Could not reach {self.url}: {e}") from e

        content_type = response.headers.get("Content-Type", "")
        if "html" in content_type.lower():
            raise FetchError(f"Expected CSV from {self.url}, got {content_type}")

        logger.info(
            f"Response received. Status: {response.status_code}",
            extra={"bytes": len(response.content)},
        )

        return response.content

    def _read_csv(self, source: CsvSource) -> pd.DataFrame:
        """
        Parse CSV text into a frame of strings.

        Only empty cells become missing; tokens such as ``NA`` or ``N/A`` are
        kept as text.
        """
        if isinstance(source, (bytes, bytearray)):
            source = io.BytesIO(source)

        try:
            df = pd.read_csv(
                source,
                dtype=str,
                keep_default_na=False,
                na_values=[""],
                nrows=self.config.ingestion.nrows,
            )
        except pd.errors.EmptyDataError as e:
            raise FetchError("Response is empty: no CSV header found") from e
        except (pd.errors.ParserError, UnicodeDecodeError) as e:
            raise FetchError(f"Response is not valid CSV: {e}") from e
        except OSError as e:
            raise FetchError(f"Could not read {source}: {e}") from e

        if len(df.columns) == 0:
            raise FetchError("Response has no columns")

        # An HTML error page parses as a one-column CSV
        if str(df.columns[0]).lstrip().startswith("<"):
            raise FetchError(f"Response is not CSV (starts with {str(df.columns[0])[:40]!r})")

        return df


# =============================================================================
# Convenience Functions
# =============================================================================


def ingest_shooting_data(
    execution_date: str,
    source: CsvSource | None = None,
    config: Settings | None = None,
) -> dict[str, Any]:
    """
    Convenience function for ingesting shooting data.

    Returns result dictionary suitable for logging.
    """
    ingester = ShootingIngester(config)
    result = ingester.run(execution_date, source=source)
    return result.to_dict()
