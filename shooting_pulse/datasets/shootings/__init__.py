"""
Shooting Pulse - Shooting Incident Dataset

NYPD shooting incident records, processed in four stages.

Components:
    - ShootingIngester: Downloads the incident CSV (Loader)
    - ShootingCleaner: Deduplicates and projects to three columns (Cleaner)
    - ShootingNormalizer: Parses dates and times (Normalizer)
    - ShootingFeatureBuilder: Buckets and counts incidents (Bucketizer)

Data Source:
    NYPD Shooting Incident Data (Historic)
    https://data.cityofnewyork.us/Public-Safety/NYPD-Shooting-Incident-Data-Historic-/833y-fsy8

Usage:
    from shooting_pulse.datasets.shootings import (
        ShootingCleaner,
        ShootingFeatureBuilder,
        ShootingIngester,
        ShootingNormalizer,
    )

    ingester = ShootingIngester()
    ingester.run(execution_date="2024-01-15")
    raw_df = ingester.get_data()

    cleaner = ShootingCleaner()
    cleaner.run(raw_df, execution_date="2024-01-15")

    normalizer = ShootingNormalizer()
    normalizer.run(cleaner.get_data(), execution_date="2024-01-15")

    builder = ShootingFeatureBuilder()
    builder.run(normalizer.get_data(), execution_date="2024-01-15")
    summaries = builder.get_summaries()
"""

from shooting_pulse.datasets.shootings.features import (
    ShootingFeatureBuilder,
    TemporalSummaries,
    build_shooting_features,
)
from shooting_pulse.datasets.shootings.ingest import ShootingIngester, ingest_shooting_data
from shooting_pulse.datasets.shootings.preprocess import (
    ShootingCleaner,
    ShootingNormalizer,
    clean_shooting_data,
    normalize_shooting_data,
)

__all__ = [
    "ShootingIngester",
    "ShootingCleaner",
    "ShootingNormalizer",
    "ShootingFeatureBuilder",
    "TemporalSummaries",
    "ingest_shooting_data",
    "clean_shooting_data",
    "normalize_shooting_data",
    "build_shooting_features",
]
