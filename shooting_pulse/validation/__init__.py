"""
Shooting Pulse - Validation System

Data quality components:
- Column statistics (count, range, mean, uniqueness)
- Missing-value audit

Components:
    - StatisticsGenerator: pandas-based statistics
"""

from shooting_pulse.validation.statistics_generator import (
    DataStatistics,
    FeatureStatistics,
    StatisticsGenerator,
)

__all__ = [
    "StatisticsGenerator",
    "DataStatistics",
    "FeatureStatistics",
]
