"""
Shooting Pulse - Reporting

Charts, summary statistics and narrative conclusions for the incident report.
"""

from shooting_pulse.reporting.charts import CHART_FILES, ChartRenderer
from shooting_pulse.reporting.report_generator import (
    Report,
    ReportGenerator,
    ReportResult,
    build_conclusions,
)

__all__ = [
    "CHART_FILES",
    "ChartRenderer",
    "Report",
    "ReportGenerator",
    "ReportResult",
    "build_conclusions",
]
