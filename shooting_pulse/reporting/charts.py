"""
Shooting Pulse - Chart Rendering

Matplotlib/seaborn renderings of the four count summaries. Figures are
written as PNG and closed immediately; nothing downstream reads them back.
"""

from __future__ import annotations

import logging
from pathlib import Path

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt  # noqa: E402
import pandas as pd  # noqa: E402
import seaborn as sns  # noqa: E402

from shooting_pulse.shared.config import ReportConfig  # noqa: E402

logger = logging.getLogger(__name__)

CHART_FILES = {
    "year": "incidents_by_year.png",
    "month": "incidents_by_month.png",
    "day_of_week": "incidents_by_day_of_week.png",
    "hour": "incidents_by_hour.png",
}

CHART_TITLES = {
    "year": "Shooting Incidents per Year",
    "month": "Shooting Incidents by Month",
    "day_of_week": "Shooting Incidents by Day of Week",
    "hour": "Shooting Incidents by Hour of Day",
}

AXIS_LABELS = {
    "year": "Year",
    "month": "Month",
    "day_of_week": "Day of Week",
    "hour": "Hour of Day",
}


class ChartRenderer:
    """Render count summaries as line and bar charts."""

    def __init__(self, report_config: ReportConfig):
        self.report_config = report_config
        sns.set_theme(style=report_config.style)

    @property
    def figsize(self) -> tuple[float, float]:
        return (self.report_config.figure_width, self.report_config.figure_height)

    def plot_yearly(self, counts: pd.Series, path: Path) -> Path:
        """Line chart of incidents per year."""
        fig, ax = plt.subplots(figsize=self.figsize)

        if len(counts) > 0:
            years = [int(y) for y in counts.index]
            sns.lineplot(
                x=years,
                y=counts.to_numpy(),
                marker="o",
                color=self.report_config.color,
                ax=ax,
            )
            ax.set_xticks(years)
            ax.set_xticklabels([str(y) for y in years], rotation=45)
        else:
            ax.text(0.5, 0.5, "No incidents", ha="center", va="center", transform=ax.transAxes)

        return self._finish(fig, ax, "year", path)

    def plot_bar(self, counts: pd.Series, name: str, path: Path) -> Path:
        """
        Bar chart of ``counts`` in index order.

        Every label in the index gets its own bar and tick, zero counts
        included, so the hour chart always shows 0..23.
        """
        fig, ax = plt.subplots(figsize=self.figsize)

        labels = [str(label) for label in counts.index]
        sns.barplot(
            x=labels,
            y=counts.to_numpy(),
            order=labels,
            color=self.report_config.color,
            ax=ax,
        )
        ax.set_xticks(range(len(labels)))
        ax.set_xticklabels(labels)

        return self._finish(fig, ax, name, path)

    def render_all(self, summaries, figures_dir: Path) -> dict[str, str]:
        """
        Render all four charts.

        Args:
            summaries: TemporalSummaries to plot
            figures_dir: Directory the PNG files are written to

        Returns:
            Mapping of summary name to written file path
        """
        figures_dir.mkdir(parents=True, exist_ok=True)

        paths = {
            "year": self.plot_yearly(summaries.year, figures_dir / CHART_FILES["year"]),
            "month": self.plot_bar(summaries.month, "month", figures_dir / CHART_FILES["month"]),
            "day_of_week": self.plot_bar(
                summaries.day_of_week, "day_of_week", figures_dir / CHART_FILES["day_of_week"]
            ),
            "hour": self.plot_bar(summaries.hour, "hour", figures_dir / CHART_FILES["hour"]),
        }

        logger.info(f"All charts saved to {figures_dir}", extra={"charts": len(paths)})
        return {name: str(p) for name, p in paths.items()}

    def _finish(self, fig, ax, name: str, path: Path) -> Path:
        ax.set_title(CHART_TITLES[name], fontsize=14, fontweight="bold")
        ax.set_xlabel(AXIS_LABELS[name])
        ax.set_ylabel("Number of Incidents")
        fig.tight_layout()
        fig.savefig(path, dpi=self.report_config.figure_dpi)
        plt.close(fig)
        logger.debug(f"Saved {name} chart to {path}")
        return path
