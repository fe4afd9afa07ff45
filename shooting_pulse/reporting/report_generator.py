"""
Shooting Pulse - Report Generator

Assemble the incident report:
- Four charts (yearly line, monthly/weekday/hourly bars)
- Column-wise summary statistics of the normalized table
- Missing-value audit and parse-failure count
- Narrative conclusions drawn from the count summaries

The report is written as Markdown (human-readable, charts embedded) and JSON
(machine-readable), next to one CSV per summary table.

Usage:
    generator = ReportGenerator(config)

    report = generator.generate_report(
        summaries=summaries,
        df=normalized_df,
        parse_errors=normalizer.get_parse_errors(),
    )

    paths = generator.save_report(report, output_dir="reports")
"""

from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import pandas as pd

from shooting_pulse.datasets.shootings.features import TemporalSummaries
from shooting_pulse.reporting.charts import CHART_TITLES, ChartRenderer
from shooting_pulse.shared.config import Settings, get_config
from shooting_pulse.shared.exceptions import ParseError
from shooting_pulse.validation.statistics_generator import DataStatistics, StatisticsGenerator

logger = logging.getLogger(__name__)

NIGHT_HOURS = set(range(20, 24)) | set(range(0, 6))
WEEKEND_DAYS = {"Sat", "Sun"}


@dataclass
class Report:
    """Everything the rendered report shows."""

    title: str
    created_at: datetime
    execution_date: str
    total_incidents: int
    summaries: TemporalSummaries
    statistics: DataStatistics
    missing_values: dict[str, int]
    source: str | None = None
    rows_fetched: int | None = None
    duplicates_dropped: int = 0
    parse_error_count: int = 0
    parse_error_examples: list[dict[str, Any]] = field(default_factory=list)
    conclusions: list[str] = field(default_factory=list)
    figures: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "title": self.title,
            "created_at": self.created_at.isoformat(),
            "execution_date": self.execution_date,
            "source": self.source,
            "rows_fetched": self.rows_fetched,
            "duplicates_dropped": self.duplicates_dropped,
            "parse_error_count": self.parse_error_count,
            "parse_error_examples": self.parse_error_examples,
            "total_incidents": self.total_incidents,
            "summaries": self.summaries.to_dict(),
            "statistics": self.statistics.to_dict(),
            "missing_values": self.missing_values,
            "conclusions": self.conclusions,
            "figures": self.figures,
        }


@dataclass
class ReportResult:
    """Result of a report generation run."""

    dataset: str
    execution_date: str
    total_incidents: int
    output_dir: str | None = None
    paths: dict[str, str] = field(default_factory=dict)
    duration_seconds: float = 0.0
    success: bool = True
    error_message: str | None = None
    error: Exception | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert result to dictionary for logging."""
        return {
            "dataset": self.dataset,
            "execution_date": self.execution_date,
            "total_incidents": self.total_incidents,
            "output_dir": self.output_dir,
            "paths": self.paths,
            "duration_seconds": self.duration_seconds,
            "success": self.success,
            "error_message": self.error_message,
        }


class ReportGenerator:
    """
    Generate the incident report from count summaries and the normalized table.
    """

    def __init__(self, config: Settings | None = None):
        """
        Initialize report generator.

        Args:
            config: Configuration object (uses default if not provided)
        """
        self.config = config or get_config()
        self.report_config = self.config.report
        self.statistics_generator = StatisticsGenerator(self.config)

    def generate_report(
        self,
        summaries: TemporalSummaries,
        df: pd.DataFrame,
        execution_date: str | None = None,
        source: str | None = None,
        rows_fetched: int | None = None,
        duplicates_dropped: int = 0,
        parse_errors: list[ParseError] | None = None,
    ) -> Report:
        """
        Build the report contents.

        Args:
            summaries: Count summaries from the feature builder
            df: Normalized incident table
            execution_date: Run date (defaults to today)
            source: Where the data came from
            rows_fetched: Raw row count before cleaning
            duplicates_dropped: Rows removed as duplicates
            parse_errors: Per-row parse failures excluded from the summaries

        Returns:
            Report object
        """
        parse_errors = parse_errors or []
        execution_date = execution_date or datetime.now(UTC).strftime("%Y-%m-%d")

        statistics = self.statistics_generator.generate_statistics(
            df, dataset="shootings", layer="normalized"
        )
        missing_values = self.statistics_generator.missing_value_counts(df)

        report = Report(
            title=self.report_config.title,
            created_at=datetime.now(UTC),
            execution_date=execution_date,
            total_incidents=len(df),
            summaries=summaries,
            statistics=statistics,
            missing_values=missing_values,
            source=source,
            rows_fetched=rows_fetched,
            duplicates_dropped=duplicates_dropped,
            parse_error_count=len(parse_errors),
            parse_error_examples=[e.to_dict() for e in parse_errors[:10]],
            conclusions=build_conclusions(summaries),
        )

        self._log_summary(report)

        return report

    def save_report(self, report: Report, output_dir: str | Path | None = None) -> dict[str, str]:
        """
        Render charts and write the report files.

        Args:
            report: Report to save
            output_dir: Destination directory (defaults to config report.output_dir)

        Returns:
            Dictionary with paths of everything written
        """
        output_dir = Path(output_dir or self.report_config.output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)

        renderer = ChartRenderer(self.report_config)
        report.figures = renderer.render_all(report.summaries, output_dir / "figures")

        paths: dict[str, str] = {}

        for name, counts in report.summaries.items():
            csv_path = output_dir / f"{name}_counts.csv"
            counts.to_csv(csv_path, header=True)
            paths[f"{name}_csv"] = str(csv_path)

        json_path = output_dir / "report.json"
        with open(json_path, "w") as f:
            json.dump(report.to_dict(), f, indent=2, default=str)
        paths["json"] = str(json_path)

        markdown_path = output_dir / "report.md"
        with open(markdown_path, "w", encoding="utf-8") as f:
            f.write(self._generate_markdown(report, output_dir))
        paths["markdown"] = str(markdown_path)

        paths.update({f"figure_{name}": p for name, p in report.figures.items()})

        logger.info(f"Saved report to {output_dir}", extra={"paths": paths})

        return paths

    def run(
        self,
        summaries: TemporalSummaries,
        df: pd.DataFrame,
        execution_date: str,
        output_dir: str | Path | None = None,
        **report_kwargs: Any,
    ) -> ReportResult:
        """
        Generate and save the report.

        Args:
            summaries: Count summaries from the feature builder
            df: Normalized incident table
            execution_date: Execution date in YYYY-MM-DD format
            output_dir: Destination directory (defaults to config report.output_dir)
            **report_kwargs: Passed through to generate_report()

        Returns:
            ReportResult with the written paths
        """
        start_time = time.time()
        logger.info(
            "Starting report for shootings",
            extra={"execution_date": execution_date, "rows": len(df)},
        )

        try:
            report = self.generate_report(
                summaries, df, execution_date=execution_date, **report_kwargs
            )
            paths = self.save_report(report, output_dir)

            result = ReportResult(
                dataset="shootings",
                execution_date=execution_date,
                total_incidents=report.total_incidents,
                output_dir=str(Path(paths["markdown"]).parent),
                paths=paths,
                duration_seconds=time.time() - start_time,
                success=True,
            )

            logger.info("Report complete for shootings", extra=result.to_dict())

            self._report = report

            return result

        except Exception as e:
            logger.error(
                f"Report failed for shootings: {e}",
                extra={"error": str(e)},
                exc_info=True,
            )

            return ReportResult(
                dataset="shootings",
                execution_date=execution_date,
                total_incidents=len(df),
                duration_seconds=time.time() - start_time,
                success=False,
                error_message=str(e),
                error=e,
            )

    def get_report(self) -> Report | None:
        """Get the most recently generated report."""
        return getattr(self, "_report", None)

    # =========================================================================
    # Private Methods
    # =========================================================================

    def _log_summary(self, report: Report) -> None:
        """Write the summary statistics and missing-value audit to the log."""
        logger.info(
            "Summary statistics:\n%s",
            report.statistics.to_frame().to_string(),
        )
        logger.info(
            "Missing values per column: %s",
            report.missing_values,
            extra={"missing_values": report.missing_values},
        )
        if report.parse_error_count:
            logger.warning(
                f"{report.parse_error_count} unparsable date/time values excluded from summaries"
            )

    def _generate_markdown(self, report: Report, output_dir: Path) -> str:
        """Generate Markdown representation of the report."""
        lines = []

        lines.append(f"# {report.title}")
        lines.append("")
        lines.append(f"**Run Date:** {report.execution_date}  ")
        lines.append(f"**Created:** {report.created_at.strftime('%Y-%m-%d %H:%M:%S UTC')}  ")
        if report.source:
            lines.append(f"**Source:** {report.source}  ")
        lines.append("")

        # Data overview
        lines.append("## Data")
        lines.append("")
        if report.rows_fetched is not None:
            lines.append(f"- **Rows Fetched:** {report.rows_fetched:,}")
        lines.append(f"- **Duplicate Rows Removed:** {report.duplicates_dropped:,}")
        lines.append(f"- **Unparsable Date/Time Values:** {report.parse_error_count:,}")
        lines.append(f"- **Incidents Analyzed:** {report.total_incidents:,}")
        lines.append("")
        lines.append(
            "Dates and times are read as New York local time; no time zone or "
            "daylight-saving adjustment is applied. Rows whose date or time could not "
            "be parsed are excluded from every chart and count."
        )
        lines.append("")

        if report.parse_error_examples:
            lines.append("**Examples of unparsable values:**")
            lines.append("")
            for example in report.parse_error_examples[:5]:
                lines.append(
                    f"- row {example['row']}: `{example['column']}` = "
                    f"`{example['value']}` ({example['reason']})"
                )
            lines.append("")

        # Charts
        lines.append("## Charts")
        lines.append("")
        for name, path in report.figures.items():
            relative = Path(path).relative_to(output_dir).as_posix()
            lines.append(f"### {CHART_TITLES[name]}")
            lines.append("")
            lines.append(f"![{CHART_TITLES[name]}]({relative})")
            lines.append("")

        # Conclusions
        lines.append("## Conclusions")
        lines.append("")
        for conclusion in report.conclusions:
            lines.append(f"- {conclusion}")
        lines.append("")

        # Statistics
        lines.append("## Summary Statistics")
        lines.append("")
        lines.append(_markdown_table(report.statistics.to_frame().reset_index()))
        lines.append("")

        lines.append("## Missing Values")
        lines.append("")
        lines.append("| Column | Missing |")
        lines.append("| --- | --- |")
        for column, count in report.missing_values.items():
            lines.append(f"| {column} | {count} |")
        lines.append("")

        # Count tables
        lines.append("## Counts")
        lines.append("")
        for name, counts in report.summaries.items():
            lines.append(f"### {CHART_TITLES[name]}")
            lines.append("")
            lines.append(_markdown_table(counts.reset_index()))
            lines.append("")

        lines.append("---")
        lines.append("")
        lines.append("*This report was automatically generated by Shooting Pulse.*")

        return "\n".join(lines)


# =============================================================================
# Narrative
# =============================================================================


def build_conclusions(summaries: TemporalSummaries) -> list[str]:
    """
    Turn the count summaries into plain-language findings.

    Ties go to the earliest bucket in calendar order.
    """
    total = summaries.total
    if total == 0:
        return ["No incidents with a valid date and time were available to analyze."]

    conclusions = []

    years = summaries.year
    if len(years) > 1:
        first, last = years.index[0], years.index[-1]
        change = _pct_change(years.iloc[0], years.iloc[-1])
        conclusions.append(
            f"The busiest year was {years.idxmax()} with {years.max():,} incidents and the "
            f"quietest was {years.idxmin()} with {years.min():,}. Between {first} and {last} "
            f"yearly incidents went from {years.iloc[0]:,} to {years.iloc[-1]:,} ({change})."
        )
    else:
        conclusions.append(
            f"All {total:,} incidents fall in {years.index[0]}, so no yearly trend can be drawn."
        )

    months = summaries.month
    conclusions.append(
        f"{months.idxmax()} has the most incidents ({months.max():,}, "
        f"{_share(months.max(), total)} of the total) and {months.idxmin()} the fewest "
        f"({months.min():,})."
    )

    days = summaries.day_of_week
    weekend = int(days[days.index.isin(WEEKEND_DAYS)].sum())
    conclusions.append(
        f"{days.idxmax()} is the most frequent day ({days.max():,}) and {days.idxmin()} the "
        f"least ({days.min():,}); weekends account for {_share(weekend, total)} of incidents "
        f"against 28.6% of the days in a week."
    )

    hours = summaries.hour
    night = int(hours[hours.index.isin(NIGHT_HOURS)].sum())
    conclusions.append(
        f"Incidents peak at {hours.idxmax():02d}:00 ({hours.max():,}) and bottom out at "
        f"{hours.idxmin():02d}:00 ({hours.min():,}); {_share(night, total)} happen between "
        f"20:00 and 05:59."
    )

    return conclusions


def _share(part: int, total: int) -> str:
    return f"{part / total:.1%}" if total else "n/a"


def _pct_change(start: int, end: int) -> str:
    if start == 0:
        return "no baseline"
    return f"{(end - start) / start:+.1%}"


def _markdown_table(df: pd.DataFrame) -> str:
    """Render a small DataFrame as a Markdown table."""
    header = "| " + " | ".join(str(c) for c in df.columns) + " |"
    divider = "| " + " | ".join("---" for _ in df.columns) + " |"
    rows = [
        "| " + " | ".join("" if pd.isna(v) else _fmt(v) for v in row) + " |"
        for row in df.itertuples(index=False)
    ]
    return "\n".join([header, divider, *rows])


def _fmt(value: Any) -> str:
    if isinstance(value, float):
        return f"{value:,.2f}"
    return str(value)
