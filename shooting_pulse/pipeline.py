"""
Shooting Pulse - Report Pipeline

Runs the five stages in order:

    Loader -> Cleaner -> Normalizer -> Bucketizer -> Reporter

Each stage returns a result object. The first failed stage aborts the run and
its typed error (FetchError, SchemaError, ParseError) is re-raised; nothing is
written in that case.

Usage:
    from shooting_pulse.pipeline import run_report

    result = run_report(output_dir="reports")

    # Offline
    result = run_report(source="data/NYPD_Shooting_Incident_Data__Historic_.csv")

Command line:
    shooting-report --output-dir reports
    shooting-report --source shootings.csv --env prod
"""

from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from shooting_pulse.datasets.shootings import (
    ShootingCleaner,
    ShootingFeatureBuilder,
    ShootingIngester,
    ShootingNormalizer,
)
from shooting_pulse.datasets.shootings.ingest import CsvSource
from shooting_pulse.reporting import ReportGenerator
from shooting_pulse.shared.config import Settings, get_config, reload_config
from shooting_pulse.shared.exceptions import PipelineError
from shooting_pulse.shared.logging_utils import setup_logging

logger = logging.getLogger(__name__)


@dataclass
class PipelineResult:
    """Outcome of a full report run."""

    execution_date: str
    rows_fetched: int
    rows_clean: int
    rows_normalized: int
    duplicates_dropped: int
    parse_error_count: int
    total_incidents: int
    output_dir: str
    paths: dict[str, str] = field(default_factory=dict)
    stages: dict[str, dict[str, Any]] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert result to dictionary for logging."""
        return {
            "execution_date": self.execution_date,
            "rows_fetched": self.rows_fetched,
            "rows_clean": self.rows_clean,
            "rows_normalized": self.rows_normalized,
            "duplicates_dropped": self.duplicates_dropped,
            "parse_error_count": self.parse_error_count,
            "total_incidents": self.total_incidents,
            "output_dir": self.output_dir,
            "paths": self.paths,
            "stages": self.stages,
        }


def _check(stage: str, result: Any) -> None:
    """Abort the run on a failed stage result."""
    if result.success:
        return

    logger.error(f"{stage} stage failed: {result.error_message}", extra={"stage": stage})

    if result.error is not None:
        raise result.error
    raise PipelineError(result.error_message or f"{stage} stage failed")


def run_report(
    config: Settings | None = None,
    source: CsvSource | None = None,
    output_dir: str | Path | None = None,
    execution_date: str | None = None,
) -> PipelineResult:
    """
    Run the full report pipeline.

    Args:
        config: Configuration object (uses default if not provided)
        source: Injected CSV (bytes, file object or path); downloads when None
        output_dir: Report destination (defaults to config report.output_dir)
        execution_date: Run date in YYYY-MM-DD format (defaults to today, UTC)

    Returns:
        PipelineResult with row counts and written paths

    Raises:
        FetchError: If the data cannot be loaded
        SchemaError: If a required column is missing
        ParseError: If a value fails to parse and the policy is ``raise``
    """
    config = config or get_config()
    execution_date = execution_date or datetime.now(UTC).strftime("%Y-%m-%d")
    stages: dict[str, dict[str, Any]] = {}

    logger.info(
        "Starting shooting report pipeline",
        extra={"execution_date": execution_date, "environment": config.environment},
    )

    # Load
    ingester = ShootingIngester(config)
    ingest_result = ingester.run(execution_date, source=source)
    stages["load"] = ingest_result.to_dict()
    _check("load", ingest_result)
    raw_df = ingester.get_data()

    # Clean
    cleaner = ShootingCleaner(config)
    clean_result = cleaner.run(raw_df, execution_date)
    stages["clean"] = clean_result.to_dict()
    _check("clean", clean_result)
    clean_df = cleaner.get_data()

    # Normalize
    normalizer = ShootingNormalizer(config)
    normalize_result = normalizer.run(clean_df, execution_date)
    stages["normalize"] = normalize_result.to_dict()
    _check("normalize", normalize_result)
    normalized_df = normalizer.get_data()
    parse_errors = normalizer.get_parse_errors()

    # Bucketize
    builder = ShootingFeatureBuilder(config)
    features_result = builder.run(normalized_df, execution_date)
    stages["bucketize"] = features_result.to_dict()
    _check("bucketize", features_result)
    summaries = builder.get_summaries()

    # Report
    generator = ReportGenerator(config)
    report_result = generator.run(
        summaries,
        normalized_df,
        execution_date,
        output_dir=output_dir,
        source=ingest_result.source,
        rows_fetched=ingest_result.rows_fetched,
        duplicates_dropped=clean_result.drop_reasons.get("duplicates", 0),
        parse_errors=parse_errors,
    )
    stages["report"] = report_result.to_dict()
    _check("report", report_result)

    result = PipelineResult(
        execution_date=execution_date,
        rows_fetched=ingest_result.rows_fetched,
        rows_clean=clean_result.rows_output,
        rows_normalized=normalize_result.rows_output,
        duplicates_dropped=clean_result.drop_reasons.get("duplicates", 0),
        parse_error_count=len(parse_errors),
        total_incidents=summaries.total,
        output_dir=report_result.output_dir,
        paths=report_result.paths,
        stages=stages,
    )

    logger.info(
        f"Shooting report complete: {result.total_incidents} incidents",
        extra={"output_dir": result.output_dir, "parse_error_count": result.parse_error_count},
    )

    return result


# =============================================================================
# Command Line
# =============================================================================


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="shooting-report",
        description="Build the NYPD shooting incident temporal report.",
    )
    parser.add_argument(
        "--source",
        type=Path,
        default=None,
        help="Local CSV to use instead of downloading the dataset",
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=None,
        help="Directory the report is written to (default: report.output_dir)",
    )
    parser.add_argument(
        "--env",
        choices=["dev", "prod"],
        default=None,
        help="Configuration environment (default: SP_ENVIRONMENT or dev)",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """Console entry point. Returns the process exit code."""
    args = build_parser().parse_args(argv)

    config = reload_config(args.env) if args.env else get_config()
    setup_logging(config)

    try:
        result = run_report(config=config, source=args.source, output_dir=args.output_dir)
    except PipelineError as e:
        print(f"shooting-report: {e.stage} stage failed: {e.message}", file=sys.stderr)
        return 1

    print(f"Report written to {result.paths['markdown']}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
