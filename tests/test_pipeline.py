"""
End-to-end tests for the shooting report pipeline.

Runs Loader -> Cleaner -> Normalizer -> Bucketizer -> Reporter against
injected CSV bytes; nothing touches the network.
"""

import json
from pathlib import Path

import pytest
import requests

from shooting_pulse.pipeline import main, run_report
from shooting_pulse.shared.exceptions import FetchError, ParseError, SchemaError


class TestRunReport:
    """Test cases for run_report()."""

    def test_two_row_scenario(self, test_config, two_row_csv, tmp_path):
        """Test the two-incident scenario end to end."""
        result = run_report(
            config=test_config, source=two_row_csv, output_dir=tmp_path, execution_date="2024-01-15"
        )

        assert result.rows_fetched == 2
        assert result.total_incidents == 2
        assert result.parse_error_count == 0

        with open(tmp_path / "report.json") as f:
            summaries = json.load(f)["summaries"]

        assert summaries["year"] == {"2019": 1, "2020": 1}
        assert summaries["month"]["Jan"] == 1
        assert summaries["month"]["Jul"] == 1
        assert summaries["day_of_week"]["Tue"] == 1
        assert summaries["day_of_week"]["Sat"] == 1
        assert summaries["hour"]["23"] == 1
        assert summaries["hour"]["8"] == 1

    def test_appended_duplicate_changes_nothing(self, test_config, two_row_csv, tmp_path):
        """Test a duplicate of row 1 is removed before counting."""
        with_duplicate = two_row_csv + b"1,01/15/2019,23:45,BRONX\n"

        first = run_report(config=test_config, source=two_row_csv, output_dir=tmp_path / "a")
        second = run_report(config=test_config, source=with_duplicate, output_dir=tmp_path / "b")

        assert second.rows_fetched == 3
        assert second.duplicates_dropped == 1
        assert second.total_incidents == first.total_incidents == 2
        for name in ("year_counts.csv", "month_counts.csv", "day_of_week_counts.csv", "hour_counts.csv"):
            assert (tmp_path / "a" / name).read_text() == (tmp_path / "b" / name).read_text()

    def test_malformed_time_excluded(self, test_config, sample_csv_bytes, tmp_path):
        """Test 25:99 is reported and excluded from every summary."""
        result = run_report(config=test_config, source=sample_csv_bytes, output_dir=tmp_path)

        assert result.rows_fetched == 5
        assert result.duplicates_dropped == 1
        assert result.rows_clean == 4
        assert result.rows_normalized == 3
        assert result.parse_error_count == 1
        assert result.total_incidents == 3

        with open(tmp_path / "report.json") as f:
            report = json.load(f)

        assert report["parse_error_count"] == 1
        assert report["parse_error_examples"][0]["value"] == "25:99"
        for counts in report["summaries"].values():
            assert sum(counts.values()) == 3
        assert report["summaries"]["month"]["Mar"] == 0

    def test_downloads_when_no_source(self, test_config, mock_nyc_open_data, tmp_path):
        """Test the configured URL is fetched when nothing is injected."""
        result = run_report(config=test_config, output_dir=tmp_path)

        requests.get.assert_called_once()
        assert result.total_incidents == 3
        assert Path(result.paths["markdown"]).exists()

    def test_stage_results_recorded(self, test_config, two_row_csv, tmp_path):
        """Test every stage result is kept on the pipeline result."""
        result = run_report(config=test_config, source=two_row_csv, output_dir=tmp_path)

        assert list(result.stages) == ["load", "clean", "normalize", "bucketize", "report"]
        assert all(stage["success"] for stage in result.stages.values())
        assert result.to_dict()["total_incidents"] == 2

    def test_fetch_error_aborts(self, test_config, tmp_path):
        """Test an empty body aborts with FetchError and writes nothing."""
        with pytest.raises(FetchError):
            run_report(config=test_config, source=b"", output_dir=tmp_path / "out")

        assert not (tmp_path / "out").exists()

    def test_html_body_aborts_with_fetch_error(self, test_config, tmp_path):
        """Test an HTML error page aborts in the load stage, not the clean stage."""
        with pytest.raises(FetchError):
            run_report(
                config=test_config,
                source=b"<html><body>Service unavailable</body></html>",
                output_dir=tmp_path / "out",
            )

        assert not (tmp_path / "out").exists()

    def test_schema_error_aborts(self, test_config, tmp_path):
        """Test a missing column aborts with SchemaError."""
        csv = b"INCIDENT_KEY,OCCUR_DATE\n1,01/15/2019\n"

        with pytest.raises(SchemaError) as exc_info:
            run_report(config=test_config, source=csv, output_dir=tmp_path / "out")

        assert exc_info.value.missing_columns == ["occur_time"]
        assert not (tmp_path / "out").exists()

    def test_raise_policy_aborts(self, raise_config, sample_csv_bytes, tmp_path):
        """Test the raise policy aborts on the malformed time."""
        with pytest.raises(ParseError) as exc_info:
            run_report(config=raise_config, source=sample_csv_bytes, output_dir=tmp_path / "out")

        assert exc_info.value.value == "25:99"
        assert not (tmp_path / "out").exists()

    def test_failed_stage_logged(self, test_config, tmp_path, caplog):
        """Test the failing stage is named in the log."""
        with pytest.raises(FetchError):
            run_report(config=test_config, source=b"", output_dir=tmp_path)

        assert "load stage failed" in caplog.text


class TestMain:
    """Test cases for the command line entry point."""

    @pytest.fixture(autouse=True)
    def keep_root_logger(self):
        """Undo setup_logging() after each test."""
        import logging

        root = logging.getLogger()
        handlers, level = list(root.handlers), root.level
        yield
        for handler in list(root.handlers):
            root.removeHandler(handler)
        for handler in handlers:
            root.addHandler(handler)
        root.setLevel(level)

    def test_main_success(self, two_row_csv, tmp_path, capsys):
        """Test a successful run exits with 0."""
        source = tmp_path / "shootings.csv"
        source.write_bytes(two_row_csv)
        out = tmp_path / "report"

        exit_code = main(["--source", str(source), "--output-dir", str(out), "--env", "dev"])

        assert exit_code == 0
        assert (out / "report.md").exists()
        assert "Report written to" in capsys.readouterr().out

    def test_main_failure(self, tmp_path, capsys):
        """Test a pipeline error exits with 1 and names the stage."""
        source = tmp_path / "empty.csv"
        source.write_bytes(b"")

        exit_code = main(["--source", str(source), "--output-dir", str(tmp_path / "out")])

        assert exit_code == 1
        assert "load stage failed" in capsys.readouterr().err
