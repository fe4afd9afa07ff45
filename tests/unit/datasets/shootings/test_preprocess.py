"""
Unit tests for ShootingCleaner and ShootingNormalizer.

Tests deduplication, projection and date/time normalization.
"""

from datetime import time

import pandas as pd
import pytest

from shooting_pulse.datasets.shootings.ingest import ShootingIngester
from shooting_pulse.datasets.shootings.preprocess import (
    PROJECTED_COLUMNS,
    ShootingCleaner,
    ShootingNormalizer,
    clean_shooting_data,
    normalize_shooting_data,
)
from shooting_pulse.shared.exceptions import ParseError, SchemaError


class TestShootingCleaner:
    """Test cases for ShootingCleaner class."""

    @pytest.fixture
    def cleaner(self, test_config):
        """Create a ShootingCleaner instance."""
        return ShootingCleaner(test_config)

    def test_get_dataset_name(self, cleaner):
        """Test dataset name is correct."""
        assert cleaner.get_dataset_name() == "shootings"
        assert cleaner.stage == "clean"

    def test_get_column_mappings(self, cleaner):
        """Test column mappings are defined."""
        mappings = cleaner.get_column_mappings()
        assert mappings["INCIDENT_KEY"] == "incident_key"
        assert mappings["OCCUR_DATE"] == "occur_date"
        assert mappings["OCCUR_TIME"] == "occur_time"

    def test_projection(self, cleaner, sample_raw_df):
        """Test output has exactly the three projected columns in order."""
        df = cleaner.process(sample_raw_df)

        assert list(df.columns) == PROJECTED_COLUMNS
        assert len(df) == 3

    def test_values_untouched(self, cleaner, sample_raw_df):
        """Test retained values are passed through unchanged."""
        df = cleaner.process(sample_raw_df)

        assert list(df["occur_date"]) == list(sample_raw_df["OCCUR_DATE"])
        assert list(df["occur_time"]) == list(sample_raw_df["OCCUR_TIME"])
        assert list(df["incident_key"]) == list(sample_raw_df["INCIDENT_KEY"])

    def test_duplicates_removed_first_kept(self, cleaner, sample_raw_df):
        """Test full-row duplicates are dropped keeping order of survivors."""
        raw = pd.concat([sample_raw_df, sample_raw_df.iloc[[0]]], ignore_index=True)
        result = cleaner.run(raw, execution_date="2024-01-15")
        df = cleaner.get_data()

        assert result.success
        assert result.drop_reasons == {"duplicates": 1}
        assert list(df.index) == [0, 1, 2]
        assert list(df["incident_key"]) == list(sample_raw_df["INCIDENT_KEY"])

    def test_dedup_uses_all_columns(self, cleaner, sample_raw_df):
        """Test rows that differ only outside the projection are both kept."""
        twin = sample_raw_df.iloc[[0]].copy()
        twin["BORO"] = "MANHATTAN"
        raw = pd.concat([sample_raw_df, twin], ignore_index=True)

        df = cleaner.process(raw)

        assert len(df) == 4
        assert (df["incident_key"] == "192799737").sum() == 2

    def test_idempotent(self, cleaner, sample_raw_df):
        """Test cleaning its own output changes nothing."""
        raw = pd.concat([sample_raw_df, sample_raw_df], ignore_index=True)
        once = cleaner.process(raw)
        twice = cleaner.process(once)

        pd.testing.assert_frame_equal(once, twice)

    def test_missing_column_raises(self, cleaner, sample_raw_df):
        """Test a missing source column raises SchemaError."""
        with pytest.raises(SchemaError) as exc_info:
            cleaner.process(sample_raw_df.drop(columns=["OCCUR_TIME"]))

        assert exc_info.value.missing_columns == ["occur_time"]

    def test_run_missing_column_captured(self, cleaner, sample_raw_df):
        """Test run() captures the SchemaError in the result."""
        result = cleaner.run(sample_raw_df.drop(columns=["OCCUR_DATE"]), "2024-01-15")

        assert not result.success
        assert isinstance(result.error, SchemaError)
        assert result.stage == "clean"

    def test_already_standardized_names(self, cleaner, sample_raw_df):
        """Test renaming is a no-op for standardized column names."""
        df = cleaner.process(sample_raw_df.rename(columns=str.lower))

        assert list(df.columns) == PROJECTED_COLUMNS

    def test_na_token_rows_are_distinct(self, cleaner, test_config):
        """Test rows differing only by N/A versus empty are not merged."""
        raw = ShootingIngester(test_config).fetch_data(
            source=(
                b"INCIDENT_KEY,OCCUR_DATE,OCCUR_TIME,PERP_AGE\n"
                b"NA,01/15/2019,23:45,N/A\n"
                b"NA,01/15/2019,23:45,\n"
            )
        )

        df = cleaner.process(raw)

        assert len(df) == 2
        assert list(df["incident_key"]) == ["NA", "NA"]


class TestShootingNormalizer:
    """Test cases for ShootingNormalizer class."""

    @pytest.fixture
    def cleaned_df(self):
        """Cleaned incidents (projected, text values)."""
        return pd.DataFrame(
            {
                "incident_key": ["1", "2", "3"],
                "occur_date": ["01/15/2019", "07/04/2020", "12/31/2021"],
                "occur_time": ["23:45:00", "08:10", "00:05:30"],
            }
        )

    @pytest.fixture
    def normalizer(self, test_config):
        """Create a ShootingNormalizer instance."""
        return ShootingNormalizer(test_config)

    def test_parses_dates_and_times(self, normalizer, cleaned_df):
        """Test dates become timestamps and times become minute-precision times."""
        df = normalizer.process(cleaned_df)

        assert pd.api.types.is_datetime64_any_dtype(df["occur_date"])
        assert df["occur_date"].iloc[0] == pd.Timestamp("2019-01-15")
        assert list(df["occur_time"]) == [time(23, 45), time(8, 10), time(0, 5)]

    def test_occurred_at(self, normalizer, cleaned_df):
        """Test the combined timestamp."""
        df = normalizer.process(cleaned_df)

        assert pd.api.types.is_datetime64_any_dtype(df["occurred_at"])
        assert list(df["occurred_at"]) == [
            pd.Timestamp("2019-01-15 23:45"),
            pd.Timestamp("2020-07-04 08:10"),
            pd.Timestamp("2021-12-31 00:05"),
        ]

    def test_timestamps_are_naive(self, normalizer, cleaned_df):
        """Test no time zone is attached."""
        df = normalizer.process(cleaned_df)
        assert df["occurred_at"].dt.tz is None

    def test_malformed_time_dropped(self, normalizer, cleaned_df):
        """Test 25:99 yields a ParseError and the row is excluded."""
        cleaned_df.loc[1, "occur_time"] = "25:99"

        result = normalizer.run(cleaned_df, execution_date="2024-01-15")
        df = normalizer.get_data()
        errors = normalizer.get_parse_errors()

        assert result.success
        assert len(df) == 2
        assert list(df["incident_key"]) == ["1", "3"]
        assert len(errors) == 1
        assert errors[0].row == 1
        assert errors[0].column == "occur_time"
        assert errors[0].value == "25:99"
        assert result.drop_reasons == {"unparsable_occur_time": 1}

    def test_bad_date_and_time_counted_once(self, normalizer, cleaned_df):
        """Test a row failing both fields is dropped once but reported twice."""
        cleaned_df.loc[0, "occur_date"] = "2019-01-15"
        cleaned_df.loc[0, "occur_time"] = "noon"

        result = normalizer.run(cleaned_df, execution_date="2024-01-15")

        assert result.rows_output == 2
        assert result.drop_reasons == {"unparsable_occur_date": 1}
        assert [e.column for e in normalizer.get_parse_errors()] == ["occur_date", "occur_time"]

    def test_missing_values_are_parse_errors(self, normalizer, cleaned_df):
        """Test missing date/time text is reported, not silently coerced."""
        cleaned_df.loc[2, "occur_date"] = None

        df = normalizer.process(cleaned_df)
        errors = normalizer.get_parse_errors()

        assert len(df) == 2
        assert errors[0].reason == "missing value"
        assert errors[0].value is None

    def test_raise_policy(self, raise_config, cleaned_df):
        """Test the raise policy aborts on the first ParseError."""
        cleaned_df.loc[1, "occur_time"] = "25:99"
        normalizer = ShootingNormalizer(raise_config)

        with pytest.raises(ParseError) as exc_info:
            normalizer.process(cleaned_df)

        assert exc_info.value.row == 1
        assert exc_info.value.reason == "time out of range"

    def test_run_raise_policy_captured(self, raise_config, cleaned_df):
        """Test run() captures the ParseError under the raise policy."""
        cleaned_df.loc[0, "occur_date"] = "bad"
        result = ShootingNormalizer(raise_config).run(cleaned_df, "2024-01-15")

        assert not result.success
        assert isinstance(result.error, ParseError)
        assert result.stage == "normalize"

    def test_all_rows_invalid(self, normalizer, cleaned_df):
        """Test every row failing leaves an empty, typed table."""
        cleaned_df["occur_time"] = "99:99"

        df = normalizer.process(cleaned_df)

        assert df.empty
        assert list(df.columns) == ["incident_key", "occur_date", "occur_time", "occurred_at"]
        assert len(normalizer.get_parse_errors()) == 3

    def test_missing_column_raises(self, normalizer, cleaned_df):
        """Test a missing column raises SchemaError."""
        with pytest.raises(SchemaError):
            normalizer.process(cleaned_df.drop(columns=["occur_time"]))


# =============================================================================
# Convenience Functions
# =============================================================================


def test_clean_and_normalize_convenience(test_config, sample_raw_df):
    """Test the convenience functions return loggable dicts."""
    clean_output = clean_shooting_data(sample_raw_df, "2024-01-15", config=test_config)
    assert clean_output["success"] is True
    assert clean_output["stage"] == "clean"

    cleaned = ShootingCleaner(test_config).process(sample_raw_df)
    normalize_output = normalize_shooting_data(cleaned, "2024-01-15", config=test_config)
    assert normalize_output["success"] is True
    assert normalize_output["rows_output"] == 3
