"""
Tests for the configuration loader.

Covers YAML inheritance, environment variable overrides and dataset configs.
"""

import pytest
from pydantic import ValidationError

from shooting_pulse.shared import config as config_module
from shooting_pulse.shared.config import (
    Settings,
    get_config,
    get_dataset_config,
    reload_config,
)

# =============================================================================
# Environment Loading
# =============================================================================


def test_dev_config_inherits_base():
    """Test dev overrides are merged on top of base.yaml."""
    config = reload_config("dev")

    assert config.environment == "dev"
    assert config.logging.level == "DEBUG"
    assert config.report.figure_dpi == 100
    # Inherited from base
    assert config.source.timeout_seconds == 60
    assert config.normalization.on_parse_error == "drop"
    assert "833y-fsy8" in config.source.url


def test_prod_config_overrides():
    """Test prod-specific values."""
    config = reload_config("prod")

    assert config.environment == "prod"
    assert config.source.timeout_seconds == 120
    assert config.logging.format == "json"
    assert config.report.figure_dpi == 150


def test_get_config_is_cached():
    """Test repeated calls return the cached object."""
    first = reload_config("dev")
    assert get_config("dev") is first


def test_environment_variable_selects_environment(monkeypatch):
    """Test SP_ENVIRONMENT picks the environment when none is given."""
    monkeypatch.setenv("SP_ENVIRONMENT", "prod")
    config = reload_config()

    assert config.environment == "prod"


def test_environment_variable_overrides_yaml(monkeypatch):
    """Test nested env vars win over YAML values."""
    monkeypatch.setenv("SP_REPORT__OUTPUT_DIR", "custom-reports")
    monkeypatch.setenv("SP_NORMALIZATION__ON_PARSE_ERROR", "raise")
    config = reload_config("dev")

    assert config.report.output_dir == "custom-reports"
    assert config.normalization.on_parse_error == "raise"
    # Untouched values still come from YAML
    assert config.report.figure_dpi == 100


def test_invalid_environment_rejected():
    """Test unknown environments fail validation."""
    with pytest.raises(ValidationError):
        Settings(environment="staging")


def test_invalid_parse_policy_rejected():
    """Test on_parse_error only accepts drop or raise."""
    with pytest.raises(ValidationError):
        Settings(normalization={"on_parse_error": "ignore"})


def test_missing_configs_dir_falls_back_to_defaults(monkeypatch):
    """Test model defaults are used when no configs directory exists."""
    monkeypatch.setattr(config_module, "_get_config_dir", lambda: None)
    config = reload_config("dev")

    assert config.environment == "dev"
    assert config.logging.level == "INFO"
    assert config.report.figure_dpi == 150


# =============================================================================
# Helpers
# =============================================================================


def test_deep_merge_nested():
    """Test nested dictionaries are merged, not replaced."""
    base = {"report": {"output_dir": "reports", "figure_dpi": 150}, "logging": {"level": "INFO"}}
    override = {"report": {"figure_dpi": 100}}

    merged = config_module._deep_merge(base, override)

    assert merged["report"] == {"output_dir": "reports", "figure_dpi": 100}
    assert merged["logging"] == {"level": "INFO"}
    # Inputs are not mutated
    assert base["report"]["figure_dpi"] == 150


def test_get_dataset_config():
    """Test the shootings dataset config is readable."""
    dataset_config = get_dataset_config("shootings")

    assert dataset_config["dataset"] == "shootings"
    assert dataset_config["ingestion"]["primary_key"] == "INCIDENT_KEY"
    assert dataset_config["columns"]["OCCUR_DATE"] == "occur_date"
    assert dataset_config["formats"]["occur_date"] == "%m/%d/%Y"


def test_get_dataset_config_unknown_dataset():
    """Test unknown datasets return an empty dict."""
    assert get_dataset_config("does_not_exist") == {}
