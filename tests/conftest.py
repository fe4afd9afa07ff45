"""
Shooting Pulse - Pytest Configuration and Fixtures

Shared fixtures for all tests:
- Configuration fixtures
- Sample incident data
- Mock fixtures for external services
"""

import os
from collections.abc import Generator
from pathlib import Path
from typing import Any

import pandas as pd
import pytest

# Set test environment
os.environ["SP_ENVIRONMENT"] = "dev"

# =============================================================================
# Path Fixtures
# =============================================================================


@pytest.fixture
def project_root() -> Path:
    """Get the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def configs_dir(project_root: Path) -> Path:
    """Get the configs directory."""
    return project_root / "configs"


# =============================================================================
# Configuration Fixtures
# =============================================================================


@pytest.fixture
def test_config() -> Any:
    """Get test configuration."""
    from shooting_pulse.shared.config import get_config, reload_config

    # Ensure fresh config for tests
    reload_config("dev")
    return get_config("dev")


@pytest.fixture
def raise_config(test_config: Any) -> Any:
    """Configuration that aborts on the first unparsable value."""
    return test_config.model_copy(
        update={
            "normalization": test_config.normalization.model_copy(
                update={"on_parse_error": "raise"}
            )
        }
    )


# =============================================================================
# Sample Data Fixtures
# =============================================================================


@pytest.fixture
def sample_raw_df() -> pd.DataFrame:
    """Raw incidents as read from the CSV (all text, source column names)."""
    return pd.DataFrame(
        {
            "INCIDENT_KEY": ["192799737", "220913021", "228581213"],
            "OCCUR_DATE": ["01/15/2019", "07/04/2020", "12/31/2021"],
            "OCCUR_TIME": ["23:45:00", "08:10:00", "00:05:00"],
            "BORO": ["BRONX", "BROOKLYN", "QUEENS"],
            "PRECINCT": ["44", "75", "113"],
            "STATISTICAL_MURDER_FLAG": ["false", "true", "false"],
        }
    )


@pytest.fixture
def two_row_csv() -> bytes:
    """The two-incident scenario as CSV bytes."""
    return (
        b"INCIDENT_KEY,OCCUR_DATE,OCCUR_TIME,BORO\n"
        b"1,01/15/2019,23:45,BRONX\n"
        b"2,07/04/2020,08:10,BROOKLYN\n"
    )


@pytest.fixture
def sample_csv_bytes() -> bytes:
    """A small extract with a duplicate row and a malformed time."""
    return (
        b"INCIDENT_KEY,OCCUR_DATE,OCCUR_TIME,BORO,PRECINCT\n"
        b"192799737,01/15/2019,23:45:00,BRONX,44\n"
        b"220913021,07/04/2020,08:10:00,BROOKLYN,75\n"
        b"192799737,01/15/2019,23:45:00,BRONX,44\n"
        b"228581213,12/31/2021,00:05:00,QUEENS,113\n"
        b"230000001,03/02/2021,25:99,MANHATTAN,25\n"
    )


# =============================================================================
# Mock Fixtures
# =============================================================================


@pytest.fixture
def mock_nyc_open_data(mocker: Any, sample_csv_bytes: bytes) -> Any:
    """Mock the NYC Open Data CSV download."""
    mock_response = mocker.MagicMock()
    mock_response.status_code = 200
    mock_response.content = sample_csv_bytes
    mock_response.headers = {"Content-Type": "text/csv; charset=utf-8"}
    mock_response.raise_for_status = mocker.MagicMock()
    mocker.patch("requests.get", return_value=mock_response)
    return mock_response


# =============================================================================
# Cleanup Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def cleanup_env() -> Generator[None, None, None]:
    """Clean up environment variables and cached config after each test."""
    from shooting_pulse.shared.config import get_config

    original_env = os.environ.copy()
    yield
    # Restore original environment
    os.environ.clear()
    os.environ.update(original_env)
    get_config.cache_clear()
