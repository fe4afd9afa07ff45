"""
Shooting Pulse - Configuration Loader

Pydantic-based configuration management with:
- Environment-based configuration (dev/prod)
- YAML file loading with inheritance
- Environment variable overrides
- Type validation via Pydantic

Usage:
    from shooting_pulse.shared.config import get_config

    config = get_config()  # Uses SP_ENVIRONMENT env var
    config = get_config("dev")  # Explicit environment

    # Access config values
    url = config.source.url
    output_dir = config.report.output_dir
"""

from __future__ import annotations

import logging
import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

# =============================================================================
# Configuration Models
# =============================================================================


class ProjectConfig(BaseModel):
    """Project metadata configuration."""

    name: str = "shooting-pulse"
    version: str = "0.1.0"
    description: str = "Temporal report on NYPD shooting incidents"


class SourceConfig(BaseModel):
    """Remote CSV source configuration."""

    url: str = "https://data.cityofnewyork.us/api/views/833y-fsy8/rows.csv?accessType=DOWNLOAD"
    timeout_seconds: int = 60
    user_agent: str = "shooting-pulse/0.1"


class IngestionConfig(BaseModel):
    """Ingestion limits."""

    nrows: int | None = None


class NormalizationConfig(BaseModel):
    """Date/time normalization configuration."""

    on_parse_error: Literal["drop", "raise"] = "drop"


class ReportConfig(BaseModel):
    """Report rendering configuration."""

    output_dir: str = "reports"
    title: str = "NYPD Shooting Incidents: When Do They Happen?"
    figure_dpi: int = 150
    figure_width: float = 10.0
    figure_height: float = 5.0
    style: str = "whitegrid"
    color: str = "steelblue"


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    format: Literal["json", "text"] = "text"
    include_timestamp: bool = True


# =============================================================================
# Main Settings Class
# =============================================================================


class Settings(BaseSettings):
    """
    Main configuration class for Shooting Pulse.

    Loads configuration from:
    1. YAML files in configs/environments/
    2. Environment variables

    Environment variables take precedence over YAML values.
    """

    model_config = SettingsConfigDict(
        env_prefix="SP_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    # Environment
    environment: Literal["dev", "prod"] = "dev"

    # Configuration sections
    project: ProjectConfig = Field(default_factory=ProjectConfig)
    source: SourceConfig = Field(default_factory=SourceConfig)
    ingestion: IngestionConfig = Field(default_factory=IngestionConfig)
    normalization: NormalizationConfig = Field(default_factory=NormalizationConfig)
    report: ReportConfig = Field(default_factory=ReportConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @field_validator("environment", mode="before")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Validate environment value."""
        valid_envs = {"dev", "prod"}
        if v not in valid_envs:
            raise ValueError(f"Invalid environment: {v}. Must be one of: {valid_envs}")
        return v


# =============================================================================
# Configuration Loading Functions
# =============================================================================


def _get_config_dir() -> Path | None:
    """Get the configuration directory path, or None when there is none."""
    # Try relative path from the project root
    config_dir = Path(__file__).parent.parent.parent / "configs"
    if config_dir.exists():
        return config_dir

    # Try from current working directory
    config_dir = Path.cwd() / "configs"
    if config_dir.exists():
        return config_dir

    logger.debug("No configs directory found, using built-in defaults")
    return None


def _load_yaml_file(path: Path) -> dict[str, Any]:
    """Load a YAML file and return its contents."""
    if not path.exists():
        return {}
    with open(path) as f:
        return yaml.safe_load(f) or {}


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep merge two dictionaries, with override taking precedence."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _load_config_for_environment(environment: str) -> dict[str, Any]:
    """Load and merge configuration for a specific environment."""
    config_dir = _get_config_dir()
    if config_dir is None:
        return {"environment": environment}

    env_dir = config_dir / "environments"

    # Load base config
    base_config = _load_yaml_file(env_dir / "base.yaml")

    # Load environment-specific config
    env_config = _load_yaml_file(env_dir / f"{environment}.yaml")

    # Remove inheritance marker if present
    env_config.pop("_inherit", None)

    merged = _deep_merge(base_config, env_config)
    merged["environment"] = environment

    return merged


@lru_cache(maxsize=4)
def get_config(environment: str | None = None) -> Settings:
    """
    Get configuration for the specified environment.

    Args:
        environment: Environment name (dev, prod).
                    If None, uses SP_ENVIRONMENT env var, defaulting to "dev".

    Returns:
        Settings: Validated configuration object.
    """
    if environment is None:
        environment = os.getenv("SP_ENVIRONMENT", "dev")

    yaml_config = _load_config_for_environment(environment)

    # Environment variables win over YAML values
    env_overrides = Settings().model_dump(exclude_unset=True)
    env_overrides.pop("environment", None)

    return Settings(**_deep_merge(yaml_config, env_overrides))


def reload_config(environment: str | None = None) -> Settings:
    """
    Reload configuration, clearing the cache.

    Useful for testing or when config files have changed.
    """
    get_config.cache_clear()
    return get_config(environment)


@lru_cache(maxsize=8)
def get_dataset_config(dataset: str) -> dict[str, Any]:
    """
    Load the dataset-specific configuration from configs/datasets/<dataset>.yaml.

    Returns an empty dict when the file does not exist so that callers can fall
    back to their own defaults with ``.get()``.
    """
    config_dir = _get_config_dir()
    if config_dir is None:
        return {}
    return _load_yaml_file(config_dir / "datasets" / f"{dataset}.yaml")
