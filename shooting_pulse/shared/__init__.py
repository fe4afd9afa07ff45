from shooting_pulse.shared.config import Settings, get_config, reload_config
from shooting_pulse.shared.exceptions import FetchError, ParseError, PipelineError, SchemaError
from shooting_pulse.shared.logging_utils import setup_logging

__all__ = [
    "get_config",
    "reload_config",
    "Settings",
    "setup_logging",
    "PipelineError",
    "FetchError",
    "SchemaError",
    "ParseError",
]
