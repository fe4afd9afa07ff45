"""
Shooting Pulse - Logging Setup

Configures the root logger from ``LoggingConfig`` with ``logging.basicConfig``.
Modules log through ``logging.getLogger(__name__)`` and pass structured context
via ``extra``. The text format is the pipeline scripts' standard format string;
the json format (selected in prod) keeps the ``extra`` context on
each emitted record.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import UTC, datetime
from typing import Any

from shooting_pulse.shared.config import Settings, get_config

TEXT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
TEXT_FORMAT_NO_TIME = "%(name)s - %(levelname)s - %(message)s"

# Attributes every LogRecord carries; anything else came in through ``extra``.
_RESERVED_ATTRS = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", None, None)).keys() | {"message", "asctime"}
)


class JsonFormatter(logging.Formatter):
    """Format log records as one JSON object per line."""

    def __init__(self, include_timestamp: bool = True):
        super().__init__()
        self.include_timestamp = include_timestamp

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if self.include_timestamp:
            payload["timestamp"] = datetime.fromtimestamp(record.created, UTC).isoformat()

        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS and not key.startswith("_"):
                payload[key] = value

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=str)


def setup_logging(config: Settings | None = None) -> logging.Logger:
    """
    Configure the root logger through ``logging.basicConfig``.

    ``force=True`` replaces any handlers already installed on the root logger
    so repeated calls (tests, notebooks) do not duplicate output.

    Args:
        config: Configuration object (uses default if not provided)

    Returns:
        The configured root logger
    """
    config = config or get_config()
    log_config = config.logging

    handler = logging.StreamHandler(sys.stderr)

    if log_config.format == "json":
        # basicConfig leaves an existing formatter in place
        handler.setFormatter(JsonFormatter(include_timestamp=log_config.include_timestamp))
        logging.basicConfig(level=log_config.level.upper(), handlers=[handler], force=True)
    else:
        logging.basicConfig(
            level=log_config.level.upper(),
            format=TEXT_FORMAT if log_config.include_timestamp else TEXT_FORMAT_NO_TIME,
            handlers=[handler],
            force=True,
        )

    return logging.getLogger()
