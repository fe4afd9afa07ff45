"""
Shooting Pulse - Pipeline Exceptions

Every error names the pipeline stage it came from so an aborted run can say
which stage failed and why.
"""

from __future__ import annotations

from typing import Any


class PipelineError(Exception):
    """Base class for errors raised by a pipeline stage."""

    stage = "pipeline"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class FetchError(PipelineError):
    """Raised when the source is unreachable or its body is not tabular text."""

    stage = "load"


class SchemaError(PipelineError):
    """Raised when expected columns are missing from the cleaned table."""

    stage = "clean"

    def __init__(self, missing_columns: list[str] | set[str]):
        self.missing_columns = sorted(missing_columns)
        super().__init__(f"Missing required columns: {self.missing_columns}")


class ParseError(PipelineError):
    """A row whose date or time text does not match the expected format."""

    stage = "normalize"

    def __init__(self, row: Any, column: str, value: Any, reason: str):
        self.row = row
        self.column = column
        self.value = value
        self.reason = reason
        super().__init__(f"Row {row}: cannot parse {column}={value!r} ({reason})")

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging/reporting."""
        return {
            "row": self.row,
            "column": self.column,
            "value": None if self.value is None else str(self.value),
            "reason": self.reason,
        }
