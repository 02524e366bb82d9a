"""Error taxonomy for the pipeline. Every error is terminal for the run."""

from __future__ import annotations

from typing import Any, Iterable, Mapping, Optional


class PipelineError(Exception):
    """Base class for all pipeline failures."""


class LoadError(PipelineError):
    """The input source is unreadable, malformed or does not match the schema."""


class DataQualityError(PipelineError):
    """Missing or invalid values where none are expected.

    ``fields`` maps each offending field to a short description
    (missing count, invalid values, sample row labels).
    """

    def __init__(self, message: str, fields: Optional[Mapping[str, Any]] = None):
        super().__init__(message)
        self.fields = dict(fields or {})


class ConfigError(PipelineError, ValueError):
    """Invalid configuration: split, fold, tuning or model parameters."""


class RecipeError(PipelineError):
    """Degenerate field statistics or a schema mismatch at apply time."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class UnseenLevelError(PipelineError):
    """A categorical level seen at apply time was never seen at fit time."""

    def __init__(self, field: str, levels: Iterable[Any]):
        self.field = field
        self.levels = sorted(str(level) for level in levels)
        super().__init__(
            f"Field '{field}' has levels not seen when the recipe was fit: {self.levels}"
        )
