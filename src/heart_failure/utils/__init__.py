"""Utility subpackage for reusable helpers (logging)."""

from .logger import get_logger, quieted, set_level

__all__ = ["get_logger", "quieted", "set_level"]
