"""Utility modules."""

from markertime.utils.config import Settings, get_settings
from markertime.utils.logging import setup_logging

__all__ = [
    "Settings",
    "get_settings",
    "setup_logging",
]
