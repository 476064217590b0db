"""Utilities package for rack-tracker application."""

from .config import Config, get_config, reset_config
from .datetime_utils import utc_now, to_iso, parse_timestamp, month_window

__all__ = [
    "Config",
    "get_config",
    "reset_config",
    "utc_now",
    "to_iso",
    "parse_timestamp",
    "month_window",
]
