"""Rack Tracker - inventory ledger and analytics for rack/bin stock."""

from .utils.constants import APP_VERSION

__version__ = APP_VERSION
