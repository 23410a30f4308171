"""Logging infrastructure for officeql.

This module provides structured logging with JSON output, request context
tracking and OpenTelemetry trace correlation.
"""

from officeql.logging.filters import ContextFilter
from officeql.logging.logger import CustomJsonFormatter, get_logger, setup_logging

__all__ = [
    "get_logger",
    "setup_logging",
    "CustomJsonFormatter",
    "ContextFilter",
]
