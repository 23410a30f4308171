"""Logging filters for context injection.

This module provides filters that inject context variables into log records,
enabling correlation of builder logs with the request that triggered them.
"""

from __future__ import annotations

import logging
from contextvars import ContextVar
from typing import Any, Dict, Optional

from officeql.__version__ import __version__

request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)
entity_type_var: ContextVar[Optional[str]] = ContextVar("entity_type", default=None)

# Static, process-wide fields (deployment environment and free-form extras)
_static_environment: Optional[str] = None
_static_extra: Dict[str, Any] = {}


class ContextFilter(logging.Filter):
    """Logging filter that adds context variables to log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        """Add context variables to the log record.

        Args:
            record: Log record to enhance

        Returns:
            Always True (doesn't filter out any records)
        """
        setattr(record, "request_id", request_id_var.get())
        setattr(record, "entity_type", entity_type_var.get())
        setattr(record, "sdk_name", "officeql")
        setattr(record, "officeql_version", __version__)

        if _static_environment is not None:
            setattr(record, "environment", _static_environment)
        for key, value in _static_extra.items():
            if not hasattr(record, key):
                setattr(record, key, value)

        return True


def set_logging_context(
    environment: Optional[str] = None,
    extra: Optional[Dict[str, Any]] = None,
) -> None:
    """Set static fields added to every record. ``None`` clears them."""
    global _static_environment, _static_extra
    _static_environment = environment
    _static_extra = dict(extra or {})


def set_request_context(
    request_id: Optional[str] = None,
    entity_type: Optional[str] = None,
) -> None:
    """Set request context variables."""
    if request_id is not None:
        request_id_var.set(request_id)
    if entity_type is not None:
        entity_type_var.set(entity_type)


def clear_request_context() -> None:
    """Clear all request context variables."""
    request_id_var.set(None)
    entity_type_var.set(None)
