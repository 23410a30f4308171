"""Structured logging for officeql.

Records are emitted as JSON lines through ``logging.config.dictConfig``.
Builders log generated statement text at debug level, so long string fields
are cut to ``max_field_length`` characters to keep log lines bounded.
"""

from __future__ import annotations

import json
import logging
import logging.config
from datetime import datetime, timezone
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, FrozenSet, Optional

from opentelemetry import trace

if TYPE_CHECKING:
    from officeql.settings import _Settings

PACKAGE_LOGGER = "officeql"
DEFAULT_MAX_FIELD_LENGTH = 2000

# Attributes every LogRecord carries; anything else on a record came from ``extra``
_STANDARD_RECORD_ATTRIBUTES: FrozenSet[str] = frozenset(
    logging.makeLogRecord({}).__dict__
) | {"asctime", "message"}


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


class CustomJsonFormatter(logging.Formatter):
    """Render a record as one JSON object.

    Output keys: ``timestamp``, ``level``, ``logger``, ``message``, every
    non-null ``extra`` field (enums by value, long strings truncated),
    ``trace_id``/``span_id`` when a span is active, and ``exception``.
    """

    def __init__(self, max_field_length: int = DEFAULT_MAX_FIELD_LENGTH, **kwargs: Any):
        super().__init__(**kwargs)
        self.max_field_length = max_field_length

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for key, value in record.__dict__.items():
            if key in _STANDARD_RECORD_ATTRIBUTES or value is None:
                continue
            payload[key] = self._field(value)

        span_context = trace.get_current_span().get_span_context()
        if span_context.is_valid:
            payload["trace_id"] = format(span_context.trace_id, "032x")
            payload["span_id"] = format(span_context.span_id, "016x")

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=str)

    def _field(self, value: Any) -> Any:
        if isinstance(value, Enum):
            value = value.value
        if isinstance(value, str) and len(value) > self.max_field_length:
            return f"{value[:self.max_field_length]}...<{len(value) - self.max_field_length} more chars>"
        return value


def setup_logging(level: Optional[str] = None, settings: Optional["_Settings"] = None) -> None:
    """Configure JSON console logging.

    Args:
        level: Log level name; defaults to ``settings.log_level``
        settings: Settings to read the level and ``app_env`` from; the
            process-wide settings when omitted
    """
    from officeql.logging.filters import set_logging_context
    from officeql.settings import get_settings

    settings = settings if settings is not None else get_settings()
    level = (level or settings.log_level).upper()
    set_logging_context(environment=settings.app_env)

    logging.config.dictConfig({
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "officeql_json": {
                "()": "officeql.logging.logger.CustomJsonFormatter",
            }
        },
        "filters": {
            "officeql_context": {
                "()": "officeql.logging.filters.ContextFilter",
            }
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": level,
                "formatter": "officeql_json",
                "filters": ["officeql_context"],
                "stream": "ext://sys.stdout",
            }
        },
        "loggers": {
            PACKAGE_LOGGER: {"level": level},
        },
        "root": {
            "level": level,
            "handlers": ["console"],
        },
    })
