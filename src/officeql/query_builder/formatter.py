"""Literal formatting for generated MySQL text.

Every value that reaches statement text goes through ``format_value``. The
escaping targets MySQL with the default ``sql_mode`` (backslash escapes
enabled): backslashes are doubled first, then single quotes are
backslash-escaped.
"""

import json
import math
from datetime import date, datetime, time
from decimal import Decimal
from typing import Any

from officeql.logging import get_logger

logger = get_logger(__name__)

NULL = "NULL"

_FALSE_STRINGS = frozenset({"0", "false", "no", "off", ""})


def quote_string(value: str) -> str:
    """Quote a string value for MySQL.

    Args:
        value: String value to quote

    Returns:
        Single-quoted literal with backslashes and quotes escaped
    """
    escaped = value.replace("\\", "\\\\").replace("'", "\\'")
    return f"'{escaped}'"


def format_value(value: Any) -> str:
    """Render a Python value as a MySQL literal.

    Never raises. Values of unsupported types degrade to ``NULL``.

    Examples:
        >>> format_value(None)
        'NULL'
        >>> format_value(True)
        '1'
        >>> format_value("O'Brien")
        "'O\\\\'Brien'"
    """
    if value is None:
        return NULL
    # bool before int: bool is an int subclass
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return repr(value) if math.isfinite(value) else NULL
    if isinstance(value, Decimal):
        return str(value) if value.is_finite() else NULL
    if isinstance(value, str):
        return quote_string(value)
    if isinstance(value, (dict, list, tuple)):
        try:
            return quote_string(json.dumps(value, default=str))
        except (TypeError, ValueError):
            logger.debug("Value is not JSON serializable, rendering NULL",
                         extra={"value_type": type(value).__name__})
            return NULL
    if isinstance(value, (datetime, date, time)):
        return quote_string(value.isoformat())

    logger.debug("Unsupported value type, rendering NULL",
                 extra={"value_type": type(value).__name__})
    return NULL


def format_bool_flag(value: Any) -> str:
    """Coerce a boolean-ish request value to ``1`` or ``0``.

    Query strings deliver flags as text, so ``"0"``, ``"false"``, ``"no"``,
    ``"off"`` and the empty string count as false.
    """
    if isinstance(value, str):
        return "0" if value.strip().lower() in _FALSE_STRINGS else "1"
    return "1" if value else "0"


def coerce_identifier_value(value: Any) -> Any:
    """Turn a digit-only string id (``"42"``) into an int; anything else is returned as is."""
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return value


def parse_int(value: Any):
    """Parse an integer request value, returning ``None`` when it is not one."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    if isinstance(value, str):
        text = value.strip()
        if text.lstrip("-").isdigit():
            return int(text)
    return None
