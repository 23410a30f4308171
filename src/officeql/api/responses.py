"""Response envelopes for callers that execute the built SQL.

Success envelopes carry ``{"success": true, "data": ...}``; list envelopes add
pagination metadata; errors carry ``{"success": false, "error": {...}}``.
"""

import math
from typing import Any, Dict, Optional, Tuple

from pydantic import ValidationError

from officeql.common import ErrorCode, QueryBuilderError

# Symbolic error code -> HTTP status, for codes raised outside this package
STATUS_BY_CODE: Dict[str, int] = {
    "VALIDATION_ERROR": 400,
    "INVALID_INPUT": 400,
    "UNAUTHORIZED": 401,
    "FORBIDDEN": 403,
    "NOT_FOUND": 404,
    "CONFLICT": 409,
    "UNPROCESSABLE": 422,
}
DEFAULT_ERROR_STATUS = 400

_NOT_FOUND_CODES = frozenset({
    ErrorCode.UNKNOWN_ENTITY,
    ErrorCode.UNKNOWN_LOOKUP,
    ErrorCode.RESOURCE_NOT_FOUND,
})


def format_list_response(data: Any, total: int, page: int, per_page: int) -> Dict[str, Any]:
    """Envelope a page of rows with pagination metadata.

    Examples:
        >>> format_list_response([], total=45, page=1, per_page=20)["pagination"]["total_pages"]
        3
    """
    total = int(total or 0)
    total_pages = math.ceil(total / per_page) if per_page else 0
    return {
        "success": True,
        "data": data,
        "pagination": {
            "page": page,
            "per_page": per_page,
            "total": total,
            "total_pages": total_pages,
        },
    }


def format_item_response(data: Any) -> Dict[str, Any]:
    return {"success": True, "data": data}


def format_success_response() -> Dict[str, Any]:
    return {"success": True, "data": {"success": True}}


def format_error_response(code: str, message: str, details: Optional[Any] = None) -> Dict[str, Any]:
    error: Dict[str, Any] = {"code": code, "message": message}
    if details is not None:
        error["details"] = details
    return {"success": False, "error": error}


def http_status_for_code(code: Optional[str]) -> int:
    """HTTP status for a symbolic error code; unknown codes map to 400."""
    return STATUS_BY_CODE.get((code or "").upper(), DEFAULT_ERROR_STATUS)


def http_status_for_error(error_code: ErrorCode) -> int:
    """HTTP status for a package error code.

    Unknown entities, lookups and resources are 404, other configuration
    problems 500, input errors 400.
    """
    if error_code in _NOT_FOUND_CODES:
        return 404
    if error_code.value.startswith("CONFIG_"):
        return 500
    return 400


def error_response_from_exception(exc: Exception) -> Tuple[int, Dict[str, Any]]:
    """Turn an exception into ``(http_status, error envelope)``.

    Unexpected exceptions become a 500 without leaking their message.
    """
    if isinstance(exc, QueryBuilderError):
        return http_status_for_error(exc.error_code), format_error_response(
            exc.error_code.name, exc.message, exc.details or None
        )
    if isinstance(exc, ValidationError):
        details = [
            {"loc": list(error.get("loc", ())), "msg": error.get("msg")}
            for error in exc.errors()
        ]
        return 400, format_error_response("VALIDATION_ERROR", "Invalid request", details)
    return 500, format_error_response("INTERNAL_ERROR", "Internal error")
