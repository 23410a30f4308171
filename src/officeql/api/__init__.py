"""Request-facing surface: dispatch facade and response envelopes."""

from officeql.api.dispatch import QueryDispatcher, QueryRequest
from officeql.api.responses import (
    error_response_from_exception,
    format_error_response,
    format_item_response,
    format_list_response,
    format_success_response,
    http_status_for_code,
    http_status_for_error,
)

__all__ = [
    "QueryDispatcher",
    "QueryRequest",
    "format_list_response",
    "format_item_response",
    "format_success_response",
    "format_error_response",
    "error_response_from_exception",
    "http_status_for_code",
    "http_status_for_error",
]
