"""officeql: configuration-driven MySQL statement generation.

Turns an HTTP-like request (entity token, method, path params, query params,
body) into literal MySQL text for an ``objects``-centred schema with
translatable reference data, soft deletes and an audit-oriented update
protocol. Nothing is executed; callers run the returned text.

Quick Start:
    >>> from officeql import QueryDispatcher
    >>> built = QueryDispatcher().dispatch(
    ...     {"entity_type": "documents", "method": "GET", "query": {"language_code": "de"}}
    ... )
    >>> print(built.query)
"""

from officeql.__version__ import __version__
from officeql.api import (
    QueryDispatcher,
    QueryRequest,
    error_response_from_exception,
    format_error_response,
    format_item_response,
    format_list_response,
    format_success_response,
)
from officeql.common import ErrorCode, QueryBuilderError
from officeql.query_builder import (
    BuiltQuery,
    EntityQueryBuilder,
    LookupQueryBuilder,
    QueryBuilderFactory,
    TranslationQueryBuilder,
    format_value,
)
from officeql.schema import EntityConfig, EntityRegistry, get_default_registry
from officeql.settings import get_settings

__all__ = [
    "__version__",
    "QueryDispatcher",
    "QueryRequest",
    "BuiltQuery",
    "EntityQueryBuilder",
    "LookupQueryBuilder",
    "TranslationQueryBuilder",
    "QueryBuilderFactory",
    "EntityConfig",
    "EntityRegistry",
    "get_default_registry",
    "get_settings",
    "format_value",
    "QueryBuilderError",
    "ErrorCode",
    "format_list_response",
    "format_item_response",
    "format_success_response",
    "format_error_response",
    "error_response_from_exception",
]
