from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Mapping, Optional

from officeql.common import missing_parameter_error
from officeql.constants import QueryType
from officeql.logging import get_logger
from officeql.query_builder.clauses import LanguageResolution, resolve_language
from officeql.query_builder.formatter import coerce_identifier_value
from officeql.query_builder.types import BuiltQuery
from officeql.settings import _Settings

logger = get_logger(__name__)


class BaseQueryBuilder(ABC):
    """Base interface for statement builders.

    Builders turn request values into MySQL statement text. They do NOT
    execute anything; the returned ``BuiltQuery`` is handed to an external
    executor.

    Security Principles:
        1. **Validated identifiers**: table, alias and column names only come
           from validated configuration, never from request values
        2. **One literal path**: every request value is rendered through
           ``format_value``
        3. **Whitelisted ordering**: sort columns must be configured columns
    """

    def __init__(self, settings: _Settings):
        self.settings = settings

    @property
    def target(self) -> str:
        """Name used in log records for the table or entity this builder addresses."""
        return self.__class__.__name__

    @abstractmethod
    def build_select(self, params: Optional[Mapping[str, Any]] = None) -> BuiltQuery:
        """Build a list query."""

    @abstractmethod
    def build_select_by_id(self, *args, **kwargs) -> BuiltQuery:
        """Build a single-row query."""

    @abstractmethod
    def build_insert(self, data: Mapping[str, Any]) -> BuiltQuery:
        """Build an insert followed by a re-select of the new row."""

    @abstractmethod
    def build_update(self, *args, **kwargs) -> BuiltQuery:
        """Build an update followed by a re-select of the row."""

    @abstractmethod
    def build_delete(self, *args, **kwargs) -> BuiltQuery:
        """Build a delete followed by ``SELECT 1 AS success``."""

    def build_query(self, query_type: QueryType, *args, **kwargs) -> BuiltQuery:
        """Build the statement for a query type.

        Raises:
            NotImplementedError: If the query type is not supported by this builder
        """
        operation_mapping: Dict[QueryType, Callable[..., BuiltQuery]] = {
            QueryType.SELECT: self.build_select,
            QueryType.SELECT_BY_ID: self.build_select_by_id,
            QueryType.INSERT: self.build_insert,
            QueryType.UPDATE: self.build_update,
            QueryType.DELETE: self.build_delete,
        }
        upsert = getattr(self, "build_upsert", None)
        if upsert is not None:
            operation_mapping[QueryType.UPSERT] = upsert

        builder_method = operation_mapping.get(query_type)
        if builder_method:
            return builder_method(*args, **kwargs)

        raise NotImplementedError(
            f"Query type {query_type} not supported by {self.__class__.__name__}"
        )

    def resolve_language(self, params: Optional[Mapping[str, Any]]) -> LanguageResolution:
        return resolve_language(params, self.settings.translation.default_language_id)

    def _require_id(self, value: Any, operation: str) -> Any:
        """Return the id with digit-only strings coerced to int.

        Raises:
            QueryBuilderError: MISSING_PARAMETER if the id is absent or empty
        """
        if value is None or (isinstance(value, str) and not value.strip()):
            raise missing_parameter_error("id", operation)
        return coerce_identifier_value(value)

    def _log_built(self, query_type: QueryType, built: BuiltQuery) -> BuiltQuery:
        built = built.model_copy(update={"dialect": self.settings.dialect})
        logger.debug(
            "Built %s statement for %s",
            query_type.value,
            self.target,
            extra={"query_type": query_type.value, "target": self.target, "sql": built.query},
        )
        return built
