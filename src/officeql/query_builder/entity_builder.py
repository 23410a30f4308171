"""Statement builder for registered entities.

One ``EntityQueryBuilder`` serves one ``EntityConfig``. The configuration
decides everything that varies between entities: identity model (shared
primary key with ``objects`` or own id), delete policy, translated columns,
searchable and filterable columns, and ordering.

Example:
    >>> from officeql.schema import get_default_registry
    >>> from officeql.settings import get_settings
    >>> builder = EntityQueryBuilder(get_default_registry().get_entity("persons"), get_settings())
    >>> built = builder.build_select({"search": "Doe", "page": 2, "per_page": 10})
    >>> built.params["offset"]
    10
"""

from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from officeql.common import ErrorCode, missing_parameter_error, validation_error
from officeql.constants import AuditUpdatePolicy, ColumnType, QueryType
from officeql.constants.sql import (
    AFFECTED_ROWS_VARIABLE,
    CREATED_AT_COLUMN,
    CREATED_BY_COLUMN,
    IS_ACTIVE_COLUMN,
    NEW_VALUE_SUFFIX,
    OBJECT_ID_VARIABLE,
    OBJECT_TYPES_TABLE,
    OBJECTS_ALIAS,
    OBJECTS_TABLE,
    OLD_VALUE_SUFFIX,
    PRIMARY_KEY_COLUMN,
    UPDATED_AT_COLUMN,
)
from officeql.logging import get_logger
from officeql.query_builder.base import BaseQueryBuilder
from officeql.query_builder.clauses import (
    COLUMN_SEPARATOR,
    LanguageResolution,
    build_from_clause,
    build_order_by_clause,
    build_pagination_clause,
    build_select_columns,
    build_where_clause,
    resolve_sort,
)
from officeql.query_builder.formatter import coerce_identifier_value, format_value
from officeql.query_builder.types import BuiltQuery
from officeql.schema import ColumnDefinition, EntityConfig
from officeql.settings import _Settings

logger = get_logger(__name__)

STATEMENT_SEPARATOR = "\n\n"

_SIMPLE_INSERT_EXCLUDED = frozenset({CREATED_AT_COLUMN, UPDATED_AT_COLUMN})
_UPDATE_EXCLUDED = frozenset({PRIMARY_KEY_COLUMN, CREATED_AT_COLUMN, CREATED_BY_COLUMN, UPDATED_AT_COLUMN})
_INTEGER_TYPES = frozenset({ColumnType.INTEGER, ColumnType.BIGINT})


def uses_old_new_protocol(data: Optional[Mapping[str, Any]]) -> bool:
    """True when a request body carries any ``<column>_new`` key."""
    return any(str(key).endswith(NEW_VALUE_SUFFIX) for key in (data or {}))


def _language_params(data: Mapping[str, Any]) -> Dict[str, Any]:
    return {key: data.get(key) for key in ("language_id", "language_code")}


class EntityQueryBuilder(BaseQueryBuilder):
    """Builds SELECT / INSERT / UPDATE / DELETE text for one entity."""

    def __init__(self, config: EntityConfig, settings: _Settings, entity_type: Optional[str] = None):
        super().__init__(settings)
        self.config = config
        self.entity_type = entity_type or config.table_name

    @property
    def target(self) -> str:
        return self.entity_type

    # ------------------------------------------------------------------
    # SELECT
    # ------------------------------------------------------------------

    def build_select(self, params: Optional[Mapping[str, Any]] = None) -> BuiltQuery:
        """Build a paginated list query and its ``COUNT(*)`` companion.

        Args:
            params: Query parameters: ``search``, ``is_active``,
                ``object_status_id``, ``object_id``, configured filter
                columns, ``sort_by``, ``sort_dir``, ``page``, ``per_page``,
                ``language_id``, ``language_code``

        Returns:
            BuiltQuery whose params hold the applied filters plus
            ``page``/``per_page``/``offset``
        """
        params = params or {}
        language = self.resolve_language(params)

        columns = build_select_columns(self.config)
        from_clause = build_from_clause(self.config, language)
        where_clause, where_params = build_where_clause(self.config, params)
        order_by_clause = build_order_by_clause(self.config, params)
        pagination = build_pagination_clause(params, self.settings.pagination)

        query = "\n".join(part for part in (
            f"SELECT\n    {columns}",
            f"FROM {from_clause}",
            where_clause,
            order_by_clause,
            pagination.limit_clause,
        ) if part)
        count_query = "\n".join(part for part in (
            "SELECT COUNT(*) AS total",
            f"FROM {from_clause}",
            where_clause,
        ) if part)

        sort_column, sort_direction = resolve_sort(self.config, params)
        built_params = {
            **where_params,
            **pagination.as_params(),
            "sort_by": sort_column,
            "sort_dir": sort_direction.value,
        }
        return self._log_built(
            QueryType.SELECT,
            BuiltQuery(query=query, count_query=count_query, params=built_params),
        )

    def build_select_by_id(self, id: Any, params: Optional[Mapping[str, Any]] = None) -> BuiltQuery:
        """Build the hydrated single-row query ``WHERE <alias>.id = <id>``."""
        id = self._require_id(id, "select by id")
        language = self.resolve_language(params)
        query = self._hydrated_select(language, self._id_predicate(id))
        return self._log_built(QueryType.SELECT_BY_ID, BuiltQuery(query=query, params={"id": id}))

    # ------------------------------------------------------------------
    # INSERT
    # ------------------------------------------------------------------

    def build_insert(self, data: Mapping[str, Any]) -> BuiltQuery:
        """Build an insert and a hydrated re-select of the new row.

        Shared primary key entities insert the ``objects`` row first inside a
        transaction and reuse its generated id.
        """
        data = dict(data or {})
        if self.config.uses_shared_primary_key:
            query = self._build_shared_insert(data)
        else:
            query = self._build_simple_insert(data)
        return self._log_built(QueryType.INSERT, BuiltQuery(query=query, params=data))

    def _build_shared_insert(self, data: Dict[str, Any]) -> str:
        config = self.config
        columns = self._supplied_columns(data, exclude=(PRIMARY_KEY_COLUMN,))
        names = [PRIMARY_KEY_COLUMN] + [column.name for column in columns]
        values = [OBJECT_ID_VARIABLE] + [self._column_literal(column, data[column.name]) for column in columns]

        status_id = data.get("object_status_id")
        if status_id is None or (isinstance(status_id, str) and not status_id.strip()):
            raise missing_parameter_error("object_status_id", f"insert {self.entity_type}")

        object_type = format_value(config.object_type_code)
        object_status = self._id_literal(status_id)
        language = self.resolve_language(_language_params(data))

        return STATEMENT_SEPARATOR.join([
            "START TRANSACTION;",
            f"INSERT INTO {OBJECTS_TABLE} (object_type_id, object_status_id)\n"
            f"VALUES (\n"
            f"    (SELECT id FROM {OBJECT_TYPES_TABLE} WHERE code = {object_type}),\n"
            f"    {object_status}\n"
            f");",
            f"SET {OBJECT_ID_VARIABLE} = LAST_INSERT_ID();",
            f"INSERT INTO {config.table_name} ({', '.join(names)})\n"
            f"VALUES ({', '.join(values)});",
            "COMMIT;",
            self._hydrated_select(language, self._id_predicate_raw(OBJECT_ID_VARIABLE)),
        ])

    def _build_simple_insert(self, data: Dict[str, Any]) -> str:
        config = self.config
        columns = [
            column for column in self._supplied_columns(data, exclude=_SIMPLE_INSERT_EXCLUDED)
            if not column.is_primary_key
        ]
        if not columns:
            raise validation_error(
                f"No columns to insert for {self.entity_type}",
                field="body",
                details={"accepted_columns": list(config.column_names)},
            )

        names = [column.name for column in columns]
        values = [self._column_literal(column, data[column.name]) for column in columns]
        language = self.resolve_language(_language_params(data))

        return STATEMENT_SEPARATOR.join([
            f"INSERT INTO {config.table_name} ({', '.join(names)})\n"
            f"VALUES ({', '.join(values)});",
            self._hydrated_select(language, self._id_predicate_raw("LAST_INSERT_ID()")),
        ])

    # ------------------------------------------------------------------
    # UPDATE
    # ------------------------------------------------------------------

    def build_update(
        self,
        id: Any,
        data: Mapping[str, Any],
        use_old_new: bool = False,
    ) -> BuiltQuery:
        """Build an update and a hydrated re-select.

        Args:
            id: Row id
            data: Request body
            use_old_new: Use the old/new audit protocol (``<column>_new``
                keys) instead of the partial COALESCE update

        Raises:
            QueryBuilderError: If nothing would be updated
        """
        id = self._require_id(id, "update")
        data = dict(data or {})
        if use_old_new:
            query, params = self._build_old_new_update(id, data)
        else:
            query, params = self._build_coalesce_update(id, data)
        return self._log_built(QueryType.UPDATE, BuiltQuery(query=query, params=params))

    def _build_coalesce_update(self, id: Any, data: Dict[str, Any]) -> Tuple[str, Dict[str, Any]]:
        config = self.config
        alias = config.table_alias
        columns = self._supplied_columns(data, exclude=_UPDATE_EXCLUDED)

        assignments = [
            f"{alias}.{column.name} = COALESCE({self._column_literal(column, data[column.name])}, {alias}.{column.name})"
            for column in columns
        ]
        if config.uses_shared_primary_key and "object_status_id" in data:
            status = self._id_literal(data["object_status_id"])
            assignments.append(
                f"{OBJECTS_ALIAS}.object_status_id = COALESCE({status}, {OBJECTS_ALIAS}.object_status_id)"
            )

        if not assignments:
            raise validation_error(
                f"No columns to update for {self.entity_type}",
                field="body",
                error_code=ErrorCode.NO_COLUMNS_TO_UPDATE,
                details={"accepted_columns": [c for c in config.column_names if c not in _UPDATE_EXCLUDED]},
            )

        if config.has_updated_at:
            assignments.append(f"{alias}.{UPDATED_AT_COLUMN} = NOW()")

        target = f"{config.table_name} {alias}"
        if config.uses_shared_primary_key:
            target += f"\nJOIN {OBJECTS_TABLE} {OBJECTS_ALIAS} ON {OBJECTS_ALIAS}.id = {alias}.id"

        language = self.resolve_language(_language_params(data))
        query = STATEMENT_SEPARATOR.join([
            f"UPDATE {target}\n"
            f"SET\n    {COLUMN_SEPARATOR.join(assignments)}\n"
            f"WHERE {self._id_predicate(id)};",
            self._hydrated_select(language, self._id_predicate(id)),
        ])
        return query, {"id": id, **data}

    def _build_old_new_update(self, id: Any, data: Dict[str, Any]) -> Tuple[str, Dict[str, Any]]:
        """Audit-oriented update: each trackable column with a ``_new`` value is overwritten.

        Under the ``verify`` policy every changed column also needs its
        ``_old`` value, which becomes a null-safe guard on the UPDATE, and the
        re-select exposes ``affected_rows``.
        """
        config = self.config
        alias = config.table_alias
        verify = self.settings.audit.update_policy == AuditUpdatePolicy.VERIFY

        assignments: List[str] = []
        guards: List[str] = []
        changes: Dict[str, Dict[str, Any]] = {}

        for column in config.trackable_columns:
            found, new_value = self._protocol_value(data, column, NEW_VALUE_SUFFIX)
            if not found:
                continue
            has_old, old_value = self._protocol_value(data, column, OLD_VALUE_SUFFIX)

            assignments.append(f"{alias}.{column.name} = {self._column_literal(column, new_value)}")
            changes[column.name] = {"old": old_value, "new": new_value}

            if verify:
                if not has_old:
                    raise validation_error(
                        f"Missing {column.name}{OLD_VALUE_SUFFIX} for {column.name}{NEW_VALUE_SUFFIX}",
                        field=f"{column.name}{OLD_VALUE_SUFFIX}",
                        error_code=ErrorCode.MISSING_PARAMETER,
                        details={"audit_update_policy": AuditUpdatePolicy.VERIFY.value},
                    )
                guards.append(f"{alias}.{column.name} <=> {self._column_literal(column, old_value)}")

        if not assignments:
            raise validation_error(
                "No columns to update. Provide at least one _new value.",
                field="body",
                error_code=ErrorCode.NO_COLUMNS_TO_UPDATE,
                details={"trackable_columns": [c.name for c in config.trackable_columns]},
            )

        where = self._id_predicate(id)
        if guards:
            where += "\n    AND " + "\n    AND ".join(guards)

        statements = [
            f"UPDATE {config.table_name} {alias}\n"
            f"SET\n    {COLUMN_SEPARATOR.join(assignments)}\n"
            f"WHERE {where};"
        ]
        extra_columns: Tuple[str, ...] = ()
        if verify:
            statements.append(f"SET {AFFECTED_ROWS_VARIABLE} = ROW_COUNT();")
            extra_columns = (f"{AFFECTED_ROWS_VARIABLE} AS affected_rows",)

        language = self.resolve_language(_language_params(data))
        statements.append(self._hydrated_select(language, self._id_predicate(id), extra_columns))

        params = {"id": id, **data, "changes": changes}
        return STATEMENT_SEPARATOR.join(statements), params

    def _protocol_value(self, data: Mapping[str, Any], column: ColumnDefinition, suffix: str) -> Tuple[bool, Any]:
        """Find ``<column><suffix>``, or ``<display name><suffix>`` for translated columns."""
        keys = [f"{column.name}{suffix}"]
        if column.name in self.config.translation_columns:
            keys.append(f"{self.config.translation_label(column.name)}{suffix}")
        for key in keys:
            if key in data:
                return True, data[key]
        return False, None

    # ------------------------------------------------------------------
    # DELETE
    # ------------------------------------------------------------------

    def build_delete(self, id: Any) -> BuiltQuery:
        """Build the delete selected by the entity's delete policy."""
        id = self._require_id(id, "delete")
        config = self.config
        literal = format_value(id)

        if config.supports_soft_delete:
            assignments = [f"{IS_ACTIVE_COLUMN} = 0"]
            if config.has_updated_at:
                assignments.append(f"{UPDATED_AT_COLUMN} = NOW()")
            statement = (
                f"UPDATE {config.table_name}\n"
                f"SET {', '.join(assignments)}\n"
                f"WHERE id = {literal};"
            )
        elif config.uses_object_delete:
            statement = f"DELETE FROM {OBJECTS_TABLE} WHERE id = {literal};"
        else:
            statement = f"DELETE FROM {config.table_name} WHERE id = {literal};"

        query = STATEMENT_SEPARATOR.join([statement, "SELECT 1 AS success"])
        return self._log_built(
            QueryType.DELETE,
            BuiltQuery(query=query, params={"id": id, "delete_policy": config.delete_policy.value}),
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def debug_info(self, params: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
        """Describe translation joins and the language they resolve to."""
        language = self.resolve_language(params)
        return {
            "entity_type": self.entity_type,
            "table_name": self.config.table_name,
            "translation_columns": list(self.config.translation_columns),
            "translation_joins": len(self.config.translation_columns),
            "language": language.to_dict(),
        }

    def _hydrated_select(
        self,
        language: LanguageResolution,
        predicate: str,
        extra_columns: Iterable[str] = (),
    ) -> str:
        columns = build_select_columns(self.config)
        extra = list(extra_columns)
        if extra:
            columns = COLUMN_SEPARATOR.join([columns, *extra])
        return (
            f"SELECT\n    {columns}\n"
            f"FROM {build_from_clause(self.config, language)}\n"
            f"WHERE {predicate}"
        )

    def _id_predicate(self, id: Any) -> str:
        return self._id_predicate_raw(format_value(id))

    def _id_predicate_raw(self, expression: str) -> str:
        return f"{self.config.table_alias}.{PRIMARY_KEY_COLUMN} = {expression}"

    def _supplied_columns(self, data: Mapping[str, Any], exclude: Iterable[str] = ()) -> List[ColumnDefinition]:
        excluded = set(exclude)
        return [
            column for column in self.config.columns
            if column.name in data and column.name not in excluded
        ]

    @staticmethod
    def _id_literal(value: Any) -> str:
        return format_value(coerce_identifier_value(value))

    @staticmethod
    def _column_literal(column: ColumnDefinition, value: Any) -> str:
        """Render a column value; digit-only strings become numbers only for integer columns."""
        if column.type in _INTEGER_TYPES:
            value = coerce_identifier_value(value)
        return format_value(value)
