"""Clause fragments shared by the entity statement builder.

Each function renders one clause of a statement from an ``EntityConfig`` and
the request parameters. Values are always rendered through
``format_value``; identifiers always come from the validated configuration.
"""

from typing import Any, Dict, List, Mapping, Optional, Tuple

from pydantic import Field

from officeql.constants import ColumnType, SortDirection
from officeql.constants.sql import (
    IS_ACTIVE_COLUMN,
    LANGUAGES_TABLE,
    OBJECTS_ALIAS,
    TRANSLATION_ALIAS_PREFIX,
    TRANSLATIONS_TABLE,
)
from officeql.logging import get_logger
from officeql.query_builder.formatter import (
    coerce_identifier_value,
    format_bool_flag,
    format_value,
    parse_int,
)
from officeql.schema import EntityConfig
from officeql.settings import PaginationSettings
from officeql.types import OfficeQLBaseModel

logger = get_logger(__name__)

COLUMN_SEPARATOR = ",\n    "
CONDITION_SEPARATOR = "\n    AND "


class LanguageResolution(OfficeQLBaseModel):
    """Outcome of language resolution for translation joins.

    Attributes:
        source: ``language_id``, ``language_code`` or ``default``
        value: The request value that was used (or the default id)
        condition: SQL expression compared with ``translations.language_id``
    """
    source: str
    value: Any = None
    condition: str


class PaginationClause(OfficeQLBaseModel):
    limit_clause: str
    page: int = Field(ge=1)
    per_page: int = Field(ge=1)
    offset: int = Field(ge=0)

    def as_params(self) -> Dict[str, int]:
        return {"page": self.page, "per_page": self.per_page, "offset": self.offset}


def _present(params: Mapping[str, Any], key: str) -> bool:
    return params.get(key) is not None


def resolve_language(params: Optional[Mapping[str, Any]], default_language_id: int) -> LanguageResolution:
    """Decide which language translation joins use.

    Precedence: a numeric ``language_id``, then ``language_code`` through a
    subquery on ``languages``, then the configured default. A non-numeric
    ``language_id`` is ignored.
    """
    params = params or {}

    language_id = parse_int(params.get("language_id"))
    if language_id is not None:
        return LanguageResolution(source="language_id", value=language_id, condition=str(language_id))

    language_code = params.get("language_code")
    if language_code is not None and str(language_code).strip():
        code = str(language_code).strip().lower()
        return LanguageResolution(
            source="language_code",
            value=code,
            condition=(
                f"(SELECT id FROM {LANGUAGES_TABLE} "
                f"WHERE LOWER(code) = LOWER({format_value(code)}) LIMIT 1)"
            ),
        )

    return LanguageResolution(
        source="default", value=default_language_id, condition=str(int(default_language_id))
    )


def translation_alias(column: str) -> str:
    return f"{TRANSLATION_ALIAS_PREFIX}{column}"


def build_select_columns(config: EntityConfig) -> str:
    """Render the projection list: entity columns, translated text, join columns."""
    alias = config.table_alias
    columns: List[str] = []

    for column in config.default_select_columns:
        columns.append(f"{alias}.{column}")
        if column in config.translation_columns:
            columns.append(
                f"COALESCE({translation_alias(column)}.text, {alias}.{column}) "
                f"AS {config.translation_label(column)}"
            )

    for join in config.joins:
        columns.extend(f"{join.alias}.{column}" for column in join.columns)

    return COLUMN_SEPARATOR.join(columns)


def build_from_clause(config: EntityConfig, language: LanguageResolution) -> str:
    """Render ``table alias`` followed by configured joins and translation joins."""
    alias = config.table_alias
    lines = [f"{config.table_name} {alias}"]
    lines.extend(join.render() for join in config.joins)

    for column in config.translation_columns:
        t_alias = translation_alias(column)
        lines.append(
            f"LEFT JOIN {TRANSLATIONS_TABLE} {t_alias} "
            f"ON {t_alias}.code = {alias}.{column} "
            f"AND {t_alias}.language_id = {language.condition}"
        )

    return "\n".join(lines)


def build_where_clause(config: EntityConfig, params: Optional[Mapping[str, Any]]) -> Tuple[str, Dict[str, Any]]:
    """Render the WHERE clause of a list query.

    Conditions are ANDed in a fixed order: search, active flag, object
    status, parent object, configured equality filters.

    Returns:
        Tuple of the clause text (empty when there are no conditions) and
        the filter values that were applied
    """
    params = params or {}
    alias = config.table_alias
    conditions: List[str] = []
    where_params: Dict[str, Any] = {}

    search = params.get("search")
    if search not in (None, "") and config.search_columns:
        pattern = format_value(f"%{search}%")
        matches = [f"{alias}.{column} LIKE {pattern}" for column in config.search_columns]
        conditions.append(f"({' OR '.join(matches)})")
        where_params["search"] = search

    if config.supports_soft_delete:
        if _present(params, IS_ACTIVE_COLUMN):
            flag = format_bool_flag(params[IS_ACTIVE_COLUMN])
            where_params[IS_ACTIVE_COLUMN] = int(flag)
        else:
            flag = "1"
        conditions.append(f"{alias}.{IS_ACTIVE_COLUMN} = {flag}")

    if config.uses_shared_primary_key and _present(params, "object_status_id"):
        value = coerce_identifier_value(params["object_status_id"])
        conditions.append(f"{OBJECTS_ALIAS}.object_status_id = {format_value(value)}")
        where_params["object_status_id"] = value

    if config.parent_column and _present(params, "object_id"):
        value = coerce_identifier_value(params["object_id"])
        conditions.append(f"{alias}.{config.parent_column} = {format_value(value)}")
        where_params["object_id"] = value

    for column in config.filter_columns:
        if column == config.parent_column or not _present(params, column):
            continue
        definition = config.get_column(column)
        if definition is not None and definition.type == ColumnType.BOOLEAN:
            flag = format_bool_flag(params[column])
            conditions.append(f"{alias}.{column} = {flag}")
            where_params[column] = int(flag)
            continue
        value = coerce_identifier_value(params[column])
        conditions.append(f"{alias}.{column} = {format_value(value)}")
        where_params[column] = value

    if not conditions:
        return "", where_params
    return f"WHERE {CONDITION_SEPARATOR.join(conditions)}", where_params


def resolve_sort(config: EntityConfig, params: Optional[Mapping[str, Any]]) -> Tuple[str, SortDirection]:
    """Validate ``sort_by``/``sort_dir`` against the entity, falling back to its defaults."""
    params = params or {}
    column = config.default_sort_column
    direction = config.default_sort_direction

    sort_by = params.get("sort_by")
    if sort_by:
        if config.has_column(str(sort_by)):
            column = str(sort_by)
        else:
            logger.warning(
                "Ignoring unknown sort column",
                extra={"entity": config.table_name, "sort_by": str(sort_by)},
            )

    sort_dir = params.get("sort_dir")
    if sort_dir:
        try:
            direction = SortDirection(str(sort_dir).strip().upper())
        except ValueError:
            logger.warning(
                "Ignoring invalid sort direction",
                extra={"entity": config.table_name, "sort_dir": str(sort_dir)},
            )

    return column, direction


def build_order_by_clause(config: EntityConfig, params: Optional[Mapping[str, Any]]) -> str:
    alias = config.table_alias
    column, direction = resolve_sort(config, params)

    terms = []
    if config.pinned_column:
        terms.append(f"{alias}.{config.pinned_column} {SortDirection.DESC.value}")
    if column != config.pinned_column:
        terms.append(f"{alias}.{column} {direction.value}")

    return f"ORDER BY {', '.join(terms)}"


def build_pagination_clause(params: Optional[Mapping[str, Any]], pagination: PaginationSettings) -> PaginationClause:
    """Render ``LIMIT n OFFSET m``.

    ``page`` is clamped to at least 1. A missing, zero or non-numeric
    ``per_page`` takes the default page size; the result is then clamped to
    ``[1, max_page_size]``.
    """
    params = params or {}

    page = max(1, parse_int(params.get("page")) or 1)

    per_page = parse_int(params.get("per_page")) or pagination.default_page_size
    per_page = min(pagination.max_page_size, max(1, per_page))

    offset = (page - 1) * per_page
    return PaginationClause(
        limit_clause=f"LIMIT {per_page} OFFSET {offset}",
        page=page,
        per_page=per_page,
        offset=offset,
    )
