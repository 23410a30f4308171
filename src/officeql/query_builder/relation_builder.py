"""Hydrated listing of the objects an object is related to.

``object_relations`` rows only carry object ids. ``build_select_related``
returns each relation together with the object it points at: one
``UNION ALL`` branch per shared primary key entity, each branch inner-joining
its own table so only relations to that entity type survive it. Columns of
the other entities are projected as ``NULL`` so every branch has the same
shape.
"""

from typing import Any, Dict, List, Mapping, Optional, Tuple

from officeql.common import configuration_error, missing_parameter_error
from officeql.constants import QueryType
from officeql.constants.sql import (
    IS_ACTIVE_COLUMN,
    OBJECT_RELATION_TYPES_TABLE,
    OBJECT_STATUSES_TABLE,
    OBJECT_TYPES_TABLE,
    OBJECTS_TABLE,
    PRIMARY_KEY_COLUMN,
    TRANSLATIONS_TABLE,
)
from officeql.logging import get_logger
from officeql.query_builder.clauses import (
    COLUMN_SEPARATOR,
    LanguageResolution,
    build_where_clause,
    translation_alias,
)
from officeql.query_builder.entity_builder import EntityQueryBuilder
from officeql.query_builder.formatter import coerce_identifier_value, format_value
from officeql.query_builder.types import BuiltQuery
from officeql.schema import EntityConfig
from officeql.settings import _Settings

logger = get_logger(__name__)

RELATED_OBJECT_ALIAS = "o_to"
OBJECT_TYPE_ALIAS = "ot"
OBJECT_STATUS_ALIAS = "os"
RELATION_TYPE_ALIAS = "ort"
NAME_ALIAS_SUFFIX = "_name"
DISPLAY_NAME_COLUMN = "related_object_display_name"
UNION_SEPARATOR = "\n\nUNION ALL\n\n"

# Relation columns projected under their own name; the rest get a relation_ prefix
_LINK_COLUMNS = frozenset({"object_from_id", "object_to_id", "object_relation_type_id"})
_RELATION_FILTERS = (IS_ACTIVE_COLUMN, "object_relation_type_id", "object_to_id")


def _reserved_aliases(relation_alias: str) -> frozenset:
    aliases = {relation_alias, RELATED_OBJECT_ALIAS}
    for alias in (OBJECT_TYPE_ALIAS, OBJECT_STATUS_ALIAS, RELATION_TYPE_ALIAS):
        aliases.update({alias, f"{alias}{NAME_ALIAS_SUFFIX}"})
    return frozenset(aliases)


class RelationQueryBuilder(EntityQueryBuilder):
    """Entity builder for ``object_relations`` that can hydrate the related objects.

    Plain list, insert, update and delete behave exactly like any other
    child entity. ``build_select_related`` adds the per-entity-type join.
    """

    def __init__(
        self,
        config: EntityConfig,
        settings: _Settings,
        related_entities: Mapping[str, EntityConfig],
        entity_type: Optional[str] = None,
    ):
        super().__init__(config, settings, entity_type=entity_type)
        self.related_entities: Dict[str, EntityConfig] = {
            name: related for name, related in related_entities.items()
            if related.uses_shared_primary_key
        }

        reserved = _reserved_aliases(config.table_alias)
        clashes = sorted(
            name for name, related in self.related_entities.items()
            if related.table_alias in reserved
        )
        if clashes:
            raise configuration_error(
                f"Entity aliases clash with relation join aliases: {clashes}",
                config_key="table_alias",
                details={"reserved": sorted(reserved)},
            )

    def build_select_related(self, params: Optional[Mapping[str, Any]] = None) -> BuiltQuery:
        """List the relations of one object together with the objects they point at.

        Args:
            params: ``object_from_id`` (or ``object_id``), optional
                ``object_relation_type_id``, ``object_to_id`` and ``is_active``,
                plus ``language_id``/``language_code`` for the type, status
                and relation type names

        Returns:
            BuiltQuery ordered by the relations' default sort; every row has a
            ``related_object_display_name``

        Raises:
            QueryBuilderError: MISSING_PARAMETER without ``object_from_id``,
                CONFIG_ERROR when no shared primary key entity is registered
        """
        params = params or {}
        object_from_id = params.get("object_from_id")
        if object_from_id is None:
            object_from_id = params.get("object_id")
        if object_from_id is None or (isinstance(object_from_id, str) and not object_from_id.strip()):
            raise missing_parameter_error("object_from_id", f"select related objects of {self.entity_type}")
        if not self.related_entities:
            raise configuration_error(
                "No shared primary key entities registered for relation hydration",
                config_key="entities",
            )

        language = self.resolve_language(params)
        filters = {key: params.get(key) for key in _RELATION_FILTERS}
        filters["object_id"] = coerce_identifier_value(object_from_id)
        where_clause, where_params = build_where_clause(self.config, filters)
        where_params["object_from_id"] = where_params.pop("object_id")

        entity_columns = self._entity_columns()
        branches = [
            self._related_branch(related, entity_columns, language, where_clause)
            for related in self.related_entities.values()
        ]
        sort_column = self._relation_label(self.config.default_sort_column)
        query = (
            UNION_SEPARATOR.join(branches)
            + f"\nORDER BY {sort_column} {self.config.default_sort_direction.value}"
        )

        logger.debug(
            "Hydrating relations across %d entity types",
            len(branches),
            extra={"entity_types": list(self.related_entities)},
        )
        return self._log_built(QueryType.SELECT, BuiltQuery(query=query, params=where_params))

    def debug_info(self, params: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
        info = super().debug_info(params)
        info["related_entities"] = list(self.related_entities)
        return info

    def _entity_columns(self) -> List[Tuple[EntityConfig, str]]:
        return [
            (related, column)
            for related in self.related_entities.values()
            for column in related.default_select_columns
        ]

    def _relation_label(self, column: str) -> str:
        return column if column in _LINK_COLUMNS else f"relation_{column}"

    def _relation_columns(self) -> List[str]:
        alias = self.config.table_alias
        columns = []
        for column in self.config.default_select_columns:
            label = self._relation_label(column)
            columns.append(f"{alias}.{column}" if label == column else f"{alias}.{column} AS {label}")
        return columns

    def _related_branch(
        self,
        related: EntityConfig,
        entity_columns: List[Tuple[EntityConfig, str]],
        language: LanguageResolution,
        where_clause: str,
    ) -> str:
        rel = self.config.table_alias
        obj = RELATED_OBJECT_ALIAS
        alias = related.table_alias
        type_name = f"{OBJECT_TYPE_ALIAS}{NAME_ALIAS_SUFFIX}"
        status_name = f"{OBJECT_STATUS_ALIAS}{NAME_ALIAS_SUFFIX}"
        relation_type_name = f"{RELATION_TYPE_ALIAS}{NAME_ALIAS_SUFFIX}"

        columns = self._relation_columns() + [
            f"{obj}.{PRIMARY_KEY_COLUMN} AS related_object_id",
            f"{obj}.object_type_id",
            f"{OBJECT_TYPE_ALIAS}.code AS object_type_code",
            f"{type_name}.text AS object_type_name",
            f"{obj}.object_status_id",
            f"{OBJECT_STATUS_ALIAS}.code AS object_status_code",
            f"{status_name}.text AS object_status_name",
            f"{RELATION_TYPE_ALIAS}.code AS relation_type_code",
            f"{relation_type_name}.text AS relation_type_name",
        ]
        for owner, column in entity_columns:
            source = f"{owner.table_alias}.{column}" if owner is related else "NULL"
            columns.append(f"{source} AS {owner.table_alias}_{column}")
        columns.append(f"{self._display_name(related)} AS {DISPLAY_NAME_COLUMN}")

        lines = [
            f"SELECT\n    {COLUMN_SEPARATOR.join(columns)}",
            f"FROM {self.config.table_name} {rel}",
            f"INNER JOIN {OBJECTS_TABLE} {obj} ON {obj}.id = {rel}.object_to_id",
            f"INNER JOIN {OBJECT_TYPES_TABLE} {OBJECT_TYPE_ALIAS} "
            f"ON {OBJECT_TYPE_ALIAS}.id = {obj}.object_type_id "
            f"AND {OBJECT_TYPE_ALIAS}.code = {format_value(related.object_type_code)}",
            _translation_join(type_name, f"{OBJECT_TYPE_ALIAS}.code", language),
            f"LEFT JOIN {OBJECT_STATUSES_TABLE} {OBJECT_STATUS_ALIAS} "
            f"ON {OBJECT_STATUS_ALIAS}.id = {obj}.object_status_id",
            _translation_join(status_name, f"{OBJECT_STATUS_ALIAS}.code", language),
            f"INNER JOIN {OBJECT_RELATION_TYPES_TABLE} {RELATION_TYPE_ALIAS} "
            f"ON {RELATION_TYPE_ALIAS}.id = {rel}.object_relation_type_id",
            _translation_join(relation_type_name, f"{RELATION_TYPE_ALIAS}.code", language),
            f"INNER JOIN {related.table_name} {alias} ON {alias}.id = {obj}.id",
        ]
        lines.extend(
            _translation_join(translation_alias(column), f"{alias}.{column}", language)
            for column in related.translation_columns
        )
        if where_clause:
            lines.append(where_clause)
        return "\n".join(lines)

    @staticmethod
    def _display_name(related: EntityConfig) -> str:
        """Display expression: the configured columns, or ``<type code> #<id>``."""
        alias = related.table_alias
        parts = []
        for column in related.display_name_columns:
            if column in related.translation_columns:
                parts.append(f"COALESCE({translation_alias(column)}.text, {alias}.{column})")
            else:
                parts.append(f"{alias}.{column}")

        if not parts:
            return f"CONCAT({format_value(related.object_type_code)}, ' #', {alias}.{PRIMARY_KEY_COLUMN})"
        if len(parts) == 1:
            return parts[0]
        return f"CONCAT_WS(' ', {', '.join(parts)})"


def _translation_join(alias: str, code_expression: str, language: LanguageResolution) -> str:
    return (
        f"LEFT JOIN {TRANSLATIONS_TABLE} {alias} "
        f"ON {alias}.code = {code_expression} "
        f"AND {alias}.language_id = {language.condition}"
    )
