"""Statement builder for code-keyed lookup (reference) tables."""

from typing import Any, Dict, List, Mapping, Optional

from officeql.common import missing_parameter_error
from officeql.constants import QueryType
from officeql.constants.sql import IS_ACTIVE_COLUMN, TRANSLATIONS_TABLE
from officeql.query_builder.base import BaseQueryBuilder
from officeql.query_builder.clauses import COLUMN_SEPARATOR, CONDITION_SEPARATOR
from officeql.query_builder.formatter import (
    coerce_identifier_value,
    format_bool_flag,
    format_value,
    parse_int,
)
from officeql.query_builder.types import BuiltQuery
from officeql.schema import LookupTableConfig
from officeql.settings import _Settings

LOOKUP_ALIAS = "lt"
TRANSLATION_ALIAS = "t"


class LookupQueryBuilder(BaseQueryBuilder):
    """Builds statements for one lookup table.

    Lookup rows carry ``id``, ``code``, ``is_active`` and the table's extra
    columns. The display name is joined from ``translations`` by ``code``
    unless the table is untranslated. Deletes are always soft.
    """

    def __init__(self, lookup: LookupTableConfig, settings: _Settings):
        super().__init__(settings)
        self.lookup = lookup
        self.table_name = lookup.table_name

    @property
    def target(self) -> str:
        return f"lookup:{self.lookup.name}"

    @property
    def is_translated(self) -> bool:
        return (
            self.lookup.translated
            and self.table_name not in self.settings.translation.untranslated_lookups
        )

    def build_select(self, params: Optional[Mapping[str, Any]] = None) -> BuiltQuery:
        params = params or {}
        columns = [f"{LOOKUP_ALIAS}.id", f"{LOOKUP_ALIAS}.code", f"{LOOKUP_ALIAS}.{IS_ACTIVE_COLUMN}"]
        columns += [f"{LOOKUP_ALIAS}.{column}" for column in self.lookup.extra_columns]

        from_clause = f"{self.table_name} {LOOKUP_ALIAS}"
        built_params: Dict[str, Any] = {}
        if self.is_translated:
            language = self.resolve_language(params)
            columns.append(f"{TRANSLATION_ALIAS}.text AS name")
            from_clause += (
                f"\nLEFT JOIN {TRANSLATIONS_TABLE} {TRANSLATION_ALIAS} "
                f"ON {TRANSLATION_ALIAS}.code = {LOOKUP_ALIAS}.code "
                f"AND {TRANSLATION_ALIAS}.language_id = {language.condition}"
            )
            built_params["language"] = language.to_dict()

        active = params.get(IS_ACTIVE_COLUMN)
        flag = format_bool_flag(active) if active is not None else "1"
        conditions = [f"{LOOKUP_ALIAS}.{IS_ACTIVE_COLUMN} = {flag}"]
        built_params[IS_ACTIVE_COLUMN] = int(flag)

        for column in self.lookup.filter_columns:
            value = params.get(column)
            if value in (None, ""):
                continue
            value = coerce_identifier_value(value)
            conditions.append(f"{LOOKUP_ALIAS}.{column} = {format_value(value)}")
            built_params[column] = value

        query = (
            f"SELECT\n    {COLUMN_SEPARATOR.join(columns)}\n"
            f"FROM {from_clause}\n"
            f"WHERE {CONDITION_SEPARATOR.join(conditions)}\n"
            f"ORDER BY {LOOKUP_ALIAS}.code"
        )
        return self._log_built(QueryType.SELECT, BuiltQuery(query=query, params=built_params))

    def build_select_by_id(self, id: Any, params: Optional[Mapping[str, Any]] = None) -> BuiltQuery:
        id = self._require_id(id, "select by id")
        query = f"SELECT * FROM {self.table_name} WHERE id = {format_value(id)}"
        return self._log_built(QueryType.SELECT_BY_ID, BuiltQuery(query=query, params={"id": id}))

    def build_insert(self, data: Mapping[str, Any]) -> BuiltQuery:
        """Insert a lookup row, optionally upserting its display text.

        Raises:
            QueryBuilderError: MISSING_PARAMETER if ``code`` is absent
        """
        data = dict(data or {})
        code = data.get("code")
        if code in (None, ""):
            raise missing_parameter_error("code", f"insert into {self.table_name}")

        active = data.get(IS_ACTIVE_COLUMN)
        names = ["code", IS_ACTIVE_COLUMN]
        values = [format_value(code), format_bool_flag(active) if active is not None else "1"]
        for column in self.lookup.extra_columns:
            if column in data:
                names.append(column)
                values.append(format_value(coerce_identifier_value(data[column])))

        # lookup codes reference translations(code), so the text row goes first
        statements = []
        translation = self._translation_upsert(data, code_source=format_value(code))
        if translation:
            statements.append(translation)
        statements.append(
            f"INSERT INTO {self.table_name} ({', '.join(names)})\n"
            f"VALUES ({', '.join(values)});"
        )
        statements.append(f"SELECT * FROM {self.table_name} WHERE id = LAST_INSERT_ID()")

        return self._log_built(QueryType.INSERT, BuiltQuery(query="\n\n".join(statements), params=data))

    def build_update(self, id: Any, data: Mapping[str, Any], use_old_new: bool = False) -> BuiltQuery:
        """Update code, active flag and extra columns, optionally upserting display text.

        ``use_old_new`` is accepted for interface parity; lookup rows are not
        audited.
        """
        id = self._require_id(id, "update")
        data = dict(data or {})
        literal_id = format_value(id)

        assignments: List[str] = []
        if "code" in data:
            assignments.append(f"code = {format_value(data['code'])}")
        if data.get(IS_ACTIVE_COLUMN) is not None:
            assignments.append(f"{IS_ACTIVE_COLUMN} = {format_bool_flag(data[IS_ACTIVE_COLUMN])}")
        for column in self.lookup.extra_columns:
            if column in data:
                assignments.append(f"{column} = {format_value(coerce_identifier_value(data[column]))}")

        statements = [
            f"UPDATE {self.table_name}\n"
            f"SET {', '.join(assignments) if assignments else 'id = id'}\n"
            f"WHERE id = {literal_id};"
        ]
        translation = self._translation_upsert(data, row_id=literal_id)
        if translation:
            statements.append(translation)
        statements.append(f"SELECT * FROM {self.table_name} WHERE id = {literal_id}")

        return self._log_built(
            QueryType.UPDATE,
            BuiltQuery(query="\n\n".join(statements), params={"id": id, **data}),
        )

    def build_delete(self, id: Any) -> BuiltQuery:
        id = self._require_id(id, "delete")
        query = (
            f"UPDATE {self.table_name}\n"
            f"SET {IS_ACTIVE_COLUMN} = 0\n"
            f"WHERE id = {format_value(id)};\n\n"
            f"SELECT 1 AS success"
        )
        return self._log_built(QueryType.DELETE, BuiltQuery(query=query, params={"id": id}))

    def _translation_upsert(
        self,
        data: Mapping[str, Any],
        code_source: Optional[str] = None,
        row_id: Optional[str] = None,
    ) -> Optional[str]:
        """Upsert statement for the row's display text, when ``text`` and ``language_id`` are given.

        On insert the code literal is known; on update the code is read from
        the row being updated.
        """
        text = data.get("text")
        language_id = parse_int(data.get("language_id"))
        if not text or language_id is None:
            return None

        text_literal = format_value(text)
        if code_source is not None:
            source = f"VALUES ({code_source}, {language_id}, {text_literal})"
        else:
            source = f"SELECT code, {language_id}, {text_literal}\nFROM {self.table_name} WHERE id = {row_id}"

        return (
            f"INSERT INTO {TRANSLATIONS_TABLE} (code, language_id, text)\n"
            f"{source}\n"
            f"ON DUPLICATE KEY UPDATE text = {text_literal};"
        )
