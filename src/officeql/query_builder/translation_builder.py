"""Statement builder for the ``translations`` table.

Translations are addressed by the composite key ``(code, language_id)``.
"""

from typing import Any, Dict, List, Mapping, Optional, Tuple

from officeql.common import ErrorCode, missing_parameter_error, validation_error
from officeql.constants import QueryType
from officeql.constants.sql import TRANSLATIONS_TABLE
from officeql.query_builder.base import BaseQueryBuilder
from officeql.query_builder.formatter import format_value, parse_int
from officeql.query_builder.types import BuiltQuery

_COLUMNS = "code, language_id, text"


class TranslationQueryBuilder(BaseQueryBuilder):
    """Builds select, insert, update, delete and upsert for translations."""

    @property
    def target(self) -> str:
        return TRANSLATIONS_TABLE

    def build_select(self, params: Optional[Mapping[str, Any]] = None) -> BuiltQuery:
        params = params or {}
        conditions: List[str] = []
        built_params: Dict[str, Any] = {}

        code = params.get("code")
        if code:
            conditions.append(f"code = {format_value(str(code))}")
            built_params["code"] = code

        if params.get("language_id") not in (None, ""):
            language_id = self._language_id(params.get("language_id"), "select")
            conditions.append(f"language_id = {language_id}")
            built_params["language_id"] = language_id

        lines = [f"SELECT {_COLUMNS}", f"FROM {TRANSLATIONS_TABLE}"]
        if conditions:
            lines.append(f"WHERE {' AND '.join(conditions)}")
        lines.append("ORDER BY code, language_id")
        return self._log_built(QueryType.SELECT, BuiltQuery(query="\n".join(lines), params=built_params))

    def build_select_by_id(self, code: Any, language_id: Any = None) -> BuiltQuery:
        """Select one translation by its ``(code, language_id)`` key."""
        code, language_id = self._key(code, language_id, "select by key")
        query = (
            f"SELECT {_COLUMNS}\n"
            f"FROM {TRANSLATIONS_TABLE}\n"
            f"WHERE {self._key_predicate(code, language_id)}"
        )
        return self._log_built(
            QueryType.SELECT_BY_ID,
            BuiltQuery(query=query, params={"code": code, "language_id": language_id}),
        )

    build_select_by_key = build_select_by_id

    def build_insert(self, data: Mapping[str, Any]) -> BuiltQuery:
        data = dict(data or {})
        code, language_id = self._key(data.get("code"), data.get("language_id"), "insert")
        text = self._text(data, "insert")
        query = (
            f"INSERT INTO {TRANSLATIONS_TABLE} ({_COLUMNS})\n"
            f"VALUES ({format_value(code)}, {language_id}, {format_value(text)});\n\n"
            f"{self._reselect(code, language_id)}"
        )
        return self._log_built(QueryType.INSERT, BuiltQuery(query=query, params=data))

    def build_update(self, code: Any, language_id: Any, data: Mapping[str, Any]) -> BuiltQuery:
        data = dict(data or {})
        code, language_id = self._key(code, language_id, "update")
        text = self._text(data, "update")
        query = (
            f"UPDATE {TRANSLATIONS_TABLE}\n"
            f"SET text = {format_value(text)}\n"
            f"WHERE {self._key_predicate(code, language_id)};\n\n"
            f"{self._reselect(code, language_id)}"
        )
        return self._log_built(
            QueryType.UPDATE,
            BuiltQuery(query=query, params={**data, "code": code, "language_id": language_id}),
        )

    def build_delete(self, code: Any, language_id: Any = None) -> BuiltQuery:
        code, language_id = self._key(code, language_id, "delete")
        query = (
            f"DELETE FROM {TRANSLATIONS_TABLE}\n"
            f"WHERE {self._key_predicate(code, language_id)};\n\n"
            f"SELECT 1 AS success"
        )
        return self._log_built(
            QueryType.DELETE,
            BuiltQuery(query=query, params={"code": code, "language_id": language_id}),
        )

    def build_upsert(self, data: Mapping[str, Any]) -> BuiltQuery:
        """Insert a translation or replace its text when the key already exists."""
        data = dict(data or {})
        code, language_id = self._key(data.get("code"), data.get("language_id"), "upsert")
        text = format_value(self._text(data, "upsert"))
        query = (
            f"INSERT INTO {TRANSLATIONS_TABLE} ({_COLUMNS})\n"
            f"VALUES ({format_value(code)}, {language_id}, {text})\n"
            f"ON DUPLICATE KEY UPDATE text = {text};\n\n"
            f"{self._reselect(code, language_id)}"
        )
        return self._log_built(QueryType.UPSERT, BuiltQuery(query=query, params=data))

    def _key(self, code: Any, language_id: Any, operation: str) -> Tuple[str, int]:
        if code is None or not str(code).strip():
            raise missing_parameter_error("code", f"translation {operation}")
        if language_id is None or language_id == "":
            raise missing_parameter_error("language_id", f"translation {operation}")
        return str(code), self._language_id(language_id, operation)

    @staticmethod
    def _language_id(value: Any, operation: str) -> int:
        language_id = parse_int(value)
        if language_id is None:
            raise validation_error(
                f"language_id must be an integer for translation {operation}",
                field="language_id",
                value=value,
                error_code=ErrorCode.INVALID_ARGUMENT,
            )
        return language_id

    @staticmethod
    def _text(data: Mapping[str, Any], operation: str) -> str:
        text = data.get("text")
        if text is None:
            raise missing_parameter_error("text", f"translation {operation}")
        return str(text)

    @staticmethod
    def _key_predicate(code: str, language_id: int) -> str:
        return f"code = {format_value(code)} AND language_id = {language_id}"

    def _reselect(self, code: str, language_id: int) -> str:
        return f"SELECT * FROM {TRANSLATIONS_TABLE} WHERE {self._key_predicate(code, language_id)}"
