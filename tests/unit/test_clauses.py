"""Unit tests for clause builders."""

import logging

import pytest

from officeql.constants import SortDirection
from officeql.query_builder.clauses import (
    build_from_clause,
    build_order_by_clause,
    build_pagination_clause,
    build_select_columns,
    build_where_clause,
    resolve_language,
    resolve_sort,
)


class TestResolveLanguage:

    def test_language_id_beats_language_code(self):
        language = resolve_language({"language_id": 2, "language_code": "de"}, 1)
        assert language.source == "language_id"
        assert language.condition == "2"

    def test_numeric_string_language_id(self):
        assert resolve_language({"language_id": "3"}, 1).condition == "3"

    def test_language_code_uses_subquery(self):
        language = resolve_language({"language_code": " DE "}, 1)
        assert language.source == "language_code"
        assert language.condition == (
            "(SELECT id FROM languages WHERE LOWER(code) = LOWER('de') LIMIT 1)"
        )

    def test_language_code_is_escaped(self):
        language = resolve_language({"language_code": "x' OR '1'='1"}, 1)
        assert "LOWER('x\\' or \\'1\\'=\\'1')" in language.condition

    def test_default_when_absent(self):
        language = resolve_language({}, 1)
        assert language.source == "default"
        assert language.condition == "1"

    def test_configured_default(self):
        assert resolve_language(None, 4).condition == "4"

    def test_non_numeric_language_id_is_ignored(self):
        language = resolve_language({"language_id": "en", "language_code": "hu"}, 1)
        assert language.source == "language_code"


class TestSelectAndFrom:

    def test_persons_columns_include_object_join_columns(self, registry):
        columns = build_select_columns(registry.get_entity("persons"))
        lines = columns.split(",\n    ")
        assert lines[0] == "p.id"
        assert lines[-2:] == ["o.object_status_id", "o.object_type_id"]

    def test_translation_columns_add_coalesce(self, registry):
        columns = build_select_columns(registry.get_entity("documents"))
        assert "d.title_code,\n    COALESCE(t_title_code.text, d.title_code) AS title" in columns

    def test_from_clause_has_translation_join(self, registry):
        documents = registry.get_entity("documents")
        clause = build_from_clause(documents, resolve_language({"language_id": 2}, 1))
        assert clause.splitlines() == [
            "documents d",
            "INNER JOIN objects o ON o.id = d.id",
            "LEFT JOIN translations t_title_code ON t_title_code.code = d.title_code "
            "AND t_title_code.language_id = 2",
        ]

    def test_notes_have_one_join_per_translated_column(self, registry):
        clause = build_from_clause(registry.get_entity("object_notes"), resolve_language({}, 1))
        assert clause.count("LEFT JOIN translations") == 2
        assert "t_note_text_code.code = n.note_text_code" in clause


class TestWhereClause:

    def test_search_over_search_columns(self, registry):
        clause, params = build_where_clause(registry.get_entity("persons"), {"search": "Doe"})
        assert clause == "WHERE (p.first_name LIKE '%Doe%' OR p.last_name LIKE '%Doe%')"
        assert params == {"search": "Doe"}

    def test_search_value_is_escaped(self, registry):
        clause, _ = build_where_clause(registry.get_entity("persons"), {"search": "O'Neil"})
        assert "LIKE '%O\\'Neil%'" in clause

    def test_no_conditions_gives_empty_clause(self, registry):
        assert build_where_clause(registry.get_entity("persons"), {}) == ("", {})

    def test_soft_delete_defaults_to_active(self, registry):
        clause, _ = build_where_clause(registry.get_entity("object_contacts"), {})
        assert clause == "WHERE oc.is_active = 1"

    @pytest.mark.parametrize("value", ["0", "false", 0, False])
    def test_inactive_rows_on_request(self, registry, value):
        clause, params = build_where_clause(registry.get_entity("object_contacts"), {"is_active": value})
        assert clause == "WHERE oc.is_active = 0"
        assert params["is_active"] == 0

    def test_conditions_are_anded_in_order(self, registry):
        clause, params = build_where_clause(
            registry.get_entity("transactions"),
            {"search": "rent", "object_status_id": "3", "transaction_type_id": 2},
        )
        assert clause == (
            "WHERE (t.note LIKE '%rent%')\n"
            "    AND t.is_active = 1\n"
            "    AND o.object_status_id = 3\n"
            "    AND t.transaction_type_id = 2"
        )
        assert params["object_status_id"] == 3

    def test_object_id_uses_parent_column(self, registry):
        clause, _ = build_where_clause(registry.get_entity("object_addresses"), {"object_id": "17"})
        assert "a.object_id = 17" in clause

    def test_relations_parent_column(self, registry):
        clause, _ = build_where_clause(registry.get_entity("object_relations"), {"object_id": 5})
        assert "rel.object_from_id = 5" in clause

    def test_object_status_ignored_for_child_entities(self, registry):
        clause, params = build_where_clause(registry.get_entity("object_addresses"), {"object_status_id": 1})
        assert "object_status_id" not in clause
        assert "object_status_id" not in params

    @pytest.mark.parametrize("value,flag", [("true", 1), ("false", 0), ("0", 0), ("1", 1), (True, 1)])
    def test_boolean_filters_render_flags(self, registry, value, flag):
        clause, params = build_where_clause(
            registry.get_entity("invoices"), {"is_paid": value, "is_void": value},
        )
        assert clause == f"WHERE i.is_paid = {flag}\n    AND i.is_void = {flag}"
        assert params == {"is_paid": flag, "is_void": flag}

    @pytest.mark.parametrize("value,flag", [("true", 1), ("false", 0), ("0", 0)])
    def test_pinned_filter_renders_flag(self, registry, value, flag):
        clause, params = build_where_clause(registry.get_entity("object_notes"), {"is_pinned": value})
        assert f"n.is_pinned = {flag}" in clause
        assert "'" not in clause
        assert params["is_pinned"] == flag

    def test_unconfigured_filter_is_ignored(self, registry):
        clause, _ = build_where_clause(registry.get_entity("persons"), {"company_name": "x"})
        assert clause == ""


class TestOrderBy:

    def test_default_sort(self, registry):
        assert build_order_by_clause(registry.get_entity("persons"), {}) == "ORDER BY p.last_name ASC"

    def test_requested_sort(self, registry):
        clause = build_order_by_clause(registry.get_entity("persons"), {"sort_by": "birth_date", "sort_dir": "desc"})
        assert clause == "ORDER BY p.birth_date DESC"

    def test_unknown_sort_column_falls_back(self, registry, caplog):
        with caplog.at_level(logging.WARNING):
            clause = build_order_by_clause(
                registry.get_entity("persons"), {"sort_by": "last_name; DROP TABLE persons"}
            )
        assert clause == "ORDER BY p.last_name ASC"
        assert "Ignoring unknown sort column" in caplog.text

    def test_invalid_direction_falls_back(self, registry):
        column, direction = resolve_sort(registry.get_entity("invoices"), {"sort_dir": "sideways"})
        assert (column, direction) == ("issue_date", SortDirection.DESC)

    def test_notes_pin_first(self, registry):
        clause = build_order_by_clause(registry.get_entity("object_notes"), {})
        assert clause == "ORDER BY n.is_pinned DESC, n.created_at DESC"

    def test_notes_sorted_by_pin_only_once(self, registry):
        clause = build_order_by_clause(registry.get_entity("object_notes"), {"sort_by": "is_pinned"})
        assert clause == "ORDER BY n.is_pinned DESC"


class TestPagination:

    @pytest.mark.parametrize("params, per_page, page, offset", [
        ({}, 20, 1, 0),
        ({"per_page": 1000}, 100, 1, 0),
        ({"page": 0}, 20, 1, 0),
        ({"page": -4, "per_page": 10}, 10, 1, 0),
        ({"page": 3, "per_page": 10}, 10, 3, 20),
        ({"page": "2", "per_page": "5"}, 5, 2, 5),
        ({"per_page": 0}, 20, 1, 0),
        ({"per_page": "abc"}, 20, 1, 0),
        ({"per_page": -5}, 1, 1, 0),
    ])
    def test_clamping(self, settings, params, per_page, page, offset):
        clause = build_pagination_clause(params, settings.pagination)
        assert (clause.per_page, clause.page, clause.offset) == (per_page, page, offset)
        assert clause.limit_clause == f"LIMIT {per_page} OFFSET {offset}"
