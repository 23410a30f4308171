"""Unit tests for SQL script utilities."""

import pytest

from officeql.query_builder import BuiltQuery, EntityQueryBuilder
from officeql.sql import referenced_tables, split_statements


class TestSplitStatements:

    def test_splits_on_semicolons(self):
        script = "UPDATE t SET a = 1 WHERE id = 1;\n\nSELECT 1 AS success"
        assert split_statements(script) == ["UPDATE t SET a = 1 WHERE id = 1", "SELECT 1 AS success"]

    def test_semicolon_inside_literal_does_not_split(self):
        script = "UPDATE t SET note = 'a;b' WHERE id = 1;\nSELECT 1"
        assert split_statements(script) == ["UPDATE t SET note = 'a;b' WHERE id = 1", "SELECT 1"]

    def test_escaped_quote_inside_literal(self):
        script = "INSERT INTO t (a) VALUES ('O\\'Brien; Jr');\nSELECT 1"
        assert split_statements(script)[0] == "INSERT INTO t (a) VALUES ('O\\'Brien; Jr')"

    def test_trailing_semicolon(self):
        assert split_statements("SELECT 1;") == ["SELECT 1"]

    @pytest.mark.parametrize("script", ["", "   ", "\n\n"])
    def test_empty_script(self, script):
        assert split_statements(script) == []


class TestReferencedTables:

    def test_join_tables(self):
        sql = "SELECT p.id FROM persons p INNER JOIN objects o ON o.id = p.id"
        assert referenced_tables(sql) == {"persons", "objects"}

    def test_subquery_tables(self):
        sql = "INSERT INTO objects (object_type_id) VALUES ((SELECT id FROM object_types WHERE code = 'person'))"
        assert referenced_tables(sql) == {"objects", "object_types"}

    def test_empty_statement(self):
        with pytest.raises(ValueError):
            referenced_tables("  ")


class TestBuiltQueryDialect:

    def test_defaults_to_mysql(self):
        assert BuiltQuery(query="SELECT 1").dialect == "mysql"

    def test_builders_stamp_settings_dialect(self, registry, settings):
        settings.dialect = "tsql"
        built = EntityQueryBuilder(registry.get_entity("object_audits"), settings).build_delete(3)
        assert built.dialect == "tsql"

    def test_statements_split_with_own_dialect(self, monkeypatch):
        seen = []

        def _split(sql, dialect):
            seen.append(dialect)
            return [sql]

        monkeypatch.setattr("officeql.query_builder.types.split_statements", _split)
        assert BuiltQuery(query="SELECT 1", dialect="postgres").statements == ["SELECT 1"]
        assert seen == ["postgres"]
