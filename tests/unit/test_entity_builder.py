"""Unit tests for the entity statement builder."""

import pytest

from officeql.common import ErrorCode, QueryBuilderError
from officeql.constants import AuditUpdatePolicy, QueryType
from officeql.query_builder import EntityQueryBuilder, uses_old_new_protocol
from officeql.sql import referenced_tables


@pytest.fixture
def builder_for(registry, settings):
    def _make(entity_type):
        return EntityQueryBuilder(registry.get_entity(entity_type), settings, entity_type=entity_type)
    return _make


class TestSelect:

    def test_persons_search_page_two(self, builder_for):
        built = builder_for("persons").build_select({"search": "Doe", "page": 2, "per_page": 10})

        assert built.query.startswith("SELECT\n    p.id,\n    p.first_name,")
        assert "FROM persons p\nINNER JOIN objects o ON o.id = p.id\n" in built.query
        assert "WHERE (p.first_name LIKE '%Doe%' OR p.last_name LIKE '%Doe%')" in built.query
        assert "ORDER BY p.last_name ASC" in built.query
        assert built.query.endswith("LIMIT 10 OFFSET 10")
        assert built.params["page"] == 2
        assert built.params["per_page"] == 10
        assert built.params["offset"] == 10
        assert built.params["search"] == "Doe"

    def test_count_query_shares_from_and_where(self, builder_for):
        built = builder_for("persons").build_select({"search": "Doe"})
        assert built.count_query == (
            "SELECT COUNT(*) AS total\n"
            "FROM persons p\n"
            "INNER JOIN objects o ON o.id = p.id\n"
            "WHERE (p.first_name LIKE '%Doe%' OR p.last_name LIKE '%Doe%')"
        )

    def test_count_query_without_filters(self, builder_for):
        built = builder_for("companies").build_select()
        assert built.count_query == (
            "SELECT COUNT(*) AS total\nFROM companies c\nINNER JOIN objects o ON o.id = c.id"
        )

    def test_generated_select_parses(self, builder_for):
        built = builder_for("documents").build_select({"language_code": "de", "search": "A-1"})
        assert referenced_tables(built.query) == {"documents", "objects", "translations", "languages"}

    def test_select_by_id(self, builder_for):
        built = builder_for("documents").build_select_by_id("3", {"language_id": 2})
        assert built.query.endswith("WHERE d.id = 3")
        assert "t_title_code.language_id = 2" in built.query
        assert "LIMIT" not in built.query
        assert built.params == {"id": 3}

    def test_select_by_id_requires_id(self, builder_for):
        with pytest.raises(QueryBuilderError) as exc_info:
            builder_for("persons").build_select_by_id(None)
        assert exc_info.value.error_code == ErrorCode.MISSING_PARAMETER


class TestInsert:

    def test_shared_primary_key_insert(self, builder_for):
        built = builder_for("persons").build_insert(
            {"first_name": "John", "last_name": "Doe", "object_status_id": 1}
        )
        statements = built.statements

        assert statements[0] == "START TRANSACTION"
        assert statements[1] == (
            "INSERT INTO objects (object_type_id, object_status_id)\n"
            "VALUES (\n"
            "    (SELECT id FROM object_types WHERE code = 'person'),\n"
            "    1\n"
            ")"
        )
        assert statements[2] == "SET @object_id = LAST_INSERT_ID()"
        assert statements[3] == (
            "INSERT INTO persons (id, first_name, last_name)\n"
            "VALUES (@object_id, 'John', 'Doe')"
        )
        assert statements[4] == "COMMIT"
        assert statements[5].endswith("WHERE p.id = @object_id")
        assert len(statements) == 6

    @pytest.mark.parametrize("status", [None, "", "  "])
    def test_shared_insert_requires_object_status(self, builder_for, status):
        body = {"company_name": "Acme"}
        if status is not None:
            body["object_status_id"] = status
        with pytest.raises(QueryBuilderError) as exc_info:
            builder_for("companies").build_insert(body)
        assert exc_info.value.error_code == ErrorCode.MISSING_PARAMETER
        assert exc_info.value.details["field"] == "object_status_id"

    def test_simple_insert(self, builder_for):
        built = builder_for("object_contacts").build_insert({
            "object_id": "12",
            "contact_type_id": 2,
            "contact_value": "a@b.c",
            "created_at": "2024-01-01",
            "unknown": "ignored",
        })
        statements = built.statements
        assert statements[0] == (
            "INSERT INTO object_contacts (object_id, contact_type_id, contact_value)\n"
            "VALUES (12, 2, 'a@b.c')"
        )
        assert statements[1].endswith("WHERE oc.id = LAST_INSERT_ID()")
        assert "START TRANSACTION" not in built.query

    def test_varchar_digits_stay_strings(self, builder_for):
        built = builder_for("object_addresses").build_insert(
            {"object_id": 1, "postal_code": "01234", "city": "Pécs"}
        )
        assert "'01234'" in built.query

    def test_simple_insert_without_columns(self, builder_for):
        with pytest.raises(QueryBuilderError) as exc_info:
            builder_for("object_contacts").build_insert({"created_at": "2024-01-01"})
        assert exc_info.value.is_input_error


class TestCoalesceUpdate:

    def test_shared_entity_update(self, builder_for):
        built = builder_for("persons").build_update(
            "5", {"first_name": "Jane", "object_status_id": 2, "created_at": "x"}
        )
        assert built.statements[0] == (
            "UPDATE persons p\n"
            "JOIN objects o ON o.id = p.id\n"
            "SET\n"
            "    p.first_name = COALESCE('Jane', p.first_name),\n"
            "    o.object_status_id = COALESCE(2, o.object_status_id)\n"
            "WHERE p.id = 5"
        )
        assert built.statements[1].endswith("WHERE p.id = 5")
        assert built.params["id"] == 5

    def test_absent_columns_are_omitted(self, builder_for):
        built = builder_for("persons").build_update(5, {"last_name": None})
        update = built.statements[0]
        assert "p.last_name = COALESCE(NULL, p.last_name)" in update
        assert "first_name" not in update
        assert "updated_at" not in update

    def test_child_entity_stamps_updated_at(self, builder_for):
        built = builder_for("object_contacts").build_update(8, {"contact_value": "x@y.z", "updated_at": "old"})
        assert built.statements[0] == (
            "UPDATE object_contacts oc\n"
            "SET\n"
            "    oc.contact_value = COALESCE('x@y.z', oc.contact_value),\n"
            "    oc.updated_at = NOW()\n"
            "WHERE oc.id = 8"
        )

    def test_nothing_to_update(self, builder_for):
        with pytest.raises(QueryBuilderError) as exc_info:
            builder_for("object_contacts").build_update(8, {"created_by": 1})
        assert exc_info.value.error_code == ErrorCode.NO_COLUMNS_TO_UPDATE

    def test_update_requires_id(self, builder_for):
        with pytest.raises(QueryBuilderError) as exc_info:
            builder_for("persons").build_update("", {"first_name": "x"})
        assert exc_info.value.error_code == ErrorCode.MISSING_PARAMETER


class TestOldNewUpdate:

    def test_notes_subject_only(self, builder_for):
        built = builder_for("object_notes").build_update(
            9, {"subject_new": "NOTE_SUBJ_2", "subject_old": "NOTE_SUBJ_1"}, use_old_new=True
        )
        update = built.statements[0]
        assert update == (
            "UPDATE object_notes n\n"
            "SET\n"
            "    n.subject_code = 'NOTE_SUBJ_2'\n"
            "WHERE n.id = 9"
        )
        assert "note_text_code" not in update
        assert built.params["changes"] == {"subject_code": {"old": "NOTE_SUBJ_1", "new": "NOTE_SUBJ_2"}}
        assert built.params["subject_old"] == "NOTE_SUBJ_1"

    def test_raw_column_name_keys(self, builder_for):
        built = builder_for("object_notes").build_update(9, {"note_text_code_new": "T2"}, use_old_new=True)
        assert "n.note_text_code = 'T2'" in built.statements[0]

    def test_no_coalesce_and_no_timestamp(self, builder_for):
        built = builder_for("object_contacts").build_update(1, {"contact_value_new": "new"}, use_old_new=True)
        update = built.statements[0]
        assert "COALESCE" not in update
        assert "updated_at" not in update

    @pytest.mark.parametrize("body", [
        {},
        {"subject_old": "x"},
        {"is_pinned_new": 1},
    ])
    def test_zero_new_values(self, builder_for, body):
        with pytest.raises(QueryBuilderError, match="No columns to update. Provide at least one _new value.") as exc_info:
            builder_for("object_notes").build_update(9, body, use_old_new=True)
        assert exc_info.value.error_code == ErrorCode.NO_COLUMNS_TO_UPDATE

    def test_verify_policy_guards_old_values(self, builder_for, settings):
        settings.audit.update_policy = AuditUpdatePolicy.VERIFY
        built = builder_for("persons").build_update(
            5, {"first_name_new": "Jane", "first_name_old": "John"}, use_old_new=True
        )
        statements = built.statements
        assert statements[0] == (
            "UPDATE persons p\n"
            "SET\n"
            "    p.first_name = 'Jane'\n"
            "WHERE p.id = 5\n"
            "    AND p.first_name <=> 'John'"
        )
        assert statements[1] == "SET @affected_rows = ROW_COUNT()"
        assert "@affected_rows AS affected_rows" in statements[2]

    def test_verify_policy_requires_old_values(self, builder_for, settings):
        settings.audit.update_policy = AuditUpdatePolicy.VERIFY
        with pytest.raises(QueryBuilderError) as exc_info:
            builder_for("persons").build_update(5, {"first_name_new": "Jane"}, use_old_new=True)
        assert exc_info.value.error_code == ErrorCode.MISSING_PARAMETER

    def test_trust_policy_has_no_guards(self, builder_for):
        built = builder_for("persons").build_update(
            5, {"first_name_new": "Jane", "first_name_old": "John"}, use_old_new=True
        )
        assert "<=>" not in built.query
        assert "@affected_rows" not in built.query

    def test_protocol_detection(self):
        assert uses_old_new_protocol({"subject_new": "x"})
        assert not uses_old_new_protocol({"subject": "x"})
        assert not uses_old_new_protocol(None)


SHARED_CASCADE = ["persons", "companies", "users", "invoices"]
SOFT = [
    "transactions", "documents", "files", "object_addresses", "object_contacts",
    "object_identifications", "object_notes", "object_relations",
]


class TestDelete:

    @pytest.mark.parametrize("entity_type", SHARED_CASCADE)
    def test_object_cascade(self, builder_for, entity_type):
        built = builder_for(entity_type).build_delete(7)
        assert built.query == "DELETE FROM objects WHERE id = 7;\n\nSELECT 1 AS success"

    @pytest.mark.parametrize("entity_type", SOFT)
    def test_soft_delete_never_deletes(self, builder_for, registry, entity_type):
        built = builder_for(entity_type).build_delete("7")
        table = registry.get_entity(entity_type).table_name
        assert built.query == (
            f"UPDATE {table}\n"
            "SET is_active = 0, updated_at = NOW()\n"
            "WHERE id = 7;\n\n"
            "SELECT 1 AS success"
        )
        assert "DELETE" not in built.query

    def test_audits_hard_delete(self, builder_for):
        built = builder_for("object_audits").build_delete(7)
        assert built.query == "DELETE FROM object_audits WHERE id = 7;\n\nSELECT 1 AS success"

    def test_every_entity_matches_exactly_one_policy(self, builder_for, registry):
        for entity_type in registry:
            query = builder_for(entity_type).build_delete(1).query
            kinds = [
                query.startswith("UPDATE "),
                query.startswith("DELETE FROM objects "),
                query.startswith("DELETE FROM ") and not query.startswith("DELETE FROM objects "),
            ]
            assert kinds.count(True) == 1, entity_type

    def test_delete_requires_id(self, builder_for):
        with pytest.raises(QueryBuilderError):
            builder_for("persons").build_delete(None)


class TestBuildQuery:

    def test_maps_query_type(self, builder_for):
        built = builder_for("object_audits").build_query(QueryType.DELETE, 3)
        assert built.query.startswith("DELETE FROM object_audits WHERE id = 3;")

    def test_unsupported_query_type(self, builder_for):
        with pytest.raises(NotImplementedError):
            builder_for("persons").build_query(QueryType.UPSERT, {})

    def test_debug_info(self, builder_for):
        info = builder_for("documents").debug_info({"language_code": "de"})
        assert info["translation_columns"] == ["title_code"]
        assert info["language"]["source"] == "language_code"
