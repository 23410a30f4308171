"""Unit tests for the builder factory and the dispatch facade."""

import pytest
from pydantic import ValidationError

from officeql.api import QueryDispatcher, QueryRequest
from officeql.common import ErrorCode, QueryBuilderError
from officeql.query_builder import (
    EntityQueryBuilder,
    LookupQueryBuilder,
    QueryBuilderFactory,
    TranslationQueryBuilder,
    get_query_builder,
)


@pytest.fixture
def dispatcher(registry, settings):
    return QueryDispatcher(registry, settings)


class TestFactory:

    @pytest.mark.parametrize("token", ["translation", "translations", " translations "])
    def test_translation_tokens(self, registry, settings, token):
        builder = QueryBuilderFactory.create(token, registry, settings)
        assert isinstance(builder, TranslationQueryBuilder)

    def test_lookup_token(self, registry, settings):
        builder = QueryBuilderFactory.create("lookup:contact-types", registry, settings)
        assert isinstance(builder, LookupQueryBuilder)
        assert builder.table_name == "contact_types"

    def test_entity_token(self, registry, settings):
        builder = QueryBuilderFactory.create("object_notes", registry, settings)
        assert isinstance(builder, EntityQueryBuilder)
        assert builder.config.table_alias == "n"

    def test_module_getter_uses_default_registry(self):
        builder = get_query_builder("object_relations")
        assert builder.config.table_alias == "rel"

    def test_unknown_lookup(self, registry, settings):
        with pytest.raises(QueryBuilderError) as exc_info:
            QueryBuilderFactory.create("lookup:nope", registry, settings)
        assert exc_info.value.error_code == ErrorCode.UNKNOWN_LOOKUP


class TestQueryRequest:

    def test_method_is_normalized(self):
        assert QueryRequest(entity_type="persons", method=" get ").method == "GET"

    def test_nested_query_is_lifted(self):
        request = QueryRequest(entity_type="persons", method="GET", params={"query": {"search": "Doe"}})
        assert request.query == {"search": "Doe"}

    def test_explicit_query_wins(self):
        request = QueryRequest(
            entity_type="persons", method="GET",
            params={"query": {"search": "nested"}}, query={"search": "top"},
        )
        assert request.query == {"search": "top"}

    def test_none_sections_default_to_empty(self):
        request = QueryRequest(entity_type="persons", method="GET", params=None, body=None)
        assert request.params == {}
        assert request.body == {}

    def test_entity_type_required(self):
        with pytest.raises(ValidationError):
            QueryRequest(entity_type="", method="GET")


class TestEntityRouting:

    def test_get_list(self, dispatcher):
        built = dispatcher.dispatch({
            "entity_type": "persons",
            "method": "GET",
            "query": {"search": "Doe", "page": 2, "per_page": 10},
        })
        assert built.query.endswith("LIMIT 10 OFFSET 10")
        assert built.count_query is not None
        assert built.debug is None

    def test_get_by_id(self, dispatcher):
        built = dispatcher.dispatch({"entity_type": "persons", "method": "get", "params": {"id": "5"}})
        assert built.query.endswith("WHERE p.id = 5")
        assert built.count_query is None

    def test_post_inserts(self, dispatcher):
        built = dispatcher.dispatch({
            "entity_type": "persons",
            "method": "POST",
            "body": {"first_name": "John", "last_name": "Doe", "object_status_id": 1},
        })
        assert built.statements[0] == "START TRANSACTION"

    @pytest.mark.parametrize("method", ["PUT", "PATCH"])
    def test_update_uses_coalesce(self, dispatcher, method):
        built = dispatcher.dispatch({
            "entity_type": "persons",
            "method": method,
            "params": {"id": 5},
            "body": {"first_name": "Jane"},
        })
        assert "p.first_name = COALESCE('Jane', p.first_name)" in built.query

    def test_update_with_new_keys_uses_audit_protocol(self, dispatcher):
        built = dispatcher.dispatch({
            "entity_type": "object_notes",
            "method": "PUT",
            "params": {"id": 9},
            "body": {"subject_new": "S2", "subject_old": "S1"},
        })
        assert "COALESCE(" not in built.statements[0]
        assert built.params["changes"]["subject_code"] == {"old": "S1", "new": "S2"}

    def test_delete(self, dispatcher):
        built = dispatcher.dispatch({"entity_type": "object_audits", "method": "DELETE", "params": {"id": 3}})
        assert built.query.startswith("DELETE FROM object_audits WHERE id = 3;")

    @pytest.mark.parametrize("method", ["PUT", "PATCH", "DELETE"])
    def test_id_required(self, dispatcher, method):
        with pytest.raises(QueryBuilderError) as exc_info:
            dispatcher.dispatch({"entity_type": "persons", "method": method, "body": {"first_name": "x"}})
        assert exc_info.value.error_code == ErrorCode.MISSING_PARAMETER

    @pytest.mark.parametrize("method", ["HEAD", "", "OPTIONS"])
    def test_unsupported_method(self, dispatcher, method):
        with pytest.raises(QueryBuilderError) as exc_info:
            dispatcher.dispatch({"entity_type": "persons", "method": method})
        assert exc_info.value.error_code == ErrorCode.UNSUPPORTED_METHOD

    def test_unknown_entity(self, dispatcher):
        with pytest.raises(QueryBuilderError) as exc_info:
            dispatcher.dispatch({"entity_type": "people", "method": "GET"})
        assert exc_info.value.error_code == ErrorCode.UNKNOWN_ENTITY

    def test_accepts_request_model(self, dispatcher):
        request = QueryRequest(entity_type="companies", method="GET", request_id="req-1")
        assert "FROM companies c" in dispatcher.dispatch(request).query


class TestLookupAndTranslationRouting:

    def test_lookup_list(self, dispatcher):
        built = dispatcher.dispatch({"entity_type": "lookup:countries", "method": "GET"})
        assert "FROM countries lt" in built.query

    def test_lookup_update(self, dispatcher):
        built = dispatcher.dispatch({
            "entity_type": "lookup:countries",
            "method": "PATCH",
            "params": {"id": 2},
            "body": {"code": "AT"},
        })
        assert built.query.startswith("UPDATE countries\nSET code = 'AT'\nWHERE id = 2;")

    def test_translation_insert(self, dispatcher):
        built = dispatcher.dispatch({
            "entity_type": "translations",
            "method": "POST",
            "body": {"code": "A", "language_id": 1, "text": "x"},
        })
        assert "ON DUPLICATE KEY" not in built.query

    @pytest.mark.parametrize("flag", ["true", "1", True])
    def test_translation_upsert_flag(self, dispatcher, flag):
        built = dispatcher.dispatch({
            "entity_type": "translations",
            "method": "POST",
            "query": {"upsert": flag},
            "body": {"code": "A", "language_id": 1, "text": "x"},
        })
        assert "ON DUPLICATE KEY UPDATE text = 'x';" in built.query

    def test_translation_get_by_code(self, dispatcher):
        built = dispatcher.dispatch({
            "entity_type": "translation",
            "method": "GET",
            "params": {"code": "A"},
            "query": {"language_id": "2"},
        })
        assert built.query.endswith("WHERE code = 'A' AND language_id = 2")

    def test_translation_update_takes_code_from_id(self, dispatcher):
        built = dispatcher.dispatch({
            "entity_type": "translations",
            "method": "PUT",
            "params": {"id": "A", "language_id": 3},
            "body": {"text": "y"},
        })
        assert "WHERE code = 'A' AND language_id = 3;" in built.query

    def test_translation_delete_needs_language(self, dispatcher):
        with pytest.raises(QueryBuilderError) as exc_info:
            dispatcher.dispatch({"entity_type": "translations", "method": "DELETE", "params": {"code": "A"}})
        assert exc_info.value.error_code == ErrorCode.MISSING_PARAMETER


class TestRelationRouting:

    def test_get_with_object_from_id_hydrates(self, dispatcher):
        built = dispatcher.dispatch({
            "entity_type": "object_relations",
            "method": "GET",
            "query": {"object_from_id": "4", "object_relation_type_id": 1},
        })
        assert "UNION ALL" in built.query
        assert "related_object_display_name" in built.query
        assert built.params == {"object_from_id": 4, "object_relation_type_id": 1}

    def test_object_from_id_from_path(self, dispatcher):
        built = dispatcher.dispatch({
            "entity_type": "object_relations",
            "method": "GET",
            "params": {"object_from_id": 4},
        })
        assert "rel.object_from_id = 4" in built.query
        assert "UNION ALL" in built.query

    def test_get_without_object_from_id_lists(self, dispatcher):
        built = dispatcher.dispatch({"entity_type": "object_relations", "method": "GET", "query": {"object_id": 4}})
        assert "UNION ALL" not in built.query
        assert built.count_query is not None

    def test_debug_lists_related_entities(self, registry, settings):
        settings.include_debug = True
        built = QueryDispatcher(registry, settings).dispatch({
            "entity_type": "object_relations",
            "method": "GET",
            "query": {"object_from_id": 4},
        })
        assert built.debug["builder"] == "RelationQueryBuilder"
        assert "persons" in built.debug["related_entities"]


class TestDebugEnvelope:

    def test_entity_debug(self, registry, settings):
        settings.include_debug = True
        built = QueryDispatcher(registry, settings).dispatch({
            "entity_type": "documents",
            "method": "GET",
            "query": {"language_code": "de"},
        })
        assert built.debug["method"] == "GET"
        assert built.debug["builder"] == "EntityQueryBuilder"
        assert built.debug["translation_columns"] == ["title_code"]
        assert built.debug["language"]["source"] == "language_code"

    def test_lookup_debug(self, registry, settings):
        settings.include_debug = True
        built = QueryDispatcher(registry, settings).dispatch({"entity_type": "lookup:currencies", "method": "GET"})
        assert built.debug["translated"] is False
        assert built.debug["language"]["source"] == "default"
