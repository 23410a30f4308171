"""Statement builders.

Builders generate MySQL text; they never execute it. Entity, relation, lookup
and translation builders share ``BaseQueryBuilder`` and are created from a
request token by ``QueryBuilderFactory``.
"""

from officeql.query_builder.base import BaseQueryBuilder
from officeql.query_builder.entity_builder import EntityQueryBuilder, uses_old_new_protocol
from officeql.query_builder.factory import QueryBuilderFactory, get_query_builder
from officeql.query_builder.formatter import coerce_identifier_value, format_bool_flag, format_value
from officeql.query_builder.lookup_builder import LookupQueryBuilder
from officeql.query_builder.relation_builder import RelationQueryBuilder
from officeql.query_builder.translation_builder import TranslationQueryBuilder
from officeql.query_builder.types import BuiltQuery

__all__ = [
    "BaseQueryBuilder",
    "BuiltQuery",
    "EntityQueryBuilder",
    "LookupQueryBuilder",
    "RelationQueryBuilder",
    "TranslationQueryBuilder",
    "QueryBuilderFactory",
    "get_query_builder",
    "format_value",
    "format_bool_flag",
    "coerce_identifier_value",
    "uses_old_new_protocol",
]
