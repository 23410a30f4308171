"""Query Builder Factory.

Maps an entity-type token from a request to the builder that serves it:

    - ``translation`` / ``translations`` -> TranslationQueryBuilder
    - ``lookup:<name>``                   -> LookupQueryBuilder
    - object_relations                    -> RelationQueryBuilder
    - anything else                       -> EntityQueryBuilder for a registry entity
"""

from typing import Optional, Union

from officeql.constants.sql import OBJECT_RELATIONS_TABLE
from officeql.query_builder.entity_builder import EntityQueryBuilder
from officeql.query_builder.lookup_builder import LookupQueryBuilder
from officeql.query_builder.relation_builder import RelationQueryBuilder
from officeql.query_builder.translation_builder import TranslationQueryBuilder
from officeql.schema import EntityRegistry, get_default_registry
from officeql.settings import _Settings

TRANSLATION_TOKENS = frozenset({"translation", "translations"})
LOOKUP_PREFIX = "lookup:"

# Union type for all concrete builders
ConcreteQueryBuilder = Union[EntityQueryBuilder, LookupQueryBuilder, TranslationQueryBuilder]


class QueryBuilderFactory:
    """Factory for creating the builder addressed by an entity-type token.

    Registry and settings default to the process-wide instances.

    Example:
        >>> QueryBuilderFactory.create("persons").config.table_alias
        'p'
        >>> QueryBuilderFactory.create("lookup:address-types").table_name
        'address_types'
    """

    @staticmethod
    def create_translation_builder(settings: Optional[_Settings] = None) -> TranslationQueryBuilder:
        return TranslationQueryBuilder(QueryBuilderFactory._settings(settings))

    @staticmethod
    def create_lookup_builder(
        lookup_type: str,
        registry: Optional[EntityRegistry] = None,
        settings: Optional[_Settings] = None,
    ) -> LookupQueryBuilder:
        """Create a lookup builder.

        Raises:
            QueryBuilderError: UNKNOWN_LOOKUP if the name is not registered
        """
        registry = registry if registry is not None else get_default_registry()
        return LookupQueryBuilder(registry.get_lookup(lookup_type), QueryBuilderFactory._settings(settings))

    @staticmethod
    def create_entity_builder(
        entity_type: str,
        registry: Optional[EntityRegistry] = None,
        settings: Optional[_Settings] = None,
    ) -> EntityQueryBuilder:
        """Create an entity builder.

        ``object_relations`` gets a RelationQueryBuilder that can hydrate
        related objects across the registry.

        Raises:
            QueryBuilderError: UNKNOWN_ENTITY listing the registered tokens
        """
        registry = registry if registry is not None else get_default_registry()
        config = registry.get_entity(entity_type)
        settings = QueryBuilderFactory._settings(settings)
        if config.table_name == OBJECT_RELATIONS_TABLE:
            return RelationQueryBuilder(config, settings, registry, entity_type=entity_type)
        return EntityQueryBuilder(config, settings, entity_type=entity_type)

    @staticmethod
    def create(
        token: str,
        registry: Optional[EntityRegistry] = None,
        settings: Optional[_Settings] = None,
    ) -> ConcreteQueryBuilder:
        """Create the builder for a request token."""
        token = (token or "").strip()
        if token in TRANSLATION_TOKENS:
            return QueryBuilderFactory.create_translation_builder(settings)
        if token.startswith(LOOKUP_PREFIX):
            return QueryBuilderFactory.create_lookup_builder(token[len(LOOKUP_PREFIX):], registry, settings)
        return QueryBuilderFactory.create_entity_builder(token, registry, settings)

    @staticmethod
    def _settings(settings: Optional[_Settings]) -> _Settings:
        if settings is not None:
            return settings
        from officeql.settings import get_settings
        return get_settings()


def get_query_builder(token: str) -> ConcreteQueryBuilder:
    """Get the builder for a token using the default registry and settings."""
    return QueryBuilderFactory.create(token)
