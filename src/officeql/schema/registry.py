"""Read-only registry of entity and lookup configurations."""

from functools import lru_cache
from types import MappingProxyType
from typing import Iterator, Mapping, Optional, Tuple

from officeql.common import unknown_entity_error, unknown_lookup_error
from officeql.logging import get_logger
from officeql.schema.models import EntityConfig, LookupTableConfig

logger = get_logger(__name__)


class EntityRegistry(Mapping[str, EntityConfig]):
    """Immutable mapping of entity type token to ``EntityConfig``.

    The registry also carries the lookup table map so a single object can be
    injected into the dispatcher. Tests build registries from fixture
    configurations instead of the built-in ones.

    Example:
        >>> registry = get_default_registry()
        >>> registry.get_entity("persons").table_alias
        'p'
        >>> registry.get_lookup("address-types").table_name
        'address_types'
    """

    def __init__(
        self,
        entities: Mapping[str, EntityConfig],
        lookups: Optional[Mapping[str, LookupTableConfig]] = None,
    ):
        self._entities = MappingProxyType(dict(entities))
        self._lookups = MappingProxyType(dict(lookups or {}))
        logger.debug(
            "Entity registry built",
            extra={"entity_count": len(self._entities), "lookup_count": len(self._lookups)},
        )

    def __getitem__(self, entity_type: str) -> EntityConfig:
        return self._entities[entity_type]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entities)

    def __len__(self) -> int:
        return len(self._entities)

    def __repr__(self) -> str:
        return f"EntityRegistry(entities={list(self._entities)}, lookups={len(self._lookups)})"

    @property
    def entity_types(self) -> Tuple[str, ...]:
        return tuple(self._entities)

    @property
    def lookup_names(self) -> Tuple[str, ...]:
        return tuple(self._lookups)

    @property
    def lookups(self) -> Mapping[str, LookupTableConfig]:
        return self._lookups

    def get_entity(self, entity_type: str) -> EntityConfig:
        """Resolve an entity token.

        Raises:
            QueryBuilderError: UNKNOWN_ENTITY listing the registered tokens.
        """
        config = self._entities.get(entity_type)
        if config is None:
            raise unknown_entity_error(entity_type, self._entities)
        return config

    def get_lookup(self, lookup_type: str) -> LookupTableConfig:
        """Resolve a lookup name. Underscored table-style names are accepted too.

        Raises:
            QueryBuilderError: UNKNOWN_LOOKUP listing the registered names.
        """
        lookup = self._lookups.get(lookup_type) or self._lookups.get(lookup_type.replace("_", "-"))
        if lookup is None:
            raise unknown_lookup_error(lookup_type, self._lookups)
        return lookup


@lru_cache(maxsize=1)
def get_default_registry() -> EntityRegistry:
    """Return the process-wide registry of the built-in configurations."""
    from officeql.schema.entities import ENTITY_CONFIGS
    from officeql.schema.lookups import LOOKUP_TABLES

    return EntityRegistry(ENTITY_CONFIGS, LOOKUP_TABLES)
