"""Entity schema registry.

Immutable, validated descriptions of every entity type and lookup table the
query builders can address.
"""

from officeql.schema.models import (
    ColumnDefinition,
    EntityConfig,
    JoinDefinition,
    LookupTableConfig,
    validate_sql_identifier,
)
from officeql.schema.registry import EntityRegistry, get_default_registry

__all__ = [
    "ColumnDefinition",
    "EntityConfig",
    "JoinDefinition",
    "LookupTableConfig",
    "EntityRegistry",
    "get_default_registry",
    "validate_sql_identifier",
]
