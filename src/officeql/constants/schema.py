"""Schema-level enumerations for entity configurations.

Identity sharing, delete policy and the audit update policy are modelled as
enums rather than independent boolean flags so that an entity can only ever
carry one of each.
"""

from enum import Enum


class ColumnType(str, Enum):
    """Logical column types recognised by the entity registry."""

    INTEGER = "int"
    BIGINT = "bigint"
    DECIMAL = "decimal"
    VARCHAR = "varchar"
    TEXT = "text"
    DATE = "date"
    DATETIME = "datetime"
    TIMESTAMP = "timestamp"
    BOOLEAN = "boolean"
    JSON = "json"


class IdentityModel(str, Enum):
    """How an entity row obtains its primary key.

    Values:
        SHARED_PRIMARY_KEY: The entity row shares its id 1:1 with a row in the
            generic ``objects`` table. Both rows are created together.
        OWN_PRIMARY_KEY: The entity table has its own auto-increment id.
    """

    SHARED_PRIMARY_KEY = "shared_primary_key"
    OWN_PRIMARY_KEY = "own_primary_key"


class DeletePolicy(str, Enum):
    """Delete strategy of an entity. Exactly one applies per entity.

    Values:
        SOFT: ``is_active`` is set to 0, the row stays.
        OBJECT_CASCADE: The generic ``objects`` row is deleted and a foreign
            key cascade removes the entity row.
        HARD: The entity row is deleted directly.
    """

    SOFT = "soft"
    OBJECT_CASCADE = "object_cascade"
    HARD = "hard"


class AuditUpdatePolicy(str, Enum):
    """Treatment of ``<column>_old`` values in the old/new update protocol.

    Values:
        TRUST: ``_old`` values are carried in the parameter bag for external
            audit logging only. The update is applied unconditionally.
        VERIFY: Every ``_new`` value needs a matching ``_old`` value and the
            update only applies when the stored values still equal them.
    """

    TRUST = "trust"
    VERIFY = "verify"
