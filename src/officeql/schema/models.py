"""Entity schema descriptors.

Every entity type the builders understand is described by an immutable
``EntityConfig``: its table and alias, identity model, ordered columns,
joins, search/sort defaults, translated columns and delete policy. The
descriptors are validated once at construction so the builders can rely on
every referenced column and alias being a safe, existing identifier.
"""

import re
from typing import Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from officeql.constants import (
    ColumnType,
    DeletePolicy,
    IdentityModel,
    JoinType,
    SortDirection,
)
from officeql.constants.sql import (
    IS_ACTIVE_COLUMN,
    OBJECTS_ALIAS,
    OBJECTS_TABLE,
    PRIMARY_KEY_COLUMN,
    RESERVED_WORDS,
    TRANSLATION_ALIAS_PREFIX,
    TRANSLATION_CODE_SUFFIX,
    UPDATED_AT_COLUMN,
)

_IDENTIFIER_RE = re.compile(r'^[a-zA-Z_][a-zA-Z0-9_]*$')
_LOOKUP_NAME_RE = re.compile(r'^[a-z][a-z0-9\-]*$')

_DANGEROUS_EXPRESSION_PATTERNS = [
    r';',
    r'--',
    r'/\*',
    r'\*/',
    r'\bDROP\b',
    r'\bDELETE\b',
    r'\bUNION\b',
]


def validate_sql_identifier(value: str, identifier_type: str = "identifier") -> str:
    """Validate a bare (unquoted) identifier.

    Generated SQL never quotes identifiers, so table names, aliases and column
    names must be plain words that are not MySQL reserved words.

    Raises:
        ValueError: If the identifier is empty, too long, contains characters
            outside ``[A-Za-z0-9_]`` or is a reserved word.
    """
    if not value:
        raise ValueError(f"Empty {identifier_type} name")
    if len(value) > 64:
        raise ValueError(f"{identifier_type} name too long: {value}")
    if not _IDENTIFIER_RE.match(value):
        raise ValueError(f"Invalid {identifier_type} name: {value}")
    if value.lower() in RESERVED_WORDS:
        raise ValueError(f"{identifier_type} name '{value}' is a reserved word")
    return value


class ColumnDefinition(BaseModel):
    """A column of an entity table.

    Examples:
        >>> ColumnDefinition(name="first_name", type=ColumnType.VARCHAR,
        ...                  searchable=True, track_changes=True)
    """
    model_config = ConfigDict(frozen=True)

    name: str
    type: ColumnType = ColumnType.VARCHAR
    nullable: bool = False
    is_primary_key: bool = False
    searchable: bool = False
    track_changes: bool = Field(
        default=False,
        description="Participates in the old/new audit update protocol",
    )

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return validate_sql_identifier(v, "column")


class JoinDefinition(BaseModel):
    """A join appended verbatim to an entity's FROM clause."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    table: str
    alias: str
    type: JoinType = JoinType.INNER
    on: str = Field(..., min_length=1)
    columns: Tuple[str, ...] = ()

    @field_validator("table")
    @classmethod
    def validate_table(cls, v: str) -> str:
        return validate_sql_identifier(v, "join table")

    @field_validator("alias")
    @classmethod
    def validate_alias(cls, v: str) -> str:
        return validate_sql_identifier(v, "join alias")

    @field_validator("columns")
    @classmethod
    def validate_columns(cls, v: Tuple[str, ...]) -> Tuple[str, ...]:
        for column in v:
            validate_sql_identifier(column, "join column")
        return v

    @field_validator("on")
    @classmethod
    def validate_on(cls, v: str) -> str:
        """Reject join predicates that could smuggle a second statement."""
        upper = v.upper()
        for pattern in _DANGEROUS_EXPRESSION_PATTERNS:
            if re.search(pattern, upper):
                raise ValueError(f"Potentially dangerous join predicate: {v}")
        return v

    def render(self) -> str:
        return f"{self.type.value} JOIN {self.table} {self.alias} ON {self.on}"


class EntityConfig(BaseModel):
    """Declarative description of one entity type.

    Attributes:
        table_name: Physical table name
        table_alias: Alias used in every generated statement
        object_type_code: ``object_types.code`` used to tag generic object rows
        identity: Shared primary key with ``objects`` or an own auto-increment id
        columns: Ordered column definitions
        default_select_columns: Columns projected by SELECT statements
        search_columns: Columns matched by the ``search`` parameter
        default_sort_column: ORDER BY column when the caller supplies none
        default_sort_direction: ORDER BY direction when the caller supplies none
        joins: Joins appended to FROM, with the columns they surface
        translation_columns: Columns holding a translation key
        delete_policy: Soft, object-cascade or hard delete
        parent_column: Column filtered by the ``object_id`` parameter
        filter_columns: Extra equality filters accepted from query parameters
        pinned_column: Boolean column always ordered first (descending)
        display_name_columns: Columns joined into the display name of a related
            object; empty falls back to the object type code and id
    """
    model_config = ConfigDict(frozen=True)

    table_name: str
    table_alias: str
    object_type_code: str
    identity: IdentityModel = IdentityModel.OWN_PRIMARY_KEY
    columns: Tuple[ColumnDefinition, ...]
    default_select_columns: Tuple[str, ...]
    search_columns: Tuple[str, ...] = ()
    default_sort_column: str = PRIMARY_KEY_COLUMN
    default_sort_direction: SortDirection = SortDirection.ASC
    joins: Tuple[JoinDefinition, ...] = ()
    translation_columns: Tuple[str, ...] = ()
    delete_policy: DeletePolicy = DeletePolicy.HARD
    parent_column: Optional[str] = None
    filter_columns: Tuple[str, ...] = ()
    pinned_column: Optional[str] = None
    display_name_columns: Tuple[str, ...] = ()

    @field_validator("table_name", "table_alias")
    @classmethod
    def validate_identifiers(cls, v: str, info) -> str:
        return validate_sql_identifier(v, info.field_name)

    @model_validator(mode="after")
    def validate_references(self) -> "EntityConfig":
        """Check that every referenced column and alias is consistent."""
        names = [column.name for column in self.columns]
        if len(set(names)) != len(names):
            raise ValueError(f"{self.table_name}: duplicate column names")

        primary_keys = [column.name for column in self.columns if column.is_primary_key]
        if primary_keys != [PRIMARY_KEY_COLUMN]:
            raise ValueError(
                f"{self.table_name}: exactly one primary key column named "
                f"'{PRIMARY_KEY_COLUMN}' is required, got {primary_keys}"
            )

        known = set(names)
        references = {
            "default_select_columns": self.default_select_columns,
            "search_columns": self.search_columns,
            "translation_columns": self.translation_columns,
            "filter_columns": self.filter_columns,
            "default_sort_column": (self.default_sort_column,),
            "parent_column": (self.parent_column,) if self.parent_column else (),
            "pinned_column": (self.pinned_column,) if self.pinned_column else (),
            "display_name_columns": self.display_name_columns,
        }
        for field_name, columns in references.items():
            unknown = [column for column in columns if column not in known]
            if unknown:
                raise ValueError(
                    f"{self.table_name}: {field_name} references unknown columns {unknown}"
                )

        unselected = [c for c in self.translation_columns if c not in self.default_select_columns]
        if unselected:
            raise ValueError(
                f"{self.table_name}: translation columns must be selected, missing {unselected}"
            )

        aliases = [self.table_alias] + [join.alias for join in self.joins]
        aliases += [f"{TRANSLATION_ALIAS_PREFIX}{c}" for c in self.translation_columns]
        if len(set(aliases)) != len(aliases):
            raise ValueError(f"{self.table_name}: aliases must be unique, got {aliases}")

        if self.delete_policy == DeletePolicy.SOFT and IS_ACTIVE_COLUMN not in known:
            raise ValueError(
                f"{self.table_name}: soft delete requires an '{IS_ACTIVE_COLUMN}' column"
            )

        if self.identity == IdentityModel.SHARED_PRIMARY_KEY:
            object_joins = [
                join for join in self.joins
                if join.table == OBJECTS_TABLE and join.alias == OBJECTS_ALIAS
            ]
            if not object_joins:
                raise ValueError(
                    f"{self.table_name}: shared primary key entities need a join on "
                    f"'{OBJECTS_TABLE} {OBJECTS_ALIAS}'"
                )
        elif self.delete_policy == DeletePolicy.OBJECT_CASCADE:
            raise ValueError(
                f"{self.table_name}: object-cascade delete requires a shared primary key"
            )

        return self

    @property
    def uses_shared_primary_key(self) -> bool:
        return self.identity == IdentityModel.SHARED_PRIMARY_KEY

    @property
    def supports_soft_delete(self) -> bool:
        return self.delete_policy == DeletePolicy.SOFT

    @property
    def uses_object_delete(self) -> bool:
        return self.delete_policy == DeletePolicy.OBJECT_CASCADE

    @property
    def column_names(self) -> Tuple[str, ...]:
        return tuple(column.name for column in self.columns)

    @property
    def trackable_columns(self) -> Tuple[ColumnDefinition, ...]:
        return tuple(column for column in self.columns if column.track_changes)

    @property
    def has_updated_at(self) -> bool:
        return self.has_column(UPDATED_AT_COLUMN)

    def has_column(self, name: str) -> bool:
        return name in self.column_names

    def get_column(self, name: str) -> Optional[ColumnDefinition]:
        for column in self.columns:
            if column.name == name:
                return column
        return None

    def translation_label(self, column: str) -> str:
        """Output name of a translated column: the column without ``_code``."""
        return column.replace(TRANSLATION_CODE_SUFFIX, "")

    def translation_labels(self) -> Dict[str, str]:
        return {self.translation_label(c): c for c in self.translation_columns}


class LookupTableConfig(BaseModel):
    """A flat, code-keyed reference table.

    Attributes:
        name: URL token (e.g. ``address-types``)
        table_name: Physical table name
        translated: Whether the display text comes from the translations table
        extra_columns: Columns beyond id/code/is_active that insert and
            update accept and select returns
        filter_columns: Extra columns accepted as equality filters on select
    """
    model_config = ConfigDict(frozen=True)

    name: str
    table_name: str
    translated: bool = True
    extra_columns: Tuple[str, ...] = ()
    filter_columns: Tuple[str, ...] = ()

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        if not _LOOKUP_NAME_RE.match(v):
            raise ValueError(f"Invalid lookup name: {v}")
        return v

    @field_validator("table_name")
    @classmethod
    def validate_table_name(cls, v: str) -> str:
        return validate_sql_identifier(v, "lookup table")

    @field_validator("extra_columns", "filter_columns")
    @classmethod
    def validate_columns(cls, v: Tuple[str, ...]) -> Tuple[str, ...]:
        for column in v:
            validate_sql_identifier(column, "lookup column")
        return v

    @model_validator(mode="after")
    def validate_filters(self) -> "LookupTableConfig":
        unknown = [c for c in self.filter_columns if c not in self.extra_columns]
        if unknown:
            raise ValueError(f"{self.table_name}: filter columns {unknown} are not extra columns")
        return self
