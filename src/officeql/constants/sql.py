"""SQL and request-related constants.

This module contains the statement, method, join and ordering enums used
across the schema registry, the query builders and the dispatch facade.

These constants are in Layer 0 as they represent core SQL concepts
that can be used by any layer without creating circular dependencies.
"""

from enum import Enum


class QueryType(str, Enum):
    """SQL statement kind produced by a builder call.

    Used for logging and for the debug envelope attached to built queries.
    """

    SELECT = "SELECT"
    SELECT_BY_ID = "SELECT_BY_ID"
    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    UPSERT = "UPSERT"


class HttpMethod(str, Enum):
    """HTTP-like request methods understood by the dispatch facade."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"


class JoinType(str, Enum):
    """Join kinds allowed in a JoinDefinition."""

    INNER = "INNER"
    LEFT = "LEFT"
    RIGHT = "RIGHT"


class SortDirection(str, Enum):
    ASC = "ASC"
    DESC = "DESC"


# Shared generic-object table used by shared primary key entities
OBJECTS_TABLE = "objects"
OBJECTS_ALIAS = "o"
OBJECT_TYPES_TABLE = "object_types"
OBJECT_STATUSES_TABLE = "object_statuses"

# Object-to-object links and their lookup of relation types
OBJECT_RELATIONS_TABLE = "object_relations"
OBJECT_RELATION_TYPES_TABLE = "object_relation_types"

# Composite-key translation table and its language table
TRANSLATIONS_TABLE = "translations"
LANGUAGES_TABLE = "languages"
TRANSLATION_ALIAS_PREFIX = "t_"
TRANSLATION_CODE_SUFFIX = "_code"

# Session variable carrying the identity generated by the objects insert
OBJECT_ID_VARIABLE = "@object_id"
AFFECTED_ROWS_VARIABLE = "@affected_rows"

# Bookkeeping columns with special handling in insert and update
PRIMARY_KEY_COLUMN = "id"
IS_ACTIVE_COLUMN = "is_active"
CREATED_AT_COLUMN = "created_at"
CREATED_BY_COLUMN = "created_by"
UPDATED_AT_COLUMN = "updated_at"
TIMESTAMP_COLUMNS = frozenset({CREATED_AT_COLUMN, UPDATED_AT_COLUMN})

# Suffixes of the old/new audit update protocol
NEW_VALUE_SUFFIX = "_new"
OLD_VALUE_SUFFIX = "_old"

# MySQL reserved words that cannot be used as bare (backtick-free) identifiers.
# Only the short words that are plausible as aliases or column names are listed.
RESERVED_WORDS = frozenset({
    "add", "all", "and", "as", "asc", "by", "case", "check", "column",
    "create", "cross", "delete", "desc", "distinct", "drop", "else", "exists",
    "from", "group", "having", "in", "index", "inner", "insert", "into", "is",
    "join", "key", "left", "like", "limit", "not", "null", "on", "or",
    "order", "outer", "right", "select", "set", "table", "then", "to",
    "union", "update", "use", "using", "values", "when", "where", "with",
})
