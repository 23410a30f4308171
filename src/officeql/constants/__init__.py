"""Constants module for officeql.

This module contains all constant values and enumerations used throughout
the package. As Layer 0 in the architecture, this module has no
dependencies on other officeql modules.

Organization:
    - sql: Statement kinds, HTTP methods, join kinds, table and column names
    - schema: Column types, identity model, delete and audit policies
"""

from officeql.constants.sql import (
    QueryType,
    HttpMethod,
    JoinType,
    SortDirection,
)

from officeql.constants.schema import (
    ColumnType,
    IdentityModel,
    DeletePolicy,
    AuditUpdatePolicy,
)

__all__ = [
    # SQL
    "QueryType",
    "HttpMethod",
    "JoinType",
    "SortDirection",
    # Schema
    "ColumnType",
    "IdentityModel",
    "DeletePolicy",
    "AuditUpdatePolicy",
]
