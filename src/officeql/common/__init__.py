"""Common utilities and exceptions for officeql.

Exception Design:
    The exception system uses error codes for categorization rather than
    numerous specific exception classes. All exceptions inherit from
    QueryBuilderError and include structured error information.

    Configuration errors (unknown entity, unknown lookup) and input errors
    (nothing to update, missing id) are raised synchronously before any
    statement text is produced.
"""

from officeql.common.exceptions import (
    QueryBuilderError,
    ErrorCode,
    # Helper functions
    configuration_error,
    validation_error,
    unknown_entity_error,
    unknown_lookup_error,
    missing_parameter_error,
)

__all__ = [
    # Base Exception and Error Codes
    "QueryBuilderError",
    "ErrorCode",
    # Helper functions
    "configuration_error",
    "validation_error",
    "unknown_entity_error",
    "unknown_lookup_error",
    "missing_parameter_error",
]
