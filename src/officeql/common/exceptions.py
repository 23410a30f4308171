from enum import Enum
from typing import Any, Dict, Iterable, Optional


class ErrorCode(Enum):
    """Standard error codes for officeql operations.

    This enum provides categorized error codes that can be used
    to identify error types without creating numerous exception classes.

    Attributes:
        CONFIG_*: Configuration and schema errors (unknown entity, bad registry)
        VALIDATION_*: Input errors in the request parameters or body
        RESOURCE_*: Lookups of named resources that do not exist
    """
    # Configuration errors
    CONFIG_ERROR = "CONFIG_001"
    CONFIG_INVALID = "CONFIG_002"
    UNKNOWN_ENTITY = "CONFIG_003"
    UNKNOWN_LOOKUP = "CONFIG_004"

    # Validation errors
    VALIDATION_ERROR = "VALIDATION_001"
    INVALID_ARGUMENT = "VALIDATION_002"
    MISSING_PARAMETER = "VALIDATION_003"
    NO_COLUMNS_TO_UPDATE = "VALIDATION_004"
    UNSUPPORTED_METHOD = "VALIDATION_005"

    # Resource errors
    RESOURCE_NOT_FOUND = "RESOURCE_001"


class QueryBuilderError(Exception):
    """Base exception for all officeql errors.

    Uses error codes for categorization instead of a deep hierarchy of
    exception classes.

    Attributes:
        message: Error message
        error_code: Error code from ErrorCode enum
        details: Additional error details
        cause: Optional underlying exception
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.VALIDATION_ERROR,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        self.cause = cause

        # Lazy import to avoid circular dependency
        from officeql.logging import get_logger
        logger = get_logger(__name__)
        logger.error(
            message,
            extra={"error_code": error_code.value, "details": self.details},
            exc_info=cause is not None,
        )

    def __str__(self) -> str:
        msg = f"[{self.error_code.value}] {self.message}"
        if self.cause:
            msg = f"{msg} (caused by: {type(self.cause).__name__}: {str(self.cause)})"
        return msg

    @property
    def is_configuration_error(self) -> bool:
        return self.error_code.value.startswith("CONFIG_")

    @property
    def is_input_error(self) -> bool:
        return self.error_code.value.startswith("VALIDATION_")

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for serialization."""
        return {
            "type": self.__class__.__name__,
            "message": self.message,
            "error_code": self.error_code.value,
            "error_name": self.error_code.name,
            "details": self.details,
        }


def configuration_error(
    message: str,
    config_key: Optional[str] = None,
    **kwargs
) -> QueryBuilderError:
    """Create a configuration error.

    Args:
        message: Error message
        config_key: Configuration key that caused the error
        **kwargs: Additional error details

    Returns:
        QueryBuilderError with CONFIG_ERROR code
    """
    details = kwargs.pop("details", None) or {}
    if config_key:
        details["config_key"] = config_key

    return QueryBuilderError(
        message=message,
        error_code=kwargs.pop("error_code", ErrorCode.CONFIG_ERROR),
        details=details,
        **kwargs,
    )


def validation_error(
    message: str,
    field: Optional[str] = None,
    value: Any = None,
    **kwargs
) -> QueryBuilderError:
    """Create a validation (input) error.

    Args:
        message: Error message
        field: Field that failed validation
        value: Invalid value
        **kwargs: Additional error details

    Returns:
        QueryBuilderError with VALIDATION_ERROR code unless overridden
    """
    details = kwargs.pop("details", None) or {}
    if field:
        details["field"] = field
    if value is not None:
        details["value"] = str(value)

    return QueryBuilderError(
        message=message,
        error_code=kwargs.pop("error_code", ErrorCode.VALIDATION_ERROR),
        details=details,
        **kwargs,
    )


def unknown_entity_error(entity_type: str, available: Iterable[str]) -> QueryBuilderError:
    """Create the error raised for an entity token missing from the registry."""
    available = sorted(available)
    return configuration_error(
        f"Unknown entity type: {entity_type}. Available: {', '.join(available)}",
        config_key="entity_type",
        error_code=ErrorCode.UNKNOWN_ENTITY,
        details={"entity_type": entity_type, "available": available},
    )


def unknown_lookup_error(lookup_type: str, available: Iterable[str]) -> QueryBuilderError:
    """Create the error raised for a ``lookup:<name>`` token with an unknown name."""
    available = sorted(available)
    return configuration_error(
        f"Unknown lookup type: {lookup_type}. Available: {', '.join(available)}",
        config_key="lookup_type",
        error_code=ErrorCode.UNKNOWN_LOOKUP,
        details={"lookup_type": lookup_type, "available": available},
    )


def missing_parameter_error(parameter: str, operation: str) -> QueryBuilderError:
    """Create the error raised when a required request parameter is absent."""
    return validation_error(
        f"Missing required parameter '{parameter}' for {operation}",
        field=parameter,
        error_code=ErrorCode.MISSING_PARAMETER,
        details={"operation": operation},
    )
