"""Base model for officeql value objects."""

from typing import Any, Dict

from pydantic import BaseModel, ConfigDict


class OfficeQLBaseModel(BaseModel):
    """Base for request and result models.

    Assignments are validated so a ``BuiltQuery`` or ``QueryRequest`` cannot
    be mutated into an invalid state after construction.
    """
    model_config = ConfigDict(validate_assignment=True)

    def to_dict(self) -> Dict[str, Any]:
        """JSON-compatible dictionary without ``None`` fields.

        Enums become their values and dates ISO strings, so the result can be
        placed straight into a response envelope or a log record.
        """
        return self.model_dump(mode="json", exclude_none=True)
