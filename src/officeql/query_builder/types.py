"""Result types returned by the query builders."""

from typing import Any, Dict, List, Optional

from pydantic import Field

from officeql.sql import DEFAULT_DIALECT, split_statements
from officeql.types import OfficeQLBaseModel


class BuiltQuery(OfficeQLBaseModel):
    """Generated SQL text plus the values that shaped it.

    Attributes:
        query: Statement text, possibly several statements separated by ``;``
        count_query: ``SELECT COUNT(*) AS total`` companion of a list query
        params: Filter, pagination and body values used to build the text
        debug: Optional envelope describing translation joins and language
            resolution, attached by the dispatcher when debugging is enabled
        dialect: sqlglot dialect the text was generated for; builders stamp
            their settings' dialect
    """
    query: str
    count_query: Optional[str] = None
    params: Dict[str, Any] = Field(default_factory=dict)
    debug: Optional[Dict[str, Any]] = None
    dialect: str = DEFAULT_DIALECT

    @property
    def statements(self) -> List[str]:
        """The query text split into individual statements."""
        return split_statements(self.query, dialect=self.dialect)
