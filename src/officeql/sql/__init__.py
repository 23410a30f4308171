"""SQL text utilities backed by SQLGlot."""

from officeql.sql.statements import DEFAULT_DIALECT, referenced_tables, split_statements

__all__ = ["DEFAULT_DIALECT", "split_statements", "referenced_tables"]
