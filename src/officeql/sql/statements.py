"""Statement-level utilities over generated SQL text using SQLGlot.

Generated INSERT/UPDATE/DELETE text is a script of several statements
separated by semicolons. Executors that accept one statement per call use
``split_statements`` to run them in order.

Example:
    >>> split_statements("UPDATE t SET a = 'x;y' WHERE id = 1;\\n\\nSELECT 1 AS success")
    ["UPDATE t SET a = 'x;y' WHERE id = 1", 'SELECT 1 AS success']
"""

from typing import List, Set

import sqlglot
from sqlglot import exp
from sqlglot.tokens import TokenType

from officeql.logging import get_logger

logger = get_logger(__name__)

DEFAULT_DIALECT = "mysql"


def split_statements(sql: str, dialect: str = DEFAULT_DIALECT) -> List[str]:
    """Split a multi-statement script on top-level semicolons.

    The SQLGlot tokenizer is used so semicolons inside string literals do not
    split a statement.

    Args:
        sql: Script text
        dialect: SQLGlot dialect used for tokenizing

    Returns:
        Statements in order, stripped, without the trailing semicolon
    """
    if not sql or not sql.strip():
        return []

    statements: List[str] = []
    start = 0
    for token in sqlglot.tokenize(sql, read=dialect):
        if token.token_type != TokenType.SEMICOLON:
            continue
        statement = sql[start:token.start].strip()
        if statement:
            statements.append(statement)
        start = token.end + 1

    tail = sql[start:].strip()
    if tail:
        statements.append(tail)

    logger.debug("Split SQL script", extra={"statement_count": len(statements)})
    return statements


def referenced_tables(statement: str, dialect: str = DEFAULT_DIALECT) -> Set[str]:
    """Return the names of all tables a single statement reads or writes.

    Raises:
        ValueError: If the statement is empty
        sqlglot.errors.ParseError: If the statement does not parse
    """
    if not statement or not statement.strip():
        raise ValueError("SQL statement must be a non-empty string.")

    parsed = sqlglot.parse_one(statement, dialect=dialect)
    return {table.name for table in parsed.find_all(exp.Table) if table.name}
