"""Statement execution helpers on a borrowed async connection."""

import logging
import re
from typing import Any, Dict, List, Optional, Sequence, Union

logger = logging.getLogger(__name__)

Params = Union[Sequence[Any], Dict[str, Any], None]

# DDL reports no meaningful affected-row count
DDL_KEYWORDS = {
    'CREATE', 'ALTER', 'DROP', 'TRUNCATE', 'RENAME',
    'GRANT', 'REVOKE', 'COMMENT', 'AUDIT', 'NOAUDIT', 'PURGE', 'FLASHBACK'
}


# Whitespace, line comments and block comments ahead of the first keyword
_LEADING_NOISE = re.compile(r"(?:\s+|--[^\n]*|/\*.*?\*/)*", re.DOTALL)


def _first_keyword(sql: str) -> str:
    words = sql[_LEADING_NOISE.match(sql).end():].split(None, 1)
    return words[0].upper() if words else ""


async def fetch_rows(
    connection: Any,
    sql: str,
    params: Params = None,
    max_rows: Optional[int] = None
) -> List[Dict[str, Any]]:
    """
    Execute a row-returning statement and map rows to column-name dicts.

    Args:
        connection: Borrowed async connection
        sql: SQL text
        params: Bind values
        max_rows: Fetch at most this many rows

    Returns:
        List of row dicts (empty when the statement returns no rows)
    """
    logger.debug(f"Fetching rows: {sql[:200]}")
    with connection.cursor() as cursor:
        await cursor.execute(sql, params or [])
        if cursor.description is None:
            return []

        columns = [col[0] for col in cursor.description]
        if max_rows is not None:
            rows = await cursor.fetchmany(max_rows)
        else:
            rows = await cursor.fetchall()

        return [dict(zip(columns, row)) for row in rows]


async def fetch_value(connection: Any, sql: str, params: Params = None) -> Any:
    """Execute a statement and return the first column of its first row."""
    with connection.cursor() as cursor:
        await cursor.execute(sql, params or [])
        row = await cursor.fetchone()
        return row[0] if row else None


async def execute_statement(connection: Any, sql: str, params: Params = None) -> Optional[int]:
    """
    Execute a statement that does not return rows.

    Returns:
        Affected-row count for DML, None for DDL and row-returning statements
    """
    logger.debug(f"Executing statement: {sql[:200]}")
    with connection.cursor() as cursor:
        await cursor.execute(sql, params or [])
        if cursor.description is not None:
            return None
        if _first_keyword(sql) in DDL_KEYWORDS:
            return None
        rowcount = cursor.rowcount
        return rowcount if rowcount is not None and rowcount >= 0 else None
