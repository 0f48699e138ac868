"""SQL statement handlers: read-only queries and autocommitted statements."""

import logging
from typing import Any, Dict

from core.error_handling import format_non_query_result
from database.statements import execute_statement, fetch_rows
from database.transaction import TransactionPolicy
from tools.base import ArgumentSpec, ToolContext, ToolHandler
from tools.definitions import TOOL_EXECUTE, TOOL_QUERY

logger = logging.getLogger(__name__)


class QueryHandler(ToolHandler):
    """Handler for read-only SQL queries."""

    name = TOOL_QUERY
    description = "Run a read-only SQL query on Oracle database"
    policy = TransactionPolicy.READ_ONLY
    suggestion = "Check the SQL syntax and that the statement is read-only"
    arguments = [
        ArgumentSpec(name="sql", type="string", required=True, format="sql"),
    ]

    async def execute(self, connection: Any, arguments: Dict[str, Any], context: ToolContext) -> Dict[str, Any]:
        """
        Run the caller's SQL inside a read-only transaction.

        The row count is capped at max_query_rows whatever the SQL asks for.
        """
        max_rows = context.app_config.query_config.max_query_rows
        rows = await fetch_rows(connection, arguments["sql"], max_rows=max_rows)

        if len(rows) == max_rows:
            logger.info(f"Query result truncated at {max_rows} rows")

        return self._success_response(rows)


class ExecuteHandler(ToolHandler):
    """Handler for DDL/DML statements."""

    name = TOOL_EXECUTE
    description = "Execute DDL/DML statements (CREATE, INSERT, UPDATE, etc.) on Oracle database"
    policy = TransactionPolicy.AUTOCOMMIT
    suggestion = "Check the SQL syntax and permissions"
    arguments = [
        ArgumentSpec(name="sql", type="string", required=True, format="sql"),
    ]

    async def execute(self, connection: Any, arguments: Dict[str, Any], context: ToolContext) -> Dict[str, Any]:
        rows_affected = await execute_statement(connection, arguments["sql"])
        return self._success_response(format_non_query_result(rows_affected))
