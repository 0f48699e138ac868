"""Table sample data handler."""

import logging
from typing import Any, Dict

from core.exceptions import ArgumentValidationError
from database.statements import fetch_rows
from database.transaction import TransactionPolicy
from tools.base import ArgumentSpec, ToolContext, ToolHandler
from tools.definitions import TOOL_GET_TABLE_DATA

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 10


class TableDataHandler(ToolHandler):
    """Handler for fetching sample rows from a table."""

    name = TOOL_GET_TABLE_DATA
    description = "Get sample data from a table"
    policy = TransactionPolicy.READ_ONLY
    suggestion = "Check the table name and access rights"
    arguments = [
        ArgumentSpec(name="tableName", type="string", required=True, format="identifier"),
        ArgumentSpec(name="limit", type="number", default=DEFAULT_LIMIT),
    ]

    def prepare(self, arguments: Dict[str, Any], context: ToolContext) -> Dict[str, Any]:
        """Require a positive whole limit and bound it by max_table_rows."""
        limit = arguments["limit"]
        if (isinstance(limit, float) and not limit.is_integer()) or limit < 1:
            raise ArgumentValidationError(
                f"Invalid argument 'limit': must be a positive integer, got {limit}",
                {"argument": "limit"}
            )

        max_rows = context.app_config.query_config.max_table_rows
        if limit > max_rows:
            logger.info(f"Capping get_table_data limit {limit} to {max_rows}")

        return {**arguments, "limit": min(int(limit), max_rows)}

    async def execute(self, connection: Any, arguments: Dict[str, Any], context: ToolContext) -> Dict[str, Any]:
        table_name = arguments["tableName"].upper()
        limit = arguments["limit"]

        owner = await context.introspector.resolve_owner(connection, table_name)
        if not owner:
            return self._error_response(
                f"Table {table_name} does not exist or you don't have access to it",
                "NotFound",
                self.suggestion
            )

        # Qualify with the owner unless the table belongs to the connected user
        if owner == context.connected_user:
            full_table_name = table_name
        else:
            full_table_name = f'"{owner}".{table_name}'

        rows = await fetch_rows(
            connection,
            f"SELECT * FROM {full_table_name} WHERE ROWNUM <= :limit",
            {"limit": limit},
            max_rows=limit
        )

        return self._success_response({
            "tableName": table_name,
            "owner": owner,
            "rowCount": len(rows),
            "data": rows
        })
