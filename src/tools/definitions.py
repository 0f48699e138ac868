"""MCP tool definitions for the Oracle MCP server."""

from typing import Iterable, List
from mcp.types import Tool

# Tool names (the operation catalog)
TOOL_QUERY = "query"
TOOL_EXECUTE = "execute"
TOOL_CHECK_USER_EXISTS = "check_user_exists"
TOOL_CREATE_USER = "create_user"
TOOL_GRANT_PRIVILEGES = "grant_privileges"
TOOL_GET_TABLE_DATA = "get_table_data"

ALL_TOOL_NAMES = (
    TOOL_QUERY,
    TOOL_EXECUTE,
    TOOL_CHECK_USER_EXISTS,
    TOOL_CREATE_USER,
    TOOL_GRANT_PRIVILEGES,
    TOOL_GET_TABLE_DATA,
)


def make_tool(handler) -> Tool:
    """Build the MCP Tool declaration of a handler."""
    return Tool(
        name=handler.name,
        description=handler.description,
        inputSchema=handler.input_schema()
    )


def get_all_tools(handlers: Iterable) -> List[Tool]:
    """Generate MCP tool definitions in catalog order.

    Args:
        handlers: Registered ToolHandler instances

    Returns:
        List of Tool objects
    """
    by_name = {handler.name: handler for handler in handlers}
    return [make_tool(by_name[name]) for name in ALL_TOOL_NAMES if name in by_name]
