"""MCP tools package for the Oracle MCP server."""

from tools.base import ArgumentSpec, ToolContext, ToolHandler
from tools.registry import ToolRegistry
from tools.definitions import ALL_TOOL_NAMES, get_all_tools, make_tool
from tools.validators import ArgumentValidator, IdentifierValidator, SQLValidator

__all__ = [
    'ArgumentSpec',
    'ToolContext',
    'ToolHandler',
    'ToolRegistry',
    'ALL_TOOL_NAMES',
    'get_all_tools',
    'make_tool',
    'ArgumentValidator',
    'IdentifierValidator',
    'SQLValidator',
]
