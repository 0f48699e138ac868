"""Tool registry: routes MCP tool calls to their handlers."""

import logging
from typing import Any, Dict, List, Optional

from mcp.types import Tool

from core.error_handling import format_error_response
from core.exceptions import ArgumentValidationError, UnknownOperationError
from database.connection import ConnectionBorrower
from database.transaction import transaction_scope
from tools.base import ToolContext, ToolHandler
from tools.definitions import get_all_tools
from tools.handlers import (
    QueryHandler,
    ExecuteHandler,
    CheckUserExistsHandler,
    CreateUserHandler,
    GrantPrivilegesHandler,
    TableDataHandler,
)
from tools.validators import ArgumentValidator

logger = logging.getLogger(__name__)


class ToolRegistry:
    """
    Central registry and dispatcher for MCP tool handlers.

    For a call it validates the arguments, borrows one connection, applies
    the handler's transaction policy, runs the handler and normalizes the
    outcome. Only an unknown tool name escapes as an exception; everything
    else comes back as an envelope.
    """

    def __init__(self, borrower: ConnectionBorrower, context: ToolContext):
        self.borrower = borrower
        self.context = context
        self.handlers: Dict[str, ToolHandler] = {}
        self._register_handlers()

    def _register_handlers(self):
        """Register all tool handlers."""
        handler_classes = [
            QueryHandler,
            ExecuteHandler,
            CheckUserExistsHandler,
            CreateUserHandler,
            GrantPrivilegesHandler,
            TableDataHandler,
        ]

        for handler_class in handler_classes:
            handler = handler_class()
            self.handlers[handler.name] = handler
            logger.debug(f"Registered {handler.name} -> {handler_class.__name__}")

        logger.info(f"Registered {len(self.handlers)} MCP tools")

    def list_tools(self) -> List[Tool]:
        """Tool catalog exposed to callers."""
        return get_all_tools(self.handlers.values())

    def is_tool_registered(self, tool_name: str) -> bool:
        """Check if a tool has a registered handler."""
        return tool_name in self.handlers

    async def dispatch(self, name: str, arguments: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Run a tool call.

        Args:
            name: Tool name
            arguments: Raw tool arguments

        Returns:
            Envelope with ``content`` and ``isError``

        Raises:
            UnknownOperationError: If no handler is registered for ``name``
        """
        handler = self.handlers.get(name)
        if handler is None:
            raise UnknownOperationError(f"Unknown tool: {name}", {"tool": name})

        # Argument problems are rejected before any connection is borrowed
        try:
            max_length = self.context.app_config.query_config.max_query_length
            cleaned = ArgumentValidator.validate(handler.arguments, arguments or {}, max_length)
            cleaned = handler.prepare(cleaned, self.context)
        except ArgumentValidationError as e:
            return format_error_response(e, handler.suggestion)

        logger.debug(f"Routing {name} to {handler.__class__.__name__} ({handler.policy.value})")
        try:
            async with self.borrower.borrow() as connection:
                async with transaction_scope(connection, handler.policy):
                    return await handler.execute(connection, cleaned, self.context)
        except Exception as e:
            return format_error_response(e, handler.suggestion)
