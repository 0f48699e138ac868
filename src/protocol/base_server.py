"""Base MCP server - transport-agnostic MCP protocol callbacks.

Implements the four callbacks the server answers: list tools, call tool,
list resources and read resource. Transports (stdio, SSE) subclass it.
"""

import logging
from typing import Any, Dict, List

import mcp.types as types
from mcp.server import Server

from core.config import AppConfig
from core.error_handling import to_json
from database.introspector import OracleSchemaIntrospector, RESOURCE_MIME_TYPE, table_from_resource_uri
from tools.registry import ToolRegistry

logger = logging.getLogger(__name__)


def envelope_to_result(envelope: Dict[str, Any]) -> types.CallToolResult:
    """Convert a dispatcher envelope to an MCP CallToolResult."""
    return types.CallToolResult(
        content=[
            types.TextContent(type="text", text=block["text"])
            for block in envelope["content"]
        ],
        isError=envelope["isError"]
    )


class BaseMCPServer:
    """Base MCP server providing core protocol functionality.

    This class encapsulates the MCP protocol logic independent of
    the transport mechanism (STDIO, HTTP/SSE, etc.).
    """

    def __init__(
        self,
        registry: ToolRegistry,
        introspector: OracleSchemaIntrospector,
        app_config: AppConfig
    ):
        """Initialize base MCP server.

        Args:
            registry: Tool dispatcher
            introspector: Schema introspector backing the table resources
            app_config: Application configuration
        """
        self.registry = registry
        self.introspector = introspector
        self.app_config = app_config
        self.server = Server(app_config.server_name, version=app_config.server_version)
        self._setup_handlers()
        logger.info(f"Initialized {app_config.server_name} MCP server")

    def _setup_handlers(self):
        """Setup MCP protocol handlers."""

        @self.server.list_tools()
        async def list_tools() -> List[types.Tool]:
            """List all available tools."""
            return self.registry.list_tools()

        @self.server.list_resources()
        async def list_resources() -> List[types.Resource]:
            """List the accessible tables as schema resources."""
            resources = await self.introspector.list_table_resources()
            return [
                types.Resource(uri=resource["uri"], name=resource["name"], mimeType=resource["mimeType"])
                for resource in resources
            ]

        # Registered directly so the envelope's isError flag and the JSON
        # mime type reach the client unchanged
        self.server.request_handlers[types.CallToolRequest] = self.handle_call_tool
        self.server.request_handlers[types.ReadResourceRequest] = self.handle_read_resource

    async def handle_call_tool(self, request: types.CallToolRequest) -> types.ServerResult:
        """Handle tool execution. Unknown tool names raise and become protocol errors."""
        envelope = await self.registry.dispatch(request.params.name, request.params.arguments or {})
        return types.ServerResult(envelope_to_result(envelope))

    async def handle_read_resource(self, request: types.ReadResourceRequest) -> types.ServerResult:
        """Describe the table named by a resource URI."""
        uri = request.params.uri
        table_name = table_from_resource_uri(str(uri))
        table_info = await self.introspector.describe_table(table_name)

        return types.ServerResult(
            types.ReadResourceResult(
                contents=[
                    types.TextResourceContents(
                        uri=uri,
                        mimeType=RESOURCE_MIME_TYPE,
                        text=to_json(table_info)
                    )
                ]
            )
        )
