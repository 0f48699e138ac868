"""STDIO transport MCP server."""

import logging

from mcp.server.stdio import stdio_server

from protocol.base_server import BaseMCPServer

logger = logging.getLogger(__name__)


class StdioMCPServer(BaseMCPServer):
    """MCP server using STDIO transport."""

    async def run(self):
        """Run the STDIO MCP server until the client disconnects."""
        logger.info("Oracle MCP Server starting...")
        async with stdio_server() as (read_stream, write_stream):
            logger.info("Connected to transport, waiting for requests...")
            await self.server.run(
                read_stream,
                write_stream,
                self.server.create_initialization_options()
            )
