"""Entry point for the Oracle MCP server.

Runs in either:
- STDIO mode: For use with MCP clients via stdio transport (default)
- HTTP mode: REST API and SSE MCP transport

Usage:
    # STDIO mode (default)
    oracle-mcp-server user/password@host:port/service_name

    # HTTP mode with custom host/port
    oracle-mcp-server user/password@host:port/service_name --http --host 0.0.0.0 --port 8000
"""

import argparse
import asyncio
import logging
import os
import sys
from typing import List, Optional, Tuple

from core.config import AppConfig, CONNECTION_STRING_FORMAT, DatabaseConfig
from core.exceptions import ConfigurationError, PoolInitError
from database.connection import ConnectionBorrower
from database.introspector import OracleSchemaIntrospector
from database.pool import ConnectionPool
from tools.base import ToolContext
from tools.registry import ToolRegistry

logger = logging.getLogger(__name__)


def configure_logging():
    """Log to stderr; stdout carries the stdio transport."""
    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO").upper(),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        stream=sys.stderr
    )


def build_components(pool: ConnectionPool, app_config: AppConfig) -> Tuple[ToolRegistry, OracleSchemaIntrospector]:
    """Wire the dispatcher and introspector around an opened pool."""
    borrower = ConnectionBorrower(pool)
    introspector = OracleSchemaIntrospector(borrower, app_config.database.resource_base_url)
    context = ToolContext(app_config, introspector)
    registry = ToolRegistry(borrower, context)
    return registry, introspector


async def open_pool(app_config: AppConfig) -> ConnectionPool:
    """Create the process's single pool; an unreachable database is fatal."""
    try:
        return await ConnectionPool.create_and_initialize(app_config.database, app_config.pool_config)
    except PoolInitError as e:
        logger.error(e.message)
        sys.exit(1)


async def run_stdio_mode(app_config: AppConfig):
    """Run MCP server in STDIO mode."""
    from protocol.stdio_server import StdioMCPServer

    pool = await open_pool(app_config)
    registry, introspector = build_components(pool, app_config)
    try:
        await StdioMCPServer(registry, introspector, app_config).run()
    except Exception as e:
        logger.error(f"Server error: {e}", exc_info=True)
        sys.exit(1)
    finally:
        await pool.close()


async def run_http_mode(app_config: AppConfig, host: str, port: int):
    """Run MCP server in HTTP mode with REST API and SSE support."""
    from http_server import create_http_app, serve_http

    logger.info(f"Starting Oracle MCP Server in HTTP mode on {host}:{port}")
    pool = await open_pool(app_config)
    registry, introspector = build_components(pool, app_config)
    app = create_http_app(pool, registry, introspector, app_config)

    try:
        await serve_http(app, host, port)
    except Exception as e:
        logger.error(f"HTTP server error: {e}", exc_info=True)
        sys.exit(1)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Oracle MCP Server")
    parser.add_argument(
        "connection_string",
        nargs="?",
        help=f"Database connection string: {CONNECTION_STRING_FORMAT}"
    )
    parser.add_argument(
        "--http",
        action="store_true",
        help="Run in HTTP mode (default: STDIO mode)"
    )
    parser.add_argument(
        "--host",
        type=str,
        default=None,
        help="Host address for HTTP mode (default: from HTTP_HOST env or 127.0.0.1)"
    )
    parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Port for HTTP mode (default: from HTTP_PORT env or 8000)"
    )
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None):
    """Main entry point with argument parsing."""
    args = parse_args(argv)
    configure_logging()

    try:
        database = DatabaseConfig.from_connection_string(args.connection_string)
        app_config = AppConfig.from_env(database)
    except ConfigurationError as e:
        print(e.message, file=sys.stderr)
        if "format" in e.details:
            print(f"Format: {e.details['format']}", file=sys.stderr)
        sys.exit(1)

    if args.http:
        host = args.host or os.getenv("HTTP_HOST", "127.0.0.1")
        port = args.port or int(os.getenv("HTTP_PORT", "8000"))
        asyncio.run(run_http_mode(app_config, host, port))
    else:
        asyncio.run(run_stdio_mode(app_config))


if __name__ == "__main__":
    main()
