"""HTTP server for the Oracle MCP server.

Provides the REST mirror of the tool catalog and the MCP SSE transport.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
import uvicorn

from api.middleware import setup_middleware
from api.routes import router as api_router
from core.config import AppConfig
from database.introspector import OracleSchemaIntrospector
from database.pool import ConnectionPool
from protocol.sse_server import SseMCPServer
from tools.registry import ToolRegistry

logger = logging.getLogger(__name__)


def create_http_app(
    pool: ConnectionPool,
    registry: ToolRegistry,
    introspector: OracleSchemaIntrospector,
    app_config: AppConfig
) -> FastAPI:
    """Create the FastAPI application.

    Args:
        pool: Opened connection pool (closed when the app shuts down)
        registry: Tool dispatcher
        introspector: Schema introspector for MCP resources
        app_config: Application configuration

    Returns:
        FastAPI app with REST routes under /api/v1 and MCP SSE under /sse/
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        logger.info("Shutting down Oracle MCP Server...")
        try:
            await pool.close()
        except Exception as e:
            logger.warning(f"Error closing connection pool: {e}")

    app = FastAPI(
        title="Oracle MCP API",
        version=app_config.server_version,
        description="Model Context Protocol (MCP) server for Oracle - tools, resources & REST API",
        lifespan=lifespan
    )
    app.state.pool = pool
    app.state.registry = registry
    app.state.app_config = app_config

    setup_middleware(app, app_config.http_config)

    app.include_router(api_router)
    logger.info("REST API routes registered")

    mcp_sse_server = SseMCPServer(registry, introspector, app_config, messages_path="/messages")
    app.mount("/sse", mcp_sse_server.create_asgi_app())
    logger.info("MCP SSE server mounted at /sse/")

    @app.get("/")
    async def root():
        return {
            "name": app_config.server_name,
            "version": app_config.server_version,
            "modes": ["REST API", "MCP SSE"],
            "endpoints": {
                "api": "/api/v1",
                "health": "/api/v1/health",
                "tools": "/api/v1/tools",
                "mcp_sse": "/sse/",
                "docs": "/docs"
            }
        }

    return app


async def serve_http(app: FastAPI, host: str, port: int):
    """Serve the app with uvicorn until interrupted."""
    config = uvicorn.Config(app, host=host, port=port, log_level="info")
    server = uvicorn.Server(config)
    await server.serve()
