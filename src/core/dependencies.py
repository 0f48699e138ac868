"""FastAPI dependency accessors.

The composition root in main.py builds the pool, registry and configuration
once and stores them on ``app.state``; routes receive them through these
dependencies instead of reaching for module-level singletons.
"""

from typing import TYPE_CHECKING

from fastapi import Request

if TYPE_CHECKING:
    from core.config import AppConfig
    from database.pool import ConnectionPool
    from tools.registry import ToolRegistry


def get_app_config(request: Request) -> "AppConfig":
    """FastAPI dependency for the application configuration."""
    return request.app.state.app_config


def get_connection_pool(request: Request) -> "ConnectionPool":
    """FastAPI dependency for the connection pool."""
    return request.app.state.pool


def get_tool_registry(request: Request) -> "ToolRegistry":
    """FastAPI dependency for the tool registry.

    Usage:
        @router.post("/tools/{tool_name}")
        async def endpoint(registry: ToolRegistry = Depends(get_tool_registry)):
            ...
    """
    return request.app.state.registry
