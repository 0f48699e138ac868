"""FastAPI routes mirroring the MCP tool catalog."""

import logging
from datetime import datetime
from typing import Any, Dict, List

from fastapi import APIRouter, Body, Depends, HTTPException, Request
from pydantic import BaseModel

from api.middleware import limiter, TOOL_RATE_LIMIT
from core.config import AppConfig
from core.dependencies import get_app_config, get_connection_pool, get_tool_registry
from database.pool import ConnectionPool
from tools.registry import ToolRegistry

logger = logging.getLogger(__name__)


class HealthResponse(BaseModel):
    status: str
    timestamp: str
    version: str
    pool: Dict[str, Any]


class ToolInfo(BaseModel):
    name: str
    description: str
    parameters: Dict[str, Any]


router = APIRouter(prefix="/api/v1")


@router.get("/health", response_model=HealthResponse)
async def health_check(
    pool: ConnectionPool = Depends(get_connection_pool),
    app_config: AppConfig = Depends(get_app_config)
):
    """Health check endpoint."""
    return HealthResponse(
        status="ok",
        timestamp=datetime.now().isoformat(),
        version=app_config.server_version,
        pool=pool.stats()
    )


@router.get("/tools", response_model=List[ToolInfo])
async def list_tools(registry: ToolRegistry = Depends(get_tool_registry)):
    """List all available MCP tools."""
    return [
        ToolInfo(
            name=tool.name,
            description=tool.description or "",
            parameters=tool.inputSchema
        )
        for tool in registry.list_tools()
    ]


@router.post("/tools/{tool_name}")
@limiter.limit(TOOL_RATE_LIMIT)
async def call_tool(
    request: Request,
    tool_name: str,
    arguments: Dict[str, Any] = Body(default={}),
    registry: ToolRegistry = Depends(get_tool_registry)
):
    """Invoke a tool; the response is the same envelope MCP clients receive."""
    if not registry.is_tool_registered(tool_name):
        raise HTTPException(status_code=404, detail=f"Unknown tool: {tool_name}")

    return await registry.dispatch(tool_name, arguments)
