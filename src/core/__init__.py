"""Core modules for the Oracle MCP server."""

from .exceptions import (
    MCPDBError,
    ConfigurationError,
    PoolInitError,
    AcquireTimeoutError,
    PoolClosedError,
    UnknownOperationError,
    ArgumentValidationError,
    ResourceNotFoundError
)

__all__ = [
    "MCPDBError",
    "ConfigurationError",
    "PoolInitError",
    "AcquireTimeoutError",
    "PoolClosedError",
    "UnknownOperationError",
    "ArgumentValidationError",
    "ResourceNotFoundError"
]
