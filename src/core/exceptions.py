"""Custom exceptions for the Oracle MCP server."""


class MCPDBError(Exception):
    """Base exception for all Oracle MCP server errors."""

    def __init__(self, message: str, details: dict = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict:
        """Convert exception to dictionary for API responses."""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "details": self.details
        }


class ConfigurationError(MCPDBError):
    """Exception raised when configuration is invalid."""
    pass


class PoolInitError(MCPDBError):
    """Exception raised when the connection pool cannot be created."""
    pass


class AcquireTimeoutError(MCPDBError):
    """Exception raised when no pooled connection became available in time."""
    pass


class PoolClosedError(MCPDBError):
    """Exception raised when a connection is requested from a closed pool."""
    pass


class UnknownOperationError(MCPDBError):
    """Exception raised when a tool name is not in the catalog."""
    pass


class ArgumentValidationError(MCPDBError):
    """Exception raised when tool arguments are missing, ill-typed or unsafe."""
    pass


class ResourceNotFoundError(MCPDBError):
    """Exception raised when a resource URI does not resolve to a table."""
    pass
