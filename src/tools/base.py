"""Base classes for MCP tool handlers."""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel

from core.config import AppConfig
from core.error_handling import format_failure_response, format_success_response
from database.introspector import OracleSchemaIntrospector
from database.transaction import TransactionPolicy


class ArgumentSpec(BaseModel):
    """Declaration of one tool argument."""

    name: str
    type: Literal["string", "number", "array"]
    required: bool = False
    default: Any = None
    description: Optional[str] = None
    format: Optional[Literal["identifier", "password", "sql"]] = None

    def to_schema(self) -> Dict[str, Any]:
        """JSON-schema property for this argument."""
        schema: Dict[str, Any] = {"type": self.type}
        if self.type == "array":
            schema["items"] = {"type": "string"}
        if self.description:
            schema["description"] = self.description
        if self.default is not None:
            schema["default"] = self.default
        return schema


class ToolContext:
    """Process-wide collaborators handed to every handler."""

    def __init__(self, app_config: AppConfig, introspector: OracleSchemaIntrospector):
        self.app_config = app_config
        self.introspector = introspector

    @property
    def connected_user(self) -> str:
        return self.app_config.database.user.upper()


class ToolHandler(ABC):
    """
    Abstract base class for MCP tool handlers.

    A handler is a descriptor: its arguments, the transaction policy its
    connection runs under, and the remediation hint attached to its errors.
    The dispatcher owns validation, borrowing and normalization; ``execute``
    only issues statements on the connection it is given.
    """

    name: str = ""
    description: str = ""
    policy: TransactionPolicy = TransactionPolicy.AUTOCOMMIT
    suggestion: str = ""
    arguments: List[ArgumentSpec] = []

    @abstractmethod
    async def execute(self, connection: Any, arguments: Dict[str, Any], context: ToolContext) -> Dict[str, Any]:
        """
        Run the operation.

        Args:
            connection: Borrowed connection, already configured for ``policy``
            arguments: Validated arguments with defaults applied
            context: Shared collaborators

        Returns:
            Envelope
        """
        pass

    def prepare(self, arguments: Dict[str, Any], context: ToolContext) -> Dict[str, Any]:
        """Tool-specific argument checks. Runs before a connection is borrowed."""
        return arguments

    def input_schema(self) -> Dict[str, Any]:
        """JSON-schema input declaration exposed in the tool catalog."""
        return {
            "type": "object",
            "properties": {spec.name: spec.to_schema() for spec in self.arguments},
            "required": [spec.name for spec in self.arguments if spec.required]
        }

    def _success_response(self, payload: Any) -> Dict[str, Any]:
        """Create standardized success response."""
        return format_success_response(payload)

    def _error_response(self, message: str, error_type: str, suggestion: Optional[str] = None) -> Dict[str, Any]:
        """Create standardized error response for a failed precondition."""
        return format_failure_response(message, suggestion, error_type)
