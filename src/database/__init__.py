"""Database access modules for the Oracle MCP server."""

from .pool import ConnectionPool
from .connection import ConnectionBorrower
from .transaction import TransactionPolicy, transaction_scope
from .introspector import OracleSchemaIntrospector

__all__ = [
    "ConnectionPool",
    "ConnectionBorrower",
    "TransactionPolicy",
    "transaction_scope",
    "OracleSchemaIntrospector"
]
