"""Tool handlers package."""

from tools.handlers.query_handler import QueryHandler, ExecuteHandler
from tools.handlers.user_handler import CheckUserExistsHandler, CreateUserHandler
from tools.handlers.privilege_handler import GrantPrivilegesHandler, GrantResult
from tools.handlers.table_handler import TableDataHandler

__all__ = [
    'QueryHandler',
    'ExecuteHandler',
    'CheckUserExistsHandler',
    'CreateUserHandler',
    'GrantPrivilegesHandler',
    'GrantResult',
    'TableDataHandler',
]
